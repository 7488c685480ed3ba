"""Execution history (In/Out) for a session.

Every well-formed segment gets an execution index from the session loop.
The store records the segment's source under that index, then the
post-processed result once evaluation finishes. The store never allocates
indices itself; it only insists that they keep increasing.

Optionally each record is also appended to a JSONL file, one entry per
line, for debugging and auditing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class HistoryError(Exception):
    """Error during history operations."""

    pass


@dataclass
class HistoryEntry:
    """One execution: its source and, once known, its output."""

    index: int
    input: str
    output: Any = None
    completed: bool = False


class _HistoryView(Mapping[int, Any]):
    """Read-only index -> input/output mapping published to user code."""

    def __init__(self, entries: dict[int, HistoryEntry], attr: str) -> None:
        self._entries = entries
        self._attr = attr

    def _visible(self, entry: HistoryEntry) -> bool:
        return self._attr == "input" or entry.completed

    def __getitem__(self, index: int) -> Any:
        entry = self._entries.get(index)
        if entry is None or not self._visible(entry):
            raise KeyError(index)
        return getattr(entry, self._attr)

    def __iter__(self) -> Iterator[int]:
        return (i for i, e in self._entries.items() if self._visible(e))

    def __len__(self) -> int:
        return sum(1 for e in self._entries.values() if self._visible(e))

    def __repr__(self) -> str:
        return repr(dict(self))


@dataclass
class HistoryStore:
    """Append-only In/Out history keyed by execution index.

    Persistence policy: FAIL-SOFT
    - File errors after creation are logged as warnings
    - The in-memory history is always kept

    Example:
        >>> history = HistoryStore()
        >>> history.record_input(1, "1 + 1")
        >>> history.record_output(1, 2)
        >>> history.outputs[1]
        2
    """

    file_path: Path | None = None
    _entries: dict[int, HistoryEntry] = field(default_factory=dict, repr=False)
    _last_index: int = field(default=0, repr=False)
    _file: Any = field(default=None, repr=False)

    @classmethod
    def create(cls, file_path: str | Path | None = None) -> HistoryStore:
        """Create a history store, optionally persisted to file_path.

        Raises:
            HistoryError: If the history file cannot be opened.
        """
        if file_path is None:
            return cls()

        path = Path(file_path).expanduser()
        store = cls(file_path=path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            # Continue numbering after the indices already in the file
            if path.exists():
                store._last_index = store._recover_last_index()

            store._file = open(path, "a", encoding="utf-8")
        except OSError as e:
            raise HistoryError(f"Failed to open history file {path}: {e}") from e
        return store

    def _recover_last_index(self) -> int:
        """Recover the highest index from an existing history file.

        Returns:
            Last index found, or 0 if the file is empty or unreadable.
        """
        last_index = 0
        try:
            with open(self.file_path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entry = json.loads(line)
                    except json.JSONDecodeError:
                        continue  # Skip malformed lines
                    index = entry.get("index") if isinstance(entry, dict) else None
                    if isinstance(index, int):
                        last_index = max(last_index, index)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"History recovery failed for {self.file_path}: {e}")
        return last_index

    @property
    def last_index(self) -> int:
        """Highest index recorded so far (0 when empty)."""
        return self._last_index

    @property
    def inputs(self) -> Mapping[int, str]:
        return _HistoryView(self._entries, "input")

    @property
    def outputs(self) -> Mapping[int, Any]:
        return _HistoryView(self._entries, "output")

    def __len__(self) -> int:
        return len(self._entries)

    def record_input(self, index: int, text: str) -> None:
        """Record the source of execution index.

        Raises:
            HistoryError: If index does not exceed every earlier index.
        """
        if index <= self._last_index:
            raise HistoryError(
                f"History index {index} is not greater than last index {self._last_index}"
            )
        self._entries[index] = HistoryEntry(index=index, input=text)
        self._last_index = index
        self._write_entry({"index": index, "op": "input", "input": text})

    def record_output(self, index: int, value: Any) -> None:
        """Record the result of execution index.

        Raises:
            HistoryError: If index has no input or already has an output.
        """
        entry = self._entries.get(index)
        if entry is None:
            raise HistoryError(f"No input recorded for history index {index}")
        if entry.completed:
            raise HistoryError(f"Output for history index {index} already recorded")
        entry.output = value
        entry.completed = True
        self._write_entry({"index": index, "op": "output", "output": repr(value)})

    def input(self, index: int) -> str:
        return self.inputs[index]

    def output(self, index: int) -> Any:
        return self.outputs[index]

    def entries(self) -> list[HistoryEntry]:
        """All entries in index order."""
        return [self._entries[i] for i in sorted(self._entries)]

    def _write_entry(self, entry: dict[str, Any]) -> bool:
        if self._file is None:
            return False

        entry["ts"] = datetime.now(timezone.utc).isoformat()
        try:
            self._file.write(json.dumps(entry, default=str) + "\n")
            self._file.flush()
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"History write failed for {self.file_path}: {e}")
            return False

    def close(self) -> None:
        """Close the history file, if any. In-memory history stays readable."""
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                pass
            self._file = None
