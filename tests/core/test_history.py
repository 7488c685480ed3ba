"""Tests for the In/Out history store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cellrun.core.history import HistoryEntry, HistoryError, HistoryStore


class TestHistoryStore:
    """Tests for in-memory history."""

    def test_record_input_and_output(self):
        """Input and output are stored under the caller's index."""
        history = HistoryStore()
        history.record_input(1, "1 + 1")
        history.record_output(1, 2)

        assert history.input(1) == "1 + 1"
        assert history.output(1) == 2
        assert history.last_index == 1
        assert len(history) == 1

    def test_indices_need_not_be_contiguous(self):
        """Any strictly increasing indices are accepted."""
        history = HistoryStore()
        history.record_input(3, "a")
        history.record_input(7, "b")
        assert list(history.inputs) == [3, 7]

    def test_non_increasing_index_rejected(self):
        """Reusing or going back on an index is an error."""
        history = HistoryStore()
        history.record_input(2, "a")

        with pytest.raises(HistoryError):
            history.record_input(2, "again")
        with pytest.raises(HistoryError):
            history.record_input(1, "earlier")

    def test_zero_index_rejected(self):
        """Indices start above zero."""
        with pytest.raises(HistoryError):
            HistoryStore().record_input(0, "x")

    def test_output_without_input_rejected(self):
        """An output needs its input first."""
        with pytest.raises(HistoryError):
            HistoryStore().record_output(1, "value")

    def test_output_recorded_once(self):
        """The output slot is filled exactly once."""
        history = HistoryStore()
        history.record_input(1, "x")
        history.record_output(1, None)
        with pytest.raises(HistoryError):
            history.record_output(1, "again")

    def test_outputs_hide_pending_entries(self):
        """Out only shows entries whose output was recorded."""
        history = HistoryStore()
        history.record_input(1, "a")
        history.record_input(2, "b")
        history.record_output(1, None)

        assert dict(history.outputs) == {1: None}
        assert 2 not in history.outputs
        with pytest.raises(KeyError):
            history.output(2)

    def test_views_are_read_only_and_live(self):
        """In/Out views follow the store and cannot be assigned to."""
        history = HistoryStore()
        inputs = history.inputs
        history.record_input(1, "x")

        assert inputs[1] == "x"
        assert len(inputs) == 1
        with pytest.raises(TypeError):
            inputs[2] = "y"  # type: ignore[index]

    def test_entries_in_index_order(self):
        """entries() lists HistoryEntry objects by index."""
        history = HistoryStore()
        history.record_input(1, "a")
        history.record_output(1, "A")
        history.record_input(2, "b")

        assert history.entries() == [
            HistoryEntry(index=1, input="a", output="A", completed=True),
            HistoryEntry(index=2, input="b"),
        ]


class TestHistoryPersistence:
    """Tests for JSONL persistence."""

    def test_create_without_file(self):
        """No path means memory only."""
        history = HistoryStore.create()
        assert history.file_path is None

    def test_records_written_as_json_lines(self, tmp_path: Path):
        """Each input and output becomes one JSON line."""
        path = tmp_path / "hist" / "history.jsonl"
        history = HistoryStore.create(path)
        history.record_input(1, "[1, 2]")
        history.record_output(1, [1, 2])
        history.close()

        lines = path.read_text().splitlines()
        first, second = (json.loads(line) for line in lines)
        assert first["index"] == 1
        assert first["op"] == "input"
        assert first["input"] == "[1, 2]"
        assert "ts" in first
        assert second["op"] == "output"
        assert second["output"] == "[1, 2]"

    def test_appends_to_existing_file(self, tmp_path: Path):
        """Reopening a history file appends to it."""
        path = tmp_path / "history.jsonl"
        path.write_text('{"index": 1, "op": "input", "input": "old"}\n')

        history = HistoryStore.create(path)
        history.record_input(2, "new")
        history.close()

        assert len(path.read_text().splitlines()) == 2

    def test_reopen_continues_numbering(self, tmp_path: Path):
        """A second store on the same file starts after the last index."""
        path = tmp_path / "history.jsonl"
        first = HistoryStore.create(path)
        first.record_input(1, "1")
        first.record_output(1, 1)
        first.record_input(2, "2")
        first.close()

        second = HistoryStore.create(path)
        assert second.last_index == 2
        with pytest.raises(HistoryError):
            second.record_input(2, "again")
        second.record_input(3, "3")
        second.close()

        indices = [
            json.loads(line)["index"]
            for line in path.read_text().splitlines()
            if json.loads(line)["op"] == "input"
        ]
        assert indices == [1, 2, 3]

    def test_reopen_skips_corrupt_lines(self, tmp_path: Path):
        """Malformed lines are ignored when recovering the last index."""
        path = tmp_path / "history.jsonl"
        path.write_text(
            '{"index": 4, "op": "input", "input": "x"}\n'
            "not json\n"
            "\n"
            '["a list"]\n'
            '{"index": "7", "op": "input"}\n'
        )

        history = HistoryStore.create(path)
        assert history.last_index == 4
        history.close()

    def test_reopen_empty_file(self, tmp_path: Path):
        """An empty existing file starts at index 0."""
        path = tmp_path / "history.jsonl"
        path.write_text("")
        history = HistoryStore.create(path)
        assert history.last_index == 0
        history.close()

    def test_unopenable_file_raises(self, tmp_path: Path):
        """A path that cannot be created is a HistoryError."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        with pytest.raises(HistoryError):
            HistoryStore.create(blocker / "history.jsonl")

    def test_memory_history_survives_close(self, tmp_path: Path):
        """Closing stops persistence but keeps history usable."""
        history = HistoryStore.create(tmp_path / "h.jsonl")
        history.close()
        history.record_input(1, "x")
        history.record_output(1, 1)
        assert history.output(1) == 1
        assert (tmp_path / "h.jsonl").read_text() == ""
