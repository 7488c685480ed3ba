"""Session - the evaluation loop behind every input block.

One Session lives per kernel process. For each input block it:
1. captures the diagnostic channel for the whole block
2. applies the pre_read hook and splits the block into segments
3. gives every well-formed segment the next execution index and
   records it in history
4. evaluates each segment through the exit interceptor, applying the
   pre/post/pre_print hooks around it
5. returns a SessionResult with the None results dropped

Example:
    >>> session = Session()
    >>> result = session.run("x = 2\\nx * 21\\nprint('hi')")
    >>> result.results, result.result_positions
    ([42], [2])
    >>> result.diagnostics
    'hi\\n'
    >>> result.consumed_indices
    3
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from typing import Any

from cellrun.core.config import SessionConfig
from cellrun.core.evaluator import PythonEvaluator
from cellrun.core.history import HistoryStore
from cellrun.core.hooks import HookSet, apply_hook, is_interactive, unwrap_interact
from cellrun.core.interceptor import Ok, Throw, intercept, uncaught
from cellrun.core.messages import MessageSink
from cellrun.core.oracle import PythonSyntaxOracle, SyntaxOracle
from cellrun.core.segmenter import advance, begin
from cellrun.core.types import FAILED, SessionResult

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Session used in a way it does not support."""

    pass


@dataclass
class Session:
    """Evaluation session: segmenter, evaluator, hooks and history.

    The execution counter, the history and the diagnostic channel are only
    ever written by the session while it runs a block. run() is therefore
    not reentrant.

    Attributes:
        evaluator: Evaluates segments and parses their held form.
        oracle: Syntactic completeness oracle for the segmenter.
        hooks: User hooks (also bound as `hooks` in the namespace).
        history: In/Out history (bound as `In` and `Out`).
    """

    evaluator: PythonEvaluator = field(default_factory=PythonEvaluator)
    oracle: SyntaxOracle = field(default_factory=PythonSyntaxOracle)
    hooks: HookSet = field(default_factory=HookSet)
    history: HistoryStore = field(default_factory=HistoryStore)
    _execution_count: int = field(default=0, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self._execution_count = self.history.last_index
        self.evaluator.namespace.update(
            {
                "In": self.history.inputs,
                "Out": self.history.outputs,
                "hooks": self.hooks,
            }
        )

    @classmethod
    def from_config(cls, config: SessionConfig) -> Session:
        """Create a session whose history follows config.history_file."""
        return cls(history=HistoryStore.create(config.history_file))

    @property
    def execution_count(self) -> int:
        """Last execution index handed out (0 before the first segment)."""
        return self._execution_count

    @property
    def running(self) -> bool:
        return self._running

    def run(self, block: str) -> SessionResult:
        """Evaluate one input block.

        Args:
            block: Raw source text, any number of top-level segments.

        Returns:
            SessionResult for the block.

        Raises:
            SessionError: If called while a block is already running.
        """
        if self._running:
            raise SessionError("Session is already evaluating a block")

        self._running = True
        try:
            return self._run_block(block)
        finally:
            self._running = False

    def close(self) -> None:
        self.history.close()

    def _run_block(self, block: str) -> SessionResult:
        start = self._execution_count
        raw: list[Any] = []
        held: ast.Module | None = None

        with MessageSink(self.evaluator.channel) as sink:
            text = self._apply("pre_read", block, fallback=block)
            tracker = begin(text)
            logger.debug(f"block_start: index={start}, lines={len(tracker.lines)}")

            while True:
                tracker = advance(tracker, self.oracle)
                if tracker.done:
                    break
                value, held = self._run_segment(tracker.segment, tracker.malformed)
                raw.append(value)

        interactive = (
            tracker.count == 1
            and not tracker.malformed
            and held is not None
            and is_interactive(held)
        )

        results: list[Any] = []
        positions: list[int] = []
        for number, value in enumerate(raw, 1):
            if value is not None:
                results.append(value)
                positions.append(start + number)

        consumed = tracker.count - 1 if tracker.malformed else tracker.count

        logger.debug(
            f"block_complete: segments={tracker.count}, results={len(results)}, "
            f"consumed={consumed}, malformed={tracker.malformed}"
        )
        return SessionResult(
            results=results,
            result_positions=positions,
            interactive=interactive,
            diagnostics=sink.text,
            consumed_indices=consumed,
        )

    def _run_segment(self, text: str, malformed: bool) -> tuple[Any, ast.Module | None]:
        """Evaluate one segment. Returns (result, held form of the segment)."""
        index = 0
        if not malformed:
            self._execution_count += 1
            index = self._execution_count
            self.history.record_input(index, text)

        held: list[ast.Module] = []

        def pre(tree: ast.Module) -> ast.Module:
            held.append(tree)
            tree, wrapped = unwrap_interact(tree)
            if wrapped:
                self.evaluator.front_end = True
            return apply_hook(self.hooks, "pre", tree)

        try:
            outcome = intercept(
                self.evaluator.evaluate, text, pre=pre, channel=self.evaluator.channel
            )
        finally:
            self.evaluator.front_end = False

        if malformed:
            logger.debug("segment_failed: malformed=True")
            return FAILED, None

        value = outcome.value if isinstance(outcome, Ok) else outcome.held()
        value = self._apply("post", value)
        self.history.record_output(index, value)
        value = self._apply("pre_print", value)

        logger.debug(f"segment_evaluated: index={index}")
        return value, held[0] if held else None

    def _apply(self, name: str, value: Any, fallback: Any = FAILED) -> Any:
        """Apply a hook, reporting its errors to the channel instead of raising.

        A throw escaping a value hook becomes its held form, like one
        escaping the segment. For pre_read the fallback is used instead.
        """
        try:
            return apply_hook(self.hooks, name, value)
        except Throw as t:
            held = uncaught(t, self.evaluator.channel).held()
            return fallback if name == "pre_read" else held
        except Exception as e:
            self.evaluator.report(e)
            return fallback
