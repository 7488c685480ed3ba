"""Exit interceptor - turns uncaught throws into data.

User code gets two primitives: throw(value, tag=None) jumps out of any
depth of calls, catch(fn, tag=None) receives the jump. A throw that no
catch received must not tear down the session loop, so evaluation of each
segment goes through intercept(), which returns either Ok(value) or
UncaughtThrow(value, tag).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cellrun.core.messages import DiagnosticChannel, channel as default_channel

logger = logging.getLogger(__name__)


class Throw(BaseException):
    """Non-local jump carrying a value and an optional tag.

    Derives from BaseException, like KeyboardInterrupt, so that an
    `except Exception` in user code does not receive it.
    """

    def __init__(self, value: Any, tag: Any = None) -> None:
        super().__init__(value, tag)
        self.value = value
        self.tag = tag


def throw(value: Any, tag: Any = None) -> None:
    """Jump to the nearest matching catch() with value."""
    raise Throw(value, tag)


def catch(fn: Callable[[], Any], tag: Any = None) -> Any:
    """Call fn and return the value of a matching throw, if one occurs.

    With tag None every throw matches. Otherwise only throws carrying an
    equal tag are received; others keep unwinding.
    """
    try:
        return fn()
    except Throw as t:
        if tag is None or t.tag == tag:
            return t.value
        raise


def _format_throw(value: Any, tag: Any) -> str:
    if tag is None:
        return f"throw({value!r})"
    return f"throw({value!r}, {tag!r})"


@dataclass(frozen=True)
class HeldThrow:
    """Displayable form of a throw that reached top level."""

    value: Any
    tag: Any = None

    def __repr__(self) -> str:
        return _format_throw(self.value, self.tag)


@dataclass(frozen=True)
class Ok:
    """Evaluation finished normally."""

    value: Any


@dataclass(frozen=True)
class UncaughtThrow:
    """A throw that escaped user code during one segment."""

    value: Any
    tag: Any = None

    @property
    def labelled(self) -> bool:
        """Whether the throw carried an explicit tag."""
        return self.tag is not None

    def held(self) -> HeldThrow:
        """Convert to the form shown to the user."""
        return HeldThrow(self.value, self.tag)

    def describe(self) -> str:
        return f"Uncaught {_format_throw(self.value, self.tag)} returned to top level."


EvaluationOutcome = Ok | UncaughtThrow


def intercept(
    evaluate: Callable[..., Any],
    text: str,
    pre: Callable[[Any], Any] | None = None,
    channel: DiagnosticChannel | None = None,
) -> EvaluationOutcome:
    """Evaluate text, capturing a throw that escapes it.

    Only Throw is intercepted. Any other exception is the evaluator's
    business and propagates.

    Args:
        evaluate: Evaluator callable, called as evaluate(text, pre=pre).
        text: Segment source.
        pre: Transform for the held form, passed through to the evaluator.
        channel: Diagnostic channel for the nocatch message.

    Returns:
        Ok(value) or UncaughtThrow(value, tag).
    """
    try:
        return Ok(evaluate(text, pre=pre))
    except Throw as t:
        return uncaught(t, channel)


def uncaught(signal: Throw, channel: DiagnosticChannel | None = None) -> UncaughtThrow:
    """Convert a throw that reached top level, writing the nocatch message."""
    channel = channel or default_channel
    outcome = UncaughtThrow(signal.value, signal.tag)
    logger.debug(f"uncaught_throw: labelled={outcome.labelled}")
    channel.message("Throw::nocatch", outcome.describe())
    return outcome
