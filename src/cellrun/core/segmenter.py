"""Input segmenter - splits a block of source into evaluable segments.

A segment is the first prefix of the remaining lines that the syntax
oracle accepts as complete. When no prefix is ever accepted, the whole
remainder becomes one malformed segment and segmentation ends.

Usage:
    tracker = begin(text)
    while True:
        tracker = advance(tracker, oracle)
        if tracker.done:
            break
        handle(tracker.segment, tracker.malformed)

Or lazily:
    for segment in segments(text, oracle):
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from cellrun.core.oracle import SyntaxOracle, is_blank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseTracker:
    """State of one segmentation pass over one input block.

    Attributes:
        lines: Remaining unconsumed lines.
        count: Segments produced so far (malformed ones included).
        segment: Text of the most recently produced segment.
        malformed: Whether that segment never became complete.
        done: Input exhausted. Once set, segment is meaningless while
            malformed still describes the last segment produced.
    """

    lines: tuple[str, ...] = field(default_factory=tuple)
    count: int = 0
    segment: str = ""
    malformed: bool = False
    done: bool = False


@dataclass(frozen=True)
class Segment:
    """One produced segment, numbered from 1 within its block."""

    text: str
    malformed: bool
    number: int


def begin(text: str) -> ParseTracker:
    """Start a segmentation pass over text.

    Accepts both "\\n" and "\\r\\n" line endings. The lines are right-padded
    with one blank boundary line so a compound statement at the very end
    of the block can still be closed.

    Args:
        text: Raw block text.

    Returns:
        Fresh tracker. Already done when text is blank.
    """
    if not text.strip():
        return ParseTracker(done=True)
    lines = tuple(text.splitlines()) + ("",)
    return ParseTracker(lines=lines)


def advance(tracker: ParseTracker, oracle: SyntaxOracle) -> ParseTracker:
    """Produce the next segment.

    Leading blank and comment-only lines belong to no segment and are
    dropped. Lines are then accumulated one at a time until the oracle
    reports the accumulated text complete.

    Args:
        tracker: Current tracker (left untouched).
        oracle: Completeness oracle.

    Returns:
        Updated tracker. done is set when nothing remains to segment.
    """
    if tracker.done:
        return tracker

    lines = tracker.lines
    start = 0
    while start < len(lines) and is_blank(lines[start]):
        start += 1
    lines = lines[start:]

    if not lines:
        return replace(tracker, lines=(), done=True)

    for end in range(1, len(lines) + 1):
        candidate = "\n".join(lines[:end])
        if oracle.is_complete(candidate):
            logger.debug(f"segment_complete: lines={end}, remaining={len(lines) - end}")
            return replace(
                tracker,
                lines=lines[end:],
                count=tracker.count + 1,
                segment=candidate.rstrip("\n"),
                malformed=False,
            )

    logger.debug(f"segment_malformed: lines={len(lines)}")
    return replace(
        tracker,
        lines=(),
        count=tracker.count + 1,
        segment="\n".join(lines).rstrip(),
        malformed=True,
    )


def segments(text: str, oracle: SyntaxOracle) -> Iterator[Segment]:
    """Lazily yield the segments of text."""
    tracker = begin(text)
    while True:
        tracker = advance(tracker, oracle)
        if tracker.done:
            return
        yield Segment(text=tracker.segment, malformed=tracker.malformed, number=tracker.count)
