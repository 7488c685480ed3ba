"""Diagnostic channel and the per-block message sink.

The channel is process-wide: the evaluator's print primitive, error
reports and the nocatch message all go through it. While a block runs,
a MessageSink points the channel (and sys.stdout/sys.stderr) at a private
buffer and hands back everything written once the block is finished.
"""

from __future__ import annotations

import builtins
import io
import logging
import sys
from contextlib import ExitStack, redirect_stderr, redirect_stdout
from dataclasses import dataclass, field
from typing import Any, TextIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A named diagnostic, e.g. Message("Throw::nocatch", "Uncaught ...")."""

    name: str
    text: str

    def __str__(self) -> str:
        return f"{self.name}: {self.text}"


@dataclass
class DiagnosticChannel:
    """Process-wide print/diagnostic side channel.

    Attributes:
        stream: Current destination. None means the live sys.stdout.
        messages: Messages issued since the record was last cleared.
    """

    stream: TextIO | None = None
    messages: list[Message] = field(default_factory=list)
    _printing: bool = field(default=False, repr=False)

    @property
    def destination(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    @property
    def redirected(self) -> bool:
        return self.stream is not None

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print through the channel.

        A call made while another channel print is in progress (for
        example from a __str__ that prints) goes straight to
        builtins.print instead of back through the channel.
        """
        if self._printing:
            builtins.print(*args, **kwargs)
            return

        self._printing = True
        try:
            kwargs.setdefault("file", self.destination)
            builtins.print(*args, **kwargs)
        finally:
            self._printing = False

    def message(self, name: str, text: str, display: str | None = None) -> Message:
        """Issue a named diagnostic: record it and print it.

        Args:
            name: Diagnostic name, e.g. "Throw::nocatch" or "ZeroDivisionError".
            text: Short text kept in the message record.
            display: Text to print instead of "name: text" (e.g. a traceback).
        """
        msg = Message(name, text)
        self.messages.append(msg)
        if display is None:
            self.print(str(msg))
        else:
            self.print(display, end="" if display.endswith("\n") else "\n")
        return msg


# Shared by every session in the process
channel = DiagnosticChannel()


def _shared_channel() -> DiagnosticChannel:
    return channel


class MessageSink:
    """Scoped capture of the diagnostic channel for one input block.

    On enter the channel destination and message record are saved, the
    record is cleared and the channel, sys.stdout and sys.stderr are
    pointed at a private buffer. On exit, even when the block raised,
    everything is put back and the buffer's contents land in text.

    Example:
        >>> with MessageSink() as sink:
        ...     channel.print("hello")
        >>> sink.text
        'hello\\n'
    """

    def __init__(self, channel: DiagnosticChannel | None = None) -> None:
        self.channel = channel if channel is not None else _shared_channel()
        self.text = ""
        self.messages: list[Message] = []
        self._buffer: io.StringIO | None = None
        self._redirects: ExitStack | None = None
        self._saved_stream: TextIO | None = None
        self._saved_messages: list[Message] = []

    @property
    def active(self) -> bool:
        return self._buffer is not None

    def __enter__(self) -> MessageSink:
        if self._buffer is not None:
            raise RuntimeError("MessageSink is already capturing")

        self._saved_stream = self.channel.stream
        self._saved_messages = self.channel.messages
        self.channel.messages = []

        self._buffer = io.StringIO()
        self.channel.stream = self._buffer
        self._redirects = ExitStack()
        self._redirects.enter_context(redirect_stdout(self._buffer))
        self._redirects.enter_context(redirect_stderr(self._buffer))
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._buffer is None or self._redirects is None:
            raise RuntimeError("MessageSink is not capturing")
        try:
            self._redirects.close()
        finally:
            self.channel.stream = self._saved_stream
            self.messages = self.channel.messages
            self.channel.messages = self._saved_messages
            self.text = self._buffer.getvalue()
            self._buffer.close()
            self._buffer = None
            self._redirects = None
        logger.debug(f"sink_closed: chars={len(self.text)}, messages={len(self.messages)}")
