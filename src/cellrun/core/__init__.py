"""Core - the REPL-simulation core of a notebook kernel.

This package knows nothing about terminals, sockets or message framing.
It turns a block of source text into a SessionResult.

Architecture:
    oracle        Syntactic completeness oracle
    segmenter     Splits a block into evaluable segments
    interceptor   throw/catch primitives, uncaught throws as data
    messages      Diagnostic channel and per-block message sink
    history       In/Out history keyed by execution index
    hooks         pre_read / pre / post / pre_print hooks, interact()
    evaluator     Python evaluator with a persistent namespace
    session       The evaluation loop
    types         Pure data types

Example:
    >>> from cellrun.core import Session
    >>> session = Session()
    >>> result = session.run("1 + 1\\n2 +")
    >>> result.results
    [2, $Failed]
    >>> result.consumed_indices
    1
"""

from cellrun.core.config import ConfigError, SessionConfig, load_config
from cellrun.core.evaluator import PythonEvaluator
from cellrun.core.history import HistoryEntry, HistoryError, HistoryStore
from cellrun.core.hooks import HOOK_NAMES, HookSet, apply_hook, interact
from cellrun.core.interceptor import (
    HeldThrow,
    Ok,
    Throw,
    UncaughtThrow,
    catch,
    intercept,
    throw,
    uncaught,
)
from cellrun.core.messages import DiagnosticChannel, Message, MessageSink, channel
from cellrun.core.oracle import PythonSyntaxOracle, SyntaxOracle
from cellrun.core.segmenter import ParseTracker, Segment, advance, begin, segments
from cellrun.core.session import Session, SessionError
from cellrun.core.types import FAILED, Marker, SessionResult

__all__ = [
    # Session loop
    "Session",
    "SessionError",
    "SessionResult",
    "SessionConfig",
    "ConfigError",
    "load_config",
    # Segmentation
    "SyntaxOracle",
    "PythonSyntaxOracle",
    "ParseTracker",
    "Segment",
    "begin",
    "advance",
    "segments",
    # Evaluation
    "PythonEvaluator",
    "Throw",
    "throw",
    "catch",
    "intercept",
    "uncaught",
    "Ok",
    "UncaughtThrow",
    "HeldThrow",
    "FAILED",
    "Marker",
    # Hooks
    "HookSet",
    "HOOK_NAMES",
    "apply_hook",
    "interact",
    # Diagnostics
    "DiagnosticChannel",
    "Message",
    "MessageSink",
    "channel",
    # History
    "HistoryStore",
    "HistoryEntry",
    "HistoryError",
]
