"""cellrun - REPL-simulation core for notebook-style kernels.

cellrun takes a raw block of source text, splits it into top-level
segments using only syntactic completeness, evaluates each one while
capturing printed diagnostics and uncaught throws, and hands back one
structured SessionResult per block.

Layers:
    core/       Segmenter, evaluator, history, hooks, session loop
    frontends/  User interfaces (CLI)

Quick Start:
    >>> from cellrun import Session
    >>> session = Session()
    >>> result = session.run("x = 20\\nx + 22")
    >>> result.outputs()
    [(2, 42)]
"""

from cellrun.__version__ import __version__
from cellrun.core import (
    FAILED,
    HookSet,
    PythonEvaluator,
    PythonSyntaxOracle,
    Session,
    SessionConfig,
    SessionResult,
    load_config,
)

__all__ = [
    "__version__",
    "FAILED",
    "HookSet",
    "PythonEvaluator",
    "PythonSyntaxOracle",
    "Session",
    "SessionConfig",
    "SessionResult",
    "load_config",
]
