"""Syntax oracle - decides whether a chunk of source is a complete unit.

The segmenter never parses anything itself. It only asks an oracle
"is this prefix a complete, standalone unit?" and cuts the input at the
first prefix that answers yes.
"""

from __future__ import annotations

import ast
import warnings
from typing import Protocol, runtime_checkable

# Statements whose body can keep growing as long as indented lines follow
COMPOUND_STATEMENTS: tuple[type[ast.stmt], ...] = (
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.TryStar,
    ast.Match,
)


@runtime_checkable
class SyntaxOracle(Protocol):
    """Protocol for syntactic completeness checks."""

    def is_complete(self, text: str) -> bool:
        """Return True if text is a syntactically complete standalone unit."""
        ...


def is_blank(text: str) -> bool:
    """Check if text holds nothing but whitespace and comments."""
    for line in text.split("\n"):
        line = line.strip()
        if line and not line.startswith("#"):
            return False
    return True


class PythonSyntaxOracle:
    """Completeness oracle for Python source.

    Rules:
    - blank or comment-only text is incomplete
    - text that fails to compile is incomplete
    - text ending in a compound statement is complete only once it ends
      in a blank line, since more body lines could still follow
    - anything else that compiles is complete

    Example:
        >>> oracle = PythonSyntaxOracle()
        >>> oracle.is_complete("1 + 1")
        True
        >>> oracle.is_complete("2 +")
        False
        >>> oracle.is_complete("def f():\\n    return 1")
        False
        >>> oracle.is_complete("def f():\\n    return 1\\n")
        True
    """

    filename = "<cell>"

    def is_complete(self, text: str) -> bool:
        if is_blank(text):
            return False

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", (SyntaxWarning, DeprecationWarning))
            try:
                tree = ast.parse(text, self.filename, "exec")
            except SyntaxError:
                return False

        if tree.body and isinstance(tree.body[-1], COMPOUND_STATEMENTS):
            return text.split("\n")[-1].strip() == ""
        return True
