"""PythonEvaluator - evaluates segments in a persistent namespace.

The value of a segment is the value of its last statement when that
statement is an expression, otherwise None. Errors raised by user code
are reported to the diagnostic channel as a traceback and the segment
evaluates to FAILED. Throw derives from BaseException, so it passes
through untouched to the exit interceptor.
"""

from __future__ import annotations

import ast
import builtins
import logging
import traceback
import warnings
from collections.abc import Callable
from typing import Any

from cellrun.core.hooks import interact
from cellrun.core.interceptor import Throw, catch, throw
from cellrun.core.messages import DiagnosticChannel, channel as default_channel
from cellrun.core.types import FAILED

logger = logging.getLogger(__name__)

PreHook = Callable[[ast.Module], ast.Module]


class PythonEvaluator:
    """Executes Python source in one namespace shared by every segment.

    The namespace is pre-loaded with the kernel primitives:
        print             prints through the diagnostic channel
        throw, catch      non-local jumps (and the Throw exception)
        interact          front-end access / special rendering marker
        frontend_enabled  True while an interact(...) segment evaluates

    Example:
        >>> evaluator = PythonEvaluator()
        >>> evaluator.evaluate("x = 20\\nx + 1")
        21
    """

    filename = "<cell>"

    def __init__(
        self,
        namespace: dict[str, Any] | None = None,
        channel: DiagnosticChannel | None = None,
    ) -> None:
        self.namespace: dict[str, Any] = namespace if namespace is not None else {}
        self.channel = channel if channel is not None else default_channel
        self.front_end = False
        self._install_primitives()

    def _install_primitives(self) -> None:
        self.namespace.setdefault("__name__", "__main__")
        self.namespace.setdefault("__builtins__", builtins)
        self.namespace.update(
            {
                "print": self.channel.print,
                "throw": throw,
                "catch": catch,
                "Throw": Throw,
                "interact": interact,
                "frontend_enabled": lambda: self.front_end,
            }
        )

    def parse(self, text: str) -> ast.Module:
        """Parse text into its held form without evaluating anything.

        Raises:
            SyntaxError: If text is not valid Python.
        """
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            return ast.parse(text, self.filename, "exec")

    def evaluate(self, text: str, pre: PreHook | None = None) -> Any:
        """Evaluate text and return the value of its last expression.

        Args:
            text: Segment source.
            pre: Transform applied to the held form before execution.

        Returns:
            The value, None for statements, FAILED if an error was reported.

        Raises:
            Throw: Propagated untouched for the exit interceptor.
        """
        try:
            tree = self.parse(text)
            if pre is not None:
                tree = pre(tree)
            return self._run(tree)
        except Exception as e:
            self.report(e)
            return FAILED

    def _run(self, tree: ast.Module) -> Any:
        body = ast.fix_missing_locations(tree).body
        if body and isinstance(body[-1], ast.Expr):
            statements = ast.Module(body=body[:-1], type_ignores=[])
            exec(compile(statements, self.filename, "exec"), self.namespace)
            expression = ast.Expression(body=body[-1].value)
            return eval(compile(expression, self.filename, "eval"), self.namespace)

        exec(compile(tree, self.filename, "exec"), self.namespace)
        return None

    def report(self, exc: Exception) -> None:
        """Write a traceback for exc, trimmed to frames of user code."""
        tb = exc.__traceback__
        while tb is not None and tb.tb_frame.f_code.co_filename != self.filename:
            tb = tb.tb_next

        display = "".join(traceback.format_exception(type(exc), exc, tb))
        logger.debug(f"evaluation_error: type={type(exc).__name__}")
        self.channel.message(type(exc).__name__, str(exc), display=display)
