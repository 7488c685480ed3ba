"""User hooks applied around evaluation, and the interact() marker.

Hooks, in the order the session loop applies them:
    pre_read    raw block text, before segmentation
    pre         held form (ast.Module) of a segment, before evaluation
    post        raw result, before it is recorded in history
    pre_print   recorded result, before it goes into the result list

Any hook left as None is the identity.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

HOOK_NAMES = ("pre_read", "pre", "post", "pre_print")

# Name of the wrapper that asks for front-end access and special rendering
INTERACT = "interact"


@dataclass
class HookSet:
    """User-registered hooks. Assign at any time, e.g. hooks.pre_print = repr."""

    pre_read: Callable[[str], str] | None = None
    pre: Callable[[ast.Module], ast.Module] | None = None
    post: Callable[[Any], Any] | None = None
    pre_print: Callable[[Any], Any] | None = None


def apply_hook(hooks: HookSet, name: str, value: Any) -> Any:
    """Apply the hook registered under name, or return value unchanged.

    Raises:
        KeyError: If name is not a known hook.
    """
    if name not in HOOK_NAMES:
        raise KeyError(f"Unknown hook: {name}")
    hook = getattr(hooks, name)
    if hook is None:
        return value
    return hook(value)


def interact(value: Any) -> Any:
    """Identity at runtime. As the outermost call of a block it is a marker."""
    return value


def interact_target(tree: ast.Module) -> ast.expr | None:
    """Return the wrapped expression if tree is exactly interact(<expr>)."""
    if len(tree.body) != 1 or not isinstance(tree.body[0], ast.Expr):
        return None
    call = tree.body[0].value
    if (
        isinstance(call, ast.Call)
        and isinstance(call.func, ast.Name)
        and call.func.id == INTERACT
        and len(call.args) == 1
        and not call.keywords
    ):
        return call.args[0]
    return None


def is_interactive(tree: ast.Module) -> bool:
    return interact_target(tree) is not None


def unwrap_interact(tree: ast.Module) -> tuple[ast.Module, bool]:
    """Strip an interact(...) wrapper.

    Returns:
        (tree without the wrapper, True) or (tree unchanged, False).
    """
    inner = interact_target(tree)
    if inner is None:
        return tree, False
    stmt = ast.copy_location(ast.Expr(value=inner), tree.body[0])
    return ast.Module(body=[stmt], type_ignores=[]), True
