"""Output formatting for CLI commands."""

from __future__ import annotations

import json
from typing import Any

import rich_click as click
from rich.console import Console
from rich.pretty import pretty_repr
from rich.text import Text

from cellrun.core.types import SessionResult


def render_result(
    console: Console,
    result: SessionResult,
    echo_diagnostics: bool = True,
) -> None:
    """Print diagnostics, then one Out[n] line per result.

    Args:
        console: Rich console to print to.
        result: Result of one input block.
        echo_diagnostics: Print the block's diagnostics text first.
    """
    if echo_diagnostics and result.diagnostics:
        console.print(Text(result.diagnostics, style="yellow"), end="")

    for index, value in result.outputs():
        line = Text.assemble((f"Out[{index}]: ", "bold red"), pretty_repr(value))
        if result.interactive:
            line.append("  (interactive)", style="dim")
        console.print(line)


def result_to_json(result: SessionResult) -> dict[str, Any]:
    """Plain-data view of a result with every value shown through repr()."""
    data = result.to_dict()
    data["results"] = [repr(value) for value in result.results]
    return data


def output_json(data: Any, indent: int = 2) -> None:
    """Output data as formatted JSON."""
    click.echo(json.dumps(data, indent=indent))
