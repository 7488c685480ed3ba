"""CLI frontend for cellrun.

Commands:
    cellrun run FILE    Run a file as one input block
    cellrun repl        Interactive REPL

Example:
    $ cellrun run notebook_cell.py
    $ cellrun run notebook_cell.py --json
    $ cellrun --log-level DEBUG repl
"""

from cellrun.frontends.cli.main import main

__all__ = ["main"]
