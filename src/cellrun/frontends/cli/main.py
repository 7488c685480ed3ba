"""CLI entry point."""

from __future__ import annotations

import sys
from typing import Any


def main() -> None:
    """Main entry point for the CLI."""
    import importlib.util

    if importlib.util.find_spec("rich_click") is None:
        print("CLI dependencies not installed. Run: pip install cellrun[cli]")
        sys.exit(1)

    build_cli()()


def build_cli() -> Any:
    """CLI definition."""
    import rich_click as click

    from cellrun.core.config import ConfigError, SessionConfig, load_config
    from cellrun.core.logging_config import configure_logging

    click.rich_click.USE_RICH_MARKUP = True
    click.rich_click.USE_MARKDOWN = True
    click.rich_click.SHOW_ARGUMENTS = True
    click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
    click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
    click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
    click.rich_click.MAX_WIDTH = 100

    @click.group()
    @click.version_option(package_name="cellrun")
    @click.option("--config", "config_file", default=None, help="YAML config file")
    @click.option("--log-level", default=None, help="Log level (DEBUG, INFO, ...)")
    @click.pass_context
    def cli(ctx: click.Context, config_file: str | None, log_level: str | None):
        """cellrun - evaluate notebook-style input blocks.

        Each block is split into top-level segments; every segment gets an
        execution index and its own **Out[n]** result.

        **Commands:**

            cellrun run FILE     Run a file as one input block

            cellrun repl         Interactive REPL
        """
        try:
            config = load_config(config_file, log_level=log_level)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e
        configure_logging(level=config.log_level)
        ctx.obj = config

    @cli.command()
    @click.argument("file", type=click.Path(exists=True, dir_okay=False))
    @click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
    @click.pass_obj
    def run(config: SessionConfig, file: str, json_output: bool):
        """Run FILE as a single input block.

        **Examples:**

            cellrun run cell.py

            cellrun run cell.py --json
        """
        from rich.console import Console

        from cellrun.core.session import Session
        from cellrun.frontends.cli.output import output_json, render_result, result_to_json

        with open(file, encoding="utf-8") as f:
            block = f.read()

        session = Session.from_config(config)
        try:
            result = session.run(block)
        finally:
            session.close()

        if json_output:
            output_json(result_to_json(result))
        else:
            render_result(Console(), result, echo_diagnostics=config.echo_diagnostics)

    @cli.command()
    @click.pass_obj
    def repl(config: SessionConfig):
        """Interactive REPL.

        Enter runs the input once it is complete; an empty line forces it
        through. Type **exit** or press Ctrl-D to leave.
        """
        from cellrun.core.session import Session
        from cellrun.frontends.cli.repl import run_interactive

        session = Session.from_config(config)
        try:
            run_interactive(session, config)
        finally:
            session.close()

    return cli


if __name__ == "__main__":
    main()
