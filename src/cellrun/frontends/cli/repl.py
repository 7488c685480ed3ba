"""Interactive REPL on top of a Session.

Enter submits the buffer once it is ready to run: the oracle reports it
complete, or the last line is blank (which also forces malformed input
through so its error is shown). Otherwise Enter starts a new line.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from rich.console import Console

from cellrun.frontends.cli.output import render_result

if TYPE_CHECKING:
    from cellrun.core.config import SessionConfig
    from cellrun.core.oracle import SyntaxOracle
    from cellrun.core.session import Session

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")


def should_submit(text: str, oracle: SyntaxOracle) -> bool:
    """Check if the buffer should be submitted on Enter."""
    if not text.strip():
        return True
    if text.split("\n")[-1].strip() == "":
        return True
    return oracle.is_complete(text)


def build_key_bindings(oracle: SyntaxOracle) -> KeyBindings:
    """Key bindings that submit on Enter only when should_submit() agrees."""
    bindings = KeyBindings()

    @bindings.add("enter")
    def _(event: KeyPressEvent) -> None:
        buffer = event.current_buffer
        if should_submit(buffer.text, oracle):
            buffer.validate_and_handle()
        else:
            buffer.insert_text("\n")

    return bindings


def run_interactive(
    session: Session,
    config: SessionConfig,
    console: Console | None = None,
    prompt_session: PromptSession[str] | None = None,
) -> None:
    """Read blocks until EOF or exit, running and rendering each one.

    Args:
        session: Session to run blocks in.
        config: Prompt template and diagnostics echo setting.
        console: Console for output (default: new Console).
        prompt_session: Input source (default: multiline PromptSession).
    """
    console = console or Console()
    if prompt_session is None:
        prompt_session = PromptSession(
            history=InMemoryHistory(),
            multiline=True,
            key_bindings=build_key_bindings(session.oracle),
        )

    console.print("[bold]cellrun[/] [dim]| exit or Ctrl-D to leave[/]\n")

    while True:
        try:
            text = prompt_session.prompt(config.format_prompt(session.execution_count + 1))
        except EOFError:
            console.print()
            break
        except KeyboardInterrupt:
            console.print("[dim](interrupted)[/]")
            continue

        if text.strip() in EXIT_COMMANDS:
            break

        result = session.run(text)
        render_result(console, result, echo_diagnostics=config.echo_diagnostics)

    logger.debug(f"repl_exit: execution_count={session.execution_count}")
