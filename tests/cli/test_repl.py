"""Tests for the interactive REPL."""

from __future__ import annotations

import io
from unittest.mock import Mock

import pytest
from rich.console import Console

from cellrun.core.config import SessionConfig
from cellrun.core.oracle import PythonSyntaxOracle
from cellrun.frontends.cli.repl import build_key_bindings, run_interactive, should_submit


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)


def make_prompt(*inputs) -> Mock:
    """Prompt session whose prompt() returns (or raises) inputs in order."""
    prompt_session = Mock()
    prompt_session.prompt.side_effect = list(inputs)
    return prompt_session


class TestShouldSubmit:
    """Tests for the Enter-key submit decision."""

    @pytest.mark.parametrize(
        "text",
        ["", "x = 1", "def f():\n    return 1\n", "2 +\n", "print('a')"],
    )
    def test_submits(self, text):
        """Complete input, blank input and a trailing blank line submit."""
        assert should_submit(text, PythonSyntaxOracle()) is True

    @pytest.mark.parametrize("text", ["def f():", "def f():\n    return 1", "2 +", "(1,"])
    def test_continues(self, text):
        """Incomplete input asks for another line."""
        assert should_submit(text, PythonSyntaxOracle()) is False


class TestKeyBindings:
    """Tests for build_key_bindings."""

    def _handler(self):
        bindings = build_key_bindings(PythonSyntaxOracle())
        assert len(bindings.bindings) == 1
        return bindings.bindings[0].handler

    def test_enter_submits_complete_input(self):
        """Enter on complete input accepts the buffer."""
        event = Mock()
        event.current_buffer.text = "1 + 1"
        self._handler()(event)
        event.current_buffer.validate_and_handle.assert_called_once()
        event.current_buffer.insert_text.assert_not_called()

    def test_enter_continues_incomplete_input(self):
        """Enter on incomplete input inserts a newline."""
        event = Mock()
        event.current_buffer.text = "for i in range(3):"
        self._handler()(event)
        event.current_buffer.insert_text.assert_called_once_with("\n")
        event.current_buffer.validate_and_handle.assert_not_called()


class TestRunInteractive:
    """Tests for the REPL loop."""

    def test_runs_blocks_until_exit(self, session, console):
        """Each block is run and rendered; exit leaves the loop."""
        prompt = make_prompt("1 + 1", "print('hi')\n3", "exit", "never read")

        run_interactive(session, SessionConfig(), console=console, prompt_session=prompt)

        output = console.file.getvalue()
        assert "Out[1]: 2" in output
        assert "hi" in output
        assert "Out[3]: 3" in output
        assert prompt.prompt.call_count == 3

    def test_prompt_shows_next_index(self, session, console):
        """The prompt follows the execution count."""
        prompt = make_prompt("1\n2", "x = 1", "quit")

        run_interactive(session, SessionConfig(), console=console, prompt_session=prompt)

        prompts = [call.args[0] for call in prompt.prompt.call_args_list]
        assert prompts == ["In [1]: ", "In [3]: ", "In [4]: "]

    def test_malformed_block_keeps_index(self, session, console):
        """A malformed block does not move the prompt forward."""
        prompt = make_prompt("2 +", "quit")

        run_interactive(session, SessionConfig(), console=console, prompt_session=prompt)

        prompts = [call.args[0] for call in prompt.prompt.call_args_list]
        assert prompts == ["In [1]: ", "In [1]: "]
        assert "SyntaxError" in console.file.getvalue()

    def test_ctrl_c_continues(self, session, console):
        """KeyboardInterrupt abandons the input but not the loop."""
        prompt = make_prompt(KeyboardInterrupt(), "5", EOFError())

        run_interactive(session, SessionConfig(), console=console, prompt_session=prompt)

        output = console.file.getvalue()
        assert "(interrupted)" in output
        assert "Out[1]: 5" in output

    def test_eof_exits(self, session, console):
        """Ctrl-D leaves the loop straight away."""
        prompt = make_prompt(EOFError())
        run_interactive(session, SessionConfig(), console=console, prompt_session=prompt)
        assert session.execution_count == 0

    def test_custom_prompt_and_quiet(self, session, console):
        """Config controls the prompt text and diagnostics echo."""
        prompt = make_prompt("print('noise')\n7", EOFError())
        config = SessionConfig(prompt="[{n}]> ", echo_diagnostics=False)

        run_interactive(session, config, console=console, prompt_session=prompt)

        assert prompt.prompt.call_args_list[0].args[0] == "[1]> "
        output = console.file.getvalue()
        assert "noise" not in output
        assert "Out[2]: 7" in output
