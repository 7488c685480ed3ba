"""Pytest configuration and fixtures."""

from __future__ import annotations

import io

import pytest

from cellrun.core.config import ENV_KEYS, CONFIG_ENV
from cellrun.core.evaluator import PythonEvaluator
from cellrun.core.messages import DiagnosticChannel
from cellrun.core.session import Session


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's CELLRUN_* settings out of the tests."""
    for key in (*ENV_KEYS.values(), CONFIG_ENV, "CELLRUN_LOG_FORMAT", "CELLRUN_LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def diag_channel():
    """A private diagnostic channel, so tests never share message state."""
    return DiagnosticChannel()


@pytest.fixture
def buffered_channel():
    """A private channel writing into a StringIO."""
    return DiagnosticChannel(stream=io.StringIO())


@pytest.fixture
def session(diag_channel):
    """Fresh session on a private channel."""
    return Session(evaluator=PythonEvaluator(channel=diag_channel))
