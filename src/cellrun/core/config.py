"""Session configuration.

Values resolve with priority: argument > environment > config file > default.

Environment Variables:
    CELLRUN_CONFIG: Path to a YAML config file
    CELLRUN_HISTORY_FILE: JSONL file to persist In/Out history to
    CELLRUN_ECHO_DIAGNOSTICS: "1"/"true" to have front ends print diagnostics
    CELLRUN_PROMPT: Input prompt template, "{n}" is the next execution index
    CELLRUN_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

Config file (YAML):
    history_file: ~/.cellrun/history.jsonl
    echo_diagnostics: true
    prompt: "In [{n}]: "
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "CELLRUN_CONFIG"

ENV_KEYS = {
    "history_file": "CELLRUN_HISTORY_FILE",
    "echo_diagnostics": "CELLRUN_ECHO_DIAGNOSTICS",
    "prompt": "CELLRUN_PROMPT",
    "log_level": "CELLRUN_LOG_LEVEL",
}


class ConfigError(Exception):
    """Invalid or unreadable configuration."""

    pass


@dataclass
class SessionConfig:
    """Session configuration.

    Attributes:
        history_file: JSONL file for history persistence (None = memory only).
        echo_diagnostics: Whether front ends print the diagnostics text.
        prompt: Input prompt template.
        log_level: Log level for configure_logging().
    """

    history_file: str | None = None
    echo_diagnostics: bool = True
    prompt: str = "In [{n}]: "
    log_level: str = "INFO"

    def format_prompt(self, n: int) -> str:
        return self.prompt.format(n=n)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _read_file(path: str) -> dict[str, Any]:
    try:
        content = Path(path).expanduser().read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(config_file: str | None = None, **overrides: Any) -> SessionConfig:
    """Build a SessionConfig from arguments, environment and config file.

    Args:
        config_file: YAML file path. Defaults to CELLRUN_CONFIG if set.
        **overrides: Explicit values; None means "not given".

    Raises:
        ConfigError: If the config file is unreadable or malformed.
    """
    file_config: dict[str, Any] = {}
    config_path = config_file or os.environ.get(CONFIG_ENV)
    if config_path:
        file_config = _read_file(config_path)
        logger.debug(f"config_loaded: path={config_path}, keys={sorted(file_config)}")

    values: dict[str, Any] = {}
    for f in fields(SessionConfig):
        arg = overrides.get(f.name)
        env_val = os.environ.get(ENV_KEYS[f.name])
        if arg is not None:
            values[f.name] = arg
        elif env_val:
            values[f.name] = env_val
        elif file_config.get(f.name) is not None:
            values[f.name] = file_config[f.name]

    if "echo_diagnostics" in values:
        values["echo_diagnostics"] = _to_bool(values["echo_diagnostics"])
    if "history_file" in values:
        values["history_file"] = str(values["history_file"])

    return SessionConfig(**values)
