"""
Configuration loader for commitbot.

Settings are read from two optional JSON files and merged: the global
``~/.config/commitbot/config.json`` and a per-repository
``.commitbot.json`` in the repository root, the latter winning. The
environment variables ``COMMITBOT_MODEL`` and ``COMMITBOT_PROVIDER``
override both files. Missing files are not an error; malformed JSON,
unknown providers or values of the wrong type raise :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


CONFIG_FILE_NAME = "config.json"
REPO_CONFIG_FILE_NAME = ".commitbot.json"
PROVIDERS = ("openai", "ollama", "none")

DEFAULTS: Dict[str, Any] = {
    "provider": "openai",
    "model": "gpt-5-nano",
    "base_url": "http://localhost",
    "port": 11434,
    "request_timeout": 90,
    "max_subject_length": 72,
    "max_tokens": None,
    "stream": False,
}

_EXPECTED_TYPES: Dict[str, Any] = {
    "provider": str,
    "model": str,
    "base_url": str,
    "port": int,
    "request_timeout": (int, float),
    "max_subject_length": int,
    "max_tokens": int,
    "stream": bool,
}

_ENV_OVERRIDES = {
    "COMMITBOT_MODEL": "model",
    "COMMITBOT_PROVIDER": "provider",
}


class ConfigError(Exception):
    """Raised when a configuration file is malformed or invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the directory holding the global configuration file."""
    return Path.home() / ".config" / "commitbot"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug("Configuration file '%s' does not exist; skipping", path)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("Failed to read or parse configuration file %s: %s", path, exc)
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    logger.debug("Loaded configuration from: %s", path)
    return data


def _validate(config: Mapping[str, Any]) -> None:
    for key, value in config.items():
        expected = _EXPECTED_TYPES.get(key)
        if expected is None:
            logger.warning("Ignoring unknown configuration key '%s'", key)
            continue
        if value is None and DEFAULTS.get(key) is None:
            continue
        # bool is a subclass of int; only accept it where a bool is expected
        if isinstance(value, bool) and expected is not bool:
            raise ConfigError(f"'{key}' must be of type {_type_name(expected)}")
        if not isinstance(value, expected):
            raise ConfigError(f"'{key}' must be of type {_type_name(expected)}")
    if config.get("provider") not in PROVIDERS:
        raise ConfigError(f"'provider' must be one of: {', '.join(PROVIDERS)}")
    if config.get("max_subject_length", 1) <= 0:
        raise ConfigError("'max_subject_length' must be positive")
    if config.get("request_timeout", 1) <= 0:
        raise ConfigError("'request_timeout' must be positive")


def _type_name(expected: Any) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def load_config(repo_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load and merge the commitbot configuration.

    Args:
        repo_root: Repository root holding an optional ``.commitbot.json``.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        A dictionary with every key of :data:`DEFAULTS`.

    Raises:
        ConfigError: If a file is malformed or a value is invalid.
    """
    environ = os.environ if environ is None else environ
    config: Dict[str, Any] = dict(DEFAULTS)
    config.update(_read_json(_get_config_directory() / CONFIG_FILE_NAME))
    if repo_root is not None:
        config.update(_read_json(repo_root / REPO_CONFIG_FILE_NAME))

    for variable, key in _ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            logger.debug("Using %s from %s", key, variable)
            config[key] = value.lower() if key == "provider" else value

    # A model named "none" disables model calls like --no-model does
    if str(config.get("model", "")).lower() == "none":
        config["provider"] = "none"

    _validate(config)
    logger.debug("Configuration data: %s", config)
    return config
