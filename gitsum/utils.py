"""Utility helpers for the project (logging, configuration, credentials)."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG = {
    "model": "gpt-3.5-turbo",
    "api_base": "https://api.openai.com/v1/chat/completions",
    "github_api_base": "https://api.github.com",
    "timeout": 60,
    "max_tokens": 4096,
    "max_completion_tokens": 2000,
    "temperature": 0.7,
    "top_p": 1.0,
    "presence_penalty": 0.0,
    "frequency_penalty": 0.0,
}

GITHUB_KEY_ENV = "GITHUB_KEY"
OPEN_AI_KEY_ENV = "OPEN_AI_KEY"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger for the application.

    The logger prints to stderr with a simple format. Multiple calls
    return the same logger instance (handlers are added only once).
    """
    logger_name = name or "gitsum"
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


logger = get_logger(__name__)


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yml. If None, looks for config.yml in project root.

    Returns:
        Dictionary with every key of DEFAULT_CONFIG, values from the file taking precedence.
    """
    if config_path is None:
        # Default to config.yml in project root (parent of gitsum/)
        config_path = Path(__file__).parent.parent / "config.yml"

    config = dict(DEFAULT_CONFIG)
    if not config_path.exists():
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return config

    if not isinstance(loaded, dict):
        logger.error(f"Config at {config_path} is not a mapping, using defaults")
        return config

    config.update({k: v for k, v in loaded.items() if v is not None})
    return config


def resolve_credential(value: Optional[str], env_var: str) -> str:
    """Return `value` if non-empty, else the environment variable `env_var`.

    Raises:
        ConfigurationError: If neither source provides a non-empty value.
    """
    if value:
        return value
    from_env = os.getenv(env_var, "")
    if not from_env:
        raise ConfigurationError(f"{env_var} environment variable not set")
    return from_env


def resolve_credentials(
    github_key: Optional[str] = None,
    open_ai_key: Optional[str] = None,
) -> tuple[str, str]:
    """Resolve the GitHub and OpenAI credentials, explicit values first."""
    return (
        resolve_credential(github_key, GITHUB_KEY_ENV),
        resolve_credential(open_ai_key, OPEN_AI_KEY_ENV),
    )


__all__ = [
    "DEFAULT_CONFIG",
    "get_logger",
    "load_config",
    "resolve_credential",
    "resolve_credentials",
]
