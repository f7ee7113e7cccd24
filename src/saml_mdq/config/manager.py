"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading functionality, including
support for JSON configuration files, .env files, environment variable
overrides and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from saml_mdq.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from saml_mdq.config.schema import Config
from saml_mdq.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SAML_MDQ_"


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string (case-insensitive)."""
    return value.lower() in ("true", "1", "yes", "on")


# (variable suffix, section, field, converter)
ENV_OVERRIDES: list[tuple[str, str, str, Callable[[str], Any]]] = [
    ("BASE_URL", "mdq", "base_url", str),
    ("TIMEOUT", "mdq", "timeout", float),
    ("SIGNING_CERT", "mdq", "signing_cert_path", str),
    ("USE_SHA1", "mdq", "use_sha1_lookup", _parse_bool),
    ("CACHE_ENABLED", "cache", "enabled", _parse_bool),
    ("CACHE_MAX_ENTRIES", "cache", "max_entries", int),
    ("CACHE_TTL", "cache", "ttl_seconds", float),
    ("VERIFY_TLS", "transport", "verify_tls", _parse_bool),
    ("CA_BUNDLE", "transport", "ca_bundle", str),
    ("MAX_CONNECTIONS", "transport", "max_connections", int),
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "log_file", str),
]


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. CLI arguments (handled by caller)
    2. Environment variables (SAML_MDQ_* prefix, .env honoured)
    3. Configuration file (JSON)
    4. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.mdq.base_url
        'https://mdq.incommon.org'
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and "
            f"{ENV_PREFIX}* environment variables."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Raises:
        ConfigurationError: If JSON is malformed or unreadable
    """
    if not config_path.exists():
        logger.info(
            f"Config file not found: {config_path}. Using default configuration."
        )
        # Deep copy so callers cannot mutate the defaults
        return json.loads(json.dumps(DEFAULT_CONFIG))

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in config file: {config_path}\n"
            f"Error: {e}\n"
            f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read config file: {config_path}\n"
            f"Error: {e}\n"
            f"Fix: Check file permissions and path"
        ) from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a JSON object"
        )

    logger.info(f"Loaded configuration from {config_path}")
    return config_dict


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SAML_MDQ_ prefix.

    Raises:
        ConfigurationError: If a numeric override cannot be converted
    """
    for suffix, section, field, convert in ENV_OVERRIDES:
        name = f"{ENV_PREFIX}{suffix}"
        if raw := os.getenv(name):
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {name}: {raw!r} ({e})"
                ) from e
            config_dict.setdefault(section, {})[field] = value
            logger.debug(f"Override: {field} from environment")

    return config_dict
