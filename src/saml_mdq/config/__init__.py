"""Configuration models and loader for the saml-mdq client and CLI."""

from saml_mdq.config.manager import load_config
from saml_mdq.config.schema import (
    CacheConfig,
    Config,
    LoggingConfig,
    MDQConfig,
    TransportConfig,
)

__all__ = [
    "load_config",
    "Config",
    "MDQConfig",
    "CacheConfig",
    "TransportConfig",
    "LoggingConfig",
]
