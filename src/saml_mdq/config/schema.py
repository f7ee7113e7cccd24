"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class MDQConfig(BaseModel):
    """Configuration for the MDQ responder.

    Attributes:
        base_url: MDQ base URL (requests go to {base_url}/entities/...)
        timeout: Request timeout in seconds
        signing_cert_path: PEM or DER certificate used to verify responses
        use_sha1_lookup: Request {sha1}-transformed identifiers instead of
            URL-encoded ones
    """

    base_url: str = Field(..., description="MDQ base URL")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    signing_cert_path: Optional[Path] = Field(
        default=None,
        description="Trusted MDQ signing certificate (PEM or DER)",
    )
    use_sha1_lookup: bool = Field(
        default=False,
        description="Use {sha1} transformed identifiers in request paths",
    )

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL is valid HTTP/HTTPS.

        Raises:
            ValueError: If URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid URL: {v}. Must start with http:// or https://"
            )
        return v


class CacheConfig(BaseModel):
    """Configuration for the metadata cache.

    Attributes:
        enabled: Whether fetched metadata is cached
        max_entries: Maximum number of cached entities
        ttl_seconds: Lifetime of a cached entity
    """

    enabled: bool = True
    max_entries: int = Field(default=1000, ge=1, description="Cache capacity")
    ttl_seconds: float = Field(default=3600.0, gt=0, description="Entry TTL in seconds")


class TransportConfig(BaseModel):
    """Configuration for HTTP/HTTPS transport.

    Attributes:
        verify_tls: Whether to verify TLS certificates
        ca_bundle: Optional CA bundle file
        max_connections: Connection pool size
    """

    verify_tls: bool = True
    ca_bundle: Optional[Path] = None
    max_connections: int = Field(default=10, ge=1, le=100)


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level and normalise to uppercase."""
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Example:
        >>> config = Config(mdq=MDQConfig(base_url="https://mdq.incommon.org"))
        >>> config.cache.ttl_seconds
        3600.0
    """

    mdq: MDQConfig
    cache: CacheConfig = CacheConfig()
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()
