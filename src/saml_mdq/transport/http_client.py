"""HTTP transport for MDQ requests.

This module wraps a pooled requests.Session behind a narrow ``get`` method so
the metadata client can be exercised with test doubles that never touch the
network. The transport never retries; retry policy belongs to the caller.
"""

import logging
import ssl
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Optional, Protocol, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.ssl_ import create_urllib3_context

from ..utils.exceptions import TransportError

logger = logging.getLogger(__name__)

# Default connection pool settings
DEFAULT_MAX_CONNECTIONS = 10
DEFAULT_TIMEOUT = 10.0

# Media type registered for SAML metadata (MDQ responders honour it)
SAML_METADATA_MEDIA_TYPE = "application/samlmetadata+xml"


@dataclass(frozen=True)
class TransportResponse:
    """Status and raw body of an HTTP response.

    Attributes:
        status_code: HTTP status code
        content: Raw response body
        url: Final URL after redirects
    """

    status_code: int
    content: bytes
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class MetadataTransport(Protocol):
    """Anything able to perform an MDQ GET request."""

    def get(self, url: str, timeout: float) -> TransportResponse: ...

    def close(self) -> None: ...


class TLS12Adapter(HTTPAdapter):
    """Force TLS 1.2+ for HTTPS connections to MDQ responders."""

    def init_poolmanager(self, *args, **kwargs):
        context = create_urllib3_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        kwargs["ssl_context"] = context
        return super().init_poolmanager(*args, **kwargs)


@dataclass
class ConnectionPoolConfig:
    """Configuration for the HTTP transport.

    Attributes:
        timeout: Per-request timeout in seconds. Must be > 0.
        max_connections: Maximum pooled connections per host. Must be >= 1.
        verify_tls: Whether to verify server certificates.
        ca_bundle: Optional CA bundle file used instead of the default store.

    Example:
        >>> config = ConnectionPoolConfig(timeout=5, max_connections=20)
        >>> transport = HttpTransport(config)
    """

    timeout: float = DEFAULT_TIMEOUT
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    verify_tls: bool = True
    ca_bundle: Optional[Union[str, Path]] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.max_connections < 1:
            raise ValueError(
                f"max_connections must be >= 1, got {self.max_connections}"
            )
        if self.ca_bundle is not None and not Path(self.ca_bundle).is_file():
            raise ValueError(f"CA bundle not found: {self.ca_bundle}")


class HttpTransport:
    """Pooled HTTP transport backed by requests.

    The session is created eagerly so TLS and pool problems surface when
    the client is built rather than on the first fetch. Thread-safe: the
    session is shared by concurrent fetches.

    Example:
        >>> with HttpTransport(ConnectionPoolConfig(timeout=10)) as transport:
        ...     response = transport.get("https://mdq.example.org/entities/x", 10)
        ...     print(response.status_code)
    """

    def __init__(self, config: Optional[ConnectionPoolConfig] = None) -> None:
        """Initialize transport and its session.

        Args:
            config: Transport configuration. Uses defaults if not provided.

        Raises:
            TransportError: If the session cannot be constructed
        """
        self.config = config or ConnectionPoolConfig()
        self._lock = Lock()
        try:
            self._session: Optional[requests.Session] = self._create_session()
        except (ssl.SSLError, OSError, ValueError) as e:
            raise TransportError(f"Failed to initialize HTTP transport: {e}") from e

    def _create_session(self) -> requests.Session:
        adapter = TLS12Adapter(
            pool_connections=self.config.max_connections,
            pool_maxsize=self.config.max_connections,
            max_retries=0,
        )

        session = requests.Session()
        session.mount("https://", adapter)
        session.mount(
            "http://",
            HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
                max_retries=0,
            ),
        )
        session.headers["Accept"] = SAML_METADATA_MEDIA_TYPE

        if self.config.ca_bundle is not None:
            session.verify = str(self.config.ca_bundle)
        else:
            session.verify = self.config.verify_tls

        logger.debug(
            "Created HTTP session with pool_maxsize=%d, verify_tls=%s",
            self.config.max_connections,
            session.verify,
        )
        return session

    def get(self, url: str, timeout: Optional[float] = None) -> TransportResponse:
        """Perform a GET request.

        Args:
            url: Absolute request URL
            timeout: Timeout in seconds; the configured timeout if None

        Returns:
            TransportResponse with status code and raw body

        Raises:
            TransportError: On connection, TLS or timeout failures
        """
        with self._lock:
            session = self._session
        if session is None:
            raise TransportError("HTTP transport is closed")

        try:
            response = session.get(url, timeout=timeout or self.config.timeout)
        except requests.Timeout as e:
            raise TransportError(f"Request to {url} timed out: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"HTTP request to {url} failed: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            url=response.url,
        )

    def close(self) -> None:
        """Close the session and release pooled connections."""
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None
                logger.debug("HTTP transport closed")

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
