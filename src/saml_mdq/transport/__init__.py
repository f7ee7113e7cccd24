"""HTTP transport for MDQ lookups."""

from saml_mdq.transport.http_client import (
    HttpTransport,
    MetadataTransport,
    ConnectionPoolConfig,
    TransportResponse,
)

__all__ = [
    "HttpTransport",
    "MetadataTransport",
    "ConnectionPoolConfig",
    "TransportResponse",
]
