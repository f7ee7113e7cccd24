"""MDQ client for fetching SAML entity metadata.

This module provides the client that looks up a single entity's metadata
from an MDQ responder: cache lookup, request, optional signature
verification, parsing and cache population.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Union

from .cache import MetadataCache
from .hashing import encode_entity_id, sha1_lookup_segment
from .models.metadata import EntityMetadata
from .saml.parser import parse_entity_descriptor
from .saml.verifier import DEFAULT_ID_ATTRIBUTE, MetadataSignatureVerifier
from .transport.http_client import (
    DEFAULT_MAX_CONNECTIONS,
    ConnectionPoolConfig,
    HttpTransport,
    MetadataTransport,
)
from .utils.exceptions import (
    EntityNotFoundError,
    InvalidEntityIdError,
    InvalidXMLError,
    MDQError,
    TransportError,
)

if TYPE_CHECKING:
    from .config.schema import Config

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_WORKERS = 4


class MDQClientBuilder:
    """Fluent builder for MDQClient.

    Settings are only validated when build() is called.

    Example:
        >>> client = (
        ...     MDQClient.builder("https://mdq.incommon.org/")
        ...     .cache(MetadataCache(max_entries=100, ttl=300))
        ...     .signing_cert(cert_der)
        ...     .timeout(5)
        ...     .build()
        ... )
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url
        self._cache: Optional[MetadataCache] = None
        self._signing_cert: Optional[bytes] = None
        self._timeout: float = DEFAULT_TIMEOUT_SECONDS
        self._use_sha1_lookup = False
        self._verify_tls = True
        self._ca_bundle: Optional[Union[str, Path]] = None
        self._max_connections = DEFAULT_MAX_CONNECTIONS
        self._transport: Optional[MetadataTransport] = None

    def cache(self, cache: MetadataCache) -> "MDQClientBuilder":
        """Cache parsed metadata in the given cache."""
        self._cache = cache
        return self

    def signing_cert(self, cert_der: bytes) -> "MDQClientBuilder":
        """Verify every response against this DER encoded certificate."""
        self._signing_cert = bytes(cert_der)
        return self

    def timeout(self, timeout: Union[float, timedelta]) -> "MDQClientBuilder":
        """Per-request timeout in seconds (default 10)."""
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self._timeout = timeout
        return self

    def use_sha1_lookup(self, enabled: bool = True) -> "MDQClientBuilder":
        """Request ``{sha1}`` transformed identifiers instead of encoded ones."""
        self._use_sha1_lookup = enabled
        return self

    def verify_tls(self, enabled: bool) -> "MDQClientBuilder":
        self._verify_tls = enabled
        return self

    def ca_bundle(self, path: Union[str, Path]) -> "MDQClientBuilder":
        self._ca_bundle = path
        return self

    def max_connections(self, count: int) -> "MDQClientBuilder":
        self._max_connections = count
        return self

    def transport(self, transport: MetadataTransport) -> "MDQClientBuilder":
        """Use a custom transport instead of the default requests session."""
        self._transport = transport
        return self

    def build(self) -> "MDQClient":
        """Construct the client.

        Returns:
            Configured MDQClient

        Raises:
            TransportError: If the HTTP transport cannot be initialized
                (invalid timeout, pool size or CA bundle, TLS setup failure)
        """
        transport = self._transport
        if transport is None:
            try:
                pool_config = ConnectionPoolConfig(
                    timeout=self._timeout,
                    max_connections=self._max_connections,
                    verify_tls=self._verify_tls,
                    ca_bundle=self._ca_bundle,
                )
            except ValueError as e:
                raise TransportError(f"Failed to initialize HTTP transport: {e}") from e
            transport = HttpTransport(pool_config)
        elif self._timeout <= 0:
            raise TransportError(f"timeout must be > 0, got {self._timeout}")

        return MDQClient(
            base_url=_normalize_base_url(self._base_url),
            transport=transport,
            timeout=self._timeout,
            cache=self._cache,
            signing_cert=self._signing_cert,
            use_sha1_lookup=self._use_sha1_lookup,
        )


class MDQClient:
    """Client for the SAML Metadata Query protocol.

    Holds no mutable state of its own after construction, so one instance
    can be shared across threads. The optional cache and the transport are
    thread-safe.

    Example:
        >>> client = MDQClient.builder("https://mdq.incommon.org").build()
        >>> metadata = client.fetch_entity("https://login.cmu.edu/idp/shibboleth")
        >>> metadata.entity_id
        'https://login.cmu.edu/idp/shibboleth'
    """

    def __init__(
        self,
        base_url: str,
        transport: MetadataTransport,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        cache: Optional[MetadataCache] = None,
        signing_cert: Optional[bytes] = None,
        use_sha1_lookup: bool = False,
    ) -> None:
        self._base_url = base_url
        self._transport = transport
        self._timeout = timeout
        self._cache = cache
        self._signing_cert = signing_cert
        self._verifier = (
            MetadataSignatureVerifier(signing_cert) if signing_cert is not None else None
        )
        self._use_sha1_lookup = use_sha1_lookup

        logger.debug(
            f"MDQClient initialized: base_url={base_url}, timeout={timeout}s, "
            f"cache={'enabled' if cache is not None else 'disabled'}, "
            f"signature verification={'enabled' if self._verifier else 'disabled'}"
        )

    @staticmethod
    def builder(base_url: str) -> MDQClientBuilder:
        return MDQClientBuilder(base_url)

    @classmethod
    def from_config(cls, config: "Config") -> "MDQClient":
        """Build a client from a loaded Config.

        Raises:
            CertificateLoadError: If the configured signing certificate
                cannot be loaded
            TransportError: If the HTTP transport cannot be initialized
        """
        from .saml.certificate_manager import load_signing_certificate

        builder = (
            cls.builder(config.mdq.base_url)
            .timeout(config.mdq.timeout)
            .use_sha1_lookup(config.mdq.use_sha1_lookup)
            .verify_tls(config.transport.verify_tls)
            .max_connections(config.transport.max_connections)
        )
        if config.transport.ca_bundle is not None:
            builder.ca_bundle(config.transport.ca_bundle)
        if config.mdq.signing_cert_path is not None:
            builder.signing_cert(load_signing_certificate(config.mdq.signing_cert_path))
        if config.cache.enabled:
            builder.cache(
                MetadataCache(
                    max_entries=config.cache.max_entries,
                    ttl=config.cache.ttl_seconds,
                )
            )
        return builder.build()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def cache(self) -> Optional[MetadataCache]:
        return self._cache

    @property
    def signing_cert(self) -> Optional[bytes]:
        return self._signing_cert

    def entity_url(self, entity_id: str) -> str:
        """Request URL for an entity under the configured lookup mode."""
        if self._use_sha1_lookup:
            segment = sha1_lookup_segment(entity_id)
        else:
            segment = encode_entity_id(entity_id)
        return f"{self._base_url}/entities/{segment}"

    def fetch_entity(self, entity_id: str) -> EntityMetadata:
        """Fetch metadata for an entity by its entityID.

        Cached metadata is returned without network access. Otherwise the
        document is requested, verified when a signing certificate is
        configured, parsed and cached.

        Args:
            entity_id: Entity identifier

        Returns:
            Parsed EntityMetadata

        Raises:
            TransportError: Connection, TLS or timeout failure
            EntityNotFoundError: Responder returned 404
            InvalidXMLError: Any other non-success status, or unparseable XML
            SignatureError: Signature verification failed
            InvalidEntityIdError: entity_id is not a string
        """
        if not isinstance(entity_id, str):
            raise InvalidEntityIdError(entity_id)

        if self._cache is not None:
            cached = self._cache.get(entity_id)
            if cached is not None:
                logger.debug(f"Cache hit for {entity_id}")
                return cached
            logger.debug(f"Cache miss for {entity_id}")

        url = self.entity_url(entity_id)
        logger.info(f"Fetching metadata for {entity_id} from {url}")

        response = self._transport.get(url, self._timeout)

        if response.status_code == 404:
            logger.info(f"Entity not found: {entity_id}")
            raise EntityNotFoundError(entity_id)

        if not response.ok:
            logger.warning(
                f"MDQ server returned status {response.status_code} for {entity_id}"
            )
            raise InvalidXMLError(
                f"MDQ server returned status {response.status_code}",
                status_code=response.status_code,
            )

        document = response.content
        if self._verifier is not None:
            document = self._verifier.verify(document, id_attribute=DEFAULT_ID_ATTRIBUTE)

        metadata = parse_entity_descriptor(document)

        if self._cache is not None:
            self._cache.insert(entity_id, metadata)

        return metadata

    def fetch_entities(
        self,
        entity_ids: Iterable[str],
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> Dict[str, Union[EntityMetadata, MDQError]]:
        """Fetch several entities concurrently on a thread pool.

        Failures do not abort the batch; each identifier maps to either its
        metadata or the MDQError raised while fetching it.

        Args:
            entity_ids: Entity identifiers (duplicates are fetched once)
            max_workers: Thread pool size

        Returns:
            Dict keyed by entity identifier, in input order
        """
        unique_ids = list(dict.fromkeys(entity_ids))
        results: Dict[str, Union[EntityMetadata, MDQError]] = {}
        if not unique_ids:
            return results

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            futures = {
                executor.submit(self.fetch_entity, entity_id): entity_id
                for entity_id in unique_ids
            }
            for future in as_completed(futures):
                entity_id = futures[future]
                try:
                    results[entity_id] = future.result()
                except MDQError as e:
                    logger.warning(f"Failed to fetch {entity_id}: {e}")
                    results[entity_id] = e

        return {entity_id: results[entity_id] for entity_id in unique_ids}

    def close(self) -> None:
        """Release the transport's pooled connections."""
        self._transport.close()

    def __enter__(self) -> "MDQClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _normalize_base_url(base_url: str) -> str:
    return base_url.rstrip("/")
