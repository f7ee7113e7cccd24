"""SAML Metadata Query (MDQ) client.

Fetches individual SAML entity descriptors from an MDQ responder, with
optional XML signature verification and an in-memory result cache.

Example:
    >>> from saml_mdq import MDQClient, MetadataCache
    >>> client = (
    ...     MDQClient.builder("https://mdq.incommon.org")
    ...     .cache(MetadataCache(max_entries=100, ttl=300))
    ...     .build()
    ... )
    >>> metadata = client.fetch_entity("https://login.cmu.edu/idp/shibboleth")
"""

__version__ = "0.1.0"

from saml_mdq.cache import MetadataCache
from saml_mdq.client import MDQClient, MDQClientBuilder
from saml_mdq.hashing import encode_entity_id, hash_entity_id, sha1_lookup_segment
from saml_mdq.models.metadata import EntityMetadata
from saml_mdq.utils.exceptions import (
    EntityNotFoundError,
    InvalidEntityIdError,
    InvalidXMLError,
    MDQError,
    SignatureError,
    TransportError,
)

__all__ = [
    "__version__",
    "MDQClient",
    "MDQClientBuilder",
    "MetadataCache",
    "EntityMetadata",
    "hash_entity_id",
    "encode_entity_id",
    "sha1_lookup_segment",
    "MDQError",
    "TransportError",
    "EntityNotFoundError",
    "InvalidXMLError",
    "SignatureError",
    "InvalidEntityIdError",
]
