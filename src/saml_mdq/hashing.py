"""Lookup key derivation for MDQ requests.

The MDQ protocol addresses an entity either by its URL-encoded identifier or
by the transformed identifier ``{sha1}<hex digest>``. Both forms are derived
here from the UTF-8 bytes of the entity identifier.
"""

import hashlib
from urllib.parse import quote, quote_plus

# Prefix of the MDQ transformed identifier
SHA1_TRANSFORM_PREFIX = "{sha1}"


def hash_entity_id(entity_id: str) -> str:
    """Convert an entityID to its SHA-1 hex digest for MDQ lookup.

    Args:
        entity_id: Entity identifier, any string including empty.

    Returns:
        40 character lowercase hexadecimal digest.

    Example:
        >>> hash_entity_id("https://login.cmu.edu/idp/shibboleth")
        'eae8d5aaf1ba1a6f08f0c66bb31b147974bd7560'
    """
    # surrogatepass keeps lone surrogates (e.g. from os.fsdecode) encodable
    return hashlib.sha1(entity_id.encode("utf-8", "surrogatepass")).hexdigest()


def encode_entity_id(entity_id: str) -> str:
    """URL-encode an entityID for MDQ lookup.

    Uses form encoding: alphanumerics and ``*-._`` are kept, space becomes
    ``+`` and every other byte is percent-escaped.

    Example:
        >>> encode_entity_id("https://idp.example.org/shibboleth")
        'https%3A%2F%2Fidp.example.org%2Fshibboleth'
    """
    # quote_plus leaves "~" alone, form encoding escapes it
    return quote_plus(entity_id.encode("utf-8", "surrogatepass"), safe="*").replace("~", "%7E")


def sha1_lookup_segment(entity_id: str) -> str:
    """Path segment for the ``{sha1}`` transformed identifier."""
    return quote(SHA1_TRANSFORM_PREFIX + hash_entity_id(entity_id), safe="")
