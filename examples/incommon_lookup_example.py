"""Look up InCommon entities through the MDQ service.

This module demonstrates a plain lookup, a cached and signature-verified
lookup, and error handling driven by the error category.

Run from the project root:
    python examples/incommon_lookup_example.py [path/to/inc-md-cert-mdq.pem]
"""

import logging
import sys
from pathlib import Path

from saml_mdq import MDQClient, MDQError, MetadataCache
from saml_mdq.saml.certificate_manager import load_signing_certificate
from saml_mdq.utils.exceptions import ErrorCategory, create_error_info

# Configure logging to see cache hits and requests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

INCOMMON_MDQ_URL = "https://mdq.incommon.org"
ENTITY_ID = "https://login.cmu.edu/idp/shibboleth"


def example_1_fetch_entity():
    """Example 1: Fetch one entity and print its SSO endpoints."""
    print("=" * 80)
    print("EXAMPLE 1: Fetching metadata")
    print("=" * 80)
    print(f"Fetching metadata for: {ENTITY_ID}")

    with MDQClient.builder(INCOMMON_MDQ_URL).build() as client:
        metadata = client.fetch_entity(ENTITY_ID)

    print(f"Entity ID: {metadata.entity_id}")
    for endpoint in metadata.single_sign_on_endpoints():
        print(f"SSO endpoint: {endpoint.location}")
    print()


def example_2_verified_and_cached(cert_path: Path):
    """Example 2: Verify signatures and serve repeat lookups from cache.

    The InCommon MDQ signing certificate is published at
    https://md.incommon.org/certs/inc-md-cert-mdq.pem
    """
    print("=" * 80)
    print("EXAMPLE 2: Signature verification and caching")
    print("=" * 80)

    client = (
        MDQClient.builder(INCOMMON_MDQ_URL)
        .signing_cert(load_signing_certificate(cert_path))
        .cache(MetadataCache(max_entries=100, ttl=600))
        .timeout(5)
        .build()
    )
    with client:
        client.fetch_entity(ENTITY_ID)
        # Served from the cache, no request is logged
        metadata = client.fetch_entity(ENTITY_ID)

    print(f"Verified metadata for {metadata.entity_id}, valid until {metadata.valid_until}")
    print()


def example_3_error_handling():
    """Example 3: Decide what to do with a failed lookup."""
    print("=" * 80)
    print("EXAMPLE 3: Error handling")
    print("=" * 80)

    with MDQClient.builder(INCOMMON_MDQ_URL).build() as client:
        try:
            client.fetch_entity("https://nonexistent.example.invalid/idp")
        except MDQError as e:
            info = create_error_info(e)
            print(f"{info.error_type}: {info.message}")
            if info.category == ErrorCategory.TRANSIENT:
                print("Retry later.")
            else:
                print(f"Not retrying. {info.remediation}")
    print()


if __name__ == "__main__":
    example_1_fetch_entity()
    if len(sys.argv) > 1:
        example_2_verified_and_cached(Path(sys.argv[1]))
    example_3_error_handling()
