"""SAML metadata parsing, signature verification and certificate handling.

This module provides functionality for:
- Parsing EntityDescriptor documents (lxml)
- Verifying enveloped XML signatures on metadata (signxml)
- Loading trusted signing certificates in PEM or DER form (cryptography)
"""

from saml_mdq.saml.certificate_manager import (
    check_expiration_warning,
    get_certificate_info,
    load_certificate_bytes,
    load_signing_certificate,
)
from saml_mdq.saml.parser import parse_entity_descriptor
from saml_mdq.saml.verifier import MetadataSignatureVerifier

__all__ = [
    "MetadataSignatureVerifier",
    "parse_entity_descriptor",
    "load_signing_certificate",
    "load_certificate_bytes",
    "get_certificate_info",
    "check_expiration_warning",
]
