"""Data models for entity metadata and signing certificates."""

from saml_mdq.models.certificate import CertificateInfo
from saml_mdq.models.metadata import (
    ContactPerson,
    Endpoint,
    EntityMetadata,
    IdPSSODescriptor,
    IndexedEndpoint,
    KeyDescriptor,
    Organization,
    SPSSODescriptor,
)

__all__ = [
    "CertificateInfo",
    "ContactPerson",
    "Endpoint",
    "EntityMetadata",
    "IdPSSODescriptor",
    "IndexedEndpoint",
    "KeyDescriptor",
    "Organization",
    "SPSSODescriptor",
]
