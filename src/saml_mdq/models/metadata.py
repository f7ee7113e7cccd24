"""Data models for parsed SAML 2.0 entity metadata.

All models are frozen dataclasses holding tuples, so a parsed
EntityMetadata can be shared between the cache and callers without copying.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional, Tuple

# Signing use value on KeyDescriptor elements
KEY_USE_SIGNING = "signing"


@dataclass(frozen=True)
class Endpoint:
    """Protocol endpoint (e.g. SingleSignOnService, SingleLogoutService).

    Attributes:
        binding: SAML binding URI
        location: Endpoint URL
        response_location: Optional separate response URL
    """

    binding: str
    location: str
    response_location: Optional[str] = None


@dataclass(frozen=True)
class IndexedEndpoint(Endpoint):
    """Indexed endpoint such as an AssertionConsumerService.

    Attributes:
        index: Endpoint index
        is_default: Value of the isDefault attribute, if present
    """

    index: int = 0
    is_default: Optional[bool] = None


@dataclass(frozen=True)
class KeyDescriptor:
    """Key material published for a role.

    Attributes:
        use: "signing", "encryption" or None when usable for both
        certificates: Base64 X509Certificate values, whitespace removed
    """

    use: Optional[str]
    certificates: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContactPerson:
    """Contact person published in metadata."""

    contact_type: str
    company: Optional[str] = None
    given_name: Optional[str] = None
    surname: Optional[str] = None
    email_addresses: Tuple[str, ...] = ()
    telephone_numbers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Organization:
    """Organization element (first value of each localized list)."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class IdPSSODescriptor:
    """Identity provider role descriptor.

    Attributes:
        protocol_support_enumeration: Space separated protocol URIs
        want_authn_requests_signed: WantAuthnRequestsSigned attribute
        single_sign_on_services: SSO endpoints in document order
        single_logout_services: SLO endpoints in document order
        key_descriptors: Published keys
        name_id_formats: Supported NameID formats
    """

    protocol_support_enumeration: str
    want_authn_requests_signed: Optional[bool] = None
    single_sign_on_services: Tuple[Endpoint, ...] = ()
    single_logout_services: Tuple[Endpoint, ...] = ()
    key_descriptors: Tuple[KeyDescriptor, ...] = ()
    name_id_formats: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SPSSODescriptor:
    """Service provider role descriptor."""

    protocol_support_enumeration: str
    authn_requests_signed: Optional[bool] = None
    want_assertions_signed: Optional[bool] = None
    assertion_consumer_services: Tuple[IndexedEndpoint, ...] = ()
    single_logout_services: Tuple[Endpoint, ...] = ()
    key_descriptors: Tuple[KeyDescriptor, ...] = ()
    name_id_formats: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityMetadata:
    """Parsed SAML EntityDescriptor.

    Attributes:
        entity_id: entityID attribute
        id: XML ID attribute referenced by the signature, if any
        valid_until: validUntil attribute
        cache_duration: cacheDuration attribute (xs:duration string)
        idp_sso_descriptors: Identity provider roles
        sp_sso_descriptors: Service provider roles
        organization: Organization details
        contact_persons: Contact persons in document order

    Example:
        >>> metadata = client.fetch_entity("https://login.cmu.edu/idp/shibboleth")
        >>> for endpoint in metadata.single_sign_on_endpoints():
        ...     print(endpoint.binding, endpoint.location)
    """

    entity_id: str
    id: Optional[str] = None
    valid_until: Optional[datetime] = None
    cache_duration: Optional[str] = None
    idp_sso_descriptors: Tuple[IdPSSODescriptor, ...] = ()
    sp_sso_descriptors: Tuple[SPSSODescriptor, ...] = ()
    organization: Optional[Organization] = None
    contact_persons: Tuple[ContactPerson, ...] = ()

    @property
    def is_identity_provider(self) -> bool:
        return bool(self.idp_sso_descriptors)

    @property
    def is_service_provider(self) -> bool:
        return bool(self.sp_sso_descriptors)

    def single_sign_on_endpoints(self, binding: Optional[str] = None) -> Iterator[Endpoint]:
        """Yield SSO endpoints of all IdP roles, optionally for one binding."""
        for descriptor in self.idp_sso_descriptors:
            for endpoint in descriptor.single_sign_on_services:
                if binding is None or endpoint.binding == binding:
                    yield endpoint

    def signing_certificates(self) -> Tuple[str, ...]:
        """Base64 certificates usable for signing across all roles.

        KeyDescriptors without a use attribute count as signing keys.
        """
        certificates = []
        for descriptor in (*self.idp_sso_descriptors, *self.sp_sso_descriptors):
            for key in descriptor.key_descriptors:
                if key.use not in (None, KEY_USE_SIGNING):
                    continue
                for cert in key.certificates:
                    if cert not in certificates:
                        certificates.append(cert)
        return tuple(certificates)
