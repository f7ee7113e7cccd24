"""
Shared pytest configuration and fixtures.

This module provides fixtures used across the unit and integration suites:
throwaway signing certificates, sample EntityDescriptor documents (signed
and unsigned) and an in-memory transport that never touches the network.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, NamedTuple, Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from lxml import etree
from signxml import DigestAlgorithm, SignatureMethod, XMLSigner

from saml_mdq.transport.http_client import TransportResponse


IDP_ENTITY_ID = "https://idp.example.org/shibboleth"
SP_ENTITY_ID = "https://sp.example.org/shibboleth-sp"
MDQ_BASE_URL = "https://mdq.example.org"

SAML2_PROTOCOL = "urn:oasis:names:tc:SAML:2.0:protocol"
HTTP_REDIRECT = "urn:oasis:names:tc:SAML:2.0:bindings:HTTP-Redirect"
HTTP_POST = "urn:oasis:names:tc:SAML:2.0:bindings:HTTP-POST"


class SigningMaterial(NamedTuple):
    """Key and certificate used to sign test metadata."""

    key_pem: bytes
    cert_pem: bytes
    cert_der: bytes
    certificate: x509.Certificate


def generate_signing_material(
    common_name: str = "Test MDQ Signer",
    days_valid: int = 365,
) -> SigningMaterial:
    """Generate a self-signed RSA certificate suitable for signxml.

    Args:
        common_name: Subject CN of the certificate
        days_valid: Days until the certificate expires

    Returns:
        SigningMaterial with PEM key, PEM and DER certificate
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Federation"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])

    now = datetime.now(timezone.utc)
    cert = x509.CertificateBuilder().subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        private_key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        now - timedelta(days=1)
    ).not_valid_after(
        now + timedelta(days=days_valid)
    ).add_extension(
        x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
        critical=False,
    ).add_extension(
        x509.AuthorityKeyIdentifier.from_issuer_public_key(private_key.public_key()),
        critical=False,
    ).add_extension(
        x509.BasicConstraints(ca=False, path_length=None),
        critical=True,
    ).sign(private_key, hashes.SHA256())

    key_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return SigningMaterial(
        key_pem=key_pem,
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
        cert_der=cert.public_bytes(serialization.Encoding.DER),
        certificate=cert,
    )


def build_entity_descriptor(
    entity_id: str = IDP_ENTITY_ID,
    descriptor_id: str = "_mdq-test-entity",
    role: str = "idp",
    cert_b64: str = "MIIBfakeCertificateForMetadataTests==",
) -> bytes:
    """Build an unsigned EntityDescriptor document.

    Args:
        entity_id: entityID attribute value
        descriptor_id: ID attribute value
        role: "idp" for an IDPSSODescriptor, "sp" for an SPSSODescriptor
        cert_b64: Base64 text placed in the KeyDescriptor

    Returns:
        UTF-8 encoded document with XML declaration
    """
    if role == "idp":
        role_xml = f"""
  <md:IDPSSODescriptor protocolSupportEnumeration="{SAML2_PROTOCOL}">
    <md:KeyDescriptor use="signing">
      <ds:KeyInfo>
        <ds:X509Data>
          <ds:X509Certificate>
            {cert_b64}
          </ds:X509Certificate>
        </ds:X509Data>
      </ds:KeyInfo>
    </md:KeyDescriptor>
    <md:NameIDFormat>urn:oasis:names:tc:SAML:2.0:nameid-format:transient</md:NameIDFormat>
    <md:SingleSignOnService Binding="{HTTP_REDIRECT}" Location="https://idp.example.org/idp/profile/SAML2/Redirect/SSO"/>
    <md:SingleSignOnService Binding="{HTTP_POST}" Location="https://idp.example.org/idp/profile/SAML2/POST/SSO"/>
  </md:IDPSSODescriptor>"""
    else:
        role_xml = f"""
  <md:SPSSODescriptor protocolSupportEnumeration="{SAML2_PROTOCOL}" AuthnRequestsSigned="true" WantAssertionsSigned="false">
    <md:KeyDescriptor>
      <ds:KeyInfo>
        <ds:X509Data>
          <ds:X509Certificate>{cert_b64}</ds:X509Certificate>
        </ds:X509Data>
      </ds:KeyInfo>
    </md:KeyDescriptor>
    <md:SingleLogoutService Binding="{HTTP_REDIRECT}" Location="https://sp.example.org/Shibboleth.sso/SLO/Redirect"/>
    <md:AssertionConsumerService Binding="{HTTP_POST}" Location="https://sp.example.org/Shibboleth.sso/SAML2/POST" index="1" isDefault="true"/>
    <md:AssertionConsumerService Binding="{HTTP_REDIRECT}" Location="https://sp.example.org/Shibboleth.sso/SAML2/Redirect" index="2"/>
  </md:SPSSODescriptor>"""

    document = f"""<?xml version="1.0" encoding="UTF-8"?>
<md:EntityDescriptor xmlns:md="urn:oasis:names:tc:SAML:2.0:metadata"
                     xmlns:ds="http://www.w3.org/2000/09/xmldsig#"
                     entityID="{entity_id}"
                     ID="{descriptor_id}"
                     validUntil="2030-01-01T00:00:00Z"
                     cacheDuration="PT6H">{role_xml}
  <md:Organization>
    <md:OrganizationName xml:lang="en">Example University</md:OrganizationName>
    <md:OrganizationDisplayName xml:lang="en">Example University</md:OrganizationDisplayName>
    <md:OrganizationURL xml:lang="en">https://www.example.org/</md:OrganizationURL>
  </md:Organization>
  <md:ContactPerson contactType="technical">
    <md:GivenName>Identity</md:GivenName>
    <md:SurName>Team</md:SurName>
    <md:EmailAddress>mailto:identity@example.org</md:EmailAddress>
  </md:ContactPerson>
</md:EntityDescriptor>
"""
    return document.encode("utf-8")


def sign_document(document: bytes, material: SigningMaterial) -> bytes:
    """Apply an enveloped RSA-SHA256 signature to a document."""
    root = etree.fromstring(document)
    signer = XMLSigner(
        signature_algorithm=SignatureMethod.RSA_SHA256,
        digest_algorithm=DigestAlgorithm.SHA256,
    )
    signed_root = signer.sign(root, key=material.key_pem, cert=material.cert_pem)
    return etree.tostring(signed_root, xml_declaration=True, encoding="UTF-8")


class StubTransport:
    """In-memory transport returning canned responses.

    Responses are looked up by exact URL, falling back to ``default``.
    An Exception instance in place of a response is raised instead.
    Unknown URLs answer 404.
    """

    def __init__(self, default=None) -> None:
        self.responses: dict = {}
        self.default = default
        self.requests: list = []
        self.closed = False

    def get(self, url: str, timeout: float) -> TransportResponse:
        self.requests.append((url, timeout))
        outcome = self.responses.get(url, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return TransportResponse(status_code=404, content=b"", url=url)
        return outcome

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def signing_material() -> SigningMaterial:
    """Certificate and key the MDQ responder signs with."""
    return generate_signing_material()


@pytest.fixture(scope="session")
def other_signing_material() -> SigningMaterial:
    """Unrelated certificate and key, never trusted by the client."""
    return generate_signing_material(common_name="Untrusted Signer")


@pytest.fixture
def idp_metadata_xml() -> bytes:
    """Unsigned IdP EntityDescriptor."""
    return build_entity_descriptor()


@pytest.fixture
def sp_metadata_xml() -> bytes:
    """Unsigned SP EntityDescriptor."""
    return build_entity_descriptor(
        entity_id=SP_ENTITY_ID,
        descriptor_id="_mdq-test-sp",
        role="sp",
    )


@pytest.fixture
def signed_idp_metadata_xml(idp_metadata_xml, signing_material) -> bytes:
    """IdP EntityDescriptor signed with the trusted key."""
    return sign_document(idp_metadata_xml, signing_material)


@pytest.fixture
def make_signed_metadata(signing_material) -> Callable[..., bytes]:
    """Factory for signed EntityDescriptors with arbitrary entity IDs."""

    def _make(entity_id: str, material: Optional[SigningMaterial] = None, **kwargs) -> bytes:
        document = build_entity_descriptor(entity_id=entity_id, **kwargs)
        return sign_document(document, material or signing_material)

    return _make


@pytest.fixture
def stub_transport() -> StubTransport:
    """Transport with no canned responses; every URL answers 404."""
    return StubTransport()


@pytest.fixture
def make_entity_xml() -> Callable[..., bytes]:
    """Factory for unsigned EntityDescriptors (see build_entity_descriptor)."""
    return build_entity_descriptor


@pytest.fixture
def make_signing_material() -> Callable[..., SigningMaterial]:
    """Factory for fresh self-signed certificates (see generate_signing_material)."""
    return generate_signing_material


@pytest.fixture
def sign_xml() -> Callable[[bytes, SigningMaterial], bytes]:
    """Signs a document with the given SigningMaterial."""
    return sign_document
