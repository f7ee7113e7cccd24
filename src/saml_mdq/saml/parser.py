"""Parser for SAML 2.0 EntityDescriptor documents."""

import logging
import re
from datetime import datetime
from typing import List, Optional, Union

from lxml import etree

from ..models.metadata import (
    ContactPerson,
    Endpoint,
    EntityMetadata,
    IdPSSODescriptor,
    IndexedEndpoint,
    KeyDescriptor,
    Organization,
    SPSSODescriptor,
)
from ..utils.exceptions import InvalidXMLError

logger = logging.getLogger(__name__)

# SAML metadata and XML Signature namespaces
MD_NS = "urn:oasis:names:tc:SAML:2.0:metadata"
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

NAMESPACES = {"md": MD_NS, "ds": DS_NS}

ENTITY_DESCRIPTOR_TAG = f"{{{MD_NS}}}EntityDescriptor"

# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_entity_descriptor(
    xml: Union[str, bytes, etree._Element],
) -> EntityMetadata:
    """Parse an EntityDescriptor into an EntityMetadata value.

    Args:
        xml: Document text, raw bytes, or an already parsed root element

    Returns:
        Parsed EntityMetadata

    Raises:
        InvalidXMLError: If the XML is malformed, the root element is not an
            EntityDescriptor or required attributes are missing

    Example:
        >>> metadata = parse_entity_descriptor(response.content)
        >>> metadata.entity_id
        'https://idp.example.org/shibboleth'
    """
    if isinstance(xml, etree._Element):
        root = xml
    else:
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(xml, parser=parser)
        except etree.XMLSyntaxError as e:
            raise InvalidXMLError(str(e)) from e
        if root is None:
            raise InvalidXMLError("Empty document")

    if root.tag != ENTITY_DESCRIPTOR_TAG:
        raise InvalidXMLError(
            f"Expected md:EntityDescriptor root element, found {root.tag}"
        )

    entity_id = root.get("entityID")
    if not entity_id:
        raise InvalidXMLError("EntityDescriptor is missing the entityID attribute")

    metadata = EntityMetadata(
        entity_id=entity_id,
        id=root.get("ID"),
        valid_until=_parse_datetime(root.get("validUntil"), "validUntil"),
        cache_duration=root.get("cacheDuration"),
        idp_sso_descriptors=tuple(
            _parse_idp_descriptor(el) for el in root.findall("md:IDPSSODescriptor", NAMESPACES)
        ),
        sp_sso_descriptors=tuple(
            _parse_sp_descriptor(el) for el in root.findall("md:SPSSODescriptor", NAMESPACES)
        ),
        organization=_parse_organization(root.find("md:Organization", NAMESPACES)),
        contact_persons=tuple(
            _parse_contact(el) for el in root.findall("md:ContactPerson", NAMESPACES)
        ),
    )

    logger.debug(
        f"Parsed EntityDescriptor {entity_id}: "
        f"{len(metadata.idp_sso_descriptors)} IdP role(s), "
        f"{len(metadata.sp_sso_descriptors)} SP role(s)"
    )
    return metadata


def _parse_idp_descriptor(element: etree._Element) -> IdPSSODescriptor:
    return IdPSSODescriptor(
        protocol_support_enumeration=_required(element, "protocolSupportEnumeration"),
        want_authn_requests_signed=_parse_bool(element.get("WantAuthnRequestsSigned")),
        single_sign_on_services=_parse_endpoints(element, "SingleSignOnService"),
        single_logout_services=_parse_endpoints(element, "SingleLogoutService"),
        key_descriptors=_parse_key_descriptors(element),
        name_id_formats=_texts(element, "md:NameIDFormat"),
    )


def _parse_sp_descriptor(element: etree._Element) -> SPSSODescriptor:
    consumers = []
    for acs in element.findall("md:AssertionConsumerService", NAMESPACES):
        index = _required(acs, "index")
        try:
            index_value = int(index)
        except ValueError as e:
            raise InvalidXMLError(f"Invalid AssertionConsumerService index: {index}") from e
        consumers.append(
            IndexedEndpoint(
                binding=_required(acs, "Binding"),
                location=_required(acs, "Location"),
                response_location=acs.get("ResponseLocation"),
                index=index_value,
                is_default=_parse_bool(acs.get("isDefault")),
            )
        )

    return SPSSODescriptor(
        protocol_support_enumeration=_required(element, "protocolSupportEnumeration"),
        authn_requests_signed=_parse_bool(element.get("AuthnRequestsSigned")),
        want_assertions_signed=_parse_bool(element.get("WantAssertionsSigned")),
        assertion_consumer_services=tuple(consumers),
        single_logout_services=_parse_endpoints(element, "SingleLogoutService"),
        key_descriptors=_parse_key_descriptors(element),
        name_id_formats=_texts(element, "md:NameIDFormat"),
    )


def _parse_endpoints(element: etree._Element, name: str) -> tuple:
    return tuple(
        Endpoint(
            binding=_required(endpoint, "Binding"),
            location=_required(endpoint, "Location"),
            response_location=endpoint.get("ResponseLocation"),
        )
        for endpoint in element.findall(f"md:{name}", NAMESPACES)
    )


def _parse_key_descriptors(element: etree._Element) -> tuple:
    descriptors = []
    for key in element.findall("md:KeyDescriptor", NAMESPACES):
        certificates = tuple(
            "".join(cert.text.split())
            for cert in key.findall(".//ds:X509Certificate", NAMESPACES)
            if cert.text
        )
        descriptors.append(KeyDescriptor(use=key.get("use"), certificates=certificates))
    return tuple(descriptors)


def _parse_organization(element: Optional[etree._Element]) -> Optional[Organization]:
    if element is None:
        return None
    return Organization(
        name=_first_text(element, "md:OrganizationName"),
        display_name=_first_text(element, "md:OrganizationDisplayName"),
        url=_first_text(element, "md:OrganizationURL"),
    )


def _parse_contact(element: etree._Element) -> ContactPerson:
    return ContactPerson(
        contact_type=_required(element, "contactType"),
        company=_first_text(element, "md:Company"),
        given_name=_first_text(element, "md:GivenName"),
        surname=_first_text(element, "md:SurName"),
        email_addresses=_texts(element, "md:EmailAddress"),
        telephone_numbers=_texts(element, "md:TelephoneNumber"),
    )


def _required(element: etree._Element, attribute: str) -> str:
    value = element.get(attribute)
    if value is None:
        local_name = etree.QName(element).localname
        raise InvalidXMLError(f"{local_name} is missing required attribute {attribute}")
    return value


def _texts(element: etree._Element, path: str) -> tuple:
    values: List[str] = []
    for child in element.findall(path, NAMESPACES):
        if child.text and child.text.strip():
            values.append(child.text.strip())
    return tuple(values)


def _first_text(element: etree._Element, path: str) -> Optional[str]:
    values = _texts(element, path)
    return values[0] if values else None


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    # xs:boolean
    if value is None:
        return None
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    raise InvalidXMLError(f"Invalid boolean value: {value}")


def _parse_datetime(value: Optional[str], name: str) -> Optional[datetime]:
    if value is None:
        return None
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    normalized = _FRACTION_RE.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1
    )
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as e:
        raise InvalidXMLError(f"Invalid {name} timestamp: {value}") from e
