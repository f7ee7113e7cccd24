"""XML signature verification of MDQ responses using the signxml library.

MDQ aggregators sign each EntityDescriptor with an enveloped XML signature
whose Reference points at the descriptor's ``ID`` attribute. The verifier
checks that signature against a trusted certificate supplied out of band
and hands back only the signed subtree for parsing.
"""

import logging

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from lxml import etree
from signxml import XMLVerifier
from signxml.exceptions import InvalidCertificate, InvalidDigest, InvalidInput, InvalidSignature

from ..utils.exceptions import SignatureError

logger = logging.getLogger(__name__)

# XML Signature namespace
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

# Attribute used to resolve signature references in SAML metadata
DEFAULT_ID_ATTRIBUTE = "ID"


class MetadataSignatureVerifier:
    """Verify enveloped XML signatures on SAML metadata documents.

    Attributes:
        certificate_der: DER encoded trusted signing certificate

    Example:
        >>> verifier = MetadataSignatureVerifier(Path("mdq-cert.der").read_bytes())
        >>> signed_root = verifier.verify(response_bytes)
    """

    def __init__(self, certificate_der: bytes) -> None:
        self.certificate_der = bytes(certificate_der)

    def _certificate_pem(self) -> bytes:
        """Convert the trusted DER certificate to PEM for signxml.

        Raises:
            SignatureError: If the certificate bytes are not valid DER
        """
        try:
            cert = x509.load_der_x509_certificate(self.certificate_der)
        except ValueError as e:
            raise SignatureError(f"Signing certificate is not valid DER: {e}") from e
        return cert.public_bytes(encoding=serialization.Encoding.PEM)

    def verify(
        self,
        xml: bytes,
        id_attribute: str = DEFAULT_ID_ATTRIBUTE,
    ) -> etree._Element:
        """Verify the document signature against the trusted certificate.

        Args:
            xml: Raw XML bytes as received from the MDQ responder
            id_attribute: Attribute used to resolve the signature Reference

        Returns:
            The element covered by the signature

        Raises:
            SignatureError: If the XML is malformed, unsigned, signed by a
                different key or modified after signing
        """
        cert_pem = self._certificate_pem()

        try:
            root = etree.fromstring(xml, parser=_secure_parser())
        except etree.XMLSyntaxError as e:
            raise SignatureError(f"Cannot parse signed XML: {e}") from e

        if root.find(f"{{{DS_NS}}}Signature") is None:
            raise SignatureError("No Signature element found on document root")

        try:
            result = XMLVerifier().verify(
                root,
                x509_cert=cert_pem,
                id_attribute=id_attribute,
            )
        except InvalidDigest as e:
            logger.warning(f"Metadata digest mismatch, content modified after signing: {e}")
            raise SignatureError(f"Digest mismatch: {e}") from e
        except InvalidCertificate as e:
            logger.warning(f"Metadata signing certificate rejected: {e}")
            raise SignatureError(f"Certificate mismatch: {e}") from e
        except InvalidSignature as e:
            logger.warning(f"Metadata signature invalid: {e}")
            raise SignatureError(str(e)) from e
        except InvalidInput as e:
            raise SignatureError(f"Malformed signature: {e}") from e

        logger.debug("Metadata signature verified")
        return result.signed_xml


def _secure_parser() -> etree.XMLParser:
    """Parser that never resolves entities or fetches network resources."""
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
