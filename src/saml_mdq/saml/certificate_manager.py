"""Loading and inspection of MDQ signing certificates.

Aggregators publish their MDQ signing certificate as PEM (e.g.
https://md.incommon.org/certs/inc-md-cert-mdq.pem). The client works with DER
bytes, so this module accepts either format and normalises to DER.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

from ..models.certificate import CertificateInfo
from ..utils.exceptions import CertificateLoadError

logger = logging.getLogger(__name__)

PEM_MARKER = b"-----BEGIN CERTIFICATE-----"


def load_certificate_bytes(data: bytes) -> x509.Certificate:
    """Load an X.509 certificate from PEM or DER bytes.

    Args:
        data: Certificate bytes in PEM or DER encoding

    Returns:
        Loaded X.509 certificate

    Raises:
        CertificateLoadError: If the bytes are neither valid PEM nor DER
    """
    try:
        if PEM_MARKER in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as e:
        raise CertificateLoadError(
            f"Failed to load certificate: {e}. Ensure it is PEM or DER encoded."
        ) from e


def load_signing_certificate(cert_path: Union[Path, str]) -> bytes:
    """Load a signing certificate file and return its DER encoding.

    Args:
        cert_path: Path to a PEM or DER certificate file

    Returns:
        DER encoded certificate, ready for MDQClientBuilder.signing_cert

    Raises:
        CertificateLoadError: If the file is missing or not a certificate

    Example:
        >>> der = load_signing_certificate(Path("certs/inc-md-cert-mdq.pem"))
        >>> client = MDQClient.builder(url).signing_cert(der).build()
    """
    cert_path = Path(cert_path)
    if not cert_path.is_file():
        raise CertificateLoadError(
            f"Certificate file not found: {cert_path}. "
            f"Ensure the file exists and path is correct."
        )

    try:
        data = cert_path.read_bytes()
    except OSError as e:
        raise CertificateLoadError(f"Failed to read certificate {cert_path}: {e}") from e

    cert = load_certificate_bytes(data)
    logger.info(f"Loaded signing certificate: {cert.subject.rfc4514_string()}")
    check_expiration_warning(cert)

    return cert.public_bytes(serialization.Encoding.DER)


def get_certificate_info(cert: Union[x509.Certificate, bytes]) -> CertificateInfo:
    """Extract certificate information for display and logging.

    Args:
        cert: X.509 certificate or its PEM/DER bytes

    Returns:
        CertificateInfo dataclass with certificate details
    """
    if isinstance(cert, (bytes, bytearray)):
        cert = load_certificate_bytes(bytes(cert))

    public_key = cert.public_key()
    key_size = public_key.key_size if hasattr(public_key, "key_size") else None

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        serial_number=cert.serial_number,
        key_size=key_size,
        sha256_fingerprint=cert.fingerprint(hashes.SHA256()).hex(),
    )


def check_expiration_warning(
    cert: x509.Certificate, warning_days: int = 30
) -> bool:
    """Check if certificate is expiring soon and log warning.

    Args:
        cert: X.509 certificate to check
        warning_days: Number of days before expiration to warn (default: 30)

    Returns:
        True if certificate expires within warning_days, False otherwise
    """
    now = datetime.now(timezone.utc)
    warning_date = now + timedelta(days=warning_days)

    if cert.not_valid_after_utc < warning_date:
        days_remaining = (cert.not_valid_after_utc - now).days
        logger.warning(
            f"Signing certificate expiring soon: {days_remaining} days remaining "
            f"(expires: {cert.not_valid_after_utc.strftime('%Y-%m-%d')})"
        )
        return True

    return False
