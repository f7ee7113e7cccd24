"""Data models for MDQ signing certificate handling."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class CertificateInfo:
    """Summary of a trusted MDQ signing certificate.

    Holds only public details, suitable for logs and CLI output.

    Attributes:
        subject: Subject DN in RFC 4514 form
        issuer: Issuer DN in RFC 4514 form
        not_before: Start of validity (UTC)
        not_after: End of validity (UTC)
        serial_number: Serial number
        key_size: Public key size in bits, None for keys without one
        sha256_fingerprint: Hex SHA-256 fingerprint of the DER encoding
    """

    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    serial_number: int
    key_size: Optional[int]
    sha256_fingerprint: str
