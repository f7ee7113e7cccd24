"""Custom exception classes for the SAML MDQ client.

All exceptions inherit from MDQError to allow catching all custom exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests


class MDQError(Exception):
    """Base exception for all SAML MDQ client exceptions."""

    pass


class TransportError(MDQError):
    """Raised when network/transport issues occur.

    Examples:
        - Connection refused or DNS failure
        - Request timeout
        - TLS handshake failure
        - HTTP transport could not be constructed
    """

    pass


class EntityNotFoundError(MDQError):
    """Raised when the MDQ responder has no metadata for an entity (HTTP 404).

    This is an expected negative result rather than a transport fault.

    Attributes:
        entity_id: The entity identifier that was requested
    """

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {entity_id}")


class InvalidXMLError(MDQError):
    """Raised when the response is not usable SAML metadata.

    Covers both non-success HTTP statuses (other than 404) and XML that
    cannot be parsed into an entity descriptor.

    Attributes:
        status_code: HTTP status when the failure came from the responder

    Examples:
        - MDQ server returned status 500
        - Unclosed tags
        - Root element is not an EntityDescriptor
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(f"Invalid XML metadata: {message}")


class SignatureError(MDQError):
    """Raised when XML signature verification of metadata fails.

    Examples:
        - Document signed with a different certificate
        - Content modified after signing
        - Missing or malformed Signature element
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Signature verification failed: {message}")


class InvalidEntityIdError(MDQError):
    """Raised when an entity identifier cannot be used for a lookup."""

    def __init__(self, entity_id: object) -> None:
        self.entity_id = entity_id
        super().__init__(f"Invalid entity ID: {entity_id!r}")


class ConfigurationError(MDQError):
    """Raised when configuration loading or validation fails.

    Examples:
        - Invalid configuration file format
        - Configuration value out of range
    """

    pass


class CertificateLoadError(MDQError):
    """Raised when a signing certificate file cannot be loaded.

    Examples:
        - Certificate file not found
        - File is neither PEM nor DER
    """

    pass


class ErrorCategory(Enum):
    """Error categorization for caller-side handling strategy.

    The client never retries on its own; this tells callers which
    failures are worth retrying.

    Attributes:
        TRANSIENT: Retry with backoff (timeouts, 5xx responses)
        PERMANENT: Do not retry (entity absent, bad XML, bad signature)
        CRITICAL: Fix setup before continuing (TLS, config, certificates)
    """

    TRANSIENT = "TRANSIENT"
    PERMANENT = "PERMANENT"
    CRITICAL = "CRITICAL"


@dataclass
class ErrorInfo:
    """Structured error information for actionable error handling.

    Attributes:
        category: Error category (TRANSIENT, PERMANENT, CRITICAL)
        error_type: Exception class name (e.g., "SignatureError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        is_retryable: Whether retrying the lookup may succeed
        technical_details: Optional chained cause for debugging
        entity_id: Optional entity identifier the error relates to
    """

    category: ErrorCategory
    error_type: str
    message: str
    remediation: str
    is_retryable: bool
    technical_details: Optional[str] = None
    entity_id: Optional[str] = None


def categorize_error(exception: Exception) -> ErrorCategory:
    """Categorize exception for error handling strategy.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorCategory indicating handling strategy

    Example:
        >>> categorize_error(TransportError("timed out"))
        ErrorCategory.TRANSIENT
        >>> categorize_error(EntityNotFoundError("https://idp.example.org"))
        ErrorCategory.PERMANENT
    """
    if isinstance(exception, (ConfigurationError, CertificateLoadError)):
        return ErrorCategory.CRITICAL

    cause = exception.__cause__
    if isinstance(exception, TransportError):
        if isinstance(cause, requests.exceptions.SSLError):
            return ErrorCategory.CRITICAL
        return ErrorCategory.TRANSIENT

    if isinstance(exception, InvalidXMLError) and exception.status_code is not None:
        if exception.status_code >= 500 or exception.status_code == 429:
            return ErrorCategory.TRANSIENT

    return ErrorCategory.PERMANENT


def create_error_info(
    exception: Exception,
    entity_id: Optional[str] = None,
) -> ErrorInfo:
    """Create structured error information from exception.

    Args:
        exception: Exception that occurred
        entity_id: Optional entity identifier being fetched

    Returns:
        ErrorInfo with categorization and remediation guidance
    """
    category = categorize_error(exception)

    technical_details = None
    if exception.__cause__ is not None:
        technical_details = (
            f"Caused by: {type(exception.__cause__).__name__}: {exception.__cause__}"
        )

    if entity_id is None and isinstance(exception, EntityNotFoundError):
        entity_id = exception.entity_id

    return ErrorInfo(
        category=category,
        error_type=type(exception).__name__,
        message=str(exception),
        remediation=_generate_remediation(exception),
        is_retryable=category == ErrorCategory.TRANSIENT,
        technical_details=technical_details,
        entity_id=entity_id,
    )


def _generate_remediation(exception: Exception) -> str:
    """Generate actionable remediation message for an error."""
    if isinstance(exception, EntityNotFoundError):
        return (
            "The MDQ responder does not publish this entity. Check the entity ID "
            "spelling and that the entity is registered with the federation."
        )

    if isinstance(exception, SignatureError):
        return (
            "Metadata signature could not be verified. Check that the configured "
            "signing certificate is the aggregator's current MDQ signing certificate."
        )

    if isinstance(exception, InvalidXMLError):
        if exception.status_code is not None:
            return (
                f"MDQ responder answered with HTTP {exception.status_code}. "
                "Check the base URL and retry later for server errors."
            )
        return "Response was not a SAML EntityDescriptor. Check the base URL."

    if isinstance(exception, TransportError):
        if isinstance(exception.__cause__, requests.exceptions.SSLError):
            return (
                "TLS validation failed. Check the CA bundle or verify_tls setting."
            )
        return (
            "Cannot reach the MDQ responder. Check network connectivity, the base "
            "URL and consider increasing the timeout."
        )

    if isinstance(exception, (ConfigurationError, CertificateLoadError)):
        return (
            "Configuration error. Check config/config.json and SAML_MDQ_* "
            "environment variables for missing or invalid values."
        )

    return "Review the error message and logs for details."
