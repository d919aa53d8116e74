"""Shared service-layer error types.

Provides the protocol-level error raised by the response parser and the
rate/tracking extractors. Centralised here to avoid circular imports
between service modules.
"""

from dataclasses import dataclass

INVALID_MAIL_TYPE_MESSAGE = "Invalid First Class Mail Type."


@dataclass
class ResponseError(Exception):
    """Protocol-level failure from a USPS response.

    Raised uniformly for vendor error envelopes, tracking "not found"
    markers, malformed XML, and unknown response roots.

    Attributes:
        code: Registry error code (E-XXXX format)
        message: Human-readable message (vendor description when present)
        response: Raw response body as received from the transport
        vendor_code: USPS error number, when the vendor supplied one
        remediation: Suggested fix
    """

    code: str
    message: str
    response: str = ""
    vendor_code: str | None = None
    remediation: str = ""

    def __str__(self) -> str:
        """Return formatted error message."""
        return f"[{self.code}] {self.message}"


@dataclass
class InvalidMailType(ResponseError):
    """First-Class request with a missing or unknown mail type."""

    code: str = "E-3004"
    message: str = INVALID_MAIL_TYPE_MESSAGE
