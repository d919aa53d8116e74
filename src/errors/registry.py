"""Error code registry with E-XXXX format codes.

This module defines the error code system for the USPS response core,
organizing errors into categories:
- E-2xxx: Validation errors
- E-3xxx: USPS API errors

Each error includes a code, title, message template, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    VALIDATION = "validation"  # E-2xxx: Validation errors
    USPS_API = "usps_api"  # E-3xxx: USPS API errors


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action the caller should take to resolve.
        is_retryable: Whether the operation can be retried without changes.
    """

    code: str  # E-XXXX format
    category: ErrorCategory
    title: str  # Short title for display
    message_template: str  # Message with {placeholders}
    remediation: str  # Action caller should take
    is_retryable: bool = False  # Can be retried without changes


# Error registry - all defined error codes
ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Invalid ZIP Code",
        message_template="Invalid ZIP code '{value}'.",
        remediation="US ZIP codes should be 5 digits (12345) or 9 digits (12345-6789). Correct and retry.",
    ),
    "E-2004": ErrorCode(
        code="E-2004",
        category=ErrorCategory.VALIDATION,
        title="Invalid Weight",
        message_template="Package weight exceeds the USPS limit: {usps_message}",
        remediation="USPS accepts packages up to 70 lbs. Split the shipment and retry.",
    ),
    "E-2006": ErrorCode(
        code="E-2006",
        category=ErrorCategory.VALIDATION,
        title="Malformed Size Limit",
        message_template="Unrecognized size-limit sentence: '{sentence}'",
        remediation="The service will be treated according to the unrecognized_dimensions policy.",
    ),
    # USPS API errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.USPS_API,
        title="USPS Error Response",
        message_template="{usps_message}",
        remediation="Check the request parameters against the USPS Web Tools documentation.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.USPS_API,
        title="Tracking Number Not Found",
        message_template="{usps_message}",
        remediation="Verify the tracking number. New labels can take up to 24 hours to appear.",
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.USPS_API,
        title="Malformed XML Response",
        message_template="Malformed XML response: {usps_message}",
        remediation="The USPS response was truncated or not XML. Retry the request.",
        is_retryable=True,
    ),
    "E-3004": ErrorCode(
        code="E-3004",
        category=ErrorCategory.USPS_API,
        title="Invalid First Class Mail Type",
        message_template="Invalid First Class Mail Type.",
        remediation="Pass one of: letter, flat, parcel, postcard, package_service, package_service_retail.",
    ),
    "E-3005": ErrorCode(
        code="E-3005",
        category=ErrorCategory.USPS_API,
        title="Unknown Response Type",
        message_template="Unknown root node in XML response: '{root}'",
        remediation="Contact support with error code E-3005 and the raw response.",
    ),
    "E-3006": ErrorCode(
        code="E-3006",
        category=ErrorCategory.USPS_API,
        title="USPS Service Unavailable",
        message_template="{usps_message}",
        remediation="Wait a few minutes and retry. Check USPS Web Tools status if issue persists.",
        is_retryable=True,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category.

    Args:
        category: The error category to filter by.

    Returns:
        List of ErrorCode objects in the specified category.
    """
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
