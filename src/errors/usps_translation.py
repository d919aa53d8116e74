"""USPS error translation to E-XXXX codes.

This module maps USPS Web Tools error numbers and descriptions to the
error code registry. Vendor descriptions are passed through as the
message since they are already human-readable; the E-code and
remediation are what the translation adds.
"""

from src.errors.registry import get_error


# Map of USPS error numbers to registry codes
# Source: USPS Web Tools error documentation and observed responses
USPS_ERROR_MAP: dict[str, str] = {
    # Tracking lookups
    "-2147219302": "E-3002",  # Could not locate tracking information
    "-2147219283": "E-3002",  # No record of that mail item
    # Rate request validation
    "-2147219498": "E-2001",  # Invalid origination ZIP
    "-2147219497": "E-2001",  # Invalid destination ZIP
    "-2147219499": "E-3004",  # Invalid First Class Mail Type
    "-2147218046": "E-2004",  # Weight exceeds maximum
    # Request envelope and availability
    "80040B19": "E-3001",  # XML Syntax Error in request
    "80040B1A": "E-3001",  # API authorization failure
    "80040B18": "E-3006",  # Service temporarily unavailable
}

# Additional USPS messages that require pattern matching
USPS_MESSAGE_PATTERNS: dict[str, str] = {
    "first class mail type": "E-3004",
    "no record": "E-3002",
    "could not locate": "E-3002",
    "not available": "E-3002",
    "not yet available": "E-3002",
    "invalid zip": "E-2001",
    "weight exceeds": "E-2004",
    "temporarily unavailable": "E-3006",
}


def translate_usps_error(
    usps_number: str | None,
    usps_message: str | None,
    context: dict | None = None,
) -> tuple[str, str, str]:
    """Translate a USPS error to a registry error.

    Args:
        usps_number: USPS error number (e.g., "-2147219302").
        usps_message: USPS error description text.
        context: Additional template context.

    Returns:
        Tuple of (error_code, message, remediation). The message is the
        vendor description when one was supplied.
    """
    context = context or {}

    # Try direct number lookup first
    if usps_number and usps_number in USPS_ERROR_MAP:
        error = get_error(USPS_ERROR_MAP[usps_number])
        if error:
            message = usps_message or _format_message(
                error.message_template,
                usps_message=f"Code: {usps_number}",
                **context,
            )
            return (error.code, message, error.remediation)

    # Try message pattern matching
    if usps_message:
        usps_message_lower = usps_message.lower()
        for pattern, code in USPS_MESSAGE_PATTERNS.items():
            if pattern in usps_message_lower:
                error = get_error(code)
                if error:
                    return (error.code, usps_message, error.remediation)

    # Fallback to generic USPS error
    error = get_error("E-3001")
    if error:
        message = usps_message or _format_message(
            error.message_template,
            usps_message=f"Code: {usps_number}" if usps_number else "Unknown error",
            **context,
        )
        return (error.code, message, error.remediation)

    # Ultimate fallback
    return (
        "E-3001",
        f"USPS error: {usps_message or usps_number or 'Unknown'}",
        "Contact support with this error message for assistance.",
    )


def _format_message(template: str, **kwargs: object) -> str:
    """Format a message template with context, ignoring missing keys.

    Args:
        template: Message template with {placeholder} syntax.
        **kwargs: Values to substitute into the template.

    Returns:
        Formatted message string.
    """
    try:
        return template.format(**kwargs)
    except KeyError:
        # Keep template if some placeholders are missing
        return template


def extract_usps_error(node: dict | None) -> tuple[str | None, str | None]:
    """Extract error number and description from a parsed USPS node.

    USPS nests errors in three places: as the document root, inside a
    rate <Package>, and inside a tracking <TrackInfo>. This accepts the
    element dict for any of them.

    Args:
        node: Element dict from xmltodict (the <Error> element itself,
            or its parent).

    Returns:
        Tuple of (number, description), either may be None.
    """
    if not isinstance(node, dict):
        return (None, None)

    error = node.get("Error", node)
    if isinstance(error, list):
        error = error[0] if error else {}
    if not isinstance(error, dict):
        return (None, str(error).strip() or None)

    number = error.get("Number")
    description = error.get("Description")
    return (
        number.strip() if isinstance(number, str) else None,
        description.strip() if isinstance(description, str) else None,
    )
