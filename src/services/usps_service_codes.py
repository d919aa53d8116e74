"""Canonical USPS service definitions.

Single source of truth for requestable service types, First-Class mail
types, container codes, and the retail/commercial naming equivalences
used when selecting prices by account type.
"""

from enum import Enum


class ServiceType(str, Enum):
    """Service values accepted in a RateV4 <Service> element."""

    ALL = "ALL"
    ONLINE = "ONLINE"
    FIRST_CLASS = "FIRST CLASS"
    FIRST_CLASS_COMMERCIAL = "FIRST CLASS COMMERCIAL"
    PRIORITY = "PRIORITY"
    PRIORITY_COMMERCIAL = "PRIORITY COMMERCIAL"
    EXPRESS = "EXPRESS"
    EXPRESS_COMMERCIAL = "EXPRESS COMMERCIAL"
    PARCEL = "PARCEL"
    MEDIA = "MEDIA"
    LIBRARY = "LIBRARY"


DEFAULT_SERVICE = ServiceType.ALL

# Alias mapping: user-facing names → ServiceType
SERVICE_ALIASES: dict[str, ServiceType] = {
    "all": ServiceType.ALL,
    "online": ServiceType.ONLINE,
    "first_class": ServiceType.FIRST_CLASS,
    "first class": ServiceType.FIRST_CLASS,
    "first-class": ServiceType.FIRST_CLASS,
    "first_class_commercial": ServiceType.FIRST_CLASS_COMMERCIAL,
    "priority": ServiceType.PRIORITY,
    "priority_commercial": ServiceType.PRIORITY_COMMERCIAL,
    "express": ServiceType.EXPRESS,
    "express_commercial": ServiceType.EXPRESS_COMMERCIAL,
    "parcel": ServiceType.PARCEL,
    "parcel post": ServiceType.PARCEL,
    "media": ServiceType.MEDIA,
    "media mail": ServiceType.MEDIA,
    "library": ServiceType.LIBRARY,
    "library mail": ServiceType.LIBRARY,
}

# Services that require a <FirstClassMailType>
FIRST_CLASS_SERVICES = frozenset({
    ServiceType.FIRST_CLASS,
    ServiceType.FIRST_CLASS_COMMERCIAL,
})

# First-Class mail type aliases → <FirstClassMailType> values
FIRST_CLASS_MAIL_TYPES: dict[str, str] = {
    "letter": "LETTER",
    "flat": "FLAT",
    "parcel": "PARCEL",
    "postcard": "POSTCARD",
    "post_card": "POSTCARD",
    "package_service": "PACKAGE SERVICE",
    "package_service_retail": "PACKAGE SERVICE RETAIL",
}


class Container(str, Enum):
    """Container values accepted in a RateV4 <Container> element."""

    VARIABLE = "VARIABLE"
    RECTANGULAR = "RECTANGULAR"
    NONRECTANGULAR = "NONRECTANGULAR"
    FLAT_RATE_ENVELOPE = "FLAT RATE ENVELOPE"
    FLAT_RATE_BOX = "FLAT RATE BOX"


CONTAINER_ALIASES: dict[str, Container] = {
    "variable": Container.VARIABLE,
    "rectangular": Container.RECTANGULAR,
    "nonrectangular": Container.NONRECTANGULAR,
    "envelope": Container.FLAT_RATE_ENVELOPE,
    "flat_rate_envelope": Container.FLAT_RATE_ENVELOPE,
    "box": Container.FLAT_RATE_BOX,
    "flat_rate_box": Container.FLAT_RATE_BOX,
}

# Retail name → commercial name for the same physical service. Only one
# of each pair may carry a nonzero price for a given account type.
RETAIL_COMMERCIAL_EQUIVALENTS: dict[str, str] = {
    "USPS First-Class Mail Parcel": "USPS First-Class Package Service",
}

COMMERCIAL_RETAIL_EQUIVALENTS: dict[str, str] = {
    v: k for k, v in RETAIL_COMMERCIAL_EQUIVALENTS.items()
}


def resolve_service(value: str | ServiceType | None) -> ServiceType | None:
    """Resolve a service alias or enum value to a ServiceType.

    Args:
        value: Alias ("first_class"), raw value ("FIRST CLASS"), enum,
            or None.

    Returns:
        ServiceType, or None when value is None.

    Raises:
        ValueError: If the value names no known service.
    """
    if value is None or isinstance(value, ServiceType):
        return value
    key = str(value).strip()
    if key.lower() in SERVICE_ALIASES:
        return SERVICE_ALIASES[key.lower()]
    try:
        return ServiceType(key.upper())
    except ValueError:
        raise ValueError(f"Unknown USPS service: '{value}'") from None


def resolve_first_class_mail_type(value: str | None) -> str | None:
    """Resolve a First-Class mail type alias to its request value.

    Args:
        value: Alias ("parcel") or request value ("PARCEL").

    Returns:
        Request value, or None when missing or unknown.
    """
    if not value:
        return None
    key = str(value).strip().lower()
    if key in FIRST_CLASS_MAIL_TYPES:
        return FIRST_CLASS_MAIL_TYPES[key]
    upper = str(value).strip().upper()
    if upper in FIRST_CLASS_MAIL_TYPES.values():
        return upper
    return None


def resolve_container(value: str | Container | None) -> Container:
    """Resolve a container alias to a Container, defaulting to VARIABLE.

    Raises:
        ValueError: If the value names no known container.
    """
    if value is None:
        return Container.VARIABLE
    if isinstance(value, Container):
        return value
    key = str(value).strip().lower()
    if key in CONTAINER_ALIASES:
        return CONTAINER_ALIASES[key]
    try:
        return Container(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown USPS container: '{value}'") from None
