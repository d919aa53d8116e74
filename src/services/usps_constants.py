"""Canonical USPS constants.

Single source of truth for account types, size codes, weight limits,
flat-rate product dimensions, price field names, and tracking status
lookups. All parsing modules import from here instead of using inline
magic numbers.

Follows the same pattern as usps_service_codes.py (Enum + parallel
lookups + frozenset).
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Carrier identity
# ---------------------------------------------------------------------------

USPS_SERVICE_NAME_PREFIX = "USPS "
USPS_CURRENCY = "USD"
USPS_COUNTRY = "USA"


# ---------------------------------------------------------------------------
# Account types
# ---------------------------------------------------------------------------


class AccountType(str, Enum):
    """Pricing tier for the shipper's USPS account."""

    RETAIL = "retail"
    COMMERCIAL_BASE = "commercial_base"
    COMMERCIAL_PLUS = "commercial_plus"


DEFAULT_ACCOUNT_TYPE = AccountType.RETAIL

# Price element read from a domestic <Postage> node, by account type
DOMESTIC_PRICE_FIELDS: dict[AccountType, str] = {
    AccountType.RETAIL: "Rate",
    AccountType.COMMERCIAL_BASE: "CommercialRate",
    AccountType.COMMERCIAL_PLUS: "CommercialPlusRate",
}

# Price element read from an international <Service> node, by account type
INTERNATIONAL_PRICE_FIELDS: dict[AccountType, str] = {
    AccountType.RETAIL: "Postage",
    AccountType.COMMERCIAL_BASE: "CommercialPostage",
    AccountType.COMMERCIAL_PLUS: "CommercialPlusPostage",
}


# ---------------------------------------------------------------------------
# Package limits and size codes
# ---------------------------------------------------------------------------


class SizeCode(str, Enum):
    """Coarse package size sent as <Size> in rate requests."""

    REGULAR = "REGULAR"
    LARGE = "LARGE"


MAXIMUM_WEIGHT_LBS = 70.0
OUNCES_PER_LB = 16.0
GRAMS_PER_OUNCE = 28.349523125
CM_PER_INCH = 2.54

# Longest side above this is LARGE
LARGE_MAX_DIMENSION_IN = 12.0
# Length plus girth above this is LARGE; unreachable while the longest side is at most 12"
LARGE_LENGTH_PLUS_GIRTH_IN = 84.0


# ---------------------------------------------------------------------------
# Flat-rate products
# ---------------------------------------------------------------------------

# Envelopes are flat; the height is a nominal allowance for contents
FLAT_RATE_ENVELOPE_HEIGHT_IN = 0.75
FLAT_RATE_ENVELOPE_LABEL = "Flat Rate Envelope"
FLAT_RATE_BOX_LABEL = "Flat Rate Box"

# Standard 12 1/2" x 9 1/2" envelope, used when a sentence names the
# product without stating its size
DEFAULT_FLAT_RATE_ENVELOPE: dict[str, float] = {
    "length": 12.5,
    "width": 9.5,
    "height": FLAT_RATE_ENVELOPE_HEIGHT_IN,
}

# USPS sells two physical boxes under one flat-rate box service name
FLAT_RATE_BOXES: tuple[dict[str, float], ...] = (
    {"length": 11.0, "width": 8.5, "height": 5.5},
    {"length": 13.625, "width": 11.875, "height": 3.375},
)


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


class TrackingStatus(str, Enum):
    """Shipment status derived from the most recent tracking event."""

    DELIVERED = "delivered"
    OUT_FOR_DELIVERY = "out_for_delivery"
    IN_TRANSIT = "in_transit"
    PICKED_UP = "picked_up"
    NOTICE_LEFT = "notice_left"
    RETURNED = "returned"
    ELECTRONIC_INFO_RECEIVED = "electronic_info_received"
    EXCEPTION = "exception"
    UNKNOWN = "unknown"


# Ordered substring lookup against upper-cased event descriptions.
# First match wins, so more specific phrases come first.
TRACKING_STATUS_PATTERNS: tuple[tuple[str, TrackingStatus], ...] = (
    ("OUT FOR DELIVERY", TrackingStatus.OUT_FOR_DELIVERY),
    ("NOT DELIVERED", TrackingStatus.EXCEPTION),
    ("UNDELIVERABLE", TrackingStatus.EXCEPTION),
    ("RETURN TO SENDER", TrackingStatus.RETURNED),
    ("RETURNED", TrackingStatus.RETURNED),
    ("DELIVERED", TrackingStatus.DELIVERED),
    ("NOTICE LEFT", TrackingStatus.NOTICE_LEFT),
    ("ELECTRONIC SHIPPING INFO", TrackingStatus.ELECTRONIC_INFO_RECEIVED),
    ("PRE-SHIPMENT", TrackingStatus.ELECTRONIC_INFO_RECEIVED),
    ("PICKED UP", TrackingStatus.PICKED_UP),
    ("ACCEPTANCE", TrackingStatus.PICKED_UP),
    ("ACCEPTED", TrackingStatus.PICKED_UP),
    ("ARRIV", TrackingStatus.IN_TRANSIT),
    ("DEPART", TrackingStatus.IN_TRANSIT),
    ("PROCESSED", TrackingStatus.IN_TRANSIT),
    ("SORTING", TrackingStatus.IN_TRANSIT),
    ("IN TRANSIT", TrackingStatus.IN_TRANSIT),
)

# Phrases in a TrackSummary or TrackInfo error meaning "no such item"
TRACKING_NOT_FOUND_MARKERS: tuple[str, ...] = (
    "no record",
    "could not locate",
    "not yet available",
    "not available",
)


# ---------------------------------------------------------------------------
# Response roots
# ---------------------------------------------------------------------------

DOMESTIC_RATE_ROOT = "RateV4Response"
INTERNATIONAL_RATE_ROOT = "IntlRateV2Response"
TRACKING_ROOT = "TrackResponse"
ERROR_ROOT = "Error"

# Elements xmltodict must always return as lists
LIST_ELEMENTS = frozenset({"Package", "Postage", "Service", "TrackInfo", "TrackDetail"})
