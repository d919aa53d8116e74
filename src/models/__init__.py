"""Pydantic models for the USPS response core.

This module exports the immutable value objects produced by the
constraint parser, rate extractor, and tracking parser.
"""

from src.models.constraints import (
    CONSTRAINT_KEYS,
    AnyOf,
    ConstraintSet,
    ConstraintSpec,
    Single,
    with_weight,
)
from src.models.package import Package
from src.models.rate import Rate, RateResponse
from src.models.tracking import (
    EventDetails,
    Location,
    TrackingEvent,
    TrackingResponse,
    status_for_description,
)

__all__ = [
    # Constraints
    "CONSTRAINT_KEYS",
    "AnyOf",
    "ConstraintSet",
    "ConstraintSpec",
    "Single",
    "with_weight",
    # Package
    "Package",
    # Rates
    "Rate",
    "RateResponse",
    # Tracking
    "EventDetails",
    "Location",
    "TrackingEvent",
    "TrackingResponse",
    "status_for_description",
]
