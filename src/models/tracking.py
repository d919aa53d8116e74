"""Tracking models produced from USPS tracking responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.services.usps_constants import (
    TRACKING_STATUS_PATTERNS,
    USPS_COUNTRY,
    TrackingStatus,
)


def status_for_description(description: str | None) -> TrackingStatus:
    """Map an event description to a TrackingStatus via ordered lookup."""
    if not description:
        return TrackingStatus.UNKNOWN
    upper = description.upper()
    for phrase, status in TRACKING_STATUS_PATTERNS:
        if phrase in upper:
            return status
    return TrackingStatus.UNKNOWN


class Location(BaseModel):
    """Where a tracking event happened. Every field may be missing."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str = USPS_COUNTRY

    def __str__(self) -> str:
        return ", ".join(p for p in (self.city, self.state, self.postal_code) if p)


class EventDetails(BaseModel):
    """Fields parsed from one narration line, before assembly.

    All fields are None when the line did not match the narration format.

    Attributes:
        description: Upper-cased event description.
        time: Timezone-aware event time.
        zoneless_time: The same wall-clock time without a zone.
        city: Event city.
        state: Two-letter state or province.
        zip_code: Postal code.
    """

    model_config = ConfigDict(frozen=True)

    description: str | None = None
    time: datetime | None = None
    zoneless_time: datetime | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class TrackingEvent(BaseModel):
    """One scan or status change in a shipment's history."""

    model_config = ConfigDict(frozen=True)

    description: str
    time: datetime
    location: Location = Field(default_factory=Location)

    @property
    def status(self) -> TrackingStatus:
        return status_for_description(self.description)

    @property
    def delivered(self) -> bool:
        return self.status == TrackingStatus.DELIVERED


class TrackingResponse(BaseModel):
    """Assembled tracking history for one tracking number.

    Attributes:
        tracking_number: Number as supplied by the caller.
        events: Events in ascending time order.
        status: Status of the most recent event, None without events.
        delivered: True when the most recent event is a delivery.
        actual_delivery_date: Time of the delivery event, if delivered.
        destination: Always None; USPS tracking does not report it.
        xml: Raw response body.
        params: Parsed response document.
    """

    model_config = ConfigDict(frozen=True)

    tracking_number: str
    events: list[TrackingEvent] = Field(default_factory=list)
    status: TrackingStatus | None = None
    delivered: bool = False
    actual_delivery_date: datetime | None = None
    destination: Location | None = None
    xml: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
