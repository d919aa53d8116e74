"""Parse USPS tracking narration into ordered, located events.

USPS TrackV2 reports each scan as one sentence:

    'Out for Delivery, October 9, 2013, 10:16 am, BROOKLYN, NY 11201'

or, with the extended response format, as an element with separate
Event/EventDate/EventTime/EventCity/EventState/EventZIPCode children.
Both shapes are reduced to EventDetails and then assembled into a
TrackingResponse with events in ascending time order.

USPS sends local wall-clock times with no zone. Those are pinned to the
configured default zone (UTC unless configured otherwise); a zone that
does appear in the text is honoured.
"""

import logging
import re
from datetime import datetime, tzinfo
from typing import Any

from dateutil import parser as date_parser
from dateutil import tz

from src.models.tracking import EventDetails, Location, TrackingEvent, TrackingResponse
from src.services.usps_constants import TrackingStatus
from src.services.usps_response_parser import ParsedResponse, ResponseKind, node_text

logger = logging.getLogger(__name__)

_NARRATION = re.compile(
    r"^(?P<description>.*?),\s*"
    r"(?P<timestamp>[A-Za-z]+\.?\s+\d{1,2},\s*\d{4},\s*\d{1,2}:\d{2}\s*[ap]\.?m\.?"
    r"(?:\s+(?P<zone>[A-Z]{3,4}|[+-]\d{2}:?\d{2}))?)"
    r"(?:,\s*(?P<location>.*?))?\s*\.?$",
    re.IGNORECASE,
)
_LOCATION = re.compile(
    r"^(?P<city>.*?)(?:,?\s*\b(?P<state>[A-Z]{2})\b)?(?:,?\s*(?P<zip>\d{5}(?:-\d{4})?))?\s*$"
)

# US zone abbreviations dateutil does not resolve on its own
_US_TZINFOS: dict[str, int] = {
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
    "AKST": -9 * 3600,
    "AKDT": -8 * 3600,
    "HST": -10 * 3600,
}


def _zone(name: str) -> tzinfo:
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: '{name}'")
    return zone


def parse_event_time(text: str, default_timezone: str = "UTC") -> datetime | None:
    """Parse a USPS date/time string into an aware datetime.

    Args:
        text: e.g. "October 9, 2013, 10:16 am".
        default_timezone: Zone applied when text has none.

    Returns:
        Aware datetime, or None if text is not a date.
    """
    cleaned = " ".join(text.replace(",", " ").split())
    try:
        parsed = date_parser.parse(cleaned, tzinfos=_US_TZINFOS)
    except (ValueError, OverflowError):
        logger.debug("Unparseable tracking time %r", text)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_zone(default_timezone))
    return parsed


def parse_location(text: str | None) -> tuple[str | None, str | None, str | None]:
    """Split 'CITY, ST 12345' into (city, state, zip); missing parts are None."""
    if not text:
        return (None, None, None)
    match = _LOCATION.match(text.strip())
    if not match:
        return (text.strip() or None, None, None)
    city = match.group("city").strip(" ,") or None
    return (city, match.group("state"), match.group("zip"))


def extract_event_details(
    message: str | None, default_timezone: str = "UTC"
) -> EventDetails:
    """Parse one narration line.

    Args:
        message: Narration text from <TrackSummary> or <TrackDetail>.
        default_timezone: Zone applied when the text has none.

    Returns:
        EventDetails; every field is None if the line does not match.

    Example:
        >>> d = extract_event_details(
        ...     "Out for Delivery, October 9, 2013, 10:16 am, BROOKLYN, NY 11201")
        >>> d.description, d.zoneless_time.day, d.city
        ('OUT FOR DELIVERY', 9, 'BROOKLYN')
    """
    if not message:
        return EventDetails()
    match = _NARRATION.match(message.strip())
    if not match:
        return EventDetails()

    time = parse_event_time(match.group("timestamp"), default_timezone)
    if time is None:
        return EventDetails()

    city, state, zip_code = parse_location(match.group("location"))
    return EventDetails(
        description=match.group("description").strip().upper(),
        time=time,
        zoneless_time=time.replace(tzinfo=None),
        city=city,
        state=state,
        zip_code=zip_code,
    )


def event_from_node(node: Any, default_timezone: str = "UTC") -> EventDetails:
    """Build EventDetails from a narration string or an extended-format node."""
    if not isinstance(node, dict):
        return extract_event_details(node_text(node), default_timezone)

    description = node_text(node.get("Event"))
    date_text = node_text(node.get("EventDate"))
    if not (description and date_text):
        return extract_event_details(node_text(node), default_timezone)

    time_text = node_text(node.get("EventTime")) or ""
    time = parse_event_time(f"{date_text} {time_text}", default_timezone)
    if time is None:
        return EventDetails()

    return EventDetails(
        description=description.upper(),
        time=time,
        zoneless_time=time.replace(tzinfo=None),
        city=node_text(node.get("EventCity")),
        state=node_text(node.get("EventState")),
        zip_code=node_text(node.get("EventZIPCode")),
    )


def assemble_tracking_response(
    tracking_number: str,
    raw_events: list[Any],
    xml: str = "",
    params: dict[str, Any] | None = None,
    default_timezone: str = "UTC",
) -> TrackingResponse:
    """Order events and derive shipment status.

    Args:
        tracking_number: Number as supplied by the caller.
        raw_events: Narration strings or extended-format nodes, any order.
        xml: Raw response body to carry on the result.
        params: Parsed response document to carry on the result.
        default_timezone: Zone applied to zoneless times.

    Returns:
        TrackingResponse with events sorted ascending by time.
    """
    events: list[TrackingEvent] = []
    for raw in raw_events:
        details = event_from_node(raw, default_timezone)
        if details.time is None or not details.description:
            logger.debug("Dropping unparseable tracking event %r", raw)
            continue
        events.append(TrackingEvent(
            description=details.description,
            time=details.time,
            location=Location(
                city=details.city,
                state=details.state,
                postal_code=details.zip_code,
            ),
        ))

    events.sort(key=lambda event: event.time)

    status: TrackingStatus | None = None
    delivered = False
    actual_delivery_date = None
    if events:
        last = events[-1]
        status = last.status
        delivered = last.delivered
        if delivered:
            actual_delivery_date = last.time

    return TrackingResponse(
        tracking_number=tracking_number,
        events=events,
        status=status,
        delivered=delivered,
        actual_delivery_date=actual_delivery_date,
        destination=None,
        xml=xml,
        params=params or {},
    )


def _track_info_for(parsed: ParsedResponse, tracking_number: str) -> dict[str, Any]:
    infos = [i for i in parsed.root.get("TrackInfo") or [] if isinstance(i, dict)]
    for info in infos:
        if info.get("@ID") == tracking_number:
            return info
    return infos[0] if infos else {}


def parse_tracking_response(
    tracking_number: str,
    parsed: ParsedResponse,
    default_timezone: str = "UTC",
) -> TrackingResponse:
    """Assemble the TrackingResponse for one number from a parsed response.

    Args:
        tracking_number: Number as supplied by the caller.
        parsed: Output of parse_response for a TrackResponse.
        default_timezone: Zone applied to zoneless times.

    Returns:
        TrackingResponse built from TrackSummary and every TrackDetail.

    Raises:
        ValueError: If parsed is not a tracking response.
    """
    if parsed.kind != ResponseKind.TRACKING:
        raise ValueError(f"Not a tracking response: {parsed.root_name}")

    info = _track_info_for(parsed, tracking_number)
    raw_events: list[Any] = []
    if info.get("TrackSummary") is not None:
        raw_events.append(info["TrackSummary"])
    raw_events.extend(d for d in info.get("TrackDetail") or [] if d is not None)

    return assemble_tracking_response(
        tracking_number,
        raw_events,
        xml=parsed.xml,
        params=parsed.params,
        default_timezone=default_timezone,
    )
