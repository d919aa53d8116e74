"""Top-level USPS response parsing and error detection.

Turns a raw response body into a ParsedResponse routed by root element,
or raises ResponseError. Three failure shapes are detected and all
surface the same way, with the raw body on ``.response``:

1. XML that does not parse at all
2. A vendor <Error> envelope, at the root or inside a <Package>/<TrackInfo>
3. A tracking summary that says the item has no record

Example:
    parsed = parse_response(body)
    if parsed.kind == ResponseKind.TRACKING:
        ...
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from xml.parsers.expat import ExpatError

import xmltodict

from src.errors.registry import get_error
from src.errors.usps_translation import extract_usps_error, translate_usps_error
from src.services.errors import InvalidMailType, ResponseError
from src.services.usps_constants import (
    DOMESTIC_RATE_ROOT,
    ERROR_ROOT,
    INTERNATIONAL_RATE_ROOT,
    LIST_ELEMENTS,
    TRACKING_NOT_FOUND_MARKERS,
    TRACKING_ROOT,
)

logger = logging.getLogger(__name__)

# Raw bodies are truncated to this length in log lines
_LOG_BODY_LIMIT = 500


class ResponseKind(str, Enum):
    """Which payload a successful response carries."""

    DOMESTIC_RATES = "domestic_rates"
    INTERNATIONAL_RATES = "international_rates"
    TRACKING = "tracking"


_ROOT_KINDS: dict[str, ResponseKind] = {
    DOMESTIC_RATE_ROOT: ResponseKind.DOMESTIC_RATES,
    INTERNATIONAL_RATE_ROOT: ResponseKind.INTERNATIONAL_RATES,
    TRACKING_ROOT: ResponseKind.TRACKING,
}


@dataclass(frozen=True)
class ParsedResponse:
    """A structurally valid, error-free USPS response.

    Attributes:
        kind: Payload type, from the root element.
        root_name: Root element name.
        root: Root element dict (list elements always lists).
        params: Full xmltodict document.
        xml: Decoded response body.
    """

    kind: ResponseKind
    root_name: str
    root: dict[str, Any]
    params: dict[str, Any] = field(default_factory=dict)
    xml: str = ""


def decode_body(body: bytes | str) -> str:
    """Decode a transport body to text."""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def node_text(node: Any) -> str | None:
    """Return the text of an xmltodict node, or None when empty."""
    # <Postage> is forced to a list but is a scalar price in IntlRateV2
    if isinstance(node, list):
        node = node[0] if node else None
    if node is None:
        return None
    if isinstance(node, dict):
        node = node.get("#text")
        if node is None:
            return None
    text = str(node).strip()
    return text or None


def _raise_vendor_error(node: Any, xml: str, not_found: bool = False) -> None:
    """Translate a vendor error node and raise it as ResponseError."""
    number, description = extract_usps_error(node)
    code, message, remediation = translate_usps_error(number, description)
    if not_found and code == "E-3001":
        code = "E-3002"
    logger.warning("USPS error response [%s] %s: %s", code, number, message)
    if code == "E-3004":
        raise InvalidMailType(response=xml, vendor_code=number, remediation=remediation)
    raise ResponseError(
        code=code,
        message=message,
        response=xml,
        vendor_code=number,
        remediation=remediation,
    )


def _is_not_found(text: str | None) -> bool:
    if not text:
        return False
    lower = text.lower()
    return any(marker in lower for marker in TRACKING_NOT_FOUND_MARKERS)


def _check_rate_packages(root: dict[str, Any], xml: str) -> None:
    for package in root.get("Package") or []:
        if isinstance(package, dict) and "Error" in package:
            _raise_vendor_error(package, xml)


def _check_track_infos(root: dict[str, Any], xml: str) -> None:
    for info in root.get("TrackInfo") or []:
        if not isinstance(info, dict):
            continue
        if "Error" in info:
            _raise_vendor_error(info, xml, not_found=True)
        summary = node_text(info.get("TrackSummary"))
        if _is_not_found(summary) and not info.get("TrackDetail"):
            error = get_error("E-3002")
            logger.warning("USPS tracking not found: %s", summary)
            raise ResponseError(
                code="E-3002",
                message=summary,
                response=xml,
                remediation=error.remediation if error else "",
            )


def parse_response(body: bytes | str) -> ParsedResponse:
    """Parse a USPS response body and detect every failure shape.

    Args:
        body: Raw response from the transport.

    Returns:
        ParsedResponse routed by root element.

    Raises:
        ResponseError: On malformed XML, vendor error envelopes,
            tracking not-found markers, or an unknown root element.
    """
    xml = decode_body(body)

    try:
        params = xmltodict.parse(xml, force_list=LIST_ELEMENTS)
    except (ExpatError, ValueError) as e:
        error = get_error("E-3003")
        logger.warning(
            "Malformed USPS response (%s): %s", e, xml[:_LOG_BODY_LIMIT]
        )
        raise ResponseError(
            code="E-3003",
            message=f"Malformed XML response: {e}",
            response=xml,
            remediation=error.remediation if error else "",
        ) from None

    root_name = next(iter(params))
    root = params[root_name] or {}
    if not isinstance(root, dict):
        root = {"#text": root}

    if root_name == ERROR_ROOT:
        _raise_vendor_error(root, xml)

    kind = _ROOT_KINDS.get(root_name)
    if kind is None:
        error = get_error("E-3005")
        raise ResponseError(
            code="E-3005",
            message=f"Unknown root node in XML response: '{root_name}'",
            response=xml,
            remediation=error.remediation if error else "",
        )

    if kind == ResponseKind.TRACKING:
        _check_track_infos(root, xml)
    else:
        _check_rate_packages(root, xml)

    logger.debug("Parsed USPS %s response", kind.value)
    return ParsedResponse(
        kind=kind, root_name=root_name, root=root, params=params, xml=xml
    )
