"""Extract Rate objects from parsed USPS rate responses.

Domestic (RateV4) and international (IntlRateV2) responses carry the
same information under different element names:

    domestic        <Postage CLASSID=..><MailService/><Rate/>
    international   <Service ID=..><SvcDescription/><Postage/>

Each service node is validated against the package it was quoted for;
services that do not fit every package are dropped. Prices are read from
the element that matches the account type; a missing element yields a
zero price rather than dropping the service.
"""

import html
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Literal

from src.errors.domain import MalformedConstraintSentence
from src.models.constraints import with_weight
from src.models.package import Package
from src.models.rate import Rate
from src.services.constraint_parser import parse_max_dimensions
from src.services.errors import InvalidMailType
from src.services.package_validity import is_valid
from src.services.usps_constants import (
    DEFAULT_ACCOUNT_TYPE,
    DOMESTIC_PRICE_FIELDS,
    INTERNATIONAL_PRICE_FIELDS,
    USPS_SERVICE_NAME_PREFIX,
    AccountType,
)
from src.services.usps_response_parser import ParsedResponse, ResponseKind, node_text
from src.services.usps_service_codes import (
    COMMERCIAL_RETAIL_EQUIVALENTS,
    FIRST_CLASS_SERVICES,
    RETAIL_COMMERCIAL_EQUIVALENTS,
    ServiceType,
    resolve_first_class_mail_type,
    resolve_service,
)

logger = logging.getLogger(__name__)

UnrecognizedPolicy = Literal["unconstrained", "reject"]

_SUP_BLOCK = re.compile(r"<sup>.*?</sup>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_MARKS = re.compile(r"[®™]")
_FLAT_RATE = re.compile(r"flat.rate", re.IGNORECASE)

# (service element, code attribute, name element)
_DOMESTIC_NODES = ("Postage", "@CLASSID", "MailService")
_INTERNATIONAL_NODES = ("Service", "@ID", "SvcDescription")


def clean_service_name(raw: str | None) -> str | None:
    """Strip USPS markup from a service name and add the USPS prefix.

    Examples:
        >>> clean_service_name("Priority Mail&lt;sup&gt;&amp;reg;&lt;/sup&gt; Flat Rate Envelope")
        'USPS Priority Mail Flat Rate Envelope'
    """
    if not raw:
        return None
    previous = None
    text = raw
    while text != previous:
        previous, text = text, html.unescape(text)
    text = _SUP_BLOCK.sub("", text)
    text = _TAG.sub("", text)
    text = _MARKS.sub("", text)
    text = " ".join(text.split())
    if not text:
        return None
    if not text.startswith(USPS_SERVICE_NAME_PREFIX):
        text = USPS_SERVICE_NAME_PREFIX + text
    return text


def price_cents(node: dict[str, Any], field_name: str) -> int:
    """Read a dollar price element as integer cents, 0 when absent."""
    text = node_text(node.get(field_name))
    if text is None:
        return 0
    try:
        dollars = Decimal(text)
    except InvalidOperation:
        logger.debug("Unparseable %s price %r, using 0", field_name, text)
        return 0
    return int((dollars * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def require_first_class_mail_type(
    service: str | ServiceType | None,
    first_class_mail_type: str | None,
    response: str = "",
) -> str | None:
    """Validate the mail type for First-Class requests.

    Args:
        service: Requested service, alias or enum.
        first_class_mail_type: Mail type alias or request value.
        response: Raw body to attach to the error, if any.

    Returns:
        Resolved mail type request value, or None for other services.

    Raises:
        InvalidMailType: If service is First-Class and the mail type is
            missing or unknown.
    """
    resolved_service = resolve_service(service)
    if resolved_service not in FIRST_CLASS_SERVICES:
        return None
    mail_type = resolve_first_class_mail_type(first_class_mail_type)
    if mail_type is None:
        raise InvalidMailType(response=response)
    return mail_type


def package_valid_for_service(
    package: Package | None,
    service_node: dict[str, Any],
    domestic: bool,
    unrecognized_dimensions: UnrecognizedPolicy = "unconstrained",
) -> bool:
    """Check one package against one service node's size limits.

    Args:
        package: Package the node was quoted for (None skips the check).
        service_node: <Postage> or <Service> element dict.
        domestic: True for RateV4 nodes.
        unrecognized_dimensions: What to do with a MaxDimensions
            sentence that matches no known grammar.

    Returns:
        True if the package fits the service.
    """
    max_weight_text = node_text(service_node.get("MaxWeight"))
    if package is None or max_weight_text is None:
        return True
    try:
        max_weight = float(max_weight_text)
    except ValueError:
        logger.debug("Unparseable MaxWeight %r, treating as missing", max_weight_text)
        return True

    name_tag = _DOMESTIC_NODES[2] if domestic else _INTERNATIONAL_NODES[2]
    name = clean_service_name(node_text(service_node.get(name_tag))) or ""
    if domestic and not _FLAT_RATE.search(name):
        return True

    sentence = node_text(service_node.get("MaxDimensions")) or ""
    try:
        spec = parse_max_dimensions(sentence, service_name=name)
    except MalformedConstraintSentence as e:
        logger.warning(
            "Unrecognized size limit for %s (%s): %r", name, unrecognized_dimensions, e.sentence
        )
        if unrecognized_dimensions == "reject":
            return False
        return package.pounds <= max_weight

    return is_valid(package, with_weight(spec, max_weight))


def _zero_equivalents(
    prices: dict[str, dict[int, int]], account_type: AccountType
) -> None:
    """Zero the retail or commercial twin so both are never nonzero."""
    if account_type == AccountType.RETAIL:
        pairs = COMMERCIAL_RETAIL_EQUIVALENTS
    else:
        pairs = RETAIL_COMMERCIAL_EQUIVALENTS
    for unavailable, kept in pairs.items():
        if unavailable in prices and kept in prices:
            prices[unavailable] = {i: 0 for i in prices[unavailable]}


def extract_rates(
    parsed: ParsedResponse,
    packages: list[Package],
    account_type: AccountType = DEFAULT_ACCOUNT_TYPE,
    service: str | ServiceType | None = None,
    first_class_mail_type: str | None = None,
    unrecognized_dimensions: UnrecognizedPolicy = "unconstrained",
) -> list[Rate]:
    """Extract rates from a parsed rate response.

    Args:
        parsed: Output of parse_response for a rate response.
        packages: Packages in request order; <Package ID> indexes them.
        account_type: Pricing tier that selects the price element.
        service: Requested service, used for First-Class validation.
        first_class_mail_type: Mail type for First-Class requests.
        unrecognized_dimensions: Policy for unparseable size sentences.

    Returns:
        Rates sorted ascending by total price.

    Raises:
        InvalidMailType: If a First-Class request lacks a valid mail type.
        ValueError: If parsed is not a rate response.
    """
    require_first_class_mail_type(service, first_class_mail_type, response=parsed.xml)

    if parsed.kind == ResponseKind.DOMESTIC_RATES:
        domestic = True
        node_tag, code_attr, name_tag = _DOMESTIC_NODES
        price_field = DOMESTIC_PRICE_FIELDS[AccountType(account_type)]
    elif parsed.kind == ResponseKind.INTERNATIONAL_RATES:
        domestic = False
        node_tag, code_attr, name_tag = _INTERNATIONAL_NODES
        price_field = INTERNATIONAL_PRICE_FIELDS[AccountType(account_type)]
    else:
        raise ValueError(f"Not a rate response: {parsed.root_name}")

    package_nodes = parsed.root.get("Package") or []
    codes: dict[str, str] = {}
    prices: dict[str, dict[int, int]] = {}

    for position, package_node in enumerate(package_nodes):
        if not isinstance(package_node, dict):
            continue
        try:
            index = int(package_node.get("@ID", position))
        except (TypeError, ValueError):
            index = position
        package = packages[index] if 0 <= index < len(packages) else None

        for service_node in package_node.get(node_tag) or []:
            if not isinstance(service_node, dict):
                continue
            name = clean_service_name(node_text(service_node.get(name_tag)))
            if name is None:
                continue
            codes.setdefault(name, str(service_node.get(code_attr, "")))
            package_prices = prices.setdefault(name, {})
            if not package_valid_for_service(
                package, service_node, domestic, unrecognized_dimensions
            ):
                logger.debug("Package %d does not fit %s, skipping", index, name)
                continue
            package_prices[index] = price_cents(service_node, price_field)

    _zero_equivalents(prices, AccountType(account_type))

    rates = [
        Rate(
            service_code=codes[name],
            service_name=name,
            price=sum(by_package.values()),
            package_prices=tuple(by_package[i] for i in sorted(by_package)),
        )
        for name, by_package in prices.items()
        if len(by_package) == len(package_nodes)
    ]
    return sorted(rates, key=lambda rate: rate.price)
