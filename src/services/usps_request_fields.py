"""Derive the field values an outbound USPS rate request needs.

XML templating itself belongs to the transport collaborator; this module
only computes the values it fills in (normalized ZIPs, weight split into
pounds and ounces, size code, container, and account-type flags).
"""

import math
import re
from typing import Any

from src.errors.domain import ValidationError
from src.models.package import Package
from src.services.package_validity import size_code_for
from src.services.rate_extractor import require_first_class_mail_type
from src.services.usps_constants import (
    DEFAULT_ACCOUNT_TYPE,
    OUNCES_PER_LB,
    AccountType,
    SizeCode,
)
from src.services.usps_service_codes import (
    DEFAULT_SERVICE,
    ServiceType,
    resolve_container,
    resolve_service,
)

_ZIP5 = re.compile(r"^\d{5}$")


def normalize_zip(value: str) -> str:
    """Reduce a US ZIP or ZIP+4 to its 5-digit form.

    Examples:
        >>> normalize_zip("90210-1234")
        '90210'
        >>> normalize_zip("123456789")
        '12345'

    Raises:
        ValidationError: If no 5-digit ZIP remains (E-2001).
    """
    zip5 = str(value).strip().split("-", 1)[0][:5]
    if not _ZIP5.match(zip5):
        raise ValidationError(f"Invalid ZIP code '{value}'.", code="E-2001")
    return zip5


def split_weight(package: Package) -> tuple[int, float]:
    """Split package weight into whole pounds and remaining ounces."""
    pounds = math.floor(package.ounces / OUNCES_PER_LB)
    ounces = round(package.ounces - pounds * OUNCES_PER_LB, 1)
    return (pounds, ounces)


def build_rate_request_fields(
    package: Package,
    origin_zip: str,
    destination_zip: str,
    service: str | ServiceType | None = None,
    first_class_mail_type: str | None = None,
    container: str | None = None,
    account_type: AccountType = DEFAULT_ACCOUNT_TYPE,
    package_id: int = 0,
) -> dict[str, Any]:
    """Compute the values for one domestic <Package> in a RateV4 request.

    Args:
        package: Package to rate.
        origin_zip: Origin ZIP or ZIP+4.
        destination_zip: Destination ZIP or ZIP+4.
        service: Requested service alias; defaults to ALL.
        first_class_mail_type: Required when service is First-Class.
        container: Container alias; defaults to VARIABLE.
        account_type: Account pricing tier.
        package_id: Index of the package within the request.

    Returns:
        Dict keyed by RateV4 element name.

    Raises:
        InvalidMailType: First-Class service without a valid mail type.
        ValidationError: Unusable ZIP code.
    """
    resolved_service = resolve_service(service) or DEFAULT_SERVICE
    mail_type = require_first_class_mail_type(resolved_service, first_class_mail_type)
    size = size_code_for(package)
    pounds, ounces = split_weight(package)

    fields: dict[str, Any] = {
        "@ID": str(package_id),
        "Service": resolved_service.value,
        "ZipOrigination": normalize_zip(origin_zip),
        "ZipDestination": normalize_zip(destination_zip),
        "Pounds": pounds,
        "Ounces": ounces,
        "Container": resolve_container(container).value,
        "Size": size.value,
        "Machinable": "TRUE" if size == SizeCode.REGULAR else "FALSE",
    }
    if mail_type:
        fields["FirstClassMailType"] = mail_type
    if size == SizeCode.LARGE:
        fields["Width"] = round(package.width, 2)
        fields["Length"] = round(package.length, 2)
        fields["Height"] = round(package.height, 2)
        fields["Girth"] = round(package.girth, 2)
    if account_type == AccountType.COMMERCIAL_BASE:
        fields["CommercialFlag"] = "Y"
    elif account_type == AccountType.COMMERCIAL_PLUS:
        fields["CommercialPlusFlag"] = "Y"
    return fields


def build_world_rate_request_fields(
    package: Package,
    origin_zip: str,
    country: str,
    account_type: AccountType = DEFAULT_ACCOUNT_TYPE,
    package_id: int = 0,
) -> dict[str, Any]:
    """Compute the values for one <Package> in an IntlRateV2 request.

    Args:
        package: Package to rate.
        origin_zip: Origin ZIP or ZIP+4.
        country: Destination country name as USPS spells it.
        account_type: Account pricing tier.
        package_id: Index of the package within the request.

    Returns:
        Dict keyed by IntlRateV2 element name.
    """
    pounds, ounces = split_weight(package)
    fields: dict[str, Any] = {
        "@ID": str(package_id),
        "Pounds": pounds,
        "Ounces": ounces,
        "MailType": "Package",
        "Country": country,
        "Container": "RECTANGULAR",
        "Size": size_code_for(package).value,
        "Width": round(package.width, 2),
        "Length": round(package.length, 2),
        "Height": round(package.height, 2),
        "Girth": round(package.girth, 2),
        "OriginZip": normalize_zip(origin_zip),
    }
    if account_type == AccountType.COMMERCIAL_BASE:
        fields["CommercialFlag"] = "Y"
    elif account_type == AccountType.COMMERCIAL_PLUS:
        fields["CommercialPlusFlag"] = "Y"
    return fields
