"""Rate models produced from USPS rate responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.services.usps_constants import USPS_CURRENCY


class Rate(BaseModel):
    """Price for one USPS service across all requested packages.

    A price of 0 with a service name present means the service exists
    but is not available at the active account type's pricing.

    Attributes:
        service_code: CLASSID (domestic) or ID (international) from USPS.
        service_name: Display name, "USPS " prefixed, markup removed.
        price: Total price in cents.
        package_prices: Per-package price in cents, request order.
        currency: ISO currency code.
    """

    model_config = ConfigDict(frozen=True)

    service_code: str
    service_name: str
    price: int = Field(..., ge=0)
    package_prices: tuple[int, ...] = ()
    currency: str = USPS_CURRENCY


class RateResponse(BaseModel):
    """Rates extracted from one USPS rate response."""

    model_config = ConfigDict(frozen=True)

    rates: list[Rate] = Field(default_factory=list)
    xml: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
