"""USPS service layer: injected transport in, typed results out.

The transport is any callable ``(action, request) -> bytes | str``; it
owns HTTP, credentials, and request templating. This layer derives the
request fields, hands them over, and interprets what comes back.

Example:
    svc = USPSService(transport=my_transport)
    rates = svc.find_rates("90210", "10017", [Package(weight=9, dimensions=[8, 6, 1])])
    tracking = svc.find_tracking_info("9102901000462189604217")
"""

import logging
from collections.abc import Callable
from typing import Any

from src.config import USPSCoreConfig
from src.models.package import Package
from src.models.rate import RateResponse
from src.models.tracking import TrackingResponse
from src.services.rate_extractor import extract_rates, require_first_class_mail_type
from src.services.tracking_parser import parse_tracking_response
from src.services.usps_constants import OUNCES_PER_LB, AccountType
from src.services.usps_request_fields import (
    build_rate_request_fields,
    build_world_rate_request_fields,
)
from src.services.usps_response_parser import parse_response
from src.services.usps_service_codes import ServiceType

logger = logging.getLogger(__name__)

Transport = Callable[[str, dict[str, Any]], bytes | str]

US_RATES_ACTION = "us_rates"
WORLD_RATES_ACTION = "world_rates"
TRACK_ACTION = "track"


class USPSService:
    """Rate and tracking lookups over an injected transport.

    All methods are synchronous and hold no per-call state, so one
    instance can serve concurrent callers.
    """

    def __init__(
        self,
        transport: Transport,
        account_type: AccountType | None = None,
        config: USPSCoreConfig | None = None,
    ) -> None:
        """Initialize with a transport and optional configuration.

        Args:
            transport: Callable that performs the USPS request.
            account_type: Pricing tier; overrides config when given.
            config: Loaded configuration; defaults apply when None.
        """
        self._transport = transport
        self._config = config or USPSCoreConfig()
        self.account_type = AccountType(account_type or self._config.rating.account_type)

    @property
    def maximum_weight(self) -> float:
        """Heaviest accepted package, in ounces."""
        return self._config.rating.maximum_weight_lbs * OUNCES_PER_LB

    def find_rates(
        self,
        origin_zip: str,
        destination_zip: str | None,
        packages: Package | list[Package],
        *,
        country: str | None = None,
        service: str | ServiceType | None = None,
        first_class_mail_type: str | None = None,
        container: str | None = None,
    ) -> RateResponse:
        """Rate one or more packages.

        Args:
            origin_zip: Origin ZIP or ZIP+4.
            destination_zip: Destination ZIP; ignored for international.
            packages: One package or a list, in request order.
            country: Destination country for international rating.
            service: Requested domestic service alias.
            first_class_mail_type: Required when service is First-Class.
            container: Domestic container alias.

        Returns:
            RateResponse with rates sorted by price.

        Raises:
            InvalidMailType: First-Class service without a valid mail type.
            ResponseError: On any protocol-level failure.
        """
        if isinstance(packages, Package):
            packages = [packages]

        if country:
            action = WORLD_RATES_ACTION
            request = {
                "Package": [
                    build_world_rate_request_fields(
                        p, origin_zip, country, self.account_type, package_id=i
                    )
                    for i, p in enumerate(packages)
                ],
            }
        else:
            require_first_class_mail_type(service, first_class_mail_type)
            action = US_RATES_ACTION
            request = {
                "Package": [
                    build_rate_request_fields(
                        p,
                        origin_zip,
                        destination_zip or "",
                        service=service,
                        first_class_mail_type=first_class_mail_type,
                        container=container,
                        account_type=self.account_type,
                        package_id=i,
                    )
                    for i, p in enumerate(packages)
                ],
            }

        body = self._transport(action, request)
        parsed = parse_response(body)
        rates = extract_rates(
            parsed,
            packages,
            account_type=self.account_type,
            service=None if country else service,
            first_class_mail_type=first_class_mail_type,
            unrecognized_dimensions=self._config.rating.unrecognized_dimensions,
        )
        logger.debug("USPS %s returned %d rates", action, len(rates))
        return RateResponse(rates=rates, xml=parsed.xml, params=parsed.params)

    def find_tracking_info(self, tracking_number: str) -> TrackingResponse:
        """Look up tracking history for one number.

        Args:
            tracking_number: USPS tracking number.

        Returns:
            TrackingResponse with events in ascending time order.

        Raises:
            ResponseError: On error envelopes, not-found, or bad XML.
        """
        body = self._transport(TRACK_ACTION, {"TrackID": {"@ID": tracking_number}})
        parsed = parse_response(body)
        return parse_tracking_response(
            tracking_number,
            parsed,
            default_timezone=self._config.tracking.default_timezone,
        )
