"""Tests for rate extraction from parsed USPS rate responses."""

import logging

import pytest

from src.models.package import Package
from src.services.errors import InvalidMailType
from src.services.rate_extractor import (
    clean_service_name,
    extract_rates,
    package_valid_for_service,
    price_cents,
    require_first_class_mail_type,
)
from src.services.usps_constants import AccountType
from src.services.usps_response_parser import parse_response

DOMESTIC = "beverly_hills_to_new_york_book_commercial_base_rate_response"
DOMESTIC_PLUS = "beverly_hills_to_new_york_book_commercial_plus_rate_response"
INTERNATIONAL = "beverly_hills_to_ottawa_american_wii_rate_response"
INTERNATIONAL_COMMERCIAL = "beverly_hills_to_ottawa_american_wii_commercial_rate_response"


def _service_node(name, max_weight="50", max_dimensions="", **extra):
    """Build an international <Service> dict as xmltodict would."""
    node = {
        "@ID": "3",
        "SvcDescription": name,
        "MaxWeight": max_weight,
        "MaxDimensions": max_dimensions,
        "Postage": ["10.00"],
    }
    node.update(extra)
    return node


class TestCleanServiceName:
    """Markup removal and prefixing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Priority Mail&lt;sup&gt;&#174;&lt;/sup&gt;", "USPS Priority Mail"),
            ("First-Class&lt;sup&gt;&#8482;&lt;/sup&gt; Package Service",
             "USPS First-Class Package Service"),
            ("Express Mail<sup>&reg;</sup> International", "USPS Express Mail International"),
            ("USPS GXG&lt;sup&gt;&#8482;&lt;/sup&gt; Envelopes", "USPS GXG Envelopes"),
            ("Media Mail®", "USPS Media Mail"),
            ("Priority   Mail  ", "USPS Priority Mail"),
        ],
    )
    def test_names(self, raw, expected):
        """Names are unescaped, de-marked, collapsed, and prefixed once."""
        assert clean_service_name(raw) == expected

    def test_empty(self):
        """Empty names give None."""
        assert clean_service_name("") is None
        assert clean_service_name("<sup>&#174;</sup>") is None


class TestPriceCents:
    """Dollar strings to integer cents."""

    def test_rounding(self):
        """Half-cent values round up."""
        assert price_cents({"Rate": "6.95"}, "Rate") == 695
        assert price_cents({"Rate": "1.005"}, "Rate") == 101

    def test_missing_field_is_zero(self):
        """An absent price element reads as zero."""
        assert price_cents({"Rate": "3.09"}, "CommercialRate") == 0

    def test_unparseable_is_zero(self):
        """Garbage prices read as zero."""
        assert price_cents({"Rate": "n/a"}, "Rate") == 0


class TestRequireFirstClassMailType:
    """First-Class requests need a mail type."""

    def test_missing_mail_type(self):
        """First-Class without a mail type raises."""
        with pytest.raises(InvalidMailType) as exc_info:
            require_first_class_mail_type("first_class", None)
        assert exc_info.value.message == "Invalid First Class Mail Type."

    def test_unknown_mail_type(self):
        """An unknown mail type raises."""
        with pytest.raises(InvalidMailType):
            require_first_class_mail_type("first_class", "invalid")

    def test_resolves_alias(self):
        """Aliases resolve to request values."""
        assert require_first_class_mail_type("first_class", "parcel") == "PARCEL"

    def test_other_services_ignore_mail_type(self):
        """Non-First-Class services need no mail type."""
        assert require_first_class_mail_type("priority", None) is None
        assert require_first_class_mail_type(None, None) is None


class TestPackageValidForService:
    """Per-service size checks."""

    def test_no_max_weight_is_valid(self, american_wii):
        """Nodes without MaxWeight are not checked."""
        node = _service_node("Priority Mail International", max_weight=None)
        assert package_valid_for_service(american_wii, node, domestic=False) is True

    def test_domestic_non_flat_rate_is_valid(self, american_wii):
        """Domestic services other than flat-rate are not checked."""
        node = {"MailService": "Priority Mail", "MaxWeight": "1", "MaxDimensions": 'Max. length 1"'}
        assert package_valid_for_service(american_wii, node, domestic=True) is True

    def test_domestic_flat_rate_is_checked(self, american_wii):
        """Domestic flat-rate products are checked against their size."""
        node = {
            "MailService": "Priority Mail Flat Rate Envelope",
            "MaxWeight": "70",
            "MaxDimensions": '12 1/2" x 9 1/2"',
        }
        assert package_valid_for_service(american_wii, node, domestic=True) is False

    def test_fits(self, american_wii):
        """A package inside the parsed limits is valid."""
        node = _service_node(
            "Priority Mail International",
            max_dimensions='Max. length 24", Max. length, height, depth combined 36"',
        )
        assert package_valid_for_service(american_wii, node, domestic=False) is True

    def test_too_heavy(self, american_wii):
        """MaxWeight is applied as the weight bound."""
        node = _service_node(
            "Priority Mail International",
            max_weight="3",
            max_dimensions='Max. length 24", Max. length, height, depth combined 36"',
        )
        assert package_valid_for_service(american_wii, node, domestic=False) is False

    def test_unrecognized_sentence_unconstrained(self, american_wii, caplog):
        """By default an unparseable sentence only applies MaxWeight."""
        node = _service_node("GXG Envelopes", max_dimensions="Envelopes only.")
        with caplog.at_level(logging.WARNING, logger="src.services.rate_extractor"):
            assert package_valid_for_service(american_wii, node, domestic=False) is True
        assert "Envelopes only." in caplog.text

        heavy = Package(weight=60 * 16, dimensions=[1, 1, 1])
        assert package_valid_for_service(heavy, node, domestic=False) is False

    def test_unrecognized_sentence_reject(self, american_wii):
        """The reject policy drops services with unparseable sentences."""
        node = _service_node("GXG Envelopes", max_dimensions="Envelopes only.")
        assert package_valid_for_service(
            american_wii, node, domestic=False, unrecognized_dimensions="reject"
        ) is False

    def test_unparseable_max_weight_is_unchecked(self, american_wii):
        """A non-numeric MaxWeight is treated like a missing one."""
        node = _service_node("Priority Mail International", max_weight="n/a")
        assert package_valid_for_service(american_wii, node, domestic=False) is True

    def test_missing_package_is_valid(self):
        """Nodes for an unknown package index are not checked."""
        assert package_valid_for_service(None, _service_node("x"), domestic=False) is True


class TestDomesticRates:
    """RateV4 responses by account type."""

    def test_retail(self, xml_fixture, book):
        """Retail reads <Rate>; the commercial-only service is zero."""
        rates = extract_rates(parse_response(xml_fixture(DOMESTIC)), [book])
        by_name = {r.service_name: r.price for r in rates}
        assert by_name["USPS First-Class Package Service"] == 0
        assert by_name["USPS First-Class Mail Parcel"] == 309
        assert by_name["USPS Priority Mail"] == 695
        assert by_name["USPS Priority Mail Flat Rate Envelope"] == 560

    def test_commercial_base(self, xml_fixture, book):
        """Commercial base reads <CommercialRate>; the retail twin is zero."""
        rates = extract_rates(
            parse_response(xml_fixture(DOMESTIC)), [book],
            account_type=AccountType.COMMERCIAL_BASE,
        )
        by_name = {r.service_name: r.price for r in rates}
        assert by_name["USPS First-Class Mail Parcel"] == 0
        assert by_name["USPS First-Class Package Service"] == 273
        assert by_name["USPS Priority Mail"] == 651
        assert by_name["USPS Media Mail"] == 0

    def test_commercial_plus(self, xml_fixture, book):
        """Commercial plus reads <CommercialPlusRate>."""
        rates = extract_rates(
            parse_response(xml_fixture(DOMESTIC_PLUS)), [book],
            account_type=AccountType.COMMERCIAL_PLUS,
        )
        by_name = {r.service_name: r.price for r in rates}
        assert by_name["USPS First-Class Mail Parcel"] == 0
        assert by_name["USPS First-Class Package Service"] == 405
        assert by_name["USPS Priority Mail 2-Day"] == 625

    def test_retail_and_commercial_twins_never_both_priced(self, xml_fixture, book):
        """At most one of each retail/commercial pair has a price."""
        for account_type in AccountType:
            rates = extract_rates(
                parse_response(xml_fixture(DOMESTIC)), [book], account_type=account_type
            )
            by_name = {r.service_name: r.price for r in rates}
            assert not (
                by_name["USPS First-Class Mail Parcel"]
                and by_name["USPS First-Class Package Service"]
            )

    def test_sorted_with_codes(self, xml_fixture, book):
        """Rates are sorted by price and carry the CLASSID."""
        rates = extract_rates(parse_response(xml_fixture(DOMESTIC)), [book])
        prices = [r.price for r in rates]
        assert prices == sorted(prices)
        priority = next(r for r in rates if r.service_name == "USPS Priority Mail")
        assert priority.service_code == "1"
        assert priority.currency == "USD"

    def test_multiple_packages(self, xml_fixture, book):
        """Prices sum across packages; partly priced services are dropped."""
        rates = extract_rates(parse_response(xml_fixture("two_book_rate_response")), [book, book])
        assert [r.service_name for r in rates] == ["USPS Priority Mail"]
        assert rates[0].price == 1935
        assert rates[0].package_prices == (695, 1240)

    def test_first_class_with_mail_type(self, xml_fixture):
        """A First-Class request with a mail type succeeds."""
        rates = extract_rates(
            parse_response(xml_fixture("first_class_packages_with_mail_type_response")),
            [Package(weight=0, dimensions=0)],
            service="first_class",
            first_class_mail_type="parcel",
        )
        assert [(r.service_name, r.price) for r in rates] == [("USPS First-Class Mail Parcel", 172)]

    def test_first_class_without_mail_type(self, xml_fixture):
        """A First-Class request without a mail type raises."""
        body = xml_fixture("first_class_packages_with_mail_type_response")
        with pytest.raises(InvalidMailType) as exc_info:
            extract_rates(parse_response(body), [Package(weight=0, dimensions=0)], service="first_class")
        assert exc_info.value.response == body

    def test_tracking_response_rejected(self, xml_fixture, book):
        """Only rate responses can be extracted."""
        with pytest.raises(ValueError):
            extract_rates(parse_response(xml_fixture("tracking_response")), [book])


class TestInternationalRates:
    """IntlRateV2 responses."""

    def test_retail(self, xml_fixture, american_wii):
        """Services the package does not fit are dropped."""
        rates = extract_rates(parse_response(xml_fixture(INTERNATIONAL)), [american_wii])
        assert [r.price for r in rates] == [1795, 3420, 5835, 8525, 8525]
        assert sorted(int(r.service_code) for r in rates) == [1, 2, 4, 12, 15]
        assert sorted(r.service_name for r in rates) == [
            "USPS Express Mail International",
            "USPS First-Class Package International Service",
            "USPS GXG Envelopes",
            "USPS Global Express Guaranteed (GXG)",
            "USPS Priority Mail International",
        ]

    def test_retail_reject_policy(self, xml_fixture, american_wii):
        """The reject policy also drops the unparseable GXG Envelopes."""
        rates = extract_rates(
            parse_response(xml_fixture(INTERNATIONAL)), [american_wii],
            unrecognized_dimensions="reject",
        )
        assert "USPS GXG Envelopes" not in {r.service_name for r in rates}
        assert len(rates) == 4

    @pytest.mark.parametrize(
        "account_type,expected",
        [
            (AccountType.COMMERCIAL_BASE, [4112, 6047, 7744, 7744]),
            (AccountType.COMMERCIAL_PLUS, [3767, 5526, 7231, 7231]),
        ],
    )
    def test_commercial(self, xml_fixture, american_wii, account_type, expected):
        """Commercial tiers read their own postage element."""
        rates = extract_rates(
            parse_response(xml_fixture(INTERNATIONAL_COMMERCIAL)), [american_wii],
            account_type=account_type,
        )
        assert [r.price for r in rates] == expected

    def test_heavy_package_drops_light_services(self, xml_fixture):
        """A package over a service's MaxWeight loses that service."""
        heavy = Package(weight=5 * 16, dimensions=[15, 10, 4.5])
        rates = extract_rates(parse_response(xml_fixture(INTERNATIONAL)), [heavy])
        assert "USPS First-Class Package International Service" not in {
            r.service_name for r in rates
        }
