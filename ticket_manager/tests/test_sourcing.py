"""
Unit tests for sourcing normalization and MOQ disclosure
"""
import pytest

from ticket_manager.models.schemas import (
    AgentResponses,
    PriceResponse,
    ProductResponse,
    SourcingOrigin,
)
from ticket_manager.services.sourcing import (
    extract_price_sourcing,
    extract_product_sourcing,
    find_first_moq,
    parse_quantity,
    should_disclose_moq,
)
from ticket_manager.tests.factories import price_result, product_match


class TestShouldDiscloseMoq:

    def test_quantity_below_moq(self):
        assert should_disclose_moq("Can I get 50 mugs?", 50, 100) is True

    def test_quantity_above_moq(self):
        assert should_disclose_moq("Can I get 500 mugs?", 500, 100) is False

    def test_customer_asked_about_moq(self):
        assert should_disclose_moq("What is the minimum order quantity?", None, None) is True
        assert should_disclose_moq("what's your MOQ", 1000, 100) is True

    def test_no_moq_known(self):
        assert should_disclose_moq("Can I get 50 mugs?", 50, None) is False

    def test_string_quantity(self):
        assert should_disclose_moq("Need some mugs", "40 pcs", 100) is True


class TestParseQuantity:

    @pytest.mark.parametrize("value,expected", [
        (100, 100),
        (99.0, 99),
        ("1,500 pcs", 1500),
        ("about 300", 300),
        ("a few", None),
        (None, None),
        (True, None),
    ])
    def test_values(self, value, expected):
        assert parse_quantity(value) == expected


class TestProductSourcing:

    def test_china_recommended(self):
        item = {
            "product": {"name": "Mug", "sourcing": {"china": {"moq": 500, "air": True, "sea": True}}},
            "recommendation": {"source": "china", "reason": "Best price"},
        }

        sourcing = extract_product_sourcing(item)

        assert sourcing.source == SourcingOrigin.CHINA
        assert sourcing.moq == 500
        assert sourcing.air_shipping and sourcing.sea_shipping
        assert sourcing.note == "Best price"

    def test_local(self):
        sourcing = extract_product_sourcing(product_match("Mug", moq=100))

        assert sourcing.source == SourcingOrigin.LOCAL
        assert sourcing.moq == 100
        assert sourcing.supplier == "LocalCo"
        assert sourcing.lead_time == "5-7 days"

    def test_flat_item(self):
        sourcing = extract_product_sourcing({"name": "Pen", "moq": "250 pcs"})

        assert sourcing.source == SourcingOrigin.OTHER
        assert sourcing.moq == 250


class TestPriceSourcing:

    def test_moq_and_lead_time(self):
        sourcing = extract_price_sourcing(price_result("Mug", moq=50))

        assert sourcing.moq == 50
        assert sourcing.lead_time == "7-10 working days"

    def test_missing_fields(self):
        sourcing = extract_price_sourcing({"product_name": "Mug"})

        assert sourcing.moq is None
        assert sourcing.lead_time is None


class TestFindFirstMoq:

    def test_product_before_price(self):
        responses = AgentResponses(
            product=ProductResponse(success=True, found=True, products=[product_match("Mug", moq=100)]),
            price=PriceResponse(success=True, results=[price_result("Mug", moq=50)]),
        )

        assert find_first_moq(responses) == 100

    def test_price_when_product_has_none(self):
        responses = AgentResponses(
            product=ProductResponse(success=True, found=True, products=[product_match("Mug")]),
            price=PriceResponse(success=True, results=[price_result("Mug", moq=50)]),
        )

        assert find_first_moq(responses) == 50

    def test_failed_responses_ignored(self):
        responses = AgentResponses(
            product=ProductResponse(success=False, products=[product_match("Mug", moq=100)]),
        )

        assert find_first_moq(responses) is None


class TestIrregularProductItems:

    def test_string_recommendation(self):
        sourcing = extract_product_sourcing({"name": "Mug", "recommendation": "china"})

        assert sourcing.source == SourcingOrigin.OTHER
        assert sourcing.moq is None

    def test_non_object_sourcing(self):
        item = {"product": {"name": "Mug", "sourcing": ["china"]}, "recommendation": {"source": "china"}}

        sourcing = extract_product_sourcing(item)

        assert sourcing.source == SourcingOrigin.CHINA
        assert sourcing.air_shipping is False

    def test_numeric_lead_time(self):
        item = {"name": "Mug", "recommendation": {"source": "local", "leadTime": 7, "supplier": {"id": 1}}}

        sourcing = extract_product_sourcing(item)

        assert sourcing.lead_time == "7"
        assert sourcing.supplier is None
