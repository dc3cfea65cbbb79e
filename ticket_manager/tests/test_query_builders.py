"""
Unit tests for agent query builders
"""
from ticket_manager.models.schemas import SynonymEntry
from ticket_manager.services.query_builders import (
    build_kb_query,
    build_price_query,
    build_product_query,
    extract_product_context,
    quantity_token,
)
from ticket_manager.tests.factories import make_classification

SYNONYMS = {"tee": SynonymEntry(canonical="T-Shirt")}


class TestQuantityToken:

    def test_adds_unit(self):
        assert quantity_token(100) == "100 pcs"
        assert quantity_token(100.0) == "100 pcs"

    def test_keeps_existing_unit(self):
        assert quantity_token("200 pcs") == "200 pcs"
        assert quantity_token("50 pieces") == "50 pieces"

    def test_empty(self):
        assert quantity_token(None) is None
        assert quantity_token("") is None


class TestProductQuery:

    def test_uses_canonical_names(self):
        classification = make_classification(
            intents=["AVAILABILITY"], products=["tee"], quantity=100, customization=["logo print"]
        )

        query = build_product_query(classification, "subject", SYNONYMS)

        assert query == "T-Shirt logo print 100 pcs"

    def test_falls_back_to_message(self):
        classification = make_classification(message="Do you have umbrellas?")

        assert build_product_query(classification, "subject") == "Do you have umbrellas?"

    def test_falls_back_to_subject(self):
        classification = make_classification(message="")

        assert build_product_query(classification, "Umbrellas") == "Umbrellas"


class TestPriceQuery:

    def test_product_names_take_precedence(self):
        classification = make_classification(
            intents=["PRICE"], products=["tee"], quantity=100, customization=["logo"]
        )

        query = build_price_query(classification, "subject", SYNONYMS, ["Cotton Crew Tee"])

        assert query == "Cotton Crew Tee 100 pcs logo"

    def test_synonym_fallback(self):
        classification = make_classification(intents=["PRICE"], products=["tee"], quantity="200 pcs")

        query = build_price_query(classification, "subject", SYNONYMS, [])

        assert query == "T-Shirt 200 pcs"


class TestKbQuery:

    def test_prefixes_products(self):
        classification = make_classification(products=["tee"], message="What fabric is it?")

        assert build_kb_query(classification, "subject", SYNONYMS) == "T-Shirt: What fabric is it?"

    def test_plain_message(self):
        classification = make_classification(message="What are your opening hours?")

        assert build_kb_query(classification, "subject") == "What are your opening hours?"


class TestProductContext:

    def test_numeric_quantity_and_urgency(self):
        classification = make_classification(quantity=300, message="Need it ASAP please")

        assert extract_product_context(classification) == {"quantity": 300, "urgent": True}

    def test_string_quantity_left_to_agent(self):
        classification = make_classification(quantity="about 300", message="No hurry")

        assert extract_product_context(classification) == {"quantity": None, "urgent": False}
