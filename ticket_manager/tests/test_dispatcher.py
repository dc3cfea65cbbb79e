"""
Unit tests for the agent dispatcher

Tests:
- Agent selection from intents and options
- Product runs before price and feeds it product names
- Per-agent failure isolation
- Artwork placeholder
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ticket_manager.models.schemas import (
    AnalysisOptions,
    KnowledgeResponse,
    PriceResponse,
    ProductResponse,
    SynonymEntry,
)
from ticket_manager.services.dispatcher import (
    AgentDispatcher,
    extract_canonical_product_names,
    select_agents,
)
from ticket_manager.tests.factories import make_classification, product_match


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def agents(call_log):
    """Mock agent clients recording the order they are awaited in"""

    def recorder(name, response):
        async def _call(*args, **kwargs):
            call_log.append(name)
            return response
        return AsyncMock(side_effect=_call)

    kb_agent = MagicMock()
    kb_agent.query = recorder("knowledge", KnowledgeResponse(success=True, answer="We print mugs."))
    product_agent = MagicMock()
    product_agent.query = recorder("product", ProductResponse(
        success=True, found=True, products=[product_match("Ceramic Mug 11oz", moq=100)]
    ))
    price_agent = MagicMock()
    price_agent.query = recorder("price", PriceResponse(success=True, products_found=1))
    return kb_agent, product_agent, price_agent


@pytest.fixture
def dispatcher(agents):
    kb_agent, product_agent, price_agent = agents
    return AgentDispatcher(kb_agent, product_agent, price_agent)


class TestSelectAgents:

    def test_price_only(self):
        selection = select_agents(make_classification(intents=["PRICE"]), AnalysisOptions())

        assert selection.price
        assert not selection.product
        assert not selection.knowledge
        assert not selection.artwork

    def test_other_routes_to_knowledge(self):
        selection = select_agents(make_classification(intents=["OTHER"]), AnalysisOptions())

        assert selection.knowledge

    def test_options_disable_agents(self):
        classification = make_classification(intents=["KNOWLEDGE", "PRICE", "AVAILABILITY"])

        selection = select_agents(
            classification,
            AnalysisOptions(include_kb=False, include_price=False)
        )

        assert selection.product
        assert not selection.knowledge
        assert not selection.price

    def test_artwork_off_by_default(self):
        selection = select_agents(make_classification(intents=["ARTWORK"]), AnalysisOptions())

        assert not selection.artwork
        assert not selection.any


class TestDispatch:

    @pytest.mark.asyncio
    async def test_product_runs_before_price(self, dispatcher, agents, call_log, ticket_data):
        _, _, price_agent = agents
        classification = make_classification(
            intents=["PRICE", "AVAILABILITY"], products=["mug"], quantity=100
        )

        responses = await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        assert call_log == ["product", "price"]
        assert responses.product.success
        assert responses.price.success
        assert price_agent.query.await_args.args[0] == "Ceramic Mug 11oz 100 pcs"

    @pytest.mark.asyncio
    async def test_product_finishes_before_price_starts(self, dispatcher, agents, ticket_data):
        _, product_agent, price_agent = agents
        events = []

        async def product_call(*args, **kwargs):
            events.append("product:start")
            await asyncio.sleep(0)
            events.append("product:end")
            return ProductResponse(success=True, found=True, products=[product_match("Mug")])

        async def price_call(*args, **kwargs):
            events.append("price:start")
            return PriceResponse(success=True)

        product_agent.query = AsyncMock(side_effect=product_call)
        price_agent.query = AsyncMock(side_effect=price_call)
        classification = make_classification(intents=["PRICE", "AVAILABILITY"], products=["mug"])

        await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        assert events == ["product:start", "product:end", "price:start"]

    @pytest.mark.asyncio
    async def test_knowledge_and_price_in_flight_together(self, dispatcher, agents, ticket_data):
        kb_agent, _, price_agent = agents
        price_started = asyncio.Event()

        async def kb_call(*args, **kwargs):
            # Completes only if price is issued while this call is pending
            await asyncio.wait_for(price_started.wait(), timeout=1)
            return KnowledgeResponse(success=True, answer="Yes.")

        async def price_call(*args, **kwargs):
            price_started.set()
            return PriceResponse(success=True)

        kb_agent.query = AsyncMock(side_effect=kb_call)
        price_agent.query = AsyncMock(side_effect=price_call)
        classification = make_classification(intents=["KNOWLEDGE", "PRICE"])

        responses = await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        assert responses.knowledge.success is True
        assert responses.price.success is True

    @pytest.mark.asyncio
    async def test_product_failure_still_calls_price(self, dispatcher, agents, ticket_data):
        _, product_agent, price_agent = agents
        product_agent.query = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))
        classification = make_classification(
            intents=["PRICE", "AVAILABILITY"], products=["tee"], quantity=50
        )
        synonym_map = {"tee": SynonymEntry(canonical="T-Shirt")}

        responses = await dispatcher.dispatch(classification, ticket_data, synonym_map, AnalysisOptions())

        assert responses.product.success is False
        assert "timed out" in responses.product.error
        assert responses.price.success
        assert price_agent.query.await_args.args[0] == "T-Shirt 50 pcs"

    @pytest.mark.asyncio
    async def test_price_only_never_calls_product(self, dispatcher, agents, call_log, ticket_data):
        _, product_agent, _ = agents
        classification = make_classification(intents=["PRICE"], products=["mug"])

        responses = await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        product_agent.query.assert_not_called()
        assert call_log == ["price"]
        assert responses.product is None
        assert responses.knowledge is None

    @pytest.mark.asyncio
    async def test_failing_agent_does_not_affect_siblings(self, dispatcher, agents, ticket_data):
        kb_agent, _, _ = agents
        kb_agent.query = AsyncMock(side_effect=RuntimeError("kb exploded"))
        classification = make_classification(intents=["KNOWLEDGE", "PRICE"])

        responses = await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        assert responses.knowledge.success is False
        assert responses.knowledge.error == "kb exploded"
        assert responses.price.success is True

    @pytest.mark.asyncio
    async def test_artwork_placeholder(self, dispatcher, call_log, ticket_data):
        classification = make_classification(intents=["ARTWORK"])

        responses = await dispatcher.dispatch(
            classification, ticket_data, {}, AnalysisOptions(include_artwork=True)
        )

        assert responses.artwork.success is False
        assert responses.artwork.message == "Artwork agent not yet implemented"
        assert call_log == []

    @pytest.mark.asyncio
    async def test_knowledge_context(self, dispatcher, agents, ticket_data):
        kb_agent, _, _ = agents
        classification = make_classification(intents=["KNOWLEDGE"], message="Do you ship overseas?")

        await dispatcher.dispatch(classification, ticket_data, {}, AnalysisOptions())

        text, context = kb_agent.query.await_args.args
        assert text == "Do you ship overseas?"
        assert context == {"ticket_id": 123}


class TestExtractCanonicalProductNames:

    def test_irregular_multi_results(self):
        product = ProductResponse(
            success=True,
            results=[
                {"availability": "unavailable"},
                {"availability": {"matchingProducts": "none"}},
                {"availability": {"matchingProducts": ["Mug", {"name": "Pen"}]}},
            ],
        )

        assert extract_canonical_product_names(product) == ["Pen"]

    def test_single_and_multi_shapes(self):
        product = ProductResponse(
            success=True,
            products=[product_match("Mug"), {"name": "Pen"}],
            results=[{"availability": {"matchingProducts": [product_match("Mug"), product_match("Tote Bag")]}}],
        )

        assert extract_canonical_product_names(product) == ["Mug", "Pen", "Tote Bag"]

    def test_failed_or_missing(self):
        assert extract_canonical_product_names(None) == []
        assert extract_canonical_product_names(
            ProductResponse(success=False, products=[{"name": "Mug"}])
        ) == []
