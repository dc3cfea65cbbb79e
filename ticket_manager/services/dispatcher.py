"""
Agent Dispatcher

Decides which lookup agents to call for a classified ticket and gathers
their responses.

Call order:
1. Product (when availability was asked) runs alone and is awaited
2. Knowledge and Price run concurrently; Price uses the product names
   Product found, falling back to the synonym map
3. Artwork is a placeholder and makes no call

Every call is isolated: a failing agent fills its own slot with
success=False and never aborts its siblings.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, List, Optional, Type, TypeVar

from ticket_manager.agents.knowledge import KnowledgeAgentClient
from ticket_manager.agents.price import PriceAgentClient
from ticket_manager.agents.product import ProductAgentClient
from ticket_manager.models.schemas import (
    AgentResponses,
    AnalysisOptions,
    ArtworkResponse,
    Classification,
    Intent,
    KnowledgeResponse,
    PriceResponse,
    ProductResponse,
    SynonymMap,
    TicketData,
)
from ticket_manager.services.query_builders import (
    build_kb_query,
    build_price_query,
    build_product_query,
    extract_product_context,
)
from ticket_manager.services.sourcing import as_dict, product_name
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

R = TypeVar("R", KnowledgeResponse, ProductResponse, PriceResponse)


@dataclass(frozen=True)
class AgentSelection:
    """Agents to call for one request"""
    knowledge: bool = False
    product: bool = False
    price: bool = False
    artwork: bool = False

    @property
    def any(self) -> bool:
        return self.knowledge or self.product or self.price or self.artwork


def select_agents(classification: Classification, options: AnalysisOptions) -> AgentSelection:
    """Combine caller flags with classified intents"""
    return AgentSelection(
        knowledge=options.include_kb and classification.has_intent(Intent.KNOWLEDGE, Intent.OTHER),
        product=options.include_product and classification.has_intent(Intent.AVAILABILITY),
        price=options.include_price and classification.has_intent(Intent.PRICE),
        artwork=options.include_artwork and classification.has_intent(Intent.ARTWORK),
    )


def extract_canonical_product_names(product: Optional[ProductResponse]) -> List[str]:
    """
    Product names from a product response, deduplicated in order

    Reads the flat match list of the single-product shape and the
    per-query matches of the multi-product shape.
    """
    if product is None or not product.success:
        return []

    items = list(product.products)
    for result in product.results:
        matches = as_dict(result.get("availability")).get("matchingProducts")
        if isinstance(matches, list):
            items.extend(matches)

    names: List[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = product_name(item)
        if name and name not in names:
            names.append(name)
    return names


class AgentDispatcher:
    """Fans a classified ticket out to the lookup agents"""

    def __init__(
        self,
        kb_agent: KnowledgeAgentClient,
        product_agent: ProductAgentClient,
        price_agent: PriceAgentClient
    ):
        self.kb_agent = kb_agent
        self.product_agent = product_agent
        self.price_agent = price_agent

    async def dispatch(
        self,
        classification: Classification,
        ticket_data: TicketData,
        synonym_map: SynonymMap,
        options: AnalysisOptions
    ) -> AgentResponses:
        """
        Call the selected agents and collect their responses

        Args:
            classification: Classified intents and entities
            ticket_data: Fetched ticket (subject, requester)
            synonym_map: Resolved product terms
            options: Caller include/exclude flags

        Returns:
            AgentResponses; slots of agents not called stay None
        """
        selection = select_agents(classification, options)
        responses = AgentResponses()
        subject = ticket_data.ticket.subject

        logger.info(
            f"Dispatching agents for ticket #{ticket_data.ticket.id}: "
            f"knowledge={selection.knowledge}, product={selection.product}, "
            f"price={selection.price}, artwork={selection.artwork}"
        )

        if selection.artwork:
            responses.artwork = ArtworkResponse()

        product_names: List[str] = []
        if selection.product:
            query = build_product_query(classification, subject, synonym_map)
            responses.product = await self._guard(
                "Product Agent",
                self.product_agent.query(query, extract_product_context(classification)),
                ProductResponse
            )
            product_names = extract_canonical_product_names(responses.product)
            if not responses.product.success:
                logger.warning("Product Agent failed, pricing will rely on synonym map only")

        pending = []
        if selection.knowledge:
            query = build_kb_query(classification, subject, synonym_map)
            pending.append(("knowledge", self._guard(
                "KB Agent",
                self.kb_agent.query(query, {"ticket_id": ticket_data.ticket.id}),
                KnowledgeResponse
            )))

        if selection.price:
            query = build_price_query(classification, subject, synonym_map, product_names)
            pending.append(("price", self._guard(
                "Price Agent",
                self.price_agent.query(query),
                PriceResponse
            )))

        if pending:
            results = await asyncio.gather(*(call for _, call in pending))
            for (slot, _), result in zip(pending, results):
                setattr(responses, slot, result)

        return responses

    async def _guard(self, agent_name: str, call: Awaitable[R], response_cls: Type[R]) -> R:
        """Turn an agent exception into a failed response for that slot"""
        try:
            return await call
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"{agent_name} failed: {error}")
            return response_cls(success=False, error=error)
