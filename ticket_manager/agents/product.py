"""
Product Agent client

Availability and sourcing lookups. Queries mentioning several products
are routed to the multi-product endpoint.
"""
import re
from typing import Any, Dict, List, Optional

from ticket_manager.agents.base import AgentClient
from ticket_manager.config import Settings, get_settings
from ticket_manager.models.schemas import ProductResponse
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

_PRODUCT_WORDS = r"(t-?shirts?|hoodies?|bags?|tote|pens?|mugs?|caps?|jackets?)"

# Heuristic. Lists like "red, blue, and green" can match and product
# synonyms outside _PRODUCT_WORDS are missed.
MULTI_PRODUCT_PATTERNS = [
    # "100 pcs X and 50 pcs Y" or "100pcs X and 50pcs Y"
    re.compile(r"\d+\s*(pcs|pieces?).*\band\b.*\d+\s*(pcs|pieces?)", re.IGNORECASE),
    # "100 pcs X, 50 pcs Y"
    re.compile(r"\d+[\s,]*\d*\s*(pcs|pieces?).*,.*\d+[\s,]*\d*\s*(pcs|pieces?)", re.IGNORECASE),
    # "1,500 t-shirts, 500 hoodies"
    re.compile(r"\d+[\s,]*\d*\s+\w+.*,\s*\d+[\s,]*\d*\s+\w+", re.IGNORECASE),
    # product keywords joined by "and"
    re.compile(rf"\b{_PRODUCT_WORDS}.*\band\b.*\b{_PRODUCT_WORDS}", re.IGNORECASE),
]


def is_multi_product_query(query: Optional[str]) -> bool:
    """True when the query text mentions more than one product"""
    if not query:
        return False
    return any(pattern.search(query) for pattern in MULTI_PRODUCT_PATTERNS)


class ProductAgentClient(AgentClient):
    """Client for the product availability agent"""

    name = "Product Agent"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.product_agent_url,
            headers={"X-API-Key": settings.product_agent_api_key},
            timeout=settings.product_agent_timeout
        )

    async def query(self, text: str, context: Optional[Dict[str, Any]] = None) -> ProductResponse:
        """
        Look up availability and sourcing

        Args:
            text: Query text (products, customization, quantity)
            context: quantity and urgent flag

        Returns:
            ProductResponse in single or multi-product shape
        """
        context = context or {}
        logger.info(f"Querying Product Agent: \"{text[:100]}\"")

        if is_multi_product_query(text):
            logger.info("Detected multi-product query, using multi endpoint")
            return await self.query_multi(text, context)

        return await self.query_single(text, context)

    async def query_single(self, text: str, context: Dict[str, Any]) -> ProductResponse:
        data = await self._post("/api/product/availability", {
            "query": text,
            "quantity": context.get("quantity"),
            "urgent": bool(context.get("urgent", False)),
        })

        if not data.get("success"):
            logger.warning(f"Product Agent returned unsuccessful response: {data}")
            return ProductResponse(
                success=False,
                query=text,
                error=data.get("error") or "Product lookup failed"
            )

        payload = data.get("data") or {}
        availability = payload.get("availability") or {}
        products = availability.get("matchingProducts") or []

        logger.info(
            f"Product Agent found: {'Yes' if availability.get('found') else 'No'}, "
            f"Products: {len(products)}"
        )

        return ProductResponse(
            success=True,
            multi_product=False,
            query=payload.get("query") or text,
            synonym_resolved=payload.get("synonymResolved"),
            found=bool(availability.get("found")),
            color_available=bool(availability.get("colorAvailable")),
            products=products,
            summary=payload.get("summary")
        )

    async def query_multi(self, text: str, context: Dict[str, Any]) -> ProductResponse:
        data = await self._post("/api/product/availability-multi", {
            "query": text,
            "urgent": bool(context.get("urgent", False)),
        })

        if not data.get("success"):
            logger.warning(f"Product Agent multi returned unsuccessful response: {data}")
            return ProductResponse(
                success=False,
                multi_product=True,
                query=text,
                error=data.get("error") or "Product lookup failed"
            )

        payload = data.get("data") or {}
        results: List[Dict[str, Any]] = payload.get("results") or []

        all_products: List[Dict[str, Any]] = []
        any_found = False
        for result in results:
            availability = result.get("availability") or {}
            if availability.get("found"):
                any_found = True
            all_products.extend(availability.get("matchingProducts") or [])

        logger.info(
            f"Product Agent (multi) found: {'Yes' if any_found else 'No'}, "
            f"Total products: {len(all_products)}, Queries: {len(results)}"
        )

        return ProductResponse(
            success=True,
            multi_product=True,
            query=payload.get("query") or text,
            found=any_found,
            products=all_products,
            results=results,
            summary=payload.get("combinedSummary") or "",
            total_products_requested=payload.get("totalProductsRequested") or len(results),
            total_products_found=payload.get("totalProductsFound") or (len(all_products) if any_found else 0)
        )
