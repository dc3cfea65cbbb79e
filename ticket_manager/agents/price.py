"""
Price Agent client
"""
from typing import Optional

from ticket_manager.agents.base import AgentClient
from ticket_manager.config import Settings, get_settings
from ticket_manager.models.schemas import PriceResponse
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


class PriceAgentClient(AgentClient):
    """Client for the pricelist agent"""

    name = "Price Agent"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.price_agent_url,
            headers={"Authorization": f"Bearer {settings.price_agent_api_key}"},
            timeout=settings.price_agent_timeout
        )

    async def query(self, text: str) -> PriceResponse:
        """
        Look up pricing for a free-text product query

        Args:
            text: Query text (products, quantity, print options)

        Returns:
            PriceResponse
        """
        logger.info(f"Querying Price Agent: \"{text[:100]}\"")

        data = await self._post("/api/price/query", {"query": text})

        if not data.get("success"):
            logger.warning(f"Price Agent returned unsuccessful response: {data}")
            return PriceResponse(
                success=False,
                query=text,
                error=data.get("error") or "Price lookup failed"
            )

        payload = data.get("data") or {}
        products_found = payload.get("products_found") or 0
        logger.info(f"Price Agent found {products_found} products")

        return PriceResponse(
            success=True,
            query=text,
            results=payload.get("results") or [],
            alternatives=payload.get("alternatives") or [],
            products_found=products_found
        )
