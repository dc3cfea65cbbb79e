"""
Synonym Agent client

Served by the product agent's /api/product/resolve endpoint.
"""
from typing import Any, Dict, List, Optional

from ticket_manager.agents.base import AgentClient
from ticket_manager.config import Settings, get_settings
from ticket_manager.exceptions import SynonymResolutionError
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


class SynonymAgentClient(AgentClient):
    """Resolves customer terms to canonical catalog names"""

    name = "Synonym Agent"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.product_agent_url,
            headers={"X-API-Key": settings.product_agent_api_key},
            timeout=settings.synonym_timeout
        )

    async def resolve(self, terms: List[str]) -> List[Dict[str, Any]]:
        """
        Resolve a batch of terms in one call

        Args:
            terms: Customer product terms

        Returns:
            Resolutions: [{input, canonicalName, confidence, alternates, category}]

        Raises:
            SynonymResolutionError: If the agent reports failure
        """
        logger.info(f"Resolving synonyms for terms: {terms}")
        data = await self._post("/api/product/resolve", {"terms": terms})

        if not data.get("success"):
            raise SynonymResolutionError(
                f"Synonym resolution returned unsuccessful: {data.get('error') or data}"
            )

        return data.get("resolutions") or []
