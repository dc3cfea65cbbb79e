"""
Knowledge Base Agent client
"""
import time
from typing import Any, Dict, Optional

from ticket_manager.agents.base import AgentClient
from ticket_manager.config import Settings, get_settings
from ticket_manager.models.schemas import KnowledgeResponse
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


def calculate_confidence(answer: Optional[str], articles_found: int) -> float:
    """
    Confidence of a KB answer from its length and article count

    Args:
        answer: Agent answer text
        articles_found: Number of articles the answer drew on

    Returns:
        Confidence between 0.0 and 1.0
    """
    if not answer or len(answer) < 50:
        return 0.3
    if articles_found >= 3:
        return 0.95
    if articles_found >= 1:
        return 0.8
    return 0.5


class KnowledgeAgentClient(AgentClient):
    """Client for the knowledge base chat agent"""

    name = "KB Agent"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.kb_agent_url,
            headers={"x-bot-api-key": settings.kb_agent_api_key},
            timeout=settings.kb_agent_timeout
        )

    async def query(self, text: str, context: Optional[Dict[str, Any]] = None) -> KnowledgeResponse:
        """
        Ask the knowledge base agent a question

        Args:
            text: Query text
            context: ticket_id of the originating ticket

        Returns:
            KnowledgeResponse
        """
        context = context or {}
        logger.info(f"Querying KB Agent: \"{text[:100]}\"")

        session_id = f"ticket-mgr-{context.get('ticket_id', 'unknown')}-{int(time.time() * 1000)}"
        data = await self._post("/api/bot/chat", {
            "message": text,
            "discordUserId": "ticket-manager-orchestrator",
            "discordChannelId": "internal-agent-call",
            "sessionId": session_id,
        })

        answer = data.get("response")
        articles_found = data.get("articlesFound") or 0
        logger.info(f"KB Agent returned {articles_found} articles")

        return KnowledgeResponse(
            success=True,
            answer=answer,
            sources=data.get("sources") or [],
            search_terms=data.get("searchTerms"),
            articles_found=articles_found,
            confidence=calculate_confidence(answer, articles_found),
            query=text
        )
