"""
Shared HTTP plumbing for downstream agent clients
"""
from typing import Any, Dict, Optional

import httpx

from ticket_manager.exceptions import AgentError
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


class AgentClient:
    """
    Base client for a JSON-over-HTTP lookup agent

    Each call opens its own AsyncClient with the agent's fixed timeout.
    Transport and HTTP status errors propagate to the caller.
    """

    name = "agent"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded body

        Raises:
            AgentError: If the agent URL is not configured or the body is not an object
            httpx.HTTPError: On transport or HTTP status errors
        """
        if not self.is_configured:
            raise AgentError(f"{self.name} URL not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}{endpoint}",
                json=payload,
                headers=self.headers
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise AgentError(f"{self.name} returned an unexpected payload")
        return data

    async def ping(self, timeout: float = 5.0) -> bool:
        """Check the agent's /health endpoint"""
        if not self.is_configured:
            return False
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(f"{self.base_url}/health")
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} health check failed: {e}")
            return False
