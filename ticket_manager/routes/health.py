"""
Health check endpoint with dependency monitoring

GET /health - service status plus connectivity of Freshdesk, the LLM
and the lookup agents. Returns 503 when any dependency is down.
"""
import asyncio
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ticket_manager.services.orchestrator import OrchestratorService
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "ai-ticket-manager-backend"
VERSION = "1.0.0"

CONNECTED = "connected"
DISCONNECTED = "disconnected"
CONFIGURED = "configured"
NOT_CONFIGURED = "not configured"

HEALTHY_STATES = {CONNECTED, CONFIGURED}


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Overall status: healthy, degraded")
    service: str = Field(SERVICE_NAME, description="Service name")
    version: str = Field(VERSION, description="Application version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    dependencies: Dict[str, str] = Field(..., description="Status per dependency")


# ============================================================================
# Dependency Checks
# ============================================================================

def _connectivity(ok: bool) -> str:
    return CONNECTED if ok else DISCONNECTED


async def check_dependencies(orchestrator: OrchestratorService) -> Dict[str, str]:
    """
    Check every external dependency concurrently

    Args:
        orchestrator: Wired orchestrator whose collaborators are checked

    Returns:
        Dependency name -> status string
    """
    dispatcher = orchestrator.dispatcher

    freshdesk, kb_agent, product_agent, price_agent = await asyncio.gather(
        orchestrator.freshdesk.ping(),
        dispatcher.kb_agent.ping(),
        dispatcher.product_agent.ping(),
        dispatcher.price_agent.ping(),
    )

    return {
        "freshdesk": _connectivity(freshdesk),
        # Only the key is checked; a completion costs money
        "llm": CONFIGURED if orchestrator.classifier.llm.is_configured else NOT_CONFIGURED,
        "kbAgent": _connectivity(kb_agent),
        "productAgent": _connectivity(product_agent),
        "priceAgent": _connectivity(price_agent),
    }


@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Service health with dependency status
    """
    dependencies = await check_dependencies(request.app.state.orchestrator)

    all_healthy = all(state in HEALTHY_STATES for state in dependencies.values())
    if not all_healthy:
        logger.warning(f"Health degraded: {dependencies}")

    health = HealthResponse(
        status="healthy" if all_healthy else "degraded",
        dependencies=dependencies
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=health.model_dump(mode="json")
    )
