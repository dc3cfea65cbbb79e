"""
Ticket analysis API routes
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union

from ticket_manager.models.schemas import AnalysisOptions, AnalysisResult
from ticket_manager.services.orchestrator import OrchestratorService
from ticket_manager.utils.auth import verify_api_key
from ticket_manager.utils.logger import get_logger
from ticket_manager.utils.validators import validate_ticket_id

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/ticket",
    tags=["ticket"],
    dependencies=[Depends(verify_api_key)]
)


class AnalyzeRequest(BaseModel):
    """Request model for ticket analysis"""
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: Optional[Union[int, str]] = Field(None, alias="ticketId")
    discord_user_id: Optional[str] = Field(None, alias="discordUserId")
    discord_channel_id: Optional[str] = Field(None, alias="discordChannelId")
    options: Optional[AnalysisOptions] = None


def get_orchestrator(request: Request) -> OrchestratorService:
    """Orchestrator wired at app creation"""
    return request.app.state.orchestrator


@router.post("/analyze", response_model=AnalysisResult, response_model_by_alias=True)
async def analyze_ticket(
    body: AnalyzeRequest,
    request: Request,
    orchestrator: OrchestratorService = Depends(get_orchestrator)
):
    """
    Analyze a Freshdesk ticket and coordinate agent responses
    """
    if body.ticket_id is None or str(body.ticket_id).strip() == "":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ticketId is required"
        )

    if not validate_ticket_id(body.ticket_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ticketId must be numeric"
        )

    ticket_id = str(body.ticket_id).strip()
    request.state.ticket_id = ticket_id
    logger.info(
        f"Received ticket analysis request for #{ticket_id} "
        f"from user {body.discord_user_id or 'unknown'}"
    )

    return await orchestrator.analyze_ticket(ticket_id, body.options or AnalysisOptions())
