"""
Orchestrator Service - Ticket analysis pipeline

Sequences the analysis of one ticket:
1. Fetch ticket, thread and requester from Freshdesk
2. Classify intents and extract entities with the LLM
3. Resolve product synonyms (when products were extracted)
4. Dispatch lookup agents
5. Synthesize a draft reply (unless disabled)
6. Assemble the AnalysisResult

Only fetch and classification failures abort the analysis. Every later
stage degrades: partial results still help the human reviewer.
"""
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from ticket_manager.agents.knowledge import KnowledgeAgentClient
from ticket_manager.agents.price import PriceAgentClient
from ticket_manager.agents.product import ProductAgentClient
from ticket_manager.agents.synonym import SynonymAgentClient
from ticket_manager.config import Settings, get_settings
from ticket_manager.exceptions import ClassificationError, TicketFetchError
from ticket_manager.models.schemas import (
    AnalysisOptions,
    AnalysisResult,
    AnalysisSummary,
    SynonymMap,
    TicketSummary,
)
from ticket_manager.services.classifier import IntentClassifier
from ticket_manager.services.dispatcher import AgentDispatcher
from ticket_manager.services.freshdesk import FreshdeskClient
from ticket_manager.services.llm_service import LLMService
from ticket_manager.services.synonym_resolver import SynonymResolver
from ticket_manager.services.synthesizer import ResponseSynthesizer
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


class OrchestratorService:
    """
    Service layer for the ticket analysis pipeline.

    All collaborators are injected; one instance serves every request and
    holds no per-request state.
    """

    def __init__(
        self,
        freshdesk: FreshdeskClient,
        classifier: IntentClassifier,
        synonym_resolver: SynonymResolver,
        dispatcher: AgentDispatcher,
        synthesizer: ResponseSynthesizer,
        settings: Optional[Settings] = None
    ):
        self.freshdesk = freshdesk
        self.classifier = classifier
        self.synonym_resolver = synonym_resolver
        self.dispatcher = dispatcher
        self.synthesizer = synthesizer
        self.settings = settings or get_settings()

    async def analyze_ticket(
        self,
        ticket_id: Union[str, int],
        options: Optional[Union[AnalysisOptions, Dict[str, Any]]] = None
    ) -> AnalysisResult:
        """
        Analyze a ticket end to end.

        Args:
            ticket_id: Freshdesk ticket ID
            options: include flags (includeKB, includeProduct, includePrice,
                includeArtwork, includeSynthesis)

        Returns:
            AnalysisResult

        Raises:
            TicketFetchError: Freshdesk unreachable or ticket not found
            ClassificationError: LLM unreachable or reply unparseable
        """
        if not isinstance(options, AnalysisOptions):
            options = AnalysisOptions.model_validate(options or {})

        start_time = time.perf_counter()
        logger.info(f"Starting ticket analysis for #{ticket_id}")

        # Step 1: Fetch
        try:
            ticket_data = await self.freshdesk.get_full_ticket_data(str(ticket_id))
        except Exception as e:
            logger.error(f"Failed to fetch ticket #{ticket_id}: {e}")
            raise TicketFetchError(ticket_id, e) from e

        # Step 2: Classify
        try:
            classification = await self.classifier.classify(ticket_data)
        except Exception as e:
            logger.error(f"Failed to classify ticket #{ticket_id}: {e}")
            raise ClassificationError.from_exception(ticket_id, e) from e

        # Step 3: Resolve synonyms
        synonym_map: SynonymMap = {}
        products = classification.extracted_entities.products
        if products:
            synonym_map = await self.synonym_resolver.resolve(products)

        # Step 4: Dispatch agents
        agent_responses = await self.dispatcher.dispatch(
            classification, ticket_data, synonym_map, options
        )

        # Step 5: Synthesize
        synthesis = None
        if options.include_synthesis:
            synthesis = await self.synthesizer.synthesize(
                ticket_data, classification, agent_responses, synonym_map
            )

        # Step 6: Assemble
        processing_time = int((time.perf_counter() - start_time) * 1000)
        ticket = ticket_data.ticket

        result = AnalysisResult(
            success=True,
            ticket=TicketSummary(
                id=ticket.id,
                subject=ticket.subject,
                status=ticket.status,
                priority=ticket.priority,
                customer=ticket_data.customer,
                created_at=ticket.created_at,
                updated_at=ticket.updated_at
            ),
            analysis=AnalysisSummary(
                thread_summary=classification.thread_summary,
                email_count=ticket_data.email_count,
                latest_customer_message=classification.latest_customer_message,
                intents=classification.intents,
                extracted_entities=classification.extracted_entities,
                confidence=classification.confidence
            ),
            synonym_resolution=synonym_map,
            agent_responses=agent_responses,
            synthesis=synthesis,
            freshdesk_url=self.settings.ticket_url(ticket_id),
            processing_time=processing_time,
            timestamp=datetime.now(timezone.utc)
        )

        logger.info(f"Ticket #{ticket_id} analysis completed in {processing_time}ms")
        return result


def build_orchestrator(settings: Optional[Settings] = None) -> OrchestratorService:
    """
    Wire the production collaborators once at process start

    Args:
        settings: Application settings (defaults to cached settings)

    Returns:
        OrchestratorService sharing one LLM service between stages
    """
    settings = settings or get_settings()
    llm = LLMService(settings)

    return OrchestratorService(
        freshdesk=FreshdeskClient(settings),
        classifier=IntentClassifier(llm),
        synonym_resolver=SynonymResolver(SynonymAgentClient(settings)),
        dispatcher=AgentDispatcher(
            kb_agent=KnowledgeAgentClient(settings),
            product_agent=ProductAgentClient(settings),
            price_agent=PriceAgentClient(settings)
        ),
        synthesizer=ResponseSynthesizer(llm),
        settings=settings
    )
