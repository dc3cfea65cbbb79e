"""
Pydantic models for AI Ticket Manager

Request-scoped entities produced by the analysis pipeline:
- Ticket snapshot, customer and normalized thread from Freshdesk
- LLM classification (intents + extracted entities)
- Synonym resolution map
- Per-agent responses and the synthesized reply
- The terminal AnalysisResult returned to the chat front end

Models serialize with camelCase aliases, matching the front end contract.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List, Union

from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================

class TicketStatus(str, Enum):
    """Valid ticket statuses"""
    OPEN = "open"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Priority(str, Enum):
    """Valid ticket priorities"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MessageDirection(str, Enum):
    """Direction of a thread message relative to the helpdesk"""
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class Intent(str, Enum):
    """Customer intent labels (not mutually exclusive)"""
    KNOWLEDGE = "KNOWLEDGE"
    PRICE = "PRICE"
    AVAILABILITY = "AVAILABILITY"
    ARTWORK = "ARTWORK"
    OTHER = "OTHER"


class SynonymConfidence(str, Enum):
    """Confidence tags produced by the synonym resolver itself"""
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    API_ERROR = "api_error"
    ERROR = "error"


class SourcingOrigin(str, Enum):
    """Where a product is sourced from"""
    CHINA = "china"
    LOCAL = "local"
    OTHER = "other"


class CamelModel(BaseModel):
    """Base model serializing to camelCase, accepting both spellings"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Helpdesk Models
# ============================================================================

class Customer(CamelModel):
    """Ticket requester"""
    id: Optional[int] = None
    email: str = "Unknown"
    name: str = "Unknown"


class Ticket(CamelModel):
    """Immutable ticket snapshot fetched once per analysis"""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Freshdesk ticket ID")
    subject: str = Field("", description="Ticket subject")
    status: TicketStatus = Field(TicketStatus.OPEN, description="Normalized status")
    priority: Priority = Field(Priority.MEDIUM, description="Normalized priority")
    requester_id: Optional[int] = Field(None, description="Freshdesk contact ID")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Message(CamelModel):
    """Single message of a ticket thread"""
    id: str = Field(..., description="Conversation ID, or ticket-<id> for the description")
    body_text: str = Field("", description="Plain text body")
    direction: MessageDirection = MessageDirection.INBOUND
    author_id: Optional[int] = None
    created_at: Optional[datetime] = None
    is_initial_ticket: bool = False

    @property
    def incoming(self) -> bool:
        return self.direction == MessageDirection.INBOUND


class TicketData(CamelModel):
    """Ticket, requester and chronologically ordered thread"""
    ticket: Ticket
    customer: Customer
    thread: List[Message] = Field(default_factory=list)

    @property
    def email_count(self) -> int:
        return len(self.thread)


# ============================================================================
# Classification Models
# ============================================================================

class ExtractedEntities(CamelModel):
    """Entities the classifier extracted from the thread"""
    products: List[str] = Field(default_factory=list)
    quantity: Optional[Union[int, float, str]] = None
    customization: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    other: List[str] = Field(default_factory=list)

    @field_validator("products", "customization", "colors", "other", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> List[str]:
        """LLMs return null or a bare string for empty/single-item lists"""
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return [str(item) for item in v if item is not None and str(item).strip()]

    @property
    def numeric_quantity(self) -> Optional[float]:
        """Quantity as a number when the LLM returned one"""
        if isinstance(self.quantity, bool):
            return None
        if isinstance(self.quantity, (int, float)):
            return self.quantity
        return None


class Classification(CamelModel):
    """Structured LLM classification of a ticket thread"""
    thread_summary: str = ""
    latest_customer_message: str = ""
    intents: List[Intent] = Field(default_factory=lambda: [Intent.OTHER])
    extracted_entities: ExtractedEntities = Field(default_factory=ExtractedEntities)
    confidence: float = Field(0.5, ge=0.0, le=1.0)

    @field_validator("intents", mode="before")
    @classmethod
    def normalize_intents(cls, v: Any) -> List[Intent]:
        """Upper-case labels, map unknown ones to OTHER, drop duplicates"""
        if v is None:
            return [Intent.OTHER]
        if isinstance(v, str):
            v = [v]

        intents: List[Intent] = []
        for label in v:
            try:
                intent = Intent(str(label).strip().upper())
            except ValueError:
                intent = Intent.OTHER
            if intent not in intents:
                intents.append(intent)

        return intents or [Intent.OTHER]

    @field_validator("extracted_entities", mode="before")
    @classmethod
    def default_entities(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.5
        return max(0.0, min(1.0, value))

    @field_validator("thread_summary", "latest_customer_message", mode="before")
    @classmethod
    def default_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def has_intent(self, *intents: Intent) -> bool:
        return any(intent in self.intents for intent in intents)


# ============================================================================
# Synonym Models
# ============================================================================

class SynonymEntry(CamelModel):
    """Canonical catalog name for one customer term"""
    canonical: str
    confidence: str = SynonymConfidence.RESOLVED.value
    alternates: List[str] = Field(default_factory=list)
    category: Optional[str] = None


SynonymMap = Dict[str, SynonymEntry]


# ============================================================================
# Agent Response Models
# ============================================================================

class SourcingInfo(CamelModel):
    """Normalized sourcing details of one product or price result"""
    source: SourcingOrigin = SourcingOrigin.OTHER
    moq: Optional[int] = None
    lead_time: Optional[str] = None
    supplier: Optional[str] = None
    air_shipping: bool = False
    sea_shipping: bool = False
    note: Optional[str] = None


class KnowledgeResponse(CamelModel):
    """Knowledge base agent answer"""
    success: bool
    answer: Optional[str] = None
    sources: List[Any] = Field(default_factory=list)
    search_terms: Optional[Any] = None
    articles_found: int = 0
    confidence: float = 0.0
    query: Optional[str] = None
    error: Optional[str] = None


class ProductResponse(CamelModel):
    """Product agent availability (single or multi-product shape)"""
    success: bool
    multi_product: bool = False
    query: Optional[str] = None
    found: bool = False
    color_available: bool = False
    synonym_resolved: Optional[str] = None
    products: List[Dict[str, Any]] = Field(default_factory=list)
    results: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Optional[str] = None
    total_products_requested: Optional[int] = None
    total_products_found: Optional[int] = None
    error: Optional[str] = None


class PriceResponse(CamelModel):
    """Price agent lookup"""
    success: bool
    query: Optional[str] = None
    results: List[Dict[str, Any]] = Field(default_factory=list)
    alternatives: List[Any] = Field(default_factory=list)
    products_found: int = 0
    error: Optional[str] = None


class ArtworkResponse(CamelModel):
    """Placeholder until an artwork agent exists"""
    success: bool = False
    message: str = "Artwork agent not yet implemented"


class AgentResponses(CamelModel):
    """Responses by agent kind. None means the agent was not queried."""
    knowledge: Optional[KnowledgeResponse] = None
    product: Optional[ProductResponse] = None
    price: Optional[PriceResponse] = None
    artwork: Optional[ArtworkResponse] = None


# ============================================================================
# Orchestration Models
# ============================================================================

class AnalysisOptions(CamelModel):
    """Caller flags. Everything except artwork is on unless explicitly false."""
    include_kb: bool = Field(True, alias="includeKB")
    include_product: bool = True
    include_price: bool = True
    include_artwork: bool = False
    include_synthesis: bool = True

    @field_validator("*", mode="before")
    @classmethod
    def default_when_null(cls, v: Any, info) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class SynthesizedReply(CamelModel):
    """LLM-drafted reply for human review"""
    success: bool
    suggested_response: Optional[str] = None
    has_artwork_intent: bool = False
    intents_used: List[Intent] = Field(default_factory=list)
    moq_disclosure: bool = False
    moq: Optional[int] = None
    error: Optional[str] = None


class TicketSummary(CamelModel):
    """Ticket block of the analysis result"""
    id: int
    subject: str
    status: TicketStatus
    priority: Priority
    customer: Customer
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AnalysisSummary(CamelModel):
    """Classification block of the analysis result"""
    thread_summary: str
    email_count: int
    latest_customer_message: str
    intents: List[Intent]
    extracted_entities: ExtractedEntities
    confidence: float


class AnalysisResult(CamelModel):
    """Terminal artifact of one analysis. Never persisted."""
    success: bool = True
    ticket: TicketSummary
    analysis: AnalysisSummary
    synonym_resolution: Dict[str, SynonymEntry] = Field(default_factory=dict)
    agent_responses: AgentResponses = Field(default_factory=AgentResponses)
    synthesis: Optional[SynthesizedReply] = None
    freshdesk_url: str
    processing_time: int = Field(..., ge=0, description="Pipeline duration in milliseconds")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """Error envelope returned by the API"""
    success: bool = False
    error: str
    details: Optional[str] = None
