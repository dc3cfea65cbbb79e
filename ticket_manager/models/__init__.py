"""
Pydantic models for AI Ticket Manager
"""

from ticket_manager.models.schemas import (
    # Enums
    TicketStatus,
    Priority,
    MessageDirection,
    Intent,
    SynonymConfidence,
    SourcingOrigin,

    # Helpdesk Models
    Customer,
    Ticket,
    Message,
    TicketData,

    # Classification Models
    ExtractedEntities,
    Classification,

    # Synonym Models
    SynonymEntry,
    SynonymMap,

    # Agent Models
    SourcingInfo,
    KnowledgeResponse,
    ProductResponse,
    PriceResponse,
    ArtworkResponse,
    AgentResponses,

    # Orchestration Models
    AnalysisOptions,
    SynthesizedReply,
    TicketSummary,
    AnalysisSummary,
    AnalysisResult,
    ErrorResponse,
)

__all__ = [
    # Enums
    "TicketStatus",
    "Priority",
    "MessageDirection",
    "Intent",
    "SynonymConfidence",
    "SourcingOrigin",

    # Helpdesk Models
    "Customer",
    "Ticket",
    "Message",
    "TicketData",

    # Classification Models
    "ExtractedEntities",
    "Classification",

    # Synonym Models
    "SynonymEntry",
    "SynonymMap",

    # Agent Models
    "SourcingInfo",
    "KnowledgeResponse",
    "ProductResponse",
    "PriceResponse",
    "ArtworkResponse",
    "AgentResponses",

    # Orchestration Models
    "AnalysisOptions",
    "SynthesizedReply",
    "TicketSummary",
    "AnalysisSummary",
    "AnalysisResult",
    "ErrorResponse",
]
