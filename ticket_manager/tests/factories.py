"""
Builders for test data
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ticket_manager.models.schemas import (
    AgentResponses,
    AnalysisResult,
    AnalysisSummary,
    Classification,
    Customer,
    ExtractedEntities,
    Intent,
    Message,
    MessageDirection,
    Priority,
    Ticket,
    TicketData,
    TicketStatus,
    TicketSummary,
)


def make_ticket_data(
    ticket_id: int = 123,
    subject: str = "Quote for mugs",
    messages: Optional[List[str]] = None
) -> TicketData:
    """TicketData alternating inbound/outbound messages, one per body"""
    messages = messages if messages is not None else ["Hi, can I get 100 pcs of mugs?"]
    thread = [
        Message(
            id=f"ticket-{ticket_id}" if i == 0 else str(1000 + i),
            body_text=body,
            direction=MessageDirection.INBOUND if i % 2 == 0 else MessageDirection.OUTBOUND,
            author_id=42,
            created_at=datetime(2025, 1, 1 + i, 9, 0, tzinfo=timezone.utc),
            is_initial_ticket=(i == 0)
        )
        for i, body in enumerate(messages)
    ]
    return TicketData(
        ticket=Ticket(id=ticket_id, subject=subject, requester_id=42),
        customer=Customer(id=42, email="jane@acme.com", name="Jane"),
        thread=thread
    )


def make_classification(
    intents: Optional[List[str]] = None,
    products: Optional[List[str]] = None,
    quantity: Any = None,
    customization: Optional[List[str]] = None,
    message: str = "Can I get 100 pcs of mugs with logo?"
) -> Classification:
    return Classification(
        thread_summary="Customer asks about mugs.",
        latest_customer_message=message,
        intents=intents or ["KNOWLEDGE"],
        extracted_entities={
            "products": products or [],
            "quantity": quantity,
            "customization": customization or [],
        },
        confidence=0.9
    )


def product_match(name: str, moq: Optional[int] = None) -> Dict[str, Any]:
    """One locally sourced product agent match"""
    return {
        "product": {"name": name, "sourcing": {"local": {"supplier": "LocalCo", "moq": moq}}},
        "recommendation": {"source": "local", "moq": moq, "leadTime": "5-7 days"},
    }


def product_agent_payload(names: List[str], moq: Optional[int] = None) -> Dict[str, Any]:
    """Single-product agent response body"""
    return {
        "success": True,
        "data": {
            "query": " ".join(names),
            "availability": {
                "found": bool(names),
                "colorAvailable": True,
                "matchingProducts": [product_match(name, moq) for name in names],
            },
            "summary": "Available locally",
        },
    }


def price_result(name: str, moq: Optional[int] = None, quantity: int = 100) -> Dict[str, Any]:
    """One price agent result"""
    result = {
        "product_name": name,
        "dimensions": "9.5 x 8 cm",
        "print_option": "1 colour logo",
        "pricing": {
            "requested_quantity": quantity,
            "unit_price": 2.5,
            "total_price": 2.5 * quantity,
            "currency": "SGD",
        },
        "lead_time": {"days_min": 7, "days_max": 10, "type": "standard"},
        "all_tiers": [
            {"quantity": 50, "unit_price": 3.0},
            {"quantity": 100, "unit_price": 2.5},
            {"quantity": 500, "unit_price": 2.0},
        ],
    }
    if moq is not None:
        result["moq"] = {"quantity": moq, "unit_price": 3.0}
    return result


def analysis_result(ticket_id: int = 123) -> AnalysisResult:
    """Minimal successful AnalysisResult"""
    return AnalysisResult(
        ticket=TicketSummary(
            id=ticket_id,
            subject="Quote for mugs",
            status=TicketStatus.OPEN,
            priority=Priority.MEDIUM,
            customer=Customer(id=42, email="jane@acme.com", name="Jane"),
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc)
        ),
        analysis=AnalysisSummary(
            thread_summary="Customer asks for a quote.",
            email_count=1,
            latest_customer_message="How much for 100 mugs?",
            intents=[Intent.PRICE],
            extracted_entities=ExtractedEntities(products=["mugs"], quantity=100),
            confidence=0.9
        ),
        agent_responses=AgentResponses(),
        freshdesk_url=f"https://easyprint.freshdesk.com/a/tickets/{ticket_id}",
        processing_time=42
    )
