"""
Response Synthesizer

Turns aggregated agent data into a draft sales reply. The prompt is built
from a deterministic agent data summary plus explicit instructions for
the opening line, pricing, MOQ disclosure and artwork. A failed LLM call
yields a failed SynthesizedReply and never fails the pipeline.
"""
from typing import Any, List, Optional, Tuple

from ticket_manager.exceptions import SynthesisError
from ticket_manager.models.schemas import (
    AgentResponses,
    Classification,
    Intent,
    SourcingOrigin,
    SynonymMap,
    SynthesizedReply,
    TicketData,
)
from ticket_manager.services.llm_service import LLMService
from ticket_manager.services.prompts import (
    ARTWORK_INSTRUCTION,
    MOQ_DISCLOSE_INSTRUCTION,
    MOQ_SUPPRESS_INSTRUCTION,
    OPENING_FIRST_CONTACT_INSTRUCTION,
    OPENING_REPLY_INSTRUCTION,
    PRICING_FOLLOW_UP_INSTRUCTION,
    PRICING_FROM_DATA_INSTRUCTION,
    SYNTHESIS_PROMPT,
    PromptTemplate,
)
from ticket_manager.services.sourcing import (
    extract_price_sourcing,
    extract_product_sourcing,
    find_first_moq,
    product_name,
    should_disclose_moq,
)
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"

NO_DATA_SUMMARY = (
    "No specific product, pricing, or knowledge base information available.\n"
    "Provide a helpful response and offer to get more details."
)


def _money(value: Any) -> str:
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return str(value)


def has_pricing_data(agent_responses: AgentResponses) -> bool:
    price = agent_responses.price
    return bool(price and price.success and price.results)


def decide_moq_disclosure(
    classification: Classification,
    agent_responses: AgentResponses
) -> Tuple[bool, Optional[int]]:
    """MOQ disclosure flag and the MOQ it refers to"""
    moq = find_first_moq(agent_responses)
    disclose = should_disclose_moq(
        classification.latest_customer_message,
        classification.extracted_entities.quantity,
        moq
    )
    return disclose, moq


def _product_section(agent_responses: AgentResponses) -> Optional[str]:
    product = agent_responses.product
    if not (product and product.success):
        return None

    lines = ["PRODUCT AVAILABILITY:"]
    if not product.found:
        lines.append("- Products found: No matching products")
        return "\n".join(lines)

    lines.append("- Products found: Yes")
    if product.synonym_resolved:
        lines.append(f"- Matched term: \"{product.synonym_resolved}\"")
    lines.append(f"- Color available: {'Yes' if product.color_available else 'No (check alternatives)'}")
    if product.multi_product and product.summary:
        lines.append(f"- Summary: {product.summary}")

    if product.products:
        lines.append("\nMatching products:")
        for index, item in enumerate(product.products[:3], start=1):
            lines.append(f"{index}. {product_name(item) or 'Unknown'}")
            sourcing = extract_product_sourcing(item)

            if sourcing.source == SourcingOrigin.CHINA:
                lines.append("   - Source: China")
                if sourcing.moq:
                    lines.append(f"   - MOQ: {sourcing.moq} pcs")
                if sourcing.air_shipping:
                    lines.append("   - Shipping: Air available (10-15 days)")
                if sourcing.sea_shipping:
                    lines.append("   - Shipping: Sea available (20-35 days)")
                if sourcing.note:
                    lines.append(f"   - Note: {sourcing.note}")
            elif sourcing.source == SourcingOrigin.LOCAL:
                supplier = f" ({sourcing.supplier})" if sourcing.supplier else ""
                lines.append(f"   - Source: Local{supplier}")
                if sourcing.moq:
                    lines.append(f"   - MOQ: {sourcing.moq} pcs")
                if sourcing.lead_time:
                    lines.append(f"   - Lead time: {sourcing.lead_time}")
            elif sourcing.moq:
                lines.append(f"   - MOQ: {sourcing.moq} pcs")

    return "\n".join(lines)


def _price_section(agent_responses: AgentResponses) -> Optional[str]:
    price = agent_responses.price
    if not (price and price.success):
        return None

    if not price.results:
        if price.products_found == 0:
            return (
                "PRICING INFORMATION:\n"
                "- No standard pricing found in pricelist\n"
                "- Offer to provide a custom quote"
            )
        return None

    lines = ["PRICING INFORMATION:"]
    for index, result in enumerate(price.results[:3], start=1):
        lines.append(f"\n{index}. {result.get('product_name') or 'Unknown'}")
        if result.get("dimensions"):
            lines.append(f"   Size: {result['dimensions']}")
        if result.get("print_option"):
            lines.append(f"   Print: {result['print_option']}")

        pricing = result.get("pricing")
        if isinstance(pricing, dict):
            currency = pricing.get("currency", "SGD")
            lines.append(
                f"   Price for {pricing.get('requested_quantity')} pcs: "
                f"{currency} {_money(pricing.get('unit_price'))}/pc "
                f"(Total: {currency} {_money(pricing.get('total_price'))})"
            )

        moq = result.get("moq")
        if isinstance(moq, dict) and moq.get("quantity"):
            moq_line = f"   MOQ: {moq['quantity']} pcs"
            if moq.get("unit_price") is not None:
                moq_line += f" @ ${_money(moq['unit_price'])}/pc"
            lines.append(moq_line)

        sourcing = extract_price_sourcing(result)
        if sourcing.lead_time:
            lines.append(f"   Lead time: {sourcing.lead_time}")

        tiers = [t for t in result.get("all_tiers") or [] if isinstance(t, dict)]
        if len(tiers) > 1:
            tier_text = ", ".join(
                f"{t.get('quantity')}+ @ ${_money(t.get('unit_price'))}" for t in tiers[:4]
            )
            lines.append(f"   Quantity tiers: {tier_text}")

    return "\n".join(lines)


def _knowledge_section(agent_responses: AgentResponses) -> Optional[str]:
    knowledge = agent_responses.knowledge
    if knowledge and knowledge.success and knowledge.answer:
        return f"KNOWLEDGE BASE INFORMATION:\n{knowledge.answer}"
    return None


def _request_details_section(
    classification: Classification,
    synonym_map: Optional[SynonymMap]
) -> Optional[str]:
    entities = classification.extracted_entities
    synonym_map = synonym_map or {}
    lines = ["CUSTOMER REQUEST DETAILS:"]

    if entities.products:
        mentioned = []
        for term in entities.products:
            entry = synonym_map.get(term)
            if entry and entry.canonical != term:
                mentioned.append(f"{term} (catalog: {entry.canonical})")
            else:
                mentioned.append(term)
        lines.append(f"- Products mentioned: {', '.join(mentioned)}")
    if entities.quantity:
        lines.append(f"- Quantity requested: {entities.quantity}")
    if entities.colors:
        lines.append(f"- Colors mentioned: {', '.join(entities.colors)}")
    if entities.customization:
        lines.append(f"- Customization: {', '.join(entities.customization)}")

    return "\n".join(lines) if len(lines) > 1 else None


def build_agent_data_summary(
    agent_responses: AgentResponses,
    classification: Classification,
    synonym_map: Optional[SynonymMap] = None
) -> str:
    """
    Summarize agent data for the synthesis prompt

    Sections: product availability, pricing, knowledge base, customer
    request details. Falls back to a fixed note when none apply.
    """
    sections: List[str] = [
        section for section in (
            _product_section(agent_responses),
            _price_section(agent_responses),
            _knowledge_section(agent_responses),
            _request_details_section(classification, synonym_map),
        )
        if section
    ]

    if not sections:
        return NO_DATA_SUMMARY
    return SECTION_SEPARATOR.join(sections)


class ResponseSynthesizer:
    """Drafts a reply from classification and agent data"""

    def __init__(self, llm: LLMService, template: PromptTemplate = SYNTHESIS_PROMPT):
        self.llm = llm
        self.template = template

    def build_prompt(
        self,
        ticket_data: TicketData,
        classification: Classification,
        agent_responses: AgentResponses,
        synonym_map: Optional[SynonymMap] = None
    ) -> Tuple[str, bool, Optional[int]]:
        """Rendered prompt plus the MOQ decision it encodes"""
        disclose_moq, moq = decide_moq_disclosure(classification, agent_responses)

        if disclose_moq:
            moq_clause = f" ({moq} pcs)" if moq else ""
            moq_instruction = MOQ_DISCLOSE_INSTRUCTION.format(moq_clause=moq_clause)
        else:
            moq_instruction = MOQ_SUPPRESS_INSTRUCTION

        prompt = self.template.render({
            "opening_instruction": (
                OPENING_REPLY_INSTRUCTION if ticket_data.email_count > 1
                else OPENING_FIRST_CONTACT_INSTRUCTION
            ),
            "pricing_instruction": (
                PRICING_FROM_DATA_INSTRUCTION if has_pricing_data(agent_responses)
                else PRICING_FOLLOW_UP_INSTRUCTION
            ),
            "moq_instruction": moq_instruction,
            "artwork_instruction": (
                ARTWORK_INSTRUCTION if classification.has_intent(Intent.ARTWORK) else ""
            ),
            "customer_email": ticket_data.customer.email,
            "subject": ticket_data.ticket.subject,
            "latest_message": classification.latest_customer_message or "N/A",
            "intents": ", ".join(i.value for i in classification.intents),
            "agent_data": build_agent_data_summary(agent_responses, classification, synonym_map),
        })
        return prompt, disclose_moq, moq

    async def synthesize(
        self,
        ticket_data: TicketData,
        classification: Classification,
        agent_responses: AgentResponses,
        synonym_map: Optional[SynonymMap] = None
    ) -> SynthesizedReply:
        """
        Draft a sales reply

        Args:
            ticket_data: Fetched ticket and thread
            classification: Classified intents and entities
            agent_responses: Aggregated agent responses
            synonym_map: Resolved product terms

        Returns:
            SynthesizedReply; success=False with suggested_response=None on failure
        """
        ticket_id = ticket_data.ticket.id
        has_artwork = classification.has_intent(Intent.ARTWORK)
        disclose_moq, moq = False, None

        try:
            logger.info(f"Synthesizing response for ticket #{ticket_id}")
            prompt, disclose_moq, moq = self.build_prompt(
                ticket_data, classification, agent_responses, synonym_map
            )
            suggested = (await self.llm.complete(prompt)).strip()
            if not suggested:
                raise SynthesisError("LLM returned an empty draft")
        except Exception as e:
            logger.error(f"Failed to synthesize response for ticket #{ticket_id}: {e}")
            return SynthesizedReply(
                success=False,
                error=str(e) or e.__class__.__name__,
                suggested_response=None,
                moq_disclosure=disclose_moq,
                moq=moq
            )

        logger.info(f"Synthesized response for ticket #{ticket_id} ({len(suggested)} chars)")
        return SynthesizedReply(
            success=True,
            suggested_response=suggested,
            has_artwork_intent=has_artwork,
            intents_used=list(classification.intents),
            moq_disclosure=disclose_moq,
            moq=moq
        )
