"""
Prompt Templates

Versioned prompt templates with `{placeholder}` substitution. Only
lower_snake_case placeholders are substituted, so JSON examples inside a
template are left untouched. Services receive a template instance and can
be handed a different version without code changes.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict

_PLACEHOLDER = re.compile(r"\{([a-z_][a-z0-9_]*)\}")


@dataclass(frozen=True)
class PromptTemplate:
    """Named, versioned prompt template"""
    name: str
    version: str
    template: str

    @property
    def placeholders(self) -> set:
        return set(_PLACEHOLDER.findall(self.template))

    def render(self, context: Dict[str, Any]) -> str:
        """
        Substitute placeholders from context

        Args:
            context: Placeholder values; None renders as an empty string

        Returns:
            Rendered prompt

        Raises:
            KeyError: If a placeholder has no value in context
        """
        missing = self.placeholders - set(context)
        if missing:
            raise KeyError(f"{self.name} v{self.version} missing placeholders: {sorted(missing)}")

        def _substitute(match: re.Match) -> str:
            value = context[match.group(1)]
            return "" if value is None else str(value)

        return _PLACEHOLDER.sub(_substitute, self.template)


CLASSIFICATION_PROMPT = PromptTemplate(
    name="classification",
    version="2",
    template="""You are analyzing a customer support ticket to classify the customer's intent.

TICKET INFORMATION:
Subject: {subject}
Customer: {customer_email}

CONVERSATION HISTORY:
{conversation_history}

TASK:
1. Provide a brief summary of the conversation thread (2-3 sentences)
2. Identify the customer's latest request/question
3. Classify the intent(s) from these categories (more than one may apply):
   - KNOWLEDGE: Customer asking about product information, specifications, processes, policies
   - PRICE: Customer asking about pricing, quotes, costs, discounts
   - AVAILABILITY: Customer asking whether a product, colour or quantity is available, or about stock, sourcing and lead times
   - ARTWORK: Customer requesting design work, artwork files, mockups, or design changes
   - OTHER: None of the above

4. Extract relevant entities (products, quantities, colours, customization/print details)

Respond ONLY with valid JSON in this exact format:
{
  "threadSummary": "...",
  "latestCustomerMessage": "...",
  "intents": ["KNOWLEDGE"],
  "extractedEntities": {
    "products": [],
    "quantity": null,
    "customization": [],
    "colors": [],
    "other": []
  },
  "confidence": 0.92
}""",
)


SYNTHESIS_PROMPT = PromptTemplate(
    name="synthesis",
    version="2",
    template="""You are a sales team member at EasyPrint, a corporate gift printing company in Singapore.
Your task is to write a professional email response to a customer inquiry.

IMPORTANT GUIDELINES:
1. Write as a SALES TEAM MEMBER, not as an AI or support assistant
2. Be direct and authoritative - "Yes, we have this" not "I'll check with the team"
3. Include specific pricing, quantities, and lead times ONLY when they appear in the information below
4. Sound natural and professional - avoid robotic language
5. Keep responses concise but complete (aim for 3-6 sentences)
6. End with a clear call-to-action (e.g., "Let me know if you'd like to proceed!")
7. Do NOT use phrases like:
   - "I'll forward this to our team"
   - "Please contact our sales department"
   - "A representative will get back to you"
   - "I've passed this to our design team"

{opening_instruction}

{pricing_instruction}

{moq_instruction}

{artwork_instruction}

TICKET CONTEXT:
Customer: {customer_email}
Subject: {subject}
Latest Customer Message: {latest_message}
Detected Intents: {intents}

AVAILABLE INFORMATION FROM OUR SYSTEMS:

{agent_data}

TASK:
Write a complete email response that:
1. Directly addresses the customer's question(s)
2. Includes the relevant pricing, availability, and lead time information given above
3. Sounds like it's from an actual sales person
4. Ends with a call-to-action

Respond with ONLY the email body text (no subject line, no greeting like "Dear Customer", no signature block - just the response content that would go after "Hi [Name]," and before the signature).""",
)


OPENING_REPLY_INSTRUCTION = (
    "OPENING: This is a reply in an ongoing email thread. Open by thanking the customer "
    "for their reply, not by introducing yourself."
)

OPENING_FIRST_CONTACT_INSTRUCTION = (
    "OPENING: This is the customer's first message. Open by thanking them for "
    "reaching out to EasyPrint."
)

PRICING_FROM_DATA_INSTRUCTION = (
    "PRICING: Quote prices exactly as listed under PRICING INFORMATION. Never estimate, "
    "round, or invent a price."
)

PRICING_FOLLOW_UP_INSTRUCTION = (
    "PRICING: No pricing data is available. Do NOT estimate or invent any price. "
    "Tell the customer we will follow up with a quotation shortly."
)

MOQ_DISCLOSE_INSTRUCTION = (
    "MOQ: Mention the minimum order quantity{moq_clause} naturally in your response."
)

MOQ_SUPPRESS_INSTRUCTION = (
    "MOQ: Do NOT mention a minimum order quantity. The customer has not asked about it "
    "and their quantity meets it."
)

ARTWORK_INSTRUCTION = (
    "ARTWORK: The customer has requested artwork/mockup. Include this line naturally "
    "in your response: \"Will send the artwork to you shortly once ready.\""
)
