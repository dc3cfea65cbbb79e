"""
Intent Classifier

Sends the normalized thread to the LLM with the classification template
and parses the structured reply into a Classification.
"""
import json
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ticket_manager.exceptions import ClassificationError
from ticket_manager.models.schemas import Classification, Message, TicketData
from ticket_manager.services.llm_service import LLMService
from ticket_manager.services.prompts import CLASSIFICATION_PROMPT, PromptTemplate
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_BRACED_OBJECT = re.compile(r"\{[\s\S]*\}")


def format_conversation_history(thread: List[Message]) -> str:
    """Render the thread as numbered CUSTOMER/AGENT blocks"""
    blocks = []
    for index, message in enumerate(thread, start=1):
        sender = "CUSTOMER" if message.incoming else "AGENT"
        date = message.created_at.strftime("%Y-%m-%d") if message.created_at else "unknown date"
        blocks.append(f"[{index}] {sender} ({date}):\n{message.body_text}")
    return "\n\n---\n\n".join(blocks)


def _try_json(text: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_classification_response(content: str) -> Classification:
    """
    Parse the LLM reply into a Classification

    Tries a direct JSON parse, then a fenced code block, then the outermost
    brace-delimited substring.

    Raises:
        ClassificationError: If no strategy yields a valid object
    """
    data = _try_json(content)

    if data is None:
        fenced = _FENCED_BLOCK.search(content)
        if fenced:
            data = _try_json(fenced.group(1).strip())

    if data is None:
        braced = _BRACED_OBJECT.search(content)
        if braced:
            data = _try_json(braced.group(0))

    if data is None:
        raise ClassificationError("Could not parse classification response as JSON")

    try:
        return Classification.model_validate(data)
    except ValidationError as e:
        raise ClassificationError(f"Classification response has an unexpected shape: {e}")


class IntentClassifier:
    """Classifies a ticket thread into intents and entities"""

    def __init__(self, llm: LLMService, template: PromptTemplate = CLASSIFICATION_PROMPT):
        self.llm = llm
        self.template = template

    def build_prompt(self, ticket_data: TicketData) -> str:
        return self.template.render({
            "subject": ticket_data.ticket.subject,
            "customer_email": ticket_data.customer.email,
            "conversation_history": format_conversation_history(ticket_data.thread),
        })

    async def classify(self, ticket_data: TicketData) -> Classification:
        """
        Classify ticket intent and summarize the conversation

        Args:
            ticket_data: Fetched ticket with normalized thread

        Returns:
            Classification

        Raises:
            ClassificationError: If the reply cannot be parsed
        """
        ticket_id = ticket_data.ticket.id
        logger.info(f"Classifying ticket #{ticket_id}")

        content = await self.llm.complete(self.build_prompt(ticket_data))
        classification = parse_classification_response(content)

        logger.info(
            f"Ticket #{ticket_id} classified with intents: "
            f"{', '.join(i.value for i in classification.intents)} "
            f"(confidence {classification.confidence:.2f})"
        )
        return classification
