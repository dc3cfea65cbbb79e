"""
Agent query builders

Pure functions turning a classification and synonym map into each
agent's query text. The latest customer message is the base text;
extracted entities, when present, replace it with a reconstructed query.
"""
from typing import Any, Dict, List, Optional

from ticket_manager.models.schemas import Classification, SynonymMap
from ticket_manager.services.synonym_resolver import canonical_for
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)

URGENT_KEYWORDS = ["urgent", "rush", "asap", "immediately", "quickly", "fast", "express"]


def base_query(classification: Classification, ticket_subject: str) -> str:
    return classification.latest_customer_message or ticket_subject


def quantity_token(quantity: Any) -> Optional[str]:
    """Quantity with a "pcs" unit, unless it already carries one"""
    if quantity is None or quantity == "" or isinstance(quantity, bool):
        return None
    if isinstance(quantity, float) and quantity.is_integer():
        quantity = int(quantity)
    text = str(quantity).strip()
    lowered = text.lower()
    if "pcs" in lowered or "piece" in lowered:
        return text
    return f"{text} pcs"


def canonical_products(classification: Classification, synonym_map: Optional[SynonymMap]) -> List[str]:
    """Extracted product names, canonicalized where the map knows them"""
    synonym_map = synonym_map or {}
    return [canonical_for(p, synonym_map) for p in classification.extracted_entities.products]


def build_kb_query(
    classification: Classification,
    ticket_subject: str,
    synonym_map: Optional[SynonymMap] = None
) -> str:
    """
    Knowledge query: the customer's question, prefixed with product names

    The question text is kept since the KB agent answers questions.
    """
    query = base_query(classification, ticket_subject)
    products = canonical_products(classification, synonym_map)
    if products:
        query = f"{', '.join(products)}: {query}"
    return query


def build_product_query(
    classification: Classification,
    ticket_subject: str,
    synonym_map: Optional[SynonymMap] = None
) -> str:
    """Product query: products, customization, quantity"""
    query = base_query(classification, ticket_subject)
    entities = classification.extracted_entities
    parts = []

    products = canonical_products(classification, synonym_map)
    if products:
        parts.append(" ".join(products))
        logger.info(f"Product Agent query using products: {', '.join(products)}")

    if entities.customization:
        parts.append(" ".join(entities.customization))

    qty = quantity_token(entities.quantity)
    if qty:
        parts.append(qty)

    if parts:
        query = " ".join(parts)

    logger.info(f"Built Product Agent query: \"{query}\"")
    return query


def build_price_query(
    classification: Classification,
    ticket_subject: str,
    synonym_map: Optional[SynonymMap] = None,
    product_names: Optional[List[str]] = None
) -> str:
    """
    Price query: products, quantity, customization

    Names found by the product agent take precedence over the synonym map.
    """
    query = base_query(classification, ticket_subject)
    entities = classification.extracted_entities
    parts = []

    if product_names:
        products = list(product_names)
        logger.info(f"Price Agent query using product agent names: {', '.join(products)}")
    else:
        products = canonical_products(classification, synonym_map)
    if products:
        parts.append(" ".join(products))

    qty = quantity_token(entities.quantity)
    if qty:
        parts.append(qty)

    if entities.customization:
        parts.append(" ".join(entities.customization))

    if parts:
        query = " ".join(parts)

    logger.info(f"Built Price Agent query: \"{query}\"")
    return query


def extract_product_context(classification: Classification) -> Dict[str, Any]:
    """
    Quantity and urgency for the product agent request body

    Non-numeric quantities are left for the agent to parse from the query.
    """
    quantity = classification.extracted_entities.numeric_quantity
    message = (classification.latest_customer_message or "").lower()
    urgent = any(keyword in message for keyword in URGENT_KEYWORDS)
    return {"quantity": quantity, "urgent": urgent}
