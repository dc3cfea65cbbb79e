"""
Sourcing normalization

Product and price agents return loosely shaped payloads. These helpers
reduce each product or price item to a SourcingInfo so MOQ and lead time
are read in one place.
"""
import re
from typing import Any, Dict, Optional

from ticket_manager.models.schemas import (
    AgentResponses,
    SourcingInfo,
    SourcingOrigin,
)

MOQ_KEYWORDS = ["moq", "minimum order", "minimum qty", "minimum quantity"]

_NUMBER = re.compile(r"\d[\d,]*(?:\.\d+)?")


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _NUMBER.search(str(value))
    if not match:
        return None
    return int(float(match.group(0).replace(",", "")))


def as_dict(value: Any) -> Dict[str, Any]:
    """Nested agent fields as a dict; anything else reads as empty"""
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value)


def parse_quantity(value: Any) -> Optional[int]:
    """Requested quantity as an integer ("1,500 pcs" -> 1500)"""
    return _as_int(value)


def product_data(item: Dict[str, Any]) -> Dict[str, Any]:
    """Matching products are either flat or wrapped as {product, recommendation}"""
    nested = item.get("product")
    return nested if isinstance(nested, dict) else item


def product_name(item: Dict[str, Any]) -> Optional[str]:
    data = product_data(item)
    return _as_text(data.get("name") or data.get("product_name"))


def extract_product_sourcing(item: Dict[str, Any]) -> SourcingInfo:
    """
    Normalize one product agent match

    China sourcing wins when recommended; otherwise local sourcing when
    recommended or offered.
    """
    data = product_data(item)
    recommendation = as_dict(item.get("recommendation"))
    sourcing = as_dict(data.get("sourcing"))
    china = as_dict(sourcing.get("china"))
    local = as_dict(sourcing.get("local"))

    if recommendation.get("source") == "china":
        return SourcingInfo(
            source=SourcingOrigin.CHINA,
            moq=_as_int(recommendation.get("moq") or china.get("moq")),
            air_shipping=bool(china.get("air")),
            sea_shipping=bool(china.get("sea")),
            note=_as_text(recommendation.get("reason"))
        )

    if recommendation.get("source") == "local" or local:
        return SourcingInfo(
            source=SourcingOrigin.LOCAL,
            moq=_as_int(recommendation.get("moq") or local.get("moq")),
            lead_time=_as_text(recommendation.get("leadTime") or local.get("leadTime")),
            supplier=_as_text(recommendation.get("supplier") or local.get("supplier"))
        )

    return SourcingInfo(
        source=SourcingOrigin.OTHER,
        moq=_as_int(recommendation.get("moq") or data.get("moq")),
        lead_time=_as_text(recommendation.get("leadTime"))
    )


def extract_price_sourcing(result: Dict[str, Any]) -> SourcingInfo:
    """Normalize one price agent result"""
    moq = result.get("moq")
    moq_qty = _as_int(moq.get("quantity")) if isinstance(moq, dict) else _as_int(moq)

    lead_time = result.get("lead_time")
    if isinstance(lead_time, dict) and lead_time.get("days_min") is not None:
        lead_time = f"{lead_time.get('days_min')}-{lead_time.get('days_max')} working days"
    elif not isinstance(lead_time, str):
        lead_time = None

    return SourcingInfo(source=SourcingOrigin.OTHER, moq=moq_qty, lead_time=lead_time)


def find_first_moq(agent_responses: AgentResponses) -> Optional[int]:
    """
    First MOQ in agent data

    Product matches are checked before price results; only successful
    responses count.
    """
    product = agent_responses.product
    if product and product.success:
        for item in product.products:
            moq = extract_product_sourcing(item).moq
            if moq:
                return moq

    price = agent_responses.price
    if price and price.success:
        for result in price.results:
            moq = extract_price_sourcing(result).moq
            if moq:
                return moq

    return None


def mentions_moq(message: Optional[str]) -> bool:
    text = (message or "").lower()
    return any(keyword in text for keyword in MOQ_KEYWORDS)


def should_disclose_moq(
    message: Optional[str],
    requested_quantity: Any,
    moq: Optional[int]
) -> bool:
    """
    Whether the reply may mention the minimum order quantity

    True when the customer asked about it, or asked for fewer pieces
    than the MOQ.
    """
    if mentions_moq(message):
        return True

    quantity = parse_quantity(requested_quantity)
    if quantity is None or moq is None:
        return False
    return quantity < moq
