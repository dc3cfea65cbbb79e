"""
Freshdesk API Client

Provides the Freshdesk integration used by the analysis pipeline:
- Ticket, conversation and requester fetching
- Normalization into a single chronologically ordered thread
- Retry on rate limits and server errors
"""
import httpx
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone as dt_timezone
from dateutil import parser as date_parser
from ticket_manager.config import Settings, get_settings
from ticket_manager.models.schemas import (
    Customer,
    Message,
    MessageDirection,
    Priority,
    Ticket,
    TicketData,
    TicketStatus,
)
from ticket_manager.utils.logger import get_logger
from ticket_manager.utils.validators import sanitize_input, strip_html
import asyncio

logger = get_logger(__name__)

# Freshdesk status codes: 2 Open, 3 Pending, 4 Resolved, 5 Closed,
# 6 Waiting on Customer, 7 Waiting on Third Party
STATUS_MAP = {
    2: TicketStatus.OPEN,
    3: TicketStatus.PENDING,
    4: TicketStatus.RESOLVED,
    5: TicketStatus.CLOSED,
    6: TicketStatus.PENDING,
    7: TicketStatus.PENDING,
}

# Freshdesk priority codes: 1 Low, 2 Medium, 3 High, 4 Urgent
PRIORITY_MAP = {
    1: Priority.LOW,
    2: Priority.MEDIUM,
    3: Priority.HIGH,
    4: Priority.URGENT,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def map_freshdesk_status(status_code: Any) -> TicketStatus:
    """Map Freshdesk status integer to TicketStatus enum."""
    if isinstance(status_code, str):
        try:
            return TicketStatus(status_code.lower())
        except ValueError:
            return TicketStatus.OPEN
    return STATUS_MAP.get(status_code, TicketStatus.OPEN)


def map_freshdesk_priority(priority_code: Any) -> Priority:
    """Map Freshdesk priority integer to Priority enum."""
    if isinstance(priority_code, str):
        try:
            return Priority(priority_code.lower())
        except ValueError:
            return Priority.MEDIUM
    return PRIORITY_MAP.get(priority_code, Priority.MEDIUM)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Freshdesk ISO-8601 timestamp into an aware datetime"""
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        logger.warning(f"Unparseable timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed


def normalize_thread(
    ticket: Dict[str, Any],
    conversations: List[Dict[str, Any]]
) -> List[Message]:
    """
    Build the ticket thread: description first, then conversations,
    stable-sorted by creation time.

    Args:
        ticket: Raw Freshdesk ticket
        conversations: Raw Freshdesk conversations

    Returns:
        Chronologically ordered list of messages
    """
    messages: List[Message] = []

    description = ticket.get("description_text") or strip_html(ticket.get("description") or "")
    if description:
        messages.append(Message(
            id=f"ticket-{ticket.get('id')}",
            body_text=sanitize_input(description),
            direction=MessageDirection.INBOUND,
            author_id=ticket.get("requester_id"),
            created_at=parse_timestamp(ticket.get("created_at")),
            is_initial_ticket=True
        ))

    for conv in conversations or []:
        body = conv.get("body_text") or strip_html(conv.get("body") or "")
        messages.append(Message(
            id=str(conv.get("id")),
            body_text=sanitize_input(body),
            direction=MessageDirection.INBOUND if conv.get("incoming") else MessageDirection.OUTBOUND,
            author_id=conv.get("user_id"),
            created_at=parse_timestamp(conv.get("created_at")),
            is_initial_ticket=False
        ))

    # sorted() is stable, so equal timestamps keep fetch order
    return sorted(messages, key=lambda m: m.created_at or _EPOCH)


class FreshdeskClient:
    """
    Freshdesk API integration with retry logic and error handling
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.domain = settings.freshdesk_domain
        self.base_url = settings.FRESHDESK_BASE_URL
        self.api_key = settings.freshdesk_api_key
        self.headers = {
            "Content-Type": "application/json"
        }
        self.timeout = settings.freshdesk_timeout
        self.max_retries = 3

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make HTTP request with retry logic

        Args:
            method: HTTP method (GET, POST, PUT, etc.)
            endpoint: API endpoint
            **kwargs: Additional arguments for httpx

        Returns:
            Response JSON

        Raises:
            httpx.HTTPStatusError: On HTTP errors after retries
        """
        url = f"{self.base_url}/{endpoint}"

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        auth=(self.api_key, "X"),
                        headers=self.headers,
                        **kwargs
                    )
                    response.raise_for_status()
                    return response.json()

            except httpx.HTTPStatusError as e:
                if e.response.status_code in [429, 500, 502, 503, 504]:
                    # Retry on rate limit or server errors
                    if attempt < self.max_retries - 1:
                        wait_time = 2 ** attempt  # Exponential backoff
                        logger.warning(
                            f"Request failed (attempt {attempt + 1}/{self.max_retries}), "
                            f"retrying in {wait_time}s: {e}"
                        )
                        await asyncio.sleep(wait_time)
                        continue
                raise
            except Exception as e:
                logger.error(f"Request failed: {e}")
                raise

    async def ping(self, timeout: float = 5.0) -> bool:
        """Check Freshdesk connectivity with a one-ticket listing"""
        if not self.domain:
            return False
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(
                    f"{self.base_url}/tickets",
                    params={"per_page": 1},
                    auth=(self.api_key, "X"),
                    headers=self.headers
                )
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning(f"Freshdesk health check failed: {e}")
            return False

    async def get_ticket(self, ticket_id: str) -> Dict[str, Any]:
        """
        Get ticket details by ID

        Args:
            ticket_id: Freshdesk ticket ID

        Returns:
            Ticket dictionary with full details
        """
        logger.info(f"Fetching ticket #{ticket_id} from Freshdesk")
        return await self._make_request("GET", f"tickets/{ticket_id}")

    async def fetch_ticket_conversations(
        self,
        ticket_id: str
    ) -> List[Dict[str, Any]]:
        """
        Fetch all conversations for a ticket with pagination handling

        Args:
            ticket_id: Freshdesk ticket ID

        Returns:
            List of all conversation dictionaries
        """
        all_conversations = []
        page = 1
        per_page = 30  # Freshdesk default page size

        while True:
            logger.info(f"Fetching conversations for ticket #{ticket_id} (page {page})")
            conversations = await self._make_request(
                "GET",
                f"tickets/{ticket_id}/conversations",
                params={"per_page": per_page, "page": page}
            )

            if not conversations:
                break

            all_conversations.extend(conversations)

            # If we got less than per_page, we've reached the end
            if len(conversations) < per_page:
                break

            page += 1

        logger.info(f"Fetched total {len(all_conversations)} conversations for ticket #{ticket_id}")
        return all_conversations

    async def get_requester(self, requester_id: int) -> Optional[Dict[str, Any]]:
        """
        Fetch requester contact details

        Args:
            requester_id: Freshdesk contact ID

        Returns:
            Contact dictionary, or None when the lookup fails
        """
        try:
            return await self._make_request("GET", f"contacts/{requester_id}")
        except Exception as e:
            logger.warning(f"Failed to fetch requester #{requester_id}: {e}")
            return None

    async def get_full_ticket_data(self, ticket_id: str) -> TicketData:
        """
        Fetch ticket, thread and requester and normalize them

        Conversations and requester are fetched concurrently once the
        ticket is known.

        Args:
            ticket_id: Freshdesk ticket ID

        Returns:
            TicketData with a chronologically ordered thread

        Raises:
            httpx.HTTPError: When the ticket or its conversations cannot be fetched
        """
        raw_ticket = await self.get_ticket(ticket_id)
        requester_id = raw_ticket.get("requester_id")

        if requester_id:
            conversations, requester = await asyncio.gather(
                self.fetch_ticket_conversations(ticket_id),
                self.get_requester(requester_id)
            )
        else:
            conversations = await self.fetch_ticket_conversations(ticket_id)
            requester = None

        ticket = Ticket(
            id=raw_ticket.get("id", int(ticket_id)),
            subject=raw_ticket.get("subject") or "",
            status=map_freshdesk_status(raw_ticket.get("status")),
            priority=map_freshdesk_priority(raw_ticket.get("priority")),
            requester_id=requester_id,
            created_at=parse_timestamp(raw_ticket.get("created_at")),
            updated_at=parse_timestamp(raw_ticket.get("updated_at"))
        )

        if requester:
            customer = Customer(
                id=requester.get("id"),
                email=requester.get("email") or "Unknown",
                name=requester.get("name") or "Unknown"
            )
        else:
            embedded = raw_ticket.get("requester") or {}
            customer = Customer(
                id=requester_id,
                email=embedded.get("email") or "Unknown",
                name=embedded.get("name") or "Unknown"
            )

        thread = normalize_thread(raw_ticket, conversations)

        logger.info(
            f"Fetched ticket #{ticket.id}: \"{ticket.subject}\" with {len(thread)} messages"
        )
        return TicketData(ticket=ticket, customer=customer, thread=thread)
