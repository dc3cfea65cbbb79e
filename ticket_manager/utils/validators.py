"""
Input validation utilities
"""
import html
import re


def validate_ticket_id(ticket_id) -> bool:
    """
    Validate Freshdesk ticket ID format

    Args:
        ticket_id: Ticket ID to validate (str or int)

    Returns:
        True if valid format
    """
    # Freshdesk ticket IDs are numeric
    return str(ticket_id).strip().isdigit()


def sanitize_input(text: str, max_length: int = 10000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def strip_html(markup: str) -> str:
    """
    Convert an HTML email body to plain text

    Line breaks and paragraph ends become newlines, tags are dropped,
    entities are unescaped and runs of blank lines collapse to one.
    """
    if not markup:
        return ""

    text = re.sub(r"<br\s*/?>", "\n", markup, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]*>", "", text)
    text = html.unescape(text).replace("\xa0", " ")
    text = re.sub(r"\n\s*\n", "\n\n", text)
    return text.strip()
