"""
Utility functions
"""
from ticket_manager.utils.logger import get_logger
from ticket_manager.utils.validators import (
    validate_ticket_id,
    sanitize_input,
    strip_html
)

__all__ = [
    "get_logger",
    "validate_ticket_id",
    "sanitize_input",
    "strip_html",
]
