"""
Authentication utilities
"""
import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from ticket_manager.config import get_settings
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, description="API Key for authentication")
) -> Optional[str]:
    """
    Verify API key from request headers

    Auth is skipped in development when no API key is configured.

    Args:
        x_api_key: API key from X-API-Key header

    Returns:
        API key if valid, None when auth is skipped

    Raises:
        HTTPException 401: If API key is missing or invalid
    """
    settings = get_settings()

    if settings.is_development and not settings.api_key:
        return None

    if not x_api_key:
        logger.warning("API request without API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required"
        )

    if not settings.api_key:
        logger.error("API_KEY not configured outside development, rejecting request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )

    # Constant-time comparison
    if not hmac.compare_digest(x_api_key, settings.api_key):
        logger.warning("API request with invalid API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )

    return x_api_key
