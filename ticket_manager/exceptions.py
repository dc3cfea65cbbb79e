"""
Ticket Manager Exceptions

Fatal pipeline stages (fetch, classify) raise; later stages capture their
failures and degrade. Each fatal error carries the HTTP status class the
API layer should report.
"""
from typing import Optional, Tuple

import httpx


class TicketManagerError(Exception):
    """Base exception for all ticket manager errors."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error
        self.details = details or message
        super().__init__(message)


class TicketFetchError(TicketManagerError):
    """Helpdesk unreachable or ticket missing. Aborts the pipeline."""

    def __init__(self, ticket_id, cause: Exception):
        status_code, error, details = http_status_for(cause)
        self.ticket_id = ticket_id
        self.cause = cause
        super().__init__(
            f"Failed to fetch ticket #{ticket_id}: {cause}",
            status_code=status_code,
            error=error,
            details=details
        )


class ClassificationError(TicketManagerError):
    """LLM reply unparseable or LLM unreachable. Aborts the pipeline."""

    error = "Classification failed"

    @classmethod
    def from_exception(cls, ticket_id, cause: Exception) -> "ClassificationError":
        if isinstance(cause, cls):
            return cause
        status_code, error, details = http_status_for(cause)
        if status_code == 500:
            error = cls.error
        return cls(
            f"Failed to classify ticket #{ticket_id}: {cause}",
            status_code=status_code,
            error=error,
            details=details
        )


class LLMError(TicketManagerError):
    """LLM returned no usable completion (blocked or empty)."""

    status_code = 502
    error = "LLM service error"


class AgentError(TicketManagerError):
    """Downstream agent failure. Captured per agent slot, never raised to callers."""

    error = "Agent call failed"


class SynonymResolutionError(TicketManagerError):
    """Synonym agent failure. Resolved to an identity mapping."""

    error = "Synonym resolution failed"


class SynthesisError(TicketManagerError):
    """Draft generation failure. Reported as a failed synthesis record."""

    error = "Response synthesis failed"


def http_status_for(exc: Exception) -> Tuple[int, str, str]:
    """
    Map a collaborator failure to (status_code, error, details)

    Upstream HTTP errors keep their status class, connection failures
    become 503 and timeouts 504.
    """
    if isinstance(exc, TicketManagerError):
        return exc.status_code, exc.error, exc.details

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 404:
            return 404, "Resource not found", _upstream_message(exc) or "The requested resource was not found"
        if status in (401, 403):
            return status, "Authentication failed", "Invalid API credentials"
        return status, "External service error", _upstream_message(exc) or str(exc)

    if isinstance(exc, httpx.TimeoutException):
        return 504, "Request timeout", "The request took too long to complete"

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        return 503, "Service unavailable", "Could not connect to external service"

    return 500, "Internal server error", str(exc)


def _upstream_message(exc: httpx.HTTPStatusError) -> Optional[str]:
    try:
        body = exc.response.json()
    except Exception:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("description")
    return None
