"""
Unit tests for error classification
"""
from unittest.mock import MagicMock

import httpx
import pytest

from ticket_manager.exceptions import (
    ClassificationError,
    LLMError,
    TicketFetchError,
    http_status_for,
)


def status_error(status_code: int, body=None) -> httpx.HTTPStatusError:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body or {}
    return httpx.HTTPStatusError("error", request=MagicMock(), response=response)


class TestHttpStatusFor:

    def test_not_found(self):
        status, error, _ = http_status_for(status_error(404))

        assert (status, error) == (404, "Resource not found")

    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_failure(self, code):
        status, error, details = http_status_for(status_error(code))

        assert (status, error, details) == (code, "Authentication failed", "Invalid API credentials")

    def test_upstream_message_kept(self):
        status, error, details = http_status_for(status_error(429, {"message": "Slow down"}))

        assert (status, error, details) == (429, "External service error", "Slow down")

    def test_timeout(self):
        assert http_status_for(httpx.ReadTimeout("slow"))[0] == 504

    def test_connection_refused(self):
        assert http_status_for(httpx.ConnectError("refused"))[0] == 503

    def test_unknown(self):
        assert http_status_for(ValueError("bad"))[:2] == (500, "Internal server error")

    def test_own_errors(self):
        assert http_status_for(LLMError("blocked")) == (502, "LLM service error", "blocked")


class TestTicketFetchError:

    def test_keeps_cause(self):
        cause = status_error(404)

        error = TicketFetchError(999, cause)

        assert error.status_code == 404
        assert error.ticket_id == 999
        assert error.cause is cause
        assert "#999" in error.message


class TestClassificationError:

    def test_from_parse_error_is_unchanged(self):
        original = ClassificationError("Could not parse")

        assert ClassificationError.from_exception(1, original) is original

    def test_from_llm_error(self):
        error = ClassificationError.from_exception(1, LLMError("blocked"))

        assert error.status_code == 502
        assert error.error == "LLM service error"

    def test_from_unexpected_error(self):
        error = ClassificationError.from_exception(1, KeyError("intents"))

        assert error.status_code == 500
        assert error.error == "Classification failed"
