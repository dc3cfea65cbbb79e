"""
pytest configuration and shared fixtures
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from ticket_manager.config import Settings
from ticket_manager.models.schemas import TicketData
from ticket_manager.tests.factories import make_ticket_data


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at fake hosts"""
    return Settings(
        freshdesk_domain="easyprint.freshdesk.com",
        freshdesk_api_key="fd-key",
        google_api_key="google-key",
        kb_agent_url="https://kb.example.com",
        kb_agent_api_key="kb-key",
        product_agent_url="https://product.example.com",
        product_agent_api_key="product-key",
        price_agent_url="https://price.example.com",
        price_agent_api_key="price-key",
    )


@pytest.fixture
def ticket_data() -> TicketData:
    return make_ticket_data()


@pytest.fixture
def mock_llm() -> MagicMock:
    """LLMService stand-in with an async complete()"""
    llm = MagicMock()
    llm.complete = AsyncMock()
    llm.is_configured = True
    return llm
