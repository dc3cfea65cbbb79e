"""
AI Ticket Manager - Configuration Management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 3000

    # Authentication (empty = auth disabled in development)
    api_key: str = ""

    # Freshdesk
    freshdesk_domain: str = ""
    freshdesk_api_key: str = ""
    freshdesk_timeout: float = 15.0

    # LLM
    google_api_key: str = ""
    llm_model: str = "models/gemini-2.5-flash"
    llm_temperature: float = 0.3
    llm_max_output_tokens: int = 1024

    # Knowledge Base Agent
    kb_agent_url: str = ""
    kb_agent_api_key: str = ""
    kb_agent_timeout: float = 20.0

    # Product Agent (availability + synonym resolution)
    product_agent_url: str = ""
    product_agent_api_key: str = ""
    product_agent_timeout: float = 30.0
    synonym_timeout: float = 10.0

    # Price Agent
    price_agent_url: str = ""
    price_agent_api_key: str = ""
    price_agent_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def FRESHDESK_BASE_URL(self) -> str:
        """Freshdesk REST API v2 base URL"""
        return f"https://{self.freshdesk_domain}/api/v2"

    def ticket_url(self, ticket_id) -> str:
        """Agent-facing deep link to a ticket"""
        return f"https://{self.freshdesk_domain}/a/tickets/{ticket_id}"

    @property
    def is_development(self) -> bool:
        return self.fastapi_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
