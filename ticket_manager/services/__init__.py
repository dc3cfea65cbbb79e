"""
Business Logic Services
"""
from .orchestrator import OrchestratorService, build_orchestrator
from .freshdesk import FreshdeskClient
from .llm_service import LLMService

__all__ = [
    "OrchestratorService",
    "build_orchestrator",
    "FreshdeskClient",
    "LLMService",
]
