"""
LLM Service - Text completion wrapper

Provides a single `complete(prompt) -> text` interface over Google Gemini.
The blocking SDK call runs in a worker thread so the event loop stays free.
No retries: a failed completion is reported to the caller.
"""
import asyncio
from typing import Optional

import google.generativeai as genai

from ticket_manager.config import Settings, get_settings
from ticket_manager.exceptions import LLMError
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


class LLMService:
    """
    LLM service for text generation
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.api_key = settings.google_api_key
        self.model_name = settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_output_tokens = settings.llm_max_output_tokens
        self._model = None
        logger.info(f"LLMService initialized (model={self.model_name})")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    async def complete(self, prompt: str, temperature: Optional[float] = None) -> str:
        """
        Generate a completion for a single prompt

        Args:
            prompt: Fully rendered prompt text
            temperature: Override for the configured temperature

        Returns:
            Completion text, stripped

        Raises:
            LLMError: If the response was blocked or empty
        """
        model = self._get_model()

        # Business content (prices, product names) trips the default filters
        safety_settings = {
            genai.types.HarmCategory.HARM_CATEGORY_HATE_SPEECH: genai.types.HarmBlockThreshold.BLOCK_NONE,
            genai.types.HarmCategory.HARM_CATEGORY_HARASSMENT: genai.types.HarmBlockThreshold.BLOCK_NONE,
            genai.types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: genai.types.HarmBlockThreshold.BLOCK_NONE,
            genai.types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: genai.types.HarmBlockThreshold.BLOCK_NONE,
        }

        response = await asyncio.to_thread(
            model.generate_content,
            prompt,
            generation_config=genai.GenerationConfig(
                temperature=self.temperature if temperature is None else temperature,
                max_output_tokens=self.max_output_tokens,
            ),
            safety_settings=safety_settings
        )

        # Check if response was blocked
        if not response.candidates or not response.candidates[0].content.parts:
            candidate = response.candidates[0] if response.candidates else None
            finish_reason = candidate.finish_reason if candidate else "unknown"
            logger.error(f"Response blocked - Finish reason: {finish_reason}")
            raise LLMError(f"Response blocked. Finish reason: {finish_reason}")

        text = response.text.strip()
        if not text:
            raise LLMError("Empty completion")

        logger.debug(f"Completion received ({len(text)} chars)")
        return text
