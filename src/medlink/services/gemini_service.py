"""
Gemini AI Service.

Thin async wrapper around the google-genai SDK used by the chatbot and
the symptom checker:
- Lazy client creation from GOOGLE_API_KEY
- Opt-in exponential-backoff retries for transient network failures
  (GEMINI_MAX_RETRIES, off by default)
- Every other SDK failure surfaces as ``AIServiceError``
"""
from __future__ import annotations

import logging
import time
from typing import Any

from google import genai
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.config import get_settings
from ..core.exceptions import AIServiceError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (ConnectionError, TimeoutError)


class GeminiService:
    """
    Google Gemini text generation.

    Usage:
        gemini = get_gemini_service()
        text = await gemini.generate_with_retry(prompt, system_instruction=system)
    """

    def __init__(self) -> None:
        self.settings = get_settings()
        self._client: genai.Client | None = None
        self._retry_decorator = retry(
            stop=stop_after_attempt(self.settings.GEMINI_MAX_RETRIES + 1),
            wait=wait_exponential(multiplier=self.settings.GEMINI_RETRY_DELAY, min=1, max=30),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    @property
    def client(self) -> genai.Client:
        """Get or create the Gemini client instance."""
        if self._client is None:
            if not self.settings.GOOGLE_API_KEY:
                raise AIServiceError(
                    message="Google API key not configured",
                    original_error="GOOGLE_API_KEY environment variable is empty",
                )
            self._client = genai.Client(api_key=self.settings.GOOGLE_API_KEY)
            logger.info("Initialized Gemini client with model: %s", self.settings.GEMINI_MODEL)
        return self._client

    def _generation_config(
        self,
        system_instruction: str | None,
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        config: dict[str, Any] = {
            "temperature": self.settings.GEMINI_TEMPERATURE if temperature is None else temperature,
            "max_output_tokens": max_tokens or self.settings.CHATBOT_MAX_TOKENS,
        }
        if system_instruction:
            config["system_instruction"] = system_instruction
        return config

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Generate a text response.

        Raises:
            ConnectionError/TimeoutError: transient, left for the retry wrapper
            AIServiceError: any other failure, or an empty response
        """
        start_time = time.time()
        config = self._generation_config(system_instruction, temperature, max_tokens)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.settings.GEMINI_MODEL,
                contents=prompt,
                config=config,
            )
        except TRANSIENT_ERRORS:
            raise
        except AIServiceError:
            raise
        except Exception as e:
            error_str = str(e).lower()
            if "blocked" in error_str or "safety" in error_str:
                logger.error("Prompt blocked by Gemini safety filters: %s", e)
                raise AIServiceError(
                    message="Request blocked by AI safety filters",
                    original_error=str(e),
                ) from e
            logger.error("Gemini API error: %s", e)
            raise AIServiceError(original_error=str(e)) from e

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info("Gemini response in %.2fms", elapsed_ms)

        text = (response.text or "").strip()
        if not text:
            raise AIServiceError(message="AI service returned empty content")
        return text

    async def generate_with_retry(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate, retrying transient failures when GEMINI_MAX_RETRIES > 0."""

        @self._retry_decorator
        async def _generate() -> str:
            return await self.generate(
                prompt,
                system_instruction=system_instruction,
                temperature=temperature,
                max_tokens=max_tokens,
            )

        try:
            return await _generate()
        except TRANSIENT_ERRORS as e:
            logger.error("Gemini unreachable: %s", e)
            raise AIServiceError(original_error=str(e)) from e


_gemini_service: GeminiService | None = None


def get_gemini_service() -> GeminiService:
    """Return the process-level GeminiService singleton."""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service
