"""Model manager for Gemini generation with an ordered model fallback list."""

import asyncio
import logging
import time
from typing import List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import RequestOptions

from .base import LLMResponse
from .errors import AuthenticationError, LLMProviderError, ModelNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_PREFERENCE = [
    "gemini-2.0-flash",
    "gemini-1.5-flash-latest",
    "gemini-1.5-flash",
    "gemini-1.5-pro-latest",
    "gemini-1.5-pro",
    "gemini-pro",
]

MODEL_CACHE_SECONDS = 60 * 60


class GeminiModelManager:
    """Calls Gemini, walking a preference list when a model id does not exist."""

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        preferred_model: str = "",
        timeout: float = 20.0,
        fallback_models: Optional[List[str]] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.timeout = timeout

        candidates = [preferred_model.strip()] if preferred_model else []
        candidates += fallback_models if fallback_models is not None else DEFAULT_MODEL_PREFERENCE
        # Keep order, drop blanks and duplicates
        self.model_preference: List[str] = []
        for name in candidates:
            if name and name not in self.model_preference:
                self.model_preference.append(name)

        self._resolved_model: Optional[str] = None
        self._resolved_at = 0.0

        self.total_calls = 0
        self.fallback_calls = 0
        self.not_found_models: List[str] = []

        if self.api_key:
            genai.configure(api_key=self.api_key)

    def is_available(self) -> bool:
        """True when an API key is configured."""
        return bool(self.api_key)

    @property
    def resolved_model(self) -> Optional[str]:
        """The last model that answered, while it is still fresh."""
        if self._resolved_model and time.time() - self._resolved_at < MODEL_CACHE_SECONDS:
            return self._resolved_model
        return None

    def _candidates(self) -> List[str]:
        resolved = self.resolved_model
        if resolved:
            return [resolved] + [m for m in self.model_preference if m != resolved]
        return list(self.model_preference)

    async def _call_model(
        self, model_name: str, prompt: str, system_instruction: Optional[str]
    ) -> str:
        """Run one generation and translate provider errors into our own."""
        try:
            model = genai.GenerativeModel(model_name, system_instruction=system_instruction)
            response = await asyncio.wait_for(
                model.generate_content_async(
                    prompt, request_options=RequestOptions(timeout=self.timeout)
                ),
                timeout=self.timeout,
            )
        except google_exceptions.NotFound as e:
            raise ModelNotFoundError(str(e), provider=self.provider, model=model_name)
        except (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated) as e:
            raise AuthenticationError(str(e), provider=self.provider, model=model_name)
        except asyncio.TimeoutError:
            logger.warning(f"{model_name} timed out after {self.timeout}s")
            raise LLMProviderError(
                f"{model_name} generation timed out",
                provider=self.provider,
                model=model_name,
                is_retryable=True,
            )
        except Exception as e:
            error_type = type(e).__name__
            raise LLMProviderError(
                f"{error_type}: {e}", provider=self.provider, model=model_name
            )

        try:
            return response.text or ""
        except ValueError:
            # Blocked or empty candidates
            logger.warning(f"{model_name} returned no text")
            return ""

    async def generate(
        self, prompt: str, system_instruction: Optional[str] = None
    ) -> LLMResponse:
        """
        Generate content, falling back to the next model only on ModelNotFoundError.

        Returns:
            LLMResponse with the text and the model that produced it.
        """
        if not self.api_key:
            raise AuthenticationError(
                "Gemini API key not configured. Set GEMINI_API_KEY environment variable.",
                provider=self.provider,
            )

        self.total_calls += 1
        last_error: Optional[ModelNotFoundError] = None

        for attempt, model_name in enumerate(self._candidates()):
            if attempt:
                self.fallback_calls += 1
            try:
                text = await self._call_model(model_name, prompt, system_instruction)
            except ModelNotFoundError as e:
                logger.warning(f"Gemini model not found: {model_name}, trying next")
                if model_name not in self.not_found_models:
                    self.not_found_models.append(model_name)
                if model_name == self._resolved_model:
                    self._resolved_model = None
                last_error = e
                continue

            if model_name != self._resolved_model:
                logger.info(f"Gemini model resolved: {model_name}")
            self._resolved_model = model_name
            self._resolved_at = time.time()
            return LLMResponse(content=text, model=model_name)

        raise last_error or ModelNotFoundError(
            "No Gemini models configured", provider=self.provider
        )

    def get_stats(self) -> dict:
        """Get usage statistics for the model manager."""
        return {
            "available": self.is_available(),
            "resolved_model": self.resolved_model,
            "model_preference": list(self.model_preference),
            "total_calls": self.total_calls,
            "fallback_calls": self.fallback_calls,
            "not_found_models": list(self.not_found_models),
            "timeout_seconds": self.timeout,
        }
