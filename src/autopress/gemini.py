"""Thin wrapper around the Google GenAI client used as the generation backend."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from google import genai
from google.genai import types

from autopress.config import Settings
from autopress.errors import BackendError, BackendUnavailable
from autopress.ratelimit import MinIntervalLimiter

logger = logging.getLogger(__name__)

_INITIAL_BACKOFF = 5.0
_MAX_BACKOFF = 30.0
_SYSTEM_INSTRUCTION = (
    "You are a professional content writer who produces clear, well structured, "
    "search-friendly articles."
)


class GeminiClient:
    def __init__(
        self,
        settings: Settings,
        *,
        limiter: MinIntervalLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._model_id = settings.model_id
        self._max_retries = max(1, settings.backend_max_retries)
        self._limiter = limiter or MinIntervalLimiter(settings.backend_min_interval_seconds)
        self._sleep = sleep
        self._client: genai.Client | None = None
        self.call_count = 0

    @property
    def configured(self) -> bool:
        return bool(self._settings.gemini_api_key)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._settings.gemini_api_key,
                http_options=types.HttpOptions(
                    timeout=int(self._settings.backend_timeout_seconds * 1000)
                ),
            )
        return self._client

    def complete(self, prompt: str) -> str:
        """Send one prompt and return the generated text.

        Raises BackendUnavailable when no API key is configured and
        BackendError when every attempt failed.
        """
        if not self.configured:
            raise BackendUnavailable("GEMINI_API_KEY is not set")

        config = types.GenerateContentConfig(
            temperature=self._settings.backend_temperature,
            system_instruction=_SYSTEM_INSTRUCTION,
        )

        self._limiter.wait()
        text = self._call_with_retry(prompt, config)
        self.call_count += 1
        return text

    def _call_with_retry(self, prompt: str, config: types.GenerateContentConfig) -> str:
        backoff = _INITIAL_BACKOFF
        last_exc: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                kwargs: dict[str, Any] = {
                    "model": self._model_id,
                    "contents": prompt,
                    "config": config,
                }
                response = self._get_client().models.generate_content(**kwargs)
                return response.text or ""
            except Exception as exc:
                last_exc = exc
                is_rate_limit = "429" in str(exc) or "RESOURCE_EXHAUSTED" in str(exc)

                # Hard-zero quota will not recover within this run
                if is_rate_limit and "limit: 0" in str(exc):
                    logger.warning("Quota is zero, not retrying: %s", exc)
                    break

                if attempt < self._max_retries - 1:
                    wait = min(backoff, _MAX_BACKOFF)
                    logger.warning(
                        "Gemini call failed (attempt %d/%d), retrying in %.0fs: %s",
                        attempt + 1,
                        self._max_retries,
                        wait,
                        exc,
                    )
                    self._sleep(wait)
                    backoff *= 2

        raise BackendError("Gemini call failed after retries") from last_exc
