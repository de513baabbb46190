"""HTTP client for the Ollama-compatible AI suggestion service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from smart_commands.ai.prompts import correction_prompt, task_prompt, wrap_prompt
from smart_commands.ai.response import clean_command_text
from smart_commands.config import AIConfig

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """The AI service could not produce a reply."""


class AIUnavailable(AIServiceError):
    """Connection, HTTP or payload failure after all retries."""


class AITimeout(AIServiceError):
    """The final attempt exceeded the configured timeout."""


class OllamaClient:
    """Sends prompts to an Ollama ``/api/generate`` endpoint.

    Each attempt is bounded by ``config.timeout``; failed attempts are
    retried ``config.max_retries`` times with exponential backoff starting at
    ``config.backoff_base`` seconds. The whole call raises at most one
    :class:`AIServiceError`.
    """

    def __init__(
        self,
        config: AIConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: Connection and generation settings
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or AIConfig()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            timeout=self.config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> OllamaClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
                "num_predict": self.config.max_tokens,
            },
        }

    async def generate(self, raw_command: str, prompt: str) -> str | None:
        """Generate a reply for an instruction about ``raw_command``.

        Returns:
            The raw reply text, or None if the service returned no text

        Raises:
            AITimeout: If the last attempt timed out
            AIUnavailable: If every attempt failed otherwise
        """
        payload = self._payload(wrap_prompt(raw_command, prompt))
        attempts = self.config.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                logger.debug(
                    f"AI request (attempt {attempt + 1}/{attempts}), "
                    f"prompt {len(payload['prompt'])} chars"
                )
                response = await asyncio.wait_for(
                    self._client.post("/api/generate", json=payload),
                    timeout=self.config.timeout,
                )
                response.raise_for_status()
                text = response.json().get("response")
                if not isinstance(text, str) or not text.strip():
                    return None
                logger.debug(f"AI response received, length: {len(text)}")
                return text.strip()

            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                last_error = e
                logger.warning(f"AI request timed out (attempt {attempt + 1}/{attempts})")
            except (httpx.HTTPError, ValueError, AttributeError) as e:
                last_error = e
                logger.warning(
                    f"AI request failed (attempt {attempt + 1}/{attempts}): "
                    f"{type(e).__name__} - {e}"
                )

            if attempt < attempts - 1:
                delay = self.config.backoff_base * (2 ** attempt)
                logger.info(f"Retrying AI request in {delay:.2f} seconds")
                await asyncio.sleep(delay)

        logger.error(f"Exhausted {attempts} AI request attempts. Last error: {last_error!r}")
        if isinstance(last_error, (asyncio.TimeoutError, httpx.TimeoutException)):
            raise AITimeout(f"AI service timed out after {attempts} attempts") from last_error
        raise AIUnavailable(f"AI service unavailable: {last_error}") from last_error

    async def is_available(self) -> bool:
        """Check if the service answers on ``/api/tags``."""
        try:
            response = await self._client.get("/api/tags", timeout=5.0)
            return response.status_code == 200 and bool(response.text)
        except httpx.HTTPError as e:
            logger.debug(f"AI service is not running or not accessible: {e}")
            return False

    async def list_models(self) -> list[str]:
        """Names of the models installed on the service."""
        try:
            response = await self._client.get("/api/tags", timeout=10.0)
            response.raise_for_status()
            models = response.json().get("models", [])
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Failed to get available models: {e}")
            return []
        return [m["name"] for m in models if isinstance(m, dict) and "name" in m]

    async def suggest_correct_command(self, command: str) -> str | None:
        """Ask for a corrected version of a whole command line."""
        return clean_command_text(await self.generate(command, correction_prompt(command))) or None

    async def suggest_commands_for_task(self, task: str) -> str | None:
        """Ask for the command line that accomplishes a described task."""
        return clean_command_text(await self.generate(task, task_prompt(task))) or None
