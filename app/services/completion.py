import asyncio
import logging
from typing import Protocol

import anthropic
import httpx
from anthropic import AsyncAnthropic

from app.exceptions.custom import CompletionServiceError, RateLimitError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
GROQ_MODEL = "llama-3.3-70b-versatile"
ANTHROPIC_MODEL = "claude-sonnet-4-20250514"

TEMPERATURE = 0.1  # near-deterministic JSON
MAX_TOKENS = 1000
DEFAULT_TIMEOUT = 10.0


class CompletionService(Protocol):
    name: str

    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


class GroqCompletionService:
    """OpenAI-compatible chat completions endpoint reached with httpx."""

    name = "Groq"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        api_url: str = GROQ_API_URL,
        model: str = GROQ_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client
        self._api_key = api_key
        self._api_url = api_url
        self._model = model
        self._timeout = timeout

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            # Cancels the request outright once the deadline passes
            async with asyncio.timeout(self._timeout):
                resp = await self._client.post(
                    self._api_url,
                    json={
                        "model": self._model,
                        "messages": [
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": user_prompt},
                        ],
                        "temperature": TEMPERATURE,
                        "max_tokens": MAX_TOKENS,
                    },
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                    timeout=self._timeout,
                )
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeoutError(self.name, self._timeout) from exc
        except httpx.HTTPError as exc:
            raise CompletionServiceError(f"{type(exc).__name__}: {exc}") from exc

        if resp.status_code == 429:
            raise RateLimitError(self.name)
        if resp.status_code >= 400:
            raise CompletionServiceError(resp.text, status_code=resp.status_code)

        try:
            return resp.json()["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning("Unexpected %s response structure", self.name)
            return ""


class AnthropicCompletionService:
    name = "Anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = ANTHROPIC_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        # Retries are decided by the caller, never by the SDK
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model
        self._timeout = timeout

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.messages.create(
                    model=self._model,
                    max_tokens=MAX_TOKENS,
                    temperature=TEMPERATURE,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                )
        except (TimeoutError, anthropic.APITimeoutError) as exc:
            raise UpstreamTimeoutError(self.name, self._timeout) from exc
        except anthropic.RateLimitError as exc:
            raise RateLimitError(self.name) from exc
        except anthropic.APIStatusError as exc:
            raise CompletionServiceError(exc.message, status_code=exc.status_code) from exc
        except anthropic.APIError as exc:
            # Connection failures and responses the SDK could not parse
            raise CompletionServiceError(f"{type(exc).__name__}: {exc}") from exc

        if not response.content:
            return ""
        return response.content[0].text or ""
