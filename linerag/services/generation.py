"""
Generation adapters: OpenAI chat completions (primary) or Hugging Face router (fallback).

Both take the full message list and return the first choice's text.
"""

import logging

import httpx
from openai import OpenAI, OpenAIError

from linerag.core.config import HF_CHAT_URL, RagSettings
from linerag.core.errors import ConfigurationError, GenerationError, NoChoicesError

logger = logging.getLogger(__name__)


class OpenAIGenerator:
    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 512,
        timeout: float = 60.0,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._client = client or OpenAI(api_key=api_key, timeout=timeout)

    def complete(self, messages: list[dict[str, str]]) -> str:
        logger.info("[llm:openai] IN  messages=%d model=%s", len(messages), self.model)
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            raise GenerationError(f"OpenAI chat completion failed: {e}") from e
        msg = response.choices[0].message if response.choices else None
        if msg is None or msg.content is None:
            raise NoChoicesError("OpenAI returned no completion choices")
        out = msg.content.strip()
        logger.info("[llm:openai] OUT response_len=%d", len(out))
        return out


class HFGenerator:
    """Chat completions through the Hugging Face router (OpenAI-compatible schema)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 512,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        self._client = client or httpx.Client(timeout=timeout)

    def complete(self, messages: list[dict[str, str]]) -> str:
        logger.info("[llm:hf] IN  messages=%d model=%s", len(messages), self.model)
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }
        try:
            response = self._client.post(HF_CHAT_URL, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise GenerationError(f"HF chat request failed: {e}") from e
        if response.status_code != 200:
            raise GenerationError(f"HF LLM error {response.status_code}: {response.text[:200]}")
        try:
            body = response.json()
        except ValueError as e:
            raise GenerationError(f"HF router returned a non-JSON body: {response.text[:200]}") from e
        if not isinstance(body, dict):
            raise GenerationError(f"HF router returned {type(body).__name__}, expected an object")
        choices = body.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            raise NoChoicesError("HF router returned no completion choices")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise NoChoicesError("HF router returned a choice without content")
        out = content.strip()
        logger.info("[llm:hf] OUT response_len=%d", len(out))
        return out


def build_generator(settings: RagSettings) -> OpenAIGenerator | HFGenerator:
    """Pick the generation backend for the configured provider; fail fast without credentials."""
    if settings.provider == "openai" and settings.openai_api_key:
        return OpenAIGenerator(
            api_key=settings.openai_api_key,
            model=settings.llm_model,
            max_tokens=settings.max_tokens,
            timeout=settings.llm_timeout,
        )
    if settings.provider == "hf" and settings.hf_api_key:
        return HFGenerator(
            api_key=settings.hf_api_key,
            model=settings.llm_model,
            max_tokens=settings.max_tokens,
            timeout=settings.llm_timeout,
        )
    raise ConfigurationError(
        "No generation credentials: set OPENAI_API_KEY or HF_API_KEY in the environment or .env"
    )
