"""
Embedding adapters: OpenAI (primary) and Hugging Face Inference API (fallback).

Responsibility: Turn a list of strings into an order-aligned list of vectors.
Library and HTTP failures are raised as ServiceError; nothing is retried.
"""

import logging

import httpx
from openai import OpenAI, OpenAIError

from linerag.core.config import RagSettings
from linerag.core.errors import ConfigurationError, ServiceError

logger = logging.getLogger(__name__)

HF_ROUTER_URL = "https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction"
HF_STANDARD_URL = "https://api-inference.huggingface.co/models/{model}"


class OpenAIEmbedder:
    """Embeddings via the OpenAI embeddings endpoint, one request per call."""

    def __init__(
        self,
        api_key: str,
        model: str,
        dimensions: int | None = None,
        timeout: float = 30.0,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.dimensions = dimensions
        self._client = client or OpenAI(api_key=api_key, timeout=timeout)

    def embed(self, texts: list[str]) -> list[list[float]]:
        logger.info("[embeddings:openai] IN  texts=%d model=%s", len(texts), self.model)
        kwargs = {"model": self.model, "input": texts}
        if self.dimensions:
            kwargs["dimensions"] = self.dimensions
        try:
            response = self._client.embeddings.create(**kwargs)
        except OpenAIError as e:
            raise ServiceError(f"OpenAI embeddings request failed: {e}") from e
        # Items carry their input position; sort so output lines up with texts
        data = sorted(response.data, key=lambda item: item.index)
        vectors = [list(item.embedding) for item in data]
        logger.info("[embeddings:openai] OUT vectors=%d dim=%s", len(vectors), len(vectors[0]) if vectors else 0)
        return vectors


def _normalize(vec: list[float]) -> list[float]:
    norm = sum(x * x for x in vec) ** 0.5
    if norm == 0:
        norm = 1.0
    return [x / norm for x in vec]


class HFEmbedder:
    """
    Batch embeddings via the Hugging Face Inference API (feature-extraction).

    Tries the router URL first and falls back to the standard inference URL
    when the router refuses the token (403). Vectors are normalized for
    cosine similarity.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        batch_size: int = 32,
        client: httpx.Client | None = None,
    ) -> None:
        self.model = model
        self.batch_size = batch_size
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.Client(timeout=timeout)
        self._urls = [HF_ROUTER_URL.format(model=model), HF_STANDARD_URL.format(model=model)]

    def _post_batch(self, batch: list[str]) -> list[list[float]]:
        payload = {"inputs": batch, "options": {"wait_for_model": True}}
        response = None
        for url in self._urls:
            try:
                response = self._client.post(url, json=payload, headers=self._headers)
            except httpx.HTTPError as e:
                raise ServiceError(f"HF embeddings request failed: {e}") from e
            if response.status_code == 403 and url == self._urls[0]:
                logger.warning("[embeddings:hf] router refused token, trying standard endpoint")
                continue
            break

        if response.status_code == 401:
            raise ServiceError("Invalid HF API key. Check HF_API_KEY.")
        if response.status_code == 503:
            raise ServiceError(f"HF model is loading. Retry later. {response.text}")
        if response.status_code != 200:
            raise ServiceError(f"HF API error {response.status_code}: {response.text[:200]}")

        try:
            result = response.json()
        except ValueError as e:
            raise ServiceError(f"HF API returned a non-JSON body: {response.text[:200]}") from e
        if not isinstance(result, list) or len(result) != len(batch):
            raise ServiceError(f"HF API returned {type(result).__name__} for {len(batch)} inputs")
        try:
            return [_normalize([float(x) for x in vec]) for vec in result]
        except (TypeError, ValueError) as e:
            raise ServiceError(f"HF API returned a non-numeric embedding: {e}") from e

    def embed(self, texts: list[str]) -> list[list[float]]:
        logger.info("[embeddings:hf] IN  texts=%d model=%s", len(texts), self.model)
        vectors: list[list[float]] = []
        for i in range(0, len(texts), self.batch_size):
            vectors.extend(self._post_batch(texts[i : i + self.batch_size]))
        logger.info("[embeddings:hf] OUT vectors=%d", len(vectors))
        return vectors


def build_embedder(settings: RagSettings) -> OpenAIEmbedder | HFEmbedder:
    """Pick the embedding backend for the configured provider; fail fast without credentials."""
    if settings.provider == "openai" and settings.openai_api_key:
        return OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.embed_model,
            dimensions=settings.vector_dim,
            timeout=settings.embed_timeout,
        )
    if settings.provider == "hf" and settings.hf_api_key:
        return HFEmbedder(
            api_key=settings.hf_api_key,
            model=settings.embed_model,
            timeout=settings.embed_timeout,
            batch_size=settings.embed_batch_size,
        )
    raise ConfigurationError(
        "No embedding credentials: set OPENAI_API_KEY or HF_API_KEY in the environment or .env"
    )
