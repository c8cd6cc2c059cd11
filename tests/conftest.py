"""
Shared in-memory collaborators for agent and API tests.

They satisfy the Embedder / VectorIndex / Generator protocols without Milvus,
OpenAI or Hugging Face, and count every call so tests can assert on traffic.
"""

import hashlib

import pytest

from linerag.agent.rag_agent import RagAgent
from linerag.services.base import SearchHit

DIM = 8


def text_vector(text: str) -> list[float]:
    """Deterministic vector for a string: equal texts map to equal vectors."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [b / 255.0 for b in digest[:DIM]]


class StubEmbedder:
    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [text_vector(t) for t in texts]


class InMemoryIndex:
    """Exact nearest neighbour by squared distance over every stored point."""

    collection_name = "test-collection"

    def __init__(self) -> None:
        self.points: list[dict] = []
        self.upsert_calls = 0
        self.search_calls = 0

    def upsert(self, points: list[dict]) -> None:
        self.upsert_calls += 1
        self.points.extend(points)

    def search(self, vector: list[float], limit: int = 1) -> list[SearchHit]:
        self.search_calls += 1
        ranked = sorted(
            self.points,
            key=lambda p: sum((a - b) ** 2 for a, b in zip(p["vector"], vector)),
        )
        return [SearchHit(id=p["id"], score=1.0, payload=p["payload"]) for p in ranked[:limit]]

    def count(self) -> int:
        return len(self.points)


class EchoGenerator:
    """Returns the user message it was given."""

    def __init__(self) -> None:
        self.calls: list[list[dict]] = []

    def complete(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        return next(m["content"] for m in messages if m["role"] == "user")


@pytest.fixture
def embedder() -> StubEmbedder:
    return StubEmbedder()


@pytest.fixture
def index() -> InMemoryIndex:
    return InMemoryIndex()


@pytest.fixture
def generator() -> EchoGenerator:
    return EchoGenerator()


@pytest.fixture
def agent(index: InMemoryIndex, embedder: StubEmbedder, generator: EchoGenerator) -> RagAgent:
    return RagAgent(index=index, embedder=embedder, generator=generator)
