"""
Capabilities the agent depends on: embed text, store/search vectors, complete chat.

Production adapters (OpenAI, Hugging Face, Milvus) and in-memory test doubles
satisfy these structurally; none of them needs to inherit from anything here.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

# Payload keys written for every stored point
PAYLOAD_SOURCE = "source"
PAYLOAD_CONTENTS = "contents"
PAYLOAD_ROWS = "rows"
PAYLOAD_ROW = "row"
PAYLOAD_FIELDS = [PAYLOAD_SOURCE, PAYLOAD_CONTENTS, PAYLOAD_ROWS, PAYLOAD_ROW]


@dataclass
class SearchHit:
    """One nearest-neighbour match. Score meaning depends on the index metric."""

    id: str
    score: float
    payload: dict[str, Any] = field(default_factory=dict)


class Embedder(Protocol):
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, in input order."""
        ...


@runtime_checkable
class VectorIndex(Protocol):
    collection_name: str

    def upsert(self, points: list[dict[str, Any]]) -> None:
        """Store points of the form {"id", "vector", "payload"}."""
        ...

    def search(self, vector: list[float], limit: int = 1) -> list[SearchHit]:
        """Return up to `limit` hits with payloads, best match first."""
        ...

    def count(self) -> int:
        """Number of points currently stored."""
        ...


class Generator(Protocol):
    def complete(self, messages: list[dict[str, str]]) -> str:
        """Return the first choice's text for a list of {"role", "content"} messages."""
        ...
