"""
RAG agent: ingest documents into the vector index and answer questions from it.

Flow:
    ingest: chunks → one batched embed call → one upsert per point
    answer: query → embed → top-1 search → prompt → chat completion

Every remote failure propagates to the caller as-is; nothing is retried or
rolled back. The agent holds only its service handles.
"""

import logging
import uuid
from typing import Any

from linerag.agent.prompts import build_messages
from linerag.core.config import RagSettings
from linerag.core.errors import (
    EmptyInputError,
    MalformedPayloadError,
    NoResultsError,
    PartialIngestError,
    ServiceError,
)
from linerag.ingest.loader import Document
from linerag.services.base import (
    PAYLOAD_CONTENTS,
    PAYLOAD_ROW,
    PAYLOAD_ROWS,
    PAYLOAD_SOURCE,
    Embedder,
    Generator,
    VectorIndex,
)
from linerag.services.embeddings import build_embedder
from linerag.services.generation import build_generator
from linerag.services.vector_store import MilvusIndex

logger = logging.getLogger(__name__)


class RagAgent:
    """
    Owns one embedder, one vector index and one generator for its lifetime.

    Embedder and generator are built from settings unless injected; building
    them raises ConfigurationError when no credentials are configured, so a
    misconfigured agent never gets constructed.
    """

    def __init__(
        self,
        index: VectorIndex,
        embedder: Embedder | None = None,
        generator: Generator | None = None,
        settings: RagSettings | None = None,
    ) -> None:
        if settings is None and (embedder is None or generator is None):
            settings = RagSettings.from_env()
        self.index = index
        self.embedder = embedder if embedder is not None else build_embedder(settings)
        self.generator = generator if generator is not None else build_generator(settings)

    @classmethod
    def from_settings(cls, settings: RagSettings | None = None) -> "RagAgent":
        """Build the agent and all three production adapters from settings."""
        settings = settings or RagSettings.from_env()
        embedder = build_embedder(settings)
        generator = build_generator(settings)
        index = MilvusIndex.from_settings(settings)
        return cls(index=index, embedder=embedder, generator=generator, settings=settings)

    def ingest(self, document: Document) -> int:
        """
        Embed every chunk of a document and store one point per chunk.

        Each point gets a fresh uuid4 id, so ingesting the same document twice
        stores it twice. Every point carries the whole document (identifier,
        full text, all rows) plus the row it was embedded from.

        Returns:
            Number of points stored.

        Raises:
            EmptyInputError: If the document has no chunks (no remote calls made).
            ServiceError: If embedding fails or returns a misaligned vector count.
            PartialIngestError: If an upsert fails; `stored` points remain in the index.
        """
        if not document.chunks:
            raise EmptyInputError(f"There are no rows to embed in {document.identifier}")

        logger.info("[agent:ingest] IN  source=%s chunks=%d", document.identifier, len(document.chunks))
        vectors = self.embedder.embed(document.chunks)
        if len(vectors) != len(document.chunks):
            raise ServiceError(
                f"Embedding service returned {len(vectors)} vectors for {len(document.chunks)} chunks"
            )

        stored = 0
        for chunk, vector in zip(document.chunks, vectors):
            point = self._make_point(document, chunk, vector)
            try:
                self.index.upsert([point])
            except Exception as e:
                logger.error(
                    "[agent:ingest] upsert failed for %s after %d/%d points",
                    document.identifier, stored, len(document.chunks),
                )
                raise PartialIngestError(
                    f"Upsert failed for {document.identifier} after {stored} points: {e}",
                    stored=stored,
                ) from e
            stored += 1

        logger.info("[agent:ingest] OUT source=%s points=%d", document.identifier, stored)
        return stored

    @staticmethod
    def _make_point(document: Document, chunk: str, vector: list[float]) -> dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "vector": vector,
            "payload": {
                PAYLOAD_SOURCE: document.identifier,
                PAYLOAD_CONTENTS: document.full_text,
                PAYLOAD_ROWS: list(document.chunks),
                PAYLOAD_ROW: chunk,
            },
        }

    def retrieve(self, query_text: str) -> str:
        """
        Return the stored text of the single nearest point to the query.

        Raises:
            NoResultsError: If the index has no match.
            MalformedPayloadError: If the match has no text `contents` field.
        """
        logger.info("[agent:retrieve] IN  query=%r", query_text)
        vectors = self.embedder.embed([query_text])
        if len(vectors) != 1:
            raise ServiceError(f"Embedding service returned {len(vectors)} vectors for 1 query")

        hits = self.index.search(vectors[0], limit=1)
        if not hits:
            raise NoResultsError(f"There were no results that matched {query_text!r}")

        hit = hits[0]
        context = hit.payload.get(PAYLOAD_CONTENTS)
        if not isinstance(context, str):
            raise MalformedPayloadError(f"Point {hit.id} has no text {PAYLOAD_CONTENTS!r} field")
        logger.info(
            "[agent:retrieve] OUT id=%s source=%s score=%.4f context_len=%d",
            hit.id, hit.payload.get(PAYLOAD_SOURCE), hit.score, len(context),
        )
        logger.debug("[agent:retrieve] matched_row=%r", hit.payload.get(PAYLOAD_ROW))
        return context

    def answer(self, query_text: str) -> str:
        """Retrieve context for the query and return the model's answer. Never writes to the index."""
        context = self.retrieve(query_text)
        answer = self.generator.complete(build_messages(query_text, context))
        logger.info("[agent:answer] OUT answer_len=%d", len(answer))
        return answer
