"""
Unit tests for RagAgent.ingest / retrieve / answer against in-memory collaborators.
"""

from unittest.mock import patch

import pytest

from linerag.agent.prompts import CONTEXT_SEPARATOR, SYSTEM_MESSAGE
from linerag.agent.rag_agent import RagAgent
from linerag.core.config import RagSettings
from linerag.core.errors import (
    ConfigurationError,
    EmptyInputError,
    MalformedPayloadError,
    NoResultsError,
    PartialIngestError,
    ServiceError,
)
from linerag.ingest.loader import Document, document_from_text
from linerag.services.base import SearchHit

SALES = document_from_text("sales.csv", "region,units\nnorth,42\nsouth,7\n")


class FixedHitIndex:
    """Search always returns the given hits; upserts are counted."""

    def __init__(self, hits: list[SearchHit]) -> None:
        self.hits = hits
        self.upsert_calls = 0

    def upsert(self, points: list[dict]) -> None:
        self.upsert_calls += 1

    def search(self, vector: list[float], limit: int = 1) -> list[SearchHit]:
        return self.hits[:limit]


class FailingIndex:
    """Accepts `ok` upserts, then raises."""

    def __init__(self, ok: int) -> None:
        self.ok = ok
        self.points: list[dict] = []

    def upsert(self, points: list[dict]) -> None:
        if len(self.points) >= self.ok:
            raise ServiceError("index unavailable")
        self.points.extend(points)

    def search(self, vector: list[float], limit: int = 1) -> list[SearchHit]:
        return []


class ShortEmbedder:
    """Drops the last vector, breaking alignment."""

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [[1.0, 0.0] for _ in texts[:-1]]


class TestIngest:
    """Tests for RagAgent.ingest()."""

    def test_empty_document_raises_and_makes_no_calls(self, agent, embedder, index) -> None:
        doc = Document(identifier="empty.csv", full_text="", chunks=[])
        with pytest.raises(EmptyInputError):
            agent.ingest(doc)
        assert embedder.calls == []
        assert index.upsert_calls == 0

    def test_one_batched_embed_and_one_upsert_per_chunk(self, agent, embedder, index) -> None:
        stored = agent.ingest(SALES)
        assert stored == 3
        assert embedder.calls == [["region,units", "north,42", "south,7"]]
        assert index.upsert_calls == 3
        assert len(index.points) == 3

    def test_payload_carries_whole_document(self, agent, index) -> None:
        agent.ingest(SALES)
        for point, row in zip(index.points, SALES.chunks):
            payload = point["payload"]
            assert payload["source"] == "sales.csv"
            assert payload["contents"] == SALES.full_text
            assert payload["rows"] == SALES.chunks
            assert payload["row"] == row

    def test_vectors_stay_aligned_with_chunks(self, agent, embedder, index) -> None:
        agent.ingest(SALES)
        expected = embedder.embed(SALES.chunks)
        assert [p["vector"] for p in index.points] == expected

    def test_fresh_ids_on_every_ingest(self, agent, index) -> None:
        agent.ingest(SALES)
        agent.ingest(SALES)
        ids = [p["id"] for p in index.points]
        assert len(ids) == 6
        assert len(set(ids)) == 6

    def test_misaligned_embeddings_raise_before_upsert(self, generator) -> None:
        index = FixedHitIndex([])
        agent = RagAgent(index=index, embedder=ShortEmbedder(), generator=generator)
        with pytest.raises(ServiceError):
            agent.ingest(SALES)
        assert index.upsert_calls == 0

    def test_upsert_failure_halts_and_keeps_earlier_points(self, embedder, generator) -> None:
        index = FailingIndex(ok=2)
        agent = RagAgent(index=index, embedder=embedder, generator=generator)
        with pytest.raises(PartialIngestError) as exc_info:
            agent.ingest(SALES)
        assert exc_info.value.stored == 2
        assert isinstance(exc_info.value.__cause__, ServiceError)
        assert [p["payload"]["row"] for p in index.points] == ["region,units", "north,42"]


class RejectEmptyEmbedder:
    """Rejects empty strings the way the OpenAI embeddings endpoint does."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if any(t == "" for t in texts):
            raise ServiceError("'$.input' is invalid: empty string")
        return [[1.0, 0.0] for _ in texts]


class TestBlankLines:
    """Blank lines stay as empty chunks; a provider that rejects them fails the whole ingest."""

    def test_blank_line_is_sent_as_empty_chunk(self, agent, embedder, index) -> None:
        doc = document_from_text("gaps.csv", "north,42\n\nsouth,7\n")
        assert agent.ingest(doc) == 3
        assert embedder.calls == [["north,42", "", "south,7"]]
        assert [p["payload"]["row"] for p in index.points] == ["north,42", "", "south,7"]

    def test_provider_rejecting_empty_chunk_fails_before_any_upsert(self, index, generator) -> None:
        embedder = RejectEmptyEmbedder()
        agent = RagAgent(index=index, embedder=embedder, generator=generator)
        doc = document_from_text("gaps.csv", "north,42\n\nsouth,7\n")
        with pytest.raises(ServiceError):
            agent.ingest(doc)
        assert len(embedder.calls) == 1
        assert index.upsert_calls == 0


class TestAnswer:
    """Tests for RagAgent.retrieve() and RagAgent.answer()."""

    def test_empty_index_raises_no_results_without_generation(self, agent, generator) -> None:
        with pytest.raises(NoResultsError):
            agent.answer("How many widgets?")
        assert generator.calls == []

    def test_answer_contains_query_and_context(self, embedder, generator) -> None:
        hit = SearchHit(id="p1", score=0.9, payload={"contents": "42 widgets sold"})
        agent = RagAgent(index=FixedHitIndex([hit]), embedder=embedder, generator=generator)
        result = agent.answer("How many widgets were sold?")
        assert "How many widgets were sold?" in result
        assert "42 widgets sold" in result
        assert CONTEXT_SEPARATOR in result

    def test_messages_are_system_then_user(self, embedder, generator) -> None:
        hit = SearchHit(id="p1", score=0.9, payload={"contents": "42 widgets sold"})
        agent = RagAgent(index=FixedHitIndex([hit]), embedder=embedder, generator=generator)
        agent.answer("q")
        (messages,) = generator.calls
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[0]["content"] == SYSTEM_MESSAGE
        assert "I don't know" in SYSTEM_MESSAGE

    def test_round_trip_returns_ingested_document(self, agent, index) -> None:
        other = document_from_text("stock.csv", "item,count\nbolts,900\n")
        agent.ingest(SALES)
        agent.ingest(other)
        assert agent.retrieve("bolts,900") == other.full_text
        assert agent.retrieve("north,42") == SALES.full_text

    def test_answer_never_upserts(self, agent, index) -> None:
        agent.ingest(SALES)
        upserts_after_ingest = index.upsert_calls
        for _ in range(3):
            agent.answer("north,42")
        assert index.upsert_calls == upserts_after_ingest
        assert len(index.points) == 3

    def test_missing_contents_field_is_malformed(self, embedder, generator) -> None:
        hit = SearchHit(id="p1", score=0.5, payload={"source": "sales.csv"})
        agent = RagAgent(index=FixedHitIndex([hit]), embedder=embedder, generator=generator)
        with pytest.raises(MalformedPayloadError):
            agent.answer("q")
        assert generator.calls == []

    def test_non_text_contents_is_malformed(self, embedder, generator) -> None:
        hit = SearchHit(id="p1", score=0.5, payload={"contents": ["a", "b"]})
        agent = RagAgent(index=FixedHitIndex([hit]), embedder=embedder, generator=generator)
        with pytest.raises(MalformedPayloadError):
            agent.retrieve("q")


class TestConstruction:
    """Tests for building the agent from settings."""

    def _settings(self, **overrides) -> RagSettings:
        values = dict(
            provider="",
            openai_api_key="",
            hf_api_key="",
            embed_model="text-embedding-3-small",
            llm_model="gpt-4o",
            vector_dim=1536,
            milvus_uri="",
            milvus_token="",
            collection_name="my-collection",
        )
        values.update(overrides)
        return RagSettings(**values)

    def test_missing_credentials_fail_fast(self, index) -> None:
        with pytest.raises(ConfigurationError):
            RagAgent(index=index, settings=self._settings())

    def test_from_settings_without_milvus_uri_fails(self) -> None:
        settings = self._settings(provider="openai", openai_api_key="sk-test")
        with pytest.raises(ConfigurationError):
            RagAgent.from_settings(settings)

    def test_settings_read_from_env_when_not_given(self, index) -> None:
        with patch("linerag.agent.rag_agent.RagSettings.from_env", return_value=self._settings()) as from_env:
            with pytest.raises(ConfigurationError):
                RagAgent(index=index)
        from_env.assert_called_once()
