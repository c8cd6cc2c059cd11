"""
Vector store client: Milvus connection, point upsert, and top-k search.

Responsibility: Persist (id, vector, payload) points in one collection and
answer nearest-neighbour queries with payloads attached. Metric and dimension
checks are left to Milvus.
"""

import logging
from typing import Any

from pymilvus import MilvusClient, MilvusException

from linerag.core.config import RagSettings
from linerag.core.errors import ConfigurationError, ServiceError
from linerag.services.base import PAYLOAD_FIELDS, SearchHit

logger = logging.getLogger(__name__)

ID_MAX_LENGTH = 64


class MilvusIndex:
    """
    A single Milvus collection used as the vector index.

    Points are stored flat: the string primary key `id`, the `vector` field,
    and each payload key as a dynamic field. The collection is created on
    first use (COSINE metric, string ids supplied by the caller).
    """

    def __init__(
        self,
        uri: str,
        token: str,
        collection_name: str,
        dimension: int,
        client: Any = None,
    ) -> None:
        if client is None:
            if not uri:
                raise ConfigurationError("MILVUS_URI must be set in the environment or .env")
            try:
                client = MilvusClient(uri=uri, token=token)
            except MilvusException as e:
                raise ServiceError(f"Milvus connection failed: {e}") from e
            logger.info("Milvus connection established")
        self.collection_name = collection_name
        self.dimension = dimension
        self._client = client
        self._ready = False

    @classmethod
    def from_settings(cls, settings: RagSettings) -> "MilvusIndex":
        return cls(
            uri=settings.milvus_uri,
            token=settings.milvus_token,
            collection_name=settings.collection_name,
            dimension=settings.vector_dim,
        )

    def ensure_collection(self) -> None:
        if self._ready:
            return
        try:
            if not self._client.has_collection(self.collection_name):
                self._client.create_collection(
                    collection_name=self.collection_name,
                    dimension=self.dimension,
                    primary_field_name="id",
                    id_type="string",
                    max_length=ID_MAX_LENGTH,
                    vector_field_name="vector",
                    metric_type="COSINE",
                    auto_id=False,
                    enable_dynamic_field=True,
                )
                logger.info("Collection %s created (dim=%s)", self.collection_name, self.dimension)
        except MilvusException as e:
            raise ServiceError(f"Milvus collection setup failed: {e}") from e
        self._ready = True

    def upsert(self, points: list[dict[str, Any]]) -> None:
        self.ensure_collection()
        rows = [{"id": p["id"], "vector": p["vector"], **p["payload"]} for p in points]
        try:
            self._client.upsert(collection_name=self.collection_name, data=rows)
        except MilvusException as e:
            raise ServiceError(f"Milvus upsert failed: {e}") from e
        logger.debug("[vector_store:upsert] stored ids=%s", [r["id"] for r in rows])

    def search(self, vector: list[float], limit: int = 1) -> list[SearchHit]:
        self.ensure_collection()
        try:
            results = self._client.search(
                collection_name=self.collection_name,
                data=[vector],
                limit=limit,
                output_fields=PAYLOAD_FIELDS,
            )
        except MilvusException as e:
            raise ServiceError(f"Milvus search failed: {e}") from e

        # results: list of list of hits (one list per query vector)
        hits = results[0] if results else []
        out = []
        for h in hits:
            entity = h.get("entity") or {}
            out.append(
                SearchHit(
                    id=str(h.get("id", entity.get("id", ""))),
                    score=float(h.get("distance", h.get("score", 0.0))),
                    payload={k: entity[k] for k in PAYLOAD_FIELDS if k in entity},
                )
            )
        logger.info("[vector_store:search] OUT hits=%d scores=%s", len(out), [round(o.score, 4) for o in out])
        return out

    def count(self) -> int:
        """Number of points currently stored in the collection."""
        self.ensure_collection()
        try:
            stats = self._client.get_collection_stats(collection_name=self.collection_name)
        except MilvusException as e:
            raise ServiceError(f"Milvus stats failed: {e}") from e
        return int(stats.get("row_count", 0))
