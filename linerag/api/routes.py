"""
API route aggregator: register endpoints; no logic, only delegate to handlers and the agent.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from linerag.agent.rag_agent import RagAgent
from linerag.api.handlers import get_agent, handle_ingest
from linerag.schemas.ingest import IngestResponse
from linerag.schemas.query import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "linerag backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get("/stats", tags=["system"], summary="Vector index status")
def stats(agent: RagAgent = Depends(get_agent)) -> dict:
    """Collection name and number of stored points (one per ingested line)."""
    return {
        "collection_name": agent.index.collection_name,
        "total_points": agent.index.count(),
    }


# --- Ingestion ---

@router.post(
    "/ingest",
    response_model=IngestResponse,
    tags=["ingestion"],
    summary="Embed and store text files",
    description="Accept one or more UTF-8 text files; store one point per line. 400 on empty or non-text files, 502 on upstream failure.",
)
async def ingest_files(
    files: list[UploadFile] = File(..., description="One or more UTF-8 text files (e.g. .csv, .txt)."),
    agent: RagAgent = Depends(get_agent),
) -> IngestResponse:
    return await handle_ingest(files, agent)


# --- Query ---

@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Answer a question from the stored documents",
    description="Retrieve the single best-matching stored point and answer with it as context. 404 when the index is empty.",
)
def post_query(body: QueryRequest, agent: RagAgent = Depends(get_agent)) -> QueryResponse:
    logger.info("[api:post_query] IN  question=%r", body.question)
    answer = agent.answer(body.question)
    logger.info("[api:post_query] OUT answer_len=%d", len(answer))
    return QueryResponse(answer=answer)
