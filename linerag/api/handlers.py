"""
API handlers: read request data (e.g. UploadFile), call the agent, map errors to HTTP.

Responsibility: Bridge HTTP types and the agent. Marshalling and
exception-to-HTTP mapping live here so the agent stays free of FastAPI types.
"""

import asyncio
import logging
from functools import lru_cache

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from linerag.agent.rag_agent import RagAgent
from linerag.core.errors import (
    ConfigurationError,
    DocumentReadError,
    EmptyInputError,
    NoResultsError,
    RagError,
)
from linerag.ingest.loader import bytes_to_text, document_from_text
from linerag.schemas.ingest import IngestResponse

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_agent() -> RagAgent:
    """One agent per process; tests replace it through app.dependency_overrides."""
    return RagAgent.from_settings()


def error_status(exc: RagError) -> int:
    if isinstance(exc, (EmptyInputError, DocumentReadError)):
        return 400
    if isinstance(exc, NoResultsError):
        return 404
    if isinstance(exc, ConfigurationError):
        return 503
    return 502


async def rag_error_handler(request: Request, exc: RagError) -> JSONResponse:
    """Registered on the app so errors from routes and dependencies map alike."""
    status = error_status(exc)
    if status == 502:
        logger.error("[api] upstream failure on %s: %s", request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("[api] %s -> %d: %s", request.url.path, status, exc.message)
    return JSONResponse(status_code=status, content={"detail": exc.message})


async def handle_ingest(files: list[UploadFile], agent: RagAgent) -> IngestResponse:
    """
    Decode each upload as UTF-8 text and ingest it as one document.

    Files are processed in order; the first RagError stops the request
    (earlier files stay ingested) and is mapped by rag_error_handler.
    """
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required.")

    documents: list[str] = []
    points = 0
    for upload in files:
        name = upload.filename or "unnamed"
        raw = await upload.read()
        doc = document_from_text(name, bytes_to_text(raw, name))
        # Blocking network calls; keep them off the event loop
        points += await asyncio.to_thread(agent.ingest, doc)
        documents.append(name)

    return IngestResponse(documents=documents, points=points)
