"""Schemas for the query endpoint."""

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request body for POST /query."""

    question: str = Field(..., min_length=1, description="Question answered from the single best-matching stored row.")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    answer: str = Field(..., description="Answer generated from the retrieved context.")
