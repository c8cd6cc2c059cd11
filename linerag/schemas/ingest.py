"""Schemas for the ingest endpoint."""

from pydantic import BaseModel, Field


class IngestResponse(BaseModel):
    """Response after embedding and storing uploaded files."""

    documents: list[str] = Field(..., description="Identifiers (filenames) of the ingested documents.")
    points: int = Field(..., description="Number of points stored, one per line across all documents.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"documents": ["sales.csv", "stock.csv"], "points": 120}]
        }
    }
