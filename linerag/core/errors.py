"""
Application errors for the ingest and answer pipelines.

Service adapters translate library exceptions into ServiceError subclasses;
the agent never recovers locally. The API and CLI map these to status codes.
"""


class RagError(Exception):
    """Base class for every error raised by linerag."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(RagError):
    """Raised when required credentials or connection settings are missing."""


class EmptyInputError(RagError):
    """Raised when a document with no chunks is passed to ingest."""


class NoResultsError(RagError):
    """Raised when the vector index returns no match for a query."""


class MalformedPayloadError(RagError):
    """Raised when a retrieved point lacks the expected content field."""


class NoChoicesError(RagError):
    """Raised when the generation service returns no candidate answer."""


class ServiceError(RagError):
    """Raised for transport, auth or validation failures of an external service."""


class GenerationError(ServiceError):
    """Raised when the chat completion request itself fails."""


class PartialIngestError(ServiceError):
    """Raised when an upsert fails mid-ingest. Points written before it stay stored."""

    def __init__(self, message: str, stored: int) -> None:
        self.stored = stored
        super().__init__(message)


class DocumentReadError(ServiceError, OSError):
    """Raised when a source file cannot be read or is not valid UTF-8 text."""
