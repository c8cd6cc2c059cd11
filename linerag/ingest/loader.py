# Document loader: file → Document (full text + one chunk per line).
# No embeddings, no vector DB. Single place for "file/bytes → chunks".
#
# One chunk per line keeps retrieval precise: a CSV row or log line is matched
# on its own, while the full text rides along in every payload for context.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from linerag.core.errors import DocumentReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """A source file prepared for ingestion."""

    identifier: str
    full_text: str
    chunks: list[str] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    """
    Split text into lines: on "\\n", dropping one trailing "\\r" per line.

    A trailing newline does not produce a final empty line; empty text gives [].
    Lines are otherwise untouched (no strip, no dedupe).
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def bytes_to_text(raw: bytes, name: str) -> str:
    """Decode raw file bytes as UTF-8, raising DocumentReadError if they are not text."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentReadError(f"{name} is not valid UTF-8 text: {e}") from e


def document_from_text(identifier: str, text: str) -> Document:
    """Build a Document from already-read text."""
    return Document(identifier=identifier, full_text=text, chunks=split_lines(text))


def load_document(path: str | Path) -> Document:
    """
    Read a text file and split it into line chunks.

    Bytes are decoded directly so the full text is kept verbatim (no newline
    translation).

    Raises:
        DocumentReadError: If the file cannot be read or is not valid UTF-8.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentReadError(f"Failed to read {path}: {e}") from e
    doc = document_from_text(str(path), bytes_to_text(raw, str(path)))
    logger.info("[loader:load_document] %s → %d chunks", doc.identifier, len(doc.chunks))
    return doc
