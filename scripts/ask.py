#!/usr/bin/env python3
"""
Ingest text files into the vector index and/or ask a question about them.

Run from project root:

    python scripts/ask.py --ingest data/sales.csv "How many widgets were sold in March?"
    python scripts/ask.py "Which region had the highest revenue?"

Credentials and the Milvus connection come from the environment or .env
(OPENAI_API_KEY or HF_API_KEY, MILVUS_URI, MILVUS_TOKEN).

Exit codes: 0 ok, 1 upstream failure, 2 bad input, 3 no match, 4 missing config.
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "linerag" resolves without installing
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from linerag.agent.rag_agent import RagAgent
from linerag.core.errors import (
    ConfigurationError,
    DocumentReadError,
    EmptyInputError,
    NoResultsError,
    RagError,
)
from linerag.ingest.loader import load_document


def exit_code(exc: RagError) -> int:
    if isinstance(exc, (EmptyInputError, DocumentReadError)):
        return 2
    if isinstance(exc, NoResultsError):
        return 3
    if isinstance(exc, ConfigurationError):
        return 4
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Line-level RAG over text files.")
    parser.add_argument(
        "--ingest",
        metavar="FILE",
        action="append",
        default=[],
        help="Text file to embed and store before answering. Repeatable.",
    )
    parser.add_argument("question", nargs="?", help="Question to answer from the stored rows.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline steps.")
    args = parser.parse_args(argv)

    if not args.ingest and not args.question:
        parser.error("nothing to do: pass --ingest FILE and/or a question")

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        agent = RagAgent.from_settings()
        for path in args.ingest:
            stored = agent.ingest(load_document(path))
            print(f"Embedded {path}: {stored} points")
        if args.question:
            print(agent.answer(args.question))
    except RagError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return exit_code(e)
    return 0


if __name__ == "__main__":
    sys.exit(main())
