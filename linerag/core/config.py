"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
The agent never reads these directly; it receives a RagSettings instance.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from linerag.core.errors import ConfigurationError

load_dotenv()

# Provider selection: "openai", "hf", or "" to pick by which key is set
PROVIDER: str = os.getenv("LINERAG_PROVIDER", "").strip().lower()

# OpenAI (embeddings + chat completions)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small").strip() or "text-embedding-3-small"
)
OPENAI_LLM_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-4o").strip() or "gpt-4o"

# Hugging Face (fallback when OPENAI_API_KEY is not set)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = (
    os.getenv("HF_EMBED_MODEL", "sentence-transformers/all-MiniLM-L6-v2").strip()
    or "sentence-transformers/all-MiniLM-L6-v2"
)
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"

# Vector dimension per provider (text-embedding-3-small = 1536, all-MiniLM-L6-v2 = 384)
OPENAI_VECTOR_DIM: int = 1536
HF_VECTOR_DIM: int = 384

# Milvus (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()

# Single collection for every ingested document
COLLECTION_NAME: str = os.getenv("COLLECTION_NAME", "my-collection").strip() or "my-collection"

# Numeric settings are kept raw; RagSettings.from_env parses them
VECTOR_DIM: str = os.getenv("VECTOR_DIM", "").strip()  # "" = provider default
EMBED_BATCH_SIZE: str = os.getenv("EMBED_BATCH_SIZE", "32").strip()

# API timeouts (seconds)
EMBED_API_TIMEOUT: str = os.getenv("EMBED_API_TIMEOUT", "30").strip()
LLM_API_TIMEOUT: str = os.getenv("LLM_API_TIMEOUT", "60").strip()

AGENT_MAX_TOKENS: str = os.getenv("AGENT_MAX_TOKENS", "512").strip()


def _parse(name: str, raw: str, cast):
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _resolve_provider(provider: str, openai_key: str, hf_key: str) -> str:
    if provider in ("openai", "hf"):
        return provider
    if openai_key:
        return "openai"
    if hf_key:
        return "hf"
    return ""


@dataclass(frozen=True)
class RagSettings:
    """Everything the agent and its service adapters need, read once."""

    provider: str
    openai_api_key: str
    hf_api_key: str
    embed_model: str
    llm_model: str
    vector_dim: int
    milvus_uri: str
    milvus_token: str
    collection_name: str
    embed_batch_size: int = 32
    embed_timeout: float = 30.0
    llm_timeout: float = 60.0
    max_tokens: int = 512

    @classmethod
    def from_env(cls) -> "RagSettings":
        """
        Build settings from the module constants (environment + .env).

        VECTOR_DIM overrides the provider default, so a non-default embedding
        model can be paired with a matching collection.

        Raises:
            ConfigurationError: If a numeric setting is not a positive number.
        """
        provider = _resolve_provider(PROVIDER, OPENAI_API_KEY, HF_API_KEY)
        if provider == "hf":
            embed_model, llm_model, default_dim = HF_EMBED_MODEL, HF_LLM_MODEL, HF_VECTOR_DIM
        else:
            embed_model, llm_model, default_dim = OPENAI_EMBED_MODEL, OPENAI_LLM_MODEL, OPENAI_VECTOR_DIM
        return cls(
            provider=provider,
            openai_api_key=OPENAI_API_KEY,
            hf_api_key=HF_API_KEY,
            embed_model=embed_model,
            llm_model=llm_model,
            vector_dim=_parse("VECTOR_DIM", VECTOR_DIM, int) if VECTOR_DIM else default_dim,
            milvus_uri=MILVUS_URI,
            milvus_token=MILVUS_TOKEN,
            collection_name=COLLECTION_NAME,
            embed_batch_size=_parse("EMBED_BATCH_SIZE", EMBED_BATCH_SIZE, int),
            embed_timeout=_parse("EMBED_API_TIMEOUT", EMBED_API_TIMEOUT, float),
            llm_timeout=_parse("LLM_API_TIMEOUT", LLM_API_TIMEOUT, float),
            max_tokens=_parse("AGENT_MAX_TOKENS", AGENT_MAX_TOKENS, int),
        )
