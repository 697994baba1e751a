"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    provider: str = "openai"
    model: str = "text-embedding-3-large"
    dimension: int = 3072


class VectorStoreSettings(BaseModel):
    backend: str = "opensearch"
    index_name: str = "policy_vectorstore"
    url: str = "http://127.0.0.1:9200"
    username: str | None = None
    password: str | None = None
    region: str = "us-east-1"
    aws_sigv4: bool = False
    path: str = "local_data/vectorstore"
    # Qdrant server; an on-disk store under ``path`` when unset
    qdrant_url: str | None = None
    qdrant_api_key: str | None = None


class LLMSettings(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4o"
    temperature: float = 0.2
    max_tokens: int = 2048
    # Chat command -> model, e.g. {"/policy": "gpt-4o", "/policy3": "gpt-4o-mini"}
    command_models: dict[str, str] = Field(default_factory=dict)


class ChunkingSettings(BaseModel):
    min_chars: int = 200
    max_chars: int = 1000
    overlap_chars: int = 200
    separators: list[str] = Field(
        default_factory=lambda: ["\n\n", "\n", ". ", " ", ""]
    )


class RetrievalSettings(BaseModel):
    top_k: int = 5
    num_candidates: int = 200
    min_score: float = 0.0


class IngestionSettings(BaseModel):
    batch_size: int = 200
    recreate_index: bool = True
    metadata_filename: str = "metadata.json"
    ignored_classifications: list[str] = Field(default_factory=lambda: ["Resource"])
    scope_map: dict[str, str] = Field(default_factory=dict)
    default_scope: str | None = None


class InteractionLogSettings(BaseModel):
    backend: str = "opensearch"
    index_name: str = "policy_interaction_logs"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    interaction_log: InteractionLogSettings = Field(default_factory=InteractionLogSettings)


# (env var, section, field)
_ENV_OVERRIDES: list[tuple[str, str, str]] = [
    ("OPENSEARCH_URL", "vectorstore", "url"),
    ("OPENSEARCH_USERNAME", "vectorstore", "username"),
    ("OPENSEARCH_PASSWORD", "vectorstore", "password"),
    ("POLICY_RAG_INDEX", "vectorstore", "index_name"),
    ("POLICY_RAG_LOG_INDEX", "interaction_log", "index_name"),
    ("POLICY_RAG_LLM_MODEL", "llm", "model"),
]


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("POLICY_RAG_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for env_var, section, field_name in _ENV_OVERRIDES:
        value = os.getenv(env_var)
        if value:
            raw.setdefault(section, {})[field_name] = value
    return raw


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML file, falling back to defaults."""
    settings_path = Path(path) if path else _find_settings_file()

    raw: dict[str, Any] = {}
    if settings_path is not None:
        with open(settings_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    return Settings(**_apply_env_overrides(raw))
