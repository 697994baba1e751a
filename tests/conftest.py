"""Shared fixtures for tests — synthetic policy corpus, stub capabilities, no network calls."""

from __future__ import annotations

import hashlib
import json
import textwrap
from pathlib import Path

import numpy as np
import pytest

from policy_rag.documents.schemas import SourceDocument
from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.llm.base import ChatMessage, Completion, LLMProvider, ToolCall, ToolSpec

DIM = 64


# ---------------------------------------------------------------------------
# Stub capabilities
# ---------------------------------------------------------------------------


class MockEmbedder(EmbeddingProvider):
    """Deterministic hash-based embeddings."""

    model = "mock-embedder"

    def __init__(self, dim: int = DIM):
        self._dim = dim
        self.batches: list[list[str]] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.batches.append(list(texts))
        return [self._hash_embed(t) for t in texts]

    def embed_query(self, query: str) -> list[float]:
        return self._hash_embed(query)

    @property
    def dimension(self) -> int:
        return self._dim

    def _hash_embed(self, text: str) -> list[float]:
        h = hashlib.sha256(text.encode()).digest()
        vec = np.array([h[i % len(h)] / 255.0 for i in range(self._dim)], dtype=np.float32)
        vec /= np.linalg.norm(vec)
        return vec.tolist()


class StubLLM(LLMProvider):
    """Returns a canned completion (or raises a canned error) and records calls."""

    def __init__(self, completion: Completion | Exception | None = None, model: str = "stub-llm"):
        self.model = model
        self.completion = completion if completion is not None else Completion(model=model)
        self.calls: list[tuple[list[ChatMessage], ToolSpec, str | None]] = []

    def complete(
        self,
        messages: list[ChatMessage],
        tool: ToolSpec,
        model: str | None = None,
    ) -> Completion:
        self.calls.append((messages, tool, model))
        if isinstance(self.completion, Exception):
            raise self.completion
        return self.completion


def answer_call(content: str, citations: list[tuple[str, str]] | None = None) -> ToolCall:
    args = {
        "content": content,
        "citations": [{"title": t, "url": u} for t, u in citations or []],
    }
    return ToolCall(name="answer_question", arguments=json.dumps(args))


def completion_with(*calls: ToolCall, model: str = "stub-llm") -> Completion:
    return Completion(model=model, tool_calls=list(calls))


@pytest.fixture
def embedder() -> MockEmbedder:
    return MockEmbedder()


# ---------------------------------------------------------------------------
# Synthetic corpus
# ---------------------------------------------------------------------------


VACATION_POLICY = textwrap.dedent("""\
    Vacation Leave

    Eligible employees accrue vacation leave each month based on their
    appointment percentage. Full-time staff accrue ten hours per month during
    the first five years of service.

    Maximum Accrual

    Employees may carry over vacation up to a maximum of 384 hours. Accrual
    stops once the maximum is reached and resumes after leave is used.

    Scheduling

    Vacation must be requested in advance and approved by the supervisor.
    Requests should be submitted through the timekeeping system.
""")

REMOTE_WORK_POLICY = textwrap.dedent("""\
    Remote Work

    Remote and hybrid arrangements require a written agreement between the
    employee and the department. Agreements are reviewed every year.

    Equipment

    The department provides equipment needed for remote work. Employees are
    responsible for a safe home work space.
""")


def _record(filename: str, title: str, **extra) -> dict:
    return {
        "title": title,
        "filename": filename,
        "url": f"https://policy.example.edu/{filename}",
        "effective_date": "2023-07-01",
        "issuance_date": "2023-06-15",
        "manual": "Personnel Policies",
        "responsible_office": "Human Resources",
        "subject_areas": ["Personnel"],
        "classifications": extra.pop("classifications", ["Policy"]),
        "keywords": ["leave"],
        **extra,
    }


def write_section(directory: Path, records: list[dict], bodies: dict[str, str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "metadata.json").write_text(json.dumps(records), encoding="utf-8")
    for filename, body in bodies.items():
        (directory / f"{filename}.txt").write_text(body, encoding="utf-8")
    return directory


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    """Two sections: a system-wide one and a campus one with a filtered resource."""
    root = tmp_path / "corpus"
    write_section(
        root / "ucop",
        [
            _record("ppsm-2210", "PPSM-2.210: \"Absence from Work\""),
            _record("ppsm-remote", "Remote Work Guidelines"),
        ],
        {"ppsm-2210": VACATION_POLICY, "ppsm-remote": REMOTE_WORK_POLICY},
    )
    write_section(
        root / "ucd",
        [
            _record("ppm-380-12", "PPM 380-12 Vacation"),
            _record("forms-index", "Forms Index", classifications=["Resource"]),
        ],
        {"ppm-380-12": VACATION_POLICY, "forms-index": "A list of forms."},
    )
    return root


@pytest.fixture
def sample_document() -> SourceDocument:
    return SourceDocument(
        id="ucop/ppsm-2210",
        title="PPSM-2.210: Absence from Work",
        url="https://policy.example.edu/ppsm-2210",
        body=VACATION_POLICY,
        scope="ucop",
        section="ucop",
        responsible_office="Human Resources",
        subject_areas=["Personnel"],
        classifications=["Policy"],
    )
