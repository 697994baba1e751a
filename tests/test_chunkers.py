"""Tests for the recursive character chunker."""

from __future__ import annotations

import random

import pytest

from policy_rag.chunking.base import BaseChunker
from policy_rag.chunking.recursive_chunker import RecursiveChunker
from policy_rag.chunking.schemas import Chunk
from policy_rag.documents.schemas import SourceDocument


def _doc(body: str, doc_id: str = "ucd/doc") -> SourceDocument:
    return SourceDocument(
        id=doc_id,
        title="Doc",
        url="https://policy.example.edu/doc",
        body=body,
        scope="ucd",
        section="ucd",
    )


def _long_body(length: int = 5000) -> str:
    sentence = "Section {i} explains how leave requests are reviewed and approved. "
    text = "".join(sentence.format(i=i) for i in range(length // 40))
    return text[:length]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestRecursiveChunkerConfig:
    def test_is_base_chunker(self):
        assert isinstance(RecursiveChunker(), BaseChunker)
        assert RecursiveChunker.strategy_name() == "RecursiveChunker"

    def test_overlap_must_be_smaller_than_max(self):
        with pytest.raises(ValueError):
            RecursiveChunker(max_chars=100, overlap_chars=100)

    def test_min_cannot_exceed_max(self):
        with pytest.raises(ValueError):
            RecursiveChunker(min_chars=600, max_chars=500)

    def test_max_must_be_positive(self):
        with pytest.raises(ValueError):
            RecursiveChunker(max_chars=0, overlap_chars=0, min_chars=0)


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


class TestRecursiveChunker:
    @pytest.fixture
    def chunker(self) -> RecursiveChunker:
        return RecursiveChunker(min_chars=200, max_chars=500, overlap_chars=100)

    def test_short_document_is_one_verbatim_chunk(self, chunker: RecursiveChunker):
        body = "Employees may request leave through the portal."  # < min_chars
        chunks = chunker.split(_doc(body))
        assert len(chunks) == 1
        assert chunks[0].text == body
        assert chunks[0].total_chunks == 1

    def test_empty_document_yields_no_chunks(self, chunker: RecursiveChunker):
        assert chunker.split(_doc("")) == []
        assert chunker.split(_doc("   \n\n  ")) == []

    def test_mixed_corpus_sizes(self):
        chunker = RecursiveChunker(min_chars=200, max_chars=500)
        short = chunker.split(_doc("x" * 50, "ucd/a"))
        long = chunker.split(_doc(_long_body(5000), "ucd/b"))

        assert len(short) == 1
        assert len(long) >= 10
        assert all(len(c.text) <= 500 for c in long)

    def test_chunks_respect_max(self, chunker: RecursiveChunker):
        chunks = chunker.split(_doc(_long_body(3000)))
        assert all(0 < len(c.text) <= 500 for c in chunks)

    def test_chunk_text_is_verbatim_slice(self, chunker: RecursiveChunker):
        body = _long_body(3000)
        for c in chunker.split(_doc(body)):
            start = c.metadata.start_offset
            assert body[start:start + len(c.text)] == c.text

    def test_consecutive_chunks_overlap(self, chunker: RecursiveChunker):
        chunks = chunker.split(_doc(_long_body(3000)))
        assert len(chunks) > 1
        first, second = chunks[0], chunks[1]
        first_end = first.metadata.start_offset + len(first.text)
        assert second.metadata.start_offset < first_end

    def test_no_overlap_when_disabled(self):
        chunker = RecursiveChunker(min_chars=0, max_chars=300, overlap_chars=0)
        chunks = chunker.split(_doc(_long_body(2000)))
        for a, b in zip(chunks, chunks[1:]):
            assert b.metadata.start_offset >= a.metadata.start_offset + len(a.text)

    def test_prefers_paragraph_boundaries(self):
        paragraph = "Leave must be approved in advance by the supervisor. " * 5
        body = "\n\n".join([paragraph.strip()] * 4)
        chunker = RecursiveChunker(min_chars=100, max_chars=300, overlap_chars=0)
        chunks = chunker.split(_doc(body))
        assert [c.text for c in chunks] == [paragraph.strip()] * 4

    def test_unbroken_text_falls_back_to_characters(self):
        chunker = RecursiveChunker(min_chars=0, max_chars=100, overlap_chars=0)
        chunks = chunker.split(_doc("a" * 350))
        assert [len(c.text) for c in chunks] == [100, 100, 100, 50]

    def test_small_leading_piece_is_absorbed(self):
        body = ("B" * 38) + "\n\n" + ("A" * 200) + " " + ("A" * 200)
        chunker = RecursiveChunker(min_chars=100, max_chars=300, overlap_chars=0)
        chunks = chunker.split(_doc(body))
        assert len(chunks) == 2
        assert chunks[0].text == ("B" * 38) + "\n\n" + ("A" * 200)
        assert chunks[1].text == "A" * 200

    def test_split_is_deterministic(self, chunker: RecursiveChunker):
        doc = _doc(_long_body(4000))
        first = [(c.id, c.text) for c in chunker.split(doc)]
        second = [(c.id, c.text) for c in chunker.split(doc)]
        assert first == second

    def test_small_middle_span_is_rebalanced(self):
        # Neither neighbour can take the short paragraph without exceeding max
        long_a = ("vacation " * 50).strip()
        short = ("leave " * 15).strip()
        long_b = ("approval " * 47).strip()
        body = "\n\n".join([long_a, short, long_b])
        chunker = RecursiveChunker(min_chars=200, max_chars=500, overlap_chars=0)

        chunks = chunker.split(_doc(body))

        assert len(chunks) == 3
        assert all(200 <= len(c.text) <= 500 for c in chunks)
        assert any(short in c.text for c in chunks)

    def test_overlap_carried_into_split_paragraph(self):
        intro = "Vacation leave is earned monthly by eligible staff members. " * 5
        details = "Each request is reviewed and approved by the supervisor. " * 20
        body = intro.strip() + "\n\n" + details.strip()
        chunker = RecursiveChunker(min_chars=0, max_chars=500, overlap_chars=100)

        chunks = chunker.split(_doc(body))

        assert len(chunks) > 2
        for a, b in zip(chunks, chunks[1:]):
            assert b.metadata.start_offset < a.metadata.start_offset + len(a.text)


# ---------------------------------------------------------------------------
# Size band over generated prose
# ---------------------------------------------------------------------------

_WORDS = (
    "employee leave vacation policy supervisor approval request accrual "
    "department campus hours month year salary benefit eligible appointment "
    "university office review remote agreement travel reimbursement the a of "
    "to and in for may must shall be is are with under"
).split()


def _prose(seed: int, length: int = 5000) -> str:
    rng = random.Random(seed)
    paragraphs: list[str] = []
    size = 0
    while size < length:
        if rng.random() < 0.2:
            # Short heading line
            paragraph = " ".join(rng.choice(_WORDS) for _ in range(rng.randint(1, 4))).title()
        else:
            sentences = [
                " ".join(rng.choice(_WORDS) for _ in range(rng.randint(4, 30))).capitalize() + "."
                for _ in range(rng.randint(1, 12))
            ]
            paragraph = " ".join(sentences)
        paragraphs.append(paragraph)
        size += len(paragraph) + 2
    return "\n\n".join(paragraphs)


class TestChunkSizeBand:
    @pytest.mark.parametrize("seed", range(12))
    @pytest.mark.parametrize(
        ("min_chars", "max_chars", "overlap_chars"),
        [(200, 500, 100), (200, 1000, 200), (400, 500, 50)],
    )
    def test_every_chunk_within_band(self, seed: int, min_chars: int, max_chars: int, overlap_chars: int):
        body = _prose(seed)
        chunker = RecursiveChunker(min_chars=min_chars, max_chars=max_chars, overlap_chars=overlap_chars)

        chunks = chunker.split(_doc(body))

        sizes = [len(c.text) for c in chunks]
        assert all(min_chars <= s <= max_chars for s in sizes), sizes

    @pytest.mark.parametrize("seed", range(6))
    def test_chunks_cover_whole_document(self, seed: int):
        body = _prose(seed)
        covered = [False] * len(body)
        for c in RecursiveChunker(min_chars=200, max_chars=500, overlap_chars=100).split(_doc(body)):
            start = c.metadata.start_offset
            assert body[start:start + len(c.text)] == c.text
            covered[start:start + len(c.text)] = [True] * len(c.text)

        assert all(covered[i] for i, ch in enumerate(body) if not ch.isspace())


# ---------------------------------------------------------------------------
# Chunk identity and metadata
# ---------------------------------------------------------------------------


class TestChunkMetadata:
    def test_metadata_copied_from_document(self, sample_document: SourceDocument):
        chunks = RecursiveChunker(max_chars=200, overlap_chars=50, min_chars=50).split(
            sample_document,
        )
        assert chunks
        for i, c in enumerate(chunks):
            assert isinstance(c, Chunk)
            assert c.chunk_index == i
            assert c.total_chunks == len(chunks)
            assert c.metadata.document_id == sample_document.id
            assert c.metadata.title == sample_document.title
            assert c.metadata.url == sample_document.url
            assert c.metadata.chunk_index == i

    def test_ids_unique_within_document(self, sample_document: SourceDocument):
        chunks = RecursiveChunker(max_chars=200, overlap_chars=50, min_chars=50).split(
            sample_document,
        )
        ids = [c.id for c in chunks]
        assert len(ids) == len(set(ids))

    def test_ids_differ_across_documents(self):
        chunker = RecursiveChunker()
        a = chunker.split(_doc("Same body text.", "ucd/a"))
        b = chunker.split(_doc("Same body text.", "ucd/b"))
        assert a[0].id != b[0].id

    def test_split_text_helper(self):
        chunker = RecursiveChunker(min_chars=0, max_chars=100, overlap_chars=0)
        texts = chunker.split_text("word " * 60)
        assert texts
        assert all(len(t) <= 100 for t in texts)
