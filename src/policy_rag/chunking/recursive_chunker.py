"""Recursive character chunker.

Breaks text at the largest structural boundary that keeps every chunk under
``max_chars`` (paragraph, then line, then sentence, then word, then single
characters), merges neighbouring pieces back up to the size limit, and carries
up to ``overlap_chars`` of trailing context from one chunk into the next, also
across a piece that had to be split at a finer boundary. Spans shorter than
``min_chars`` are folded into a neighbour or re-cut with it, so every chunk of
a document at least ``min_chars`` long falls within [min_chars, max_chars].

All work is done on character offsets into the original body, so chunk text is
always a verbatim slice of the document and the result is deterministic.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from policy_rag.chunking.base import BaseChunker
from policy_rag.chunking.schemas import Chunk, ChunkMetadata
from policy_rag.documents.schemas import SourceDocument

logger = logging.getLogger(__name__)

MIN_CHARS = 200
MAX_CHARS = 1000
OVERLAP_CHARS = 200
SEPARATORS = ("\n\n", "\n", ". ", " ", "")

_Span = tuple[int, int]


class RecursiveChunker(BaseChunker):
    """Size-bounded, overlapping chunker for plain-text documents."""

    def __init__(
        self,
        min_chars: int = MIN_CHARS,
        max_chars: int = MAX_CHARS,
        overlap_chars: int = OVERLAP_CHARS,
        separators: Sequence[str] = SEPARATORS,
    ):
        if max_chars <= 0:
            raise ValueError("max_chars must be > 0")
        if not 0 <= overlap_chars < max_chars:
            raise ValueError("overlap_chars must be >= 0 and smaller than max_chars")
        if not 0 <= min_chars <= max_chars:
            raise ValueError("min_chars must be between 0 and max_chars")

        self.min_chars = min_chars
        self.max_chars = max_chars
        self.overlap_chars = overlap_chars
        # Character splitting is the last resort and must always be available
        self.separators = [s for s in separators if s] + [""]

    def split(self, document: SourceDocument) -> list[Chunk]:
        text = document.body
        if not text.strip():
            return []

        if len(text.strip()) < self.min_chars:
            spans = [_strip(text, 0, len(text))]
        else:
            spans = self._split_span(text, 0, len(text), self.separators)
            spans = self._absorb_small(text, spans)

        total = len(spans)
        chunks = [
            Chunk(
                text=text[start:end],
                metadata=ChunkMetadata.from_document(
                    document, chunk_index=i, start_offset=start,
                ),
                chunk_index=i,
                total_chunks=total,
            )
            for i, (start, end) in enumerate(spans)
        ]

        logger.debug(
            "RecursiveChunker produced %d chunks from %s (%d chars)",
            total, document.id, len(text),
        )
        return chunks

    def split_text(self, text: str) -> list[str]:
        """Split bare text, without document metadata."""
        document = SourceDocument(id="", title="", url="", body=text)
        return [c.text for c in self.split(document)]

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _split_span(
        self,
        text: str,
        start: int,
        end: int,
        separators: list[str],
    ) -> list[_Span]:
        segment = text[start:end]
        separator, remaining = "", []
        for i, sep in enumerate(separators):
            if sep == "" or sep in segment:
                separator, remaining = sep, separators[i + 1:]
                break

        spans: list[_Span] = []
        pending: list[_Span] = []
        for piece in self._pieces(text, start, end, separator):
            if piece[1] - piece[0] <= self.max_chars:
                pending.append(piece)
                continue

            if pending:
                self._flush(text, spans, pending)
                pending = []
            # The oversized piece is split one level down, led in by the overlap
            lead = self._carry(text, spans, piece[0])
            _append(spans, self._split_span(text, lead, piece[1], remaining))

        if pending:
            self._flush(text, spans, pending)
        return spans

    def _flush(self, text: str, spans: list[_Span], pending: list[_Span]) -> None:
        lead = self._carry(text, spans, pending[0][0])
        if lead < pending[0][0]:
            pending = [(lead, pending[0][0]), *pending]
        _append(spans, self._merge(text, pending))

    def _carry(self, text: str, spans: list[_Span], start: int) -> int:
        """Where overlap from the last span begins for content starting at ``start``."""
        if not spans or not self.overlap_chars:
            return start
        prev = spans[-1]
        for pos in range(max(prev[0], start - self.overlap_chars), min(prev[1], start)):
            if _word_start(text, pos):
                return pos
        return start

    @staticmethod
    def _pieces(text: str, start: int, end: int, separator: str) -> list[_Span]:
        """Cut ``text[start:end]`` after each separator, keeping it on the left piece."""
        if not separator:
            return [(i, i + 1) for i in range(start, end)]

        pieces: list[_Span] = []
        cursor = start
        while cursor < end:
            hit = text.find(separator, cursor, end)
            if hit == -1:
                pieces.append((cursor, end))
                break
            pieces.append((cursor, hit + len(separator)))
            cursor = hit + len(separator)
        return pieces

    def _merge(self, text: str, pieces: list[_Span]) -> list[_Span]:
        """Greedily join contiguous pieces into spans of at most ``max_chars``."""
        spans: list[_Span] = []
        window: list[_Span] = []
        size = 0

        for piece in pieces:
            length = piece[1] - piece[0]
            if window and size + length > self.max_chars:
                spans.append(_strip(text, window[0][0], window[-1][1]))
                # Keep a tail of the window as overlap for the next span
                while window and (size > self.overlap_chars or size + length > self.max_chars):
                    size -= window[0][1] - window[0][0]
                    window.pop(0)
            window.append(piece)
            size += length

        if window:
            spans.append(_strip(text, window[0][0], window[-1][1]))
        return [s for s in spans if s[1] > s[0]]

    def _absorb_small(self, text: str, spans: list[_Span]) -> list[_Span]:
        """Bring every span up to ``min_chars`` without pushing any past ``max_chars``.

        A short span joins its predecessor when the union fits, else its
        successor; failing both, it is re-cut together with a neighbour into
        two spans that each fall inside the band.
        """
        pending = list(spans)
        result: list[_Span] = []
        i = 0
        while i < len(pending):
            span = pending[i]
            has_next = i + 1 < len(pending)

            if span[1] - span[0] >= self.min_chars:
                result.append(span)
            elif result and span[1] - result[-1][0] <= self.max_chars:
                result[-1] = (result[-1][0], span[1])
            elif has_next and pending[i + 1][1] - span[0] <= self.max_chars:
                pending[i + 1] = (span[0], pending[i + 1][1])
            elif result:
                prev = result.pop()
                result.extend(self._rebalance(text, prev[0], span[1]))
            elif has_next:
                pending[i + 1:i + 2] = self._rebalance(text, span[0], pending[i + 1][1])
            else:
                result.append(span)
            i += 1
        return result

    def _rebalance(self, text: str, start: int, end: int) -> list[_Span]:
        """Cut ``text[start:end]`` (longer than ``max_chars``) into two in-band spans.

        The first span ends at the word boundary nearest the middle that keeps
        it within [min_chars, max_chars]; the second runs to ``end`` and may
        overlap the first when the remainder alone would be too short.
        """
        lo = max(start + self.min_chars, end - self.max_chars)
        hi = start + self.max_chars
        middle = min(max(start + (end - start) // 2, lo), hi)

        cut = min(
            (pos for pos in range(lo, hi + 1) if _word_end(text, pos)),
            key=lambda pos: (abs(pos - middle), pos),
            default=middle,
        )

        resume = cut
        while resume < end and text[resume].isspace():
            resume += 1
        second_hi = min(resume, end - self.min_chars)
        second_lo = end - self.max_chars
        second = max(
            (pos for pos in range(second_lo, second_hi + 1) if _word_start(text, pos)),
            default=second_hi,
        )
        return [(start, cut), (second, end)]


def _append(spans: list[_Span], new: list[_Span]) -> None:
    # Spans lying wholly inside the previous one carry nothing new
    if spans:
        new = [s for s in new if s[1] > spans[-1][1]]
    spans.extend(new)


def _word_start(text: str, pos: int) -> bool:
    return not text[pos].isspace() and (pos == 0 or text[pos - 1].isspace())


def _word_end(text: str, pos: int) -> bool:
    return pos < len(text) and text[pos].isspace() and not text[pos - 1].isspace()


def _strip(text: str, start: int, end: int) -> _Span:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end
