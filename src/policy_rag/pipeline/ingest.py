"""Ingestion pipeline — corpus → filter → (recreate) → chunk → embed → store.

Runs out-of-band to populate the vector index. Every run is a full rebuild
(``recreate=True``) or a full overwrite of matching chunk ids. Chunks are
embedded and upserted one fixed-size batch at a time; batch N+1 starts only
after batch N is stored, so an interrupted run leaves earlier batches durable
and can simply be re-run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from policy_rag.chunking.base import BaseChunker
from policy_rag.chunking.recursive_chunker import RecursiveChunker
from policy_rag.chunking.schemas import Chunk
from policy_rag.documents.loader import CorpusLoader
from policy_rag.documents.schemas import SourceDocument
from policy_rag.embeddings.base import EmbeddingProvider
from policy_rag.errors import EmbeddingFailed
from policy_rag.pipeline.schemas import IngestReport
from policy_rag.vectorstore.base import VectorStore
from policy_rag.vectorstore.schemas import VectorRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 200


class IngestPipeline:
    """Orchestrates corpus ingestion into one vector index."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        chunker: BaseChunker | None = None,
        loader: CorpusLoader | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.chunker = chunker or RecursiveChunker()
        self.loader = loader or CorpusLoader()
        self.batch_size = batch_size

    def ingest(self, source: str | Path, recreate: bool = True) -> IngestReport:
        """Ingest every section under a corpus directory.

        Args:
            source: Corpus root (one section, or a directory of sections).
            recreate: Drop and recreate the index before writing.

        Returns:
            An ``IngestReport`` with counts and warnings.

        Raises:
            IngestionIOError: A metadata file is missing or unreadable.
            EmbeddingFailed, IndexUnavailable: A capability failed mid-run;
                batches already written stay in the index.
        """
        report = IngestReport(source=str(source))

        documents: list[SourceDocument] = []
        for section in self.loader.iter_sections(source):
            documents.extend(section.documents)
            report.documents_filtered += section.filtered
            report.documents_skipped += section.skipped
            report.warnings.extend(section.warnings)
        report.documents_loaded = len(documents)

        self._write(documents, report, recreate=recreate)
        return report

    def ingest_documents(
        self,
        documents: Sequence[SourceDocument],
        recreate: bool = False,
        source: str = "inline",
    ) -> IngestReport:
        """Ingest already-loaded documents (no filesystem step).

        Documents carrying an ignored classification are still filtered out.
        """
        report = IngestReport(source=source)
        ignored = self.loader.ignored_classifications

        kept = []
        for doc in documents:
            if any(c in ignored for c in doc.classifications):
                report.documents_filtered += 1
                continue
            kept.append(doc)
        report.documents_loaded = len(kept)

        self._write(kept, report, recreate=recreate)
        return report

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _write(
        self,
        documents: Sequence[SourceDocument],
        report: IngestReport,
        recreate: bool,
    ) -> None:
        if recreate:
            logger.info("Recreating index '%s'", self.vector_store.index_name)
            self.vector_store.recreate()
            report.index_recreated = True
        else:
            self.vector_store.create()

        for batch in _batched(self._iter_chunks(documents, report), self.batch_size):
            texts = [c.text for c in batch]
            embeddings = self.embedding_provider.embed_texts(texts)
            if len(embeddings) != len(batch):
                raise EmbeddingFailed(
                    f"Expected {len(batch)} embeddings, provider returned {len(embeddings)}"
                )

            records = [
                VectorRecord(id=chunk.id, text=chunk.text, embedding=emb, metadata=chunk.metadata)
                for chunk, emb in zip(batch, embeddings, strict=True)
            ]
            report.chunks_stored += self.vector_store.upsert(records)
            report.batches_written += 1
            logger.info(
                "Stored batch %d (%d chunks, %d total)",
                report.batches_written,
                len(records),
                report.chunks_stored,
            )

        logger.info(
            "Ingested %s: %d documents → %d chunks → %d stored (%d filtered, %d skipped)",
            report.source,
            report.documents_loaded,
            report.chunks_created,
            report.chunks_stored,
            report.documents_filtered,
            report.documents_skipped,
        )

    def _iter_chunks(
        self,
        documents: Iterable[SourceDocument],
        report: IngestReport,
    ) -> Iterator[Chunk]:
        for doc in documents:
            chunks = self.chunker.split(doc)
            if not chunks:
                report.warnings.append(f"{doc.id}: document body is empty")
                continue
            report.chunks_created += len(chunks)
            yield from chunks


def _batched(items: Iterable[Chunk], size: int) -> Iterator[list[Chunk]]:
    batch: list[Chunk] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
