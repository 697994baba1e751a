"""Corpus loader — section directories of ``metadata.json`` plus ``.txt`` bodies.

A corpus root is either a single section (it holds the metadata file itself)
or a directory of section subdirectories. Each metadata record names a
``filename`` whose body lives next to it as ``<filename>.txt``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from policy_rag.documents.schemas import SectionLoadResult, SourceDocument
from policy_rag.errors import IngestionIOError

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"


class CorpusLoader:
    """Load policy documents and their metadata from disk."""

    def __init__(
        self,
        metadata_filename: str = METADATA_FILENAME,
        ignored_classifications: Iterable[str] = ("Resource",),
        scope_map: dict[str, str] | None = None,
        default_scope: str | None = None,
    ):
        self.metadata_filename = metadata_filename
        self.ignored_classifications = frozenset(ignored_classifications)
        self.scope_map = dict(scope_map or {})
        self.default_scope = default_scope

    def discover_sections(self, root: str | Path) -> list[Path]:
        """Return the section directories under ``root``, in sorted order."""
        root = Path(root)
        if not root.is_dir():
            raise IngestionIOError(f"Corpus directory not found: {root}")

        if (root / self.metadata_filename).exists():
            return [root]

        return sorted(
            p for p in root.iterdir()
            if p.is_dir() and not p.name.startswith(".")
        )

    def iter_sections(self, root: str | Path) -> Iterator[SectionLoadResult]:
        """Load every section under ``root``."""
        for section_dir in self.discover_sections(root):
            yield self.load_section(section_dir)

    def scope_for(self, section: str) -> str:
        return self.scope_map.get(section, self.default_scope or section)

    def load_section(self, directory: str | Path) -> SectionLoadResult:
        """Load one section directory.

        A missing or unparseable metadata file aborts the run; a missing body
        only skips that document.
        """
        directory = Path(directory)
        section = directory.name
        result = SectionLoadResult(section=section, scope=self.scope_for(section))

        for record in self._read_metadata(directory):
            classifications = list(record.get("classifications") or [])
            if any(c in self.ignored_classifications for c in classifications):
                result.filtered += 1
                continue

            filename = record.get("filename")
            if not filename:
                result.skipped += 1
                result.warnings.append(f"{section}: metadata record without filename skipped")
                continue

            body_path = directory / f"{filename}.txt"
            try:
                body = body_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping %s: %s", body_path, exc)
                result.skipped += 1
                result.warnings.append(f"{section}/{filename}: unreadable body ({exc})")
                continue

            result.documents.append(
                self._to_document(record, body, section=section, scope=result.scope)
            )

        logger.info(
            "Loaded section %s: %d documents (%d filtered, %d skipped)",
            section,
            len(result.documents),
            result.filtered,
            result.skipped,
        )
        return result

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _read_metadata(self, directory: Path) -> list[dict[str, Any]]:
        path = directory / self.metadata_filename
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise IngestionIOError(f"Metadata file not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise IngestionIOError(f"Cannot read metadata file {path}: {exc}") from exc

        if not isinstance(raw, list):
            raise IngestionIOError(f"Metadata file {path} must contain a JSON list")
        return raw

    @staticmethod
    def _to_document(
        record: dict[str, Any],
        body: str,
        section: str,
        scope: str,
    ) -> SourceDocument:
        filename = record["filename"]
        return SourceDocument(
            id=f"{section}/{filename}",
            title=record.get("title") or filename,
            url=record.get("url") or "",
            body=body,
            scope=scope,
            section=section,
            responsible_office=record.get("responsible_office"),
            subject_areas=list(record.get("subject_areas") or []),
            effective_date=record.get("effective_date"),
            issuance_date=record.get("issuance_date"),
            keywords=list(record.get("keywords") or []),
            classifications=list(record.get("classifications") or []),
            manual=record.get("manual"),
        )
