"""Data models for corpus loading."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceDocument:
    """A policy document with its body text and catalogue metadata.

    Attributes:
        id: Stable identifier, ``<section>/<filename>``.
        title: Document title as catalogued.
        url: Canonical link to the published document.
        body: Full plain-text body.
        scope: Coarse scope tag (e.g. system-wide vs campus).
        section: Corpus section the document was loaded from.
        responsible_office: Office that owns the document.
        subject_areas: Subject-area tags.
        effective_date: Date the document took effect.
        issuance_date: Date the document was issued.
        keywords: Free keyword tags.
        classifications: Classification tags, used for ingestion filtering.
        manual: The manual the document belongs to, if any.
    """

    id: str
    title: str
    url: str
    body: str
    scope: str = ""
    section: str = ""
    responsible_office: str | None = None
    subject_areas: list[str] = field(default_factory=list)
    effective_date: str | None = None
    issuance_date: str | None = None
    keywords: list[str] = field(default_factory=list)
    classifications: list[str] = field(default_factory=list)
    manual: str | None = None


@dataclass
class SectionLoadResult:
    """Documents loaded from one corpus section plus non-fatal issues."""

    section: str
    scope: str
    documents: list[SourceDocument] = field(default_factory=list)
    filtered: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)
