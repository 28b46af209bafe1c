"""fiki domain models — re-exports all public model classes.

Import from ``src.models`` rather than the individual modules:

    - site.py       — Source entries, pages, the page tree and IndexSet
    - ingestion.py  — Coordinator phases, classifier decisions, pass reports
"""

from __future__ import annotations

from src.models.ingestion import (
    ALLOWED_TRANSITIONS,
    Classification,
    EntryAction,
    IngestionPhase,
    IngestionReport,
)
from src.models.site import (
    INDEX_PAGE_NAME,
    MARKDOWN_EXTENSION,
    ROOT_DIRECTORY,
    EntryKind,
    IndexSet,
    PageRecord,
    SourceEntry,
    TreeNode,
)

__all__ = [
    # ingestion
    "ALLOWED_TRANSITIONS",
    "Classification",
    "EntryAction",
    "IngestionPhase",
    "IngestionReport",
    # site
    "INDEX_PAGE_NAME",
    "MARKDOWN_EXTENSION",
    "ROOT_DIRECTORY",
    "EntryKind",
    "IndexSet",
    "PageRecord",
    "SourceEntry",
    "TreeNode",
]
