"""Ingestion state models: coordinator phases, classifications, pass reports.

Defines Pydantic v2 models for the ingestion coordinator.  Frozen like the
site models; the coordinator produces a new :class:`IngestionReport` per
pass rather than updating one in place.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# IngestionPhase — the coordinator's state machine.
# ---------------------------------------------------------------------------
class IngestionPhase(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Phases of an ingestion pass.

        IDLE → FETCHING → CLASSIFYING → FINALIZING → READY → IDLE
                  └──────────┴─────────────┴──→ FAILED → IDLE

    The pull/classify/build loop is one coarse phase: CLASSIFYING starts with
    the first entry and lasts until the source is exhausted.
    """

    IDLE = "IDLE"                # No pass running
    FETCHING = "FETCHING"        # Source opened, waiting for the first entry
    CLASSIFYING = "CLASSIFYING"  # Pulling, classifying and indexing entries
    FINALIZING = "FINALIZING"    # Freezing the builder into an IndexSet
    READY = "READY"              # IndexSet published
    FAILED = "FAILED"            # Pass aborted; live index untouched


ALLOWED_TRANSITIONS: dict[IngestionPhase, frozenset[IngestionPhase]] = {
    IngestionPhase.IDLE: frozenset({IngestionPhase.FETCHING}),
    IngestionPhase.FETCHING: frozenset({IngestionPhase.CLASSIFYING, IngestionPhase.FINALIZING, IngestionPhase.FAILED}),
    IngestionPhase.CLASSIFYING: frozenset({IngestionPhase.FINALIZING, IngestionPhase.FAILED}),
    IngestionPhase.FINALIZING: frozenset({IngestionPhase.READY, IngestionPhase.FAILED}),
    IngestionPhase.READY: frozenset({IngestionPhase.IDLE}),
    IngestionPhase.FAILED: frozenset({IngestionPhase.IDLE}),
}


# ---------------------------------------------------------------------------
# Classification — what to do with one entry.
# ---------------------------------------------------------------------------
class EntryAction(str, Enum):  # noqa: UP042
    """Decision taken by the entry classifier."""

    IGNORE = "IGNORE"                    # Hidden, non-markdown or non-regular
    TOPIC = "TOPIC"                      # Root-level directory
    HIERARCHY_CHILD = "HIERARCHY_CHILD"  # Nested directory, listed under its parent
    INDEX_PAGE = "INDEX_PAGE"            # <dir>/index.md: page only
    PAGE = "PAGE"                        # Page + listed child + tree leaf


class Classification(BaseModel):
    """The classifier's verdict for one :class:`~src.models.site.SourceEntry`."""

    model_config = ConfigDict(frozen=True)

    action: EntryAction
    relative_path: str
    # Page key (relative path without the extension) for page actions.
    key: str | None = None
    # Containing directory key and base name for listed entries.
    parent: str | None = None
    name: str | None = None
    # Why an entry was ignored, for debug logs.
    reason: str | None = None


# ---------------------------------------------------------------------------
# IngestionReport — summary of one pass.
# ---------------------------------------------------------------------------
class IngestionReport(BaseModel):
    """Outcome and statistics of a single ingestion pass."""

    model_config = ConfigDict(frozen=True)

    pass_id: str
    source_name: str
    # READY for a published pass, FAILED otherwise.
    outcome: IngestionPhase
    started_at: datetime
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    duration_ms: float = Field(default=0.0, ge=0.0)
    entries_seen: int = Field(default=0, ge=0)
    pages: int = Field(default=0, ge=0)
    topics: int = Field(default=0, ge=0)
    ignored: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is IngestionPhase.READY
