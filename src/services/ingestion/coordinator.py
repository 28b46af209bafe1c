"""Orchestrator for one full ingestion pass: source -> classify -> build -> publish.

The :class:`IngestionCoordinator` implements the **Orchestrator pattern**:
it drives three collaborators that know nothing about each other:

    1. IEntrySource       -- tarball or local directory, one entry at a time
    2. EntryClassifier    -- which indexes an entry feeds
    3. SiteIndexBuilder   -- a fresh builder per pass, frozen into an IndexSet

and hands the finished IndexSet to :class:`LiveIndex` in one step.  A pass
that fails or is abandoned never reaches that step, so the previous snapshot
keeps being served.

# ─── PHASES ───────────────────────────────────────────────────────────
#
#   IDLE → FETCHING → CLASSIFYING → FINALIZING → READY → IDLE
#              └───────────┴─────────────┴──→ FAILED → IDLE
#
# run_pass() is synchronous (the fetch and the walk block); refresh() runs
# it on a worker thread for the webhook.  Only one pass runs at a time:
# the builder's uniqueness checks assume a single writer.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Generator
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

import structlog

from src.interfaces.entry_source import IEntrySource
from src.interfaces.markdown_renderer import IMarkdownRenderer
from src.models.ingestion import (
    ALLOWED_TRANSITIONS,
    EntryAction,
    IngestionPhase,
    IngestionReport,
)
from src.models.site import IndexSet, SourceEntry
from src.services.ingestion.classifier import EntryClassifier
from src.services.ingestion.index_builder import SiteIndexBuilder
from src.services.ingestion.live_index import LiveIndex
from src.utils.errors import (
    EntryFormatError,
    IngestionBusyError,
    IngestionError,
    IngestionStateError,
    PassAbandonedError,
)

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class _PassStats:
    entries_seen: int = 0
    ignored: int = 0
    skipped: int = 0


class IngestionCoordinator:
    """Runs ingestion passes and publishes their results.

    Parameters
    ----------
    source:
        Where entries come from.  ``iter_entries()`` is called once per pass.
    renderer:
        Markdown to HTML conversion for page entries.
    live_index:
        The published reference read by the serving layer.
    classifier:
        Optional classifier override; the default applies the standard rules.
    """

    def __init__(
        self,
        source: IEntrySource,
        renderer: IMarkdownRenderer,
        live_index: LiveIndex,
        classifier: EntryClassifier | None = None,
    ) -> None:
        self._source = source
        self._renderer = renderer
        self._live_index = live_index
        self._classifier = classifier or EntryClassifier()
        self._phase = IngestionPhase.IDLE
        self._pass_lock = threading.Lock()
        self._abandon_requested = threading.Event()
        # abandon() check-and-set is atomic with the end-of-pass clear.
        self._abandon_lock = threading.Lock()
        self._last_report: IngestionReport | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def phase(self) -> IngestionPhase:
        return self._phase

    @property
    def last_report(self) -> IngestionReport | None:
        return self._last_report

    @property
    def live_index(self) -> LiveIndex:
        return self._live_index

    @property
    def source_name(self) -> str:
        return self._source.get_source_name()

    @property
    def renderer_name(self) -> str:
        return self._renderer.get_renderer_name()

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    def run_pass(self) -> IndexSet:
        """Run one complete ingestion pass and publish its IndexSet.

        Returns
        -------
        IndexSet
            The snapshot that is now live.

        Raises
        ------
        IngestionBusyError
            Another pass is in flight; nothing was done.
        IngestionError
            The pass failed (source access, consistency violation, abandon).
            The live index is unchanged.
        """
        if not self._pass_lock.acquire(blocking=False):
            raise IngestionBusyError(source_name=self.source_name)
        try:
            pass_id = uuid4().hex[:12]
            with structlog.contextvars.bound_contextvars(pass_id=pass_id, source=self.source_name):
                return self._run_locked(pass_id)
        finally:
            with self._abandon_lock:
                self._abandon_requested.clear()
                self._pass_lock.release()

    async def refresh(self) -> bool:
        """Run a pass on a worker thread; used by the refresh webhook.

        Returns ``True`` when a new IndexSet was published.  A request that
        arrives while a pass is running is dropped.  Failures are logged and
        swallowed: the previous snapshot stays live.
        """
        if self.is_running:
            logger.info("ingestion_refresh_dropped", source=self.source_name, reason="pass_in_flight")
            return False

        try:
            await asyncio.to_thread(self.run_pass)
        except IngestionBusyError:
            logger.info("ingestion_refresh_dropped", source=self.source_name, reason="pass_in_flight")
            return False
        except IngestionError as exc:
            logger.warning("ingestion_refresh_failed", source=self.source_name, error=str(exc))
            return False
        return True

    def abandon(self) -> bool:
        """Ask the running pass to stop before it publishes.

        Returns ``False`` when no pass is running.
        """
        with self._abandon_lock:
            if not self.is_running:
                return False
            self._abandon_requested.set()
        logger.info("ingestion_abandon_requested", source=self.source_name)
        return True

    # ------------------------------------------------------------------
    # Pass internals
    # ------------------------------------------------------------------

    def _run_locked(self, pass_id: str) -> IndexSet:
        source_name = self.source_name
        builder = SiteIndexBuilder()
        stats = _PassStats()
        started_at = datetime.now(tz=timezone.utc)  # noqa: UP017
        start = time.monotonic()

        self._transition(IngestionPhase.FETCHING)
        logger.info("ingestion_pass_started")

        try:
            entries = self._source.iter_entries()
            try:
                for entry in entries:
                    self._check_abandoned(source_name)
                    if self._phase is IngestionPhase.FETCHING:
                        self._transition(IngestionPhase.CLASSIFYING)
                    stats.entries_seen += 1
                    self._ingest_entry(entry, builder, stats)
            finally:
                # Releases the HTTP response or directory handles early.
                if isinstance(entries, Generator):
                    entries.close()

            self._check_abandoned(source_name)
            self._transition(IngestionPhase.FINALIZING)
            index_set = builder.finalize(pass_id=pass_id, source_name=source_name)
        except IngestionError as exc:
            self._record_failure(pass_id, source_name, started_at, start, stats, builder, exc)
            raise
        except Exception as exc:
            self._record_failure(pass_id, source_name, started_at, start, stats, builder, exc)
            raise IngestionError(
                message=f"Unexpected error during ingestion: {exc}",
                source_name=source_name,
            ) from exc

        self._transition(IngestionPhase.READY)
        generation = self._live_index.publish(index_set)
        self._last_report = IngestionReport(
            pass_id=pass_id,
            source_name=source_name,
            outcome=IngestionPhase.READY,
            started_at=started_at,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
            entries_seen=stats.entries_seen,
            pages=index_set.page_count,
            topics=len(index_set.topic_names),
            ignored=stats.ignored,
            skipped=stats.skipped,
        )
        logger.info(
            "ingestion_pass_completed",
            generation=generation,
            pages=index_set.page_count,
            topics=list(index_set.topic_names),
            ignored=stats.ignored,
            skipped=stats.skipped,
            duration_ms=self._last_report.duration_ms,
        )
        self._transition(IngestionPhase.IDLE)
        return index_set

    def _ingest_entry(
        self,
        entry: SourceEntry,
        builder: SiteIndexBuilder,
        stats: _PassStats,
    ) -> None:
        try:
            decision = self._classifier.classify(entry)
        except EntryFormatError as exc:
            stats.skipped += 1
            logger.warning("entry_skipped", path=entry.relative_path, reason=exc.message)
            return

        if decision.action is EntryAction.IGNORE:
            stats.ignored += 1
            logger.debug("entry_ignored", path=entry.relative_path, reason=decision.reason)
            return

        html = None
        if decision.action in (EntryAction.PAGE, EntryAction.INDEX_PAGE):
            html = self._renderer.render(entry.content or b"")
        builder.apply(decision, html)

    def _check_abandoned(self, source_name: str) -> None:
        if self._abandon_requested.is_set():
            raise PassAbandonedError(source_name=source_name)

    def _transition(self, target: IngestionPhase) -> None:
        if target not in ALLOWED_TRANSITIONS[self._phase]:
            raise IngestionStateError(
                f"Cannot move from {self._phase.value} to {target.value}",
                source_name=self.source_name,
            )
        self._phase = target

    def _record_failure(
        self,
        pass_id: str,
        source_name: str,
        started_at: datetime,
        start: float,
        stats: _PassStats,
        builder: SiteIndexBuilder,
        exc: Exception,
    ) -> None:
        if IngestionPhase.FAILED in ALLOWED_TRANSITIONS[self._phase]:
            self._transition(IngestionPhase.FAILED)
        else:
            self._phase = IngestionPhase.FAILED

        self._last_report = IngestionReport(
            pass_id=pass_id,
            source_name=source_name,
            outcome=IngestionPhase.FAILED,
            started_at=started_at,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
            entries_seen=stats.entries_seen,
            pages=builder.page_count,
            topics=builder.topic_count,
            ignored=stats.ignored,
            skipped=stats.skipped,
            error=str(exc),
        )
        logger.error(
            "ingestion_pass_failed",
            error_type=type(exc).__name__,
            error=str(exc),
            entries_seen=stats.entries_seen,
            live_generation=self._live_index.generation,
        )
        self._transition(IngestionPhase.IDLE)
