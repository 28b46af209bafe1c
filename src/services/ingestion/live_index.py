"""The published reference to the current IndexSet.

Readers call :meth:`LiveIndex.current` once per request and keep the
returned snapshot; publishing replaces the reference in a single assignment,
so a reader sees either the previous pass or the new one in full.
"""

from __future__ import annotations

import threading

import structlog

from src.models.site import IndexSet

logger = structlog.get_logger(logger_name=__name__)


class LiveIndex:
    """Holder of the most recently published :class:`IndexSet`."""

    def __init__(self, initial: IndexSet | None = None) -> None:
        self._current = initial
        self._generation = 0 if initial is None else 1
        # Serializes publishers only; reads never take it.
        self._publish_lock = threading.Lock()

    def current(self) -> IndexSet | None:
        """Return the live snapshot, or ``None`` before the first publish."""
        return self._current

    def publish(self, index_set: IndexSet) -> int:
        """Make *index_set* live and return the new generation number."""
        with self._publish_lock:
            previous = self._current
            self._current = index_set
            self._generation += 1
            generation = self._generation

        logger.info(
            "index_published",
            generation=generation,
            pass_id=index_set.pass_id,
            pages=index_set.page_count,
            replaced_pass_id=previous.pass_id if previous is not None else None,
        )
        return generation

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_ready(self) -> bool:
        return self._current is not None
