"""Abstract base class for content entry sources.

An entry source turns one content origin (a remote tarball, a local
directory) into a flat stream of :class:`~src.models.site.SourceEntry`
values.  The classifier and the index builder only ever see that stream, so
both origins share the same ingestion rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator

from src.models.site import SourceEntry


class IEntrySource(ABC):
    """Contract for content entry sources.

    ``iter_entries`` is synchronous: the tarball download and the directory
    walk are blocking I/O and the coordinator runs them on a worker thread.
    """

    @abstractmethod
    def iter_entries(self) -> Iterator[SourceEntry]:
        """Yield every entry of the content tree exactly once.

        Each call starts a new fetch or walk; an exhausted iterator is not
        restartable.

        Raises
        ------
        src.utils.errors.SourceAccessError
            When the origin cannot be read (network, HTTP status, archive
            format, missing or unreadable directory).  Raised lazily, while
            iterating.
        """

    @abstractmethod
    def get_source_name(self) -> str:
        """Return a short human-readable name, e.g. ``tarball:umurgdk/wiki``."""
