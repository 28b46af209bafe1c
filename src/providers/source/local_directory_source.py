"""Local directory entry source.

Walks a directory tree depth-first in lexical order, pre-order (a directory
is yielded before its contents).  The walk keeps an explicit stack of
directory iterators instead of recursing, so deep trees cost no Python
stack and a consumer can stop at any entry.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import structlog

from src.interfaces.entry_source import IEntrySource
from src.models.site import EntryKind, SourceEntry
from src.utils.errors import SourceAccessError

logger = structlog.get_logger(logger_name=__name__)


class LocalDirectoryEntrySource(IEntrySource):
    """Entry source backed by a directory on the local filesystem.

    The root itself is never yielded.  Entries whose name starts with ``.``
    are left out entirely, and hidden directories are not descended into.
    Symlinks and special files are skipped.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    # ------------------------------------------------------------------
    # IEntrySource implementation
    # ------------------------------------------------------------------

    def get_source_name(self) -> str:
        return f"local:{self._root}"

    def iter_entries(self) -> Iterator[SourceEntry]:
        """Walk the content root and yield files and directories."""
        root = self._root
        if not root.is_dir():
            raise SourceAccessError(
                message=f"Content root is not a directory: {root}",
                source_name=self.get_source_name(),
            )

        logger.info("local_walk_started", root=str(root))
        stack: list[Iterator[Path]] = [iter(self._list_dir(root))]
        while stack:
            path = next(stack[-1], None)
            if path is None:
                stack.pop()
                continue

            if path.name.startswith("."):
                continue

            relative_path = path.relative_to(root).as_posix()

            if path.is_symlink():
                logger.debug("local_entry_symlink_skipped", path=relative_path)
                continue

            if path.is_dir():
                yield SourceEntry(relative_path=relative_path, kind=EntryKind.DIRECTORY)
                stack.append(iter(self._list_dir(path)))
                continue

            if not path.is_file():
                logger.debug("local_entry_special_skipped", path=relative_path)
                continue

            try:
                content = path.read_bytes()
            except OSError as exc:
                logger.warning(
                    "local_entry_unreadable",
                    path=relative_path,
                    source=self.get_source_name(),
                    error=str(exc),
                )
                continue

            yield SourceEntry(relative_path=relative_path, kind=EntryKind.FILE, content=content)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _list_dir(self, directory: Path) -> list[Path]:
        try:
            return sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise SourceAccessError(
                message=f"Could not list directory {directory}: {exc}",
                source_name=self.get_source_name(),
            ) from exc
