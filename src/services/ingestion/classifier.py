"""Entry classification rules for the site index.

Decides, for one :class:`~src.models.site.SourceEntry` at a time, which
indexes it feeds.  Kept free of index state so the same policy serves both
entry sources and can be tested on its own.

Rules, applied in order:

1. Malformed paths raise :class:`EntryFormatError`; any hidden segment
   (``.git``, ``.github/…``) means IGNORE.
2. Directories: root-level ones are topics, nested ones are listed under
   their parent directory.
3. Files without the ``.md`` extension are ignored.
4. ``index.md`` is its directory's own page: registered as a page only, so a
   directory never lists its index page as a child of itself.
5. Every other markdown file is a page, a listed child of its directory and
   a leaf of the page tree.
"""

from __future__ import annotations

from src.models.ingestion import Classification, EntryAction
from src.models.site import INDEX_PAGE_NAME, MARKDOWN_EXTENSION, EntryKind, SourceEntry
from src.utils.errors import EntryFormatError


class EntryClassifier:
    """Stateless classifier shared by every ingestion pass."""

    def __init__(self, extension: str = MARKDOWN_EXTENSION) -> None:
        self._extension = extension

    def classify(self, entry: SourceEntry) -> Classification:
        """Return the :class:`Classification` for *entry*.

        Raises
        ------
        EntryFormatError
            The entry's path is empty, absolute, uses backslashes or
            contains ``.``/``..``/empty segments.
        """
        path = entry.relative_path
        segments = self._check_path(path)

        if any(segment.startswith(".") for segment in segments):
            return Classification(action=EntryAction.IGNORE, relative_path=path, reason="hidden")

        if entry.kind is EntryKind.DIRECTORY:
            if len(segments) == 1:
                return Classification(action=EntryAction.TOPIC, relative_path=path, name=path)
            return Classification(
                action=EntryAction.HIERARCHY_CHILD,
                relative_path=path,
                parent=entry.parent,
                name=entry.name,
            )

        if not path.endswith(self._extension):
            return Classification(
                action=EntryAction.IGNORE, relative_path=path, reason="not markdown"
            )

        key = path[: -len(self._extension)]
        name = entry.name[: -len(self._extension)]
        if name == INDEX_PAGE_NAME:
            return Classification(
                action=EntryAction.INDEX_PAGE,
                relative_path=path,
                key=key,
                parent=entry.parent,
                name=name,
            )

        return Classification(
            action=EntryAction.PAGE,
            relative_path=path,
            key=key,
            parent=entry.parent,
            name=name,
        )

    @staticmethod
    def _check_path(path: str) -> list[str]:
        if not path:
            raise EntryFormatError("Entry has an empty path", relative_path=path)
        if path.startswith("/") or "\\" in path:
            raise EntryFormatError(f"Entry path is not relative: {path!r}", relative_path=path)
        segments = path.split("/")
        if any(segment in ("", ".", "..") for segment in segments):
            raise EntryFormatError(f"Entry path has an invalid segment: {path!r}", relative_path=path)
        return segments
