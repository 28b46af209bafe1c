"""Site data models: source entries, pages, the page tree and the index set.

Defines Pydantic v2 models for everything that flows out of an ingestion
pass.  All models use frozen config: once an :class:`IndexSet` is published
the serving layer only reads it, and a new pass always builds a new one.

Architecture note:
    :class:`IndexSet` bundles the page map, the directory hierarchy, the topic
    list and the page tree so they are swapped together.  The builder that
    produces it (src/services/ingestion/index_builder.py) works on private
    mutable structures and converts them into these models in ``finalize()``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    model_validator,
)

# Name of the file that stands for its directory's own page.
INDEX_PAGE_NAME = "index"
MARKDOWN_EXTENSION = ".md"
# Directory key of the content root in the hierarchy map.
ROOT_DIRECTORY = ""


def _freeze_mappings(model: BaseModel, *fields: str) -> None:
    """Replace dict fields of a frozen model with read-only views."""
    for field in fields:
        object.__setattr__(model, field, MappingProxyType(getattr(model, field)))


class EntryKind(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Kind of a content entry produced by an entry source."""

    FILE = "FILE"
    DIRECTORY = "DIRECTORY"


# ---------------------------------------------------------------------------
# SourceEntry — one item of the flattened entry stream.
# ---------------------------------------------------------------------------
class SourceEntry(BaseModel):
    """A file or directory yielded by an entry source.

    ``relative_path`` is relative to the content root, uses forward slashes
    and carries no leading or trailing slash.  For archives the wrapper
    directory has already been stripped.
    """

    model_config = ConfigDict(frozen=True)

    relative_path: str
    kind: EntryKind
    # Raw bytes for files; always None for directories.
    content: bytes | None = None

    @model_validator(mode="after")
    def _check_content(self) -> SourceEntry:
        if self.kind is EntryKind.DIRECTORY and self.content is not None:
            raise ValueError("directory entries carry no content")
        if self.kind is EntryKind.FILE and self.content is None:
            raise ValueError("file entries need content")
        return self

    @property
    def name(self) -> str:
        """Base name of the entry."""
        return self.relative_path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> str:
        """Directory key of the containing directory (``""`` for the root)."""
        head, sep, _ = self.relative_path.rpartition("/")
        return head if sep else ROOT_DIRECTORY

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class PageRecord(BaseModel):
    """A rendered page addressed by its key (relative path without ``.md``)."""

    model_config = ConfigDict(frozen=True)

    key: str
    html: str


# ---------------------------------------------------------------------------
# TreeNode — navigation tree rooted at a synthetic "root" node.
# ---------------------------------------------------------------------------
class TreeNode(BaseModel):
    """A node in the page tree.

    Directory segments are non-page nodes; every non-index page is a node
    with ``is_page=True``.  A page and a directory sharing a name collapse
    into one page node that keeps its children.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    is_page: bool = False
    # Keyed by child name, in discovery order.
    children: dict[str, TreeNode] = Field(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        _freeze_mappings(self, "children")

    @field_serializer("children", mode="wrap")
    def _dump_children(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(dict(value))

    def find(self, path: str) -> TreeNode | None:
        """Return the descendant reached by walking *path* segment by segment."""
        node: TreeNode | None = self
        for segment in filter(None, path.split("/")):
            node = node.children.get(segment) if node is not None else None
        return node

    def walk(self) -> list[TreeNode]:
        """Return this node and all descendants in pre-order."""
        nodes: list[TreeNode] = []
        stack: list[TreeNode] = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(list(node.children.values())))
        return nodes


TreeNode.model_rebuild()


# ---------------------------------------------------------------------------
# IndexSet — the unit of publication.
# ---------------------------------------------------------------------------
class IndexSet(BaseModel):
    """The complete, immutable result of one successful ingestion pass.

    Readers obtain one reference from :class:`~src.services.ingestion.live_index.LiveIndex`
    and use it for the whole request, so a concurrent publish never shows
    them a mix of two passes.  ``pages``, ``hierarchy`` and every
    ``TreeNode.children`` are exposed as read-only mappings.
    """

    model_config = ConfigDict(frozen=True)

    pass_id: str
    source_name: str
    built_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    # Page key -> rendered HTML.
    pages: dict[str, str] = Field(default_factory=dict)
    # Directory key -> immediate child names in discovery order.
    hierarchy: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    # Root-level directory names in discovery order, no duplicates.
    topic_names: tuple[str, ...] = ()
    root: TreeNode = Field(default_factory=lambda: TreeNode(name="root", path=ROOT_DIRECTORY))

    def model_post_init(self, __context: Any) -> None:
        _freeze_mappings(self, "pages", "hierarchy")

    @field_serializer("pages", "hierarchy", mode="wrap")
    def _dump_mappings(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(dict(value))

    def lookup_page(self, key: str) -> str | None:
        """Return the rendered HTML for *key*, or ``None`` if unknown."""
        return self.pages.get(key)

    def children_of(self, directory: str) -> list[str]:
        """Return the listed children of *directory* (empty if it has none)."""
        return list(self.hierarchy.get(directory, ()))

    def has_directory(self, directory: str) -> bool:
        return directory in self.hierarchy

    def topics(self) -> frozenset[str]:
        return frozenset(self.topic_names)

    def tree(self) -> TreeNode:
        return self.root

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def records(self) -> list[PageRecord]:
        """Return every page as a :class:`PageRecord`, sorted by key."""
        return [PageRecord(key=key, html=self.pages[key]) for key in sorted(self.pages)]

    def same_content(self, other: IndexSet) -> bool:
        """Compare two index sets ignoring pass identity and build time."""
        return (
            self.pages == other.pages
            and self.hierarchy == other.hierarchy
            and self.topic_names == other.topic_names
            and self.root == other.root
        )
