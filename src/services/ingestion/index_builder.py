"""Per-pass builder for the page map, directory hierarchy, topics and page tree.

One :class:`SiteIndexBuilder` is created for every ingestion pass and thrown
away afterwards; nothing it holds outlives the pass except the frozen
:class:`~src.models.site.IndexSet` returned by :meth:`finalize`.  The
builder assumes a single writer (the coordinator's pass thread).

Uniqueness is enforced instead of assumed: both entry sources produce one
entry per path, so a repeated page key or a repeated listed child means the
source data is broken and the pass is aborted with a ConsistencyError.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.models.ingestion import Classification, EntryAction
from src.models.site import ROOT_DIRECTORY, EntryKind, IndexSet, TreeNode
from src.utils.errors import ConsistencyError, IngestionStateError


def _join(directory: str, name: str) -> str:
    return f"{directory}/{name}" if directory else name


@dataclass
class _NodeDraft:
    """Mutable tree node used while a pass is running.

    Converted to the frozen :class:`TreeNode` model in ``finalize()``.
    """

    name: str
    path: str
    is_page: bool = False
    children: dict[str, _NodeDraft] = field(default_factory=dict)

    def freeze(self) -> TreeNode:
        return TreeNode(
            name=self.name,
            path=self.path,
            is_page=self.is_page,
            children={name: child.freeze() for name, child in self.children.items()},
        )


class SiteIndexBuilder:
    """Accumulates one pass's indexes and freezes them into an IndexSet."""

    def __init__(self) -> None:
        self._pages: dict[str, str] = {}
        self._hierarchy: dict[str, list[str]] = {}
        # (parent, child, kind) triples already listed this pass.
        self._listed: set[tuple[str, str, EntryKind]] = set()
        self._topics: list[str] = []
        self._root = _NodeDraft(name="root", path=ROOT_DIRECTORY)
        self._finalized = False

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def add_page(self, key: str, html: str) -> None:
        """Register the rendered page *key*; a repeated key aborts the pass."""
        self._check_open()
        if key in self._pages:
            raise ConsistencyError(f"Duplicate page key in one pass: {key!r}")
        self._pages[key] = html

    def add_hierarchy_child(
        self,
        parent_dir: str,
        child_name: str,
        kind: EntryKind = EntryKind.FILE,
    ) -> None:
        """Append *child_name* to the listing of *parent_dir*.

        A page ``d/x.md`` and a directory ``d/x/`` both list ``x`` under
        ``d``; the name is shown once.  The same child of the same kind
        twice is a consistency violation.
        """
        self._check_open()
        marker = (parent_dir, child_name, kind)
        if marker in self._listed:
            raise ConsistencyError(
                f"Duplicate hierarchy child {child_name!r} under {parent_dir or '<root>'!r}"
            )
        self._listed.add(marker)

        children = self._hierarchy.setdefault(parent_dir, [])
        if child_name not in children:
            children.append(child_name)

    def add_tree_leaf(self, dir_path: str, name: str) -> None:
        """Add page *name* under *dir_path*, creating directory nodes as needed."""
        self._check_open()
        node = self._materialize(dir_path)
        leaf = node.children.get(name)
        if leaf is None:
            node.children[name] = _NodeDraft(name=name, path=_join(dir_path, name), is_page=True)
        elif leaf.is_page:
            raise ConsistencyError(f"Duplicate tree leaf: {_join(dir_path, name)!r}")
        else:
            # Directory node seen first: it is now also a page.
            leaf.is_page = True

    def register_topic(self, name: str) -> None:
        """Record a root-level directory; repeats are ignored."""
        self._check_open()
        if name not in self._topics:
            self._topics.append(name)

    def apply(self, classification: Classification, html: str | None = None) -> None:
        """Apply one classifier decision.

        *html* is required for ``PAGE`` and ``INDEX_PAGE`` decisions.
        """
        action = classification.action
        if action is EntryAction.IGNORE:
            return
        if action is EntryAction.TOPIC:
            self.register_topic(classification.name or classification.relative_path)
            return
        if action is EntryAction.HIERARCHY_CHILD:
            self.add_hierarchy_child(
                classification.parent or ROOT_DIRECTORY,
                classification.name or "",
                EntryKind.DIRECTORY,
            )
            return

        if html is None or classification.key is None:
            raise ConsistencyError(f"Page {classification.relative_path!r} applied without HTML")
        self.add_page(classification.key, html)
        if action is EntryAction.PAGE:
            parent = classification.parent or ROOT_DIRECTORY
            name = classification.name or ""
            self.add_hierarchy_child(parent, name, EntryKind.FILE)
            self.add_tree_leaf(parent, name)

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self, pass_id: str, source_name: str) -> IndexSet:
        """Freeze everything into an :class:`IndexSet`; the builder is closed afterwards."""
        self._check_open()
        self._finalized = True
        return IndexSet(
            pass_id=pass_id,
            source_name=source_name,
            pages=dict(self._pages),
            hierarchy={key: tuple(children) for key, children in self._hierarchy.items()},
            topic_names=tuple(self._topics),
            root=self._root.freeze(),
        )

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def topic_count(self) -> int:
        return len(self._topics)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._finalized:
            raise IngestionStateError("Site index builder is already finalized")

    def _materialize(self, dir_path: str) -> _NodeDraft:
        node = self._root
        walked = ROOT_DIRECTORY
        for segment in filter(None, dir_path.split("/")):
            walked = _join(walked, segment)
            child = node.children.get(segment)
            if child is None:
                child = _NodeDraft(name=segment, path=walked)
                node.children[segment] = child
            node = child
        return node
