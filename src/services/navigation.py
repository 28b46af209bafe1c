"""Page resolution and breadcrumb trails over a published IndexSet.

Maps a request path onto what the wiki should show:

- ``/`` is the root ``index`` page.
- A path that is a page key shows that page.
- A path that is a directory shows a listing: the directory's ``index``
  page (if any) followed by its children.
- Anything else is not found.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.models.site import INDEX_PAGE_NAME, ROOT_DIRECTORY, IndexSet


class PageView(BaseModel):
    """Everything the page template needs for one request."""

    model_config = ConfigDict(frozen=True)

    path: str
    title: str
    html: str = ""
    # True when the path is a directory rendered as a child listing.
    is_listing: bool = False
    children: list[str] = Field(default_factory=list)
    breadcrumb: list[str] = Field(default_factory=list)


def normalize_path(raw_path: str) -> str:
    """Strip slashes; the empty path means the root index page."""
    path = raw_path.strip("/")
    return path or INDEX_PAGE_NAME


def breadcrumb_for(path: str) -> list[str]:
    """Return the ancestor directory paths of *path*, outermost first.

    ``"linux/tools/vim"`` gives ``["linux", "linux/tools"]``; top-level
    paths have no breadcrumb.
    """
    directory, sep, _ = path.strip("/").rpartition("/")
    if not sep:
        return []
    segments = directory.split("/")
    return ["/".join(segments[: i + 1]) for i in range(len(segments))]


def resolve_page(index_set: IndexSet, raw_path: str) -> PageView | None:
    """Resolve *raw_path* against *index_set*; ``None`` means not found."""
    path = normalize_path(raw_path)
    title = path.rsplit("/", 1)[-1]

    html = index_set.lookup_page(path)
    if html is not None:
        return PageView(path=path, title=title, html=html, breadcrumb=breadcrumb_for(path))

    directory = ROOT_DIRECTORY if path == INDEX_PAGE_NAME else path
    index_key = f"{directory}/{INDEX_PAGE_NAME}" if directory else INDEX_PAGE_NAME
    index_html = index_set.lookup_page(index_key)
    if index_html is None and not index_set.has_directory(directory):
        return None

    return PageView(
        path=path,
        title=title,
        html=index_html or "",
        is_listing=True,
        children=index_set.children_of(directory),
        breadcrumb=breadcrumb_for(path),
    )
