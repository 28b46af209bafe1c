"""Shared pytest fixtures for the fiki test suite."""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import pytest

from src.interfaces.entry_source import IEntrySource
from src.interfaces.markdown_renderer import IMarkdownRenderer
from src.models.site import EntryKind, SourceEntry
from src.providers.markdown.python_markdown_renderer import PythonMarkdownRenderer
from src.services.ingestion.coordinator import IngestionCoordinator
from src.services.ingestion.live_index import LiveIndex

# ---------------------------------------------------------------------------
# Sample wiki
# ---------------------------------------------------------------------------

# Relative path -> markdown text; directories are implied by the paths.
SAMPLE_WIKI: dict[str, str] = {
    "index.md": "# Home\n",
    "about.md": "# About\n",
    "linux/index.md": "# Linux\n",
    "linux/tools/vim.md": "# Vim\n",
    "linux/tools/tmux.md": "# Tmux\n",
    "go/concurrency.md": "# Concurrency\n",
    "go/notes.txt": "not a page",
    ".git/HEAD.md": "# hidden\n",
    ".hidden.md": "# hidden\n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write *files* (relative path -> text) below *root* and return *root*."""
    for relative_path, text in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def build_tarball(files: dict[str, str], wrapper: str = "umurgdk-wiki-0a1b2c3") -> bytes:
    """Return a gzip tarball laid out the way GitHub serves repositories.

    Every path sits under a single *wrapper* directory, and each directory
    member precedes its contents.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        seen_dirs: set[str] = set()

        def add_dir(path: str) -> None:
            if path in seen_dirs:
                return
            seen_dirs.add(path)
            info = tarfile.TarInfo(name=path)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            archive.addfile(info)

        add_dir(wrapper)
        for relative_path, text in files.items():
            parts = relative_path.split("/")
            for depth in range(1, len(parts)):
                add_dir(f"{wrapper}/{'/'.join(parts[:depth])}")
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name=f"{wrapper}/{relative_path}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


def file_entry(relative_path: str, text: str = "") -> SourceEntry:
    return SourceEntry(relative_path=relative_path, kind=EntryKind.FILE, content=text.encode("utf-8"))


def dir_entry(relative_path: str) -> SourceEntry:
    return SourceEntry(relative_path=relative_path, kind=EntryKind.DIRECTORY)


class StaticEntrySource(IEntrySource):
    """Entry source backed by a list; optional hook runs before each entry."""

    def __init__(
        self,
        entries: Iterable[SourceEntry],
        name: str = "static:test",
        before_entry: Callable[[SourceEntry], None] | None = None,
    ) -> None:
        self.entries = list(entries)
        self.before_entry = before_entry
        self.calls = 0
        self._name = name

    def iter_entries(self) -> Iterator[SourceEntry]:
        self.calls += 1
        for entry in self.entries:
            if self.before_entry is not None:
                self.before_entry(entry)
            yield entry

    def get_source_name(self) -> str:
        return self._name


class EchoRenderer(IMarkdownRenderer):
    """Renders the raw text wrapped in a <p>; keeps assertions readable."""

    def render(self, raw: bytes) -> str:
        return f"<p>{raw.decode('utf-8')}</p>"

    def get_renderer_name(self) -> str:
        return "echo"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def wiki_dir(tmp_path: Path) -> Path:
    """A local wiki checkout containing SAMPLE_WIKI."""
    return write_tree(tmp_path / "wiki", SAMPLE_WIKI)


@pytest.fixture
def sample_tarball() -> bytes:
    return build_tarball(SAMPLE_WIKI)


@pytest.fixture
def markdown_renderer() -> PythonMarkdownRenderer:
    return PythonMarkdownRenderer()


@pytest.fixture
def echo_renderer() -> EchoRenderer:
    return EchoRenderer()


@pytest.fixture
def live_index() -> LiveIndex:
    return LiveIndex()


@pytest.fixture
def make_coordinator(
    echo_renderer: EchoRenderer,
    live_index: LiveIndex,
) -> Callable[..., IngestionCoordinator]:
    """Factory building a coordinator over a StaticEntrySource."""

    def _make(entries: Iterable[SourceEntry], **source_kwargs) -> IngestionCoordinator:  # noqa: ANN003
        source = StaticEntrySource(entries, **source_kwargs)
        return IngestionCoordinator(source=source, renderer=echo_renderer, live_index=live_index)

    return _make
