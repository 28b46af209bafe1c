"""Unit tests for the tarball and local directory entry sources."""

from __future__ import annotations

import io
import os
import tarfile
from pathlib import Path

import httpx
import pytest
from conftest import build_tarball, write_tree

from src.config.loader import load_config
from src.config.settings import Settings
from src.models.site import EntryKind
from src.providers.source.factory import build_entry_source
from src.providers.source.local_directory_source import LocalDirectoryEntrySource
from src.providers.source.tarball_source import TarballEntrySource
from src.utils.errors import SourceAccessError

TARBALL_URL = "https://api.github.com/repos/umurgdk/wiki/tarball/master"


def _client_serving(body: bytes, status_code: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


# ======================================================================
# LocalDirectoryEntrySource
# ======================================================================


class TestLocalDirectoryEntrySource:
    def test_walk_is_lexical_preorder_and_skips_hidden(self, wiki_dir: Path) -> None:
        entries = list(LocalDirectoryEntrySource(wiki_dir).iter_entries())
        assert [e.relative_path for e in entries] == [
            "about.md",
            "go",
            "go/concurrency.md",
            "go/notes.txt",
            "index.md",
            "linux",
            "linux/index.md",
            "linux/tools",
            "linux/tools/tmux.md",
            "linux/tools/vim.md",
        ]

    def test_kinds_and_content(self, wiki_dir: Path) -> None:
        entries = {e.relative_path: e for e in LocalDirectoryEntrySource(wiki_dir).iter_entries()}
        assert entries["linux/tools"].kind is EntryKind.DIRECTORY
        assert entries["linux/tools"].content is None
        assert entries["linux/tools/vim.md"].kind is EntryKind.FILE
        assert entries["linux/tools/vim.md"].content == b"# Vim\n"

    def test_root_is_not_yielded(self, wiki_dir: Path) -> None:
        paths = [e.relative_path for e in LocalDirectoryEntrySource(wiki_dir).iter_entries()]
        assert "" not in paths
        assert "." not in paths

    def test_symlinks_skipped(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "wiki", {"real.md": "# Real\n"})
        os.symlink(root / "real.md", root / "alias.md")
        paths = [e.relative_path for e in LocalDirectoryEntrySource(root).iter_entries()]
        assert paths == ["real.md"]

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        source = LocalDirectoryEntrySource(tmp_path / "absent")
        with pytest.raises(SourceAccessError) as exc_info:
            list(source.iter_entries())
        assert exc_info.value.source_name == source.get_source_name()

    def test_file_as_root_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "file.md"
        path.write_text("# x\n", encoding="utf-8")
        with pytest.raises(SourceAccessError):
            list(LocalDirectoryEntrySource(path).iter_entries())

    def test_empty_directory_yields_nothing(self, tmp_path: Path) -> None:
        assert list(LocalDirectoryEntrySource(tmp_path).iter_entries()) == []

    def test_source_name(self, tmp_path: Path) -> None:
        assert LocalDirectoryEntrySource(tmp_path).get_source_name() == f"local:{tmp_path}"

    def test_walk_is_lazy(self, wiki_dir: Path) -> None:
        entries = LocalDirectoryEntrySource(wiki_dir).iter_entries()
        first = next(entries)
        assert first.relative_path == "about.md"
        entries.close()


# ======================================================================
# TarballEntrySource
# ======================================================================


class TestTarballEntrySource:
    def test_strips_wrapper_directory(self, sample_tarball: bytes) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(sample_tarball))
        paths = [e.relative_path for e in source.iter_entries()]
        assert paths[:3] == ["index.md", "about.md", "linux"]
        assert all(not p.startswith("umurgdk-wiki") for p in paths)

    def test_yields_archive_order_with_hidden_entries(self, sample_tarball: bytes) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(sample_tarball))
        paths = [e.relative_path for e in source.iter_entries()]
        # Hidden entries are left to the classifier.
        assert ".git/HEAD.md" in paths
        assert paths.index("linux") < paths.index("linux/tools") < paths.index("linux/tools/vim.md")

    def test_entry_kinds_and_content(self, sample_tarball: bytes) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(sample_tarball))
        entries = {e.relative_path: e for e in source.iter_entries()}
        assert entries["go"].kind is EntryKind.DIRECTORY
        assert entries["go/concurrency.md"].content == b"# Concurrency\n"

    def test_dot_slash_member_names(self) -> None:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            data = b"# Home\n"
            info = tarfile.TarInfo(name="./wiki-abc/index.md")
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(buffer.getvalue()))
        assert [e.relative_path for e in source.iter_entries()] == ["index.md"]

    def test_symlink_members_skipped(self) -> None:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
            link = tarfile.TarInfo(name="wiki-abc/alias.md")
            link.type = tarfile.SYMTYPE
            link.linkname = "index.md"
            archive.addfile(link)
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(buffer.getvalue()))
        assert list(source.iter_entries()) == []

    def test_non_200_raises(self) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(b"", status_code=404))
        with pytest.raises(SourceAccessError, match="HTTP 404"):
            list(source.iter_entries())

    def test_corrupt_gzip_raises(self) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(b"definitely not gzip"))
        with pytest.raises(SourceAccessError):
            list(source.iter_entries())

    def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        source = TarballEntrySource(TARBALL_URL, http_client=client)
        with pytest.raises(SourceAccessError):
            list(source.iter_entries())

    def test_timeout_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        source = TarballEntrySource(TARBALL_URL, http_client=client)
        with pytest.raises(SourceAccessError, match="Timeout"):
            list(source.iter_entries())

    def test_supplied_client_left_open(self, sample_tarball: bytes) -> None:
        client = _client_serving(sample_tarball)
        list(TarballEntrySource(TARBALL_URL, http_client=client).iter_entries())
        assert not client.is_closed

    def test_source_name(self) -> None:
        assert TarballEntrySource(TARBALL_URL).get_source_name() == f"tarball:{TARBALL_URL}"
        assert TarballEntrySource(TARBALL_URL, name="tarball:umurgdk/wiki").get_source_name() == (
            "tarball:umurgdk/wiki"
        )


class TestTruncatedTarball:
    """A body cut off mid-download fails the read instead of ending early."""

    @pytest.fixture
    def large_tarball(self) -> bytes:
        pages = {f"notes/page{i:02d}.md": f"# Page {i}\n" + "lorem ipsum\n" * (i + 1) for i in range(60)}
        return build_tarball(pages)

    @pytest.mark.parametrize("fraction", [0.5, 0.8, 0.95])
    def test_cut_body_raises(self, large_tarball: bytes, fraction: float) -> None:
        body = large_tarball[: int(len(large_tarball) * fraction)]
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(body))
        with pytest.raises(SourceAccessError, match="Could not decode archive"):
            list(source.iter_entries())

    def test_missing_gzip_trailer_raises(self, large_tarball: bytes) -> None:
        # Only the CRC/size trailer is gone; every tar member is intact.
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(large_tarball[:-8]))
        with pytest.raises(SourceAccessError):
            list(source.iter_entries())

    def test_complete_body_reads_every_page(self, large_tarball: bytes) -> None:
        source = TarballEntrySource(TARBALL_URL, http_client=_client_serving(large_tarball))
        files = [e for e in source.iter_entries() if e.kind is EntryKind.FILE]
        assert len(files) == 60


# ======================================================================
# build_entry_source
# ======================================================================


class TestBuildEntrySource:
    def test_local_dir_selects_directory_walk(self, tmp_path: Path) -> None:
        source = build_entry_source(
            {"local_dir": str(tmp_path), "tarball_url": TARBALL_URL, "fetch_timeout": 5.0}
        )
        assert isinstance(source, LocalDirectoryEntrySource)
        assert source.get_source_name() == f"local:{tmp_path}"

    def test_empty_local_dir_selects_tarball(self) -> None:
        source = build_entry_source(
            {
                "local_dir": "",
                "tarball_url": TARBALL_URL,
                "fetch_timeout": 5.0,
                "name": "tarball:umurgdk/wiki@master",
            }
        )
        assert isinstance(source, TarballEntrySource)
        assert source.get_source_name() == "tarball:umurgdk/wiki@master"

    def test_loaded_config_round_trip(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, wiki_local_dir=str(tmp_path))
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)
        assert isinstance(build_entry_source(config["source"]), LocalDirectoryEntrySource)
