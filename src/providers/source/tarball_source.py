"""Tarball entry source using httpx and tarfile.

Downloads a gzip-compressed tarball (GitHub's ``/tarball/<ref>`` endpoint by
default) and streams it through ``gzip.GzipFile`` into a ``tarfile`` stream
reader, so the archive is never buffered whole.  A body that ends before the
gzip end-of-stream marker fails the whole read; ``tarfile``'s own ``r|gz``
mode would stop quietly at the cut instead.  GitHub wraps every archive in a single
``<owner>-<repo>-<sha>/`` directory; that first path segment is stripped
from every member.
"""

from __future__ import annotations

import gzip
import io
import tarfile
import time
import zlib
from collections.abc import Iterator

import httpx
import structlog

from src.interfaces.entry_source import IEntrySource
from src.models.site import EntryKind, SourceEntry
from src.utils.errors import SourceAccessError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_HEADERS = {
    "User-Agent": "fiki/0.1 (+https://github.com/umurgdk/fiki)",
    "Accept": "application/x-gzip, application/gzip, */*",
}


class _ResponseStream(io.RawIOBase):
    """Read-only file object over an iterator of byte chunks.

    ``GzipFile`` only needs ``read()``; ``RawIOBase`` provides it on top
    of :meth:`readinto`.
    """

    def __init__(self, chunks: Iterator[bytes], deadline: float | None = None) -> None:
        super().__init__()
        self._chunks = chunks
        self._pending = b""
        self._deadline = deadline

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # noqa: ANN001 — any writable buffer
        while not self._pending:
            if self._deadline is not None and time.monotonic() > self._deadline:
                raise TimeoutError("archive download exceeded its deadline")
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0

        view = memoryview(buffer).cast("B")
        size = min(len(view), len(self._pending))
        view[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


class TarballEntrySource(IEntrySource):
    """Entry source backed by a remote ``.tar.gz`` archive.

    Parameters
    ----------
    url:
        Archive URL.  Redirects are followed (GitHub answers with a 302 to
        codeload).
    timeout:
        Seconds allowed for the whole download; also used as the httpx
        per-operation timeout.
    http_client:
        Optional pre-configured client (tests inject one with a mock
        transport).  A private client is created per pass otherwise.
    name:
        Display name for logs; defaults to ``tarball:<url>``.
    """

    def __init__(
        self,
        url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
        name: str | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = http_client
        self._name = name or f"tarball:{url}"

    # ------------------------------------------------------------------
    # IEntrySource implementation
    # ------------------------------------------------------------------

    def get_source_name(self) -> str:
        return self._name

    def iter_entries(self) -> Iterator[SourceEntry]:
        """Fetch the archive and yield its files and directories."""
        owns_client = self._client is None
        client = self._client or httpx.Client(
            timeout=httpx.Timeout(self._timeout),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )
        deadline = time.monotonic() + self._timeout

        logger.info("tarball_fetch_started", url=self._url, timeout=self._timeout)
        try:
            with client.stream("GET", self._url) as response:
                if response.status_code != 200:
                    raise SourceAccessError(
                        message=f"HTTP {response.status_code} fetching {self._url}",
                        source_name=self._name,
                    )
                yield from self._read_archive(response, deadline)
        except httpx.TimeoutException as exc:
            raise SourceAccessError(
                message=f"Timeout fetching {self._url}: {exc}",
                source_name=self._name,
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceAccessError(
                message=f"HTTP error fetching {self._url}: {exc}",
                source_name=self._name,
            ) from exc
        finally:
            if owns_client:
                client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_archive(self, response: httpx.Response, deadline: float) -> Iterator[SourceEntry]:
        stream = _ResponseStream(response.iter_bytes(), deadline=deadline)
        try:
            with gzip.GzipFile(fileobj=stream, mode="rb") as decompressed:
                with tarfile.open(fileobj=decompressed, mode="r|") as archive:
                    for member in archive:
                        entry = self._to_entry(archive, member)
                        if entry is not None:
                            yield entry
                # tarfile stops at the end-of-archive blocks; reading the
                # padding and trailer makes gzip verify the end-of-stream
                # marker and CRC.
                while decompressed.read(io.DEFAULT_BUFFER_SIZE):
                    pass
        except TimeoutError as exc:
            raise SourceAccessError(
                message=f"Timed out after {self._timeout}s reading {self._url}",
                source_name=self._name,
            ) from exc
        except (tarfile.TarError, zlib.error, EOFError, OSError) as exc:
            raise SourceAccessError(
                message=f"Could not decode archive from {self._url}: {exc}",
                source_name=self._name,
            ) from exc

    def _to_entry(self, archive: tarfile.TarFile, member: tarfile.TarInfo) -> SourceEntry | None:
        name = member.name[2:] if member.name.startswith("./") else member.name
        _, sep, remainder = name.partition("/")
        if not sep:
            # The archive's own wrapper directory.
            logger.debug("archive_root_skipped", member=member.name)
            return None

        relative_path = remainder.strip("/")
        if not relative_path:
            logger.warning("archive_entry_empty_path", member=member.name, source=self._name)
            return None

        if member.isdir():
            return SourceEntry(relative_path=relative_path, kind=EntryKind.DIRECTORY)

        if not member.isreg():
            logger.debug("archive_member_unsupported", member=member.name, type=member.type)
            return None

        # Read errors here mean the stream itself is damaged; they propagate
        # to _read_archive and fail the pass.
        fileobj = archive.extractfile(member)
        if fileobj is None:
            logger.warning("archive_entry_unreadable", member=member.name, source=self._name)
            return None
        content = fileobj.read()

        return SourceEntry(relative_path=relative_path, kind=EntryKind.FILE, content=content)
