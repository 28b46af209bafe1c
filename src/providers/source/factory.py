"""Entry source selection shared by the server and the ingestion CLI.

Reads the ``source`` section produced by :func:`src.config.loader.load_config`:
a non-empty ``local_dir`` selects the local directory walk, anything else
downloads ``tarball_url``.
"""

from __future__ import annotations

from typing import Any

from src.interfaces.entry_source import IEntrySource
from src.providers.source.local_directory_source import LocalDirectoryEntrySource
from src.providers.source.tarball_source import TarballEntrySource


def build_entry_source(source_config: dict[str, Any]) -> IEntrySource:
    """Return the entry source described by the ``source`` config section."""
    local_dir = source_config.get("local_dir")
    if local_dir:
        return LocalDirectoryEntrySource(local_dir)
    return TarballEntrySource(
        url=source_config["tarball_url"],
        timeout=source_config["fetch_timeout"],
        name=source_config.get("name"),
    )
