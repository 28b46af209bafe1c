"""Entry source providers.

TarballEntrySource streams a remote ``.tar.gz`` (the wiki repository's
GitHub tarball); LocalDirectoryEntrySource walks a checkout on disk.  Both
implement IEntrySource, so the ingestion coordinator treats them alike.
build_entry_source() picks one from the loaded configuration.
"""

from src.providers.source.factory import build_entry_source
from src.providers.source.local_directory_source import LocalDirectoryEntrySource
from src.providers.source.tarball_source import TarballEntrySource

__all__ = ["LocalDirectoryEntrySource", "TarballEntrySource", "build_entry_source"]
