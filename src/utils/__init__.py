"""Utility modules for fiki.

- **errors** -- exception hierarchy rooted at :class:`FikiError`; the
  ingestion taxonomy (source access, entry format, consistency) lives here.
- **logging** -- structlog setup with console output in development and
  JSON in production.
"""

from src.utils.errors import (
    ConfigurationError,
    ConsistencyError,
    EntryFormatError,
    FikiError,
    IngestionBusyError,
    IngestionError,
    IngestionStateError,
    PassAbandonedError,
    SourceAccessError,
)
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ConsistencyError",
    "EntryFormatError",
    "FikiError",
    "IngestionBusyError",
    "IngestionError",
    "IngestionStateError",
    "PassAbandonedError",
    "SourceAccessError",
    "configure_logging",
    "get_logger",
]
