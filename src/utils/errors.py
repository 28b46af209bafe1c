"""Custom exception hierarchy for fiki.

All application exceptions inherit from :class:`FikiError`, which carries
an optional ``source_name`` so error handlers can tell which content source
(e.g. "tarball:umurgdk/wiki", "local:/srv/wiki") was being ingested when the
failure happened.

The hierarchy follows the ingestion error taxonomy:

    FikiError  (base -- catch-all for any fiki error)
    +-- ConfigurationError       (startup / missing config)
    +-- IngestionError           (anything that stops or disturbs a pass)
        +-- SourceAccessError    (network, HTTP status, gzip/tar, directory read)
        +-- EntryFormatError     (one malformed entry -- skipped, pass continues)
        +-- ConsistencyError     (duplicate page key / hierarchy child)
        +-- IngestionBusyError   (a pass is already in flight)
        +-- IngestionStateError  (invalid phase transition)
        +-- PassAbandonedError   (abandon() requested mid-pass)

Only :class:`EntryFormatError` is recoverable inside a pass; every other
:class:`IngestionError` aborts the pass and leaves the live index untouched.
"""


class FikiError(Exception):
    """Base exception for all fiki errors.

    ``__str__`` prefixes the source name in brackets for log scanning,
    e.g. ``[local:/srv/wiki] Content root does not exist``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        source_name: str | None = None,
    ) -> None:
        self._message = message
        self._source_name = source_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def source_name(self) -> str | None:
        return self._source_name

    def __str__(self) -> str:
        if self._source_name:
            return f"[{self._source_name}] {self._message}"
        return self._message


class ConfigurationError(FikiError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------


class IngestionError(FikiError):
    """Base class for errors raised while running an ingestion pass."""

    def __init__(
        self,
        message: str = "Ingestion pass failed",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


class SourceAccessError(IngestionError):
    """Raised when the content source cannot be read.

    Covers network failures, non-200 responses, gzip/tar decoding errors,
    a missing local root and unreadable directories.  Aborts the pass.
    """

    def __init__(
        self,
        message: str = "Content source could not be read",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


class EntryFormatError(IngestionError):
    """Raised for a single malformed entry.

    The coordinator logs a warning and skips the entry; the pass goes on.
    """

    def __init__(
        self,
        message: str = "Malformed source entry",
        source_name: str | None = None,
        relative_path: str | None = None,
    ) -> None:
        self._relative_path = relative_path
        super().__init__(message=message, source_name=source_name)

    @property
    def relative_path(self) -> str | None:
        return self._relative_path


class ConsistencyError(IngestionError):
    """Raised when the source yields the same page or child twice in one pass."""

    def __init__(
        self,
        message: str = "Site index consistency violated",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


class IngestionBusyError(IngestionError):
    """Raised when a pass is requested while another one is still running."""

    def __init__(
        self,
        message: str = "An ingestion pass is already running",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


class IngestionStateError(IngestionError):
    """Raised on an invalid coordinator phase transition."""

    def __init__(
        self,
        message: str = "Invalid ingestion phase transition",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)


class PassAbandonedError(IngestionError):
    """Raised inside a pass after :meth:`IngestionCoordinator.abandon` was called."""

    def __init__(
        self,
        message: str = "Ingestion pass abandoned",
        source_name: str | None = None,
    ) -> None:
        super().__init__(message=message, source_name=source_name)
