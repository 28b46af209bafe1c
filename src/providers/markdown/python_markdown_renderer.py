"""Markdown renderer backed by Python-Markdown."""

from __future__ import annotations

import markdown
import structlog

from src.config.loader import DEFAULT_MARKDOWN_EXTENSIONS
from src.interfaces.markdown_renderer import IMarkdownRenderer
from src.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


class PythonMarkdownRenderer(IMarkdownRenderer):
    """Render markdown with ``markdown.markdown``.

    A new converter is used per call; ``markdown.Markdown`` instances keep
    per-document state and are not safe to share between threads.

    Parameters
    ----------
    extensions:
        Python-Markdown extension names.  Checked once at construction so a
        bad name fails at startup instead of on every page.
    """

    def __init__(self, extensions: list[str] | None = None) -> None:
        self._extensions = list(
            DEFAULT_MARKDOWN_EXTENSIONS if extensions is None else extensions
        )
        try:
            markdown.Markdown(extensions=self._extensions)
        except (ImportError, AttributeError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                message=f"Unknown markdown extension in {self._extensions}: {exc}",
            ) from exc

    # ------------------------------------------------------------------
    # IMarkdownRenderer implementation
    # ------------------------------------------------------------------

    def render(self, raw: bytes) -> str:
        text = raw.decode("utf-8", errors="replace")
        # Editors on Windows like to prepend a BOM.
        text = text.removeprefix("\ufeff")
        return markdown.markdown(text, extensions=self._extensions)

    def get_renderer_name(self) -> str:
        return "python-markdown"

    @property
    def extensions(self) -> list[str]:
        return list(self._extensions)
