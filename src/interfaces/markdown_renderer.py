"""Abstract base class for markdown renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IMarkdownRenderer(ABC):
    """Contract for markdown-to-HTML conversion.

    Implementations are pure: raw markdown bytes in, HTML out, no state
    carried between calls.
    """

    @abstractmethod
    def render(self, raw: bytes) -> str:
        """Render UTF-8 markdown *raw* into an HTML string."""

    @abstractmethod
    def get_renderer_name(self) -> str:
        """Return the renderer's name for logs and the health endpoint."""
