"""Abstract interfaces for swappable ingestion collaborators.

- :class:`IEntrySource` -- produces the flat stream of content entries
  (tarball and local-directory implementations in ``src/providers/source``).
- :class:`IMarkdownRenderer` -- converts markdown bytes to HTML
  (Python-Markdown implementation in ``src/providers/markdown``).
"""

from src.interfaces.entry_source import IEntrySource
from src.interfaces.markdown_renderer import IMarkdownRenderer

__all__ = ["IEntrySource", "IMarkdownRenderer"]
