"""Markdown renderer providers."""

from src.providers.markdown.python_markdown_renderer import PythonMarkdownRenderer

__all__ = ["PythonMarkdownRenderer"]
