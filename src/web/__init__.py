"""Jinja2 templates and static theme assets for the wiki pages."""

from pathlib import Path

_WEB_DIR = Path(__file__).resolve().parent

TEMPLATES_DIR = _WEB_DIR / "templates"
THEME_DIR = _WEB_DIR / "theme"

__all__ = ["TEMPLATES_DIR", "THEME_DIR"]
