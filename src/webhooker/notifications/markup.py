"""Markdown to HTML rendering for webhook payloads."""

from __future__ import annotations

import markdown

# Roughly the common extension set most Markdown renderers enable by default.
_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def render(text: str) -> str:
    """Render Markdown *text* to an HTML fragment."""
    return markdown.markdown(text, extensions=_EXTENSIONS)
