"""Document rendering for introspected schemas."""

from .generator import (
    MarkdownGenerator,
    render_markdown,
    escape_cell,
    unescape_cell,
    NO_COLUMNS_MARKER,
    NO_TABLES_MARKER,
)

__all__ = [
    "MarkdownGenerator",
    "render_markdown",
    "escape_cell",
    "unescape_cell",
    "NO_COLUMNS_MARKER",
    "NO_TABLES_MARKER",
]
