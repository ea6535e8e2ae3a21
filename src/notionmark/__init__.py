"""notionmark: two-way Markdown / block-tree conversion.

Public re-exports
-----------------

* **Entry points:** :func:`markdown_to_blocks`, :func:`blocks_to_markdown`
* **Converters:** :class:`MarkdownToBlocksConverter`,
  :class:`BlocksToMarkdownRenderer`
* **JSON:** :func:`parse_blocks_json`, :func:`blocks_to_json`
* **Configuration:** :class:`ConverterConfig`
* **Errors:** every :class:`NotionmarkError` subclass and :class:`ErrorCode`
* **Models:** :class:`Block`, :class:`BlockType`, :class:`RichTextSpan`, ...

Usage::

    from notionmark import blocks_to_markdown, markdown_to_blocks

    blocks = markdown_to_blocks("# Title\\n\\nSome **bold** text.")
    markdown = blocks_to_markdown(blocks)
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from notionmark.config import ConverterConfig

# ── Entry points ────────────────────────────────────────────────────────
from notionmark.convert import blocks_to_markdown, markdown_to_blocks

# ── Converters ──────────────────────────────────────────────────────────
from notionmark.converter import (
    BlocksToMarkdownRenderer,
    MarkdownToBlocksConverter,
    blocks_to_dicts,
    blocks_to_json,
    coalesce_spans,
    make_span,
    parse_blocks_json,
)

# ── Errors ──────────────────────────────────────────────────────────────
from notionmark.errors import (
    BlockJSONSyntaxError,
    ErrorCode,
    MalformedBlockError,
    NotionmarkError,
    ParseError,
    UnsupportedConstructError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionmark.models import (
    Annotations,
    Block,
    BlockType,
    ConversionResult,
    ConversionWarning,
    RichTextSpan,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Entry points
    "markdown_to_blocks",
    "blocks_to_markdown",
    # Converters
    "MarkdownToBlocksConverter",
    "BlocksToMarkdownRenderer",
    # JSON
    "parse_blocks_json",
    "blocks_to_json",
    "blocks_to_dicts",
    # Rich text
    "make_span",
    "coalesce_spans",
    # Configuration
    "ConverterConfig",
    # Errors
    "NotionmarkError",
    "ErrorCode",
    "ParseError",
    "BlockJSONSyntaxError",
    "UnsupportedConstructError",
    "MalformedBlockError",
    # Models
    "Block",
    "BlockType",
    "RichTextSpan",
    "Annotations",
    "ConversionResult",
    "ConversionWarning",
]
