"""Markdown <-> block-tree conversion pipeline.

Public API:

- :class:`MarkdownToBlocksConverter`: Markdown -> blocks.
- :class:`BlocksToMarkdownRenderer`: blocks -> Markdown.
- :class:`ASTNormalizer`: parse and normalize Markdown to canonical AST.
- :func:`build_blocks`: convert normalized AST to :class:`Block` trees.
- :func:`build_rich_text`: convert inline AST tokens to spans.
- :func:`render_rich_text`: render spans to inline Markdown.
- :func:`parse_blocks_json` / :func:`blocks_to_json`: JSON interchange.
"""

from notionmark.converter.ast_normalizer import ASTNormalizer
from notionmark.converter.block_builder import build_blocks
from notionmark.converter.block_json import (
    block_from_dict,
    blocks_from_dicts,
    blocks_to_dicts,
    blocks_to_json,
    parse_blocks_json,
)
from notionmark.converter.blocks_to_md import BlocksToMarkdownRenderer
from notionmark.converter.inline_renderer import markdown_escape, render_rich_text
from notionmark.converter.md_to_blocks import MarkdownToBlocksConverter
from notionmark.converter.rich_text import (
    build_rich_text,
    coalesce_spans,
    make_span,
    plain_text,
    split_spans,
)

__all__ = [
    "ASTNormalizer",
    "BlocksToMarkdownRenderer",
    "MarkdownToBlocksConverter",
    "block_from_dict",
    "blocks_from_dicts",
    "blocks_to_dicts",
    "blocks_to_json",
    "build_blocks",
    "build_rich_text",
    "coalesce_spans",
    "make_span",
    "markdown_escape",
    "parse_blocks_json",
    "plain_text",
    "render_rich_text",
    "split_spans",
]
