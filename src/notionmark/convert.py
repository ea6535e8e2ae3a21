"""One-call entry points for both conversion directions.

These functions are what an orchestration layer (a workflow node, a sync
job) calls: one input value in, one output value out, or an exception from
:mod:`notionmark.errors`.  They are pure and keep no state between calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from notionmark.config import ConverterConfig
from notionmark.converter.block_json import block_from_dict, parse_blocks_json
from notionmark.converter.blocks_to_md import BlocksToMarkdownRenderer
from notionmark.converter.md_to_blocks import MarkdownToBlocksConverter
from notionmark.errors import MalformedBlockError
from notionmark.models import Block


def markdown_to_blocks(markdown: str, config: ConverterConfig | None = None) -> list[Block]:
    """Convert Markdown text to top-level blocks in document order.

    Raises
    ------
    ParseError
        If the Markdown parser cannot tokenize *markdown*.
    UnsupportedConstructError
        If a construct has no block equivalent and ``config.lenient`` is off.
    """
    return MarkdownToBlocksConverter(config).convert(markdown).blocks


def blocks_to_markdown(
    blocks: str | Sequence[Block | dict[str, Any]],
    config: ConverterConfig | None = None,
) -> str:
    """Convert blocks to Markdown.

    *blocks* may be a JSON document (see :mod:`notionmark.converter.block_json`),
    a list of decoded JSON objects, or a list of :class:`Block`.

    Raises
    ------
    BlockJSONSyntaxError
        If a JSON document is not valid JSON.
    MalformedBlockError
        If a block is missing a required field or has the wrong shape.
    UnsupportedConstructError
        If a block type has no Markdown rendering.
    """
    if isinstance(blocks, str):
        tree = parse_blocks_json(blocks)
    elif isinstance(blocks, Sequence):
        tree = [
            item if isinstance(item, Block) else block_from_dict(item, str(index))
            for index, item in enumerate(blocks)
        ]
    else:
        raise MalformedBlockError(
            message=f"Expected blocks or block JSON, got {type(blocks).__name__}",
            context={"path": "", "field": "", "reason": "not_a_block_list"},
        )
    return BlocksToMarkdownRenderer(config).render_blocks(tree)
