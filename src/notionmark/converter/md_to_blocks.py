"""Full Markdown-to-blocks conversion pipeline.

:class:`MarkdownToBlocksConverter` orchestrates three stages:

1. **Parse**: mistune parses raw Markdown into an AST.
2. **Normalize**: :class:`ASTNormalizer` maps token types to canonical
   names and numbers every token with its document position.
3. **Build**: :func:`build_blocks` converts normalized tokens into
   :class:`Block` trees, collecting :class:`ConversionWarning` on the way.
"""

from __future__ import annotations

import json

from notionmark.config import ConverterConfig
from notionmark.converter.ast_normalizer import ASTNormalizer
from notionmark.converter.block_builder import build_blocks
from notionmark.models import ConversionResult
from notionmark.observability import get_logger, log_conversion_warnings

log = get_logger("notionmark.converter")


class MarkdownToBlocksConverter:
    """Convert Markdown text to a block tree.

    The converter holds only its config and a mistune parser, so one
    instance may serve any number of calls.

    Parameters
    ----------
    config:
        Converter configuration (lenient mode, heading overflow, span
        length limit).  Defaults to ``ConverterConfig()``.

    Examples
    --------
    >>> converter = MarkdownToBlocksConverter()
    >>> result = converter.convert("# Hello\\n\\nWorld")
    >>> [block.type.value for block in result.blocks]
    ['heading_1', 'paragraph']
    """

    def __init__(self, config: ConverterConfig | None = None) -> None:
        self._config = config or ConverterConfig()
        self._normalizer = ASTNormalizer()

    @property
    def config(self) -> ConverterConfig:
        return self._config

    def convert(self, markdown: str) -> ConversionResult:
        """Full pipeline: parse -> normalize -> build blocks.

        Raises
        ------
        ParseError
            If mistune cannot tokenize *markdown*.
        UnsupportedConstructError
            If a construct has no block equivalent and the config is strict.
        """
        tokens = self._normalizer.parse(markdown)

        if self._config.debug_dump_ast:
            log.debug(
                "normalized AST",
                extra={"extra_fields": {
                    "op": "markdown_to_blocks",
                    "ast": json.dumps(tokens, ensure_ascii=False),
                }},
            )

        blocks, warnings = build_blocks(tokens, self._config)
        log_conversion_warnings(log, warnings, op="markdown_to_blocks")

        log.debug(
            "markdown converted",
            extra={"extra_fields": {
                "op": "markdown_to_blocks",
                "chars": len(markdown),
                "blocks": len(blocks),
                "warnings": len(warnings),
            }},
        )
        return ConversionResult(blocks=blocks, warnings=warnings)
