"""Converter configuration for notionmark.

:class:`ConverterConfig` is a plain dataclass that captures every tuneable
knob of both conversion directions.  Instances are passed to
:class:`MarkdownToBlocksConverter` and :class:`BlocksToMarkdownRenderer`
and are never mutated by them, so one config can be shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DEFAULT_MAX_TEXT_LENGTH = 2000
"""Per-span character limit of the block platform's rich-text objects."""


@dataclass
class ConverterConfig:
    """Complete configuration for a notionmark conversion.

    Every parameter has a default, so ``ConverterConfig()`` is a valid
    strict configuration.

    Parameters
    ----------
    lenient:
        Markdown direction only.  When ``False`` (the default) a Markdown
        construct with no block equivalent (table, raw HTML, footnote)
        raises :class:`UnsupportedConstructError`.  When ``True`` it
        degrades to a plain paragraph holding the construct's raw text
        and a :class:`ConversionWarning` is recorded instead.
    heading_overflow:
        How to handle Markdown headings of level 4 and above (the block
        schema only has three heading levels).

        * ``"downgrade"``: clamp to ``heading_3``.
        * ``"paragraph"``: render as a bold paragraph.
    indent:
        Indentation unit written once per nesting level when serializing
        children.  Must be non-empty whitespace.
    max_text_length:
        Rich-text spans longer than this are split into several spans with
        the same annotations when building blocks.
    debug_dump_ast:
        Log the normalised mistune AST at ``DEBUG`` on each conversion.
    """

    lenient: bool = False

    heading_overflow: Literal["downgrade", "paragraph"] = "downgrade"

    indent: str = "  "

    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH

    debug_dump_ast: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.heading_overflow not in ("downgrade", "paragraph"):
            raise ValueError(
                f"heading_overflow must be 'downgrade' or 'paragraph', "
                f"got {self.heading_overflow!r}"
            )
        if not self.indent or self.indent.strip():
            raise ValueError(f"indent must be non-empty whitespace, got {self.indent!r}")
        if self.max_text_length < 1:
            raise ValueError(f"max_text_length must be >= 1, got {self.max_text_length}")
