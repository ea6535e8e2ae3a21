"""Block tree to Markdown renderer.

Converts a list of :class:`Block` objects into a Markdown string by direct
structural recursion.  Children are indented one ``config.indent`` unit
past their parent; under a list item the unit is widened to the item's
marker (``"10. "`` needs four columns) so the children stay nested.  Quotes
and callouts render their children inside the ``>`` prefix instead.

Usage::

    from notionmark.converter.blocks_to_md import BlocksToMarkdownRenderer

    md = BlocksToMarkdownRenderer().render_blocks(blocks)
"""

from __future__ import annotations

import re
from collections.abc import Callable as _Callable
from collections.abc import Sequence

from notionmark.config import ConverterConfig
from notionmark.converter.rich_text import plain_text
from notionmark.errors import MalformedBlockError, UnsupportedConstructError
from notionmark.models import DEFAULT_CODE_LANGUAGE, LIST_ITEM_TYPES, Block, BlockType
from notionmark.observability import get_logger

from .inline_renderer import markdown_escape, render_rich_text

log = get_logger("notionmark.converter")

_FENCE_RUN_RE = re.compile(r"`{3,}")

_CLOSING_HASHES_RE = re.compile(r"(^|[ \t])(#+[ \t]*)$")

# Content column of "- ", "- [ ] " and toggle items
_BULLET_WIDTH = 2


class BlocksToMarkdownRenderer:
    """Render block trees to Markdown.

    Rendering never mutates the blocks and keeps no state between calls.
    Unknown block types always raise :class:`UnsupportedConstructError`;
    there is no lenient mode in this direction.

    Parameters
    ----------
    config:
        Converter configuration; only ``indent`` is used here.
    """

    def __init__(self, config: ConverterConfig | None = None) -> None:
        self._config = config or ConverterConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_blocks(self, blocks: Sequence[Block], depth: int = 0) -> str:
        """Render a list of blocks to a Markdown string.

        Parameters
        ----------
        blocks:
            Sibling blocks in document order.
        depth:
            Nesting depth of *blocks*; each level indents by one unit.

        Raises
        ------
        UnsupportedConstructError
            If a block type has no Markdown rendering.
        MalformedBlockError
            If an element of *blocks* is not a :class:`Block`, or the tree
            is nested too deeply to render.
        """
        try:
            markdown = self._render_block_list(blocks, self._config.indent * depth, "")
        except RecursionError as exc:
            raise MalformedBlockError(
                message="Block tree is nested too deeply to render",
                context={"path": "", "field": "children", "reason": "too_deep"},
                cause=exc,
            ) from exc
        log.debug(
            "blocks rendered",
            extra={"extra_fields": {
                "op": "blocks_to_markdown",
                "blocks": len(blocks),
                "chars": len(markdown),
            }},
        )
        return markdown

    def render_block(self, block: Block, depth: int = 0) -> str:
        """Render a single block (and its children) to Markdown."""
        return self.render_blocks([block], depth)

    # ------------------------------------------------------------------
    # Internal: list iteration and nesting
    # ------------------------------------------------------------------

    def _render_block_list(self, blocks: Sequence[Block], prefix: str, path: str) -> str:
        """Render siblings, numbering runs of numbered list items.

        Every line is indented by *prefix*.  List items are separated by a
        single newline, everything else by a blank line.
        """
        parts: list[str] = []
        numbered_counter = 0
        previous: BlockType | None = None

        for index, block in enumerate(blocks):
            position = f"{path}.{index}" if path else str(index)
            if not isinstance(block, Block):
                raise MalformedBlockError(
                    message=f"Expected a Block at {position}, got {type(block).__name__}",
                    context={"path": position, "field": "", "reason": "not_a_block"},
                )

            if block.type is BlockType.NUMBERED_LIST_ITEM:
                numbered_counter += 1
                marker_width = len(f"{numbered_counter}. ")
                own = self._render_numbered_list_item(block, numbered_counter)
            else:
                numbered_counter = 0
                marker_width = _BULLET_WIDTH if block.type in LIST_ITEM_TYPES else 0
                own = self._dispatch(block, position)

            if parts:
                tight = previous in LIST_ITEM_TYPES and block.type in LIST_ITEM_TYPES
                parts.append("\n" if tight else "\n\n")
            parts.append(self._with_children(block, own, prefix, position, marker_width))
            previous = block.type

        return "".join(parts)

    def _with_children(
        self, block: Block, own: str, prefix: str, position: str, marker_width: int,
    ) -> str:
        """Indent *own* by *prefix* and append the rendered children."""
        result = _indent(own, prefix)
        if not block.children or block.type in _QUOTED_TYPES:
            return result
        child_prefix = prefix + self._child_indent(marker_width)
        child_md = self._render_block_list(block.children, child_prefix, position)
        tight = block.children[0].type in LIST_ITEM_TYPES
        return result + ("\n" if tight else "\n\n") + child_md

    def _child_indent(self, marker_width: int) -> str:
        """Indentation unit for the children of a block.

        A list item's children only nest when they start within three
        columns past the item's content column, so a unit narrower than the
        marker (``"10. "`` is four wide) or too wide is replaced by spaces
        matching the marker.
        """
        unit = self._config.indent
        if marker_width and not marker_width <= len(unit.expandtabs(4)) <= marker_width + 3:
            return " " * marker_width
        return unit

    def _dispatch(self, block: Block, position: str) -> str:
        """Route a block to the appropriate type-specific renderer."""
        renderer = _BLOCK_RENDERERS.get(block.type)
        if renderer is None:
            raise UnsupportedConstructError(
                message=f"Cannot render block type: {block.type.value}",
                context={"block_type": block.type.value, "position": position},
            )
        return renderer(self, block)

    # ------------------------------------------------------------------
    # Block type renderers
    # ------------------------------------------------------------------

    def _render_heading(self, block: Block) -> str:
        # A heading is one line; a trailing "#" run would read as a closing sequence
        spans = [span.with_text(span.text.replace("\n", " ")) for span in block.rich_text]
        text = _CLOSING_HASHES_RE.sub(r"\1\\\2", render_rich_text(spans))
        return f"{'#' * block.heading_level} {text}"

    def _render_paragraph(self, block: Block) -> str:
        return render_rich_text(block.rich_text)

    def _render_bulleted_list_item(self, block: Block) -> str:
        return f"- {render_rich_text(block.rich_text)}"

    def _render_numbered_list_item(self, block: Block, number: int) -> str:
        return f"{number}. {render_rich_text(block.rich_text)}"

    def _render_to_do(self, block: Block) -> str:
        checkbox = "[x]" if block.checked else "[ ]"
        return f"- {checkbox} {render_rich_text(block.rich_text)}"

    def _render_toggle(self, block: Block) -> str:
        return f"- {render_rich_text(block.rich_text)}"

    def _render_quote(self, block: Block) -> str:
        return self._quoted(render_rich_text(block.rich_text), block)

    def _render_callout(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        if block.icon:
            text = f"{block.icon} {text}" if text else block.icon
        return self._quoted(text, block)

    def _quoted(self, text: str, block: Block) -> str:
        """Prefix *text* and the block's children with ``> ``."""
        sections: list[str] = []
        if text:
            sections.append(text)
        if block.children:
            sections.append(self._render_block_list(block.children, "", ""))
        body = "\n\n".join(sections)
        return "\n".join(f"> {line}" if line else ">" for line in body.split("\n"))

    def _render_code(self, block: Block) -> str:
        language = block.language or ""
        if language == DEFAULT_CODE_LANGUAGE:
            language = ""
        code_text = plain_text(block.rich_text)
        longest = max((len(run) for run in _FENCE_RUN_RE.findall(code_text)), default=2)
        fence = "`" * (longest + 1)
        return f"{fence}{language}\n{code_text}\n{fence}"

    def _render_divider(self, block: Block) -> str:
        return "---"

    def _render_image(self, block: Block) -> str:
        return f"![]({markdown_escape(block.url or '', 'url')})"


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_QUOTED_TYPES: frozenset[BlockType] = frozenset({
    BlockType.QUOTE,
    BlockType.CALLOUT,
})

_BlockRenderer = _Callable[[BlocksToMarkdownRenderer, Block], str]

_BLOCK_RENDERERS: dict[BlockType, _BlockRenderer] = {
    BlockType.HEADING_1: BlocksToMarkdownRenderer._render_heading,
    BlockType.HEADING_2: BlocksToMarkdownRenderer._render_heading,
    BlockType.HEADING_3: BlocksToMarkdownRenderer._render_heading,
    BlockType.PARAGRAPH: BlocksToMarkdownRenderer._render_paragraph,
    BlockType.QUOTE: BlocksToMarkdownRenderer._render_quote,
    BlockType.CALLOUT: BlocksToMarkdownRenderer._render_callout,
    BlockType.BULLETED_LIST_ITEM: BlocksToMarkdownRenderer._render_bulleted_list_item,
    # numbered_list_item is numbered in _render_block_list
    BlockType.TO_DO: BlocksToMarkdownRenderer._render_to_do,
    BlockType.TOGGLE: BlocksToMarkdownRenderer._render_toggle,
    BlockType.CODE: BlocksToMarkdownRenderer._render_code,
    BlockType.DIVIDER: BlocksToMarkdownRenderer._render_divider,
    BlockType.IMAGE: BlocksToMarkdownRenderer._render_image,
}

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _indent(text: str, prefix: str) -> str:
    """Prefix every non-empty line of *text* with *prefix*."""
    if not prefix:
        return text
    return "\n".join(f"{prefix}{line}" if line else line for line in text.split("\n"))
