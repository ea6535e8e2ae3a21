"""Convert normalized AST tokens to :class:`Block` trees.

Mapping (first matching token type wins):

- heading (levels 1-3 map to heading_1/2/3; level 4+ per heading_overflow)
- paragraph -> paragraph block; top-level images are hoisted to image blocks
- block_quote -> quote block (first paragraph is the rich text, the rest
  become children)
- list -> bulleted_list_item / numbered_list_item with nested children
- task_list_item -> to_do with checked state
- block_code -> code block with language
- thematic_break -> divider
- table, html_block, footnotes and unknown tokens -> unsupported policy
"""

from __future__ import annotations

import re
from collections.abc import Callable as _Callable

from notionmark.config import ConverterConfig
from notionmark.converter.rich_text import (
    build_rich_text,
    extract_text,
    inline_fallback_text,
    plain_text,
    split_spans,
)
from notionmark.errors import UnsupportedConstructError
from notionmark.models import (
    DEFAULT_CODE_LANGUAGE,
    PLAIN,
    Annotations,
    Block,
    BlockType,
    ConversionWarning,
    RichTextSpan,
)

# ---------------------------------------------------------------------------
# Code language mapping
# ---------------------------------------------------------------------------

_LANGUAGE_ALIASES: dict[str, str] = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "ts": "typescript",
    "sh": "shell",
    "zsh": "shell",
    "rb": "ruby",
    "rs": "rust",
    "yml": "yaml",
    "md": "markdown",
    "cs": "c#",
    "csharp": "c#",
    "cpp": "c++",
    "objc": "objective-c",
    "dockerfile": "docker",
    "make": "makefile",
    "tex": "latex",
    "htm": "html",
    "jsx": "javascript",
    "tsx": "typescript",
    "jsonc": "json",
    "golang": "go",
    "kt": "kotlin",
    "ps1": "powershell",
    "text": DEFAULT_CODE_LANGUAGE,
    "plaintext": DEFAULT_CODE_LANGUAGE,
    "txt": DEFAULT_CODE_LANGUAGE,
}


def normalize_language(info: str | None) -> str:
    """Map a code fence info string to a block language name.

    Only the first word counts.  Known aliases are resolved
    (``py`` -> ``python``); other names are kept lower-cased.
    An empty info string means ``"plain text"``.
    """
    if not info or not info.strip():
        return DEFAULT_CODE_LANGUAGE
    lang = info.strip().split()[0].lower()
    if lang in _LANGUAGE_ALIASES:
        return _LANGUAGE_ALIASES[lang]
    # "python3.11" style suffixes
    stripped = re.sub(r"[\d.]+$", "", lang)
    if stripped in _LANGUAGE_ALIASES:
        return _LANGUAGE_ALIASES[stripped]
    return lang


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_blocks(
    tokens: list[dict],
    config: ConverterConfig,
) -> tuple[list[Block], list[ConversionWarning]]:
    """Convert normalized AST tokens to blocks.

    Parameters
    ----------
    tokens:
        List of canonical AST tokens from :class:`ASTNormalizer`.
    config:
        Converter configuration.

    Returns
    -------
    tuple[list[Block], list[ConversionWarning]]
        (top-level blocks in document order, warnings)

    Raises
    ------
    UnsupportedConstructError
        When a token has no block equivalent and ``config.lenient`` is off.
    """
    ctx = _BuildContext(config)
    blocks = _process_tokens(tokens, ctx)
    return blocks, ctx.warnings


class _BuildContext:
    """Config plus the warning accumulator for one build pass."""

    __slots__ = ("config", "warnings")

    def __init__(self, config: ConverterConfig) -> None:
        self.config = config
        self.warnings: list[ConversionWarning] = []

    def add_warning(self, code: str, message: str, **context: object) -> None:
        self.warnings.append(ConversionWarning(
            code=code, message=message, context=dict(context),
        ))

    def rich_text(
        self, children: list[dict], annotations: Annotations = PLAIN,
    ) -> list[RichTextSpan]:
        spans = build_rich_text(
            children, self.config, annotations=annotations, warnings=self.warnings,
        )
        return split_spans(spans, self.config.max_text_length)


# ---------------------------------------------------------------------------
# Token dispatch
# ---------------------------------------------------------------------------

def _process_tokens(tokens: list[dict], ctx: _BuildContext) -> list[Block]:
    """Process a list of tokens and return the blocks produced, in order."""
    produced: list[Block] = []
    for token in tokens:
        produced.extend(_process_token(token, ctx))
    return produced


def _process_token(token: dict, ctx: _BuildContext) -> list[Block]:
    """Process a single token and return the block(s) produced."""
    handler = _BLOCK_HANDLERS.get(token.get("type", ""))
    if handler is not None:
        return handler(token, ctx)
    return _build_unsupported(token, ctx)


# ---------------------------------------------------------------------------
# Block builders
# ---------------------------------------------------------------------------

def _build_heading(token: dict, ctx: _BuildContext) -> list[Block]:
    level = token.get("attrs", {}).get("level", 1)
    children = token.get("children", [])

    if level <= 3:
        return [Block(BlockType.heading(level), rich_text=ctx.rich_text(children))]

    if ctx.config.heading_overflow == "downgrade":
        ctx.add_warning(
            "HEADING_CLAMPED",
            f"Heading level {level} rendered as heading_3.",
            level=level, position=token.get("position", ""),
        )
        return [Block(BlockType.HEADING_3, rich_text=ctx.rich_text(children))]

    # heading_overflow == "paragraph": a bold paragraph
    ctx.add_warning(
        "HEADING_AS_PARAGRAPH",
        f"Heading level {level} rendered as a bold paragraph.",
        level=level, position=token.get("position", ""),
    )
    return [Block(
        BlockType.PARAGRAPH,
        rich_text=ctx.rich_text(children, PLAIN.merge(bold=True)),
    )]


def _build_paragraph(token: dict, ctx: _BuildContext) -> list[Block]:
    """Build a paragraph, splitting out images that sit directly in it.

    ``text ![](a.png) more`` becomes paragraph, image, paragraph.
    Whitespace-only runs between images produce no paragraph.
    """
    blocks: list[Block] = []
    run: list[dict] = []

    def flush() -> None:
        rich_text = ctx.rich_text(run)
        if plain_text(rich_text).strip():
            blocks.append(Block(BlockType.PARAGRAPH, rich_text=rich_text))
        run.clear()

    for child in token.get("children", []):
        url = child.get("attrs", {}).get("url", "") if child.get("type") == "image" else ""
        if url:
            flush()
            blocks.append(Block(BlockType.IMAGE, url=url))
        else:
            run.append(child)
    flush()
    return blocks


def _split_item_content(
    children: list[dict], ctx: _BuildContext,
) -> tuple[list[RichTextSpan], list[Block]]:
    """Split container content into (rich text, nested blocks).

    The first paragraph supplies the rich text; every later token,
    including further paragraphs and nested lists, becomes a child block.
    """
    rich_text: list[RichTextSpan] = []
    rest = children
    if children and children[0].get("type") == "paragraph":
        rich_text = ctx.rich_text(children[0].get("children", []))
        rest = children[1:]
    return rich_text, _process_tokens(rest, ctx)


def _build_block_quote(token: dict, ctx: _BuildContext) -> list[Block]:
    rich_text, nested = _split_item_content(token.get("children", []), ctx)
    return [Block(BlockType.QUOTE, rich_text=rich_text, children=nested)]


def _build_list(token: dict, ctx: _BuildContext) -> list[Block]:
    """Build list item blocks from a list token.

    There is no list wrapper block: each item becomes a sibling block and
    nested lists hang off their item's ``children``.
    """
    ordered = token.get("attrs", {}).get("ordered", False)
    item_type = BlockType.NUMBERED_LIST_ITEM if ordered else BlockType.BULLETED_LIST_ITEM
    blocks: list[Block] = []

    for item in token.get("children", []):
        kind = item.get("type", "")
        rich_text, nested = _split_item_content(item.get("children", []), ctx)
        if kind == "task_list_item":
            checked = bool(item.get("attrs", {}).get("checked", False))
            blocks.append(Block(
                BlockType.TO_DO, rich_text=rich_text, children=nested, checked=checked,
            ))
        elif kind == "list_item":
            blocks.append(Block(item_type, rich_text=rich_text, children=nested))
        else:
            blocks.extend(_build_unsupported(item, ctx))

    return blocks


def _build_code_block(token: dict, ctx: _BuildContext) -> list[Block]:
    raw = token.get("raw", "")
    language = normalize_language(token.get("attrs", {}).get("info"))
    rich_text = split_spans([RichTextSpan(raw)], ctx.config.max_text_length) if raw else []
    return [Block(BlockType.CODE, rich_text=rich_text, language=language)]


def _build_divider(token: dict, ctx: _BuildContext) -> list[Block]:
    return [Block(BlockType.DIVIDER)]


# ---------------------------------------------------------------------------
# Unsupported constructs
# ---------------------------------------------------------------------------

def _build_unsupported(token: dict, ctx: _BuildContext) -> list[Block]:
    """Raise, or degrade *token* to a paragraph of its raw text."""
    token_type = token.get("type", "unknown") or "unknown"
    position = token.get("position", "")

    if not ctx.config.lenient:
        raise UnsupportedConstructError(
            message=f"Markdown construct '{token_type}' has no block equivalent "
                    f"(at {position})",
            context={"node_type": token_type, "position": position},
        )

    text = block_fallback_text(token)
    ctx.add_warning(
        "UNSUPPORTED_FALLBACK",
        f"Markdown construct '{token_type}' kept as a plain paragraph.",
        node_type=token_type, position=position,
    )
    if not text.strip():
        return []
    spans = split_spans([RichTextSpan(text)], ctx.config.max_text_length)
    return [Block(BlockType.PARAGRAPH, rich_text=spans)]


def block_fallback_text(token: dict) -> str:
    """Raw textual stand-in for a block token with no block equivalent."""
    token_type = token.get("type", "")
    if token_type == "table":
        return "\n".join(_table_rows(token))
    if token_type == "footnotes":
        return "\n".join(
            f"[^{item.get('attrs', {}).get('key', '')}]: "
            f"{extract_text(_inline_children(item))}"
            for item in token.get("children", [])
        )
    if "raw" in token:
        return token["raw"].rstrip("\n")
    return extract_text(_inline_children(token)) or inline_fallback_text(token)


def _table_rows(token: dict) -> list[str]:
    """Pipe-joined cell text per row, header first."""
    rows: list[str] = []
    for part in token.get("children", []):
        if part.get("type") == "table_head":
            cells = part.get("children", [])
            rows.append(" | ".join(extract_text(c.get("children", [])) for c in cells))
        else:
            for row in part.get("children", []):
                cells = row.get("children", [])
                rows.append(" | ".join(extract_text(c.get("children", [])) for c in cells))
    return rows


def _inline_children(token: dict) -> list[dict]:
    """Flatten the paragraphs of a container token into one inline list."""
    inline: list[dict] = []
    for child in token.get("children", []):
        if child.get("type") == "paragraph":
            if inline:
                inline.append({"type": "softbreak"})
            inline.extend(child.get("children", []))
        else:
            inline.append(child)
    return inline


# ---------------------------------------------------------------------------
# Block handler dispatch table
# ---------------------------------------------------------------------------

_BlockHandler = _Callable[[dict, _BuildContext], list[Block]]

_BLOCK_HANDLERS: dict[str, _BlockHandler] = {
    "heading": _build_heading,
    "paragraph": _build_paragraph,
    "block_quote": _build_block_quote,
    "list": _build_list,
    "block_code": _build_code_block,
    "thematic_break": _build_divider,
}
