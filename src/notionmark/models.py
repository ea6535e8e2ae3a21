"""Public data models for notionmark.

This module holds the block-tree data model shared by both conversion
directions:

* :class:`BlockType`: the closed set of block variants.
* :class:`Annotations` and :class:`RichTextSpan`: inline text runs.
* :class:`Block`: one node of the document tree, owning its children.

plus the result types :class:`ConversionWarning` and
:class:`ConversionResult`.  All model types are frozen dataclasses, so a
tree is immutable once built and may be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum

from notionmark.errors import MalformedBlockError, UnsupportedConstructError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Every block variant the library can build or render."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    IMAGE = "image"
    TOGGLE = "toggle"
    CALLOUT = "callout"

    @classmethod
    def heading(cls, level: int) -> BlockType:
        """Return the heading variant for *level*, clamped to 1..3."""
        return cls(f"heading_{min(max(level, 1), 3)}")


LEAF_TYPES: frozenset[BlockType] = frozenset({
    BlockType.DIVIDER,
    BlockType.IMAGE,
})
"""Variants that never carry rich text or children."""

HEADING_TYPES: frozenset[BlockType] = frozenset({
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
})

LIST_ITEM_TYPES: frozenset[BlockType] = frozenset({
    BlockType.BULLETED_LIST_ITEM,
    BlockType.NUMBERED_LIST_ITEM,
    BlockType.TO_DO,
    BlockType.TOGGLE,
})
"""Variants rendered as Markdown list items (tight siblings)."""

DEFAULT_CODE_LANGUAGE = "plain text"


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Annotations:
    """Independent inline style flags.  Any subset may be active."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    underline: bool = False

    def active(self) -> tuple[str, ...]:
        """Names of the flags that are set, in declaration order."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name))

    def merge(self, **overrides: bool) -> Annotations:
        """Return a copy with *overrides* OR-merged into the flags.

        Raises :class:`ValueError` for a name that is not an annotation.
        """
        unknown = sorted(set(overrides) - {f.name for f in fields(self)})
        if unknown:
            raise ValueError(f"unknown annotation(s): {', '.join(unknown)}")
        merged = {name: getattr(self, name) or value for name, value in overrides.items()}
        return replace(self, **merged)

    def __bool__(self) -> bool:
        return bool(self.active())


PLAIN = Annotations()


@dataclass(frozen=True)
class RichTextSpan:
    """An inline run of text with uniform formatting.

    Attributes
    ----------
    text:
        Literal content.  Never nested further.
    annotations:
        Style flags applying to the whole run.
    link:
        Optional URL the whole run points to.
    """

    text: str
    annotations: Annotations = PLAIN
    link: str | None = None

    def same_style(self, other: RichTextSpan) -> bool:
        """True when *other* could be merged into this span."""
        return self.annotations == other.annotations and self.link == other.link

    def with_text(self, text: str) -> RichTextSpan:
        return replace(self, text=text)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Block:
    """A single node of the block tree.

    ``type`` decides which optional fields are meaningful:

    ==========  =====================================================
    field       allowed on
    ==========  =====================================================
    rich_text   every variant except ``divider`` and ``image``
    children    every variant except ``divider``, ``image``, ``code``
    checked     ``to_do`` only (required there)
    language    ``code`` only (defaults to ``"plain text"``)
    url         ``image`` only (required there)
    icon        ``callout`` only (optional)
    ==========  =====================================================

    Construction validates these rules and raises
    :class:`MalformedBlockError` when a field is missing or irrelevant.
    Lists passed for ``rich_text`` or ``children`` are frozen to tuples;
    any other container (or ``None``) is malformed.
    """

    type: BlockType
    rich_text: tuple[RichTextSpan, ...] = ()
    children: tuple[Block, ...] = ()
    checked: bool | None = None
    language: str | None = None
    url: str | None = None
    icon: str | None = None

    def __post_init__(self) -> None:
        try:
            block_type = BlockType(self.type)
        except ValueError:
            raise UnsupportedConstructError(
                message=f"Unknown block type: {self.type!r}",
                context={"block_type": str(self.type)},
            ) from None
        object.__setattr__(self, "type", block_type)
        for name in ("rich_text", "children"):
            value = getattr(self, name)
            if not isinstance(value, (list, tuple)):
                self._malformed(name, f"expected a list, got {type(value).__name__}")
        object.__setattr__(self, "rich_text", tuple(self.rich_text))
        object.__setattr__(self, "children", tuple(self.children))

        if block_type is BlockType.CODE and self.language is None:
            object.__setattr__(self, "language", DEFAULT_CODE_LANGUAGE)

        self._validate()

    def _validate(self) -> None:
        block_type = self.type
        for span in self.rich_text:
            if not isinstance(span, RichTextSpan):
                self._malformed("rich_text", f"expected RichTextSpan, got {type(span).__name__}")
        for child in self.children:
            if not isinstance(child, Block):
                self._malformed("children", f"expected Block, got {type(child).__name__}")

        if block_type in LEAF_TYPES and self.rich_text:
            self._malformed("rich_text", "leaf blocks carry no rich text")
        if (block_type in LEAF_TYPES or block_type is BlockType.CODE) and self.children:
            self._malformed("children", f"{block_type.value} blocks cannot have children")

        if block_type is BlockType.TO_DO:
            if not isinstance(self.checked, bool):
                self._malformed("checked", "to_do blocks require a boolean 'checked'")
        elif self.checked is not None:
            self._malformed("checked", "only to_do blocks carry 'checked'")

        if block_type is BlockType.CODE:
            if not isinstance(self.language, str):
                self._malformed("language", "code language must be a string")
        elif self.language is not None:
            self._malformed("language", "only code blocks carry 'language'")

        if block_type is BlockType.IMAGE:
            if not isinstance(self.url, str) or not self.url:
                self._malformed("url", "image blocks require a non-empty 'url'")
        elif self.url is not None:
            self._malformed("url", "only image blocks carry 'url'")

        if block_type is BlockType.CALLOUT:
            if self.icon is not None and not isinstance(self.icon, str):
                self._malformed("icon", "callout icon must be a string")
        elif self.icon is not None:
            self._malformed("icon", "only callout blocks carry 'icon'")

    def _malformed(self, field_name: str, reason: str) -> None:
        raise MalformedBlockError(
            message=f"Malformed {self.type.value} block: {reason}",
            context={"block_type": self.type.value, "field": field_name, "reason": reason},
        )

    @property
    def heading_level(self) -> int | None:
        """1..3 for heading variants, ``None`` otherwise."""
        if self.type in HEADING_TYPES:
            return int(self.type.value[-1])
        return None


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal degradation recorded during conversion.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"HEADING_CLAMPED"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Output of a Markdown-to-blocks conversion.

    Attributes
    ----------
    blocks:
        Top-level blocks in document order.
    warnings:
        Non-fatal issues such as lenient fallbacks or clamped headings.
    """

    blocks: list[Block] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
