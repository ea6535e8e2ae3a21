"""Inline rendering: rich-text spans to Markdown strings.

Annotation markers are applied innermost first::

    code -> bold -> italic -> strikethrough -> underline -> link

Markdown has no underline syntax, so underline is written as
``<u>...</u>``; the Markdown direction reads that pair back.

Newlines in plain text are hard line breaks and are written as a
backslash followed by a newline.  Any rendered line that would otherwise
open a block construct (``# x``, ``- x``, ``1. x``, ``> x``, ``---``) gets
its first marker character escaped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from notionmark.converter.rich_text import coalesce_spans
from notionmark.models import RichTextSpan

# Characters that must be escaped in plain inline text.
ESCAPE_CHARS = "\\`*_[]"

_ESCAPE_RE = re.compile(r"([\\`*_\[\]])")

_BACKTICK_RUN_RE = re.compile(r"`+")

# Block openers at the start of a line: ATX heading, quote, bullet,
# thematic break / setext underline / table delimiter row, code fence,
# HTML block.  Group 1 is the indentation, group 2 the character to escape.
_LINE_START_RE = re.compile(
    r"^([ \t]*)("
    r"#(?=#*(?:[ \t]|$))"
    r"|>"
    r"|[-+](?=[ \t]|$)"
    r"|[-|:=](?=[-|:= \t]*$)"
    r"|~(?=~~)"
    r"|<(?=[A-Za-z/!?])"
    r")"
)

# Ordered list marker: escape the delimiter rather than the digits.
_ORDERED_START_RE = re.compile(r"^([ \t]*\d{1,9})([.)])(?=[ \t]|$)")

_HARD_BREAK = "\\\n"


def markdown_escape(text: str, context: str = "inline") -> str:
    """Escape special Markdown characters.

    Parameters
    ----------
    text:
        The raw text to escape.
    context:
        One of ``"inline"``, ``"code"``, or ``"url"``.

        * ``"inline"`` -- backslash-escape ``\\ ` * _ [ ]``.
        * ``"code"`` -- no escaping (content is inside a code span/block).
        * ``"url"`` -- percent-encode parentheses and spaces so links parse.
    """
    if context == "code":
        return text
    if context == "url":
        return text.replace("(", "%28").replace(")", "%29").replace(" ", "%20")
    return _ESCAPE_RE.sub(r"\\\1", text)


def escape_line_start(line: str) -> str:
    """Escape a leading block marker so *line* stays paragraph text.

    >>> escape_line_start("1. not a list")
    '1\\\\. not a list'
    """
    escaped = _LINE_START_RE.sub(r"\1\\\2", line, count=1)
    if escaped != line:
        return escaped
    return _ORDERED_START_RE.sub(r"\1\\\2", line, count=1)


def code_span(text: str) -> str:
    """Wrap *text* in a code span whose delimiter cannot clash with it.

    The delimiter is one backtick longer than the longest backtick run in
    *text*; content touching a backtick is padded with a space.  Code spans
    cannot hold line breaks, so newlines become spaces.
    """
    text = text.replace("\n", " ")
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(text)), default=0)
    fence = "`" * (longest + 1)
    if text.startswith("`") or text.endswith("`"):
        text = f" {text} "
    return f"{fence}{text}{fence}"


def _plain(text: str, at_line_start: bool) -> str:
    """Escape plain text, guard each line start and write hard breaks."""
    lines = markdown_escape(text).split("\n")
    for index, line in enumerate(lines):
        if index or at_line_start:
            lines[index] = escape_line_start(line)
    return _HARD_BREAK.join(lines)


def render_span(span: RichTextSpan, at_line_start: bool = True) -> str:
    """Render one span with its annotation markers and link.

    *at_line_start* tells whether the span's first character begins a
    Markdown line, where a leading block marker must be escaped.
    """
    annotations = span.annotations
    text = span.text
    wrapped = bool(annotations) or bool(span.link)

    if annotations.code:
        lead, core, trail = "", code_span(text), ""
    else:
        # Emphasis markers must hug non-space text to parse, so leading and
        # trailing whitespace stays outside them.
        stripped = text.strip(" \t\n")
        if not stripped:
            return _plain(text, at_line_start)
        start = text.index(stripped)
        raw_lead, raw_trail = text[:start], text[start + len(stripped):]
        core_at_start = not wrapped and (at_line_start or "\n" in raw_lead)
        lead = _plain(raw_lead, at_line_start)
        core = _plain(stripped, core_at_start)
        trail = _plain(raw_trail, False)

    if annotations.bold:
        core = f"**{core}**"
    if annotations.italic:
        core = f"*{core}*"
    if annotations.strikethrough:
        core = f"~~{core}~~"
    if annotations.underline:
        core = f"<u>{core}</u>"

    if span.link:
        core = f"[{core}]({markdown_escape(span.link, 'url')})"

    return f"{lead}{core}{trail}"


def render_rich_text(spans: Iterable[RichTextSpan]) -> str:
    """Render a span sequence to a Markdown string.

    Adjacent spans with the same style are merged first, so
    ``bold("a") + bold("b")`` renders as ``**ab**`` rather than
    ``**a****b**``.  A trailing line break would end the block with a
    literal backslash, so it is dropped.
    """
    parts: list[str] = []
    at_line_start = True
    for span in coalesce_spans(spans):
        rendered = render_span(span, at_line_start)
        parts.append(rendered)
        if rendered:
            at_line_start = rendered.endswith("\n")
    markdown = "".join(parts)
    while markdown.endswith(_HARD_BREAK):
        markdown = markdown[: -len(_HARD_BREAK)]
    return markdown
