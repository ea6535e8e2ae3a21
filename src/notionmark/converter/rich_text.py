"""Rich-text spans: construction helpers and the inline AST builder.

The helpers (:func:`make_span`, :func:`coalesce_spans`, :func:`plain_text`,
:func:`split_spans`) are shared by both conversion directions.
:func:`build_rich_text` turns normalized inline tokens into spans:

* ``strong`` -> bold, ``emphasis`` -> italic, ``strikethrough`` ->
  strikethrough, ``codespan`` -> code, ``link`` -> ``link``.
* ``<u>`` ... ``</u>`` inline HTML pairs -> underline, so the serializer's
  underline fallback reads back.
* annotations compose by nesting depth: an inline code span inside
  emphasis yields one span with both ``italic`` and ``code`` set.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from notionmark.config import ConverterConfig
from notionmark.errors import UnsupportedConstructError
from notionmark.models import PLAIN, Annotations, ConversionWarning, RichTextSpan

_UNDERLINE_OPEN = "<u>"
_UNDERLINE_CLOSE = "</u>"


# ---------------------------------------------------------------------------
# Span helpers
# ---------------------------------------------------------------------------

def make_span(
    text: str,
    annotations: Annotations | Iterable[str] | None = None,
    link: str | None = None,
) -> RichTextSpan:
    """Create a :class:`RichTextSpan`.

    *annotations* may be an :class:`Annotations` instance or an iterable of
    flag names such as ``("bold", "code")``, or a single name.  An unknown
    flag name raises :class:`ValueError`.

    >>> make_span("hi", ["bold"]).annotations.bold
    True
    """
    if annotations is None:
        annots = PLAIN
    elif isinstance(annotations, Annotations):
        annots = annotations
    else:
        names = [annotations] if isinstance(annotations, str) else list(annotations)
        for name in names:
            if not isinstance(name, str):
                raise ValueError(f"annotation names must be strings, got {name!r}")
        annots = PLAIN.merge(**{name: True for name in names})
    return RichTextSpan(text=text, annotations=annots, link=link or None)


def coalesce_spans(spans: Iterable[RichTextSpan]) -> list[RichTextSpan]:
    """Merge adjacent spans with identical annotations and link.

    Empty spans are dropped.  The concatenated text is unchanged.
    """
    merged: list[RichTextSpan] = []
    for span in spans:
        if not span.text:
            continue
        if merged and merged[-1].same_style(span):
            merged[-1] = merged[-1].with_text(merged[-1].text + span.text)
        else:
            merged.append(span)
    return merged


def plain_text(spans: Iterable[RichTextSpan]) -> str:
    """Concatenate the text of *spans*, ignoring formatting."""
    return "".join(span.text for span in spans)


def split_spans(spans: Sequence[RichTextSpan], limit: int) -> list[RichTextSpan]:
    """Split any span longer than *limit* characters into several spans.

    Annotations and link are preserved on every piece.  Splitting happens
    on code-point boundaries, so no character is ever cut in half.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    output: list[RichTextSpan] = []
    for span in spans:
        if len(span.text) <= limit:
            output.append(span)
            continue
        for start in range(0, len(span.text), limit):
            output.append(span.with_text(span.text[start:start + limit]))
    return output


# ---------------------------------------------------------------------------
# Inline AST -> spans
# ---------------------------------------------------------------------------

def build_rich_text(
    children: list[dict],
    config: ConverterConfig,
    *,
    annotations: Annotations = PLAIN,
    link: str | None = None,
    warnings: list[ConversionWarning] | None = None,
) -> list[RichTextSpan]:
    """Convert normalized inline tokens to a coalesced span list.

    Parameters
    ----------
    children:
        Normalized inline tokens.
    config:
        Converter configuration; ``lenient`` decides what happens to inline
        HTML and footnote references.
    annotations:
        Annotations inherited from enclosing inline nodes.
    link:
        Link URL inherited from an enclosing ``link`` node.
    warnings:
        Optional list collecting lenient-mode :class:`ConversionWarning`.

    Raises
    ------
    UnsupportedConstructError
        For inline constructs with no span equivalent when not lenient.
    """
    spans = _build_spans(children, config, annotations, link, warnings)
    return coalesce_spans(spans)


def _build_spans(
    children: list[dict],
    config: ConverterConfig,
    annotations: Annotations,
    link: str | None,
    warnings: list[ConversionWarning] | None,
) -> list[RichTextSpan]:
    spans: list[RichTextSpan] = []
    underline_depth = 0

    for token in children:
        token_type = token.get("type", "")
        current = annotations.merge(underline=True) if underline_depth else annotations

        if token_type == "text":
            spans.append(RichTextSpan(token.get("raw", ""), current, link))

        elif token_type == "strong":
            spans.extend(_build_spans(
                token.get("children", []), config, current.merge(bold=True), link, warnings,
            ))

        elif token_type == "emphasis":
            spans.extend(_build_spans(
                token.get("children", []), config, current.merge(italic=True), link, warnings,
            ))

        elif token_type == "strikethrough":
            spans.extend(_build_spans(
                token.get("children", []), config,
                current.merge(strikethrough=True), link, warnings,
            ))

        elif token_type == "codespan":
            spans.append(RichTextSpan(token.get("raw", ""), current.merge(code=True), link))

        elif token_type == "link":
            url = token.get("attrs", {}).get("url", "") or link
            spans.extend(_build_spans(
                token.get("children", []), config, current, url, warnings,
            ))

        elif token_type == "image":
            # Images nested in other inline markup cannot become blocks;
            # keep them as a span linking to the picture.
            url = token.get("attrs", {}).get("url", "")
            alt = extract_text(token.get("children", []))
            spans.append(RichTextSpan(alt or url, current, link or url or None))

        elif token_type == "softbreak":
            spans.append(RichTextSpan(" ", current, link))

        elif token_type == "linebreak":
            spans.append(RichTextSpan("\n", current, link))

        elif token_type == "html_inline" and _is_underline_tag(token, _UNDERLINE_OPEN):
            underline_depth += 1

        elif (
            token_type == "html_inline"
            and underline_depth
            and _is_underline_tag(token, _UNDERLINE_CLOSE)
        ):
            underline_depth -= 1

        else:
            fallback = _unsupported_inline(token, config, warnings)
            spans.append(RichTextSpan(fallback, current, link))

    return spans


def _is_underline_tag(token: dict, tag: str) -> bool:
    return token.get("raw", "").strip().lower() == tag


def _unsupported_inline(
    token: dict,
    config: ConverterConfig,
    warnings: list[ConversionWarning] | None,
) -> str:
    """Raise, or return the plain-text fallback for an inline token."""
    token_type = token.get("type", "unknown")
    position = token.get("position", "")
    if not config.lenient:
        raise UnsupportedConstructError(
            message=f"Inline construct '{token_type}' has no rich-text equivalent "
                    f"(at {position})",
            context={"node_type": token_type, "position": position},
        )
    fallback = inline_fallback_text(token)
    if warnings is not None:
        warnings.append(ConversionWarning(
            code="INLINE_FALLBACK",
            message=f"Inline construct '{token_type}' kept as plain text.",
            context={"node_type": token_type, "position": position},
        ))
    return fallback


def inline_fallback_text(token: dict) -> str:
    """Raw textual stand-in for an inline token."""
    if token.get("type") == "footnote_ref":
        return f"[^{token.get('raw', '')}]"
    if "raw" in token:
        return token["raw"]
    return extract_text(token.get("children", []))


def extract_text(children: list[dict]) -> str:
    """Recursively extract plain text from inline tokens."""
    parts: list[str] = []
    for token in children:
        token_type = token.get("type", "")
        if token_type == "text":
            parts.append(token.get("raw", ""))
        elif token_type == "softbreak":
            parts.append(" ")
        elif token_type == "linebreak":
            parts.append("\n")
        elif "children" in token:
            parts.append(extract_text(token["children"]))
        elif "raw" in token:
            parts.append(token["raw"])
    return "".join(parts)
