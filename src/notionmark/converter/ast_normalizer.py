"""Parse Markdown and normalize to canonical AST tokens.

This module wraps mistune v3's AST renderer and normalises the raw token
stream into a well-defined set of canonical types used by the block
builder.  Every normalised token carries a ``position``: its index path in
the document (``"2"`` is the third top-level block, ``"2.0.1"`` the second
child of that block's first child).  mistune does not report line numbers,
so the index path is what error messages point at.

Canonical block tokens:
    heading, paragraph, block_quote, list, list_item, task_list_item,
    block_code, thematic_break

Canonical inline tokens:
    text, strong, emphasis, codespan, strikethrough, link, image,
    softbreak, linebreak, html_inline

Everything else mistune can produce (``table``, ``html_block``,
``footnotes``, ``footnote_ref``) is passed through under its own type so
the builder can apply the unsupported-construct policy to it.
"""

from __future__ import annotations

import mistune

from notionmark.errors import ParseError

# ---------------------------------------------------------------------------
# Mistune-to-canonical type mapping
# ---------------------------------------------------------------------------

_BLOCK_TYPE_MAP: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "block_quote": "block_quote",
    "list": "list",
    "list_item": "list_item",
    "task_list_item": "task_list_item",
    "block_code": "block_code",
    "thematic_break": "thematic_break",
    # Tight list items wrap their inline content in block_text
    "block_text": "paragraph",
}

_INLINE_TYPE_MAP: dict[str, str] = {
    "text": "text",
    "strong": "strong",
    "emphasis": "emphasis",
    "codespan": "codespan",
    "strikethrough": "strikethrough",
    "link": "link",
    "image": "image",
    "softbreak": "softbreak",
    "linebreak": "linebreak",
    "inline_html": "html_inline",
}

# Constructs the block schema cannot represent.  They survive
# normalisation so the builder can raise or degrade them.
_UNSUPPORTED_TYPE_MAP: dict[str, str] = {
    "block_html": "html_block",
    "table": "table",
    "footnotes": "footnotes",
    "footnote_item": "footnote_item",
    "footnote_ref": "footnote_ref",
}

_TABLE_PART_TYPES: frozenset[str] = frozenset({
    "table_head",
    "table_body",
    "table_row",
    "table_cell",
})

# Tokens that carry no content
_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})


class ASTNormalizer:
    """Parse Markdown and normalize to canonical AST tokens."""

    def __init__(self) -> None:
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=[
                "strikethrough",
                "table",
                "task_lists",
                "url",
                "footnotes",
            ],
        )

    def parse(self, markdown: str) -> list[dict]:
        """Parse markdown and return the normalized AST token list.

        Raises
        ------
        ParseError
            If *markdown* is not a string or mistune fails on it.
        """
        if not isinstance(markdown, str):
            raise ParseError(
                message=f"Markdown input must be str, got {type(markdown).__name__}",
                context={"reason": "not_a_string"},
            )
        try:
            raw_tokens = self._parser(markdown)
        except Exception as exc:
            raise ParseError(
                message=f"Markdown could not be parsed: {exc}",
                context={"input_length": len(markdown), "reason": type(exc).__name__},
                cause=exc,
            ) from exc
        if isinstance(raw_tokens, str):
            return []
        return self._normalize_tokens(raw_tokens, "")

    def _normalize_tokens(self, tokens: list[dict], parent: str) -> list[dict]:
        """Normalize a token list, numbering the kept tokens under *parent*."""
        result: list[dict] = []
        for token in tokens:
            position = f"{parent}.{len(result)}" if parent else str(len(result))
            normalized = self._normalize_token(token, position)
            if normalized is not None:
                result.append(normalized)
        return result

    def _normalize_token(self, token: dict, position: str) -> dict | None:
        """Normalize a single token, returning None if it should be skipped."""
        raw_type = token.get("type", "")

        if raw_type in _SKIP_TYPES:
            return None

        if raw_type in _BLOCK_TYPE_MAP:
            return self._normalize_block(token, _BLOCK_TYPE_MAP[raw_type], position)

        if raw_type in _INLINE_TYPE_MAP:
            return self._normalize_inline(token, _INLINE_TYPE_MAP[raw_type], position)

        if raw_type in _UNSUPPORTED_TYPE_MAP or raw_type in _TABLE_PART_TYPES:
            return self._normalize_passthrough(
                token, _UNSUPPORTED_TYPE_MAP.get(raw_type, raw_type), position,
            )

        # "raw" appears inside codespan and block_code children
        if raw_type == "raw":
            return {"type": "text", "raw": token.get("raw", ""), "position": position}

        # Anything else is unknown to this normalizer: keep it so the
        # builder reports it instead of silently dropping content.
        return self._normalize_passthrough(token, raw_type or "unknown", position)

    def _normalize_block(self, token: dict, canonical_type: str, position: str) -> dict:
        """Normalize a block-level token."""
        result: dict = {"type": canonical_type, "position": position}

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if canonical_type == "block_code":
            raw_code = token.get("raw", "")
            # mistune keeps the newline that precedes the closing fence
            if raw_code.endswith("\n"):
                raw_code = raw_code[:-1]
            result["raw"] = raw_code
            return result

        if canonical_type == "thematic_break":
            return result

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children, position)

        return result

    def _normalize_inline(self, token: dict, canonical_type: str, position: str) -> dict:
        """Normalize an inline-level token."""
        result: dict = {"type": canonical_type, "position": position}

        if canonical_type in ("text", "softbreak", "linebreak"):
            if "raw" in token:
                result["raw"] = token["raw"]
            return result

        if canonical_type in ("html_inline", "codespan"):
            result["raw"] = token.get("raw", "")
            return result

        # url, title, alt for link/image
        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children, position)

        return result

    def _normalize_passthrough(self, token: dict, canonical_type: str, position: str) -> dict:
        """Keep an unsupported token (and its sub-tokens) for the builder."""
        result: dict = {"type": canonical_type, "position": position}

        if "raw" in token:
            result["raw"] = token["raw"]

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children, position)

        return result
