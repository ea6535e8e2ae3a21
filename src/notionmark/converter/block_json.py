"""JSON interchange for block trees.

Two shapes are understood.

Flat shape (the default for writing)::

    {"type": "to_do",
     "richText": [{"text": "Done",
                   "annotations": {"bold": false, "italic": false,
                                   "strikethrough": false, "code": false,
                                   "underline": false},
                   "link": "https://example.com"}],
     "checked": true,
     "children": []}

Notion API shape, where variant data sits under a key named after the
type and rich text uses the API's segment objects::

    {"object": "block", "type": "to_do",
     "to_do": {"rich_text": [{"type": "text",
                              "text": {"content": "Done", "link": null},
                              "annotations": {...}, "plain_text": "Done"}],
               "checked": true}}

Reading accepts both, block by block.  Errors are split three ways:
invalid JSON text raises :class:`BlockJSONSyntaxError`, a wrong shape
raises :class:`MalformedBlockError`, and an unknown ``type`` raises
:class:`UnsupportedConstructError`.  Every error names the block's index
path in ``context["path"]``.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Literal

from notionmark.errors import (
    BlockJSONSyntaxError,
    MalformedBlockError,
    NotionmarkError,
    UnsupportedConstructError,
)
from notionmark.models import (
    LEAF_TYPES,
    PLAIN,
    Annotations,
    Block,
    BlockType,
    RichTextSpan,
)

JSONStyle = Literal["flat", "notion"]

_ANNOTATION_KEYS: tuple[str, ...] = ("bold", "italic", "strikethrough", "code", "underline")


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def parse_blocks_json(text: str) -> list[Block]:
    """Decode a JSON document into blocks.

    The document is an array of block objects, or a Notion list response
    (an object whose ``results`` key holds that array).

    Raises
    ------
    BlockJSONSyntaxError
        If *text* is not valid JSON.
    MalformedBlockError
        If the decoded value does not have the block shape, or is nested
        too deeply to process.
    UnsupportedConstructError
        If a block has an unknown ``type``.
    """
    if not isinstance(text, str):
        raise MalformedBlockError(
            message=f"Block JSON input must be str, got {type(text).__name__}",
            context={"path": "", "field": "", "reason": "not_a_string"},
        )
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BlockJSONSyntaxError(
            message=f"Invalid block JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            context={"line": exc.lineno, "column": exc.colno, "reason": exc.msg},
            cause=exc,
        ) from exc
    except RecursionError as exc:
        raise _too_deep("", exc) from exc
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        data = data["results"]
    return blocks_from_dicts(data)


def blocks_from_dicts(data: Any, path: str = "") -> list[Block]:
    """Build blocks from an already-decoded JSON array."""
    try:
        return _blocks_from_dicts(data, path)
    except RecursionError as exc:
        raise _too_deep(path, exc) from exc


def block_from_dict(data: Any, path: str = "0") -> Block:
    """Build one block (and its children) from a decoded JSON object."""
    try:
        return _block_from_dict(data, path)
    except RecursionError as exc:
        raise _too_deep(path, exc) from exc


def _blocks_from_dicts(data: Any, path: str) -> list[Block]:
    if not isinstance(data, list):
        _malformed(path, "", f"expected an array of blocks, got {_json_type(data)}")
    return [
        _block_from_dict(item, f"{path}.{index}" if path else str(index))
        for index, item in enumerate(data)
    ]


def _block_from_dict(data: Any, path: str) -> Block:
    if not isinstance(data, dict):
        _malformed(path, "", f"expected a block object, got {_json_type(data)}")

    type_name = data.get("type")
    if not isinstance(type_name, str) or not type_name:
        _malformed(path, "type", "missing or non-string 'type'")
    try:
        block_type = BlockType(type_name)
    except ValueError:
        raise UnsupportedConstructError(
            message=f"Unknown block type '{type_name}' at {path}",
            context={"block_type": type_name, "position": path, "path": path},
        ) from None

    payload = data.get(type_name)
    if isinstance(payload, dict):
        fields = _notion_fields(block_type, data, payload, path)
    else:
        fields = _flat_fields(data, path)

    try:
        return Block(block_type, **fields)
    except NotionmarkError as exc:
        exc.context.setdefault("path", path)
        raise


def _flat_fields(data: dict, path: str) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    rich_text = data.get("richText", data.get("rich_text"))
    if rich_text is not None:
        fields["rich_text"] = _spans_from_list(rich_text, path, "richText")
    if data.get("children") is not None:
        fields["children"] = _blocks_from_dicts(data["children"], path)
    for name in ("checked", "language", "url", "icon"):
        if name in data:
            fields[name] = data[name]
    return fields


def _notion_fields(block_type: BlockType, data: dict, payload: dict, path: str) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if block_type not in LEAF_TYPES and payload.get("rich_text") is not None:
        fields["rich_text"] = _spans_from_list(payload["rich_text"], path, "rich_text")

    children = payload.get("children", data.get("children"))
    if children is not None:
        fields["children"] = _blocks_from_dicts(children, path)

    if block_type is BlockType.TO_DO and "checked" in payload:
        fields["checked"] = payload["checked"]
    elif block_type is BlockType.CODE and "language" in payload:
        fields["language"] = payload["language"]
    elif block_type is BlockType.IMAGE:
        fields["url"] = _file_url(payload)
    elif block_type is BlockType.CALLOUT:
        fields["icon"] = _icon_text(payload.get("icon"))
    return fields


def _spans_from_list(items: Any, path: str, field_name: str) -> list[RichTextSpan]:
    if not isinstance(items, list):
        _malformed(path, field_name, f"expected an array, got {_json_type(items)}")
    return [_span_from_dict(item, path, f"{field_name}[{i}]") for i, item in enumerate(items)]


def _span_from_dict(item: Any, path: str, field_name: str) -> RichTextSpan:
    if not isinstance(item, dict):
        _malformed(path, field_name, f"expected a rich-text object, got {_json_type(item)}")

    text_value = item.get("text")
    link: Any = item.get("link")
    if isinstance(text_value, dict):
        # API segment: {"type": "text", "text": {"content", "link"}, "href"}
        text = text_value.get("content", item.get("plain_text"))
        link = item.get("href") or text_value.get("link")
    elif text_value is None:
        # Equation and mention segments only carry plain_text
        text = item.get("plain_text")
        link = item.get("href", link)
    else:
        text = text_value

    if not isinstance(text, str):
        _malformed(path, field_name, "rich-text 'text' must be a string")
    if isinstance(link, dict):
        link = link.get("url")
    if link is not None and not isinstance(link, str):
        _malformed(path, f"{field_name}.link", "link must be a string URL")

    return RichTextSpan(
        text=text,
        annotations=_annotations_from_dict(item.get("annotations"), path, field_name),
        link=link or None,
    )


def _annotations_from_dict(value: Any, path: str, field_name: str) -> Annotations:
    if value is None:
        return PLAIN
    if not isinstance(value, dict):
        _malformed(path, f"{field_name}.annotations", "annotations must be an object")
    flags: dict[str, bool] = {}
    for key in _ANNOTATION_KEYS:
        flag = value.get(key, False)
        if not isinstance(flag, bool):
            _malformed(path, f"{field_name}.annotations.{key}", "annotation flags must be booleans")
        flags[key] = flag
    return Annotations(**flags)


def _file_url(payload: dict) -> str | None:
    """URL of an API file object (``external`` or Notion-hosted ``file``)."""
    for key in ("external", "file"):
        source = payload.get(key)
        if isinstance(source, dict) and source.get("url"):
            return source["url"]
    return payload.get("url")


def _icon_text(icon: Any) -> str | None:
    if not isinstance(icon, dict):
        return icon
    if icon.get("type") == "emoji":
        return icon.get("emoji")
    return _file_url(icon)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def blocks_to_dicts(blocks: Sequence[Block], style: JSONStyle = "flat") -> list[dict]:
    """Convert blocks to JSON-ready dicts in the requested *style*."""
    if style not in ("flat", "notion"):
        raise ValueError(f"style must be 'flat' or 'notion', got {style!r}")
    writer = _flat_dict if style == "flat" else _notion_dict
    try:
        return [writer(block) for block in blocks]
    except RecursionError as exc:
        raise _too_deep("", exc) from exc


def blocks_to_json(
    blocks: Sequence[Block],
    style: JSONStyle = "flat",
    *,
    indent: int | None = None,
) -> str:
    """Serialize blocks to a JSON document."""
    dicts = blocks_to_dicts(blocks, style)
    try:
        return json.dumps(dicts, indent=indent, ensure_ascii=False)
    except RecursionError as exc:
        raise _too_deep("", exc) from exc


def _flat_dict(block: Block) -> dict:
    result: dict[str, Any] = {"type": block.type.value}
    if block.type not in LEAF_TYPES:
        result["richText"] = [_flat_span(span) for span in block.rich_text]
    if block.children:
        result["children"] = [_flat_dict(child) for child in block.children]
    if block.type is BlockType.TO_DO:
        result["checked"] = block.checked
    elif block.type is BlockType.CODE:
        result["language"] = block.language
    elif block.type is BlockType.IMAGE:
        result["url"] = block.url
    elif block.type is BlockType.CALLOUT and block.icon:
        result["icon"] = block.icon
    return result


def _flat_span(span: RichTextSpan) -> dict:
    result: dict[str, Any] = {
        "text": span.text,
        "annotations": {key: getattr(span.annotations, key) for key in _ANNOTATION_KEYS},
    }
    if span.link:
        result["link"] = span.link
    return result


def _notion_dict(block: Block) -> dict:
    type_name = block.type.value
    payload: dict[str, Any] = {}
    if block.type is BlockType.IMAGE:
        payload = {"type": "external", "external": {"url": block.url}}
    elif block.type is not BlockType.DIVIDER:
        payload["rich_text"] = [_notion_span(span) for span in block.rich_text]
    if block.type is BlockType.TO_DO:
        payload["checked"] = block.checked
    elif block.type is BlockType.CODE:
        payload["language"] = block.language
    elif block.type is BlockType.CALLOUT and block.icon:
        payload["icon"] = {"type": "emoji", "emoji": block.icon}
    if block.children:
        payload["children"] = [_notion_dict(child) for child in block.children]
    return {"object": "block", "type": type_name, type_name: payload}


def _notion_span(span: RichTextSpan) -> dict:
    annotations: dict[str, Any] = {
        key: getattr(span.annotations, key) for key in _ANNOTATION_KEYS
    }
    annotations["color"] = "default"
    return {
        "type": "text",
        "text": {
            "content": span.text,
            "link": {"url": span.link} if span.link else None,
        },
        "annotations": annotations,
        "plain_text": span.text,
        "href": span.link,
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _malformed(path: str, field_name: str, reason: str) -> None:
    raise MalformedBlockError(
        message=f"Malformed block at {path or 'root'}: {reason}",
        context={"path": path, "field": field_name, "reason": reason},
    )


def _too_deep(path: str, exc: RecursionError) -> MalformedBlockError:
    return MalformedBlockError(
        message=f"Block tree at {path or 'root'} is nested too deeply",
        context={"path": path, "field": "children", "reason": "too_deep"},
        cause=exc,
    )


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
