"""End-to-end tests for the one-call entry points."""

from __future__ import annotations

import pytest

from notionmark import (
    Annotations,
    Block,
    BlockType,
    ConverterConfig,
    RichTextSpan,
    blocks_to_markdown,
    markdown_to_blocks,
)
from notionmark.errors import (
    BlockJSONSyntaxError,
    MalformedBlockError,
    ParseError,
    UnsupportedConstructError,
)


class TestDocumentedExamples:

    def test_heading_and_paragraph(self):
        blocks = markdown_to_blocks("# Title\n\nSome **bold** text.")
        assert blocks == [
            Block(BlockType.HEADING_1, rich_text=[RichTextSpan("Title")]),
            Block(BlockType.PARAGRAPH, rich_text=[
                RichTextSpan("Some "),
                RichTextSpan("bold", Annotations(bold=True)),
                RichTextSpan(" text."),
            ]),
        ]

    def test_checked_to_do(self):
        block = Block(BlockType.TO_DO, rich_text=[RichTextSpan("Done")], checked=True)
        assert blocks_to_markdown([block]) == "- [x] Done"

    def test_python_code_block(self):
        block = Block(BlockType.CODE, rich_text=[RichTextSpan("print(1)")], language="python")
        assert blocks_to_markdown([block]) == "```python\nprint(1)\n```"

    def test_unknown_variant_json(self):
        with pytest.raises(UnsupportedConstructError):
            blocks_to_markdown('[{"type": "unknownVariant"}]')

    def test_nested_bullets(self):
        tree = [Block(
            BlockType.BULLETED_LIST_ITEM,
            rich_text=[RichTextSpan("parent")],
            children=[Block(BlockType.BULLETED_LIST_ITEM, rich_text=[RichTextSpan("child")])],
        )]
        first, second = blocks_to_markdown(tree).split("\n")
        assert first == "- parent"
        assert second == "  - child"


class TestMarkdownToBlocks:

    def test_empty_input(self):
        assert markdown_to_blocks("") == []

    def test_config_passed_through(self):
        blocks = markdown_to_blocks("#### Deep", ConverterConfig(heading_overflow="paragraph"))
        assert blocks == [Block(
            BlockType.PARAGRAPH, rich_text=[RichTextSpan("Deep", Annotations(bold=True))],
        )]

    def test_parse_error(self):
        with pytest.raises(ParseError):
            markdown_to_blocks(42)

    def test_unsupported_strict(self):
        with pytest.raises(UnsupportedConstructError):
            markdown_to_blocks("<div>raw</div>\n")

    def test_unsupported_lenient(self):
        blocks = markdown_to_blocks("<div>raw</div>\n", ConverterConfig(lenient=True))
        assert blocks == [Block(BlockType.PARAGRAPH, rich_text=[RichTextSpan("<div>raw</div>")])]


class TestBlocksToMarkdown:

    def test_accepts_json_text(self):
        text = '[{"type": "to_do", "checked": false, "richText": [{"text": "Later"}]}]'
        assert blocks_to_markdown(text) == "- [ ] Later"

    def test_accepts_decoded_dicts(self):
        data = [
            {"type": "heading_2", "richText": [{"text": "Sub"}]},
            {"type": "divider"},
        ]
        assert blocks_to_markdown(data) == "## Sub\n\n---"

    def test_accepts_mixed_list(self):
        data = [Block(BlockType.DIVIDER), {"type": "divider"}]
        assert blocks_to_markdown(data) == "---\n\n---"

    def test_empty_list(self):
        assert blocks_to_markdown([]) == ""

    def test_json_syntax_error(self):
        with pytest.raises(BlockJSONSyntaxError):
            blocks_to_markdown("[{")

    def test_missing_checked(self):
        with pytest.raises(MalformedBlockError) as exc_info:
            blocks_to_markdown([{"type": "to_do", "richText": [{"text": "x"}]}])
        assert exc_info.value.context["path"] == "0"

    def test_not_a_block_list(self):
        with pytest.raises(MalformedBlockError):
            blocks_to_markdown(None)

    def test_custom_indent(self):
        tree = [Block(
            BlockType.NUMBERED_LIST_ITEM,
            rich_text=[RichTextSpan("a")],
            children=[Block(BlockType.NUMBERED_LIST_ITEM, rich_text=[RichTextSpan("b")])],
        )]
        assert blocks_to_markdown(tree, ConverterConfig(indent="   ")) == "1. a\n   1. b"
