"""Round-trip tests: Markdown -> blocks -> Markdown.

The two directions are not exact inverses in general (list numbering,
link titles, emphasis marker choice), but the inputs below use the
renderer's own canonical syntax and must come back unchanged.
"""
import re

import pytest

from notionmark import BlocksToMarkdownRenderer, MarkdownToBlocksConverter
from notionmark.converter.rich_text import make_span
from notionmark.models import Block, BlockType, RichTextSpan
from notionmark.config import ConverterConfig


def _roundtrip(md: str, **kwargs) -> str:
    config = ConverterConfig(**kwargs)
    blocks = MarkdownToBlocksConverter(config).convert(md).blocks
    return BlocksToMarkdownRenderer(config).render_blocks(blocks)


def _normalize(text: str) -> str:
    """Collapse blank-line runs and strip outer whitespace."""
    return re.sub(r"\n{3,}", "\n\n", text).strip()


@pytest.mark.parametrize("md", [
    "# Title",
    "## Subtitle",
    "### Section",
    "Plain paragraph.",
    "Some **bold** and *italic* text.",
    "A `code` span and ~~struck~~ words.",
    "x <u>under</u> y",
    "See [the docs](https://example.com/docs).",
    "Literal \\*stars\\* and \\_under\\_ and \\[brackets\\]",
    "```python\nprint(1)\n```",
    "```\nno language\n```",
    "- one\n- two",
    "1. one\n2. two\n3. three",
    "- [x] done\n- [ ] pending",
    "- parent\n  - child\n    - grandchild",
    "1. a\n   - nested bullet",
    "1. a\n   1. nested\n   2. numbered\n2. b",
    "- a\n  1. b\n     - c",
    "\\# not heading",
    "\\- not bullet",
    "1\\. not list",
    "\\> not quote",
    "\\---",
    "a\\\nb",
    "> quoted line",
    "> intro\n>\n> second paragraph",
    "---",
    "![](https://example.com/a.png)",
    "# Title\n\nFirst.\n\n- a\n- b\n\n---\n\nLast.",
])
def test_canonical_markdown_is_stable(md):
    assert _roundtrip(md) == md


class TestSemanticRoundTrip:

    def test_underscore_emphasis_becomes_star(self):
        assert _roundtrip("_it_ and __bold__") == "*it* and **bold**"

    def test_numbering_rewritten(self):
        assert _roundtrip("3. a\n7. b") == "1. a\n2. b"

    def test_star_bullets(self):
        assert _roundtrip("* a\n* b") == "- a\n- b"

    def test_language_alias_resolved(self):
        assert _roundtrip("```py\nx\n```") == "```python\nx\n```"

    def test_extra_blank_lines_collapsed(self):
        assert _roundtrip("one\n\n\n\ntwo") == "one\n\ntwo"

    def test_deep_heading_clamped(self):
        assert _roundtrip("#### Deep") == "### Deep"

    def test_loose_list_item_paragraphs(self):
        md = "- a\n\n  more"
        assert _normalize(_roundtrip(md)) == md

    def test_lenient_table_text_survives(self):
        md = "| a | b |\n|---|---|\n| 1 | 2 |"
        assert _roundtrip(md, lenient=True) == "a | b\\\n1 | 2"

    def test_two_space_hard_break_becomes_backslash(self):
        assert _roundtrip("a  \nb") == "a\\\nb"

    def test_hard_break_kept_in_span_text(self):
        blocks = MarkdownToBlocksConverter().convert("a  \nb").blocks
        assert blocks[0].rich_text == (RichTextSpan("a\nb"),)

    def test_children_of_tenth_item_stay_nested(self):
        md = "\n".join(f"{n}. item" for n in range(1, 10)) + "\n10. ten\n    - child"
        assert _roundtrip(md) == md
        blocks = MarkdownToBlocksConverter().convert(md).blocks
        assert blocks[-1].children[0].type is BlockType.BULLETED_LIST_ITEM


@pytest.mark.parametrize("text", [
    "# not heading",
    "- not bullet",
    "1. not list",
    "> not quote",
    "---",
    "line one\n# line two",
])
def test_paragraph_text_with_block_syntax_stays_paragraph(text):
    paragraph = Block(BlockType.PARAGRAPH, rich_text=[make_span(text)])
    md = BlocksToMarkdownRenderer().render_blocks([paragraph])
    blocks = MarkdownToBlocksConverter().convert(md).blocks
    assert blocks == [paragraph]
