"""Tests for ASTNormalizer: mistune wrapping and canonical token shapes."""

import pytest

from notionmark.converter.ast_normalizer import ASTNormalizer
from notionmark.errors import ParseError


@pytest.fixture
def normalizer():
    return ASTNormalizer()


class TestCanonicalTypes:

    def test_blank_lines_skipped(self, normalizer):
        tokens = normalizer.parse("one\n\n\n\ntwo")
        assert [t["type"] for t in tokens] == ["paragraph", "paragraph"]

    def test_positions_follow_kept_tokens(self, normalizer):
        tokens = normalizer.parse("one\n\n- a\n- b")
        assert [t["position"] for t in tokens] == ["0", "1"]
        items = tokens[1]["children"]
        assert [i["position"] for i in items] == ["1.0", "1.1"]

    def test_tight_list_block_text_becomes_paragraph(self, normalizer):
        tokens = normalizer.parse("- item")
        item = tokens[0]["children"][0]
        assert item["type"] == "list_item"
        assert item["children"][0]["type"] == "paragraph"

    def test_task_list_item(self, normalizer):
        tokens = normalizer.parse("- [x] done")
        item = tokens[0]["children"][0]
        assert item["type"] == "task_list_item"
        assert item["attrs"]["checked"] is True

    def test_code_block_trailing_newline_stripped(self, normalizer):
        tokens = normalizer.parse("```python\nprint(1)\n```")
        assert tokens[0] == {
            "type": "block_code",
            "position": "0",
            "attrs": {"info": "python"},
            "raw": "print(1)",
        }

    def test_inline_tokens(self, normalizer):
        tokens = normalizer.parse("a **b** `c` ~~d~~")
        types = [t["type"] for t in tokens[0]["children"]]
        assert "strong" in types
        assert "codespan" in types
        assert "strikethrough" in types

    def test_html_block_passes_through(self, normalizer):
        tokens = normalizer.parse("<div>x</div>\n")
        assert tokens[0]["type"] == "html_block"
        assert tokens[0]["raw"].startswith("<div>")

    def test_table_passes_through(self, normalizer):
        tokens = normalizer.parse("| a |\n|---|\n| 1 |\n")
        assert tokens[0]["type"] == "table"
        assert [p["type"] for p in tokens[0]["children"]] == ["table_head", "table_body"]

    def test_unknown_token_kept_for_builder(self, normalizer):
        result = normalizer._normalize_tokens([{"type": "def_list", "children": []}], "")
        assert result == [{"type": "def_list", "position": "0"}]


class TestParseErrors:

    def test_non_string(self, normalizer):
        with pytest.raises(ParseError) as exc_info:
            normalizer.parse(None)
        assert exc_info.value.context["reason"] == "not_a_string"

    def test_parser_exception_wrapped(self, normalizer):
        def explode(_text):
            raise ValueError("bad input")

        normalizer._parser = explode
        with pytest.raises(ParseError) as exc_info:
            normalizer.parse("x")
        assert exc_info.value.cause.args == ("bad input",)
        assert exc_info.value.context == {"input_length": 1, "reason": "ValueError"}
