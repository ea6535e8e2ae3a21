"""Tests for inline rendering of rich-text spans."""

import pytest

from notionmark.converter.inline_renderer import (
    code_span,
    escape_line_start,
    markdown_escape,
    render_rich_text,
    render_span,
)
from notionmark.converter.rich_text import make_span


class TestMarkdownEscape:

    @pytest.mark.parametrize("char", ["*", "_", "`", "[", "]", "\\"])
    def test_control_characters_escaped(self, char):
        assert markdown_escape(f"a{char}b") == f"a\\{char}b"

    def test_other_punctuation_untouched(self):
        assert markdown_escape("Some text. (ok) #1 - fine!") == "Some text. (ok) #1 - fine!"

    def test_code_context_is_verbatim(self):
        assert markdown_escape("a*b_c", "code") == "a*b_c"

    def test_url_context_encodes_parentheses_and_spaces(self):
        assert markdown_escape("https://x.org/a (b)", "url") == "https://x.org/a%20%28b%29"


class TestCodeSpan:

    def test_simple(self):
        assert code_span("x") == "`x`"

    def test_inner_backtick_lengthens_delimiter(self):
        assert code_span("a`b") == "``a`b``"

    def test_edge_backtick_padded(self):
        assert code_span("`x") == "`` `x ``"


class TestRenderSpan:

    def test_plain_text(self):
        assert render_span(make_span("hello")) == "hello"

    def test_plain_text_escaped(self):
        assert render_span(make_span("a*b_c`d[e]")) == "a\\*b\\_c\\`d\\[e\\]"

    def test_code_not_escaped(self):
        assert render_span(make_span("a*b_[c]", ["code"])) == "`a*b_[c]`"

    def test_bold(self):
        assert render_span(make_span("x", ["bold"])) == "**x**"

    def test_italic(self):
        assert render_span(make_span("x", ["italic"])) == "*x*"

    def test_strikethrough(self):
        assert render_span(make_span("x", ["strikethrough"])) == "~~x~~"

    def test_underline_uses_html_fallback(self):
        assert render_span(make_span("x", ["underline"])) == "<u>x</u>"

    def test_bold_italic(self):
        assert render_span(make_span("x", ["bold", "italic"])) == "***x***"

    def test_code_inside_bold(self):
        assert render_span(make_span("x", ["bold", "code"])) == "**`x`**"

    def test_all_annotations_nest_in_fixed_order(self):
        span = make_span("x", ["bold", "italic", "strikethrough", "code", "underline"])
        assert render_span(span) == "<u>~~***`x`***~~</u>"

    def test_link_is_outermost(self):
        span = make_span("site", ["bold"], link="https://example.com")
        assert render_span(span) == "[**site**](https://example.com)"

    def test_plain_link(self):
        span = make_span("site", link="https://example.com")
        assert render_span(span) == "[site](https://example.com)"

    def test_surrounding_spaces_kept_outside_markers(self):
        assert render_span(make_span(" bold ", ["bold"])) == " **bold** "

    def test_whitespace_only_span_gets_no_markers(self):
        assert render_span(make_span("  ", ["italic"])) == "  "


class TestRenderRichText:

    def test_empty(self):
        assert render_rich_text([]) == ""

    def test_mixed_spans(self):
        spans = [make_span("Some "), make_span("bold", ["bold"]), make_span(" text.")]
        assert render_rich_text(spans) == "Some **bold** text."

    def test_adjacent_same_style_spans_merged(self):
        spans = [make_span("a", ["bold"]), make_span("b", ["bold"])]
        assert render_rich_text(spans) == "**ab**"

    def test_different_links_not_merged(self):
        spans = [make_span("a", link="https://a"), make_span("b", link="https://b")]
        assert render_rich_text(spans) == "[a](https://a)[b](https://b)"

    def test_newline_written_as_hard_break(self):
        assert render_rich_text([make_span("a\nb")]) == "a\\\nb"

    def test_trailing_newline_dropped(self):
        assert render_rich_text([make_span("a\n")]) == "a"

    def test_newline_kept_outside_bold_markers(self):
        spans = [make_span("a\n", ["bold"]), make_span("b")]
        assert render_rich_text(spans) == "**a**\\\nb"

    def test_bold_with_trailing_newline_alone(self):
        assert render_rich_text([make_span("a\n", ["bold"])]) == "**a**"

    def test_marker_after_styled_span_left_alone(self):
        spans = [make_span("x", ["bold"]), make_span(" - y")]
        assert render_rich_text(spans) == "**x** - y"

    def test_marker_after_break_in_next_span_escaped(self):
        spans = [make_span("x", ["bold"]), make_span("\n- y")]
        assert render_rich_text(spans) == "**x**\\\n\\- y"


class TestEscapeLineStart:

    @pytest.mark.parametrize("line, expected", [
        ("# a", "\\# a"),
        ("### a", "\\### a"),
        ("#", "\\#"),
        ("> a", "\\> a"),
        ("- a", "\\- a"),
        ("+ a", "\\+ a"),
        ("1. a", "1\\. a"),
        ("12) a", "12\\) a"),
        ("---", "\\---"),
        ("| --- |", "\\| --- |"),
        ("~~~", "\\~~~"),
        ("<div>", "\\<div>"),
        ("  # a", "  \\# a"),
    ])
    def test_block_openers_escaped(self, line, expected):
        assert escape_line_start(line) == expected

    @pytest.mark.parametrize("line", ["#tag", "-a", "1.5 cups", "a - b", "~~x~~", "< 3", ""])
    def test_plain_lines_untouched(self, line):
        assert escape_line_start(line) == line
