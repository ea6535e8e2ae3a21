"""Tests for ConverterConfig validation."""

import pytest

from notionmark.config import DEFAULT_MAX_TEXT_LENGTH, ConverterConfig


class TestDefaults:

    def test_default_is_strict(self):
        config = ConverterConfig()
        assert config.lenient is False
        assert config.heading_overflow == "downgrade"
        assert config.indent == "  "
        assert config.max_text_length == DEFAULT_MAX_TEXT_LENGTH == 2000
        assert config.debug_dump_ast is False

    def test_tab_indent_allowed(self):
        assert ConverterConfig(indent="\t").indent == "\t"


class TestValidation:

    def test_bad_heading_overflow(self):
        with pytest.raises(ValueError, match="heading_overflow"):
            ConverterConfig(heading_overflow="drop")

    @pytest.mark.parametrize("indent", ["", "--", " x"])
    def test_bad_indent(self, indent):
        with pytest.raises(ValueError, match="indent"):
            ConverterConfig(indent=indent)

    @pytest.mark.parametrize("limit", [0, -5])
    def test_bad_max_text_length(self, limit):
        with pytest.raises(ValueError, match="max_text_length"):
            ConverterConfig(max_text_length=limit)
