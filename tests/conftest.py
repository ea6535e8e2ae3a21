"""Shared test fixtures for the notionmark test suite."""

from __future__ import annotations

import pytest

from notionmark.config import ConverterConfig
from notionmark.converter.blocks_to_md import BlocksToMarkdownRenderer
from notionmark.converter.md_to_blocks import MarkdownToBlocksConverter


@pytest.fixture
def config() -> ConverterConfig:
    """Default (strict) converter configuration."""
    return ConverterConfig()


@pytest.fixture
def lenient_config() -> ConverterConfig:
    """Configuration that degrades unsupported constructs to paragraphs."""
    return ConverterConfig(lenient=True)


@pytest.fixture
def converter(config: ConverterConfig) -> MarkdownToBlocksConverter:
    """Markdown-to-blocks converter using the default config."""
    return MarkdownToBlocksConverter(config)


@pytest.fixture
def renderer(config: ConverterConfig) -> BlocksToMarkdownRenderer:
    """Blocks-to-Markdown renderer using the default config."""
    return BlocksToMarkdownRenderer(config)
