"""Shared test fixtures for the tiptapify test suite."""

from __future__ import annotations

import pytest

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_to_tiptap import HtmlToTipTapConverter
from tiptapify.converter.tiptap_to_html import TipTapToHtmlRenderer
from tiptapify.engine import NoteConverter


@pytest.fixture
def config() -> TiptapifyConfig:
    """Default engine configuration."""
    return TiptapifyConfig()


@pytest.fixture
def converter(config: TiptapifyConfig) -> HtmlToTipTapConverter:
    """HTML-to-TipTap converter using the default config."""
    return HtmlToTipTapConverter(config)


@pytest.fixture
def renderer(config: TiptapifyConfig) -> TipTapToHtmlRenderer:
    """TipTap-to-HTML renderer using the default config."""
    return TipTapToHtmlRenderer(config)


@pytest.fixture
def note_converter(config: TiptapifyConfig) -> NoteConverter:
    """Facade bound to the default config."""
    return NoteConverter(config)
