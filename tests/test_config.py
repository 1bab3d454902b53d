"""Tests for vibecheck.config and the theme built from it."""

from __future__ import annotations

import pytest

from vibecheck.config import Settings
from vibecheck.report.drawing import LayoutError
from vibecheck.report.theme import Theme, font_variant, page_size_mm


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv('PDF_PAGE_SIZE', 'letter')
    monkeypatch.setenv('PDF_MARGIN_MM', '15')
    settings = Settings()
    assert settings.pdf_page_size == 'letter'
    assert settings.pdf_margin_mm == 15.0


def test_page_break_sections_are_parsed():
    settings = Settings(pdf_page_break_before=' risk_assessment, ,launch_strategy ')
    assert settings.page_break_sections() == ['risk_assessment', 'launch_strategy']


def test_get_settings_creates_report_dir(isolated_settings):
    assert (isolated_settings.data_dir / 'reports').is_dir()


class TestThemeFromSettings:
    def test_landscape_letter(self):
        theme = Theme.from_settings(Settings(pdf_page_size='letter', pdf_orientation='landscape'))
        assert (theme.page_width, theme.page_height) == (279.4, 215.9)

    def test_margins_and_font(self):
        theme = Theme.from_settings(
            Settings(pdf_margin_mm=12, pdf_bottom_margin_mm=18, pdf_font_family='Times')
        )
        assert theme.margin_left == theme.margin_top == 12.0
        assert theme.margin_bottom == 18.0
        assert theme.style('heading').font_name == 'Times-Bold'

    def test_unknown_page_size(self):
        with pytest.raises(LayoutError):
            page_size_mm('tabloid')


def test_unknown_font_family_falls_back_to_helvetica():
    assert font_variant('Comic Sans', 'italic') == 'Helvetica-Oblique'
