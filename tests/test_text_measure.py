"""Tests for vibecheck.report.text_measure."""

from __future__ import annotations

import pytest
from reportlab.pdfbase import pdfmetrics

from vibecheck.report.drawing import LayoutError
from vibecheck.report.text_measure import (
    TextMeasurer,
    flatten_inline_markdown,
    normalize_text,
    reportlab_text_width,
)
from vibecheck.report.theme import CJK_FALLBACK_FONT, PT_MM


class TestWrap:
    def test_greedy_wrap(self, measurer, theme):
        lines = measurer.wrap('aaa bbb ccc', theme.style('body'), 15)
        assert lines == ['aaa bbb', 'ccc']

    def test_overlong_word_keeps_its_own_line(self, measurer, theme):
        lines = measurer.wrap('supercalifragilistic short', theme.style('body'), 10)
        assert lines == ['supercalifragilistic', 'short']

    def test_explicit_newlines_are_kept(self, measurer, theme):
        lines = measurer.wrap('first\n\n   second   line', theme.style('body'), 100)
        assert lines == ['first', 'second line']

    def test_non_positive_width_is_rejected(self, measurer, theme):
        with pytest.raises(LayoutError):
            measurer.wrap('text', theme.style('body'), 0)


class TestMeasure:
    def test_height_is_lines_times_line_height(self, measurer, theme):
        style = theme.style('body')
        measured = measurer.measure('aaa bbb ccc', style, 15)
        assert measured.line_count == 2
        assert measured.line_height == pytest.approx(11 * 1.45 * PT_MM)
        assert measured.height == pytest.approx(2 * measured.line_height)

    def test_empty_text_has_zero_height(self, measurer, theme):
        measured = measurer.measure('   ', theme.style('body'), 50)
        assert measured.lines == ()
        assert measured.height == 0.0

    def test_same_inputs_same_lines(self, theme):
        text = 'A fairly long sentence that will need to wrap across more than one line of text.'
        real = TextMeasurer()
        first = real.measure(text, theme.style('body'), 60)
        second = real.measure(text, theme.style('body'), 60)
        assert first == second
        assert first.line_count > 1


class TestReportlabWidth:
    def test_matches_stringwidth_in_mm(self):
        expected = pdfmetrics.stringWidth('Hello', 'Helvetica', 10) * PT_MM
        assert reportlab_text_width('Hello', 'Helvetica', 10) == pytest.approx(expected)

    def test_unknown_font_falls_back_to_estimate(self):
        assert reportlab_text_width('Hello', 'NoSuchFont-Bold', 10) > 0

    def test_empty_text(self):
        assert reportlab_text_width('', 'Helvetica', 10) == 0.0

    def test_cjk_font_is_registered_and_measured(self):
        # full-width CID glyphs are one em wide
        assert reportlab_text_width('低成本', CJK_FALLBACK_FONT, 10) == pytest.approx(30 * PT_MM)
        assert CJK_FALLBACK_FONT in pdfmetrics.getRegisteredFontNames()


class TestCjkText:
    def test_lines_with_cjk_use_the_cid_font(self, theme):
        style = theme.style('body')
        assert style.font_for('低成本 plan') == CJK_FALLBACK_FONT
        assert style.font_for('plain text') == style.font_name

    def test_width_is_measured_in_the_drawing_font(self, theme):
        seen: list[str] = []

        def width_fn(text, font_name, font_size):
            seen.append(font_name)
            return len(text) * 2.0

        TextMeasurer(width_fn=width_fn).text_width('为独立开发者', theme.style('body'))
        assert seen == [CJK_FALLBACK_FONT]

    def test_long_cjk_run_breaks_between_characters(self, measurer, theme):
        lines = measurer.wrap('为独立开发者快速验证', theme.style('body'), 10)
        assert lines == ['为独立开发', '者快速验证']

    def test_cjk_run_that_fits_stays_whole(self, measurer, theme):
        assert measurer.wrap('低成本 idea', theme.style('body'), 100) == ['低成本 idea']


class TestMarkdownFlattening:
    def test_inline_markup_is_stripped(self):
        flattened = flatten_inline_markdown('**Bold** and `code` with a [link](https://example.com)')
        assert flattened == 'Bold and code with a link'

    def test_lines_are_flattened_separately(self):
        assert flatten_inline_markdown('*one*\n\n_two_') == 'one\ntwo'

    def test_none_and_blank(self):
        assert flatten_inline_markdown(None) == ''
        assert normalize_text('  \n\t ') == ''
