"""Tests for vibecheck.report.evaluation_report: the document assembler."""

from __future__ import annotations

import json
from datetime import date

import pytest

from vibecheck.report.drawing import LayoutError, RectShape
from vibecheck.report.evaluation_report import (
    ATTRIBUTION_LINES,
    FOOTER_LABEL,
    SECTION_KEYS,
    DocumentAssembler,
)


def _assembler(theme, measurer, **kwargs) -> DocumentAssembler:
    return DocumentAssembler(theme, measurer, **kwargs)


class TestSectionSelection:
    def test_full_report_renders_every_section_in_order(self, theme, measurer, sample_report):
        document = _assembler(theme, measurer).render(sample_report)
        assert document.sections == list(SECTION_KEYS)

    def test_absent_launch_strategy_is_skipped(self, theme, measurer, sample_report):
        del sample_report['launchStrategy']
        del sample_report['implementationRoadmap']
        document = _assembler(theme, measurer).render(sample_report)
        assert 'launch_strategy' not in document.sections
        assert 'Launch Strategy' not in document.texts()

    def test_roadmap_alone_still_renders_launch_strategy(self, theme, measurer, sample_report):
        del sample_report['launchStrategy']
        document = _assembler(theme, measurer).render(sample_report)
        texts = document.texts()
        assert 'Launch Strategy' in texts
        assert 'Implementation Roadmap' in texts
        assert 'Phase: Month 1' in texts

    def test_technical_feasibility_follows_target_audience(self, theme, measurer, sample_report):
        document = _assembler(theme, measurer).render(sample_report)
        texts = document.texts()
        position = document.sections.index('target_audience')
        assert document.sections[position + 1] == 'technical_feasibility'
        assert 'Technical Feasibility' in texts
        assert 'Buildable with off-the-shelf APIs.' in texts
        assert 'Regulatory Considerations' in texts
        assert 'Store user data in the EU.' in texts

    def test_absent_technical_feasibility_is_skipped(self, theme, measurer, sample_report):
        del sample_report['technicalFeasibility']
        del sample_report['regulatoryConsiderations']
        document = _assembler(theme, measurer).render(sample_report)
        texts = document.texts()
        assert 'technical_feasibility' not in document.sections
        assert 'Technical Feasibility' not in texts
        assert 'Regulatory Considerations' not in texts

    def test_regulatory_notes_alone_still_render_technical_feasibility(self, theme, measurer):
        document = _assembler(theme, measurer).render({'regulatoryConsiderations': 'GDPR applies.'})
        texts = document.texts()
        assert document.sections == ['technical_feasibility']
        assert 'Regulatory Considerations' in texts
        assert 'GDPR applies.' in texts

    def test_section_with_only_empty_fields_is_skipped(self, theme, measurer):
        report = {'targetAudience': {'demographic': '   '}, 'riskAssessment': {'risks': ['bad', 3]}}
        document = _assembler(theme, measurer).render(report)
        assert document.sections == []

    def test_empty_report_still_has_header_and_attribution(self, theme, measurer):
        document = _assembler(theme, measurer).render({})
        texts = document.texts()
        assert document.page_count == 1
        assert texts[0] == 'Vibe Check Results'
        assert ATTRIBUTION_LINES[0] in texts
        assert 'informational purposes' in ' '.join(texts)


class TestMarketFit:
    def test_strengths_only_panel(self, theme, measurer):
        report = {
            'fitScore': 72,
            'marketFit': {'strengths': ['Clear niche', 'Low infra cost'], 'weaknesses': []},
        }
        document = _assembler(theme, measurer).render(report)
        texts = document.texts()

        assert document.sections == ['market_fit']
        assert 'Vibe Score: 72/100' in texts
        assert 'Market Fit Analysis' in texts
        assert 'Strengths' in texts
        assert 'Clear niche' in texts
        assert 'Low infra cost' in texts
        assert 'Areas for Improvement' not in texts

        affirmative = theme.palette('affirmative').fill
        panels = [
            item
            for item in document.pages[0].instructions
            if isinstance(item, RectShape) and item.fill == affirmative
        ]
        assert len(panels) == 1

    def test_markdown_is_flattened(self, theme, measurer):
        document = _assembler(theme, measurer).render({'valueProposition': 'Ship **better** ideas'})
        assert '"Ship better ideas"' in document.texts()


class TestPagination:
    def test_no_block_straddles_a_page_boundary(self, tall_theme, measurer):
        risks = [
            {
                'type': f'Risk {index}',
                'description': 'A description long enough to wrap onto a second line in the card body text.',
                'mitigation': 'Mitigate it carefully.',
            }
            for index in range(30)
        ]
        document = _assembler(tall_theme, measurer).render({'riskAssessment': {'risks': risks}})
        limit = tall_theme.margin_top + tall_theme.content_height + 1e-6

        assert document.page_count > 1
        for placement in document.placements:
            assert placement.height <= tall_theme.content_height
            assert placement.bottom <= limit, placement.label

    def test_page_break_before_starts_section_on_fresh_page(self, theme, measurer, sample_report):
        document = _assembler(theme, measurer, page_break_before=['risk_assessment']).render(sample_report)
        title = next(p for p in document.placements if p.label == 'Risk Assessment title')
        assert title.y == pytest.approx(theme.margin_top)
        assert title.page_index >= 1

    def test_unknown_page_break_key_is_rejected(self, theme, measurer):
        with pytest.raises(LayoutError):
            _assembler(theme, measurer, page_break_before=['nope'])

    def test_every_page_has_a_numbered_footer(self, tall_theme, measurer, sample_report):
        document = _assembler(tall_theme, measurer).render(sample_report)
        total = document.page_count
        for page in document.pages:
            texts = page.texts()
            assert FOOTER_LABEL in texts
            assert f'Page {page.number} of {total}' in texts


class TestHeader:
    def test_generated_on_only_when_given(self, theme, measurer):
        assembler = _assembler(theme, measurer)
        assert 'Generated on 2026-01-05' in assembler.render({}, generated_on=date(2026, 1, 5)).texts()
        assert not any(text.startswith('Generated on') for text in assembler.render({}).texts())

    def test_explanation_without_score(self, theme, measurer):
        document = _assembler(theme, measurer).render({'fitScoreExplanation': 'Promising.'})
        texts = document.texts()
        assert 'Fit Score Explanation' in texts
        assert 'Promising.' in texts

    def test_fractional_score(self, theme, measurer):
        assert 'Vibe Score: 72.5/100' in _assembler(theme, measurer).render({'fitScore': 72.5}).texts()

    def test_custom_title(self, theme, measurer):
        document = _assembler(theme, measurer, title='Idea Review').render({})
        assert document.title == 'Idea Review'
        assert document.texts()[0] == 'Idea Review'


class TestCompetitors:
    def test_card_shows_tag_and_both_columns(self, theme, measurer, sample_report):
        document = _assembler(theme, measurer).render(sample_report)
        texts = document.texts()
        assert 'Acme Insights' in texts
        assert '(Leader)' in texts
        assert 'Strengths:' in texts
        assert 'Weaknesses:' in texts

        runs = [item for page in document.pages for item in page.instructions if getattr(item, 'text', None)]
        left = next(item for item in runs if item.text == 'Strengths:')
        right = next(item for item in runs if item.text == 'Weaknesses:')
        assert right.x > left.x
        assert right.y == pytest.approx(left.y)


def test_rendering_is_idempotent(theme, measurer, sample_report):
    assembler = _assembler(theme, measurer)
    first = assembler.render(sample_report, generated_on=date(2026, 1, 5))
    second = assembler.render(sample_report, generated_on=date(2026, 1, 5))
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_non_object_payload_is_rejected(theme, measurer):
    with pytest.raises(ValueError):
        _assembler(theme, measurer).render(['not', 'an', 'object'])
