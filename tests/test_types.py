"""Tests for vibecheck.types: lenient evaluation parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from vibecheck.types import EvaluationReport


def test_aliases_are_accepted():
    report = EvaluationReport.from_payload(
        {
            'marketFitAnalysis': {'strengths': ['Niche']},
            'competitiveLandscape': {
                'differentiationPoints': ['Speed'],
                'competitors': [{'name': 'Acme', 'description': 'Big player'}],
            },
            'businessPlan': {'goToMarketStrategy': 'Content', 'keyMilestones': ['Beta']},
            'customerAcquisition': {'costPerAcquisition': '$20'},
        }
    )
    assert report.market_fit.strengths == ('Niche',)
    assert report.competitive_landscape.competitive_advantages == ('Speed',)
    assert report.competitive_landscape.competitors[0].differentiation == 'Big player'
    assert report.business_plan.go_to_market == 'Content'
    assert report.business_plan.milestones == ('Beta',)
    assert report.customer_acquisition.acquisition_cost == '$20'


def test_feasibility_narratives_are_parsed():
    report = EvaluationReport.from_payload(
        {'technicalFeasibility': '  Standard web stack. ', 'regulatoryConsiderations': ['not text']}
    )
    assert report.technical_feasibility == 'Standard web stack.'
    assert report.regulatory_considerations is None


def test_evaluation_envelope_is_unwrapped():
    report = EvaluationReport.from_payload(
        {'fitScore': 64, 'evaluation': {'valueProposition': 'Faster plans'}}
    )
    assert report.fit_score == 64.0
    assert report.value_proposition == 'Faster plans'


class TestLeniency:
    def test_malformed_parts_parse_as_absent(self):
        report = EvaluationReport.from_payload(
            {
                'fitScore': 'not a number',
                'marketFit': 'oops',
                'targetAudience': {'demographic': ['wrong type'], 'psychographic': '  Curious  '},
                'riskAssessment': {'risks': [{'type': 'Legal'}, 'bad', None]},
                'adjacentIdeas': {'pivotPossibilities': 'not a list'},
            }
        )
        assert report.fit_score is None
        assert report.market_fit is None
        assert report.target_audience.demographic is None
        assert report.target_audience.psychographic == 'Curious'
        assert [risk.type for risk in report.risk_assessment.risks] == ['Legal']
        assert report.adjacent_ideas.pivot_possibilities == ()

    def test_blank_list_items_are_dropped(self):
        report = EvaluationReport.from_payload({'marketFit': {'strengths': ['  ', 'Real', 5, '']}})
        assert report.market_fit.strengths == ('Real',)

    @pytest.mark.parametrize('raw, expected', [('72', 72.0), (72.5, 72.5), (float('nan'), None), (True, None)])
    def test_score_coercion(self, raw, expected):
        assert EvaluationReport.from_payload({'fitScore': raw}).fit_score == expected

    def test_unknown_fields_are_ignored(self):
        report = EvaluationReport.from_payload({'somethingElse': 1})
        assert report.market_fit is None


def test_reports_are_read_only():
    report = EvaluationReport.from_payload({'valueProposition': 'x'})
    with pytest.raises(ValidationError):
        report.value_proposition = 'y'


def test_non_object_payload():
    with pytest.raises(ValueError):
        EvaluationReport.from_payload('just text')
