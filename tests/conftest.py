"""Shared fixtures for the report layout tests."""

from __future__ import annotations

import pytest

from vibecheck.config import get_settings
from vibecheck.report.text_measure import TextMeasurer
from vibecheck.report.theme import Theme

CHAR_WIDTH_MM = 2.0


@pytest.fixture
def measurer() -> TextMeasurer:
    """Every character is 2mm wide, whatever the font, so wrapping is easy to reason about."""
    return TextMeasurer(width_fn=lambda text, font_name, font_size: len(text) * CHAR_WIDTH_MM)


@pytest.fixture
def theme() -> Theme:
    return Theme()


@pytest.fixture
def tall_theme() -> Theme:
    """A4 with a 250mm content area."""
    return Theme(margin_top=20.0, margin_bottom=27.0)


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv('DATA_DIR', str(tmp_path / 'data'))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def sample_report() -> dict:
    return {
        'fitScore': 72,
        'fitScoreExplanation': 'Solid niche with **clear** demand but a crowded market.',
        'marketFitAnalysis': {
            'strengths': ['Clear niche', 'Low infra cost'],
            'weaknesses': ['Crowded market'],
            'demandPotential': 'Demand is growing among small teams.',
        },
        'valueProposition': 'Ship better ideas faster.',
        'targetAudience': {
            'demographic': 'Founders aged 25-40.',
            'psychographic': 'Pragmatic builders who value speed.',
        },
        'technicalFeasibility': 'Buildable with off-the-shelf APIs.',
        'regulatoryConsiderations': 'Store user data in the EU.',
        'competitiveLandscape': {
            'marketPositioning': 'Affordable alternative to consultancies.',
            'differentiationPoints': ['Instant feedback', 'Actionable plans'],
            'competitors': [
                {
                    'name': 'Acme Insights',
                    'marketPosition': 'Leader',
                    'description': 'Enterprise research platform.',
                    'strengths': ['Brand', 'Data'],
                    'weaknesses': ['Price'],
                    'pricingStrategy': 'Annual contracts.',
                }
            ],
        },
        'riskAssessment': {
            'risks': [
                {
                    'type': 'Market',
                    'description': 'Low willingness to pay.',
                    'mitigation': 'Offer a free tier.',
                }
            ]
        },
        'businessPlan': {
            'revenueModel': 'Subscription.',
            'goToMarketStrategy': 'Content marketing.',
            'keyMilestones': ['Launch beta', 'First 100 users', 'Break even'],
            'resourcesNeeded': ['Designer'],
        },
        'launchStrategy': {
            'mvpFeatures': ['Idea intake', 'Report export'],
            'timeToMarket': 'Three months.',
            'launchChecklist': ['Landing page'],
        },
        'implementationRoadmap': {
            'phases': [
                {'timeframe': 'Month 1', 'tasks': ['Build MVP'], 'metrics': ['10 testers']},
            ]
        },
        'customerAcquisition': {
            'primaryChannels': ['SEO', 'Communities'],
            'costPerAcquisition': 'About $20.',
        },
        'revenueGeneration': {
            'businessModels': ['Freemium'],
            'unitEconomics': 'LTV 5x CAC.',
        },
        'bootstrappingGuide': {
            'costMinimizationTips': ['Use free tiers'],
            'milestonesOnBudget': ['First paying user'],
        },
        'adjacentIdeas': {
            'complementaryProducts': ['Pitch deck builder'],
            'pivotPossibilities': ['Agency tooling'],
            'strategicRecommendations': 'Focus on one segment first.',
        },
    }
