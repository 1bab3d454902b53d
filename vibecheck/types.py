from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _narrative(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _string_items(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if text:
            items.append(text)
    return tuple(items)


def _record_items(value: Any) -> tuple[Any, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, (dict, BaseModel)))


def _record_or_none(value: Any) -> Any:
    if isinstance(value, (dict, BaseModel)):
        return value
    return None


def _score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(score) or math.isinf(score):
        return None
    return score


Narrative = Annotated[str | None, BeforeValidator(_narrative)]
StringList = Annotated[tuple[str, ...], BeforeValidator(_string_items)]
Score = Annotated[float | None, BeforeValidator(_score)]


class EvaluationModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )


class MarketFit(EvaluationModel):
    strengths: StringList = ()
    weaknesses: StringList = ()
    demand_potential: Narrative = None


class TargetAudience(EvaluationModel):
    demographic: Narrative = None
    psychographic: Narrative = None


class Competitor(EvaluationModel):
    name: Narrative = None
    market_position: Narrative = None
    differentiation: Narrative = Field(
        default=None,
        validation_alias=AliasChoices('differentiation', 'description'),
    )
    strengths: StringList = ()
    weaknesses: StringList = ()
    pricing_strategy: Narrative = None


class CompetitiveLandscape(EvaluationModel):
    market_positioning: Narrative = None
    competitive_advantages: StringList = Field(
        default=(),
        validation_alias=AliasChoices(
            'competitiveAdvantages',
            'differentiationPoints',
            'competitive_advantages',
        ),
    )
    differentiation_strategy: Narrative = None
    competitors: Annotated[tuple[Competitor, ...], BeforeValidator(_record_items)] = ()


class Risk(EvaluationModel):
    type: Narrative = None
    description: Narrative = None
    mitigation: Narrative = None


class RiskAssessment(EvaluationModel):
    risks: Annotated[tuple[Risk, ...], BeforeValidator(_record_items)] = ()


class BusinessPlan(EvaluationModel):
    revenue_model: Narrative = None
    go_to_market: Narrative = Field(
        default=None,
        validation_alias=AliasChoices('goToMarket', 'goToMarketStrategy', 'go_to_market'),
    )
    milestones: StringList = Field(
        default=(),
        validation_alias=AliasChoices('milestones', 'keyMilestones'),
    )
    resources_needed: StringList = ()


class LaunchStrategy(EvaluationModel):
    mvp_features: StringList = ()
    time_to_market: Narrative = None
    market_entry_approach: Narrative = None
    critical_resources: StringList = ()
    launch_checklist: StringList = ()


class RoadmapPhase(EvaluationModel):
    timeframe: Narrative = None
    tasks: StringList = ()
    metrics: StringList = ()


class ImplementationRoadmap(EvaluationModel):
    phases: Annotated[tuple[RoadmapPhase, ...], BeforeValidator(_record_items)] = ()


class CustomerAcquisition(EvaluationModel):
    primary_channels: StringList = ()
    acquisition_cost: Narrative = Field(
        default=None,
        validation_alias=AliasChoices('acquisitionCost', 'costPerAcquisition', 'acquisition_cost'),
    )
    conversion_strategy: Narrative = None
    retention_tactics: StringList = ()
    growth_opportunities: Narrative = None


class RevenueGeneration(EvaluationModel):
    business_models: StringList = ()
    pricing_strategy: Narrative = None
    revenue_streams: StringList = ()
    unit_economics: Narrative = None
    scaling_potential: Narrative = None


class BootstrappingGuide(EvaluationModel):
    cost_minimization_tips: StringList = ()
    diy_solutions: Narrative = None
    growth_without_funding: Narrative = None
    time_management: Narrative = None
    milestones_on_budget: StringList = ()


class AdjacentIdeas(EvaluationModel):
    complementary_products: StringList = ()
    pivot_possibilities: StringList = ()
    expansion_opportunities: StringList = ()
    strategic_recommendations: Narrative = None


class EvaluationReport(EvaluationModel):
    """Read-only evaluation record; malformed optional parts parse as absent."""

    fit_score: Score = None
    fit_score_explanation: Narrative = None
    market_fit: Annotated[MarketFit | None, BeforeValidator(_record_or_none)] = Field(
        default=None,
        validation_alias=AliasChoices('marketFit', 'marketFitAnalysis', 'market_fit'),
    )
    value_proposition: Narrative = None
    target_audience: Annotated[TargetAudience | None, BeforeValidator(_record_or_none)] = None
    technical_feasibility: Narrative = None
    regulatory_considerations: Narrative = None
    competitive_landscape: Annotated[CompetitiveLandscape | None, BeforeValidator(_record_or_none)] = None
    risk_assessment: Annotated[RiskAssessment | None, BeforeValidator(_record_or_none)] = None
    business_plan: Annotated[BusinessPlan | None, BeforeValidator(_record_or_none)] = None
    launch_strategy: Annotated[LaunchStrategy | None, BeforeValidator(_record_or_none)] = None
    implementation_roadmap: Annotated[ImplementationRoadmap | None, BeforeValidator(_record_or_none)] = None
    customer_acquisition: Annotated[CustomerAcquisition | None, BeforeValidator(_record_or_none)] = None
    revenue_generation: Annotated[RevenueGeneration | None, BeforeValidator(_record_or_none)] = None
    bootstrapping_guide: Annotated[BootstrappingGuide | None, BeforeValidator(_record_or_none)] = None
    adjacent_ideas: Annotated[AdjacentIdeas | None, BeforeValidator(_record_or_none)] = None

    @classmethod
    def from_payload(cls, payload: Any) -> 'EvaluationReport':
        if isinstance(payload, EvaluationReport):
            return payload
        if not isinstance(payload, dict):
            raise ValueError(f'evaluation payload must be a JSON object, got {type(payload).__name__}')

        nested = payload.get('evaluation')
        if isinstance(nested, dict):
            merged = dict(nested)
            for key in ('fitScore', 'fitScoreExplanation'):
                if merged.get(key) is None and payload.get(key) is not None:
                    merged[key] = payload[key]
            payload = merged
        return cls.model_validate(payload)
