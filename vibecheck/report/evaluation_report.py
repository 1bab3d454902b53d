from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Sequence

from vibecheck.types import (
    AdjacentIdeas,
    BootstrappingGuide,
    BusinessPlan,
    CompetitiveLandscape,
    Competitor,
    CustomerAcquisition,
    EvaluationReport,
    ImplementationRoadmap,
    LaunchStrategy,
    MarketFit,
    RevenueGeneration,
    Risk,
    RiskAssessment,
    RoadmapPhase,
    TargetAudience,
)

from .blocks import Block, BulletList, Card, Divider, Panel, Paragraph, Stack, Timeline, TwoColumn
from .drawing import LayoutError, LineShape, Page, RenderedDocument, TextRun
from .page_cursor import PageController
from .sections import SectionRenderer
from .text_measure import TextMeasurer, flatten_inline_markdown
from .theme import Theme


logger = logging.getLogger(__name__)

ATTRIBUTION_LINES = (
    'Generated by Vibe Check - AI-powered business evaluation tool',
    'This evaluation is for informational purposes only and should not replace professional business advice.',
)
FOOTER_LABEL = 'Vibe Check Report'


def _clean(value: str | None) -> str:
    return flatten_inline_markdown(value) if value else ''


def _clean_items(values: Iterable[str]) -> list[str]:
    items: list[str] = []
    for value in values:
        text = _clean(value)
        if text:
            items.append(text)
    return items


def _format_score(score: float) -> str:
    if float(score).is_integer():
        return str(int(score))
    return f'{score:.1f}'


class ReportBlocks:
    """Builds themed block primitives for the evaluation sections."""

    def __init__(self, theme: Theme, measurer: TextMeasurer):
        self.theme = theme
        self.measurer = measurer

    def paragraph(self, text: str, style: str = 'body', *, indent: float = 0.0, color: str | None = None) -> Paragraph:
        text_style = self.theme.style(style)
        if color:
            text_style = text_style.with_color(color)
        return Paragraph(text, text_style, self.measurer, indent=indent)

    def bullets(self, items: Sequence[str], *, marker: str = 'bullet', style: str = 'body') -> BulletList:
        return BulletList(
            items,
            self.theme.style(style),
            self.measurer,
            marker=marker,
            indent=self.theme.list_indent,
            item_spacing=self.theme.item_spacing,
            checkbox_color=self.theme.checkbox_color,
        )

    def timeline(self, items: Sequence[str]) -> Timeline:
        return Timeline(
            items,
            self.theme.style('body'),
            self.measurer,
            marker_color=self.theme.timeline_color,
            line_color=self.theme.timeline_line_color,
            marker_radius=self.theme.timeline_marker_radius,
            item_spacing=self.theme.item_spacing * 2,
        )

    def titled(self, heading: str, body: Block) -> Block:
        # heading and body travel together so a heading never ends a page
        return Stack([self.paragraph(heading, 'heading'), body], spacing=self.theme.item_spacing)

    def titled_text(self, heading: str, text: str | None) -> Block | None:
        cleaned = _clean(text)
        if not cleaned:
            return None
        return self.titled(heading, self.paragraph(cleaned, indent=self.theme.list_indent))

    def titled_list(self, heading: str, items: Sequence[str], *, marker: str = 'bullet') -> Block | None:
        cleaned = _clean_items(items)
        if not cleaned:
            return None
        return self.titled(heading, self.bullets(cleaned, marker=marker))

    def titled_timeline(self, heading: str, items: Sequence[str]) -> Block | None:
        cleaned = _clean_items(items)
        if not cleaned:
            return None
        return self.titled(heading, self.timeline(cleaned))

    def list_panel(self, title: str, items: Sequence[str], kind: str) -> Block | None:
        cleaned = _clean_items(items)
        if not cleaned:
            return None
        return Panel(
            self.bullets(cleaned),
            self.theme.palette(kind),
            title=title,
            title_style=self.theme.style('panel_title'),
            measurer=self.measurer,
            padding=self.theme.panel_padding,
            radius=self.theme.panel_radius,
        )

    def quote_panel(self, text: str | None) -> Block | None:
        cleaned = _clean(text)
        if not cleaned:
            return None
        quote = Paragraph(cleaned, self.theme.style('quote'), self.measurer, quoted=True)
        return Panel(
            quote,
            self.theme.palette('quote'),
            padding=self.theme.panel_padding,
            radius=self.theme.panel_radius,
            accent_bar=True,
        )

    def labeled_text(self, label: str, text: str | None, *, color: str | None = None) -> Block | None:
        cleaned = _clean(text)
        if not cleaned:
            return None
        return Stack(
            [
                self.paragraph(label, 'label', color=color),
                self.paragraph(cleaned, 'small', indent=self.theme.list_indent),
            ],
            spacing=0.5,
        )

    def labeled_list(self, label: str, items: Sequence[str], *, color: str | None = None) -> Block | None:
        cleaned = _clean_items(items)
        if not cleaned:
            return None
        return Stack(
            [self.paragraph(label, 'label', color=color), self.bullets(cleaned, style='small')],
            spacing=0.5,
        )

    def card(self, title: str, body: Sequence[Block | None], kind: str, *, tag: str | None = None) -> Card:
        return Card(
            title,
            [block for block in body if block is not None],
            self.theme.palette(kind),
            title_style=self.theme.style('card_title'),
            tag_style=self.theme.style('tag'),
            measurer=self.measurer,
            tag=tag,
            padding=self.theme.panel_padding,
            radius=self.theme.panel_radius + 1.0,
        )

    def columns(self, left: Block | None, right: Block | None) -> Block | None:
        if left is None and right is None:
            return None
        return TwoColumn(left, right, gutter=self.theme.column_gutter)


def _present(blocks: Iterable[Block | None]) -> list[Block]:
    return [block for block in blocks if block is not None]


def market_fit_blocks(f: ReportBlocks, section: MarketFit) -> list[Block]:
    return _present(
        [
            f.list_panel('Strengths', section.strengths, 'affirmative'),
            f.list_panel('Areas for Improvement', section.weaknesses, 'cautionary'),
            f.titled_text('Market Demand Potential', section.demand_potential),
        ]
    )


def target_audience_blocks(f: ReportBlocks, section: TargetAudience) -> list[Block]:
    return _present(
        [
            f.titled_text('Demographics', section.demographic),
            f.titled_text('Psychographics', section.psychographic),
        ]
    )


def _competitor_card(f: ReportBlocks, competitor: Competitor) -> Block | None:
    affirmative = f.theme.palette('affirmative').title
    cautionary = f.theme.palette('cautionary').title
    body = [
        f.paragraph(_clean(competitor.differentiation), 'small') if _clean(competitor.differentiation) else None,
        f.columns(
            f.labeled_list('Strengths:', competitor.strengths, color=affirmative),
            f.labeled_list('Weaknesses:', competitor.weaknesses, color=cautionary),
        ),
        f.labeled_text('Pricing Strategy:', competitor.pricing_strategy),
    ]
    name = _clean(competitor.name)
    if not name and not any(block is not None for block in body):
        return None
    return f.card(name or 'Competitor', body, 'competitor', tag=_clean(competitor.market_position) or None)


def competitive_landscape_blocks(f: ReportBlocks, section: CompetitiveLandscape) -> list[Block]:
    blocks = [
        f.titled_text('Market Positioning', section.market_positioning),
        f.titled_list('Competitive Advantages', section.competitive_advantages),
        f.titled_text('Differentiation Strategy', section.differentiation_strategy),
    ]
    blocks.extend(_competitor_card(f, competitor) for competitor in section.competitors)
    return _present(blocks)


def _risk_card(f: ReportBlocks, risk: Risk) -> Block | None:
    description = _clean(risk.description)
    body = [
        f.paragraph(description) if description else None,
        f.labeled_text('Mitigation Strategy:', risk.mitigation, color=f.theme.palette('affirmative').title),
    ]
    title = _clean(risk.type)
    if not title and not any(block is not None for block in body):
        return None
    return f.card(title or 'Risk', body, 'risk')


def risk_assessment_blocks(f: ReportBlocks, section: RiskAssessment) -> list[Block]:
    return _present(_risk_card(f, risk) for risk in section.risks)


def business_plan_blocks(f: ReportBlocks, section: BusinessPlan) -> list[Block]:
    return _present(
        [
            f.titled_text('Revenue Model', section.revenue_model),
            f.titled_text('Go-To-Market Strategy', section.go_to_market),
            f.titled_timeline('Key Milestones', section.milestones),
            f.titled_list('Resources Needed', section.resources_needed),
        ]
    )


def _roadmap_card(f: ReportBlocks, phase: RoadmapPhase) -> Block | None:
    body = [
        f.labeled_list('Tasks:', phase.tasks),
        f.labeled_list('Success Metrics:', phase.metrics),
    ]
    timeframe = _clean(phase.timeframe)
    if not timeframe and not any(block is not None for block in body):
        return None
    return f.card(f'Phase: {timeframe}' if timeframe else 'Phase', body, 'roadmap')


def launch_strategy_blocks(
    f: ReportBlocks,
    section: LaunchStrategy | None,
    roadmap: ImplementationRoadmap | None,
) -> list[Block]:
    blocks: list[Block | None] = []
    if section is not None:
        blocks.extend(
            [
                f.titled_list('MVP Features', section.mvp_features, marker='checkbox'),
                f.titled_text('Time to Market', section.time_to_market),
                f.titled_text('Market Entry Approach', section.market_entry_approach),
                f.titled_list('Critical Resources', section.critical_resources),
                f.titled_list('Launch Checklist', section.launch_checklist, marker='checkbox'),
            ]
        )
    if roadmap is not None:
        cards = _present(_roadmap_card(f, phase) for phase in roadmap.phases)
        if cards:
            blocks.append(f.titled('Implementation Roadmap', cards[0]))
            blocks.extend(cards[1:])
    return _present(blocks)


def customer_acquisition_blocks(f: ReportBlocks, section: CustomerAcquisition) -> list[Block]:
    return _present(
        [
            f.titled_list('Primary Acquisition Channels', section.primary_channels),
            f.titled_text('Customer Acquisition Cost', section.acquisition_cost),
            f.titled_text('Conversion Strategy', section.conversion_strategy),
            f.titled_list('Retention Tactics', section.retention_tactics),
            f.titled_text('Growth Opportunities', section.growth_opportunities),
        ]
    )


def revenue_generation_blocks(f: ReportBlocks, section: RevenueGeneration) -> list[Block]:
    return _present(
        [
            f.titled_list('Business Models', section.business_models),
            f.titled_text('Pricing Strategy', section.pricing_strategy),
            f.titled_list('Revenue Streams', section.revenue_streams),
            f.titled_text('Unit Economics', section.unit_economics),
            f.titled_text('Scaling Potential', section.scaling_potential),
        ]
    )


def bootstrapping_guide_blocks(f: ReportBlocks, section: BootstrappingGuide) -> list[Block]:
    return _present(
        [
            f.titled_list('Cost Minimization Tips', section.cost_minimization_tips),
            f.titled_text('DIY Solutions', section.diy_solutions),
            f.titled_text('Growth Without Funding', section.growth_without_funding),
            f.titled_text('Time Management', section.time_management),
            f.titled_timeline('Achievable Milestones on Budget', section.milestones_on_budget),
        ]
    )


def adjacent_ideas_blocks(f: ReportBlocks, section: AdjacentIdeas) -> list[Block]:
    return _present(
        [
            f.columns(
                f.titled_list('Complementary Products', section.complementary_products),
                f.titled_list('Pivot Possibilities', section.pivot_possibilities),
            ),
            f.titled_list('Expansion Opportunities', section.expansion_opportunities),
            f.titled_text('Strategic Recommendations', section.strategic_recommendations),
        ]
    )


def _single(attr: str, build: Callable[[ReportBlocks, Any], list[Block]]) -> Callable[[ReportBlocks, EvaluationReport], list[Block]]:
    def _build(f: ReportBlocks, report: EvaluationReport) -> list[Block]:
        section = getattr(report, attr)
        if section is None:
            return []
        return build(f, section)

    return _build


def _value_proposition(f: ReportBlocks, report: EvaluationReport) -> list[Block]:
    return _present([f.quote_panel(report.value_proposition)])


def technical_feasibility_blocks(f: ReportBlocks, report: EvaluationReport) -> list[Block]:
    assessment = _clean(report.technical_feasibility)
    return _present(
        [
            f.paragraph(assessment, indent=f.theme.list_indent) if assessment else None,
            f.titled_text('Regulatory Considerations', report.regulatory_considerations),
        ]
    )


def _launch_strategy(f: ReportBlocks, report: EvaluationReport) -> list[Block]:
    return launch_strategy_blocks(f, report.launch_strategy, report.implementation_roadmap)


@dataclass(frozen=True)
class SectionEntry:
    key: str
    title: str
    build: Callable[[ReportBlocks, EvaluationReport], list[Block]]


SECTION_ORDER: tuple[SectionEntry, ...] = (
    SectionEntry('market_fit', 'Market Fit Analysis', _single('market_fit', market_fit_blocks)),
    SectionEntry('value_proposition', 'Value Proposition', _value_proposition),
    SectionEntry('target_audience', 'Target Audience', _single('target_audience', target_audience_blocks)),
    SectionEntry('technical_feasibility', 'Technical Feasibility', technical_feasibility_blocks),
    SectionEntry(
        'competitive_landscape',
        'Competitive Landscape',
        _single('competitive_landscape', competitive_landscape_blocks),
    ),
    SectionEntry('risk_assessment', 'Risk Assessment', _single('risk_assessment', risk_assessment_blocks)),
    SectionEntry('business_plan', 'Business Plan', _single('business_plan', business_plan_blocks)),
    SectionEntry('launch_strategy', 'Launch Strategy', _launch_strategy),
    SectionEntry(
        'customer_acquisition',
        'Customer Acquisition',
        _single('customer_acquisition', customer_acquisition_blocks),
    ),
    SectionEntry(
        'revenue_generation',
        'Revenue Generation',
        _single('revenue_generation', revenue_generation_blocks),
    ),
    SectionEntry(
        'bootstrapping_guide',
        'Bootstrapping Guide',
        _single('bootstrapping_guide', bootstrapping_guide_blocks),
    ),
    SectionEntry('adjacent_ideas', 'Adjacent Ideas', _single('adjacent_ideas', adjacent_ideas_blocks)),
)

SECTION_KEYS = tuple(entry.key for entry in SECTION_ORDER)


class DocumentAssembler:
    """Drives one evaluation through the section renderer into pages of draw instructions.

    The assembler itself holds only configuration; every ``render`` call works
    on its own page controller and block tree.
    """

    def __init__(
        self,
        theme: Theme | None = None,
        measurer: TextMeasurer | None = None,
        *,
        title: str = 'Vibe Check Results',
        page_break_before: Iterable[str] = (),
    ):
        self.theme = theme or Theme()
        self.theme.validate()
        self.measurer = measurer or TextMeasurer()
        self.title = title
        self.page_break_before = frozenset(page_break_before)
        unknown = sorted(self.page_break_before - set(SECTION_KEYS))
        if unknown:
            raise LayoutError(f'unknown section keys for page breaks: {", ".join(unknown)}')

    def section_blocks(self, report: EvaluationReport) -> list[tuple[SectionEntry, list[Block]]]:
        factory = ReportBlocks(self.theme, self.measurer)
        present: list[tuple[SectionEntry, list[Block]]] = []
        for entry in SECTION_ORDER:
            blocks = entry.build(factory, report)
            if not blocks:
                logger.debug('Skipping section %s: no content', entry.key)
                continue
            present.append((entry, blocks))
        return present

    def _header_block(self, report: EvaluationReport, generated_on: date | None) -> Block:
        f = ReportBlocks(self.theme, self.measurer)
        parts: list[Block] = [f.paragraph(self.title, 'document_title')]
        if generated_on is not None:
            parts.append(f.paragraph(f'Generated on {generated_on.isoformat()}', 'meta'))

        explanation = _clean(report.fit_score_explanation)
        if report.fit_score is not None or explanation:
            title = (
                f'Vibe Score: {_format_score(report.fit_score)}/100'
                if report.fit_score is not None
                else 'Fit Score Explanation'
            )
            parts.append(
                Panel(
                    f.paragraph(explanation) if explanation else None,
                    self.theme.palette('score'),
                    title=title,
                    title_style=self.theme.style('score'),
                    measurer=self.measurer,
                    padding=self.theme.panel_padding,
                    radius=self.theme.panel_radius + 1.0,
                )
            )
        return Stack(parts, spacing=self.theme.block_spacing)

    def _attribution_block(self) -> Block:
        caption = self.theme.style('caption')
        return Stack(
            [
                Divider(self.theme.divider_color, height=self.theme.divider_height),
                *[Paragraph(line, caption, self.measurer) for line in ATTRIBUTION_LINES],
            ],
            spacing=0.5,
        )

    def _draw_page_footers(self, pages: list[Page]) -> None:
        theme = self.theme
        style = theme.style('caption')
        line_y = theme.page_height - theme.margin_bottom * 0.6
        baseline = theme.page_height - theme.margin_bottom * 0.3
        right = theme.page_width - theme.margin_right
        total = len(pages)
        for page in pages:
            label = f'Page {page.number} of {total}'
            page.extend(
                [
                    LineShape(
                        x1=theme.margin_left,
                        y1=line_y,
                        x2=right,
                        y2=line_y,
                        color=theme.divider_color,
                        line_width=0.3,
                    ),
                    TextRun(
                        x=theme.margin_left,
                        y=baseline,
                        text=FOOTER_LABEL,
                        font_name=style.font_for(FOOTER_LABEL),
                        font_size=style.font_size,
                        color=style.color,
                    ),
                    TextRun(
                        x=right - self.measurer.text_width(label, style),
                        y=baseline,
                        text=label,
                        font_name=style.font_for(label),
                        font_size=style.font_size,
                        color=style.color,
                    ),
                ]
            )

    def render(self, report: EvaluationReport | dict[str, Any], *, generated_on: date | None = None) -> RenderedDocument:
        report = EvaluationReport.from_payload(report)
        controller = PageController(self.theme)
        renderer = SectionRenderer(controller, self.theme, self.measurer)

        renderer.place_block(self._header_block(report, generated_on), label='header')
        controller.skip(self.theme.section_spacing)

        rendered: list[str] = []
        for entry, blocks in self.section_blocks(report):
            renderer.render_section(entry.title, blocks, force_new_page=entry.key in self.page_break_before)
            rendered.append(entry.key)

        renderer.place_block(self._attribution_block(), label='attribution')
        self._draw_page_footers(controller.pages)

        logger.debug('Rendered %d sections on %d pages', len(rendered), len(controller.pages))
        return RenderedDocument(
            title=self.title,
            page_width=self.theme.page_width,
            page_height=self.theme.page_height,
            pages=controller.pages,
            sections=rendered,
            placements=list(controller.placements),
        )
