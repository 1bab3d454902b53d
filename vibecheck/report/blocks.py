from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from .drawing import CircleShape, DrawInstruction, LayoutError, LineShape, RectShape, TextRun
from .text_measure import TextMeasurement, TextMeasurer
from .theme import PanelPalette, TextStyle


@dataclass(frozen=True, eq=False)
class Measurement:
    """Result of ``Block.measure``; the only way to get a block drawn."""

    block: 'Block'
    width: float
    height: float
    payload: Any = None

    def place(self, x: float, y: float) -> list[DrawInstruction]:
        return self.block.place(self, x, y)


class Block(ABC):
    kind = 'block'

    def measure(self, width: float) -> Measurement:
        if width <= 0:
            raise LayoutError(f'{self.kind} block needs a positive width, got {width}')
        height, payload = self._layout(float(width))
        return Measurement(block=self, width=float(width), height=max(0.0, height), payload=payload)

    def place(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        if not isinstance(measurement, Measurement) or measurement.block is not self:
            raise LayoutError(f'{self.kind} block can only be placed with its own measurement')
        return self._render(measurement, float(x), float(y))

    @abstractmethod
    def _layout(self, width: float) -> tuple[float, Any]:
        ...

    @abstractmethod
    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        ...


def _text_runs(lines: Sequence[str], style: TextStyle, x: float, y: float) -> list[DrawInstruction]:
    runs: list[DrawInstruction] = []
    for index, line in enumerate(lines):
        runs.append(
            TextRun(
                x=x,
                y=y + index * style.line_height + style.ascent,
                text=line,
                font_name=style.font_for(line),
                font_size=style.font_size,
                color=style.color,
            )
        )
    return runs


def _stacked_height(heights: Sequence[float], spacing: float) -> float:
    if not heights:
        return 0.0
    return sum(heights) + spacing * (len(heights) - 1)


class Spacer(Block):
    kind = 'spacer'

    def __init__(self, height: float):
        self.height = max(0.0, float(height))

    def _layout(self, width: float) -> tuple[float, Any]:
        return self.height, None

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        return []


class Paragraph(Block):
    """Wrapped text with an optional marker glyph or checkbox in a hanging indent."""

    kind = 'paragraph'

    def __init__(
        self,
        text: str,
        style: TextStyle,
        measurer: TextMeasurer,
        *,
        marker: str | None = None,
        checkbox: bool = False,
        indent: float = 0.0,
        quoted: bool = False,
        checkbox_color: str = '#969696',
    ):
        self.text = f'"{text}"' if quoted and text else text
        self.style = style
        self.measurer = measurer
        self.marker = marker
        self.checkbox = checkbox
        self.indent = max(0.0, float(indent))
        self.checkbox_color = checkbox_color

    def _layout(self, width: float) -> tuple[float, Any]:
        measured = self.measurer.measure(self.text, self.style, width - self.indent)
        return measured.height, measured

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        measured: TextMeasurement = measurement.payload
        if not measured.lines:
            return []

        instructions: list[DrawInstruction] = []
        if self.checkbox:
            box = min(3.0, measured.line_height * 0.7)
            instructions.append(
                RectShape(
                    x=x,
                    y=y + (measured.line_height - box) / 2.0,
                    width=box,
                    height=box,
                    stroke=self.checkbox_color,
                    line_width=0.3,
                )
            )
        elif self.marker:
            instructions.extend(_text_runs([self.marker], self.style, x, y))
        instructions.extend(_text_runs(measured.lines, self.style, x + self.indent, y))
        return instructions


class BulletList(Block):
    kind = 'list'

    MARKERS = ('bullet', 'number', 'checkbox')

    def __init__(
        self,
        items: Sequence[str],
        style: TextStyle,
        measurer: TextMeasurer,
        *,
        marker: str = 'bullet',
        indent: float = 5.0,
        item_spacing: float = 1.5,
        checkbox_color: str = '#969696',
    ):
        if marker not in self.MARKERS:
            raise LayoutError(f'unknown list marker: {marker!r}')
        self.item_spacing = max(0.0, float(item_spacing))
        self.items: list[Paragraph] = []
        for index, item in enumerate(items, start=1):
            glyph = None
            if marker == 'bullet':
                glyph = '•'
            elif marker == 'number':
                glyph = f'{index}.'
            self.items.append(
                Paragraph(
                    item,
                    style,
                    measurer,
                    marker=glyph,
                    checkbox=marker == 'checkbox',
                    indent=indent,
                    checkbox_color=checkbox_color,
                )
            )

    def _layout(self, width: float) -> tuple[float, Any]:
        measured = [item.measure(width) for item in self.items]
        return _stacked_height([m.height for m in measured], self.item_spacing), measured

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        instructions: list[DrawInstruction] = []
        cursor_y = y
        for item in measurement.payload:
            instructions.extend(item.place(x, cursor_y))
            cursor_y += item.height + self.item_spacing
        return instructions


class Stack(Block):
    kind = 'stack'

    def __init__(self, blocks: Sequence[Block], spacing: float = 0.0):
        self.blocks = list(blocks)
        self.spacing = max(0.0, float(spacing))

    def _layout(self, width: float) -> tuple[float, Any]:
        measured = [block.measure(width) for block in self.blocks]
        return _stacked_height([m.height for m in measured], self.spacing), measured

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        instructions: list[DrawInstruction] = []
        cursor_y = y
        for child in measurement.payload:
            instructions.extend(child.place(x, cursor_y))
            cursor_y += child.height + self.spacing
        return instructions


@dataclass(frozen=True)
class _PanelLayout:
    title: TextMeasurement | None
    title_gap: float
    inner: Measurement | None
    inset: float


class Panel(Block):
    """Filled, bordered container with an optional header and accent bar."""

    kind = 'panel'

    ACCENT_WIDTH = 4.0
    TITLE_GAP = 2.0

    def __init__(
        self,
        inner: Block | None,
        palette: PanelPalette,
        *,
        title: str | None = None,
        title_style: TextStyle | None = None,
        measurer: TextMeasurer | None = None,
        padding: float = 5.0,
        radius: float = 2.0,
        accent_bar: bool = False,
    ):
        if title and (title_style is None or measurer is None):
            raise LayoutError('a titled panel needs a title style and a measurer')
        self.inner = inner
        self.palette = palette
        self.title = title
        self.title_style = title_style.with_color(palette.title) if title_style else None
        self.measurer = measurer
        self.padding = max(0.0, float(padding))
        self.radius = max(0.0, float(radius))
        self.accent_bar = accent_bar and palette.accent is not None

    def _layout(self, width: float) -> tuple[float, Any]:
        inset = self.padding + (self.ACCENT_WIDTH if self.accent_bar else 0.0)
        inner_width = width - inset - self.padding

        title = None
        if self.title:
            title = self.measurer.measure(self.title, self.title_style, inner_width)
        inner = self.inner.measure(inner_width) if self.inner is not None else None
        title_gap = self.TITLE_GAP if title is not None and inner is not None else 0.0

        height = self.padding * 2
        height += title.height if title is not None else 0.0
        height += title_gap
        height += inner.height if inner is not None else 0.0
        return height, _PanelLayout(title=title, title_gap=title_gap, inner=inner, inset=inset)

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        layout: _PanelLayout = measurement.payload
        instructions: list[DrawInstruction] = [
            RectShape(
                x=x,
                y=y,
                width=measurement.width,
                height=measurement.height,
                fill=self.palette.fill,
                stroke=self.palette.border,
                line_width=0.3,
                radius=self.radius,
            )
        ]
        if self.accent_bar:
            bar_x = x + self.padding + 1.0
            instructions.append(
                LineShape(
                    x1=bar_x,
                    y1=y + self.padding,
                    x2=bar_x,
                    y2=y + measurement.height - self.padding,
                    color=self.palette.accent,
                    line_width=1.2,
                )
            )

        cursor_y = y + self.padding
        content_x = x + layout.inset
        if layout.title is not None:
            instructions.extend(_text_runs(layout.title.lines, self.title_style, content_x, cursor_y))
            cursor_y += layout.title.height + layout.title_gap
        if layout.inner is not None:
            instructions.extend(layout.inner.place(content_x, cursor_y))
        return instructions


@dataclass(frozen=True)
class _CardHeader:
    title: TextMeasurement
    tag: TextMeasurement | None
    tag_inline_x: float | None
    height: float


class Card(Block):
    """Panel around a title line (with optional tag) and a stack of sub-blocks.

    Every sub-block is measured before the frame is drawn, so the border
    always encloses the full body.
    """

    kind = 'card'

    TAG_GAP = 3.0
    HEADER_GAP = 2.0

    def __init__(
        self,
        title: str,
        body: Sequence[Block],
        palette: PanelPalette,
        *,
        title_style: TextStyle,
        measurer: TextMeasurer,
        tag: str | None = None,
        tag_style: TextStyle | None = None,
        padding: float = 5.0,
        radius: float = 3.0,
        spacing: float = 2.0,
    ):
        if tag and tag_style is None:
            raise LayoutError('a tagged card needs a tag style')
        self.title = title
        self.body = Stack(body, spacing=spacing) if body else None
        self.palette = palette
        self.title_style = title_style.with_color(palette.title)
        self.tag = tag
        self.tag_style = tag_style
        self.measurer = measurer
        self.padding = max(0.0, float(padding))
        self.radius = max(0.0, float(radius))

    def _measure_header(self, inner_width: float) -> _CardHeader:
        title = self.measurer.measure(self.title, self.title_style, inner_width)
        if not self.tag:
            return _CardHeader(title=title, tag=None, tag_inline_x=None, height=title.height)

        tag_text = f'({self.tag})'
        tag = self.measurer.measure(tag_text, self.tag_style, inner_width)
        last_line = title.lines[-1] if title.lines else ''
        used = self.measurer.text_width(last_line, self.title_style) if last_line else 0.0
        tag_width = self.measurer.text_width(tag_text, self.tag_style)
        if title.lines and tag.line_count == 1 and used + self.TAG_GAP + tag_width <= inner_width:
            return _CardHeader(title=title, tag=tag, tag_inline_x=used + self.TAG_GAP, height=title.height)
        return _CardHeader(title=title, tag=tag, tag_inline_x=None, height=title.height + tag.height)

    def _layout(self, width: float) -> tuple[float, Any]:
        inner_width = width - 2 * self.padding
        header = self._measure_header(inner_width)
        body = self.body.measure(inner_width) if self.body is not None else None

        height = self.padding * 2 + header.height
        if body is not None and body.height > 0:
            height += self.HEADER_GAP + body.height
        return height, (header, body)

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        header, body = measurement.payload
        instructions: list[DrawInstruction] = [
            RectShape(
                x=x,
                y=y,
                width=measurement.width,
                height=measurement.height,
                fill=self.palette.fill,
                stroke=self.palette.border,
                line_width=0.3,
                radius=self.radius,
            )
        ]

        content_x = x + self.padding
        cursor_y = y + self.padding
        instructions.extend(_text_runs(header.title.lines, self.title_style, content_x, cursor_y))
        if header.tag is not None:
            if header.tag_inline_x is not None:
                last_top = cursor_y + (header.title.line_count - 1) * header.title.line_height
                # share the title baseline
                tag_y = last_top + self.title_style.ascent - self.tag_style.ascent
                instructions.extend(
                    _text_runs(header.tag.lines, self.tag_style, content_x + header.tag_inline_x, tag_y)
                )
            else:
                instructions.extend(
                    _text_runs(header.tag.lines, self.tag_style, content_x, cursor_y + header.title.height)
                )
        cursor_y += header.height

        if body is not None and body.height > 0:
            instructions.extend(body.place(content_x, cursor_y + self.HEADER_GAP))
        return instructions


class TwoColumn(Block):
    """Side-by-side halves; the block is as tall as the taller column."""

    kind = 'two-column'

    def __init__(self, left: Block | None, right: Block | None, *, gutter: float = 8.0):
        self.left = left
        self.right = right
        self.gutter = max(0.0, float(gutter))

    def column_width(self, width: float) -> float:
        column = (width - self.gutter) / 2.0
        if column <= 0:
            raise LayoutError(f'two-column block is too narrow: {width}')
        return column

    def _layout(self, width: float) -> tuple[float, Any]:
        column = self.column_width(width)
        left = self.left.measure(column) if self.left is not None else None
        right = self.right.measure(column) if self.right is not None else None
        height = max(
            left.height if left is not None else 0.0,
            right.height if right is not None else 0.0,
        )
        return height, (column, left, right)

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        column, left, right = measurement.payload
        instructions: list[DrawInstruction] = []
        if left is not None:
            instructions.extend(left.place(x, y))
        if right is not None:
            instructions.extend(right.place(x + column + self.gutter, y))
        return instructions


class Timeline(Block):
    """Numbered items joined by a vertical line with a circle marker per item."""

    kind = 'timeline'

    def __init__(
        self,
        items: Sequence[str],
        style: TextStyle,
        measurer: TextMeasurer,
        *,
        marker_color: str = '#4682B4',
        line_color: str = '#B4C8E6',
        marker_radius: float = 1.6,
        indent: float = 10.0,
        item_spacing: float = 3.0,
        numbered: bool = True,
    ):
        self.style = style
        self.marker_color = marker_color
        self.line_color = line_color
        self.marker_radius = max(0.5, float(marker_radius))
        self.item_spacing = max(0.0, float(item_spacing))
        self.items = [
            Paragraph(f'{index}. {item}' if numbered else item, style, measurer, indent=indent)
            for index, item in enumerate(items, start=1)
        ]

    def _layout(self, width: float) -> tuple[float, Any]:
        measured = [item.measure(width) for item in self.items]
        return _stacked_height([m.height for m in measured], self.item_spacing), measured

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        measured: list[Measurement] = measurement.payload
        if not measured:
            return []

        marker_x = x + self.marker_radius + 1.0
        centers: list[float] = []
        cursor_y = y
        for item in measured:
            centers.append(cursor_y + self.style.line_height / 2.0)
            cursor_y += item.height + self.item_spacing

        instructions: list[DrawInstruction] = []
        if len(centers) > 1:
            instructions.append(
                LineShape(
                    x1=marker_x,
                    y1=centers[0],
                    x2=marker_x,
                    y2=centers[-1],
                    color=self.line_color,
                    line_width=0.8,
                )
            )
        cursor_y = y
        for item, center in zip(measured, centers):
            instructions.append(
                CircleShape(cx=marker_x, cy=center, radius=self.marker_radius, fill=self.marker_color)
            )
            instructions.extend(item.place(x, cursor_y))
            cursor_y += item.height + self.item_spacing
        return instructions


class Divider(Block):
    kind = 'divider'

    def __init__(self, color: str = '#DCDCDC', *, height: float = 6.0, line_width: float = 0.3):
        self.color = color
        self.height = max(0.0, float(height))
        self.line_width = line_width

    def _layout(self, width: float) -> tuple[float, Any]:
        return self.height, None

    def _render(self, measurement: Measurement, x: float, y: float) -> list[DrawInstruction]:
        middle = y + measurement.height / 2.0
        return [
            LineShape(
                x1=x,
                y1=middle,
                x2=x + measurement.width,
                y2=middle,
                color=self.color,
                line_width=self.line_width,
            )
        ]
