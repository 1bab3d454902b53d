from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from .drawing import LayoutError

if TYPE_CHECKING:
    from vibecheck.config import Settings


# Layout units are millimetres; font sizes stay in points.
PT_MM = 25.4 / 72.0

PAGE_SIZES_MM: dict[str, tuple[float, float]] = {
    'a4': (210.0, 297.0),
    'letter': (215.9, 279.4),
    'legal': (215.9, 355.6),
}

_FONT_VARIANTS: dict[str, dict[str, str]] = {
    'helvetica': {
        'normal': 'Helvetica',
        'bold': 'Helvetica-Bold',
        'italic': 'Helvetica-Oblique',
    },
    'times': {
        'normal': 'Times-Roman',
        'bold': 'Times-Bold',
        'italic': 'Times-Italic',
    },
    'courier': {
        'normal': 'Courier',
        'bold': 'Courier-Bold',
        'italic': 'Courier-Oblique',
    },
}

# reportlab CID font used for lines carrying CJK text
CJK_FALLBACK_FONT = 'STSong-Light'

_CJK_RANGES = (
    (0x3000, 0x303F),
    (0x3040, 0x30FF),
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xAC00, 0xD7AF),
    (0xF900, 0xFAFF),
    (0xFF00, 0xFFEF),
)


def contains_cjk(text: str) -> bool:
    for ch in str(text or ''):
        code = ord(ch)
        for start, end in _CJK_RANGES:
            if start <= code <= end:
                return True
    return False


# name -> (point size, weight, colour)
_TEXT_STYLE_SPECS: dict[str, tuple[float, str, str]] = {
    'document_title': (24.0, 'bold', '#212121'),
    'meta': (10.0, 'normal', '#646464'),
    'score': (16.0, 'bold', '#4682B4'),
    'section_title': (16.0, 'bold', '#0066CC'),
    'panel_title': (13.0, 'bold', '#333333'),
    'heading': (13.0, 'bold', '#333333'),
    'body': (11.0, 'normal', '#3C3C3C'),
    'quote': (11.0, 'italic', '#464646'),
    'small': (10.0, 'normal', '#3C3C3C'),
    'label': (10.0, 'bold', '#000000'),
    'card_title': (13.0, 'bold', '#004678'),
    'tag': (9.0, 'normal', '#646464'),
    'caption': (9.0, 'normal', '#787878'),
}


@dataclass(frozen=True)
class TextStyle:
    font_name: str
    font_size: float
    color: str = '#3C3C3C'
    leading: float = 1.45
    cjk_font_name: str = CJK_FALLBACK_FONT

    def font_for(self, text: str) -> str:
        """Font used to measure and draw ``text``; one font per line."""
        if self.cjk_font_name and contains_cjk(text):
            return self.cjk_font_name
        return self.font_name

    @property
    def line_height(self) -> float:
        return self.font_size * self.leading * PT_MM

    @property
    def ascent(self) -> float:
        # Baseline offset from the top of a line box.
        return self.font_size * 0.8 * PT_MM + (self.line_height - self.font_size * PT_MM) / 2.0

    def with_color(self, color: str) -> 'TextStyle':
        return replace(self, color=color)


@dataclass(frozen=True)
class PanelPalette:
    fill: str | None
    border: str | None
    title: str
    accent: str | None = None


_DEFAULT_PALETTES: dict[str, PanelPalette] = {
    'affirmative': PanelPalette(fill='#F0FFF0', border='#C8E6C9', title='#2E7D32'),
    'cautionary': PanelPalette(fill='#FFF8F0', border='#FFE0B2', title='#D32F2F'),
    'risk': PanelPalette(fill='#FFF6F5', border='#F5DCDC', title='#D32F2F'),
    'quote': PanelPalette(fill='#F8F8FF', border='#C8C8C8', title='#333333', accent='#7896B4'),
    'section': PanelPalette(fill='#F5FAFF', border=None, title='#0066CC'),
    'score': PanelPalette(fill='#F0F8FF', border='#4682B4', title='#4682B4'),
    'competitor': PanelPalette(fill='#F5F5FA', border='#DCDCE6', title='#004678'),
    'roadmap': PanelPalette(fill='#F5FAFF', border='#B4C8E6', title='#0066CC'),
    'neutral': PanelPalette(fill='#FAFAFA', border='#E0E0E0', title='#333333'),
}


def font_variant(family: str, weight: str = 'normal') -> str:
    variants = _FONT_VARIANTS.get(str(family or '').strip().lower())
    if variants is None:
        variants = _FONT_VARIANTS['helvetica']
    return variants.get(weight, variants['normal'])


def page_size_mm(name: str, orientation: str = 'portrait') -> tuple[float, float]:
    token = str(name or '').strip().lower()
    if token not in PAGE_SIZES_MM:
        raise LayoutError(f'unknown page size: {name!r}')
    width, height = PAGE_SIZES_MM[token]
    if str(orientation or '').strip().lower() == 'landscape':
        return height, width
    return width, height


@dataclass(frozen=True)
class Theme:
    """Immutable styling and geometry for one report layout."""

    page_width: float = 210.0
    page_height: float = 297.0
    margin_left: float = 20.0
    margin_right: float = 20.0
    margin_top: float = 20.0
    margin_bottom: float = 22.0

    font_family: str = 'Helvetica'
    cjk_font: str = CJK_FALLBACK_FONT
    leading: float = 1.45

    palettes: Mapping[str, PanelPalette] = field(
        default_factory=lambda: MappingProxyType(dict(_DEFAULT_PALETTES))
    )
    divider_color: str = '#DCDCDC'
    timeline_color: str = '#4682B4'
    timeline_line_color: str = '#B4C8E6'
    checkbox_color: str = '#969696'

    block_spacing: float = 4.0
    section_spacing: float = 8.0
    item_spacing: float = 1.5
    keep_with_next: float = 20.0
    panel_padding: float = 5.0
    panel_radius: float = 2.0
    column_gutter: float = 8.0
    list_indent: float = 5.0
    divider_height: float = 6.0
    timeline_marker_radius: float = 1.6

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    def validate(self) -> None:
        if self.content_width <= 0:
            raise LayoutError(f'page content width must be positive, got {self.content_width:.2f}')
        if self.content_height <= 0:
            raise LayoutError(f'page content height must be positive, got {self.content_height:.2f}')

    def style(self, name: str) -> TextStyle:
        size, weight, color = _TEXT_STYLE_SPECS[name]
        return TextStyle(
            font_name=font_variant(self.font_family, weight),
            font_size=size,
            color=color,
            leading=self.leading,
            cjk_font_name=self.cjk_font,
        )

    def palette(self, kind: str) -> PanelPalette:
        return self.palettes.get(kind) or self.palettes.get('neutral') or _DEFAULT_PALETTES['neutral']

    @classmethod
    def from_settings(cls, settings: 'Settings') -> 'Theme':
        width, height = page_size_mm(settings.pdf_page_size, settings.pdf_orientation)
        margin = float(settings.pdf_margin_mm)
        return cls(
            page_width=width,
            page_height=height,
            margin_left=margin,
            margin_right=margin,
            margin_top=margin,
            margin_bottom=float(settings.pdf_bottom_margin_mm),
            font_family=settings.pdf_font_family,
            cjk_font=settings.pdf_cjk_font,
        )
