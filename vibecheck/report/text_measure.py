from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from markdown_it import MarkdownIt
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont

from .drawing import LayoutError
from .theme import PT_MM, TextStyle, contains_cjk


logger = logging.getLogger(__name__)

# (text, font name, font size in points) -> width in millimetres
WidthFunction = Callable[[str, str, float], float]

_MARKDOWN_PARSER: MarkdownIt | None = None
_BLANK_RUN_RE = re.compile(r'[ \t\f\v]+')

# CID fonts reportlab ships metrics for; registered on first use
_CID_FONTS = frozenset({'STSong-Light', 'MSung-Light', 'HeiseiMin-W3', 'HeiseiKakuGo-W5', 'HYSMyeongJo-Medium'})


@dataclass(frozen=True)
class TextMeasurement:
    lines: tuple[str, ...]
    height: float
    line_height: float

    @property
    def line_count(self) -> int:
        return len(self.lines)


def _estimate_width_points(text: str, font_size: float) -> float:
    width = 0.0
    for char in text:
        if char.isspace():
            width += font_size * 0.28
            continue
        if ord(char) > 127:
            width += font_size * 0.98
            continue
        width += font_size * 0.56
    return width


def ensure_font_registered(font_name: str) -> bool:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return True
    if font_name not in _CID_FONTS:
        return False
    try:
        pdfmetrics.registerFont(UnicodeCIDFont(font_name))
    except Exception as exc:
        logger.warning('Failed to register CID font %s: %s', font_name, exc)
        return False
    return True


def reportlab_text_width(text: str, font_name: str, font_size: float) -> float:
    if not text:
        return 0.0
    size = max(1.0, float(font_size))
    ensure_font_registered(font_name)
    try:
        points = float(pdfmetrics.stringWidth(text, font_name, size))
    except Exception as exc:
        logger.debug('Falling back to estimated width for font %s: %s', font_name, exc)
        points = _estimate_width_points(text, size)
    return points * PT_MM


def normalize_text(value: Any) -> str:
    text = str(value or '').replace('\r\n', '\n').replace('\r', '\n')
    lines = [_BLANK_RUN_RE.sub(' ', line).strip() for line in text.split('\n')]
    return '\n'.join(line for line in lines if line)


def _markdown_parser() -> MarkdownIt:
    global _MARKDOWN_PARSER
    if _MARKDOWN_PARSER is None:
        _MARKDOWN_PARSER = MarkdownIt('commonmark', {'html': False, 'typographer': False})
    return _MARKDOWN_PARSER


def _flatten_inline_line(line: str) -> str:
    parts: list[str] = []
    for token in _markdown_parser().parseInline(line):
        for child in token.children or []:
            if child.type in {'text', 'code_inline'}:
                parts.append(child.content)
            elif child.type == 'image':
                parts.append(child.content)
            elif child.type in {'softbreak', 'hardbreak'}:
                parts.append(' ')
    return ''.join(parts)


def flatten_inline_markdown(value: Any) -> str:
    """Strip inline markdown (emphasis, code spans, links) the evaluation text may carry."""
    text = normalize_text(value)
    if not text:
        return ''
    return normalize_text('\n'.join(_flatten_inline_line(line) for line in text.split('\n')))


class TextMeasurer:
    """Greedy word wrapper; the same inputs always produce the same lines."""

    def __init__(self, width_fn: WidthFunction | None = None):
        self._width_fn: WidthFunction = width_fn or reportlab_text_width

    def text_width(self, text: str, style: TextStyle) -> float:
        return float(self._width_fn(text, style.font_for(text), style.font_size))

    def _split_word(self, word: str, style: TextStyle, max_width: float) -> list[str]:
        # CJK runs carry no spaces, so an overlong one breaks between characters
        if not contains_cjk(word) or self.text_width(word, style) <= max_width:
            return [word]
        chunks: list[str] = []
        current = ''
        for char in word:
            candidate = f'{current}{char}'
            if not current or self.text_width(candidate, style) <= max_width:
                current = candidate
                continue
            chunks.append(current)
            current = char
        if current:
            chunks.append(current)
        return chunks

    def wrap(self, text: str, style: TextStyle, max_width: float) -> list[str]:
        if max_width <= 0:
            raise LayoutError(f'max_width must be positive, got {max_width}')

        lines: list[str] = []
        for raw_line in normalize_text(text).split('\n'):
            current = ''
            for token in raw_line.split(' '):
                if not token:
                    continue
                for word in self._split_word(token, style, max_width):
                    if not current:
                        # an overlong word still gets a line of its own
                        current = word
                        continue
                    candidate = f'{current} {word}'
                    if self.text_width(candidate, style) <= max_width:
                        current = candidate
                        continue
                    lines.append(current)
                    current = word
            if current:
                lines.append(current)
        return lines

    def measure(self, text: str, style: TextStyle, max_width: float) -> TextMeasurement:
        lines = self.wrap(text, style, max_width)
        line_height = style.line_height
        return TextMeasurement(
            lines=tuple(lines),
            height=len(lines) * line_height,
            line_height=line_height,
        )
