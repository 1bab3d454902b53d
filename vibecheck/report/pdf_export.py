from __future__ import annotations

import io
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Callable

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as rl_canvas

from vibecheck.storage import write_bytes_atomic, write_json_atomic
from vibecheck.types import EvaluationReport

from .drawing import CircleShape, LayoutError, LineShape, RectShape, RenderedDocument, TextRun
from .evaluation_report import DocumentAssembler
from .text_measure import TextMeasurer, ensure_font_registered
from .theme import CJK_FALLBACK_FONT, Theme


logger = logging.getLogger(__name__)

BACKENDS = ('reportlab', 'pymupdf', 'json')

# Font names understood by PyMuPDF's insert_text.
_PYMUPDF_FONTS: dict[str, str] = {
    'Helvetica': 'helv',
    'Helvetica-Bold': 'hebo',
    'Helvetica-Oblique': 'heit',
    'Helvetica-BoldOblique': 'hebi',
    'Times-Roman': 'tiro',
    'Times-Bold': 'tibo',
    'Times-Italic': 'tiit',
    'Times-BoldItalic': 'tibi',
    'Courier': 'cour',
    'Courier-Bold': 'cobo',
    'Courier-Oblique': 'coit',
    'Courier-BoldOblique': 'cobi',
    # reportlab CID fonts -> PyMuPDF built-in CJK fonts
    'STSong-Light': 'china-s',
    'MSung-Light': 'china-t',
    'HeiseiMin-W3': 'japan-s',
    'HeiseiKakuGo-W5': 'japan',
    'HYSMyeongJo-Medium': 'korea',
}


def _parse_hex_color(value: object) -> tuple[float, float, float] | None:
    token = str(value or '').strip()
    if not re.fullmatch(r'#?[0-9a-fA-F]{6}', token):
        return None
    if token.startswith('#'):
        token = token[1:]
    r = int(token[0:2], 16) / 255.0
    g = int(token[2:4], 16) / 255.0
    b = int(token[4:6], 16) / 255.0
    return (r, g, b)


def _safe_canvas_font(canvas, font_name: str, size: float) -> None:
    for candidate in (str(font_name or '').strip(), CJK_FALLBACK_FONT, 'Helvetica'):
        if not candidate:
            continue
        ensure_font_registered(candidate)
        try:
            canvas.setFont(candidate, size)
            return
        except Exception as exc:
            logger.debug('Font %s is not usable with reportlab: %s', candidate, exc)
    raise LayoutError(f'no usable font for {font_name!r}')


def render_pdf_reportlab(document: RenderedDocument) -> bytes:
    """Replays the draw instructions onto a reportlab canvas (origin flipped to bottom-left)."""
    buffer = io.BytesIO()
    page_height = document.page_height * mm
    canvas = rl_canvas.Canvas(buffer, pagesize=(document.page_width * mm, page_height))
    canvas.setTitle(document.title)
    canvas.setAuthor('Vibe Check')
    canvas.setProducer('Vibe Check Report Engine')

    for page in document.pages:
        for item in page.instructions:
            canvas.saveState()
            if isinstance(item, TextRun):
                canvas.setFillColor(colors.HexColor(item.color))
                _safe_canvas_font(canvas, item.font_name, item.font_size)
                canvas.drawString(item.x * mm, page_height - item.y * mm, item.text)
            elif isinstance(item, RectShape):
                if item.fill:
                    canvas.setFillColor(colors.HexColor(item.fill))
                if item.stroke:
                    canvas.setStrokeColor(colors.HexColor(item.stroke))
                    canvas.setLineWidth(item.line_width * mm)
                x = item.x * mm
                y = page_height - (item.y + item.height) * mm
                width = item.width * mm
                height = item.height * mm
                stroke = 1 if item.stroke else 0
                fill = 1 if item.fill else 0
                if item.radius > 0:
                    radius = min(item.radius * mm, width / 2.0, height / 2.0)
                    canvas.roundRect(x, y, width, height, radius, stroke=stroke, fill=fill)
                else:
                    canvas.rect(x, y, width, height, stroke=stroke, fill=fill)
            elif isinstance(item, LineShape):
                canvas.setStrokeColor(colors.HexColor(item.color))
                canvas.setLineWidth(item.line_width * mm)
                canvas.line(
                    item.x1 * mm,
                    page_height - item.y1 * mm,
                    item.x2 * mm,
                    page_height - item.y2 * mm,
                )
            elif isinstance(item, CircleShape):
                if item.fill:
                    canvas.setFillColor(colors.HexColor(item.fill))
                if item.stroke:
                    canvas.setStrokeColor(colors.HexColor(item.stroke))
                canvas.circle(
                    item.cx * mm,
                    page_height - item.cy * mm,
                    item.radius * mm,
                    stroke=1 if item.stroke else 0,
                    fill=1 if item.fill else 0,
                )
            canvas.restoreState()
        canvas.showPage()

    canvas.save()
    return buffer.getvalue()


def render_pdf_pymupdf(document: RenderedDocument) -> bytes:
    import pymupdf as fitz

    scale = 72.0 / 25.4
    doc = fitz.open()
    doc.set_metadata({'title': document.title, 'author': 'Vibe Check', 'producer': 'Vibe Check Report Engine'})
    try:
        for source_page in document.pages:
            page = doc.new_page(width=document.page_width * scale, height=document.page_height * scale)
            for item in source_page.instructions:
                if isinstance(item, TextRun):
                    page.insert_text(
                        fitz.Point(item.x * scale, item.y * scale),
                        item.text,
                        fontsize=item.font_size,
                        fontname=_PYMUPDF_FONTS.get(item.font_name, 'helv'),
                        color=_parse_hex_color(item.color),
                    )
                elif isinstance(item, RectShape):
                    rect = fitz.Rect(
                        item.x * scale,
                        item.y * scale,
                        (item.x + item.width) * scale,
                        (item.y + item.height) * scale,
                    )
                    shortest = min(item.width, item.height)
                    # PyMuPDF takes the corner radius as a fraction of the shorter side
                    radius = min(0.5, item.radius / shortest) if item.radius > 0 and shortest > 0 else None
                    page.draw_rect(
                        rect,
                        color=_parse_hex_color(item.stroke),
                        fill=_parse_hex_color(item.fill),
                        width=item.line_width * scale if item.stroke else 0,
                        radius=radius,
                    )
                elif isinstance(item, LineShape):
                    page.draw_line(
                        (item.x1 * scale, item.y1 * scale),
                        (item.x2 * scale, item.y2 * scale),
                        color=_parse_hex_color(item.color),
                        width=item.line_width * scale,
                    )
                elif isinstance(item, CircleShape):
                    page.draw_circle(
                        (item.cx * scale, item.cy * scale),
                        item.radius * scale,
                        color=_parse_hex_color(item.stroke),
                        fill=_parse_hex_color(item.fill),
                    )
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()


def document_to_json(document: RenderedDocument) -> dict[str, Any]:
    payload = document.to_dict()
    payload['page_count'] = document.page_count
    return payload


_PDF_RENDERERS: dict[str, Callable[[RenderedDocument], bytes]] = {
    'reportlab': render_pdf_reportlab,
    'pymupdf': render_pdf_pymupdf,
}


def export_evaluation_report(
    report: EvaluationReport | dict[str, Any],
    output_path: Path,
    *,
    backend: str = 'reportlab',
    theme: Theme | None = None,
    measurer: TextMeasurer | None = None,
    title: str = 'Vibe Check Results',
    page_break_before: tuple[str, ...] | list[str] = (),
    generated_on: date | None = None,
) -> RenderedDocument:
    token = str(backend or '').strip().lower()
    if token not in BACKENDS:
        raise ValueError(f'unknown export backend: {backend!r} (expected one of {", ".join(BACKENDS)})')

    assembler = DocumentAssembler(theme, measurer, title=title, page_break_before=page_break_before)
    document = assembler.render(report, generated_on=generated_on)

    output_path = Path(output_path)
    if token == 'json':
        write_json_atomic(output_path, document_to_json(document))
    else:
        write_bytes_atomic(output_path, _PDF_RENDERERS[token](document))

    logger.info(
        'Exported evaluation report to %s (%s, %d pages, %d sections)',
        output_path,
        token,
        document.page_count,
        len(document.sections),
    )
    return document
