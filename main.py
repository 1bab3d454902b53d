from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path

from vibecheck.config import get_settings
from vibecheck.report.drawing import LayoutError
from vibecheck.report.evaluation_report import SECTION_KEYS, DocumentAssembler
from vibecheck.report.pdf_export import BACKENDS, export_evaluation_report
from vibecheck.report.theme import PAGE_SIZES_MM, Theme
from vibecheck.storage import default_output_path, read_json
from vibecheck.types import EvaluationReport


logger = logging.getLogger(__name__)


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_report(path: Path) -> EvaluationReport:
    return EvaluationReport.from_payload(read_json(path))


def _theme(args: argparse.Namespace) -> Theme:
    settings = get_settings()
    if args.page_size:
        settings = settings.model_copy(update={'pdf_page_size': args.page_size})
    if args.orientation:
        settings = settings.model_copy(update={'pdf_orientation': args.orientation})
    return Theme.from_settings(settings)


def _break_before(args: argparse.Namespace) -> list[str]:
    if args.break_before:
        return [item.strip() for item in args.break_before.split(',') if item.strip()]
    return get_settings().page_break_sections()


def cmd_render(args: argparse.Namespace) -> int:
    settings = get_settings()
    input_path = Path(args.input)
    if not input_path.exists():
        _print_json({'status': 'error', 'message': f'Evaluation file not found: {input_path}'})
        return 2

    backend = (args.backend or settings.pdf_backend).strip().lower()
    suffix = '.json' if backend == 'json' else '.pdf'

    try:
        output_path = Path(args.output) if args.output else default_output_path(input_path.stem, suffix)
        report = _load_report(input_path)
        document = export_evaluation_report(
            report,
            output_path,
            backend=backend,
            theme=_theme(args),
            title=args.title or settings.report_title,
            page_break_before=_break_before(args),
            generated_on=date.fromisoformat(args.date) if args.date else None,
        )
    except (LayoutError, ValueError) as exc:
        logger.error('Failed to render %s: %s', input_path, exc)
        _print_json({'status': 'error', 'message': str(exc)})
        return 2

    _print_json(
        {
            'status': 'ok',
            'output_path': str(output_path),
            'backend': backend,
            'page_count': document.page_count,
            'sections': document.sections,
        }
    )
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        _print_json({'status': 'error', 'message': f'Evaluation file not found: {input_path}'})
        return 2

    try:
        report = _load_report(input_path)
        document = DocumentAssembler(Theme.from_settings(get_settings())).render(report)
    except (LayoutError, ValueError) as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2

    _print_json(
        {
            'status': 'ok',
            'fit_score': report.fit_score,
            'sections': document.sections,
            'missing_sections': [key for key in SECTION_KEYS if key not in document.sections],
            'page_count': document.page_count,
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Vibe Check evaluation report CLI')
    parser.add_argument('--log-level', default='WARNING', help='Python logging level')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render an evaluation JSON file to PDF or layout JSON')
    render.add_argument('--input', required=True, help='Path to evaluation JSON')
    render.add_argument('--output', required=False, help='Output path (defaults to the data dir)')
    render.add_argument('--backend', choices=list(BACKENDS), required=False)
    render.add_argument('--title', required=False, help='Document title override')
    render.add_argument('--page-size', choices=sorted(PAGE_SIZES_MM), required=False)
    render.add_argument('--orientation', choices=['portrait', 'landscape'], required=False)
    render.add_argument('--break-before', required=False, help='Comma-separated section keys')
    render.add_argument('--date', required=False, help='Generation date (YYYY-MM-DD) shown in the header')
    render.set_defaults(func=cmd_render)

    inspect = sub.add_parser('inspect', help='Show which sections an evaluation would render')
    inspect.add_argument('--input', required=True, help='Path to evaluation JSON')
    inspect.set_defaults(func=cmd_inspect)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
