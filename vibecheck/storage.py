from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from .config import get_settings


def reports_root() -> Path:
    root = get_settings().data_dir / 'reports'
    root.mkdir(parents=True, exist_ok=True)
    return root


def _safe_report_name(name: str) -> str:
    token = re.sub(r'[^A-Za-z0-9._-]+', '-', str(name or '').strip()).strip('-.')
    if not token:
        raise ValueError('report name is required')
    return token


def default_output_path(name: str, suffix: str) -> Path:
    return reports_root() / f'{_safe_report_name(name)}{suffix}'


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    tmp.replace(path)


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding='utf-8'))
