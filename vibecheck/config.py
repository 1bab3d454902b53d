from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    app_name: str = 'Vibe Check Report Engine'

    data_dir: Path = Field(default=Path('./data'))

    report_title: str = 'Vibe Check Results'

    # PDF export
    # reportlab | pymupdf | json
    pdf_backend: str = 'reportlab'
    pdf_page_size: str = 'a4'
    pdf_orientation: str = 'portrait'
    pdf_font_family: str = 'Helvetica'
    # reportlab CID font for CJK lines; empty disables the fallback
    pdf_cjk_font: str = 'STSong-Light'
    pdf_margin_mm: float = 20.0
    pdf_bottom_margin_mm: float = 22.0
    # Comma-separated section keys, e.g. "risk_assessment,launch_strategy"
    pdf_page_break_before: str = ''

    def page_break_sections(self) -> list[str]:
        sections: list[str] = []
        for item in self.pdf_page_break_before.split(','):
            normalized = item.strip()
            if not normalized:
                continue
            sections.append(normalized)
        return sections


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / 'reports').mkdir(parents=True, exist_ok=True)
    return settings
