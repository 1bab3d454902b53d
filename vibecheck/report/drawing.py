from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union


class LayoutError(ValueError):
    """Raised when the layout engine is asked to work outside its preconditions."""


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    font_name: str
    font_size: float
    color: str

    kind = 'text'


@dataclass(frozen=True)
class RectShape:
    x: float
    y: float
    width: float
    height: float
    fill: str | None = None
    stroke: str | None = None
    line_width: float = 0.3
    radius: float = 0.0

    kind = 'rect'


@dataclass(frozen=True)
class LineShape:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    line_width: float = 0.3

    kind = 'line'


@dataclass(frozen=True)
class CircleShape:
    cx: float
    cy: float
    radius: float
    fill: str | None = None
    stroke: str | None = None

    kind = 'circle'


DrawInstruction = Union[TextRun, RectShape, LineShape, CircleShape]


def instruction_to_dict(instruction: DrawInstruction) -> dict[str, Any]:
    payload = asdict(instruction)
    payload['kind'] = instruction.kind
    return payload


@dataclass
class Page:
    index: int
    instructions: list[DrawInstruction] = field(default_factory=list)

    @property
    def number(self) -> int:
        return self.index + 1

    def extend(self, instructions: list[DrawInstruction]) -> None:
        self.instructions.extend(instructions)

    def texts(self) -> list[str]:
        return [item.text for item in self.instructions if isinstance(item, TextRun)]

    def to_dict(self) -> dict[str, Any]:
        return {
            'page': self.number,
            'instructions': [instruction_to_dict(item) for item in self.instructions],
        }


@dataclass
class RenderedDocument:
    """Ordered pages of absolute draw instructions, in millimetres from the top-left corner."""

    title: str
    page_width: float
    page_height: float
    pages: list[Page] = field(default_factory=list)
    sections: list[str] = field(default_factory=list)
    # page_cursor.Placement records, one per reserved block
    placements: list[Any] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def texts(self) -> list[str]:
        collected: list[str] = []
        for page in self.pages:
            collected.extend(page.texts())
        return collected

    def to_dict(self) -> dict[str, Any]:
        return {
            'title': self.title,
            'page_width': self.page_width,
            'page_height': self.page_height,
            'sections': list(self.sections),
            'pages': [page.to_dict() for page in self.pages],
        }
