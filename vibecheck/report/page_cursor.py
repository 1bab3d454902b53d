from __future__ import annotations

import logging
from dataclasses import dataclass

from .drawing import DrawInstruction, Page
from .theme import Theme


logger = logging.getLogger(__name__)

_EPSILON = 1e-6


@dataclass
class PageCursor:
    page_index: int
    offset: float
    content_width: float
    content_height: float


@dataclass(frozen=True)
class Placement:
    page_index: int
    y: float
    height: float
    label: str = ''

    @property
    def bottom(self) -> float:
        return self.y + self.height


class PageController:
    """Owns the cursor and the page list for one render pass.

    Offsets are measured from the top margin; coordinates handed back to
    callers are absolute page coordinates.
    """

    def __init__(self, theme: Theme):
        theme.validate()
        self.theme = theme
        self.cursor = PageCursor(
            page_index=0,
            offset=0.0,
            content_width=theme.content_width,
            content_height=theme.content_height,
        )
        self.pages: list[Page] = [Page(index=0)]
        self.placements: list[Placement] = []

    @property
    def page_index(self) -> int:
        return self.cursor.page_index

    @property
    def left(self) -> float:
        return self.theme.margin_left

    @property
    def content_width(self) -> float:
        return self.cursor.content_width

    @property
    def current_page(self) -> Page:
        return self.pages[self.cursor.page_index]

    def remaining_height(self) -> float:
        return self.cursor.content_height - self.cursor.offset

    def at_page_top(self) -> bool:
        return self.cursor.offset <= _EPSILON

    def fits(self, height: float, minimum_fit: float = 0.0) -> bool:
        return height + max(0.0, minimum_fit) <= self.remaining_height() + _EPSILON

    def _new_page(self) -> None:
        index = len(self.pages)
        self.pages.append(Page(index=index))
        self.cursor.page_index = index
        self.cursor.offset = 0.0
        logger.debug('Started page %d', index + 1)

    def reserve(self, height: float, minimum_fit: float = 0.0, *, label: str = '') -> float:
        height = max(0.0, float(height))
        if not self.fits(height, minimum_fit) and not self.at_page_top():
            self._new_page()
        if height > self.cursor.content_height + _EPSILON:
            logger.warning(
                'Block %s is %.1fmm tall and overflows the %.1fmm page content area',
                label or '<unnamed>',
                height,
                self.cursor.content_height,
            )

        y = self.theme.margin_top + self.cursor.offset
        self.cursor.offset += height
        self.placements.append(
            Placement(page_index=self.cursor.page_index, y=y, height=height, label=label)
        )
        return y

    def skip(self, space: float) -> None:
        if space <= 0 or self.at_page_top():
            return
        self.cursor.offset = min(self.cursor.offset + space, self.cursor.content_height)

    def force_page_break(self) -> None:
        if self.at_page_top():
            return
        self._new_page()

    def draw(self, instructions: list[DrawInstruction]) -> None:
        self.current_page.extend(instructions)
