from __future__ import annotations

import logging
from typing import Sequence

from .blocks import Block, Panel
from .page_cursor import PageController
from .text_measure import TextMeasurer
from .theme import Theme


logger = logging.getLogger(__name__)


class SectionRenderer:
    """Places one titled group of blocks, block by block, through the page controller."""

    def __init__(self, controller: PageController, theme: Theme, measurer: TextMeasurer):
        self.controller = controller
        self.theme = theme
        self.measurer = measurer

    def title_block(self, title: str) -> Block:
        return Panel(
            None,
            self.theme.palette('section'),
            title=title,
            title_style=self.theme.style('section_title'),
            measurer=self.measurer,
            padding=2.5,
            radius=1.0,
        )

    def place_block(self, block: Block, *, minimum_fit: float = 0.0, label: str = '') -> float:
        measured = block.measure(self.controller.content_width)
        y = self.controller.reserve(measured.height, minimum_fit, label=label or block.kind)
        self.controller.draw(measured.place(self.controller.left, y))
        return y

    def render_section(self, title: str, blocks: Sequence[Block], force_new_page: bool = False) -> None:
        if not blocks:
            raise ValueError(f'section {title!r} has no blocks to render')

        if force_new_page:
            self.controller.force_page_break()

        self.place_block(self.title_block(title), minimum_fit=self.theme.keep_with_next, label=f'{title} title')
        for index, block in enumerate(blocks):
            self.controller.skip(self.theme.block_spacing)
            self.place_block(block, label=f'{title}[{index}] {block.kind}')
        self.controller.skip(self.theme.section_spacing)
        logger.debug(
            'Rendered section %s with %d blocks, cursor on page %d',
            title,
            len(blocks),
            self.controller.page_index + 1,
        )
