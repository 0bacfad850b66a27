from __future__ import annotations

import logging

from domain.models import Block, BlockWrapper, ContentSpec, Glyph, Size
from domain.ports.typesetting import Typesetter
from domain.style import BlockTypeStyle

logger = logging.getLogger(__name__)

DEFAULT_EX_SIZE = 6.0
EMPTY_GLYPH = Glyph(width=0.0, height=0.0, svg="")

# Wrapper used for axis and tick labels: no stroke, transparent background.
LABEL_WRAPPER = BlockWrapper(
    background_color="#fff",
    background_opacity=0.0,
    stroke_width=0.0,
    stroke_color="#000",
)


def wrapper_from_style(type_style: BlockTypeStyle) -> BlockWrapper:
    return BlockWrapper(
        background_color=type_style.background_color,
        background_opacity=type_style.background_opacity,
        stroke_width=type_style.stroke_width,
        stroke_color=type_style.stroke_color,
    )


class BlockMeasurer:
    """Turns content into a sized Block using the typesetting collaborator.

    Explicit wrapper sizes are given in typesetting units (ex) as full extents;
    they are converted to pixels with ``ex_size``. Without an override the
    wrapper takes the natural glyph bounds.
    """

    def __init__(self, typesetter: Typesetter, ex_size: float = DEFAULT_EX_SIZE) -> None:
        self.typesetter = typesetter
        self.ex_size = ex_size

    def measure(
        self,
        content: ContentSpec,
        wrapper: BlockWrapper,
        width_override: float | None = None,
        height_override: float | None = None,
    ) -> Block:
        if content.is_empty:
            glyph = EMPTY_GLYPH
        else:
            glyph = self.typesetter.typeset(content.text, content.format)
        width = glyph.width
        height = glyph.height
        if width_override is not None:
            width = self._ex_to_px(width_override / 2) * 2
        if height_override is not None:
            height = self._ex_to_px(height_override / 2) * 2
        logger.debug(
            "Measured %s block %r: glyph %.2fx%.2f, wrapper %.2fx%.2f",
            content.format,
            content.text,
            glyph.width,
            glyph.height,
            width,
            height,
        )
        return Block.wrap(content, glyph, wrapper, Size(width, height))

    def measure_styled(
        self, content: ContentSpec, type_style: BlockTypeStyle, *, include_height: bool = True
    ) -> Block:
        return self.measure(
            content,
            wrapper_from_style(type_style),
            width_override=type_style.width,
            height_override=type_style.height if include_height else None,
        )

    def _ex_to_px(self, value: float) -> float:
        return value * self.ex_size
