from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from enum import Enum
from typing import Dict, List, Optional

from domain.canvas import (
    ROLE_AXIS_ARROW,
    ROLE_AXIS_LABEL,
    ROLE_AXIS_LINE,
    ROLE_TICK,
    ROLE_TICK_LABEL,
    Canvas,
)
from domain.errors import AxisStateError, ConfigurationError
from domain.models import AxisSpec, Block, ColumnSpec, Point
from domain.services.aggregators import BlockTable, column_center, column_left, column_right
from domain.services.measure_block import LABEL_WRAPPER, BlockMeasurer
from domain.style import AxisStyle, Style

logger = logging.getLogger(__name__)


class AxisState(str, Enum):
    UNATTACHED = "unattached"
    ATTACHED = "attached"
    LABELED = "labeled"
    DRAWN = "drawn"
    ANNOTATED = "annotated"
    TICKED = "ticked"


class AxisOverlay:
    def __init__(self, spec: AxisSpec, style: AxisStyle) -> None:
        self.spec = spec
        self.style = style
        self.state = AxisState.UNATTACHED
        self.left: Optional[int] = None
        self.right: Optional[int] = None
        self.label_blocks: List[Block] = []
        self.tick_labels: Dict[int, Block] = {}
        self.line_y: Optional[float] = None
        self.line_start_x: Optional[float] = None
        self.line_end_x: Optional[float] = None

    @property
    def direction(self) -> str:
        return self.spec.direction

    def _advance(self, expected: AxisState, target: AxisState) -> None:
        if self.state is not expected:
            msg = f"Axis cannot become {target.value!r} while {self.state.value!r}"
            raise AxisStateError(msg)
        self.state = target
        logger.debug("Axis is %s", target.value)

    def attach(self, count: int) -> None:
        """Resolve the column span once; a negative right counts from the end."""
        left = self.spec.position.left
        right = self.spec.position.right
        if right < 0:
            right = count + right + 1
        if not 1 <= left <= right <= count:
            msg = (
                f"Axis position left={self.spec.position.left}, "
                f"right={self.spec.position.right} does not fit {count} column(s)"
            )
            raise ConfigurationError(msg)
        self._advance(AxisState.UNATTACHED, AxisState.ATTACHED)
        self.left = left
        self.right = right

    def measure_labels(self, measurer: BlockMeasurer, columns: Sequence[ColumnSpec]) -> None:
        self._advance(AxisState.ATTACHED, AxisState.LABELED)
        primary = measurer.measure(self.spec.label, LABEL_WRAPPER)
        self.label_blocks = [primary]
        if self.direction == "bidirectional":
            self.label_blocks.append(copy.deepcopy(primary))
        self.tick_labels = {
            column_idx: measurer.measure(column.time, LABEL_WRAPPER)
            for column_idx, column in enumerate(columns)
            if not column.time.is_empty
        }

    @property
    def tallest_tick_label(self) -> float:
        return max((label.height for label in self.tick_labels.values()), default=0.0)

    @property
    def height_contribution(self) -> float:
        return (
            self.style.margin
            + self.style.arrow_height * 2
            + self.style.width
            + self.tallest_tick_label
        )

    def draw(
        self,
        canvas: Canvas,
        columns: Sequence[ColumnSpec],
        blocks: BlockTable,
        style: Style,
    ) -> None:
        self._advance(AxisState.LABELED, AxisState.DRAWN)
        canvas.grow_height(self.height_contribution)
        self.line_start_x = column_left(columns, blocks, style, self.left)
        self.line_end_x = column_right(columns, blocks, style, self.right)
        self.line_y = (
            canvas.height
            - style.canvas.margin.bottom
            - self.tallest_tick_label
            - self.style.arrow_height
        )
        start = Point(self.line_start_x, self.line_y)
        end = Point(self.line_end_x, self.line_y)
        canvas.add_line(start, end, self.style.color, self.style.width, ROLE_AXIS_LINE)
        if self.direction in ("left", "bidirectional"):
            self._draw_arrowhead(canvas, start, 1.0)
        if self.direction in ("right", "bidirectional"):
            self._draw_arrowhead(canvas, end, -1.0)

    def _draw_arrowhead(self, canvas: Canvas, tip: Point, sign: float) -> None:
        reach = self.style.arrow_height
        for dy in (reach, -reach):
            canvas.add_line(
                tip,
                Point(tip.x + sign * reach, tip.y + dy),
                self.style.color,
                self.style.width,
                ROLE_AXIS_ARROW,
            )

    def annotate(
        self,
        canvas: Canvas,
        columns: Sequence[ColumnSpec],
        blocks: BlockTable,
        style: Style,
    ) -> None:
        self._advance(AxisState.DRAWN, AxisState.ANNOTATED)
        y = canvas.height - style.canvas.margin.bottom - self.tallest_tick_label
        placed: List[Block] = []
        if self.direction == "left":
            placed.append(self.label_blocks[0].moved(self.line_start_x, y))
        elif self.direction == "right":
            first = self.label_blocks[0]
            placed.append(first.moved(self.line_end_x - first.width / 2, y))
        else:
            first, second = self.label_blocks
            placed.append(first.moved(self.line_start_x, y))
            placed.append(second.moved(self.line_end_x - second.width / 2, y))
        self.label_blocks = placed
        for label in placed:
            canvas.add_block(label, ROLE_AXIS_LABEL)

        for column_idx, label in sorted(self.tick_labels.items()):
            center = column_center(columns, blocks, style, columns[column_idx].n)
            moved = label.moved(center - label.width / 2, y)
            self.tick_labels[column_idx] = moved
            canvas.add_block(moved, ROLE_TICK_LABEL)

    def tick(
        self,
        canvas: Canvas,
        columns: Sequence[ColumnSpec],
        blocks: BlockTable,
        style: Style,
    ) -> None:
        self._advance(AxisState.ANNOTATED, AxisState.TICKED)
        reach = self.style.tick_height
        for column in columns:
            if column.time.is_empty:
                continue
            x = column_center(columns, blocks, style, column.n)
            canvas.add_line(
                Point(x, self.line_y - reach),
                Point(x, self.line_y + reach),
                self.style.color,
                self.style.width,
                ROLE_TICK,
            )
