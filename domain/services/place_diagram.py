from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.canvas import (
    ROLE_BLOCK,
    ROLE_CONNECTOR,
    ROLE_CONTROLLED_DOT,
    ROLE_CONTROLLED_LINK,
    ROLE_SPAN,
    Canvas,
)
from domain.models import (
    Block,
    BuiltinBlockType,
    ColumnSpec,
    DiagramDocument,
    Point,
    RowKey,
    RowSpec,
    Size,
)
from domain.services.aggregators import (
    BlockTable,
    column_count,
    column_left,
    iter_rows,
    max_all_rows_height,
    max_column_width,
    max_row_height,
    row_center_y,
    row_count,
    row_top,
)
from domain.services.axis_overlay import AxisOverlay
from domain.services.measure_block import BlockMeasurer
from domain.style import Style, resolve_style

logger = logging.getLogger(__name__)


@dataclass
class Diagram:
    style: Style
    columns: List[ColumnSpec]
    axis: Optional[AxisOverlay] = None
    canvas: Optional[Canvas] = None
    blocks: Dict[RowKey, Block] = field(default_factory=dict)

    @classmethod
    def from_document(
        cls, document: DiagramDocument, *style_overrides: Mapping[str, Any] | None
    ) -> Diagram:
        """Resolve the style layers and attach the axis to the declared columns."""
        style = resolve_style(document.style, *style_overrides)
        columns = list(document.columns)
        axis = None
        if document.axis is not None:
            axis = AxisOverlay(document.axis, style.axis)
            axis.attach(column_count(columns))
        return cls(style=style, columns=columns, axis=axis)


def measure_single_rows(
    columns: Sequence[ColumnSpec], style: Style, measurer: BlockMeasurer
) -> Dict[RowKey, Block]:
    table: Dict[RowKey, Block] = {}
    for key, _, row in iter_rows(columns):
        if row.is_span:
            continue
        _, type_style = style.resolve_block_type(row.type.name)
        table[key] = measurer.measure_styled(row.content, type_style)
    return table


def fix_single_row_heights(
    columns: Sequence[ColumnSpec], blocks: BlockTable
) -> Dict[RowKey, Block]:
    tallest = max_all_rows_height(columns, blocks)
    table = dict(blocks)
    for key, _, row in iter_rows(columns):
        if not row.is_span and row.height == "maxAll" and key in blocks:
            table[key] = blocks[key].resized(height=tallest)

    # maxRow rows fill their row after the maxAll neighbours have grown.
    grown = dict(table)
    row_heights: Dict[int, float] = {}
    for key, _, row in iter_rows(columns):
        if row.is_span or row.height != "maxRow" or key not in blocks:
            continue
        if row.n not in row_heights:
            row_heights[row.n] = max_row_height(columns, grown, row.n)
        table[key] = grown[key].resized(height=row_heights[row.n])
    return table


def span_height(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, row: RowSpec
) -> float:
    covered = sum(max_row_height(columns, blocks, index) for index in row.covered_rows())
    return covered + (row.end - row.start) * style.rows.interval


def measure_span_rows(
    columns: Sequence[ColumnSpec],
    blocks: BlockTable,
    style: Style,
    measurer: BlockMeasurer,
) -> Dict[RowKey, Block]:
    table = dict(blocks)
    for key, _, row in iter_rows(columns):
        if not row.is_span:
            continue
        _, type_style = style.resolve_block_type(row.type.name)
        block = measurer.measure_styled(row.content, type_style, include_height=False)
        table[key] = block.resized(height=span_height(columns, blocks, style, row))
    return table


def normalize_column_widths(
    columns: Sequence[ColumnSpec], blocks: BlockTable
) -> Dict[RowKey, Block]:
    widths = {column.n: max_column_width(columns, blocks, column.n) for column in columns}
    table = dict(blocks)
    for key, column, _ in iter_rows(columns):
        if key in blocks:
            table[key] = blocks[key].resized(width=widths[column.n])
    return table


def size_canvas(columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style) -> Canvas:
    margin = style.canvas.margin
    columns_total = column_count(columns)
    width = margin.left + margin.right
    for index in range(1, columns_total + 1):
        width += max_column_width(columns, blocks, index) + style.columns.interval
    if columns_total:
        width -= style.columns.interval

    rows_total = row_count(columns)
    height = margin.top + margin.bottom
    for index in range(1, rows_total + 1):
        height += max_row_height(columns, blocks, index) + style.rows.interval
    if rows_total:
        height -= style.rows.interval

    return Canvas(
        size=Size(width, height),
        background_color=style.canvas.background_color,
        background_opacity=style.canvas.background_opacity,
    )


def place_blocks(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, canvas: Canvas
) -> Dict[RowKey, Block]:
    table = dict(blocks)
    for key, column, row in iter_rows(columns):
        block = blocks.get(key)
        if block is None:
            continue
        x = column_left(columns, blocks, style, column.n) + (
            max_column_width(columns, blocks, column.n) - block.width
        ) / 2
        y = row_top(columns, blocks, style, row.start)
        placed = block.moved(x, y)
        table[key] = placed
        canvas.add_block(placed, ROLE_SPAN if row.is_span else ROLE_BLOCK)
    return table


def draw_connectors(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, canvas: Canvas
) -> int:
    """Join single rows sharing an index, from a ``join.out`` row to the next ``join.in``."""
    connection = style.blocks.connections
    drawn = 0
    for index in range(1, row_count(columns) + 1):
        source: Optional[tuple[ColumnSpec, RowKey]] = None
        for key, column, row in iter_rows(columns):
            if row.is_span or row.n != index or key not in blocks:
                continue
            if source is not None and row.join.in_:
                source_column, source_key = source
                start, end = _connector_ends(
                    columns, blocks, source_column, source_key, column, key
                )
                canvas.add_line(start, end, connection.color, connection.width, ROLE_CONNECTOR)
                drawn += 1
                source = None
            if row.join.out:
                source = (column, key)
    return drawn


def _connector_ends(
    columns: Sequence[ColumnSpec],
    blocks: BlockTable,
    source_column: ColumnSpec,
    source_key: RowKey,
    target_column: ColumnSpec,
    target_key: RowKey,
) -> tuple[Point, Point]:
    source = blocks[source_key]
    target = blocks[target_key]
    y = source.center.y
    x0 = source.right
    if source.content.is_empty:
        x0 -= max_column_width(columns, blocks, source_column.n) / 2
    x1 = target.x
    if target.content.is_empty:
        x1 += max_column_width(columns, blocks, target_column.n) / 2
    return Point(x0, y), Point(x1, y)


def draw_controlled_links(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, canvas: Canvas
) -> int:
    drawn = 0
    for key, _, row in iter_rows(columns):
        if row.is_span or row.type.builtin is not BuiltinBlockType.CONTROLLED_INTERACTION:
            continue
        controlled = row.type.controlled
        if controlled is None or row.n >= controlled or key not in blocks:
            continue
        target_y = row_center_y(columns, blocks, controlled)
        if target_y is None:
            logger.debug("Row %s controls unmeasured row %s; link skipped", row.n, controlled)
            continue
        _, type_style = style.resolve_block_type(row.type.name)
        block = blocks[key]
        x = block.center.x
        target = Point(x, target_y)
        canvas.add_line(
            Point(x, block.bottom),
            target,
            type_style.stroke_color,
            type_style.line_width,
            ROLE_CONTROLLED_LINK,
        )
        canvas.add_circle(
            target, type_style.circle_diameter, type_style.stroke_color, ROLE_CONTROLLED_DOT
        )
        drawn += 1
    return drawn


class PlacementEngine:
    """Runs the placement phases in their fixed order for one diagram."""

    def __init__(self, measurer: BlockMeasurer) -> None:
        self.measurer = measurer

    def place(self, diagram: Diagram) -> Canvas:
        if diagram.canvas is not None:
            msg = "Diagram has already been placed"
            raise RuntimeError(msg)
        columns = diagram.columns
        style = diagram.style

        blocks = measure_single_rows(columns, style, self.measurer)
        logger.debug("Measured %d single row block(s)", len(blocks))
        blocks = fix_single_row_heights(columns, blocks)
        blocks = measure_span_rows(columns, blocks, style, self.measurer)
        logger.debug("Measured %d block(s) including spans", len(blocks))
        if style.columns.normalize_widths:
            blocks = normalize_column_widths(columns, blocks)
            logger.debug("Normalized column widths")

        canvas = size_canvas(columns, blocks, style)
        blocks = place_blocks(columns, blocks, style, canvas)
        connectors = draw_connectors(columns, blocks, style, canvas)
        links = draw_controlled_links(columns, blocks, style, canvas)
        logger.debug("Drew %d connector(s) and %d controlled link(s)", connectors, links)

        if diagram.axis is not None:
            axis = diagram.axis
            axis.measure_labels(self.measurer, columns)
            axis.draw(canvas, columns, blocks, style)
            axis.annotate(canvas, columns, blocks, style)
            axis.tick(canvas, columns, blocks, style)

        diagram.blocks = blocks
        diagram.canvas = canvas
        logger.info("Canvas sized %.2fx%.2f", canvas.width, canvas.height)
        return canvas
