from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Iterator, Optional, Tuple

from domain.models import Block, ColumnSpec, RowKey, RowSpec
from domain.style import Style

BlockTable = Mapping[RowKey, Block]


def iter_rows(columns: Sequence[ColumnSpec]) -> Iterator[Tuple[RowKey, ColumnSpec, RowSpec]]:
    for column_idx, column in enumerate(columns):
        for row_idx, row in enumerate(column.rows):
            yield (column_idx, row_idx), column, row


def column_count(columns: Sequence[ColumnSpec]) -> int:
    return max((column.n for column in columns), default=0)


def row_count(columns: Sequence[ColumnSpec]) -> int:
    return max(
        (row.n for _, _, row in iter_rows(columns) if not row.is_span),
        default=0,
    )


def _max(values: Iterable[float]) -> float:
    return max(values, default=0.0)


def max_column_width(columns: Sequence[ColumnSpec], blocks: BlockTable, column_n: int) -> float:
    return _max(
        blocks[key].width
        for key, column, _ in iter_rows(columns)
        if column.n == column_n and key in blocks
    )


def max_row_height(columns: Sequence[ColumnSpec], blocks: BlockTable, row_n: int) -> float:
    return _max(
        blocks[key].height
        for key, _, row in iter_rows(columns)
        if not row.is_span and row.n == row_n and key in blocks
    )


def max_all_rows_height(columns: Sequence[ColumnSpec], blocks: BlockTable) -> float:
    return _max(
        blocks[key].height
        for key, _, row in iter_rows(columns)
        if not row.is_span and key in blocks
    )


def row_center_y(columns: Sequence[ColumnSpec], blocks: BlockTable, row_n: int) -> Optional[float]:
    for key, _, row in iter_rows(columns):
        if not row.is_span and row.n == row_n and key in blocks:
            return blocks[key].center.y
    return None


def column_left(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, column_n: int
) -> float:
    x = style.canvas.margin.left
    for index in range(1, column_n):
        x += max_column_width(columns, blocks, index) + style.columns.interval
    return x


def column_right(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, column_n: int
) -> float:
    return column_left(columns, blocks, style, column_n) + max_column_width(
        columns, blocks, column_n
    )


def column_center(
    columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, column_n: int
) -> float:
    return column_left(columns, blocks, style, column_n) + (
        max_column_width(columns, blocks, column_n) / 2
    )


def row_top(columns: Sequence[ColumnSpec], blocks: BlockTable, style: Style, row_n: int) -> float:
    y = style.canvas.margin.top
    for index in range(1, row_n):
        y += max_row_height(columns, blocks, index) + style.rows.interval
    return y
