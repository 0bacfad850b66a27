from __future__ import annotations

import pytest

from domain.canvas import (
    ROLE_AXIS_ARROW,
    ROLE_AXIS_LABEL,
    ROLE_AXIS_LINE,
    ROLE_TICK,
    ROLE_TICK_LABEL,
    Canvas,
)
from domain.errors import AxisStateError, ConfigurationError
from domain.models import AxisSpec, Point, Size
from domain.services.axis_overlay import AxisOverlay, AxisState
from domain.services.measure_block import BlockMeasurer
from domain.services.place_diagram import Diagram, PlacementEngine
from domain.style import AxisStyle, resolve_style
from tests.helpers.diagram_fixtures import column, diagram, row
from tests.helpers.fake_typesetter import FakeTypesetter


def _overlay(**axis: object) -> AxisOverlay:
    return AxisOverlay(AxisSpec.model_validate(axis), AxisStyle())


def _timeline(direction: str) -> Diagram:
    document = diagram(
        column(1, row(1), time="t_0"),
        column(2, row(1), time="t_1"),
        axis={"direction": direction, "label": {"format": "TeX", "text": "t"}},
    )
    placed = Diagram.from_document(document)
    PlacementEngine(BlockMeasurer(FakeTypesetter(sizes={"t": (10.0, 10.0)}))).place(placed)
    return placed


@pytest.mark.parametrize(("right", "resolved"), [(-1, 5), (-2, 4), (3, 3)])
def test_right_position_resolves_once(right: int, resolved: int) -> None:
    overlay = _overlay(position={"left": 1, "right": right})

    overlay.attach(5)

    assert overlay.right == resolved
    assert overlay.state is AxisState.ATTACHED
    with pytest.raises(AxisStateError):
        overlay.attach(5)
    assert overlay.right == resolved


@pytest.mark.parametrize(
    "position",
    [{"left": 4, "right": -3}, {"left": 1, "right": 6}, {"left": 1, "right": -6}],
)
def test_attach_rejects_positions_outside_columns(position: dict) -> None:
    overlay = _overlay(position=position)

    with pytest.raises(ConfigurationError):
        overlay.attach(5)

    assert overlay.state is AxisState.UNATTACHED


def test_steps_must_run_in_order() -> None:
    overlay = _overlay()
    canvas = Canvas(size=Size(10.0, 10.0))
    style = resolve_style()

    with pytest.raises(AxisStateError):
        overlay.measure_labels(BlockMeasurer(FakeTypesetter()), [])

    overlay.attach(1)
    with pytest.raises(AxisStateError):
        overlay.draw(canvas, [], {}, style)
    with pytest.raises(AxisStateError):
        overlay.tick(canvas, [], {}, style)

    assert overlay.state is AxisState.ATTACHED
    assert canvas.height == 10.0


def test_bidirectional_axis_has_two_independent_labels() -> None:
    overlay = _overlay(direction="bidirectional", label={"text": "t"})
    overlay.attach(1)

    overlay.measure_labels(BlockMeasurer(FakeTypesetter()), [])

    first, second = overlay.label_blocks
    assert first is not second
    assert first == second


def test_right_axis_geometry() -> None:
    placed = _timeline("right")
    canvas = placed.canvas

    # 30 for the blocks, then margin 5 + arrows 10 + width 2 + tick label 20.
    assert (canvas.width, canvas.height) == (95, 67)
    assert placed.axis.state is AxisState.TICKED

    (line,) = canvas.by_role(ROLE_AXIS_LINE)
    assert (line.start, line.end) == (Point(5, 37), Point(90, 37))
    arrows = list(canvas.by_role(ROLE_AXIS_ARROW))
    assert [(arrow.start, arrow.end) for arrow in arrows] == [
        (Point(90, 37), Point(85, 42)),
        (Point(90, 37), Point(85, 32)),
    ]

    (label,) = canvas.by_role(ROLE_AXIS_LABEL)
    assert (label.block.x, label.block.y) == (85, 42)
    assert label.block.wrapper.stroke_width == 0
    assert label.block.wrapper.background_opacity == 0

    tick_labels = [element.block for element in canvas.by_role(ROLE_TICK_LABEL)]
    assert [(block.x, block.y) for block in tick_labels] == [(5, 42), (50, 42)]
    ticks = list(canvas.by_role(ROLE_TICK))
    assert [(tick.start, tick.end) for tick in ticks] == [
        (Point(25, 35), Point(25, 39)),
        (Point(70, 35), Point(70, 39)),
    ]


def test_left_axis_geometry() -> None:
    canvas = _timeline("left").canvas

    arrows = list(canvas.by_role(ROLE_AXIS_ARROW))
    assert [arrow.end for arrow in arrows] == [Point(10, 42), Point(10, 32)]
    (label,) = canvas.by_role(ROLE_AXIS_LABEL)
    assert (label.block.x, label.block.y) == (5, 42)


def test_bidirectional_axis_geometry() -> None:
    canvas = _timeline("bidirectional").canvas

    assert len(list(canvas.by_role(ROLE_AXIS_ARROW))) == 4
    labels = [element.block for element in canvas.by_role(ROLE_AXIS_LABEL)]
    assert [(block.x, block.y) for block in labels] == [(5, 42), (85, 42)]


def test_columns_without_time_get_no_tick() -> None:
    document = diagram(
        column(1, row(1), time="t_0"),
        column(2, row(1)),
        axis={},
    )
    placed = Diagram.from_document(document)
    canvas = PlacementEngine(BlockMeasurer(FakeTypesetter())).place(placed)

    assert len(list(canvas.by_role(ROLE_TICK))) == 1
    assert len(list(canvas.by_role(ROLE_TICK_LABEL))) == 1
