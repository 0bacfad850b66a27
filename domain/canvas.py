from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Union

from domain.models import Block, Point, Size

ROLE_BLOCK = "block"
ROLE_SPAN = "span"
ROLE_CONNECTOR = "connector"
ROLE_CONTROLLED_LINK = "controlled_link"
ROLE_CONTROLLED_DOT = "controlled_dot"
ROLE_AXIS_LINE = "axis_line"
ROLE_AXIS_ARROW = "axis_arrow"
ROLE_AXIS_LABEL = "axis_label"
ROLE_TICK_LABEL = "tick_label"
ROLE_TICK = "tick"


@dataclass(frozen=True)
class LineElement:
    start: Point
    end: Point
    color: str
    width: float
    role: str
    linecap: str = "round"


@dataclass(frozen=True)
class CircleElement:
    center: Point
    diameter: float
    fill: str
    role: str


@dataclass(frozen=True)
class BlockElement:
    block: Block
    role: str


CanvasElement = Union[LineElement, CircleElement, BlockElement]


@dataclass
class Canvas:
    """In-memory drawing surface; the background always fills the whole canvas."""

    size: Size
    background_color: str = "#fff"
    background_opacity: float = 1.0
    elements: List[CanvasElement] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.size.width

    @property
    def height(self) -> float:
        return self.size.height

    def add_block(self, block: Block, role: str = ROLE_BLOCK) -> BlockElement:
        element = BlockElement(block=block, role=role)
        self.elements.append(element)
        return element

    def add_line(
        self, start: Point, end: Point, color: str, width: float, role: str
    ) -> LineElement:
        element = LineElement(start=start, end=end, color=color, width=width, role=role)
        self.elements.append(element)
        return element

    def add_circle(self, center: Point, diameter: float, fill: str, role: str) -> CircleElement:
        element = CircleElement(center=center, diameter=diameter, fill=fill, role=role)
        self.elements.append(element)
        return element

    def grow_height(self, delta: float) -> None:
        self.size = Size(self.size.width, self.size.height + delta)

    def by_role(self, role: str) -> Iterator[CanvasElement]:
        return (element for element in self.elements if element.role == role)
