from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from domain.errors import ConfigurationError
from domain.style import resolve_style

ContentFormat = Literal["inline-TeX", "TeX", "AsciiMath", "MathML"]
HeightPolicy = Literal["maxAll", "maxRow"]
AxisDirection = Literal["left", "right", "bidirectional"]

# Empirical glyph-metric overshoot compensation, in device units per axis.
CENTERING_BIAS = 2.0

PositiveIndex = Annotated[int, Field(ge=1)]
RowKey = Tuple[int, int]


class BuiltinBlockType(str, Enum):
    DEFAULT = "default"
    INTERACTION = "interaction"
    CONTROLLED_INTERACTION = "controlledInteraction"


class _DescriptionModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class ContentSpec(_DescriptionModel):
    format: ContentFormat = "TeX"
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return self.text == ""


class RowTypeSpec(_DescriptionModel):
    name: str = Field(default=BuiltinBlockType.DEFAULT.value, min_length=1)
    controlled: Optional[PositiveIndex] = None

    @property
    def builtin(self) -> BuiltinBlockType | None:
        try:
            return BuiltinBlockType(self.name)
        except ValueError:
            return None


class JoinSpec(_DescriptionModel):
    in_: bool = Field(default=False, alias="in")
    out: bool = False


class RowSpec(_DescriptionModel):
    n: Union[PositiveIndex, Tuple[PositiveIndex, PositiveIndex]] = 1
    content: ContentSpec = ContentSpec()
    type: RowTypeSpec = RowTypeSpec()
    height: HeightPolicy = "maxAll"
    join: JoinSpec = JoinSpec()

    @field_validator("n", mode="after")
    @classmethod
    def ensure_ascending_span(
        cls, value: Union[int, Tuple[int, int]]
    ) -> Union[int, Tuple[int, int]]:
        if isinstance(value, tuple) and value[0] > value[1]:
            msg = f"Row span [{value[0]}, {value[1]}] must be ascending"
            raise ValueError(msg)
        return value

    @property
    def is_span(self) -> bool:
        return isinstance(self.n, tuple)

    @property
    def start(self) -> int:
        return self.n[0] if isinstance(self.n, tuple) else self.n

    @property
    def end(self) -> int:
        return self.n[1] if isinstance(self.n, tuple) else self.n

    def covered_rows(self) -> range:
        return range(self.start, self.end + 1)


class ColumnSpec(_DescriptionModel):
    n: PositiveIndex = 1
    time: ContentSpec = ContentSpec()
    rows: List[RowSpec] = Field(default_factory=list)


class AxisPositionSpec(_DescriptionModel):
    left: PositiveIndex = 1
    right: int = -1

    @field_validator("right", mode="after")
    @classmethod
    def ensure_nonzero_right(cls, value: int) -> int:
        if value == 0:
            msg = "Axis position.right must be a column index or a negative offset"
            raise ValueError(msg)
        return value


class AxisSpec(_DescriptionModel):
    direction: AxisDirection = "right"
    label: ContentSpec = ContentSpec()
    position: AxisPositionSpec = AxisPositionSpec()


class DiagramDocument(_DescriptionModel):
    columns: List[ColumnSpec] = Field(default_factory=list)
    axis: Optional[AxisSpec] = None
    style: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("style", mode="after")
    @classmethod
    def ensure_style_resolves(cls, style: Dict[str, Any]) -> Dict[str, Any]:
        resolve_style(style)
        return style

    @model_validator(mode="after")
    def ensure_rows_do_not_overlap(self) -> "DiagramDocument":
        occupied: Dict[int, Dict[int, RowSpec]] = {}
        for column in self.columns:
            column_rows = occupied.setdefault(column.n, {})
            for row in column.rows:
                for index in row.covered_rows():
                    if index in column_rows:
                        msg = f"Column {column.n} declares more than one block at row {index}"
                        raise ValueError(msg)
                    column_rows[index] = row
        return self

    def iter_rows(self) -> Iterator[Tuple[RowKey, ColumnSpec, RowSpec]]:
        for column_idx, column in enumerate(self.columns):
            for row_idx, row in enumerate(column.rows):
                yield (column_idx, row_idx), column, row


def load_diagram_document(payload: Mapping[str, Any]) -> DiagramDocument:
    try:
        return DiagramDocument.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid diagram description: {exc}") from exc


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Glyph:
    """Typeset formula with its intrinsic size in pixels."""

    width: float
    height: float
    svg: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.svg


@dataclass(frozen=True)
class BlockWrapper:
    background_color: str = "#fff"
    background_opacity: float = 0.0
    stroke_width: float = 1.0
    stroke_color: str = "#000"


@dataclass(frozen=True)
class Block:
    """Positioned wrapper rectangle holding a typeset glyph."""

    content: ContentSpec
    glyph: Glyph
    wrapper: BlockWrapper
    size: Size
    position: Point = Point(0.0, 0.0)
    glyph_offset: Point = Point(0.0, 0.0)

    @classmethod
    def wrap(cls, content: ContentSpec, glyph: Glyph, wrapper: BlockWrapper, size: Size) -> Block:
        return cls(content=content, glyph=glyph, wrapper=wrapper, size=size).centered()

    def centered(self) -> Block:
        offset = Point(
            (self.size.width - self.glyph.width) / 2 - CENTERING_BIAS,
            (self.size.height - self.glyph.height) / 2 - CENTERING_BIAS,
        )
        return replace(self, glyph_offset=offset)

    def resized(self, width: float | None = None, height: float | None = None) -> Block:
        size = Size(
            self.size.width if width is None else width,
            self.size.height if height is None else height,
        )
        return replace(self, size=size).centered()

    def moved(self, x: float, y: float) -> Block:
        return replace(self, position=Point(x, y))

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def width(self) -> float:
        return self.size.width

    @property
    def height(self) -> float:
        return self.size.height

    @property
    def right(self) -> float:
        return self.position.x + self.size.width

    @property
    def bottom(self) -> float:
        return self.position.y + self.size.height

    @property
    def center(self) -> Point:
        return Point(self.position.x + self.size.width / 2, self.position.y + self.size.height / 2)

    @property
    def glyph_origin(self) -> Point:
        return Point(self.position.x + self.glyph_offset.x, self.position.y + self.glyph_offset.y)


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "formula-diagrams",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }


@dataclass(frozen=True)
class SvgDocument:
    text: str
    width: float
    height: float
