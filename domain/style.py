from __future__ import annotations

import copy
import warnings
from collections.abc import Mapping
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from domain.errors import ConfigurationError, StyleResolutionWarning

DEFAULT_BLOCK_TYPE = "default"


class _StyleModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Margin(_StyleModel):
    top: float = Field(default=5.0, ge=0)
    bottom: float = Field(default=5.0, ge=0)
    left: float = Field(default=5.0, ge=0)
    right: float = Field(default=5.0, ge=0)


class CanvasStyle(_StyleModel):
    margin: Margin = Margin()
    background_color: str = "#fff"
    background_opacity: float = Field(default=1.0, ge=0, le=1)


class BlockTypeStyle(_StyleModel):
    background_color: str = "#fff"
    stroke_width: float = Field(default=0.0, ge=0)
    stroke_color: str = "#000"
    background_opacity: float = Field(default=1.0, ge=0, le=1)
    # Explicit wrapper size in typesetting units (ex).
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    circle_diameter: Optional[float] = Field(default=None, ge=0)
    line_width: Optional[float] = Field(default=None, ge=0)


class ConnectionStyle(_StyleModel):
    width: float = Field(default=2.0, ge=0)
    color: str = "#000"


def _default_block_types() -> Dict[str, BlockTypeStyle]:
    return {
        "default": BlockTypeStyle(),
        "interaction": BlockTypeStyle(stroke_width=2, stroke_color="#ff0000"),
        "controlledInteraction": BlockTypeStyle(
            stroke_width=2,
            stroke_color="#0000ff",
            circle_diameter=10,
            line_width=2,
        ),
    }


class BlocksStyle(_StyleModel):
    connections: ConnectionStyle = ConnectionStyle()
    types: Dict[str, BlockTypeStyle] = Field(default_factory=_default_block_types)

    @field_validator("types", mode="after")
    @classmethod
    def ensure_builtin_types(cls, types: Dict[str, BlockTypeStyle]) -> Dict[str, BlockTypeStyle]:
        if DEFAULT_BLOCK_TYPE not in types:
            msg = "Style.blocks.types must define a 'default' entry"
            raise ValueError(msg)
        controlled = types.get("controlledInteraction")
        if controlled is not None and (
            controlled.circle_diameter is None or controlled.line_width is None
        ):
            msg = (
                "Style.blocks.types.controlledInteraction requires "
                "'circleDiameter' and 'lineWidth'"
            )
            raise ValueError(msg)
        return types


class ColumnsStyle(_StyleModel):
    interval: float = Field(default=5.0, ge=0)
    normalize_widths: bool = False


class RowsStyle(_StyleModel):
    interval: float = Field(default=5.0, ge=0)


class AxisStyle(_StyleModel):
    width: float = Field(default=2.0, ge=0)
    arrow_height: float = Field(default=5.0, ge=0)
    tick_height: float = Field(default=2.0, ge=0)
    color: str = "#000"
    margin: float = Field(default=5.0, ge=0)


class Style(_StyleModel):
    canvas: CanvasStyle = CanvasStyle()
    blocks: BlocksStyle = BlocksStyle()
    columns: ColumnsStyle = ColumnsStyle()
    rows: RowsStyle = RowsStyle()
    axis: AxisStyle = AxisStyle()

    def resolve_block_type(self, name: str) -> tuple[str, BlockTypeStyle]:
        """Return the style entry for ``name``, falling back to ``default``."""
        entry = self.blocks.types.get(name)
        if entry is not None:
            return name, entry
        warnings.warn(
            f"Type '{name}' is not defined in styles. The 'default' type is used instead.",
            StyleResolutionWarning,
            stacklevel=2,
        )
        return DEFAULT_BLOCK_TYPE, self.blocks.types[DEFAULT_BLOCK_TYPE]


DEFAULT_STYLE_LAYER: Dict[str, Any] = Style().model_dump(by_alias=True, exclude_none=True)


def merge_style_layers(*layers: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Deep-merge style layers; later layers win. Inputs are never mutated."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        if not isinstance(layer, Mapping):
            msg = f"Style layer must be a mapping, got {type(layer).__name__}"
            raise ConfigurationError(msg)
        _merge_into(merged, layer)
    return merged


def _merge_into(target: Dict[str, Any], layer: Mapping[str, Any]) -> None:
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        elif isinstance(value, Mapping):
            nested: Dict[str, Any] = {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def resolve_style(*overrides: Mapping[str, Any] | None) -> Style:
    """Build a Style from defaults plus override layers in increasing priority."""
    merged = merge_style_layers(DEFAULT_STYLE_LAYER, *overrides)
    try:
        return Style.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid style: {exc}") from exc
