from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from domain.canvas import BlockElement, Canvas, CanvasElement, CircleElement, LineElement
from domain.models import Block, Glyph, Point, Size

Element = Any
Metadata = dict[str, Any]

CUSTOM_DATA_KEY = "formula_diagrams"
METADATA_SCHEMA_VERSION = "1.0"


class CanvasConverter(ABC):
    """Walks a placed canvas in drawing order and builds one output element per shape."""

    def __init__(self) -> None:
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "formula-diagrams")

    def convert(self, canvas: Canvas) -> Any:
        base_metadata: Metadata = {"schema_version": METADATA_SCHEMA_VERSION}
        elements: list[Element] = [
            self._rectangle_element(
                element_id=self._stable_id("background"),
                position=Point(0.0, 0.0),
                size=canvas.size,
                metadata=self._with_base_metadata({"role": "background"}, base_metadata),
                background_color=canvas.background_color,
                background_opacity=canvas.background_opacity,
                stroke_color=canvas.background_color,
                stroke_width=0.0,
            )
        ]
        for index, item in enumerate(canvas.elements):
            metadata = self._with_base_metadata({"role": item.role, "index": index}, base_metadata)
            elements.extend(self._build_item(item, index, metadata))
        return self._build_document(elements, canvas)

    def _build_item(self, item: CanvasElement, index: int, metadata: Metadata) -> list[Element]:
        if isinstance(item, BlockElement):
            return self._build_block(item.block, item.role, index, metadata)
        if isinstance(item, LineElement):
            return [
                self._line_element(
                    element_id=self._stable_id(item.role, str(index)),
                    start=item.start,
                    end=item.end,
                    metadata=metadata,
                    stroke_color=item.color,
                    stroke_width=item.width,
                    linecap=item.linecap,
                )
            ]
        if isinstance(item, CircleElement):
            return [
                self._ellipse_element(
                    element_id=self._stable_id(item.role, str(index)),
                    center=item.center,
                    diameter=item.diameter,
                    metadata=metadata,
                    fill=item.fill,
                )
            ]
        raise TypeError(f"Unsupported canvas element: {type(item).__name__}")

    def _build_block(
        self, block: Block, role: str, index: int, metadata: Metadata
    ) -> list[Element]:
        wrapper = block.wrapper
        block_metadata = self._with_base_metadata(
            {"format": block.content.format, "text": block.content.text}, metadata
        )
        elements = [
            self._rectangle_element(
                element_id=self._stable_id(role, str(index), "wrapper"),
                position=block.position,
                size=block.size,
                metadata=block_metadata,
                background_color=wrapper.background_color,
                background_opacity=wrapper.background_opacity,
                stroke_color=wrapper.stroke_color,
                stroke_width=wrapper.stroke_width,
            )
        ]
        if not block.glyph.is_empty:
            elements.append(
                self._glyph_element(
                    element_id=self._stable_id(role, str(index), "glyph"),
                    glyph=block.glyph,
                    origin=block.glyph_origin,
                    metadata=block_metadata,
                )
            )
        return elements

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _with_base_metadata(self, metadata: Metadata, base: Metadata) -> Metadata:
        merged = dict(base)
        merged.update(metadata)
        return merged

    @abstractmethod
    def _build_document(self, elements: list[Element], canvas: Canvas) -> Any:
        raise NotImplementedError

    @abstractmethod
    def _rectangle_element(
        self,
        element_id: str,
        position: Point,
        size: Size,
        metadata: Metadata,
        background_color: str,
        background_opacity: float,
        stroke_color: str,
        stroke_width: float,
    ) -> Element:
        raise NotImplementedError

    @abstractmethod
    def _glyph_element(
        self,
        element_id: str,
        glyph: Glyph,
        origin: Point,
        metadata: Metadata,
    ) -> Element:
        raise NotImplementedError

    @abstractmethod
    def _line_element(
        self,
        element_id: str,
        start: Point,
        end: Point,
        metadata: Metadata,
        stroke_color: str,
        stroke_width: float,
        linecap: str = "round",
    ) -> Element:
        raise NotImplementedError

    @abstractmethod
    def _ellipse_element(
        self,
        element_id: str,
        center: Point,
        diameter: float,
        metadata: Metadata,
        fill: str,
    ) -> Element:
        raise NotImplementedError
