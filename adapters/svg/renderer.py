"""SVG export of a placed canvas using drawsvg."""

from __future__ import annotations

from typing import List

import drawsvg as draw

from domain.canvas import Canvas
from domain.models import Glyph, Point, Size, SvgDocument
from domain.services.convert_canvas_base import CanvasConverter, Element, Metadata


class CanvasToSvgConverter(CanvasConverter):
    def convert(self, canvas: Canvas) -> SvgDocument:
        return super().convert(canvas)

    def _build_document(self, elements: List[Element], canvas: Canvas) -> SvgDocument:
        d = draw.Drawing(canvas.width, canvas.height)
        for element in elements:
            d.append(element)
        return SvgDocument(text=d.as_svg(), width=canvas.width, height=canvas.height)

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
    ) -> draw.Rectangle:
        return draw.Rectangle(
            position.x, position.y, size.width, size.height,
            id=element_id,
            fill=background_color,
            fill_opacity=background_opacity,
            stroke=stroke_color if stroke_width > 0 else "none",
            stroke_width=stroke_width,
            data_role=metadata["role"],
        )

    def _glyph_element(
        self,
        element_id: str,
        glyph: Glyph,
        origin: Point,
        metadata: Metadata,
    ) -> draw.Image:
        return draw.Image(
            origin.x, origin.y, glyph.width, glyph.height,
            data=glyph.svg.encode("utf-8"),
            mime_type="image/svg+xml",
            embed=True,
            id=element_id,
            data_role=metadata["role"],
        )

    def _line_element(
        self,
        element_id: str,
        start: Point,
        end: Point,
        metadata: Metadata,
        stroke_color: str,
        stroke_width: float,
        linecap: str = "round",
    ) -> draw.Line:
        return draw.Line(
            start.x, start.y,
            end.x, end.y,
            id=element_id,
            stroke=stroke_color,
            stroke_width=stroke_width,
            stroke_linecap=linecap,
            data_role=metadata["role"],
        )

    def _ellipse_element(
        self,
        element_id: str,
        center: Point,
        diameter: float,
        metadata: Metadata,
        fill: str,
    ) -> draw.Circle:
        return draw.Circle(
            center.x, center.y, diameter / 2,
            id=element_id,
            fill=fill,
            data_role=metadata["role"],
        )
