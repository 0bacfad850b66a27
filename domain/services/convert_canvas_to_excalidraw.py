from __future__ import annotations

import base64
import hashlib
import random
from typing import Dict, List

from domain.canvas import Canvas
from domain.models import ExcalidrawDocument, Glyph, Point, Size
from domain.services.convert_canvas_base import (
    CUSTOM_DATA_KEY,
    CanvasConverter,
    Element,
    Metadata,
)

SVG_MIME_TYPE = "image/svg+xml"


class CanvasToExcalidrawConverter(CanvasConverter):
    def __init__(self) -> None:
        super().__init__()
        self._files: Dict[str, dict] = {}

    def convert(self, canvas: Canvas) -> ExcalidrawDocument:
        self._files = {}
        return super().convert(canvas)

    def _build_document(self, elements: List[Element], canvas: Canvas) -> ExcalidrawDocument:
        app_state = {
            "viewBackgroundColor": canvas.background_color,
            "gridSize": None,
            "currentItemStrokeColor": "#000000",
        }
        return ExcalidrawDocument(elements=elements, app_state=app_state, files=dict(self._files))

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
    ) -> dict:
        return self._base_shape(
            element_id=element_id,
            type_name="rectangle",
            position=position,
            width=size.width,
            height=size.height,
            metadata=metadata,
            extra={
                "strokeColor": stroke_color if stroke_width > 0 else "transparent",
                "strokeWidth": stroke_width,
                "backgroundColor": background_color if background_opacity > 0 else "transparent",
                "fillStyle": "solid",
                "opacity": self._opacity(background_opacity),
            },
        )

    def _glyph_element(
        self,
        element_id: str,
        glyph: Glyph,
        origin: Point,
        metadata: Metadata,
    ) -> dict:
        file_id = self._register_file(glyph)
        return self._base_shape(
            element_id=element_id,
            type_name="image",
            position=origin,
            width=glyph.width,
            height=glyph.height,
            metadata=metadata,
            extra={
                "strokeColor": "transparent",
                "backgroundColor": "transparent",
                "fillStyle": "solid",
                "fileId": file_id,
                "status": "saved",
                "scale": [1, 1],
            },
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
    ) -> dict:
        dx = end.x - start.x
        dy = end.y - start.y
        return self._base_shape(
            element_id=element_id,
            type_name="line",
            position=start,
            width=abs(dx),
            height=abs(dy),
            metadata=metadata,
            extra={
                "strokeColor": stroke_color,
                "strokeWidth": stroke_width,
                "backgroundColor": "transparent",
                "fillStyle": "solid",
                "points": [[0, 0], [dx, dy]],
                "lastCommittedPoint": None,
                "startBinding": None,
                "endBinding": None,
                "startArrowhead": None,
                "endArrowhead": None,
            },
        )

    def _ellipse_element(
        self,
        element_id: str,
        center: Point,
        diameter: float,
        metadata: Metadata,
        fill: str,
    ) -> dict:
        radius = diameter / 2
        return self._base_shape(
            element_id=element_id,
            type_name="ellipse",
            position=Point(center.x - radius, center.y - radius),
            width=diameter,
            height=diameter,
            metadata=metadata,
            extra={
                "strokeColor": fill,
                "strokeWidth": 1,
                "backgroundColor": fill,
                "fillStyle": "solid",
            },
        )

    def _base_shape(
        self,
        element_id: str,
        type_name: str,
        position: Point,
        width: float,
        height: float,
        metadata: Metadata,
        extra: dict | None = None,
    ) -> dict:
        return {
            "id": element_id,
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": [],
            "frameId": None,
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "customData": {CUSTOM_DATA_KEY: metadata},
            **(extra or {}),
        }

    def _register_file(self, glyph: Glyph) -> str:
        payload = glyph.svg.encode("utf-8")
        file_id = hashlib.sha1(payload).hexdigest()
        if file_id not in self._files:
            encoded = base64.b64encode(payload).decode("ascii")
            self._files[file_id] = {
                "id": file_id,
                "mimeType": SVG_MIME_TYPE,
                "dataURL": f"data:{SVG_MIME_TYPE};base64,{encoded}",
                "created": 0,
            }
        return file_id

    def _opacity(self, value: float) -> int:
        if value <= 0:
            return 100
        return int(round(value * 100))

    def _rand_seed(self) -> int:
        return random.randint(1, 2**31 - 1)
