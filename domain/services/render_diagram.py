from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from domain.canvas import Canvas
from domain.models import DiagramDocument
from domain.ports.typesetting import Typesetter
from domain.services.measure_block import DEFAULT_EX_SIZE, BlockMeasurer
from domain.services.place_diagram import Diagram, PlacementEngine

logger = logging.getLogger(__name__)


class DiagramRenderer:
    def __init__(self, typesetter: Typesetter, ex_size: float = DEFAULT_EX_SIZE) -> None:
        self.engine = PlacementEngine(BlockMeasurer(typesetter, ex_size))

    def render(
        self,
        document: DiagramDocument,
        style_overrides: Mapping[str, Any] | None = None,
    ) -> Canvas:
        diagram = Diagram.from_document(document, style_overrides)
        logger.debug(
            "Rendering diagram with %d column(s), axis=%s",
            len(diagram.columns),
            diagram.axis is not None,
        )
        return self.engine.place(diagram)
