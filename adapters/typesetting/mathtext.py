"""Typesetting binding backed by matplotlib's mathtext engine."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, Tuple

from matplotlib import mathtext
from matplotlib.font_manager import FontProperties
from matplotlib.mathtext import MathTextParser

from domain.errors import TypesetError
from domain.models import Glyph

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("TeX", "inline-TeX")


class MathtextTypesetter:
    """Typesets TeX markup into SVG glyphs.

    mathtext covers the TeX math subset only; AsciiMath and MathML input is
    rejected with ``TypesetError``. Sizes are reported in pixels at ``dpi``.
    """

    def __init__(self, font_size: float = 12.0, dpi: float = 72.0) -> None:
        self.font_size = font_size
        self.dpi = dpi
        self._parser = MathTextParser("path")
        self._cache: Dict[Tuple[str, str], Glyph] = {}

    def typeset(self, markup: str, content_format: str) -> Glyph:
        key = (markup, content_format)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if content_format not in SUPPORTED_FORMATS:
            raise TypesetError(markup, content_format, "format is not supported by mathtext")

        expression = self._as_math(markup)
        prop = FontProperties(size=self.font_size)
        try:
            parsed = self._parser.parse(expression, dpi=self.dpi, prop=prop)
            buffer = BytesIO()
            mathtext.math_to_image(expression, buffer, prop=prop, dpi=self.dpi, format="svg")
        except ValueError as exc:
            raise TypesetError(markup, content_format, str(exc)) from exc

        glyph = Glyph(
            width=float(parsed.width),
            height=float(parsed.height),
            svg=buffer.getvalue().decode("utf-8"),
        )
        logger.debug("Typeset %r as %.2fx%.2f", markup, glyph.width, glyph.height)
        self._cache[key] = glyph
        return glyph

    def _as_math(self, markup: str) -> str:
        stripped = markup.strip()
        if len(stripped) >= 2 and stripped.startswith("$") and stripped.endswith("$"):
            return stripped
        return f"${stripped}$"
