from __future__ import annotations

from typing import Protocol

from domain.models import Glyph


class Typesetter(Protocol):
    def typeset(self, markup: str, content_format: str) -> Glyph:
        ...
