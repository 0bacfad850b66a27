from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from domain.models import DiagramDocument, ExcalidrawDocument, SvgDocument


class DiagramRepository(Protocol):
    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, DiagramDocument]]: ...

    def load_by_path(self, path: Path) -> DiagramDocument: ...

    def load_raw(self, path: Path) -> dict[str, Any]: ...

    def load_style(self, path: Path) -> dict[str, Any]: ...


class ExcalidrawRepository(Protocol):
    def load(self, path: Path) -> ExcalidrawDocument: ...

    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...


class SvgRepository(Protocol):
    def save(self, document: SvgDocument, path: Path) -> None: ...
