from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any, List

import yaml

from adapters.filesystem.json_utils import loads_object
from domain.errors import ConfigurationError
from domain.models import DiagramDocument, load_diagram_document
from domain.ports.repositories import DiagramRepository

YAML_SUFFIXES = (".yaml", ".yml")


class FileSystemDiagramRepository(DiagramRepository):
    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, DiagramDocument]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def load_by_path(self, path: Path) -> DiagramDocument:
        payload = self.load_raw(path)
        try:
            return load_diagram_document(payload)
        except ConfigurationError as exc:
            raise ConfigurationError(f"{path}: {exc}") from exc

    def load_raw(self, path: Path) -> dict[str, Any]:
        text = self._read_text(path)
        return loads_object(strip_line_comments(text), path)

    def load_style(self, path: Path) -> dict[str, Any]:
        """Read a standalone style override file (JSON with comments, or YAML)."""
        text = self._read_text(path)
        if path.suffix.lower() not in YAML_SUFFIXES:
            return loads_object(strip_line_comments(text), path)
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{path}: invalid YAML: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping, got {type(data).__name__}")
        return data

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc.strerror or exc}") from exc

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")


def strip_line_comments(content: str) -> str:
    """Drop ``//`` comments that start outside of string literals."""
    result_lines: List[str] = []
    for line in content.splitlines():
        in_string = False
        escaped = False
        cleaned = []
        for idx, char in enumerate(line):
            if char == '"' and not escaped:
                in_string = not in_string
            if not in_string and char == "/" and idx + 1 < len(line) and line[idx + 1] == "/":
                break
            cleaned.append(char)
            escaped = char == "\\" and not escaped
        result_lines.append("".join(cleaned))
    return "\n".join(result_lines)
