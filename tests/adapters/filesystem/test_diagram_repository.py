from __future__ import annotations

from pathlib import Path

import pytest

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.diagram_repository import (
    FileSystemDiagramRepository,
    strip_line_comments,
)
from domain.errors import ConfigurationError
from domain.models import ExcalidrawDocument
from tests.helpers.diagram_fixtures import fixture_path


def test_comments_outside_strings_are_stripped() -> None:
    content = '{"url": "http://example.com", // trailing\n// whole line\n"n": 1}'

    assert strip_line_comments(content) == '{"url": "http://example.com", \n\n"n": 1}'


def test_escaped_quotes_keep_string_state() -> None:
    content = '{"text": "say \\"//hi\\"" // note}'

    assert strip_line_comments(content) == '{"text": "say \\"//hi\\"" '


def test_load_fixture_with_comments() -> None:
    document = FileSystemDiagramRepository().load_by_path(fixture_path("timing.json"))

    assert [column.n for column in document.columns] == [1, 2, 3]
    assert document.axis is not None
    assert document.axis.direction == "bidirectional"
    assert document.style["columns"]["interval"] == 10


def test_load_all_with_paths_is_sorted() -> None:
    pairs = FileSystemDiagramRepository().load_all_with_paths(fixture_path("timing.json").parent)

    assert [path.name for path, _ in pairs] == ["timing.json", "two_columns.json"]


def test_invalid_json_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"columns": [', encoding="utf-8")

    with pytest.raises(ConfigurationError, match="broken.json"):
        FileSystemDiagramRepository().load_by_path(path)


def test_invalid_description_names_file(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"columns": [{"n": 1, "rows": [{"n": [3, 1]}]}]}', encoding="utf-8")

    with pytest.raises(ConfigurationError, match="bad.json"):
        FileSystemDiagramRepository().load_by_path(path)


def test_missing_file_raises_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read"):
        FileSystemDiagramRepository().load_raw(tmp_path / "missing.json")


def test_load_style_from_yaml_and_json(tmp_path: Path) -> None:
    yaml_path = tmp_path / "style.yaml"
    yaml_path.write_text("axis:\n  arrowHeight: 7\n", encoding="utf-8")
    json_path = tmp_path / "style.json"
    json_path.write_text('{"rows": {"interval": 2}} // tight rows', encoding="utf-8")
    empty_path = tmp_path / "empty.yml"
    empty_path.write_text("", encoding="utf-8")
    repo = FileSystemDiagramRepository()

    assert repo.load_style(yaml_path) == {"axis": {"arrowHeight": 7}}
    assert repo.load_style(json_path) == {"rows": {"interval": 2}}
    assert repo.load_style(empty_path) == {}


def test_load_style_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "style.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="expected a mapping"):
        FileSystemDiagramRepository().load_style(path)


def test_excalidraw_repository_roundtrip(tmp_path: Path) -> None:
    document = ExcalidrawDocument(
        elements=[{"id": "a", "type": "rectangle"}],
        app_state={"viewBackgroundColor": "#fff"},
        files={},
    )
    target = tmp_path / "scenes" / "diagram.excalidraw"
    repo = FileSystemExcalidrawRepository()

    repo.save(document, target)

    assert repo.load(target) == document
