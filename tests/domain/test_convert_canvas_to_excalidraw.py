from __future__ import annotations

import base64

from domain.canvas import ROLE_CONNECTOR
from domain.services.convert_canvas_base import CUSTOM_DATA_KEY
from domain.services.convert_canvas_to_excalidraw import CanvasToExcalidrawConverter
from domain.services.render_diagram import DiagramRenderer
from tests.helpers.diagram_fixtures import column, diagram, load_diagram_fixture, row
from tests.helpers.fake_typesetter import FakeTypesetter


def _roles(elements: list[dict]) -> list[str]:
    return [element["customData"][CUSTOM_DATA_KEY]["role"] for element in elements]


def test_background_covers_final_canvas() -> None:
    canvas = DiagramRenderer(FakeTypesetter()).render(load_diagram_fixture("timing.json"))

    document = CanvasToExcalidrawConverter().convert(canvas)

    background = document.elements[0]
    assert _roles([background]) == ["background"]
    assert (background["x"], background["y"]) == (0.0, 0.0)
    assert (background["width"], background["height"]) == (canvas.width, canvas.height)
    assert document.app_state["viewBackgroundColor"] == "#fff"


def test_blocks_become_wrapper_and_glyph_image() -> None:
    canvas = DiagramRenderer(FakeTypesetter()).render(diagram(column(1, row(1, "x"))))

    document = CanvasToExcalidrawConverter().convert(canvas)

    wrapper, image = document.elements[1:]
    assert wrapper["type"] == "rectangle"
    assert (wrapper["x"], wrapper["y"], wrapper["width"], wrapper["height"]) == (5, 5, 40, 20)
    assert wrapper["strokeColor"] == "transparent"
    assert wrapper["customData"][CUSTOM_DATA_KEY]["text"] == "x"
    assert image["type"] == "image"
    assert (image["x"], image["y"]) == (3, 3)
    file_entry = document.files[image["fileId"]]
    assert file_entry["mimeType"] == "image/svg+xml"
    encoded = file_entry["dataURL"].split(",", 1)[1]
    assert "<text>x</text>" in base64.b64decode(encoded).decode("utf-8")


def test_empty_blocks_have_no_image() -> None:
    canvas = DiagramRenderer(FakeTypesetter()).render(diagram(column(1, row(1, ""), row(2))))

    document = CanvasToExcalidrawConverter().convert(canvas)

    assert [element["type"] for element in document.elements] == [
        "rectangle",
        "rectangle",
        "rectangle",
        "image",
    ]
    assert len(document.files) == 1


def test_lines_keep_relative_points_and_ids_are_stable() -> None:
    document = diagram(
        column(1, row(1, join={"out": True})),
        column(2, row(1, join={"in": True})),
    )
    canvas = DiagramRenderer(FakeTypesetter()).render(document)

    first = CanvasToExcalidrawConverter().convert(canvas)
    second = CanvasToExcalidrawConverter().convert(canvas)

    (line,) = [element for element in first.elements if element["type"] == "line"]
    assert _roles([line]) == [ROLE_CONNECTOR]
    assert (line["x"], line["y"]) == (45, 15)
    assert line["points"] == [[0, 0], [5, 0]]
    assert line["strokeWidth"] == 2
    assert [element["id"] for element in first.elements] == [
        element["id"] for element in second.elements
    ]


def test_document_dict_shape() -> None:
    canvas = DiagramRenderer(FakeTypesetter()).render(diagram())

    payload = CanvasToExcalidrawConverter().convert(canvas).to_dict()

    assert payload["type"] == "excalidraw"
    assert payload["source"] == "formula-diagrams"
    assert len(payload["elements"]) == 1
    assert payload["files"] == {}
