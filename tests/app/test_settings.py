from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import AppSettings, load_settings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults_without_config_file() -> None:
    render = load_settings().render

    assert render.ex_size == 6
    assert render.font_size == 12
    assert render.dpi == 72
    assert render.output_format == "svg"
    assert render.output_suffix == ".svg"
    assert render.style_path is None


def test_env_overrides_use_nested_delimiter(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FDG_RENDER__EX_SIZE", "8")
    monkeypatch.setenv("FDG_RENDER__OUTPUT_FORMAT", "Excalidraw")

    render = load_settings().render

    assert render.ex_size == 8
    assert render.output_format == "excalidraw"
    assert render.output_suffix == ".excalidraw"


def test_yaml_file_from_argument(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text(
        "render:\n  dpi: 96\n  style_path: styles/custom.yaml\n", encoding="utf-8"
    )

    render = load_settings(config_path).render

    assert render.dpi == 96
    assert render.style_path == Path("styles/custom.yaml")
    assert AppSettings._yaml_path is None


def test_yaml_file_from_env_loses_to_env_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("render:\n  dpi: 96\n  font_size: 14\n", encoding="utf-8")
    monkeypatch.setenv("FDG_CONFIG_PATH", str(config_path))
    monkeypatch.setenv("FDG_RENDER__DPI", "144")

    render = load_settings().render

    assert render.dpi == 144
    assert render.font_size == 14


def test_default_config_location_is_used(isolated_cwd: Path) -> None:
    config_dir = isolated_cwd / "config"
    config_dir.mkdir()
    (config_dir / "formula_diagrams.yaml").write_text(
        "render:\n  output_format: excalidraw\n", encoding="utf-8"
    )

    assert load_settings().render.output_format == "excalidraw"


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_settings(tmp_path / "missing.yaml")


def test_unknown_output_format_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FDG_RENDER__OUTPUT_FORMAT", "pdf")

    with pytest.raises(ValidationError):
        load_settings()
