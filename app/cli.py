from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.diagram_repository import FileSystemDiagramRepository
from adapters.svg.renderer import CanvasToSvgConverter
from adapters.svg.repository import FileSystemSvgRepository
from adapters.typesetting.mathtext import MathtextTypesetter
from app.config import OUTPUT_SUFFIXES, RenderSettings, load_settings
from domain.errors import ConfigurationError, TypesetError
from domain.services.aggregators import column_count, row_count
from domain.services.convert_canvas_to_excalidraw import CanvasToExcalidrawConverter
from domain.services.place_diagram import Diagram
from domain.services.render_diagram import DiagramRenderer

app = typer.Typer(no_args_is_help=True)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.captureWarnings(True)


def _collect_inputs(inputs: List[Path]) -> List[Path]:
    paths: List[Path] = []
    for item in inputs:
        if item.is_dir():
            paths.extend(sorted(item.glob("*.json")))
        elif item.exists():
            paths.append(item)
        else:
            console.print(f"[red]File not found:[/] {item}")
            raise typer.Exit(code=1)
    return paths


def _exporter(output_format: str) -> tuple[Any, Any]:
    if output_format == "excalidraw":
        return CanvasToExcalidrawConverter(), FileSystemExcalidrawRepository()
    return CanvasToSvgConverter(), FileSystemSvgRepository()


def _resolve_settings(
    config: Optional[Path],
    output_dir: Optional[Path],
    output_format: Optional[str],
    style: Optional[Path],
) -> RenderSettings:
    try:
        settings = load_settings(config).render
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    updates: dict[str, Any] = {}
    if output_dir is not None:
        updates["output_dir"] = output_dir
    if output_format is not None:
        if output_format.lower() not in OUTPUT_SUFFIXES:
            console.print(
                f"[red]Unknown format {output_format!r}; expected one of "
                f"{', '.join(OUTPUT_SUFFIXES)}[/]"
            )
            raise typer.Exit(code=1)
        updates["output_format"] = output_format.lower()
    if style is not None:
        updates["style_path"] = style
    return settings.model_copy(update=updates)


@app.command("render")
def render(
    inputs: Optional[List[Path]] = typer.Argument(
        None,
        help=(
            "Diagram description files or directories with *.json descriptions. "
            "Defaults to the configured input directory."
        ),
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Directory to write rendered diagrams.",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", help="Output format: svg or excalidraw.",
    ),
    style: Optional[Path] = typer.Option(
        None, "--style", help="JSON or YAML style overrides applied above document styles.",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log layout phases."),
) -> None:
    _configure_logging(verbose)
    settings = _resolve_settings(config, output_dir, output_format, style)
    paths = _collect_inputs(inputs or [settings.input_dir])
    if not paths:
        console.print("[yellow]No diagram descriptions found[/]")
        raise typer.Exit(code=0)

    diagram_repo = FileSystemDiagramRepository()
    renderer = DiagramRenderer(
        MathtextTypesetter(font_size=settings.font_size, dpi=settings.dpi),
        ex_size=settings.ex_size,
    )
    converter, output_repo = _exporter(settings.output_format)

    try:
        style_overrides = (
            diagram_repo.load_style(settings.style_path) if settings.style_path else None
        )
        for path in paths:
            document = diagram_repo.load_by_path(path)
            canvas = renderer.render(document, style_overrides)
            target_path = settings.output_dir / f"{path.stem}{settings.output_suffix}"
            output_repo.save(converter.convert(canvas), target_path)
            console.print(
                f"[green]Wrote[/] {target_path} ({canvas.width:g}x{canvas.height:g})"
            )
    except (ConfigurationError, TypesetError) as exc:
        console.print(f"[red]Rendering failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Diagram description file to validate."),
) -> None:
    logging.captureWarnings(True)
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        document = FileSystemDiagramRepository().load_by_path(input_path)
        diagram = Diagram.from_document(document)
    except ConfigurationError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    for _, _, row in document.iter_rows():
        diagram.style.resolve_block_type(row.type.name)
    console.print(
        f"[green]Valid diagram description:[/] {input_path} "
        f"({column_count(diagram.columns)} column(s), {row_count(diagram.columns)} row(s))"
    )


if __name__ == "__main__":
    app()
