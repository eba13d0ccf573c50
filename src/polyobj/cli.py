"""CLI entry point for the polyobj converter.

Usage:
    polyobj convert scene.yaml                 # writes scene.obj (+ scene.mtl)
    polyobj convert model.glb out/model        # writes out/model.obj
    polyobj convert-dir scenes/                # converts every supported file
    polyobj info scene.yaml                    # node tree and mesh summary
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from polyobj.core.errors import ConversionError, SceneLoadError
from polyobj.core.logging import setup_logging

app = typer.Typer(name="polyobj", help="Polygon scene to triangulated OBJ converter")
console = Console()

# Missing or unreadable input
EXIT_BAD_INPUT = -1
# Conversion aborted (malformed face, no meshes, unwritable output)
EXIT_CONVERSION_FAILED = 1


def _load_config(config: Optional[Path], workers: Optional[int] = None):
    from polyobj.core.pipeline_runner import load_step_config
    from polyobj.steps.s00_scene_convert.config import SceneConvertConfig

    cfg = load_step_config(config, SceneConvertConfig) if config else SceneConvertConfig()
    if workers is not None:
        cfg = cfg.model_copy(update={"workers": max(1, workers)})
    return cfg


@app.command()
def convert(
    input_path: Path = typer.Argument(..., help="Scene file (.yaml/.json document or .glb/.gltf/.ply/.off/.stl)"),
    output_base: Optional[Path] = typer.Argument(None, help="Output path without extension"),
    config: Optional[Path] = typer.Option(None, help="Step config YAML"),
    workers: Optional[int] = typer.Option(None, help="Triangulation threads"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Convert one scene file to OBJ + MTL."""
    setup_logging(log_level)
    from polyobj.core.pipeline_runner import convert_file

    if not input_path.is_file():
        console.print(f"[red]Cannot find input file {input_path}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)

    cfg = _load_config(config, workers)
    if not cfg.is_supported(input_path):
        # Anything that is not a scene file is ignored
        return

    try:
        output = convert_file(input_path, output_base, cfg)
    except SceneLoadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)
    except ConversionError as e:
        console.print(f"[red]Conversion failed: {e}[/red]")
        raise typer.Exit(EXIT_CONVERSION_FAILED)
    except ValueError as e:
        # Step input validation (e.g. reader backend missing)
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)

    console.print(
        f"[green]Wrote {output.obj_path}[/green] "
        f"({output.num_meshes} groups, {output.num_triangles} triangles, "
        f"{output.num_materials} materials)"
    )
    if output.mtl_path:
        console.print(f"[green]Wrote {output.mtl_path}[/green]")
    for issue in output.issues:
        console.print(f"[yellow]{issue.kind.value}[/yellow] {issue.subject}: {issue.message}")


@app.command()
def convert_dir(
    directory: Path = typer.Argument(..., help="Directory with scene files"),
    config: Optional[Path] = typer.Option(None, help="Step config YAML"),
    workers: Optional[int] = typer.Option(None, help="Triangulation threads"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Convert every supported scene file in a directory."""
    setup_logging(log_level)
    from polyobj.core.pipeline_runner import convert_directory

    if not directory.is_dir():
        console.print(f"[red]Directory not found: {directory}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)

    entries = convert_directory(directory, _load_config(config, workers))

    table = Table(title=f"Batch: {directory}")
    table.add_column("File", style="cyan")
    table.add_column("Meshes", justify="right")
    table.add_column("Triangles", justify="right")
    table.add_column("Issues", justify="right", style="yellow")
    table.add_column("Result")
    for entry in entries:
        table.add_row(
            entry.scene_path.name,
            str(entry.num_meshes),
            str(entry.num_triangles),
            str(entry.num_issues),
            f"[green]{entry.obj_path.name}[/green]" if entry.ok else f"[red]{entry.error}[/red]",
        )
    console.print(table)


@app.command()
def info(
    input_path: Path = typer.Argument(..., help="Scene file"),
    config: Optional[Path] = typer.Option(None, help="Step config YAML"),
) -> None:
    """Show the scene node tree and per-mesh face/triangle counts."""
    from polyobj.core.diagnostics import Diagnostics
    from polyobj.steps.s00_scene_convert.contracts import SceneConvertInput
    from polyobj.steps.s00_scene_convert.step import load_scene

    if not input_path.is_file():
        console.print(f"[red]Cannot find input file {input_path}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)

    cfg = _load_config(config)
    if not cfg.is_supported(input_path):
        console.print(f"[yellow]Unsupported scene format: {input_path.suffix}[/yellow]")
        raise typer.Exit(EXIT_BAD_INPUT)

    try:
        scene = load_scene(SceneConvertInput(scene_path=input_path), cfg, Diagnostics())
    except SceneLoadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)

    branches: dict[int, Tree] = {}
    tree: Optional[Tree] = None
    for _depth, index, node in scene.graph.walk():
        label = f"[cyan]{node.name}[/cyan]"
        if node.has_meshes:
            label += f" [dim]mesh {', '.join(map(str, node.mesh_indices))}[/dim]"
        if node.parent is None:
            tree = Tree(label)
            branches[index] = tree
        else:
            branches[index] = branches[node.parent].add(label)
    if tree is not None:
        console.print(tree)

    table = Table(title=f"Scene: {scene.name}")
    table.add_column("#", style="dim")
    table.add_column("Mesh", style="cyan")
    table.add_column("Faces", justify="right")
    table.add_column("Corners", justify="right")
    table.add_column("Triangles", justify="right")
    table.add_column("Material", style="green")
    for i, mesh in enumerate(scene.meshes):
        sizes = mesh.face_sizes
        triangles = str(int((sizes - 2).sum())) if (sizes >= 3).all() else "[red]malformed[/red]"
        table.add_row(
            str(i),
            mesh.name,
            str(mesh.num_faces),
            str(mesh.num_corners),
            triangles,
            mesh.material_name or "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()
