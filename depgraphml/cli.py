"""
Command-line interface for depgraphml.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from depgraphml import config
from depgraphml.app import DepGraphApp
from depgraphml.core.graphml import export_graphml, write_graphml
from depgraphml.core.model import DependencyNode
from depgraphml.managers import DependencyTreeError, detect_manager, load_tree_file

app = typer.Typer(help="Render build tool dependency trees as GraphML for yEd.")
console = Console(stderr=True)


def resolve_tree(input_file: Optional[Path], project_dir: Path) -> DependencyNode:
    """Loads the tree from a saved file, or asks the detected build tool for it."""
    if input_file is not None:
        return load_tree_file(input_file)

    manager = detect_manager(project_dir)
    if not manager:
        raise DependencyTreeError(f"No supported project found in {project_dir}.")

    logging.info(f"Manager: {manager.name}")
    console.print(f"[dim]Resolving dependencies with {manager.name}...[/dim]")
    return manager.get_dependencies()


@app.callback()
def main_callback() -> None:
    config.setup_logging()


@app.command("export")
def export(
    input_file: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="Saved dependency tree (mvn dependency:tree text/JSON output, or a gradle dependencies report).",
    ),
    project_dir: Path = typer.Option(
        Path("."),
        "--project-dir",
        "-d",
        help="Project to resolve when no --input is given.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="GraphML file to write, '-' for stdout (default: DEPGRAPHML_OUTPUT or dependencies.graphml).",
    ),
) -> None:
    """Write the dependency tree as a GraphML document."""
    try:
        root = resolve_tree(input_file, project_dir)
    except DependencyTreeError as e:
        logging.error(f"Export aborted: {e}")
        console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(code=1)

    total = root.count()
    if output == "-":
        write_graphml(root, sys.stdout)
        sys.stdout.flush()
        return

    path = export_graphml(root, Path(output) if output else config.get_output_path())
    console.print(f"[green]Wrote {path}[/green] ({total} nodes, {total - 1} edges)")


@app.command("browse")
def browse(
    input_file: Optional[Path] = typer.Option(None, "--input", "-i", help="Saved dependency tree."),
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-d", help="Project to resolve."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="GraphML file written by the export key."),
) -> None:
    """Browse the dependency tree in the terminal."""
    DepGraphApp(input_file=input_file, project_dir=project_dir, output=output).run()
