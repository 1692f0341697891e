"""
readprops read - Load and resolve properties.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from readprops.cli.common import build_options, parse_defines
from readprops.exceptions import ReadPropsError
from readprops.goals import read_project_properties
from readprops.properties import DEFAULT_ENCODING, dump_properties
from readprops.utils.logging import get_logger

logger = get_logger("readprops.cli.read")

console = Console()

FORMATS = ("properties", "json", "table")


def read(
    files: list[Path] | None = typer.Argument(None, help="Property files, loaded in order"),
    urls: list[str] | None = typer.Option(None, "--url", "-u", help="URL or classpath: name, loaded in order"),
    quiet: bool | None = typer.Option(None, "--quiet/--no-quiet", help="Skip resources that cannot be opened"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML options file"),
    defines: list[str] | None = typer.Option(None, "--define", "-D", help="Existing property as key=value"),
    output_format: str = typer.Option("properties", "--format", "-f", help="properties, json or table"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """
    Load properties and print them with every ${...} placeholder resolved.
    """
    if output_format not in FORMATS:
        raise typer.BadParameter(f"Expected one of {', '.join(FORMATS)}", param_hint="--format")
    if output_format == "table" and output is not None:
        raise typer.BadParameter("Table output cannot be written to a file", param_hint="--output")

    project_properties = parse_defines(defines)
    try:
        options = build_options(files, urls, quiet, config_path, log_level)
        resolved = read_project_properties(project_properties, options)
    except ReadPropsError as e:
        logger.debug("Read failed", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if output_format == "table":
        table = Table(title="Properties", show_header=True)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in resolved.items():
            table.add_row(key, value)
        console.print(table)
        return

    if output_format == "json":
        text = json.dumps(resolved, indent=2) + "\n"
        encoding = "utf-8"
    else:
        text = dump_properties(resolved)
        encoding = DEFAULT_ENCODING

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding=encoding)
        logger.info(f"Wrote {len(resolved)} properties to {output}")
    else:
        typer.echo(text, nl=False)
