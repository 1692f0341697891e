"""
readprops commandline - Render properties as -Dkey=value arguments.
"""

from pathlib import Path

import typer

from readprops.cli.common import build_options, parse_defines
from readprops.exceptions import ReadPropsError
from readprops.goals import read_properties_as_command_line

DEFAULT_PROPERTY_NAME = "readprops.commandline"


def commandline(
    files: list[Path] | None = typer.Argument(None, help="Property files, loaded in order"),
    urls: list[str] | None = typer.Option(None, "--url", "-u", help="URL or classpath: name, loaded in order"),
    quiet: bool | None = typer.Option(None, "--quiet/--no-quiet", help="Skip resources that cannot be opened"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML options file"),
    defines: list[str] | None = typer.Option(None, "--define", "-D", help="Existing property as key=value"),
    property_name: str | None = typer.Option(
        None, "--property-name", "-p", help="Print as NAME=<arguments> instead of the bare arguments"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """
    Print properties as -Dkey=value arguments, without resolving placeholders.

    Properties whose value contains a space are left out.
    """
    project_properties = parse_defines(defines)
    try:
        options = build_options(files, urls, quiet, config_path, log_level)
        arguments = read_properties_as_command_line(
            project_properties, options, property_name or DEFAULT_PROPERTY_NAME
        )
    except ReadPropsError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if property_name:
        typer.echo(f"{property_name}={arguments}")
    else:
        typer.echo(arguments.lstrip())
