"""
Main CLI entry point.
"""

import typer

from readprops import __version__
from readprops.cli import commandline, read


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"readprops version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="readprops",
    help="readprops - Load key=value properties and resolve ${...} placeholders",
    add_completion=False,
)

# Register commands
app.command(name="read", help="Load properties and resolve placeholders")(read.read)
app.command(name="commandline", help="Render properties as -Dkey=value arguments")(commandline.commandline)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    readprops - Load key=value properties and resolve ${...} placeholders.

    Run 'readprops <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
