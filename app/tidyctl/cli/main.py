"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from tidyctl import __version__
from tidyctl.cli.commands import check, config, history, init, run
from tidyctl.core.logsetup import configure_logging

# Create main Typer app
app = typer.Typer(
    name="tidyctl",
    help="Declarative file-lifecycle maintenance.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tidyctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """tidyctl - Declarative file-lifecycle maintenance.

    Declare purge and relocate rules in a manifest and let a scheduler
    run them; originals are only erased after a verified copy exists.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose=verbose, quiet=quiet)


# Register commands
app.add_typer(run.app, name="run")
app.add_typer(check.app, name="check")
app.add_typer(init.app, name="init")
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
