"""Settings commands.

Shows the effective settings and writes a default settings file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from tidyctl.core.config import TidyConfig, require_config, resolve_manifest_path, save_config
from tidyctl.core.paths import get_config_path
from tidyctl.errors import ConfigError
from tidyctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the settings file.",
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file."),
    ] = None,
) -> None:
    """Show the effective settings."""
    path = config_path or get_config_path()
    settings = require_config(path)

    table = Table(title="Settings", header_style="bold_header")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("config file", f"{path}" if path.exists() else f"{path} (not found, defaults)")
    table.add_row("manifest", str(resolve_manifest_path(settings)))
    table.add_row("hash_chunk_size", str(settings.hash_chunk_size))
    table.add_row("notify", str(settings.notify).lower())
    table.add_row("failure_severity", settings.failure_severity)
    table.add_row("lock", str(settings.lock).lower())
    table.add_row("history", str(settings.history).lower())
    table.add_row("log_file", str(settings.log_file) if settings.log_file else "-")

    console.print(table)


@app.command()
def init(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file to create."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with default values."""
    path = config_path or get_config_path()

    if path.exists() and not force:
        print_error(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(TidyConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
