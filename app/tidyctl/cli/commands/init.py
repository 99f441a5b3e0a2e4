"""Init command implementation.

Creates a starter manifest whose example rules are no-ops, ready to
be edited.
"""

from pathlib import Path
from typing import Annotated

import typer

from tidyctl.core.manifest import save_manifest
from tidyctl.core.paths import get_manifest_path
from tidyctl.errors import ManifestError
from tidyctl.models.manifest import Manifest, ManifestMeta, RuleRecord
from tidyctl.utils.formatting import print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Create a starter manifest.",
    invoke_without_command=True,
)


def sample_manifest() -> Manifest:
    """Build the starter manifest.

    Every example rule is a no-op so that running the starter manifest
    never touches a file until the operations are edited.
    """
    return Manifest(
        meta=ManifestMeta(description="tidyctl maintenance rules"),
        rules=[
            RuleRecord(
                operation="noop",
                description="Example: use operation 'purge' to erase old *.tmp files",
                source="/var/tmp/example",
                ndays=30,
                filter="*.tmp",
            ),
            RuleRecord(
                operation="noop",
                description="Example: use operation 'relocate' to archive old files",
                source="/srv/data/current",
                destination="/srv/data/archive",
                ndays=90,
                filter="*",
            ),
        ],
    )


@app.callback(invoke_without_command=True)
def init_manifest(
    ctx: typer.Context,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path for manifest file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing manifest.",
        ),
    ] = False,
) -> None:
    """Create a starter manifest.

    Examples:
        tidyctl init                    # Create manifest in default location
        tidyctl init --output my.toml   # Create manifest at custom path
        tidyctl init --force            # Overwrite existing manifest
    """
    if ctx.invoked_subcommand is not None:
        return

    output_path = output or get_manifest_path()

    if output_path.exists():
        if not force:
            print_error(f"Manifest already exists: {output_path}")
            print_info("Use --force to overwrite or specify a different path with --output.")
            raise typer.Exit(code=1)
        print_warning(f"Overwriting existing manifest: {output_path}")

    try:
        saved_path = save_manifest(sample_manifest(), output_path)
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Manifest written to {saved_path}")
    print_info("Edit the rules, then run 'tidyctl check' and 'tidyctl run'.")
