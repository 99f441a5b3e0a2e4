"""Manifest file I/O operations.

This module loads manifests in TOML format (``[[rules]]`` tables) or CSV
format (one row per rule with the columns operation, description,
source, destination, ndays, filter and optionally recursive), validates
them with Pydantic models, and turns them into Rule records.
"""

import csv
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from tidyctl.core.paths import get_manifest_path
from tidyctl.errors import (
    ManifestError,
    ManifestNotFoundError,
    ManifestParseError,
    ManifestValidationError,
)
from tidyctl.models.manifest import Manifest, RuleRecord
from tidyctl.models.rule import Rule

CSV_COLUMNS: tuple[str, ...] = (
    "operation",
    "description",
    "source",
    "destination",
    "ndays",
    "filter",
    "recursive",
)


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate a manifest from a TOML or CSV file.

    Args:
        path: Path to the manifest file. If None, uses default manifest path.

    Returns:
        Validated Manifest object.

    Raises:
        ManifestNotFoundError: If the manifest file doesn't exist.
        ManifestParseError: If the file syntax is invalid.
        ManifestValidationError: If the content doesn't match the schema.
    """
    manifest_path = path or get_manifest_path()

    if not manifest_path.is_file():
        raise ManifestNotFoundError(f"Manifest not found: {manifest_path}")

    if manifest_path.suffix.lower() == ".csv":
        data = _read_csv(manifest_path)
    else:
        data = _read_toml(manifest_path)

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestValidationError(f"Invalid manifest content: {e}") from e


def load_rules(path: Path | None = None) -> list[Rule]:
    """Load a manifest and convert its rows to Rules in manifest order.

    Args:
        path: Path to the manifest file. If None, uses default manifest path.

    Returns:
        Rules numbered from 1.

    Raises:
        ManifestError: If the manifest cannot be loaded.
    """
    manifest = load_manifest(path)
    return [Rule.from_record(record, index) for index, record in enumerate(manifest.rules, start=1)]


def save_manifest(manifest: Manifest, path: Path | None = None) -> Path:
    """Save a manifest to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        manifest: The Manifest object to save.
        path: Path to save the manifest. If None, uses default manifest path.

    Returns:
        Path where the manifest was saved.

    Raises:
        ManifestError: If the file cannot be written.
    """
    manifest_path = path or get_manifest_path()
    manifest_path.parent.mkdir(parents=True, exist_ok=True)

    data = _manifest_to_dict(manifest)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=manifest_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(manifest_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestError(f"Failed to write manifest: {e}") from e

    return manifest_path


def _read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML manifest into a plain dictionary."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ManifestError(f"Failed to read manifest: {e}") from e


def _read_csv(path: Path) -> dict[str, Any]:
    """Read a CSV manifest into the same shape as a TOML manifest.

    Header names are matched case-insensitively. Empty cells are dropped
    so that model defaults apply, and fully blank rows are ignored.
    """
    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                return {"rules": []}

            fieldnames = [name.strip().lower() for name in reader.fieldnames]
            unknown = [name for name in fieldnames if name not in CSV_COLUMNS]
            if unknown:
                raise ManifestParseError(f"Unknown manifest columns: {', '.join(unknown)}")
            reader.fieldnames = fieldnames

            rows: list[dict[str, str]] = []
            for row in reader:
                if None in row:
                    raise ManifestParseError(f"Too many fields on line {reader.line_num}")
                values = {
                    key: value.strip() for key, value in row.items() if value and value.strip()
                }
                if values:
                    rows.append(values)
    except csv.Error as e:
        raise ManifestParseError(f"Invalid CSV syntax: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(f"Manifest is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ManifestError(f"Failed to read manifest: {e}") from e

    return {"rules": rows}


def _manifest_to_dict(manifest: Manifest) -> dict[str, Any]:
    """Convert a Manifest to a dictionary suitable for TOML serialization."""
    meta: dict[str, Any] = {"version": manifest.meta.version}
    if manifest.meta.description:
        meta["description"] = manifest.meta.description
    return {
        "meta": meta,
        "rules": [record.model_dump() for record in manifest.rules],
    }


def require_rules(manifest_path: Path | None = None) -> list[Rule]:
    """Load manifest rules or exit with a helpful error message.

    This is a convenience wrapper around load_rules() that handles
    common error cases by printing user-friendly messages and exiting.

    Args:
        manifest_path: Optional custom manifest path.

    Returns:
        Rules in manifest order.

    Raises:
        typer.Exit: If the manifest cannot be loaded.
    """
    import typer

    from tidyctl.utils.formatting import print_error, print_info

    path = manifest_path or get_manifest_path()
    try:
        return load_rules(path)
    except ManifestNotFoundError as e:
        print_error(f"Manifest not found: {path}")
        print_info("Run 'tidyctl init' to create a sample manifest.")
        raise typer.Exit(code=1) from e
    except ManifestError as e:
        print_error(f"Failed to load manifest: {e}")
        raise typer.Exit(code=1) from e
