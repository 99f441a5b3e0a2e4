"""Manifest models for declarative maintenance rules.

This module defines the Pydantic models representing the manifest
structure. A manifest is a list of rule rows; each row is validated
here and then turned into an immutable Rule by the engine.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ManifestMeta(BaseModel):
    """Metadata section of the manifest.

    Attributes:
        version: Manifest schema version (e.g., "1.0").
        description: Optional description of what this manifest maintains.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[str, Field(description="Manifest schema version")] = "1.0"
    description: Annotated[str | None, Field(description="Manifest description")] = None


class RuleRecord(BaseModel):
    """One raw manifest row, as read from TOML or CSV.

    Field names follow the manifest columns. The operation is kept as
    free text so that unrecognised operations survive loading and can
    be reported at run time instead of rejecting the whole manifest.

    Attributes:
        operation: Operation name (e.g., "purge", "relocate", "noop").
        description: Free text shown in logs and reports.
        source: Root directory whose files the rule selects.
        destination: Target directory for relocation.
        ndays: Minimum file age in days (0 selects every file).
        filter: Glob applied to file base names.
        recursive: Whether to descend into subdirectories of source.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    operation: Annotated[str, Field(description="Operation name")] = ""
    description: Annotated[str, Field(description="Rule description")] = ""
    source: Annotated[str, Field(description="Source directory")] = ""
    destination: Annotated[str, Field(description="Destination directory")] = ""
    ndays: Annotated[int, Field(ge=0, description="Minimum age in days")] = 0
    filter: Annotated[str, Field(description="File name glob")] = "*"
    recursive: Annotated[bool, Field(description="Descend into subdirectories")] = True


class Manifest(BaseModel):
    """Complete manifest: optional metadata plus ordered rule rows.

    Attributes:
        meta: Metadata section.
        rules: Rule rows in manifest order.
    """

    model_config = ConfigDict(extra="forbid")

    meta: Annotated[ManifestMeta, Field(default_factory=ManifestMeta)]
    rules: Annotated[
        list[RuleRecord],
        Field(default_factory=list, description="Maintenance rules in order"),
    ]
