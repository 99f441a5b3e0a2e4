"""Settings file for tidyctl.

Settings are stored in ~/.config/tidyctl/config.toml. A missing file
means defaults; a present but invalid file is an error.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tidyctl.core.paths import get_config_path, get_manifest_path
from tidyctl.errors import ConfigError

logger = logging.getLogger(__name__)

# Notification urgency levels understood by notify-send
Severity = Literal["low", "normal", "critical"]

DEFAULT_CHUNK_SIZE = 1024 * 1024


class TidyConfig(BaseModel):
    """Runtime settings.

    Attributes:
        manifest: Manifest to run when none is given on the command line.
        hash_chunk_size: Read/write chunk size for hashing and erasing.
        notify: Send a desktop notification when a run completes.
        failure_severity: Notification urgency for failed runs.
        lock: Refuse to start while another run holds the manifest lock.
        history: Record completed runs to the history file.
        log_file: Optional file that receives timestamped log lines.
    """

    model_config = ConfigDict(extra="forbid")

    manifest: Annotated[
        Path | None,
        Field(description="Default manifest path (None = ~/.config/tidyctl/manifest.toml)"),
    ] = None
    hash_chunk_size: Annotated[
        int,
        Field(ge=4096, le=64 * 1024 * 1024, description="Chunk size in bytes"),
    ] = DEFAULT_CHUNK_SIZE
    notify: Annotated[bool, Field(description="Send completion notifications")] = True
    failure_severity: Annotated[
        Severity,
        Field(description="Notification urgency for failed runs"),
    ] = "critical"
    lock: Annotated[bool, Field(description="Hold a lock file while running")] = True
    history: Annotated[bool, Field(description="Record runs to history")] = True
    log_file: Annotated[Path | None, Field(description="Optional log file")] = None


def load_config(path: Path | None = None) -> TidyConfig:
    """Load settings from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated TidyConfig; defaults if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return TidyConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return TidyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: TidyConfig, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically through a temporary file in the same
    directory and os.replace().

    Args:
        config: Settings to save.
        path: Destination path. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: TidyConfig) -> dict[str, object]:
    """Convert TidyConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional paths are omitted.
    """
    result: dict[str, object] = {
        "hash_chunk_size": config.hash_chunk_size,
        "notify": config.notify,
        "failure_severity": config.failure_severity,
        "lock": config.lock,
        "history": config.history,
    }
    if config.manifest is not None:
        result["manifest"] = str(config.manifest)
    if config.log_file is not None:
        result["log_file"] = str(config.log_file)
    return result


def require_config(path: Path | None = None) -> TidyConfig:
    """Load settings or exit with an error message.

    Args:
        path: Optional custom config path.

    Returns:
        Loaded TidyConfig.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    import typer

    from tidyctl.utils.formatting import print_error

    try:
        return load_config(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def resolve_manifest_path(config: TidyConfig, override: Path | None = None) -> Path:
    """Pick the manifest path: command line, then config, then default."""
    if override is not None:
        return override
    if config.manifest is not None:
        return config.manifest.expanduser()
    return get_manifest_path()
