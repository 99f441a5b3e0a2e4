"""XDG-compliant path management for tidyctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/tidyctl/
- State: ~/.local/state/tidyctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "tidyctl"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/tidyctl/ (or XDG_CONFIG_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the run history and lock files that should
    persist between runs but are not configuration.

    Returns:
        Path to ~/.local/state/tidyctl/ (or XDG_STATE_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/tidyctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_manifest_path() -> Path:
    """Get the default manifest file path.

    Returns:
        Path to ~/.config/tidyctl/manifest.toml.
    """
    return get_config_dir() / "manifest.toml"


def get_theme_path() -> Path:
    """Get the user theme file path.

    Returns:
        Path to ~/.config/tidyctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_history_path() -> Path:
    """Get the history file path.

    Returns:
        Path to ~/.local/state/tidyctl/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def get_lock_dir() -> Path:
    """Get the run lock directory path.

    Returns:
        Path to ~/.local/state/tidyctl/locks/.
    """
    return get_state_dir() / "locks"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def ensure_lock_dir() -> Path:
    """Create the lock directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_lock_dir(), "lock")
