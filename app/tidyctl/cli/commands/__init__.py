"""CLI commands for tidyctl.

This package contains all subcommand implementations.
"""

from tidyctl.cli.commands import check, config, history, init, run

__all__ = ["check", "config", "history", "init", "run"]
