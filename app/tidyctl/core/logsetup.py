"""Logging configuration for the command line.

Console logging goes to stderr through Rich. Scheduled runs usually
have no terminal, so a plain log file can be added from configuration.
"""

import logging
from pathlib import Path

from rich.logging import RichHandler

from tidyctl.utils.formatting import err_console

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure the tidyctl logger hierarchy.

    Args:
        verbose: Log DEBUG and above to the console.
        quiet: Log only ERROR and above to the console.
        log_file: Optional file receiving INFO and above (DEBUG with verbose).
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.ERROR
    else:
        console_level = logging.WARNING

    root = logging.getLogger("tidyctl")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(console=err_console, show_path=False, markup=False)
    console_handler.setLevel(console_level)
    root.addHandler(console_handler)

    file_level = logging.DEBUG if verbose else logging.INFO
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(min(console_level, file_level) if log_file is not None else console_level)
