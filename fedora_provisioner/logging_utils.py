from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_PATH = "/var/log/fedora-provisioner.log"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
    stream: Optional[TextIO] = None,
) -> str:
    """Attach the provisioner handlers to the root logger and return the log file path.

    The file receives everything at DEBUG, including captured command output;
    the console (rich, colored when attached to a terminal) shows progress at
    ``level``. When ``log_path`` cannot be opened (/var/log is root-only, e.g.
    for --list) the log goes to ./fedora-provisioner.log instead. Repeated
    calls are no-ops.
    """

    root = logging.getLogger()

    if getattr(root, "_provisioner_configured", False):
        return getattr(root, "_provisioner_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / "fedora-provisioner.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = RichHandler(console=Console(file=stream), show_path=False)
        console.setLevel(level)
        handlers.append(console)

    # The file always gets DEBUG (command output); the console honors ``level``.
    root.setLevel(logging.DEBUG)
    for h in handlers:
        root.addHandler(h)

    setattr(root, "_provisioner_configured", True)
    setattr(root, "_provisioner_log_path", chosen_path)

    logging.getLogger(__name__).debug("Log file: %s (requested %s)", chosen_path, log_path)
    return chosen_path
