from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from .files import write_file

logger = logging.getLogger(__name__)

YUM_REPOS_DIR = "/etc/yum.repos.d"


def render_repo(section: str, options: Mapping[str, object]) -> str:
    lines = [f"[{section}]"]
    for key, value in options.items():
        if isinstance(value, bool):
            value = 1 if value else 0
        lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


def write_repo_file(
    name: str,
    section: str,
    options: Mapping[str, object],
    *,
    repos_dir: str = YUM_REPOS_DIR,
    dry_run: bool = False,
) -> bool:
    """Persist a .repo definition; rewritten only when its content changes."""

    p = Path(repos_dir) / f"{name}.repo"
    changed = write_file(p, render_repo(section, options), dry_run=dry_run)
    if changed:
        logger.info("Configured repository %s (%s)", section, str(p))
    return changed
