from __future__ import annotations

from pathlib import Path

from .command import run_cmd


def shallow_clone(url: str, dest: str | Path, *, dry_run: bool = False) -> Path:
    """git clone --depth 1; an existing checkout at ``dest`` is reused."""

    d = Path(dest)
    if (d / ".git").is_dir():
        return d
    run_cmd(["git", "clone", "--depth", "1", url, str(d)], dry_run=dry_run)
    return d
