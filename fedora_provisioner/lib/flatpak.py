from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def remote_add(name: str, url: str, *, dry_run: bool = False) -> None:
    run_cmd(["flatpak", "remote-add", "--if-not-exists", name, url], dry_run=dry_run)


def remote_delete(name: str, *, dry_run: bool = False) -> None:
    run_cmd(["flatpak", "remote-delete", name, "--force"], dry_run=dry_run)


def has_remote(name: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return True
    r = run_cmd(["flatpak", "remotes", "--columns=name"], check=False)
    return r.ok and name in {ln.strip() for ln in r.stdout.splitlines()}


def repair(*, dry_run: bool = False) -> None:
    run_cmd(["flatpak", "repair"], dry_run=dry_run)


def update(*, dry_run: bool = False) -> None:
    run_cmd(["flatpak", "update", "-y"], dry_run=dry_run)


def install(remote: str, apps: Sequence[str], *, dry_run: bool = False) -> None:
    """Install applications from ``remote`` in one flatpak transaction."""
    if not apps:
        return
    run_cmd(["flatpak", "install", "-y", remote, *apps], dry_run=dry_run)
