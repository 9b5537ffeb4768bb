from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def dnf_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    """Install packages (names, URLs or local RPM paths) in one transaction."""
    if not packages:
        return
    run_cmd(["dnf", "-y", "install", *packages], dry_run=dry_run)


def dnf_upgrade(targets: Sequence[str] = (), *, options: Sequence[str] = (), dry_run: bool = False) -> None:
    run_cmd(["dnf", "-y", "upgrade", *targets, *options], dry_run=dry_run)


def dnf_refresh(*, dry_run: bool = False) -> None:
    run_cmd(["dnf", "-y", "update", "--refresh"], dry_run=dry_run)


def dnf_group_install(groups: Sequence[str], *, dry_run: bool = False) -> None:
    if not groups:
        return
    run_cmd(["dnf", "-y", "group", "install", *groups], dry_run=dry_run)


def dnf_swap(remove: str, install: str, *, allow_erasing: bool = False, dry_run: bool = False) -> None:
    argv = ["dnf", "-y", "swap", remove, install]
    if allow_erasing:
        argv.append("--allowerasing")
    run_cmd(argv, dry_run=dry_run)


def copr_enable(name: str, *, dry_run: bool = False) -> None:
    run_cmd(["dnf", "-y", "copr", "enable", name], dry_run=dry_run)


def add_repo_from_url(repofile_url: str, *, dry_run: bool = False) -> None:
    run_cmd(["dnf", "-y", "config-manager", "addrepo", f"--from-repofile={repofile_url}"], dry_run=dry_run)


def rpm_import_key(url: str, *, dry_run: bool = False) -> None:
    run_cmd(["rpm", "--import", url], dry_run=dry_run)


def rpm_install(url: str, *, dry_run: bool = False) -> None:
    run_cmd(["rpm", "-i", url], dry_run=dry_run)


def rpm_is_installed(package: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = run_cmd(["rpm", "-q", package], check=False)
    return r.ok
