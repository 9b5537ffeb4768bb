from __future__ import annotations

import logging
from pathlib import Path
from typing import List
from urllib.parse import urlparse

from ..lib import pkg
from ..lib.repos import YUM_REPOS_DIR, write_repo_file
from ..operation import BatchMode, Operation, batch_operation, failed, succeeded
from ..retry import FailurePolicy
from .context import BuildCtx

logger = logging.getLogger(__name__)


def build(ctx: BuildCtx) -> List[Operation]:
    """Third-party repositories, enabled one by one, then a single metadata refresh."""

    section = ctx.cfg.section("repositories")
    ops: List[Operation] = []

    release_rpms = ctx.cfg.str_list("release_rpms", within=section)
    if release_rpms:

        def install_release_rpms():
            release = ctx.facts.fedora_release
            if not release:
                return failed("Fedora release unknown (no VERSION_ID in /etc/os-release)")
            pkg.dnf_install([u.format(fedora=release) for u in release_rpms], dry_run=ctx.dry_run)
            return succeeded()

        ops.append(
            Operation(
                "repos.release-rpms",
                "Enabling RPM Fusion (free + nonfree)",
                install_release_rpms,
                failure_policy=FailurePolicy.ABORT,
                tags=("repositories",),
            )
        )

    keys = ctx.cfg.str_list("keys", within=section)
    if keys:
        ops.append(
            batch_operation(
                "repos.keys",
                "Importing repository signing keys",
                keys,
                mode=BatchMode.PER_ITEM,
                apply_one=lambda url: pkg.rpm_import_key(url, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.WARN,
                tags=("repositories",),
            )
        )

    for entry in ctx.cfg.repo_files:
        name = str(entry["name"])
        section_name = str(entry.get("section") or name)
        options = dict(entry["options"])
        ops.append(
            Operation(
                f"repos.file.{name}",
                f"Adding {options.get('name') or name} repository",
                lambda name=name, section_name=section_name, options=options: write_repo_file(
                    name, section_name, options, dry_run=ctx.dry_run
                ),
                failure_policy=FailurePolicy.ABORT,
                tags=("repositories",),
            )
        )

    repofiles = ctx.cfg.str_list("repofiles", within=section)
    if repofiles:

        def add_repofile(url: str) -> None:
            target = Path(YUM_REPOS_DIR) / Path(urlparse(url).path).name
            if target.exists():
                logger.info("Repository file %s already present", str(target))
                return
            pkg.add_repo_from_url(url, dry_run=ctx.dry_run)

        ops.append(
            batch_operation(
                "repos.repofiles",
                "Adding repositories from .repo URLs",
                repofiles,
                mode=BatchMode.PER_ITEM,
                apply_one=add_repofile,
                failure_policy=FailurePolicy.ABORT,
                tags=("repositories",),
            )
        )

    coprs = ctx.cfg.coprs
    if coprs:
        ops.append(
            batch_operation(
                "repos.coprs",
                f"Enabling {len(coprs)} COPR repositories",
                coprs,
                mode=BatchMode.PER_ITEM,
                apply_one=lambda name: pkg.copr_enable(name, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("repositories",),
            )
        )

    ops.append(
        Operation(
            "repos.refresh",
            "Refreshing metadata",
            lambda: pkg.dnf_refresh(dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("repositories",),
        )
    )
    return ops
