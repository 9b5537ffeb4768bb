from __future__ import annotations

from typing import List

from ..lib import flatpak, pkg
from ..operation import BatchMode, Operation, batch_operation, succeeded
from ..retry import FailurePolicy
from .context import BuildCtx

DEFAULT_REMOTE = "flathub"
DEFAULT_REMOTE_URL = "https://dl.flathub.org/repo/flathub.flatpakrepo"


def _remote(ctx: BuildCtx) -> str:
    return str(ctx.cfg.section("flatpak").get("remote") or DEFAULT_REMOTE)


def remote_operations(ctx: BuildCtx) -> List[Operation]:
    section = ctx.cfg.section("flatpak")
    remote = _remote(ctx)
    url = str(section.get("remote_url") or DEFAULT_REMOTE_URL)

    ops = [
        Operation(
            "flatpak.install",
            "Installing Flatpak",
            lambda: pkg.dnf_install(["flatpak"], dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("flatpak",),
        )
    ]

    for name in ctx.cfg.str_list("remove_remotes", within=section):

        def delete(name: str = name):
            if not flatpak.has_remote(name, dry_run=ctx.dry_run):
                return succeeded(f"remote {name} not configured")
            flatpak.remote_delete(name, dry_run=ctx.dry_run)
            return succeeded()

        ops.append(
            Operation(
                f"flatpak.remove-remote.{name}",
                f"Removing Flatpak remote {name}",
                delete,
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("flatpak",),
            )
        )

    ops += [
        Operation(
            f"flatpak.add-remote.{remote}",
            f"Configuring Flatpak remote {remote}",
            lambda: flatpak.remote_add(remote, url, dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("flatpak",),
        ),
        Operation(
            "flatpak.repair",
            "Repairing Flatpak installation",
            lambda: flatpak.repair(dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("flatpak",),
        ),
    ]
    return ops


def app_operations(ctx: BuildCtx) -> List[Operation]:
    remote = _remote(ctx)
    apps = ctx.cfg.str_list("apps", within=ctx.cfg.section("flatpak"))
    ops = [
        Operation(
            "flatpak.update",
            "Updating Flatpaks",
            lambda: flatpak.update(dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("flatpak",),
        )
    ]
    if apps:
        ops.append(
            batch_operation(
                "flatpak.apps",
                f"Installing {len(apps)} Flatpak application(s) from {remote}",
                apps,
                mode=BatchMode.TRANSACTION,
                apply_all=lambda items: flatpak.install(remote, items, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("flatpak",),
            )
        )
    return ops
