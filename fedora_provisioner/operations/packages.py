from __future__ import annotations

from typing import List, Optional

from ..errors import ConfigurationError
from ..lib import pkg
from ..operation import BatchMode, Operation, batch_operation
from ..retry import FailurePolicy
from .context import BuildCtx


def build(ctx: BuildCtx) -> List[Operation]:
    ops: List[Operation] = []

    packages = ctx.cfg.packages
    if packages:
        ops.append(
            batch_operation(
                "packages.install",
                f"Installing {len(packages)} baseline packages in one transaction",
                packages,
                mode=BatchMode.TRANSACTION,
                apply_all=lambda items: pkg.dnf_install(items, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.ABORT,
                tags=("packages",),
            )
        )

    groups = ctx.cfg.groups
    if groups:
        ops.append(
            batch_operation(
                "packages.groups",
                "Installing DNF groups",
                groups,
                mode=BatchMode.TRANSACTION,
                apply_all=lambda items: pkg.dnf_group_install(items, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("packages",),
            )
        )

    upgrade_op = _multimedia_upgrade(ctx)
    after = ctx.cfg.section("multimedia_upgrade").get("after")
    swaps = ctx.cfg.swaps
    if after and after not in {str(s["remove"]) for s in swaps}:
        raise ConfigurationError(f"multimedia_upgrade.after names no swap: {after!r}")

    # Each swap is its own transaction; dnf refuses to combine them.
    for swap in swaps:
        remove, install = str(swap["remove"]), str(swap["install"])
        allow_erasing = bool(swap.get("allow_erasing", False))
        ops.append(
            Operation(
                f"packages.swap.{remove}",
                f"Switching {remove} to {install}",
                lambda remove=remove, install=install, allow_erasing=allow_erasing: pkg.dnf_swap(
                    remove, install, allow_erasing=allow_erasing, dry_run=ctx.dry_run
                ),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("codecs",),
            )
        )
        if upgrade_op is not None and remove == after:
            ops.append(upgrade_op)
            upgrade_op = None

    if upgrade_op is not None:
        ops.append(upgrade_op)
    return ops


def _multimedia_upgrade(ctx: BuildCtx) -> Optional[Operation]:
    upgrade = ctx.cfg.section("multimedia_upgrade")
    if not upgrade.get("target"):
        return None
    target = str(upgrade["target"])
    options = ctx.cfg.str_list("options", within=upgrade)
    return Operation(
        "packages.multimedia-upgrade",
        f"Upgrading {target}",
        lambda: pkg.dnf_upgrade([target], options=options, dry_run=ctx.dry_run),
        failure_policy=FailurePolicy.INTERACTIVE,
        tags=("codecs",),
    )
