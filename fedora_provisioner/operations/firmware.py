from __future__ import annotations

from typing import List

from ..lib.command import run_cmd
from ..operation import Operation, requires_binary
from ..retry import FailurePolicy
from .context import BuildCtx


def build(ctx: BuildCtx) -> List[Operation]:
    """fwupd refresh/check/apply; only when fwupdmgr was present at probe time."""

    has_fwupd = requires_binary("fwupdmgr")
    steps = [
        ("firmware.refresh", "Refreshing firmware metadata", ["fwupdmgr", "refresh", "--force"]),
        ("firmware.get-updates", "Checking for firmware updates", ["fwupdmgr", "get-updates"]),
        ("firmware.update", "Applying firmware updates", ["fwupdmgr", "update", "-y"]),
    ]
    return [
        Operation(
            op_id,
            description,
            lambda argv=argv: run_cmd(argv, dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            applicable=has_fwupd,
            tags=("firmware",),
        )
        for op_id, description, argv in steps
    ]
