from __future__ import annotations

from typing import List

from ..lib.command import run_cmd
from ..operation import Operation
from ..retry import FailurePolicy
from .context import BuildCtx


def _units(ctx: BuildCtx, key: str) -> List[str]:
    return ctx.cfg.str_list(key, within=ctx.cfg.section("services"))


def enable_operations(ctx: BuildCtx) -> List[Operation]:
    return [
        Operation(
            f"services.enable.{unit}",
            f"Enabling and starting {unit}",
            lambda unit=unit: run_cmd(["systemctl", "enable", "--now", unit], dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("services",),
        )
        for unit in _units(ctx, "enable_now")
    ]


def disable_operations(ctx: BuildCtx) -> List[Operation]:
    return [
        Operation(
            f"services.disable.{unit}",
            f"Disabling {unit}",
            lambda unit=unit: run_cmd(["systemctl", "disable", unit], dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("services",),
        )
        for unit in _units(ctx, "disable")
    ]
