from __future__ import annotations

from typing import List

from ..lib import pkg
from ..lib.files import append_line_if_absent, backup_file
from ..operation import Operation
from ..retry import FailurePolicy
from .context import BuildCtx

DEFAULT_DNF_CONF = "/etc/dnf/dnf.conf"


def build(ctx: BuildCtx) -> List[Operation]:
    section = ctx.cfg.section("dnf")
    bootstrap = ctx.cfg.str_list("bootstrap", within=section)
    settings = section.get("settings") or {}
    conf_path = str(section.get("conf_path") or DEFAULT_DNF_CONF)

    def tune() -> None:
        backup_file(conf_path, dry_run=ctx.dry_run)
        for key, value in settings.items():
            append_line_if_absent(conf_path, f"{key}={value}", match_prefix=f"{key}=", dry_run=ctx.dry_run)

    ops = [
        Operation(
            "dnf.bootstrap",
            "Installing package manager plugins",
            lambda: pkg.dnf_install(bootstrap, dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("dnf",),
        ),
        Operation(
            "dnf.upgrade",
            "Upgrading system",
            lambda: pkg.dnf_upgrade(dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("dnf",),
        ),
    ]
    if settings:
        ops.append(
            Operation(
                "dnf.tune",
                "Optimizing DNF configuration",
                tune,
                failure_policy=FailurePolicy.ABORT,
                tags=("dnf",),
            )
        )
    return ops
