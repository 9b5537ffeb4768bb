from __future__ import annotations

import logging
from typing import List

from ..facts import BASELINE_V2, BASELINE_V3
from ..lib import pkg
from ..operation import Operation, succeeded
from ..retry import FailurePolicy
from .context import BuildCtx

logger = logging.getLogger(__name__)


def build(ctx: BuildCtx) -> List[Operation]:
    """Pick the CachyOS kernel variant from the CPU baseline captured at probe time.

    v3 gets the default kernel, v2 the LTS one. Without a confirmed baseline the
    operation does nothing beyond a warning so the session keeps going.
    """

    baseline = ctx.facts.cpu_baseline

    if baseline == BASELINE_V3:
        op_id, variant, label = "kernel.cachyos", "default", "x86_64_v3 supported"
    elif baseline == BASELINE_V2:
        op_id, variant, label = "kernel.cachyos-lts", "fallback", "only x86_64_v2 detected"
    else:

        def warn_only():
            logger.warning("Unable to confirm v2/v3 baseline. Skipping CachyOS kernel to avoid breakage.")
            return succeeded("no supported CPU baseline")

        return [
            Operation(
                "kernel.unsupported",
                "Skipping CachyOS kernel (CPU baseline unknown)",
                warn_only,
                failure_policy=FailurePolicy.WARN,
                tags=("kernel",),
            )
        ]

    packages = ctx.cfg.kernel_packages(variant)
    return [
        Operation(
            op_id,
            f"Installing {packages[0]} ({label})",
            lambda: pkg.dnf_install(packages, dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.ABORT,
            tags=("kernel",),
        )
    ]
