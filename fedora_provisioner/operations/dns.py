from __future__ import annotations

import logging
from typing import List

from ..lib.command import run_cmd
from ..lib.files import write_file
from ..operation import Operation
from ..retry import FailurePolicy
from .context import BuildCtx

logger = logging.getLogger(__name__)

DEFAULT_DROPIN = "/etc/systemd/resolved.conf.d/99-dns-over-tls.conf"


def render_resolved_dropin(servers: List[str]) -> str:
    return "[Resolve]\n" f"DNS={' '.join(servers)}\n" "DNSOverTLS=yes\n"


def build(ctx: BuildCtx) -> List[Operation]:
    section = ctx.cfg.section("dns_over_tls")
    servers = ctx.cfg.str_list("servers", within=section)
    if not servers:
        return []
    path = str(section.get("path") or DEFAULT_DROPIN)

    def configure() -> None:
        write_file(path, render_resolved_dropin(servers), dry_run=ctx.dry_run)

    def restart() -> None:
        run_cmd(["systemctl", "restart", "systemd-resolved"], dry_run=ctx.dry_run)

    return [
        Operation(
            "dns.dot-config",
            "Configuring systemd-resolved for DNS-over-TLS",
            configure,
            failure_policy=FailurePolicy.ABORT,
            tags=("network",),
        ),
        Operation(
            "dns.restart-resolved",
            "Restarting systemd-resolved",
            restart,
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("network",),
        ),
    ]
