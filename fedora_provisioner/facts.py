from __future__ import annotations

import logging
import os
import pwd
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Mapping, Optional, Set

from .errors import ConfigurationError, PrivilegeError
from .lib.command import run_cmd

logger = logging.getLogger(__name__)

DYNAMIC_LINKER = "/lib64/ld-linux-x86-64.so.2"

BASELINE_NONE = "none"
BASELINE_V2 = "v2"
BASELINE_V3 = "v3"

# glibc spells these x86-64-v3; older tooling used x86_64_v3.
_ISA_RE = re.compile(r"x86[-_]64[-_]v(\d)")


@dataclass(frozen=True)
class HostFacts:
    """Immutable host snapshot taken once at session start."""

    user: str
    home: str
    is_root: bool
    cpu_baseline: str = BASELINE_NONE
    binaries: FrozenSet[str] = field(default_factory=frozenset)
    uid: int = 0
    gid: int = 0
    fedora_release: str = ""

    def has(self, binary: str) -> bool:
        return binary in self.binaries

    @property
    def owner(self) -> tuple[int, int]:
        return (self.uid, self.gid)


def parse_isa_levels(report: str) -> Set[str]:
    """Extract x86-64 ISA levels from the dynamic linker's --help output.

    glibc lists every level it knows and marks the usable ones with
    "(supported, searched)". When any line carries that mark only marked levels
    count; a report without marks is taken at face value.
    """

    hits = []
    for line in report.splitlines():
        m = _ISA_RE.search(line)
        if m:
            hits.append((f"v{m.group(1)}", "supported" in line))

    annotated = any(supported for _, supported in hits)
    return {level for level, supported in hits if supported or not annotated}


def select_baseline(levels: Iterable[str]) -> str:
    """Prefer the higher baseline when both are present."""
    found = set(levels)
    if BASELINE_V3 in found:
        return BASELINE_V3
    if BASELINE_V2 in found:
        return BASELINE_V2
    return BASELINE_NONE


def detect_cpu_baseline(linker: str = DYNAMIC_LINKER) -> str:
    if not os.access(linker, os.X_OK):
        logger.info("Dynamic linker %s not executable; CPU baseline unknown", linker)
        return BASELINE_NONE
    r = run_cmd([linker, "--help"], check=False)
    levels = parse_isa_levels(r.stdout)
    logger.info("Detected CPU ISA baselines: %s", " ".join(sorted(levels)) or "unknown")
    return select_baseline(levels)


def _first_word(text: str) -> Optional[str]:
    for line in text.splitlines():
        parts = line.split()
        if parts:
            return parts[0]
    return None


def resolve_user(env: Mapping[str, str]) -> str:
    """Who the session is provisioning for.

    Order: the sudo invoker (unless root), the login name, the first active
    session, then root as a last resort.
    """

    sudo_user = (env.get("SUDO_USER") or "").strip()
    if sudo_user and sudo_user != "root":
        return sudo_user

    r = run_cmd(["logname"], check=False)
    name = r.stdout.strip() if r.ok else ""
    if name:
        return name

    r = run_cmd(["who"], check=False)
    name = (_first_word(r.stdout) or "") if r.ok else ""
    if name:
        return name

    return "root"


def read_fedora_release(os_release: str = "/etc/os-release") -> str:
    p = Path(os_release)
    if not p.exists():
        return ""
    for line in p.read_text(encoding="utf-8", errors="ignore").splitlines():
        if line.startswith("VERSION_ID="):
            return line.split("=", 1)[1].strip().strip('"')
    return ""


def probe(
    *,
    binaries: Iterable[str] = (),
    env: Optional[Mapping[str, str]] = None,
    linker: str = DYNAMIC_LINKER,
    os_release: str = "/etc/os-release",
    require_root: bool = True,
) -> HostFacts:
    """Gather host facts; refuses to run without root privilege unless told otherwise."""

    is_root = os.geteuid() == 0
    if require_root and not is_root:
        raise PrivilegeError("Please run as root (sudo -i).")

    user = resolve_user(os.environ if env is None else env)
    try:
        pw = pwd.getpwnam(user)
    except KeyError as e:
        raise ConfigurationError(f"Cannot resolve account record for {user!r}") from e

    present = frozenset(b for b in binaries if shutil.which(b))

    facts = HostFacts(
        user=user,
        home=pw.pw_dir,
        is_root=is_root,
        cpu_baseline=detect_cpu_baseline(linker),
        binaries=present,
        uid=pw.pw_uid,
        gid=pw.pw_gid,
        fedora_release=read_fedora_release(os_release),
    )
    logger.info(
        "Host: user=%s home=%s baseline=%s fedora=%s binaries=%s",
        facts.user,
        facts.home,
        facts.cpu_baseline,
        facts.fedora_release or "unknown",
        ",".join(sorted(facts.binaries)) or "-",
    )
    return facts
