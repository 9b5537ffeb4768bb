from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import ProvisionConfig
from ..facts import HostFacts

DEFAULT_WORK_DIR = "/var/cache/fedora-provisioner"


@dataclass(frozen=True)
class BuildCtx:
    facts: HostFacts
    cfg: ProvisionConfig
    dry_run: bool = False

    @property
    def home(self) -> Path:
        return Path(self.facts.home)

    @property
    def work_dir(self) -> Path:
        return Path(str(self.cfg.raw.get("work_dir") or DEFAULT_WORK_DIR))

