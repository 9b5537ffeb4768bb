from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = Path(__file__).resolve().parent / "manifests" / "fedora.yaml"

ON_FAILURE_CHOICES = ("prompt", "warn")


@dataclass(frozen=True)
class ProvisionConfig:
    raw: Dict[str, Any]

    def section(self, key: str) -> Dict[str, Any]:
        value = self.raw.get(key) or {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"{key} must be a mapping")
        return value

    def str_list(self, key: str, *, within: Optional[Dict[str, Any]] = None) -> List[str]:
        src = self.raw if within is None else within
        value = src.get(key) or []
        if not isinstance(value, list):
            raise ConfigurationError(f"{key} must be a list")
        return [str(v).strip() for v in value if str(v).strip()]

    def entries(self, key: str, *, within: Dict[str, Any], required: tuple = ("name", "url")) -> List[Dict[str, Any]]:
        value = within.get(key) or []
        if not isinstance(value, list):
            raise ConfigurationError(f"{key} must be a list")
        for entry in value:
            if not isinstance(entry, dict) or any(not entry.get(r) for r in required):
                raise ConfigurationError(f"{key} entries need {', '.join(required)}: {entry!r}")
        return value

    @property
    def on_failure(self) -> str:
        value = str(self.raw.get("on_failure") or "prompt").lower()
        if value not in ON_FAILURE_CHOICES:
            raise ConfigurationError(f"on_failure must be one of {', '.join(ON_FAILURE_CHOICES)}, got {value!r}")
        return value

    @property
    def probe_binaries(self) -> List[str]:
        return self.str_list("probe_binaries")

    @property
    def packages(self) -> List[str]:
        return self.str_list("packages")

    @property
    def groups(self) -> List[str]:
        return self.str_list("groups")

    @property
    def coprs(self) -> List[str]:
        return self.str_list("coprs", within=self.section("repositories"))

    @property
    def swaps(self) -> List[Dict[str, Any]]:
        swaps = self.raw.get("swaps") or []
        if not isinstance(swaps, list):
            raise ConfigurationError("swaps must be a list")
        for s in swaps:
            if not isinstance(s, dict) or not s.get("remove") or not s.get("install"):
                raise ConfigurationError(f"swap entries need remove and install: {s!r}")
        return swaps

    @property
    def repo_files(self) -> List[Dict[str, Any]]:
        files = self.section("repositories").get("files") or []
        if not isinstance(files, list):
            raise ConfigurationError("repositories.files must be a list")
        for f in files:
            if not isinstance(f, dict) or not f.get("name") or not isinstance(f.get("options"), dict):
                raise ConfigurationError(f"repository file entries need name and options: {f!r}")
        return files

    def kernel_packages(self, variant: str) -> List[str]:
        pkgs = self.str_list(variant, within=self.section("kernel"))
        if not pkgs:
            raise ConfigurationError(f"kernel.{variant} must list at least one package")
        return pkgs


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"Config file not found: {p}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigurationError(f"Config must be YAML: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping/dict: {p}")
    return data


def load_config(path: str | None = None) -> ProvisionConfig:
    """Load the bundled manifest, overlaid with ``path`` (top-level keys replace)."""

    raw = load_yaml(DEFAULT_MANIFEST)
    if path:
        overrides = load_yaml(path)
        logger.info("Config overrides from %s: %s", path, ", ".join(sorted(overrides)) or "-")
        raw.update(overrides)
    return ProvisionConfig(raw=raw)
