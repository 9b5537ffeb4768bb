from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .facts import HostFacts
from .outcome import FinalStatus, OutcomeLog
from .registry import OperationRegistry

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def tag_counts(registry: OperationRegistry, log: OutcomeLog) -> Dict[str, Dict[str, int]]:
    """Final status counts per tag. Operations that never ran are not counted."""

    out: Dict[str, Dict[str, int]] = {}
    for tag in sorted({t for op in registry for t in op.tags}):
        counts = {s.value: 0 for s in FinalStatus}
        for op in registry.with_tag(tag):
            status = log.status_of(op.op_id)
            if status is not None:
                counts[status.value] += 1
        out[tag] = counts
    return out


def build_report(
    log: OutcomeLog,
    facts: Optional[HostFacts],
    exit_code: int,
    *,
    registry: Optional[OperationRegistry] = None,
) -> Dict[str, Any]:
    report: Dict[str, Any] = {"exit_code": exit_code, "outcome": log.to_dict()}
    if facts is not None:
        host = asdict(facts)
        host["binaries"] = sorted(facts.binaries)
        report["host"] = host
    if registry is not None:
        report["by_tag"] = tag_counts(registry, log)
    return report


def save_report(path: str, report: Dict[str, Any]) -> None:
    """Write the session report. Nothing reads it back; each run starts fresh."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(report, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Report written to %s", str(p))
