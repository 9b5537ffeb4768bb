from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class FinalStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED_ABORTED = "failed-aborted"


@dataclass(frozen=True)
class AttemptRecord:
    op_id: str
    attempt: int
    outcome: Outcome
    detail: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["outcome"] = self.outcome.value
        return d


@dataclass
class OutcomeLog:
    """Attempt history plus final status per operation.

    Append-only: records are never rewritten and a final status is set at most
    once per operation.
    """

    records: List[AttemptRecord] = field(default_factory=list)
    statuses: Dict[str, FinalStatus] = field(default_factory=dict)
    skip_reasons: Dict[str, str] = field(default_factory=dict)
    aborted_by: Optional[str] = None

    def record(self, rec: AttemptRecord) -> None:
        if rec.op_id in self.statuses:
            raise ValueError(f"Operation {rec.op_id} already finished as {self.statuses[rec.op_id].value}")
        self.records.append(rec)

    def finish(self, op_id: str, status: FinalStatus, *, reason: str | None = None) -> None:
        if op_id in self.statuses:
            raise ValueError(f"Operation {op_id} already finished as {self.statuses[op_id].value}")
        self.statuses[op_id] = status
        if reason and status is FinalStatus.SKIPPED:
            self.skip_reasons[op_id] = reason
        if status is FinalStatus.FAILED_ABORTED:
            self.aborted_by = op_id

    def attempts_for(self, op_id: str) -> List[AttemptRecord]:
        return [r for r in self.records if r.op_id == op_id]

    def status_of(self, op_id: str) -> Optional[FinalStatus]:
        return self.statuses.get(op_id)

    def ids_with(self, status: FinalStatus) -> List[str]:
        return [op_id for op_id, s in self.statuses.items() if s is status]

    def counts(self) -> Dict[str, int]:
        out = {s.value: 0 for s in FinalStatus}
        for s in self.statuses.values():
            out[s.value] += 1
        return out

    @property
    def aborted(self) -> bool:
        return self.aborted_by is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "statuses": {k: v.value for k, v in self.statuses.items()},
            "skip_reasons": dict(self.skip_reasons),
            "aborted_by": self.aborted_by,
            "counts": self.counts(),
        }


def format_summary(log: OutcomeLog) -> List[str]:
    """Human-readable summary lines for the end of a session."""

    c = log.counts()
    lines = [
        "Summary: {succeeded} succeeded, {skipped} skipped, {failed} failed".format(
            succeeded=c[FinalStatus.SUCCEEDED.value],
            skipped=c[FinalStatus.SKIPPED.value],
            failed=c[FinalStatus.FAILED_ABORTED.value],
        )
    ]
    skipped = log.ids_with(FinalStatus.SKIPPED)
    if skipped:
        for op_id in skipped:
            reason = log.skip_reasons.get(op_id)
            lines.append(f"  skipped: {op_id}" + (f" ({reason})" if reason else ""))
    if log.aborted_by:
        last = log.attempts_for(log.aborted_by)
        detail = last[-1].detail if last and last[-1].detail else ""
        lines.append(f"  aborted by: {log.aborted_by}" + (f" ({detail})" if detail else ""))
    return lines
