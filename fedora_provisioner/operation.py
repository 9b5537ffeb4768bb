from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .errors import OperationFailure
from .facts import HostFacts
from .retry import FailurePolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str = ""


def succeeded(message: str = "") -> ActionResult:
    return ActionResult(ok=True, message=message)


def failed(message: str = "") -> ActionResult:
    return ActionResult(ok=False, message=message)


Action = Callable[[], Any]
Predicate = Callable[[HostFacts], bool]


@dataclass(frozen=True)
class Operation:
    """One declarative provisioning step.

    ``action`` performs the side effects. Anything but a failed ActionResult
    counts as success (command helpers return their CmdResult). Raising
    OperationFailure or OSError counts as failure. ``tags`` group operations
    for reporting only and are never used for scheduling.
    """

    op_id: str
    description: str
    action: Action
    failure_policy: FailurePolicy = FailurePolicy.INTERACTIVE
    applicable: Optional[Predicate] = None
    tags: Tuple[str, ...] = ()

    def is_applicable(self, facts: HostFacts) -> bool:
        return True if self.applicable is None else bool(self.applicable(facts))


def requires_binary(name: str) -> Predicate:
    def _pred(facts: HostFacts) -> bool:
        return facts.has(name)

    _pred.__name__ = f"requires_{name}"
    return _pred


class BatchMode(str, Enum):
    TRANSACTION = "transaction"
    PER_ITEM = "per-item"


@dataclass
class _PerItemBatch:
    items: List[str]
    apply: Callable[[str], None]
    done: List[str] = field(default_factory=list)

    def __call__(self) -> ActionResult:
        failures: List[str] = []
        for item in self.items:
            if item in self.done:
                continue
            try:
                self.apply(item)
            except (OperationFailure, OSError) as e:
                logger.warning("Item %s failed: %s", item, e)
                failures.append(item)
            else:
                self.done.append(item)
        if failures:
            return failed(f"{len(failures)}/{len(self.items)} failed: {', '.join(failures)}")
        return succeeded(f"{len(self.items)} item(s)")


def batch_operation(
    op_id: str,
    description: str,
    items: Sequence[str],
    *,
    mode: BatchMode,
    apply_all: Optional[Callable[[Sequence[str]], None]] = None,
    apply_one: Optional[Callable[[str], None]] = None,
    failure_policy: FailurePolicy = FailurePolicy.INTERACTIVE,
    applicable: Optional[Predicate] = None,
    tags: Tuple[str, ...] = (),
) -> Operation:
    """Build an operation over a list of items.

    TRANSACTION hands every item to ``apply_all`` in a single call, so the set
    installs or fails as a whole. PER_ITEM calls ``apply_one`` for each item,
    keeps going past failures and fails if any item failed; a retry only
    re-attempts the items that have not succeeded yet.
    """

    item_list = [str(i) for i in items]
    action: Action
    if mode is BatchMode.TRANSACTION:
        if apply_all is None:
            raise ValueError(f"{op_id}: transaction batch needs apply_all")

        def action() -> ActionResult:
            apply_all(item_list)
            return succeeded(f"{len(item_list)} item(s)")

    else:
        if apply_one is None:
            raise ValueError(f"{op_id}: per-item batch needs apply_one")
        action = _PerItemBatch(items=item_list, apply=apply_one)

    return Operation(
        op_id=op_id,
        description=description,
        action=action,
        failure_policy=failure_policy,
        applicable=applicable,
        tags=tags,
    )
