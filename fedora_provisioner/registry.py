from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .config import ProvisionConfig
from .errors import ConfigurationError
from .facts import HostFacts
from .operation import Operation
from .operations import GROUP_BUILDERS, BuildCtx

logger = logging.getLogger(__name__)

GroupBuilder = Callable[[BuildCtx], List[Operation]]


class OperationRegistry:
    """Ordered operations with unique ids.

    Order is execution order. There is no dependency graph: tags are for
    grouping in reports only.
    """

    def __init__(self, operations: Iterable[Operation] = ()) -> None:
        self._ops: List[Operation] = []
        self._ids: set[str] = set()
        for op in operations:
            self.add(op)

    def add(self, op: Operation) -> None:
        if op.op_id in self._ids:
            raise ConfigurationError(f"Duplicate operation id: {op.op_id}")
        self._ids.add(op.op_id)
        self._ops.append(op)

    def extend(self, ops: Iterable[Operation]) -> None:
        for op in ops:
            self.add(op)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._ops)

    def __len__(self) -> int:
        return len(self._ops)

    def __contains__(self, op_id: object) -> bool:
        return op_id in self._ids

    def ids(self) -> List[str]:
        return [op.op_id for op in self._ops]

    def get(self, op_id: str) -> Operation:
        for op in self._ops:
            if op.op_id == op_id:
                return op
        raise KeyError(op_id)

    def with_tag(self, tag: str) -> List[Operation]:
        return [op for op in self._ops if tag in op.tags]

    def sliced(self, *, start_at: Optional[str] = None, stop_after: Optional[str] = None) -> List[Operation]:
        """Operations from ``start_at`` through ``stop_after`` (inclusive)."""

        for bound in (start_at, stop_after):
            if bound is not None and bound not in self._ids:
                raise ConfigurationError(f"Unknown operation id: {bound}")

        out: List[Operation] = []
        started = start_at is None
        for op in self._ops:
            if not started:
                if op.op_id != start_at:
                    continue
                started = True
            out.append(op)
            if stop_after is not None and op.op_id == stop_after:
                break
        return out


def build_registry(
    facts: HostFacts,
    cfg: ProvisionConfig,
    *,
    dry_run: bool = False,
    builders: Sequence[GroupBuilder] = GROUP_BUILDERS,
) -> OperationRegistry:
    """Expand the operation groups against the session's facts."""

    ctx = BuildCtx(facts=facts, cfg=cfg, dry_run=dry_run)
    registry = OperationRegistry()
    for builder in builders:
        registry.extend(builder(ctx))
    logger.info("Planned %d operations", len(registry))
    return registry
