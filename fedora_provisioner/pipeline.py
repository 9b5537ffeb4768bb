from __future__ import annotations

import logging
from typing import Optional, Sequence

from .errors import AbortRequested, ConfigurationError, OperationFailure
from .facts import HostFacts
from .operation import ActionResult, Operation
from .outcome import AttemptRecord, FinalStatus, Outcome, OutcomeLog
from .retry import RetryDecision, RetryPolicy

logger = logging.getLogger(__name__)


def _invoke(op: Operation) -> ActionResult:
    try:
        result = op.action()
    except (OperationFailure, OSError) as e:
        return ActionResult(ok=False, message=str(e))
    if isinstance(result, ActionResult):
        return result
    return ActionResult(ok=True)


def run_operations(
    operations: Sequence[Operation],
    retry_policy: RetryPolicy,
    facts: HostFacts,
    *,
    log: Optional[OutcomeLog] = None,
) -> OutcomeLog:
    """Run operations strictly in order.

    A failure is resolved through ``retry_policy`` until it yields skip or
    abort. Abort marks the operation failed-aborted and raises AbortRequested
    (carrying the log); nothing after it runs.
    """

    log = log if log is not None else OutcomeLog()
    total = len(operations)

    for index, op in enumerate(operations, start=1):
        if not op.is_applicable(facts):
            logger.info("[%d/%d] Skipping %s (not applicable)", index, total, op.op_id)
            log.finish(op.op_id, FinalStatus.SKIPPED, reason="not applicable")
            continue

        logger.info("[%d/%d] %s", index, total, op.description)
        attempt = 0
        while True:
            attempt += 1
            result = _invoke(op)
            log.record(
                AttemptRecord(
                    op_id=op.op_id,
                    attempt=attempt,
                    outcome=Outcome.SUCCESS if result.ok else Outcome.FAILURE,
                    detail=result.message or None,
                )
            )

            if result.ok:
                if result.message:
                    logger.debug("%s: %s", op.op_id, result.message)
                log.finish(op.op_id, FinalStatus.SUCCEEDED)
                break

            logger.warning("Failed: %s (%s)", op.description, result.message or "no detail")

            try:
                decision = retry_policy.decide(op.failure_policy, attempt, result.message)
            except ConfigurationError:
                log.finish(op.op_id, FinalStatus.FAILED_ABORTED)
                raise

            if decision is RetryDecision.RETRY:
                logger.info("Retrying %s (attempt %d)", op.op_id, attempt + 1)
                continue
            if decision is RetryDecision.SKIP:
                log.finish(op.op_id, FinalStatus.SKIPPED, reason=result.message or "failed")
                break

            log.finish(op.op_id, FinalStatus.FAILED_ABORTED)
            logger.error("Aborting session at %s", op.op_id)
            raise AbortRequested(op.op_id, log, result.message)

    return log
