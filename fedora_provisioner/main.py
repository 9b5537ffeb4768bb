from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, List, Optional, Tuple

from .config import ProvisionConfig, load_config
from .errors import AbortRequested, ConfigurationError, PrivilegeError
from .facts import HostFacts, probe
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .operation import Operation
from .outcome import OutcomeLog, format_summary
from .pipeline import run_operations
from .registry import OperationRegistry, build_registry
from .report import build_report, save_report
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_NOT_ROOT = os.EX_NOPERM
EXIT_CONFIG = os.EX_CONFIG


class ProvisioningSession:
    """One provisioning run: probe, plan, execute, summarize.

    Owns the facts snapshot and the outcome log for its lifetime. Nothing is
    carried over between runs; operations are idempotent so a rerun resumes.
    """

    def __init__(
        self,
        cfg: ProvisionConfig,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        dry_run: bool = False,
        start_at: Optional[str] = None,
        stop_after: Optional[str] = None,
        report_path: Optional[str] = None,
        probe_fn: Callable[..., HostFacts] = probe,
        registry_fn: Callable[..., OperationRegistry] = build_registry,
    ) -> None:
        self.cfg = cfg
        self.retry_policy = retry_policy or RetryPolicy(downgrade_interactive=cfg.on_failure == "warn")
        self.dry_run = dry_run
        self.start_at = start_at
        self.stop_after = stop_after
        self.report_path = report_path
        self._probe = probe_fn
        self._build_registry = registry_fn
        self.facts: Optional[HostFacts] = None
        self.registry: Optional[OperationRegistry] = None
        self.log = OutcomeLog()

    def plan(self, *, require_root: bool = True) -> Tuple[HostFacts, List[Operation]]:
        """Probe the host (once) and return it with the operations selected for this run."""

        facts = self.facts
        if facts is None:
            facts = self.facts = self._probe(binaries=self.cfg.probe_binaries, require_root=require_root)
        self.registry = self._build_registry(facts, self.cfg, dry_run=self.dry_run)
        return facts, self.registry.sliced(start_at=self.start_at, stop_after=self.stop_after)

    def execute(self) -> int:
        try:
            facts, operations = self.plan()
        except PrivilegeError as e:
            logger.error("%s", e)
            return EXIT_NOT_ROOT
        except ConfigurationError as e:
            logger.error("Configuration error: %s", e)
            return EXIT_CONFIG

        logger.info("Fedora setup starting (user: %s; home: %s)", facts.user, facts.home)

        try:
            run_operations(operations, self.retry_policy, facts, log=self.log)
            code = EXIT_OK
        except AbortRequested as e:
            logger.error("Session aborted by %s", e.op_id)
            code = EXIT_ABORTED
        except ConfigurationError as e:
            logger.error("Configuration error: %s", e)
            code = EXIT_CONFIG

        for line in format_summary(self.log):
            logger.info("%s", line)
        if code == EXIT_OK:
            logger.info("All done. Consider rebooting to use the new kernel if installed.")

        if self.report_path:
            save_report(self.report_path, build_report(self.log, facts, code, registry=self.registry))
        return code


def list_operations(session: ProvisioningSession) -> int:
    try:
        facts, operations = session.plan(require_root=False)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG
    for op in operations:
        gate = "" if op.is_applicable(facts) else "  [not applicable]"
        print(f"{op.op_id:<45} {op.failure_policy.value:<18} {op.description}{gate}")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="fedora-provisioner")
    p.add_argument("--config", default=None, help="YAML file overriding the bundled manifest")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to provisioner log")
    p.add_argument("--report", default=None, help="Write the outcome report here (json|yaml)")
    p.add_argument("--dry-run", action="store_true", help="Log commands and file changes without applying them")
    p.add_argument(
        "--on-failure",
        choices=["prompt", "warn"],
        default=None,
        help="How retryable failures are handled (default from config: prompt)",
    )
    p.add_argument("--start-at", default=None, help="Start at operation id (e.g. repos.coprs)")
    p.add_argument("--stop-after", default=None, help="Stop after operation id")
    p.add_argument("--list", action="store_true", help="Print the planned operations and exit")
    p.add_argument("--verbose", action="store_true", help="Show command output on the console")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        cfg = load_config(args.config)
        if args.on_failure:
            cfg.raw["on_failure"] = args.on_failure
        session = ProvisioningSession(
            cfg,
            dry_run=bool(args.dry_run),
            start_at=args.start_at,
            stop_after=args.stop_after,
            report_path=args.report,
        )
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG

    if args.list:
        return list_operations(session)
    return session.execute()


def cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
