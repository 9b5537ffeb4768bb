from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .outcome import OutcomeLog


class ProvisioningError(Exception):
    pass


class PrivilegeError(ProvisioningError, PermissionError):
    """Not running with the privilege the session requires."""


class ConfigurationError(ProvisioningError):
    """Malformed configuration or an unusable prompt context."""


class OperationFailure(ProvisioningError):
    """An operation's action did not succeed.

    Never escapes the executor: it is always resolved into retry, skip or abort.
    """


class AbortRequested(ProvisioningError):
    def __init__(self, op_id: str, log: "OutcomeLog", reason: str = "") -> None:
        self.op_id = op_id
        self.log = log
        self.reason = reason
        msg = f"Aborted at {op_id}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
