"""Exceptions raised while applying a provisioning plan."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubeadm_provisioner.connector.ssh import CommandResult


class ProvisionError(Exception):
    """Base class for every failure of an action or a check."""


class FatalError(ProvisionError):
    """Raised deliberately to abort the whole plan."""


class CommandError(ProvisionError):
    """A remote command exited with a non-zero status."""

    def __init__(self, result: "CommandResult") -> None:
        self.result = result
        detail = (result.stderr or result.stdout).strip()
        message = f"command failed with exit code {result.exit_code}: {result.command}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CheckError(ProvisionError):
    """A check could not determine a result."""
