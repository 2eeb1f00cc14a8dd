"""Checks - boolean preconditions evaluated against a remote session.

A check answers a yes/no question about the node. It either returns a
bool or raises when it cannot tell; it never turns a failure into
``False``. Composite checks short-circuit strictly left to right.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from kubeadm_provisioner.connector.ssh import SSHConnector
    from kubeadm_provisioner.engine.output import OutputSink


class Check(ABC):
    """Anything with a ``check(output, session, use_sudo) -> bool`` method."""

    @abstractmethod
    def check(self, output: "OutputSink", session: "SSHConnector", use_sudo: bool) -> bool:
        ...


CheckCallable = Callable[["OutputSink", "SSHConnector", bool], bool]


class CheckFunc(Check):
    """Adapts a plain function to the Check contract.

    ie::

        CheckFunc(lambda output, session, use_sudo: True)
    """

    def __init__(self, func: CheckCallable) -> None:
        self._func = func

    def __repr__(self) -> str:
        return f"{CheckFunc.__name__}({getattr(self._func, '__name__', self._func)!r})"

    def check(self, output: "OutputSink", session: "SSHConnector", use_sudo: bool) -> bool:
        return bool(self._func(output, session, use_sudo))


def check_and(*checks: Check) -> CheckFunc:
    """Logical AND of a group of checks. True for an empty group."""

    def _and(output, session, use_sudo):
        for check in checks:
            if not check.check(output, session, use_sudo):
                return False
        return True

    return CheckFunc(_and)


def check_or(*checks: Check) -> CheckFunc:
    """Logical OR of a group of checks. False for an empty group."""

    def _or(output, session, use_sudo):
        for check in checks:
            if check.check(output, session, use_sudo):
                return True
        return False

    return CheckFunc(_or)


def check_not(check: Check) -> CheckFunc:
    """Logical NOT of a check. Errors are raised, not negated."""

    def _not(output, session, use_sudo):
        return not check.check(output, session, use_sudo)

    return CheckFunc(_not)
