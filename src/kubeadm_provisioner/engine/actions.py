"""Actions - composable units of remote provisioning work.

An action is applied against an output sink, a remote session and a
``use_sudo`` flag. The same three values are handed unchanged to every
nested action and check. An action fails by raising; composite actions
stop at the first failure and let it propagate, with the single exception
of ``apply_try``.

Example::

    plan = ActionList([
        message("Checking kubeadm..."),
        apply_if_else(
            check_binary_exists("kubeadm"),
            message("kubeadm found"),
            fatal("kubeadm is not installed"),
        ),
    ])
    plan.apply(ConsoleOutput(), ssh, True)
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Iterable

from kubeadm_provisioner.engine.checks import Check
from kubeadm_provisioner.engine.errors import FatalError

if TYPE_CHECKING:
    from kubeadm_provisioner.connector.ssh import SSHConnector
    from kubeadm_provisioner.engine.output import OutputSink

logger = logging.getLogger(__name__)


class Action(ABC):
    """Anything with an ``apply(output, session, use_sudo)`` method."""

    @abstractmethod
    def apply(self, output: "OutputSink", session: "SSHConnector", use_sudo: bool) -> None:
        ...


ApplyCallable = Callable[["OutputSink", "SSHConnector", bool], None]


class ApplyFunc(Action):
    """Adapts a plain function to the Action contract.

    ie::

        ApplyFunc(lambda output, session, use_sudo: output.write("hello"))
    """

    def __init__(self, func: ApplyCallable) -> None:
        self._func = func

    def __repr__(self) -> str:
        return f"{ApplyFunc.__name__}({getattr(self._func, '__name__', self._func)!r})"

    def apply(self, output: "OutputSink", session: "SSHConnector", use_sudo: bool) -> None:
        self._func(output, session, use_sudo)


class ActionList(list, Action):
    """An ordered list of actions that is itself an action."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} with {len(self)} actions>"

    def apply(self, output: "OutputSink", session: "SSHConnector", use_sudo: bool) -> None:
        apply_list(self, output, session, use_sudo)


def empty_action() -> ApplyFunc:
    """An action that does nothing."""
    return ApplyFunc(lambda output, session, use_sudo: None)


def message(msg: str) -> ApplyFunc:
    """An action that just prints a message."""

    def _message(output, session, use_sudo):
        output.write(msg)

    return ApplyFunc(_message)


def fatal(msg: str) -> ApplyFunc:
    """An action that prints an error message and aborts the plan."""

    def _fatal(output, session, use_sudo):
        text = f"ERROR: {msg}"
        output.write(text)
        raise FatalError(text)

    return ApplyFunc(_fatal)


def apply_list(
    actions: Iterable[Action], output: "OutputSink", session: "SSHConnector", use_sudo: bool
) -> None:
    """Apply actions in order, stopping at the first one that raises."""
    for action in actions:
        action.apply(output, session, use_sudo)


def apply_composed(*actions: Action) -> ApplyFunc:
    """Compose a list of actions into a single action."""

    def _composed(output, session, use_sudo):
        apply_list(actions, output, session, use_sudo)

    return ApplyFunc(_composed)


def apply_if(condition: Check, action: Action) -> ApplyFunc:
    """Run ``action`` iff ``condition`` is true."""

    def _if(output, session, use_sudo):
        if condition.check(output, session, use_sudo):
            action.apply(output, session, use_sudo)

    return ApplyFunc(_if)


def apply_if_else(condition: Check, action_if: Action, action_else: Action) -> ApplyFunc:
    """Run ``action_if`` when ``condition`` is true, ``action_else`` otherwise.

    The condition is evaluated exactly once per application.
    """

    def _if_else(output, session, use_sudo):
        if condition.check(output, session, use_sudo):
            action_if.apply(output, session, use_sudo)
        else:
            action_else.apply(output, session, use_sudo)

    return ApplyFunc(_if_else)


def apply_try(action: Action, on_error: Callable[[Exception], None] | None = None) -> ApplyFunc:
    """Run ``action`` but succeed even if it fails.

    Args:
        action: The action to attempt.
        on_error: Optional callback receiving the suppressed exception.
    """

    def _try(output, session, use_sudo):
        try:
            action.apply(output, session, use_sudo)
        except Exception as e:
            logger.debug("Ignoring failure of %r: %s", action, e)
            if on_error:
                on_error(e)

    return ApplyFunc(_try)
