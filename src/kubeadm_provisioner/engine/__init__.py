"""Engine package - Action and check combinators."""

from kubeadm_provisioner.engine.actions import (
    Action,
    ActionList,
    ApplyFunc,
    apply_composed,
    apply_if,
    apply_if_else,
    apply_list,
    apply_try,
    empty_action,
    fatal,
    message,
)
from kubeadm_provisioner.engine.checks import Check, CheckFunc, check_and, check_not, check_or
from kubeadm_provisioner.engine.errors import CheckError, CommandError, FatalError, ProvisionError
from kubeadm_provisioner.engine.output import ConsoleOutput, OutputFunc, OutputSink

__all__ = [
    "Action",
    "ActionList",
    "ApplyFunc",
    "Check",
    "CheckError",
    "CheckFunc",
    "CommandError",
    "ConsoleOutput",
    "FatalError",
    "OutputFunc",
    "OutputSink",
    "ProvisionError",
    "apply_composed",
    "apply_if",
    "apply_if_else",
    "apply_list",
    "apply_try",
    "check_and",
    "check_not",
    "check_or",
    "empty_action",
    "fatal",
    "message",
]
