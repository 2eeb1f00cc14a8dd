"""Steps package - Concrete provisioning steps built on the engine.

Leaf steps run shell commands over SSH. Plans compose them with the
combinators from ``kubeadm_provisioner.engine``.
"""

from kubeadm_provisioner.steps.kubeadm import InitOptions, check_initialized, do_kubeadm_init
from kubeadm_provisioner.steps.remote import (
    check_binary_exists,
    check_command,
    check_file_exists,
    do_delete_local_file,
    do_download_file,
    do_exec,
    do_print_ip_addresses,
    do_upload,
    message_info,
    message_warn,
)

__all__ = [
    "InitOptions",
    "check_binary_exists",
    "check_command",
    "check_file_exists",
    "check_initialized",
    "do_delete_local_file",
    "do_download_file",
    "do_exec",
    "do_kubeadm_init",
    "do_print_ip_addresses",
    "do_upload",
    "message_info",
    "message_warn",
]
