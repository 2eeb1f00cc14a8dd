"""kubeadm init plan.

CONTRACT:
- read_only: False (MODIFIES SERVER)
- idempotent: True (an initialized node is detected and `kubeadm init` skipped)
- prerequisites: ["kubeadm", "kubelet", "kubectl" installed on the node]
"""

import shlex
from dataclasses import dataclass, field

from kubeadm_provisioner.engine.actions import (
    Action,
    ActionList,
    apply_if,
    apply_if_else,
    apply_try,
    fatal,
)
from kubeadm_provisioner.engine.checks import Check, check_and, check_not
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

ADMIN_CONF = "/etc/kubernetes/admin.conf"
REQUIRED_BINARIES = ("kubeadm", "kubelet", "kubectl")
ETCD_PKI = "/etc/kubernetes/pki/etcd"


@dataclass
class InitOptions:
    """Options for `kubeadm init`."""

    kubernetes_version: str | None = None
    pod_network_cidr: str | None = None
    service_cidr: str | None = None
    extra_args: list[str] = field(default_factory=list)
    kubeconfig_path: str | None = None  # Local path for admin.conf
    manifests: list[str] = field(default_factory=list)
    # Remote path -> content, e.g. a pre-generated CA in /etc/kubernetes/pki
    certs: dict[str, str] = field(default_factory=dict)

    def kubeadm_args(self) -> list[str]:
        """Literal arguments for `kubeadm init`."""
        args = ["--skip-token-print"]
        if self.kubernetes_version:
            args.append(f"--kubernetes-version={self.kubernetes_version}")
        if self.pod_network_cidr:
            args.append(f"--pod-network-cidr={self.pod_network_cidr}")
        if self.service_cidr:
            args.append(f"--service-cidr={self.service_cidr}")
        args.extend(self.extra_args)
        return args


def kubectl(*args: str) -> str:
    return shlex.join(["kubectl", f"--kubeconfig={ADMIN_CONF}", *args])


def do_kubeadm(command: str, *args: str) -> Action:
    return do_exec(shlex.join(["kubeadm", command, *args]))


def do_check_binaries(names=REQUIRED_BINARIES) -> Action:
    """Abort the plan if any required binary is missing."""
    return ActionList(
        apply_if(check_not(check_binary_exists(name)), fatal(f"{name} not found on the node"))
        for name in names
    )


def check_admin_conf_alive() -> Check:
    """True when admin.conf exists and the API server answers with it."""
    return check_and(
        check_file_exists(ADMIN_CONF),
        check_command(kubectl("get", "nodes")),
    )


def do_print_nodes() -> Action:
    return do_exec(kubectl("get", "nodes", "-o", "wide"))


def do_load_manifests(manifests: list[str]) -> Action:
    actions = ActionList()
    for manifest in manifests:
        actions.append(message_info(f"Loading manifest {manifest}..."))
        actions.append(do_exec(kubectl("apply", "-f", manifest)))
    return actions


def do_upload_certs(certs: dict[str, str]) -> Action:
    """Upload certificates that are not on the node yet. Keys get mode 0600."""
    actions = ActionList()
    if certs:
        actions.append(message_info("Uploading certificates..."))
    for path, content in certs.items():
        mode = "0600" if path.endswith(".key") else "0644"
        actions.append(apply_if_else(
            check_file_exists(path),
            message_warn(f"{path} already exists: not overwriting it"),
            do_upload(content, path, mode=mode),
        ))
    return actions


def do_check_kubeconfig_is_alive() -> Action:
    return apply_if(
        check_not(check_admin_conf_alive()),
        fatal(f"the API server does not answer using {ADMIN_CONF}"),
    )


def do_print_etcd_members() -> Action:
    pod = kubectl("-n", "kube-system", "get", "pods", "-l", "component=etcd", "-o", "name")
    etcdctl = shlex.join([
        "etcdctl",
        "--endpoints=https://127.0.0.1:2379",
        f"--cacert={ETCD_PKI}/ca.crt",
        f"--cert={ETCD_PKI}/server.crt",
        f"--key={ETCD_PKI}/server.key",
        "member", "list",
    ])
    exec_etcd = kubectl("-n", "kube-system", "exec")
    return do_exec(f'{exec_etcd} "$({pod} | head -n1)" -- {etcdctl}')


def do_kubeadm_init(options: InitOptions) -> ActionList:
    """Build the full plan for initializing a control plane node."""
    actions = ActionList()
    if options.kubeconfig_path:
        # a stale local copy must not outlive a failed init
        actions.append(do_delete_local_file(options.kubeconfig_path))
    actions.extend([
        message_info("Checking we have the required binaries..."),
        do_check_binaries(),
        do_upload_certs(options.certs),
        message_info("Initializing the cluster with 'kubeadm init'..."),
        # with a live admin.conf the node is already initialized
        apply_if_else(
            check_admin_conf_alive(),
            message_warn("admin.conf already exists: skipping `kubeadm init`"),
            do_kubeadm("init", *options.kubeadm_args()),
        ),
    ])
    if options.kubeconfig_path:
        actions.append(do_download_file(ADMIN_CONF, options.kubeconfig_path))
    actions.extend([
        do_check_kubeconfig_is_alive(),
        apply_try(do_print_ip_addresses()),
        apply_try(do_print_etcd_members()),
        apply_try(do_print_nodes()),
        do_load_manifests(options.manifests),
    ])
    return actions


def check_initialized() -> Check:
    """True when the node already runs an initialized control plane."""
    return check_and(
        *(check_binary_exists(name) for name in REQUIRED_BINARIES),
        check_admin_conf_alive(),
    )
