"""
Click-based CLI for kubeadm-provisioner.

IMPORTANT: This module only ORCHESTRATES. It never decides what runs on the node.
- Loads server profiles
- Builds the plan
- Applies it against an SSH session
- Formats output
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from kubeadm_provisioner import __version__
from kubeadm_provisioner.config import ConfigManager
from kubeadm_provisioner.connector.ssh import SSHConfig, SSHConnector
from kubeadm_provisioner.engine.errors import ProvisionError
from kubeadm_provisioner.engine.output import ConsoleOutput
from kubeadm_provisioner.steps.kubeadm import InitOptions, check_initialized, do_kubeadm_init

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="kubeadm-provisioner")
@click.option("--config", "-c", type=click.Path(), help="Path to config directory")
@click.option("--verbose", "-v", is_flag=True, help="Log every remote command")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """kubeadm-provisioner: bootstrap a Kubernetes control plane over SSH."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    config_dir = Path(config) if config else None
    ctx.obj["config_mgr"] = ConfigManager(config_dir)


def _resolve_config(ctx: click.Context, server: str, use_sudo: bool | None = None) -> SSHConfig:
    """Resolve server string to SSHConfig (profile name or IP)."""
    config_mgr = ctx.obj["config_mgr"]
    cfg = config_mgr.get_profile(server)
    if cfg is None:
        # Otherwise treat as hostname/IP with default root user
        cfg = SSHConfig(host=server, user="root")
    if use_sudo is not None:
        cfg.use_sudo = use_sudo
    return cfg


def _read_certs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn REMOTE=LOCAL pairs into a remote path -> content mapping."""
    certs = {}
    for pair in pairs:
        remote, sep, local = pair.partition("=")
        if not sep or not remote or not local:
            raise click.BadParameter(f"expected REMOTE=LOCAL, got {pair!r}", param_hint="--cert")
        try:
            certs[remote] = Path(local).expanduser().read_text()
        except OSError as e:
            raise click.BadParameter(f"cannot read {local}: {e}", param_hint="--cert") from e
    return certs


@main.command()
@click.argument("server")
@click.option("--kubernetes-version", help="Kubernetes version for the control plane")
@click.option("--pod-network-cidr", help="Pod network CIDR")
@click.option("--service-cidr", help="Service network CIDR")
@click.option("--kubeadm-arg", "kubeadm_args", multiple=True, help="Extra argument for `kubeadm init` (repeatable)")
@click.option("--kubeconfig", type=click.Path(dir_okay=False), help="Download admin.conf to this local path")
@click.option("--manifest", "manifests", multiple=True, help="Manifest to `kubectl apply` after init (repeatable)")
@click.option("--cert", "certs", multiple=True, metavar="REMOTE=LOCAL", help="Upload a local certificate to REMOTE before init (repeatable)")
@click.option("--sudo/--no-sudo", "use_sudo", default=None, help="Use sudo for remote commands")
@click.pass_context
def init(
    ctx: click.Context,
    server: str,
    kubernetes_version: str | None,
    pod_network_cidr: str | None,
    service_cidr: str | None,
    kubeadm_args: tuple[str, ...],
    kubeconfig: str | None,
    manifests: tuple[str, ...],
    certs: tuple[str, ...],
    use_sudo: bool | None,
) -> None:
    """Initialize a control plane node with `kubeadm init`.

    WARNING: This modifies the server!
    """
    cfg = _resolve_config(ctx, server, use_sudo)
    options = InitOptions(
        kubernetes_version=kubernetes_version,
        pod_network_cidr=pod_network_cidr,
        service_cidr=service_cidr,
        extra_args=list(kubeadm_args),
        kubeconfig_path=kubeconfig,
        manifests=list(manifests),
        certs=_read_certs(certs),
    )
    plan = do_kubeadm_init(options)

    try:
        with SSHConnector(cfg) as ssh:
            plan.apply(ConsoleOutput(console), ssh, cfg.use_sudo)
    except (ProvisionError, OSError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    console.print("[bold green]✓ Control plane initialized[/]")


@main.command()
@click.argument("server")
@click.option("--sudo/--no-sudo", "use_sudo", default=None, help="Use sudo for remote commands")
@click.pass_context
def check(ctx: click.Context, server: str, use_sudo: bool | None) -> None:
    """CI/CD friendly check: exits 0 if the node is initialized, 1 otherwise."""
    cfg = _resolve_config(ctx, server, use_sudo)
    try:
        with SSHConnector(cfg) as ssh:
            initialized = check_initialized().check(ConsoleOutput(console), ssh, cfg.use_sudo)
    except (ProvisionError, OSError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(2)

    if initialized:
        console.print(f"[bold green]✓ {cfg.host} runs an initialized control plane[/]")
    else:
        console.print(f"[bold yellow]{cfg.host} is not initialized[/]")
        sys.exit(1)


@main.group()
def config() -> None:
    """Manage server connection profiles."""
    pass


@config.command("add")
@click.argument("name")
@click.option("--host", "-h", required=True, help="Server hostname or IP")
@click.option("--user", "-u", default="root", help="SSH username")
@click.option("--port", "-p", default=22, help="SSH port")
@click.option("--password", "-pass", help="SSH password")
@click.option("--key", "-k", type=click.Path(), help="Path to SSH private key")
@click.option("--sudo/--no-sudo", default=True, help="Use sudo for commands")
@click.option("--timeout", default=30, help="SSH timeout in seconds")
@click.pass_context
def config_add(
    ctx: click.Context,
    name: str,
    host: str,
    user: str,
    port: int,
    password: str | None,
    key: str | None,
    sudo: bool,
    timeout: int,
) -> None:
    """Add a new server profile."""
    config_mgr = ctx.obj["config_mgr"]
    cfg = SSHConfig(
        host=host, user=user, port=port, password=password, key_path=key, use_sudo=sudo, timeout=timeout
    )
    config_mgr.add_profile(name, cfg)
    console.print(f"[bold green]✓ Added server profile:[/] {name}")


@config.command("list")
@click.pass_context
def config_list(ctx: click.Context) -> None:
    """List all server profiles."""
    config_mgr = ctx.obj["config_mgr"]
    profiles = config_mgr.list_profiles()
    if not profiles:
        console.print("[dim]No profiles configured yet.[/]")
        return

    for name, data in profiles.items():
        console.print(f"[bold green]{name}[/]: {data['user']}@{data['host']}:{data['port']}")


@config.command("remove")
@click.argument("name")
@click.pass_context
def config_remove(ctx: click.Context, name: str) -> None:
    """Remove a server profile."""
    config_mgr = ctx.obj["config_mgr"]
    if config_mgr.remove_profile(name):
        console.print(f"[bold green]✓ Removed profile:[/] {name}")
    else:
        console.print(f"[bold red]Error:[/] Profile {name} not found.")
        sys.exit(1)


if __name__ == "__main__":
    main()
