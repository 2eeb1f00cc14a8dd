"""Remote steps - leaf actions and checks that talk to the node.

These are the only places that call methods on the SSH session. Steps
run commands and report; they do NOT decide what to do next, that is the
job of the combinators they are plugged into.
"""

import os
import shlex
from pathlib import Path

from kubeadm_provisioner.engine.actions import ApplyFunc, message
from kubeadm_provisioner.engine.checks import CheckFunc
from kubeadm_provisioner.engine.errors import CheckError, CommandError


def message_info(msg: str) -> ApplyFunc:
    return message(f"INFO: {msg}")


def message_warn(msg: str) -> ApplyFunc:
    return message(f"WARNING: {msg}")


# =========================================================================
# ACTIONS
# =========================================================================

def do_exec(command: str, *, quiet: bool = False) -> ApplyFunc:
    """Run a command on the node.

    Args:
        command: Shell command line.
        quiet: Do not echo the command output to the sink.

    Raises:
        CommandError: When the command exits with a non-zero status.
    """

    def _exec(output, session, use_sudo):
        result = session.run(command, use_sudo=use_sudo)
        if not quiet:
            for line in result.stdout.splitlines():
                output.write(line)
        if not result.success:
            raise CommandError(result)

    return ApplyFunc(_exec)


def do_upload(content: str | bytes, path: str, mode: str = "0644") -> ApplyFunc:
    """Write ``content`` to ``path`` on the node."""

    def _upload(output, session, use_sudo):
        result = session.write_file(path, content, mode=mode, use_sudo=use_sudo)
        if not result.success:
            raise CommandError(result)

    return ApplyFunc(_upload)


def do_delete_local_file(path: str | Path) -> ApplyFunc:
    """Remove a file from the local machine if it exists."""

    def _delete(output, session, use_sudo):
        target = Path(path).expanduser()
        if target.exists():
            output.write(f"INFO: removing local {target}")
            target.unlink()

    return ApplyFunc(_delete)


def do_download_file(remote_path: str, local_path: str | Path) -> ApplyFunc:
    """Copy a remote file to the local machine (mode 0600)."""

    def _download(output, session, use_sudo):
        result = session.run(f"cat {shlex.quote(remote_path)}", use_sudo=use_sudo)
        if not result.success:
            raise CommandError(result)
        target = Path(local_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.touch(mode=0o600)
        # touch keeps the mode of an existing file
        os.chmod(target, 0o600)
        target.write_text(result.stdout)
        output.write(f"INFO: downloaded {remote_path} to {target}")

    return ApplyFunc(_download)


def do_print_ip_addresses() -> ApplyFunc:
    """Print the IPv4 addresses of the node."""
    return do_exec("ip -4 -o addr show scope global | awk '{print $2\": \"$4}'")


# =========================================================================
# CHECKS
# =========================================================================

def check_command(command: str) -> CheckFunc:
    """True when ``command`` exits with status 0.

    Raises:
        CheckError: When the command could not be run at all.
    """

    def _check(output, session, use_sudo):
        result = session.run(command, use_sudo=use_sudo)
        if result.channel_failed:
            raise CheckError(f"could not run '{command}': {result.stderr.strip()}")
        return result.success

    return CheckFunc(_check)


def check_file_exists(path: str) -> CheckFunc:
    return check_command(f"test -f {shlex.quote(path)}")


def check_binary_exists(name: str) -> CheckFunc:
    return check_command(f"command -v {shlex.quote(name)}")
