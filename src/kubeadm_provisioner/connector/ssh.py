"""SSH Connector - Remote session used by provisioning steps.

The combinator engine never touches this class directly. It is handed
through every action and check unchanged, and only the leaf steps in
``kubeadm_provisioner.steps`` call its methods.
"""

import io
import logging
import secrets
import shlex
from dataclasses import dataclass, field
from pathlib import Path

import paramiko
from paramiko.ssh_exception import AuthenticationException, SSHException

logger = logging.getLogger(__name__)

# Exit code reported alongside channel_error, when the command could not be run at all.
CHANNEL_FAILURE = 255


@dataclass
class SSHConfig:
    """SSH connection configuration."""

    host: str
    user: str = "root"
    port: int = 22
    key_path: str | None = None
    password: str | None = None  # Fallback, prefer keys
    use_sudo: bool = True
    timeout: int = 30


@dataclass
class CommandResult:
    """Result of a command execution."""

    command: str
    stdout: str
    stderr: str
    exit_code: int
    channel_error: bool = False  # SSH/SFTP failure, the command never ran
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.exit_code == 0

    @property
    def channel_failed(self) -> bool:
        """True when the command never ran (connection or timeout problem)."""
        return self.channel_error


class SSHConnector:
    """SSH connection to the node being provisioned.

    Example:
        >>> config = SSHConfig(host="10.0.0.10", user="ubuntu")
        >>> with SSHConnector(config) as ssh:
        ...     result = ssh.run("kubeadm version -o short")
        ...     print(result.stdout)
    """

    def __init__(self, config: SSHConfig) -> None:
        self.config = config
        self._client: paramiko.SSHClient | None = None

    def connect(self) -> None:
        """Establish SSH connection."""
        self._client = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs: dict = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.user,
            "timeout": self.config.timeout,
        }

        # Prefer key-based authentication
        if self.config.key_path:
            key_path = Path(self.config.key_path).expanduser()
            if key_path.exists():
                connect_kwargs["key_filename"] = str(key_path)
        elif self.config.password:
            connect_kwargs["password"] = self.config.password

        logger.debug("Connecting to %s@%s:%d", self.config.user, self.config.host, self.config.port)
        try:
            self._client.connect(**connect_kwargs)
        except AuthenticationException as e:
            raise ConnectionError(f"Authentication failed: {e}") from e
        except SSHException as e:
            raise ConnectionError(f"SSH error: {e}") from e
        except OSError as e:
            # Refused port, unreachable host, DNS failure or connect timeout
            raise ConnectionError(f"Cannot connect to {self.config.host}:{self.config.port}: {e}") from e

    def disconnect(self) -> None:
        """Close SSH connection."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SSHConnector":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    def _require_client(self) -> paramiko.SSHClient:
        if not self._client:
            raise RuntimeError("Not connected. Use 'with SSHConnector(config):' context.")
        return self._client

    def _wrap_sudo(self, command: str, use_sudo: bool) -> str:
        if use_sudo and self.config.user != "root":
            if self.config.password:
                # -S reads the password from stdin
                return f"echo {shlex.quote(self.config.password)} | sudo -S sh -c {shlex.quote(command)}"
            return f"sudo sh -c {shlex.quote(command)}"
        return command

    def run(self, command: str, use_sudo: bool | None = None, timeout: float | None = None) -> CommandResult:
        """Execute a command on the remote server.

        Args:
            command: The command to execute.
            use_sudo: Whether to use sudo. Defaults to config setting.
            timeout: Command timeout in seconds. Defaults to config timeout.

        Returns:
            CommandResult with stdout, stderr, and exit_code. A command that
            could not be run at all has ``channel_failed`` set.
        """
        client = self._require_client()

        if use_sudo is None:
            use_sudo = self.config.use_sudo

        full_command = self._wrap_sudo(command, use_sudo)
        cmd_timeout = timeout if timeout is not None else self.config.timeout
        logger.debug("Run on %s: %s", self.config.host, command)

        try:
            stdin, stdout, stderr = client.exec_command(full_command, timeout=cmd_timeout)
            exit_code = stdout.channel.recv_exit_status()

            return CommandResult(
                command=command,
                stdout=stdout.read().decode("utf-8", errors="replace"),
                stderr=stderr.read().decode("utf-8", errors="replace"),
                exit_code=exit_code,
            )
        except (SSHException, OSError) as e:
            logger.debug("Command failed to run on %s: %s", self.config.host, e)
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"SSH Execution Error: {e}",
                exit_code=CHANNEL_FAILURE,
                channel_error=True,
            )

    def read_file(self, path: str, use_sudo: bool | None = None) -> str | None:
        """Read file contents from the remote server, or None if unreadable."""
        result = self.run(f"cat {shlex.quote(path)}", use_sudo=use_sudo)
        if result.success:
            return result.stdout
        return None

    def file_exists(self, path: str, use_sudo: bool | None = None) -> bool:
        """Check if a file exists on the remote server."""
        return self.run(f"test -f {shlex.quote(path)}", use_sudo=use_sudo).success

    def dir_exists(self, path: str, use_sudo: bool | None = None) -> bool:
        """Check if a directory exists on the remote server."""
        return self.run(f"test -d {shlex.quote(path)}", use_sudo=use_sudo).success

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def write_file(
        self,
        path: str,
        content: str | bytes,
        *,
        mode: str = "0644",
        use_sudo: bool | None = None,
    ) -> CommandResult:
        """Write content to a file on the remote server.

        The content is uploaded over SFTP to a temporary file owned by the
        login user and then moved into place with ``install``, so the target
        may live in a directory that needs sudo.
        """
        client = self._require_client()
        data = content.encode("utf-8") if isinstance(content, str) else content
        tmp_path = f"/tmp/.kubeadm-provisioner-{secrets.token_hex(8)}"

        try:
            with client.open_sftp() as sftp:
                sftp.putfo(io.BytesIO(data), tmp_path)
        except (SSHException, OSError) as e:
            return CommandResult(
                command=f"sftp put {tmp_path}",
                stdout="",
                stderr=f"SFTP Error: {e}",
                exit_code=CHANNEL_FAILURE,
                channel_error=True,
            )

        target = shlex.quote(path)
        tmp = shlex.quote(tmp_path)
        return self.run(
            f"install -D -m {mode} {tmp} {target}; rc=$?; rm -f {tmp}; exit $rc",
            use_sudo=use_sudo,
        )
