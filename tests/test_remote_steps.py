"""Tests for leaf steps that talk to the SSH session."""

import pytest

from kubeadm_provisioner.connector.ssh import CommandResult
from kubeadm_provisioner.engine.errors import CheckError, CommandError
from kubeadm_provisioner.steps.remote import (
    check_binary_exists,
    check_command,
    check_file_exists,
    do_delete_local_file,
    do_download_file,
    do_exec,
    do_upload,
    message_info,
    message_warn,
)


def result(exit_code=0, stdout="", stderr="", command="cmd", channel_error=False):
    return CommandResult(
        command=command, stdout=stdout, stderr=stderr, exit_code=exit_code, channel_error=channel_error
    )


def test_messages_are_prefixed(output, lines, mock_ssh_connector):
    message_info("starting").apply(output, mock_ssh_connector, False)
    message_warn("careful").apply(output, mock_ssh_connector, False)
    assert lines == ["INFO: starting", "WARNING: careful"]


def test_do_exec_echoes_stdout(output, lines, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(stdout="line one\nline two\n")
    do_exec("kubeadm version").apply(output, mock_ssh_connector, True)
    mock_ssh_connector.run.assert_called_once_with("kubeadm version", use_sudo=True)
    assert lines == ["line one", "line two"]


def test_do_exec_quiet(output, lines, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(stdout="noise\n")
    do_exec("true", quiet=True).apply(output, mock_ssh_connector, False)
    assert lines == []


def test_do_exec_failure_raises(output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=1, stderr="boom", command="false")
    with pytest.raises(CommandError, match="exit code 1: false: boom") as excinfo:
        do_exec("false").apply(output, mock_ssh_connector, False)
    assert excinfo.value.result.exit_code == 1


def test_do_upload(output, mock_ssh_connector):
    do_upload("data", "/etc/kubernetes/pki/ca.crt", mode="0600").apply(output, mock_ssh_connector, True)
    mock_ssh_connector.write_file.assert_called_once_with(
        "/etc/kubernetes/pki/ca.crt", "data", mode="0600", use_sudo=True
    )


def test_do_upload_failure(output, mock_ssh_connector):
    mock_ssh_connector.write_file.return_value = result(exit_code=255, stderr="SFTP Error", channel_error=True)
    with pytest.raises(CommandError):
        do_upload("data", "/tmp/x").apply(output, mock_ssh_connector, False)


def test_do_delete_local_file(tmp_path, output, lines, mock_ssh_connector):
    target = tmp_path / "admin.conf"
    target.write_text("stale")
    do_delete_local_file(target).apply(output, mock_ssh_connector, False)
    assert not target.exists()
    assert lines == [f"INFO: removing local {target}"]
    mock_ssh_connector.run.assert_not_called()


def test_do_delete_local_file_missing_is_fine(tmp_path, output, lines, mock_ssh_connector):
    do_delete_local_file(tmp_path / "absent").apply(output, mock_ssh_connector, False)
    assert lines == []


def test_do_download_file_tightens_existing_mode(tmp_path, output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(stdout="secret\n")
    target = tmp_path / "admin.conf"
    target.write_text("old")
    target.chmod(0o644)
    do_download_file("/etc/kubernetes/admin.conf", target).apply(output, mock_ssh_connector, True)
    assert target.stat().st_mode & 0o777 == 0o600
    assert target.read_text() == "secret\n"


def test_do_download_file(tmp_path, output, lines, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(stdout="apiVersion: v1\n")
    target = tmp_path / "kube" / "admin.conf"
    do_download_file("/etc/kubernetes/admin.conf", target).apply(output, mock_ssh_connector, True)
    assert target.read_text() == "apiVersion: v1\n"
    assert target.stat().st_mode & 0o777 == 0o600
    assert lines == [f"INFO: downloaded /etc/kubernetes/admin.conf to {target}"]


def test_do_download_file_missing(tmp_path, output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=1, stderr="No such file")
    target = tmp_path / "admin.conf"
    with pytest.raises(CommandError):
        do_download_file("/etc/kubernetes/admin.conf", target).apply(output, mock_ssh_connector, True)
    assert not target.exists()


@pytest.mark.parametrize("exit_code, expected", [(0, True), (1, False), (127, False)])
def test_check_command(exit_code, expected, output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=exit_code)
    assert check_command("systemctl is-active kubelet").check(output, mock_ssh_connector, True) is expected


def test_check_command_channel_failure_raises(output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=255, stderr="SSH Execution Error: timed out", channel_error=True)
    with pytest.raises(CheckError, match="timed out"):
        check_command("true").check(output, mock_ssh_connector, False)


def test_check_file_exists_quotes_path(output, mock_ssh_connector):
    check_file_exists("/etc/my file").check(output, mock_ssh_connector, False)
    mock_ssh_connector.run.assert_called_once_with("test -f '/etc/my file'", use_sudo=False)


def test_check_binary_exists(output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=1)
    assert check_binary_exists("kubeadm").check(output, mock_ssh_connector, False) is False
    mock_ssh_connector.run.assert_called_once_with("command -v kubeadm", use_sudo=False)


def test_check_command_exit_255_is_false(output, mock_ssh_connector):
    mock_ssh_connector.run.return_value = result(exit_code=255)
    assert check_command("exit 255").check(output, mock_ssh_connector, False) is False
