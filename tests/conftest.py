"""Pytest configuration and fixtures for kubeadm-provisioner tests."""

import pytest
from unittest.mock import MagicMock

from kubeadm_provisioner.connector.ssh import CommandResult, SSHConnector
from kubeadm_provisioner.engine.output import OutputFunc


def _result(exit_code=0, stdout="", stderr="", command="test"):
    return CommandResult(command=command, stdout=stdout, stderr=stderr, exit_code=exit_code)


@pytest.fixture
def mock_ssh_connector():
    """Create a mock SSH connector for testing."""
    connector = MagicMock(spec=SSHConnector)

    # Default behavior: commands succeed
    connector.run.return_value = _result()
    connector.write_file.return_value = _result()

    return connector


@pytest.fixture
def lines():
    """Lines written to the output sink, in order."""
    return []


@pytest.fixture
def output(lines):
    return OutputFunc(lines.append)
