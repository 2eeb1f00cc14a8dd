"""Connector package - Remote session to the node being provisioned."""

from kubeadm_provisioner.connector.ssh import CommandResult, SSHConfig, SSHConnector

__all__ = ["CommandResult", "SSHConfig", "SSHConnector"]
