"""Tests for server profile storage."""

from unittest.mock import patch

import pytest
import yaml
from keyring.errors import NoKeyringError

from kubeadm_provisioner.config import KEYRING_MARKER, ConfigManager
from kubeadm_provisioner.connector.ssh import SSHConfig


@pytest.fixture
def config_mgr(tmp_path):
    return ConfigManager(tmp_path / "cfg")


def test_creates_empty_profiles_file(config_mgr):
    assert config_mgr.profiles_file.exists()
    assert config_mgr.list_profiles() == {}


def test_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("KUBEADM_PROVISIONER_CONFIG", str(tmp_path / "env"))
    mgr = ConfigManager()
    assert mgr.config_dir == (tmp_path / "env").resolve()


def test_add_and_get_profile_without_password(config_mgr):
    config_mgr.add_profile("cp1", SSHConfig(host="10.0.0.10", user="ubuntu", key_path="~/.ssh/id", use_sudo=False))
    cfg = config_mgr.get_profile("cp1")
    assert cfg == SSHConfig(host="10.0.0.10", user="ubuntu", key_path="~/.ssh/id", use_sudo=False)


def test_password_goes_to_keyring(config_mgr):
    with patch("kubeadm_provisioner.config.keyring") as mock_keyring:
        mock_keyring.get_password.return_value = "s3cret"
        config_mgr.add_profile("cp1", SSHConfig(host="h", password="s3cret"))

        stored = yaml.safe_load(config_mgr.profiles_file.read_text())
        assert stored["cp1"]["password"] == KEYRING_MARKER
        mock_keyring.set_password.assert_called_once_with("kubeadm-provisioner", "cp1", "s3cret")

        assert config_mgr.get_profile("cp1").password == "s3cret"


def test_password_falls_back_without_keyring(config_mgr):
    with patch("kubeadm_provisioner.config.keyring") as mock_keyring:
        mock_keyring.set_password.side_effect = NoKeyringError("no backend")
        config_mgr.add_profile("cp1", SSHConfig(host="h", password="s3cret"))

    assert config_mgr.get_profile("cp1").password == "s3cret"


def test_remove_profile(config_mgr):
    config_mgr.add_profile("cp1", SSHConfig(host="h"))
    assert config_mgr.remove_profile("cp1") is True
    assert config_mgr.get_profile("cp1") is None
    assert config_mgr.remove_profile("cp1") is False


def test_corrupt_profiles_file(config_mgr):
    config_mgr.profiles_file.write_text("cp1: [unclosed")
    assert config_mgr.list_profiles() == {}


def test_unknown_profile_keys_are_ignored(config_mgr):
    config_mgr.profiles_file.write_text(yaml.safe_dump({"cp1": {"host": "h", "user": "ubuntu", "color": "blue"}}))
    assert config_mgr.get_profile("cp1") == SSHConfig(host="h", user="ubuntu")
