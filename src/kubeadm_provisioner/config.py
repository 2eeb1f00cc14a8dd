"""Server profiles for kubeadm-provisioner.

Profiles live in ``profiles.yaml`` inside the config directory, one
mapping per profile with the fields of ``SSHConfig``. Passwords are kept
in the system keyring; the YAML only holds a marker, unless no keyring
backend is available.
"""

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any

import keyring
import yaml
from keyring.errors import KeyringError

from kubeadm_provisioner.connector.ssh import SSHConfig

logger = logging.getLogger(__name__)

KEYRING_MARKER = "__keyring__"
KEYRING_SERVICE = "kubeadm-provisioner"
SSH_FIELDS = {f.name for f in dataclasses.fields(SSHConfig)}


def default_config_dir() -> Path:
    env_config = os.getenv("KUBEADM_PROVISIONER_CONFIG")
    if env_config:
        return Path(env_config).expanduser().resolve()
    return Path.home() / ".kubeadm-provisioner"


class ConfigManager:
    """Reads and writes named SSH profiles."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or default_config_dir()
        self.profiles_file = self.config_dir / "profiles.yaml"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        if not self.profiles_file.exists():
            self._save_profiles({})

    def _load_profiles(self) -> dict[str, Any]:
        try:
            return yaml.safe_load(self.profiles_file.read_text()) or {}
        except FileNotFoundError:
            return {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable profiles file %s: %s", self.profiles_file, e)
            return {}

    def _save_profiles(self, profiles: dict[str, Any]) -> None:
        # Profiles may hold plaintext passwords
        self.profiles_file.touch(mode=0o600)
        self.profiles_file.write_text(yaml.safe_dump(profiles))

    def _store_password(self, name: str, password: str) -> str:
        """Put the password in the keyring and return what the YAML should hold."""
        try:
            keyring.set_password(KEYRING_SERVICE, name, password)
        except KeyringError:
            logger.warning("No keyring backend available, storing password for %s in plain text", name)
            return password
        return KEYRING_MARKER

    def _lookup_password(self, name: str, stored: str | None) -> str | None:
        if stored != KEYRING_MARKER:
            return stored
        try:
            return keyring.get_password(KEYRING_SERVICE, name)
        except KeyringError as e:
            logger.warning("Could not read keyring entry for %s: %s", name, e)
            return None

    def add_profile(self, name: str, config: SSHConfig) -> None:
        """Add or replace a profile."""
        data = dataclasses.asdict(config)
        if config.password:
            data["password"] = self._store_password(name, config.password)

        profiles = self._load_profiles()
        profiles[name] = data
        self._save_profiles(profiles)

    def get_profile(self, name: str) -> SSHConfig | None:
        data = self._load_profiles().get(name)
        if not data:
            return None

        # Unknown keys come from hand edits or newer versions
        known = {key: value for key, value in data.items() if key in SSH_FIELDS}
        known["password"] = self._lookup_password(name, known.get("password"))
        return SSHConfig(**known)

    def list_profiles(self) -> dict[str, Any]:
        return self._load_profiles()

    def remove_profile(self, name: str) -> bool:
        """Remove a profile and its keyring entry. False if there was none."""
        profiles = self._load_profiles()
        data = profiles.pop(name, None)
        if data is None:
            return False

        if data.get("password") == KEYRING_MARKER:
            try:
                keyring.delete_password(KEYRING_SERVICE, name)
            except KeyringError as e:
                logger.warning("Could not remove keyring entry for %s: %s", name, e)

        self._save_profiles(profiles)
        return True
