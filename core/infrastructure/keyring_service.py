"""
Secure credential storage using OS keyring.

The OpenAI API key lives in the system credential vault (GNOME Keyring,
macOS Keychain, Windows Credential Locker) with an environment variable
fallback for CI and headless machines.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import keyring
from keyring.backends.fail import Keyring as FailKeyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)


class KeyringService:
    """
    Store and retrieve API keys in the operating system's keyring.
    """

    SERVICE_NAME = "file2knowledge"

    CREDENTIAL_NAMES = {
        "openai": "openai_api_key",
    }

    ENV_VAR_NAMES = {
        "openai": "OPENAI_API_KEY",
    }

    FILE_KEY_NAMES = {
        "OPENAI_API_KEY": "openai",
    }

    def __init__(self) -> None:
        self._available: Optional[bool] = None

    @property
    def is_available(self) -> bool:
        """True when a real keyring backend (not the fail backend) is installed."""
        if self._available is None:
            try:
                backend = keyring.get_keyring()
            except Exception as e:
                logger.warning("Failed to initialize keyring: %s", e)
                self._available = False
            else:
                if isinstance(backend, FailKeyring):
                    logger.warning(
                        "No secure keyring backend available. "
                        "Consider installing 'keyrings.alt' for headless environments."
                    )
                    self._available = False
                else:
                    logger.debug("Using keyring backend: %s", type(backend).__name__)
                    self._available = True
        return self._available

    def _get_credential_name(self, name: str) -> str:
        return self.CREDENTIAL_NAMES.get(name.lower(), name)

    def store_credential(self, name: str, value: str) -> bool:
        if not self.is_available:
            logger.warning("Keyring not available, cannot store credential")
            return False
        credential_name = self._get_credential_name(name)
        try:
            keyring.set_password(self.SERVICE_NAME, credential_name, value)
        except KeyringError as e:
            logger.error("Failed to store credential %s: %s", name, e)
            return False
        logger.debug("Stored credential: %s", credential_name)
        return True

    def get_credential(self, name: str) -> Optional[str]:
        """
        Retrieve a credential, falling back to its environment variable.

        Args:
            name: Short name (e.g. 'openai') or full credential name

        Returns:
            The credential value, or None if not found
        """
        if self.is_available:
            try:
                value = keyring.get_password(self.SERVICE_NAME, self._get_credential_name(name))
            except KeyringError as e:
                logger.warning("Failed to get credential from keyring: %s", e)
            else:
                if value:
                    return value

        env_var = self.ENV_VAR_NAMES.get(name.lower())
        if env_var:
            value = os.environ.get(env_var)
            if value:
                logger.debug("Using %s from environment", env_var)
                return value
        return None

    def delete_credential(self, name: str) -> bool:
        if not self.is_available:
            return False
        try:
            keyring.delete_password(self.SERVICE_NAME, self._get_credential_name(name))
        except KeyringError as e:
            # PasswordDeleteError when nothing was stored
            logger.debug("Could not delete credential %s: %s", name, e)
            return False
        return True

    def has_credential(self, name: str) -> bool:
        return self.get_credential(name) is not None

    def migrate_from_file(self, file_path: Path) -> dict[str, bool]:
        """
        Move keys from a legacy KEY=VALUE file into the keyring.

        Returns:
            Mapping of credential name to migration success
        """
        results: dict[str, bool] = {}
        if not file_path.exists():
            logger.info("No legacy file found at %s", file_path)
            return results
        if not self.is_available:
            logger.warning("Keyring not available, cannot migrate credentials")
            return results

        for key, value in parse_key_file(file_path).items():
            credential_name = self.FILE_KEY_NAMES.get(key)
            if not credential_name or not value:
                continue
            if self.has_credential(credential_name):
                results[credential_name] = True
                continue
            results[credential_name] = self.store_credential(credential_name, value)
            if results[credential_name]:
                logger.info("Migrated %s to keyring", key)
        return results


def parse_key_file(path: Path) -> dict[str, str]:
    """Parse KEY=VALUE lines; '#' comments and blank lines are skipped."""
    config: dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                logger.warning("Invalid line %s in %s: %s", line_num, path, line)
                continue
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            config[key.strip()] = value
    return config


_keyring_service: Optional[KeyringService] = None


def get_keyring_service() -> KeyringService:
    """Get the shared KeyringService instance."""
    global _keyring_service
    if _keyring_service is None:
        _keyring_service = KeyringService()
    return _keyring_service
