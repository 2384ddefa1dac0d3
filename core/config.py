"""
Configuration loader for File2Knowledge Desk.

The OpenAI API key is resolved through a priority chain:
1. OS keyring (secure storage)
2. Environment variable OPENAI_API_KEY
3. Legacy API_KEY.txt file (migration, deprecated)

Runtime settings (model, timeout, data directory) come from environment
variables with defaults from core.constants.
"""

import logging
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.constants import (
    CHAT_SESSIONS_FILENAME,
    DEFAULT_DATA_DIRNAME,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    OPENAI_API_BASE_URL,
    RESOURCES_FILENAME,
    RESPONSE_LOG_FILENAME,
)
from core.infrastructure.keyring_service import (
    KeyringService,
    get_keyring_service,
    parse_key_file,
)

logger = logging.getLogger(__name__)

_keyring_service: Optional[KeyringService] = None


def _get_keyring() -> KeyringService:
    global _keyring_service
    if _keyring_service is None:
        _keyring_service = get_keyring_service()
    return _keyring_service


def get_config_path() -> Path:
    """Get the path to the legacy API_KEY.txt file."""
    return Path(__file__).parent.parent / "API_KEY.txt"


def get_api_key(key_name: str = "OPENAI_API_KEY") -> Optional[str]:
    """
    Get an API key.

    Priority: keyring → env var → legacy file

    Args:
        key_name: Name of the key (e.g., "OPENAI_API_KEY")

    Returns:
        The API key value, or None if not found
    """
    if key_name == "OPENAI_API_KEY":
        value = _get_keyring().get_credential("openai")
        if value:
            return value

    env_value = os.environ.get(key_name)
    if env_value:
        return env_value

    config_path = get_config_path()
    if config_path.exists():
        try:
            file_config = parse_key_file(config_path)
        except OSError as e:
            logger.warning("Could not read %s: %s", config_path, e)
            return None
        if key_name in file_config:
            warnings.warn(
                f"Reading {key_name} from API_KEY.txt is deprecated. "
                "Please migrate to OS keyring storage.",
                DeprecationWarning,
                stacklevel=2,
            )
            return file_config[key_name]
    return None


def get_openai_api_key() -> str:
    """
    Get the OpenAI API key.

    Raises:
        ValueError: If key is not configured
    """
    key = get_api_key("OPENAI_API_KEY")
    if not key:
        raise ValueError(
            "OPENAI_API_KEY not configured. "
            "Store it in the OS keyring or set the environment variable."
        )
    return key


def store_api_key(value: str) -> bool:
    """Store the OpenAI API key in the keyring."""
    return _get_keyring().store_credential("openai", value)


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings shared by services and repositories."""

    data_dir: Path
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    base_url: str = OPENAI_API_BASE_URL

    @property
    def resources_path(self) -> Path:
        return self.data_dir / RESOURCES_FILENAME

    @property
    def chat_sessions_path(self) -> Path:
        return self.data_dir / CHAT_SESSIONS_FILENAME

    @property
    def response_log_path(self) -> Path:
        return self.data_dir / RESPONSE_LOG_FILENAME


def _parse_timeout(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Invalid FILE2KNOWLEDGE_TIMEOUT %r, using default", value)
        return DEFAULT_TIMEOUT_SECONDS
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS


def load_settings() -> AppSettings:
    """Build AppSettings from environment variables."""
    data_dir = os.environ.get("FILE2KNOWLEDGE_DATA_DIR")
    settings = AppSettings(
        data_dir=Path(data_dir) if data_dir else Path.home() / DEFAULT_DATA_DIRNAME,
        model=os.environ.get("FILE2KNOWLEDGE_MODEL") or DEFAULT_MODEL,
        timeout=_parse_timeout(os.environ.get("FILE2KNOWLEDGE_TIMEOUT")),
        base_url=os.environ.get("OPENAI_BASE_URL") or OPENAI_API_BASE_URL,
    )
    if get_api_key() is None:
        # Not fatal: the key can be stored later from the UI.
        logger.warning("Missing API key: OPENAI_API_KEY")
    return settings


def clear_config_cache() -> None:
    """Forget the cached keyring service. Useful for testing."""
    global _keyring_service
    _keyring_service = None
