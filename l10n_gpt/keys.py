"""
API key management for l10n-gpt.

Keys are looked up in this order:
1. Environment variables (GPT_API_KEY, then OPENAI_API_KEY)
2. OS keychain via keyring
3. Local config file (~/.l10n_gpt/keys.json)

Usage:
    from l10n_gpt.keys import KeyManager

    km = KeyManager()
    km.set_key("sk-...")
    key = km.get_key()
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

ENV_VARS = ("GPT_API_KEY", "OPENAI_API_KEY")


@dataclass
class KeyInfo:
    """Information about the stored API key."""
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str


class KeyManager:
    """Resolve and store the completion-service API key."""

    SERVICE_NAME = "l10n-gpt"
    ACCOUNT = "api_key"

    def __init__(self, config_dir: Optional[Path] = None, use_keyring: bool = True):
        self.config_dir = config_dir or Path.home() / ".l10n_gpt"
        self.config_file = self.config_dir / "keys.json"
        self._keyring_available = use_keyring and self._check_keyring()

    def _check_keyring(self) -> bool:
        try:
            keyring.get_keyring()
            return True
        except Exception as e:  # no usable backend on this machine
            logger.debug(f"keyring unavailable: {e}")
            return False

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable key file {self.config_file}: {e}")
            return {}

    def _lookup(self) -> tuple[Optional[str], str]:
        for env_var in ENV_VARS:
            if env_val := os.getenv(env_var):
                return env_val, "env"

        if self._keyring_available:
            try:
                if key := keyring.get_password(self.SERVICE_NAME, self.ACCOUNT):
                    return key, "keyring"
            except KeyringError as e:
                logger.debug(f"keyring lookup failed: {e}")

        if key := self._read_config().get(self.ACCOUNT):
            return key, "config"

        return None, "none"

    def get_key(self) -> Optional[str]:
        """Return the API key or None if none is configured."""
        return self._lookup()[0]

    def set_key(self, key: str, use_keyring: bool = True) -> str:
        """Store the API key. Returns the storage location used."""
        if use_keyring and self._keyring_available:
            try:
                keyring.set_password(self.SERVICE_NAME, self.ACCOUNT, key)
                return "keyring"
            except KeyringError as e:
                logger.warning(f"keyring write failed, using config file: {e}")

        self.config_dir.mkdir(parents=True, exist_ok=True)
        config = self._read_config()
        config[self.ACCOUNT] = key
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)
        return "config"

    def delete_key(self) -> bool:
        """Delete the stored API key from keyring and config file."""
        deleted = False

        if self._keyring_available:
            try:
                keyring.delete_password(self.SERVICE_NAME, self.ACCOUNT)
                deleted = True
            except PasswordDeleteError:
                pass

        config = self._read_config()
        if self.ACCOUNT in config:
            del config[self.ACCOUNT]
            self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
            deleted = True

        return deleted

    def get_key_info(self) -> KeyInfo:
        key, source = self._lookup()
        return KeyInfo(
            is_set=key is not None,
            source=source,
            masked_value=mask_key(key) if key else "",
        )


def mask_key(key: str) -> str:
    """Mask a key for display (show first 4 and last 4 chars)."""
    if len(key) <= 12:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


def require_key(api_key: Optional[str] = None) -> str:
    """Return the explicit key or the resolved one, or raise ValueError."""
    key = api_key or KeyManager().get_key()
    if not key:
        raise ValueError(
            "API key not found. Set the GPT_API_KEY environment variable "
            "or run: l10n-gpt keys set"
        )
    return key
