from __future__ import annotations

import enum
import json
import logging

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)


class ConfigKey(enum.StrEnum):
    PRIVATE_KEY_PASSWORD = "PRIVATE_KEY_PASSWORD"


class KeyringConfig(dict[ConfigKey, str]):
    """Secrets kept in the OS keyring as one JSON object."""

    KR_SERVICE_NAME: str = "amp-cache-tools"
    KR_USERNAME: str = "config"

    def __enter__(self) -> KeyringConfig:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.save()

    @classmethod
    def from_json(cls, json_str: str) -> KeyringConfig:
        known = {key.value for key in ConfigKey}
        config = cls()
        for name, value in json.loads(json_str).items():
            if name not in known:
                logger.debug("Ignoring unknown keyring config key %r", name)
                continue
            config[ConfigKey(name)] = value
        return config

    @classmethod
    def load_from_keyring(cls) -> KeyringConfig:
        json_str = keyring.get_password(cls.KR_SERVICE_NAME, cls.KR_USERNAME)
        return cls() if json_str is None else cls.from_json(json_str)

    @classmethod
    def get_secret(cls, key: ConfigKey) -> str | None:
        """Read a single value, None when unset or no keyring backend is available."""
        try:
            config = cls.load_from_keyring()
        except KeyringError:
            return None
        return config.get(key) or None

    def save(self):
        keyring.set_password(
            self.KR_SERVICE_NAME, self.KR_USERNAME, json.dumps({k.value: v for k, v in self.items()})
        )

    def to_keys_json(self) -> str:
        """Masked view of the stored keys."""
        masked = {
            key.value: ("********" if self[key] else "") if key in self else "(not set)"
            for key in ConfigKey
        }
        return json.dumps(masked, indent=2)
