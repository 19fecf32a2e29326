"""Storage for API keys used by the transcript providers."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SUPADATA_API_KEY = "supadata_api_key"

MIN_API_KEY_LENGTH = 10


def validate_api_key(api_key: Optional[str]) -> bool:
    """Check that an API key is present and at least MIN_API_KEY_LENGTH characters."""
    if not api_key:
        return False
    return len(api_key.strip()) >= MIN_API_KEY_LENGTH


class KeyStore(ABC):
    """Abstract base class for named secret storage."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the stored secret, or None if there is none."""
        pass

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        pass


class MemoryKeyStore(KeyStore):
    """Key store backed by a dict, for tests and short-lived processes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._keys = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._keys.get(name)

    def set(self, name: str, value: str) -> None:
        self._keys[name] = value

    def delete(self, name: str) -> None:
        self._keys.pop(name, None)


class EnvironmentKeyStore(KeyStore):
    """Read-only key store over environment variables.

    ``supadata_api_key`` is looked up as ``SUPADATA_API_KEY``.
    """

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def get(self, name: str) -> Optional[str]:
        return self._environ.get(name.upper())

    def set(self, name: str, value: str) -> None:
        raise NotImplementedError("Environment key store is read-only")

    def delete(self, name: str) -> None:
        raise NotImplementedError("Environment key store is read-only")


class ApiKeyManager:
    """Validated access to one named API key in a key store."""

    def __init__(self, store: KeyStore, name: str = SUPADATA_API_KEY):
        self.store = store
        self.name = name

    def save(self, api_key: str) -> None:
        trimmed = api_key.strip()
        if not validate_api_key(trimmed):
            raise ValueError("Invalid API key format")
        self.store.set(self.name, trimmed)
        logger.info(f"Saved API key {self.name}")

    def get(self) -> Optional[str]:
        return self.store.get(self.name)

    def has_valid_key(self) -> bool:
        return validate_api_key(self.get())

    def delete(self) -> None:
        self.store.delete(self.name)
