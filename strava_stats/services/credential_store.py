"""Persistence of the client credentials and the current token pair.

Both records live in a synchronous key-value store as JSON strings under fixed
keys. A missing key is a normal state and reads return ``None``.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from strava_stats.models.strava import ClientCredentials, TokenPair

logger = logging.getLogger(__name__)

CLIENT_CREDENTIALS_KEY = "strava_client_credentials"
TOKENS_KEY = "strava_tokens"


class KeyValueStore(ABC):
    """Abstract synchronous string key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """Store backed by a single JSON object on disk.

    Writes go to a temporary file that replaces the original, so a crash never
    leaves a half-written token pair behind.
    """

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)

    def _read(self) -> Dict[str, str]:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading state from {self.file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring state file {self.file_path}: expected a JSON object")
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=4)
        os.replace(tmp_path, self.file_path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class CredentialStore:
    """The only component that touches persistent storage."""

    def __init__(self, backend: KeyValueStore):
        self.backend = backend

    def put_client_credentials(self, credentials: ClientCredentials) -> None:
        self.backend.set(CLIENT_CREDENTIALS_KEY, credentials.model_dump_json())

    def get_client_credentials(self) -> Optional[ClientCredentials]:
        raw = self.backend.get(CLIENT_CREDENTIALS_KEY)
        if raw is None:
            return None
        try:
            return ClientCredentials.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored client credentials are unreadable, ignoring them: {e}")
            return None

    def clear_client_credentials(self) -> None:
        self.backend.delete(CLIENT_CREDENTIALS_KEY)

    def put_tokens(self, tokens: TokenPair) -> None:
        """Replace the stored token pair in one write."""
        self.backend.set(TOKENS_KEY, tokens.model_dump_json())

    def get_tokens(self) -> Optional[TokenPair]:
        raw = self.backend.get(TOKENS_KEY)
        if raw is None:
            return None
        try:
            return TokenPair.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored tokens are unreadable, ignoring them: {e}")
            return None

    def clear_tokens(self) -> None:
        self.backend.delete(TOKENS_KEY)

    def clear(self) -> None:
        """Forget everything: tokens and client credentials."""
        self.clear_tokens()
        self.clear_client_credentials()
