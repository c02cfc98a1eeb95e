"""Credential storage for analysis providers."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from healthpal.domain.credentials import AIProvider
from healthpal.services.storage import KeyValueStore

KEYS_STORAGE_KEY = "AIKeysV1"

_logger = logging.getLogger(__name__)

KeysObserver = Callable[[dict[AIProvider, str]], None]


class KeyValidator(Protocol):
    """Checks a candidate credential against the provider."""

    async def validate_key(self, api_key: str) -> bool:
        """Return True when the provider accepts the key."""


@dataclass
class KeyStore:
    """Provider credentials persisted as one JSON blob.

    Every mutation rewrites the whole mapping and then notifies observers.
    """

    storage: KeyValueStore
    _keys: dict[AIProvider, str] = field(init=False, default_factory=dict)
    _observers: list[KeysObserver] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._keys = self._load()
        for provider in AIProvider:
            state = "set" if self.get(provider) else "empty"
            _logger.info("Loaded key for %s: %s", provider.value, state)

    @property
    def keys(self) -> dict[AIProvider, str]:
        """Return a copy of the raw stored mapping."""
        return dict(self._keys)

    def get(self, provider: AIProvider) -> str | None:
        """Return the trimmed key for a provider, or None if unset."""
        value = self._keys.get(provider, "").strip()
        return value or None

    def set(self, provider: AIProvider, secret: str) -> None:
        """Store a key verbatim, persist, and notify observers.

        The in-memory mapping only changes once the write succeeds.
        """
        updated = {**self._keys, provider: secret}
        self.storage.set(KEYS_STORAGE_KEY, _encode_keys(updated))
        self._keys = updated
        _logger.info(
            "Saved key for %s: %s", provider.value, "set" if secret.strip() else "empty"
        )
        snapshot = self.keys
        for observer in list(self._observers):
            observer(snapshot)

    def clear(self, provider: AIProvider) -> None:
        """Remove the key for a provider."""
        self.set(provider, "")

    def has_any_configured(self) -> bool:
        """Return True when at least one provider has a non-blank key."""
        return any(self.get(provider) for provider in AIProvider)

    def first_configured(self) -> tuple[AIProvider, str] | None:
        """Return the first provider with a usable key."""
        for provider in AIProvider:
            key = self.get(provider)
            if key:
                return provider, key
        return None

    def subscribe(self, observer: KeysObserver) -> Callable[[], None]:
        """Register an observer and return a callable that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _load(self) -> dict[AIProvider, str]:
        try:
            raw = self.storage.get(KEYS_STORAGE_KEY)
        except Exception:
            _logger.exception("Failed reading stored keys")
            return {}
        return _decode_keys(raw)


@dataclass
class CredentialService:
    """Validates credentials before saving them."""

    key_store: KeyStore
    validator: KeyValidator

    async def save(self, provider: AIProvider, secret: str) -> bool:
        """Validate and store a key; blank keys clear the slot.

        Returns False without storing anything when the provider rejects the key.
        """
        if not secret.strip():
            self.key_store.clear(provider)
            return True
        if not await self.validator.validate_key(secret.strip()):
            _logger.info("Rejected key for %s", provider.value)
            return False
        self.key_store.set(provider, secret)
        return True


def _decode_keys(raw: str | None) -> dict[AIProvider, str]:
    if raw is None:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        _logger.warning("Stored keys are unreadable; starting with none configured")
        return {}
    if not isinstance(payload, dict):
        _logger.warning("Stored keys have an unexpected shape; ignoring them")
        return {}
    keys: dict[AIProvider, str] = {}
    for name, value in payload.items():
        if not isinstance(value, str):
            continue
        try:
            keys[AIProvider(name)] = value
        except ValueError:
            _logger.warning("Ignoring stored key for unknown provider %s", name)
    return keys


def _encode_keys(keys: dict[AIProvider, str]) -> str:
    return json.dumps({provider.value: value for provider, value in keys.items()})
