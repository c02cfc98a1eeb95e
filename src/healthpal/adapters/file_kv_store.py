"""Local JSON file key-value store."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from healthpal.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store kept as a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the value stored under a key."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value and rewrite the whole file."""
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            _logger.warning("Key-value file %s is unreadable; treating as empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return data
