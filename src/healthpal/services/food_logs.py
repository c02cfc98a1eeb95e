"""Food log storage."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from pydantic import TypeAdapter, ValidationError

from healthpal.domain.food_logs import FoodLogEntry
from healthpal.services.calendar import local_day, start_of_day
from healthpal.services.storage import KeyValueStore

FOOD_LOGS_STORAGE_KEY = "FoodLogsV1"

_ENTRIES_ADAPTER = TypeAdapter(list[FoodLogEntry])
_logger = logging.getLogger(__name__)


@dataclass
class FoodLogStore:
    """Ordered, newest-first collection of food log entries.

    The whole collection is re-encoded and written on every mutation.
    Persistence failures are logged and never raised.
    """

    storage: KeyValueStore
    timezone: ZoneInfo
    _entries: list[FoodLogEntry] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._entries = self._load()

    @property
    def entries(self) -> list[FoodLogEntry]:
        """Return all entries, newest first."""
        return list(self._entries)

    def get(self, entry_id: UUID) -> FoodLogEntry | None:
        """Return an entry by id."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add(self, entry: FoodLogEntry) -> None:
        """Insert an entry at the head of the collection."""
        self._entries.insert(0, entry)
        self._save()

    def log(
        self, title: str, calories: int, day: date, notes: str | None = None
    ) -> FoodLogEntry:
        """Create and add an entry dated at the start of a local day."""
        entry = FoodLogEntry(
            id=uuid4(),
            logged_at=start_of_day(local_day(day, self.timezone), self.timezone),
            title=title,
            calories=max(0, calories),
            notes=notes,
        )
        self.add(entry)
        return entry

    def update(self, entry: FoodLogEntry) -> bool:
        """Replace the entry with the same id; unknown ids are ignored."""
        for index, current in enumerate(self._entries):
            if current.id == entry.id:
                self._entries[index] = entry
                self._save()
                return True
        return False

    def edit(
        self, entry_id: UUID, title: str, calories: int, notes: str | None = None
    ) -> FoodLogEntry | None:
        """Apply user edits to an entry and return the replacement."""
        cleaned_title = title.strip()
        if not cleaned_title:
            raise ValueError("title must not be blank")
        current = self.get(entry_id)
        if current is None:
            return None
        cleaned_notes = notes.strip() if notes else ""
        updated = replace(
            current,
            title=cleaned_title,
            calories=max(0, calories),
            notes=cleaned_notes or None,
        )
        self.update(updated)
        return updated

    def delete(self, entry_id: UUID) -> bool:
        """Remove every entry with the given id."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._save()
        return True

    def entries_for_day(self, day: date | datetime) -> list[FoodLogEntry]:
        """Return entries on the same local calendar day, newest first."""
        target = local_day(day, self.timezone)
        return [
            entry
            for entry in self._entries
            if local_day(entry.logged_at, self.timezone) == target
        ]

    def _load(self) -> list[FoodLogEntry]:
        try:
            raw = self.storage.get(FOOD_LOGS_STORAGE_KEY)
        except Exception:
            _logger.exception("Failed reading food logs")
            return []
        if raw is None:
            return []
        try:
            return _ENTRIES_ADAPTER.validate_json(raw)
        except (ValidationError, ValueError):
            _logger.warning("Failed decoding food logs; starting empty", exc_info=True)
            return []

    def _save(self) -> None:
        try:
            payload = _ENTRIES_ADAPTER.dump_json(self._entries).decode("utf-8")
            self.storage.set(FOOD_LOGS_STORAGE_KEY, payload)
        except Exception:
            _logger.exception("Failed saving food logs")
