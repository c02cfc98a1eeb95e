"""Domain models for food logging."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class FoodLogEntry:
    """A single logged food item for one calendar day."""

    id: UUID
    logged_at: datetime
    title: str
    calories: int
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.calories < 0:
            raise ValueError("calories must be non-negative")
