"""Pydantic models for API request bodies."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from healthpal.domain.metrics import HealthQuantity


class FoodLogCreate(BaseModel):
    """Manually logged food."""

    title: str = Field(min_length=1)
    calories: int = Field(ge=0)
    day: date
    notes: str | None = None


class FoodLogUpdate(BaseModel):
    """Edits to an existing food log entry."""

    title: str
    calories: int
    notes: str | None = None


class KeyUpdate(BaseModel):
    """New credential for a provider."""

    api_key: str


class HealthSampleCreate(BaseModel):
    """Raw health measurement to record."""

    quantity: HealthQuantity
    value: float = Field(ge=0)
    recorded_at: datetime
