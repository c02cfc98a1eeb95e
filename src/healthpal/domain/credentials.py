"""Models for analysis provider credentials."""

from enum import StrEnum


class AIProvider(StrEnum):
    """Supported external analysis providers, one credential slot each."""

    GEMINI = "gemini"
