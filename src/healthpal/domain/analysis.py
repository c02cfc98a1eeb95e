"""Models for food image analysis."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class AnalysisSuccess:
    """The model recognised the food and estimated its calories."""

    calories: int
    label: str | None = None


@dataclass(frozen=True)
class AnalysisUnusable:
    """The image could not be interpreted as food."""


AnalysisResult = AnalysisSuccess | AnalysisUnusable


class ContentPart(BaseModel):
    """Single part of a generated content block."""

    text: str | None = None


class Content(BaseModel):
    """Generated content block."""

    parts: list[ContentPart] = Field(default_factory=list)


class Candidate(BaseModel):
    """One candidate reply from the model."""

    content: Content | None = None


class GenerateContentResponse(BaseModel):
    """Response envelope of the generateContent endpoint."""

    candidates: list[Candidate] = Field(default_factory=list)

    def reply_text(self) -> str:
        """Return the text of the first candidate, or an empty string."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return "".join(part.text or "" for part in self.candidates[0].content.parts)


class FoodReply(BaseModel):
    """JSON object the model is instructed to reply with."""

    calories: int | None = None
    label: str | None = None
    error: str | None = None
