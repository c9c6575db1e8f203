"""AI feedback document: scored categories of good/improve tips."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tip(BaseModel):
    """A single piece of feedback. Immutable once received from the AI."""
    model_config = ConfigDict(frozen=True)

    type: Literal["good", "improve"]
    tip: str
    explanation: str = ""  # ATS tips come without one


class FeedbackCategory(BaseModel):
    score: int = Field(ge=0, le=100)
    tips: list[Tip] = []

    @field_validator("score", mode="before")
    @classmethod
    def _round_score(cls, value):
        # Models occasionally answer 72.5; bool is an int subclass, leave it to fail
        if isinstance(value, float):
            return round(value)
        return value


class FeedbackDocument(BaseModel):
    """Structured output of the bulk feedback call.

    Field aliases follow the JSON shape the model is asked to produce and
    that is persisted inside the analysis record.
    """
    model_config = ConfigDict(populate_by_name=True)

    overall_score: int = Field(0, alias="overallScore", ge=0, le=100)
    ats: FeedbackCategory = Field(alias="ATS")
    tone_and_style: FeedbackCategory = Field(alias="toneAndStyle")
    content: FeedbackCategory
    structure: FeedbackCategory
    skills: FeedbackCategory

    @field_validator("overall_score", mode="before")
    @classmethod
    def _round_overall(cls, value):
        if isinstance(value, float):
            return round(value)
        return value

    def category(self, name: str) -> FeedbackCategory | None:
        """Look up a category by its wire name (``toneAndStyle``, ``ATS``...)."""
        field = _CATEGORY_FIELDS.get(name)
        return getattr(self, field) if field else None


_CATEGORY_FIELDS = {
    "ATS": "ats",
    "toneAndStyle": "tone_and_style",
    "content": "content",
    "structure": "structure",
    "skills": "skills",
}

CATEGORY_NAMES = tuple(_CATEGORY_FIELDS)
