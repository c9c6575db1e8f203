"""Per-tip AI suggestion and the outcome of requesting one."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BeforeAfter(BaseModel):
    before: str
    after: str


class QuickSwap(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_phrase: str = Field(alias="from")
    to: list[str] = []


class StructuredSuggestion(BaseModel):
    """Concrete edits the model proposes for one improve-tip."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    suggested_edits: list[str] = Field(alias="suggestedEdits")
    before_after: list[BeforeAfter] | None = Field(None, alias="beforeAfter")
    sample_lines: list[str] = Field(alias="sampleLines")  # 1-3 paste-ready lines
    quick_swaps: list[QuickSwap] | None = Field(None, alias="quickSwaps")
    notes: str | None = None


OutcomeStatus = Literal["pending", "structured", "raw_text", "error"]

PENDING_PLACEHOLDER = "Generating..."


class SuggestionOutcome(BaseModel):
    """State of one suggestion request. A key with no outcome was never requested."""
    status: OutcomeStatus
    suggestion: StructuredSuggestion | None = None
    text: str | None = None  # raw reply when structure could not be recovered
    message: str | None = None  # placeholder or error detail

    @classmethod
    def pending(cls) -> "SuggestionOutcome":
        return cls(status="pending", message=PENDING_PLACEHOLDER)

    @classmethod
    def structured(cls, suggestion: StructuredSuggestion) -> "SuggestionOutcome":
        return cls(status="structured", suggestion=suggestion)

    @classmethod
    def raw_text(cls, text: str) -> "SuggestionOutcome":
        return cls(status="raw_text", text=text)

    @classmethod
    def error(cls, message: str) -> "SuggestionOutcome":
        return cls(status="error", message=message)
