from pydantic import BaseModel

from models.schemas.feedback import FeedbackDocument
from models.schemas.suggestion import SuggestionOutcome


class AnalyzeResponse(BaseModel):
    id: str
    status: str


class ReviewResponse(BaseModel):
    id: str
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""
    feedback: FeedbackDocument | None = None
    has_preview: bool = False


class SuggestionsResponse(BaseModel):
    pending: str | None = None
    outcomes: dict[str, SuggestionOutcome] = {}
