"""Pydantic contracts shared by the pipeline, the suggestion manager and the API."""

from models.schemas.feedback import CATEGORY_NAMES, FeedbackCategory, FeedbackDocument, Tip
from models.schemas.messages import AIReply, ChatMessage, CompletionOptions, FilePart, TextPart, reply_text
from models.schemas.record import AnalysisRecord, record_key
from models.schemas.suggestion import StructuredSuggestion, SuggestionOutcome

__all__ = [
    "CATEGORY_NAMES",
    "FeedbackCategory",
    "FeedbackDocument",
    "Tip",
    "AIReply",
    "ChatMessage",
    "CompletionOptions",
    "FilePart",
    "TextPart",
    "reply_text",
    "AnalysisRecord",
    "record_key",
    "StructuredSuggestion",
    "SuggestionOutcome",
]
