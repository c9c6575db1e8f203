"""Coerce free-form model replies into validated structures.

Models are told to answer with JSON only, yet routinely prepend prose or
markdown fences. Extraction walks an ordered list of candidate strategies:

1. the whole reply, parsed strictly
2. the trailing object: from the first ``{`` to a ``}`` that ends the reply

A candidate is accepted when it decodes, passes the shape's validity
predicate and builds the shape's model. Otherwise the reply is returned as
raw text so callers always have something to show.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from models.schemas.feedback import CATEGORY_NAMES, FeedbackDocument
from models.schemas.suggestion import StructuredSuggestion

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

EMPTY_REPLY_PLACEHOLDER = "No suggestion returned"

# Greedy on purpose: first "{" through the "}" that closes the reply
_TRAILING_OBJECT_RE = re.compile(r"\{[\s\S]*\}\s*$")


@dataclass(frozen=True)
class Shape(Generic[T]):
    """Target structure: its model plus a boolean validity predicate."""
    name: str
    model: type[T]
    is_valid: Callable[[Any], bool]


@dataclass(frozen=True)
class Structured(Generic[T]):
    value: T


@dataclass(frozen=True)
class RawText:
    text: str


Extraction = Structured | RawText


# --- Validity predicates ---


def is_valid_suggestion(obj: Any) -> bool:
    """A suggestion needs array-typed ``suggestedEdits`` and ``sampleLines``."""
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("suggestedEdits"), list)
        and isinstance(obj.get("sampleLines"), list)
    )


def _is_valid_category(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    score = obj.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return False
    return 0 <= score <= 100 and isinstance(obj.get("tips", []), list)


def is_valid_feedback(obj: Any) -> bool:
    """Every category present with a numeric 0-100 score and a tips list."""
    return isinstance(obj, dict) and all(_is_valid_category(obj.get(name)) for name in CATEGORY_NAMES)


SUGGESTION_SHAPE = Shape("suggestion", StructuredSuggestion, is_valid_suggestion)
FEEDBACK_SHAPE = Shape("feedback", FeedbackDocument, is_valid_feedback)


# --- Candidate strategies ---


def _whole_text(raw: str) -> str | None:
    return raw


def _trailing_object(raw: str) -> str | None:
    match = _TRAILING_OBJECT_RE.search(raw)
    return match.group(0) if match else None


STRATEGIES: list[Callable[[str], str | None]] = [_whole_text, _trailing_object]


def try_candidate(candidate: str, shape: Shape[T]) -> T | None:
    """Decode one candidate string and build the shape's model, or None."""
    try:
        obj = json.loads(candidate)
    except (ValueError, RecursionError):  # JSONDecodeError, oversized int literals
        return None
    if not shape.is_valid(obj):
        return None
    try:
        return shape.model.model_validate(obj)
    except ValidationError as e:
        logger.debug("Candidate %s rejected by model: %s", shape.name, e)
        return None


def extract(raw: str | None, shape: Shape[T]) -> Extraction:
    """Return the first accepted structure, else the reply as raw text. Never raises."""
    raw = raw or ""
    for strategy in STRATEGIES:
        candidate = strategy(raw)
        if candidate is None:
            continue
        value = try_candidate(candidate, shape)
        if value is not None:
            return Structured(value)

    if raw:
        logger.info("Could not recover %s structure from %d-char reply", shape.name, len(raw))
    return RawText(raw or EMPTY_REPLY_PLACEHOLDER)
