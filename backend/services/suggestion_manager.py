"""Per-tip AI suggestions with a single-flight guard.

Each review view owns one manager. Outcomes are kept per item key; at most
one request is pending across the whole manager, which bounds concurrent
calls to the AI gateway from one view. The guard check and the pending
mark happen without an await in between, so they are atomic under the
event loop.
"""

import logging
from collections import OrderedDict
from typing import Hashable

from config import settings

from models.schemas.feedback import Tip
from models.schemas.messages import CompletionOptions, reply_text
from models.schemas.suggestion import SuggestionOutcome
from services import prompt_builder
from services.gateways.base import AIGateway
from services.response_extractor import SUGGESTION_SHAPE, Structured, extract

logger = logging.getLogger(__name__)

AI_UNAVAILABLE = "AI not available"
GENERATION_FAILED = "Failed to generate suggestion"


class SuggestionRequestManager:
    def __init__(
        self,
        ai: AIGateway | None,
        resume_path: str | None = None,
        options: CompletionOptions | None = None,
    ) -> None:
        self.ai = ai
        self.resume_path = resume_path
        self.options = options
        self._outcomes: dict[Hashable, SuggestionOutcome] = {}
        self._pending_key: Hashable | None = None

    @property
    def pending_key(self) -> Hashable | None:
        return self._pending_key

    @property
    def is_busy(self) -> bool:
        return self._pending_key is not None

    def outcome(self, key: Hashable) -> SuggestionOutcome | None:
        """None means the key was never requested."""
        return self._outcomes.get(key)

    @property
    def outcomes(self) -> dict[Hashable, SuggestionOutcome]:
        return dict(self._outcomes)

    async def request(self, key: Hashable, tip: Tip) -> bool:
        """Generate a suggestion for ``tip`` and store it under ``key``.

        Returns False without touching any outcome while another request is
        pending. Otherwise any prior outcome for ``key`` is replaced.
        """
        if self._pending_key is not None:
            logger.info("Suggestion for %r rejected: %r still pending", key, self._pending_key)
            return False

        self._pending_key = key
        self._outcomes[key] = SuggestionOutcome.pending()
        try:
            self._outcomes[key] = await self._generate(key, tip)
        except Exception as e:
            logger.exception("Suggestion for %r crashed", key)
            self._outcomes[key] = SuggestionOutcome.error(str(e) or GENERATION_FAILED)
        finally:
            self._pending_key = None
        return True

    async def _generate(self, key: Hashable, tip: Tip) -> SuggestionOutcome:
        if self.ai is None:
            return SuggestionOutcome.error(AI_UNAVAILABLE)

        messages = prompt_builder.build_suggestion_messages(tip, self.resume_path)
        try:
            reply = await self.ai.complete(messages, self.options)
        except Exception as e:
            logger.error("Suggestion for %r failed: %s", key, e)
            return SuggestionOutcome.error(str(e) or GENERATION_FAILED)
        if reply is None:
            logger.warning("Suggestion for %r: no reply from AI gateway", key)
            return SuggestionOutcome.error(GENERATION_FAILED)

        result = extract(reply_text(reply), SUGGESTION_SHAPE)
        if isinstance(result, Structured):
            return SuggestionOutcome.structured(result.value)
        return SuggestionOutcome.raw_text(result.text)


# --- Registry: one manager per analysis record ---

# Least recently used first; bounded by settings.max_suggestion_managers
_managers: "OrderedDict[str, SuggestionRequestManager]" = OrderedDict()


def get_manager(
    record_id: str, ai: AIGateway | None, resume_path: str | None = None
) -> SuggestionRequestManager:
    """Get the record's manager, creating it on first access."""
    manager = _managers.get(record_id)
    if manager is None:
        manager = SuggestionRequestManager(ai, resume_path)
        _managers[record_id] = manager
        _evict(settings.max_suggestion_managers)
    else:
        _managers.move_to_end(record_id)
    return manager


def peek(record_id: str) -> SuggestionRequestManager | None:
    """The record's manager if one exists. Never creates one."""
    return _managers.get(record_id)


def _evict(limit: int) -> None:
    """Drop idle managers, oldest first, until at most ``limit`` remain."""
    for record_id in list(_managers)[:-1]:  # never the one just used
        if len(_managers) <= limit:
            return
        if not _managers[record_id].is_busy:
            del _managers[record_id]
            logger.debug("Evicted suggestion manager for %s", record_id)


def clear() -> None:
    """Drop all managers. Useful for testing."""
    _managers.clear()
