"""Pipeline orchestrator: drives one resume through upload, preview and AI review.

Flow:
    resume file + job context
      ├─ storage.upload(file)            → resume ref
      ├─ converter.convert(file)         → preview image
      ├─ storage.upload(image)           → image ref
      ├─ kv.set(resume:<id>, record)     → record, feedback = ""
      ├─ ai.complete(resume ref + prompt) → raw reply
      ├─ extract(reply, FEEDBACK_SHAPE)  → FeedbackDocument
      └─ kv.set(resume:<id>, record)     → record with feedback
                       ↓
                  record id

Stages run strictly in order. A failure halts the run with a StageFailure;
earlier stages are not undone, so a record with empty feedback may stay
persisted. Re-running with the same record id overwrites it.
"""

import asyncio
import contextlib
import logging
import uuid
from typing import AsyncIterator, Callable

from models.schemas.feedback import FeedbackDocument
from models.schemas.messages import CompletionOptions, reply_text
from models.schemas.record import AnalysisRecord
from services import prompt_builder
from services.gateways.base import AIGateway, DocumentConverter, KeyValueGateway, SourceFile, StorageGateway
from services.pipeline.errors import (
    ConversionFailure,
    ExtractionFailure,
    PersistenceFailure,
    StageFailure,
    TransportFailure,
)
from services.pipeline.stages import FAILURE_TEXT, RunState, Stage
from services.response_extractor import FEEDBACK_SHAPE, RawText, extract

logger = logging.getLogger(__name__)


class RecordLocks:
    """Per-record mutual exclusion so two runs never interleave their writes."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def is_locked(self, record_id: str) -> bool:
        lock = self._locks.get(record_id)
        return lock is not None and lock.locked()

    @contextlib.asynccontextmanager
    async def hold(self, record_id: str) -> AsyncIterator[None]:
        if self.is_locked(record_id):
            logger.info("Record %s is being analyzed, waiting for that run to finish", record_id)
        lock = self._locks.setdefault(record_id, asyncio.Lock())
        self._users[record_id] = self._users.get(record_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[record_id] -= 1
            if not self._users[record_id]:
                del self._users[record_id]
                del self._locks[record_id]


class AnalysisOrchestrator:
    def __init__(
        self,
        storage: StorageGateway,
        kv: KeyValueGateway,
        ai: AIGateway | None,
        converter: DocumentConverter,
        locks: RecordLocks | None = None,
        options: CompletionOptions | None = None,
    ) -> None:
        self.storage = storage
        self.kv = kv
        self.ai = ai
        self.converter = converter
        self.locks = locks or RecordLocks()
        self.options = options

    async def run(
        self,
        file: SourceFile,
        company_name: str = "",
        job_title: str = "",
        job_description: str = "",
        record_id: str | None = None,
        on_status: Callable[[RunState], None] | None = None,
    ) -> str:
        """Analyze one resume and return the id of its record.

        Raises a StageFailure subclass naming the stage that halted the run;
        its ``state`` holds the run's final RunState.
        """
        state = RunState(on_status=on_status)
        try:
            resume_ref = await self._upload(state, Stage.UPLOADING, file)
            image = await self._convert(state, file)
            image_ref = await self._upload(state, Stage.UPLOADING_IMAGE, image)

            state.record_id = record_id or str(uuid.uuid4())
            async with self.locks.hold(state.record_id):
                record = AnalysisRecord(
                    id=state.record_id,
                    resume_path=resume_ref,
                    image_path=image_ref,
                    company_name=company_name,
                    job_title=job_title,
                    job_description=job_description,
                )
                await self._persist(state, Stage.PERSISTING_INITIAL, record)

                raw = await self._invoke_ai(state, record)
                feedback = self._extract_feedback(state, raw)

                record = record.model_copy(update={"feedback": feedback})
                await self._persist(state, Stage.PERSISTING_FINAL, record)
        except StageFailure as failure:
            logger.error("Run %s failed at %s: %s", state.record_id or "-", failure.stage.value, failure.reason)
            if failure.detail:
                logger.debug("Run %s failure detail: %s", state.record_id or "-", failure.detail)
            state.fail(failure.stage, failure.reason)
            failure.state = state
            raise

        state.enter(Stage.COMPLETE)
        logger.info("Run %s complete", state.record_id)
        return state.record_id

    # --- Stages ---

    async def _upload(self, state: RunState, stage: Stage, file: SourceFile) -> str:
        state.enter(stage)
        try:
            ref = await self.storage.upload(file)
        except Exception as e:
            raise TransportFailure(stage, FAILURE_TEXT[stage], detail=str(e)) from e
        if not ref:
            raise TransportFailure(stage, FAILURE_TEXT[stage])
        return ref

    async def _convert(self, state: RunState, file: SourceFile) -> SourceFile:
        stage = Stage.CONVERTING_TO_IMAGE
        state.enter(stage)
        try:
            result = await self.converter.convert(file)
        except Exception as e:
            raise ConversionFailure(stage, str(e) or FAILURE_TEXT[stage]) from e
        if result.artifact is None:
            raise ConversionFailure(stage, result.error or FAILURE_TEXT[stage])
        return result.artifact

    async def _persist(self, state: RunState, stage: Stage, record: AnalysisRecord) -> None:
        state.enter(stage)
        try:
            await self.kv.set(record.key, record.to_json())
        except Exception as e:
            raise PersistenceFailure(stage, FAILURE_TEXT[stage], detail=str(e)) from e

    async def _invoke_ai(self, state: RunState, record: AnalysisRecord) -> str:
        stage = Stage.INVOKING_AI
        state.enter(stage)
        if self.ai is None:
            raise TransportFailure(stage, FAILURE_TEXT[stage], detail="AI not available")

        messages = prompt_builder.build_feedback_messages(
            record.resume_path, record.company_name, record.job_title, record.job_description
        )
        try:
            reply = await self.ai.complete(messages, self.options)
        except Exception as e:
            raise TransportFailure(stage, FAILURE_TEXT[stage], detail=str(e)) from e
        text = reply_text(reply) if reply is not None else ""
        if not text:
            raise TransportFailure(stage, FAILURE_TEXT[stage])
        return text

    def _extract_feedback(self, state: RunState, raw: str) -> FeedbackDocument:
        stage = Stage.EXTRACTING_FEEDBACK
        state.enter(stage)
        result = extract(raw, FEEDBACK_SHAPE)
        if isinstance(result, RawText):
            # Unlike suggestions, a review has no acceptable raw-text display
            raise ExtractionFailure(stage, FAILURE_TEXT[stage], detail=result.text)
        return result.value
