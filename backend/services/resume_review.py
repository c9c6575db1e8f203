"""Read path for a finished (or half-finished) analysis.

Derived artifacts may be missing: a failed read of either stored file
yields a review without a preview, never an error.
"""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from models.schemas.feedback import FeedbackDocument
from models.schemas.record import AnalysisRecord, record_key
from services.gateways.base import KeyValueGateway, StorageGateway

logger = logging.getLogger(__name__)


@dataclass
class ResumeReview:
    record: AnalysisRecord
    resume_bytes: bytes | None = None
    image_bytes: bytes | None = None

    @property
    def feedback(self) -> FeedbackDocument | None:
        return self.record.feedback or None

    @property
    def has_preview(self) -> bool:
        return self.resume_bytes is not None and self.image_bytes is not None


async def load_record(record_id: str, kv: KeyValueGateway) -> AnalysisRecord | None:
    raw = await kv.get(record_key(record_id))
    if not raw:
        return None
    try:
        return AnalysisRecord.model_validate_json(raw)
    except ValidationError as e:
        logger.error("Stored record %s is unreadable: %s", record_id, e)
        return None


async def _read(storage: StorageGateway, ref: str) -> bytes | None:
    if not ref:
        return None
    try:
        return await storage.read(ref)
    except Exception as e:
        logger.warning("Could not read artifact %s: %s", ref, e)
        return None


async def load_review(record_id: str, kv: KeyValueGateway, storage: StorageGateway) -> ResumeReview | None:
    record = await load_record(record_id, kv)
    if record is None:
        return None

    resume_bytes = await _read(storage, record.resume_path)
    image_bytes = await _read(storage, record.image_path) if resume_bytes is not None else None
    if resume_bytes is None or image_bytes is None:
        logger.info("Record %s has no preview available", record_id)
        return ResumeReview(record=record)
    return ResumeReview(record=record, resume_bytes=resume_bytes, image_bytes=image_bytes)
