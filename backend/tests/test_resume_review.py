"""Tests for loading a stored analysis back for display."""

import pytest

from models.schemas.feedback import FeedbackDocument
from models.schemas.record import AnalysisRecord
from services.resume_review import load_record, load_review

from conftest import SAMPLE_FEEDBACK


async def _store(kv, storage, feedback=""):
    resume_ref = f"{len(storage.files)}-resume.pdf"
    storage.files[resume_ref] = b"%PDF"
    image_ref = f"{len(storage.files)}-preview.png"
    storage.files[image_ref] = b"\x89PNG"
    record = AnalysisRecord(id="abc", resume_path=resume_ref, image_path=image_ref, feedback=feedback)
    await kv.set(record.key, record.to_json())
    return record


@pytest.mark.asyncio
async def test_full_review(kv, storage):
    await _store(kv, storage, FeedbackDocument.model_validate(SAMPLE_FEEDBACK))
    review = await load_review("abc", kv, storage)
    assert review.has_preview
    assert review.resume_bytes == b"%PDF"
    assert review.feedback.overall_score == 72


@pytest.mark.asyncio
async def test_pending_feedback_is_none(kv, storage):
    await _store(kv, storage)
    review = await load_review("abc", kv, storage)
    assert review.feedback is None
    assert review.has_preview


@pytest.mark.asyncio
async def test_unreadable_image_means_no_preview(kv, storage):
    record = await _store(kv, storage)
    storage.unreadable.add(record.image_path)
    review = await load_review("abc", kv, storage)
    assert review is not None
    assert not review.has_preview
    assert review.resume_bytes is None


@pytest.mark.asyncio
async def test_unreadable_resume_means_no_preview(kv, storage):
    record = await _store(kv, storage)
    storage.unreadable.add(record.resume_path)
    review = await load_review("abc", kv, storage)
    assert not review.has_preview


@pytest.mark.asyncio
async def test_storage_exception_means_no_preview(kv, storage):
    await _store(kv, storage)

    async def boom(ref):
        raise OSError("disk gone")

    storage.read = boom
    review = await load_review("abc", kv, storage)
    assert not review.has_preview


@pytest.mark.asyncio
async def test_missing_record(kv, storage):
    assert await load_review("nope", kv, storage) is None


@pytest.mark.asyncio
async def test_corrupt_record(kv):
    await kv.set("resume:bad", "{not json")
    assert await load_record("bad", kv) is None


def test_record_layout_round_trip():
    doc = FeedbackDocument.model_validate(SAMPLE_FEEDBACK)
    record = AnalysisRecord(id="x", resume_path="a.pdf", image_path="a.png", company_name="Acme", feedback=doc)
    restored = AnalysisRecord.model_validate_json(record.to_json())
    assert restored == record
    assert record.key == "resume:x"
