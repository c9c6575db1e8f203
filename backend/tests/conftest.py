"""Shared test configuration, pytest markers and in-memory collaborators."""

import asyncio
import json

import pytest

from models.schemas.messages import AIReply
from services import suggestion_manager
from services.gateways.base import (
    AIGateway,
    ConversionResult,
    DocumentConverter,
    KeyValueGateway,
    SourceFile,
    StorageGateway,
)
from services.gateways.kv_store import InMemoryKeyValueStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: talks to real external services (needs GEMINI_API_KEY)"
    )


SAMPLE_FEEDBACK = {
    "overallScore": 72,
    "ATS": {
        "score": 80,
        "tips": [
            {"type": "good", "tip": "Standard section headings"},
            {"type": "improve", "tip": "Add more job keywords"},
        ],
    },
    "toneAndStyle": {
        "score": 65,
        "tips": [
            {"type": "improve", "tip": "Use action verbs", "explanation": "Most bullets start with 'Responsible for'."},
            {"type": "good", "tip": "Consistent tense", "explanation": "Past roles use past tense throughout."},
        ],
    },
    "content": {
        "score": 70,
        "tips": [
            {"type": "improve", "tip": "Quantify impact", "explanation": "Few bullets mention numbers."},
        ],
    },
    "structure": {"score": 85, "tips": []},
    "skills": {
        "score": 60,
        "tips": [
            {"type": "improve", "tip": "List cloud skills", "explanation": "The job asks for AWS."},
        ],
    },
}

SAMPLE_SUGGESTION = {
    "suggestedEdits": ["Use action verbs"],
    "sampleLines": ["Led a team of 5 engineers"],
}


class FakeStorage(StorageGateway):
    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.files: dict[str, bytes] = {}
        self.fail_on = fail_on or set()  # file names whose upload returns None
        self.unreadable: set[str] = set()

    async def upload(self, file: SourceFile) -> str | None:
        if file.name in self.fail_on:
            return None
        ref = f"{len(self.files)}-{file.name}"
        self.files[ref] = file.data
        return ref

    async def read(self, ref: str) -> bytes | None:
        if ref in self.unreadable:
            return None
        return self.files.get(ref)


class RecordingKV(InMemoryKeyValueStore):
    """In-memory store that also keeps every write in order."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[str, str]] = []

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set(key, value)

    def record(self, key: str) -> dict:
        return json.loads(self._data[key])


class BrokenKV(KeyValueGateway):
    async def get(self, key: str) -> str | None:
        raise OSError("store offline")

    async def set(self, key: str, value: str) -> None:
        raise OSError("store offline")


class FakeAI(AIGateway):
    """Replies with queued values. A value may be an exception to raise.

    With ``gate`` set, each call waits for the event before replying.
    """

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list[list] = []
        self.gate: asyncio.Event | None = None

    async def complete(self, messages, options=None):
        self.calls.append(messages)
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else None
        if isinstance(reply, Exception):
            raise reply
        if reply is None or isinstance(reply, AIReply):
            return reply
        return AIReply(content=reply)


class FakeConverter(DocumentConverter):
    def __init__(self, error: str | None = None) -> None:
        self.error = error

    async def convert(self, file: SourceFile) -> ConversionResult:
        if self.error:
            return ConversionResult(error=self.error)
        return ConversionResult(artifact=SourceFile(name="preview.png", data=b"\x89PNG", content_type="image/png"))


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def kv():
    return RecordingKV()


@pytest.fixture
def resume_file():
    return SourceFile(name="resume.pdf", data=b"%PDF-1.4 fake", content_type="application/pdf")


@pytest.fixture(autouse=True)
def _reset_suggestion_managers():
    suggestion_manager.clear()
    yield
    suggestion_manager.clear()
