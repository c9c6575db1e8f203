"""Abstract collaborators consumed by the analysis pipeline and suggestions.

Gateways report failure by returning ``None`` (or an error field) rather
than raising; callers decide what a missing result means for them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from models.schemas.messages import AIReply, ChatMessage, CompletionOptions


@dataclass(frozen=True)
class SourceFile:
    """Raw bytes plus the name and media type they were uploaded with."""
    name: str
    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class ConversionResult:
    """Exactly one of ``artifact`` / ``error`` is set."""
    artifact: SourceFile | None = None
    error: str | None = None


class StorageGateway(ABC):
    @abstractmethod
    async def upload(self, file: SourceFile) -> str | None:
        """Store bytes and return an opaque artifact reference, or None."""

    @abstractmethod
    async def read(self, ref: str) -> bytes | None:
        """Return stored bytes, or None if the artifact is missing."""


class KeyValueGateway(ABC):
    @abstractmethod
    async def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Last write wins. Raises if the store rejects the write."""


class AIGateway(ABC):
    @abstractmethod
    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions | None = None
    ) -> AIReply | None:
        """Send a chat request. None means no usable reply."""


class DocumentConverter(ABC):
    @abstractmethod
    async def convert(self, file: SourceFile) -> ConversionResult:
        """Render a preview image for the source document."""
