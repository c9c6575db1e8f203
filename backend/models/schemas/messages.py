"""Chat request/reply shapes exchanged with the AI gateway."""

import json
from typing import Literal, Union

from pydantic import BaseModel, Field


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class FilePart(BaseModel):
    """Reference to a previously stored artifact the model should read."""
    type: Literal["file"] = "file"
    path: str


ContentPart = Union[TextPart, FilePart]


class ChatMessage(BaseModel):
    role: Literal["user", "model"] = "user"
    content: list[ContentPart] = Field(default_factory=list)


class CompletionOptions(BaseModel):
    model: str | None = None  # None: gateway default
    temperature: float | None = None
    max_output_tokens: int | None = None


class AIReply(BaseModel):
    """Model reply. ``content`` is either plain text or a list of typed parts."""
    content: str | list | dict | None = ""


def reply_text(reply: AIReply) -> str:
    """Flatten reply content to text, keeping only text-typed parts."""
    content = reply.content
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text" and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "\n".join(p for p in parts if p).strip()
    if content is None:
        return ""
    return json.dumps(content)
