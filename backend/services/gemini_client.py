"""Google Gemini chat gateway with error handling."""

import logging
import mimetypes

from google import genai
from google.genai import types

from config import settings
from models.schemas.messages import AIReply, ChatMessage, CompletionOptions, FilePart
from services.gateways.base import AIGateway, StorageGateway

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def _mime_type(path: str) -> str:
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


class GeminiGateway(AIGateway):
    """Sends chat messages to Gemini. File parts are read from storage and inlined."""

    def __init__(self, client: genai.Client, storage: StorageGateway) -> None:
        self._client = client
        self._storage = storage

    async def _to_contents(self, messages: list[ChatMessage]) -> list[types.Content] | None:
        contents = []
        for message in messages:
            parts = []
            for part in message.content:
                if isinstance(part, FilePart):
                    data = await self._storage.read(part.path)
                    if data is None:
                        logger.error("Attachment %s missing from storage", part.path)
                        return None
                    parts.append(types.Part.from_bytes(data=data, mime_type=_mime_type(part.path)))
                else:
                    parts.append(types.Part.from_text(text=part.text))
            contents.append(types.Content(role=message.role, parts=parts))
        return contents

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions | None = None
    ) -> AIReply | None:
        options = options or CompletionOptions()
        contents = await self._to_contents(messages)
        if contents is None:
            return None

        try:
            response = await self._client.aio.models.generate_content(
                model=options.model or settings.gemini_model,
                contents=contents,
                config=types.GenerateContentConfig(
                    temperature=options.temperature if options.temperature is not None else settings.ai_temperature,
                    max_output_tokens=options.max_output_tokens or settings.ai_max_output_tokens,
                ),
            )
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            return None

        text = response.text
        if not text:
            logger.error("Gemini returned an empty reply")
            return None
        return AIReply(content=text)


def get_gateway(storage: StorageGateway) -> GeminiGateway | None:
    client = get_client()
    if client is None:
        return None
    return GeminiGateway(client, storage)
