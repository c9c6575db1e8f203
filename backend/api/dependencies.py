"""Shared dependencies for API routes.

Collaborators are process-wide singletons built on first use; tests swap
them out with ``app.dependency_overrides``.
"""

from fastapi import Depends

from config import settings
from services import gemini_client
from services.gateways.base import AIGateway, DocumentConverter, KeyValueGateway, StorageGateway
from services.gateways.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from services.gateways.local_storage import LocalStorage
from services.pdf_converter import PdfImageConverter
from services.pipeline.orchestrator import AnalysisOrchestrator, RecordLocks

_storage: StorageGateway | None = None
_kv: KeyValueGateway | None = None
_locks = RecordLocks()


def get_storage() -> StorageGateway:
    global _storage
    if _storage is None:
        _storage = LocalStorage(settings.storage_dir)
    return _storage


def get_kv() -> KeyValueGateway:
    global _kv
    if _kv is None:
        _kv = JsonFileKeyValueStore(settings.kv_path) if settings.kv_path else InMemoryKeyValueStore()
    return _kv


def get_ai(storage: StorageGateway = Depends(get_storage)) -> AIGateway | None:
    return gemini_client.get_gateway(storage)


def get_converter() -> DocumentConverter:
    return PdfImageConverter()


def get_orchestrator(
    storage: StorageGateway = Depends(get_storage),
    kv: KeyValueGateway = Depends(get_kv),
    ai: AIGateway | None = Depends(get_ai),
    converter: DocumentConverter = Depends(get_converter),
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(storage, kv, ai, converter, locks=_locks)
