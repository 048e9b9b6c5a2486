"""
es_doc_sync — 문서 저장소 ↔ Elasticsearch 로케일 인덱스 동기화 패키지

Reindex (전체 재색인):
    from es_doc_sync import Config, run_reindex
    run_reindex(Config(documents_path=Path("docs.jsonl"), locales=["en", "fr"]))

저장 시 단건 인덱싱 (async):
    from es_doc_sync import Config, DocumentSync, build_components
    parts = build_components(Config(locales=["en", "fr"]))
    sync = DocumentSync(parts.indexer, parts.builder)
    await sync.after_save({"_id": "x", "title": "Hello World", "workflowLocale": "en"})
"""

from .commands import BulkCommand, BulkCommandBuilder
from .config import DEFAULT_FIELDS, Config
from .indexer import BulkWriteError, ESIndexer, build_es_client
from .locales import DefaultLocaleSource, MultiLocaleSource
from .lock import LocalLockService, with_lock
from .naming import LocaleCollisionError, LocaleIndexNamer
from .pipeline import (
    DocumentSync,
    Reindexer,
    ReindexResult,
    ReindexStage,
    build_components,
    run_reindex,
)
from .projector import project_fields
from .settings import deep_merge, locale_settings
from .store import JsonlDocumentStore, MemoryDocumentStore, iter_pages

__all__ = [
    "Config", "DEFAULT_FIELDS",
    "project_fields",
    "LocaleIndexNamer", "LocaleCollisionError",
    "DefaultLocaleSource", "MultiLocaleSource",
    "BulkCommand", "BulkCommandBuilder",
    "deep_merge", "locale_settings",
    "ESIndexer", "BulkWriteError", "build_es_client",
    "MemoryDocumentStore", "JsonlDocumentStore", "iter_pages",
    "LocalLockService", "with_lock",
    "Reindexer", "ReindexResult", "ReindexStage", "DocumentSync",
    "build_components", "run_reindex",
]
