"""Elasticsearch 문서 동기화 설정"""

import re
from dataclasses import dataclass, field
from pathlib import Path

# ── 설정이 없을 때 인덱싱되는 기본 필드 ──
DEFAULT_FIELDS = ["title", "tags", "type", "lowSearchText", "highSearchText"]

# 인덱스 이름은 소문자 알파벳만 허용
INDEX_SUFFIX = "docs"
EXACT_SUFFIX = "Exact"
EXACT_MAX_BYTES = 4096

REINDEX_LOCK_NAME = "es-doc-sync-reindex"


@dataclass
class Config:
    # 인덱스
    base_name: str = "site"
    fields: list[str] = field(default_factory=lambda: list(DEFAULT_FIELDS))
    add_fields: list[str] = field(default_factory=list)  # 기본 필드에 추가
    locale_field: str = "workflowLocale"  # 문서의 로케일 속성 이름
    locales: list[str] | None = None      # None = "default" 단일 로케일

    # 인덱스 settings 레이어 (낮은 우선순위 → 높은 우선순위)
    index_settings: dict = field(default_factory=dict)
    analyzer: dict | None = None                             # 전역 analyzer
    locale_index_settings: dict = field(default_factory=dict)  # 로케일별 settings
    analyzers: dict = field(default_factory=dict)              # 로케일별 analyzer

    # 처리
    batch_size: int = 100
    exact_max_bytes: int = EXACT_MAX_BYTES  # <field>Exact 저장 상한 (직렬화 바이트)

    # Elasticsearch 연결
    es_url: str = "http://localhost:9200"
    es_host: str | None = None              # es_port와 함께 쓰면 es_url 무시
    es_port: int | None = None
    es_nodes: list[str] | None = None       # 클러스터 노드 목록 (설정 시 es_url 무시)
    es_fingerprint: str | None = None       # TLS 인증서 SHA-256 fingerprint (클러스터 시 필수)
    es_username: str | None = None
    es_password: str | None = None
    es_api_key: str | None = None
    request_timeout: float = 30.0

    # 데이터 소스 / 로깅
    documents_path: Path | None = None  # JSONL (1줄 = 1 문서)
    log_path: Path | None = None
    verbose: bool = False

    @property
    def field_set(self) -> list[str]:
        """기본 필드 + 추가 필드 (중복 제거, 순서 유지)"""
        return list(dict.fromkeys([*self.fields, *self.add_fields]))

    @property
    def doc_index(self) -> str:
        """모든 로케일 인덱스 이름의 공통 prefix"""
        return re.sub(r"[^a-z]", "", self.base_name.lower()) + INDEX_SUFFIX
