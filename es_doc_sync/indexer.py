"""Elasticsearch 로케일 인덱스 관리 + bulk 인덱싱"""

from __future__ import annotations

from typing import Any

from elasticsearch import AsyncElasticsearch
from elasticsearch.helpers import async_bulk

from .commands import BulkCommand, to_actions
from .config import Config
from .locales import LocaleSource
from .log import get_logger
from .naming import LocaleIndexNamer
from .settings import build_mappings, locale_settings

logger = get_logger("indexer")

PING_TIMEOUT = 5.0


class BulkWriteError(RuntimeError):
    """bulk 응답에 실패한 항목이 있을 때"""

    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__(f"Bulk index errors: {len(errors)} failures")
        self.errors = errors


def _with_scheme(host: str) -> str:
    return host if "://" in host else f"http://{host}"


def _hosts(config: Config) -> list[str]:
    if config.es_nodes:
        return config.es_nodes
    if config.es_port:
        # host:port 조합 (host 생략 시 localhost)
        return [f"{_with_scheme(config.es_host or 'localhost')}:{config.es_port}"]
    if config.es_host:
        # "localhost:9200" 형태의 단일 host 문자열
        return [_with_scheme(config.es_host)]
    return [config.es_url]


def build_es_client(config: Config) -> AsyncElasticsearch:
    """Config 기반으로 AsyncElasticsearch 클라이언트를 생성.

    - 단일 노드 (HTTP): es_url 또는 es_host + es_port
    - 클러스터 (HTTPS): es_nodes — fingerprint 필수, 인증 필수

    Examples:
        config = Config(es_url="http://localhost:9200")

        config = Config(
            es_nodes=["https://es01:9200", "https://es02:9200"],
            es_fingerprint="B1:2A:...:CF",
            es_username="elastic",
            es_password="changeme",
        )
    """
    is_cluster = config.es_nodes is not None

    if is_cluster:
        if not config.es_fingerprint:
            raise ValueError(
                "--es_fingerprint 필수: ES 클러스터 연결에는 "
                "TLS 인증서 fingerprint가 필요합니다."
            )
        if not config.es_api_key and not (config.es_username and config.es_password):
            raise ValueError(
                "인증 정보 필수: --es_api_key 또는 "
                "--es_username + --es_password를 지정하세요."
            )

    kwargs: dict = {"hosts": _hosts(config), "request_timeout": config.request_timeout}

    # 인증: API Key 우선, 없으면 Basic Auth
    if config.es_api_key:
        kwargs["api_key"] = config.es_api_key
    elif config.es_username and config.es_password:
        kwargs["basic_auth"] = (config.es_username, config.es_password)

    if config.es_fingerprint:
        kwargs["ssl_assert_fingerprint"] = config.es_fingerprint
        kwargs["verify_certs"] = False

    return AsyncElasticsearch(**kwargs)


class ESIndexer:
    """
    로케일별 물리 인덱스 관리자.

    로케일 하나당 인덱스 하나 ({doc_index}{정규화된 로케일}).
      - Reindex: drop_indexes → create_indexes → bulk × N → refresh_indexes
      - 저장 시 단건: bulk(commands, refresh=True)
    """

    def __init__(
        self,
        es: AsyncElasticsearch,
        config: Config,
        namer: LocaleIndexNamer,
        locale_source: LocaleSource,
    ):
        self.es = es
        self.config = config
        self.namer = namer
        self.locale_source = locale_source

    async def ping(self):
        """연결 확인. 응답이 없으면 ConnectionError."""
        ok = await self.es.options(request_timeout=PING_TIMEOUT).ping()
        if not ok:
            raise ConnectionError(f"Elasticsearch 응답 없음: {_hosts(self.config)}")

    def index_names(self) -> list[str]:
        return [self.namer.index_for(locale) for locale in self.locale_source.locales()]

    # ================================================================
    # 인덱스 관리
    # ================================================================

    async def drop_indexes(self) -> list[str]:
        """
        prefix가 doc_index인 인덱스를 모두 삭제.

        로케일별 인덱스 이름은 따로 기록되지 않으므로 클러스터 카탈로그가 기준.
        Returns: 삭제된 인덱스 이름 목록 (없으면 빈 목록)
        """
        result = await self.es.cat.indices(h="index", format="json")
        names = [
            row["index"] for row in result
            if row.get("index", "").startswith(self.namer.prefix)
        ]
        if not names:
            logger.info(f"삭제할 인덱스 없음 (prefix={self.namer.prefix})")
            return []
        await self.es.indices.delete(index=names)
        logger.info(f"인덱스 삭제: {', '.join(names)}")
        return names

    async def create_indexes(self) -> list[str]:
        """
        로케일마다 인덱스 생성 (mappings + 로케일 settings).

        하나라도 실패하면 예외가 그대로 전파되어 나머지는 만들지 않음.
        """
        mappings = build_mappings(self.config.field_set)
        created = []
        for locale in self.locale_source.locales():
            index_name = self.namer.index_for(locale)
            await self.es.indices.create(
                index=index_name,
                settings=locale_settings(self.config, locale),
                mappings=mappings,
            )
            logger.info(f"인덱스 생성: {index_name} (locale={locale})")
            created.append(index_name)
        return created

    # ================================================================
    # Bulk 인덱싱
    # ================================================================

    async def bulk(self, commands: list[BulkCommand], refresh: bool = False) -> int:
        """bulk 명령을 한 번의 bulk 요청으로 저장. 실패 항목이 있으면 BulkWriteError."""
        if not commands:
            return 0
        success, errors = await async_bulk(
            self.es,
            to_actions(commands),
            chunk_size=len(commands),
            raise_on_error=False,
            refresh="true" if refresh else "false",
        )
        if errors:
            raise BulkWriteError(errors)
        return success

    async def refresh_indexes(self):
        """모든 로케일 인덱스 수동 리프레시 — pending 문서를 검색 가능하게"""
        await self.es.indices.refresh(index=self.index_names())

    async def close(self):
        await self.es.close()
