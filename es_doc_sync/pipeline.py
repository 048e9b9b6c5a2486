"""재색인 파이프라인 — 락 + 인덱스 재생성 + keyset 배치 인덱싱 + 리프레시

Reindex 모드:
    락 획득 → 인덱스 삭제 → 로케일별 생성 → 전체 문서 배치 적재 → 리프레시
    단계는 순차 실행되며 어느 단계든 실패하면 그 자리에서 중단 (롤백 없음).
    drop + create + index 는 멱등이므로 실패 시 처음부터 다시 실행하면 됨.
저장 시 단건 모드 (DocumentSync):
    문서 저장마다 bulk 명령을 바로 전송 (기본: 즉시 리프레시)
"""

from __future__ import annotations

import asyncio
import enum
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

from elasticsearch import AsyncElasticsearch
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .commands import BulkCommand, BulkCommandBuilder
from .config import REINDEX_LOCK_NAME, Config
from .indexer import ESIndexer, build_es_client
from .lock import LocalLockService, LockService, with_lock
from .locales import LocaleSource, locale_source_from_config
from .log import get_logger, setup_logging
from .naming import LocaleIndexNamer
from .store import DocumentStore, JsonlDocumentStore, iter_pages

console = Console()
logger = get_logger("pipeline")


class ReindexStage(enum.Enum):
    IDLE = "idle"
    LOCKED = "locked"
    DROPPED = "dropped"
    CREATED = "created"
    INDEXED = "indexed"
    REFRESHED = "refreshed"


@dataclass
class ReindexResult:
    total: int = 0
    documents: int = 0
    commands: int = 0
    pages: int = 0
    dropped: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    wall_sec: float = 0.0


# ============================================================
# 진행 통계 (Progress 연동)
# ============================================================
class _Stats:
    """Progress bar 업데이트 + 진행률 로깅"""

    def __init__(self, total: int, progress: Progress | None = None, task_id=None):
        self.total = total
        self.indexed = 0
        self.bulk_ms = 0.0
        self._start = time.perf_counter()
        self._progress = progress
        self._task_id = task_id

    def update(self, count: int, bulk_ms: float):
        self.indexed += count
        self.bulk_ms += bulk_ms
        elapsed = time.perf_counter() - self._start
        rps = self.indexed / elapsed if elapsed > 0 else 0

        if self._progress is not None:
            self._progress.update(
                self._task_id,
                advance=count,
                throughput=f"{rps:,.0f} docs/s",
                last_bulk=f"{bulk_ms:.0f}ms",
            )

        pct = int(self.indexed / self.total * 100 * 100) / 100 if self.total else 100.0
        logger.info(f"Indexed {self.indexed:,} of {self.total:,} ({pct}%)  bulk={bulk_ms:.0f}ms")

    @property
    def wall_sec(self) -> float:
        return time.perf_counter() - self._start


def _create_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        "[progress.description]{task.description}",
        BarColumn(bar_width=30),
        MofNCompleteColumn(),
        TextColumn("•"),
        TextColumn("[green]{task.fields[throughput]}[/]"),
        TextColumn("•"),
        TextColumn("[yellow]bulk={task.fields[last_bulk]}[/]"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=False,
    )


# ============================================================
# 저장 시 단건 인덱싱
# ============================================================
class DocumentSync:
    """문서 저장 훅. 재색인 락과 무관하게 동작."""

    def __init__(self, indexer: ESIndexer, builder: BulkCommandBuilder):
        self.indexer = indexer
        self.builder = builder

    async def after_save(self, doc: Mapping[str, Any], defer: bool = False) -> list[BulkCommand]:
        """
        저장된 문서를 모든 대상 로케일 인덱스에 반영.

        defer=False(기본)면 즉시 검색 가능하도록 refresh=true.
        실패는 호출자(저장 흐름)에 그대로 전파.
        """
        commands = self.builder.commands_for(doc)
        await self.indexer.bulk(commands, refresh=not defer)
        return commands


# ============================================================
# Reindex 파이프라인
# ============================================================
class Reindexer:
    """전체 문서 재색인. 한 번에 하나만 실행되도록 이름 락으로 보호."""

    def __init__(
        self,
        indexer: ESIndexer,
        builder: BulkCommandBuilder,
        store: DocumentStore,
        locks: LockService,
        batch_size: int = 100,
        show_progress: bool = False,
    ):
        self.indexer = indexer
        self.builder = builder
        self.store = store
        self.locks = locks
        self.batch_size = batch_size
        self.show_progress = show_progress
        self.stage = ReindexStage.IDLE

    async def run(self) -> ReindexResult:
        logger.info("reindex 시작")
        self.stage = ReindexStage.IDLE
        return await with_lock(self.locks, REINDEX_LOCK_NAME, self._run_locked)

    async def _run_locked(self) -> ReindexResult:
        self.stage = ReindexStage.LOCKED
        result = ReindexResult()

        logger.info("[1/4] 인덱스 삭제")
        result.dropped = await self.indexer.drop_indexes()
        self.stage = ReindexStage.DROPPED

        logger.info("[2/4] 인덱스 생성")
        result.created = await self.indexer.create_indexes()
        self.stage = ReindexStage.CREATED

        logger.info(f"[3/4] 전체 문서 인덱싱 (batch={self.batch_size})")
        await self._index_all(result)
        self.stage = ReindexStage.INDEXED

        logger.info("[4/4] 리프레시")
        await self.indexer.refresh_indexes()
        self.stage = ReindexStage.REFRESHED

        logger.info("[bold green]완료[/bold green]")
        return result

    async def _index_all(self, result: ReindexResult):
        logger.info("진행률 표시를 위해 문서 수 집계")
        result.total = await self.store.count()

        if not self.show_progress:
            stats = _Stats(result.total)
            await self._index_pages(result, stats)
            return

        progress = _create_progress()
        with progress:
            task_id = progress.add_task(
                "Reindex", total=result.total, throughput="--", last_bulk="--"
            )
            stats = _Stats(result.total, progress, task_id)
            await self._index_pages(result, stats)

    async def _index_pages(self, result: ReindexResult, stats: _Stats):
        async for docs in iter_pages(self.store, self.batch_size):
            commands = self.builder.commands_for_many(docs)
            t0 = time.perf_counter()
            await self.indexer.bulk(commands, refresh=False)
            stats.update(len(docs), (time.perf_counter() - t0) * 1000)
            result.pages += 1
            result.documents += len(docs)
            result.commands += len(commands)
        result.wall_sec = stats.wall_sec


# ============================================================
# 조립
# ============================================================
@dataclass
class SyncComponents:
    indexer: ESIndexer
    builder: BulkCommandBuilder
    namer: LocaleIndexNamer
    locale_source: LocaleSource


def build_components(
    config: Config,
    locale_source: LocaleSource | None = None,
    es: AsyncElasticsearch | None = None,
) -> SyncComponents:
    """Config → namer / builder / indexer. namer 하나를 builder와 indexer가 공유."""
    locale_source = locale_source or locale_source_from_config(config)
    namer = LocaleIndexNamer(config.doc_index)
    builder = BulkCommandBuilder(
        config.field_set,
        namer,
        locale_source,
        locale_field=config.locale_field,
        exact_max_bytes=config.exact_max_bytes,
    )
    indexer = ESIndexer(es or build_es_client(config), config, namer, locale_source)
    return SyncComponents(indexer, builder, namer, locale_source)


def _summary_table(title: str, rows: list[tuple[str, str]]) -> Table:
    table = Table(title=title, show_header=False, border_style="dim")
    table.add_column("항목", style="bold")
    table.add_column("값", justify="right", style="cyan")
    for label, value in rows:
        table.add_row(label, value)
    return table


def _build_summary_rows(result: ReindexResult) -> list[tuple[str, str]]:
    wall = result.wall_sec
    rows = [
        ("삭제 인덱스", str(len(result.dropped))),
        ("생성 인덱스", ", ".join(result.created)),
        ("문서 수", f"{result.documents:,} / {result.total:,}"),
        ("bulk 명령", f"{result.commands:,}"),
        ("페이지", f"{result.pages:,}"),
        ("Wall time", f"{wall:.1f}초"),
    ]
    if wall > 0:
        rows.append(("처리량", f"{result.documents / wall:,.0f} docs/sec"))
    return rows


async def _run_reindex(
    config: Config,
    store: DocumentStore | None = None,
    locks: LockService | None = None,
    locale_source: LocaleSource | None = None,
    es: AsyncElasticsearch | None = None,
) -> ReindexResult:
    if store is None:
        if config.documents_path is None:
            raise ValueError("documents_path 또는 store 중 하나를 지정해야 합니다.")
        store = JsonlDocumentStore(config.documents_path)

    parts = build_components(config, locale_source, es)
    try:
        await parts.indexer.ping()
        reindexer = Reindexer(
            parts.indexer,
            parts.builder,
            store,
            locks or LocalLockService(),
            batch_size=config.batch_size,
            show_progress=True,
        )
        result = await reindexer.run()
    finally:
        # 호출자가 넘긴 es 클라이언트는 호출자가 닫음
        if es is None:
            await parts.indexer.close()

    console.print(_summary_table("결과 요약", _build_summary_rows(result)))
    return result


# ============================================================
# Public API — 동기 래퍼
# ============================================================
def run_reindex(
    config: Config,
    store: DocumentStore | None = None,
    locks: LockService | None = None,
    locale_source: LocaleSource | None = None,
    es: AsyncElasticsearch | None = None,
) -> ReindexResult:
    """Reindex — 로케일 인덱스 재생성 후 전체 문서 적재"""
    setup_logging(config.verbose, config.log_path)
    console.print(
        Panel.fit(
            f"[bold]Reindex[/] — {config.doc_index}* 재생성 + 전체 문서 적재",
            border_style="green",
        )
    )
    return asyncio.run(_run_reindex(config, store, locks, locale_source, es))
