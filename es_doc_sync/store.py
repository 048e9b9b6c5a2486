"""문서 저장소 인터페이스 + keyset 페이지 순회"""

from __future__ import annotations

import bisect
import json
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Protocol

Document = dict[str, Any]


class DocumentStore(Protocol):
    """
    재색인에 필요한 최소 저장소 인터페이스.

    find_after: _id > last_id 인 문서를 _id 오름차순으로 최대 limit 개.
    """

    async def count(self) -> int: ...

    async def find_after(self, last_id: str, limit: int) -> list[Document]: ...


class MemoryDocumentStore:
    """메모리 상의 문서 목록 (테스트 / 소규모 데이터)"""

    def __init__(self, docs: Iterable[Document] = ()):
        self._set_docs(docs)
        self.find_calls = 0

    def _set_docs(self, docs: Iterable[Document]):
        self.docs = sorted(docs, key=lambda d: str(d["_id"]))
        # docs와 같은 순서의 _id 목록 (bisect 용)
        self._keys = [str(d["_id"]) for d in self.docs]

    async def count(self) -> int:
        return len(self.docs)

    async def find_after(self, last_id: str, limit: int) -> list[Document]:
        self.find_calls += 1
        start = bisect.bisect_right(self._keys, last_id)
        return self.docs[start:start + limit]


class JsonlDocumentStore(MemoryDocumentStore):
    """JSONL 파일 (1줄 = 1 문서). 첫 조회 시 한 번만 읽음."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        self._loaded = False

    def _load(self):
        if self._loaded:
            return
        lines = self.path.read_text(encoding="utf-8").splitlines()
        docs = [json.loads(line) for line in lines if line.strip()]
        self._set_docs(docs)
        self._loaded = True

    async def count(self) -> int:
        self._load()
        return await super().count()

    async def find_after(self, last_id: str, limit: int) -> list[Document]:
        self._load()
        return await super().find_after(last_id, limit)


async def iter_pages(
    store: DocumentStore, batch_size: int = 100
) -> AsyncIterator[list[Document]]:
    """
    _id 기준 keyset 페이지네이션.

    각 요청은 직전 페이지의 마지막 _id 보다 큰 문서만 요청하며,
    빈 페이지가 오면 종료.
    """
    last = ""
    while True:
        docs = await store.find_after(last, batch_size)
        if not docs:
            return
        last = str(docs[-1]["_id"])
        yield docs
