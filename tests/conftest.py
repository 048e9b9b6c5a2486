"""공용 fixture — 메모리 상의 가짜 Elasticsearch 클러스터"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from es_doc_sync import Config, LocaleIndexNamer, MultiLocaleSource


class FakeCluster:
    """
    인덱스 → {_id: _source} 저장소를 흉내내는 AsyncElasticsearch 대역.

    모든 API는 AsyncMock이라 호출 횟수/인자를 검증할 수 있음.
    """

    def __init__(self):
        self.indexes: dict[str, dict[str, dict]] = {}
        self.settings: dict[str, dict] = {}
        self.mappings: dict[str, dict] = {}

        self.cat = MagicMock()
        self.cat.indices = AsyncMock(side_effect=self._cat_indices)
        self.indices = MagicMock()
        self.indices.create = AsyncMock(side_effect=self._create)
        self.indices.delete = AsyncMock(side_effect=self._delete)
        self.indices.refresh = AsyncMock(return_value={"_shards": {"failed": 0}})
        self.ping = AsyncMock(return_value=True)
        self.close = AsyncMock()

    def options(self, **kwargs):
        return self

    async def _cat_indices(self, **kwargs):
        return [{"index": name} for name in self.indexes]

    async def _create(self, index, settings=None, mappings=None):
        if index in self.indexes:
            raise RuntimeError(f"resource_already_exists_exception: {index}")
        self.indexes[index] = {}
        self.settings[index] = settings
        self.mappings[index] = mappings
        return {"acknowledged": True, "index": index}

    async def _delete(self, index):
        for name in index:
            del self.indexes[name]
        return {"acknowledged": True}

    def write(self, actions: list[dict]) -> tuple[int, list]:
        for action in actions:
            self.indexes[action["_index"]][action["_id"]] = action["_source"]
        return len(actions), []


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def bulk():
    """es_doc_sync.indexer.async_bulk 를 가짜 클러스터 쓰기로 대체"""

    async def fake_bulk(es, actions, **kwargs):
        return es.write(actions)

    with patch("es_doc_sync.indexer.async_bulk", AsyncMock(side_effect=fake_bulk)) as m:
        yield m


@pytest.fixture
def config():
    return Config(base_name="site", fields=["title", "tags"])


@pytest.fixture
def namer():
    return LocaleIndexNamer("sitedocs")


@pytest.fixture
def three_locales():
    return MultiLocaleSource(["en", "fr", "de"])


def make_docs(n: int, **extra) -> list[dict]:
    return [
        {"_id": f"doc{i:05d}", "title": f"Title {i}", "tags": ["a", "b"], **extra}
        for i in range(n)
    ]
