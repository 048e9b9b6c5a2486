"""ESIndexer — drop / create / bulk / refresh (가짜 클러스터)"""

from unittest.mock import AsyncMock, patch

import pytest

from es_doc_sync import (
    BulkCommandBuilder,
    BulkWriteError,
    Config,
    DefaultLocaleSource,
    ESIndexer,
    build_es_client,
)


@pytest.fixture
def indexer(cluster, config, namer, three_locales):
    return ESIndexer(cluster, config, namer, three_locales)


class TestBuildClient:
    def test_single_node(self):
        with patch("es_doc_sync.indexer.AsyncElasticsearch") as es_cls:
            build_es_client(Config(es_url="http://es:9200"))
        kwargs = es_cls.call_args.kwargs
        assert kwargs["hosts"] == ["http://es:9200"]
        assert "basic_auth" not in kwargs

    def test_host_and_port(self):
        with patch("es_doc_sync.indexer.AsyncElasticsearch") as es_cls:
            build_es_client(Config(es_host="search.local", es_port=9201))
        assert es_cls.call_args.kwargs["hosts"] == ["http://search.local:9201"]

    def test_host_string_without_scheme(self):
        with patch("es_doc_sync.indexer.AsyncElasticsearch") as es_cls:
            build_es_client(Config(es_host="localhost:9200"))
        assert es_cls.call_args.kwargs["hosts"] == ["http://localhost:9200"]

    def test_host_string_keeps_scheme(self):
        with patch("es_doc_sync.indexer.AsyncElasticsearch") as es_cls:
            build_es_client(Config(es_host="https://search.local:9243"))
        assert es_cls.call_args.kwargs["hosts"] == ["https://search.local:9243"]

    def test_cluster_requires_fingerprint(self):
        with pytest.raises(ValueError):
            build_es_client(Config(es_nodes=["https://es01:9200"], es_api_key="k"))

    def test_cluster_requires_auth(self):
        with pytest.raises(ValueError):
            build_es_client(Config(es_nodes=["https://es01:9200"], es_fingerprint="AA:BB"))

    def test_cluster_with_basic_auth(self):
        config = Config(
            es_nodes=["https://es01:9200", "https://es02:9200"],
            es_fingerprint="AA:BB",
            es_username="elastic",
            es_password="changeme",
        )
        with patch("es_doc_sync.indexer.AsyncElasticsearch") as es_cls:
            build_es_client(config)
        kwargs = es_cls.call_args.kwargs
        assert kwargs["hosts"] == config.es_nodes
        assert kwargs["basic_auth"] == ("elastic", "changeme")
        assert kwargs["ssl_assert_fingerprint"] == "AA:BB"
        assert kwargs["verify_certs"] is False


class TestDropIndexes:
    @pytest.mark.asyncio
    async def test_no_matching_indexes_is_noop(self, indexer, cluster):
        cluster.indexes["otherindex"] = {}
        assert await indexer.drop_indexes() == []
        cluster.indices.delete.assert_not_called()
        assert "otherindex" in cluster.indexes

    @pytest.mark.asyncio
    async def test_single_batched_delete_by_prefix(self, indexer, cluster):
        for name in ["sitedocsen", "sitedocsold", "otherindex"]:
            cluster.indexes[name] = {}
        dropped = await indexer.drop_indexes()
        assert sorted(dropped) == ["sitedocsen", "sitedocsold"]
        cluster.indices.delete.assert_awaited_once()
        assert list(cluster.indexes) == ["otherindex"]


class TestCreateIndexes:
    @pytest.mark.asyncio
    async def test_one_index_per_locale(self, indexer, cluster):
        created = await indexer.create_indexes()
        assert created == ["sitedocsen", "sitedocsfr", "sitedocsde"]
        assert cluster.mappings["sitedocsfr"] == {
            "properties": {
                "title": {"type": "text"},
                "titleExact": {"type": "keyword"},
                "tags": {"type": "text"},
                "tagsExact": {"type": "keyword"},
            }
        }

    @pytest.mark.asyncio
    async def test_locale_settings_applied(self, cluster, namer, three_locales):
        config = Config(
            index_settings={"number_of_shards": 1},
            analyzers={"fr": {"default": {"type": "french"}}},
        )
        await ESIndexer(cluster, config, namer, three_locales).create_indexes()
        assert cluster.settings["sitedocsen"] == {"number_of_shards": 1}
        assert cluster.settings["sitedocsfr"] == {
            "number_of_shards": 1,
            "analysis": {"analyzer": {"default": {"type": "french"}}},
        }

    @pytest.mark.asyncio
    async def test_failure_aborts_remaining(self, indexer, cluster):
        cluster.indexes["sitedocsfr"] = {}  # 두 번째 create가 실패
        with pytest.raises(RuntimeError):
            await indexer.create_indexes()
        assert cluster.indices.create.await_count == 2
        assert "sitedocsde" not in cluster.indexes


class TestBulk:
    @pytest.mark.asyncio
    async def test_empty_is_noop(self, indexer, bulk):
        assert await indexer.bulk([]) == 0
        bulk.assert_not_called()

    @pytest.mark.asyncio
    async def test_writes_all_commands(self, indexer, cluster, bulk, namer, three_locales):
        await indexer.create_indexes()
        builder = BulkCommandBuilder(["title"], namer, three_locales)
        commands = builder.commands_for({"_id": "1", "title": "t"})
        assert await indexer.bulk(commands, refresh=True) == 3
        assert cluster.indexes["sitedocsde"]["1"] == {"title": "t", "titleExact": "t"}
        kwargs = bulk.call_args.kwargs
        assert kwargs["refresh"] == "true"
        assert kwargs["chunk_size"] == 3

    @pytest.mark.asyncio
    async def test_deferred_refresh(self, indexer, cluster, bulk, namer, three_locales):
        await indexer.create_indexes()
        builder = BulkCommandBuilder(["title"], namer, three_locales)
        await indexer.bulk(builder.commands_for({"_id": "1", "title": "t"}))
        assert bulk.call_args.kwargs["refresh"] == "false"

    @pytest.mark.asyncio
    async def test_item_errors_raise(self, indexer, namer, three_locales):
        failures = [{"index": {"_id": "1", "status": 400, "error": "mapper_parsing_exception"}}]
        builder = BulkCommandBuilder(["title"], namer, three_locales)
        with patch("es_doc_sync.indexer.async_bulk", AsyncMock(return_value=(2, failures))):
            with pytest.raises(BulkWriteError) as exc_info:
                await indexer.bulk(builder.commands_for({"_id": "1", "title": "t"}))
        assert exc_info.value.errors == failures


class TestRefreshAndPing:
    @pytest.mark.asyncio
    async def test_refresh_every_locale_index(self, indexer, cluster):
        await indexer.refresh_indexes()
        cluster.indices.refresh.assert_awaited_once_with(
            index=["sitedocsen", "sitedocsfr", "sitedocsde"]
        )

    @pytest.mark.asyncio
    async def test_refresh_default_locale(self, cluster, config, namer):
        await ESIndexer(cluster, config, namer, DefaultLocaleSource()).refresh_indexes()
        cluster.indices.refresh.assert_awaited_once_with(index=["sitedocsdefault"])

    @pytest.mark.asyncio
    async def test_ping_failure(self, indexer, cluster):
        cluster.ping.return_value = False
        with pytest.raises(ConnectionError):
            await indexer.ping()
