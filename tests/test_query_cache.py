import fakeredis
import pytest
import redis

from utils.query_cache import QueryCache


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def cache(redis_client):
    return QueryCache(redis_client=redis_client, ttl=60)


def test_get_or_load_calls_loader_once(cache):
    calls = []

    def loader():
        calls.append(1)
        return [{"id": 1}]

    assert cache.get_or_load("services", (True,), loader) == [{"id": 1}]
    assert cache.get_or_load("services", (True,), loader) == [{"id": 1}]
    assert len(calls) == 1


def test_empty_result_is_cached(cache):
    cache.get_or_load("clients", ("all", None), lambda: [])

    assert cache.get_or_load("clients", ("all", None), lambda: ["novo"]) == []


def test_entries_expire_with_ttl(cache, redis_client):
    cache.get_or_load("services", (False,), lambda: ["s"])

    key = QueryCache.build_key("services", "0", (False,))
    assert 0 < redis_client.ttl(key) <= 60


def test_invalidate_refreshes_collection_and_dependents(cache):
    cache.get_or_load("services", (False,), lambda: ["s"])
    cache.get_or_load("appointments", ("day", None), lambda: ["a"])
    cache.get_or_load("clients", ("all", None), lambda: ["c"])

    removed = cache.invalidate("services")

    assert removed == 2
    assert cache.get_or_load("services", (False,), lambda: ["s2"]) == ["s2"]
    assert cache.get_or_load("appointments", ("day", None), lambda: ["a2"]) == ["a2"]
    assert cache.get_or_load("clients", ("all", None), lambda: ["c2"]) == ["c"]


def test_load_overlapping_invalidation_is_not_served(cache):
    def loader_racing_a_write():
        # Uma escrita confirma e invalida enquanto a leitura ainda carrega
        cache.invalidate("appointments")
        return ["stale"]

    assert cache.get_or_load("appointments", ("day", None), loader_racing_a_write) == ["stale"]
    assert cache.get_or_load("appointments", ("day", None), lambda: ["fresh"]) == ["fresh"]


def test_invalidation_is_shared_between_cache_instances(redis_client):
    # Dois workers apontando para o mesmo Redis
    worker_a = QueryCache(redis_client=redis_client)
    worker_b = QueryCache(redis_client=redis_client)
    worker_a.get_or_load("clients", ("all", None), lambda: ["old"])

    worker_b.invalidate("clients")

    assert worker_a.get_or_load("clients", ("all", None), lambda: ["new"]) == ["new"]


def test_disabled_cache_always_loads():
    cache = QueryCache()
    cache.use_client(None)

    assert cache.get_or_load("services", (), lambda: ["a"]) == ["a"]
    assert cache.get_or_load("services", (), lambda: ["b"]) == ["b"]
    assert cache.invalidate("services") == 0


def test_redis_errors_fall_back_to_database(cache, redis_client, monkeypatch):
    def unavailable(*args, **kwargs):
        raise redis.ConnectionError("conexão recusada")

    monkeypatch.setattr(redis_client, "get", unavailable)

    assert cache.get_or_load("services", (), lambda: ["do banco"]) == ["do banco"]


def test_build_key_renders_none_as_empty():
    key = QueryCache.build_key("appointments", "3", ("range", "2024-01-01", None))
    assert key == "salonflow:appointments:3:range:2024-01-01:"
