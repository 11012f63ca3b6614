import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tableside.core.errors import TransientError
from tableside.infrastructure.state_manager import StateManager


class FlakyReadRedis:
    def __init__(self, failures, value):
        self.failures = failures
        self.value = value
        self.calls = 0

    def get(self, key):
        self.calls += 1
        if self.calls <= self.failures:
            raise RedisConnectionError("timeout")
        return self.value


def test_ram_store_round_trip():
    store = StateManager(redis_url=None)
    assert store.backend == "memory"

    store.save_cart("g", [{"id": "a"}])
    store.set_table("g", 7)

    assert store.get_cart("g") == [{"id": "a"}]
    assert store.get_table("g") == 7

    store.delete_cart("g")
    store.delete_table("g")
    assert store.get_cart("g") == []
    assert store.get_table("g") is None


def test_unreachable_redis_falls_back_to_ram():
    store = StateManager(redis_url="redis://127.0.0.1:1/0")
    assert store.backend == "memory"


def test_reads_are_retried_with_backoff():
    client = FlakyReadRedis(failures=2, value="12")
    store = StateManager(client=client, read_attempts=3, read_base_delay=0)

    assert store.get_table("g") == 12
    assert client.calls == 3


def test_reads_give_up_with_transient_error():
    client = FlakyReadRedis(failures=5, value="12")
    store = StateManager(client=client, read_attempts=3, read_base_delay=0)

    with pytest.raises(TransientError):
        store.get_table("g")
    assert client.calls == 3
