"""Tests for the in-memory cache store."""

from lordsboard.staking.cache import CacheStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_ttl_expiry():
    clock = FakeClock()
    cache = CacheStore(default_ttl=60, clock=clock)
    cache.set("lords:0-50", [1, 2])

    clock.now += 59
    assert cache.get("lords:0-50") == [1, 2]
    clock.now += 1
    assert cache.get("lords:0-50") is None
    assert len(cache) == 0


def test_explicit_ttl_overrides_default():
    clock = FakeClock()
    cache = CacheStore(default_ttl=10, clock=clock)
    cache.set("staking:1", {"duration": 4}, ttl=3600)
    clock.now += 100
    assert cache.has("staking:1")


def test_values_are_copied():
    cache = CacheStore()
    value = {"items": [1]}
    cache.set("k", value)
    value["items"].append(2)
    cache.get("k")["items"].append(3)
    assert cache.get("k") == {"items": [1]}


def test_master_keys_never_expire():
    clock = FakeClock()
    cache = CacheStore(default_ttl=1, clock=clock)
    cache.set_master("lords", ["snapshot"])
    clock.now += 10 ** 9
    assert cache.get_master("lords") == ["snapshot"]
    assert cache.keys("master:*") == ["master:lords"]


def test_invalidate_by_pattern():
    cache = CacheStore()
    for key in ("lords:0-50", "lords:50-50", "staking:7", "master:unit_level"):
        cache.set(key, 1)

    assert cache.invalidate("lords:*") == 2
    assert cache.invalidate("nothing:*") == 0
    assert sorted(cache.keys()) == ["master:unit_level", "staking:7"]


def test_delete_and_clear():
    cache = CacheStore()
    cache.set("a", 1)
    assert cache.delete("a")
    assert not cache.delete("a")
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0
