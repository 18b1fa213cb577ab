"""Tests for the cached staking data service."""

from lordsboard.staking.calculator import LEVEL_DATA_KEY
from lordsboard.staking.models import FilterOptions, SortOption

from conftest import ALICE


class TestPages:
    def test_second_fetch_hits_cache(self, service, marketplace):
        lords, from_cache = service.fetch_page(0, 4)
        assert not from_cache
        assert [lord.token_id for lord in lords] == ["1", "2", "3", "4"]

        again, from_cache = service.fetch_page(0, 4)
        assert from_cache
        assert again == lords
        assert marketplace.calls == [(0, 4)]

    def test_staking_state_comes_from_contract(self, service):
        lords, _ = service.fetch_page(0, 4)
        by_id = {lord.token_id: lord for lord in lords}
        assert by_id["1"].is_staked and by_id["1"].staking_duration == 10
        assert not by_id["4"].is_staked and by_id["4"].staking_duration is None

    def test_staking_lookups_are_cached(self, service, staking_contract):
        service.fetch_page(0, 4)
        service.cache.invalidate("lords:*")
        service.fetch_page(0, 4)
        assert staking_contract.calls == ["1", "2", "3", "4"]


class TestMasterSnapshot:
    def test_build_walks_until_empty_page(self, service, marketplace):
        lords = service.build_master_snapshot()
        assert len(lords) == 6
        assert marketplace.calls == [(0, 4), (4, 4), (8, 4)]
        assert len(service.get_master_lords()) == 6

    def test_max_tokens_limits_walk(self, service, marketplace):
        service.max_tokens = 4
        assert len(service.build_master_snapshot()) == 4
        assert marketplace.calls == [(0, 4)]

    def test_get_lords_prefers_master(self, service):
        service.build_master_snapshot()
        filters = FilterOptions(only_staked=True, sort_by=SortOption.DURATION_HIGH_TO_LOW)
        data = service.get_lords(0, 2, filters, check_master=True)

        assert data["isMasterCache"]
        assert data["total"] == 4
        assert [lord.token_id for lord in data["lords"]] == ["1", "2", "3", "5"]
        assert data["stats"].total_staked == 4

    def test_get_lords_without_master_uses_page(self, service):
        data = service.get_lords(0, 4, FilterOptions(), check_master=True)
        assert not data["isMasterCache"]
        assert not data["fromCache"]
        assert len(data["lords"]) == 4

    def test_owners_and_power_map_build_snapshot_lazily(self, service):
        owners = service.get_owners()
        assert owners[0].address == ALICE
        assert service.get_raffle_power_map()[ALICE] == 85
        assert service.get_master_lords() is not None


def test_refresh_keeps_static_tables(service):
    service.build_master_snapshot()
    service.cache.set_master(LEVEL_DATA_KEY, {"levelingData": [1]})

    removed = service.refresh()

    assert removed > 0
    assert service.get_master_lords() is None
    assert service.cache.keys("staking:*") == []
    assert service.cache.get_master(LEVEL_DATA_KEY) == {"levelingData": [1]}
