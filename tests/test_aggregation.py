"""Tests for owner aggregation, filtering and sorting of lords."""

from lordsboard.staking.aggregation import (
    apply_filters,
    calculate_stats,
    owner_stats,
    paginate,
    process_owners,
    raffle_power_map,
    search_owners,
    sort_lords,
    stakers_only,
)
from lordsboard.staking.models import FilterOptions, Lord, SortOption

from conftest import ALICE, BOB, CAROL, DAVE


class TestOwners:
    def test_grouped_by_lowercased_owner(self, sample_lords):
        owners = process_owners(sample_lords)
        by_address = {o.address: o for o in owners}

        assert set(by_address) == {ALICE, BOB, CAROL, DAVE}
        bob = by_address[BOB]
        assert (bob.total_lords, bob.epic, bob.legendary, bob.staked) == (2, 1, 1, 1)
        assert bob.raffle_power == 6

    def test_sorted_by_raffle_power(self, sample_lords):
        owners = process_owners(sample_lords)
        assert [o.address for o in owners] == [ALICE, BOB, CAROL, DAVE]
        assert owners[0].raffle_power == 85

    def test_owner_stats(self, sample_lords):
        stats = owner_stats(process_owners(sample_lords))
        assert stats.unique_owners == 4
        assert stats.highest_lord_count == 2
        assert stats.highest_lord_owner == ALICE

    def test_search_and_stakers_only(self, sample_lords):
        owners = process_owners(sample_lords)
        assert [o.address for o in search_owners(owners, "  0xBBB ")] == [BOB]
        assert len(search_owners(owners, "")) == 4
        assert DAVE not in {o.address for o in stakers_only(owners)}

    def test_raffle_power_map(self, sample_lords):
        assert raffle_power_map(sample_lords) == {ALICE: 85, BOB: 6, CAROL: 1}


class TestStats:
    def test_calculate_stats(self, sample_lords):
        stats = calculate_stats(sample_lords)
        assert stats.total_staked == 4
        assert stats.unique_stakers == 3
        # (10 + 5 + 3 + 1) / 4 = 4.75
        assert stats.average_duration == 5

    def test_no_staked_lords(self):
        assert calculate_stats([]).to_dict() == {
            "uniqueStakers": 0,
            "totalStaked": 0,
            "averageDuration": 0,
        }


class TestFilterAndSort:
    def test_filters(self, sample_lords):
        wolves = apply_filters(sample_lords, FilterOptions(lord_specie="Wolf"))
        assert [lord.token_id for lord in wolves] == ["1", "6"]

        epic_staked = apply_filters(sample_lords, FilterOptions(lord_rarity="Epic", only_staked=True))
        assert [lord.token_id for lord in epic_staked] == ["3"]

        long_staked = apply_filters(sample_lords, FilterOptions(min_duration=4, only_staked=True))
        assert [lord.token_id for lord in long_staked] == ["1", "2"]

    def test_all_variants_match_everything(self, sample_lords):
        assert len(apply_filters(sample_lords, FilterOptions(lord_specie="All Species"))) == 6

    def test_duration_sort_puts_unstaked_last(self, sample_lords):
        ordered = sort_lords(sample_lords, SortOption.DURATION_HIGH_TO_LOW)
        assert [lord.token_id for lord in ordered] == ["1", "2", "3", "5", "4", "6"]
        ordered = sort_lords(sample_lords, SortOption.DURATION_LOW_TO_HIGH)
        assert [lord.token_id for lord in ordered] == ["5", "3", "2", "1", "4", "6"]

    def test_token_id_sort_is_numeric(self):
        lords = [Lord(token_id=t, name="", owner=ALICE) for t in ("10", "9", "100")]
        assert [lord.token_id for lord in sort_lords(lords, SortOption.TOKEN_ID_ASC)] == ["9", "10", "100"]
        assert [lord.token_id for lord in sort_lords(lords, SortOption.TOKEN_ID_DESC)] == ["100", "10", "9"]

    def test_paginate(self):
        assert paginate(list(range(10)), 8, 5) == [8, 9]
        assert paginate(list(range(10)), -3, 2) == [0, 1]
        assert paginate(list(range(10)), 0, 0) == []
