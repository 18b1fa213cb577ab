"""Aggregation, filtering and sorting over lord records."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from lordsboard.raffle.participants import calculate_lord_raffle_power
from lordsboard.staking.models import (
    FilterOptions,
    Lord,
    OwnerRecord,
    OwnerStats,
    SortOption,
    StakingStats,
)

RARITY_FIELDS = ("rare", "epic", "legendary", "mystic")


def process_owners(lords: Iterable[Lord]) -> List[OwnerRecord]:
    """Group lords by lower-cased owner, highest raffle power first."""
    owners: Dict[str, OwnerRecord] = {}

    for lord in lords:
        address = lord.owner.lower()
        record = owners.get(address)
        if record is None:
            record = owners[address] = OwnerRecord(address=address)

        record.total_lords += 1
        record.lords.append(lord)
        if lord.rarity in RARITY_FIELDS:
            setattr(record, lord.rarity, getattr(record, lord.rarity) + 1)
        if lord.is_staked:
            record.staked += 1
        record.raffle_power += calculate_lord_raffle_power(lord)

    return sorted(owners.values(), key=lambda o: o.raffle_power, reverse=True)


def owner_stats(owners: Sequence[OwnerRecord]) -> OwnerStats:
    stats = OwnerStats(unique_owners=len(owners))
    for owner in owners:
        if owner.total_lords > stats.highest_lord_count:
            stats.highest_lord_count = owner.total_lords
            stats.highest_lord_owner = owner.address
    return stats


def calculate_stats(lords: Iterable[Lord]) -> StakingStats:
    staked = [lord for lord in lords if lord.is_staked]
    if not staked:
        return StakingStats()
    total_duration = sum(lord.staking_duration or 0 for lord in staked)
    return StakingStats(
        unique_stakers=len({lord.owner.lower() for lord in staked}),
        total_staked=len(staked),
        average_duration=int(total_duration / len(staked) + 0.5),
    )


def _matches(value: str, wanted: str) -> bool:
    if wanted.lower().startswith("all"):
        return True
    return value == wanted.lower()


def apply_filters(lords: Iterable[Lord], filters: FilterOptions) -> List[Lord]:
    result = []
    for lord in lords:
        if filters.only_staked and not lord.is_staked:
            continue
        if not _matches(lord.species, filters.lord_specie):
            continue
        if not _matches(lord.rarity, filters.lord_rarity):
            continue
        if lord.is_staked and (lord.staking_duration or 0) < filters.min_duration:
            continue
        result.append(lord)
    return result


def _token_number(lord: Lord) -> int:
    try:
        return int(lord.token_id, 0) if lord.token_id.startswith("0x") else int(lord.token_id)
    except ValueError:
        return 0


def sort_lords(lords: Iterable[Lord], sort_by: SortOption) -> List[Lord]:
    lords = list(lords)
    if sort_by == SortOption.TOKEN_ID_ASC:
        return sorted(lords, key=_token_number)
    if sort_by == SortOption.TOKEN_ID_DESC:
        return sorted(lords, key=_token_number, reverse=True)

    # Duration orders keep unstaked lords at the end
    staked = [lord for lord in lords if lord.is_staked]
    unstaked = [lord for lord in lords if not lord.is_staked]
    staked.sort(
        key=lambda lord: lord.staking_duration or 0,
        reverse=sort_by == SortOption.DURATION_HIGH_TO_LOW,
    )
    return staked + unstaked


def paginate(items: Sequence, start: int, size: int) -> list:
    start = max(0, start)
    if size <= 0:
        return []
    return list(items[start:start + size])


def search_owners(owners: Iterable[OwnerRecord], term: str) -> List[OwnerRecord]:
    term = term.strip().lower()
    if not term:
        return list(owners)
    return [owner for owner in owners if term in owner.address]


def stakers_only(owners: Iterable[OwnerRecord]) -> List[OwnerRecord]:
    return [owner for owner in owners if owner.staked > 0]


def raffle_power_map(lords: Iterable[Lord]) -> Dict[str, int]:
    """Map of lower-cased owner address to summed raffle power of staked lords."""
    powers: Dict[str, int] = {}
    for lord in lords:
        if not lord.is_staked:
            continue
        address = lord.owner.lower()
        powers[address] = powers.get(address, 0) + calculate_lord_raffle_power(lord)
    return powers
