"""Participant list handling: address parsing, raffle power and win chances."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from lordsboard.raffle.models import (
    ELIGIBLE,
    NO_RAFFLE_POWER,
    Participant,
    RaffleStats,
    ValidationInfo,
)
from lordsboard.staking.models import Lord

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

# Raffle power per staked day, by lord rarity
RARITY_MULTIPLIERS = {
    "rare": 1,
    "epic": 2,
    "legendary": 4,
    "mystic": 8,
}


def calculate_lord_raffle_power(lord: Lord) -> int:
    if not lord.is_staked:
        return 0
    multiplier = RARITY_MULTIPLIERS.get(lord.rarity, 0)
    duration = lord.staking_duration or 0
    return multiplier * duration if duration > 0 else multiplier


def parse_addresses(text: str) -> Tuple[List[str], ValidationInfo]:
    """Split pasted text into unique, valid addresses (first occurrence wins)."""
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    valid = [line for line in lines if ADDRESS_PATTERN.match(line)]
    unique = list(dict.fromkeys(valid))

    info = ValidationInfo(
        lines=len(lines),
        valid_addresses=len(valid),
        unique_addresses=len(unique),
        duplicates=len(valid) - len(unique),
    )
    return unique, info


def build_participants(addresses: Iterable[str], power_map: Dict[str, float]) -> List[Participant]:
    """Attach raffle power and win chance to each address.

    Addresses without staked lords get zero power and are ineligible. The
    result is sorted by raffle power, highest first.
    """
    participants: List[Participant] = []
    seen = set()
    for address in addresses:
        address = address.lower()
        if address in seen:
            continue
        seen.add(address)
        power = power_map.get(address, 0)
        participants.append(Participant(
            address=address,
            raffle_power=power,
            status=ELIGIBLE if power > 0 else NO_RAFFLE_POWER,
        ))

    update_win_chances(participants)
    participants.sort(key=lambda p: p.raffle_power, reverse=True)
    return participants


def update_win_chances(participants: List[Participant]) -> None:
    total = sum(p.raffle_power for p in participants)
    for p in participants:
        p.win_chance = (p.raffle_power / total) * 100 if total > 0 else 0.0


def raffle_statistics(participants: List[Participant]) -> RaffleStats:
    eligible = sum(1 for p in participants if p.is_eligible)
    return RaffleStats(
        total=len(participants),
        eligible=eligible,
        ineligible=len(participants) - eligible,
        total_raffle_power=sum(p.raffle_power for p in participants),
    )
