"""Unit level resource calculator driven by the cached leveling table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

LEVEL_DATA_KEY = "unit_level"


@dataclass
class ResourceResult:
    description: str
    gold_needed: int
    shards_needed: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "goldNeeded": self.gold_needed,
            "shardsNeeded": self.shards_needed,
        }


def validate_level_data(level_data: Any) -> bool:
    return (
        isinstance(level_data, dict)
        and bool(level_data.get("levelingData"))
        and bool(level_data.get("rarityCaps"))
    )


def determine_rarity(rarity_caps: Dict[str, int], level: int) -> str:
    ordered = sorted(rarity_caps, key=lambda name: rarity_caps[name])
    for rarity in ordered:
        if level <= rarity_caps[rarity]:
            return rarity
    return ordered[-1]


def calculate_resources(leveling_data: List[Dict[str, Any]], from_level: int, to_level: int) -> Dict[str, int]:
    """Sum gold and shards to go from ``from_level`` to ``to_level``.

    Levels missing from the table are extrapolated linearly from the last
    known entry.
    """
    by_level = {entry["level"]: entry for entry in leveling_data}
    last_level = max(by_level)
    last = by_level[last_level]

    gold = shards = 0
    for level in range(from_level + 1, to_level + 1):
        entry = by_level.get(level)
        if entry is not None:
            shards += entry["shards"]["toReachCurrent"]
            gold += entry["gold"]["toReachCurrent"]
        else:
            extra = level - last_level
            shards += last["shards"]["toReachCurrent"] + extra * last["shards"]["increaseFromPrev"]
            gold += last["gold"]["toReachCurrent"] + extra * last["gold"]["increaseFromPrev"]

    return {"gold": max(0, gold), "shards": max(0, shards)}


def calculate_all_results(level_data: Dict[str, Any], current_level: int, desired_level: int) -> Dict[str, Any]:
    rarity_caps: Dict[str, int] = level_data["rarityCaps"]
    leveling_data = level_data["levelingData"]
    max_level = max(rarity_caps.values())

    valid_current = max(1, min(abs(current_level), max_level - 1))
    valid_desired = max(valid_current + 1, min(abs(desired_level), max_level))

    current_rarity = determine_rarity(rarity_caps, valid_current)
    rarity_max = rarity_caps[current_rarity]

    targets = [(valid_desired, f"Level {valid_current} → {valid_desired}")]
    if valid_current < rarity_max and rarity_max != valid_desired:
        targets.append((rarity_max, f"Max {current_rarity} (Level {rarity_max})"))
    if valid_desired != max_level and valid_current < max_level:
        targets.append((max_level, f"Max Mystic Level ({max_level})"))

    results = []
    for target, description in targets:
        totals = calculate_resources(leveling_data, valid_current, target)
        results.append(ResourceResult(description, totals["gold"], totals["shards"]))

    return {
        "results": [result.to_dict() for result in results],
        "metadata": {
            "validCurrentLevel": valid_current,
            "validDesiredLevel": valid_desired,
            "currentRarity": current_rarity,
            "maxLevel": max_level,
        },
    }
