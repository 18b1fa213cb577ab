"""Data models for staked lords and their owners."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

LORD_SPECIES = ["All", "Wolf", "Owl", "Raven", "Boar", "Fox"]
LORD_RARITIES = ["All", "Rare", "Epic", "Legendary", "Mystic"]


class SortOption(str, Enum):
    DURATION_HIGH_TO_LOW = "durationHighToLow"
    DURATION_LOW_TO_HIGH = "durationLowToHigh"
    TOKEN_ID_ASC = "tokenIdAsc"
    TOKEN_ID_DESC = "tokenIdDesc"


@dataclass
class Lord:
    """One token of the collection with its staking state."""

    token_id: str
    name: str
    owner: str
    is_staked: bool = False
    staking_duration: Optional[int] = None
    rank: List[str] = field(default_factory=list)
    specie: List[str] = field(default_factory=list)

    @property
    def rarity(self) -> str:
        return self.rank[0].lower() if self.rank else ""

    @property
    def species(self) -> str:
        return self.specie[0].lower() if self.specie else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenId": self.token_id,
            "name": self.name,
            "owner": self.owner,
            "isStaked": self.is_staked,
            "stakingDuration": self.staking_duration,
            "attributes": {"rank": list(self.rank), "specie": list(self.specie)},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lord":
        attributes = data.get("attributes") or {}
        return cls(
            token_id=str(data["tokenId"]),
            name=data.get("name", ""),
            owner=data.get("owner", ""),
            is_staked=bool(data.get("isStaked", False)),
            staking_duration=data.get("stakingDuration"),
            rank=list(attributes.get("rank") or []),
            specie=list(attributes.get("specie") or []),
        )


@dataclass
class OwnerRecord:
    """Per-address aggregate of held and staked lords."""

    address: str
    total_lords: int = 0
    rare: int = 0
    epic: int = 0
    legendary: int = 0
    mystic: int = 0
    staked: int = 0
    raffle_power: int = 0
    lords: List[Lord] = field(default_factory=list)

    @property
    def staked_count(self) -> int:
        return self.staked

    def to_dict(self, include_lords: bool = False) -> Dict[str, Any]:
        data = {
            "address": self.address,
            "totalLords": self.total_lords,
            "rare": self.rare,
            "epic": self.epic,
            "legendary": self.legendary,
            "mystic": self.mystic,
            "staked": self.staked,
            "rafflePower": self.raffle_power,
        }
        if include_lords:
            data["lords"] = [lord.to_dict() for lord in self.lords]
        return data


@dataclass
class StakingStats:
    unique_stakers: int = 0
    total_staked: int = 0
    average_duration: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "uniqueStakers": self.unique_stakers,
            "totalStaked": self.total_staked,
            "averageDuration": self.average_duration,
        }


@dataclass
class OwnerStats:
    unique_owners: int = 0
    highest_lord_count: int = 0
    highest_lord_owner: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uniqueOwners": self.unique_owners,
            "highestLordCount": self.highest_lord_count,
            "highestLordOwner": self.highest_lord_owner,
        }


@dataclass
class FilterOptions:
    lord_specie: str = "All"
    lord_rarity: str = "All"
    min_duration: int = 0
    sort_by: SortOption = SortOption.DURATION_HIGH_TO_LOW
    only_staked: bool = False
