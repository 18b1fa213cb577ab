"""Core data models for the raffle drawing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

ELIGIBLE = "Eligible"
NO_RAFFLE_POWER = "No Raffle Power"


@dataclass
class Participant:
    """An address entered into the raffle with its draw weight."""

    address: str
    raffle_power: float = 0
    win_chance: float = 0.0
    status: str = NO_RAFFLE_POWER

    @property
    def weight(self) -> float:
        return self.raffle_power

    @property
    def is_eligible(self) -> bool:
        return self.raffle_power > 0


@dataclass(frozen=True)
class Winner:
    """Snapshot of a participant taken when it was drawn."""

    address: str
    weight: float
    win_chance: float


@dataclass
class PrizeCategory:
    """A prize tier and, after a draw, its winners in draw order."""

    name: str
    slot_count: int = 0
    winners: List[Winner] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.slot_count < 0:
            raise ValueError(f"slot_count must be >= 0, got {self.slot_count}")


@dataclass
class ValidationInfo:
    """Result of parsing a pasted address list."""

    lines: int = 0
    valid_addresses: int = 0
    unique_addresses: int = 0
    duplicates: int = 0


@dataclass
class RaffleStats:
    total: int = 0
    eligible: int = 0
    ineligible: int = 0
    total_raffle_power: float = 0


@dataclass
class DrawResult:
    """Winners of one draw run, aligned with the requested categories."""

    categories: List[PrizeCategory]
    exhausted_at: Optional[int] = None

    @property
    def winners(self) -> List[List[Winner]]:
        return [category.winners for category in self.categories]

    @property
    def total_winners(self) -> int:
        return sum(len(category.winners) for category in self.categories)

    @property
    def exhausted(self) -> bool:
        return self.exhausted_at is not None
