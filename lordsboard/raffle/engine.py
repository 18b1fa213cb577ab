"""
Raffle Engine - weighted multi-category winner selection

Winners are drawn without replacement across the whole run: an address that wins
in one prize category can no longer be drawn for a later one.
"""

import random
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from lordsboard.raffle.models import DrawResult, Participant, PrizeCategory, Winner
from lordsboard.raffle.sampler import AliasSampler
from lordsboard.utils.common import shorten_address
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)


class NoEligibleParticipantsError(RuntimeError):
    """Raised when a draw is requested but nobody has raffle power."""

    def __init__(self, message: str = "No eligible participants for the raffle"):
        super().__init__(message)


class RaffleEngine:
    """Draws winners for prize categories weighted by raffle power"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.SystemRandom()

    def draw(
        self,
        participants: Iterable[Participant],
        categories: Sequence[PrizeCategory],
    ) -> DrawResult:
        """Run one draw over ``categories`` in the given order.

        ``participants`` and ``categories`` are left untouched; fresh
        ``PrizeCategory`` objects carrying the winners are returned.
        """
        eligible = [p for p in participants if p.weight > 0]
        if not eligible:
            logger.warning("Draw requested with no eligible participants")
            raise NoEligibleParticipantsError()

        # Win chances are taken over the starting pool, whatever the caller stored
        starting_weight = sum(p.weight for p in eligible)
        pool: List[Participant] = [
            replace(p, win_chance=p.weight / starting_weight * 100) for p in eligible
        ]

        logger.info(
            "Starting raffle draw: %d eligible participants, categories=%s",
            len(pool),
            [(c.name, c.slot_count) for c in categories],
        )

        results: List[PrizeCategory] = []
        exhausted_at: Optional[int] = None

        for index, category in enumerate(categories):
            drawn = PrizeCategory(name=category.name, slot_count=category.slot_count)
            results.append(drawn)

            if exhausted_at is not None:
                continue

            total_weight = sum(p.weight for p in pool)
            if not pool or total_weight <= 0:
                exhausted_at = index
                logger.warning(
                    "No more eligible participants; category '%s' and later ones get no winners",
                    category.name,
                )
                continue

            drawn.winners = self._draw_category(pool, category.slot_count)
            logger.info("Category '%s': drew %d of %d requested winners",
                        category.name, len(drawn.winners), category.slot_count)

        return DrawResult(categories=results, exhausted_at=exhausted_at)

    def _draw_category(self, pool: List[Participant], slot_count: int) -> List[Winner]:
        """Draw up to ``slot_count`` winners, removing each one from ``pool``."""
        winners: List[Winner] = []
        for _ in range(min(slot_count, len(pool))):
            # The pool shrinks every iteration, so the tables are rebuilt
            sampler = AliasSampler([p.weight for p in pool], self.rng)
            selected = pool.pop(sampler.sample())
            winners.append(Winner(
                address=selected.address,
                weight=selected.weight,
                win_chance=selected.win_chance,
            ))
            logger.debug("Drew %s (power=%s)", shorten_address(selected.address), selected.weight)
        return winners
