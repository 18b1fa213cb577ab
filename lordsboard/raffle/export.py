"""CSV export of raffle winners."""

import csv
import io
import math
from datetime import date
from typing import Iterable, Optional

from lordsboard.raffle.models import PrizeCategory

CSV_HEADERS = ["Type", "Number", "Address", "Raffle Power", "Win Chance (%)"]

# Below this a percentage is written in exponential notation
EXPONENTIAL_THRESHOLD = 1e-8


def format_win_chance(value: float) -> str:
    """Format a percentage with at least two significant decimal digits."""
    if value == 0:
        return "0.00"
    magnitude = abs(value)
    if magnitude < EXPONENTIAL_THRESHOLD:
        return f"{value:.2e}"
    decimals = max(2, 1 - math.floor(math.log10(magnitude)))
    return f"{value:.{decimals}f}"


def _format_power(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def winners_to_csv(categories: Iterable[PrizeCategory]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for category in categories:
        for number, winner in enumerate(category.winners, start=1):
            writer.writerow([
                category.name,
                number,
                winner.address,
                _format_power(winner.weight),
                format_win_chance(winner.win_chance),
            ])
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"raffle-winners-{today.isoformat()}.csv"
