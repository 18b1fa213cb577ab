"""
Circle packing for the stakers bubble map.

Each entity becomes one bubble whose radius grows sub-linearly with its weight
(staked lord count). Bubbles are placed largest first, center first, with a
three-phase try budget: free grid cells, then center-biased polar points, then
uniform points. The last attempt is accepted even when it overlaps, so no
entity is ever dropped. This is a best-effort heuristic, not an optimal packing.
"""

from __future__ import annotations

import math
import random
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from lordsboard.bubblemap.models import Bubble, PackResult, Size
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

OVERLAP_FACTOR = 1.05

# Canvas sizing
BASE_CANVAS_FACTOR = 1.15
DENSITY_THRESHOLD = 20
BUBBLE_AREA_RATIO = 1.1
DENSITY_GROWTH = BUBBLE_AREA_RATIO * 1.2
MIN_DENSE_CANVAS_FACTOR = 1.25
MAX_CANVAS_FACTOR = 8.0
MIN_CANVAS_CAP = 3.0
DEFAULT_CONTAINER = Size(1000, 800)

# Radius bands: (entity count above, min radius, max radius) before density scaling
RADIUS_BANDS = (
    (800, 28, 85),
    (500, 32, 92),
    (300, 35, 100),
    (150, 40, 110),
    (50, 45, 120),
)
SMALL_MAP_RADII = (50, 130)
MIN_RADIUS_FLOOR = 18
MAX_RADIUS_FLOOR = 40
RADIUS_EXPONENT = 0.3
# Summed bubble area (at collision distance) may use at most this share of the canvas
MAX_FILL_RATIO = 0.4

# Placement
PADDING_RATIO = 0.005
CELL_DIAMETER_FACTOR = 1.5
GRID_PHASE_END = 80
POLAR_PHASE_END = 150
MAX_ATTEMPTS = 300


def default_weight(entity: Any) -> float:
    """Weight of an entity: a bare number, ``.weight`` or ``.staked``."""
    if isinstance(entity, (int, float)):
        return entity
    if hasattr(entity, "weight"):
        return entity.weight
    return getattr(entity, "staked", 1)


def canvas_size(count: int, container: Size) -> Size:
    """Canvas grows with sqrt(count) past the threshold, capped to a multiple of the container."""
    if container.is_empty:
        container = DEFAULT_CONTAINER
    width = container.width * BASE_CANVAS_FACTOR
    height = container.height * BASE_CANVAS_FACTOR

    if count > DENSITY_THRESHOLD:
        aspect = container.width / container.height
        scale = math.sqrt(count / DENSITY_THRESHOLD) * DENSITY_GROWTH
        width = container.width * scale
        height = width / aspect

        width = max(width, container.width * MIN_DENSE_CANVAS_FACTOR)
        height = max(height, container.height * MIN_DENSE_CANVAS_FACTOR)

        cap = min(MAX_CANVAS_FACTOR, max(MIN_CANVAS_CAP, math.sqrt(count / 50)))
        width = min(width, container.width * cap)
        height = min(height, container.height * cap)

    return Size(width, height)


def radius_bounds(count: int, canvas: Size, container: Size) -> Tuple[float, float]:
    """Banded (min, max) radius: more bubbles means smaller bounds."""
    min_radius, max_radius = SMALL_MAP_RADII
    density = (max(count, 1) / 100) ** 0.25
    for threshold, low, high in RADIUS_BANDS:
        if count > threshold:
            min_radius, max_radius = low / density, high / density
            break

    container_scale = min(
        canvas.width / (container.width or DEFAULT_CONTAINER.width),
        canvas.height / (container.height or DEFAULT_CONTAINER.height),
    )
    scale = math.sqrt(max(container_scale, 0.0))
    return (
        max(MIN_RADIUS_FLOOR, min_radius * scale),
        max(MAX_RADIUS_FLOOR, max_radius * scale),
    )


def collides(x1: float, y1: float, r1: float, x2: float, y2: float, r2: float) -> bool:
    return math.hypot(x1 - x2, y1 - y2) < (r1 + r2) * OVERLAP_FACTOR


def overlap_violations(bubbles: Sequence[Bubble]) -> int:
    """Number of bubble pairs closer than the collision distance."""
    count = 0
    for i, a in enumerate(bubbles):
        for b in bubbles[i + 1:]:
            if collides(a.x, a.y, a.radius, b.x, b.y, b.radius):
                count += 1
    return count


class _SpatialIndex:
    """Uniform hash grid; a bucket is as wide as the largest collision distance."""

    def __init__(self, max_radius: float):
        self.size = max(2 * max_radius * OVERLAP_FACTOR, 1.0)
        self._buckets: Dict[Tuple[int, int], List[Tuple[float, float, float]]] = defaultdict(list)

    def _key(self, x: float, y: float) -> Tuple[int, int]:
        return int(x // self.size), int(y // self.size)

    def add(self, x: float, y: float, radius: float) -> None:
        self._buckets[self._key(x, y)].append((x, y, radius))

    def collides(self, x: float, y: float, radius: float) -> bool:
        kx, ky = self._key(x, y)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for ox, oy, other in self._buckets.get((kx + dx, ky + dy), ()):
                    if collides(x, y, radius, ox, oy, other):
                        return True
        return False


class CirclePacker:
    """Places one non-overlapping (best effort) bubble per entity."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pack(
        self,
        entities: Sequence[Any],
        container: Size,
        weight_key: Callable[[Any], float] = default_weight,
    ) -> PackResult:
        count = len(entities)
        if count == 0:
            return PackResult(bubbles=[], canvas=canvas_size(0, container))
        if container.is_empty:
            logger.warning("Container has no area; packing against %s", DEFAULT_CONTAINER)
            container = DEFAULT_CONTAINER

        canvas = canvas_size(count, container)
        min_radius, max_radius = radius_bounds(count, canvas, container)
        padding = min(canvas.width, canvas.height) * PADDING_RATIO
        usable_w = canvas.width - padding * 2
        usable_h = canvas.height - padding * 2

        weights = [max(1, math.floor(weight_key(entity))) for entity in entities]
        max_weight = max(weights)
        radii = [
            min_radius + (w / max_weight) ** RADIUS_EXPONENT * (max_radius - min_radius)
            for w in weights
        ]

        fill = sum(math.pi * (r * OVERLAP_FACTOR) ** 2 for r in radii) / (usable_w * usable_h)
        if fill > MAX_FILL_RATIO:
            shrink = math.sqrt(MAX_FILL_RATIO / fill)
            radii = [r * shrink for r in radii]
            min_radius *= shrink
            max_radius *= shrink
            logger.debug("Bubble fill %.2f over limit, radii scaled by %.3f", fill, shrink)

        cells = self._center_first_cells(usable_w, usable_h, sum(radii) / count)
        next_cell = 0
        index = _SpatialIndex(max(radii))
        bubbles: List[Bubble] = []
        overlapping = 0

        # Largest first; ties keep input order
        for i in sorted(range(count), key=lambda k: weights[k], reverse=True):
            radius = radii[i]
            for attempt in range(1, MAX_ATTEMPTS + 1):
                if attempt < GRID_PHASE_END and next_cell < len(cells):
                    x, y = self._cell_point(cells[next_cell], padding)
                    next_cell += 1
                elif GRID_PHASE_END <= attempt < POLAR_PHASE_END:
                    x, y = self._polar_point(padding, usable_w, usable_h)
                else:
                    x = padding + self.rng.random() * usable_w
                    y = padding + self.rng.random() * usable_h

                x = self._clamp(x, padding + radius, canvas.width - padding - radius, canvas.width / 2)
                y = self._clamp(y, padding + radius, canvas.height - padding - radius, canvas.height / 2)

                hit = index.collides(x, y, radius)
                if not hit:
                    break
            else:
                # Try budget exhausted: keep the last candidate despite the overlap
                overlapping += 1

            index.add(x, y, radius)
            bubbles.append(Bubble(owner=entities[i], x=x, y=y, radius=radius, weight=weights[i]))

        if overlapping:
            logger.warning("Packed %d bubbles, %d placed with overlap", count, overlapping)
        else:
            logger.debug("Packed %d bubbles on %.0fx%.0f canvas", count, canvas.width, canvas.height)

        return PackResult(
            bubbles=bubbles,
            canvas=canvas,
            padding=padding,
            min_radius=min_radius,
            max_radius=max_radius,
            overlapping=overlapping,
        )

    @staticmethod
    def _center_first_cells(usable_w: float, usable_h: float, avg_radius: float) -> List[Tuple[float, float, float]]:
        cell_size = max(avg_radius * 2 * CELL_DIAMETER_FACTOR, 1.0)
        columns = int(usable_w // cell_size)
        rows = int(usable_h // cell_size)
        cells = [(cx, cy, cell_size) for cx in range(columns) for cy in range(rows)]
        cells.sort(key=lambda c: math.hypot(c[0] + 0.5 - columns / 2, c[1] + 0.5 - rows / 2))
        return cells

    def _cell_point(self, cell: Tuple[float, float, float], padding: float) -> Tuple[float, float]:
        cx, cy, size = cell
        return (
            padding + (cx + 0.2 + self.rng.random() * 0.6) * size,
            padding + (cy + 0.2 + self.rng.random() * 0.6) * size,
        )

    def _polar_point(self, padding: float, usable_w: float, usable_h: float) -> Tuple[float, float]:
        angle = self.rng.random() * math.pi * 2
        # Product of two uniforms leans toward the center
        distance = self.rng.random() * self.rng.random()
        return (
            padding + usable_w / 2 + math.cos(angle) * (usable_w / 2) * distance,
            padding + usable_h / 2 + math.sin(angle) * (usable_h / 2) * distance,
        )

    @staticmethod
    def _clamp(value: float, low: float, high: float, fallback: float) -> float:
        if low > high:
            return fallback
        return max(low, min(high, value))
