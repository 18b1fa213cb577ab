"""
Zoom, pan and bubble-drag handling for the stakers bubble map.

``MapViewport`` holds the fixed geometry of one layout (canvas, container,
bubble count). Every interaction is a pure transition that takes a
``ViewportState`` and returns a new one; bubble drags also return a new bubble
list instead of editing the old one.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from lordsboard.bubblemap.models import Bubble, DragState, Size, ViewportState
from lordsboard.bubblemap.packer import OVERLAP_FACTOR, PADDING_RATIO
from lordsboard.utils.common import clamp
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

ZOOM_STEP = 0.1
MAX_ZOOM_CEILING = 1.5
MIN_ZOOM_FLOOR = 0.2
DEFAULT_MIN_ZOOM = 0.4
IDEAL_ZOOM_MARGIN = 0.95
MIN_ZOOM_MARGIN = 0.8

# (bubble count above, cap) for the ideal zoom
IDEAL_ZOOM_CAPS = ((300, 0.85), (100, 0.9))
# (bubble count above, cap) for the minimum zoom
MIN_ZOOM_CAPS = ((500, 0.25), (200, 0.3), (100, 0.4), (50, 0.5))
SMALL_MAP_MIN_ZOOM = (0.6, 0.8)

DRAG_KIND_MAP = "map"
DRAG_KIND_BUBBLE = "bubble"


def drag_speed(zoom: float) -> float:
    """Pointer deltas move faster when zoomed out."""
    return 1.3 + (1 - zoom) * 0.6


class MapViewport:
    def __init__(self, canvas: Size, container: Size, bubble_count: int):
        self.canvas = canvas
        self.container = container
        self.bubble_count = bubble_count
        self.padding = min(canvas.width, canvas.height) * PADDING_RATIO

    @property
    def is_degenerate(self) -> bool:
        return self.canvas.is_empty or self.container.is_empty

    @property
    def min_zoom(self) -> float:
        if self.is_degenerate or self.bubble_count == 0:
            return DEFAULT_MIN_ZOOM

        base = min(
            self.container.width * MIN_ZOOM_MARGIN / self.canvas.width,
            self.container.height * MIN_ZOOM_MARGIN / self.canvas.height,
        )
        for threshold, cap in MIN_ZOOM_CAPS:
            if self.bubble_count > threshold:
                adjusted = min(base, cap)
                break
        else:
            low, high = SMALL_MAP_MIN_ZOOM
            adjusted = min(max(base, low), high)

        return max(adjusted, MIN_ZOOM_FLOOR)

    @property
    def max_zoom(self) -> float:
        if self.is_degenerate:
            return 1.0
        return max(min(MAX_ZOOM_CEILING, self.canvas.width / self.container.width), self.min_zoom)

    def clamp_zoom(self, zoom: float) -> float:
        return clamp(zoom, self.min_zoom, self.max_zoom)

    def ideal_zoom(self) -> float:
        """Zoom that fits the whole canvas in the container, with a margin."""
        if self.is_degenerate or self.bubble_count == 0:
            return 1.0

        zoom = min(
            self.container.width / self.canvas.width,
            self.container.height / self.canvas.height,
        ) * IDEAL_ZOOM_MARGIN
        for threshold, cap in IDEAL_ZOOM_CAPS:
            if self.bubble_count > threshold:
                zoom = min(zoom, cap)
                break
        return self.clamp_zoom(zoom)

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------
    def initial_state(self) -> ViewportState:
        return ViewportState(zoom=self.ideal_zoom())

    def reset(self, state: ViewportState) -> ViewportState:
        return replace(state, zoom=self.ideal_zoom(), pan_x=0.0, pan_y=0.0, drag=None)

    def zoom_in(self, state: ViewportState) -> ViewportState:
        if self.is_degenerate:
            return state
        return self._rezoom(state, state.zoom + ZOOM_STEP)

    def zoom_out(self, state: ViewportState) -> ViewportState:
        if self.is_degenerate:
            return state
        return self._rezoom(state, state.zoom - ZOOM_STEP)

    def wheel(self, state: ViewportState, delta_y: float) -> ViewportState:
        """Scrolling up zooms in, anything else zooms out."""
        return self.zoom_in(state) if delta_y < 0 else self.zoom_out(state)

    def _rezoom(self, state: ViewportState, zoom: float) -> ViewportState:
        zoom = self.clamp_zoom(zoom)
        pan_x, pan_y = self._clamp_pan(state.pan_x, state.pan_y, zoom)
        return replace(state, zoom=zoom, pan_x=pan_x, pan_y=pan_y)

    # ------------------------------------------------------------------
    # Pan
    # ------------------------------------------------------------------
    def _clamp_pan(self, x: float, y: float, zoom: float) -> Tuple[float, float]:
        if self.is_degenerate or zoom <= 0:
            return 0.0, 0.0
        max_x = max(0.0, (self.canvas.width * zoom - self.container.width) / (2 * zoom))
        max_y = max(0.0, (self.canvas.height * zoom - self.container.height) / (2 * zoom))
        return clamp(x, -max_x, max_x), clamp(y, -max_y, max_y)

    def pan(self, state: ViewportState, dx: float, dy: float) -> ViewportState:
        if self.is_degenerate:
            return state
        speed = drag_speed(state.zoom)
        pan_x, pan_y = self._clamp_pan(state.pan_x + dx * speed, state.pan_y + dy * speed, state.zoom)
        return replace(state, pan_x=pan_x, pan_y=pan_y)

    # ------------------------------------------------------------------
    # Pointer drags
    # ------------------------------------------------------------------
    def begin_pan(self, state: ViewportState, x: float, y: float) -> ViewportState:
        if state.drag is not None and state.drag.kind == DRAG_KIND_BUBBLE:
            return state
        return replace(state, drag=DragState(kind=DRAG_KIND_MAP, start_x=x, start_y=y))

    def begin_bubble_drag(self, state: ViewportState, bubbles: Sequence[Bubble], index: int,
                          x: float, y: float) -> ViewportState:
        bubble = bubbles[index]
        return replace(state, drag=DragState(
            kind=DRAG_KIND_BUBBLE,
            start_x=x,
            start_y=y,
            index=index,
            origin_x=bubble.x,
            origin_y=bubble.y,
        ))

    def move_pointer(self, state: ViewportState, bubbles: Sequence[Bubble],
                     x: float, y: float) -> Tuple[ViewportState, List[Bubble]]:
        """Handle a pointer move during a drag; returns the new state and bubbles."""
        drag = state.drag
        if drag is None:
            return state, list(bubbles)

        if drag.kind == DRAG_KIND_BUBBLE:
            dx, dy = x - drag.start_x, y - drag.start_y
            speed = drag_speed(state.zoom)
            moved = self.drag_bubble(
                bubbles, drag.index, drag.origin_x + dx * speed, drag.origin_y + dy * speed
            )
            return state, moved

        # Map pans are incremental: the drag start follows the pointer
        panned = self.pan(state, x - drag.start_x, y - drag.start_y)
        return replace(panned, drag=replace(drag, start_x=x, start_y=y)), list(bubbles)

    def end_drag(self, state: ViewportState) -> ViewportState:
        return replace(state, drag=None)

    def _clamp_bubble(self, bubble: Bubble, x: float, y: float) -> Bubble:
        low_x = self.padding + bubble.radius
        high_x = self.canvas.width - self.padding - bubble.radius
        low_y = self.padding + bubble.radius
        high_y = self.canvas.height - self.padding - bubble.radius
        x = clamp(x, low_x, high_x) if low_x <= high_x else self.canvas.width / 2
        y = clamp(y, low_y, high_y) if low_y <= high_y else self.canvas.height / 2
        return replace(bubble, x=x, y=y)

    def drag_bubble(self, bubbles: Sequence[Bubble], index: int, x: float, y: float) -> List[Bubble]:
        """Move one bubble and push apart the neighbours it directly hits.

        A single relaxation pass: each colliding neighbour and the dragged
        bubble each move half the overlap along the line between centers.
        """
        updated = list(bubbles)
        dragged = self._clamp_bubble(updated[index], x, y)

        for i, other in enumerate(updated):
            if i == index:
                continue
            dx = dragged.x - other.x
            dy = dragged.y - other.y
            distance = math.hypot(dx, dy)
            min_distance = (dragged.radius + other.radius) * OVERLAP_FACTOR
            if distance >= min_distance:
                continue

            angle = math.atan2(dy, dx)
            push = (min_distance - distance) * 0.5
            updated[i] = self._clamp_bubble(
                other, other.x - math.cos(angle) * push, other.y - math.sin(angle) * push
            )
            dragged = self._clamp_bubble(
                dragged, dragged.x + math.cos(angle) * push, dragged.y + math.sin(angle) * push
            )

        updated[index] = dragged
        return updated

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, state: ViewportState, address: Optional[str]) -> ViewportState:
        if state.is_dragging:
            return state
        return replace(state, selected=address)

    def deselect(self, state: ViewportState) -> ViewportState:
        return replace(state, selected=None)
