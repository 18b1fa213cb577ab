"""Geometry and view-state models for the stakers bubble map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Bubble:
    """One circle on the map. ``owner`` points back to the source record."""

    owner: Any = field(compare=False, repr=False)
    x: float
    y: float
    radius: float
    weight: float = 1

    def to_dict(self) -> Dict[str, Any]:
        address = getattr(self.owner, "address", None)
        return {
            "address": address,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "radius": round(self.radius, 2),
            "weight": self.weight,
        }


@dataclass
class PackResult:
    """Output of one packing run."""

    bubbles: List[Bubble]
    canvas: Size
    padding: float = 0.0
    min_radius: float = 0.0
    max_radius: float = 0.0
    overlapping: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bubbles": [bubble.to_dict() for bubble in self.bubbles],
            "canvas": {"width": self.canvas.width, "height": self.canvas.height},
            "padding": self.padding,
            "radius": {"min": self.min_radius, "max": self.max_radius},
            "overlapping": self.overlapping,
        }


@dataclass(frozen=True)
class DragState:
    """Pointer drag in progress: either the whole map or a single bubble."""

    kind: str
    start_x: float
    start_y: float
    index: Optional[int] = None
    origin_x: float = 0.0
    origin_y: float = 0.0


@dataclass(frozen=True)
class ViewportState:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    selected: Optional[str] = None
    drag: Optional[DragState] = None

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zoom": self.zoom,
            "pan": {"x": self.pan_x, "y": self.pan_y},
            "selected": self.selected,
        }
