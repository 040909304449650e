"""
Geometry helpers for OCR quadrilaterals.

OCR engines return each word as four corner points (TL, TR, BR, BL) in
page coordinates with the origin at the top-left. Quads may be slightly
rotated, so extents are always taken as max-min spans across the
relevant corners.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Quad:
    """Four-corner polygon describing a word or line on the page."""
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_flat(cls, values: Optional[Sequence]) -> Optional['Quad']:
        """
        Build a quad from ``[x1, y1, x2, y2, x3, y3, x4, y4]``.

        Returns None (unknown geometry) when fewer than eight values are
        present or any of them is not a finite number.
        """
        if values is None or isinstance(values, (str, bytes)):
            return None
        try:
            coords = [float(v) for v in list(values)[:8]]
        except (TypeError, ValueError):
            return None
        if len(coords) < 8 or not all(math.isfinite(c) for c in coords):
            return None
        return cls(
            Point(coords[0], coords[1]),
            Point(coords[2], coords[3]),
            Point(coords[4], coords[5]),
            Point(coords[6], coords[7]),
        )

    @classmethod
    def from_rect(cls, left: float, top: float, right: float, bottom: float) -> 'Quad':
        """Axis-aligned quad from edge coordinates."""
        return cls(
            Point(left, top),
            Point(right, top),
            Point(right, bottom),
            Point(left, bottom),
        )

    def to_flat(self) -> Tuple[float, ...]:
        return (
            self.top_left.x, self.top_left.y,
            self.top_right.x, self.top_right.y,
            self.bottom_right.x, self.bottom_right.y,
            self.bottom_left.x, self.bottom_left.y,
        )


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned extent derived from a quad."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2


# ============================================================================
# Functions
# ============================================================================

def bounds(quad: Optional[Quad]) -> Optional[Bounds]:
    """
    Compute the extent of a quad.

    Left/right come from the two left/right corners, top/bottom from the
    two top/bottom corners. Returns None for unknown geometry.
    """
    if quad is None:
        return None
    return Bounds(
        left=min(quad.top_left.x, quad.bottom_left.x),
        top=min(quad.top_left.y, quad.top_right.y),
        right=max(quad.top_right.x, quad.bottom_right.x),
        bottom=max(quad.bottom_left.y, quad.bottom_right.y),
    )


def safe_height(a: Bounds, b: Bounds, default: float = 12.0) -> float:
    """Average height of two boxes, or ``default`` for degenerate boxes."""
    average = (a.height + b.height) / 2
    return average if average > 0 else default


def union_bounds(boxes: Iterable[Optional[Bounds]]) -> Optional[Bounds]:
    """Smallest box enclosing every known box, or None if there are none."""
    known = [b for b in boxes if b is not None]
    if not known:
        return None
    return Bounds(
        left=min(b.left for b in known),
        top=min(b.top for b in known),
        right=max(b.right for b in known),
        bottom=max(b.bottom for b in known),
    )
