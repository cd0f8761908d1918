"""Axis-aligned bounding boxes and the small amount of geometry built on them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class BBox:
    """Box in pixels; mutable because the enhancer widens fraction bars in place."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return max(0.0, self.right - self.left)

    @property
    def height(self) -> float:
        return max(0.0, self.bottom - self.top)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    @property
    def mid_y(self) -> float:
        return (self.top + self.bottom) / 2

    def contains(self, x: float, y: float, *, tolerance_y: float = 0.0) -> bool:
        """Inclusive containment, optionally forgiving vertically."""

        return (
            self.left <= x <= self.right
            and self.top - tolerance_y <= y <= self.bottom + tolerance_y
        )

    def relative_to(self, origin: "BBox") -> "BBox":
        return BBox(
            self.left - origin.left,
            self.top - origin.top,
            self.right - origin.left,
            self.bottom - origin.top,
        )

    def copy(self) -> "BBox":
        return BBox(self.left, self.top, self.right, self.bottom)

    def to_dict(self) -> dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def horizontal_overlap(a: BBox, b: BBox) -> float:
    return min(a.right, b.right) - max(a.left, b.left)


def vertical_overlap(a: BBox, b: BBox) -> float:
    return min(a.bottom, b.bottom) - max(a.top, b.top)


def interpolate(box: BBox, index: int, count: int) -> BBox:
    """Slice ``box`` into ``count`` equal-width columns and return column ``index``."""

    if count <= 0:
        return box.copy()
    step = (box.right - box.left) / count
    left = box.left + step * index
    return BBox(left, box.top, left + step, box.bottom)
