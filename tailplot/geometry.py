from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np


PLOT_RANGE_MAX = 1e300
PLOT_RANGE_MIN = 1e-300


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inflate(self, amount: float) -> Rect:
        return Rect(self.x - amount, self.y - amount, self.width + 2 * amount, self.height + 2 * amount)


@dataclass(frozen=True)
class Range:
    """Axis-aligned plot-space rectangle; begin > end on an axis means empty."""

    x_begin: float = 0.0
    x_end: float = 0.0
    y_begin: float = 0.0
    y_end: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.x_begin > self.x_end or self.y_begin > self.y_end

    @property
    def x_span(self) -> float:
        return self.x_end - self.x_begin

    @property
    def y_span(self) -> float:
        return self.y_end - self.y_begin

    def union(self, other: Range) -> Range:
        return Range(
            x_begin=min(self.x_begin, other.x_begin),
            x_end=max(self.x_end, other.x_end),
            y_begin=min(self.y_begin, other.y_begin),
            y_end=max(self.y_end, other.y_end),
        )

    def extended(self, xs: np.ndarray, ys: np.ndarray) -> Range:
        """Grow the box by the finite coordinates of paired samples."""
        if ys.size == 0:
            return self
        mask = np.isfinite(xs) & np.isfinite(ys)
        if not np.any(mask):
            return self
        vx = xs[mask]
        vy = ys[mask]
        return Range(
            x_begin=min(self.x_begin, float(np.min(vx))),
            x_end=max(self.x_end, float(np.max(vx))),
            y_begin=min(self.y_begin, float(np.min(vy))),
            y_end=max(self.y_end, float(np.max(vy))),
        )

    def extended_y(self, ys: np.ndarray) -> Range:
        finite = ys[np.isfinite(ys)]
        if finite.size == 0:
            return self
        return replace(
            self,
            y_begin=min(self.y_begin, float(np.min(finite))),
            y_end=max(self.y_end, float(np.max(finite))),
        )


EMPTY_RANGE = Range(PLOT_RANGE_MAX, -PLOT_RANGE_MAX, PLOT_RANGE_MAX, -PLOT_RANGE_MAX)


def union_all(ranges: list[Range]) -> Range:
    out = EMPTY_RANGE
    for item in ranges:
        out = out.union(item)
    return out


def linear_map(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


@dataclass(frozen=True)
class ScreenMapping:
    """Plot-space <-> screen-space mapping for one plot screen; screen y grows downwards."""

    plot_range: Range
    screen: Rect

    def x_to_screen(self, x: float) -> float:
        r = self.plot_range
        return linear_map(x, r.x_begin, r.x_end, self.screen.x, self.screen.right)

    def y_to_screen(self, y: float) -> float:
        r = self.plot_range
        return linear_map(y, r.y_begin, r.y_end, self.screen.bottom, self.screen.y)

    def x_to_plot(self, px: float) -> float:
        r = self.plot_range
        return linear_map(px, self.screen.x, self.screen.right, r.x_begin, r.x_end)

    def y_to_plot(self, py: float) -> float:
        r = self.plot_range
        return linear_map(py, self.screen.y, self.screen.bottom, r.y_end, r.y_begin)

    def xs_to_screen(self, xs: np.ndarray) -> np.ndarray:
        r = self.plot_range
        scale = self.screen.width / (r.x_end - r.x_begin)
        return (xs - r.x_begin) * scale + self.screen.x

    def ys_to_screen(self, ys: np.ndarray) -> np.ndarray:
        r = self.plot_range
        scale = self.screen.height / (r.y_end - r.y_begin)
        return self.screen.bottom - (ys - r.y_begin) * scale
