from __future__ import annotations

import math

import numpy as np

from tailplot.config import RGBA
from tailplot.raster.canvas import ClipBox, blend_pixels, full_clip, intersect_clip


def draw_line(
    dst: np.ndarray,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    color: RGBA,
    width: float = 1.0,
    clip: ClipBox | None = None,
) -> None:
    box = intersect_clip(clip or full_clip(dst), full_clip(dst))
    clipped = clip_segment(x0, y0, x1, y1, box)
    if clipped is None:
        return
    xs, ys = _segment_pixels(*clipped)
    if width > 1.0:
        xs, ys = _thicken(xs, ys, int(round(width)))
    blend_pixels(dst, xs, ys, color, clip=box)


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: float = 1.0,
    clip: ClipBox | None = None,
) -> None:
    """Draw consecutive segments; non-finite vertices break the line."""
    if xs.size < 2:
        return
    box = intersect_clip(clip or full_clip(dst), full_clip(dst))
    px: list[np.ndarray] = []
    py: list[np.ndarray] = []
    for i in range(xs.size - 1):
        clipped = clip_segment(float(xs[i]), float(ys[i]), float(xs[i + 1]), float(ys[i + 1]), box)
        if clipped is None:
            continue
        sx, sy = _segment_pixels(*clipped)
        px.append(sx)
        py.append(sy)
    if not px:
        return
    all_x = np.concatenate(px)
    all_y = np.concatenate(py)
    if width > 1.0:
        all_x, all_y = _thicken(all_x, all_y, int(round(width)))
    blend_pixels(dst, all_x, all_y, color, clip=box)


def clip_segment(
    x0: float, y0: float, x1: float, y1: float, box: ClipBox
) -> tuple[float, float, float, float] | None:
    """Liang-Barsky clip of a segment against ``box``; None when nothing is visible."""
    if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
        return None
    xmin, ymin = float(box[0]), float(box[1])
    xmax, ymax = float(box[2]) - 1.0, float(box[3]) - 1.0
    if xmax < xmin or ymax < ymin:
        return None
    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - xmin), (dx, xmax - x0), (-dy, y0 - ymin), (dy, ymax - y0)):
        if p == 0.0:
            if q < 0.0:
                return None
            continue
        t = q / p
        if p < 0.0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (x0 + t0 * dx, y0 + t0 * dy, x0 + t1 * dx, y0 + t1 * dy)


def _segment_pixels(x0: float, y0: float, x1: float, y1: float) -> tuple[np.ndarray, np.ndarray]:
    steps = int(max(abs(x1 - x0), abs(y1 - y0))) + 1
    xs = np.rint(np.linspace(x0, x1, steps + 1)).astype(np.int64)
    ys = np.rint(np.linspace(y0, y1, steps + 1)).astype(np.int64)
    return xs, ys


def _thicken(xs: np.ndarray, ys: np.ndarray, width: int) -> tuple[np.ndarray, np.ndarray]:
    radius = max(0, width // 2)
    offsets = np.arange(-radius, radius + 1, dtype=np.int64)
    ox, oy = np.meshgrid(offsets, offsets)
    return (xs[:, None] + ox.ravel()[None, :]).ravel(), (ys[:, None] + oy.ravel()[None, :]).ravel()
