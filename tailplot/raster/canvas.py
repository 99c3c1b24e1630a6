from __future__ import annotations

import numpy as np

from tailplot.config import RGBA


# (x0, y0, x1, y1), exclusive on the far edges.
ClipBox = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def full_clip(dst: np.ndarray) -> ClipBox:
    return (0, 0, int(dst.shape[1]), int(dst.shape[0]))


def intersect_clip(a: ClipBox, b: ClipBox) -> ClipBox:
    x0 = max(a[0], b[0])
    y0 = max(a[1], b[1])
    x1 = max(x0, min(a[2], b[2]))
    y1 = max(y0, min(a[3], b[3]))
    return (x0, y0, x1, y1)


def fill_rect(dst: np.ndarray, x: int, y: int, width: int, height: int, color: RGBA, clip: ClipBox | None = None) -> None:
    cx0, cy0, cx1, cy1 = intersect_clip(clip or full_clip(dst), full_clip(dst))
    xa = max(cx0, x)
    ya = max(cy0, y)
    xb = min(cx1, x + width)
    yb = min(cy1, y + height)
    if xa >= xb or ya >= yb:
        return
    _blend_region(dst[ya:yb, xa:xb], color)


def blend_pixels(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, clip: ClipBox | None = None) -> None:
    """Blend ``color`` onto each distinct (x, y) pixel inside ``clip``."""
    if xs.size == 0:
        return
    cx0, cy0, cx1, cy1 = intersect_clip(clip or full_clip(dst), full_clip(dst))
    keep = (xs >= cx0) & (xs < cx1) & (ys >= cy0) & (ys < cy1)
    if not np.any(keep):
        return
    width = dst.shape[1]
    flat = np.unique(ys[keep].astype(np.int64) * width + xs[keep].astype(np.int64))
    py = flat // width
    px = flat % width
    a = color[3] / 255.0
    current = dst[py, px, :3].astype(np.float32)
    src = np.asarray(color[:3], dtype=np.float32)
    dst[py, px, :3] = (src * a + current * (1.0 - a)).astype(np.uint8)
    dst[py, px, 3] = 255


def _blend_region(region: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    src = np.asarray(color[:3], dtype=np.float32)
    region[:, :, :3] = (src * a + region[:, :, :3].astype(np.float32) * (1.0 - a)).astype(np.uint8)
    region[:, :, 3] = 255
