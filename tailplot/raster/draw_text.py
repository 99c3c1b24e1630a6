from __future__ import annotations

from collections import OrderedDict
from functools import lru_cache
from pathlib import Path
import threading
from typing import Iterable, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from tailplot.config import RGBA
from tailplot.raster.canvas import ClipBox, full_clip, intersect_clip


FontFace = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

DEFAULT_FONT_FAMILY = "DejaVu Sans Mono"
# Tried in order after the requested family.
FONT_FALLBACKS = ("DejaVu Sans Mono", "Menlo", "Consolas", "Liberation Mono", "Courier New")
FONT_DIRS = (
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("C:/Windows/Fonts"),
)
MASK_CACHE_SIZE = 512


class FontBook:
    """One font family resolved once, with sized faces and rendered label masks cached.

    Tick labels repeat from frame to frame, so masks are kept in a small LRU.
    Falls back to Pillow's built-in face when no font file matches.
    """

    def __init__(self, family: str = DEFAULT_FONT_FAMILY, search_dirs: Iterable[Path] = FONT_DIRS) -> None:
        self.family = family
        self.path = find_font_file(family, tuple(search_dirs))
        self._faces: dict[int, FontFace] = {}
        self._masks: OrderedDict[tuple[str, int], np.ndarray] = OrderedDict()
        self._lock = threading.Lock()

    def face(self, font_size_px: float) -> FontFace:
        size = max(1, int(round(font_size_px)))
        with self._lock:
            face = self._faces.get(size)
            if face is None:
                face = self._open_face(size)
                self._faces[size] = face
            return face

    def measure(self, text: str, font_size_px: float) -> tuple[int, int]:
        if not text:
            return (0, max(1, int(round(font_size_px))))
        left, top, right, bottom = self.face(font_size_px).getbbox(text)
        return (max(0, int(right - left)), max(1, int(bottom - top)))

    def mask(self, text: str, font_size_px: float) -> np.ndarray:
        key = (text, max(1, int(round(font_size_px))))
        with self._lock:
            cached = self._masks.get(key)
            if cached is not None:
                self._masks.move_to_end(key)
                return cached
        rendered = _rasterize(text, self.face(font_size_px))
        with self._lock:
            self._masks[key] = rendered
            while len(self._masks) > MASK_CACHE_SIZE:
                self._masks.popitem(last=False)
        return rendered

    def _open_face(self, size: int) -> FontFace:
        if self.path is not None:
            try:
                return ImageFont.truetype(str(self.path), size=size)
            except OSError:
                pass
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=8)
def font_book(family: str = DEFAULT_FONT_FAMILY) -> FontBook:
    return FontBook(family)


def find_font_file(family: str, search_dirs: tuple[Path, ...] = FONT_DIRS) -> Path | None:
    files = [
        path
        for base in search_dirs
        if base.is_dir()
        for path in base.rglob("*")
        if path.suffix.lower() in (".ttf", ".otf")
    ]
    for name in (family, *FONT_FALLBACKS):
        key = _squash(name)
        if not key:
            continue
        for path in files:
            if key in _squash(path.stem):
                return path
    return None


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_size_px: float,
    font_family: str = DEFAULT_FONT_FAMILY,
    clip: ClipBox | None = None,
) -> None:
    """Blend ``text`` with its ink box's top-left corner at (x, y)."""
    if not text:
        return
    coverage = font_book(font_family).mask(text, font_size_px)
    box = intersect_clip(clip or full_clip(dst), full_clip(dst))
    _blend_coverage(dst, x, y, coverage, color, box)


def text_size(text: str, *, font_size_px: float, font_family: str = DEFAULT_FONT_FAMILY) -> tuple[int, int]:
    return font_book(font_family).measure(text, font_size_px)


def _squash(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def _rasterize(text: str, face: FontFace) -> np.ndarray:
    left, top, right, bottom = face.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=face)
    return np.asarray(image, dtype=np.uint8)


def _blend_coverage(dst: np.ndarray, x: int, y: int, coverage: np.ndarray, color: RGBA, box: ClipBox) -> None:
    rows, cols = coverage.shape
    left, right = max(box[0], x), min(box[2], x + cols)
    top, bottom = max(box[1], y), min(box[3], y + rows)
    if right <= left or bottom <= top:
        return

    weight = coverage[top - y : bottom - y, left - x : right - x].astype(np.float32) * (color[3] / (255.0 * 255.0))
    if not weight.any():
        return
    weight = weight[:, :, None]
    region = dst[top:bottom, left:right]
    ink = np.asarray(color[:3], dtype=np.float32)
    region[:, :, :3] = np.clip(ink * weight + region[:, :, :3] * (1.0 - weight), 0, 255).astype(np.uint8)
    region[:, :, 3] = 255
