from __future__ import annotations

from pathlib import Path
import threading
from typing import Callable

import numpy as np
from PIL import Image

from tailplot.config import RGBA
from tailplot.geometry import Point, Rect
from tailplot.raster import draw_line, draw_polyline, draw_text, fill_rect, new_canvas, text_size
from tailplot.raster.canvas import ClipBox
from tailplot.targets.base import Renderer
from tailplot.viewport import IDLE_POINTER, PointerInput


class RasterRenderer(Renderer):
    """Headless software renderer drawing into an RGBA numpy canvas.

    Completed frames are published as copies; ``snapshot()`` and ``save_png()``
    may be called from any thread.
    """

    def __init__(self, on_frame: Callable[[np.ndarray], None] | None = None) -> None:
        self._on_frame = on_frame
        self._canvas: np.ndarray | None = None
        self._clip: ClipBox | None = None
        self._size = (0, 0)
        self._lock = threading.Lock()
        self._last_frame: np.ndarray | None = None
        self._pointer = IDLE_POINTER
        self._close_requested = False
        self.frames_presented = 0
        self.is_open = False
        self.title = ""

    def open(self, width: int, height: int, title: str) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self._size = (width, height)
        self.title = title
        self.is_open = True
        with self._lock:
            self._close_requested = False

    def close(self) -> None:
        self.is_open = False
        self._canvas = None

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self._size = (width, height)

    def begin_frame(self) -> tuple[int, int]:
        if not self.is_open:
            raise RuntimeError("raster renderer is not open")
        width, height = self._size
        self._canvas = new_canvas(width, height, color=(0, 0, 0, 255))
        self._clip = None
        return (width, height)

    def end_frame(self) -> None:
        canvas = self._require_canvas()
        frame = canvas.copy()
        with self._lock:
            self._last_frame = frame
        self.frames_presented += 1
        if self._on_frame is not None:
            self._on_frame(frame)

    def measure_text(self, text: str, font_size: float) -> float:
        return float(text_size(text, font_size_px=font_size)[0])

    def fill_rect(self, rect: Rect, color: RGBA) -> None:
        x = int(round(rect.x))
        y = int(round(rect.y))
        fill_rect(
            self._require_canvas(),
            x,
            y,
            int(round(rect.right)) - x,
            int(round(rect.bottom)) - y,
            color,
            clip=self._clip,
        )

    def draw_line(self, start: Point, end: Point, color: RGBA, width: float = 1.0) -> None:
        draw_line(self._require_canvas(), start.x, start.y, end.x, end.y, color, width=width, clip=self._clip)

    def draw_polyline(self, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
        draw_polyline(self._require_canvas(), xs, ys, color, clip=self._clip)

    def draw_text(self, text: str, position: Point, font_size: float, color: RGBA) -> None:
        draw_text(
            self._require_canvas(),
            int(round(position.x)),
            int(round(position.y)),
            text,
            color,
            font_size_px=font_size,
            clip=self._clip,
        )

    def begin_clip(self, rect: Rect) -> None:
        x0 = int(np.floor(rect.x))
        y0 = int(np.floor(rect.y))
        self._clip = (x0, y0, max(x0, int(np.ceil(rect.right))), max(y0, int(np.ceil(rect.bottom))))

    def end_clip(self) -> None:
        self._clip = None

    def feed_pointer(self, pointer: PointerInput) -> None:
        """Queue pointer state for the next frame."""
        with self._lock:
            self._pointer = pointer

    def poll_pointer(self) -> PointerInput:
        with self._lock:
            pointer = self._pointer
            self._pointer = IDLE_POINTER
        return pointer

    def request_close(self) -> None:
        with self._lock:
            self._close_requested = True

    def should_close(self) -> bool:
        with self._lock:
            return self._close_requested

    def snapshot(self) -> np.ndarray | None:
        with self._lock:
            return None if self._last_frame is None else self._last_frame.copy()

    def save_png(self, path: str | Path) -> Path:
        frame = self.snapshot()
        if frame is None:
            raise RuntimeError("no frame has been rendered yet")
        out = Path(path)
        Image.fromarray(frame).save(out)
        return out

    def _require_canvas(self) -> np.ndarray:
        if self._canvas is None:
            raise RuntimeError("draw call outside begin_frame/end_frame")
        return self._canvas
