from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from tailplot.config import RGBA
from tailplot.geometry import Point, Rect
from tailplot.viewport import IDLE_POINTER, PointerInput


class Renderer(ABC):
    """Drawing collaborator driven by the render thread with screen-space coordinates."""

    @abstractmethod
    def open(self, width: int, height: int, title: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def begin_frame(self) -> tuple[int, int]:
        """Start a frame and return the current surface size in pixels."""
        raise NotImplementedError

    @abstractmethod
    def end_frame(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def measure_text(self, text: str, font_size: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def fill_rect(self, rect: Rect, color: RGBA) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_line(self, start: Point, end: Point, color: RGBA, width: float = 1.0) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_text(self, text: str, position: Point, font_size: float, color: RGBA) -> None:
        raise NotImplementedError

    @abstractmethod
    def begin_clip(self, rect: Rect) -> None:
        raise NotImplementedError

    @abstractmethod
    def end_clip(self) -> None:
        raise NotImplementedError

    def draw_rect_outline(self, rect: Rect, width: float, color: RGBA) -> None:
        self.fill_rect(Rect(rect.x, rect.y, rect.width, width), color)
        self.fill_rect(Rect(rect.x, rect.bottom - width, rect.width, width), color)
        self.fill_rect(Rect(rect.x, rect.y + width, width, rect.height - 2 * width), color)
        self.fill_rect(Rect(rect.right - width, rect.y + width, width, rect.height - 2 * width), color)

    def draw_polyline(self, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
        for i in range(xs.size - 1):
            start = Point(float(xs[i]), float(ys[i]))
            end = Point(float(xs[i + 1]), float(ys[i + 1]))
            if np.isfinite([start.x, start.y, end.x, end.y]).all():
                self.draw_line(start, end, color)

    def poll_pointer(self) -> PointerInput:
        """Optional hook for targets that deliver pointer input."""
        return IDLE_POINTER

    def should_close(self) -> bool:
        """Optional hook for targets that expose window-close state."""
        return False
