from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from tailplot.config import RGBA, PlotConfig
from tailplot.geometry import EMPTY_RANGE, Range, Rect
from tailplot.samples import SampleBuffer
from tailplot.updates import VisualizationMode


@dataclass
class Series:
    slot: int
    color: RGBA = (255, 255, 255, 255)
    name: str | None = None
    initialized: bool = False
    bbox: Range = EMPTY_RANGE
    x: SampleBuffer = field(default_factory=SampleBuffer)
    y: SampleBuffer = field(default_factory=SampleBuffer)

    def __len__(self) -> int:
        return len(self.y)

    @property
    def label(self) -> str:
        if self.name is None:
            return f"[{self.slot}]"
        return f"[{self.slot}] {self.name}"

    @property
    def has_x(self) -> bool:
        return len(self.x) > 0 and len(self.x) == len(self.y)

    @property
    def is_empty(self) -> bool:
        return len(self.y) == 0

    def xs(self) -> np.ndarray:
        """Explicit x values, or the implied sample index in index mode."""
        if self.has_x:
            return self.x.view()
        return np.arange(len(self.y), dtype=np.float64)

    def bounding_box(self, begin: int = 0) -> Range:
        """Box over samples[begin:], scanning only that slice."""
        size = len(self.y)
        begin = max(0, begin)
        if begin >= size:
            return EMPTY_RANGE
        ys = self.y.view()[begin:]
        if self.has_x:
            return EMPTY_RANGE.extended(self.x.view()[begin:], ys)
        box = EMPTY_RANGE.extended_y(ys)
        if box.is_empty:
            return box
        return Range(x_begin=float(begin), x_end=float(size - 1), y_begin=box.y_begin, y_end=box.y_end)


@dataclass
class Group:
    slot: int
    members: list[int] = field(default_factory=list)
    name: str | None = None
    initialized: bool = False

    @property
    def label(self) -> str:
        if self.name is None:
            return f"[{self.slot}] Plot Group"
        return f"[{self.slot}] {self.name}"


class PlotStore:
    """Committed plot state; read and written by the render thread only."""

    def __init__(self, config: PlotConfig | None = None) -> None:
        self.config = config or PlotConfig()
        self.series = [Series(slot=i) for i in range(self.config.max_series)]
        # One extra trailing slot is the reserved default group.
        self.groups = [Group(slot=i) for i in range(self.config.max_groups + 1)]
        self.visible_group = self.config.default_group
        self.mode = VisualizationMode.full_group_extent()
        self.window_visible = False
        self.plot_range = Range(-0.5, 0.5, -0.5, 0.5)
        self.plot_screen = Rect(0.0, 0.0, float(self.config.window_width), float(self.config.window_height))

    @property
    def default_group(self) -> int:
        return self.config.default_group

    def visible_members(self) -> list[Series]:
        return [self.series[i] for i in self.groups[self.visible_group].members]
