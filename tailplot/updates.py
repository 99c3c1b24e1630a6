from __future__ import annotations

from dataclasses import dataclass, field, replace
import threading
from typing import Any, Literal

import numpy as np

from tailplot.adapters import coerce_points, coerce_samples, coerce_scalar, split_interleaved
from tailplot.config import RGBA, PlotConfig
from tailplot.errors import ArityConflictError, InvalidIdentityError, PlotInputError
from tailplot.samples import SampleBuffer


ModeKind = Literal["interactive", "tail_count", "tail_span", "full_group_extent", "single_series"]
SampleKind = Literal["numbers", "points"]


@dataclass(frozen=True)
class VisualizationMode:
    kind: ModeKind
    n_points: int = 0
    x_span: float = 0.0
    series_id: int | None = None

    @classmethod
    def interactive(cls) -> VisualizationMode:
        return cls(kind="interactive")

    @classmethod
    def tail_count(cls, n_points: int) -> VisualizationMode:
        return cls(kind="tail_count", n_points=n_points)

    @classmethod
    def tail_span(cls, x_span: float) -> VisualizationMode:
        return cls(kind="tail_span", x_span=x_span)

    @classmethod
    def full_group_extent(cls) -> VisualizationMode:
        return cls(kind="full_group_extent")

    @classmethod
    def single_series(cls, series_id: int) -> VisualizationMode:
        return cls(kind="single_series", series_id=series_id)


@dataclass
class SeriesUpdate:
    new_x: SampleBuffer = field(default_factory=SampleBuffer)
    new_y: SampleBuffer = field(default_factory=SampleBuffer)
    color: RGBA | None = None
    name: str | None = None
    cleared: bool = False
    empty: bool = True
    # Mirrors the committed representation; survives reset() until the series is cleared.
    kind: SampleKind | None = None

    def accepts(self, kind: SampleKind) -> bool:
        return self.kind is None or self.kind == kind

    def clear_series(self) -> None:
        self.new_x.clear()
        self.new_y.clear()
        self.kind = None
        self.cleared = True
        self.empty = False

    def reset(self) -> None:
        self.new_x.clear(release=True)
        self.new_y.clear(release=True)
        self.color = None
        self.name = None
        self.cleared = False
        self.empty = True


@dataclass
class GroupUpdate:
    add: list[int] = field(default_factory=list)
    remove: list[int] = field(default_factory=list)
    name: str | None = None
    cleared: bool = False
    empty: bool = True

    def clear_group(self) -> None:
        self.add.clear()
        self.remove.clear()
        self.cleared = True
        self.empty = False

    def reset(self) -> None:
        self.add.clear()
        self.remove.clear()
        self.name = None
        self.cleared = False
        self.empty = True


class UpdateBuffer:
    """Staging area for producer deltas, drained once per frame by the render thread.

    Every public mutator validates its arguments and converts its payload before
    taking the lock, so lock hold time is bounded by the caller's own payload.
    Rejected calls raise a ``PlotApiError`` and leave the buffer untouched.
    """

    def __init__(self, config: PlotConfig | None = None) -> None:
        self.config = config or PlotConfig()
        self.lock = threading.Lock()
        self.series = [SeriesUpdate() for _ in range(self.config.max_series)]
        self.groups = [GroupUpdate() for _ in range(self.config.max_groups + 1)]
        self.visible_group = self.config.default_group
        self.mode = VisualizationMode.full_group_extent()
        self.window_visible = False
        self.dirty_series: set[int] = set()
        self.dirty_groups: set[int] = set()

    # -- identity -----------------------------------------------------------------

    def check_series(self, series_id: int) -> int:
        idx = _as_index(series_id, "series")
        if idx < 0 or idx >= self.config.max_series:
            raise InvalidIdentityError(
                f"series index {series_id!r} is not within the valid fixed range of [0, {self.config.max_series - 1}]"
            )
        return idx

    def check_group(self, group_id: int) -> int:
        idx = _as_index(group_id, "group")
        if idx < 0 or idx >= self.config.max_groups:
            raise InvalidIdentityError(
                f"group index {group_id!r} is not within the valid fixed range of [0, {self.config.max_groups - 1}]"
            )
        return idx

    # -- series data ----------------------------------------------------------------

    def replace_numbers(self, series_id: int, y: Any) -> None:
        idx = self.check_series(series_id)
        ys = coerce_samples(y, label="y")
        with self.lock:
            update = self._series_update(idx)
            update.clear_series()
            update.new_y.extend(ys)
            update.kind = "numbers"

    def replace_points(self, series_id: int, x: Any, y: Any) -> None:
        idx = self.check_series(series_id)
        xs, ys = coerce_points(x, y)
        self._replace_points(idx, xs, ys)

    def replace_points_interleaved(self, series_id: int, xy: Any) -> None:
        idx = self.check_series(series_id)
        xs, ys = split_interleaved(xy)
        self._replace_points(idx, xs, ys)

    def append_number(self, series_id: int, value: float) -> None:
        idx = self.check_series(series_id)
        v = coerce_scalar(value, label="value")
        with self.lock:
            update = self.series[idx]
            if not update.accepts("numbers"):
                raise ArityConflictError(
                    f"series {idx} holds points and cannot be appended with the number {v!r}"
                )
            update = self._series_update(idx)
            update.new_y.append(v)
            update.kind = "numbers"

    def append_numbers(self, series_id: int, y: Any) -> None:
        idx = self.check_series(series_id)
        ys = coerce_samples(y, label="y")
        with self.lock:
            update = self.series[idx]
            if not update.accepts("numbers"):
                raise ArityConflictError(f"series {idx} holds points and cannot be appended with numbers")
            update = self._series_update(idx)
            update.new_y.extend(ys)
            update.kind = "numbers"

    def append_point(self, series_id: int, x: float, y: float) -> None:
        idx = self.check_series(series_id)
        xs = np.asarray([coerce_scalar(x, label="x")], dtype=np.float64)
        ys = np.asarray([coerce_scalar(y, label="y")], dtype=np.float64)
        self._append_points(idx, xs, ys)

    def append_points(self, series_id: int, x: Any, y: Any) -> None:
        idx = self.check_series(series_id)
        xs, ys = coerce_points(x, y)
        self._append_points(idx, xs, ys)

    def append_points_interleaved(self, series_id: int, xy: Any) -> None:
        idx = self.check_series(series_id)
        xs, ys = split_interleaved(xy)
        self._append_points(idx, xs, ys)

    def clear_series(self, series_id: int) -> None:
        idx = self.check_series(series_id)
        with self.lock:
            self._series_update(idx).clear_series()

    def set_series_color(self, series_id: int, color: RGBA) -> None:
        idx = self.check_series(series_id)
        rgba = _as_rgba(color)
        with self.lock:
            self._series_update(idx).color = rgba

    def set_series_name(self, series_id: int, name: str) -> None:
        idx = self.check_series(series_id)
        text = _as_name(name)
        with self.lock:
            self._series_update(idx).name = text

    # -- default-group convenience ------------------------------------------------

    def show_series(self, series_id: int) -> None:
        idx = self.check_series(series_id)
        default = self.config.default_group
        with self.lock:
            update = self._group_update(default)
            if self.visible_group != default:
                update.clear_group()
            update.add.append(idx)
            self.visible_group = default
            self.window_visible = True

    def hide_series(self, series_id: int) -> None:
        idx = self.check_series(series_id)
        with self.lock:
            self._group_update(self.config.default_group).remove.append(idx)

    def hide_all_series(self) -> None:
        with self.lock:
            self._group_update(self.config.default_group).clear_group()

    # -- groups ---------------------------------------------------------------------

    def add_member(self, group_id: int, series_id: int) -> None:
        gidx = self.check_group(group_id)
        sidx = self.check_series(series_id)
        with self.lock:
            self._group_update(gidx).add.append(sidx)

    def remove_member(self, group_id: int, series_id: int) -> None:
        gidx = self.check_group(group_id)
        sidx = self.check_series(series_id)
        with self.lock:
            self._group_update(gidx).remove.append(sidx)

    def clear_group(self, group_id: int) -> None:
        gidx = self.check_group(group_id)
        with self.lock:
            self._group_update(gidx).clear_group()

    def set_group_name(self, group_id: int, name: str) -> None:
        gidx = self.check_group(group_id)
        text = _as_name(name)
        with self.lock:
            self._group_update(gidx).name = text

    def show_group(self, group_id: int) -> None:
        gidx = self.check_group(group_id)
        with self.lock:
            self.visible_group = gidx
            self.window_visible = True

    # -- session-wide ---------------------------------------------------------------

    def set_mode(self, mode: VisualizationMode) -> None:
        if mode.kind == "single_series":
            mode = replace(mode, series_id=self.check_series(mode.series_id))
        elif mode.kind == "tail_count":
            n = mode.n_points
            if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 0:
                raise PlotInputError(f"tail point count must be an integer >= 0, got {n!r}")
            mode = replace(mode, n_points=int(n))
        elif mode.kind == "tail_span":
            span = coerce_scalar(mode.x_span, label="x span")
            if not np.isfinite(span):
                raise PlotInputError(f"tail x span must be finite, got {span!r}")
            mode = replace(mode, x_span=span)
        with self.lock:
            self.mode = mode

    def set_window_visible(self, visible: bool) -> None:
        with self.lock:
            self.window_visible = bool(visible)

    def clear_all(self) -> None:
        with self.lock:
            for idx in range(len(self.series)):
                self._series_update(idx).clear_series()
            for gidx in range(len(self.groups)):
                self._group_update(gidx).clear_group()

    # -- drain side (caller holds ``lock``) -------------------------------------------

    def reset(self) -> None:
        for idx in self.dirty_series:
            self.series[idx].reset()
        for gidx in self.dirty_groups:
            self.groups[gidx].reset()
        self.dirty_series.clear()
        self.dirty_groups.clear()

    def _series_update(self, idx: int) -> SeriesUpdate:
        update = self.series[idx]
        update.empty = False
        self.dirty_series.add(idx)
        return update

    def _group_update(self, gidx: int) -> GroupUpdate:
        update = self.groups[gidx]
        update.empty = False
        self.dirty_groups.add(gidx)
        return update

    def _replace_points(self, idx: int, xs: np.ndarray, ys: np.ndarray) -> None:
        with self.lock:
            update = self._series_update(idx)
            update.clear_series()
            update.new_x.extend(xs)
            update.new_y.extend(ys)
            update.kind = "points"

    def _append_points(self, idx: int, xs: np.ndarray, ys: np.ndarray) -> None:
        with self.lock:
            update = self.series[idx]
            if not update.accepts("points"):
                raise ArityConflictError(f"series {idx} holds numbers and cannot be appended with points")
            update = self._series_update(idx)
            update.new_x.extend(xs)
            update.new_y.extend(ys)
            update.kind = "points"


def _as_index(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidIdentityError(f"{label} index must be an integer, got {value!r}")
    return int(value)


def _as_name(name: Any) -> str:
    if not isinstance(name, str):
        raise PlotInputError(f"name must be a string, got {type(name)!r}")
    return name


def _as_rgba(color: Any) -> RGBA:
    if not isinstance(color, (tuple, list)) or len(color) != 4:
        raise PlotInputError(f"color must be an (r, g, b, a) tuple, got {color!r}")
    channels = []
    for c in color:
        if isinstance(c, bool) or not isinstance(c, (int, np.integer)) or c < 0 or c > 255:
            raise PlotInputError(f"color channels must be integers in [0, 255], got {color!r}")
        channels.append(int(c))
    return (channels[0], channels[1], channels[2], channels[3])
