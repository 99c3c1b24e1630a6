from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math

from tailplot.config import PlotConfig
from tailplot.geometry import PLOT_RANGE_MAX, PLOT_RANGE_MIN, Point, Range, Rect, ScreenMapping, union_all
from tailplot.store import PlotStore


LOGGER = logging.getLogger(__name__)

DEFAULT_SPAN = (-0.5, 0.5)
PRECISION_SAFETY_FACTOR = 100.0


@dataclass(frozen=True)
class PointerInput:
    """Pointer state sampled once per frame, in screen-space pixels."""

    position: Point = Point()
    drag_delta: Point = Point()
    dragging: bool = False
    wheel: float = 0.0
    lock_x_zoom: bool = False
    lock_y_zoom: bool = False


IDLE_POINTER = PointerInput()


class ViewportController:
    """Derives the visible plot-space range for the active visualization mode."""

    def __init__(self, config: PlotConfig | None = None) -> None:
        self._config = config or PlotConfig()

    def update(self, store: PlotStore, pointer: PointerInput = IDLE_POINTER) -> Range:
        raw = self.derive(store, pointer)
        repaired = normalize_range(raw)
        store.plot_range = repaired
        return repaired

    def derive(self, store: PlotStore, pointer: PointerInput = IDLE_POINTER) -> Range:
        mode = store.mode
        if mode.kind == "interactive":
            return self.interact(store.plot_range, store.plot_screen, pointer)

        members = store.visible_members()
        if mode.kind == "full_group_extent":
            return union_all([s.bbox for s in members])
        if mode.kind == "tail_span":
            box = union_all([s.bbox for s in members])
            if box.x_begin > box.x_end:
                return box
            return replace(box, x_begin=box.x_end - mode.x_span)
        if mode.kind == "tail_count":
            n = mode.n_points
            return union_all([s.bounding_box(len(s) - n) if n < len(s) else s.bounding_box(0) for s in members])
        if mode.kind == "single_series":
            if mode.series_id is None:
                raise ValueError("single_series mode requires a series id")
            return store.series[mode.series_id].bounding_box(0)
        raise ValueError(f"unknown visualization mode: {mode.kind!r}")

    def interact(self, previous: Range, screen: Rect, pointer: PointerInput) -> Range:
        """Apply one frame of wheel zoom and drag pan to ``previous``."""
        cfg = self._config
        previous = normalize_range(previous)
        mapping = ScreenMapping(plot_range=previous, screen=screen)

        pan_x = 0.0
        pan_y = 0.0
        if pointer.dragging:
            pan_x = mapping.x_to_plot(0.0) - mapping.x_to_plot(pointer.drag_delta.x)
            pan_y = mapping.y_to_plot(0.0) - mapping.y_to_plot(pointer.drag_delta.y)

        factor = wheel_zoom_factor(cfg.wheel_zoom_base, pointer.wheel * cfg.wheel_zoom_scale)
        zoom_x = 1.0 if pointer.lock_x_zoom else factor
        zoom_y = 1.0 if pointer.lock_y_zoom else factor

        pivot_x = mapping.x_to_plot(pointer.position.x)
        pivot_y = mapping.y_to_plot(pointer.position.y)
        # Prefer zooming about the x=0 / y=0 axes when the cursor is close to them.
        if abs(mapping.x_to_screen(0.0) - pointer.position.x) < cfg.zoom_to_zero_pixel_threshold:
            pivot_x = 0.0
        if abs(mapping.y_to_screen(0.0) - pointer.position.y) < cfg.zoom_to_zero_pixel_threshold:
            pivot_y = 0.0

        return Range(
            x_begin=zoom_x * (previous.x_begin - pivot_x) + pivot_x + pan_x,
            x_end=zoom_x * (previous.x_end - pivot_x) + pivot_x + pan_x,
            y_begin=zoom_y * (previous.y_begin - pivot_y) + pivot_y + pan_y,
            y_end=zoom_y * (previous.y_end - pivot_y) + pivot_y + pan_y,
        )


def wheel_zoom_factor(base: float, wheel: float) -> float:
    """``base ** -wheel``, kept within [PLOT_RANGE_MIN, PLOT_RANGE_MAX] for any wheel burst."""
    if base == 1.0 or wheel == 0.0 or math.isnan(wheel):
        return 1.0
    # The exponent at which the factor reaches PLOT_RANGE_MAX.
    limit = math.log(PLOT_RANGE_MAX) / abs(math.log(base))
    exponent = min(max(-wheel, -limit), limit)
    return min(max(math.pow(base, exponent), PLOT_RANGE_MIN), PLOT_RANGE_MAX)


def normalize_range(plot_range: Range) -> Range:
    x_begin, x_end, cx = _normalize_axis(plot_range.x_begin, plot_range.x_end)
    y_begin, y_end, cy = _normalize_axis(plot_range.y_begin, plot_range.y_end)
    if cx or cy:
        LOGGER.warning(
            "plot-space coordinates were clamped to the magnitude range [%g, %g]", PLOT_RANGE_MIN, PLOT_RANGE_MAX
        )
    return Range(x_begin=x_begin, x_end=x_end, y_begin=y_begin, y_end=y_end)


def clamp_magnitude(value: float) -> tuple[float, bool]:
    if value > PLOT_RANGE_MAX:
        return PLOT_RANGE_MAX, True
    if value < -PLOT_RANGE_MAX:
        return -PLOT_RANGE_MAX, True
    if 0.0 < value < PLOT_RANGE_MIN:
        return PLOT_RANGE_MIN, True
    if -PLOT_RANGE_MIN < value < 0.0:
        return -PLOT_RANGE_MIN, True
    return value, False


def repair_span(begin: float, end: float) -> tuple[float, float]:
    if begin == end:
        return begin - 0.5, end + 0.5
    if begin > end or math.isnan(begin) or math.isnan(end):
        return DEFAULT_SPAN
    return begin, end


def widen_to_precision(begin: float, end: float, safety: float = PRECISION_SAFETY_FACTOR) -> tuple[float, float]:
    """Widen [begin, end] so it spans at least ``safety`` representable steps at ``begin``."""
    step = math.nextafter(begin, math.inf) - begin
    correction = (end - begin) - step * safety
    if correction < 0:
        begin -= abs(correction) / 2.0
        end += abs(correction) / 2.0
    return begin, end


def _normalize_axis(begin: float, end: float) -> tuple[float, float, bool]:
    begin, clamped_begin = clamp_magnitude(begin)
    end, clamped_end = clamp_magnitude(end)
    begin, end = repair_span(begin, end)
    begin, end = widen_to_precision(begin, end)
    return begin, end, clamped_begin or clamped_end
