from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tailplot.config import PlotConfig
from tailplot.geometry import Point, Range, Rect, ScreenMapping
from tailplot.store import PlotStore, Series
from tailplot.targets.base import Renderer
from tailplot.ticks import AxisTicks, generate_axis_ticks, generate_fitting_ticks


@dataclass(frozen=True)
class LegendLayout:
    origin: Point
    content_width: float
    width: float
    title: str | None
    entries: tuple[Series, ...]


@dataclass(frozen=True)
class FrameReport:
    plot_range: Range
    plot_screen: Rect
    x_ticks: AxisTicks
    y_ticks: AxisTicks
    legend: LegendLayout


def layout_legend(renderer: Renderer, store: PlotStore, bounds: Rect) -> LegendLayout:
    cfg = store.config
    group = store.groups[store.visible_group]
    entries = tuple(store.visible_members())
    title = group.label if store.visible_group != store.default_group else None

    content_width = 0.0
    if title is not None:
        content_width = renderer.measure_text(title, cfg.font_size_large)
    for series in entries:
        content_width = max(content_width, renderer.measure_text(series.label, cfg.font_size))

    origin = Point(bounds.right - (content_width + cfg.offset_normal), cfg.offset_normal)
    return LegendLayout(
        origin=origin,
        content_width=content_width,
        width=content_width + 2 * cfg.offset_normal,
        title=title,
        entries=entries,
    )


def layout_plot_screen(bounds: Rect, y_ticks: AxisTicks, legend: LegendLayout, config: PlotConfig) -> Rect:
    left = y_ticks.max_label_width + 2 * config.offset_normal
    right = max(config.min_plot_screen_offset, legend.width)
    top = config.min_plot_screen_offset
    bottom = config.font_size + config.offset_normal
    return Rect(
        x=bounds.x + left,
        y=bounds.y + top,
        width=max(1.0, bounds.width - (left + right)),
        height=max(1.0, bounds.height - (top + bottom)),
    )


def paint_frame(renderer: Renderer, store: PlotStore, plot_range: Range, size: tuple[int, int]) -> FrameReport:
    """Lay out and draw one frame of the visible group; updates ``store.plot_screen``."""
    cfg = store.config
    bounds = Rect(0.0, 0.0, float(size[0]), float(size[1]))

    def measure(text: str) -> float:
        return renderer.measure_text(text, cfg.font_size)

    x_ticks = generate_fitting_ticks(
        bounds.width,
        cfg.x_pixels_per_tick,
        plot_range.x_begin,
        plot_range.x_end,
        measure,
        max_pixels_per_tick=cfg.max_pixels_per_tick,
    )
    y_ticks = generate_axis_ticks(bounds.height, cfg.y_pixels_per_tick, plot_range.y_begin, plot_range.y_end, measure)

    legend = layout_legend(renderer, store, bounds)
    screen = layout_plot_screen(bounds, y_ticks, legend, cfg)
    store.plot_screen = screen
    mapping = ScreenMapping(plot_range=plot_range, screen=screen)

    renderer.fill_rect(bounds, cfg.background_color)
    _paint_legend(renderer, legend, cfg)

    bw = cfg.border_width
    renderer.draw_rect_outline(screen.inflate(bw), bw, cfg.border_color)

    for value, label in zip(x_ticks.values, x_ticks.labels):
        sx = mapping.x_to_screen(value)
        renderer.draw_line(Point(sx, screen.y), Point(sx, screen.bottom), cfg.grid_color)
        renderer.draw_text(label, Point(sx, screen.bottom), cfg.font_size, cfg.text_color)
    for value, label in zip(y_ticks.values, y_ticks.labels):
        sy = mapping.y_to_screen(value)
        renderer.draw_line(Point(screen.x, sy), Point(screen.right, sy), cfg.grid_color)
        renderer.draw_text(label, Point(bounds.x + cfg.offset_normal, sy - cfg.font_size), cfg.font_size, cfg.text_color)

    zero_x = mapping.x_to_screen(0.0)
    zero_y = mapping.y_to_screen(0.0)
    renderer.draw_line(Point(screen.x, zero_y), Point(screen.right, zero_y), cfg.axes_color)
    renderer.draw_line(Point(zero_x, screen.y), Point(zero_x, screen.bottom), cfg.axes_color)

    renderer.begin_clip(screen)
    try:
        for series in legend.entries:
            _paint_series(renderer, series, mapping, store)
    finally:
        renderer.end_clip()

    # Tick marks go on top of the data.
    for value in x_ticks.values:
        sx = mapping.x_to_screen(value)
        renderer.draw_line(Point(sx, screen.bottom - cfg.tick_mark_len), Point(sx, screen.bottom), cfg.border_color, bw)
    for value in y_ticks.values:
        sy = mapping.y_to_screen(value)
        renderer.draw_line(Point(screen.x, sy), Point(screen.x + cfg.tick_mark_len, sy), cfg.border_color, bw)

    return FrameReport(plot_range=plot_range, plot_screen=screen, x_ticks=x_ticks, y_ticks=y_ticks, legend=legend)


def series_draw_start(series: Series, store: PlotStore) -> int:
    mode = store.mode
    if mode.kind == "tail_count" and mode.n_points < len(series):
        return len(series) - mode.n_points
    return 0


def _paint_legend(renderer: Renderer, legend: LegendLayout, cfg: PlotConfig) -> None:
    x = legend.origin.x
    y = legend.origin.y
    if legend.title is not None:
        renderer.draw_text(legend.title, Point(x, y), cfg.font_size_large, cfg.text_color)
        y += cfg.font_size_large + cfg.offset_small
        renderer.draw_line(Point(x, y), Point(x + legend.content_width, y), cfg.text_color)
        y += cfg.offset_small
    for series in legend.entries:
        renderer.draw_text(series.label, Point(x, y), cfg.font_size, series.color)
        y += cfg.font_size


def _paint_series(renderer: Renderer, series: Series, mapping: ScreenMapping, store: PlotStore) -> None:
    if series.is_empty:
        return
    start = series_draw_start(series, store)
    ys = series.y.view()[start:]
    if series.has_x:
        xs = series.x.view()[start:]
    else:
        xs = np.arange(start, len(series), dtype=np.float64)
    renderer.draw_polyline(mapping.xs_to_screen(xs), mapping.ys_to_screen(ys), series.color)
