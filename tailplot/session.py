from __future__ import annotations

import logging
from typing import Any, Callable

from tailplot.config import RGBA, PlotConfig
from tailplot.errors import PlotApiError
from tailplot.render_loop import RenderLoop
from tailplot.store import PlotStore
from tailplot.targets.base import Renderer
from tailplot.targets.raster_target import RasterRenderer
from tailplot.updates import UpdateBuffer, VisualizationMode


LOGGER = logging.getLogger(__name__)


class Session:
    """Producer-facing plotting session.

    Every mutating call validates its input, stages the change in the update
    buffer and returns immediately: ``True`` on success, ``False`` (with an
    error logged) when the call was rejected and nothing changed. Drawing
    happens on the render thread, which the first show call starts; with
    ``start_render_thread=False`` the caller drives ``render_loop.run_frame()``.
    """

    def __init__(
        self,
        config: PlotConfig | None = None,
        renderer: Renderer | None = None,
        *,
        start_render_thread: bool = True,
    ) -> None:
        self.config = config or PlotConfig()
        self.renderer = renderer if renderer is not None else RasterRenderer()
        self.buffer = UpdateBuffer(self.config)
        self.store = PlotStore(self.config)
        self.render_loop = RenderLoop(self.buffer, self.store, self.renderer)
        self._start_render_thread = start_render_thread

    # -- window and modes -------------------------------------------------------------

    def show(self) -> bool:
        ok = self._submit(self.buffer.set_window_visible, True)
        self._ensure_render_thread()
        return ok

    def set_mode_interactive(self) -> bool:
        return self._submit(self.buffer.set_mode, VisualizationMode.interactive())

    def set_mode_tail_count(self, n_points: int) -> bool:
        return self._submit(self.buffer.set_mode, VisualizationMode.tail_count(n_points))

    def set_mode_tail_span(self, x_span: float) -> bool:
        return self._submit(self.buffer.set_mode, VisualizationMode.tail_span(x_span))

    def set_mode_full_extent(self) -> bool:
        return self._submit(self.buffer.set_mode, VisualizationMode.full_group_extent())

    def set_mode_single_series(self, series_id: int) -> bool:
        return self._submit(self.buffer.set_mode, VisualizationMode.single_series(series_id))

    def clear_all(self) -> bool:
        return self._submit(self.buffer.clear_all)

    # -- series ---------------------------------------------------------------------

    def replace_numbers(self, series_id: int, y: Any) -> bool:
        return self._submit(self.buffer.replace_numbers, series_id, y)

    def replace_points(self, series_id: int, x: Any, y: Any) -> bool:
        return self._submit(self.buffer.replace_points, series_id, x, y)

    def replace_points_interleaved(self, series_id: int, xy: Any) -> bool:
        return self._submit(self.buffer.replace_points_interleaved, series_id, xy)

    def append_number(self, series_id: int, value: float) -> bool:
        return self._submit(self.buffer.append_number, series_id, value)

    def append_numbers(self, series_id: int, y: Any) -> bool:
        return self._submit(self.buffer.append_numbers, series_id, y)

    def append_point(self, series_id: int, x: float, y: float) -> bool:
        return self._submit(self.buffer.append_point, series_id, x, y)

    def append_points(self, series_id: int, x: Any, y: Any) -> bool:
        return self._submit(self.buffer.append_points, series_id, x, y)

    def append_points_interleaved(self, series_id: int, xy: Any) -> bool:
        return self._submit(self.buffer.append_points_interleaved, series_id, xy)

    def set_color(self, series_id: int, r: int, g: int, b: int, a: int = 255) -> bool:
        color: RGBA = (r, g, b, a)
        return self._submit(self.buffer.set_series_color, series_id, color)

    def set_name(self, series_id: int, name: str) -> bool:
        return self._submit(self.buffer.set_series_name, series_id, name)

    def clear(self, series_id: int) -> bool:
        return self._submit(self.buffer.clear_series, series_id)

    def show_series(self, series_id: int) -> bool:
        ok = self._submit(self.buffer.show_series, series_id)
        if ok:
            self._ensure_render_thread()
        return ok

    def hide_series(self, series_id: int) -> bool:
        return self._submit(self.buffer.hide_series, series_id)

    def hide_all_series(self) -> bool:
        return self._submit(self.buffer.hide_all_series)

    # -- groups -----------------------------------------------------------------------

    def group_add(self, group_id: int, series_id: int) -> bool:
        return self._submit(self.buffer.add_member, group_id, series_id)

    def group_remove(self, group_id: int, series_id: int) -> bool:
        return self._submit(self.buffer.remove_member, group_id, series_id)

    def group_clear(self, group_id: int) -> bool:
        return self._submit(self.buffer.clear_group, group_id)

    def group_set_name(self, group_id: int, name: str) -> bool:
        return self._submit(self.buffer.set_group_name, group_id, name)

    def group_show(self, group_id: int) -> bool:
        ok = self._submit(self.buffer.show_group, group_id)
        if ok:
            self._ensure_render_thread()
        return ok

    def _ensure_render_thread(self) -> None:
        if self._start_render_thread:
            self.render_loop.start()

    def _submit(self, op: Callable[..., None], *args: Any) -> bool:
        try:
            op(*args)
        except PlotApiError as exc:
            LOGGER.error("%s rejected: %s", getattr(op, "__name__", "call"), exc)
            return False
        return True
