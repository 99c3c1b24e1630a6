from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from tailplot.frame import FrameReport, paint_frame
from tailplot.frame_rate import FrameRateController
from tailplot.store import PlotStore
from tailplot.sync import synchronize
from tailplot.targets.base import Renderer
from tailplot.updates import UpdateBuffer
from tailplot.viewport import ViewportController


LOGGER = logging.getLogger(__name__)


class RenderLoop:
    """Single consumer of the update buffer: synchronize, derive viewport, paint.

    The background thread is started at most once and is never joined; it idles
    with coarse sleeps while the window is hidden.
    """

    def __init__(
        self,
        buffer: UpdateBuffer,
        store: PlotStore,
        renderer: Renderer,
        *,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._buffer = buffer
        self._store = store
        self._renderer = renderer
        self._config = store.config
        self._viewport = ViewportController(store.config)
        self._rate = FrameRateController(target_fps=store.config.target_fps)
        self._clock = clock
        self._sleep = sleep
        self._start_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._window_open = False
        self._last_error: Exception | None = None
        self.frames_rendered = 0

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def window_open(self) -> bool:
        return self._window_open

    def start(self) -> bool:
        """Spawn the render thread; returns False when it was already started."""
        with self._start_lock:
            if self._thread is not None:
                return False
            self._thread = threading.Thread(target=self._run, name="tailplot-render", daemon=True)
            self._thread.start()
        return True

    def run_frame(self) -> FrameReport | None:
        """One render-thread pass; returns None when nothing was drawn."""
        synchronize(self._buffer, self._store)
        store = self._store

        if not self._window_open and store.window_visible:
            cfg = self._config
            self._renderer.open(cfg.window_width, cfg.window_height, cfg.window_title)
            self._window_open = True
            LOGGER.info("plot window opened (%dx%d)", cfg.window_width, cfg.window_height)

        if self._window_open and self._renderer.should_close():
            self._close_window()
            return None

        if not store.window_visible:
            return None

        size = self._renderer.begin_frame()
        pointer = self._renderer.poll_pointer()
        plot_range = self._viewport.update(store, pointer)
        report = paint_frame(self._renderer, store, plot_range, size)
        self._renderer.end_frame()
        self.frames_rendered += 1
        return report

    def _close_window(self) -> None:
        self._renderer.close()
        self._window_open = False
        self._store.window_visible = False
        # The render thread normally only reads the buffer; closing is the one write it makes.
        with self._buffer.lock:
            self._buffer.window_visible = False
        LOGGER.info("plot window closed")

    def _run(self) -> None:
        while True:
            started = self._clock()
            try:
                report = self.run_frame()
            except Exception as exc:  # noqa: BLE001
                self._last_error = exc
                LOGGER.exception("render loop failed: %s", exc)
                break
            if report is None:
                self._sleep(self._config.idle_sleep_s)
                continue
            self._sleep(self._rate.compute_sleep(started, self._clock()))
