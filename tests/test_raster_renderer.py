from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from tailplot.geometry import Point, Rect
from tailplot.raster import draw_line, draw_polyline, draw_text, fill_rect, new_canvas, text_size
from tailplot.raster.draw_lines import clip_segment
from tailplot.raster.draw_text import FontBook
from tailplot.targets import RasterRenderer
from tailplot.viewport import IDLE_POINTER, PointerInput


RED = (255, 0, 0, 255)


def _has_color(frame: np.ndarray, color: tuple[int, int, int, int]) -> bool:
    return bool(np.any(np.all(frame == np.asarray(color, dtype=np.uint8), axis=2)))


class RasterPrimitiveTests(unittest.TestCase):
    def test_clip_segment_inside_is_unchanged(self) -> None:
        self.assertEqual(clip_segment(1.0, 1.0, 5.0, 5.0, (0, 0, 10, 10)), (1.0, 1.0, 5.0, 5.0))

    def test_clip_segment_outside_is_dropped(self) -> None:
        self.assertIsNone(clip_segment(-5.0, -5.0, -1.0, -1.0, (0, 0, 10, 10)))
        self.assertIsNone(clip_segment(0.0, float("nan"), 1.0, 1.0, (0, 0, 10, 10)))

    def test_clip_segment_trims_to_box(self) -> None:
        clipped = clip_segment(-10.0, 5.0, 20.0, 5.0, (0, 0, 10, 10))
        assert clipped is not None
        self.assertAlmostEqual(clipped[0], 0.0)
        self.assertAlmostEqual(clipped[2], 9.0)
        self.assertAlmostEqual(clipped[1], 5.0)

    def test_fill_rect_blends_and_clips(self) -> None:
        canvas = new_canvas(10, 10, color=(0, 0, 0, 255))
        fill_rect(canvas, 2, 2, 20, 3, RED, clip=(0, 0, 5, 10))
        self.assertEqual(canvas[3, 4].tolist(), [255, 0, 0, 255])
        self.assertEqual(canvas[3, 5].tolist(), [0, 0, 0, 255])
        fill_rect(canvas, 0, 0, 1, 1, (255, 255, 255, 0))
        self.assertEqual(canvas[0, 0].tolist(), [0, 0, 0, 255])

    def test_draw_line_covers_endpoints(self) -> None:
        canvas = new_canvas(10, 10)
        draw_line(canvas, 1.0, 4.0, 8.0, 4.0, RED)
        self.assertEqual(canvas[4, 1].tolist(), [255, 0, 0, 255])
        self.assertEqual(canvas[4, 8].tolist(), [255, 0, 0, 255])
        self.assertEqual(canvas[5, 4].tolist(), [0, 0, 0, 255])

    def test_thick_line_spreads(self) -> None:
        canvas = new_canvas(10, 10)
        draw_line(canvas, 1.0, 4.0, 8.0, 4.0, RED, width=3.0)
        self.assertEqual(canvas[5, 4].tolist(), [255, 0, 0, 255])

    def test_polyline_breaks_at_non_finite_vertex(self) -> None:
        canvas = new_canvas(20, 10)
        xs = np.array([1.0, 5.0, 9.0, 13.0])
        ys = np.array([2.0, 2.0, np.nan, 2.0])
        draw_polyline(canvas, xs, ys, RED)
        self.assertEqual(canvas[2, 3].tolist(), [255, 0, 0, 255])
        self.assertEqual(canvas[2, 11].tolist(), [0, 0, 0, 255])

    def test_text_is_rendered_and_measured(self) -> None:
        canvas = new_canvas(120, 40)
        draw_text(canvas, 2, 2, "12.5", (255, 255, 255, 255), font_size_px=18)
        self.assertTrue(np.any(canvas[:, :, 0] > 0))
        width, height = text_size("12.5", font_size_px=18)
        self.assertGreater(width, 0)
        self.assertGreater(height, 0)
        self.assertGreater(text_size("12.5000", font_size_px=18)[0], width)

    def test_font_book_caches_masks_and_falls_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            book = FontBook("No Such Family", search_dirs=(Path(tmp),))
        self.assertIsNone(book.path)
        first = book.mask("-0.25", 16)
        self.assertIs(book.mask("-0.25", 16.2), first)
        self.assertEqual(first.dtype, np.uint8)
        self.assertEqual(book.measure("", 16), (0, 16))
        self.assertGreater(book.measure("-0.25", 16)[0], 0)


class RasterRendererTests(unittest.TestCase):
    def test_draw_calls_require_open_frame(self) -> None:
        renderer = RasterRenderer()
        with self.assertRaises(RuntimeError):
            renderer.begin_frame()
        renderer.open(20, 10, "t")
        with self.assertRaises(RuntimeError):
            renderer.fill_rect(Rect(0, 0, 5, 5), RED)

    def test_frame_is_published_on_end(self) -> None:
        frames: list[np.ndarray] = []
        renderer = RasterRenderer(on_frame=frames.append)
        renderer.open(30, 20, "probe")
        self.assertIsNone(renderer.snapshot())
        self.assertEqual(renderer.begin_frame(), (30, 20))
        renderer.fill_rect(Rect(0.0, 0.0, 30.0, 20.0), (10, 20, 30, 255))
        renderer.draw_line(Point(0.0, 10.0), Point(29.0, 10.0), RED)
        renderer.end_frame()
        frame = renderer.snapshot()
        assert frame is not None
        self.assertEqual(frame.shape, (20, 30, 4))
        self.assertEqual(frame[0, 0].tolist(), [10, 20, 30, 255])
        self.assertEqual(frame[10, 15].tolist(), list(RED))
        self.assertEqual(renderer.frames_presented, 1)
        self.assertEqual(len(frames), 1)
        self.assertEqual(renderer.title, "probe")

    def test_clip_limits_drawing(self) -> None:
        renderer = RasterRenderer()
        renderer.open(30, 20, "t")
        renderer.begin_frame()
        renderer.begin_clip(Rect(0.0, 0.0, 10.0, 20.0))
        renderer.draw_line(Point(0.0, 5.0), Point(29.0, 5.0), RED)
        renderer.end_clip()
        renderer.end_frame()
        frame = renderer.snapshot()
        assert frame is not None
        self.assertEqual(frame[5, 5].tolist(), list(RED))
        self.assertEqual(frame[5, 20].tolist(), [0, 0, 0, 255])

    def test_pointer_is_consumed_once(self) -> None:
        renderer = RasterRenderer()
        pointer = PointerInput(position=Point(3.0, 4.0), wheel=1.0)
        renderer.feed_pointer(pointer)
        self.assertEqual(renderer.poll_pointer(), pointer)
        self.assertEqual(renderer.poll_pointer(), IDLE_POINTER)

    def test_close_request_resets_on_open(self) -> None:
        renderer = RasterRenderer()
        renderer.open(10, 10, "t")
        renderer.request_close()
        self.assertTrue(renderer.should_close())
        renderer.close()
        self.assertFalse(renderer.is_open)
        renderer.open(10, 10, "t")
        self.assertFalse(renderer.should_close())

    def test_save_png_writes_last_frame(self) -> None:
        renderer = RasterRenderer()
        with self.assertRaises(RuntimeError):
            renderer.save_png("unused.png")
        renderer.open(16, 8, "t")
        renderer.begin_frame()
        renderer.fill_rect(Rect(0.0, 0.0, 16.0, 8.0), RED)
        renderer.end_frame()
        with tempfile.TemporaryDirectory() as tmp:
            out = renderer.save_png(Path(tmp) / "frame.png")
            with Image.open(out) as image:
                self.assertEqual(image.size, (16, 8))
                self.assertEqual(image.getpixel((3, 3)), RED)

    def test_resize_changes_next_frame(self) -> None:
        renderer = RasterRenderer()
        renderer.open(16, 8, "t")
        renderer.resize(40, 30)
        self.assertEqual(renderer.begin_frame(), (40, 30))
        with self.assertRaises(ValueError):
            renderer.resize(0, 30)

    def test_series_pixels_appear_in_frame(self) -> None:
        from tailplot import PlotConfig, Session

        renderer = RasterRenderer()
        session = Session(
            config=PlotConfig(max_series=4, max_groups=2, window_width=200, window_height=150),
            renderer=renderer,
            start_render_thread=False,
        )
        session.append_points(0, [0.0, 1.0, 2.0], [0.0, 1.0, 0.5])
        session.set_color(0, 255, 0, 0)
        session.show_series(0)
        session.render_loop.run_frame()
        frame = renderer.snapshot()
        assert frame is not None
        self.assertTrue(_has_color(frame, RED))


if __name__ == "__main__":
    unittest.main()
