from __future__ import annotations

import math
import unittest

import numpy as np

from tailplot.config import PlotConfig
from tailplot.geometry import EMPTY_RANGE, PLOT_RANGE_MAX, PLOT_RANGE_MIN, Point, Range, Rect
from tailplot.store import PlotStore
from tailplot.updates import VisualizationMode
from tailplot.viewport import (
    DEFAULT_SPAN,
    PointerInput,
    ViewportController,
    clamp_magnitude,
    normalize_range,
    wheel_zoom_factor,
    widen_to_precision,
)


def _store_with(config: PlotConfig | None = None) -> PlotStore:
    return PlotStore(config or PlotConfig(max_series=8, max_groups=4))


def _put_numbers(store: PlotStore, series_id: int, ys: list[float]) -> None:
    series = store.series[series_id]
    series.y.extend(np.asarray(ys, dtype=np.float64))
    series.bbox = series.bounding_box(0)


def _put_points(store: PlotStore, series_id: int, xs: list[float], ys: list[float]) -> None:
    series = store.series[series_id]
    series.x.extend(np.asarray(xs, dtype=np.float64))
    series.y.extend(np.asarray(ys, dtype=np.float64))
    series.bbox = series.bounding_box(0)


class RangeRepairTests(unittest.TestCase):
    def test_equal_endpoints_are_padded(self) -> None:
        self.assertEqual(normalize_range(Range(5.0, 5.0, 2.0, 2.0)), Range(4.5, 5.5, 1.5, 2.5))

    def test_inverted_range_resets_to_default(self) -> None:
        repaired = normalize_range(Range(3.0, 1.0, 0.0, 4.0))
        self.assertEqual((repaired.x_begin, repaired.x_end), DEFAULT_SPAN)
        self.assertEqual((repaired.y_begin, repaired.y_end), (0.0, 4.0))

    def test_empty_range_resets_both_axes(self) -> None:
        self.assertEqual(normalize_range(EMPTY_RANGE), Range(-0.5, 0.5, -0.5, 0.5))

    def test_nan_range_resets_to_default(self) -> None:
        repaired = normalize_range(Range(math.nan, 1.0, 0.0, 1.0))
        self.assertEqual((repaired.x_begin, repaired.x_end), DEFAULT_SPAN)

    def test_out_of_range_magnitudes_are_clamped_with_warning(self) -> None:
        with self.assertLogs("tailplot.viewport", level="WARNING"):
            repaired = normalize_range(Range(-math.inf, 1.0, 1e-310, 1.0))
        self.assertEqual(repaired.x_begin, -1e300)
        self.assertEqual(repaired.y_begin, 1e-300)

    def test_clamp_magnitude_reports_changes(self) -> None:
        self.assertEqual(clamp_magnitude(2e300), (1e300, True))
        self.assertEqual(clamp_magnitude(-1e-305), (-1e-300, True))
        self.assertEqual(clamp_magnitude(0.0), (0.0, False))
        self.assertEqual(clamp_magnitude(-3.5), (-3.5, False))

    def test_narrow_range_is_widened_to_precision_floor(self) -> None:
        ulp = math.nextafter(1.0, math.inf) - 1.0
        begin, end = widen_to_precision(1.0, 1.0 + 1e-14)
        self.assertGreaterEqual(end - begin, 98 * ulp)
        self.assertAlmostEqual((begin + end) / 2.0, 1.0 + 5e-15, places=14)

    def test_wide_range_is_not_widened(self) -> None:
        self.assertEqual(widen_to_precision(0.0, 10.0), (0.0, 10.0))


class DerivedModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = _store_with()
        self.controller = ViewportController(self.store.config)

    def test_full_group_extent_unions_visible_members(self) -> None:
        _put_points(self.store, 0, [0.0, 1.0, 2.0], [5.0, 6.0, 7.0])
        _put_points(self.store, 1, [-1.0, 4.0], [0.0, 1.0])
        self.store.groups[self.store.default_group].members[:] = [0, 1]
        self.assertEqual(self.controller.derive(self.store), Range(-1.0, 4.0, 0.0, 7.0))

    def test_hidden_series_do_not_contribute(self) -> None:
        _put_points(self.store, 0, [0.0, 1.0], [0.0, 1.0])
        _put_points(self.store, 1, [100.0, 200.0], [100.0, 200.0])
        self.store.groups[self.store.default_group].members[:] = [0]
        self.assertEqual(self.controller.derive(self.store), Range(0.0, 1.0, 0.0, 1.0))

    def test_tail_count_uses_last_samples(self) -> None:
        _put_numbers(self.store, 0, [1.0, 2.0, 3.0])
        self.store.groups[0].members[:] = [0]
        self.store.visible_group = 0
        self.store.mode = VisualizationMode.tail_count(2)
        self.assertEqual(self.controller.derive(self.store), Range(1.0, 2.0, 2.0, 3.0))

    def test_tail_count_larger_than_series_uses_whole_series(self) -> None:
        _put_numbers(self.store, 0, [1.0, 2.0, 3.0])
        self.store.groups[self.store.default_group].members[:] = [0]
        self.store.mode = VisualizationMode.tail_count(50)
        self.assertEqual(self.controller.derive(self.store), Range(0.0, 2.0, 1.0, 3.0))

    def test_tail_span_keeps_trailing_x_window(self) -> None:
        _put_points(self.store, 0, [0.0, 5.0, 10.0], [1.0, -1.0, 2.0])
        self.store.groups[self.store.default_group].members[:] = [0]
        self.store.mode = VisualizationMode.tail_span(4.0)
        self.assertEqual(self.controller.derive(self.store), Range(6.0, 10.0, -1.0, 2.0))

    def test_tail_span_with_no_data_stays_empty(self) -> None:
        self.store.mode = VisualizationMode.tail_span(4.0)
        self.assertTrue(self.controller.derive(self.store).is_empty)
        self.assertEqual(self.controller.update(self.store), Range(-0.5, 0.5, -0.5, 0.5))

    def test_single_series_ignores_group(self) -> None:
        _put_points(self.store, 3, [2.0, 3.0], [4.0, 9.0])
        self.store.mode = VisualizationMode.single_series(3)
        self.assertEqual(self.controller.derive(self.store), Range(2.0, 3.0, 4.0, 9.0))

    def test_single_series_without_id_is_a_value_error(self) -> None:
        self.store.mode = VisualizationMode(kind="single_series")
        with self.assertRaises(ValueError):
            self.controller.derive(self.store)

    def test_update_repairs_and_stores_range(self) -> None:
        _put_points(self.store, 0, [2.0], [4.0])
        self.store.groups[self.store.default_group].members[:] = [0]
        result = self.controller.update(self.store)
        self.assertEqual(result, Range(1.5, 2.5, 3.5, 4.5))
        self.assertEqual(self.store.plot_range, result)


class InteractiveModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = _store_with()
        self.store.mode = VisualizationMode.interactive()
        self.store.plot_range = Range(0.0, 10.0, 0.0, 10.0)
        self.store.plot_screen = Rect(0.0, 0.0, 100.0, 100.0)
        self.controller = ViewportController(self.store.config)

    def test_idle_pointer_keeps_previous_range(self) -> None:
        self.assertEqual(self.controller.update(self.store), Range(0.0, 10.0, 0.0, 10.0))

    def test_drag_pans_against_pointer_motion(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), drag_delta=Point(10.0, 10.0), dragging=True)
        result = self.controller.update(self.store, pointer)
        self.assertAlmostEqual(result.x_begin, -1.0)
        self.assertAlmostEqual(result.x_end, 9.0)
        self.assertAlmostEqual(result.y_begin, 1.0)
        self.assertAlmostEqual(result.y_end, 11.0)

    def test_drag_delta_ignored_when_not_dragging(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), drag_delta=Point(10.0, 10.0), dragging=False)
        self.assertEqual(self.controller.update(self.store, pointer), Range(0.0, 10.0, 0.0, 10.0))

    def test_wheel_zooms_about_cursor(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=1.0)
        result = self.controller.update(self.store, pointer)
        factor = 1.0 / 1.2
        self.assertAlmostEqual(result.x_begin, 5.0 - 5.0 * factor)
        self.assertAlmostEqual(result.x_end, 5.0 + 5.0 * factor)
        self.assertAlmostEqual(result.y_begin, 5.0 - 5.0 * factor)
        self.assertAlmostEqual(result.y_end, 5.0 + 5.0 * factor)

    def test_wheel_backwards_zooms_out(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=-1.0)
        result = self.controller.update(self.store, pointer)
        self.assertAlmostEqual(result.x_span, 12.0)

    def test_pivot_snaps_to_zero_axis_near_cursor(self) -> None:
        # x=0 sits at screen x=0; the cursor is 10px away on x and 50px away on y.
        pointer = PointerInput(position=Point(10.0, 50.0), wheel=1.0)
        result = self.controller.update(self.store, pointer)
        factor = 1.0 / 1.2
        self.assertAlmostEqual(result.x_begin, 0.0)
        self.assertAlmostEqual(result.x_end, 10.0 * factor)
        self.assertAlmostEqual(result.y_begin, 5.0 - 5.0 * factor)

    def test_lock_x_zoom_only_zooms_y(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=1.0, lock_x_zoom=True)
        result = self.controller.update(self.store, pointer)
        self.assertEqual((result.x_begin, result.x_end), (0.0, 10.0))
        self.assertLess(result.y_span, 10.0)

    def test_lock_y_zoom_only_zooms_x(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=2.0, lock_y_zoom=True)
        result = self.controller.update(self.store, pointer)
        self.assertEqual((result.y_begin, result.y_end), (0.0, 10.0))
        self.assertAlmostEqual(result.x_span, 10.0 / 1.44)

    def test_wheel_scale_is_configurable(self) -> None:
        controller = ViewportController(PlotConfig(max_series=8, max_groups=4, wheel_zoom_base=2.0, wheel_zoom_scale=0.5))
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=2.0)
        result = controller.interact(self.store.plot_range, self.store.plot_screen, pointer)
        self.assertAlmostEqual(result.x_span, 5.0)

    def test_extreme_wheel_out_is_clamped_not_fatal(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=-5000.0)
        with self.assertLogs("tailplot.viewport", level="WARNING"):
            result = self.controller.update(self.store, pointer)
        self.assertEqual(result, Range(-PLOT_RANGE_MAX, PLOT_RANGE_MAX, -PLOT_RANGE_MAX, PLOT_RANGE_MAX))

    def test_extreme_wheel_in_stays_finite_and_ordered(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=5000.0)
        result = self.controller.update(self.store, pointer)
        for value in (result.x_begin, result.x_end, result.y_begin, result.y_end):
            self.assertTrue(math.isfinite(value))
        self.assertLess(result.x_begin, result.x_end)
        self.assertLess(result.y_begin, result.y_end)

    def test_wheel_zoom_factor_is_bounded(self) -> None:
        self.assertEqual(wheel_zoom_factor(1.2, 0.0), 1.0)
        self.assertEqual(wheel_zoom_factor(1.0, -5000.0), 1.0)
        self.assertAlmostEqual(wheel_zoom_factor(1.2, 1.0), 1.0 / 1.2)
        self.assertLessEqual(wheel_zoom_factor(1.2, -math.inf), PLOT_RANGE_MAX)
        self.assertGreaterEqual(wheel_zoom_factor(1.2, math.inf), PLOT_RANGE_MIN)
        self.assertLessEqual(wheel_zoom_factor(0.5, 5000.0), PLOT_RANGE_MAX)

    def test_degenerate_previous_range_is_repaired_first(self) -> None:
        pointer = PointerInput(position=Point(50.0, 50.0), wheel=1.0)
        result = self.controller.interact(Range(), self.store.plot_screen, pointer)
        self.assertTrue(math.isfinite(result.x_span))
        self.assertGreater(result.x_span, 0.0)
        self.assertGreater(result.y_span, 0.0)

    def test_fresh_store_starts_interactive_from_default_box(self) -> None:
        store = _store_with()
        store.mode = VisualizationMode.interactive()
        result = self.controller.update(store, PointerInput(position=Point(5.0, 5.0), wheel=-1.0))
        self.assertAlmostEqual(result.x_span, 1.2)
        self.assertAlmostEqual(result.y_span, 1.2)


if __name__ == "__main__":
    unittest.main()
