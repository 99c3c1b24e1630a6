from __future__ import annotations

from dataclasses import dataclass
import logging

from tailplot.errors import SynchronizerFault
from tailplot.geometry import EMPTY_RANGE, Range
from tailplot.store import Group, PlotStore, Series
from tailplot.updates import GroupUpdate, SeriesUpdate, UpdateBuffer


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncReport:
    merged: bool
    series_merged: int = 0
    groups_merged: int = 0


def synchronize(buffer: UpdateBuffer, store: PlotStore) -> SyncReport:
    """Drain ``buffer`` into ``store``; must run on the render thread.

    Visibility, mode and group selection are mirrored every call. Series and
    group deltas are merged and the buffer reset only while the window is
    visible; otherwise they stay queued untouched.
    """
    with buffer.lock:
        store.visible_group = buffer.visible_group
        store.window_visible = buffer.window_visible
        store.mode = buffer.mode

        if not store.window_visible:
            return SyncReport(merged=False)

        series_ids = sorted(buffer.dirty_series)
        group_ids = sorted(buffer.dirty_groups)
        for idx in series_ids:
            update = buffer.series[idx]
            if update.empty:
                continue
            _merge_series(store, store.series[idx], update)
        for gidx in group_ids:
            update = buffer.groups[gidx]
            if update.empty:
                continue
            _merge_group(store.groups[gidx], update)

        buffer.reset()

    if series_ids or group_ids:
        LOGGER.debug("merged %d series and %d group updates", len(series_ids), len(group_ids))
    return SyncReport(merged=True, series_merged=len(series_ids), groups_merged=len(group_ids))


def _merge_series(store: PlotStore, series: Series, update: SeriesUpdate) -> None:
    if not series.initialized:
        series.color = store.config.palette_color(series.slot)
        series.name = None
        series.initialized = True

    if update.color is not None:
        series.color = update.color
    if update.name is not None:
        series.name = update.name

    old_length = len(series)
    offset = old_length
    if update.cleared or old_length == 0:
        offset = 0
        series.x.clear()
        series.y.clear()
        series.bbox = EMPTY_RANGE

    new_y = update.new_y.view()
    new_x = update.new_x.view()
    if update.kind is None:
        if new_x.size or new_y.size:
            raise SynchronizerFault(f"series {series.slot}: samples pending without a representation")
        return
    if update.kind == "points":
        if new_x.size != new_y.size:
            raise SynchronizerFault(
                f"series {series.slot}: pending x/y lengths differ ({new_x.size} != {new_y.size})"
            )
        if offset > 0 and not series.has_x:
            raise SynchronizerFault(f"series {series.slot}: points appended to an index-mode series")
        series.x.extend(new_x)
        series.y.extend(new_y)
        series.bbox = series.bbox.extended(new_x, new_y)
        return

    if new_x.size != 0:
        raise SynchronizerFault(f"series {series.slot}: x values pending for a numbers update")
    if offset > 0 and series.has_x:
        raise SynchronizerFault(f"series {series.slot}: numbers appended to a points-mode series")
    series.y.extend(new_y)
    box = series.bbox.extended_y(new_y)
    if box.y_begin > box.y_end:
        series.bbox = EMPTY_RANGE
        return
    series.bbox = Range(x_begin=0.0, x_end=float(max(0, len(series) - 1)), y_begin=box.y_begin, y_end=box.y_end)


def _merge_group(group: Group, update: GroupUpdate) -> None:
    if not group.initialized:
        group.name = None
        group.initialized = True

    if update.name is not None:
        group.name = update.name

    if update.cleared:
        group.members.clear()

    for idx in update.add:
        if idx not in group.members:
            group.members.append(idx)

    for idx in update.remove:
        group.members[:] = [m for m in group.members if m != idx]
