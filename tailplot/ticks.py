from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable


MAX_TICK_COUNT = 32
NICE_FRACTIONS = (1.0, 2.0, 2.5, 5.0, 10.0)
ZERO_SNAP_RATIO = 1e-3
TRAILING_ZEROS_THRESHOLD = 3
LABEL_FORMAT = "%.14g"


@dataclass(frozen=True)
class AxisTicks:
    count: int
    spacing: float
    first: float
    values: tuple[float, ...]
    labels: tuple[str, ...]
    label_widths: tuple[float, ...] = ()
    pixels_per_tick: int = 0

    @property
    def max_label_width(self) -> float:
        return max(self.label_widths, default=0.0)


def tick_count_for(pixel_extent: float, pixels_per_tick: int) -> int:
    if pixels_per_tick <= 0:
        raise ValueError("pixels_per_tick must be > 0")
    count = int(math.floor(pixel_extent / pixels_per_tick))
    return max(1, min(count, MAX_TICK_COUNT))


def nice_tick_spacing(begin: float, end: float, tick_count: int) -> float:
    """Round ``(end - begin) / tick_count`` up to the next {1, 2, 2.5, 5, 10} x 10^k."""
    if tick_count <= 0:
        raise ValueError("tick_count must be > 0")
    raw_step = (end - begin) / tick_count
    if not math.isfinite(raw_step) or raw_step <= 0:
        raise ValueError(f"tick range must be finite and increasing, got [{begin}, {end}]")
    exponent = math.floor(math.log10(raw_step))
    base = math.pow(10.0, exponent)
    fraction = raw_step / base
    best = NICE_FRACTIONS[-1]
    for nice in NICE_FRACTIONS:
        if fraction <= nice:
            best = nice
            break
    return best * base


def format_tick_label(value: float) -> str:
    text = LABEL_FORMAT % value
    stripped = text.rstrip("0")
    zeros = len(text) - len(stripped)
    if zeros >= TRAILING_ZEROS_THRESHOLD:
        return f"{stripped}+e{zeros}"
    return text


def generate_axis_ticks(
    pixel_extent: float,
    pixels_per_tick: int,
    begin: float,
    end: float,
    measure: Callable[[str], float] | None = None,
) -> AxisTicks:
    count = tick_count_for(pixel_extent, pixels_per_tick)
    spacing = nice_tick_spacing(begin, end, count)
    first = math.ceil(begin / spacing) * spacing

    values: list[float] = []
    value = first
    while value < end and len(values) < MAX_TICK_COUNT:
        if abs(value) < spacing * ZERO_SNAP_RATIO:
            value = 0.0
        values.append(value)
        value += spacing

    labels = tuple(format_tick_label(v) for v in values)
    widths = tuple(float(measure(label)) for label in labels) if measure is not None else ()
    return AxisTicks(
        count=count,
        spacing=spacing,
        first=first,
        values=tuple(values),
        labels=labels,
        label_widths=widths,
        pixels_per_tick=pixels_per_tick,
    )


def generate_fitting_ticks(
    pixel_extent: float,
    pixels_per_tick: int,
    begin: float,
    end: float,
    measure: Callable[[str], float],
    max_pixels_per_tick: int = 1000,
) -> AxisTicks:
    """Generate ticks, doubling the pixel budget while the widest label overflows it."""
    ticks = generate_axis_ticks(pixel_extent, pixels_per_tick, begin, end, measure=measure)
    if ticks.max_label_width > pixels_per_tick and pixels_per_tick < max_pixels_per_tick:
        return generate_fitting_ticks(
            pixel_extent, pixels_per_tick * 2, begin, end, measure, max_pixels_per_tick=max_pixels_per_tick
        )
    return ticks
