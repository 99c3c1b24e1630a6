from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import tomllib
from typing import Any


RGBA = tuple[int, int, int, int]

MAX_SERIES = 1024
MAX_GROUPS = 256

DEFAULT_PALETTE: tuple[RGBA, ...] = (
    (0xE9, 0xE9, 0xE9, 0xFF),  # white
    (0xEB, 0x35, 0x45, 0xFF),  # red
    (0x6A, 0xBD, 0x3C, 0xFF),  # green
    (0x5E, 0x6A, 0xEA, 0xFF),  # blue
    (0xF1, 0xA1, 0x29, 0xFF),  # orange
    (0xE4, 0xE6, 0x5C, 0xFF),  # yellow
    (0xB0, 0x4C, 0xE7, 0xFF),  # purple
    (0xEC, 0x73, 0x8E, 0xFF),
    (0x95, 0xDE, 0x85, 0xFF),
    (0x9E, 0xBC, 0xDE, 0xFF),
    (0xEB, 0xBA, 0x6F, 0xFF),
    (0xFE, 0xFF, 0xB2, 0xFF),
    (0xC0, 0x92, 0xFF, 0xFF),
    (0x75, 0x28, 0x28, 0xFF),
    (0x4A, 0x6D, 0x22, 0xFF),
    (0x39, 0x34, 0xA4, 0xFF),
    (0xC4, 0x60, 0x00, 0xFF),
    (0xBF, 0xB6, 0x00, 0xFF),
    (0x69, 0x1C, 0xAC, 0xFF),
)

_COLOR_FIELDS = (
    "background_color",
    "grid_color",
    "border_color",
    "axes_color",
    "text_color",
)


@dataclass(frozen=True)
class PlotConfig:
    """Session-wide tunables; immutable once a session is built."""

    max_series: int = MAX_SERIES
    max_groups: int = MAX_GROUPS
    target_fps: int = 120
    idle_sleep_s: float = 0.001
    window_width: int = 650
    window_height: int = 500
    window_title: str = "tailplot"
    x_pixels_per_tick: int = 50
    y_pixels_per_tick: int = 50
    max_pixels_per_tick: int = 1000
    font_size: float = 22.0
    font_size_large: float = 24.0
    zoom_to_zero_pixel_threshold: float = 20.0
    wheel_zoom_base: float = 1.2
    wheel_zoom_scale: float = 1.0
    tick_mark_len: int = 5
    min_plot_screen_offset: float = 8.0
    offset_normal: float = 5.0
    offset_small: float = 2.0
    border_width: float = 1.0
    background_color: RGBA = (0x25, 0x25, 0x25, 0xFF)
    grid_color: RGBA = (0xFF, 0xFF, 0xFF, 0x10)
    border_color: RGBA = (0xFF, 0xFF, 0xFF, 0xFF)
    axes_color: RGBA = (0xFF, 0xFF, 0xFF, 0x40)
    text_color: RGBA = (0xFF, 0xFF, 0xFF, 0xFF)
    palette: tuple[RGBA, ...] = DEFAULT_PALETTE

    def __post_init__(self) -> None:
        if self.max_series <= 0:
            raise ValueError("max_series must be > 0")
        if self.max_groups <= 0:
            raise ValueError("max_groups must be > 0")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        if self.idle_sleep_s < 0:
            raise ValueError("idle_sleep_s must be >= 0")
        if self.window_width <= 0 or self.window_height <= 0:
            raise ValueError("window_width/window_height must be > 0")
        if self.x_pixels_per_tick <= 0 or self.y_pixels_per_tick <= 0:
            raise ValueError("pixels per tick must be > 0")
        if self.max_pixels_per_tick < self.x_pixels_per_tick:
            raise ValueError("max_pixels_per_tick must be >= x_pixels_per_tick")
        if self.font_size <= 0 or self.font_size_large <= 0:
            raise ValueError("font sizes must be > 0")
        if self.wheel_zoom_base <= 0:
            raise ValueError("wheel_zoom_base must be > 0")
        if not self.palette:
            raise ValueError("palette must contain at least one color")
        for name in _COLOR_FIELDS:
            _validate_color(getattr(self, name), name)
        for i, color in enumerate(self.palette):
            _validate_color(color, f"palette[{i}]")

    @property
    def default_group(self) -> int:
        return self.max_groups

    def palette_color(self, series_id: int) -> RGBA:
        return self.palette[series_id % len(self.palette)]


def load_config(path: str | Path) -> PlotConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"plot config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    return config_from_mapping(raw)


def config_from_mapping(raw: dict[str, Any]) -> PlotConfig:
    known = {f.name for f in fields(PlotConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"unknown plot config keys: {', '.join(unknown)}")
    values: dict[str, Any] = dict(raw)
    for name in _COLOR_FIELDS:
        if name in values:
            values[name] = _coerce_color(values[name], name)
    if "palette" in values:
        entries = values["palette"]
        if not isinstance(entries, list):
            raise ValueError("palette must be an array of colors")
        values["palette"] = tuple(_coerce_color(c, f"palette[{i}]") for i, c in enumerate(entries))
    return PlotConfig(**values)


def _coerce_color(value: Any, name: str) -> RGBA:
    if not isinstance(value, (list, tuple)) or len(value) not in (3, 4):
        raise ValueError(f"{name} must be an array of 3 or 4 integers")
    channels = [int(c) for c in value]
    if len(channels) == 3:
        channels.append(255)
    return (channels[0], channels[1], channels[2], channels[3])


def _validate_color(color: Any, name: str) -> None:
    if not isinstance(color, tuple) or len(color) != 4:
        raise ValueError(f"{name} must be an RGBA tuple")
    if any((not isinstance(c, int)) or c < 0 or c > 255 for c in color):
        raise ValueError(f"{name} channels must be integers in [0, 255]")
