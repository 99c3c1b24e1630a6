from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from tailplot.errors import MalformedLengthError, PlotInputError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def coerce_samples(value: Any, *, label: str = "values") -> np.ndarray:
    """Return a fresh 1-D float64 copy of producer-owned samples."""
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotInputError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy().copy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotInputError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        try:
            arr = np.asarray(value)
        except ValueError as exc:
            raise PlotInputError(f"{label} must be a flat sequence of numbers") from exc
        if arr.dtype.kind not in {"i", "u", "f", "b"}:
            arr = np.asarray(value, dtype=object)
        return _coerce_ndarray(arr, label=label)

    raise PlotInputError(f"unsupported {label} input type: {type(value)!r}")


def coerce_points(x: Any, y: Any) -> tuple[np.ndarray, np.ndarray]:
    x_arr = coerce_samples(x, label="x")
    y_arr = coerce_samples(y, label="y")
    if x_arr.shape != y_arr.shape:
        raise MalformedLengthError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")
    return x_arr, y_arr


def split_interleaved(xy: Any) -> tuple[np.ndarray, np.ndarray]:
    """Split [x0, y0, x1, y1, ...] into separate x and y arrays."""
    flat = coerce_samples(xy, label="xy")
    if flat.size % 2 != 0:
        raise MalformedLengthError(f"interleaved xy input must have even length, got {flat.size}")
    return flat[0::2].copy(), flat[1::2].copy()


def coerce_scalar(value: Any, *, label: str = "value") -> float:
    if isinstance(value, (str, bytes, bytearray)):
        raise PlotInputError(f"{label} must be numeric, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise PlotInputError(f"{label} must be numeric, got {value!r}") from exc


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.ndim != 1:
        raise PlotInputError(f"{label} must be 1-D")
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=True)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        if isinstance(raw, (str, bytes, bytearray)):
            raise PlotInputError(f"{label} contains non-numeric value at index {i}: {raw!r}")
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotInputError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
