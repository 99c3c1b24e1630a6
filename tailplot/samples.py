from __future__ import annotations

import numpy as np


class SampleBuffer:
    """Growable float64 storage with amortised O(1) appends."""

    __slots__ = ("_data", "_size")

    def __init__(self, initial_capacity: int = 0) -> None:
        if initial_capacity < 0:
            raise ValueError("initial_capacity must be >= 0")
        self._data = np.empty(initial_capacity, dtype=np.float64)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return int(self._data.size)

    def view(self) -> np.ndarray:
        """No-copy view of the live samples; invalidated by the next resize."""
        return self._data[: self._size]

    def append(self, value: float) -> None:
        self._reserve(self._size + 1)
        self._data[self._size] = value
        self._size += 1

    def extend(self, values: np.ndarray) -> None:
        n = int(values.size)
        if n == 0:
            return
        self._reserve(self._size + n)
        self._data[self._size : self._size + n] = values
        self._size += n

    def clear(self, *, release: bool = False) -> None:
        self._size = 0
        if release:
            self._data = np.empty(0, dtype=np.float64)

    def _reserve(self, needed: int) -> None:
        if needed <= self._data.size:
            return
        new_capacity = max(needed, 2 * int(self._data.size), 16)
        grown = np.empty(new_capacity, dtype=np.float64)
        grown[: self._size] = self._data[: self._size]
        self._data = grown
