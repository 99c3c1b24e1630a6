from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FrameRateController:
    """Frame cadence for the render loop."""

    target_fps: int

    def __post_init__(self) -> None:
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")

    @property
    def target_dt(self) -> float:
        return 1.0 / float(self.target_fps)

    def compute_sleep(self, frame_started_at: float, frame_finished_at: float) -> float:
        elapsed = max(0.0, frame_finished_at - frame_started_at)
        return max(0.0, self.target_dt - elapsed)
