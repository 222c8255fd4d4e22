"""
Track history buffers.

LineHistory keeps the most recent trail points for display and velocity
estimation. SampleHistory records every update with its timestamp and
confidence until the owner clears or drains it.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

Point = Tuple[int, int]


@dataclass(frozen=True)
class TrackSample:
    timestamp: float
    x: int
    y: int
    confidence: float

    def as_tuple(self) -> Tuple[float, int, int, float]:
        return (self.timestamp, self.x, self.y, self.confidence)


class LineHistory:
    """Fixed-capacity ring of (x, y) points, oldest evicted first."""

    def __init__(self, maxlen: int = 72):
        if maxlen <= 0:
            raise ValueError(f"LineHistory capacity must be positive, got {maxlen}")
        self._points = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._points.maxlen

    def append(self, point: Point):
        self._points.append(point)

    def lag(self, steps: int) -> Point:
        """Point `steps` insertions back from the tail (1 is the tail)."""
        return self._points[-steps]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(tuple(self._points))


class SampleHistory:
    """Append-only sample log; unbounded unless a capacity is given."""

    def __init__(self, maxlen: Optional[int] = None):
        if maxlen is not None and maxlen <= 0:
            raise ValueError(f"SampleHistory capacity must be positive, got {maxlen}")
        self._samples = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> Optional[int]:
        return self._samples.maxlen

    def append(self, sample: TrackSample):
        self._samples.append(sample)

    def clear(self):
        self._samples.clear()

    def drain(self) -> List[TrackSample]:
        samples = list(self._samples)
        self._samples.clear()
        return samples

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TrackSample]:
        return iter(tuple(self._samples))
