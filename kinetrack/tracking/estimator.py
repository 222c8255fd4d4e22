from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np


class RecursiveEstimator(Protocol):
    """Predict/correct state estimator owned by a single Track.

    The state estimate holds at least ``x, y, vx, vy``; the observation passed
    to ``correct`` is ``(x, y, vx, vy, ax, ay)``.
    """

    def predict(self) -> None:
        ...

    def correct(self, observation: Sequence[float]) -> None:
        ...

    def current_estimate(self) -> np.ndarray:
        ...
