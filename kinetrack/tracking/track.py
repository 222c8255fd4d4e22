import math
import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .estimator import RecursiveEstimator
from .history import LineHistory, SampleHistory, TrackSample, Point
from .kalman_filter import KalmanEstimator
from ..utils.tracking_config import TrackingConfig

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int, int, int]


def _round_px(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_magnitude(value: float, limit: float) -> float:
    return value if abs(value) <= limit else math.copysign(limit, value)


class Track:
    """
    Motion state of a single tracked subject.

    Updated once per frame by the owning manager, either with a confirmed
    detection (`update_location`) or by self-extrapolation
    (`predict_trajectory`). The current cost of non-assignment grows while
    the track runs on predictions and is read by the assignment solver.
    """

    def __init__(
        self,
        x: float,
        y: float,
        position_bounds: Bounds,
        color: Any = None,
        estimator: Optional[RecursiveEstimator] = None,
        config: Optional[TrackingConfig] = None
    ):
        x_min, x_max, y_min, y_max = position_bounds
        if x_min > x_max or y_min > y_max:
            raise ValueError(f"Inverted position bounds: {position_bounds}")

        # maximum possible distance, the diagonal of the frame
        self.max_cost = math.hypot(x_max - x_min, y_max - y_min)
        if self.max_cost <= 0:
            raise ValueError(f"Degenerate position bounds: {position_bounds}")

        self.config = config or TrackingConfig()
        self.position_bounds = tuple(position_bounds)
        self.color = color
        self.debug = self.config.debug

        self.x, self.y = _round_px(x), _round_px(y)
        self._apply_bounds()

        self.vx = 0.0
        self.vy = 0.0
        self.ax = 0.0   # never updated here, fed to the estimator as-is
        self.ay = 0.0
        self.heading = 0.0

        self.time_steps_predicted = 0
        self.confidence = 1.0
        self._curr_cost = self.config.default_cost

        self.line_points = LineHistory(self.config.line_history_size)
        self.data_points = SampleHistory(self.config.sample_history_size)

        # without an explicit filter_dt the stock filter is built from the first dt seen
        self.estimator = estimator
        if self.estimator is None and self.config.filter_dt is not None:
            self.estimator = self._build_estimator(self.config.filter_dt)

    def __repr__(self) -> str:
        return f"Track at [{self.x},{self.y}] with color {self.color}"

    @property
    def position(self) -> Point:
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.vx, self.vy

    def get_curr_cost(self) -> float:
        return self._curr_cost

    def set_curr_cost(self, value: float):
        self._curr_cost = value

    def clear_points(self):
        """Empty the sample history; the line history is kept for the trail."""
        self.data_points.clear()

    def drain_points(self) -> List[TrackSample]:
        return self.data_points.drain()

    def iter_line_points(self) -> Iterator[Point]:
        return iter(self.line_points)

    def iter_data_points(self) -> Iterator[TrackSample]:
        return iter(self.data_points)

    def update_location(self, x: float, y: float, dt: float, timestamp: float, is_predicted: bool = False):
        """Called once per frame, after assignments have been solved."""
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if self.estimator is None:
            self.estimator = self._build_estimator(dt)

        max_frames = self.config.max_frames_predict

        if is_predicted:
            self.time_steps_predicted += 1

            if self.time_steps_predicted >= max_frames:
                self._curr_cost = self.max_cost
                self.confidence = 0.0
            else:
                self._curr_cost = (self._curr_cost + self.time_steps_predicted) % self.max_cost
                self.confidence = 1.0 - self.time_steps_predicted / max_frames

            if self.debug:
                logger.debug(f"{self!r}: predicted step {self.time_steps_predicted}, cost {self._curr_cost:.2f}")
        else:
            self.time_steps_predicted = 0
            self._curr_cost = self.config.default_cost
            self.confidence = 1.0

        self.x, self.y = _round_px(x), _round_px(y)
        self._apply_bounds()

        # velocity reads the tail of the trail, so it must run before the append
        self._update_velocity(dt)

        self.data_points.append(TrackSample(timestamp, self.x, self.y, self.confidence))
        self.line_points.append((self.x, self.y))

        self._sync_estimator()

    def predict_trajectory(self, dt: float, timestamp: float):
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if self.estimator is None:
            self.estimator = self._build_estimator(dt)

        pred_x, pred_y, pred_vx, pred_vy = self._predicted_state()[:4]

        if self.debug:
            logger.debug(
                f"Current [({self.x},{self.y})({self.vx:.3f},{self.vy:.3f})], "
                f"estimation: ({pred_x:.2f},{pred_y:.2f},{pred_vx:.3f},{pred_vy:.3f})"
            )

        # stop dead-reckoning once the prediction horizon is spent
        if self.config.predict_with_velocity and self.time_steps_predicted < self.config.max_frames_predict:
            thresh = self.config.displacement_threshold

            new_x = _round_px(self.x + pred_vx * dt)
            new_y = _round_px(self.y - pred_vy * dt)
            if abs(new_x - pred_x) > thresh:
                new_x = _round_px(pred_x)
            if abs(new_y - pred_y) > thresh:
                new_y = _round_px(pred_y)
        else:
            new_x = _round_px(pred_x)
            new_y = _round_px(pred_y)

        if self.debug:
            logger.debug(f"New coordinates: ({new_x}, {new_y})")

        self.update_location(new_x, new_y, dt, timestamp, is_predicted=True)

    def _build_estimator(self, dt: float) -> KalmanEstimator:
        return KalmanEstimator.initiate(
            self.x, self.y,
            dt=dt,
            process_noise=self.config.process_noise,
            measurement_noise=self.config.measurement_noise
        )

    def _apply_bounds(self):
        x_min, x_max, y_min, y_max = self.position_bounds
        self.x = min(max(self.x, x_min), x_max)
        self.y = min(max(self.y, y_min), y_max)

    def _update_velocity(self, dt: float):
        lag = self.config.velocity_lag

        # the point being added counts towards the lag window
        if len(self.line_points) < lag:
            self.vx = 0.0
            self.vy = 0.0
        else:
            prev_x, prev_y = self.line_points.lag(lag)
            self.vx = (self.x - prev_x) / (lag * dt)
            # y grows downward in image coordinates
            self.vy = (prev_y - self.y) / (lag * dt)

        self.vx = _clamp_magnitude(self.vx, self.config.max_velocity)
        self.vy = _clamp_magnitude(self.vy, self.config.max_velocity)

    def _sync_estimator(self):
        observation = (self.x, self.y, self.vx, self.vy, self.ax, self.ay)
        self.estimator.predict()
        self.estimator.correct(observation)

        if self.debug:
            logger.debug(
                f"Updating filter: {self.x} {self.y} {self.vx:.4f} {self.vy:.4f}, "
                f"estimate: {self._format_estimate()}"
            )
            if isinstance(self.estimator, KalmanEstimator) and not self.estimator.is_stable():
                logger.debug("Kalman filter unstable")

    def _predicted_state(self) -> Sequence[float]:
        # probe only: the following update runs the real predict/correct cycle
        self.estimator.predict()
        state = np.asarray(self.estimator.current_estimate(), dtype=np.float64).ravel()
        if state.shape[0] < 4:
            raise ValueError(f"Estimator state must hold at least x, y, vx, vy; got {state.shape[0]} values")
        return state

    def _format_estimate(self) -> str:
        state = np.asarray(self.estimator.current_estimate()).ravel()
        return '[' + ', '.join(f"{v:.2f}" for v in state) + ']'
