import numpy as np
import logging
from typing import Sequence, Tuple
from collections import deque

logger = logging.getLogger(__name__)

STATE_DIM = 6


class KalmanEstimator:
    """
    Constant-acceleration Kalman filter over [x, y, vx, vy, ax, ay].

    Velocity and acceleration follow the track's screen convention: vy > 0
    means moving up the frame, so y decreases as vy * dt.
    The filter observes the full state vector.
    """

    def __init__(self, dt: float = 1/30, process_noise: float = 0.01, measurement_noise: float = 5.0):
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        self.dt = dt
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise

        self.F = np.array([
            [1, 0, dt, 0, 0.5*dt**2, 0],
            [0, 1, 0, -dt, 0, -0.5*dt**2],
            [0, 0, 1, 0, dt, 0],
            [0, 0, 0, 1, 0, dt],
            [0, 0, 0, 0, 1, 0],
            [0, 0, 0, 0, 0, 1]
        ], dtype=np.float64)

        self.H = np.eye(STATE_DIM, dtype=np.float64)

        self.Q = np.eye(STATE_DIM, dtype=np.float64) * process_noise
        self.Q[4:, 4:] *= 2.0

        self.R = np.eye(STATE_DIM, dtype=np.float64) * measurement_noise

        self.x = np.zeros((STATE_DIM, 1), dtype=np.float64)
        self.P = np.eye(STATE_DIM, dtype=np.float64) * 100.0

        self.innovation_history = deque(maxlen=10)

    @classmethod
    def initiate(cls, x: float, y: float, **kwargs) -> 'KalmanEstimator':
        kf = cls(**kwargs)
        kf.x[0, 0] = x
        kf.x[1, 0] = y
        return kf

    def predict(self) -> None:
        self.x = self.F @ self.x
        self.P = self.F @ self.P @ self.F.T + self.Q

        self.P = (self.P + self.P.T) / 2

    def correct(self, observation: Sequence[float]) -> None:
        z = np.asarray(observation, dtype=np.float64).reshape(-1, 1)
        if z.shape[0] != STATE_DIM:
            raise ValueError(f"Expected a {STATE_DIM}-element observation, got {z.shape[0]}")

        y = z - self.H @ self.x
        self.innovation_history.append(float(np.linalg.norm(y)))

        S = self.H @ self.P @ self.H.T + self.R
        S = (S + S.T) / 2

        try:
            S_inv = np.linalg.inv(S)
        except np.linalg.LinAlgError:
            logger.warning("Singular covariance matrix, adding regularization")
            S += np.eye(STATE_DIM) * 1e-4
            S_inv = np.linalg.inv(S)

        K = self.P @ self.H.T @ S_inv
        self.x = self.x + K @ y
        self.P = (np.eye(STATE_DIM) - K @ self.H) @ self.P

        self.P = (self.P + self.P.T) / 2

    def current_estimate(self) -> np.ndarray:
        return self.x.flatten()

    def get_velocity(self) -> Tuple[float, float]:
        return float(self.x[2, 0]), float(self.x[3, 0])

    def is_stable(self) -> bool:
        if len(self.innovation_history) < 5:
            return True

        recent_innovations = list(self.innovation_history)[-5:]
        return np.std(recent_innovations) < 50.0
