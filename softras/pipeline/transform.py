from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from softras.config import DEPTH_FAR, DEPTH_NEAR
from softras.util.math import perspective, rotation, translate


def view_matrix(eye) -> np.ndarray:
    """Camera at `eye` looking down -z: a pure translation by -eye."""
    return translate(-np.asarray(eye, dtype=np.float64))


def model_matrix(angle_deg: float = 0.0, axis=(0.0, 0.0, 1.0)) -> np.ndarray:
    if angle_deg == 0.0:
        return np.eye(4)
    return rotation(axis, angle_deg)


def projection_matrix(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    return perspective(fov_deg, aspect, near, far)


def depth_remap() -> tuple[float, float]:
    """Return (f1, f2) for z' = z * f1 + f2."""
    f1 = (DEPTH_FAR - DEPTH_NEAR) / 2.0
    f2 = (DEPTH_FAR + DEPTH_NEAR) / 2.0
    return f1, f2


@dataclass
class Transform:
    model: np.ndarray = field(default_factory=lambda: np.eye(4))
    view: np.ndarray = field(default_factory=lambda: np.eye(4))
    projection: np.ndarray = field(default_factory=lambda: np.eye(4))

    def mvp(self) -> np.ndarray:
        return self.projection @ self.view @ self.model

    def model_view(self) -> np.ndarray:
        return self.view @ self.model

    def normal_matrix(self) -> np.ndarray:
        """Inverse-transpose of the model-view 3x3, for transforming normals."""
        mv = self.model_view()[:3, :3]
        try:
            return np.linalg.inv(mv).T
        except np.linalg.LinAlgError:
            return mv


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int

    def to_screen(self, clip: np.ndarray) -> np.ndarray:
        """Map (N,4) clip coordinates to (N,4) screen x, y, depth z and clip w.

        x, y are in pixels with y growing upward; z is in depth-buffer space.
        """
        clip = np.asarray(clip, dtype=np.float64)
        w = clip[:, 3].copy()
        # w == 0 would be a vertex on the camera plane; leave it undivided.
        safe_w = np.where(w != 0.0, w, 1.0)
        ndc = clip[:, :3] / safe_w[:, None]
        f1, f2 = depth_remap()
        out = np.empty((clip.shape[0], 4))
        out[:, 0] = 0.5 * self.width * (ndc[:, 0] + 1.0)
        out[:, 1] = 0.5 * self.height * (ndc[:, 1] + 1.0)
        out[:, 2] = ndc[:, 2] * f1 + f2
        out[:, 3] = w
        return out

    def project(self, mvp: np.ndarray, positions: np.ndarray) -> np.ndarray:
        """Object-space (N,3) points -> (N,4) screen space via `mvp`."""
        pts = np.asarray(positions, dtype=np.float64)
        homo = np.concatenate([pts, np.ones((pts.shape[0], 1))], axis=1)
        return self.to_screen(homo @ mvp.T)
