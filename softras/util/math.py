from __future__ import annotations
import numpy as np

def normalize_rows(v: np.ndarray) -> np.ndarray:
    """Normalize each row of an (N, k) array; zero rows stay zero."""
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    return np.divide(v, n, out=np.zeros_like(v, dtype=np.float64), where=n > 0)

def translate(offset) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = np.asarray(offset, dtype=np.float64)
    return m

def rotation(axis, angle_deg: float) -> np.ndarray:
    """Return a row-major 4x4 rotation about `axis` by `angle_deg` degrees."""
    # Rodrigues' rotation formula.
    a = np.asarray(axis, dtype=np.float64)
    n = np.linalg.norm(a)
    if n == 0:
        return np.eye(4)
    a = a / n
    theta = np.deg2rad(angle_deg)
    c = float(np.cos(theta))
    s = float(np.sin(theta))
    k = np.array([
        [0.0, -a[2], a[1]],
        [a[2], 0.0, -a[0]],
        [-a[1], a[0], 0.0],
    ])
    m = np.eye(4)
    m[:3, :3] = c * np.eye(3) + (1.0 - c) * np.outer(a, a) + s * k
    return m

def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Return a row-major projection matrix; clip w is view-space z.

    `top` is negative so that the divide by a negative view-space depth
    (camera looks down -z) keeps +x right and +y up.
    """
    top = -float(np.tan(np.deg2rad(fov_deg) / 2.0)) * abs(near)
    right = top * aspect
    m = np.zeros((4, 4))
    m[0, 0] = near / right
    m[1, 1] = near / top
    m[2, 2] = (near + far) / (near - far)
    m[2, 3] = (2.0 * near * far) / (far - near)
    m[3, 2] = 1.0
    return m
