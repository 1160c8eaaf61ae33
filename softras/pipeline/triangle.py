from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from softras.errors import BufferLengthError, ColorRangeError, IndexOutOfRangeError


def _zeros(*shape: int):
    return field(default_factory=lambda: np.zeros(shape))


def _opaque_black():
    return field(default_factory=lambda: np.tile([0.0, 0.0, 0.0, 1.0], (3, 1)))


def as_rgba(colors) -> np.ndarray:
    colors = np.asarray(colors, dtype=np.float64)
    if colors.shape[-1] == 3:
        alpha = np.ones(colors.shape[:-1] + (1,))
        colors = np.concatenate([colors, alpha], axis=-1)
    return colors


def check_colors(colors: np.ndarray) -> None:
    colors = np.asarray(colors, dtype=np.float64)
    if colors.size and (colors.min() < 0.0 or colors.max() > 1.0):
        raise ColorRangeError(
            f"color channels must lie in [0, 1], got range [{colors.min():g}, {colors.max():g}]"
        )


@dataclass
class BoundingBox:
    """Pixel-boundary box: pixels x_min..x_max-1, y_min..y_max-1."""
    x_min: int
    y_min: int
    x_max: int
    y_max: int

    @property
    def is_empty(self) -> bool:
        return self.x_max <= self.x_min or self.y_max <= self.y_min

    def clamp(self, width: int, height: int) -> "BoundingBox":
        return BoundingBox(
            x_min=max(self.x_min, 0),
            y_min=max(self.y_min, 0),
            x_max=min(self.x_max, width),
            y_max=min(self.y_max, height),
        )


@dataclass
class Triangle:
    """One triangle's per-vertex attributes.

    `v` rows are (x, y, z, w): object space (w=1) before transformation,
    screen x/y, depth-buffer z and clip w after it.
    """
    v: np.ndarray = _zeros(3, 4)
    color: np.ndarray = _opaque_black()
    tex_coords: np.ndarray = _zeros(3, 2)
    normal: np.ndarray = _zeros(3, 3)
    view_pos: np.ndarray = _zeros(3, 3)

    @classmethod
    def from_points(cls, a, b, c) -> "Triangle":
        pts = np.asarray([a, b, c], dtype=np.float64)
        v = np.ones((3, 4))
        v[:, : pts.shape[1]] = pts
        return cls(v=v)

    def set_vertex(self, i: int, pos) -> None:
        pos = np.asarray(pos, dtype=np.float64)
        self.v[i, : pos.shape[0]] = pos

    def set_color(self, i: int, color) -> None:
        color = np.asarray(color, dtype=np.float64)
        check_colors(color)
        self.color[i, : color.shape[0]] = color

    def set_tex_coords(self, i: int, s: float, t: float) -> None:
        self.tex_coords[i] = (s, t)

    def set_normal(self, i: int, normal) -> None:
        self.normal[i] = np.asarray(normal, dtype=np.float64)[:3]

    def bounding_box(self) -> BoundingBox:
        xs = self.v[:, 0]
        ys = self.v[:, 1]
        return BoundingBox(
            x_min=math.floor(xs.min()),
            y_min=math.floor(ys.min()),
            x_max=math.ceil(xs.max()),
            y_max=math.ceil(ys.max()),
        )


def barycentric(x, y, v: np.ndarray) -> Optional[np.ndarray]:
    """Signed barycentric weights of points (x, y) against the xy of `v`.

    Returns an array of shape (..., 3), or None for a zero-area triangle.
    """
    x0, y0 = v[0, 0], v[0, 1]
    x1, y1 = v[1, 0], v[1, 1]
    x2, y2 = v[2, 0], v[2, 1]
    area = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
    if area == 0.0 or not np.isfinite(area):
        return None
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    c0 = ((x1 - x) * (y2 - y) - (x2 - x) * (y1 - y)) / area
    c1 = ((x2 - x) * (y0 - y) - (x0 - x) * (y2 - y)) / area
    c2 = ((x0 - x) * (y1 - y) - (x1 - x) * (y0 - y)) / area
    return np.stack([c0, c1, c2], axis=-1)


def check_indices(indices: np.ndarray, name: str, length: int) -> None:
    if indices.size and int(indices.max()) >= length:
        raise IndexOutOfRangeError(
            f"index {int(indices.max())} out of range for {name} buffer of length {length}"
        )


def assemble(
    screen: np.ndarray,
    indices: np.ndarray,
    *,
    colors: Optional[np.ndarray] = None,
    normals: Optional[np.ndarray] = None,
    tex_coords: Optional[np.ndarray] = None,
    view_pos: Optional[np.ndarray] = None,
) -> list[Triangle]:
    """Gather per-vertex attributes for each index triple into Triangles."""
    check_indices(indices, "position", screen.shape[0])
    if colors is not None:
        check_indices(indices, "color", colors.shape[0])
        check_colors(colors[np.unique(indices)])
    if normals is not None:
        check_indices(indices, "normal", normals.shape[0])
    if tex_coords is not None:
        check_indices(indices, "tex_coord", tex_coords.shape[0])
    for name, attr in (("color", colors), ("normal", normals), ("tex_coord", tex_coords), ("view_pos", view_pos)):
        if attr is not None and attr.shape[0] != screen.shape[0]:
            raise BufferLengthError(
                f"{name} buffer has {attr.shape[0]} entries for {screen.shape[0]} positions"
            )

    triangles = []
    for tri in indices:
        t = Triangle(v=screen[tri].copy())
        if colors is not None:
            t.color = colors[tri].copy()
        if normals is not None:
            t.normal = normals[tri].copy()
        if tex_coords is not None:
            t.tex_coords = tex_coords[tri].copy()
        if view_pos is not None:
            t.view_pos = view_pos[tri].copy()
        triangles.append(t)
    return triangles
