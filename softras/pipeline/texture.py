from __future__ import annotations

import logging

import numpy as np
import pygame

from softras.config import SENTINEL_COLOR
from softras.errors import ResourceError

log = logging.getLogger(__name__)


class Texture:
    """An 8-bit RGB image with bilinear lookup.

    Pixel space: x is the column, y the row (row 0 = top of the image).
    """

    def __init__(self, rgb: np.ndarray) -> None:
        rgb = np.asarray(rgb)
        if rgb.ndim != 3 or rgb.shape[2] < 3:
            raise ValueError(f"texture must be (H, W, 3), got {rgb.shape}")
        self._data = rgb[:, :, :3].astype(np.float32) / 255.0
        self._sentinel = np.asarray(SENTINEL_COLOR, dtype=np.float32)

    @classmethod
    def from_file(cls, path: str) -> "Texture":
        try:
            surf = pygame.image.load(path)
        except (pygame.error, FileNotFoundError) as e:
            raise ResourceError(f"Failed to load texture {path!r}") from e
        w, h = surf.get_size()
        data = pygame.image.tostring(surf, "RGB", False)
        rgb = np.frombuffer(data, dtype=np.uint8).reshape(h, w, 3)
        log.debug("texture %s loaded (%dx%d)", path, w, h)
        return cls(rgb)

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    def _texels(self, xi: np.ndarray, yi: np.ndarray) -> np.ndarray:
        inside = (xi >= 0) & (xi < self.width) & (yi >= 0) & (yi < self.height)
        out = np.empty(xi.shape + (3,), dtype=np.float32)
        out[...] = self._sentinel
        out[inside] = self._data[yi[inside], xi[inside]]
        return out

    def get_color(self, x, y) -> np.ndarray:
        """Bilinear lookup at continuous pixel coordinates; shape (..., 3)."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x0 = np.floor(x)
        y0 = np.floor(y)
        fx = (x - x0)[..., None]
        fy = (y - y0)[..., None]
        x0 = x0.astype(np.int64)
        y0 = y0.astype(np.int64)
        x1 = np.ceil(x).astype(np.int64)
        y1 = np.ceil(y).astype(np.int64)

        c00 = self._texels(x0, y0)
        c10 = self._texels(x1, y0)
        c01 = self._texels(x0, y1)
        c11 = self._texels(x1, y1)

        # Along x first, then y.
        top = c00 * (1.0 - fx) + c10 * fx
        bottom = c01 * (1.0 - fx) + c11 * fx
        return (top * (1.0 - fy) + bottom * fy).astype(np.float32)

    def get_color_by_tex_coord(self, u, v) -> np.ndarray:
        u = np.asarray(u, dtype=np.float64)
        v = np.asarray(v, dtype=np.float64)
        return self.get_color(u * (self.width - 1), v * (self.height - 1))
