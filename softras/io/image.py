from __future__ import annotations

import logging

import numpy as np
import pygame

from softras.errors import ResourceError

log = logging.getLogger(__name__)


def save_rgba(data: bytes, width: int, height: int, path: str) -> None:
    """Encode a dense row-major RGBA byte array (row 0 = top)."""
    surf = pygame.image.frombuffer(data, (int(width), int(height)), "RGBA")
    try:
        pygame.image.save(surf, path)
    except (pygame.error, OSError) as e:
        raise ResourceError(f"Failed to write image {path!r}") from e
    log.debug("wrote %s (%dx%d)", path, width, height)


def save_image(rasterizer, path: str) -> None:
    save_rgba(rasterizer.dump_u8norm(), rasterizer.width, rasterizer.height, path)


def save_depth_image(rasterizer, path: str) -> None:
    grey = rasterizer.depth_image()
    h, w = grey.shape
    rgba = np.empty((h, w, 4), dtype=np.uint8)
    rgba[..., :3] = grey[..., None]
    rgba[..., 3] = 255
    save_rgba(rgba.tobytes(order="C"), w, h, path)
