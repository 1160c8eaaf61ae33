from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from softras.pipeline.rasterizer import Rasterizer


def ndc(sx: float, sy: float, size: tuple[int, int], z: float = 0.0) -> tuple[float, float, float]:
    """Object-space point that lands on screen (sx, sy) under identity matrices."""
    w, h = size
    return (2.0 * sx / w - 1.0, 2.0 * sy / h - 1.0, z)


@pytest.fixture
def rast() -> Rasterizer:
    return Rasterizer(700, 700, 2)


@pytest.fixture
def small() -> Rasterizer:
    return Rasterizer(4, 4, 2)


@pytest.fixture
def obj_quad(tmp_path):
    path = tmp_path / "quad.obj"
    path.write_text(
        "# unit quad\n"
        "o quad\n"
        "v -1 -1 0\nv 1 -1 0\nv 1 1 0\nv -1 1 0\n"
        "vt 0 0\nvt 1 0\nvt 1 1\nvt 0 1\n"
        "vn 0 0 1\n"
        "f 1/1/1 2/2/1 3/3/1 4/4/1\n"
    )
    return path


@pytest.fixture
def rgb_2x2() -> np.ndarray:
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )
