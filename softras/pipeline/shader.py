from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from softras.config import AMBIENT_INTENSITY, KA, KS, LIGHTS, SHININESS
from softras.errors import MissingTextureError
from softras.pipeline.texture import Texture
from softras.util.math import normalize_rows


@dataclass
class VertexPayload:
    position: np.ndarray  # (N,3) object space
    normal: Optional[np.ndarray] = None


@dataclass
class FragmentPayload:
    """Attributes interpolated at N covered samples."""
    view_pos: np.ndarray  # (N,3)
    color: np.ndarray  # (N,3)
    normal: np.ndarray  # (N,3)
    tex_coords: np.ndarray  # (N,2)
    texture: Optional[Texture] = None

    def __len__(self) -> int:
        return int(self.view_pos.shape[0])


@dataclass(frozen=True)
class Light:
    position: tuple[float, float, float]
    intensity: tuple[float, float, float]


def default_lights() -> list[Light]:
    return [Light(position=p, intensity=i) for p, i in LIGHTS]


def _with_alpha(rgb: np.ndarray) -> np.ndarray:
    return np.concatenate([rgb, np.ones((rgb.shape[0], 1))], axis=1)


class Shader:
    """Vertex and fragment hooks, configured once on a Rasterizer."""

    def vertex(self, payload: VertexPayload) -> np.ndarray:
        return payload.position

    def fragment(self, payload: FragmentPayload) -> np.ndarray:
        raise NotImplementedError


class NormalShader(Shader):
    def fragment(self, payload: FragmentPayload) -> np.ndarray:
        n = normalize_rows(payload.normal)
        return _with_alpha((n + 1.0) * 0.5)


@dataclass
class PhongShader(Shader):
    """Blinn-Phong style local illumination; everything in view space."""
    lights: Sequence[Light] = field(default_factory=default_lights)
    ambient_intensity: tuple[float, float, float] = AMBIENT_INTENSITY
    ka: tuple[float, float, float] = KA
    ks: tuple[float, float, float] = KS
    shininess: float = SHININESS
    eye: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def diffuse_color(self, payload: FragmentPayload) -> np.ndarray:
        return payload.color

    def fragment(self, payload: FragmentPayload) -> np.ndarray:
        kd = np.asarray(self.diffuse_color(payload), dtype=np.float64)
        ka = np.asarray(self.ka, dtype=np.float64)
        ks = np.asarray(self.ks, dtype=np.float64)

        pos = np.asarray(payload.view_pos, dtype=np.float64)
        n = normalize_rows(np.asarray(payload.normal, dtype=np.float64))
        view_dir = normalize_rows(np.asarray(self.eye, dtype=np.float64) - pos)

        result = np.broadcast_to(ka * np.asarray(self.ambient_intensity), pos.shape).copy()
        for light in self.lights:
            to_light = np.asarray(light.position, dtype=np.float64) - pos
            r2 = np.sum(to_light * to_light, axis=1, keepdims=True)
            r2 = np.where(r2 > 0.0, r2, np.inf)
            l = normalize_rows(to_light)
            falloff = np.asarray(light.intensity, dtype=np.float64) / r2

            n_dot_l = np.maximum(0.0, np.sum(n * l, axis=1, keepdims=True))
            h = normalize_rows(view_dir + l)
            n_dot_h = np.maximum(0.0, np.sum(n * h, axis=1, keepdims=True))

            result += kd * falloff * n_dot_l
            result += ks * falloff * n_dot_h ** self.shininess
        return _with_alpha(result)


@dataclass
class TextureShader(PhongShader):
    """Phong shading with kd taken from the bound texture."""

    def diffuse_color(self, payload: FragmentPayload) -> np.ndarray:
        if payload.texture is None:
            raise MissingTextureError("TextureShader needs a texture bound on the rasterizer")
        uv = payload.tex_coords
        return payload.texture.get_color_by_tex_coord(uv[:, 0], uv[:, 1])
