from __future__ import annotations

import logging
from typing import Optional

from softras.config import (
    ASPECT,
    FAR,
    FOV_DEG,
    MODEL_AXIS,
    MODEL_COLOR,
    MODEL_EYE,
    NEAR,
    TRIANGLE_EYE,
)
from softras.io.obj import Mesh, load_obj
from softras.pipeline.rasterizer import BufferKind, PrimitiveKind, Rasterizer
from softras.pipeline.shader import NormalShader, PhongShader, Shader, TextureShader
from softras.pipeline.texture import Texture
from softras.pipeline.transform import model_matrix, projection_matrix, view_matrix

log = logging.getLogger(__name__)

SHADERS = {
    "normal": NormalShader,
    "phong": PhongShader,
    "texture": TextureShader,
}


def make_shader(name: str) -> Shader:
    try:
        return SHADERS[name]()
    except KeyError:
        raise ValueError(f"unknown shader {name!r}; choose from {sorted(SHADERS)}") from None


class Scene:
    eye = TRIANGLE_EYE
    axis = (0.0, 0.0, 1.0)

    def setup(self, rast: Rasterizer) -> None:
        """Load buffers and bind state; called once per rasterizer."""

    def draw(self, rast: Rasterizer) -> None:
        raise NotImplementedError

    def render(self, rast: Rasterizer, angle: float) -> None:
        rast.clear(BufferKind.ALL)
        rast.set_model(model_matrix(angle, self.axis))
        rast.set_view(view_matrix(self.eye))
        rast.set_projection(projection_matrix(FOV_DEG, ASPECT, NEAR, FAR))
        self.draw(rast)


class TriangleScene(Scene):
    """A single white wireframe triangle spun about z."""

    def setup(self, rast: Rasterizer) -> None:
        self._pos = rast.load_positions([(2.0, 0.0, -2.0), (0.0, 2.0, -2.0), (-2.0, 0.0, -2.0)])
        self._ind = rast.load_indices([(0, 1, 2)])

    def draw(self, rast: Rasterizer) -> None:
        rast.draw(self._pos, self._ind, primitive=PrimitiveKind.LINE)


class ColoredTrianglesScene(Scene):
    """Two interpenetrating flat-colored triangles at different depths."""

    def setup(self, rast: Rasterizer) -> None:
        self._pos = rast.load_positions([
            (2.0, 0.0, -2.0), (0.0, 2.0, -2.0), (-2.0, 0.0, -2.0),
            (3.5, -1.0, -5.0), (2.5, 1.5, -5.0), (-1.0, 0.5, -5.0),
        ])
        self._ind = rast.load_indices([(0, 1, 2), (3, 4, 5)])
        self._col = rast.load_colors(
            [
                (217.0, 238.0, 185.0), (217.0, 238.0, 185.0), (217.0, 238.0, 185.0),
                (185.0, 217.0, 238.0), (185.0, 217.0, 238.0), (185.0, 217.0, 238.0),
            ],
            scale=255.0,
        )

    def draw(self, rast: Rasterizer) -> None:
        rast.draw(self._pos, self._ind, self._col)


class ModelScene(Scene):
    """An OBJ model shaded per fragment and rotated about `axis`."""
    eye = MODEL_EYE
    axis = MODEL_AXIS

    def __init__(self, model_path: str, *, shader: str = "phong", texture_path: Optional[str] = None) -> None:
        self.model_path = model_path
        self.shader_name = shader
        self.texture_path = texture_path
        self.meshes: list[Mesh] = []
        self._triangles = []

    def setup(self, rast: Rasterizer) -> None:
        self.meshes = load_obj(self.model_path)
        self._triangles = [t for mesh in self.meshes for t in mesh.triangles(MODEL_COLOR)]
        rast.set_shader(make_shader(self.shader_name))
        if self.texture_path:
            rast.set_texture(Texture.from_file(self.texture_path))
        log.info("model %s: %d triangles", self.model_path, len(self._triangles))

    def draw(self, rast: Rasterizer) -> None:
        rast.draw_triangle_list(self._triangles)


def make_scene(name: str, *, model: Optional[str] = None, shader: str = "phong", texture: Optional[str] = None) -> Scene:
    if name == "triangle":
        return TriangleScene()
    if name == "colored":
        return ColoredTrianglesScene()
    if name == "model":
        if not model:
            raise ValueError("the model scene needs --model PATH")
        return ModelScene(model, shader=shader, texture_path=texture)
    raise ValueError(f"unknown scene {name!r}")
