import numpy as np
import pytest

from softras.pipeline.rasterizer import Rasterizer
from softras.pipeline.shader import NormalShader, PhongShader
from softras.scenes import (
    ColoredTrianglesScene,
    ModelScene,
    TriangleScene,
    make_scene,
    make_shader,
)


def test_colored_triangles_near_one_in_front():
    rast = Rasterizer(100, 100, 2)
    scene = ColoredTrianglesScene()
    scene.setup(rast)
    scene.render(rast, 0.0)
    px = np.rint(rast.get_pixel(50, 60) * 255)
    np.testing.assert_array_equal(px, [217, 238, 185, 255])
    np.testing.assert_allclose(rast.get_pixel(2, 2), [0, 0, 0, 1])


def test_render_is_repeatable():
    rast = Rasterizer(64, 64, 2)
    scene = ColoredTrianglesScene()
    scene.setup(rast)
    scene.render(rast, 10.0)
    first = rast.dump_u8norm()
    scene.render(rast, 10.0)
    assert rast.dump_u8norm() == first


def test_wireframe_triangle_scene():
    rast = Rasterizer(64, 64, 1)
    scene = TriangleScene()
    scene.setup(rast)
    scene.render(rast, 30.0)
    assert (rast.frame_buffer[..., :3] == 1.0).all(axis=-1).any()


def test_model_scene_normal_shader(tmp_path):
    path = tmp_path / "tri.obj"
    path.write_text(
        "v -1 -1 0\nv 1 -1 0\nv 0 1 0\n"
        "vn 0 0 1\n"
        "f 1//1 2//1 3//1\n"
    )
    rast = Rasterizer(64, 64, 1)
    scene = ModelScene(str(path), shader="normal")
    scene.setup(rast)
    assert isinstance(rast.shader, NormalShader)
    scene.render(rast, 0.0)
    np.testing.assert_allclose(rast.get_pixel(32, 32), [0.5, 0.5, 1.0, 1.0], atol=1e-6)
    np.testing.assert_allclose(rast.get_pixel(0, 0), [0, 0, 0, 1])


def test_make_scene_and_shader():
    assert isinstance(make_scene("colored"), ColoredTrianglesScene)
    assert isinstance(make_scene("triangle"), TriangleScene)
    assert isinstance(make_shader("phong"), PhongShader)
    with pytest.raises(ValueError):
        make_scene("model")
    with pytest.raises(ValueError):
        make_scene("teapot")
    with pytest.raises(ValueError):
        make_shader("toon")
