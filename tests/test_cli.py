import numpy as np
import pygame

from softras.cli import _parse_args, main
from softras.render.presenter import quad_vertices
from softras.render.shaders import _pick_glsl_version, shader_sources


def test_defaults():
    args = _parse_args([])
    assert args.scene == "colored"
    assert args.output is None
    assert (args.width, args.height, args.supersample) == (700, 700, 2)


def test_render_to_file(tmp_path):
    out = tmp_path / "out.bmp"
    depth = tmp_path / "depth.bmp"
    main(["--width", "48", "--height", "32", "--output", str(out), "--depth-output", str(depth)])
    assert pygame.image.load(str(out)).get_size() == (48, 32)
    assert pygame.image.load(str(depth)).get_size() == (96, 64)


def test_glsl_version_pick():
    assert _pick_glsl_version(460) == 330
    assert _pick_glsl_version(330) == 330
    assert _pick_glsl_version(320) == 150
    vert, frag = shader_sources(410)
    assert vert.startswith("#version 330\n")
    assert "u_frame" in frag


def test_quad_top_edge_samples_first_row():
    quad = quad_vertices().reshape(6, 4)
    top = quad[quad[:, 1] == 1.0]
    assert (top[:, 3] == 0.0).all()
    bottom = quad[quad[:, 1] == -1.0]
    assert (bottom[:, 3] == 1.0).all()
