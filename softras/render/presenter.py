from __future__ import annotations

import moderngl
import numpy as np

from softras.render.shaders import shader_sources


def quad_vertices() -> np.ndarray:
    """Fullscreen quad as (x, y, u, v) rows.

    Texture row 0 is the top of the rendered image, so the top edge samples v=0.
    """
    return np.array([
        -1.0,  1.0, 0.0, 0.0,
         1.0,  1.0, 1.0, 0.0,
        -1.0, -1.0, 0.0, 1.0,

         1.0,  1.0, 1.0, 0.0,
         1.0, -1.0, 1.0, 1.0,
        -1.0, -1.0, 0.0, 1.0,
    ], dtype=np.float32)


class FramePresenter:
    """Blits a rasterized RGBA frame to the window through a textured quad."""

    def __init__(self, ctx: moderngl.Context) -> None:
        self.ctx = ctx
        vert, frag = shader_sources(ctx.version_code)
        self.prog = self.ctx.program(vertex_shader=vert, fragment_shader=frag)
        self._vbo = self.ctx.buffer(quad_vertices().tobytes())
        self._vao = self.ctx.vertex_array(self.prog, [(self._vbo, "2f 2f", "in_pos", "in_uv")])
        self._tex: moderngl.Texture | None = None
        self._tex_size = (0, 0)

    def upload(self, rgba_bytes: bytes, w: int, h: int) -> None:
        if self._tex is None or self._tex_size != (w, h):
            if self._tex is not None:
                self._tex.release()
            self._tex = self.ctx.texture((w, h), 4, data=rgba_bytes)
            self._tex.filter = (moderngl.NEAREST, moderngl.NEAREST)
            self._tex.repeat_x = False
            self._tex.repeat_y = False
            self._tex_size = (w, h)
        else:
            self._tex.write(rgba_bytes)

    def resize(self, width: int, height: int) -> None:
        self.ctx.viewport = (0, 0, width, height)

    def draw(self) -> None:
        self.ctx.clear(0.0, 0.0, 0.0, 1.0)
        if self._tex is None:
            return
        self._tex.use(location=0)
        self.prog["u_frame"].value = 0
        self._vao.render(mode=moderngl.TRIANGLES)

    def release(self) -> None:
        if self._tex is not None:
            self._tex.release()
            self._tex = None
        for obj in [self._vao, self._vbo, self.prog]:
            obj.release()
