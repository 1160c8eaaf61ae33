from __future__ import annotations

import enum
import logging
import time
from typing import Optional, Sequence

import numpy as np

from softras.config import (
    CLEAR_COLOR,
    DEFAULT_PERSPECTIVE_CORRECT,
    DEFAULT_SUPERSAMPLE,
    WIREFRAME_COLOR,
)
from softras.pipeline.buffers import (
    BufferStore,
    ColorHandle,
    IndexHandle,
    NormalHandle,
    PositionHandle,
    TexCoordHandle,
)
from softras.pipeline.shader import FragmentPayload, Shader, VertexPayload
from softras.pipeline.texture import Texture
from softras.pipeline.transform import Transform, Viewport
from softras.pipeline.triangle import (
    Triangle,
    as_rgba,
    assemble,
    barycentric,
    check_colors,
    check_indices,
)

log = logging.getLogger(__name__)


class PrimitiveKind(enum.Enum):
    LINE = "line"
    TRIANGLE = "triangle"


class BufferKind(enum.Flag):
    COLOR = 1
    DEPTH = 2
    ALL = COLOR | DEPTH


class Rasterizer:
    """CPU triangle rasterizer with a supersampled color/depth buffer.

    Screen coordinates have y growing upward; every frame buffer array is
    stored row-major with row 0 at the top of the image.
    """

    def __init__(
        self,
        width: int,
        height: int,
        supersample: int = DEFAULT_SUPERSAMPLE,
        *,
        shader: Optional[Shader] = None,
        perspective_correct: bool = DEFAULT_PERSPECTIVE_CORRECT,
        clear_color=CLEAR_COLOR,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid frame size {width}x{height}")
        if supersample < 1:
            raise ValueError(f"supersample factor must be >= 1, got {supersample}")
        self.width = int(width)
        self.height = int(height)
        self.supersample = int(supersample)
        self.shader = shader
        self.perspective_correct = bool(perspective_correct)
        self.clear_color = np.asarray(clear_color, dtype=np.float32)
        self.texture: Optional[Texture] = None

        self.buffers = BufferStore()
        self.transform = Transform()
        self.viewport = Viewport(self.width, self.height)

        s = self.supersample
        self._offsets = (2.0 * np.arange(s) + 1.0) / (2.0 * s)
        self._color_ss = np.empty((self.height * s, self.width * s, 4), dtype=np.float32)
        self._depth_ss = np.empty((self.height * s, self.width * s), dtype=np.float64)
        self._frame = np.empty((self.height, self.width, 4), dtype=np.float32)
        self._color_ss[...] = self.clear_color
        self._depth_ss.fill(np.inf)
        self._frame[...] = self.clear_color

    # --- configuration ---
    def set_model(self, model: np.ndarray) -> None:
        self.transform.model = np.asarray(model, dtype=np.float64)

    def set_view(self, view: np.ndarray) -> None:
        self.transform.view = np.asarray(view, dtype=np.float64)

    def set_projection(self, projection: np.ndarray) -> None:
        self.transform.projection = np.asarray(projection, dtype=np.float64)

    def set_texture(self, texture: Optional[Texture]) -> None:
        self.texture = texture

    def set_shader(self, shader: Optional[Shader]) -> None:
        self.shader = shader

    # --- buffers ---
    def load_positions(self, positions) -> PositionHandle:
        return self.buffers.load_positions(positions)

    def load_indices(self, indices) -> IndexHandle:
        return self.buffers.load_indices(indices)

    def load_colors(self, colors, *, scale: float = 1.0) -> ColorHandle:
        return self.buffers.load_colors(colors, scale=scale)

    def load_normals(self, normals) -> NormalHandle:
        return self.buffers.load_normals(normals)

    def load_tex_coords(self, tex_coords) -> TexCoordHandle:
        return self.buffers.load_tex_coords(tex_coords)

    def clear(self, kind: BufferKind = BufferKind.ALL) -> None:
        if BufferKind.COLOR in kind:
            self._color_ss[...] = self.clear_color
        if BufferKind.DEPTH in kind:
            self._depth_ss.fill(np.inf)

    # --- draw calls ---
    def draw(
        self,
        pos_buf: PositionHandle,
        ind_buf: IndexHandle,
        col_buf: Optional[ColorHandle] = None,
        primitive: PrimitiveKind = PrimitiveKind.TRIANGLE,
        *,
        normals: Optional[NormalHandle] = None,
        tex_coords: Optional[TexCoordHandle] = None,
    ) -> None:
        """Draw indexed geometry from loaded buffers.

        Without a color buffer (or with PrimitiveKind.LINE) the triangles are
        drawn as wireframe.
        """
        t0 = time.perf_counter()
        positions = self.buffers.get(pos_buf, PositionHandle)
        indices = self.buffers.get(ind_buf, IndexHandle)
        colors = self.buffers.get(col_buf, ColorHandle) if col_buf is not None else None
        nrm = self.buffers.get(normals, NormalHandle) if normals is not None else None
        uv = self.buffers.get(tex_coords, TexCoordHandle) if tex_coords is not None else None

        if self.shader is not None:
            positions = np.asarray(self.shader.vertex(VertexPayload(position=positions, normal=nrm)))

        mvp = self.transform.mvp()
        screen = self.viewport.project(mvp, positions)

        if primitive is PrimitiveKind.LINE or colors is None:
            check_indices(indices, "position", screen.shape[0])
            for tri in indices:
                self.rasterize_wireframe(Triangle(v=screen[tri]))
        else:
            view_pos = self._to_view(positions)
            if nrm is not None:
                nrm = nrm @ self.transform.normal_matrix().T
            triangles = assemble(
                screen, indices, colors=colors, normals=nrm, tex_coords=uv, view_pos=view_pos
            )
            for t in triangles:
                self.rasterize_triangle(t)

        self.resolve()
        log.debug("draw %s: %d triangles in %.3fs", primitive.value, len(indices), time.perf_counter() - t0)

    def draw_triangle_list(self, triangles: Sequence[Triangle]) -> None:
        """Transform and rasterize object-space triangles (w assumed 1)."""
        t0 = time.perf_counter()
        if triangles:
            obj = np.concatenate([np.asarray(t.v, dtype=np.float64)[:, :3] for t in triangles])
            normals = np.concatenate([np.asarray(t.normal, dtype=np.float64) for t in triangles])
            if self.shader is not None:
                obj = np.asarray(self.shader.vertex(VertexPayload(position=obj, normal=normals)))

            screen = self.viewport.project(self.transform.mvp(), obj)
            view_pos = self._to_view(obj)
            normals = normals @ self.transform.normal_matrix().T

            for k, src in enumerate(triangles):
                rows = slice(3 * k, 3 * k + 3)
                color = as_rgba(src.color)
                check_colors(color)
                t = Triangle(
                    v=screen[rows],
                    color=color,
                    tex_coords=np.asarray(src.tex_coords, dtype=np.float64),
                    normal=normals[rows],
                    view_pos=view_pos[rows],
                )
                self.rasterize_triangle(t)

        self.resolve()
        log.debug("draw_triangle_list: %d triangles in %.3fs", len(triangles), time.perf_counter() - t0)

    def _to_view(self, positions: np.ndarray) -> np.ndarray:
        homo = np.concatenate([positions, np.ones((positions.shape[0], 1))], axis=1)
        return (homo @ self.transform.model_view().T)[:, :3]

    # --- rasterization ---
    def _ss_block(self, x_min: int, y_min: int, x_max: int, y_max: int):
        """Views of the supersampled buffers for a pixel rectangle.

        Returned views are indexed [k, l] with k counting sample rows upward
        from y_min * S and l counting sample columns from x_min * S.
        """
        s = self.supersample
        hs = self.height * s
        r0, r1 = hs - y_max * s, hs - y_min * s
        c0, c1 = x_min * s, x_max * s
        return self._color_ss[r0:r1, c0:c1][::-1], self._depth_ss[r0:r1, c0:c1][::-1]

    def rasterize_triangle(self, t: Triangle) -> None:
        box = t.bounding_box().clamp(self.width, self.height)
        if box.is_empty:
            return

        xs = (np.arange(box.x_min, box.x_max)[:, None] + self._offsets[None, :]).ravel()
        ys = (np.arange(box.y_min, box.y_max)[:, None] + self._offsets[None, :]).ravel()
        px, py = np.meshgrid(xs, ys)

        bary = barycentric(px, py, t.v)
        if bary is None:
            return
        # No fill-rule tie-break: samples exactly on an edge count as inside.
        inside = np.all(bary >= 0.0, axis=-1)
        if not inside.any():
            return

        color_view, depth_view = self._ss_block(box.x_min, box.y_min, box.x_max, box.y_max)
        z = bary @ t.v[:, 2]
        passed = inside & (z < depth_view)
        if not passed.any():
            return

        weights = bary[passed]
        attr = self._attribute_weights(weights, t.v[:, 3])
        if self.shader is None:
            colors = attr @ t.color
        else:
            payload = FragmentPayload(
                view_pos=attr @ t.view_pos,
                color=attr @ t.color[:, :3],
                normal=attr @ t.normal,
                tex_coords=attr @ t.tex_coords,
                texture=self.texture,
            )
            colors = np.clip(np.asarray(self.shader.fragment(payload)), 0.0, 1.0)

        color_view[passed] = colors
        depth_view[passed] = z[passed]

    def _attribute_weights(self, weights: np.ndarray, w: np.ndarray) -> np.ndarray:
        if not self.perspective_correct or np.any(w == 0.0):
            return weights
        corrected = weights / w[None, :]
        total = corrected.sum(axis=1, keepdims=True)
        return np.divide(corrected, total, out=weights.copy(), where=total != 0.0)

    def rasterize_wireframe(self, t: Triangle, color=WIREFRAME_COLOR) -> None:
        a, b, c = t.v[0, :2], t.v[1, :2], t.v[2, :2]
        self.draw_line(a, b, color)
        self.draw_line(b, c, color)
        self.draw_line(c, a, color)

    def draw_line(self, begin, end, color=WIREFRAME_COLOR) -> None:
        """Bresenham line in screen pixels; no depth test."""
        if not (np.all(np.isfinite(begin[:2])) and np.all(np.isfinite(end[:2]))):
            return
        x0, y0 = int(round(float(begin[0]))), int(round(float(begin[1])))
        x1, y1 = int(round(float(end[0]))), int(round(float(end[1])))
        dx, dy = abs(x1 - x0), abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy
        while True:
            self.set_pixel(x0, y0, color)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x0 += sx
            if e2 < dx:
                err += dx
                y0 += sy

    def set_pixel(self, x: int, y: int, color) -> None:
        """Fill all S*S samples of screen pixel (x, y); out-of-frame is ignored."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        color_view, _ = self._ss_block(x, y, x + 1, y + 1)
        color_view[...] = np.asarray(color, dtype=np.float32)

    # --- output ---
    def resolve(self) -> None:
        """Average every pixel's S*S samples into the visible frame buffer."""
        s = self.supersample
        blocks = self._color_ss.reshape(self.height, s, self.width, s, 4)
        self._frame = blocks.mean(axis=(1, 3), dtype=np.float64).astype(np.float32)

    @property
    def frame_buffer(self) -> np.ndarray:
        return self._frame

    @property
    def depth_buffer(self) -> np.ndarray:
        return self._depth_ss

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        """Resolved RGBA at screen pixel (x, y), y growing upward."""
        return self._frame[self.height - 1 - int(y), int(x)]

    def dump_u8norm(self) -> bytes:
        col8 = np.clip(np.rint(self._frame * 255.0), 0, 255).astype(np.uint8)
        return col8.tobytes(order="C")

    def depth_image(self) -> np.ndarray:
        """Supersampled depth as (H*S, W*S) grey levels; uncovered = 255."""
        depth = self._depth_ss
        finite = np.isfinite(depth)
        out = np.full(depth.shape, 255, dtype=np.uint8)
        if finite.any():
            lo = depth[finite].min()
            hi = depth[finite].max()
            span = hi - lo if hi > lo else 1.0
            out[finite] = np.clip((depth[finite] - lo) / span * 254.0, 0, 254).astype(np.uint8)
        return out
