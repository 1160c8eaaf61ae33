from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from softras.config import MODEL_COLOR
from softras.errors import ResourceError
from softras.pipeline.buffers import (
    IndexHandle,
    NormalHandle,
    PositionHandle,
    TexCoordHandle,
)
from softras.pipeline.triangle import Triangle

log = logging.getLogger(__name__)


@dataclass
class Mesh:
    """Flattened per-vertex attributes plus index triples."""
    name: str
    positions: np.ndarray  # (N,3)
    indices: np.ndarray  # (M,3)
    normals: Optional[np.ndarray] = None  # (N,3)
    tex_coords: Optional[np.ndarray] = None  # (N,2), row-down v

    def load_into(self, rasterizer) -> tuple[PositionHandle, IndexHandle, Optional[NormalHandle], Optional[TexCoordHandle]]:
        pos = rasterizer.load_positions(self.positions)
        ind = rasterizer.load_indices(self.indices)
        nrm = rasterizer.load_normals(self.normals) if self.normals is not None else None
        uv = rasterizer.load_tex_coords(self.tex_coords) if self.tex_coords is not None else None
        return pos, ind, nrm, uv

    def triangles(self, color=MODEL_COLOR) -> list[Triangle]:
        out = []
        for tri in self.indices:
            t = Triangle.from_points(*self.positions[tri])
            for i in range(3):
                t.set_color(i, color)
            if self.normals is not None:
                t.normal = self.normals[tri].copy()
            if self.tex_coords is not None:
                t.tex_coords = self.tex_coords[tri].copy()
            out.append(t)
        return out


def _resolve(raw: str, total: int) -> int:
    i = int(raw)
    if i < 0:
        return total + i
    return i - 1


def load_obj(path: str) -> list[Mesh]:
    """Parse a Wavefront OBJ file into one Mesh per `o`/`g` group.

    Polygons are fan-triangulated and every distinct v/vt/vn combination
    becomes its own output vertex.
    """
    obj_path = Path(path)
    vs: list[tuple[float, float, float]] = []
    vts: list[tuple[float, float]] = []
    vns: list[tuple[float, float, float]] = []
    groups: list[tuple[str, list[list[tuple[int, int, int]]]]] = [("default", [])]

    try:
        with obj_path.open("r", encoding="utf-8", errors="ignore") as handle:
            for lineno, raw_line in enumerate(handle, 1):
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                parts = line.split()
                tag = parts[0]
                try:
                    if tag == "v":
                        vs.append((float(parts[1]), float(parts[2]), float(parts[3])))
                    elif tag == "vt":
                        vts.append((float(parts[1]), float(parts[2]) if len(parts) > 2 else 0.0))
                    elif tag == "vn":
                        vns.append((float(parts[1]), float(parts[2]), float(parts[3])))
                    elif tag in ("o", "g"):
                        name = " ".join(parts[1:]) or "default"
                        if groups[-1][1]:
                            groups.append((name, []))
                        else:
                            groups[-1] = (name, [])
                    elif tag == "f":
                        corners = []
                        for token in parts[1:]:
                            fields = token.split("/")
                            vi = _resolve(fields[0], len(vs))
                            ti = _resolve(fields[1], len(vts)) if len(fields) > 1 and fields[1] else -1
                            ni = _resolve(fields[2], len(vns)) if len(fields) > 2 and fields[2] else -1
                            corners.append((vi, ti, ni))
                        if len(corners) < 3:
                            continue
                        for k in range(1, len(corners) - 1):
                            groups[-1][1].append([corners[0], corners[k], corners[k + 1]])
                except (ValueError, IndexError) as e:
                    raise ResourceError(f"{path}:{lineno}: malformed OBJ line {line!r}") from e
    except OSError as e:
        raise ResourceError(f"Failed to read OBJ file {path!r}") from e

    meshes = [_build_mesh(name, faces, vs, vts, vns, path) for name, faces in groups if faces]
    if not meshes:
        raise ResourceError(f"OBJ file {path!r} contains no faces")
    log.debug("loaded %s: %d meshes, %d triangles", path, len(meshes), sum(len(m.indices) for m in meshes))
    return meshes


def _build_mesh(name, faces, vs, vts, vns, path) -> Mesh:
    lookup: dict[tuple[int, int, int], int] = {}
    positions, uvs, normals, indices = [], [], [], []
    has_uv = all(c[1] >= 0 for face in faces for c in face)
    has_n = all(c[2] >= 0 for face in faces for c in face)

    for face in faces:
        tri = []
        for corner in face:
            key = corner
            if key not in lookup:
                vi, ti, ni = corner
                if not (0 <= vi < len(vs)):
                    raise ResourceError(f"{path}: vertex index {vi + 1} out of range")
                lookup[key] = len(positions)
                positions.append(vs[vi])
                if has_uv:
                    if not (0 <= ti < len(vts)):
                        raise ResourceError(f"{path}: texcoord index {ti + 1} out of range")
                    u, v = vts[ti]
                    # OBJ v grows upward; texture rows grow downward.
                    uvs.append((u, 1.0 - v))
                if has_n:
                    if not (0 <= ni < len(vns)):
                        raise ResourceError(f"{path}: normal index {ni + 1} out of range")
                    normals.append(vns[ni])
            tri.append(lookup[key])
        indices.append(tri)

    return Mesh(
        name=name,
        positions=np.asarray(positions, dtype=np.float64),
        indices=np.asarray(indices, dtype=np.int64),
        normals=np.asarray(normals, dtype=np.float64) if has_n else None,
        tex_coords=np.asarray(uvs, dtype=np.float64) if has_uv else None,
    )
