from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np

from softras.errors import InvalidHandleError

log = logging.getLogger(__name__)

# Process-wide counters: slot ids and store ids are never reused.
_next_slot = itertools.count()
_next_store = itertools.count()


@dataclass(frozen=True)
class BufferHandle:
    store_id: int
    slot: int
    generation: int


@dataclass(frozen=True)
class PositionHandle(BufferHandle):
    pass


@dataclass(frozen=True)
class IndexHandle(BufferHandle):
    pass


@dataclass(frozen=True)
class ColorHandle(BufferHandle):
    pass


@dataclass(frozen=True)
class NormalHandle(BufferHandle):
    pass


@dataclass(frozen=True)
class TexCoordHandle(BufferHandle):
    pass


@dataclass
class _Slot:
    kind: type
    generation: int
    data: np.ndarray


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, copy=True)
    arr.setflags(write=False)
    return arr


def _as_rows(seq, width: int, *, dtype=np.float64, name: str) -> np.ndarray:
    arr = np.asarray(seq, dtype=dtype)
    if arr.size == 0:
        return arr.reshape(0, width)
    if arr.ndim != 2 or arr.shape[1] != width:
        raise ValueError(f"{name} must have shape (N, {width}), got {arr.shape}")
    return arr


class BufferStore:
    """Immutable vertex-attribute arrays addressed by typed handles.

    Backed by a generation-checked slot map: a handle is honoured only by
    the store that minted it, for its own attribute kind, and only while
    its generation matches the slot's.
    """

    def __init__(self) -> None:
        self.store_id = next(_next_store)
        self._generation = 0
        self._slots: Dict[int, _Slot] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def _insert(self, kind: type, data: np.ndarray) -> BufferHandle:
        slot = next(_next_slot)
        self._slots[slot] = _Slot(kind=kind, generation=self._generation, data=_frozen(data))
        log.debug("loaded %s slot=%d shape=%s", kind.__name__, slot, data.shape)
        return kind(store_id=self.store_id, slot=slot, generation=self._generation)

    def get(self, handle: BufferHandle, kind: type) -> np.ndarray:
        if type(handle) is not kind:
            raise InvalidHandleError(f"expected {kind.__name__}, got {type(handle).__name__}")
        if handle.store_id != self.store_id:
            raise InvalidHandleError(f"handle belongs to store {handle.store_id}, not {self.store_id}")
        entry = self._slots.get(handle.slot)
        if entry is None:
            raise InvalidHandleError(f"no buffer in slot {handle.slot}")
        if entry.generation != handle.generation or entry.kind is not kind:
            raise InvalidHandleError(f"stale handle for slot {handle.slot}")
        return entry.data

    def clear(self) -> None:
        """Drop every buffer; handles issued before this call become stale."""
        self._slots.clear()
        self._generation += 1

    # --- loaders ---
    def load_positions(self, positions) -> PositionHandle:
        return self._insert(PositionHandle, _as_rows(positions, 3, name="positions"))

    def load_indices(self, indices) -> IndexHandle:
        raw = np.asarray(indices)
        if raw.size and not np.issubdtype(raw.dtype, np.integer):
            raise ValueError(f"indices must be integers, got dtype {raw.dtype}")
        arr = _as_rows(raw, 3, dtype=np.int64, name="indices")
        if arr.size and arr.min() < 0:
            raise ValueError("indices must be unsigned")
        return self._insert(IndexHandle, arr)

    def load_colors(self, colors, *, scale: float = 1.0) -> ColorHandle:
        """Load per-vertex RGB or RGBA colors, dividing every channel by `scale`.

        Pass ``scale=255.0`` for 8-bit colors; range is checked when triangles
        are assembled.
        """
        arr = np.asarray(colors, dtype=np.float64)
        if arr.ndim == 2 and arr.shape[1] == 3:
            alpha = np.full((arr.shape[0], 1), float(scale))
            arr = np.concatenate([arr, alpha], axis=1)
        arr = _as_rows(arr, 4, name="colors") / float(scale)
        return self._insert(ColorHandle, arr)

    def load_normals(self, normals) -> NormalHandle:
        arr = np.asarray(normals, dtype=np.float64)
        if arr.ndim == 2 and arr.shape[1] == 4:
            arr = arr[:, :3]
        return self._insert(NormalHandle, _as_rows(arr, 3, name="normals"))

    def load_tex_coords(self, tex_coords) -> TexCoordHandle:
        return self._insert(TexCoordHandle, _as_rows(tex_coords, 2, name="tex_coords"))
