import numpy as np
import pytest

from softras.errors import InvalidHandleError
from softras.pipeline.buffers import BufferStore, ColorHandle, IndexHandle, PositionHandle


def test_handles_are_typed_and_unique():
    store = BufferStore()
    a = store.load_positions([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
    b = store.load_positions([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
    assert isinstance(a, PositionHandle)
    assert a != b
    assert len(store) == 2


def test_get_returns_loaded_data_read_only():
    store = BufferStore()
    h = store.load_positions([(1, 2, 3)])
    data = store.get(h, PositionHandle)
    np.testing.assert_array_equal(data, [[1.0, 2.0, 3.0]])
    with pytest.raises(ValueError):
        data[0, 0] = 5.0


def test_wrong_kind_rejected():
    store = BufferStore()
    h = store.load_positions([(1, 2, 3)])
    with pytest.raises(InvalidHandleError):
        store.get(h, IndexHandle)


def test_foreign_store_rejected():
    a, b = BufferStore(), BufferStore()
    h = a.load_indices([(0, 1, 2)])
    with pytest.raises(InvalidHandleError):
        b.get(h, IndexHandle)


def test_clear_makes_handles_stale():
    store = BufferStore()
    h = store.load_indices([(0, 1, 2)])
    store.clear()
    assert len(store) == 0
    with pytest.raises(InvalidHandleError):
        store.get(h, IndexHandle)


def test_invalid_handle_is_assertion_error():
    store = BufferStore()
    h = store.load_indices([(0, 1, 2)])
    with pytest.raises(AssertionError):
        store.get(h, ColorHandle)


def test_colors_scaled_and_alpha_added():
    store = BufferStore()
    h = store.load_colors([(255, 0, 51)], scale=255.0)
    np.testing.assert_allclose(store.get(h, ColorHandle), [[1.0, 0.0, 0.2, 1.0]])


def test_rgba_colors_kept():
    store = BufferStore()
    h = store.load_colors([(0.1, 0.2, 0.3, 0.5)])
    np.testing.assert_allclose(store.get(h, ColorHandle), [[0.1, 0.2, 0.3, 0.5]])


def test_negative_indices_rejected():
    with pytest.raises(ValueError):
        BufferStore().load_indices([(0, -1, 2)])


def test_bad_shape_rejected():
    with pytest.raises(ValueError):
        BufferStore().load_positions([(0, 1)])


def test_homogeneous_normals_drop_w():
    from softras.pipeline.buffers import NormalHandle

    store = BufferStore()
    h = store.load_normals([(0, 0, 1, 0)])
    assert store.get(h, NormalHandle).shape == (1, 3)


def test_fractional_indices_rejected():
    with pytest.raises(ValueError):
        BufferStore().load_indices([(0, 1.7, 2)])


def test_integer_index_arrays_accepted():
    store = BufferStore()
    h = store.load_indices(np.array([[0, 1, 2]], dtype=np.uint32))
    np.testing.assert_array_equal(store.get(h, IndexHandle), [[0, 1, 2]])
