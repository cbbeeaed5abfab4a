import numpy as np
import pytest

from fluidized_bed_heat_transfer.implicit_expansion import (
    C2K, K2C, IncompatibleShapesError, infer_shape, normalize)


def test_column_and_row_expand_to_matrix():
    assert infer_shape(np.ones((3, 1)), np.ones((1, 4))) == (3, 4)


def test_disagreeing_extents_raise():
    with pytest.raises(IncompatibleShapesError):
        infer_shape(np.ones(3), np.ones(4))


def test_incompatible_shapes_error_is_a_value_error():
    assert issubclass(IncompatibleShapesError, ValueError)


def test_scalar_and_vector():
    assert infer_shape(2.0, np.ones(5)) == (5,)
    assert infer_shape(1.0, 2.0) == ()
    assert infer_shape() == ()


def test_vector_is_padded_with_trailing_ones():
    # A vector of length 3 acts as a (3, 1) column
    assert infer_shape(np.ones(3), np.ones((3, 2))) == (3, 2)
    with pytest.raises(IncompatibleShapesError):
        infer_shape(np.ones(3), np.ones((2, 3)))


def test_zero_extent_collapses_result():
    assert infer_shape(np.ones((0, 1)), np.ones((1, 4))) == (0, 4)


def test_normalize_tiles_in_row_major_order():
    x = np.array([[1.0], [2.0], [3.0]])
    y = np.array([[10.0, 20.0, 30.0, 40.0]])
    sz = infer_shape(x, y)
    xn, yn = normalize(sz, x, y)

    assert xn.shape == (12,) and yn.shape == (12,)
    np.testing.assert_array_equal(xn.reshape(sz), np.broadcast_to(x, sz))
    np.testing.assert_array_equal(yn.reshape(sz), np.broadcast_to(y, sz))


def test_normalize_scalar_inputs():
    a, b = normalize((), 1.5, 2)
    np.testing.assert_array_equal(a, [1.5])
    assert b.dtype == float


def test_normalize_returns_copies():
    x = np.array([1.0, 2.0])
    (xn,) = normalize((2,), x)
    xn[0] = 99.0
    assert x[0] == 1.0


def test_normalize_empty_shape_gives_nan_arrays():
    out = normalize((0, 4), np.ones((0, 1)), np.ones((1, 4)))
    assert len(out) == 2
    for x in out:
        assert x.shape == (0, 4)
        assert np.all(np.isnan(x))


def test_temperature_conversions():
    assert C2K(0.0) == pytest.approx(273.15)
    assert K2C(C2K(21.0)) == pytest.approx(21.0)
