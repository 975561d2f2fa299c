import pytest

from onnx2graph.core.shapes import (
    broadcast_shapes,
    is_scalar,
    is_static,
    merge_shapes,
    to_partial_shape,
    unsqueeze_shape,
)


def test_to_partial_shape_maps_symbolic_dims_to_none():
    assert to_partial_shape([2, "B", None, -1]) == (2, None, None, None)
    assert to_partial_shape(None) is None


def test_scalar_and_static_predicates():
    assert is_scalar(())
    assert not is_scalar((1,))
    assert not is_scalar(None)
    assert is_static((2, 3))
    assert not is_static((2, None))


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((3, 1), (1, 4), (3, 4)),
        ((), (2, 2), (2, 2)),
        ((None, 4), (3, 1), (3, 4)),
        ((5,), None, None),
    ],
)
def test_broadcast_shapes(a, b, expected):
    assert broadcast_shapes(a, b) == expected


def test_broadcast_rejects_mismatch():
    with pytest.raises(ValueError):
        broadcast_shapes((2, 3), (4, 3))


def test_unsqueeze_shape_inserts_leading_axis():
    assert unsqueeze_shape((), [0]) == (1,)
    assert unsqueeze_shape((3, 4), [0, -1]) == (1, 3, 4, 1)
    assert unsqueeze_shape(None, [0]) is None


def test_merge_shapes_widens_differing_dims():
    assert merge_shapes((2, 3), (2, 5)) == (2, None)
    assert merge_shapes((2,), (2, 1)) is None
