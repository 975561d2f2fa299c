# file: onnx2graph/core/shapes.py

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, Tuple

import numpy as np

# A partial shape is either None (rank unknown) or a tuple whose entries are
# ints (static dims) or None (dynamic dims).
Dim = Optional[int]
PartialShape = Optional[Tuple[Dim, ...]]


def to_partial_shape(dims: Optional[Iterable[Any]]) -> PartialShape:
    """Coerce ints / symbolic dims / None into a partial shape tuple."""
    if dims is None:
        return None
    out: list[Dim] = []
    for d in dims:
        if isinstance(d, (int, np.integer)) and int(d) >= 0:
            out.append(int(d))
        else:
            out.append(None)
    return tuple(out)


def is_static(shape: PartialShape) -> bool:
    return shape is not None and all(d is not None for d in shape)


def is_scalar(shape: PartialShape) -> bool:
    """True only when the shape is statically known to be rank 0."""
    return shape is not None and len(shape) == 0


def normalize_axis(axis: int, rank: int) -> int:
    if not -rank <= axis < rank:
        raise ValueError(f"Axis {axis} is out of range for rank {rank}")
    return axis + rank if axis < 0 else axis


def merge_dims(a: Dim, b: Dim) -> Dim:
    return a if a == b else None


def merge_shapes(a: PartialShape, b: PartialShape) -> PartialShape:
    """Widest shape compatible with both inputs (differing dims go dynamic)."""
    if a is None or b is None or len(a) != len(b):
        return None
    return tuple(merge_dims(x, y) for x, y in zip(a, b))


def broadcast_shapes(a: PartialShape, b: PartialShape) -> PartialShape:
    """Numpy-style broadcasting over partial shapes."""
    if a is None or b is None:
        return None
    rank = max(len(a), len(b))
    pa = (1,) * (rank - len(a)) + tuple(a)
    pb = (1,) * (rank - len(b)) + tuple(b)
    out: list[Dim] = []
    for x, y in zip(pa, pb):
        if x == 1:
            out.append(y)
        elif y == 1:
            out.append(x)
        elif x is None or y is None:
            out.append(x if y is None else y)
        elif x == y:
            out.append(x)
        else:
            raise ValueError(f"Shapes {a} and {b} are not broadcast-compatible")
    return tuple(out)


def unsqueeze_shape(shape: PartialShape, axes: Sequence[int]) -> PartialShape:
    if shape is None:
        return None
    out_rank = len(shape) + len(axes)
    norm = sorted(normalize_axis(int(a), out_rank) for a in axes)
    if len(set(norm)) != len(norm):
        raise ValueError(f"Repeated axes in unsqueeze: {list(axes)}")
    dims = list(shape)
    for ax in norm:
        dims.insert(ax, 1)
    return tuple(dims)


def format_shape(shape: PartialShape) -> str:
    if shape is None:
        return "[...]"
    return "[" + ",".join("?" if d is None else str(d) for d in shape) + "]"
