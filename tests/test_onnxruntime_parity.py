# file: tests/test_onnxruntime_parity.py
# Runs the factory models in onnxruntime and checks the shapes it produces
# against the partial shapes inferred on the imported graph.

import numpy as np
import onnx
import onnxruntime as ort
import pytest

from onnx2graph import import_onnx
from onnx2graph.testing import make_counter_loop_model, make_dynamic_condition_loop_model


def _run(model, tmp_path, feeds):
    path = tmp_path / "model.onnx"
    onnx.save_model(model, path)
    sess = ort.InferenceSession(str(path), providers=["CPUExecutionProvider"])
    return sess.run(None, feeds)


def _compatible(partial_shape, concrete_shape):
    if partial_shape is None:
        return True
    return len(partial_shape) == len(concrete_shape) and all(
        d is None or d == c for d, c in zip(partial_shape, concrete_shape)
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"trip_count": 4, "scan_rank": 1},
        {"trip_count": 4, "scan_rank": 0},
        {"trip_count": 3, "condition": "constant_true"},
        {"trip_count": 2, "scan_rank": 1, "opset": 11},
    ],
    ids=["vector_scan", "scalar_scan", "constant_condition", "opset11"],
)
def test_static_counter_matches_runtime(kwargs, tmp_path):
    model = make_counter_loop_model(**kwargs)
    fn = import_onnx(model)

    i_final, i_scan = _run(model, tmp_path, {"i0": np.asarray(10, dtype=np.int64)})

    trip = kwargs["trip_count"]
    assert int(i_final) == 10 + trip
    shapes = [r.partial_shape for r in fn.results]
    assert shapes[0] == i_final.shape
    assert shapes[1] == i_scan.shape
    assert i_scan.shape[0] == trip


def test_dynamic_condition_shape_is_compatible(tmp_path):
    model = make_dynamic_condition_loop_model()
    fn = import_onnx(model)

    feeds = {
        "i0": np.asarray(0, dtype=np.int64),
        "limit": np.asarray(3, dtype=np.int64),
    }
    i_final, i_scan = _run(model, tmp_path, feeds)

    assert int(i_final) == 3
    assert i_scan.shape == (3, 1)
    for partial, value in zip((r.partial_shape for r in fn.results), (i_final, i_scan)):
        assert _compatible(partial, value.shape)
