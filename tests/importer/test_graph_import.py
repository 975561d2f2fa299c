import numpy as np
import onnx
import onnx_ir as ir
import pytest
from onnx import TensorProto, helper, numpy_helper

from onnx2graph import UnsupportedOperatorError, import_onnx
from onnx2graph.core import Constant, Convert, LogicalOr, Parameter
from onnx2graph.importer.registry import get_converter
from onnx2graph.testing import IR_VERSION, make_counter_loop_model


def _model(nodes, inputs, outputs, initializers=(), opset=17):
    graph = helper.make_graph(nodes, "g", inputs, outputs, initializer=list(initializers))
    return helper.make_model(
        graph, opset_imports=[helper.make_opsetid("", opset)], ir_version=IR_VERSION
    )


def test_inputs_initializers_and_elementwise_nodes():
    model = _model(
        [
            helper.make_node("Add", ["x", "bias"], ["y"]),
            helper.make_node("Less", ["y", "bias"], ["z"]),
        ],
        [helper.make_tensor_value_info("x", TensorProto.FLOAT, ["N", 3])],
        [
            helper.make_tensor_value_info("y", TensorProto.FLOAT, None),
            helper.make_tensor_value_info("z", TensorProto.BOOL, None),
        ],
        [numpy_helper.from_array(np.ones((3,), dtype=np.float32), "bias")],
    )
    fn = import_onnx(model)

    (x,) = fn.parameters
    assert x.name == "x" and x.partial_shape == (None, 3)
    y, z = fn.results
    assert y.node.kind() == "Add"
    assert isinstance(y.node.input(1).node, Constant)
    assert y.partial_shape == (None, 3)
    assert z.element_type == np.bool_


def test_boolean_identity_is_imported_as_or_false():
    model = _model(
        [
            helper.make_node("Identity", ["flag"], ["flag_copy"]),
            helper.make_node("Identity", ["x"], ["x_copy"]),
        ],
        [
            helper.make_tensor_value_info("flag", TensorProto.BOOL, []),
            helper.make_tensor_value_info("x", TensorProto.FLOAT, [2]),
        ],
        [
            helper.make_tensor_value_info("flag_copy", TensorProto.BOOL, []),
            helper.make_tensor_value_info("x_copy", TensorProto.FLOAT, [2]),
        ],
    )
    fn = import_onnx(model)
    flag, x = fn.parameters
    flag_copy, x_copy = fn.results

    assert isinstance(flag_copy.node, LogicalOr)
    assert flag_copy.node.input(0) == flag.output(0)
    assert flag_copy.node.input(1).node.as_constant_bool() is False
    assert x_copy == x.output(0)


@pytest.mark.parametrize("opset", [11, 17])
def test_unsqueeze_axes_attribute_and_input_forms(opset):
    fn = import_onnx(make_counter_loop_model(trip_count=2, opset=opset))
    assert fn.results[1].partial_shape == (2, 1)


def test_cast_and_constant_value_forms():
    model = _model(
        [
            helper.make_node("Constant", [], ["k"], value_int=3),
            helper.make_node("Add", ["x", "k"], ["y"]),
            helper.make_node("Cast", ["y"], ["z"], to=TensorProto.FLOAT),
            helper.make_node("Cast", ["z"], ["w"], to=TensorProto.FLOAT),
        ],
        [helper.make_tensor_value_info("x", TensorProto.INT64, [])],
        [helper.make_tensor_value_info("w", TensorProto.FLOAT, [])],
    )
    (w,) = import_onnx(model).results

    assert isinstance(w.node, Convert)
    assert w.element_type == np.float32
    k = w.node.input(0).node.input(1).node
    assert isinstance(k, Constant) and k.value.dtype == np.int64


def test_unknown_operator_raises():
    model = _model(
        [helper.make_node("Softmax", ["x"], ["y"])],
        [helper.make_tensor_value_info("x", TensorProto.FLOAT, [2])],
        [helper.make_tensor_value_info("y", TensorProto.FLOAT, [2])],
    )
    with pytest.raises(UnsupportedOperatorError, match="Softmax"):
        import_onnx(model)


def test_converter_selection_follows_opset():
    assert get_converter("Unsqueeze", 11).since_version == 1
    assert get_converter("Unsqueeze", 13).since_version == 13
    assert get_converter("Unsqueeze", 21).since_version == 13


def test_accepts_ir_model_and_path(tmp_path):
    model = make_counter_loop_model()
    path = tmp_path / "counter.onnx"
    onnx.save_model(model, path)

    from_ir = import_onnx(ir.serde.deserialize_model(model))
    from_path = import_onnx(str(path))

    assert [r.partial_shape for r in from_ir.results] == [(), (4, 1)]
    assert [r.partial_shape for r in from_path.results] == [(), (4, 1)]
    assert all(isinstance(p, Parameter) for p in from_path.parameters)
