# file: tests/test_converter_testcases.py
# Collects the ``testcases`` every registered converter declares in its
# metadata and imports each model, checking result shapes and the number
# of diagnostics raised along the way.

import pytest

from onnx2graph import Diagnostics, import_onnx
from onnx2graph.importer.registry import registered_converters


def _collect():
    params = []
    for conv in registered_converters():
        for case in conv.metadata.get("testcases", []):
            params.append(
                pytest.param(
                    case,
                    id=f"{conv.metadata.get('component', conv.op_type)}::{case['testcase']}",
                )
            )
    return params


TESTCASES = _collect()


def test_every_converter_declares_metadata():
    for conv in registered_converters():
        assert conv.metadata["op_type"] == conv.op_type
        assert conv.metadata.get("onnx_doc", "").startswith("https://onnx.ai/")


@pytest.mark.parametrize("case", TESTCASES)
def test_declared_testcase(case):
    diagnostics = Diagnostics()
    fn = import_onnx(case["model"](), diagnostics=diagnostics)

    assert [r.partial_shape for r in fn.results] == case["expected_output_shapes"]
    assert len(diagnostics) == case.get("expected_warnings", 0)
