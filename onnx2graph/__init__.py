# onnx2graph/__init__.py

from onnx2graph.user_interface import import_onnx  # noqa: F401
from onnx2graph.importer.diagnostics import (  # noqa: F401
    Diagnostics,
    UnsupportedPatternWarning,
)
from onnx2graph.importer.exceptions import (  # noqa: F401
    NodeValidationFailure,
    OnnxImportError,
    UnsupportedOperatorError,
)
from onnx2graph.importer.ops.loop import lower_loop  # noqa: F401
