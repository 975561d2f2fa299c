from typing import Callable, List

import pytest

from logging_config import configure_logging
from onnx2graph.core import Function, Loop
from onnx2graph.importer.diagnostics import Diagnostics


def pytest_configure(config):
    configure_logging()


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def loops_in() -> Callable[[Function], List[Loop]]:
    """Loop nodes reachable from a function's results, in topological order."""

    def _loops(fn: Function) -> List[Loop]:
        return [n for n in fn.get_ordered_ops() if isinstance(n, Loop)]

    return _loops
