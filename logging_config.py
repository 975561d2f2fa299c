import atexit
import logging
import os
import tomllib
from typing import Any, Dict, Optional

PYPROJECT = os.path.join(os.path.dirname(os.path.abspath(__file__)), "pyproject.toml")
LOOP_LOGGER = "onnx2graph.importer.ops.loop"
_HANDLER_NAME = "onnx2graph-console"


def load_logging_config(pyproject_path: str = PYPROJECT) -> Dict[str, Any]:
    """Returns the ``[tool.onnx2graph.logging]`` table, or ``{}`` when absent."""
    if not os.path.exists(pyproject_path):
        return {}
    with open(pyproject_path, "rb") as f:
        return tomllib.load(f).get("tool", {}).get("onnx2graph", {}).get("logging", {})


def configure_logging(
    pyproject_path: str = PYPROJECT, *, loop_debug: Optional[bool] = None
) -> Dict[str, int]:
    """
    Configures the root logger and the per-logger levels from pyproject.toml.

    ``loop_debug`` (defaulting to ``ONNX2GRAPH_LOOP_DEBUG``) lowers the loop
    importer's logger to DEBUG so rebuilt loop bodies get dumped.
    Returns the level applied to each named logger.
    """
    config = load_logging_config(pyproject_path)
    default_level = config.get("default_level", "INFO").upper()
    log_format = config.get("format", "%(levelname)s:%(name)s:%(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, default_level, logging.INFO))

    # replace only our own handler; pytest's capture handlers stay in place
    for handler in list(root_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)
    console_handler = logging.StreamHandler()
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    applied: Dict[str, int] = {}
    for logger_name, lvl in config.get("levels", {}).items():
        applied[logger_name] = getattr(logging, str(lvl).upper(), logging.INFO)

    if loop_debug is None:
        loop_debug = bool(int(os.getenv("ONNX2GRAPH_LOOP_DEBUG", "0")))
    if loop_debug:
        applied[LOOP_LOGGER] = logging.DEBUG

    for logger_name, level in applied.items():
        logging.getLogger(logger_name).setLevel(level)

    atexit.register(lambda: setattr(logging, "raiseExceptions", False))
    return applied
