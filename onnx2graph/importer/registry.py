# file: onnx2graph/importer/registry.py

from __future__ import annotations

import importlib
import logging
import pkgutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from onnx2graph.importer.exceptions import UnsupportedOperatorError

if TYPE_CHECKING:  # pragma: no cover
    from onnx2graph.core import Output
    from onnx2graph.importer.node import ImportNode

logger = logging.getLogger("onnx2graph.importer.registry")

# ------------------------------------------------------------------------------
# Registries and state
# ------------------------------------------------------------------------------

# (domain, op_type) -> converters sorted by since_version
OP_REGISTRY: Dict[tuple[str, str], List["OpConverter"]] = {}

# Discovery guard
_already_imported_ops: bool = False


# ------------------------------------------------------------------------------
# Converter base
# ------------------------------------------------------------------------------


class OpConverter(ABC):
    op_type: str
    domain: str = ""
    since_version: int = 1
    metadata: dict[str, Any]

    @abstractmethod
    def lower(self, node: "ImportNode") -> List["Output"]:
        """Return the imported values for the node's outputs, in order."""
        raise NotImplementedError


def register_op(**metadata: Any) -> Callable[[type[OpConverter]], type[OpConverter]]:
    """
    Class decorator registering an :class:`OpConverter`.

    Recognised keys: ``op_type`` (required), ``domain``, ``since_version``,
    ``onnx_doc``, ``component``, ``testcases``. All of them are kept in
    ``instance.metadata`` for the registry-driven tests.
    """
    op_type = metadata.get("op_type")
    if not isinstance(op_type, str) or not op_type:
        raise ValueError("register_op requires a non-empty 'op_type' string.")
    domain = metadata.get("domain", "")
    since = int(metadata.get("since_version", 1))

    def _decorator(cls: type[OpConverter]) -> type[OpConverter]:
        if not issubclass(cls, OpConverter):
            raise TypeError("Converter must subclass OpConverter")
        instance = cls()
        instance.op_type = op_type
        instance.domain = domain
        instance.since_version = since
        instance.metadata = dict(metadata)
        versions = OP_REGISTRY.setdefault((domain, op_type), [])
        versions[:] = [c for c in versions if c.since_version != since]
        versions.append(instance)
        versions.sort(key=lambda c: c.since_version)
        return cls

    return _decorator


def get_converter(op_type: str, opset: int, domain: str = "") -> OpConverter:
    """Newest converter whose ``since_version`` does not exceed ``opset``."""
    import_all_ops()
    candidates: Optional[List[OpConverter]] = OP_REGISTRY.get((domain, op_type))
    if candidates:
        for conv in reversed(candidates):
            if conv.since_version <= opset:
                return conv
    raise UnsupportedOperatorError(op_type, domain, opset)


def registered_converters() -> List[OpConverter]:
    import_all_ops()
    return [c for versions in OP_REGISTRY.values() for c in versions]


# ------------------------------------------------------------------------------
# Discovery
# ------------------------------------------------------------------------------


def _import_tree(root_dir: Path, pkg_prefix: str) -> None:
    """Import every module below ``root_dir`` so converters self-register."""
    if not root_dir.exists():
        return
    for _, module_name, _ in pkgutil.walk_packages([str(root_dir)], prefix=f"{pkg_prefix}."):
        importlib.import_module(module_name)
        logger.debug("Imported converter module %s", module_name)


def import_all_ops() -> None:
    """Recursively import every module under onnx2graph/importer/ops."""
    global _already_imported_ops
    if _already_imported_ops:
        return
    ops_dir = Path(__file__).resolve().parent / "ops"
    _import_tree(ops_dir, "onnx2graph.importer.ops")
    _already_imported_ops = True
