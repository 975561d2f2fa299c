# file: onnx2graph/importer/diagnostics.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

logger = logging.getLogger("onnx2graph.importer.diagnostics")


class UnsupportedPatternWarning(UserWarning):
    """A construct was imported with a best-effort substitution."""


@dataclass(frozen=True)
class Diagnostic:
    category: type[Warning]
    message: str
    op_type: str = ""
    node_name: str = ""

    def __str__(self) -> str:
        where = f"{self.op_type} '{self.node_name}': " if self.op_type else ""
        return f"{self.category.__name__}: {where}{self.message}"


class Diagnostics:
    """
    Collects non-fatal findings of one import.

    Each record is also forwarded to ``logger`` at WARNING level, so callers
    that never inspect the collector still see it in the log.
    """

    def __init__(self, logger_: Optional[logging.Logger] = None):
        self._logger = logger_ or logger
        self._records: List[Diagnostic] = []

    def warn(
        self,
        message: str,
        *,
        category: type[Warning] = UnsupportedPatternWarning,
        op_type: str = "",
        node_name: str = "",
    ) -> Diagnostic:
        record = Diagnostic(category, message, op_type, node_name)
        self._records.append(record)
        self._logger.warning("%s", record)
        return record

    @property
    def records(self) -> tuple[Diagnostic, ...]:
        return tuple(self._records)

    def of_category(self, category: type[Warning]) -> List[Diagnostic]:
        return [r for r in self._records if issubclass(r.category, category)]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
