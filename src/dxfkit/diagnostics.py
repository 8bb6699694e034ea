from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    COMMENT = "comment"
    UNKNOWN_TAG = "unknown-tag"
    UNKNOWN_ENTITY = "unknown-entity"
    FORMAT_VIOLATION = "format-violation"
    SUBCLASS_MISMATCH = "subclass-mismatch"
    INVARIANT_VIOLATION = "invariant-violation"
    MISSING_REQUIREMENT = "missing-requirement"
    VERSION_MISMATCH = "version-mismatch"
    EMPTY_LAYER = "empty-layer"
    EMPTY_LINETYPE = "empty-linetype"
    GRAPHICS_SIZE_MISMATCH = "graphics-size-mismatch"
    DISCARDED_ENTITY = "discarded-entity"
    IO_ERROR = "io-error"


INFO = "info"
WARNING = "warning"
ERROR = "error"

_LOG_LEVELS = {INFO: logging.INFO, WARNING: logging.WARNING, ERROR: logging.ERROR}


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    source: str = "<stream>"
    line: int | None = None
    dxftype: str | None = None
    severity: str = WARNING

    def __str__(self) -> str:
        location = self.source if self.line is None else f"{self.source}:{self.line}"
        subject = f" [{self.dxftype}]" if self.dxftype else ""
        return f"{location}:{subject} {self.kind.value}: {self.message}"


class Diagnostics:
    def __init__(self, listener: Callable[[Diagnostic], None] | None = None) -> None:
        self._records: list[Diagnostic] = []
        self.listener = listener

    def add(self, diagnostic: Diagnostic) -> Diagnostic:
        self._records.append(diagnostic)
        logger.log(_LOG_LEVELS.get(diagnostic.severity, logging.WARNING), "%s", diagnostic)
        if self.listener is not None:
            self.listener(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [record for record in self._records if record.kind is kind]

    def since(self, mark: int) -> list[Diagnostic]:
        return self._records[mark:]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __getitem__(self, index: int) -> Diagnostic:
        return self._records[index]
