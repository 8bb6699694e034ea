from __future__ import annotations

from typing import Any


class DxfError(Exception):
    pass


class DxfStructureError(DxfError, ValueError):
    def __init__(self, message: str, *, source: str = "<stream>", line: int | None = None) -> None:
        self.source = source
        self.line = line
        location = source if line is None else f"{source}:{line}"
        super().__init__(f"{location}: {message}")


class DxfIOError(DxfError, OSError):
    def __init__(self, message: str, *, partial: Any = None) -> None:
        super().__init__(message)
        self.partial = partial
