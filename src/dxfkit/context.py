from __future__ import annotations

from dataclasses import dataclass, field

from .diagnostics import WARNING, Diagnostic, DiagnosticKind, Diagnostics
from .versions import DEFAULT_VERSION, DxfVersion


@dataclass
class DxfContext:
    """Per-invocation codec settings.

    ``version`` is the declared version of the file being read, or the
    target version of the file being written. ``flatland`` re-enables the
    legacy elevation group (38) for SOLID and TRACE on R11 and older.
    ``graphics_size_64bit`` writes the proxy graphics size with group 160
    instead of 92.
    """

    version: DxfVersion = DEFAULT_VERSION
    flatland: bool = False
    graphics_size_64bit: bool = False
    source: str = "<stream>"
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    last_handle: int = 0

    def __post_init__(self) -> None:
        self.version = DxfVersion.parse(self.version)

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        line: int | None = None,
        dxftype: str | None = None,
        severity: str = WARNING,
    ) -> Diagnostic:
        return self.diagnostics.add(
            Diagnostic(
                kind=kind,
                message=message,
                source=self.source,
                line=line,
                dxftype=dxftype,
                severity=severity,
            )
        )

    def next_handle(self) -> int:
        self.last_handle += 1
        return self.last_handle

    def reserve_handle(self, handle: int) -> None:
        if handle > self.last_handle:
            self.last_handle = handle
