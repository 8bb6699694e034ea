from typing import Sequence

from .codecs import SUPPORTED_ENTITY_TYPES, codec_for, codec_for_entity
from .common import Checked, checked
from .context import DxfContext
from .convert import ConvertResult, export_ezdxf
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .document import BlockDefinition, Document, EntitySection, Layout
from .errors import DxfError, DxfIOError, DxfStructureError
from .points import Point
from .schema import ReadResult, ReadStatus
from .sections import WriteResult, dumps, from_tags, loads, read, readfile, to_tags, write, writefile
from .versions import DxfVersion
from . import entity

__all__ = [
    "read",
    "readfile",
    "loads",
    "write",
    "writefile",
    "dumps",
    "from_tags",
    "to_tags",
    "export_ezdxf",
    "codec_for",
    "codec_for_entity",
    "checked",
    "Document",
    "EntitySection",
    "BlockDefinition",
    "Layout",
    "DxfContext",
    "DxfVersion",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "DxfError",
    "DxfIOError",
    "DxfStructureError",
    "Point",
    "ReadResult",
    "ReadStatus",
    "WriteResult",
    "ConvertResult",
    "Checked",
    "SUPPORTED_ENTITY_TYPES",
    "entity",
]


def main(argv: Sequence[str] | None = None) -> int:
    from dxfkit.cli import main as cli_main

    return cli_main(argv)
