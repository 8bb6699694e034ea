from __future__ import annotations

from typing import Any

from .curves import HELIX, LEADER, MLINE, SPLINE
from .dimension import DIMENSION
from .embedded import ACAD_TABLE, BODY, IMAGE, OLE2FRAME, OLEFRAME, PROXY_ENTITY, REGION, SOLID3D
from .geometry import (
    ARC,
    BLOCK,
    CIRCLE,
    ELLIPSE,
    ENDBLK,
    FACE3D,
    LIGHT,
    LINE,
    LINE3D,
    POINT,
    RAY,
    SEQEND,
    SHAPE,
    SOLID,
    TOLERANCE,
    TRACE,
    VIEWPORT,
    XLINE,
)
from .hatch import HATCH
from .polyline import DONUT, INSERT, LWPOLYLINE, POLYLINE, VERTEX
from .schema import EntityCodec
from .tables import TABLE_CODECS
from .text import ATTDEF, ATTRIB, MTEXT, TEXT

_ENTITY_CODECS: tuple[EntityCodec, ...] = (
    LINE,
    LINE3D,
    POINT,
    CIRCLE,
    ARC,
    ELLIPSE,
    SOLID,
    TRACE,
    FACE3D,
    SHAPE,
    RAY,
    XLINE,
    TOLERANCE,
    TEXT,
    ATTRIB,
    ATTDEF,
    MTEXT,
    INSERT,
    POLYLINE,
    VERTEX,
    SEQEND,
    LWPOLYLINE,
    SPLINE,
    HELIX,
    LEADER,
    MLINE,
    HATCH,
    DIMENSION,
    BODY,
    REGION,
    SOLID3D,
    PROXY_ENTITY,
    OLEFRAME,
    OLE2FRAME,
    IMAGE,
    ACAD_TABLE,
    VIEWPORT,
    LIGHT,
    BLOCK,
    ENDBLK,
    DONUT,
)

# codecs keyed by every name they accept on input
ENTITY_CODECS: dict[str, EntityCodec] = {
    name: codec for codec in _ENTITY_CODECS if codec.readable for name in codec.names
}

TYPE_ALIASES: dict[str, str] = {
    alias: codec.dxftype for codec in _ENTITY_CODECS for alias in codec.aliases
}

SUPPORTED_ENTITY_TYPES: tuple[str, ...] = tuple(codec.dxftype for codec in _ENTITY_CODECS)

# follower and block framing records are only reached through their owner
_EXPLICIT_ONLY_ENTITY_TYPES = frozenset({"VERTEX", "SEQEND", "BLOCK", "ENDBLK"})

QUERY_ENTITY_TYPES: tuple[str, ...] = tuple(
    name for name in SUPPORTED_ENTITY_TYPES if name not in _EXPLICIT_ONLY_ENTITY_TYPES
)

_BY_RECORD: dict[type, EntityCodec] = {codec.record: codec for codec in _ENTITY_CODECS}
_BY_RECORD.update((codec.record, codec) for codec in TABLE_CODECS.values())


def codec_for(name: str) -> EntityCodec | None:
    """Codec reading entities whose ``0`` tag is ``name``, or ``None``."""
    return ENTITY_CODECS.get(name.strip().upper())


def table_codec_for(name: str) -> EntityCodec | None:
    return TABLE_CODECS.get(name.strip().upper())


def codec_for_entity(entity: Any) -> EntityCodec:
    codec = _BY_RECORD.get(type(entity))
    if codec is None:
        raise TypeError(f"no DXF codec for {type(entity).__name__}")
    return codec
