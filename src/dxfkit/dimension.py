from __future__ import annotations

from typing import Any

from .context import DxfContext
from .entity import Dimension
from .schema import EXTRUSION, BodyTag, Custom, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion

ROTATED = 0
ALIGNED = 1
ANGULAR = 2
DIAMETER = 3
RADIUS = 4
ANGULAR_3POINT = 5
ORDINATE = 6

BLOCK_PRIVATE = 32
ORDINATE_X = 64
USER_TEXT_POSITION = 128

_TYPE_MASK = 0x0F

R2000 = DxfVersion.R2000

_HEAD: list[Any] = [
    Marker("AcDbDimension"),
    Field("version", 280, optional=True, min_version=DxfVersion.R2010),
    Field("block_name", 2),
    Field("definition_point", 10, point=True),
    Field("text_midpoint", 11, point=True),
    Custom("flags", 70),
    Field("attachment_point", 71, min_version=R2000),
    Field("line_spacing_style", 72, min_version=R2000),
    Field("line_spacing_factor", 41, min_version=R2000),
    Field("actual_measurement", 42, optional=True, min_version=R2000),
    Field("text", 1),
    Field("text_rotation", 53, optional=True),
    Field("horizontal_direction", 51, optional=True),
    EXTRUSION,
    Field("dimstyle", 3),
]

_CLONE_INSERT = Field("clone_insert", 12, point=True)
_DEFPOINT2 = Field("defpoint2", 13, point=True)
_DEFPOINT3 = Field("defpoint3", 14, point=True)
_DEFPOINT4 = Field("defpoint4", 15, point=True)
_DEFPOINT5 = Field("defpoint5", 16, point=True)
_LEADER_LENGTH = Field("leader_length", 40)
_ANGLE = Field("angle", 50)
_OBLIQUE = Field("oblique_angle", 52)

_DEFINITION_FIELDS = (
    _CLONE_INSERT,
    _DEFPOINT2,
    _DEFPOINT3,
    _DEFPOINT4,
    _DEFPOINT5,
    _LEADER_LENGTH,
    _ANGLE,
    _OBLIQUE,
)

_SUBCLASS_LAYOUTS: dict[int, list[Any]] = {
    ROTATED: [
        Marker("AcDbAlignedDimension"),
        _CLONE_INSERT,
        _DEFPOINT2,
        _DEFPOINT3,
        _ANGLE,
        _OBLIQUE,
        Marker("AcDbRotatedDimension"),
    ],
    ALIGNED: [Marker("AcDbAlignedDimension"), _CLONE_INSERT, _DEFPOINT2, _DEFPOINT3, _OBLIQUE],
    ANGULAR: [Marker("AcDb2LineAngularDimension"), _DEFPOINT2, _DEFPOINT3, _DEFPOINT4, _DEFPOINT5],
    DIAMETER: [Marker("AcDbDiametricDimension"), _DEFPOINT4, _LEADER_LENGTH],
    RADIUS: [Marker("AcDbRadialDimension"), _DEFPOINT4, _LEADER_LENGTH],
    ANGULAR_3POINT: [Marker("AcDb3PointAngularDimension"), _DEFPOINT2, _DEFPOINT3, _DEFPOINT4],
    ORDINATE: [Marker("AcDbOrdinateDimension"), _DEFPOINT2, _DEFPOINT3],
}

_SUBCLASS_MARKERS = sorted(
    {item.name for layout in _SUBCLASS_LAYOUTS.values() for item in layout if isinstance(item, Marker)}
)


class DimensionCodec(EntityCodec):
    """DIMENSION: shared head, then the subclass of its dimension type.

    Every definition point is kept; points the type does not use are
    written after its subclass fields when they differ from the default.
    """

    def decode_custom(self, entity: Dimension, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        dim_type = value & _TYPE_MASK
        if dim_type > ORDINATE:
            self.invalid(ctx, f"dimension type {dim_type} is outside [0, 6], reset to 0", tag.line)
            dim_type = ROTATED
        entity.dim_type = dim_type
        entity.block_private = bool(value & BLOCK_PRIVATE)
        entity.ordinate_x = bool(value & ORDINATE_X)
        entity.user_text_position = bool(value & USER_TEXT_POSITION)

    def encode_custom(self, entity: Dimension, item: Field, out: TagList, ctx: DxfContext) -> None:
        out.append((70, entity.flags))

    def check(self, entity: Dimension, ctx: DxfContext) -> bool:
        if entity.dim_type not in _SUBCLASS_LAYOUTS:
            return self.refuse(ctx, f"dimension type {entity.dim_type} is outside [0, 6], DIMENSION is not written")
        return True

    def encode_body(self, entity: Dimension, out: TagList, ctx: DxfContext) -> None:
        self.encode_layout(_HEAD, entity, out, ctx)
        layout = _SUBCLASS_LAYOUTS[entity.dim_type]
        self.encode_layout(layout, entity, out, ctx)
        for item in _DEFINITION_FIELDS:
            if item not in layout and getattr(entity, item.attr) != self.default_value(item):
                self.encode_field(entity, item, out, ctx)


DIMENSION = DimensionCodec(
    "DIMENSION",
    Dimension,
    [*_HEAD, *_DEFINITION_FIELDS],
    required=("dimstyle",),
    extra_markers=_SUBCLASS_MARKERS,
)
