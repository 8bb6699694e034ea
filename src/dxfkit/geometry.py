from __future__ import annotations

from typing import Any

from .context import DxfContext
from .entity import (
    Arc,
    Block,
    Circle,
    DxfPoint,
    Ellipse,
    EndBlk,
    Face3d,
    Light,
    Line,
    Line3d,
    Ray,
    Seqend,
    Shape,
    Solid,
    Tolerance,
    Trace,
    Viewport,
    XLine,
)
from .points import Point
from .schema import EXTRUSION, THICKNESS, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion

R13 = DxfVersion.R13


class CircleCodec(EntityCodec):
    def finalize(self, entity: Circle, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        if entity.radius <= 0.0:
            self.invalid(ctx, f"radius {entity.radius} must be positive", line)

    def check(self, entity: Circle, ctx: DxfContext) -> bool:
        if entity.radius <= 0.0:
            return self.refuse(ctx, f"radius {entity.radius} must be positive, {self.dxftype} is not written")
        return True


class EllipseCodec(EntityCodec):
    def finalize(self, entity: Ellipse, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        if not 0.0 < entity.ratio <= 1.0:
            self.invalid(ctx, f"axis ratio {entity.ratio} is outside (0, 1], reset to 1.0", line)
            entity.ratio = 1.0

    def check(self, entity: Ellipse, ctx: DxfContext) -> bool:
        if not 0.0 < entity.ratio <= 1.0:
            return self.refuse(ctx, f"axis ratio {entity.ratio} is outside (0, 1], ELLIPSE is not written")
        return True


class Line3dCodec(EntityCodec):
    """3DLINE from R10 and R11 files. Newer releases get the same record as LINE."""

    def check(self, entity: Line3d, ctx: DxfContext) -> bool:
        if Point.of(entity.start) == Point.of(entity.end):
            return self.refuse(ctx, "start and end points are identical, 3DLINE is not written")
        return True

    def encode(self, entity: Line3d, ctx: DxfContext) -> TagList | None:
        out = super().encode(entity, ctx)
        if out is not None and ctx.version > DxfVersion.R11:
            out[0] = (0, "LINE")
        return out


class QuadCodec(EntityCodec):
    """SOLID, TRACE and 3DFACE: a missing fourth corner repeats the third."""

    def finalize(self, entity: Solid, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        if entity.p3 is None:
            entity.p3 = entity.p2

    def field_value(self, entity: Any, item: Field, ctx: DxfContext) -> Any:
        if item.attr == "p3" and entity.p3 is None:
            return entity.p2
        return super().field_value(entity, item, ctx)


def _corners() -> list[Field]:
    return [Field(f"p{index}", 10 + index, point=True) for index in range(4)]


LINE = EntityCodec(
    "LINE",
    Line,
    [
        Marker("AcDbLine"),
        THICKNESS,
        Field("start", 10, point=True),
        Field("end", 11, point=True),
        EXTRUSION,
    ],
)

LINE3D = Line3dCodec(
    "3DLINE",
    Line3d,
    [
        Marker("AcDbLine"),
        THICKNESS,
        Field("start", 10, point=True),
        Field("end", 11, point=True),
        EXTRUSION,
    ],
)

POINT = EntityCodec(
    "POINT",
    DxfPoint,
    [
        Marker("AcDbPoint"),
        Field("location", 10, point=True),
        THICKNESS,
        EXTRUSION,
        Field("angle", 50, optional=True),
    ],
)

CIRCLE = CircleCodec(
    "CIRCLE",
    Circle,
    [
        Marker("AcDbCircle"),
        THICKNESS,
        Field("center", 10, point=True),
        Field("radius", 40),
        EXTRUSION,
    ],
)

ARC = CircleCodec(
    "ARC",
    Arc,
    [
        Marker("AcDbCircle"),
        THICKNESS,
        Field("center", 10, point=True),
        Field("radius", 40),
        EXTRUSION,
        Marker("AcDbArc"),
        Field("start_angle", 50),
        Field("end_angle", 51),
    ],
)

ELLIPSE = EllipseCodec(
    "ELLIPSE",
    Ellipse,
    [
        Marker("AcDbEllipse"),
        Field("center", 10, point=True),
        Field("major_axis", 11, point=True),
        EXTRUSION,
        Field("ratio", 40),
        Field("start_param", 41),
        Field("end_param", 42),
    ],
    min_version=R13,
)

SOLID = QuadCodec(
    "SOLID",
    Solid,
    [Marker("AcDbTrace"), *_corners(), THICKNESS, EXTRUSION],
    elevation_needs_flatland=True,
)

TRACE = QuadCodec(
    "TRACE",
    Trace,
    [Marker("AcDbTrace"), *_corners(), THICKNESS, EXTRUSION],
    elevation_needs_flatland=True,
)

FACE3D = QuadCodec(
    "3DFACE",
    Face3d,
    [Marker("AcDbFace"), *_corners(), Field("invisible_edges", 70, optional=True)],
)

SHAPE = EntityCodec(
    "SHAPE",
    Shape,
    [
        Marker("AcDbShape"),
        THICKNESS,
        Field("insert", 10, point=True),
        Field("size", 40),
        Field("name", 2),
        Field("rotation", 50, optional=True),
        Field("x_scale", 41, optional=True),
        Field("oblique", 51, optional=True),
        EXTRUSION,
    ],
    required=("name",),
)

RAY = EntityCodec(
    "RAY",
    Ray,
    [Marker("AcDbRay"), Field("start", 10, point=True), Field("direction", 11, point=True)],
    min_version=R13,
)

XLINE = EntityCodec(
    "XLINE",
    XLine,
    [Marker("AcDbXline"), Field("start", 10, point=True), Field("direction", 11, point=True)],
    min_version=R13,
)

TOLERANCE = EntityCodec(
    "TOLERANCE",
    Tolerance,
    [
        Marker("AcDbFcf"),
        Field("dimstyle", 3),
        Field("insert", 10, point=True),
        Field("text", 1),
        EXTRUSION,
        Field("x_direction", 11, point=True),
    ],
    min_version=R13,
    required=("dimstyle",),
)

BLOCK = EntityCodec(
    "BLOCK",
    Block,
    [
        Marker("AcDbBlockBegin"),
        Field("name", 2),
        Field("flags", 70),
        Field("base_point", 10, point=True),
        Field("name", 3),
        Field("xref_path", 1, optional=True),
        Field("description", 4, optional=True, min_version=DxfVersion.R2000),
    ],
    required=("name",),
)

ENDBLK = EntityCodec("ENDBLK", EndBlk, [Marker("AcDbBlockEnd")])

SEQEND = EntityCodec("SEQEND", Seqend)

VIEWPORT = EntityCodec(
    "VIEWPORT",
    Viewport,
    [
        Marker("AcDbViewport"),
        Field("center", 10, point=True),
        Field("width", 40),
        Field("height", 41),
        Field("status", 68),
        Field("viewport_id", 69),
        Field("view_center", 12, point=True, flat=True, min_version=R13),
        Field("snap_base", 13, point=True, flat=True, min_version=R13),
        Field("snap_spacing", 14, point=True, flat=True, min_version=R13),
        Field("grid_spacing", 15, point=True, flat=True, min_version=R13),
        Field("view_direction", 16, point=True, min_version=R13),
        Field("view_target", 17, point=True, min_version=R13),
        Field("lens_length", 42, min_version=R13),
        Field("front_clip", 43, min_version=R13),
        Field("back_clip", 44, min_version=R13),
        Field("view_height", 45, min_version=R13),
        Field("snap_angle", 50, min_version=R13),
        Field("twist_angle", 51, min_version=R13),
        Field("circle_zoom", 72, min_version=R13),
        Field("frozen_layers", 331, repeat=True, optional=True, min_version=R13),
        Field("flags", 90, min_version=R13),
        Field("clipping_boundary_handle", 340, optional=True, min_version=R13),
        Field("plot_style_sheet", 1, optional=True, min_version=DxfVersion.R2000),
        Field("render_mode", 281, min_version=DxfVersion.R2000),
        Field("ucs_per_viewport", 71, min_version=DxfVersion.R2000),
        Field("ucs_icon", 74, min_version=DxfVersion.R2000),
        Field("ucs_origin", 110, point=True, optional=True, min_version=DxfVersion.R2000),
        Field("ucs_x_axis", 111, point=True, optional=True, min_version=DxfVersion.R2000),
        Field("ucs_y_axis", 112, point=True, optional=True, min_version=DxfVersion.R2000),
        Field("ucs_handle", 345, optional=True, min_version=DxfVersion.R2000),
        Field("ucs_base_handle", 346, optional=True, min_version=DxfVersion.R2000),
        Field("ucs_ortho_type", 79, optional=True, min_version=DxfVersion.R2000),
        Field("elevation", 146, optional=True, min_version=DxfVersion.R2000),
        Field("shade_plot_mode", 170, optional=True, min_version=DxfVersion.R2000),
        Field("grid_frequency", 61, optional=True, min_version=DxfVersion.R2007),
    ],
)

LIGHT = EntityCodec(
    "LIGHT",
    Light,
    [
        Marker("AcDbLight"),
        Field("version", 90),
        Field("name", 1),
        Field("light_type", 70),
        Field("status", 290),
        Field("plot_glyph", 291),
        Field("intensity", 40),
        Field("location", 10, point=True),
        Field("target", 11, point=True),
        Field("attenuation_type", 72),
        Field("use_attenuation_limits", 292),
        Field("attenuation_start", 41),
        Field("attenuation_end", 42),
        Field("hotspot_angle", 50),
        Field("falloff_angle", 51),
        Field("cast_shadows", 293),
        Field("shadow_type", 73),
        Field("shadow_map_size", 91),
        Field("shadow_softness", 280),
    ],
    min_version=DxfVersion.R2007,
)
