from __future__ import annotations

from dataclasses import replace
from typing import Any

from .common import CommonAttributes
from .context import DxfContext
from .diagnostics import DiagnosticKind
from .entity import Donut, Insert, LwPolyline, LwVertex, Polyline, Seqend, Vertex
from .geometry import SEQEND
from .points import Point
from .schema import (
    EXTRUSION,
    THICKNESS,
    BodyTag,
    Custom,
    EntityCodec,
    Field,
    Marker,
    TagList,
    read_followers,
)
from .text import ATTRIB
from .versions import DxfVersion

# POLYLINE flag bits
CLOSED = 1
CURVE_FIT = 2
SPLINE_FIT = 4
POLYLINE_3D = 8
POLYMESH = 16
MESH_CLOSED_N = 32
POLYFACE = 64
CONTINUOUS_LINETYPE = 128

# VERTEX flag bits
VERTEX_3D = 32
VERTEX_MESH = 64
VERTEX_FACE = 128


def polyline_marker(flags: int) -> str:
    if flags & POLYLINE_3D:
        return "AcDb3dPolyline"
    if flags & POLYMESH:
        return "AcDbPolygonMesh"
    if flags & POLYFACE:
        return "AcDbPolyFaceMesh"
    return "AcDb2dPolyline"


def vertex_marker(flags: int) -> str:
    if flags & VERTEX_FACE:
        return "AcDbPolyFaceMeshVertex" if flags & VERTEX_MESH else "AcDbFaceRecord"
    if flags & VERTEX_MESH:
        return "AcDbPolygonMeshVertex"
    if flags & VERTEX_3D:
        return "AcDb3dPolylineVertex"
    return "AcDb2dVertex"


def seqend_for(owner: Any) -> Seqend:
    if owner.seqend is not None:
        return owner.seqend
    return Seqend(common=CommonAttributes(layer=owner.common.layer, paperspace=owner.common.paperspace))


class VertexCodec(EntityCodec):
    def marker_name(self, item: Marker, entity: Vertex) -> str:
        if item.variant:
            return vertex_marker(entity.flags)
        return item.name


class FollowerCodec(EntityCodec):
    """Owner of a follower chain closed by SEQEND (POLYLINE, INSERT)."""

    follower: EntityCodec
    chain_attr: str

    def follows(self, entity: Any) -> bool:
        return True

    def read_followers(self, entity: Any, reader: Any, ctx: DxfContext) -> bool:
        if not self.follows(entity):
            return True
        items, seqend, ok = read_followers(reader, ctx, self.follower, SEQEND, self.dxftype)
        setattr(entity, self.chain_attr, items)
        entity.seqend = seqend
        return ok

    def encode(self, entity: Any, ctx: DxfContext) -> TagList | None:
        out = super().encode(entity, ctx)
        if out is None or not self.follows_on_write(entity):
            return out
        for item in getattr(entity, self.chain_attr):
            tags = self.follower.encode(item, ctx)
            if tags is None:
                ctx.report(
                    DiagnosticKind.DISCARDED_ENTITY,
                    f"{self.dxftype} is not written because one of its {self.follower.dxftype} records was refused",
                    dxftype=self.dxftype,
                )
                return None
            out.extend(tags)
        tags = SEQEND.encode(seqend_for(entity), ctx)
        if tags is None:
            return None
        out.extend(tags)
        return out

    def follows_on_write(self, entity: Any) -> bool:
        return True


class PolylineCodec(FollowerCodec):
    chain_attr = "vertices"

    def marker_name(self, item: Marker, entity: Polyline) -> str:
        if item.variant:
            return polyline_marker(entity.flags)
        return item.name

    def field_value(self, entity: Polyline, item: Field, ctx: DxfContext) -> Any:
        if item.attr == "vertices_follow":
            return 1
        return super().field_value(entity, item, ctx)

    def finalize(self, entity: Polyline, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        if entity.vertices_follow != 1:
            self.invalid(ctx, f"vertices follow flag {entity.vertices_follow} restored to 1", line)
            entity.vertices_follow = 1


class InsertCodec(FollowerCodec):
    chain_attr = "attribs"

    def follows(self, entity: Insert) -> bool:
        return bool(entity.attributes_follow)

    def follows_on_write(self, entity: Insert) -> bool:
        return bool(entity.attributes_follow or entity.attribs)

    def check(self, entity: Insert, ctx: DxfContext) -> bool:
        if entity.attribs and not entity.attributes_follow:
            ctx.report(
                DiagnosticKind.INVARIANT_VIOLATION,
                "INSERT carries ATTRIB records but attributes follow flag is 0, written as 1",
                dxftype=self.dxftype,
            )
        return True

    def field_value(self, entity: Insert, item: Field, ctx: DxfContext) -> Any:
        if item.attr == "attributes_follow":
            return 1 if entity.attribs or entity.attributes_follow else 0
        return super().field_value(entity, item, ctx)


VERTEX = VertexCodec(
    "VERTEX",
    Vertex,
    [
        Marker("AcDbVertex"),
        Marker("AcDb2dVertex", variant=True),
        Field("location", 10, point=True),
        Field("start_width", 40, optional=True),
        Field("end_width", 41, optional=True),
        Field("bulge", 42, optional=True),
        Field("flags", 70, optional=True),
        Field("tangent", 50, optional=True),
        Field("vtx0", 71, optional=True),
        Field("vtx1", 72, optional=True),
        Field("vtx2", 73, optional=True),
        Field("vtx3", 74, optional=True),
    ],
    extra_markers=("AcDb3dPolylineVertex", "AcDbPolygonMeshVertex", "AcDbPolyFaceMeshVertex", "AcDbFaceRecord"),
)

POLYLINE = PolylineCodec(
    "POLYLINE",
    Polyline,
    [
        Marker("AcDb2dPolyline", variant=True),
        Field("vertices_follow", 66),
        Field("location", 10, point=True),
        THICKNESS,
        Field("flags", 70, optional=True),
        Field("default_start_width", 40, optional=True),
        Field("default_end_width", 41, optional=True),
        Field("m_count", 71, optional=True),
        Field("n_count", 72, optional=True),
        Field("m_density", 73, optional=True),
        Field("n_density", 74, optional=True),
        Field("smooth_type", 75, optional=True),
        EXTRUSION,
    ],
    extra_markers=("AcDb3dPolyline", "AcDbPolygonMesh", "AcDbPolyFaceMesh"),
)
POLYLINE.follower = VERTEX

INSERT = InsertCodec(
    "INSERT",
    Insert,
    [
        Marker("AcDbBlockReference"),
        Field("attributes_follow", 66, optional=True),
        Field("name", 2),
        Field("insert", 10, point=True),
        Field("x_scale", 41, optional=True),
        Field("y_scale", 42, optional=True),
        Field("z_scale", 43, optional=True),
        Field("rotation", 50, optional=True),
        Field("column_count", 70, optional=True),
        Field("row_count", 71, optional=True),
        Field("column_spacing", 44, optional=True),
        Field("row_spacing", 45, optional=True),
        EXTRUSION,
    ],
    required=("name",),
)
INSERT.follower = ATTRIB

_LW_VERTEX_ATTRS = {20: "y", 40: "start_width", 41: "end_width", 42: "bulge"}


class LwPolylineCodec(EntityCodec):
    def decode_custom(self, entity: LwPolyline, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        vertices = entity.vertices
        if tag.code == 10:
            vertices.append(LwVertex(x=value))
            return
        if not vertices:
            vertices.append(LwVertex())
        vertices[-1] = replace(vertices[-1], **{_LW_VERTEX_ATTRS[tag.code]: value})

    def encode_custom(self, entity: LwPolyline, item: Field, out: TagList, ctx: DxfContext) -> None:
        for vertex in entity.vertices:
            out.append((10, vertex.x))
            out.append((20, vertex.y))
            if vertex.start_width:
                out.append((40, vertex.start_width))
            if vertex.end_width:
                out.append((41, vertex.end_width))
            if vertex.bulge:
                out.append((42, vertex.bulge))


LWPOLYLINE = LwPolylineCodec(
    "LWPOLYLINE",
    LwPolyline,
    [
        Marker("AcDbPolyline"),
        Field("vertices", 90, count_of="vertices"),
        Field("flags", 70),
        Field("const_width", 43, optional=True),
        Field("elevation", 38, optional=True),
        THICKNESS,
        Custom("vertices", 10, 20, 40, 41, 42),
        EXTRUSION,
    ],
    min_version=DxfVersion.R14,
    shadowed_codes=(38,),
)


def _follower_common(owner: CommonAttributes, handle: int) -> CommonAttributes:
    return CommonAttributes(
        handle=handle,
        layer=owner.layer,
        linetype=owner.linetype,
        color=owner.color,
        paperspace=owner.paperspace,
    )


class DonutCodec(EntityCodec):
    """Writes a DONUT as a closed two-vertex POLYLINE with full bulges."""

    def check(self, entity: Donut, ctx: DxfContext) -> bool:
        if entity.inside_diameter < 0.0:
            return self.refuse(ctx, f"inside diameter {entity.inside_diameter} is negative, DONUT is not written")
        if entity.outside_diameter <= entity.inside_diameter:
            return self.refuse(
                ctx,
                f"outside diameter {entity.outside_diameter} is not greater than "
                f"inside diameter {entity.inside_diameter}, DONUT is not written",
            )
        return True

    def encode(self, entity: Donut, ctx: DxfContext) -> TagList | None:
        if not self.check(entity, ctx):
            return None
        return POLYLINE.encode(self.expand(entity, ctx), ctx)

    def expand(self, entity: Donut, ctx: DxfContext) -> Polyline:
        width = (entity.outside_diameter - entity.inside_diameter) / 2.0
        offset = (entity.outside_diameter + entity.inside_diameter) / 4.0
        center = entity.center
        polyline = Polyline(
            common=replace(entity.common, handle=ctx.next_handle()),
            location=Point(0.0, 0.0, center.z),
            flags=CLOSED,
            default_start_width=width,
            default_end_width=width,
        )
        for x in (center.x - offset, center.x + offset):
            polyline.vertices.append(
                Vertex(
                    common=_follower_common(entity.common, ctx.next_handle()),
                    location=Point(x, center.y, center.z),
                    start_width=width,
                    end_width=width,
                    bulge=1.0,
                )
            )
        polyline.seqend = Seqend(common=_follower_common(entity.common, ctx.next_handle()))
        return polyline


DONUT = DonutCodec("DONUT", Donut, readable=False)
