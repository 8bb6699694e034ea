from __future__ import annotations

from typing import Any

from .context import DxfContext
from .entity import Helix, Leader, MLine, MLineVertex, Spline
from .points import with_axis
from .schema import EXTRUSION, BodyTag, Custom, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion


def _spline_fields() -> list[Any]:
    return [
        Marker("AcDbSpline"),
        EXTRUSION,
        Field("flags", 70),
        Field("degree", 71),
        Field("knots", 72, count_of="knots"),
        Field("control_points", 73, count_of="control_points"),
        Field("fit_points", 74, count_of="fit_points"),
        Field("knot_tolerance", 42, optional=True),
        Field("control_point_tolerance", 43, optional=True),
        Field("fit_tolerance", 44, optional=True),
        Field("start_tangent", 12, point=True, optional=True),
        Field("end_tangent", 13, point=True, optional=True),
        Field("knots", 40, repeat=True),
        Field("weights", 41, repeat=True, optional=True),
        Field("control_points", 10, point=True, repeat=True),
        Field("fit_points", 11, point=True, repeat=True),
    ]


class SplineCodec(EntityCodec):
    def finalize(self, entity: Spline, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        if entity.weights and len(entity.weights) != len(entity.control_points):
            self.invalid(
                ctx,
                f"{len(entity.weights)} weights for {len(entity.control_points)} control points",
                line,
            )


SPLINE = SplineCodec("SPLINE", Spline, _spline_fields(), min_version=DxfVersion.R13)

HELIX = SplineCodec(
    "HELIX",
    Helix,
    [
        *_spline_fields(),
        Marker("AcDbHelix"),
        Field("major_version", 90),
        Field("maintenance_version", 91),
        Field("axis_base", 10, point=True),
        Field("start_point", 11, point=True),
        Field("axis_vector", 12, point=True),
        Field("radius", 40),
        Field("turns", 41),
        Field("turn_height", 42),
        Field("handedness", 290),
        Field("constrain", 280),
    ],
    min_version=DxfVersion.R2007,
)

LEADER = EntityCodec(
    "LEADER",
    Leader,
    [
        Marker("AcDbLeader"),
        Field("dimstyle", 3),
        Field("has_arrowhead", 71),
        Field("path_type", 72),
        Field("annotation_type", 73),
        Field("hookline_direction", 74),
        Field("has_hookline", 75),
        Field("text_height", 40),
        Field("text_width", 41),
        Field("vertices", 76, count_of="vertices"),
        Field("vertices", 10, point=True, repeat=True),
        Field("block_color", 77, optional=True),
        Field("annotation_handle", 340, optional=True),
        EXTRUSION,
        Field("horizontal_direction", 211, point=True, optional=True),
        Field("block_offset", 212, point=True, optional=True),
        Field("annotation_offset", 213, point=True, optional=True),
    ],
    min_version=DxfVersion.R13,
    required=("dimstyle",),
)

_MLINE_POINTS = {11: "location", 12: "direction", 13: "miter"}


class MLineCodec(EntityCodec):
    """MLINE vertices: location, direction and miter, then per style element
    a counted list of segment parameters (74/41) and fill parameters (75/42).
    """

    def decode_custom(self, entity: MLine, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        vertices = entity.vertices
        if tag.code == 11:
            vertices.append(MLineVertex(location=with_axis(None, 0, value)))
            return
        if not vertices:
            vertices.append(MLineVertex())
        vertex = vertices[-1]
        code = tag.code
        base = code % 10 + 10
        if base in _MLINE_POINTS and code < 40:
            attr = _MLINE_POINTS[base]
            setattr(vertex, attr, with_axis(getattr(vertex, attr), (code - base) // 10, value))
        elif code == 74:
            vertex.line_params.append([])
        elif code == 41:
            if not vertex.line_params:
                vertex.line_params.append([])
            vertex.line_params[-1].append(value)
        elif code == 75:
            vertex.fill_params.append([])
        elif code == 42:
            if not vertex.fill_params:
                vertex.fill_params.append([])
            vertex.fill_params[-1].append(value)

    def encode_custom(self, entity: MLine, item: Field, out: TagList, ctx: DxfContext) -> None:
        for vertex in entity.vertices:
            for code, attr in _MLINE_POINTS.items():
                point = getattr(vertex, attr)
                out.extend([(code, point.x), (code + 10, point.y), (code + 20, point.z)])
            elements = max(len(vertex.line_params), len(vertex.fill_params))
            for index in range(elements):
                line_params = vertex.line_params[index] if index < len(vertex.line_params) else []
                fill_params = vertex.fill_params[index] if index < len(vertex.fill_params) else []
                out.append((74, len(line_params)))
                out.extend((41, value) for value in line_params)
                out.append((75, len(fill_params)))
                out.extend((42, value) for value in fill_params)


MLINE = MLineCodec(
    "MLINE",
    MLine,
    [
        Marker("AcDbMline"),
        Field("style_name", 2),
        Field("style_handle", 340, optional=True),
        Field("scale", 40),
        Field("justification", 70),
        Field("flags", 71),
        Field("vertices", 72, count_of="vertices"),
        Field("style_element_count", 73),
        Field("start_point", 10, point=True),
        EXTRUSION,
        Custom("vertices", 11, 21, 31, 12, 22, 32, 13, 23, 33, 74, 41, 75, 42),
    ],
    min_version=DxfVersion.R13,
)
