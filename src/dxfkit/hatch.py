from __future__ import annotations

from typing import Any

from .context import DxfContext
from .diagnostics import DiagnosticKind
from .entity import Hatch, HatchEdge, HatchPath, PatternLine
from .points import Point, point_tags
from .schema import EXTRUSION, INVALID, BodyTag, EntityCodec, Marker, TagList
from .versions import DxfVersion

LINE_EDGE = 1
ARC_EDGE = 2
ELLIPSE_EDGE = 3
SPLINE_EDGE = 4


class _Cursor:
    """Sequential access to HATCH body tags, whose meaning depends on order."""

    def __init__(self, codec: EntityCodec, tags: list[BodyTag], ctx: DxfContext) -> None:
        self.codec = codec
        self.tags = tags
        self.ctx = ctx
        self.index = 0

    @property
    def done(self) -> bool:
        return self.index >= len(self.tags)

    @property
    def code(self) -> int | None:
        if self.done:
            return None
        return self.tags[self.index].code

    def take(self) -> BodyTag:
        tag = self.tags[self.index]
        self.index += 1
        return tag

    def value(self, default: Any = None) -> Any:
        value = self.codec.coerce_tag(self.take(), self.ctx)
        return default if value is INVALID else value

    def get(self, code: int, default: Any) -> Any:
        if self.code != code:
            return default
        return self.value(default)

    def point(self, code: int, *, flat: bool = False) -> Point:
        x = self.get(code, 0.0)
        y = self.get(code + 10, 0.0)
        z = 0.0 if flat else self.get(code + 20, 0.0)
        return Point(x, y, z)


class HatchCodec(EntityCodec):
    def decode(self, entity: Hatch, body: list[BodyTag], ctx: DxfContext) -> None:
        cursor = _Cursor(self, body, ctx)
        while not cursor.done:
            code = cursor.code
            if code == 10:
                entity.elevation = cursor.point(10)
            elif code == 2:
                entity.pattern_name = cursor.value("")
            elif code == 70:
                entity.solid_fill = cursor.value(1)
            elif code == 71:
                entity.associative = cursor.value(0)
            elif code == 91:
                count = cursor.value(0)
                for _ in range(count):
                    if cursor.code != 92:
                        self._short(ctx, cursor, f"expected {count} boundary paths, got {len(entity.paths)}")
                        break
                    entity.paths.append(self._read_path(cursor))
            elif code == 75:
                entity.hatch_style = cursor.value(0)
            elif code == 76:
                entity.pattern_type = cursor.value(1)
            elif code == 52:
                entity.pattern_angle = cursor.value(0.0)
            elif code == 41:
                entity.pattern_scale = cursor.value(1.0)
            elif code == 77:
                entity.pattern_double = cursor.value(0)
            elif code == 78:
                count = cursor.value(0)
                for _ in range(count):
                    if cursor.code != 53:
                        self._short(ctx, cursor, f"expected {count} pattern lines, got {len(entity.pattern_lines)}")
                        break
                    entity.pattern_lines.append(self._read_pattern_line(cursor))
            elif code == 47:
                entity.pixel_size = cursor.value(0.0)
            elif code == 98:
                count = cursor.value(0)
                for _ in range(count):
                    if cursor.code != 10:
                        self._short(ctx, cursor, f"expected {count} seed points, got {len(entity.seed_points)}")
                        break
                    entity.seed_points.append(cursor.point(10, flat=True))
            else:
                self.unknown_tag(cursor.take(), ctx)

    def _short(self, ctx: DxfContext, cursor: _Cursor, message: str) -> None:
        line = None if cursor.done else cursor.tags[cursor.index].line
        ctx.report(DiagnosticKind.FORMAT_VIOLATION, message, line=line, dxftype=self.dxftype)

    def _read_path(self, cursor: _Cursor) -> HatchPath:
        path = HatchPath(flags=cursor.value(0))
        if path.is_polyline:
            path.has_bulge = cursor.get(72, 0)
            path.is_closed = cursor.get(73, 0)
            for _ in range(cursor.get(93, 0)):
                x = cursor.get(10, 0.0)
                y = cursor.get(20, 0.0)
                bulge = cursor.get(42, 0.0) if path.has_bulge else 0.0
                path.vertices.append((x, y, bulge))
        else:
            for _ in range(cursor.get(93, 0)):
                if cursor.code != 72:
                    self._short(cursor.ctx, cursor, "boundary path has fewer edges than declared")
                    break
                path.edges.append(self._read_edge(cursor))
        for _ in range(cursor.get(97, 0)):
            if cursor.code != 330:
                break
            path.source_handles.append(cursor.value(""))
        return path

    def _read_edge(self, cursor: _Cursor) -> HatchEdge:
        edge = HatchEdge(kind=cursor.value(LINE_EDGE))
        if edge.kind == LINE_EDGE:
            edge.start = cursor.point(10, flat=True)
            edge.end = cursor.point(11, flat=True)
        elif edge.kind in (ARC_EDGE, ELLIPSE_EDGE):
            edge.center = cursor.point(10, flat=True)
            if edge.kind == ELLIPSE_EDGE:
                edge.major_axis = cursor.point(11, flat=True)
                edge.ratio = cursor.get(40, 1.0)
            else:
                edge.radius = cursor.get(40, 0.0)
            edge.start_angle = cursor.get(50, 0.0)
            edge.end_angle = cursor.get(51, 360.0)
            edge.ccw = cursor.get(73, 1)
        elif edge.kind == SPLINE_EDGE:
            edge.degree = cursor.get(94, 3)
            edge.rational = cursor.get(73, 0)
            edge.periodic = cursor.get(74, 0)
            knot_count = cursor.get(95, 0)
            point_count = cursor.get(96, 0)
            for _ in range(knot_count):
                if cursor.code != 40:
                    break
                edge.knots.append(cursor.value(0.0))
            for _ in range(point_count):
                if cursor.code != 10:
                    break
                edge.control_points.append(cursor.point(10, flat=True))
                if cursor.code == 42:
                    edge.weights.append(cursor.value(1.0))
            if cursor.ctx.version >= DxfVersion.R2010 and cursor.code == 97:
                self._read_fit_data(edge, cursor)
        else:
            self.invalid(cursor.ctx, f"unknown boundary edge type {edge.kind}")
        return edge

    def _read_fit_data(self, edge: HatchEdge, cursor: _Cursor) -> None:
        count = cursor.value(0)
        for _ in range(count):
            if cursor.code != 11:
                self._short(cursor.ctx, cursor, f"expected {count} spline fit points, got {len(edge.fit_points)}")
                break
            edge.fit_points.append(cursor.point(11, flat=True))
        if cursor.code == 12:
            edge.start_tangent = cursor.point(12, flat=True)
        if cursor.code == 13:
            edge.end_tangent = cursor.point(13, flat=True)

    def _read_pattern_line(self, cursor: _Cursor) -> PatternLine:
        line = PatternLine(angle=cursor.value(0.0))
        line.base_point = Point(cursor.get(43, 0.0), cursor.get(44, 0.0))
        line.offset = Point(cursor.get(45, 0.0), cursor.get(46, 0.0))
        for _ in range(cursor.get(79, 0)):
            if cursor.code != 49:
                break
            line.dashes.append(cursor.value(0.0))
        return line

    def encode_body(self, entity: Hatch, out: TagList, ctx: DxfContext) -> None:
        out.append((100, "AcDbHatch"))
        out.extend(point_tags(10, Point.of(entity.elevation)))
        self.encode_field(entity, EXTRUSION, out, ctx)
        out.append((2, entity.pattern_name))
        out.append((70, entity.solid_fill))
        out.append((71, entity.associative))
        out.append((91, len(entity.paths)))
        for path in entity.paths:
            _encode_path(path, out, ctx)
        out.append((75, entity.hatch_style))
        out.append((76, entity.pattern_type))
        pattern = (entity.pattern_angle, entity.pattern_scale, entity.pattern_double)
        if not entity.solid_fill or entity.pattern_lines or pattern != (0.0, 1.0, 0):
            out.append((52, entity.pattern_angle))
            out.append((41, entity.pattern_scale))
            out.append((77, entity.pattern_double))
            out.append((78, len(entity.pattern_lines)))
            for line in entity.pattern_lines:
                out.append((53, line.angle))
                out.append((43, line.base_point.x))
                out.append((44, line.base_point.y))
                out.append((45, line.offset.x))
                out.append((46, line.offset.y))
                out.append((79, len(line.dashes)))
                out.extend((49, dash) for dash in line.dashes)
        if entity.pixel_size:
            out.append((47, entity.pixel_size))
        out.append((98, len(entity.seed_points)))
        for seed in entity.seed_points:
            out.extend(point_tags(10, Point.of(seed), flat=True))


def _encode_path(path: HatchPath, out: TagList, ctx: DxfContext) -> None:
    out.append((92, path.flags))
    if path.is_polyline:
        out.append((72, path.has_bulge))
        out.append((73, path.is_closed))
        out.append((93, len(path.vertices)))
        for vertex in path.vertices:
            x, y, bulge = (*vertex, 0.0)[:3]
            out.append((10, x))
            out.append((20, y))
            if path.has_bulge:
                out.append((42, bulge))
    else:
        out.append((93, len(path.edges)))
        for edge in path.edges:
            _encode_edge(edge, out, ctx)
    out.append((97, len(path.source_handles)))
    out.extend((330, handle) for handle in path.source_handles)


def _encode_edge(edge: HatchEdge, out: TagList, ctx: DxfContext) -> None:
    out.append((72, edge.kind))
    if edge.kind == LINE_EDGE:
        out.extend(point_tags(10, edge.start, flat=True))
        out.extend(point_tags(11, edge.end, flat=True))
    elif edge.kind in (ARC_EDGE, ELLIPSE_EDGE):
        out.extend(point_tags(10, edge.center, flat=True))
        if edge.kind == ELLIPSE_EDGE:
            out.extend(point_tags(11, edge.major_axis, flat=True))
            out.append((40, edge.ratio))
        else:
            out.append((40, edge.radius))
        out.append((50, edge.start_angle))
        out.append((51, edge.end_angle))
        out.append((73, edge.ccw))
    elif edge.kind == SPLINE_EDGE:
        out.append((94, edge.degree))
        out.append((73, edge.rational))
        out.append((74, edge.periodic))
        out.append((95, len(edge.knots)))
        out.append((96, len(edge.control_points)))
        out.extend((40, knot) for knot in edge.knots)
        for index, point in enumerate(edge.control_points):
            out.extend(point_tags(10, point, flat=True))
            if edge.rational:
                out.append((42, edge.weights[index] if index < len(edge.weights) else 1.0))
        if ctx.version >= DxfVersion.R2010:
            out.append((97, len(edge.fit_points)))
            for point in edge.fit_points:
                out.extend(point_tags(11, point, flat=True))
            if edge.fit_points:
                out.extend(point_tags(12, edge.start_tangent, flat=True))
                out.extend(point_tags(13, edge.end_tangent, flat=True))


HATCH = HatchCodec(
    "HATCH",
    Hatch,
    [Marker("AcDbHatch")],
    min_version=DxfVersion.R14,
    shadowed_codes=(92, 330),
)
