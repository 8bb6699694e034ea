from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .common import BYBLOCK, BYLAYER, DEFAULT_LINETYPE
from .context import DxfContext
from .document import Document, Layout
from .entity import (
    Arc,
    Circle,
    DxfEntity,
    Ellipse,
    Hatch,
    HatchEdge,
    Insert,
    Polyline,
    Spline,
)
from .hatch import ARC_EDGE, ELLIPSE_EDGE, LINE_EDGE, SPLINE_EDGE
from .points import Point
from .polyline import CLOSED, DONUT, POLYFACE, POLYLINE_3D, POLYMESH
from .sections import readfile


@dataclass(frozen=True)
class ConvertResult:
    source_path: str
    output_path: str
    total_entities: int
    written_entities: int
    skipped_entities: int
    skipped_by_type: dict[str, int]


def export_ezdxf(
    source: str | Path | Document | Layout,
    output_path: str | Path,
    *,
    types: str | Iterable[str] | None = None,
    dxf_version: str = "R2010",
    strict: bool = False,
) -> ConvertResult:
    """Replay parsed records into an ezdxf drawing and save it.

    Block definitions are copied first so INSERT references resolve; kinds
    ezdxf cannot build from the parsed fields are counted as skipped.
    """
    ezdxf = _require_ezdxf()
    source_path, layout = _resolve_layout(source)

    dxf_doc = ezdxf.new(dxfversion=dxf_version)
    for definition in layout.doc.blocks:
        name = definition.name
        if not name or name.startswith("*") or name in dxf_doc.blocks:
            continue
        block = dxf_doc.blocks.new(name=name, base_point=tuple(definition.block.base_point))
        for entity in definition.entities:
            _write_entity_to_layout(block, entity)

    modelspace = dxf_doc.modelspace()
    total = 0
    written = 0
    skipped_by_type: dict[str, int] = {}

    for entity in layout.query(types):
        total += 1
        if _write_entity_to_layout(modelspace, entity):
            written += 1
            continue
        skipped_by_type[entity.dxftype] = skipped_by_type.get(entity.dxftype, 0) + 1

    skipped = total - written
    if strict and skipped > 0:
        summary = ", ".join(
            f"{dxftype}:{count}" for dxftype, count in sorted(skipped_by_type.items())
        )
        raise ValueError(f"failed to convert {skipped} entities ({summary})")

    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    dxf_doc.saveas(str(out_path))

    return ConvertResult(
        source_path=source_path,
        output_path=str(out_path),
        total_entities=total,
        written_entities=written,
        skipped_entities=skipped,
        skipped_by_type=dict(sorted(skipped_by_type.items())),
    )


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required for the ezdxf export. "
            'Install it with `pip install "dxfkit[dxf]"`.'
        ) from exc
    return ezdxf


def _resolve_layout(source: str | Path | Document | Layout) -> tuple[str, Layout]:
    if isinstance(source, Layout):
        return source.doc.source, source
    if isinstance(source, Document):
        return source.source, source.modelspace()
    doc = readfile(source)
    return str(source), doc.modelspace()


def _write_entity_to_layout(layout: Any, entity: DxfEntity) -> bool:
    try:
        return _write_entity_to_layout_unsafe(layout, entity)
    except Exception:
        return False


def _write_entity_to_layout_unsafe(layout: Any, entity: Any) -> bool:
    dxftype = entity.dxftype
    dxfattribs = _entity_dxfattribs(entity)

    if dxftype in {"LINE", "3DLINE"}:
        layout.add_line(_point3(entity.start), _point3(entity.end), dxfattribs=dxfattribs)
        return True

    if dxftype == "POINT":
        layout.add_point(_point3(entity.location), dxfattribs=dxfattribs)
        return True

    if dxftype == "CIRCLE":
        return _write_circle(layout, entity, dxfattribs)

    if dxftype == "ARC":
        return _write_arc(layout, entity, dxfattribs)

    if dxftype == "ELLIPSE":
        return _write_ellipse(layout, entity, dxfattribs)

    if dxftype in {"SOLID", "TRACE", "3DFACE"}:
        points = [entity.p0, entity.p1, entity.p2, entity.p3 if entity.p3 is not None else entity.p2]
        add = {"SOLID": layout.add_solid, "TRACE": layout.add_trace, "3DFACE": layout.add_3dface}[dxftype]
        add([_point3(point) for point in points], dxfattribs=dxfattribs)
        return True

    if dxftype in {"RAY", "XLINE"}:
        add = layout.add_ray if dxftype == "RAY" else layout.add_xline
        add(_point3(entity.start), _point3(entity.direction), dxfattribs=dxfattribs)
        return True

    if dxftype in {"TEXT", "ATTDEF"}:
        return _write_text_like(layout, entity, dxfattribs)

    if dxftype == "MTEXT":
        return _write_mtext(layout, entity, dxfattribs)

    if dxftype == "LWPOLYLINE":
        vertices = [
            (vertex.x, vertex.y, vertex.start_width, vertex.end_width, vertex.bulge)
            for vertex in entity.vertices
        ]
        if not vertices:
            return False
        layout.add_lwpolyline(
            vertices,
            format="xyseb",
            close=bool(entity.flags & CLOSED),
            dxfattribs=dxfattribs,
        )
        return True

    if dxftype == "POLYLINE":
        return _write_polyline(layout, entity, dxfattribs)

    if dxftype == "DONUT":
        if entity.outside_diameter <= entity.inside_diameter or entity.inside_diameter < 0.0:
            return False
        return _write_polyline(layout, DONUT.expand(entity, DxfContext()), dxfattribs)

    if dxftype == "SPLINE":
        return _write_spline(layout, entity, dxfattribs)

    if dxftype == "INSERT":
        return _write_insert(layout, entity, dxfattribs)

    if dxftype == "HATCH":
        return _write_hatch(layout, entity, dxfattribs)

    if dxftype == "LEADER":
        if len(entity.vertices) < 2:
            return False
        layout.add_leader(
            [_point3(vertex) for vertex in entity.vertices],
            dimstyle=entity.dimstyle,
            dxfattribs=dxfattribs,
        )
        return True

    return False


def _write_circle(layout: Any, entity: Circle, dxfattribs: dict[str, Any]) -> bool:
    if entity.radius <= 0.0:
        return False
    layout.add_circle(_point3(entity.center), entity.radius, dxfattribs=dxfattribs)
    return True


def _write_arc(layout: Any, entity: Arc, dxfattribs: dict[str, Any]) -> bool:
    if entity.radius <= 0.0:
        return False
    layout.add_arc(
        _point3(entity.center),
        entity.radius,
        entity.start_angle,
        entity.end_angle,
        dxfattribs=dxfattribs,
    )
    return True


def _write_ellipse(layout: Any, entity: Ellipse, dxfattribs: dict[str, Any]) -> bool:
    if not 0.0 < entity.ratio <= 1.0:
        return False
    layout.add_ellipse(
        _point3(entity.center),
        major_axis=_point3(entity.major_axis),
        ratio=entity.ratio,
        start_param=entity.start_param,
        end_param=entity.end_param,
        dxfattribs=dxfattribs,
    )
    return True


def _write_text_like(layout: Any, entity: Any, dxfattribs: dict[str, Any]) -> bool:
    if entity.text == "":
        return False
    if entity.dxftype == "ATTDEF":
        if not entity.tag:
            return False
        layout.add_attdef(entity.tag, _point3(entity.insert), entity.text, dxfattribs=dxfattribs)
        return True
    text_entity = layout.add_text(
        entity.text,
        height=entity.height,
        rotation=entity.rotation,
        dxfattribs=dxfattribs,
    )
    text_entity.dxf.insert = _point3(entity.insert)
    return True


def _write_mtext(layout: Any, entity: Any, dxfattribs: dict[str, Any]) -> bool:
    if entity.text == "":
        return False
    mtext = layout.add_mtext(entity.text, dxfattribs=dxfattribs)
    mtext.set_location(_point3(entity.insert), rotation=entity.rotation, attachment_point=entity.attachment_point)
    mtext.dxf.char_height = entity.height
    return True


def _write_polyline(layout: Any, entity: Polyline, dxfattribs: dict[str, Any]) -> bool:
    if entity.flags & (POLYMESH | POLYFACE):
        # meshes need the face records ezdxf builds itself
        return False
    if len(entity.vertices) < 2:
        return False
    close = bool(entity.flags & CLOSED)
    if entity.flags & POLYLINE_3D:
        layout.add_polyline3d([_point3(vertex.location) for vertex in entity.vertices], close=close, dxfattribs=dxfattribs)
        return True
    points = [
        (vertex.location.x, vertex.location.y, vertex.start_width, vertex.end_width, vertex.bulge)
        for vertex in entity.vertices
    ]
    polyline = layout.add_polyline2d(points, format="xyseb", close=close, dxfattribs=dxfattribs)
    if entity.default_start_width or entity.default_end_width:
        polyline.dxf.default_start_width = entity.default_start_width
        polyline.dxf.default_end_width = entity.default_end_width
    return True


def _write_spline(layout: Any, entity: Spline, dxfattribs: dict[str, Any]) -> bool:
    control_points = [_point3(point) for point in entity.control_points]
    if len(control_points) > entity.degree:
        knots = list(entity.knots) or None
        if entity.weights and len(entity.weights) == len(control_points):
            layout.add_rational_spline(
                control_points,
                list(entity.weights),
                degree=entity.degree,
                knots=knots,
                dxfattribs=dxfattribs,
            )
        else:
            layout.add_open_spline(control_points, degree=entity.degree, knots=knots, dxfattribs=dxfattribs)
        return True
    fit_points = [_point3(point) for point in entity.fit_points]
    if len(fit_points) < 2:
        return False
    layout.add_spline(fit_points=fit_points, degree=entity.degree, dxfattribs=dxfattribs)
    return True


def _write_insert(layout: Any, entity: Insert, dxfattribs: dict[str, Any]) -> bool:
    doc = layout.doc
    if not entity.name or doc is None or entity.name not in doc.blocks:
        return False
    dxfattribs = {
        **dxfattribs,
        "xscale": entity.x_scale,
        "yscale": entity.y_scale,
        "zscale": entity.z_scale,
        "rotation": entity.rotation,
    }
    ref = layout.add_blockref(entity.name, _point3(entity.insert), dxfattribs=dxfattribs)
    for attrib in entity.attribs:
        if not attrib.tag:
            continue
        ref.add_attrib(attrib.tag, attrib.text, _point3(attrib.insert), dxfattribs=_entity_dxfattribs(attrib))
    return True


def _write_hatch(layout: Any, entity: Hatch, dxfattribs: dict[str, Any]) -> bool:
    if not entity.paths:
        return False
    color = _to_valid_aci(entity.common.color)
    hatch = layout.add_hatch(color=color if color is not None else 7, dxfattribs=dxfattribs)
    if entity.solid_fill:
        hatch.set_solid_fill(color=hatch.dxf.color)
    else:
        hatch.set_pattern_fill(
            entity.pattern_name or "ANSI31",
            color=hatch.dxf.color,
            angle=entity.pattern_angle,
            scale=entity.pattern_scale,
        )

    path_written = False
    for path in entity.paths:
        if path.is_polyline:
            vertices = [(*vertex, 0.0)[:3] for vertex in path.vertices]
            if len(vertices) < 2:
                continue
            hatch.paths.add_polyline_path(vertices, is_closed=bool(path.is_closed), flags=path.flags)
            path_written = True
            continue
        edge_path = hatch.paths.add_edge_path(flags=path.flags)
        for edge in path.edges:
            _add_hatch_edge(edge_path, edge)
        path_written = path_written or bool(path.edges)
    return path_written


def _add_hatch_edge(edge_path: Any, edge: HatchEdge) -> None:
    if edge.kind == LINE_EDGE:
        edge_path.add_line(_point2(edge.start), _point2(edge.end))
    elif edge.kind == ARC_EDGE:
        edge_path.add_arc(
            _point2(edge.center),
            radius=edge.radius,
            start_angle=edge.start_angle,
            end_angle=edge.end_angle,
            ccw=bool(edge.ccw),
        )
    elif edge.kind == ELLIPSE_EDGE:
        edge_path.add_ellipse(
            _point2(edge.center),
            major_axis=_point2(edge.major_axis),
            ratio=edge.ratio,
            start_angle=edge.start_angle,
            end_angle=edge.end_angle,
            ccw=bool(edge.ccw),
        )
    elif edge.kind == SPLINE_EDGE:
        edge_path.add_spline(
            fit_points=[_point2(point) for point in edge.fit_points] or None,
            control_points=[_point2(point) for point in edge.control_points],
            knot_values=list(edge.knots),
            weights=list(edge.weights) or None,
            degree=edge.degree,
            periodic=edge.periodic,
            start_tangent=_point2(edge.start_tangent) if edge.fit_points else None,
            end_tangent=_point2(edge.end_tangent) if edge.fit_points else None,
        )


def _entity_dxfattribs(entity: Any) -> dict[str, Any]:
    common = entity.common
    attribs: dict[str, Any] = {"layer": common.layer or "0"}
    color = _to_valid_aci(common.color)
    if color is not None:
        attribs["color"] = color
    if common.color_value:
        attribs["true_color"] = common.color_value & 0xFFFFFF
    if common.linetype and common.linetype != DEFAULT_LINETYPE:
        attribs["linetype"] = common.linetype
    return attribs


def _to_valid_aci(value: Any) -> int | None:
    try:
        aci = int(value)
    except Exception:
        return None
    if aci in (BYBLOCK, BYLAYER, 257):
        return None
    if 1 <= aci <= 255:
        return aci
    return None


def _point3(value: Point | Iterable[float] | None) -> tuple[float, float, float]:
    if value is None:
        return (0.0, 0.0, 0.0)
    point = Point.of(value)
    return (point.x, point.y, point.z)


def _point2(value: Point | Iterable[float] | None) -> tuple[float, float]:
    x, y, _ = _point3(value)
    return (x, y)
