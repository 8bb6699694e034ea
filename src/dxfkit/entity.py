from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .common import DEFAULT_TEXT_STYLE, CommonAttributes
from .points import ORIGIN, X_AXIS, Y_AXIS, Z_AXIS, Point


@dataclass
class DxfEntity:
    dxftype: ClassVar[str] = ""

    common: CommonAttributes = field(default_factory=CommonAttributes)

    @property
    def handle(self) -> int:
        return self.common.handle

    @property
    def layer(self) -> str:
        return self.common.layer


@dataclass
class Line(DxfEntity):
    dxftype: ClassVar[str] = "LINE"

    start: Point = ORIGIN
    end: Point = ORIGIN


@dataclass
class Line3d(Line):
    dxftype: ClassVar[str] = "3DLINE"


@dataclass
class DxfPoint(DxfEntity):
    dxftype: ClassVar[str] = "POINT"

    location: Point = ORIGIN
    angle: float = 0.0


@dataclass
class Circle(DxfEntity):
    dxftype: ClassVar[str] = "CIRCLE"

    center: Point = ORIGIN
    radius: float = 0.0


@dataclass
class Arc(Circle):
    dxftype: ClassVar[str] = "ARC"

    start_angle: float = 0.0
    end_angle: float = 360.0


@dataclass
class Ellipse(DxfEntity):
    dxftype: ClassVar[str] = "ELLIPSE"

    center: Point = ORIGIN
    major_axis: Point = X_AXIS
    ratio: float = 1.0
    start_param: float = 0.0
    end_param: float = 2 * math.pi


@dataclass
class Solid(DxfEntity):
    """Filled quadrilateral; ``p3 is None`` means a triangle (p3 == p2)."""

    dxftype: ClassVar[str] = "SOLID"

    p0: Point = ORIGIN
    p1: Point = ORIGIN
    p2: Point = ORIGIN
    p3: Point | None = None


@dataclass
class Trace(Solid):
    dxftype: ClassVar[str] = "TRACE"


@dataclass
class Face3d(Solid):
    dxftype: ClassVar[str] = "3DFACE"

    invisible_edges: int = 0


@dataclass
class Shape(DxfEntity):
    dxftype: ClassVar[str] = "SHAPE"

    insert: Point = ORIGIN
    size: float = 1.0
    name: str = ""
    rotation: float = 0.0
    x_scale: float = 1.0
    oblique: float = 0.0


@dataclass
class Text(DxfEntity):
    dxftype: ClassVar[str] = "TEXT"

    insert: Point = ORIGIN
    height: float = 1.0
    text: str = ""
    rotation: float = 0.0
    width_factor: float = 1.0
    oblique: float = 0.0
    style: str = DEFAULT_TEXT_STYLE
    generation_flags: int = 0
    halign: int = 0
    align_point: Point | None = None
    valign: int = 0


@dataclass
class Attrib(Text):
    dxftype: ClassVar[str] = "ATTRIB"

    tag: str = ""
    flags: int = 0
    field_length: int = 0


@dataclass
class AttDef(Attrib):
    dxftype: ClassVar[str] = "ATTDEF"

    prompt: str = ""


@dataclass
class MText(DxfEntity):
    dxftype: ClassVar[str] = "MTEXT"

    insert: Point = ORIGIN
    height: float = 1.0
    reference_width: float = 0.0
    attachment_point: int = 1
    flow_direction: int = 1
    text: str = ""
    style: str = DEFAULT_TEXT_STYLE
    text_direction: Point | None = None
    rotation: float = 0.0
    line_spacing_style: int = 1
    line_spacing_factor: float = 1.0


@dataclass
class Seqend(DxfEntity):
    dxftype: ClassVar[str] = "SEQEND"


@dataclass
class Insert(DxfEntity):
    dxftype: ClassVar[str] = "INSERT"

    attributes_follow: int = 0
    name: str = ""
    insert: Point = ORIGIN
    x_scale: float = 1.0
    y_scale: float = 1.0
    z_scale: float = 1.0
    rotation: float = 0.0
    column_count: int = 1
    row_count: int = 1
    column_spacing: float = 0.0
    row_spacing: float = 0.0
    attribs: list[Attrib] = field(default_factory=list)
    seqend: Seqend | None = field(default=None, compare=False)


@dataclass
class Vertex(DxfEntity):
    dxftype: ClassVar[str] = "VERTEX"

    location: Point = ORIGIN
    start_width: float = 0.0
    end_width: float = 0.0
    bulge: float = 0.0
    flags: int = 0
    tangent: float = 0.0
    vtx0: int = 0
    vtx1: int = 0
    vtx2: int = 0
    vtx3: int = 0


@dataclass
class Polyline(DxfEntity):
    dxftype: ClassVar[str] = "POLYLINE"

    vertices_follow: int = 1
    location: Point = ORIGIN
    flags: int = 0
    default_start_width: float = 0.0
    default_end_width: float = 0.0
    m_count: int = 0
    n_count: int = 0
    m_density: int = 0
    n_density: int = 0
    smooth_type: int = 0
    vertices: list[Vertex] = field(default_factory=list)
    seqend: Seqend | None = field(default=None, compare=False)


@dataclass
class Donut(DxfEntity):
    """Write-only convenience entity, expanded into a closed POLYLINE."""

    dxftype: ClassVar[str] = "DONUT"

    center: Point = ORIGIN
    inside_diameter: float = 0.0
    outside_diameter: float = 1.0


@dataclass(frozen=True)
class LwVertex:
    x: float = 0.0
    y: float = 0.0
    start_width: float = 0.0
    end_width: float = 0.0
    bulge: float = 0.0


@dataclass
class LwPolyline(DxfEntity):
    dxftype: ClassVar[str] = "LWPOLYLINE"

    flags: int = 0
    const_width: float = 0.0
    elevation: float = 0.0
    vertices: list[LwVertex] = field(default_factory=list)


@dataclass
class Ray(DxfEntity):
    dxftype: ClassVar[str] = "RAY"

    start: Point = ORIGIN
    direction: Point = X_AXIS


@dataclass
class XLine(Ray):
    dxftype: ClassVar[str] = "XLINE"


@dataclass
class Spline(DxfEntity):
    dxftype: ClassVar[str] = "SPLINE"

    flags: int = 0
    degree: int = 3
    knot_tolerance: float = 1e-10
    control_point_tolerance: float = 1e-10
    fit_tolerance: float = 1e-10
    start_tangent: Point | None = None
    end_tangent: Point | None = None
    knots: list[float] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)
    control_points: list[Point] = field(default_factory=list)
    fit_points: list[Point] = field(default_factory=list)


@dataclass
class Helix(Spline):
    dxftype: ClassVar[str] = "HELIX"

    major_version: int = 29
    maintenance_version: int = 63
    axis_base: Point = ORIGIN
    start_point: Point = X_AXIS
    axis_vector: Point = Z_AXIS
    radius: float = 1.0
    turns: float = 1.0
    turn_height: float = 1.0
    handedness: bool = True
    constrain: int = 1


@dataclass
class Leader(DxfEntity):
    dxftype: ClassVar[str] = "LEADER"

    dimstyle: str = DEFAULT_TEXT_STYLE
    has_arrowhead: int = 1
    path_type: int = 0
    annotation_type: int = 3
    hookline_direction: int = 1
    has_hookline: int = 0
    text_height: float = 1.0
    text_width: float = 1.0
    vertices: list[Point] = field(default_factory=list)
    block_color: int = 7
    annotation_handle: str = ""
    horizontal_direction: Point = X_AXIS
    block_offset: Point = ORIGIN
    annotation_offset: Point = ORIGIN


@dataclass
class MLineVertex:
    location: Point = ORIGIN
    direction: Point = X_AXIS
    miter: Point = Y_AXIS
    line_params: list[list[float]] = field(default_factory=list)
    fill_params: list[list[float]] = field(default_factory=list)


@dataclass
class MLine(DxfEntity):
    dxftype: ClassVar[str] = "MLINE"

    style_name: str = DEFAULT_TEXT_STYLE
    style_handle: str = ""
    scale: float = 1.0
    justification: int = 0
    flags: int = 1
    style_element_count: int = 0
    start_point: Point = ORIGIN
    vertices: list[MLineVertex] = field(default_factory=list)


@dataclass
class HatchEdge:
    """One edge of an edge-defined boundary path.

    ``kind`` is 1 line, 2 circular arc, 3 elliptic arc, 4 spline.
    Spline fit points and tangents are stored from R2010 on.
    """

    kind: int = 1
    start: Point = ORIGIN
    end: Point = ORIGIN
    center: Point = ORIGIN
    radius: float = 0.0
    major_axis: Point = X_AXIS
    ratio: float = 1.0
    start_angle: float = 0.0
    end_angle: float = 360.0
    ccw: int = 1
    degree: int = 3
    rational: int = 0
    periodic: int = 0
    knots: list[float] = field(default_factory=list)
    control_points: list[Point] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)
    fit_points: list[Point] = field(default_factory=list)
    start_tangent: Point = ORIGIN
    end_tangent: Point = ORIGIN


@dataclass
class HatchPath:
    flags: int = 0
    # polyline paths (flag 2)
    has_bulge: int = 0
    is_closed: int = 0
    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    # edge paths
    edges: list[HatchEdge] = field(default_factory=list)
    source_handles: list[str] = field(default_factory=list)

    @property
    def is_polyline(self) -> bool:
        return bool(self.flags & 2)


@dataclass
class PatternLine:
    angle: float = 0.0
    base_point: Point = ORIGIN
    offset: Point = ORIGIN
    dashes: list[float] = field(default_factory=list)


@dataclass
class Hatch(DxfEntity):
    dxftype: ClassVar[str] = "HATCH"

    elevation: Point = ORIGIN
    pattern_name: str = "SOLID"
    solid_fill: int = 1
    associative: int = 0
    paths: list[HatchPath] = field(default_factory=list)
    hatch_style: int = 0
    pattern_type: int = 1
    pattern_angle: float = 0.0
    pattern_scale: float = 1.0
    pattern_double: int = 0
    pattern_lines: list[PatternLine] = field(default_factory=list)
    pixel_size: float = 0.0
    seed_points: list[Point] = field(default_factory=list)


@dataclass
class Tolerance(DxfEntity):
    dxftype: ClassVar[str] = "TOLERANCE"

    dimstyle: str = DEFAULT_TEXT_STYLE
    insert: Point = ORIGIN
    text: str = ""
    x_direction: Point = X_AXIS


@dataclass
class Viewport(DxfEntity):
    dxftype: ClassVar[str] = "VIEWPORT"

    center: Point = ORIGIN
    width: float = 1.0
    height: float = 1.0
    status: int = 0
    viewport_id: int = 2
    view_center: Point = ORIGIN
    snap_base: Point = ORIGIN
    snap_spacing: Point = Point(10.0, 10.0, 0.0)
    grid_spacing: Point = Point(10.0, 10.0, 0.0)
    view_direction: Point = Z_AXIS
    view_target: Point = ORIGIN
    lens_length: float = 50.0
    front_clip: float = 0.0
    back_clip: float = 0.0
    view_height: float = 1.0
    snap_angle: float = 0.0
    twist_angle: float = 0.0
    circle_zoom: int = 100
    frozen_layers: list[str] = field(default_factory=list)
    flags: int = 0
    clipping_boundary_handle: str = ""
    plot_style_sheet: str = ""
    render_mode: int = 0
    ucs_per_viewport: int = 0
    ucs_icon: int = 0
    ucs_origin: Point = ORIGIN
    ucs_x_axis: Point = X_AXIS
    ucs_y_axis: Point = Y_AXIS
    ucs_handle: str = ""
    ucs_base_handle: str = ""
    ucs_ortho_type: int = 0
    elevation: float = 0.0
    shade_plot_mode: int = 0
    grid_frequency: int = 5


@dataclass
class ModelerGeometry(DxfEntity):
    """Base of BODY, REGION and 3DSOLID: proprietary ACIS data lines."""

    dxftype: ClassVar[str] = "BODY"

    version: int = 1
    acis_data: list[str] = field(default_factory=list)


@dataclass
class Body(ModelerGeometry):
    dxftype: ClassVar[str] = "BODY"


@dataclass
class Region(ModelerGeometry):
    dxftype: ClassVar[str] = "REGION"


@dataclass
class Solid3d(ModelerGeometry):
    dxftype: ClassVar[str] = "3DSOLID"

    history_handle: str = ""


@dataclass
class ProxyEntity(DxfEntity):
    dxftype: ClassVar[str] = "ACAD_PROXY_ENTITY"

    class_id: int = 498
    app_class_id: int = 500
    graphics: list[str] = field(default_factory=list)
    entity_data_bits: int = 0
    entity_data: list[str] = field(default_factory=list)
    object_ids: list[tuple[int, str]] = field(default_factory=list)
    drawing_format: int = 0
    original_format: int = 0


@dataclass
class OleFrame(DxfEntity):
    dxftype: ClassVar[str] = "OLEFRAME"

    version: int = 1
    data: list[str] = field(default_factory=list)


@dataclass
class Ole2Frame(DxfEntity):
    dxftype: ClassVar[str] = "OLE2FRAME"

    version: int = 2
    description: str = ""
    upper_left: Point = ORIGIN
    lower_right: Point = ORIGIN
    ole_type: int = 2
    tile_mode: int = 0
    data: list[str] = field(default_factory=list)


@dataclass
class Image(DxfEntity):
    dxftype: ClassVar[str] = "IMAGE"

    class_version: int = 0
    insert: Point = ORIGIN
    u_pixel: Point = X_AXIS
    v_pixel: Point = Y_AXIS
    image_size: Point = ORIGIN
    image_def_handle: str = ""
    display_flags: int = 3
    clipping: int = 0
    brightness: int = 50
    contrast: int = 50
    fade: int = 0
    image_def_reactor_handle: str = ""
    clip_boundary_type: int = 1
    clip_vertices: list[Point] = field(default_factory=list)


@dataclass
class Block(DxfEntity):
    dxftype: ClassVar[str] = "BLOCK"

    name: str = ""
    flags: int = 0
    base_point: Point = ORIGIN
    xref_path: str = ""
    description: str = ""


@dataclass
class EndBlk(DxfEntity):
    dxftype: ClassVar[str] = "ENDBLK"


@dataclass
class Dimension(DxfEntity):
    """Dimension with its 70-group split into ``dim_type`` and bit flags."""

    dxftype: ClassVar[str] = "DIMENSION"

    version: int = 0
    block_name: str = ""
    definition_point: Point = ORIGIN
    text_midpoint: Point = ORIGIN
    clone_insert: Point = ORIGIN
    defpoint2: Point = ORIGIN
    defpoint3: Point = ORIGIN
    defpoint4: Point = ORIGIN
    defpoint5: Point = ORIGIN
    dim_type: int = 0
    block_private: bool = False
    ordinate_x: bool = False
    user_text_position: bool = False
    attachment_point: int = 0
    line_spacing_style: int = 1
    line_spacing_factor: float = 1.0
    actual_measurement: float = 0.0
    text: str = ""
    text_rotation: float = 0.0
    horizontal_direction: float = 0.0
    leader_length: float = 0.0
    angle: float = 0.0
    oblique_angle: float = 0.0
    dimstyle: str = DEFAULT_TEXT_STYLE

    @property
    def flags(self) -> int:
        return (
            self.dim_type
            | (32 if self.block_private else 0)
            | (64 if self.ordinate_x else 0)
            | (128 if self.user_text_position else 0)
        )


@dataclass
class TableCell:
    cell_type: int = 1
    flags: int = 0
    merged: int = 0
    auto_fit: int = 0
    border_width: int = 1
    border_height: int = 1
    override_flags: int = 0
    virtual_edge: int = 0
    rotation: float = 0.0
    text: str = ""
    block_handle: str = ""
    block_scale: float = 1.0
    text_style: str = ""
    text_height: float = 0.0
    alignment: int = 0
    attdef_values: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class AcadTable(DxfEntity):
    dxftype: ClassVar[str] = "ACAD_TABLE"

    block_name: str = ""
    insert: Point = ORIGIN
    version: int = 0
    table_style_handle: str = ""
    block_record_handle: str = ""
    horizontal_direction: Point = X_AXIS
    value_flags: int = 0
    override_flags: int = 0
    border_color_override: int = 0
    border_lineweight_override: int = 0
    border_visibility_override: int = 0
    row_heights: list[float] = field(default_factory=list)
    column_widths: list[float] = field(default_factory=list)
    cells: list[TableCell] = field(default_factory=list)


@dataclass
class Light(DxfEntity):
    dxftype: ClassVar[str] = "LIGHT"

    version: int = 1
    name: str = ""
    light_type: int = 2
    status: bool = True
    plot_glyph: bool = False
    intensity: float = 1.0
    location: Point = ORIGIN
    target: Point = Z_AXIS
    attenuation_type: int = 0
    use_attenuation_limits: bool = False
    attenuation_start: float = 1.0
    attenuation_end: float = 10.0
    hotspot_angle: float = 45.0
    falloff_angle: float = 50.0
    cast_shadows: bool = True
    shadow_type: int = 0
    shadow_map_size: int = 256
    shadow_softness: int = 1


@dataclass
class TableRecord:
    """Common part of symbol-table records (VPORT, UCS, VIEW, ...)."""

    dxftype: ClassVar[str] = ""

    handle: int = 0
    owner: str = ""
    name: str = ""
    flags: int = 0
    dictionary_owner_soft: str = ""
    dictionary_owner_hard: str = ""
    xdata: list[tuple[int, Any]] = field(default_factory=list)


@dataclass
class VPort(TableRecord):
    dxftype: ClassVar[str] = "VPORT"

    lower_left: Point = ORIGIN
    upper_right: Point = Point(1.0, 1.0, 0.0)
    center: Point = ORIGIN
    snap_base: Point = ORIGIN
    snap_spacing: Point = Point(10.0, 10.0, 0.0)
    grid_spacing: Point = Point(10.0, 10.0, 0.0)
    direction: Point = Z_AXIS
    target: Point = ORIGIN
    height: float = 1.0
    aspect_ratio: float = 1.0
    focal_length: float = 50.0
    front_clipping: float = 0.0
    back_clipping: float = 0.0
    snap_rotation: float = 0.0
    view_twist: float = 0.0
    view_mode: int = 0
    circle_sides: int = 1000
    fast_zoom: int = 1
    ucs_icon: int = 3
    snap_on: int = 0
    grid_on: int = 0
    snap_style: int = 0
    snap_isopair: int = 0


@dataclass
class Ucs(TableRecord):
    dxftype: ClassVar[str] = "UCS"

    origin: Point = ORIGIN
    x_axis: Point = X_AXIS
    y_axis: Point = Y_AXIS
    elevation: float = 0.0
    orthographic_type: int = 0


@dataclass
class View(TableRecord):
    dxftype: ClassVar[str] = "VIEW"

    height: float = 1.0
    center: Point = ORIGIN
    width: float = 1.0
    direction: Point = Z_AXIS
    target: Point = ORIGIN
    focal_length: float = 50.0
    front_clipping: float = 0.0
    back_clipping: float = 0.0
    twist: float = 0.0
    view_mode: int = 0


@dataclass
class DimStyle(TableRecord):
    dxftype: ClassVar[str] = "DIMSTYLE"

    post: str = ""
    apost: str = ""
    scale: float = 1.0
    arrow_size: float = 0.18
    extension_offset: float = 0.0625
    dimension_line_increment: float = 0.38
    extension_extension: float = 0.18
    rounding: float = 0.0
    dimension_line_extension: float = 0.0
    plus_tolerance: float = 0.0
    minus_tolerance: float = 0.0
    text_height: float = 0.18
    center_mark: float = 0.09
    tick_size: float = 0.0
    tolerance: int = 0
    limits: int = 0
    text_inside: int = 1
    text_outside: int = 1
    suppress_ext1: int = 0
    suppress_ext2: int = 0
    text_vertical: int = 0
    zero_suppression: int = 0
    text_gap: float = 0.09
    decimal_places: int = 4
    linear_units: int = 2


@dataclass
class BlockRecord(TableRecord):
    dxftype: ClassVar[str] = "BLOCK_RECORD"

    layout_handle: str = ""
    insert_units: int = 0
    explodable: int = 1
    scalable: int = 0
