from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .context import DxfContext
from .diagnostics import DiagnosticKind
from .graphics import chunk_bytes
from .points import Point, Z_AXIS, with_axis
from .scalars import coerce
from .tags import Tag
from .versions import DxfVersion

BYBLOCK = 0
BYLAYER = 256
DEFAULT_LAYER = "0"
DEFAULT_LINETYPE = "BYLAYER"
DEFAULT_TEXT_STYLE = "STANDARD"
MODELSPACE = 0
PAPERSPACE = 1

ENTITY_MARKER = "AcDbEntity"
REACTORS_GROUP = "{ACAD_REACTORS"
XDICTIONARY_GROUP = "{ACAD_XDICTIONARY"


@dataclass
class CommonAttributes:
    handle: int = 0
    linetype: str = DEFAULT_LINETYPE
    layer: str = DEFAULT_LAYER
    elevation: float = 0.0
    thickness: float = 0.0
    linetype_scale: float = 1.0
    visibility: int = 0
    color: int = BYLAYER
    paperspace: int = MODELSPACE
    graphics_data_size: int = 0
    shadow_mode: int = 0
    binary_graphics_data: list[str] = field(default_factory=list)
    dictionary_owner_soft: str = ""
    material: str = ""
    dictionary_owner_hard: str = ""
    lineweight: int = 0
    plot_style_name: str = ""
    color_value: int = 0
    color_name: str = ""
    transparency: int = 0
    extrusion: Point = Z_AXIS
    xdata: list[tuple[int, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class _CommonCode:
    attr: str
    min_version: DxfVersion | None = None
    max_version: DxfVersion | None = None


_COMMON_CODES: dict[int, _CommonCode] = {
    5: _CommonCode("handle", DxfVersion.R13),
    6: _CommonCode("linetype"),
    8: _CommonCode("layer"),
    38: _CommonCode("elevation", max_version=DxfVersion.R11),
    39: _CommonCode("thickness"),
    48: _CommonCode("linetype_scale", DxfVersion.R13),
    60: _CommonCode("visibility", DxfVersion.R13),
    62: _CommonCode("color"),
    67: _CommonCode("paperspace", DxfVersion.R13),
    92: _CommonCode("graphics_data_size", DxfVersion.R2000),
    160: _CommonCode("graphics_data_size", DxfVersion.R2000),
    210: _CommonCode("extrusion", DxfVersion.R12),
    220: _CommonCode("extrusion", DxfVersion.R12),
    230: _CommonCode("extrusion", DxfVersion.R12),
    284: _CommonCode("shadow_mode", DxfVersion.R2009),
    310: _CommonCode("binary_graphics_data", DxfVersion.R2000),
    330: _CommonCode("dictionary_owner_soft", DxfVersion.R14),
    347: _CommonCode("material", DxfVersion.R2008),
    360: _CommonCode("dictionary_owner_hard", DxfVersion.R14),
    370: _CommonCode("lineweight", DxfVersion.R2002),
    390: _CommonCode("plot_style_name", DxfVersion.R2009),
    420: _CommonCode("color_value", DxfVersion.R2004),
    430: _CommonCode("color_name", DxfVersion.R2004),
    440: _CommonCode("transparency", DxfVersion.R2004),
}

COMMON_CODES = frozenset(_COMMON_CODES)

_RANGE_LIMITS: tuple[tuple[str, int, int], ...] = (
    ("visibility", 0, 1),
    ("paperspace", MODELSPACE, PAPERSPACE),
    ("shadow_mode", 0, 3),
    ("color", -1, BYLAYER),
)
_NON_NEGATIVE = ("thickness", "linetype_scale")

COMMON_DEFAULTS = CommonAttributes()


def version_allows(
    version: DxfVersion,
    min_version: DxfVersion | None = None,
    max_version: DxfVersion | None = None,
) -> bool:
    if min_version is not None and version < min_version:
        return False
    if max_version is not None and version > max_version:
        return False
    return True


def check_gate(
    ctx: DxfContext,
    tag: Tag,
    min_version: DxfVersion | None,
    max_version: DxfVersion | None,
    dxftype: str | None,
) -> None:
    if version_allows(ctx.version, min_version, max_version):
        return
    ctx.report(
        DiagnosticKind.VERSION_MISMATCH,
        f"group code {tag.code} is not valid in {ctx.version.name} files",
        line=tag.line,
        dxftype=dxftype,
    )


def check_common_gate(ctx: DxfContext, tag: Tag, dxftype: str | None) -> None:
    entry = _COMMON_CODES.get(tag.code)
    if entry is not None:
        check_gate(ctx, tag, entry.min_version, entry.max_version, dxftype)


def absorb(common: CommonAttributes, tag: Tag, ctx: DxfContext, dxftype: str | None = None) -> bool:
    entry = _COMMON_CODES.get(tag.code)
    if entry is None:
        return False
    try:
        value = coerce(tag.code, tag.value)
    except ValueError as exc:
        ctx.report(DiagnosticKind.FORMAT_VIOLATION, str(exc), line=tag.line, dxftype=dxftype)
        return True
    check_gate(ctx, tag, entry.min_version, entry.max_version, dxftype)
    if entry.attr == "extrusion":
        common.extrusion = with_axis(common.extrusion, (tag.code - 210) // 10, value)
    elif entry.attr == "binary_graphics_data":
        common.binary_graphics_data.append(value)
    else:
        setattr(common, entry.attr, value)
    return True


def restore_defaults(
    common: CommonAttributes,
    ctx: DxfContext,
    dxftype: str | None,
    *,
    layer_seen: bool,
    line: int | None = None,
) -> None:
    if not common.linetype:
        common.linetype = DEFAULT_LINETYPE
    if not layer_seen or not common.layer:
        ctx.report(
            DiagnosticKind.EMPTY_LAYER,
            f"empty layer string, {dxftype or 'entity'} is relocated to layer {DEFAULT_LAYER}",
            line=line,
            dxftype=dxftype,
        )
        common.layer = DEFAULT_LAYER
    for attr, low, high in _RANGE_LIMITS:
        value = getattr(common, attr)
        if not low <= value <= high:
            ctx.report(
                DiagnosticKind.INVARIANT_VIOLATION,
                f"{attr} {value} is outside [{low}, {high}], reset to default",
                line=line,
                dxftype=dxftype,
            )
            setattr(common, attr, getattr(COMMON_DEFAULTS, attr))
    for attr in _NON_NEGATIVE:
        value = getattr(common, attr)
        if value < 0.0:
            ctx.report(
                DiagnosticKind.INVARIANT_VIOLATION,
                f"negative {attr} {value}, reset to default",
                line=line,
                dxftype=dxftype,
            )
            setattr(common, attr, getattr(COMMON_DEFAULTS, attr))
    size = common.graphics_data_size
    if common.binary_graphics_data or size:
        actual = chunk_bytes(common.binary_graphics_data)
        if actual != size:
            ctx.report(
                DiagnosticKind.GRAPHICS_SIZE_MISMATCH,
                f"graphics data size {size} does not match {actual} bytes of binary data",
                line=line,
                dxftype=dxftype,
            )


@dataclass(frozen=True)
class Checked:
    """Result of a bounds-checked attribute read.

    ``error`` is ``None`` when ``value`` is usable; otherwise ``value`` holds
    the raw attribute (or ``None`` when there was nothing to read).
    """

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def bounds_error(attr: str, value: Any) -> str | None:
    for name, low, high in _RANGE_LIMITS:
        if name == attr and not low <= value <= high:
            return f"{attr} {value} is outside [{low}, {high}]"
    if attr in _NON_NEGATIVE and value < 0.0:
        return f"negative {attr} {value}"
    return None


def checked(record: Any, attr: str) -> Checked:
    """Read ``attr`` from a record or its common attributes, with bounds checks."""
    if record is None:
        return Checked(error=f"no record to read {attr!r} from")
    target = record
    if not hasattr(record, attr) and isinstance(getattr(record, "common", None), CommonAttributes):
        target = record.common
    if not hasattr(target, attr):
        return Checked(error=f"{type(record).__name__} has no attribute {attr!r}")
    value = getattr(target, attr)
    return Checked(value, bounds_error(attr, value))


def _in_bounds(attr: str, value: Any) -> Any:
    for name, low, high in _RANGE_LIMITS:
        if name == attr:
            return min(max(value, low), high)
    return getattr(COMMON_DEFAULTS, attr)


def common_value(common: CommonAttributes, attr: str, ctx: DxfContext, dxftype: str | None) -> Any:
    value = getattr(common, attr)
    error = bounds_error(attr, value)
    if error is None:
        return value
    fixed = _in_bounds(attr, value)
    ctx.report(DiagnosticKind.INVARIANT_VIOLATION, f"{error}, written as {fixed}", dxftype=dxftype)
    return fixed


def emit_app_groups(soft: str, hard: str, ctx: DxfContext, out: list[tuple[int, Any]]) -> None:
    if ctx.version < DxfVersion.R14:
        return
    if soft:
        out.extend([(102, REACTORS_GROUP), (330, soft), (102, "}")])
    if hard:
        out.extend([(102, XDICTIONARY_GROUP), (360, hard), (102, "}")])


def emit_common(
    common: CommonAttributes,
    ctx: DxfContext,
    dxftype: str | None,
    out: list[tuple[int, Any]],
    *,
    elevation_needs_flatland: bool = False,
) -> None:
    version = ctx.version
    if common.handle and version >= DxfVersion.R13:
        out.append((5, common.handle))
    emit_app_groups(common.dictionary_owner_soft, common.dictionary_owner_hard, ctx, out)
    if version >= DxfVersion.R13:
        out.append((100, ENTITY_MARKER))
        if common_value(common, "paperspace", ctx, dxftype) == PAPERSPACE:
            out.append((67, PAPERSPACE))

    layer = common.layer
    if not layer:
        ctx.report(
            DiagnosticKind.EMPTY_LAYER,
            f"empty layer string, {dxftype or 'entity'} is relocated to layer {DEFAULT_LAYER}",
            dxftype=dxftype,
        )
        layer = DEFAULT_LAYER
    out.append((8, layer))

    linetype = common.linetype
    if not linetype:
        ctx.report(
            DiagnosticKind.EMPTY_LINETYPE,
            f"empty linetype string, {dxftype or 'entity'} is reset to {DEFAULT_LINETYPE}",
            dxftype=dxftype,
        )
        linetype = DEFAULT_LINETYPE
    if linetype != DEFAULT_LINETYPE:
        out.append((6, linetype))

    if version >= DxfVersion.R2008 and common.material:
        out.append((347, common.material))
    color = common_value(common, "color", ctx, dxftype)
    if color != BYLAYER:
        out.append((62, color))
    if version >= DxfVersion.R2002 and common.lineweight != COMMON_DEFAULTS.lineweight:
        out.append((370, common.lineweight))
    if (
        version <= DxfVersion.R11
        and common.elevation != 0.0
        and (ctx.flatland or not elevation_needs_flatland)
    ):
        out.append((38, common.elevation))
    if version >= DxfVersion.R13:
        linetype_scale = common_value(common, "linetype_scale", ctx, dxftype)
        if linetype_scale != 1.0:
            out.append((48, linetype_scale))
        visibility = common_value(common, "visibility", ctx, dxftype)
        if visibility != 0:
            out.append((60, visibility))
    if version >= DxfVersion.R2000 and (common.graphics_data_size or common.binary_graphics_data):
        out.append((160 if ctx.graphics_size_64bit else 92, common.graphics_data_size))
        out.extend((310, chunk) for chunk in common.binary_graphics_data)
    if version >= DxfVersion.R2004:
        if common.color_value:
            out.append((420, common.color_value))
        if common.color_name:
            out.append((430, common.color_name))
        if common.transparency:
            out.append((440, common.transparency))
    if version >= DxfVersion.R2009:
        if common.plot_style_name:
            out.append((390, common.plot_style_name))
        shadow_mode = common_value(common, "shadow_mode", ctx, dxftype)
        if shadow_mode:
            out.append((284, shadow_mode))


def emit_xdata(xdata: list[tuple[int, Any]], out: list[tuple[int, Any]]) -> None:
    out.extend(xdata)
