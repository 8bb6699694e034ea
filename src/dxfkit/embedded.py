from __future__ import annotations

from typing import Any

from .context import DxfContext
from .entity import (
    AcadTable,
    Body,
    Image,
    ModelerGeometry,
    Ole2Frame,
    OleFrame,
    ProxyEntity,
    Region,
    Solid3d,
    TableCell,
)
from .graphics import chunk_bytes
from .schema import INVALID, BodyTag, Custom, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion

R13 = DxfVersion.R13

ACIS_LINE = 255
OLE_END_MARKER = "OLE"


def split_acis_line(line: str, size: int = ACIS_LINE) -> list[str]:
    if not line:
        return [""]
    return [line[i : i + size] for i in range(0, len(line), size)]


class ModelerGeometryCodec(EntityCodec):
    """BODY, REGION and 3DSOLID: ACIS data as ``1`` lines with ``3`` continuations."""

    def decode_custom(self, entity: ModelerGeometry, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        if tag.code == 3 and entity.acis_data:
            entity.acis_data[-1] += value
        else:
            entity.acis_data.append(value)

    def encode_custom(self, entity: ModelerGeometry, item: Field, out: TagList, ctx: DxfContext) -> None:
        for line in entity.acis_data:
            first, *rest = split_acis_line(line)
            out.append((1, first))
            out.extend((3, chunk) for chunk in rest)


def _modeler_layout() -> list[Any]:
    return [Marker("AcDbModelerGeometry"), Field("version", 70), Custom("acis_data", 1, 3)]


BODY = ModelerGeometryCodec("BODY", Body, _modeler_layout(), min_version=R13)

REGION = ModelerGeometryCodec("REGION", Region, _modeler_layout(), min_version=R13)

SOLID3D = ModelerGeometryCodec(
    "3DSOLID",
    Solid3d,
    [
        *_modeler_layout(),
        Marker("AcDb3dSolid", min_version=DxfVersion.R2007),
        Field("history_handle", 350, optional=True, min_version=DxfVersion.R2007),
    ],
    min_version=R13,
)


class ProxyEntityCodec(EntityCodec):
    """Proxy graphics and entity data share group 310; group 93 separates them."""

    def decode(self, entity: ProxyEntity, body: list[BodyTag], ctx: DxfContext) -> None:
        target = entity.graphics
        declared: tuple[int, int] | None = None
        for tag in body:
            if tag.code in (310, 330, 340, 350, 360, 92, 93, 94):
                value = self.coerce_tag(tag, ctx)
                if value is INVALID:
                    continue
                if tag.code == 310:
                    target.append(value)
                elif tag.code == 92:
                    declared = (value, tag.line)
                elif tag.code == 93:
                    entity.entity_data_bits = value
                    target = entity.entity_data
                elif tag.code != 94:
                    entity.object_ids.append((tag.code, value))
            elif not self.decode_tag(entity, tag, ctx):
                self.unknown_tag(tag, ctx)
        if declared is not None and declared[0] != chunk_bytes(entity.graphics):
            size, line = declared
            self.invalid(ctx, f"proxy graphics declare {size} bytes, found {chunk_bytes(entity.graphics)}", line)

    def encode_custom(self, entity: ProxyEntity, item: Field, out: TagList, ctx: DxfContext) -> None:
        if item.attr == "graphics":
            if entity.graphics:
                out.append((92, chunk_bytes(entity.graphics)))
                out.extend((310, chunk) for chunk in entity.graphics)
        elif item.attr == "entity_data":
            out.append((93, entity.entity_data_bits or chunk_bytes(entity.entity_data) * 8))
            out.extend((310, chunk) for chunk in entity.entity_data)
        else:
            out.extend(entity.object_ids)
            out.append((94, 0))


PROXY_ENTITY = ProxyEntityCodec(
    "ACAD_PROXY_ENTITY",
    ProxyEntity,
    [
        Marker("AcDbProxyEntity"),
        Field("class_id", 90),
        Field("app_class_id", 91),
        Custom("graphics", 92),
        Custom("entity_data", 93),
        Custom("object_ids", 330, 340, 350, 360, 94),
        Field("drawing_format", 95, optional=True),
        Field("original_format", 70, optional=True),
    ],
    min_version=R13,
    shadowed_codes=(92, 310, 330, 360),
)


class OleCodec(EntityCodec):
    """OLE payload: byte length (90), binary chunks (310), then ``1/OLE``."""

    def decode_custom(self, entity: OleFrame | Ole2Frame, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        if tag.code == 310:
            entity.data.append(value)
        elif tag.code == 1 and value != OLE_END_MARKER:
            self.invalid(ctx, f"unexpected OLE end marker {value!r}", tag.line)

    def encode_custom(self, entity: OleFrame | Ole2Frame, item: Field, out: TagList, ctx: DxfContext) -> None:
        out.append((90, chunk_bytes(entity.data)))
        out.extend((310, chunk) for chunk in entity.data)
        out.append((1, OLE_END_MARKER))


OLEFRAME = OleCodec(
    "OLEFRAME",
    OleFrame,
    [Marker("AcDbOleFrame"), Field("version", 70), Custom("data", 90, 310, 1)],
    min_version=R13,
    shadowed_codes=(310,),
)

OLE2FRAME = OleCodec(
    "OLE2FRAME",
    Ole2Frame,
    [
        Marker("AcDbOle2Frame"),
        Field("version", 70),
        Field("description", 3),
        Field("upper_left", 10, point=True),
        Field("lower_right", 11, point=True),
        Field("ole_type", 71),
        Field("tile_mode", 72),
        Custom("data", 90, 310, 1),
    ],
    min_version=R13,
    shadowed_codes=(310,),
)

IMAGE = EntityCodec(
    "IMAGE",
    Image,
    [
        Marker("AcDbRasterImage"),
        Field("class_version", 90),
        Field("insert", 10, point=True),
        Field("u_pixel", 11, point=True),
        Field("v_pixel", 12, point=True),
        Field("image_size", 13, point=True, flat=True),
        Field("image_def_handle", 340),
        Field("display_flags", 70),
        Field("clipping", 280),
        Field("brightness", 281),
        Field("contrast", 282),
        Field("fade", 283),
        Field("image_def_reactor_handle", 360, optional=True),
        Field("clip_boundary_type", 71),
        Field("clip_vertices", 91, count_of="clip_vertices"),
        Field("clip_vertices", 14, point=True, flat=True, repeat=True),
    ],
    min_version=DxfVersion.R14,
    shadowed_codes=(360,),
)

_CELL_FIELDS: dict[int, str] = {
    172: "flags",
    173: "merged",
    174: "auto_fit",
    175: "border_width",
    176: "border_height",
    177: "override_flags",
    178: "virtual_edge",
    145: "rotation",
    1: "text",
    340: "block_handle",
    144: "block_scale",
    7: "text_style",
    140: "text_height",
    170: "alignment",
}
_CELL_DEFAULTS = TableCell()


class AcadTableCodec(EntityCodec):
    """ACAD_TABLE cells: group 171 opens a cell, the following groups fill it."""

    def decode_custom(self, entity: AcadTable, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        cells = entity.cells
        if tag.code == 171:
            cells.append(TableCell(cell_type=value))
            return
        if not cells:
            self.invalid(ctx, f"cell group {tag.code} before the first cell", tag.line)
            return
        cell = cells[-1]
        if tag.code == 331:
            cell.attdef_values.append((value, ""))
        elif tag.code == 300:
            if cell.attdef_values and not cell.attdef_values[-1][1]:
                handle, _ = cell.attdef_values[-1]
                cell.attdef_values[-1] = (handle, value)
            else:
                cell.attdef_values.append(("", value))
        elif tag.code in _CELL_FIELDS:
            setattr(cell, _CELL_FIELDS[tag.code], value)

    def encode_custom(self, entity: AcadTable, item: Field, out: TagList, ctx: DxfContext) -> None:
        for cell in entity.cells:
            out.append((171, cell.cell_type))
            for code in (172, 173, 174, 175, 176, 177, 178, 145):
                out.append((code, getattr(cell, _CELL_FIELDS[code])))
            for code in (1, 7, 140, 170, 340, 144):
                attr = _CELL_FIELDS[code]
                value = getattr(cell, attr)
                if value != getattr(_CELL_DEFAULTS, attr):
                    out.append((code, value))
            if cell.attdef_values:
                out.append((179, len(cell.attdef_values)))
                for handle, text in cell.attdef_values:
                    out.append((331, handle))
                    out.append((300, text))


ACAD_TABLE = AcadTableCodec(
    "ACAD_TABLE",
    AcadTable,
    [
        Marker("AcDbBlockReference"),
        Field("block_name", 2),
        Field("insert", 10, point=True),
        Marker("AcDbTable"),
        Field("version", 280),
        Field("table_style_handle", 342, optional=True),
        Field("block_record_handle", 343, optional=True),
        Field("horizontal_direction", 11, point=True),
        Field("value_flags", 90),
        Field("row_heights", 91, count_of="row_heights"),
        Field("column_widths", 92, count_of="column_widths"),
        Field("override_flags", 93),
        Field("border_color_override", 94),
        Field("border_lineweight_override", 95),
        Field("border_visibility_override", 96),
        Field("row_heights", 141, repeat=True),
        Field("column_widths", 142, repeat=True),
        Custom("cells", 171, *_CELL_FIELDS, 179, 331, 300),
    ],
    min_version=DxfVersion.R2004,
    shadowed_codes=(92,),
    aliases=("TABLE",),
)
