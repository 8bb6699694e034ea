from __future__ import annotations

import logging
from typing import Any, Callable

from .common import emit_app_groups
from .context import DxfContext
from .entity import BlockRecord, DimStyle, TableRecord, Ucs, View, VPort
from .schema import INVALID, BodyTag, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion

logger = logging.getLogger(__name__)

R13 = DxfVersion.R13
R2000 = DxfVersion.R2000

RECORD_MARKER = "AcDbSymbolTableRecord"


class TableRecordCodec(EntityCodec):
    """Symbol-table records: handle, owner and name instead of the entity common set.

    Groups a record kind does not model are skipped without a diagnostic;
    symbol tables carry many settings this library does not interpret.
    """

    def __init__(
        self,
        dxftype: str,
        record: Callable[[], TableRecord],
        marker: str,
        fields: list[Any],
        *,
        handle_code: int = 5,
        flags: bool = True,
        min_version: DxfVersion = DxfVersion.R10,
    ) -> None:
        head: list[Any] = [Field("name", 2)]
        if flags:
            head.append(Field("flags", 70))
        layout = [Marker(RECORD_MARKER), Marker(marker), *head, *fields]
        super().__init__(
            dxftype,
            record,
            layout,
            min_version=min_version,
            has_common=False,
            required=("name",),
        )
        self.handle_code = handle_code

    def decode(self, entity: TableRecord, body: list[BodyTag], ctx: DxfContext) -> None:
        for tag in body:
            if tag.marker is None and tag.code in (self.handle_code, 330) and ctx.version >= R13:
                value = self.coerce_tag(tag, ctx)
                if value is INVALID:
                    continue
                if tag.code == 330:
                    entity.owner = value
                else:
                    entity.handle = value
                continue
            if not self.decode_tag(entity, tag, ctx):
                logger.debug("skipping group %d in %s %r", tag.code, self.dxftype, entity.name)

    def encode_head(self, entity: TableRecord, out: TagList, ctx: DxfContext) -> None:
        if ctx.version < R13:
            return
        if entity.handle:
            out.append((self.handle_code, entity.handle))
        emit_app_groups(entity.dictionary_owner_soft, entity.dictionary_owner_hard, ctx, out)
        if entity.owner:
            out.append((330, entity.owner))


VPORT = TableRecordCodec(
    "VPORT",
    VPort,
    "AcDbViewportTableRecord",
    [
        Field("lower_left", 10, point=True, flat=True),
        Field("upper_right", 11, point=True, flat=True),
        Field("center", 12, point=True, flat=True),
        Field("snap_base", 13, point=True, flat=True),
        Field("snap_spacing", 14, point=True, flat=True),
        Field("grid_spacing", 15, point=True, flat=True),
        Field("direction", 16, point=True),
        Field("target", 17, point=True),
        Field("height", 40),
        Field("aspect_ratio", 41),
        Field("focal_length", 42),
        Field("front_clipping", 43),
        Field("back_clipping", 44),
        Field("snap_rotation", 50),
        Field("view_twist", 51),
        Field("view_mode", 71),
        Field("circle_sides", 72),
        Field("fast_zoom", 73),
        Field("ucs_icon", 74),
        Field("snap_on", 75),
        Field("grid_on", 76),
        Field("snap_style", 77),
        Field("snap_isopair", 78),
    ],
)

UCS = TableRecordCodec(
    "UCS",
    Ucs,
    "AcDbUCSTableRecord",
    [
        Field("origin", 10, point=True),
        Field("x_axis", 11, point=True),
        Field("y_axis", 12, point=True),
        Field("orthographic_type", 79, optional=True, min_version=R2000),
        Field("elevation", 146, optional=True, min_version=R2000),
    ],
)

VIEW = TableRecordCodec(
    "VIEW",
    View,
    "AcDbViewTableRecord",
    [
        Field("height", 40),
        Field("center", 10, point=True, flat=True),
        Field("width", 41),
        Field("direction", 11, point=True),
        Field("target", 12, point=True),
        Field("focal_length", 42),
        Field("front_clipping", 43),
        Field("back_clipping", 44),
        Field("twist", 50),
        Field("view_mode", 71),
    ],
)

# group 5 is DIMBLK in R12 dimension styles, so the handle moves to 105
DIMSTYLE = TableRecordCodec(
    "DIMSTYLE",
    DimStyle,
    "AcDbDimStyleTableRecord",
    [
        Field("post", 3, optional=True),
        Field("apost", 4, optional=True),
        Field("scale", 40),
        Field("arrow_size", 41),
        Field("extension_offset", 42),
        Field("dimension_line_increment", 43),
        Field("extension_extension", 44),
        Field("rounding", 45),
        Field("dimension_line_extension", 46),
        Field("plus_tolerance", 47),
        Field("minus_tolerance", 48),
        Field("text_height", 140),
        Field("center_mark", 141),
        Field("tick_size", 142),
        Field("tolerance", 71),
        Field("limits", 72),
        Field("text_inside", 73),
        Field("text_outside", 74),
        Field("suppress_ext1", 75),
        Field("suppress_ext2", 76),
        Field("text_vertical", 77),
        Field("zero_suppression", 78),
        Field("text_gap", 147),
        Field("decimal_places", 271, min_version=R13),
        Field("linear_units", 277, min_version=R2000),
    ],
    handle_code=105,
)

BLOCK_RECORD = TableRecordCodec(
    "BLOCK_RECORD",
    BlockRecord,
    "AcDbBlockTableRecord",
    [
        Field("layout_handle", 340, optional=True, min_version=R2000),
        Field("insert_units", 70, min_version=R2000),
        Field("explodable", 280, min_version=R2000),
        Field("scalable", 281, min_version=R2000),
    ],
    flags=False,
    min_version=R13,
)

TABLE_CODECS: dict[str, TableRecordCodec] = {
    codec.dxftype: codec for codec in (VPORT, UCS, VIEW, DIMSTYLE, BLOCK_RECORD)
}
