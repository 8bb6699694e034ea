from __future__ import annotations

import pytest

from dxfkit import DiagnosticKind, DxfContext, DxfVersion, from_tags, to_tags
from dxfkit.embedded import split_acis_line
from dxfkit.entity import (
    AcadTable,
    Body,
    BlockRecord,
    DimStyle,
    Image,
    Ole2Frame,
    ProxyEntity,
    Region,
    Solid3d,
    TableCell,
    VPort,
)
from dxfkit.points import Point


def test_long_acis_lines_are_continued_with_group_3() -> None:
    line = "x" * 600
    body = Body(acis_data=["400 0 1 0", line])

    tags = to_tags(body)

    assert [(code, len(value)) for code, value in tags if code in (1, 3)] == [(1, 9), (1, 255), (3, 255), (3, 90)]
    assert from_tags(tags).entity == body


def test_split_acis_line() -> None:
    assert split_acis_line("") == [""]
    assert split_acis_line("abcde", 2) == ["ab", "cd", "e"]


def test_region_round_trip() -> None:
    region = Region(acis_data=["21200 115 1 0", "body $-1 -1 $-1 $1 $-1 $2 #"])

    tags = to_tags(region)

    assert [value for code, value in tags if code == 100] == ["AcDbEntity", "AcDbModelerGeometry"]
    assert from_tags(tags).entity == region


def test_3dsolid_history_needs_r2007() -> None:
    solid = Solid3d(acis_data=["700 0 1 0"], history_handle="3E")

    r2007 = to_tags(solid, DxfContext(version=DxfVersion.R2007))
    r2004 = to_tags(solid, DxfContext(version=DxfVersion.R2004))

    assert r2007[-2:] == [(100, "AcDb3dSolid"), (350, "3E")]
    assert (100, "AcDb3dSolid") not in r2004
    assert not any(code == 350 for code, _ in r2004)
    assert from_tags(r2007, DxfContext(version=DxfVersion.R2007)).entity == solid


def test_proxy_entity_round_trip() -> None:
    proxy = ProxyEntity(
        graphics=["00FF00FF00FF00FF"],
        entity_data_bits=16,
        entity_data=["ABCD"],
        object_ids=[(330, "1A"), (340, "2B")],
    )

    tags = to_tags(proxy)
    ctx = DxfContext()
    result = from_tags(tags, ctx)

    assert (92, 8) in tags and (93, 16) in tags and (94, 0) in tags
    assert result.ok, list(ctx.diagnostics)
    assert result.entity == proxy


def test_proxy_graphics_size_mismatch_is_reported() -> None:
    ctx = DxfContext()
    result = from_tags(
        [
            (0, "ACAD_PROXY_ENTITY"),
            (8, "0"),
            (100, "AcDbProxyEntity"),
            (90, "498"),
            (91, "500"),
            (92, "4"),
            (310, "AB"),
            (93, "0"),
            (94, "0"),
        ],
        ctx,
    )

    assert result.entity.graphics == ["AB"]
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_ole2frame_payload() -> None:
    frame = Ole2Frame(
        description="Paintbrush Picture",
        upper_left=Point(0.0, 10.0),
        lower_right=Point(10.0, 0.0),
        data=["0102", "0304"],
    )

    tags = to_tags(frame)

    assert tags[-4:] == [(90, 4), (310, "0102"), (310, "0304"), (1, "OLE")]
    assert from_tags(tags).entity == frame


def test_ole2frame_with_wrong_end_marker() -> None:
    ctx = DxfContext()
    result = from_tags(
        [(0, "OLE2FRAME"), (8, "0"), (100, "AcDbOle2Frame"), (70, "2"), (90, "1"), (310, "AA"), (1, "END")],
        ctx,
    )

    assert result.entity.data == ["AA"]
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_image_clip_boundary() -> None:
    image = Image(
        insert=Point(1.0, 1.0),
        image_size=Point(640.0, 480.0),
        image_def_handle="3A",
        clip_boundary_type=1,
        clip_vertices=[Point(0.0, 0.0), Point(640.0, 480.0)],
    )

    tags = to_tags(image, DxfContext(version=DxfVersion.R14))

    assert (91, 2) in tags
    assert [value for code, value in tags if code == 14] == [0.0, 640.0]
    assert not any(code == 34 for code, _ in tags)
    assert from_tags(tags).entity == image

    ctx = DxfContext(version=DxfVersion.R13)
    assert to_tags(image, ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.VERSION_MISMATCH


def _table() -> AcadTable:
    return AcadTable(
        block_name="*T1",
        insert=Point(0.0, 0.0),
        row_heights=[1.0, 1.0],
        column_widths=[5.0],
        cells=[
            TableCell(text="Item"),
            TableCell(text="Bolt", text_height=2.5, attdef_values=[("4F", "M8")]),
        ],
    )


def test_acad_table_cells_round_trip() -> None:
    table = _table()

    tags = to_tags(table, DxfContext(version=DxfVersion.R2004))
    ctx = DxfContext(version=DxfVersion.R2004)
    result = from_tags(tags, ctx)

    assert [value for code, value in tags if code == 171] == [1, 1]
    assert (179, 1) in tags
    assert result.ok, list(ctx.diagnostics)
    assert result.entity == table


def test_table_is_read_as_acad_table() -> None:
    tags = [(0, "TABLE"), *to_tags(_table())[1:]]

    result = from_tags(tags)

    assert isinstance(result.entity, AcadTable)
    assert result.entity.dxftype == "ACAD_TABLE"


def test_acad_table_is_refused_before_r2004() -> None:
    ctx = DxfContext(version=DxfVersion.R2000)

    assert to_tags(_table(), ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.VERSION_MISMATCH


def test_cell_group_before_first_cell() -> None:
    ctx = DxfContext()
    from_tags([(0, "ACAD_TABLE"), (8, "0"), (100, "AcDbTable"), (172, "0")], ctx)

    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_vport_record_keeps_handle_and_owner() -> None:
    vport = VPort(handle=0x2A, owner="8", name="*ACTIVE", center=Point(5.0, 5.0), height=20.0)

    tags = to_tags(vport)
    result = from_tags(tags)

    assert tags[:3] == [(0, "VPORT"), (5, 0x2A), (330, "8")]
    assert [value for code, value in tags if code == 100] == ["AcDbSymbolTableRecord", "AcDbViewportTableRecord"]
    assert result.ok
    assert result.entity == vport


def test_dimstyle_handle_uses_group_105() -> None:
    style = DimStyle(handle=0x1B, owner="A", name="ISO-25", text_height=2.5)

    tags = to_tags(style)

    assert tags[1] == (105, 0x1B)
    assert not any(code == 5 for code, _ in tags)
    assert from_tags(tags).entity == style


def test_r12_dimstyle_group_5_is_not_a_handle() -> None:
    ctx = DxfContext(version=DxfVersion.R12)
    result = from_tags([(0, "DIMSTYLE"), (2, "STANDARD"), (70, "0"), (5, "ARROW"), (40, "1.0")], ctx)

    assert result.ok
    assert result.entity.handle == 0
    assert result.entity.name == "STANDARD"
    assert len(ctx.diagnostics) == 0


def test_table_records_skip_unmodelled_groups() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "VIEW"), (2, "FRONT"), (70, "0"), (40, "3.0"), (281, "1"), (332, "4A")], ctx)

    assert result.entity.height == 3.0
    assert len(ctx.diagnostics) == 0


def test_table_record_requires_a_name() -> None:
    ctx = DxfContext()

    assert to_tags(VPort(name=""), ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.MISSING_REQUIREMENT


@pytest.mark.parametrize("version", [DxfVersion.R12, DxfVersion.R11])
def test_block_record_needs_r13(version: DxfVersion) -> None:
    ctx = DxfContext(version=version)

    assert to_tags(BlockRecord(name="*Model_Space"), ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.VERSION_MISMATCH


def test_block_record_round_trip() -> None:
    record = BlockRecord(handle=0x1F, owner="1", name="*Model_Space", layout_handle="22")

    tags = to_tags(record)

    assert (340, "22") in tags
    assert from_tags(tags).entity == record
