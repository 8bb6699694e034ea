from __future__ import annotations

from dxfkit import DiagnosticKind, DxfContext, DxfVersion, ReadStatus, checked, from_tags, to_tags
from dxfkit.common import CommonAttributes, absorb
from dxfkit.entity import Line, Solid
from dxfkit.points import Point
from dxfkit.tags import Tag

LINE_BODY = [(10, "0"), (20, "0"), (30, "0"), (11, "1"), (21, "1"), (31, "0")]


def test_absorb_ignores_kind_specific_codes() -> None:
    common = CommonAttributes()
    ctx = DxfContext()

    assert absorb(common, Tag(62, "5"), ctx) is True
    assert absorb(common, Tag(10, "1.0"), ctx) is False
    assert common.color == 5


def test_graphics_size_codes_share_one_field() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (92, "4"), (160, "2"), (310, "AB"), (310, "CD"), *LINE_BODY], ctx)

    common = result.entity.common
    assert common.graphics_data_size == 2
    assert common.binary_graphics_data == ["AB", "CD"]
    assert not ctx.diagnostics.of_kind(DiagnosticKind.GRAPHICS_SIZE_MISMATCH)


def test_graphics_size_mismatch_is_a_warning() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (92, "4"), (310, "ABCD"), *LINE_BODY], ctx)

    assert result.entity.common.binary_graphics_data == ["ABCD"]
    assert result.status is ReadStatus.TAINTED
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.GRAPHICS_SIZE_MISMATCH)) == 1


def test_graphics_size_group_follows_context() -> None:
    line = Line(common=CommonAttributes(graphics_data_size=2, binary_graphics_data=["ABCD"]))

    narrow = to_tags(line, DxfContext())
    wide = to_tags(line, DxfContext(graphics_size_64bit=True))

    assert (92, 2) in narrow and (310, "ABCD") in narrow
    assert (160, 2) in wide and not any(code == 92 for code, _ in wide)


def test_out_of_range_values_are_reset_on_read() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (60, "2"), (62, "300"), (48, "-1"), *LINE_BODY], ctx)

    common = result.entity.common
    assert common.visibility == 0
    assert common.color == 256
    assert common.linetype_scale == 1.0
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 3


def test_out_of_range_values_are_clamped_on_write() -> None:
    line = Line(common=CommonAttributes(color=999, visibility=3))
    ctx = DxfContext()

    tags = to_tags(line, ctx)

    assert (62, 256) not in tags
    assert (60, 1) in tags
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 2


def test_empty_linetype_is_restored_silently_on_read() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (6, ""), *LINE_BODY], ctx)

    assert result.entity.common.linetype == "BYLAYER"
    assert len(ctx.diagnostics) == 0


def test_empty_linetype_is_reported_on_write() -> None:
    ctx = DxfContext()
    tags = to_tags(Line(common=CommonAttributes(linetype="")), ctx)

    assert not any(code == 6 for code, _ in tags)
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.EMPTY_LINETYPE)) == 1


def test_malformed_common_value_is_a_format_violation() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (62, "red"), *LINE_BODY], ctx)

    assert result.entity.common.color == 256
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.FORMAT_VIOLATION)) == 1


def test_application_groups_capture_owner_handles() -> None:
    ctx = DxfContext()
    result = from_tags(
        [
            (0, "LINE"),
            (5, "10"),
            (102, "{ACAD_REACTORS"),
            (330, "1A"),
            (102, "}"),
            (102, "{ACAD_XDICTIONARY"),
            (360, "1B"),
            (102, "}"),
            (102, "{MY_APP"),
            (1, "ignored"),
            (102, "}"),
            (100, "AcDbEntity"),
            (8, "0"),
            (100, "AcDbLine"),
            *LINE_BODY,
        ],
        ctx,
    )

    assert result.ok, list(ctx.diagnostics)
    common = result.entity.common
    assert common.dictionary_owner_soft == "1A"
    assert common.dictionary_owner_hard == "1B"

    tags = to_tags(result.entity, DxfContext(version=DxfVersion.R14))
    assert tags[2:8] == [
        (102, "{ACAD_REACTORS"),
        (330, "1A"),
        (102, "}"),
        (102, "{ACAD_XDICTIONARY"),
        (360, "1B"),
        (102, "}"),
    ]
    r13 = to_tags(result.entity, DxfContext(version=DxfVersion.R13))
    assert not any(code == 102 for code, _ in r13)


def test_unterminated_application_group_fails_the_record() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "LINE"), (8, "0"), (102, "{ACAD_REACTORS"), (330, "1A")], ctx)

    assert result.status is ReadStatus.FAILED
    assert result.entity is None
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.FORMAT_VIOLATION)) == 1


def test_xdata_is_kept_and_written_last() -> None:
    ctx = DxfContext()
    xdata = [(1001, "MY_APP"), (1000, "hello"), (1040, "2.5"), (1070, "7")]
    result = from_tags([(0, "LINE"), (8, "0"), *LINE_BODY, *xdata], ctx)

    assert len(ctx.diagnostics) == 0
    assert result.entity.common.xdata == [(1001, "MY_APP"), (1000, "hello"), (1040, 2.5), (1070, 7)]
    assert to_tags(result.entity)[-4:] == result.entity.common.xdata


def test_unexpected_subclass_marker_is_reported() -> None:
    ctx = DxfContext()
    from_tags([(0, "LINE"), (100, "AcDbEntity"), (8, "0"), (100, "AcDbCircle"), *LINE_BODY], ctx)

    assert len(ctx.diagnostics.of_kind(DiagnosticKind.SUBCLASS_MISMATCH)) == 1


def test_elevation_is_written_only_for_old_releases() -> None:
    line = Line(common=CommonAttributes(elevation=5.0), end=Point(1.0, 0.0))

    assert (38, 5.0) in to_tags(line, DxfContext(version=DxfVersion.R11))
    assert not any(code == 38 for code, _ in to_tags(line, DxfContext(version=DxfVersion.R12)))


def test_solid_elevation_needs_flatland() -> None:
    solid = Solid(common=CommonAttributes(elevation=5.0), p1=Point(1.0, 0.0), p2=Point(0.0, 1.0))

    plain = to_tags(solid, DxfContext(version=DxfVersion.R11))
    flat = to_tags(solid, DxfContext(version=DxfVersion.R11, flatland=True))

    assert not any(code == 38 for code, _ in plain)
    assert (38, 5.0) in flat


def test_paperspace_and_optional_attributes_follow_releases() -> None:
    common = CommonAttributes(
        paperspace=1,
        linetype_scale=2.0,
        material="3C",
        color_value=0xFF0000,
        plot_style_name="4D",
        shadow_mode=2,
    )
    line = Line(common=common)

    r12 = dict(to_tags(line, DxfContext(version=DxfVersion.R12)))
    r2004 = dict(to_tags(line, DxfContext(version=DxfVersion.R2004)))
    r2010 = dict(to_tags(line, DxfContext(version=DxfVersion.R2010)))

    assert 67 not in r12 and 48 not in r12
    assert r2004[67] == 1 and r2004[48] == 2.0 and r2004[420] == 0xFF0000
    assert 347 not in r2004 and 390 not in r2004 and 284 not in r2004
    assert r2010[347] == "3C" and r2010[390] == "4D" and r2010[284] == 2


def test_checked_reads_record_and_common_fields() -> None:
    line = Line(common=CommonAttributes(color=3), end=Point(1.0, 0.0))

    color = checked(line, "color")
    end = checked(line, "end")

    assert color.ok and color.value == 3
    assert end.ok and end.value == Point(1.0, 0.0)


def test_checked_reports_out_of_range_values() -> None:
    line = Line(common=CommonAttributes(color=300, thickness=-1.0, visibility=2))

    assert checked(line, "color").error == "color 300 is outside [-1, 256]"
    assert checked(line, "thickness").error == "negative thickness -1.0"
    assert checked(line, "visibility").value == 2
    assert not checked(line, "visibility").ok


def test_checked_separates_missing_values_from_sentinels() -> None:
    byblock = checked(Line(common=CommonAttributes(color=0)), "color")
    missing = checked(None, "color")
    unknown = checked(Line(), "radius")

    assert byblock.ok and byblock.value == 0
    assert not missing.ok and missing.value is None
    assert unknown.error == "Line has no attribute 'radius'"
