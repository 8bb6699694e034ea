from __future__ import annotations

from dxfkit import DiagnosticKind, DxfContext, DxfVersion, ReadStatus, from_tags, to_tags
from dxfkit.dimension import ALIGNED, RADIUS, ROTATED
from dxfkit.entity import Dimension, Hatch, HatchEdge, HatchPath, PatternLine
from dxfkit.hatch import ARC_EDGE, LINE_EDGE, SPLINE_EDGE
from dxfkit.points import Point


def _markers(tags) -> list[str]:  # noqa: ANN001
    return [value for code, value in tags if code == 100]


def _pattern_hatch() -> Hatch:
    return Hatch(
        pattern_name="ANSI31",
        solid_fill=0,
        associative=1,
        paths=[
            HatchPath(
                flags=3,
                has_bulge=1,
                is_closed=1,
                vertices=[(0.0, 0.0, 0.0), (10.0, 0.0, 0.5), (10.0, 10.0, 0.0)],
                source_handles=["1F"],
            ),
            HatchPath(
                flags=16,
                edges=[
                    HatchEdge(kind=LINE_EDGE, start=Point(2.0, 2.0), end=Point(4.0, 2.0)),
                    HatchEdge(kind=ARC_EDGE, center=Point(3.0, 2.0), radius=1.0, start_angle=0.0, end_angle=180.0),
                ],
            ),
        ],
        pattern_angle=45.0,
        pattern_scale=2.0,
        pattern_lines=[
            PatternLine(angle=45.0, base_point=Point(0.0, 0.0), offset=Point(-2.2, 2.2), dashes=[1.0, -0.5]),
        ],
        seed_points=[Point(1.0, 1.0)],
    )


def test_hatch_round_trip_with_paths_and_pattern() -> None:
    hatch = _pattern_hatch()

    tags = to_tags(hatch)
    ctx = DxfContext()
    result = from_tags(tags, ctx)

    assert result.ok, list(ctx.diagnostics)
    assert result.entity == hatch
    assert (91, 2) in tags and (78, 1) in tags and (98, 1) in tags


def test_hatch_boundary_codes_are_not_common_attributes() -> None:
    result = from_tags(to_tags(_pattern_hatch()))

    common = result.entity.common
    assert common.graphics_data_size == 0
    assert common.dictionary_owner_soft == ""
    assert result.entity.paths[0].flags == 3
    assert result.entity.paths[0].source_handles == ["1F"]


def test_solid_hatch_omits_pattern_definition() -> None:
    hatch = Hatch(paths=[HatchPath(flags=2, vertices=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)])])

    tags = to_tags(hatch)

    codes = [code for code, _ in tags]
    assert 52 not in codes and 78 not in codes
    assert 42 not in codes
    assert from_tags(tags).entity == hatch


def test_hatch_with_fewer_paths_than_declared() -> None:
    ctx = DxfContext()
    result = from_tags(
        [
            (0, "HATCH"),
            (8, "0"),
            (100, "AcDbHatch"),
            (10, "0"), (20, "0"), (30, "0"),
            (2, "SOLID"),
            (70, "1"),
            (71, "0"),
            (91, "2"),
            (92, "2"), (72, "0"), (73, "1"), (93, "0"), (97, "0"),
            (75, "0"),
            (76, "1"),
            (98, "0"),
        ],
        ctx,
    )

    assert result.status is ReadStatus.TAINTED
    assert len(result.entity.paths) == 1
    assert result.entity.hatch_style == 0
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.FORMAT_VIOLATION)) == 1


def test_hatch_is_refused_before_r14() -> None:
    ctx = DxfContext(version=DxfVersion.R13)

    assert to_tags(Hatch(), ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.VERSION_MISMATCH


def _spline_hatch() -> Hatch:
    edge = HatchEdge(
        kind=SPLINE_EDGE,
        knots=[0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0],
        control_points=[Point(0.0, 0.0), Point(1.0, 2.0), Point(3.0, 2.0), Point(4.0, 0.0)],
        fit_points=[Point(0.0, 0.0), Point(4.0, 0.0)],
        start_tangent=Point(1.0, 1.0),
        end_tangent=Point(1.0, -1.0),
    )
    return Hatch(paths=[HatchPath(flags=1, edges=[edge], source_handles=["2A"])])


def test_hatch_spline_edge_keeps_fit_data() -> None:
    hatch = _spline_hatch()

    tags = to_tags(hatch)
    ctx = DxfContext()
    result = from_tags(tags, ctx)

    assert [value for code, value in tags if code == 97] == [2, 1]
    assert (12, 1.0) in tags and (23, -1.0) in tags
    assert result.ok, list(ctx.diagnostics)
    assert result.entity == hatch


def test_hatch_spline_fit_data_read_from_file_groups() -> None:
    ctx = DxfContext()
    result = from_tags(
        [
            (0, "HATCH"),
            (8, "0"),
            (100, "AcDbHatch"),
            (10, "0"), (20, "0"), (30, "0"),
            (2, "SOLID"),
            (70, "1"),
            (71, "0"),
            (91, "1"),
            (92, "0"), (93, "1"),
            (72, "4"), (94, "3"), (73, "0"), (74, "0"), (95, "0"), (96, "0"),
            (97, "2"), (11, "0"), (21, "0"), (11, "5"), (21, "0"),
            (12, "1"), (22, "0"), (13, "0"), (23, "1"),
            (97, "0"),
            (75, "0"),
            (76, "1"),
            (98, "0"),
        ],
        ctx,
    )

    assert result.ok, list(ctx.diagnostics)
    edge = result.entity.paths[0].edges[0]
    assert edge.fit_points == [Point(0.0, 0.0), Point(5.0, 0.0)]
    assert edge.start_tangent == Point(1.0, 0.0)
    assert edge.end_tangent == Point(0.0, 1.0)
    assert result.entity.paths[0].source_handles == []


def test_hatch_spline_fit_data_needs_r2010() -> None:
    tags = to_tags(_spline_hatch(), DxfContext(version=DxfVersion.R2007))

    assert [value for code, value in tags if code == 97] == [1]
    assert not any(code in (11, 12, 13) for code, _ in tags)


def test_rotated_dimension_writes_aligned_and_rotated_markers() -> None:
    dimension = Dimension(block_name="*D1", dim_type=ROTATED, defpoint2=Point(0.0, 0.0), defpoint3=Point(5.0, 0.0))

    tags = to_tags(dimension)

    assert _markers(tags) == ["AcDbEntity", "AcDbDimension", "AcDbAlignedDimension", "AcDbRotatedDimension"]
    assert _markers(to_tags(Dimension(dim_type=ALIGNED))) == ["AcDbEntity", "AcDbDimension", "AcDbAlignedDimension"]


def test_dimension_flags_are_split_and_recombined() -> None:
    dimension = Dimension(block_name="*D2", dim_type=ALIGNED, block_private=True)

    tags = to_tags(dimension)
    result = from_tags(tags)

    assert (70, 33) in tags
    assert result.entity.dim_type == ALIGNED
    assert result.entity.block_private is True
    assert result.entity.flags == 33


def test_dimension_type_outside_range_is_reset_on_read() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "DIMENSION"), (8, "0"), (2, "*D3"), (70, "7"), (3, "STANDARD")], ctx)

    assert result.entity.dim_type == ROTATED
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_dimension_type_bit_8_is_not_folded_into_a_valid_type() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "DIMENSION"), (8, "0"), (2, "*D4"), (70, "41"), (3, "STANDARD")], ctx)

    assert result.entity.dim_type == ROTATED
    assert result.entity.block_private is True
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_dimension_type_outside_range_is_refused_on_write() -> None:
    ctx = DxfContext()

    assert to_tags(Dimension(dim_type=9), ctx) is None
    assert ctx.diagnostics[0].kind is DiagnosticKind.INVARIANT_VIOLATION
    assert ctx.diagnostics[0].severity == "error"


def test_radial_dimension_round_trip() -> None:
    dimension = Dimension(
        block_name="*D4",
        dim_type=RADIUS,
        definition_point=Point(0.0, 0.0),
        text_midpoint=Point(2.0, 2.0),
        defpoint4=Point(5.0, 0.0),
        leader_length=1.0,
        actual_measurement=5.0,
        text="R5",
    )

    tags = to_tags(dimension)
    result = from_tags(tags)

    assert _markers(tags)[-1] == "AcDbRadialDimension"
    assert result.ok
    assert result.entity == dimension


def test_unused_definition_points_follow_the_subclass() -> None:
    dimension = Dimension(dim_type=ROTATED, defpoint4=Point(1.0, 1.0))

    tags = to_tags(dimension)

    assert tags.index((15, 1.0)) > tags.index((100, "AcDbRotatedDimension"))
    assert from_tags(tags).entity.defpoint4 == Point(1.0, 1.0, 0.0)


def test_dimension_text_layout_needs_r2000() -> None:
    tags = to_tags(Dimension(block_name="*D5"), DxfContext(version=DxfVersion.R12))

    codes = [code for code, _ in tags]
    assert 100 not in codes
    assert 71 not in codes and 72 not in codes and 41 not in codes
