from __future__ import annotations

from dxfkit import DiagnosticKind, DxfContext, DxfVersion, from_tags, to_tags
from dxfkit.entity import AttDef, Helix, Leader, MLine, MLineVertex, MText, Spline, Text
from dxfkit.points import Point
from dxfkit.text import split_text


def test_text_vertical_alignment_follows_second_marker() -> None:
    text = Text(insert=Point(0.0, 0.0), height=2.0, text="Hi", halign=1, align_point=Point(5.0, 0.0), valign=2)

    tags = to_tags(text)

    assert [value for code, value in tags if code == 100] == ["AcDbEntity", "AcDbText", "AcDbText"]
    assert tags[-2:] == [(100, "AcDbText"), (73, 2)]
    assert from_tags(tags).entity == text


def test_attdef_round_trip() -> None:
    attdef = AttDef(insert=Point(1.0, 1.0), height=1.0, text="0", tag="QTY", prompt="Quantity?", flags=8)

    tags = to_tags(attdef)
    result = from_tags(tags)

    assert [value for code, value in tags if code == 100][-1] == "AcDbAttributeDefinition"
    assert result.ok
    assert result.entity == attdef


def test_attdef_requires_a_tag() -> None:
    ctx = DxfContext()
    result = from_tags([(0, "ATTDEF"), (8, "0"), (10, "0"), (20, "0"), (40, "1"), (1, "x"), (3, "?"), (70, "0")], ctx)

    assert result.entity.tag == ""
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.MISSING_REQUIREMENT)) == 1


def test_mtext_long_text_is_chunked() -> None:
    text = "".join(chr(ord("a") + index % 26) for index in range(620))
    mtext = MText(insert=Point(0.0, 0.0), height=3.5, reference_width=100.0, text=text)

    tags = to_tags(mtext)

    chunks = [value for code, value in tags if code == 3]
    assert [len(chunk) for chunk in chunks] == [250, 250]
    assert dict(tags)[1] == text[500:]
    assert from_tags(tags).entity.text == text


def test_mtext_chunks_before_final_text_are_joined_on_read() -> None:
    result = from_tags(
        [(0, "MTEXT"), (8, "0"), (10, "0"), (20, "0"), (40, "1"), (3, "first "), (3, "second "), (1, "last")]
    )

    assert result.entity.text == "first second last"


def test_split_text() -> None:
    assert split_text("") == [""]
    assert split_text("abcdef", 4) == ["abcd", "ef"]


def test_spline_counts_and_weights() -> None:
    spline = Spline(
        flags=4,
        degree=2,
        knots=[0.0, 0.0, 0.0, 1.0, 1.0, 1.0],
        weights=[1.0, 0.5, 1.0],
        control_points=[Point(0.0, 0.0), Point(1.0, 1.0), Point(2.0, 0.0)],
    )

    tags = to_tags(spline)

    assert (72, 6) in tags and (73, 3) in tags and (74, 0) in tags
    assert [value for code, value in tags if code == 41] == [1.0, 0.5, 1.0]
    assert from_tags(tags).entity == spline


def test_spline_weight_count_mismatch_is_reported() -> None:
    ctx = DxfContext()
    from_tags(
        [
            (0, "SPLINE"),
            (8, "0"),
            (70, "4"),
            (71, "1"),
            (41, "1.0"),
            (10, "0"), (20, "0"), (30, "0"),
            (10, "1"), (20, "1"), (30, "0"),
        ],
        ctx,
    )

    assert len(ctx.diagnostics.of_kind(DiagnosticKind.INVARIANT_VIOLATION)) == 1


def test_spline_fit_points_and_tangents() -> None:
    spline = Spline(
        fit_points=[Point(0.0, 0.0), Point(1.0, 2.0), Point(3.0, 1.0)],
        start_tangent=Point(1.0, 0.0),
        end_tangent=Point(0.0, -1.0),
        fit_tolerance=0.001,
    )

    tags = to_tags(spline)

    assert (44, 0.001) in tags
    assert (12, 1.0) in tags and (13, 0.0) in tags
    assert from_tags(tags).entity == spline


def test_helix_keeps_spline_and_helix_groups_apart() -> None:
    helix = Helix(
        degree=3,
        knots=[0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0],
        control_points=[Point(1.0, 0.0), Point(1.0, 0.5, 0.1), Point(0.0, 1.0, 0.2), Point(-1.0, 0.0, 0.3)],
        axis_base=Point(0.0, 0.0),
        start_point=Point(1.0, 0.0),
        radius=1.0,
        turns=2.0,
        turn_height=0.5,
    )

    tags = to_tags(helix, DxfContext(version=DxfVersion.R2007))
    result = from_tags(tags, DxfContext(version=DxfVersion.R2007))

    assert [value for code, value in tags if code == 100] == ["AcDbEntity", "AcDbSpline", "AcDbHelix"]
    assert result.ok
    assert result.entity == helix
    assert to_tags(helix, DxfContext(version=DxfVersion.R2004)) is None


def test_leader_vertices() -> None:
    leader = Leader(
        dimstyle="STANDARD",
        vertices=[Point(0.0, 0.0), Point(5.0, 5.0), Point(10.0, 5.0)],
        has_hookline=1,
        annotation_handle="2F",
    )

    tags = to_tags(leader)

    assert (76, 3) in tags
    assert (340, "2F") in tags
    assert from_tags(tags).entity == leader


def test_mline_vertices_with_element_parameters() -> None:
    mline = MLine(
        style_name="STANDARD",
        style_element_count=2,
        start_point=Point(0.0, 0.0),
        vertices=[
            MLineVertex(
                location=Point(0.0, 0.0),
                direction=Point(1.0, 0.0),
                miter=Point(0.0, 1.0),
                line_params=[[0.5], [-0.5]],
                fill_params=[[], []],
            ),
            MLineVertex(
                location=Point(10.0, 0.0),
                direction=Point(1.0, 0.0),
                miter=Point(0.0, 1.0),
                line_params=[[0.5, 0.0], [-0.5, 0.0]],
                fill_params=[[], []],
            ),
        ],
    )

    tags = to_tags(mline)
    result = from_tags(tags)

    assert (72, 2) in tags
    assert [value for code, value in tags if code == 74] == [1, 1, 2, 2]
    assert result.ok
    assert result.entity == mline
