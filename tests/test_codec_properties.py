from __future__ import annotations

import pytest

from dxfkit import DiagnosticKind, DxfContext, DxfVersion, from_tags, to_tags
from dxfkit.common import CommonAttributes
from dxfkit.dimension import ALIGNED
from dxfkit.entity import (
    Arc,
    Attrib,
    Circle,
    Dimension,
    Ellipse,
    Insert,
    Line,
    LwPolyline,
    LwVertex,
    MText,
    Polyline,
    Spline,
    Text,
    Vertex,
)
from dxfkit.points import Point

COMMON_TAGS = [
    (5, "1F"),
    (6, "DASHED"),
    (8, "L1"),
    (39, "2.5"),
    (48, "0.5"),
    (60, "1"),
    (62, "3"),
    (67, "1"),
    (92, "2"),
    (310, "ABCD"),
    (284, "1"),
    (347, "AB"),
    (370, "25"),
    (390, "CD"),
    (420, "16711680"),
    (430, "RED"),
    (440, "33554687"),
]

KIND_BODIES = {
    "LINE": [(10, "0"), (20, "0"), (30, "0"), (11, "1"), (21, "1"), (31, "0")],
    "POINT": [(10, "1"), (20, "2"), (30, "3")],
    "CIRCLE": [(10, "0"), (20, "0"), (30, "0"), (40, "2")],
    "ARC": [(10, "0"), (20, "0"), (30, "0"), (40, "2"), (50, "0"), (51, "90")],
    "SOLID": [(10, "0"), (20, "0"), (11, "1"), (21, "0"), (12, "0"), (22, "1")],
    "TEXT": [(10, "0"), (20, "0"), (40, "2.5"), (1, "note")],
    "MTEXT": [(10, "0"), (20, "0"), (40, "2.5"), (1, "note")],
    "INSERT": [(2, "BRACKET"), (10, "0"), (20, "0")],
    "SPLINE": [(70, "8"), (71, "1"), (72, "0"), (73, "2"), (10, "0"), (20, "0"), (10, "1"), (20, "1")],
    "LEADER": [(3, "STANDARD"), (76, "2"), (10, "0"), (20, "0"), (10, "1"), (20, "1")],
    "VIEWPORT": [(10, "0"), (20, "0"), (40, "10"), (41, "5")],
}


def _sample_records() -> list[object]:
    return [
        Line(start=Point(1.0, 2.0, 3.0), end=Point(-4.5, 0.125, 0.0)),
        Circle(common=CommonAttributes(layer="WALLS", color=1), center=Point(1.0, 2.0), radius=5.0),
        Arc(center=Point(0.0, 0.0), radius=2.0, start_angle=15.0, end_angle=270.5),
        Text(insert=Point(1.0, 1.0), height=2.5, text="Hello, world", rotation=30.0, style="ROMANS"),
        Insert(
            attributes_follow=1,
            name="BRACKET",
            insert=Point(10.0, 20.0),
            x_scale=2.0,
            attribs=[Attrib(insert=Point(10.0, 18.0), height=1.5, text="42", tag="ID")],
        ),
        Polyline(
            flags=1,
            vertices=[
                Vertex(location=Point(0.0, 0.0), bulge=0.5),
                Vertex(location=Point(4.0, 0.0)),
                Vertex(location=Point(4.0, 3.0), start_width=0.25, end_width=0.25),
            ],
        ),
    ]


def _modern_records() -> list[object]:
    return [
        Ellipse(center=Point(1.0, 1.0), major_axis=Point(4.0, 0.0), ratio=0.5, start_param=0.0, end_param=3.0),
        MText(insert=Point(0.0, 5.0), height=2.0, reference_width=40.0, text="A" * 600),
        LwPolyline(flags=1, vertices=[LwVertex(0.0, 0.0, bulge=-0.5), LwVertex(3.0, 0.0), LwVertex(3.0, 2.0)]),
        Spline(
            flags=8,
            degree=3,
            knots=[0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0],
            control_points=[Point(0.0, 0.0), Point(1.0, 2.0), Point(3.0, 2.0), Point(4.0, 0.0)],
        ),
        Dimension(
            block_name="*D1",
            definition_point=Point(0.0, 5.0),
            text_midpoint=Point(5.0, 6.0),
            dim_type=ALIGNED,
            block_private=True,
            clone_insert=Point(1.0, 1.0),
            defpoint2=Point(0.0, 0.0),
            defpoint3=Point(10.0, 0.0),
            actual_measurement=10.0,
        ),
    ]


@pytest.mark.parametrize("version", [DxfVersion.R12, DxfVersion.R13, DxfVersion.R2000, DxfVersion.R2010])
def test_round_trip_purity(version: DxfVersion) -> None:
    for record in _sample_records():
        ctx = DxfContext(version=version)
        result = from_tags(to_tags(record, DxfContext(version=version)), ctx)

        assert result.ok, list(ctx.diagnostics)
        assert result.entity == record


@pytest.mark.parametrize("version", [DxfVersion.R2000, DxfVersion.R2010])
def test_round_trip_purity_of_later_kinds(version: DxfVersion) -> None:
    for record in _modern_records():
        ctx = DxfContext(version=version)
        result = from_tags(to_tags(record, DxfContext(version=version)), ctx)

        assert result.ok, list(ctx.diagnostics)
        assert result.entity == record


def test_handles_survive_round_trip_from_r13() -> None:
    circle = Circle(common=CommonAttributes(handle=0x1A2B), radius=1.0)

    result = from_tags(to_tags(circle, DxfContext(version=DxfVersion.R13)), DxfContext(version=DxfVersion.R13))

    assert result.entity.common.handle == 0x1A2B


def test_default_record_differs_only_in_gated_tags() -> None:
    line = Line(end=Point(1.0, 1.0))

    old = to_tags(line, DxfContext(version=DxfVersion.R12))
    new = to_tags(line, DxfContext(version=DxfVersion.R2010))

    assert [tag for tag in new if tag[0] != 100] == old


def test_emission_is_deterministic() -> None:
    for record in [*_sample_records(), *_modern_records()]:
        first = to_tags(record, DxfContext())
        second = to_tags(record, DxfContext())
        assert first == second


@pytest.mark.parametrize("kind", sorted(KIND_BODIES))
def test_common_codes_are_absorbed_by_every_kind(kind: str) -> None:
    ctx = DxfContext()
    result = from_tags([(0, kind), *COMMON_TAGS, *KIND_BODIES[kind]], ctx)

    common = result.entity.common
    assert not ctx.diagnostics.of_kind(DiagnosticKind.UNKNOWN_TAG)
    assert not ctx.diagnostics.of_kind(DiagnosticKind.VERSION_MISMATCH)
    assert common.handle == 0x1F
    assert common.linetype == "DASHED"
    assert common.layer == "L1"
    assert common.thickness == 2.5
    assert common.linetype_scale == 0.5
    assert common.visibility == 1
    assert common.color == 3
    assert common.paperspace == 1
    assert common.graphics_data_size == 2
    assert common.binary_graphics_data == ["ABCD"]
    assert common.shadow_mode == 1
    assert common.material == "AB"
    assert common.lineweight == 25
    assert common.plot_style_name == "CD"
    assert common.color_value == 16711680
    assert common.color_name == "RED"
    assert common.transparency == 33554687


@pytest.mark.parametrize("position", range(1, 6))
@pytest.mark.parametrize("unknown", [(123, "garbage"), (1, "stray text"), (71, "5")])
def test_unknown_tag_yields_one_diagnostic(position: int, unknown: tuple[int, str]) -> None:
    pairs = [(0, "LINE"), (8, "0"), (10, "0"), (20, "0"), (30, "0"), (11, "1"), (21, "1"), (31, "0")]
    baseline = from_tags(pairs).entity

    ctx = DxfContext()
    injected = list(pairs)
    injected.insert(position, unknown)
    result = from_tags(injected, ctx)

    assert result.entity == baseline
    assert len(ctx.diagnostics) == 1
    assert ctx.diagnostics[0].kind is DiagnosticKind.UNKNOWN_TAG


def test_forbidden_common_tag_is_reported_but_kept() -> None:
    line = Line(common=CommonAttributes(lineweight=25))
    assert not any(code == 370 for code, _ in to_tags(line, DxfContext(version=DxfVersion.R2000)))

    ctx = DxfContext(version=DxfVersion.R2000)
    result = from_tags([(0, "LINE"), (8, "0"), (370, "25"), (10, "0"), (20, "0"), (11, "1"), (21, "0")], ctx)

    assert result.entity.common.lineweight == 25
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.VERSION_MISMATCH)) == 1


def test_forbidden_field_tag_is_reported_but_kept() -> None:
    mtext = MText(text="x", line_spacing_factor=1.5)
    assert not any(code == 44 for code, _ in to_tags(mtext, DxfContext(version=DxfVersion.R13)))

    ctx = DxfContext(version=DxfVersion.R13)
    result = from_tags([(0, "MTEXT"), (8, "0"), (10, "0"), (20, "0"), (40, "1"), (1, "x"), (44, "1.5")], ctx)

    assert result.entity.line_spacing_factor == 1.5
    assert len(ctx.diagnostics.of_kind(DiagnosticKind.VERSION_MISMATCH)) == 1


def test_forbidden_kind_is_refused_on_write_and_reported_on_read() -> None:
    lwpolyline = LwPolyline(vertices=[LwVertex(0.0, 0.0), LwVertex(1.0, 0.0)])
    write_ctx = DxfContext(version=DxfVersion.R13)

    assert to_tags(lwpolyline, write_ctx) is None
    assert write_ctx.diagnostics[0].kind is DiagnosticKind.VERSION_MISMATCH

    read_ctx = DxfContext(version=DxfVersion.R13)
    result = from_tags([(0, "LWPOLYLINE"), (8, "0"), (90, "1"), (70, "0"), (10, "2"), (20, "3")], read_ctx)

    assert result.entity.vertices == [LwVertex(2.0, 3.0)]
    assert len(read_ctx.diagnostics.of_kind(DiagnosticKind.VERSION_MISMATCH)) == 1
