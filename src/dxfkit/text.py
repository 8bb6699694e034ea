from __future__ import annotations

from typing import Any

from .context import DxfContext
from .entity import AttDef, Attrib, MText, Text
from .schema import EXTRUSION, THICKNESS, BodyTag, Custom, EntityCodec, Field, Marker, TagList
from .versions import DxfVersion

MTEXT_CHUNK = 250


def _text_fields(*, valign: bool) -> list[Field]:
    fields = [
        THICKNESS,
        Field("insert", 10, point=True),
        Field("height", 40),
        Field("text", 1),
        Field("rotation", 50, optional=True),
        Field("width_factor", 41, optional=True),
        Field("oblique", 51, optional=True),
        Field("style", 7, optional=True),
        Field("generation_flags", 71, optional=True),
        Field("halign", 72, optional=True),
        Field("align_point", 11, point=True, optional=True),
        EXTRUSION,
    ]
    if valign:
        fields += [Marker("AcDbText"), Field("valign", 73, optional=True)]
    return fields


def _attribute_fields() -> list[Field]:
    return [
        Field("tag", 2),
        Field("flags", 70),
        Field("field_length", 73, optional=True),
        Field("valign", 74, optional=True),
    ]


TEXT = EntityCodec("TEXT", Text, [Marker("AcDbText"), *_text_fields(valign=True)])

ATTRIB = EntityCodec(
    "ATTRIB",
    Attrib,
    [Marker("AcDbText"), *_text_fields(valign=False), Marker("AcDbAttribute"), *_attribute_fields()],
    required=("tag",),
)

ATTDEF = EntityCodec(
    "ATTDEF",
    AttDef,
    [
        Marker("AcDbText"),
        *_text_fields(valign=False),
        Marker("AcDbAttributeDefinition"),
        Field("prompt", 3),
        *_attribute_fields(),
    ],
    required=("tag",),
)


def split_text(text: str, size: int = MTEXT_CHUNK) -> list[str]:
    """Split ``text`` into chunks; MTEXT writes all but the last with group 3."""
    if not text:
        return [""]
    return [text[i : i + size] for i in range(0, len(text), size)]


class MTextCodec(EntityCodec):
    def decode(self, entity: MText, body: list[BodyTag], ctx: DxfContext) -> None:
        chunks = [tag.value for tag in body if tag.code == 3]
        super().decode(entity, [tag for tag in body if tag.code != 3], ctx)
        if chunks:
            entity.text = "".join(chunks) + entity.text

    def decode_custom(self, entity: MText, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        entity.text = value

    def encode_custom(self, entity: MText, item: Field, out: TagList, ctx: DxfContext) -> None:
        chunks = split_text(entity.text)
        out.extend((3, chunk) for chunk in chunks[:-1])
        out.append((1, chunks[-1]))


MTEXT = MTextCodec(
    "MTEXT",
    MText,
    [
        Marker("AcDbMText"),
        Field("insert", 10, point=True),
        Field("height", 40),
        Field("reference_width", 41),
        Field("attachment_point", 71),
        Field("flow_direction", 72),
        Custom("text", 1),
        Field("style", 7, optional=True),
        EXTRUSION,
        Field("text_direction", 11, point=True, optional=True),
        Field("rotation", 50, optional=True),
        Field("line_spacing_style", 73, optional=True, min_version=DxfVersion.R2000),
        Field("line_spacing_factor", 44, optional=True, min_version=DxfVersion.R2000),
    ],
    min_version=DxfVersion.R13,
)
