from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any, Callable, Iterable

from .common import (
    COMMON_DEFAULTS,
    ENTITY_MARKER,
    REACTORS_GROUP,
    XDICTIONARY_GROUP,
    absorb,
    check_common_gate,
    check_gate,
    common_value,
    emit_common,
    emit_xdata,
    restore_defaults,
    version_allows,
)
from .context import DxfContext
from .diagnostics import ERROR, INFO, DiagnosticKind
from .errors import DxfStructureError
from .points import Point, point_tags, with_axis
from .scalars import coerce, is_xdata_code
from .tags import Tag, TagReader
from .versions import DxfVersion

logger = logging.getLogger(__name__)

TagList = list[tuple[int, Any]]

INVALID = object()


@dataclass(frozen=True)
class Marker:
    """A ``100`` subclass marker, written for R13 and newer targets.

    ``variant`` markers are chosen per record when writing (see
    ``EntityCodec.marker_name``); their fields share one dispatch table.
    """

    name: str
    min_version: DxfVersion = DxfVersion.R13
    variant: bool = False


@dataclass(frozen=True)
class Field:
    attr: str
    code: int
    point: bool = False
    flat: bool = False
    optional: bool = False
    repeat: bool = False
    count_of: str | None = None
    common: bool = False
    min_version: DxfVersion | None = None
    max_version: DxfVersion | None = None
    custom: tuple[int, ...] = ()

    @property
    def codes(self) -> tuple[int, ...]:
        if self.custom:
            return self.custom
        if not self.point:
            return (self.code,)
        if self.flat:
            return (self.code, self.code + 10)
        return (self.code, self.code + 10, self.code + 20)

    def allows(self, version: DxfVersion) -> bool:
        return version_allows(version, self.min_version, self.max_version)


def Custom(attr: str, *codes: int, **options: Any) -> Field:
    """A field whose tags are decoded and encoded by the codec itself."""
    return Field(attr, codes[0], custom=codes, **options)


LayoutItem = Marker | Field

THICKNESS = Field("thickness", 39, optional=True, common=True)
EXTRUSION = Field("extrusion", 210, point=True, optional=True, common=True, min_version=DxfVersion.R12)


class ReadStatus(Enum):
    OK = "ok"
    TAINTED = "tainted"
    FAILED = "failed"


@dataclass
class ReadResult:
    entity: Any
    status: ReadStatus

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK

    @property
    def failed(self) -> bool:
        return self.status is ReadStatus.FAILED


@dataclass(frozen=True)
class BodyTag:
    """A kind-specific tag together with the subclass marker it appeared under."""

    code: int
    value: str
    line: int
    marker: str | None


class EntityCodec:
    """Table-driven reader and writer for one entity kind.

    ``layout`` lists subclass markers and fields in write order. Reading
    dispatches each tag through the table of the subclass it appears in,
    falling back to a merged table for markerless R12 input. Codes listed in
    ``shadowed_codes`` overlap the common attribute set; they belong to the
    kind once its own subclass marker has been seen.
    """

    def __init__(
        self,
        dxftype: str,
        record: Callable[[], Any],
        layout: Iterable[LayoutItem] = (),
        *,
        min_version: DxfVersion = DxfVersion.R10,
        has_common: bool = True,
        shadowed_codes: Iterable[int] = (),
        required: Iterable[str] = (),
        extra_markers: Iterable[str] = (),
        aliases: Iterable[str] = (),
        elevation_needs_flatland: bool = False,
        readable: bool = True,
    ) -> None:
        self.dxftype = dxftype
        self.record = record
        self.layout: tuple[LayoutItem, ...] = tuple(layout)
        self.min_version = min_version
        self.has_common = has_common
        self.shadowed_codes = frozenset(shadowed_codes)
        self.required = tuple(required)
        self.aliases = tuple(aliases)
        self.elevation_needs_flatland = elevation_needs_flatland
        self.readable = readable

        self._sections: dict[str | None, dict[int, tuple[Field, int]]] = {}
        self._merged: dict[int, tuple[Field, int]] = {}
        marker: str | None = None
        names: set[str] = set(extra_markers)
        if has_common:
            names.add(ENTITY_MARKER)
        for item in self.layout:
            if isinstance(item, Marker):
                marker = item.name
                names.add(item.name)
                self._sections.setdefault(marker, {})
                continue
            if item.common:
                continue
            for axis, code in enumerate(item.codes):
                self._sections.setdefault(marker, {}).setdefault(code, (item, axis))
                self._merged.setdefault(code, (item, axis))
        self.markers = frozenset(names)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dxftype!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return (self.dxftype, *self.aliases)

    def new(self) -> Any:
        return self.record()

    @cached_property
    def defaults(self) -> Any:
        return self.new()

    # reading

    def read(self, reader: TagReader, ctx: DxfContext, *, start_line: int | None = None) -> ReadResult:
        """Read one entity; ``reader`` is positioned just after its ``0`` tag."""
        entity = self.new()
        mark = len(ctx.diagnostics)
        if ctx.version < self.min_version:
            ctx.report(
                DiagnosticKind.VERSION_MISMATCH,
                f"{self.dxftype} is not valid in {ctx.version.name} files",
                line=start_line,
                dxftype=self.dxftype,
            )
        body: list[BodyTag] = []
        seen: set[int] = set()
        marker: str | None = None
        for tag in reader.entity_tags():
            code = tag.code
            if code == 999:
                ctx.report(
                    DiagnosticKind.COMMENT,
                    tag.value,
                    line=tag.line,
                    dxftype=self.dxftype,
                    severity=INFO,
                )
                continue
            if code == 102:
                if not self._read_app_group(reader, tag, entity, ctx):
                    return ReadResult(None, ReadStatus.FAILED)
                continue
            if code == 100:
                marker = self._check_marker(tag, ctx)
                continue
            if is_xdata_code(code):
                self._read_xdata(entity, tag, ctx)
                continue
            seen.add(code)
            if self.has_common and not (code in self.shadowed_codes and marker not in (None, ENTITY_MARKER)):
                if absorb(entity.common, tag, ctx, self.dxftype):
                    continue
            body.append(BodyTag(code, tag.value, tag.line, marker))

        self.decode(entity, body, ctx)
        if self.has_common:
            restore_defaults(entity.common, ctx, self.dxftype, layer_seen=8 in seen, line=start_line)
        for attr in self.required:
            if not getattr(entity, attr):
                ctx.report(
                    DiagnosticKind.MISSING_REQUIREMENT,
                    f"empty {attr.replace('_', ' ')} in {self.dxftype}",
                    line=start_line,
                    dxftype=self.dxftype,
                )
        self.finalize(entity, seen, ctx, start_line)
        if not self.read_followers(entity, reader, ctx):
            return ReadResult(None, ReadStatus.FAILED)
        tainted = any(d.kind is not DiagnosticKind.COMMENT for d in ctx.diagnostics.since(mark))
        return ReadResult(entity, ReadStatus.TAINTED if tainted else ReadStatus.OK)

    def _check_marker(self, tag: Tag, ctx: DxfContext) -> str:
        name = tag.value.strip()
        if name not in self.markers:
            ctx.report(
                DiagnosticKind.SUBCLASS_MISMATCH,
                f"unexpected subclass marker {name!r}",
                line=tag.line,
                dxftype=self.dxftype,
            )
        return name

    def _read_app_group(self, reader: TagReader, opening: Tag, entity: Any, ctx: DxfContext) -> bool:
        name = opening.value.strip()
        if not name.startswith("{"):
            ctx.report(
                DiagnosticKind.FORMAT_VIOLATION,
                f"unexpected application group delimiter {name!r}",
                line=opening.line,
                dxftype=self.dxftype,
            )
            return True
        owner = entity.common if self.has_common else entity
        while True:
            tag = reader.next_tag()
            if tag is None:
                raise DxfStructureError(
                    f"unexpected end of file inside application group {name!r}",
                    source=reader.name,
                    line=reader.line_number,
                )
            if tag.code == 0:
                reader.push_back(tag)
                ctx.report(
                    DiagnosticKind.FORMAT_VIOLATION,
                    f"unterminated application group {name!r}",
                    line=opening.line,
                    dxftype=self.dxftype,
                    severity=ERROR,
                )
                return False
            if tag.code == 102 and tag.value.strip() == "}":
                return True
            if name == REACTORS_GROUP and tag.code == 330:
                attr = "dictionary_owner_soft"
            elif name == XDICTIONARY_GROUP and tag.code == 360:
                attr = "dictionary_owner_hard"
            else:
                logger.debug("skipping %s tag %d in %s", name, tag.code, self.dxftype)
                continue
            value = self.coerce_tag(tag, ctx)
            if value is INVALID or getattr(owner, attr):
                continue
            if self.has_common:
                check_common_gate(ctx, tag, self.dxftype)
            setattr(owner, attr, value)

    def _read_xdata(self, entity: Any, tag: Tag, ctx: DxfContext) -> None:
        value = self.coerce_tag(tag, ctx)
        if value is not INVALID:
            self.xdata_of(entity).append((tag.code, value))

    def xdata_of(self, entity: Any) -> list[tuple[int, Any]]:
        return entity.common.xdata if self.has_common else entity.xdata

    def coerce_tag(self, tag: Tag | BodyTag, ctx: DxfContext) -> Any:
        try:
            return coerce(tag.code, tag.value)
        except ValueError as exc:
            ctx.report(DiagnosticKind.FORMAT_VIOLATION, str(exc), line=tag.line, dxftype=self.dxftype)
            return INVALID

    def lookup(self, tag: BodyTag) -> tuple[Field, int] | None:
        section = self._sections.get(tag.marker)
        if section is not None and tag.code in section:
            return section[tag.code]
        return self._merged.get(tag.code)

    def decode(self, entity: Any, body: list[BodyTag], ctx: DxfContext) -> None:
        for tag in body:
            if not self.decode_tag(entity, tag, ctx):
                self.unknown_tag(tag, ctx)

    def decode_tag(self, entity: Any, tag: BodyTag, ctx: DxfContext) -> bool:
        target = self.lookup(tag)
        if target is None:
            return False
        item, axis = target
        value = self.coerce_tag(tag, ctx)
        if value is INVALID:
            return True
        check_gate(ctx, Tag(tag.code, tag.value, tag.line), item.min_version, item.max_version, self.dxftype)
        if item.custom:
            self.decode_custom(entity, item, tag, value, ctx)
        else:
            self.assign(entity, item, axis, value)
        return True

    def decode_custom(self, entity: Any, item: Field, tag: BodyTag, value: Any, ctx: DxfContext) -> None:
        raise NotImplementedError(f"{self.dxftype} has no decoder for {item.attr}")

    def unknown_tag(self, tag: BodyTag, ctx: DxfContext) -> None:
        ctx.report(
            DiagnosticKind.UNKNOWN_TAG,
            f"unknown group code {tag.code} ({tag.value!r})",
            line=tag.line,
            dxftype=self.dxftype,
        )

    @staticmethod
    def assign(entity: Any, item: Field, axis: int, value: Any) -> None:
        if item.count_of is not None:
            # counts are recomputed from the list on write
            return
        if item.point:
            if item.repeat:
                points = getattr(entity, item.attr)
                if axis == 0 or not points:
                    points.append(with_axis(None, axis, value))
                else:
                    points[-1] = with_axis(points[-1], axis, value)
            else:
                setattr(entity, item.attr, with_axis(getattr(entity, item.attr), axis, value))
        elif item.repeat:
            getattr(entity, item.attr).append(value)
        else:
            setattr(entity, item.attr, value)

    def finalize(self, entity: Any, seen: set[int], ctx: DxfContext, line: int | None) -> None:
        pass

    def read_followers(self, entity: Any, reader: TagReader, ctx: DxfContext) -> bool:
        return True

    def invalid(self, ctx: DxfContext, message: str, line: int | None = None) -> None:
        ctx.report(DiagnosticKind.INVARIANT_VIOLATION, message, line=line, dxftype=self.dxftype)

    # writing

    def encode(self, entity: Any, ctx: DxfContext) -> TagList | None:
        if ctx.version < self.min_version:
            ctx.report(
                DiagnosticKind.VERSION_MISMATCH,
                f"{self.dxftype} requires {self.min_version.name} or newer, target is {ctx.version.name}",
                dxftype=self.dxftype,
                severity=ERROR,
            )
            return None
        for attr in self.required:
            if not getattr(entity, attr):
                ctx.report(
                    DiagnosticKind.MISSING_REQUIREMENT,
                    f"empty {attr.replace('_', ' ')}, {self.dxftype} is not written",
                    dxftype=self.dxftype,
                    severity=ERROR,
                )
                return None
        if not self.check(entity, ctx):
            return None
        out: TagList = [(0, self.dxftype)]
        self.encode_head(entity, out, ctx)
        self.encode_body(entity, out, ctx)
        emit_xdata(self.xdata_of(entity), out)
        return out

    def check(self, entity: Any, ctx: DxfContext) -> bool:
        return True

    def refuse(self, ctx: DxfContext, message: str) -> bool:
        ctx.report(DiagnosticKind.INVARIANT_VIOLATION, message, dxftype=self.dxftype, severity=ERROR)
        return False

    def encode_head(self, entity: Any, out: TagList, ctx: DxfContext) -> None:
        if self.has_common:
            emit_common(
                entity.common,
                ctx,
                self.dxftype,
                out,
                elevation_needs_flatland=self.elevation_needs_flatland,
            )

    def encode_body(self, entity: Any, out: TagList, ctx: DxfContext) -> None:
        self.encode_layout(self.layout, entity, out, ctx)

    def encode_layout(self, layout: Iterable[LayoutItem], entity: Any, out: TagList, ctx: DxfContext) -> None:
        for item in layout:
            if isinstance(item, Marker):
                if ctx.version >= item.min_version:
                    out.append((100, self.marker_name(item, entity)))
                continue
            if item.allows(ctx.version):
                self.encode_field(entity, item, out, ctx)

    def marker_name(self, item: Marker, entity: Any) -> str:
        return item.name

    def encode_field(self, entity: Any, item: Field, out: TagList, ctx: DxfContext) -> None:
        if item.custom:
            self.encode_custom(entity, item, out, ctx)
            return
        if item.count_of is not None:
            out.append((item.code, len(getattr(entity, item.count_of))))
            return
        value = self.field_value(entity, item, ctx)
        if value is None:
            return
        if item.optional and value == self.default_value(item):
            return
        out.extend(self.field_tags(item, value))

    def encode_custom(self, entity: Any, item: Field, out: TagList, ctx: DxfContext) -> None:
        raise NotImplementedError(f"{self.dxftype} has no encoder for {item.attr}")

    def field_value(self, entity: Any, item: Field, ctx: DxfContext) -> Any:
        if item.common:
            return common_value(entity.common, item.attr, ctx, self.dxftype)
        return getattr(entity, item.attr)

    def default_value(self, item: Field) -> Any:
        if item.common:
            return getattr(COMMON_DEFAULTS, item.attr)
        return getattr(self.defaults, item.attr)

    @staticmethod
    def field_tags(item: Field, value: Any) -> TagList:
        if item.point:
            if item.repeat:
                return [tag for point in value for tag in point_tags(item.code, Point.of(point), flat=item.flat)]
            return point_tags(item.code, Point.of(value), flat=item.flat)
        if item.repeat:
            return [(item.code, each) for each in value]
        return [(item.code, value)]


def read_followers(
    reader: TagReader,
    ctx: DxfContext,
    follower: EntityCodec,
    seqend: EntityCodec,
    owner: str,
) -> tuple[list[Any], Any, bool]:
    """Read a chain of ``follower`` records terminated by SEQEND.

    Returns the records, the SEQEND record (``None`` when the chain is not
    terminated) and whether the chain was read without fatal errors.
    """
    items: list[Any] = []
    while True:
        tag = reader.peek()
        if tag is None or tag.code != 0:
            return items, None, True
        name = tag.value.strip()
        if name == follower.dxftype:
            reader.next_tag()
            result = follower.read(reader, ctx, start_line=tag.line)
            if result.failed:
                ctx.report(
                    DiagnosticKind.DISCARDED_ENTITY,
                    f"discarded {name} following {owner}",
                    line=tag.line,
                    dxftype=name,
                )
                continue
            items.append(result.entity)
        elif name == seqend.dxftype:
            reader.next_tag()
            result = seqend.read(reader, ctx, start_line=tag.line)
            return items, result.entity, not result.failed
        else:
            ctx.report(
                DiagnosticKind.FORMAT_VIOLATION,
                f"{owner} chain is not terminated by SEQEND",
                line=tag.line,
                dxftype=owner,
            )
            return items, None, True
