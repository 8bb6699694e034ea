from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, TextIO

from .codecs import codec_for, codec_for_entity, table_codec_for
from .common import CommonAttributes
from .context import DxfContext
from .diagnostics import ERROR, INFO, DiagnosticKind
from .document import BlockDefinition, Document, EntitySection
from .entity import Block, EndBlk
from .errors import DxfIOError, DxfStructureError
from .schema import ReadResult, ReadStatus, TagList
from .tags import Tag, TagReader, TagWriter
from .versions import DxfVersion

logger = logging.getLogger(__name__)

_TABLE_ORDER = ("VPORT", "UCS", "VIEW", "DIMSTYLE", "BLOCK_RECORD")


@dataclass(frozen=True)
class WriteResult:
    output: str
    version: DxfVersion
    written_entities: int
    skipped_entities: int
    skipped_by_type: dict[str, int]
    tags_written: int


# reading


def read(stream: TextIO, ctx: DxfContext | None = None) -> Document:
    """Read a DXF document from a text stream.

    CLASSES, OBJECTS and unknown sections are skipped. When the stream
    fails, an ``IO_ERROR`` diagnostic is filed and :class:`DxfIOError` is
    raised carrying the document parsed so far.
    """
    if ctx is None:
        ctx = DxfContext(source=str(getattr(stream, "name", "<stream>")))
    reader = TagReader(stream, name=ctx.source)
    doc = Document(version=ctx.version, diagnostics=ctx.diagnostics, source=ctx.source)
    try:
        _read_sections(reader, doc, ctx)
    except OSError as exc:
        ctx.report(
            DiagnosticKind.IO_ERROR,
            f"read failed: {exc}",
            line=reader.line_number or None,
            severity=ERROR,
        )
        doc.version = ctx.version
        raise DxfIOError(f"cannot read {ctx.source}: {exc}", partial=doc) from exc
    doc.version = ctx.version
    logger.debug(
        "read %s: %d entities, %d blocks, %d diagnostics",
        ctx.source,
        len(doc.entities),
        len(doc.blocks),
        len(ctx.diagnostics),
    )
    return doc


def readfile(
    path: str | Path,
    ctx: DxfContext | None = None,
    *,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> Document:
    path = Path(path)
    if ctx is None:
        ctx = DxfContext(source=str(path))
    try:
        stream = path.open("r", encoding=encoding, errors=errors, newline="")
    except OSError as exc:
        ctx.report(DiagnosticKind.IO_ERROR, f"cannot open file: {exc}", severity=ERROR)
        raise DxfIOError(f"cannot open {path}: {exc}") from exc
    with stream:
        return read(stream, ctx)


def loads(text: str, ctx: DxfContext | None = None) -> Document:
    if ctx is None:
        ctx = DxfContext(source="<string>")
    return read(io.StringIO(text), ctx)


def from_tags(pairs: Iterable[tuple[int, Any]], ctx: DxfContext | None = None) -> ReadResult:
    """Read one entity (with its followers) from ``(code, value)`` pairs."""
    if ctx is None:
        ctx = DxfContext(source="<tags>")
    reader = TagReader.from_pairs([*pairs, (0, "EOF")], name=ctx.source)
    tag = reader.next_tag()
    if tag is None or tag.code != 0:
        raise DxfStructureError("tag list must start with a 0 tag", source=ctx.source, line=1)
    name = tag.value.strip()
    codec = codec_for(name) or table_codec_for(name)
    if codec is None:
        ctx.report(DiagnosticKind.UNKNOWN_ENTITY, f"unknown entity type {name!r}", line=tag.line, dxftype=name)
        return ReadResult(None, ReadStatus.FAILED)
    return codec.read(reader, ctx, start_line=tag.line)


def _read_sections(reader: TagReader, doc: Document, ctx: DxfContext) -> None:
    while True:
        tag = reader.next_tag()
        if tag is None:
            ctx.report(DiagnosticKind.FORMAT_VIOLATION, "missing EOF marker", line=reader.line_number or None)
            return
        if tag.code == 999:
            _comment(tag, ctx)
            continue
        name = tag.value.strip()
        if tag.code != 0 or name not in ("SECTION", "EOF"):
            ctx.report(
                DiagnosticKind.FORMAT_VIOLATION,
                f"unexpected group {tag.code}/{name!r} outside a section",
                line=tag.line,
            )
            continue
        if name == "EOF":
            return
        section = _section_name(reader, ctx)
        logger.debug("reading section %s", section)
        if section == "HEADER":
            _read_header(reader, ctx)
            doc.version = ctx.version
        elif section == "TABLES":
            _read_tables(reader, doc, ctx)
        elif section == "BLOCKS":
            _read_blocks(reader, doc, ctx)
        elif section == "ENTITIES":
            _read_entities(reader, doc.entities, ctx)
        else:
            _skip_section(reader)


def _section_name(reader: TagReader, ctx: DxfContext) -> str:
    """Read the ``2`` name group that follows ``0/SECTION``."""
    while True:
        tag = reader.next_tag()
        if tag is None:
            raise DxfStructureError(
                "unexpected end of file after SECTION",
                source=reader.name,
                line=reader.line_number,
            )
        if tag.code == 999:
            _comment(tag, ctx)
            continue
        if tag.code == 2:
            return tag.value.strip().upper()
        reader.push_back(tag)
        ctx.report(DiagnosticKind.FORMAT_VIOLATION, "SECTION without a name group", line=tag.line)
        return ""


def _comment(tag: Tag, ctx: DxfContext) -> None:
    ctx.report(DiagnosticKind.COMMENT, tag.value, line=tag.line, severity=INFO)


def _next_record(reader: TagReader, ctx: DxfContext) -> Tag:
    while True:
        tag = reader.next_tag()
        if tag is None:
            raise DxfStructureError(
                "unexpected end of file before ENDSEC",
                source=reader.name,
                line=reader.line_number,
            )
        if tag.code == 0:
            return tag
        if tag.code == 999:
            _comment(tag, ctx)
            continue
        ctx.report(
            DiagnosticKind.FORMAT_VIOLATION,
            f"group {tag.code} outside an entity",
            line=tag.line,
        )


def _skip_section(reader: TagReader) -> None:
    while True:
        tag = reader.next_tag()
        if tag is None:
            raise DxfStructureError(
                "unexpected end of file before ENDSEC",
                source=reader.name,
                line=reader.line_number,
            )
        if tag.code == 0 and tag.value.strip() == "ENDSEC":
            return


def _read_header(reader: TagReader, ctx: DxfContext) -> None:
    variable = ""
    while True:
        tag = reader.next_tag()
        if tag is None:
            raise DxfStructureError(
                "unexpected end of file inside HEADER",
                source=reader.name,
                line=reader.line_number,
            )
        if tag.code == 0:
            if tag.value.strip() != "ENDSEC":
                reader.push_back(tag)
                _skip_section(reader)
            return
        if tag.code == 9:
            variable = tag.value.strip().upper()
        elif tag.code == 999:
            _comment(tag, ctx)
        elif variable == "$ACADVER" and tag.code == 1:
            try:
                ctx.version = DxfVersion.parse(tag.value)
            except ValueError as exc:
                ctx.report(DiagnosticKind.VERSION_MISMATCH, str(exc), line=tag.line)


def _read_entity(reader: TagReader, ctx: DxfContext, tag: Tag) -> Any | None:
    name = tag.value.strip()
    codec = codec_for(name)
    if codec is None:
        ctx.report(DiagnosticKind.UNKNOWN_ENTITY, f"unknown entity type {name!r}", line=tag.line, dxftype=name)
        reader.skip_to_next_entity()
        return None
    result = codec.read(reader, ctx, start_line=tag.line)
    if result.failed:
        ctx.report(DiagnosticKind.DISCARDED_ENTITY, f"discarded {name}", line=tag.line, dxftype=codec.dxftype)
        return None
    return result.entity


def _read_entities(reader: TagReader, section: EntitySection, ctx: DxfContext) -> None:
    while True:
        tag = _next_record(reader, ctx)
        if tag.value.strip() == "ENDSEC":
            return
        entity = _read_entity(reader, ctx, tag)
        if entity is not None:
            section.append(entity)


def _read_blocks(reader: TagReader, doc: Document, ctx: DxfContext) -> None:
    current: BlockDefinition | None = None
    while True:
        tag = _next_record(reader, ctx)
        if tag.value.strip() == "ENDSEC":
            if current is not None:
                ctx.report(
                    DiagnosticKind.FORMAT_VIOLATION,
                    f"block {current.name!r} is not closed by ENDBLK",
                    line=tag.line,
                )
            return
        entity = _read_entity(reader, ctx, tag)
        if entity is None:
            continue
        if isinstance(entity, Block):
            if current is not None:
                ctx.report(
                    DiagnosticKind.FORMAT_VIOLATION,
                    f"block {current.name!r} is not closed by ENDBLK",
                    line=tag.line,
                )
            current = BlockDefinition(entity)
            doc.blocks.append(current)
        elif isinstance(entity, EndBlk):
            if current is None:
                ctx.report(DiagnosticKind.FORMAT_VIOLATION, "ENDBLK without BLOCK", line=tag.line, dxftype="ENDBLK")
            else:
                current.endblk = entity
                current = None
        elif current is None:
            ctx.report(
                DiagnosticKind.DISCARDED_ENTITY,
                f"{entity.dxftype} outside a block definition",
                line=tag.line,
                dxftype=entity.dxftype,
            )
        else:
            current.entities.append(entity)


def _read_tables(reader: TagReader, doc: Document, ctx: DxfContext) -> None:
    while True:
        tag = _next_record(reader, ctx)
        name = tag.value.strip().upper()
        if name == "ENDSEC":
            return
        if name in ("TABLE", "ENDTAB"):
            reader.skip_to_next_entity()
            continue
        codec = table_codec_for(name)
        if codec is None:
            logger.debug("skipping %s table record at line %d", name, tag.line)
            reader.skip_to_next_entity()
            continue
        result = codec.read(reader, ctx, start_line=tag.line)
        if result.failed:
            ctx.report(DiagnosticKind.DISCARDED_ENTITY, f"discarded {name}", line=tag.line, dxftype=name)
            continue
        doc.tables.setdefault(name, []).append(result.entity)


# writing


def to_tags(entity: Any, ctx: DxfContext | None = None) -> TagList | None:
    """Encode one record (with its followers); ``None`` when it is refused."""
    if ctx is None:
        ctx = DxfContext()
    return codec_for_entity(entity).encode(entity, ctx)


def write(doc: Document, stream: TextIO, ctx: DxfContext | None = None) -> WriteResult:
    """Write ``doc`` for ``ctx.version`` (the document version by default).

    Refused records are left out with a diagnostic and counted in the result.
    """
    if ctx is None:
        ctx = DxfContext(version=doc.version, source=str(getattr(stream, "name", "<stream>")))
    _reserve_handles(doc, ctx)
    counts = _Counts()
    body: TagList = []
    if doc.tables:
        body.extend(_tables_section(doc, ctx, counts))
    body.extend(_blocks_section(doc, ctx, counts))
    body.extend(_section("ENTITIES", _encode_all(doc.entities, ctx, counts)))
    tags = [*_header_section(ctx), *body, (0, "EOF")]

    writer = TagWriter(stream)
    try:
        writer.write_tags(tags)
    except OSError as exc:
        ctx.report(DiagnosticKind.IO_ERROR, f"write failed: {exc}", severity=ERROR)
        raise DxfIOError(f"cannot write {ctx.source}: {exc}") from exc
    return WriteResult(
        output=ctx.source,
        version=ctx.version,
        written_entities=counts.written,
        skipped_entities=sum(counts.skipped.values()),
        skipped_by_type=dict(sorted(counts.skipped.items())),
        tags_written=writer.tags_written,
    )


def writefile(
    doc: Document,
    path: str | Path,
    ctx: DxfContext | None = None,
    *,
    encoding: str = "utf-8",
) -> WriteResult:
    out_path = Path(path)
    if ctx is None:
        ctx = DxfContext(version=doc.version, source=str(out_path))
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        stream = out_path.open("w", encoding=encoding, newline="\n")
    except OSError as exc:
        ctx.report(DiagnosticKind.IO_ERROR, f"cannot open file: {exc}", severity=ERROR)
        raise DxfIOError(f"cannot write {out_path}: {exc}") from exc
    with stream:
        return write(doc, stream, ctx)


def dumps(doc: Document, ctx: DxfContext | None = None) -> str:
    buffer = io.StringIO()
    if ctx is None:
        ctx = DxfContext(version=doc.version, source="<string>")
    write(doc, buffer, ctx)
    return buffer.getvalue()


class _Counts:
    def __init__(self) -> None:
        self.written = 0
        self.skipped: dict[str, int] = {}

    def skip(self, dxftype: str) -> None:
        self.skipped[dxftype] = self.skipped.get(dxftype, 0) + 1


def _section(name: str, tags: TagList) -> TagList:
    return [(0, "SECTION"), (2, name), *tags, (0, "ENDSEC")]


def _header_section(ctx: DxfContext) -> TagList:
    tags: TagList = [(9, "$ACADVER"), (1, ctx.version.acadver)]
    if ctx.version >= DxfVersion.R13:
        tags.extend([(9, "$HANDSEED"), (5, ctx.last_handle + 1)])
    return _section("HEADER", tags)


def _encode_all(entities: Iterable[Any], ctx: DxfContext, counts: _Counts) -> TagList:
    out: TagList = []
    for entity in entities:
        tags = codec_for_entity(entity).encode(entity, ctx)
        if tags is None:
            counts.skip(entity.dxftype)
            continue
        counts.written += 1
        out.extend(tags)
    return out


def _blocks_section(doc: Document, ctx: DxfContext, counts: _Counts) -> TagList:
    out: TagList = []
    for definition in doc.blocks:
        head = codec_for_entity(definition.block).encode(definition.block, ctx)
        if head is None:
            counts.skip("BLOCK")
            for entity in definition.entities:
                counts.skip(entity.dxftype)
            continue
        endblk = definition.endblk
        if endblk is None:
            common = definition.block.common
            endblk = EndBlk(common=CommonAttributes(layer=common.layer, paperspace=common.paperspace))
        out.extend(head)
        out.extend(_encode_all(definition.entities, ctx, counts))
        out.extend(codec_for_entity(endblk).encode(endblk, ctx) or [])
    return _section("BLOCKS", out)


def _tables_section(doc: Document, ctx: DxfContext, counts: _Counts) -> TagList:
    out: TagList = []
    names = [name for name in _TABLE_ORDER if name in doc.tables]
    names.extend(name for name in doc.tables if name not in _TABLE_ORDER)
    for name in names:
        records: TagList = []
        count = 0
        for record in doc.tables[name]:
            tags = codec_for_entity(record).encode(record, ctx)
            if tags is None:
                counts.skip(name)
                continue
            count += 1
            records.extend(tags)
        head: TagList = [(0, "TABLE"), (2, name)]
        if ctx.version >= DxfVersion.R13:
            head.extend([(5, ctx.next_handle()), (100, "AcDbSymbolTable")])
        head.append((70, count))
        out.extend([*head, *records, (0, "ENDTAB")])
    return _section("TABLES", out)


def _reserve_handles(doc: Document, ctx: DxfContext) -> None:
    def reserve(entity: Any) -> None:
        common = getattr(entity, "common", None)
        ctx.reserve_handle(common.handle if common is not None else entity.handle)

    for entity in doc.entities.walk():
        reserve(entity)
    for definition in doc.blocks:
        reserve(definition.block)
        if definition.endblk is not None:
            reserve(definition.endblk)
        for entity in definition.entities.walk():
            reserve(entity)
    for records in doc.tables.values():
        for record in records:
            reserve(record)
