from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, TextIO

from .errors import DxfStructureError
from .scalars import format_value


@dataclass(frozen=True)
class Tag:
    code: int
    value: str
    line: int = 0


class TagReader:
    """Reads (group code, raw value) pairs from a text stream.

    Every pair spans two lines: the integer group code and the raw value.
    Values keep their inner whitespace; only the line terminator is removed.
    The reader is single-pass, with a small push-back stack so section and
    entity readers can hand a ``0`` tag back to their caller.
    """

    def __init__(self, stream: TextIO, name: str = "<stream>") -> None:
        self._stream = stream
        self.name = name
        self.line_number = 0
        self._pushed: list[Tag] = []

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, Any]], name: str = "<tags>") -> "TagReader":
        buffer = io.StringIO()
        for code, value in pairs:
            if isinstance(value, str):
                text = value
            else:
                text = format_value(int(code), value)
            buffer.write(f"{int(code)}\n{text}\n")
        buffer.seek(0)
        return cls(buffer, name=name)

    def __iter__(self) -> Iterator[Tag]:
        return self

    def __next__(self) -> Tag:
        tag = self.next_tag()
        if tag is None:
            raise StopIteration
        return tag

    def next_tag(self) -> Tag | None:
        if self._pushed:
            return self._pushed.pop()
        code_line = self._stream.readline()
        if code_line == "":
            return None
        self.line_number += 1
        line = self.line_number
        try:
            code = int(code_line.strip())
        except ValueError:
            raise DxfStructureError(
                f"invalid group code {code_line.strip()!r}", source=self.name, line=line
            ) from None
        value_line = self._stream.readline()
        if value_line == "":
            raise DxfStructureError(
                f"missing value for group code {code}", source=self.name, line=line
            )
        self.line_number += 1
        return Tag(code, value_line.rstrip("\r\n"), line)

    def peek(self) -> Tag | None:
        tag = self.next_tag()
        if tag is not None:
            self._pushed.append(tag)
        return tag

    def push_back(self, tag: Tag) -> None:
        self._pushed.append(tag)

    def entity_tags(self) -> Iterator[Tag]:
        while True:
            tag = self.next_tag()
            if tag is None:
                raise DxfStructureError(
                    "unexpected end of file before a 0 tag",
                    source=self.name,
                    line=self.line_number,
                )
            if tag.code == 0:
                self.push_back(tag)
                return
            yield tag

    def skip_to_next_entity(self) -> int:
        skipped = 0
        for _ in self.entity_tags():
            skipped += 1
        return skipped


class TagWriter:
    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self.tags_written = 0

    def write_tag(self, code: int, value: Any) -> None:
        text = value if isinstance(value, str) else format_value(code, value)
        self._stream.write(f"{code:>3}\n{text}\n")
        self.tags_written += 1

    def write_tags(self, tags: Iterable[tuple[int, Any]]) -> None:
        for code, value in tags:
            self.write_tag(code, value)
