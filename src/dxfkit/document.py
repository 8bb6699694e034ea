from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .codecs import QUERY_ENTITY_TYPES, SUPPORTED_ENTITY_TYPES, TYPE_ALIASES
from .common import MODELSPACE, PAPERSPACE
from .diagnostics import Diagnostics
from .entity import Block, EndBlk, TableRecord
from .versions import DEFAULT_VERSION, DxfVersion

# follower records owned by a record, keyed by the owner kind
_FOLLOWER_CHAINS = {"INSERT": "attribs", "POLYLINE": "vertices"}


class EntitySection:
    """Ordered, heterogeneous list of entity records (ENTITIES or one block)."""

    def __init__(self, entities: Iterable[Any] = ()) -> None:
        self._entities: list[Any] = list(entities)

    def __repr__(self) -> str:
        return f"EntitySection({len(self._entities)} entities)"

    def __iter__(self) -> Iterator[Any]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __getitem__(self, index: int) -> Any:
        return self._entities[index]

    def append(self, entity: Any) -> None:
        self._entities.append(entity)

    def extend(self, entities: Iterable[Any]) -> None:
        self._entities.extend(entities)

    def clear(self) -> None:
        for entity in self._entities:
            attr = _FOLLOWER_CHAINS.get(entity.dxftype)
            if attr is not None:
                getattr(entity, attr).clear()
        self._entities.clear()

    def walk(self) -> Iterator[Any]:
        """Yield every record, followers included, in file order."""
        for entity in self._entities:
            yield from _walk(entity)

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Any]:
        """Yield records of the selected kinds in file order.

        ``types`` is a space- or comma-separated string or an iterable of
        names; ``*`` and shell wildcards are accepted. Follower records
        (ATTRIB, VERTEX, SEQEND) are reached through their owner, or
        through :meth:`walk`.
        """
        type_set = set(_normalize_types(types))
        for entity in self._entities:
            if entity.dxftype in type_set:
                yield entity


def _walk(entity: Any) -> Iterator[Any]:
    yield entity
    attr = _FOLLOWER_CHAINS.get(entity.dxftype)
    if attr is None:
        return
    yield from getattr(entity, attr)
    if entity.seqend is not None:
        yield entity.seqend


def _normalize_types(types: str | Iterable[str] | None) -> list[str]:
    default_types = list(QUERY_ENTITY_TYPES)
    if types is None:
        return default_types
    if isinstance(types, str):
        tokens = re.split(r"[,\s]+", types.strip())
    else:
        tokens = list(types)

    normalized = [token.strip().upper() for token in tokens if token and token.strip()]
    normalized = [TYPE_ALIASES.get(token, token) for token in normalized]
    if not normalized:
        return default_types

    if any(token in {"*", "ALL"} for token in normalized):
        return default_types

    selected: list[str] = []
    seen = set()

    for token in normalized:
        if any(ch in token for ch in "*?[]"):
            for name in SUPPORTED_ENTITY_TYPES:
                if fnmatch.fnmatchcase(name, token) and name not in seen:
                    seen.add(name)
                    selected.append(name)
            continue

        if token in SUPPORTED_ENTITY_TYPES and token not in seen:
            seen.add(token)
            selected.append(token)

    return selected


@dataclass
class BlockDefinition:
    """A BLOCK record, its entities and the closing ENDBLK."""

    block: Block
    entities: EntitySection = field(default_factory=EntitySection)
    endblk: EndBlk | None = None

    @property
    def name(self) -> str:
        return self.block.name


@dataclass(frozen=True)
class Layout:
    doc: "Document"
    name: str

    @property
    def space(self) -> int:
        return PAPERSPACE if self.name == "PAPERSPACE" else MODELSPACE

    def __iter__(self) -> Iterator[Any]:
        return self.query("*")

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Any]:
        space = self.space
        for entity in self.doc.entities.query(types):
            if entity.common.paperspace == space:
                yield entity


@dataclass
class Document:
    version: DxfVersion = DEFAULT_VERSION
    entities: EntitySection = field(default_factory=EntitySection)
    blocks: list[BlockDefinition] = field(default_factory=list)
    tables: dict[str, list[TableRecord]] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    source: str = "<stream>"

    def modelspace(self) -> Layout:
        return Layout(self, "MODELSPACE")

    def paperspace(self) -> Layout:
        return Layout(self, "PAPERSPACE")

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Any]:
        return self.entities.query(types)

    def block(self, name: str) -> BlockDefinition | None:
        for definition in self.blocks:
            if definition.name == name:
                return definition
        return None

    def clear(self) -> None:
        self.entities.clear()
        for definition in self.blocks:
            definition.entities.clear()
        self.blocks.clear()
        self.tables.clear()
