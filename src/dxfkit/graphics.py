from __future__ import annotations

from typing import Iterable

from .scalars import MAX_BINARY_CHUNK


def split_chunks(hex_text: str, size: int = MAX_BINARY_CHUNK) -> list[str]:
    if size <= 0 or size % 2:
        raise ValueError(f"chunk size must be a positive even number, got {size}")
    return [hex_text[i : i + size] for i in range(0, len(hex_text), size)]


def chunk_bytes(chunks: Iterable[str]) -> int:
    return sum(len(chunk) // 2 for chunk in chunks)


def join_chunks(chunks: Iterable[str]) -> bytes:
    return bytes.fromhex("".join(chunks))


def encode_bytes(data: bytes, size: int = MAX_BINARY_CHUNK) -> list[str]:
    return split_chunks(data.hex().upper(), size)
