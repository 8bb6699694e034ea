from __future__ import annotations

import string
from enum import Enum
from functools import lru_cache
from typing import Any


class ScalarKind(Enum):
    STRING = "string"
    DOUBLE = "double"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    BOOL = "bool"
    BINARY = "binary"
    HANDLE = "handle"
    REFERENCE = "reference"
    COMMENT = "comment"


_RANGES: tuple[tuple[int, int, ScalarKind], ...] = (
    (0, 4, ScalarKind.STRING),
    (5, 5, ScalarKind.HANDLE),
    (6, 9, ScalarKind.STRING),
    (10, 59, ScalarKind.DOUBLE),
    # 60-79 carry both 16- and 32-bit values in the wild.
    (60, 79, ScalarKind.INT32),
    (90, 99, ScalarKind.INT32),
    (100, 100, ScalarKind.STRING),
    (102, 102, ScalarKind.STRING),
    (105, 105, ScalarKind.HANDLE),
    (110, 149, ScalarKind.DOUBLE),
    (160, 169, ScalarKind.INT64),
    (170, 179, ScalarKind.INT16),
    (210, 239, ScalarKind.DOUBLE),
    (270, 279, ScalarKind.INT16),
    (280, 289, ScalarKind.INT8),
    (290, 299, ScalarKind.BOOL),
    (300, 309, ScalarKind.STRING),
    (310, 319, ScalarKind.BINARY),
    (320, 369, ScalarKind.REFERENCE),
    (370, 389, ScalarKind.INT16),
    (390, 399, ScalarKind.REFERENCE),
    (400, 409, ScalarKind.INT16),
    (410, 419, ScalarKind.STRING),
    (420, 429, ScalarKind.INT32),
    (430, 439, ScalarKind.STRING),
    (440, 459, ScalarKind.INT32),
    (460, 469, ScalarKind.DOUBLE),
    (470, 479, ScalarKind.STRING),
    (480, 481, ScalarKind.REFERENCE),
    (999, 999, ScalarKind.COMMENT),
    (1000, 1009, ScalarKind.STRING),
    (1010, 1059, ScalarKind.DOUBLE),
    (1060, 1070, ScalarKind.INT16),
    (1071, 1071, ScalarKind.INT32),
)

# INT8 also admits unsigned byte values (brightness, contrast, ...).
_INT_BOUNDS = {
    ScalarKind.INT8: (-128, 255),
    ScalarKind.INT16: (-32768, 32767),
    ScalarKind.INT32: (-(2**31), 2**31 - 1),
    ScalarKind.INT64: (-(2**63), 2**63 - 1),
}

MAX_BINARY_CHUNK = 254

_HEX_DIGITS = frozenset(string.hexdigits)


@lru_cache(maxsize=None)
def scalar_kind(code: int) -> ScalarKind | None:
    for low, high, kind in _RANGES:
        if low <= code <= high:
            return kind
    return None


def is_xdata_code(code: int) -> bool:
    return 1000 <= code <= 1071


def coerce(code: int, raw: str) -> Any:
    kind = scalar_kind(code)
    if kind is None or kind in (ScalarKind.STRING, ScalarKind.COMMENT):
        return raw
    text = raw.strip()
    if kind is ScalarKind.DOUBLE:
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"group code {code} expects a floating-point value, got {raw!r}") from None
    if kind in _INT_BOUNDS:
        try:
            value = int(text)
        except ValueError:
            raise ValueError(f"group code {code} expects an integer value, got {raw!r}") from None
        low, high = _INT_BOUNDS[kind]
        if not low <= value <= high:
            raise ValueError(f"group code {code} value {value} is out of range [{low}, {high}]")
        return value
    if kind is ScalarKind.BOOL:
        if text not in ("0", "1"):
            raise ValueError(f"group code {code} expects 0 or 1, got {raw!r}")
        return text == "1"
    if kind is ScalarKind.HANDLE:
        if not text or not _is_hex(text):
            raise ValueError(f"group code {code} expects a hex handle, got {raw!r}")
        return int(text, 16)
    if kind is ScalarKind.REFERENCE:
        if text and not _is_hex(text):
            raise ValueError(f"group code {code} expects a hex handle, got {raw!r}")
        return text
    if kind is ScalarKind.BINARY:
        if len(text) % 2 or not _is_hex(text):
            raise ValueError(f"group code {code} expects hex-encoded binary data, got {raw!r}")
        return text
    return raw


def format_value(code: int, value: Any) -> str:
    kind = scalar_kind(code)
    if kind is ScalarKind.DOUBLE:
        return format_float(float(value))
    if kind is ScalarKind.HANDLE:
        if isinstance(value, int):
            return format(value, "x")
        return str(value)
    if kind is ScalarKind.BOOL or isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return format_float(value)
    return str(value)


def format_float(value: float) -> str:
    text = f"{value:f}"
    if float(text) == value:
        return text
    return repr(value)


def _is_hex(text: str) -> bool:
    return all(ch in _HEX_DIGITS for ch in text)
