from __future__ import annotations

from enum import IntEnum


class DxfVersion(IntEnum):
    R10 = 10
    R11 = 11
    R12 = 12
    R13 = 13
    R14 = 14
    R2000 = 2000
    R2002 = 2002
    R2004 = 2004
    R2007 = 2007
    R2008 = 2008
    R2009 = 2009
    R2010 = 2010

    @property
    def acadver(self) -> str:
        return _ACADVER_BY_VERSION[self]

    @classmethod
    def parse(cls, value: "DxfVersion | str") -> "DxfVersion":
        if isinstance(value, DxfVersion):
            return value
        token = str(value).strip().upper()
        if token in _VERSION_BY_ACADVER:
            return _VERSION_BY_ACADVER[token]
        if token.startswith("AC") and token[2:].isdigit():
            if int(token[2:]) > 1024:
                return cls.R2010
            raise ValueError(f"unsupported DXF version: {value}")
        if not token.startswith("R"):
            token = f"R{token}"
        try:
            return cls[token]
        except KeyError:
            raise ValueError(f"unsupported DXF version: {value}") from None


_ACADVER_BY_VERSION = {
    DxfVersion.R10: "AC1006",
    DxfVersion.R11: "AC1009",
    DxfVersion.R12: "AC1009",
    DxfVersion.R13: "AC1012",
    DxfVersion.R14: "AC1014",
    DxfVersion.R2000: "AC1015",
    DxfVersion.R2002: "AC1015",
    DxfVersion.R2004: "AC1018",
    DxfVersion.R2007: "AC1021",
    DxfVersion.R2008: "AC1021",
    DxfVersion.R2009: "AC1021",
    DxfVersion.R2010: "AC1024",
}

# Shared $ACADVER codes resolve to the newest release using them.
_VERSION_BY_ACADVER = {
    "AC1006": DxfVersion.R10,
    "AC1009": DxfVersion.R12,
    "AC1012": DxfVersion.R13,
    "AC1014": DxfVersion.R14,
    "AC1015": DxfVersion.R2002,
    "AC1018": DxfVersion.R2004,
    "AC1021": DxfVersion.R2009,
    "AC1024": DxfVersion.R2010,
}

DEFAULT_VERSION = DxfVersion.R2010
