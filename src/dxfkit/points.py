from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

AXES = ("x", "y", "z")


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def of(cls, value: Any) -> "Point":
        if isinstance(value, Point):
            return value
        coords = [float(item) for item in value]
        while len(coords) < 3:
            coords.append(0.0)
        return cls(coords[0], coords[1], coords[2])

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z


ORIGIN = Point()
Z_AXIS = Point(0.0, 0.0, 1.0)
X_AXIS = Point(1.0, 0.0, 0.0)
Y_AXIS = Point(0.0, 1.0, 0.0)


def with_axis(point: Point | None, axis: int, value: float) -> Point:
    return replace(point or ORIGIN, **{AXES[axis]: value})


def point_tags(code: int, point: Point, *, flat: bool = False) -> list[tuple[int, float]]:
    tags = [(code, point.x), (code + 10, point.y)]
    if not flat:
        tags.append((code + 20, point.z))
    return tags
