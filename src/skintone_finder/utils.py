from __future__ import annotations

import math
from typing import Tuple

from .types import Point


def midpoint(a: Point, b: Point) -> Point:
    return Point(x=(a.x + b.x) / 2, y=(a.y + b.y) / 2)


def offset(p: Point, dx: float = 0.0, dy: float = 0.0) -> Point:
    return Point(x=p.x + dx, y=p.y + dy)


def floor_pixel(p: Point) -> Tuple[int, int]:
    """Sub-pixel coordinates address the pixel they fall inside (floor, not round)."""
    return (int(math.floor(p.x)), int(math.floor(p.y)))


def redact_secret(value: str) -> str:
    """Redact API keys for logging."""
    if not value or len(value) < 8:
        return "***"
    return f"{value[:4]}***{value[-2:]}"
