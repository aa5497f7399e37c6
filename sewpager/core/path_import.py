# sewpager/core/path_import.py
"""
Parse outline path-command strings (SVG "d" syntax) into polylines.
Curves and arcs are reduced to their end points; the core works on polygons only.
"""

from __future__ import annotations

import logging
import re

from sewpager.core.error_codes import DegeneratePathError
from sewpager.core.types import Point, Polyline

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[MmLlHhVvCcSsQqTtAaZz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Operand count per command; the end point is always the last pair (or the single value for H/V).
_ARITY: dict[str, int] = {
    "M": 2, "L": 2, "T": 2,
    "H": 1, "V": 1,
    "C": 6, "S": 4, "Q": 4,
    "A": 7,
    "Z": 0,
}


def tokenize_path(path_data: str) -> list[str]:
    """Split path data into command letters and number literals."""
    if not path_data:
        return []
    return _TOKEN_RE.findall(path_data)


def _dedupe(points: Polyline) -> Polyline:
    """Drop consecutive duplicates and a closing point equal to the first."""
    out: Polyline = []
    for p in points:
        if not out or out[-1] != p:
            out.append(p)
    while len(out) > 1 and out[-1] == out[0]:
        out.pop()
    return out


def parse_path_points(path_data: str, scale: float = 1.0) -> Polyline:
    """
    Walk the command stream and collect one point per segment end.
    Relative (lower-case) commands are resolved against the current point.
    Operands after a command repeat it; operands after M/m are implicit line-to.
    Malformed trailing operands are ignored.
    """
    tokens = tokenize_path(path_data)
    points: Polyline = []
    cx = cy = 0.0
    sx = sy = 0.0
    cmd = ""
    i = 0
    n = len(tokens)
    while i < n:
        tok = tokens[i]
        if tok.isalpha():
            cmd = tok
            i += 1
            if cmd in "Zz":
                cx, cy = sx, sy
                continue
        elif not cmd:
            logger.debug("Path data starts with operand %r; skipped", tok)
            i += 1
            continue

        upper = cmd.upper()
        arity = _ARITY.get(upper, 0)
        if upper == "Z" or i + arity > n or any(t.isalpha() for t in tokens[i:i + arity]):
            # Operands without a command that takes them, or truncated operand list.
            i += 1
            continue
        args = [float(t) for t in tokens[i:i + arity]]
        i += arity
        relative = cmd.islower()

        if upper == "H":
            cx = args[0] + (cx if relative else 0.0)
        elif upper == "V":
            cy = args[0] + (cy if relative else 0.0)
        else:
            ex, ey = args[-2], args[-1]
            if relative:
                ex += cx
                ey += cy
            cx, cy = ex, ey
        points.append((cx * scale, cy * scale))

        if upper == "M":
            sx, sy = cx, cy
            cmd = "l" if relative else "L"
    return points


def parse_outline(path_data: str, scale: float = 1.0) -> Polyline:
    """
    Parse path data into a closed polyline (last point not repeated).
    Raises DegeneratePathError when fewer than three distinct points remain.
    """
    points = _dedupe(parse_path_points(path_data, scale=scale))
    if len(points) < 3:
        raise DegeneratePathError(f"Path has too few points for a polygon: {len(points)}")
    return points


def points_to_path_data(points: list[Point] | tuple[Point, ...], precision: int = 4) -> str:
    """Closed polyline as path data (M L ... Z)."""
    if not points:
        return ""
    fmt = f"{{:.{precision}f}}"
    parts = [f"M {fmt.format(points[0][0])} {fmt.format(points[0][1])}"]
    for x, y in points[1:]:
        parts.append(f"L {fmt.format(x)} {fmt.format(y)}")
    parts.append("Z")
    return " ".join(parts)
