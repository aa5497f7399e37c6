# sewpager/core/offset.py
"""
Seam-allowance offset: grow a closed polygon outward by a constant distance.
Coordinates are quantised to integers (QUANTISE_SCALE per mm) and offset with
pyclipper using mitered joins; corners whose miter would exceed MITER_LIMIT * d
are squared off.
"""

from __future__ import annotations

import logging
from typing import Sequence

import pyclipper

from sewpager.core.config import ARC_TOLERANCE_MM, MITER_LIMIT, QUANTISE_SCALE
from sewpager.core.error_codes import DegeneratePathError, OffsetEmptyError
from sewpager.core.geometry import orient, signed_area
from sewpager.core.types import Point

logger = logging.getLogger(__name__)

IntPath = list[tuple[int, int]]


def quantise(points: Sequence[Point], scale: float = QUANTISE_SCALE) -> IntPath:
    """Scale and round to the integer grid."""
    return [(int(round(x * scale)), int(round(y * scale))) for x, y in points]


def unquantise(path: Sequence[Sequence[int]], scale: float = QUANTISE_SCALE) -> list[Point]:
    """Back to millimetres; drop a repeated closing vertex if present."""
    out = [(p[0] / scale, p[1] / scale) for p in path]
    if len(out) >= 2 and out[0] == out[-1]:
        out = out[:-1]
    return out


def _largest(paths: list[IntPath]) -> IntPath | None:
    """Path with greatest absolute signed area; first one wins ties."""
    best: IntPath | None = None
    best_area = -1.0
    for path in paths:
        a = abs(signed_area(path))
        if a > best_area:
            best, best_area = path, a
    return best


def offset_polygon(
    points: Sequence[Point],
    distance: float,
    miter_limit: float = MITER_LIMIT,
    scale: float = QUANTISE_SCALE,
    arc_tolerance_mm: float = ARC_TOLERANCE_MM,
) -> list[Point]:
    """
    Offset a closed polygon outward by distance (mm).
    distance == 0 returns the input vertices unchanged. The result keeps the
    orientation of the input. If the offset yields several polygons, the one
    of greatest absolute area is returned.
    Raises DegeneratePathError for fewer than three vertices, OffsetEmptyError
    when nothing survives the offset.
    """
    if len(points) < 3:
        raise DegeneratePathError(f"Polygon needs at least 3 vertices, got {len(points)}")
    if distance < 0:
        raise ValueError(f"Inward offsets are not supported (distance={distance})")
    if distance == 0:
        return [(x, y) for x, y in points]

    input_positive = signed_area(points) >= 0
    subject = quantise(orient(points, positive=True), scale)

    pco = pyclipper.PyclipperOffset(miter_limit, arc_tolerance_mm * scale)
    try:
        pco.AddPath(subject, pyclipper.JT_MITER, pyclipper.ET_CLOSEDPOLYGON)
        solution = pco.Execute(distance * scale)
    except pyclipper.ClipperException as e:
        raise OffsetEmptyError(f"Offset failed: {e}") from e

    solution = [[(int(p[0]), int(p[1])) for p in path] for path in solution if len(path) >= 3]
    if not solution:
        raise OffsetEmptyError("Offset produced no polygon")
    if len(solution) > 1:
        logger.debug("Offset produced %d polygons; keeping the largest", len(solution))

    best = _largest(solution)
    result = unquantise(best or [], scale)
    if len(result) < 3 or signed_area(result) == 0:
        raise OffsetEmptyError("Offset polygon is degenerate")
    return orient(result, positive=input_positive)
