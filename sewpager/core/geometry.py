# sewpager/core/geometry.py
"""
Geometry helpers: signed area, orientation, bounding boxes, rectangle overlap,
SVG transform lists as affines, shapely conversion and containment.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Iterable, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, Point as ShapelyPoint, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

from sewpager.core.types import Affine, BoundingBox, Point

logger = logging.getLogger(__name__)

IDENTITY: Affine = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_TRANSFORM_RE = re.compile(r"([A-Za-z]+)\s*\(([^)]*)\)")
_NUM_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _as_array(points: Sequence[Point]) -> np.ndarray:
    if len(points) == 0:
        return np.zeros((0, 2))
    return np.asarray(points, dtype=float).reshape(-1, 2)


def signed_area(points: Sequence[Point]) -> float:
    """
    Shoelace area of a closed polyline (last point not repeated).
    Sign gives orientation; zero for fewer than three points.
    """
    xy = _as_array(points)
    if xy.shape[0] < 3:
        return 0.0
    x, y = xy[:, 0], xy[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)))


def orient(points: Sequence[Point], positive: bool = True) -> list[Point]:
    """Return points ordered so that signed_area has the requested sign."""
    out = [(float(x), float(y)) for x, y in points]
    if (signed_area(out) > 0) != positive:
        out.reverse()
    return out


def bounding_box(points: Iterable[Point]) -> BoundingBox:
    """Axis-aligned bounds of a point set as (x, y, width, height)."""
    xy = _as_array(list(points))
    if xy.shape[0] == 0:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    minx, miny = xy.min(axis=0)
    maxx, maxy = xy.max(axis=0)
    return BoundingBox(float(minx), float(miny), float(maxx - minx), float(maxy - miny))


def rects_overlap(a: BoundingBox, b: BoundingBox) -> bool:
    """True if the interiors intersect. Rectangles that only touch do not overlap."""
    return not (
        a.x + a.width <= b.x
        or b.x + b.width <= a.x
        or a.y + a.height <= b.y
        or b.y + b.height <= a.y
    )


def _transform_step(name: str, args: list[float]) -> np.ndarray | None:
    """3x3 matrix of one transform-list entry; None if the entry is not understood."""
    n = len(args)
    if name == "matrix" and n == 6:
        a, b, c, d, e, f = args
        return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])
    if name == "translate" and n in (1, 2):
        tx, ty = args[0], (args[1] if n == 2 else 0.0)
        return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])
    if name == "scale" and n in (1, 2):
        sx, sy = args[0], (args[1] if n == 2 else args[0])
        return np.diag([sx, sy, 1.0])
    if name == "rotate" and n in (1, 3):
        t = math.radians(args[0])
        cos, sin = math.cos(t), math.sin(t)
        rot = np.array([[cos, -sin, 0.0], [sin, cos, 0.0], [0.0, 0.0, 1.0]])
        if n == 1:
            return rot
        cx, cy = args[1], args[2]
        to_centre = np.array([[1.0, 0.0, cx], [0.0, 1.0, cy], [0.0, 0.0, 1.0]])
        from_centre = np.array([[1.0, 0.0, -cx], [0.0, 1.0, -cy], [0.0, 0.0, 1.0]])
        return to_centre @ rot @ from_centre
    if name == "skewX" and n == 1:
        return np.array([[1.0, math.tan(math.radians(args[0])), 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    if name == "skewY" and n == 1:
        return np.array([[1.0, 0.0, 0.0], [math.tan(math.radians(args[0])), 1.0, 0.0], [0.0, 0.0, 1.0]])
    return None


def parse_transform(transform: str | None) -> Affine:
    """
    Compose an SVG transform list (matrix, translate, scale, rotate, skewX,
    skewY) into one affine. Entries apply right to left, as in SVG.
    Unknown or malformed entries are skipped with a warning.
    """
    if not transform:
        return IDENTITY
    m = np.eye(3)
    for name, args_text in _TRANSFORM_RE.findall(transform):
        step = _transform_step(name, [float(v) for v in _NUM_RE.findall(args_text)])
        if step is None:
            logger.warning("Ignoring transform %s(%s)", name, args_text.strip())
            continue
        m = m @ step
    return (float(m[0, 0]), float(m[1, 0]), float(m[0, 1]), float(m[1, 1]), float(m[0, 2]), float(m[1, 2]))


def apply_affine(points: Sequence[Point], affine: Affine) -> list[Point]:
    """Map points through an affine (a, b, c, d, e, f)."""
    if affine == IDENTITY:
        return [(float(x), float(y)) for x, y in points]
    a, b, c, d, e, f = affine
    xy = _as_array(points)
    xs = a * xy[:, 0] + c * xy[:, 1] + e
    ys = b * xy[:, 0] + d * xy[:, 1] + f
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def to_shapely(points: Sequence[Point]) -> Polygon:
    """Shapely polygon from a closed polyline; empty polygon if under three points."""
    if len(points) < 3:
        return Polygon()
    return Polygon(points)


def ensure_polygon(geom: BaseGeometry) -> Polygon | MultiPolygon:
    """Return geom as Polygon or MultiPolygon; fix invalid with buffer(0)."""
    if geom is None or geom.is_empty:
        return Polygon()
    if isinstance(geom, (Polygon, MultiPolygon)):
        if not geom.is_valid:
            geom = geom.buffer(0)
        return geom  # type: ignore[return-value]
    return Polygon()


def validity_problem(points: Sequence[Point]) -> str | None:
    """Shapely's explanation if the outline is not a valid simple polygon, else None."""
    poly = to_shapely(points)
    if poly.is_empty:
        return "Empty polygon"
    if poly.is_valid:
        return None
    return explain_validity(poly)


def polygon_contains_points(
    outer: Sequence[Point],
    points: Iterable[Point],
    strict: bool = True,
) -> bool:
    """
    True if every point lies inside the outer polygon.
    strict=True rejects points on the boundary. Invalid outer rings are fixed with buffer(0).
    """
    poly = ensure_polygon(to_shapely(outer))
    if poly.is_empty:
        return False
    test = poly.contains if strict else poly.covers
    return all(test(ShapelyPoint(x, y)) for x, y in points)
