# tests/test_geometry.py
"""
Deterministic tests for geometry helpers: signed area, orientation, bounds,
strict rectangle overlap, SVG transform lists, validity and containment.
"""

from __future__ import annotations

import pytest
from shapely.geometry import Polygon

from sewpager.core.geometry import (
    IDENTITY,
    apply_affine,
    bounding_box,
    ensure_polygon,
    orient,
    parse_transform,
    polygon_contains_points,
    rects_overlap,
    signed_area,
    validity_problem,
)
from sewpager.core.types import BoundingBox

SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


def test_signed_area_sign_follows_orientation() -> None:
    assert signed_area(SQUARE) == pytest.approx(100.0)
    assert signed_area(list(reversed(SQUARE))) == pytest.approx(-100.0)
    assert signed_area(SQUARE[:2]) == 0.0


def test_orient() -> None:
    neg = orient(SQUARE, positive=False)
    assert signed_area(neg) < 0
    assert signed_area(orient(neg, positive=True)) > 0


def test_bounding_box() -> None:
    bb = bounding_box([(1, 2), (5, 2), (5, 6), (1, 6)])
    assert bb == BoundingBox(1.0, 2.0, 4.0, 4.0)
    assert bb.area == 16.0
    assert bb.max_x == 5.0 and bb.max_y == 6.0


def test_rects_overlap_strict() -> None:
    a = BoundingBox(0, 0, 10, 10)
    assert rects_overlap(a, BoundingBox(5, 5, 10, 10))
    # Touching edges and corners do not overlap.
    assert not rects_overlap(a, BoundingBox(10, 0, 10, 10))
    assert not rects_overlap(a, BoundingBox(10, 10, 5, 5))
    assert not rects_overlap(a, BoundingBox(0, 20, 10, 10))


def test_ensure_polygon_invalid_fixed() -> None:
    # Self-intersecting bowtie
    p = Polygon([(0, 0), (2, 2), (2, 0), (0, 2)])
    assert not p.is_valid
    out = ensure_polygon(p)
    assert out.is_valid


def test_validity_problem() -> None:
    assert validity_problem(SQUARE) is None
    assert validity_problem([(0, 0), (2, 2), (2, 0), (0, 2)])


def test_polygon_contains_points() -> None:
    assert polygon_contains_points(SQUARE, [(5, 5), (1, 9)]) is True
    assert polygon_contains_points(SQUARE, [(5, 5), (11, 5)]) is False
    # Boundary points only count when strict=False.
    assert polygon_contains_points(SQUARE, [(0, 5)]) is False
    assert polygon_contains_points(SQUARE, [(0, 5)], strict=False) is True


@pytest.mark.parametrize(
    "transform,expected",
    [
        (None, IDENTITY),
        ("", IDENTITY),
        ("translate(3)", (1.0, 0.0, 0.0, 1.0, 3.0, 0.0)),
        ("translate(-1.5 2e1)", (1.0, 0.0, 0.0, 1.0, -1.5, 20.0)),
        ("translate( 4 , 5 )", (1.0, 0.0, 0.0, 1.0, 4.0, 5.0)),
        ("scale(2)", (2.0, 0.0, 0.0, 2.0, 0.0, 0.0)),
        ("scale(2, 3)", (2.0, 0.0, 0.0, 3.0, 0.0, 0.0)),
        ("matrix(1 2 3 4 5 6)", (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)),
        ("translate(10 10) scale(2)", (2.0, 0.0, 0.0, 2.0, 10.0, 10.0)),
        ("scale(2) translate(10 10)", (2.0, 0.0, 0.0, 2.0, 20.0, 20.0)),
    ],
)
def test_parse_transform(transform, expected) -> None:
    assert parse_transform(transform) == pytest.approx(expected)


def test_parse_transform_rotate() -> None:
    a = parse_transform("rotate(90)")
    assert apply_affine([(1.0, 0.0)], a)[0] == pytest.approx((0.0, 1.0))
    about = parse_transform("rotate(90 10 10)")
    assert apply_affine([(20.0, 10.0)], about)[0] == pytest.approx((10.0, 20.0))


def test_parse_transform_skips_unknown_entries() -> None:
    assert parse_transform("perspective(3) translate(1 2)") == pytest.approx((1.0, 0.0, 0.0, 1.0, 1.0, 2.0))
    assert parse_transform("translate(1 2 3)") == IDENTITY


def test_apply_affine_translate_then_scale() -> None:
    square = [(0.0, 0.0), (50.0, 0.0), (50.0, 50.0), (0.0, 50.0)]
    out = apply_affine(square, parse_transform("translate(10 10) scale(2)"))
    assert bounding_box(out) == BoundingBox(10.0, 10.0, 100.0, 100.0)
