# tests/test_placement.py
"""
Placement engine: margin-expanded disjointness, separation of originally
overlapping pieces, containment, determinism, completeness, and the
two-pass grid.
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from sewpager.core.geometry import rects_overlap
from sewpager.core.placement import (
    check_page_constraints,
    find_position,
    piece_margin,
    place_pieces,
)
from sewpager.core.types import BoundingBox, Page, PageSize, PatternPiece

A4 = PageSize(190.0, 277.0)
EPS = 1e-9


def _piece(pid: str, w: float, h: float, allowance_mm: float = 0.0, overlapping: bool = False) -> PatternPiece:
    outline = ((0.0, 0.0), (w, 0.0), (w, h), (0.0, h))
    if allowance_mm > 0:
        a = allowance_mm
        allowance = ((-a, -a), (w + a, -a), (w + a, h + a), (-a, h + a))
        bbox = BoundingBox(-a, -a, w + 2 * a, h + 2 * a)
        return PatternPiece(pid, outline, bbox, allowance, allowance_mm, overlapping)
    return PatternPiece(pid, outline, BoundingBox(0.0, 0.0, w, h), originally_overlapping=overlapping)


def _random_pieces(seed: int, n: int = 14) -> tuple[list[PatternPiece], set[frozenset[str]]]:
    rng = np.random.default_rng(seed)
    ids = [f"p{i:02d}" for i in range(n)]
    pairs: set[frozenset[str]] = set()
    for a, b in itertools.combinations(ids, 2):
        if rng.random() < 0.08:
            pairs.add(frozenset((a, b)))
    flagged = set().union(*pairs) if pairs else set()
    pieces = []
    for pid in ids:
        w = float(rng.integers(5, 150))
        h = float(rng.integers(5, 200))
        allowance = float(rng.choice([0.0, 5.0, 10.0]))
        pieces.append(_piece(pid, w, h, allowance, pid in flagged))
    return pieces, pairs


def _expanded(page: Page, by_id: dict[str, PatternPiece]) -> list[BoundingBox]:
    out = []
    for pl in page.placements:
        p = by_id[pl.piece_id]
        m = piece_margin(p)
        out.append(BoundingBox(pl.dx, pl.dy, p.bbox.width + m, p.bbox.height + m))
    return out


def test_piece_margin() -> None:
    assert piece_margin(_piece("a", 10, 10)) == 2.0
    assert piece_margin(_piece("a", 10, 10, allowance_mm=10.0)) == 22.0
    assert piece_margin(_piece("a", 10, 10, allowance_mm=5.0), default_margin=1.0) == 11.0


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_margin_expanded_rectangles_are_disjoint(seed: int) -> None:
    pieces, pairs = _random_pieces(seed)
    by_id = {p.id: p for p in pieces}
    layout = place_pieces(pieces, pairs, A4)
    for page in layout.pages:
        for r1, r2 in itertools.combinations(_expanded(page, by_id), 2):
            assert not rects_overlap(r1, r2)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_originally_overlapping_pieces_on_distinct_pages(seed: int) -> None:
    pieces, pairs = _random_pieces(seed)
    layout = place_pieces(pieces, pairs, A4)
    page_of = {pl.piece_id: page.index for page in layout.pages for pl in page.placements}
    for pair in pairs:
        a, b = sorted(pair)
        if a in page_of and b in page_of:
            assert page_of[a] != page_of[b]


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_placed_bboxes_inside_page(seed: int) -> None:
    pieces, pairs = _random_pieces(seed)
    by_id = {p.id: p for p in pieces}
    layout = place_pieces(pieces, pairs, A4)
    for page in layout.pages:
        assert (page.width, page.height) == (A4.width, A4.height)
        for pl in page.placements:
            bbox = by_id[pl.piece_id].bbox
            assert pl.dx >= 0 and pl.dy >= 0
            assert pl.dx + bbox.width <= page.width + EPS
            assert pl.dy + bbox.height <= page.height + EPS


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_every_piece_placed_or_too_large(seed: int) -> None:
    pieces, pairs = _random_pieces(seed)
    pieces.append(_piece("huge", 250.0, 100.0))
    layout = place_pieces(pieces, pairs, A4)
    placed = [pl.piece_id for page in layout.pages for pl in page.placements]
    assert len(placed) == len(set(placed))
    assert sorted(placed + layout.unplaced) == sorted(p.id for p in pieces)
    assert layout.unplaced == ["huge"]


def test_deterministic_and_input_order_independent() -> None:
    pieces, pairs = _random_pieces(7)
    first = place_pieces(pieces, pairs, A4)
    second = place_pieces(list(reversed(pieces)), pairs, A4)
    assert first == second
    assert place_pieces(pieces, pairs, A4) == first


def test_largest_first_then_id() -> None:
    pieces = [_piece("b", 20, 20), _piece("a", 20, 20), _piece("big", 40, 40)]
    layout = place_pieces(pieces, set(), (100.0, 100.0))
    assert [pl.piece_id for pl in layout.pages[0].placements] == ["big", "a", "b"]


def test_touching_reservations_are_allowed() -> None:
    layout = place_pieces([_piece("a", 48, 10), _piece("b", 48, 10)], set(), (100.0, 100.0))
    assert len(layout.pages) == 1
    assert [(pl.dx, pl.dy) for pl in layout.pages[0].placements] == [(0.0, 0.0), (50.0, 0.0)]


def test_fine_pass_finds_gap_coarse_grid_misses() -> None:
    page = Page(index=0, width=100.0, height=100.0, occupancy=[BoundingBox(0, 0, 52, 52)])
    assert find_position(page, 47.0, 47.0, steps=(10.0,)) is None
    assert find_position(page, 47.0, 47.0) == (52.0, 0.0)


def test_row_major_scan_prefers_top_row() -> None:
    page = Page(index=0, width=100.0, height=100.0, occupancy=[BoundingBox(0, 0, 30, 100)])
    assert find_position(page, 20.0, 20.0) == (30.0, 0.0)


def test_margin_larger_than_page_falls_back_to_origin() -> None:
    layout = place_pieces([_piece("a", 99, 99), _piece("b", 10, 10)], set(), (100.0, 100.0))
    assert layout.unplaced == []
    assert len(layout.pages) == 2
    assert layout.pages[0].placements[0].piece_id == "a"
    assert (layout.pages[0].placements[0].dx, layout.pages[0].placements[0].dy) == (0.0, 0.0)
    assert layout.pages[1].placements[0].piece_id == "b"


def test_overlap_pair_forces_new_page() -> None:
    pieces = [_piece("a", 20, 20, overlapping=True), _piece("b", 20, 20, overlapping=True)]
    layout = place_pieces(pieces, {frozenset(("a", "b"))}, (100.0, 100.0))
    assert len(layout.pages) == 2


def test_empty_input() -> None:
    layout = place_pieces([], set(), A4)
    assert layout.pages == []
    assert layout.unplaced == []


def test_check_page_constraints() -> None:
    pieces = [_piece("ok", 100, 100), _piece("wide", 200, 10), _piece("tall", 10, 300)]
    violations = check_page_constraints(pieces, A4)
    assert [(v["piece_id"], v["exceeds_width"], v["exceeds_height"]) for v in violations] == [
        ("wide", True, False),
        ("tall", False, True),
    ]
