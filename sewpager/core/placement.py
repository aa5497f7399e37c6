# sewpager/core/placement.py
"""
Placement engine: pack pattern pieces onto fixed-size pages, first-fit-decreasing.
Pieces are never rotated. Every placed piece reserves its bbox plus a margin
to the right and below; originally-overlapping pieces never share a page.
Deterministic: pieces sorted by (area desc, id), positions scanned row-major.
"""

from __future__ import annotations

import logging

import numpy as np

from sewpager.core.config import COARSE_STEP_MM, DEFAULT_MARGIN_MM, FINE_STEP_MM, GRID_EPSILON
from sewpager.core.types import BoundingBox, LayoutResult, Page, PageSize, PatternPiece, Placement

logger = logging.getLogger(__name__)


def piece_margin(piece: PatternPiece, default_margin: float = DEFAULT_MARGIN_MM) -> float:
    """
    Spacing reserved with a piece: 2 * allowance + default_margin for pieces
    with a seam allowance, default_margin otherwise.
    """
    if piece.allowance_mm > 0:
        return 2.0 * piece.allowance_mm + default_margin
    return default_margin


def _order_pieces(pieces: list[PatternPiece]) -> list[PatternPiece]:
    """Larger bbox area first; tie-break by id."""
    return sorted(pieces, key=lambda p: (-p.bbox.area, p.id))


def _grid(limit: float, step: float) -> np.ndarray:
    """Coordinates 0, step, 2*step, ... not exceeding limit; empty if limit < 0."""
    if limit < -GRID_EPSILON:
        return np.zeros(0)
    n = int(np.floor(limit / step + GRID_EPSILON)) + 1
    return np.arange(n, dtype=float) * step


def _first_free(xs: np.ndarray, ys: np.ndarray, w: float, h: float, occupancy: list[BoundingBox]) -> tuple[float, float] | None:
    """
    First (x, y) in row-major order (y outer, x inner) where the w x h rectangle
    does not overlap any occupied rectangle. Touching is allowed.
    """
    if xs.size == 0 or ys.size == 0:
        return None
    if not occupancy:
        return float(xs[0]), float(ys[0])
    occ = np.array([(r.x, r.y, r.max_x, r.max_y) for r in occupancy], dtype=float)
    # (n_x, k): candidate column overlaps rect k horizontally; (n_y, k): vertically.
    x_hit = ~((xs[:, None] + w <= occ[None, :, 0]) | (occ[None, :, 2] <= xs[:, None]))
    y_hit = ~((ys[:, None] + h <= occ[None, :, 1]) | (occ[None, :, 3] <= ys[:, None]))
    collisions = y_hit.astype(np.int64) @ x_hit.T.astype(np.int64)
    free = collisions == 0
    if not free.any():
        return None
    iy, ix = np.unravel_index(int(np.argmax(free)), free.shape)
    return float(xs[ix]), float(ys[iy])


def find_position(
    page: Page,
    width: float,
    height: float,
    steps: tuple[float, ...] = (COARSE_STEP_MM, FINE_STEP_MM),
) -> tuple[float, float] | None:
    """
    Search top-left positions for a width x height rectangle on page: one pass
    per step size, stopping at the first pass that finds a free position.
    """
    for step in steps:
        xs = _grid(page.width - width, step)
        ys = _grid(page.height - height, step)
        pos = _first_free(xs, ys, width, height, page.occupancy)
        if pos is not None:
            return pos
    return None


def conflicts_with_page(piece: PatternPiece, page: Page, overlap_pairs: set[frozenset[str]]) -> bool:
    """True if piece overlapped, in the input, with a piece already on page."""
    if not piece.originally_overlapping or not overlap_pairs:
        return False
    return any(frozenset((piece.id, q.piece_id)) in overlap_pairs for q in page.placements)


def try_place_on_page(
    piece: PatternPiece,
    page: Page,
    overlap_pairs: set[frozenset[str]],
    default_margin: float = DEFAULT_MARGIN_MM,
) -> bool:
    """
    Place piece on page if allowed and a free position exists; mutates page.
    On an empty page a piece whose bbox fits but whose margin does not is
    placed at the origin.
    """
    if conflicts_with_page(piece, page, overlap_pairs):
        return False
    if piece.bbox.width > page.width or piece.bbox.height > page.height:
        return False

    margin = piece_margin(piece, default_margin)
    w = piece.bbox.width + margin
    h = piece.bbox.height + margin
    pos = find_position(page, w, h)
    if pos is None:
        if page.placements:
            return False
        logger.debug("Margin of %s exceeds the page; placed at origin", piece.id)
        pos = (0.0, 0.0)

    x, y = pos
    page.occupancy.append(BoundingBox(x, y, w, h))
    page.placements.append(Placement(piece.id, x, y))
    logger.debug("Placed %s on page %d at (%.1f, %.1f)", piece.id, page.index, x, y)
    return True


def place_pieces(
    pieces: list[PatternPiece],
    overlap_pairs: set[frozenset[str]],
    page_size: PageSize | tuple[float, float],
    default_margin: float = DEFAULT_MARGIN_MM,
) -> LayoutResult:
    """
    First-fit-decreasing placement of pieces onto pages of page_size.
    Pieces larger than the page are listed in unplaced; no page is created for them.
    """
    if isinstance(page_size, PageSize):
        page_w, page_h = page_size.width, page_size.height
    else:
        page_w, page_h = page_size

    pages: list[Page] = []
    unplaced: list[str] = []
    for piece in _order_pieces(pieces):
        if any(try_place_on_page(piece, page, overlap_pairs, default_margin) for page in pages):
            continue
        page = Page(index=len(pages), width=page_w, height=page_h)
        if try_place_on_page(piece, page, overlap_pairs, default_margin):
            pages.append(page)
        else:
            logger.debug("%s (%.1f x %.1f) exceeds the page", piece.id, piece.bbox.width, piece.bbox.height)
            unplaced.append(piece.id)

    logger.info("Placed %d piece(s) on %d page(s); %d unplaced", len(pieces) - len(unplaced), len(pages), len(unplaced))
    return LayoutResult(pages=pages, unplaced=unplaced)


def check_page_constraints(pieces: list[PatternPiece], page_size: PageSize) -> list[dict]:
    """Pieces whose bbox exceeds the printable area, with which dimension is exceeded."""
    violations: list[dict] = []
    for p in pieces:
        exceeds_w = p.bbox.width > page_size.width
        exceeds_h = p.bbox.height > page_size.height
        if exceeds_w or exceeds_h:
            violations.append({
                "piece_id": p.id,
                "width": p.bbox.width,
                "height": p.bbox.height,
                "exceeds_width": exceeds_w,
                "exceeds_height": exceeds_h,
            })
    return violations
