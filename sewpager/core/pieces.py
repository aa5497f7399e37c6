# sewpager/core/pieces.py
"""
Piece model: turn a parsed document into pattern pieces plus the set of
pairs whose bounding boxes overlapped in the input.
Per-piece failures are recorded, not raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from itertools import combinations

from sewpager.core.error_codes import (
    DEGENERATE_PATH,
    NO_PIECES,
    OFFSET_EMPTY,
    DegeneratePathError,
    NoPiecesError,
    OffsetEmptyError,
    user_message,
)
from sewpager.core.geometry import (
    apply_affine,
    bounding_box,
    parse_transform,
    polygon_contains_points,
    rects_overlap,
    signed_area,
    validity_problem,
)
from sewpager.core.offset import offset_polygon
from sewpager.core.path_import import parse_outline
from sewpager.core.types import (
    AuxiliaryPayload,
    OutlinePath,
    PatternDocument,
    PatternPiece,
    PieceError,
    PieceGroup,
    PieceOutline,
    PieceSet,
    Point,
)

logger = logging.getLogger(__name__)


def _unique_id(group_id: str, seen: set[str]) -> str:
    """Suffix repeated group ids (-2, -3, ...) so pieces stay addressable."""
    if group_id not in seen:
        return group_id
    n = 2
    while f"{group_id}-{n}" in seen:
        n += 1
    logger.warning("Duplicate group id %r renamed to %r", group_id, f"{group_id}-{n}")
    return f"{group_id}-{n}"


def _parse_group_outlines(group: PieceGroup, scale: float) -> list[tuple[OutlinePath, list[Point]]]:
    """
    Every outline of a group in document millimetres (group transform, then
    scale), largest absolute area first; equal areas keep document order.
    Outlines that enclose no area are dropped.
    Raises DegeneratePathError when no outline encloses any area.
    """
    affine = parse_transform(group.transform)
    parsed: list[tuple[float, OutlinePath, list[Point]]] = []
    last_error: DegeneratePathError | None = None
    for path in group.outlines:
        try:
            local = parse_outline(path.d)
        except DegeneratePathError as e:
            last_error = e
            continue
        pts = [(x * scale, y * scale) for x, y in apply_affine(local, affine)]
        area = abs(signed_area(pts))
        if area == 0:
            last_error = DegeneratePathError("Outline encloses no area")
            continue
        parsed.append((area, path, pts))
    if not parsed:
        raise last_error or DegeneratePathError("Outline encloses no area")
    if len(parsed) < len(group.outlines):
        logger.debug("%s: %d of %d outline(s) degenerate; dropped", group.id, len(group.outlines) - len(parsed), len(group.outlines))
    parsed.sort(key=lambda item: -item[0])
    return [(path, pts) for _, path, pts in parsed]


def find_overlap_pairs(pieces: list[PatternPiece]) -> set[frozenset[str]]:
    """All pairs {a.id, b.id} whose bounding boxes overlap (touching edges excluded)."""
    pairs: set[frozenset[str]] = set()
    for a, b in combinations(pieces, 2):
        if rects_overlap(a.bbox, b.bbox):
            pairs.add(frozenset((a.id, b.id)))
    return pairs


def _offset_outline(points: list[Point], allowance_mm: float, label: str) -> list[Point]:
    """Offset one outline; raises OffsetEmptyError or DegeneratePathError."""
    allowance = offset_polygon(points, allowance_mm)
    if not polygon_contains_points(allowance, points, strict=False):
        logger.warning("Seam allowance of %s does not cover its outline", label)
    return allowance


def build_piece(group: PieceGroup, piece_id: str, allowance_mm: float, scale: float = 1.0) -> tuple[PatternPiece, PieceError | None]:
    """
    Build one piece from every outline of the group. Each outline gets its own
    seam allowance; bbox covers all outlines and allowances. Offset failures
    are returned as a PieceError alongside the piece (those outlines are kept
    without allowance); import failures raise DegeneratePathError.
    """
    parsed = _parse_group_outlines(group, scale)
    problem = validity_problem(parsed[0][1])
    if problem:
        logger.warning("Outline of %s is not a simple polygon: %s", piece_id, problem)

    outlines: list[PieceOutline] = []
    failures: list[str] = []
    for path, points in parsed:
        label = path.path_id or piece_id
        allowance = None
        if allowance_mm > 0:
            try:
                allowance = _offset_outline(points, allowance_mm, label)
            except (OffsetEmptyError, DegeneratePathError) as e:
                logger.warning("Seam allowance failed for %s: %s", label, e)
                failures.append(f"{label}: {e}")
        outlines.append(PieceOutline(
            points=tuple(points),
            allowance=tuple(allowance) if allowance is not None else None,
            source=path,
        ))

    error = PieceError(piece_id, OFFSET_EMPTY, "; ".join(failures)) if failures else None
    bbox = bounding_box(
        pt for o in outlines for pt in o.points + (o.allowance if o.allowance is not None else ())
    )
    payload = AuxiliaryPayload(elements=group.auxiliary, transform=group.transform, scale=scale)
    primary = outlines[0]
    piece = PatternPiece(
        id=piece_id,
        outline=primary.points,
        bbox=bbox,
        allowance=primary.allowance,
        allowance_mm=allowance_mm if any(o.allowance is not None for o in outlines) else 0.0,
        auxiliary=payload,
        outlines=tuple(outlines),
    )
    return piece, error


def from_document(doc: PatternDocument, allowance_mm: float = 0.0, scale: float = 1.0) -> PieceSet:
    """
    Parse every group into a PatternPiece, apply seam allowance when
    allowance_mm > 0, then mark originally-overlapping pieces.
    Pieces whose outline is degenerate are dropped and reported; offset
    failures keep the piece without allowance and are reported.
    Raises NoPiecesError if no valid piece remains.
    """
    pieces: list[PatternPiece] = []
    errors: list[PieceError] = []
    seen: set[str] = set()

    for group in doc.groups:
        piece_id = _unique_id(group.id, seen)
        seen.add(piece_id)
        try:
            piece, error = build_piece(group, piece_id, allowance_mm, scale=scale)
        except DegeneratePathError as e:
            logger.warning("Skipping %s: %s", piece_id, e)
            errors.append(PieceError(piece_id, DEGENERATE_PATH, str(e)))
            continue
        if error is not None:
            errors.append(error)
        pieces.append(piece)

    if not pieces:
        raise NoPiecesError(user_message(NO_PIECES), errors)

    overlap_pairs = find_overlap_pairs(pieces)
    overlapping = {pid for pair in overlap_pairs for pid in pair}
    pieces = [replace(p, originally_overlapping=True) if p.id in overlapping else p for p in pieces]
    logger.info(
        "Built %d piece(s) from %s; %d overlapping pair(s), %d error(s)",
        len(pieces), doc.source or "document", len(overlap_pairs), len(errors),
    )
    return PieceSet(pieces=pieces, overlap_pairs=overlap_pairs, errors=errors)
