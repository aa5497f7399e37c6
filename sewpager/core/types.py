# sewpager/core/types.py
"""
Dataclasses for pattern pieces, pages, placements and run results.
Coordinates are millimetres; positive y points down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Point = tuple[float, float]
Polyline = list[Point]
Affine = tuple[float, float, float, float, float, float]
"""SVG matrix (a, b, c, d, e, f): x' = a*x + c*y + e, y' = b*x + d*y + f."""

Orientation = Literal["portrait", "landscape"]
ErrorKind = Literal["degenerate_path", "offset_empty", "piece_too_large", "no_pieces"]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle. Pieces always have width > 0 and height > 0."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PageSize:
    """Printable area of one sheet (mm)."""
    width: float
    height: float


@dataclass(frozen=True)
class AuxiliaryPayload:
    """
    Guides, labels and textures of a piece as serialized XML, in group-local
    coordinates. The group transform followed by scale maps them onto
    document millimetres.
    """
    elements: tuple[str, ...] = ()
    transform: str = ""
    scale: float = 1.0


@dataclass(frozen=True)
class OutlinePath:
    """A sewing-line path as written in the input: path data plus its other attributes."""
    d: str
    attributes: tuple[tuple[str, str], ...] = ()

    @property
    def path_id(self) -> str | None:
        return dict(self.attributes).get("id")


@dataclass(frozen=True)
class PieceOutline:
    """One sewing line of a piece in document millimetres, with its cut line if any."""
    points: tuple[Point, ...]
    allowance: tuple[Point, ...] | None = None
    source: OutlinePath | None = None


@dataclass(frozen=True)
class PatternPiece:
    """
    One pattern unit. Created once by the piece model and never mutated;
    placement refers to it by id.
    outline and allowance belong to the largest sewing line; outlines holds
    every sewing line of the unit, largest first. bbox covers all of them.
    allowance_mm is the seam allowance actually applied (0 when none).
    """
    id: str
    outline: tuple[Point, ...]
    bbox: BoundingBox
    allowance: tuple[Point, ...] | None = None
    allowance_mm: float = 0.0
    originally_overlapping: bool = False
    auxiliary: Any = None
    outlines: tuple[PieceOutline, ...] = ()

    def all_outlines(self) -> tuple[PieceOutline, ...]:
        """Every sewing line, largest first."""
        if self.outlines:
            return self.outlines
        return (PieceOutline(self.outline, self.allowance),)


@dataclass(frozen=True)
class Placement:
    """Piece occupies (dx, dy, bbox.width, bbox.height) on its page."""
    piece_id: str
    dx: float
    dy: float


@dataclass
class Page:
    """A destination sheet. occupancy holds the margin-expanded rectangles of its placements."""
    index: int
    width: float
    height: float
    placements: list[Placement] = field(default_factory=list)
    occupancy: list[BoundingBox] = field(default_factory=list)


@dataclass(frozen=True)
class PieceError:
    """Per-piece failure recorded instead of raised."""
    piece_id: str
    kind: ErrorKind
    detail: str = ""


@dataclass
class PieceSet:
    """Output of the piece model."""
    pieces: list[PatternPiece]
    overlap_pairs: set[frozenset[str]] = field(default_factory=set)
    errors: list[PieceError] = field(default_factory=list)


@dataclass
class LayoutResult:
    """Output of the placement engine."""
    pages: list[Page]
    unplaced: list[str] = field(default_factory=list)
    errors: list[PieceError] = field(default_factory=list)


@dataclass(frozen=True)
class PieceGroup:
    """One top-level group of the input document. transform is the group's raw SVG transform attribute."""
    id: str
    outlines: tuple[OutlinePath, ...]
    transform: str = ""
    auxiliary: tuple[str, ...] = ()


@dataclass
class PatternDocument:
    """Parsed input document: groups in document order plus document-level defs."""
    groups: list[PieceGroup]
    source: str = ""
    defs: str | None = None
