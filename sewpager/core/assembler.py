# sewpager/core/assembler.py
"""
Page assembler: turn a layout into one self-contained SVG per page.
Each placed piece is translated onto the page's printable area with its
sewing lines (the input paths, dashed when a seam allowance exists), one cut
line per sewing line and its auxiliary payload. Refuses to assemble while any piece is unplaced.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from sewpager.core.config import (
    ALLOWANCE_CLASS,
    ALLOWANCE_STROKE_WIDTH,
    OUTLINE_CLASS,
    OUTLINE_DASH,
    PAGE_LABEL_FONT_SIZE,
    PAGE_LABEL_OFFSET_MM,
    PAGE_MARK_SIZE_MM,
)
from sewpager.core.error_codes import UnplacedPiecesError
from sewpager.core.io import SVG_NS
from sewpager.core.path_import import points_to_path_data
from sewpager.core.types import AuxiliaryPayload, LayoutResult, Page, PageSize, PatternPiece, PieceOutline

logger = logging.getLogger(__name__)


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def _num(v: float) -> str:
    """Compact decimal for attributes: 4 places, trailing zeros stripped."""
    s = f"{v:.4f}".rstrip("0").rstrip(".")
    return "0" if s in ("-0", "") else s


def unplaced_message(unplaced: list[str], pieces_by_id: dict[str, PatternPiece], page_size: PageSize) -> str:
    """One line per unplaced piece with its measured size, then the printable size."""
    lines = ["Pattern pieces do not fit on the printable area:"]
    for pid in unplaced:
        piece = pieces_by_id.get(pid)
        if piece is None:
            lines.append(f"- {pid}")
            continue
        lines.append(f"- {pid}: {piece.bbox.width:.1f}mm × {piece.bbox.height:.1f}mm")
    lines.append(f"Printable area: {_num(page_size.width)}mm × {_num(page_size.height)}mm")
    return "\n".join(lines)


def require_all_placed(layout: LayoutResult, pieces_by_id: dict[str, PatternPiece], page_size: PageSize) -> None:
    """Raise UnplacedPiecesError naming every unplaced piece and its size."""
    if layout.unplaced:
        raise UnplacedPiecesError(unplaced_message(layout.unplaced, pieces_by_id, page_size), layout.unplaced)


def _source_transform(payload: AuxiliaryPayload) -> str:
    """Group-local to document millimetres: scale applied after the group's own transform."""
    parts = []
    if payload.scale != 1.0:
        parts.append(f"scale({_num(payload.scale)})")
    if payload.transform:
        parts.append(payload.transform)
    return " ".join(parts)


def _source_path(outline: PieceOutline) -> ET.Element:
    """The input sewing-line path with its own attributes; dashed when it has a cut line."""
    attrs = dict(outline.source.attributes)
    attrs["d"] = outline.source.d
    attrs.setdefault("fill", "none")
    attrs.setdefault("stroke", "#000")
    if outline.allowance is not None:
        attrs["stroke-dasharray"] = OUTLINE_DASH
    return ET.Element(_q("path"), attrs)


def _append_source_content(parent: ET.Element, piece: PatternPiece) -> None:
    """Input paths and auxiliary elements, in group-local coordinates."""
    payload = piece.auxiliary if isinstance(piece.auxiliary, AuxiliaryPayload) else AuxiliaryPayload()
    sourced = [o for o in piece.all_outlines() if o.source is not None]
    if not sourced and not payload.elements:
        return
    attrs = {"class": "auxiliary"}
    transform = _source_transform(payload)
    if transform:
        attrs["transform"] = transform
    g = ET.SubElement(parent, _q("g"), attrs)
    for outline in sourced:
        g.append(_source_path(outline))
    for xml in payload.elements:
        try:
            g.append(ET.fromstring(xml))
        except ET.ParseError as e:
            logger.warning("Dropping unparsable auxiliary element: %s", e)


def _allowance_id(piece: PatternPiece, outline: PieceOutline, index: int) -> str:
    """<path id>-allowance when the sewing line has an id, else derived from the piece id."""
    if outline.source is not None and outline.source.path_id:
        return f"{outline.source.path_id}-allowance"
    if index == 0:
        return f"{piece.id}-allowance"
    return f"{piece.id}-allowance-{index + 1}"


def piece_group(piece: PatternPiece, dx: float, dy: float) -> ET.Element:
    """
    Group for one placed piece, translated so its bbox origin lands at (dx, dy).
    Sewing lines read from the input keep their attributes and path data;
    cut lines are drawn in document millimetres.
    """
    tx = dx - piece.bbox.x
    ty = dy - piece.bbox.y
    g = ET.Element(_q("g"), {
        "id": piece.id,
        "class": "pattern-unit",
        "transform": f"translate({_num(tx)} {_num(ty)})",
    })
    _append_source_content(g, piece)
    outlines = piece.all_outlines()
    for outline in outlines:
        if outline.source is not None:
            continue
        attrs = {
            "class": OUTLINE_CLASS,
            "d": points_to_path_data(outline.points),
            "fill": "none",
            "stroke": "#000",
            "stroke-width": ALLOWANCE_STROKE_WIDTH,
        }
        if outline.allowance is not None:
            attrs["stroke-dasharray"] = OUTLINE_DASH
        ET.SubElement(g, _q("path"), attrs)
    for i, outline in enumerate(outlines):
        if outline.allowance is None:
            continue
        ET.SubElement(g, _q("path"), {
            "id": _allowance_id(piece, outline, i),
            "class": ALLOWANCE_CLASS,
            "d": points_to_path_data(outline.allowance),
            "fill": "none",
            "stroke": "#000",
            "stroke-width": ALLOWANCE_STROKE_WIDTH,
        })
    return g


def _append_page_marks(root: ET.Element, page: Page, total_pages: int) -> None:
    """Corner crosses and 'Page i / n' centred near the bottom edge."""
    marks = ET.SubElement(root, _q("g"), {"class": "page-marks"})
    text = ET.SubElement(marks, _q("text"), {
        "x": _num(page.width / 2),
        "y": _num(page.height - PAGE_LABEL_OFFSET_MM),
        "text-anchor": "middle",
        "font-size": _num(PAGE_LABEL_FONT_SIZE),
        "fill": "black",
    })
    text.text = f"Page {page.index + 1} / {total_pages}"
    s = PAGE_MARK_SIZE_MM
    for cx, cy in ((0.0, 0.0), (page.width, 0.0), (0.0, page.height), (page.width, page.height)):
        for x1, y1, x2, y2 in ((cx - s, cy, cx + s, cy), (cx, cy - s, cx, cy + s)):
            ET.SubElement(marks, _q("line"), {
                "x1": _num(x1), "y1": _num(y1), "x2": _num(x2), "y2": _num(y2),
                "stroke": "black", "stroke-width": "0.5",
            })


def build_page_svg(
    page: Page,
    pieces_by_id: dict[str, PatternPiece],
    defs: str | None = None,
    marks: bool = False,
    total_pages: int = 1,
) -> ET.Element:
    """SVG root for one page: printable-area viewBox in mm, one group per placement."""
    root = ET.Element(_q("svg"), {
        "width": f"{_num(page.width)}mm",
        "height": f"{_num(page.height)}mm",
        "viewBox": f"0 0 {_num(page.width)} {_num(page.height)}",
    })
    if defs:
        try:
            root.append(ET.fromstring(defs))
        except ET.ParseError as e:
            logger.warning("Dropping unparsable defs: %s", e)
    for placement in page.placements:
        piece = pieces_by_id[placement.piece_id]
        root.append(piece_group(piece, placement.dx, placement.dy))
    if marks:
        _append_page_marks(root, page, total_pages)
    return root


def svg_to_string(root: ET.Element) -> str:
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode", method="xml")


def assemble_pages(
    layout: LayoutResult,
    pieces: list[PatternPiece],
    page_size: PageSize,
    defs: str | None = None,
    marks: bool = False,
) -> list[str]:
    """
    SVG text for every page in order.
    Raises UnplacedPiecesError if the layout has unplaced pieces.
    """
    pieces_by_id = {p.id: p for p in pieces}
    require_all_placed(layout, pieces_by_id, page_size)
    total = len(layout.pages)
    return [
        svg_to_string(build_page_svg(page, pieces_by_id, defs=defs, marks=marks, total_pages=total))
        for page in layout.pages
    ]


def write_pages(out_dir: Path, page_svgs: list[str]) -> list[Path]:
    """Write page_001.svg, page_002.svg, ... and return their paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []
    for i, svg in enumerate(page_svgs):
        path = out_dir / f"page_{i + 1:03d}.svg"
        path.write_text(svg, encoding="utf-8")
        paths.append(path)
    return paths
