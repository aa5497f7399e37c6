# sewpager/core/paper.py
"""
Paper catalogue and printable area.
"""

from __future__ import annotations

from typing import get_args

from sewpager.core.config import DEFAULT_ORIENTATION, DEFAULT_PAPER, PAPER_SIZES_MM, PRINT_MARGIN_MM
from sewpager.core.types import Orientation, PageSize


def paper_size(paper: str = DEFAULT_PAPER, orientation: Orientation = DEFAULT_ORIENTATION) -> PageSize:
    """Full sheet size in mm; landscape swaps width and height."""
    key = paper.lower()
    if key not in PAPER_SIZES_MM:
        raise ValueError(f"Unknown paper {paper!r}; expected one of {sorted(PAPER_SIZES_MM)}")
    if orientation not in get_args(Orientation):
        raise ValueError(f"Unknown orientation {orientation!r}")
    w, h = PAPER_SIZES_MM[key]
    if orientation == "landscape":
        w, h = h, w
    return PageSize(w, h)


def printable_area(
    paper: str = DEFAULT_PAPER,
    orientation: Orientation = DEFAULT_ORIENTATION,
    margin_mm: float = PRINT_MARGIN_MM,
) -> PageSize:
    """Sheet size minus margin_mm on every edge. A4 portrait -> 190 x 277."""
    sheet = paper_size(paper, orientation)
    return PageSize(sheet.width - 2 * margin_mm, sheet.height - 2 * margin_mm)
