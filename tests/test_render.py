# tests/test_render.py
"""
Debug PNG rendering of a page layout.
"""

from __future__ import annotations

from sewpager.core.render import render_page_layout
from sewpager.core.types import BoundingBox, Page, PatternPiece, Placement


def test_render_page_layout_writes_png(tmp_path) -> None:
    piece = PatternPiece(
        "front",
        ((0.0, 0.0), (40.0, 0.0), (40.0, 40.0), (0.0, 40.0)),
        BoundingBox(-5.0, -5.0, 50.0, 50.0),
        allowance=((-5.0, -5.0), (45.0, -5.0), (45.0, 45.0), (-5.0, 45.0)),
        allowance_mm=5.0,
    )
    page = Page(0, 100.0, 80.0, placements=[Placement("front", 0.0, 0.0)], occupancy=[BoundingBox(0.0, 0.0, 62.0, 62.0)])
    out = tmp_path / "page.png"
    render_page_layout(page, {"front": piece}, out)
    assert out.exists()
    assert out.stat().st_size > 0
