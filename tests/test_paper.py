# tests/test_paper.py
"""
Paper catalogue and printable area.
"""

from __future__ import annotations

import pytest

from sewpager.core.paper import paper_size, printable_area
from sewpager.core.types import PageSize


@pytest.mark.parametrize(
    "paper,orientation,expected",
    [
        ("a4", "portrait", PageSize(190.0, 277.0)),
        ("a4", "landscape", PageSize(277.0, 190.0)),
        ("a3", "portrait", PageSize(277.0, 400.0)),
        ("b4", "portrait", PageSize(237.0, 344.0)),
        ("B5", "landscape", PageSize(237.0, 162.0)),
    ],
)
def test_printable_area(paper: str, orientation: str, expected: PageSize) -> None:
    assert printable_area(paper, orientation) == expected


def test_paper_size_landscape_swaps() -> None:
    assert paper_size("a4", "landscape") == PageSize(297.0, 210.0)


def test_unknown_paper_and_orientation() -> None:
    with pytest.raises(ValueError):
        printable_area("letter")
    with pytest.raises(ValueError):
        printable_area("a4", "sideways")
