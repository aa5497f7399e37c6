# tests/test_batch.py
"""
Batch mode: temp directory with a few synthetic pattern SVGs; run batch and assert index.csv rows and statuses.
"""

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from sewpager.core.batch import INDEX_FIELDS, run_batch


def _pattern(w: float, h: float) -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        f'<g id="piece"><path class="seam" d="M 0 0 H {w} V {h} H 0 Z"/></g>'
        "</svg>"
    )


@pytest.mark.parametrize("workers", [1, 2])
def test_batch_from_dir_produces_index_csv(tmp_path: Path, workers: int) -> None:
    svg_dir = tmp_path / "svg_input"
    svg_dir.mkdir()
    (svg_dir / "a.svg").write_text(_pattern(50, 50), encoding="utf-8")
    (svg_dir / "b.svg").write_text(_pattern(500, 50), encoding="utf-8")
    (svg_dir / "c.svg").write_text("<svg", encoding="utf-8")

    report_dir = run_batch(run_name="test_batch", batch_dir=svg_dir, repo_root=tmp_path, workers=workers)
    index_csv = report_dir / "index.csv"
    assert index_csv.exists()
    with open(index_csv, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == INDEX_FIELDS
        rows = list(reader)
    assert [r["case_id"] for r in rows] == ["case_0000_a", "case_0001_b", "case_0002_c"]
    assert [r["status"] for r in rows] == ["ok", "piece_too_large", "error"]
    assert rows[0]["n_pages"] == "1"
    assert rows[1]["n_unplaced"] == "1"
    assert (report_dir / "cases" / "case_0000_a" / "page_001.svg").exists()


def test_batch_limit(tmp_path: Path) -> None:
    svg_dir = tmp_path / "svg_input"
    svg_dir.mkdir()
    for name in ("a", "b", "c"):
        (svg_dir / f"{name}.svg").write_text(_pattern(20, 20), encoding="utf-8")
    report_dir = run_batch(run_name="limited", batch_dir=svg_dir, repo_root=tmp_path, limit=2)
    rows = (report_dir / "index.csv").read_text(encoding="utf-8").strip().split("\n")
    assert len(rows) == 3  # header + 2 cases


def test_batch_missing_dir_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        run_batch(run_name="x", batch_dir=tmp_path / "nope", repo_root=tmp_path)
