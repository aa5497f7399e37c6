# sewpager/core/reporting.py
"""
Create reports/<run_name>/ and write layout.json and run_metadata.json.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from sewpager.core.config import (
    COARSE_STEP_MM,
    DEFAULT_MARGIN_MM,
    FINE_STEP_MM,
    MITER_LIMIT,
    PRINT_MARGIN_MM,
    QUANTISE_SCALE,
    REPORTS_DIR,
)
from sewpager.core.types import LayoutResult, Orientation, PageSize, PatternPiece, PieceError

SCHEMA_VERSION = "1.0"


def layout_to_dict(
    layout: LayoutResult,
    page_size: PageSize,
    pieces: list[PatternPiece] | None = None,
    errors: list[PieceError] | None = None,
) -> dict:
    """Exact structure for layout.json. Key order and list order are deterministic."""
    all_errors = list(errors if errors is not None else layout.errors)
    n_placed = sum(len(p.placements) for p in layout.pages)
    out = {
        "schema_version": SCHEMA_VERSION,
        "page_size": {"width": page_size.width, "height": page_size.height},
        "pages": [
            {
                "index": page.index,
                "width": page.width,
                "height": page.height,
                "placements": [
                    {"piece_id": pl.piece_id, "dx": pl.dx, "dy": pl.dy} for pl in page.placements
                ],
            }
            for page in layout.pages
        ],
        "unplaced": list(layout.unplaced),
        "errors": [asdict(e) for e in all_errors],
        "summary": {
            "n_pages": len(layout.pages),
            "n_placed": n_placed,
            "n_unplaced": len(layout.unplaced),
            "n_errors": len(all_errors),
        },
    }
    if pieces is not None:
        out["pieces"] = [
            {
                "id": p.id,
                "bbox": asdict(p.bbox),
                "has_allowance": p.allowance_mm > 0,
                "originally_overlapping": p.originally_overlapping,
            }
            for p in pieces
        ]
    return out


def run_metadata_dict(
    run_name: str,
    input_path: str,
    paper: str,
    orientation: Orientation,
    seam_allowance_mm: float,
    scale_percent: float,
) -> dict:
    """Timestamp and config snapshot for run_metadata.json."""
    return {
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "input_path": input_path,
        "paper": paper,
        "orientation": orientation,
        "seam_allowance_mm": seam_allowance_mm,
        "scale_percent": scale_percent,
        "config": {
            "QUANTISE_SCALE": QUANTISE_SCALE,
            "MITER_LIMIT": MITER_LIMIT,
            "DEFAULT_MARGIN_MM": DEFAULT_MARGIN_MM,
            "COARSE_STEP_MM": COARSE_STEP_MM,
            "FINE_STEP_MM": FINE_STEP_MM,
            "PRINT_MARGIN_MM": PRINT_MARGIN_MM,
        },
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_layout_json(
    report_dir: Path,
    layout: LayoutResult,
    page_size: PageSize,
    pieces: list[PatternPiece] | None = None,
    errors: list[PieceError] | None = None,
) -> Path:
    """Write layout.json to report_dir. Returns path to file."""
    path = report_dir / "layout.json"
    data = layout_to_dict(layout, page_size, pieces=pieces, errors=errors)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    input_path: str,
    paper: str,
    orientation: Orientation,
    seam_allowance_mm: float,
    scale_percent: float,
) -> Path:
    """Write run_metadata.json to report_dir."""
    path = report_dir / "run_metadata.json"
    data = run_metadata_dict(run_name, input_path, paper, orientation, seam_allowance_mm, scale_percent)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
