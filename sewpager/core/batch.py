# sewpager/core/batch.py
"""
Batch mode: paginate every .svg in a directory.
Each document is independent; with workers > 1 they run on a thread pool.
Output: <output_dir>/batch_<run_name>/index.csv and cases/<case_id>/ with layout and pages.
"""

from __future__ import annotations

import csv
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from sewpager.core.config import (
    DEFAULT_BATCH_WORKERS,
    DEFAULT_ORIENTATION,
    DEFAULT_PAPER,
    DEFAULT_SCALE_PERCENT,
    DEFAULT_SEAM_ALLOWANCE_MM,
    REPORTS_DIR,
)
from sewpager.core.error_codes import PatternError
from sewpager.core.reporting import ensure_report_dir
from sewpager.core.runner import run_document
from sewpager.core.types import Orientation

logger = logging.getLogger(__name__)

INDEX_FIELDS = ["case_id", "input", "status", "n_pages", "n_placed", "n_unplaced", "n_errors", "duration_ms"]


def _summary_from_report(case_dir: Path) -> dict:
    """Counts from a case's layout.json; empty if it was never written."""
    path = case_dir / "layout.json"
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8")).get("summary", {})


def _run_case(case_id: str, svg_path: Path, case_dir: Path, run_name: str, options: dict) -> dict:
    t0 = time.perf_counter()
    status = "ok"
    try:
        run_document(svg_path, case_dir, run_name=run_name, **options)
    except PatternError as e:
        status = e.kind or "error"
        logger.warning("%s: %s", case_id, e)
    except (ValueError, OSError) as e:
        status = "error"
        logger.warning("%s: %s", case_id, e)
    summary = _summary_from_report(case_dir)
    return {
        "case_id": case_id,
        "input": str(svg_path),
        "status": status,
        "n_pages": summary.get("n_pages", 0),
        "n_placed": summary.get("n_placed", 0),
        "n_unplaced": summary.get("n_unplaced", 0),
        "n_errors": summary.get("n_errors", 0),
        "duration_ms": int((time.perf_counter() - t0) * 1000),
    }


def run_batch(
    run_name: str,
    batch_dir: Path,
    repo_root: Path | None = None,
    output_dir: str = REPORTS_DIR,
    paper: str = DEFAULT_PAPER,
    orientation: Orientation = DEFAULT_ORIENTATION,
    seam_allowance_mm: float = DEFAULT_SEAM_ALLOWANCE_MM,
    scale_percent: float = DEFAULT_SCALE_PERCENT,
    marks: bool = False,
    limit: int | None = None,
    workers: int = DEFAULT_BATCH_WORKERS,
) -> Path:
    """
    Run every .svg in batch_dir (sorted by name, at most limit).
    Returns the batch report directory containing index.csv and cases/<case_id>/.
    Rows in index.csv follow input order regardless of workers.
    """
    if not batch_dir.is_dir():
        raise ValueError(f"Batch directory not found: {batch_dir}")
    root = repo_root or Path.cwd().resolve()
    out_dir = ensure_report_dir(root, f"batch_{run_name}", output_dir=output_dir)
    cases_dir = out_dir / "cases"
    cases_dir.mkdir(parents=True, exist_ok=True)

    svg_files = sorted(batch_dir.glob("*.svg"))
    if limit is not None:
        svg_files = svg_files[:limit]
    options = {
        "paper": paper,
        "orientation": orientation,
        "seam_allowance_mm": seam_allowance_mm,
        "scale_percent": scale_percent,
        "marks": marks,
    }

    jobs = []
    for i, svg_path in enumerate(svg_files):
        case_id = f"case_{i:04d}_{svg_path.stem}"
        case_dir = cases_dir / case_id
        case_dir.mkdir(parents=True, exist_ok=True)
        jobs.append((case_id, svg_path, case_dir, run_name, options))

    if workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            rows = list(pool.map(lambda job: _run_case(*job), jobs))
    else:
        rows = [_run_case(*job) for job in jobs]

    index_path = out_dir / "index.csv"
    with open(index_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=INDEX_FIELDS)
        w.writeheader()
        w.writerows(rows)
    logger.info("Batch %s: %d document(s), %d ok", run_name, len(rows), sum(1 for r in rows if r["status"] == "ok"))
    return out_dir
