# sewpager/core/runner.py
"""
CLI entrypoint: load SVG, build pieces with seam allowance, place on pages,
write layout report and one SVG per page.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import get_args

from sewpager.core.assembler import assemble_pages, write_pages
from sewpager.core.config import (
    DEFAULT_BATCH_WORKERS,
    DEFAULT_MARGIN_MM,
    DEFAULT_ORIENTATION,
    DEFAULT_PAPER,
    DEFAULT_SCALE_PERCENT,
    DEFAULT_SEAM_ALLOWANCE_MM,
    LOG_LEVEL,
    PAPER_SIZES_MM,
    REPORTS_DIR,
)
from sewpager.core.error_codes import PatternError, user_message
from sewpager.core.io import load_document
from sewpager.core.paper import printable_area
from sewpager.core.pieces import from_document
from sewpager.core.placement import place_pieces
from sewpager.core.reporting import ensure_report_dir, write_layout_json, write_run_metadata_json
from sewpager.core.types import LayoutResult, Orientation, PageSize, PatternDocument, PieceSet

logger = logging.getLogger(__name__)


def layout_document(
    doc: PatternDocument,
    page_size: PageSize,
    seam_allowance_mm: float = DEFAULT_SEAM_ALLOWANCE_MM,
    scale: float = 1.0,
    default_margin: float = DEFAULT_MARGIN_MM,
) -> tuple[PieceSet, LayoutResult]:
    """
    Pieces and placement for one document. Per-piece errors from the piece
    model are carried into the layout's errors. Raises NoPiecesError.
    """
    piece_set = from_document(doc, seam_allowance_mm, scale=scale)
    layout = place_pieces(piece_set.pieces, piece_set.overlap_pairs, page_size, default_margin=default_margin)
    layout.errors = list(piece_set.errors)
    return piece_set, layout


def run_document(
    input_path: str | Path,
    report_dir: Path,
    paper: str = DEFAULT_PAPER,
    orientation: Orientation = DEFAULT_ORIENTATION,
    seam_allowance_mm: float = DEFAULT_SEAM_ALLOWANCE_MM,
    scale_percent: float = DEFAULT_SCALE_PERCENT,
    marks: bool = False,
    debug_png: bool = False,
    run_name: str = "run",
) -> tuple[LayoutResult, list[Path]]:
    """
    Full pipeline for one file into report_dir. layout.json and
    run_metadata.json are always written; pages only when every piece was
    placed. Raises NoPiecesError or UnplacedPiecesError.
    """
    page_size = printable_area(paper, orientation)
    doc = load_document(input_path)
    piece_set, layout = layout_document(doc, page_size, seam_allowance_mm, scale=scale_percent / 100.0)

    write_layout_json(report_dir, layout, page_size, pieces=piece_set.pieces)
    write_run_metadata_json(report_dir, run_name, str(input_path), paper, orientation, seam_allowance_mm, scale_percent)
    for err in layout.errors:
        logger.warning("%s: %s", err.piece_id, user_message(err.kind))

    page_svgs = assemble_pages(layout, piece_set.pieces, page_size, defs=doc.defs, marks=marks)
    paths = write_pages(report_dir, page_svgs)

    if debug_png:
        from sewpager.core.render import render_page_layout
        pieces_by_id = {p.id: p for p in piece_set.pieces}
        for page in layout.pages:
            png = report_dir / f"page_{page.index + 1:03d}_debug.png"
            render_page_layout(page, pieces_by_id, png)
            paths.append(png)
    return layout, paths


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Paginate sewing-pattern SVGs so every piece prints on one sheet.")
    p.add_argument("--input", type=str, default=None, help="Pattern SVG path")
    p.add_argument("--paper", type=str, default=DEFAULT_PAPER, choices=sorted(PAPER_SIZES_MM), help="Paper size")
    p.add_argument("--orientation", type=str, default=DEFAULT_ORIENTATION, choices=list(get_args(Orientation)))
    p.add_argument("--seam-allowance", type=float, default=DEFAULT_SEAM_ALLOWANCE_MM, dest="seam_allowance", help="Seam allowance (mm)")
    p.add_argument("--scale-percent", type=float, default=DEFAULT_SCALE_PERCENT, dest="scale_percent", help="Uniform input scale (%%)")
    p.add_argument("--marks", action="store_true", help="Add corner marks and page numbers")
    p.add_argument("--debug-png", action="store_true", dest="debug_png", help="Also render PNG layout previews")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default=REPORTS_DIR, dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    p.add_argument("--batch-dir", type=str, default=None, dest="batch_dir", help="Batch mode: directory of .svg files")
    p.add_argument("--batch-limit", type=int, default=None, dest="batch_limit", help="Max documents in batch")
    p.add_argument("--workers", type=int, default=DEFAULT_BATCH_WORKERS, help="Batch mode: documents processed in parallel")
    args = p.parse_args(argv)
    if not args.input and not args.batch_dir:
        p.error("one of --input or --batch-dir is required")
    if args.seam_allowance < 0:
        p.error("--seam-allowance must be >= 0")
    if args.scale_percent <= 0:
        p.error("--scale-percent must be > 0")
    return args


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format="%(levelname)s %(name)s: %(message)s")
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()

    if args.batch_dir:
        from sewpager.core.batch import run_batch
        batch_dir = Path(args.batch_dir)
        if not batch_dir.is_absolute():
            batch_dir = repo_root / batch_dir
        out = run_batch(
            run_name=args.run_name,
            batch_dir=batch_dir,
            repo_root=repo_root,
            output_dir=args.output_dir,
            paper=args.paper,
            orientation=args.orientation,
            seam_allowance_mm=args.seam_allowance,
            scale_percent=args.scale_percent,
            marks=args.marks,
            limit=args.batch_limit,
            workers=args.workers,
        )
        print(out / "index.csv")
        return

    input_path = Path(args.input)
    if not input_path.is_absolute():
        input_path = repo_root / input_path
    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    try:
        layout, paths = run_document(
            input_path,
            report_dir,
            paper=args.paper,
            orientation=args.orientation,
            seam_allowance_mm=args.seam_allowance,
            scale_percent=args.scale_percent,
            marks=args.marks,
            debug_png=args.debug_png,
            run_name=args.run_name,
        )
    except PatternError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e

    print(report_dir / "layout.json")
    for p in paths:
        print(p)
    print("Pages:", len(layout.pages))


if __name__ == "__main__":
    main()
