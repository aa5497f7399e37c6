# sewpager/core/config.py
"""
Central configuration for pattern pagination.
All tunable values live here; no magic numbers in other modules.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
REPORTS_DIR: str = "reports"

# ----- Offset engine -----
QUANTISE_SCALE: float = 1000.0
"""Coordinates are multiplied by this and rounded to integers before offsetting (1 unit = 1 micron)."""

MITER_LIMIT: float = 2.0
"""Miter length limit as a multiple of the offset distance; longer corners are squared off."""

ARC_TOLERANCE_MM: float = 0.25
"""Arc approximation tolerance (mm). Only used by round joins."""

# ----- Placement -----
DEFAULT_MARGIN_MM: float = 2.0
"""Spacing reserved right and below every placed piece without seam allowance."""

COARSE_STEP_MM: float = 10.0
"""Grid step of the first position-search pass."""

FINE_STEP_MM: float = 1.0
"""Grid step of the second position-search pass (only if the coarse pass finds nothing)."""

GRID_EPSILON: float = 1e-9
"""Slack when comparing the last grid coordinate against the search limit."""

# ----- Paper -----
PAPER_SIZES_MM: dict[str, tuple[float, float]] = {
    "a4": (210.0, 297.0),
    "a3": (297.0, 420.0),
    "b4": (257.0, 364.0),
    "b5": (182.0, 257.0),
}
"""Portrait (width, height) of each supported paper in mm."""

PRINT_MARGIN_MM: float = 10.0
"""Unprintable margin on each sheet edge."""

DEFAULT_PAPER: str = "a4"
DEFAULT_ORIENTATION: str = "portrait"

# ----- Input document -----
OUTLINE_CLASS: str = "seam"
"""Class name marking sewing-line paths inside a pattern group."""

ALLOWANCE_CLASS: str = "seam-allowance"
"""Class name given to generated cut-line paths."""

DEFAULT_SEAM_ALLOWANCE_MM: float = 0.0
DEFAULT_SCALE_PERCENT: float = 100.0

# ----- Page output -----
PAGE_MARK_SIZE_MM: float = 5.0
"""Half-length of the corner crosses drawn with page marks."""

PAGE_LABEL_OFFSET_MM: float = 5.0
"""Distance of the page-number text baseline above the bottom edge."""

PAGE_LABEL_FONT_SIZE: float = 8.0
OUTLINE_DASH: str = "2,2"
ALLOWANCE_STROKE_WIDTH: str = "0.5"

# ----- Tests / comparisons -----
TOLERANCE_MM: float = 0.01
"""Coordinate tolerance for geometric comparisons."""

# ----- Rendering -----
RENDER_DPI: int = 100
RENDER_PX_PER_MM: float = 3.0

# ----- Batch -----
DEFAULT_BATCH_WORKERS: int = 1

# ----- Logging -----
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
"""Root log level used by the CLI. Set env LOG_LEVEL=DEBUG for development."""
