# sewpager/core/render.py
"""
Matplotlib PNG rendering of page layouts for debugging placement:
page border, reserved (margin-expanded) rectangles, cut lines and sewing lines.
"""

from __future__ import annotations

import warnings
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from sewpager.core.config import RENDER_DPI, RENDER_PX_PER_MM
from sewpager.core.types import Page, PatternPiece, Point


def _new_fig(page: Page, px_per_mm: float) -> tuple[plt.Figure, plt.Axes]:
    w_px = max(1.0, page.width * px_per_mm)
    h_px = max(1.0, page.height * px_per_mm)
    fig = plt.figure(figsize=(w_px / RENDER_DPI, h_px / RENDER_DPI), dpi=RENDER_DPI, constrained_layout=False)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.axis("off")
    return fig, ax


def _closed_xy(points: tuple[Point, ...], tx: float, ty: float) -> np.ndarray:
    xy = np.array(points + (points[0],), dtype=float)
    xy[:, 0] += tx
    xy[:, 1] += ty
    return xy


def render_page_layout(
    page: Page,
    pieces_by_id: dict[str, PatternPiece],
    output_path: str | Path,
    px_per_mm: float = RENDER_PX_PER_MM,
) -> None:
    """Render one page. Y axis points down to match document coordinates."""
    fig, ax = _new_fig(page, px_per_mm)
    ax.add_patch(Rectangle((0, 0), page.width, page.height, fill=False, edgecolor="black", linewidth=1))

    for rect in page.occupancy:
        ax.add_patch(Rectangle(
            (rect.x, rect.y), rect.width, rect.height,
            facecolor="none", edgecolor="orange", hatch="//", linewidth=0.5, alpha=0.5,
        ))

    for placement in page.placements:
        piece = pieces_by_id[placement.piece_id]
        tx = placement.dx - piece.bbox.x
        ty = placement.dy - piece.bbox.y
        for outline in piece.all_outlines():
            if outline.allowance is not None:
                xy = _closed_xy(outline.allowance, tx, ty)
                ax.fill(xy[:, 0], xy[:, 1], facecolor="lightblue", edgecolor="navy", linewidth=1)
            xy = _closed_xy(outline.points, tx, ty)
            style = "--" if outline.allowance is not None else "-"
            ax.plot(xy[:, 0], xy[:, 1], linestyle=style, color="black", linewidth=0.8)
        ax.text(
            placement.dx + piece.bbox.width / 2, placement.dy + piece.bbox.height / 2, piece.id,
            ha="center", va="center", fontsize=6,
        )

    ax.set_xlim(0, page.width)
    ax.set_ylim(page.height, 0)
    ax.set_aspect("equal", adjustable="box")
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
        fig.savefig(output_path, dpi=RENDER_DPI, facecolor="white")
    plt.close(fig)
