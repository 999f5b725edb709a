"""
Plotting helper for the floor plan with the navigation overlay (plot_navigation).
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Polygon as MplPolygon

from config.logger import setup_logger
from floor.geometry import floor_bounds, is_navigable

logger = setup_logger("compass_nav.plot")

SELECTED_FACE = "#0096ff"
SELECTED_EDGE = "#007aff"
ROOM_EDGE = (0.0, 0.0, 0.0, 0.4)
START_COLOR = "#ff3b30"
DEST_COLOR = "#34c759"


def plot_navigation(rooms, floor_image=None, selected_room_id=None, start=None, dest=None,
                    guidance=None, out_path=None, title=None):
    """
    Draw the floor image (if any), every room outline (selected one filled),
    the start marker, the destination centroid and a start->destination
    arrow. Coordinates are floor pixels, y down. Returns the figure.
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    if floor_image is not None:
        img = np.asarray(floor_image)
        h, w = img.shape[:2]
        ax.imshow(img, extent=(0, w, h, 0))
        ax.set_xlim(0, w); ax.set_ylim(h, 0)
    else:
        try:
            fmin, fmax = floor_bounds(rooms)
            pad = max(1.0, float(np.max(fmax - fmin))) * 0.05
            ax.set_xlim(fmin[0] - pad, fmax[0] + pad)
            ax.set_ylim(fmax[1] + pad, fmin[1] - pad)
        except RuntimeError:
            logger.warning("No room polygons and no floor image; empty plot")

    for room in rooms:
        if not is_navigable(room):
            continue
        poly = room.as_array()
        if room.id == selected_room_id:
            patch = MplPolygon(poly, closed=True, facecolor=SELECTED_FACE, alpha=0.25,
                               edgecolor=SELECTED_EDGE, linewidth=2)
        else:
            patch = MplPolygon(poly, closed=True, fill=False, edgecolor=ROOM_EDGE, linewidth=2)
        ax.add_patch(patch)
        cx, cy = poly[:, 0].mean(), poly[:, 1].mean()
        ax.text(cx, cy, room.label, fontsize=8, ha="center", va="center")

    if start is not None:
        ax.plot(start.x, start.y, "o", markersize=10, color=START_COLOR,
                markeredgecolor="white", markeredgewidth=2, zorder=40)
    if dest is not None:
        ax.plot(dest.x, dest.y, "o", markersize=8, color=DEST_COLOR, zorder=40)
    if start is not None and dest is not None:
        ax.annotate("", xy=(dest.x, dest.y), xytext=(start.x, start.y),
                    arrowprops=dict(arrowstyle="->", color=START_COLOR, lw=1.5), zorder=35)

    ax.set_aspect("equal", adjustable="box")
    if title is None and guidance is not None:
        title = f"relative {guidance.relative_angle_deg:+.0f}°, bearing {guidance.bearing_deg:.0f}°"
    if title:
        ax.set_title(title)

    if out_path is not None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(str(out_path), dpi=150, bbox_inches="tight")
        logger.info("Saved floor plot: %s", out_path)
    return fig
