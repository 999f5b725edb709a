"""
Bearing & guidance: straight-line bearing from the start point to the
destination, turned into the angle an arrow must rotate (clockwise positive)
relative to the direction the device faces.
"""

import math
from dataclasses import dataclass
from typing import Optional

from navigation.errors import HeadingUnavailable, IncompleteState
from utils.orientation_utils import bearing_deg, heading_to_cardinal, wrap_relative_deg

# |relative angle| at or below this reads as "straight ahead" in status text
AHEAD_TOLERANCE_DEG = 10.0


@dataclass(frozen=True)
class Guidance:
    relative_angle_deg: float
    bearing_deg: float
    heading_deg: float
    distance_px: float
    distance_m: Optional[float] = None

    def as_dict(self):
        out = {
            "relative_angle_deg": self.relative_angle_deg,
            "bearing_deg": self.bearing_deg,
            "heading_deg": self.heading_deg,
            "distance_px": self.distance_px,
        }
        # no scale, no distance: never report a made-up number
        if self.distance_m is not None:
            out["distance_m"] = self.distance_m
        return out


def compute_guidance(start, dest, heading_deg, meters_per_px=None) -> Guidance:
    if start is None or dest is None:
        missing = [n for n, v in (("start", start), ("destination", dest)) if v is None]
        raise IncompleteState("cannot guide without " + " and ".join(missing))
    if heading_deg is None:
        raise HeadingUnavailable("no heading sample accepted yet")

    dx = dest.x - start.x
    dy = dest.y - start.y
    bearing = bearing_deg(dx, dy)
    rel = wrap_relative_deg(bearing - float(heading_deg))

    distance_px = math.hypot(dx, dy)
    distance_m = None
    if meters_per_px is not None:
        distance_m = distance_px * float(meters_per_px)

    return Guidance(
        relative_angle_deg=rel,
        bearing_deg=bearing,
        heading_deg=float(heading_deg),
        distance_px=distance_px,
        distance_m=distance_m,
    )


def describe(guidance):
    """Short status line for the presentation layer."""
    rel = guidance.relative_angle_deg
    if abs(rel) <= AHEAD_TOLERANCE_DEG:
        turn = "Go straight ahead"
    elif abs(rel) >= 180.0 - AHEAD_TOLERANCE_DEG:
        turn = "Turn around"
    elif rel > 0:
        turn = f"Turn right {rel:.0f}°"
    else:
        turn = f"Turn left {-rel:.0f}°"
    text = f"{turn} (bearing {guidance.bearing_deg:.0f}° {heading_to_cardinal(guidance.bearing_deg)})"
    if guidance.distance_m is not None:
        text += f", {guidance.distance_m:.1f} m to go"
    return text
