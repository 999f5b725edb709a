"""
Angle helpers shared by the heading normalizer and the guidance engine.
All angles are degrees, 0 = north, increasing clockwise.
"""

import math

CARDINALS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def normalize_deg(angle):
    """Wrap into [0, 360)."""
    ang = (float(angle) + 360.0) % 360.0
    # a tiny negative remainder rounds up to 360.0
    return 0.0 if ang == 360.0 else ang


def wrap_relative_deg(rel):
    """
    Wrap a heading difference into (-180, 180]. The +540 keeps the dividend
    non-negative for any rel >= -540 before the shift back.
    """
    rel = ((float(rel) + 540.0) % 360.0) - 180.0
    if rel == -180.0:
        rel = 180.0
    return rel


def bearing_deg(dx, dy):
    """
    Compass bearing of a floor-pixel displacement. Image y grows downward
    while north is up, hence -dy.
    """
    if dx == 0 and dy == 0:
        return 0.0
    ang = math.degrees(math.atan2(dx, -dy))
    return normalize_deg(ang)


def heading_to_cardinal(deg):
    idx = int((normalize_deg(deg) + 22.5) // 45) % 8
    return CARDINALS[idx]
