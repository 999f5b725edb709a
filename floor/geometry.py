"""
Floor-plan geometry: pixel points, room polygons and the vertex-mean centroid.

Floor coordinates are image pixels with the origin at the top-left corner and
y increasing downward. "Up" on the image is north.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from matplotlib.path import Path as MplPath


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def as_tuple(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class Room:
    id: int
    name: Optional[str] = None
    points: tuple = field(default_factory=tuple)

    @property
    def label(self):
        return self.name or f"Room {self.id}"

    def as_array(self):
        return np.array([p.as_tuple() for p in self.points], dtype=float).reshape(-1, 2)


def is_navigable(room):
    return len(room.points) > 0


def centroid_of(room):
    """
    Unweighted mean of the polygon's vertices (not the area centroid).
    Each coordinate is averaged independently.
    """
    if not is_navigable(room):
        raise ValueError(f"room {room.id} has no points; cannot compute a centroid")
    sx = 0.0; sy = 0.0
    for p in room.points:
        sx += p.x; sy += p.y
    n = len(room.points)
    return Point2D(sx / n, sy / n)


def find_room(rooms, room_id):
    for room in rooms:
        if room.id == room_id:
            return room
    return None


def room_at(rooms, point):
    """First room whose polygon contains `point`, or None."""
    for room in rooms:
        if len(room.points) < 3:
            continue
        if MplPath(room.as_array()).contains_point(point.as_tuple()):
            return room
    return None


def floor_bounds(rooms):
    pts = [room.as_array() for room in rooms if is_navigable(room)]
    if not pts:
        raise RuntimeError("No room polygons to compute floor bounds from")
    all_pts = np.vstack(pts)
    return all_pts.min(axis=0), all_pts.max(axis=0)


def display_to_floor(x, y, display_size, floor_size, display_origin=(0.0, 0.0)):
    """
    Map a point clicked on a scaled display of the floor image back to floor
    pixels. Sizes are (width, height).
    """
    disp_w, disp_h = display_size
    floor_w, floor_h = floor_size
    if disp_w <= 0 or disp_h <= 0:
        raise ValueError(f"Invalid display size: {display_size}")
    sx = float(floor_w) / float(disp_w); sy = float(floor_h) / float(disp_h)
    return Point2D((x - display_origin[0]) * sx, (y - display_origin[1]) * sy)
