"""
Floor loaders: room polygons (load_rooms) and the floor image (load_floor_image).
"""

from pathlib import Path

import cv2

from config.logger import setup_logger
from floor.geometry import Point2D, Room
from utils.json_utils import load_json_or_data

logger = setup_logger("compass_nav.floor")


def _parse_point(p):
    if isinstance(p, dict):
        return Point2D(float(p["x"]), float(p["y"]))
    if isinstance(p, (list, tuple)) and len(p) >= 2:
        return Point2D(float(p[0]), float(p[1]))
    raise ValueError(f"Unrecognised vertex: {p!r}")


def _parse_points(raw):
    if not raw:
        return ()
    # GeoJSON-like rings arrive wrapped once more: [[[x, y], ...]]
    if isinstance(raw[0], list) and raw[0] and isinstance(raw[0][0], list):
        raw = raw[0]
    return tuple(_parse_point(p) for p in raw)


def _room_records(data):
    """Yield (fallback_id, record) whatever shape the rooms file has."""
    if isinstance(data, dict) and "rooms" in data:
        data = data["rooms"]
    if isinstance(data, list):
        for idx, rec in enumerate(data):
            yield idx, rec
    elif isinstance(data, dict):
        for key, rec in data.items():
            yield key, rec
    else:
        raise ValueError(f"Unsupported rooms data of type {type(data).__name__}")


def load_rooms(src):
    """
    Load rooms from a path or parsed JSON. Accepts {"rooms": [...]}, a bare
    list, or a mapping keyed by room id. Rooms without points are kept.
    """
    rooms = []
    seen = set()
    for fallback_id, rec in _room_records(load_json_or_data(src)):
        if not isinstance(rec, dict):
            raise ValueError(f"Room record {fallback_id!r} is not an object")
        room_id = int(rec.get("id", fallback_id))
        if room_id in seen:
            raise ValueError(f"Duplicate room id {room_id}")
        seen.add(room_id)
        points = _parse_points(rec.get("points") or [])
        if not points:
            logger.warning("Room %s has no points; it will not be selectable", room_id)
        elif len(points) < 3:
            logger.warning("Room %s has only %d vertices", room_id, len(points))
        rooms.append(Room(id=room_id, name=rec.get("name"), points=points))
    logger.info("Loaded %d rooms", len(rooms))
    return rooms


def load_floor_image(path):
    """Floor image as an RGB array; its width/height define the pixel space."""
    path = Path(path)
    arr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if arr is None:
        raise FileNotFoundError(f"Cannot load floor image: {path}")
    return cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
