"""
Simple JSON helpers used by the loaders and the calibration script.
"""

import json
from pathlib import Path


def load_json(path):
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(obj, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)
    return path


def load_json_or_data(src):
    """Accept an already-parsed object or a path to a JSON file."""
    if isinstance(src, (str, Path)):
        return load_json(src)
    return src
