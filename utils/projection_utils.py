"""
World -> floor projection: pick two world axes (projection mode) and apply a
stored 2x3 affine matrix to land in floor-plan pixels.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from config.config import DEFAULT_PROJECTION_MODE
from config.logger import setup_logger
from floor.geometry import Point2D
from navigation.errors import ConfigurationMissing
from utils.json_utils import load_json_or_data
from utils.matrix_utils import parse_affine_matrix

logger = setup_logger("compass_nav.projection")

_AXIS = {"x": 0, "y": 1, "z": 2}

# named modes -> signed axis pairs
NAMED_MODES = {
    "FRONT_XZ": "x,z",
    "FRONT_XY": "x,y",
    "SIDE_ZY": "z,y",
}


def parse_projection_mode(mode):
    """
    Return ((axis_u, sign_u), (axis_v, sign_v)) for a named mode such as
    "FRONT_XZ" or an axis string such as "x,-z".
    """
    axes = NAMED_MODES.get(str(mode).upper(), str(mode))
    parts = [s.strip().lower() for s in axes.split(",")]
    if len(parts) != 2:
        raise ValueError("Unknown projection: " + str(mode))
    out = []
    for part in parts:
        sign = 1.0
        if part.startswith("-"):
            sign = -1.0; part = part[1:]
        if part not in _AXIS:
            raise ValueError("Unknown projection: " + str(mode))
        out.append((_AXIS[part], sign))
    if out[0][0] == out[1][0]:
        raise ValueError("Projection uses the same axis twice: " + str(mode))
    return tuple(out)


def project_3d_to_2d(positions3d, projection):
    positions3d = np.array(positions3d, dtype=float)
    if positions3d.ndim == 1:
        positions3d = positions3d.reshape(1, 3)
    (iu, su), (iv, sv) = parse_projection_mode(projection)
    return np.column_stack([su * positions3d[:, iu], sv * positions3d[:, iv]])


@dataclass(frozen=True, eq=False)
class AffineProjectionParams:
    affine_M_2x3: np.ndarray
    meters_per_floor_px: Optional[float] = None
    projection_mode: str = DEFAULT_PROJECTION_MODE

    def __post_init__(self):
        M = np.array(self.affine_M_2x3, dtype=float)
        if M.shape != (2, 3):
            raise ValueError(f"affine_M_2x3 must be 2x3, got shape {M.shape}")
        M.setflags(write=False)
        object.__setattr__(self, "affine_M_2x3", M)
        parse_projection_mode(self.projection_mode)
        if self.meters_per_floor_px is not None:
            mpp = float(self.meters_per_floor_px)
            if not mpp > 0:
                raise ValueError(f"meters_per_floor_px must be positive, got {mpp}")
            object.__setattr__(self, "meters_per_floor_px", mpp)

    def to_dict(self):
        out = {"affine_M_2x3": self.affine_M_2x3.tolist(), "projection_mode": self.projection_mode}
        if self.meters_per_floor_px is not None:
            out["meters_per_floor_px"] = self.meters_per_floor_px
        return out


def load_projection_params(src):
    raw = load_json_or_data(src)
    if not isinstance(raw, dict):
        raise ValueError("Projection parameters must be a JSON object")
    M = parse_affine_matrix(raw.get("affine_M_2x3"))
    if M is None:
        raise ValueError("Projection parameters have no usable affine_M_2x3")
    params = AffineProjectionParams(
        affine_M_2x3=M,
        meters_per_floor_px=raw.get("meters_per_floor_px"),
        projection_mode=raw.get("projection_mode") or DEFAULT_PROJECTION_MODE,
    )
    logger.info("Loaded world->floor params (mode=%s, m/px=%s)",
                params.projection_mode, params.meters_per_floor_px)
    return params


class WorldToFloorProjector:
    """Holds the loaded parameters; project() fails until they exist."""

    def __init__(self, params=None):
        self.params = params

    @property
    def loaded(self):
        return self.params is not None

    @property
    def meters_per_px(self):
        return self.params.meters_per_floor_px if self.params is not None else None

    def _require(self):
        if self.params is None:
            raise ConfigurationMissing("world->floor projection parameters are not loaded")
        return self.params

    def project(self, world_x, world_y, world_z):
        params = self._require()
        M = params.affine_M_2x3
        (iu, su), (iv, sv) = parse_projection_mode(params.projection_mode)
        world = (float(world_x), float(world_y), float(world_z))
        u = su * world[iu]; v = sv * world[iv]
        px = M[0, 0] * u + M[0, 1] * v + M[0, 2]
        py = M[1, 0] * u + M[1, 1] * v + M[1, 2]
        return Point2D(float(px), float(py))

    def project_many(self, positions3d):
        params = self._require()
        uv = project_3d_to_2d(positions3d, params.projection_mode)
        M = params.affine_M_2x3
        return uv @ M[:, :2].T + M[:, 2]
