#!/usr/bin/env python3
"""
Fit world_to_floor_params.json from control points.

control_points.csv columns: world_x, world_y, world_z, floor_x, floor_y
(one row per point surveyed both in the world scan and on the floor image).
Three or more points -> full affine; exactly two -> similarity (Umeyama).
"""

import numpy as np
import pandas as pd

from config.config import CONTROL_POINTS_PATH, DEFAULT_PROJECTION_MODE, PARAMS_PATH
from config.logger import setup_logger
from utils.json_utils import save_json
from utils.matrix_utils import (apply_affine, fit_affine_2d, meters_per_px_from_affine,
                                similarity_to_affine, umeyama_2d)
from utils.projection_utils import AffineProjectionParams, project_3d_to_2d

logger = setup_logger()

REQUIRED = ["world_x", "world_y", "world_z", "floor_x", "floor_y"]


def fit_params(control_points, projection_mode=DEFAULT_PROJECTION_MODE, world_units_per_meter=1.0):
    df = pd.DataFrame(control_points)
    missing = [c for c in REQUIRED if c not in df.columns]
    if missing:
        raise ValueError(f"Control points are missing columns: {missing}")
    df = df.dropna(subset=REQUIRED)
    if len(df) < 2:
        raise ValueError(f"Need at least 2 control points, got {len(df)}")

    uv = project_3d_to_2d(df[["world_x", "world_y", "world_z"]].to_numpy(), projection_mode)
    dst = df[["floor_x", "floor_y"]].to_numpy(dtype=float)
    if len(df) >= 3:
        M = fit_affine_2d(uv, dst)
        method = "affine"
    else:
        s, R, t = umeyama_2d(uv, dst, with_scaling=True)
        M = similarity_to_affine(s, R, t)
        method = "similarity"

    resid = np.linalg.norm(apply_affine(uv, M) - dst, axis=1)
    logger.info("Fitted %s from %d points; mean residual %.2f px, max %.2f px",
                method, len(df), float(resid.mean()), float(resid.max()))

    mpp = meters_per_px_from_affine(M, world_units_per_meter)
    return AffineProjectionParams(affine_M_2x3=M, meters_per_floor_px=mpp,
                                  projection_mode=projection_mode)


def main(cp_path=CONTROL_POINTS_PATH, out_path=PARAMS_PATH):
    df = pd.read_csv(cp_path)
    params = fit_params(df)
    save_json(params.to_dict(), out_path)
    logger.info("Saved projection params: %s", out_path)
    return params


if __name__ == "__main__":
    main()
