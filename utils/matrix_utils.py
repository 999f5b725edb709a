"""
Affine matrix parsing and fitting helpers (2x3 world->floor maps, Umeyama similarity).
"""

import math

import numpy as np


def parse_affine_matrix(raw):
    """
    Parse common 2x3 affine formats (nested 2x3, flat len 6, 3x3 homogeneous
    with last row [0, 0, 1]). Return a 2x3 float array or None.
    """
    if raw is None:
        return None
    try:
        arr = np.array(raw, dtype=float)
    except (TypeError, ValueError):
        return None

    if arr.shape == (2, 3):
        return arr
    if arr.size == 6:
        return arr.reshape(2, 3)
    if arr.shape == (3, 3) or arr.size == 9:
        M = arr.reshape(3, 3)
        if not np.allclose(M[2], [0.0, 0.0, 1.0]):
            return None
        return M[:2, :].copy()
    return None


def apply_affine(points2d, M):
    pts = np.asarray(points2d, dtype=float).reshape(-1, 2)
    M = np.asarray(M, dtype=float)
    return pts @ M[:, :2].T + M[:, 2]


def umeyama_2d(src, dst, with_scaling=True):
    src = np.array(src, dtype=float); dst = np.array(dst, dtype=float)
    if src.shape != dst.shape or src.ndim != 2 or src.shape[1] != 2:
        raise ValueError("src and dst must both be Nx2 arrays of the same shape")
    N = src.shape[0]
    mu_src = src.mean(axis=0); mu_dst = dst.mean(axis=0)
    src_c = src - mu_src; dst_c = dst - mu_dst
    cov = (dst_c.T @ src_c) / N
    U, D, Vt = np.linalg.svd(cov)
    S = np.eye(2)
    if np.linalg.det(U) * np.linalg.det(Vt) < 0:
        S[1, 1] = -1
    R = U @ S @ Vt
    if with_scaling:
        var_src = (src_c**2).sum() / N
        if var_src == 0:
            raise ValueError("Control points are all identical; cannot fit a scale")
        s = 1.0 / var_src * np.trace(np.diag(D) @ S)
    else:
        s = 1.0
    t = mu_dst - s * R @ mu_src
    return s, R, t


def similarity_to_affine(s, R, t):
    M = np.zeros((2, 3), dtype=float)
    M[:, :2] = s * np.asarray(R, dtype=float)
    M[:, 2] = np.asarray(t, dtype=float)
    return M


def fit_affine_2d(src, dst):
    """
    Least-squares 2x3 affine mapping src (Nx2) onto dst (Nx2). Needs at least
    three points that are not collinear.
    """
    src = np.array(src, dtype=float); dst = np.array(dst, dtype=float)
    if src.shape != dst.shape or src.ndim != 2 or src.shape[1] != 2:
        raise ValueError("src and dst must both be Nx2 arrays of the same shape")
    if src.shape[0] < 3:
        raise ValueError(f"An affine fit needs >= 3 control points, got {src.shape[0]}")
    A = np.column_stack([src, np.ones(src.shape[0])])
    sol, _, rank, _ = np.linalg.lstsq(A, dst, rcond=None)
    if rank < 3:
        raise ValueError("Control points are collinear; affine fit is degenerate")
    return sol.T


def meters_per_px_from_affine(M, world_units_per_meter=1.0):
    """
    Floor-pixel size in meters implied by the linear part of a world->floor
    affine (pixels per world unit = sqrt(|det A|)).
    """
    A = np.asarray(M, dtype=float)[:, :2]
    det = abs(float(np.linalg.det(A)))
    if det == 0:
        raise ValueError("Affine matrix is singular; no pixel scale")
    px_per_unit = math.sqrt(det)
    return 1.0 / (px_per_unit * float(world_units_per_meter))
