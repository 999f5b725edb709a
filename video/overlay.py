"""
Camera-frame overlay: a forward-pointing arrow icon rotated by the relative
angle (clockwise positive) and alpha-blended onto a BGR frame with status text.
"""

import cv2
import numpy as np

from config.config import ARROW_COLOR_BGR, ARROW_SIZE_PX


def make_arrow_icon(size=ARROW_SIZE_PX, color_bgr=ARROW_COLOR_BGR):
    """BGRA square with an upward arrow on a transparent background."""
    icon = np.zeros((size, size, 4), dtype=np.uint8)
    s = size
    pts = np.array([
        [s * 0.5, s * 0.08],
        [s * 0.85, s * 0.5],
        [s * 0.62, s * 0.5],
        [s * 0.62, s * 0.92],
        [s * 0.38, s * 0.92],
        [s * 0.38, s * 0.5],
        [s * 0.15, s * 0.5],
    ], dtype=np.int32)
    cv2.fillPoly(icon, [pts], (int(color_bgr[0]), int(color_bgr[1]), int(color_bgr[2]), 255))
    return icon


def load_icon_bgra(path):
    arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if arr is None:
        raise RuntimeError(f"Cannot load image: {path}")
    if arr.ndim == 2:
        arr = cv2.cvtColor(arr, cv2.COLOR_GRAY2BGRA)
    if arr.shape[2] == 3:
        arr = cv2.cvtColor(arr, cv2.COLOR_BGR2BGRA)
    return arr


def rotate_icon(icon_bgra, relative_angle_deg, interpolation=cv2.INTER_LINEAR):
    """
    Rotate clockwise by relative_angle_deg about the icon centre, same size.
    OpenCV angles are counter-clockwise, hence the negation.
    """
    h, w = icon_bgra.shape[:2]
    center = ((w - 1) / 2.0, (h - 1) / 2.0)
    Mrot = cv2.getRotationMatrix2D(center, -float(relative_angle_deg), 1.0)
    return cv2.warpAffine(icon_bgra, Mrot, (w, h), flags=interpolation,
                          borderMode=cv2.BORDER_CONSTANT, borderValue=(0, 0, 0, 0))


def blend_icon(frame_bgr, icon_bgra, center_xy):
    """Alpha-blend icon onto frame (in place) centred at center_xy, clipped to the frame."""
    fh, fw = frame_bgr.shape[:2]
    ih, iw = icon_bgra.shape[:2]
    x0 = int(round(center_xy[0] - iw / 2.0)); y0 = int(round(center_xy[1] - ih / 2.0))
    fx0, fy0 = max(0, x0), max(0, y0)
    fx1, fy1 = min(fw, x0 + iw), min(fh, y0 + ih)
    if fx0 >= fx1 or fy0 >= fy1:
        return frame_bgr
    icon = icon_bgra[fy0 - y0:fy1 - y0, fx0 - x0:fx1 - x0]
    alpha = icon[:, :, 3:4].astype(np.float32) / 255.0
    roi = frame_bgr[fy0:fy1, fx0:fx1].astype(np.float32)
    frame_bgr[fy0:fy1, fx0:fx1] = (alpha * icon[:, :, :3] + (1.0 - alpha) * roi).astype(np.uint8)
    return frame_bgr


def draw_guidance(frame_bgr, guidance, status_text=None, icon_bgra=None):
    """Return a copy of the frame with the rotated arrow and the status line."""
    out = frame_bgr.copy()
    fh, fw = out.shape[:2]
    if guidance is not None:
        icon = icon_bgra if icon_bgra is not None else make_arrow_icon(min(ARROW_SIZE_PX, fw, fh))
        rotated = rotate_icon(icon, guidance.relative_angle_deg)
        blend_icon(out, rotated, (fw / 2.0, fh / 2.0))
    if status_text:
        # Hershey fonts are ASCII only
        status_text = status_text.replace("\u00b0", " deg")
        cv2.putText(out, status_text, (10, fh - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                    (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(out, status_text, (10, fh - 12), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                    (255, 255, 255), 1, cv2.LINE_AA)
    return out
