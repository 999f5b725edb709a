#!/usr/bin/env python3
"""
Entry point that wires everything together: load the floor, replay an
orientation log through a navigation session, save the guidance trace and plots.
"""

import sys

import numpy as np
import pandas as pd
import cv2

from config.config import *
from config.logger import setup_logger
from floor.floor_loader import load_rooms, load_floor_image
from floor.geometry import find_room, room_at
from floor.plotter import plot_navigation
from navigation.session import NavigationSession
from utils.projection_utils import WorldToFloorProjector, load_projection_params
from video.overlay import draw_guidance, load_icon_bgra

logger = setup_logger()

ORIENTATION_COLUMNS = ["webkitCompassHeading", "absolute", "alpha"]


def load_orientation_log(path):
    """
    CSV with any of the columns webkitCompassHeading, absolute, alpha (one
    row per event). Empty cells become missing fields.
    """
    df = pd.read_csv(path)
    keep = [c for c in ORIENTATION_COLUMNS if c in df.columns]
    if not keep:
        raise RuntimeError(f"No orientation columns in {path}; expected any of {ORIENTATION_COLUMNS}")
    samples = []
    for rec in df[keep].to_dict(orient="records"):
        samples.append({k: v for k, v in rec.items() if not (isinstance(v, float) and np.isnan(v))})
    return samples


def replay(session, samples):
    """Feed samples in order and collect one trace row per event."""
    rows = []
    for idx, raw in enumerate(samples):
        guidance = session.on_orientation(raw)
        row = {"event": idx, "status": session.status.value, "heading_deg": session.state.heading_deg}
        if guidance is not None:
            row.update(guidance.as_dict())
        row["status_text"] = session.status_text()
        rows.append(row)
    return pd.DataFrame(rows)


def build_session():
    rooms = load_rooms(ROOMS_PATH)
    projector = WorldToFloorProjector()
    if PARAMS_PATH.exists():
        projector = WorldToFloorProjector(load_projection_params(PARAMS_PATH))
    else:
        logger.warning("Projection params not found at %s -> no distances", PARAMS_PATH)
    session = NavigationSession(rooms, projector=projector)
    if DEST_ROOM_ID is not None:
        session.select_room(DEST_ROOM_ID)
    session.set_start(*START_POS)
    return session


def main():
    logger.info("Loading rooms and projection parameters...")
    session = build_session()
    room = find_room(session.rooms, session.state.selected_room_id)
    here = room_at(session.rooms, session.state.start_pos)
    logger.info("Start %s (in %s) -> destination %s",
                session.state.start_pos, here.label if here else "no room",
                room.label if room else None)

    if not ORIENTATION_LOG_PATH.exists():
        logger.warning("Orientation log not found at %s -> nothing to replay", ORIENTATION_LOG_PATH)
        return session, pd.DataFrame()
    samples = load_orientation_log(ORIENTATION_LOG_PATH)
    trace = replay(session, samples)
    logger.info("Replayed %d orientation events; final status %s", len(trace), session.status.value)

    OUT_DATA_DIR.mkdir(parents=True, exist_ok=True)
    trace.to_csv(OUT_GUIDANCE_CSV, index=False)
    logger.info("Saved guidance trace: %s", OUT_GUIDANCE_CSV)
    return session, trace


if __name__ == "__main__":
    session, trace = main()
    if session.guidance is None:
        print("No guidance computed:", session.status_text())

    floor_image = None
    if FLOOR_IMAGE_PATH.exists():
        floor_image = load_floor_image(FLOOR_IMAGE_PATH)
    try:
        plot_navigation(session.rooms, floor_image=floor_image,
                        selected_room_id=session.state.selected_room_id,
                        start=session.state.start_pos, dest=session.state.dest_pos,
                        guidance=session.guidance, out_path=OUT_FLOOR_PNG)
    except (OSError, ValueError) as e:
        print("Warning: plotting failed:", e)

    if CAMERA_FRAME_PATH.exists():
        frame = cv2.imread(str(CAMERA_FRAME_PATH), cv2.IMREAD_COLOR)
        icon = load_icon_bgra(ARROW_ICON_PATH) if ARROW_ICON_PATH else None
        if frame is not None:
            overlay = draw_guidance(frame, session.guidance, session.status_text(), icon_bgra=icon)
            cv2.imwrite(str(OUT_OVERLAY_PNG), overlay)
            print("Saved overlay:", OUT_OVERLAY_PNG)

    print("Done.")
    sys.exit(0)
