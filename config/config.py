"""
Configuration file to control paths, sensor timing, and rendering parameters.
"""

from pathlib import Path

# --------------------- CONFIG ---------------------
DATA_DIR = Path("input_data")
FLOOR_IMAGE_PATH = DATA_DIR / "Floor6.png"
ROOMS_PATH = DATA_DIR / "rooms_manual.json"
PARAMS_PATH = DATA_DIR / "world_to_floor_params.json"
ORIENTATION_LOG_PATH = DATA_DIR / "orientation_log.csv"
CAMERA_FRAME_PATH = DATA_DIR / "camera_frame.jpg"
CONTROL_POINTS_PATH = DATA_DIR / "control_points.csv"

OUT_DATA_DIR = Path("output_data")
OUT_GUIDANCE_CSV = OUT_DATA_DIR / "guidance_trace.csv"
OUT_FLOOR_PNG = OUT_DATA_DIR / "floor_navigation.png"
OUT_OVERLAY_PNG = OUT_DATA_DIR / "camera_overlay.png"

# start position (floor px) and destination room used by main.py replay
START_POS = (120.0, 480.0)
DEST_ROOM_ID = None  # None -> first navigable room

DEFAULT_PROJECTION_MODE = "FRONT_XZ"

# no heading within this many seconds after subscribing -> sensor is silent
SENSOR_TIMEOUT_S = 3.0

ABSOLUTE_ORIENTATION_EVENT = "deviceorientationabsolute"
ORIENTATION_EVENT = "deviceorientation"

ARROW_ICON_PATH = None  # None -> draw a default arrow
ARROW_SIZE_PX = 160
ARROW_COLOR_BGR = (0, 122, 255)

LOG_LEVEL = "INFO"
VERBOSE = False
