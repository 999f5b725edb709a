"""
Navigation session: the single owner of NavigationState.

The three event streams (destination selection, start tap, orientation
samples) all go through one NavigationSession instance on one event loop.
Each event recomputes the affected value synchronously and notifies the
listeners with the new status and guidance.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config.config import SENSOR_TIMEOUT_S
from config.logger import setup_logger
from floor.geometry import Point2D, centroid_of, display_to_floor, find_room, is_navigable
from navigation.errors import (
    HeadingUnavailable,
    IncompleteState,
    NoUsableHeadingField,
    PermissionDenied,
    SensorSilent,
    SensorUnsupported,
    UnknownRoom,
)
from navigation.guidance import compute_guidance, describe
from sensors.heading import HeadingNormalizer
from sensors.subscription import OrientationSubscription

logger = setup_logger("compass_nav.session")


class NavStatus(str, Enum):
    WAITING_FOR_POSITION = "waiting_for_position"
    WAITING_FOR_HEADING = "waiting_for_heading"
    GUIDING = "guiding"
    LOW_CONFIDENCE = "low_confidence"
    NO_HEADING_DATA = "no_heading_data"
    SENSOR_UNSUPPORTED = "sensor_unsupported"
    PERMISSION_DENIED = "permission_denied"
    SENSOR_SILENT = "sensor_silent"


STATUS_TEXT = {
    NavStatus.WAITING_FOR_POSITION: "Tap the floor plan to set your position and pick a destination room.",
    NavStatus.WAITING_FOR_HEADING: "Waiting for the compass...",
    NavStatus.GUIDING: "Sensor on, follow the arrow.",
    NavStatus.LOW_CONFIDENCE: "Compass not calibrated, the arrow may be off.",
    NavStatus.NO_HEADING_DATA: "The sensor sent no heading data.",
    NavStatus.SENSOR_UNSUPPORTED: "This device has no orientation sensor.",
    NavStatus.PERMISSION_DENIED: "Orientation access was denied.",
    NavStatus.SENSOR_SILENT: "No orientation data received; check sensor settings.",
}


@dataclass
class NavigationState:
    start_pos: Optional[Point2D] = None
    dest_pos: Optional[Point2D] = None
    selected_room_id: Optional[int] = None
    heading_deg: Optional[float] = None


class NavigationSession:
    def __init__(self, rooms, projector=None, select_first=True):
        self.rooms = list(rooms)
        self.projector = projector
        self.state = NavigationState()
        self.heading = HeadingNormalizer()
        self.status = NavStatus.WAITING_FOR_POSITION
        self.guidance = None
        self.subscription = None
        self._listeners = []
        self._sensor_failure = None
        if select_first:
            first = next((r for r in self.rooms if is_navigable(r)), None)
            if first is not None:
                self.select_room(first.id)

    @property
    def meters_per_px(self):
        return self.projector.meters_per_px if self.projector is not None else None

    def add_listener(self, callback):
        """callback(status, guidance_or_None) after every recompute."""
        self._listeners.append(callback)

    def _notify(self):
        for cb in self._listeners:
            cb(self.status, self.guidance)

    # ---------------- events ----------------

    def select_room(self, room_id):
        room = find_room(self.rooms, room_id)
        if room is None:
            raise UnknownRoom(f"no room with id {room_id}")
        self.state.selected_room_id = room.id
        if is_navigable(room):
            self.state.dest_pos = centroid_of(room)
            logger.info("Destination %s -> centroid (%.1f, %.1f)", room.label,
                        self.state.dest_pos.x, self.state.dest_pos.y)
        else:
            self.state.dest_pos = None
            logger.warning("Room %s has no points; no destination set", room.id)
        return self.recompute()

    def set_start(self, x, y):
        self.state.start_pos = Point2D(float(x), float(y))
        return self.recompute()

    def set_start_from_display(self, x, y, display_size, floor_size, display_origin=(0.0, 0.0)):
        p = display_to_floor(x, y, display_size, floor_size, display_origin)
        return self.set_start(p.x, p.y)

    def on_orientation(self, raw):
        """Feed one raw orientation sample. Returns the new guidance or None."""
        try:
            reading = self.heading.accept(raw)
        except NoUsableHeadingField:
            self.status = NavStatus.NO_HEADING_DATA
            self._notify()
            return None
        self.state.heading_deg = reading.heading_deg
        self._sensor_failure = None
        return self.recompute()

    # ---------------- guidance ----------------

    def current_guidance(self):
        """Raises IncompleteState / HeadingUnavailable instead of defaulting."""
        return compute_guidance(self.state.start_pos, self.state.dest_pos,
                                self.state.heading_deg, self.meters_per_px)

    def recompute(self):
        try:
            self.guidance = self.current_guidance()
        except IncompleteState:
            self.guidance = None
            self.status = NavStatus.WAITING_FOR_POSITION
        except HeadingUnavailable:
            self.guidance = None
            self.status = self._sensor_failure or NavStatus.WAITING_FOR_HEADING
        else:
            reading = self.heading.current
            if reading is not None and not reading.reliable:
                self.status = NavStatus.LOW_CONFIDENCE
            else:
                self.status = NavStatus.GUIDING
        self._notify()
        return self.guidance

    def _fail_sensor(self, status, err):
        logger.warning("Orientation sensor unavailable: %s", err)
        self._sensor_failure = status
        if self.state.heading_deg is None or status != NavStatus.SENSOR_SILENT:
            self.status = status
        self._notify()

    # ---------------- session start ----------------

    def start_navigation(self, platform, timeout_s=SENSOR_TIMEOUT_S):
        """
        Call synchronously from the handler of the user action that starts
        navigation (inside a running event loop): the permission request is
        issued before this returns. Returns a task resolving to the status
        once the sensor delivered data or failed. Repeated calls share the
        one subscription.
        """
        if self.state.start_pos is None or self.state.dest_pos is None:
            raise IncompleteState("set a start position and a destination room first")
        activation = None
        try:
            if self.subscription is None:
                self.subscription = OrientationSubscription(platform, self.on_orientation, timeout_s)
            activation = self.subscription.start()
        except SensorUnsupported as e:
            self.subscription = None
            self._fail_sensor(NavStatus.SENSOR_UNSUPPORTED, e)
        except PermissionDenied as e:
            self.subscription = None
            self._fail_sensor(NavStatus.PERMISSION_DENIED, e)
        return asyncio.ensure_future(self._await_sensor(activation))

    async def _await_sensor(self, activation):
        if activation is None:
            return self.status
        try:
            await activation
        except PermissionDenied as e:
            self.subscription = None
            self._fail_sensor(NavStatus.PERMISSION_DENIED, e)
        except SensorSilent as e:
            self._fail_sensor(NavStatus.SENSOR_SILENT, e)
        return self.status

    def status_text(self):
        if self.guidance is not None and self.status in (NavStatus.GUIDING, NavStatus.LOW_CONFIDENCE):
            text = describe(self.guidance)
            if self.status == NavStatus.LOW_CONFIDENCE:
                text += " " + STATUS_TEXT[NavStatus.LOW_CONFIDENCE]
            return text
        return STATUS_TEXT[self.status]
