"""
Orientation event subscription: stream choice, permission gate, silence timeout.

The platform object is whatever bridges to the device. It exposes:

  supports_absolute_orientation   bool, "deviceorientationabsolute" exists
  supports_orientation            bool, plain "deviceorientation" exists
  requires_permission             bool, an explicit grant is needed first
  request_permission()            returns an awaitable resolving to "granted"
                                  or anything else for a refusal
  add_listener(event, callback)   callback(raw_sample) per event

OrientationSubscription.start() must be called from inside the handler of the
user action that starts navigation: the permission request is issued
synchronously there, because platforms that gate orientation on a user
gesture silently refuse requests made later.
"""

import asyncio

from config.config import ABSOLUTE_ORIENTATION_EVENT, ORIENTATION_EVENT, SENSOR_TIMEOUT_S
from config.logger import setup_logger
from navigation.errors import PermissionDenied, SensorSilent, SensorUnsupported

logger = setup_logger("compass_nav.sensors")


def choose_event(platform):
    if getattr(platform, "supports_absolute_orientation", False):
        return ABSOLUTE_ORIENTATION_EVENT
    if getattr(platform, "supports_orientation", False):
        return ORIENTATION_EVENT
    raise SensorUnsupported("device offers no orientation events")


class OrientationSubscription:
    def __init__(self, platform, on_sample, timeout_s=SENSOR_TIMEOUT_S):
        self.platform = platform
        self.on_sample = on_sample
        self.timeout_s = timeout_s
        self.event_name = None
        self.subscribed = False
        self._task = None
        self._first_sample = None

    @property
    def started(self):
        return self._task is not None

    def start(self):
        """
        Begin activation and return the pending task (resolves to the event
        name). Calling again returns the same task; only one listener is
        ever registered. Requires a running event loop.
        """
        if self._task is not None:
            return self._task
        event_name = choose_event(self.platform)
        permission = None
        if getattr(self.platform, "requires_permission", False):
            # must happen now, in the caller's user-gesture stack
            try:
                permission = self.platform.request_permission()
            except Exception as e:
                raise PermissionDenied(f"orientation permission request failed: {e}") from e
        self._first_sample = asyncio.Event()
        self._task = asyncio.ensure_future(self._activate(event_name, permission))
        return self._task

    async def _activate(self, event_name, permission):
        if permission is not None:
            try:
                result = await permission
            except Exception as e:
                logger.warning("Orientation permission request errored: %s", e)
                raise PermissionDenied(f"orientation permission request failed: {e}") from e
            if result != "granted":
                logger.warning("Orientation permission refused (%s)", result)
                raise PermissionDenied(f"orientation permission refused: {result}")

        self.platform.add_listener(event_name, self._handle)
        self.event_name = event_name
        self.subscribed = True
        logger.info("Subscribed to %s events", event_name)

        try:
            await asyncio.wait_for(self._first_sample.wait(), self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning("No orientation sample within %.1fs", self.timeout_s)
            raise SensorSilent(f"no orientation data within {self.timeout_s:g}s") from None
        return event_name

    def _handle(self, raw):
        if self._first_sample is not None and not self._first_sample.is_set():
            self._first_sample.set()
        self.on_sample(raw)
