import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from floor.geometry import Point2D, Room


def square(room_id, x0, y0, size, name=None):
    pts = (Point2D(x0, y0), Point2D(x0 + size, y0), Point2D(x0 + size, y0 + size), Point2D(x0, y0 + size))
    return Room(id=room_id, name=name, points=pts)


@pytest.fixture
def rooms():
    return [
        Room(id=1, name="Storage", points=()),
        square(2, 0, 0, 100, name="Lab"),
        square(3, 200, 0, 100),
    ]


class FakePlatform:
    """Stands in for the device bridge: records listeners and permission requests."""

    def __init__(self, absolute=True, plain=True, requires_permission=False,
                 permission_result="granted", permission_error=None, request_raises=None):
        self.supports_absolute_orientation = absolute
        self.supports_orientation = plain
        self.requires_permission = requires_permission
        self.permission_result = permission_result
        self.permission_error = permission_error
        self.request_raises = request_raises
        self.permission_calls = 0
        self.listeners = {}

    def request_permission(self):
        self.permission_calls += 1
        if self.request_raises is not None:
            raise self.request_raises
        return self._answer()

    async def _answer(self):
        if self.permission_error is not None:
            raise self.permission_error
        return self.permission_result

    def add_listener(self, event, callback):
        self.listeners.setdefault(event, []).append(callback)

    def emit(self, raw):
        for callbacks in self.listeners.values():
            for cb in callbacks:
                cb(raw)


@pytest.fixture
def make_platform():
    return FakePlatform
