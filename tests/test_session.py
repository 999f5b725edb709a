import asyncio

import pytest

from floor.geometry import Point2D
from navigation.errors import IncompleteState, UnknownRoom
from navigation.session import NavigationSession, NavStatus
from utils.projection_utils import AffineProjectionParams, WorldToFloorProjector


def _projector(mpp=0.05):
    return WorldToFloorProjector(AffineProjectionParams([[20, 0, 0], [0, 20, 0]], meters_per_floor_px=mpp))


def test_first_navigable_room_is_preselected(rooms):
    session = NavigationSession(rooms)
    assert session.state.selected_room_id == 2
    assert session.state.dest_pos == Point2D(50.0, 50.0)
    assert session.state.start_pos is None
    assert session.state.heading_deg is None
    assert session.status == NavStatus.WAITING_FOR_POSITION


def test_nothing_selected_when_asked_not_to(rooms):
    session = NavigationSession(rooms, select_first=False)
    assert session.state.selected_room_id is None
    assert session.state.dest_pos is None


def test_unknown_room(rooms):
    session = NavigationSession(rooms)
    with pytest.raises(UnknownRoom):
        session.select_room(99)
    with pytest.raises(KeyError):
        session.select_room(99)
    assert session.state.selected_room_id == 2


def test_empty_room_clears_destination_without_crashing(rooms):
    session = NavigationSession(rooms)
    session.set_start(150, 50)
    session.on_orientation({"webkitCompassHeading": 0})
    assert session.guidance is not None
    session.select_room(1)
    assert session.state.selected_room_id == 1
    assert session.state.dest_pos is None
    assert session.guidance is None
    assert session.status == NavStatus.WAITING_FOR_POSITION


def test_full_guidance_flow(rooms):
    session = NavigationSession(rooms, projector=_projector())
    seen = []
    session.add_listener(lambda status, guidance: seen.append((status, guidance)))

    session.set_start(150, 50)
    assert session.status == NavStatus.WAITING_FOR_HEADING
    assert "compass" in session.status_text()

    g = session.on_orientation({"webkitCompassHeading": 0.0, "alpha": 123.0})
    # room 2's centroid (50, 50) is due west of (150, 50)
    assert session.state.heading_deg == 0.0
    assert g.bearing_deg == pytest.approx(270.0)
    assert g.relative_angle_deg == pytest.approx(-90.0)
    assert g.distance_m == pytest.approx(5.0)
    assert session.status == NavStatus.GUIDING
    assert session.status_text().startswith("Turn left 90°")

    session.select_room(3)
    assert session.state.dest_pos == Point2D(250.0, 50.0)
    assert session.guidance.relative_angle_deg == pytest.approx(90.0)

    statuses = [s for s, _ in seen]
    assert statuses == [NavStatus.WAITING_FOR_HEADING, NavStatus.GUIDING, NavStatus.GUIDING]
    assert seen[-1][1] is session.guidance


def test_distance_omitted_without_scale(rooms):
    session = NavigationSession(rooms, projector=WorldToFloorProjector())
    session.set_start(50, 150)
    g = session.on_orientation({"webkitCompassHeading": 0})
    assert g.distance_m is None
    assert "m to go" not in session.status_text()


def test_sample_without_heading_is_discarded(rooms):
    session = NavigationSession(rooms)
    session.set_start(50, 150)
    session.on_orientation({"absolute": True, "alpha": 90.0})
    assert session.on_orientation({"beta": 12.0}) is None
    assert session.state.heading_deg == 90.0
    assert session.status == NavStatus.NO_HEADING_DATA
    assert session.status_text() == "The sensor sent no heading data."
    # the next usable sample resumes guidance
    session.on_orientation({"absolute": True, "alpha": 0.0})
    assert session.status == NavStatus.GUIDING


def test_bare_alpha_is_low_confidence(rooms):
    session = NavigationSession(rooms)
    session.set_start(50, 150)
    g = session.on_orientation({"alpha": 0.0})
    assert g.relative_angle_deg == pytest.approx(0.0)
    assert session.status == NavStatus.LOW_CONFIDENCE
    assert "may be off" in session.status_text()


def test_start_from_display_click(rooms):
    session = NavigationSession(rooms)
    session.set_start_from_display(25, 75, display_size=(400, 300), floor_size=(800, 600))
    assert session.state.start_pos == Point2D(50.0, 150.0)


def test_start_navigation_needs_positions(rooms, make_platform):
    session = NavigationSession(rooms)
    with pytest.raises(IncompleteState):
        session.start_navigation(make_platform())


def test_start_navigation_guides_once_heading_arrives(rooms, make_platform):
    async def scenario():
        session = NavigationSession(rooms)
        session.set_start(50, 150)
        platform = make_platform(requires_permission=True)
        task = session.start_navigation(platform, timeout_s=1.0)
        assert platform.permission_calls == 1
        again = session.start_navigation(platform, timeout_s=1.0)
        asyncio.get_running_loop().call_later(0.01, platform.emit, {"webkitCompassHeading": 180.0})
        return session, platform, await task, await again

    session, platform, status, status_again = asyncio.run(scenario())
    assert status == status_again == NavStatus.GUIDING
    assert platform.permission_calls == 1
    assert sum(len(cbs) for cbs in platform.listeners.values()) == 1
    assert session.guidance.relative_angle_deg == pytest.approx(180.0)


@pytest.mark.parametrize("kwargs, expected", [
    ({"absolute": False, "plain": False}, NavStatus.SENSOR_UNSUPPORTED),
    ({"requires_permission": True, "permission_result": "denied"}, NavStatus.PERMISSION_DENIED),
    ({"requires_permission": True, "request_raises": RuntimeError("blocked")}, NavStatus.PERMISSION_DENIED),
])
def test_start_navigation_sensor_failures(rooms, make_platform, kwargs, expected):
    async def scenario():
        session = NavigationSession(rooms)
        session.set_start(50, 150)
        platform = make_platform(**kwargs)
        return session, platform, await session.start_navigation(platform, timeout_s=1.0)

    session, platform, status = asyncio.run(scenario())
    assert status == expected
    assert session.status == expected
    assert session.subscription is None
    assert platform.listeners == {}
    assert session.guidance is None


def test_silent_sensor_then_late_sample_resumes(rooms, make_platform):
    async def scenario():
        session = NavigationSession(rooms)
        session.set_start(50, 150)
        platform = make_platform()
        status = await session.start_navigation(platform, timeout_s=0.05)
        assert status == NavStatus.SENSOR_SILENT
        assert "No orientation data" in session.status_text()
        session.set_start(60, 150)
        assert session.status == NavStatus.SENSOR_SILENT
        platform.emit({"webkitCompassHeading": 0.0})
        return session

    session = asyncio.run(scenario())
    assert session.status == NavStatus.GUIDING
    assert session.guidance is not None
