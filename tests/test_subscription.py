import asyncio

import pytest

from config.config import ABSOLUTE_ORIENTATION_EVENT, ORIENTATION_EVENT
from navigation.errors import PermissionDenied, SensorSilent, SensorUnsupported
from sensors.subscription import OrientationSubscription, choose_event

SAMPLE = {"absolute": True, "alpha": 45.0}


def _emit_soon(platform, raw=SAMPLE, delay=0.01):
    asyncio.get_running_loop().call_later(delay, platform.emit, raw)


def test_prefers_absolute_stream(make_platform):
    got = []

    async def scenario():
        platform = make_platform(absolute=True, plain=True)
        sub = OrientationSubscription(platform, got.append, timeout_s=1.0)
        task = sub.start()
        _emit_soon(platform)
        return platform, sub, await task

    platform, sub, event = asyncio.run(scenario())
    assert event == ABSOLUTE_ORIENTATION_EVENT
    assert list(platform.listeners) == [ABSOLUTE_ORIENTATION_EVENT]
    assert sub.subscribed and sub.event_name == ABSOLUTE_ORIENTATION_EVENT
    assert got == [SAMPLE]


def test_falls_back_to_plain_stream(make_platform):
    assert choose_event(make_platform(absolute=False, plain=True)) == ORIENTATION_EVENT
    with pytest.raises(SensorUnsupported):
        choose_event(make_platform(absolute=False, plain=False))


def test_unsupported_platform_never_subscribes(make_platform):
    async def scenario():
        platform = make_platform(absolute=False, plain=False, requires_permission=True)
        sub = OrientationSubscription(platform, lambda raw: None)
        with pytest.raises(SensorUnsupported):
            sub.start()
        return platform, sub

    platform, sub = asyncio.run(scenario())
    assert not sub.started
    assert platform.permission_calls == 0
    assert platform.listeners == {}


def test_permission_is_requested_before_start_returns(make_platform):
    async def scenario():
        platform = make_platform(requires_permission=True)
        sub = OrientationSubscription(platform, lambda raw: None, timeout_s=1.0)
        task = sub.start()
        calls_at_return = platform.permission_calls
        _emit_soon(platform)
        await task
        return calls_at_return, platform

    calls_at_return, platform = asyncio.run(scenario())
    assert calls_at_return == 1
    assert platform.permission_calls == 1
    assert len(platform.listeners[ABSOLUTE_ORIENTATION_EVENT]) == 1


@pytest.mark.parametrize("kwargs", [
    {"permission_result": "denied"},
    {"permission_error": RuntimeError("NotAllowedError")},
])
def test_refused_permission_does_not_subscribe(make_platform, kwargs):
    async def scenario():
        platform = make_platform(requires_permission=True, **kwargs)
        sub = OrientationSubscription(platform, lambda raw: None, timeout_s=1.0)
        with pytest.raises(PermissionDenied):
            await sub.start()
        return platform, sub

    platform, sub = asyncio.run(scenario())
    assert platform.listeners == {}
    assert not sub.subscribed


def test_request_that_throws_is_permission_denied(make_platform):
    async def scenario():
        platform = make_platform(requires_permission=True, request_raises=TypeError("not a gesture"))
        sub = OrientationSubscription(platform, lambda raw: None)
        with pytest.raises(PermissionDenied):
            sub.start()
        return platform

    platform = asyncio.run(scenario())
    assert platform.listeners == {}


def test_start_is_idempotent(make_platform):
    async def scenario():
        platform = make_platform(requires_permission=True)
        sub = OrientationSubscription(platform, lambda raw: None, timeout_s=1.0)
        first = sub.start()
        second = sub.start()
        _emit_soon(platform)
        await first
        third = sub.start()
        return platform, first, second, third

    platform, first, second, third = asyncio.run(scenario())
    assert first is second is third
    assert platform.permission_calls == 1
    assert sum(len(cbs) for cbs in platform.listeners.values()) == 1


def test_silent_sensor_times_out_but_stays_subscribed(make_platform):
    async def scenario():
        platform = make_platform()
        sub = OrientationSubscription(platform, lambda raw: None, timeout_s=0.05)
        with pytest.raises(SensorSilent):
            await sub.start()
        return platform, sub

    platform, sub = asyncio.run(scenario())
    assert sub.subscribed
    assert len(platform.listeners[ABSOLUTE_ORIENTATION_EVENT]) == 1
