"""Tests for per-session navigation handling."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeRouter
from glassnav.geo import bearing_between, bearing_to_cardinal
from glassnav.models import DisplayMode, GeoPoint, Instruction, RouteStep
from glassnav.port import HEAD_POSITION, LOCATION, DISCONNECTED, GLASSES_BATTERY, VIEW_MAIN
from glassnav.session import NavigationSession, RoutingThrottle, compass_view

TURN_RIGHT = RouteStep("Turn right onto Mannerheimintie", "150 m", 3)
TURN_LEFT = RouteStep("Turn left onto Kansalaistori", "0.4 km", 7)

START = {"lat": 60.1700, "lng": 24.9380}
NORTH = {"lat": 60.1710, "lng": 24.9380}
NORTH_EAST = {"lat": 60.1720, "lng": 24.9400}


def make_session(port, destination, logger, clock, *steps, min_interval=10):
    router = FakeRouter(*(steps or (TURN_RIGHT,)))
    navigation = NavigationSession(
        port, router, destination, logger=logger,
        throttle=RoutingThrottle(min_interval, clock=clock),
    )
    return navigation, router


def test_throttle_first_query_fires_immediately(clock):
    throttle = RoutingThrottle(10, clock=clock)

    assert throttle.try_acquire()
    assert not throttle.try_acquire()
    clock.advance(9.9)
    assert not throttle.try_acquire()
    clock.advance(0.1)
    assert throttle.try_acquire()


def test_start_renders_placeholder_and_subscribes(port, destination, logger, clock):
    navigation, _ = make_session(port, destination, logger, clock)

    asyncio.run(navigation.start())

    assert port.texts == ["🎯 Navigating to Oodi Helsinki"]
    assert port.streams == [(LOCATION, {"accuracy": "high"})]
    for event_type in (HEAD_POSITION, LOCATION, DISCONNECTED, GLASSES_BATTERY):
        assert port.handles(event_type)


def test_first_location_only_stores_point(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)

    asyncio.run(scenario())

    assert router.calls == []
    assert port.texts == ["🎯 Navigating to Oodi Helsinki"]
    assert navigation.state.current_direction == "N/A"
    assert navigation.state.last_known_position == GeoPoint(**START)


def test_second_location_updates_direction_and_instruction(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(LOCATION, NORTH_EAST)

    asyncio.run(scenario())

    expected = bearing_to_cardinal(bearing_between(
        START["lat"], START["lng"], NORTH_EAST["lat"], NORTH_EAST["lng"]))
    assert navigation.state.current_direction == expected
    assert router.calls == [(NORTH_EAST["lat"], NORTH_EAST["lng"], 60.1740, 24.9388)]
    assert navigation.state.last_instruction == Instruction("→", "Turn right onto Mannerheimintie (150 m)")
    assert port.texts[-1] == "→ Turn right onto Mannerheimintie (150 m)"
    assert navigation.state.last_known_position == GeoPoint(**NORTH_EAST)


def test_routing_queries_are_throttled(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(LOCATION, NORTH)
        clock.advance(3)
        await port.dispatch(LOCATION, NORTH_EAST)
        assert len(router.calls) == 1
        clock.advance(7)
        await port.dispatch(LOCATION, START)

    asyncio.run(scenario())

    assert len(router.calls) == 2
    # Position is stored on every fix, queried or not
    assert navigation.state.last_known_position == GeoPoint(**START)
    assert navigation.state.current_direction == "SW"


def test_compass_toggle_restores_latest_instruction(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock, TURN_RIGHT, TURN_LEFT)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(LOCATION, NORTH)
        await port.dispatch(HEAD_POSITION, {"position": "up"})
        assert navigation.state.display_mode is DisplayMode.COMPASS
        rendered = len(port.displayed)

        clock.advance(10)
        await port.dispatch(LOCATION, NORTH_EAST)
        # Routing update while looking up must not replace the compass
        assert len(port.displayed) == rendered
        assert navigation.state.last_instruction.text == "Turn left onto Kansalaistori (0.4 km)"

        await port.dispatch(HEAD_POSITION, {"position": "down"})

    asyncio.run(scenario())

    assert len(router.calls) == 2
    assert navigation.state.display_mode is DisplayMode.INSTRUCTION
    assert port.displayed[-2] == (compass_view("N"), VIEW_MAIN)
    assert port.displayed[-1] == ("← Turn left onto Kansalaistori (0.4 km)", None)


def test_compass_shows_not_available_before_any_bearing(port, destination, logger, clock):
    navigation, _ = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(HEAD_POSITION, {"position": "up"})
        await port.dispatch(HEAD_POSITION, {"position": "down"})

    asyncio.run(scenario())

    compass_text, view = port.displayed[1]
    assert view == VIEW_MAIN
    assert "-- DIRECTION OF TRAVEL --" in compass_text
    assert "N/A" in compass_text
    assert "(Look down for directions)" in compass_text
    assert port.texts[2] == "🎯 Navigating to Oodi Helsinki"


def test_unknown_head_position_is_ignored(port, destination, logger, clock):
    navigation, _ = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(HEAD_POSITION, {"position": "sideways"})

    asyncio.run(scenario())

    assert len(port.displayed) == 1
    assert navigation.state.display_mode is DisplayMode.INSTRUCTION


def test_disconnect_releases_location_stream(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(DISCONNECTED)
        await port.dispatch(LOCATION, NORTH)

    asyncio.run(scenario())

    assert navigation.closed
    assert port.released == [LOCATION]
    assert not port.handles(LOCATION)
    assert router.calls == []
    assert navigation.state.last_known_position == GeoPoint(**START)


def test_route_result_after_disconnect_is_discarded(port, destination, logger, clock):
    navigation, router = make_session(port, destination, logger, clock)
    router.on_call = navigation.handle_disconnected

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(LOCATION, NORTH)

    asyncio.run(scenario())

    assert len(router.calls) == 1
    assert navigation.closed
    assert navigation.state.last_instruction == Instruction("🎯", "Navigating to Oodi Helsinki")
    assert port.texts == ["🎯 Navigating to Oodi Helsinki"]


def test_routing_error_shows_neutral_glyph(port, destination, logger, clock):
    error = RouteStep("Routing Error (401): Check API Key.", "?", 0)
    navigation, _ = make_session(port, destination, logger, clock, error)

    async def scenario():
        await navigation.start()
        await port.dispatch(LOCATION, START)
        await port.dispatch(LOCATION, NORTH)

    asyncio.run(scenario())

    assert port.texts[-1] == "· Routing Error (401): Check API Key. (?)"


def test_battery_has_no_display_effect(port, destination, logger, clock):
    navigation, _ = make_session(port, destination, logger, clock)

    async def scenario():
        await navigation.start()
        await port.dispatch(GLASSES_BATTERY, {"level": 42, "charging": False})

    asyncio.run(scenario())

    assert len(port.displayed) == 1
    assert navigation.state.last_known_position is None


def test_sessions_do_not_share_state(destination, logger, clock):
    from conftest import FakePort

    first_port, second_port = FakePort("a"), FakePort("b")
    first, _ = make_session(first_port, destination, logger, clock)
    second, _ = make_session(second_port, destination, logger, clock)

    async def scenario():
        await first.start()
        await second.start()
        await first_port.dispatch(LOCATION, START)
        await first_port.dispatch(HEAD_POSITION, {"position": "up"})

    asyncio.run(scenario())

    assert first.state.last_known_position is not None
    assert second.state.last_known_position is None
    assert second.state.display_mode is DisplayMode.INSTRUCTION


@pytest.mark.parametrize("payload", [{"lat": 60.17, "lon": 24.93}, GeoPoint(60.17, 24.93)])
def test_location_payload_forms(port, destination, logger, clock, payload):
    navigation, _ = make_session(port, destination, logger, clock)

    asyncio.run(navigation.handle_location(payload))

    assert navigation.state.last_known_position == GeoPoint(60.17, 24.93)
