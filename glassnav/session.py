"""Per-session navigation event handling."""

import asyncio
import time
from typing import Callable, Optional

from .config import CONFIG
from .geo import bearing_between, bearing_to_cardinal, haversine_distance
from .logger import Logger
from .maneuver import maneuver_to_arrow
from .models import Destination, DisplayMode, GeoPoint, Instruction, SessionState
from .port import SessionPort, VIEW_MAIN


class RoutingThrottle:
    """Minimum-interval gate for routing queries"""

    def __init__(self, min_interval: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.min_interval = CONFIG["routing_min_interval"] if min_interval is None else min_interval
        self.clock = clock
        self.last_query: Optional[float] = None

    def try_acquire(self) -> bool:
        """Return True and stamp the query time if enough time has elapsed"""
        now = self.clock()
        if self.last_query is not None and now - self.last_query < self.min_interval:
            return False
        self.last_query = now
        return True


def compass_view(direction: str) -> str:
    return "\n".join([
        "-- DIRECTION OF TRAVEL --",
        "",
        f"{direction:^25}".rstrip(),
        "",
        "(Look down for directions)",
    ])


class NavigationSession:
    """Binds one device session to the routing client and the display"""

    def __init__(self, port: SessionPort, router, destination: Destination,
                 logger: Optional[Logger] = None, throttle: Optional[RoutingThrottle] = None):
        self.port = port
        self.router = router
        self.destination = destination
        self.logger = logger or Logger(context={"session_id": port.session_id})
        self.throttle = throttle or RoutingThrottle()
        self.state = SessionState.initial(destination)
        self.closed = False
        self._location_cleanup: Optional[Callable[[], None]] = None

    async def start(self):
        """Render the default view and subscribe to the session's events"""
        await self.show_instruction()

        self.port.on_head_position(self.handle_head_position)
        self.port.on_disconnected(self.handle_disconnected)
        self.port.on_glasses_battery(self.handle_battery)
        self._location_cleanup = await self.port.subscribe_to_location(
            self.handle_location, accuracy=CONFIG["location_accuracy"]
        )
        self.logger.log("Session started", {"destination": self.destination.name})

    async def show_instruction(self):
        await self.port.show_text_wall(self.state.last_instruction.render())

    async def show_compass(self):
        await self.port.show_text_wall(compass_view(self.state.current_direction), view=VIEW_MAIN)

    async def handle_head_position(self, data: dict):
        position = data.get("position")
        if position == "up":
            self.state.display_mode = DisplayMode.COMPASS
            await self.show_compass()
        elif position == "down":
            self.state.display_mode = DisplayMode.INSTRUCTION
            await self.show_instruction()
        else:
            self.logger.log("Ignoring head position", {"position": position})

    async def handle_location(self, data):
        if self.closed:
            return
        try:
            current = data if isinstance(data, GeoPoint) else GeoPoint.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.log("Ignoring malformed location", {"data": data, "error": repr(e)})
            return
        previous = self.state.last_known_position

        if previous is not None:
            bearing = bearing_between(previous.lat, previous.lng, current.lat, current.lng)
            self.state.last_bearing = bearing
            self.state.current_direction = bearing_to_cardinal(bearing)

            if self.throttle.try_acquire():
                await self._refresh_instruction(current, previous)

        if not self.closed:
            self.state.last_known_position = current

    async def _refresh_instruction(self, current: GeoPoint, previous: GeoPoint):
        moved = haversine_distance(previous.lat, previous.lng, current.lat, current.lng)
        self.logger.log("Querying route", {
            "lat": current.lat, "lng": current.lng,
            "moved_m": round(moved, 1), "direction": self.state.current_direction,
        })
        step = await asyncio.to_thread(
            self.router.next_instruction,
            current.lat, current.lng, self.destination.lat, self.destination.lng,
        )
        if self.closed:
            self.logger.log("Discarding route result after disconnect")
            return

        self.state.last_instruction = Instruction(
            arrow=maneuver_to_arrow(step.maneuver_type),
            text=f"{step.instruction} ({step.distance})",
        )
        if self.state.display_mode is DisplayMode.INSTRUCTION:
            await self.show_instruction()

    def handle_disconnected(self, data=None):
        if self.closed:
            return
        self.closed = True
        if self._location_cleanup:
            self._location_cleanup()
            self._location_cleanup = None
        self.logger.log("Session disconnected. Streams stopped.")

    def handle_battery(self, data):
        self.logger.log("Glasses battery", {"battery": data})
