"""Host session seam: event registration, dispatch and display."""

import inspect
from collections import defaultdict
from typing import Callable, Optional

HEAD_POSITION = "head_position"
LOCATION = "location"
DISCONNECTED = "disconnect"
GLASSES_BATTERY = "glasses_battery"

VIEW_MAIN = "main"


class SessionPort:
    """One device session as seen by the navigation handler.

    Subclasses deliver inbound events through dispatch() and implement
    show_text_wall(). Registered handlers may be plain functions or
    coroutine functions; each runs to completion before the next one.
    """

    def __init__(self, session_id: str, user_id: Optional[str] = None):
        self.session_id = session_id
        self.user_id = user_id
        self._handlers: dict[str, list[Callable]] = defaultdict(list)
        self._disconnected = False

    def _register(self, event_type: str, handler: Callable) -> Callable[[], None]:
        self._handlers[event_type].append(handler)

        def unsubscribe():
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def on_head_position(self, handler: Callable) -> Callable[[], None]:
        return self._register(HEAD_POSITION, handler)

    def on_disconnected(self, handler: Callable) -> Callable[[], None]:
        return self._register(DISCONNECTED, handler)

    def on_glasses_battery(self, handler: Callable) -> Callable[[], None]:
        return self._register(GLASSES_BATTERY, handler)

    async def subscribe_to_location(self, handler: Callable, accuracy: str = "high") -> Callable[[], None]:
        """Subscribe to the location stream, returning an unsubscribe handle"""
        remove = self._register(LOCATION, handler)
        await self.request_stream(LOCATION, {"accuracy": accuracy})

        def unsubscribe():
            remove()
            self.release_stream(LOCATION)

        return unsubscribe

    async def request_stream(self, stream: str, options: dict):
        """Ask the host to start delivering a stream"""

    def release_stream(self, stream: str):
        """Tell the host a stream is no longer needed"""

    async def show_text_wall(self, text: str, view: Optional[str] = None):
        raise NotImplementedError

    def handles(self, event_type: str) -> bool:
        return bool(self._handlers.get(event_type))

    async def dispatch(self, event_type: str, data=None):
        """Run every handler registered for event_type, in order"""
        if event_type == DISCONNECTED:
            if self._disconnected:
                return
            self._disconnected = True

        for handler in list(self._handlers.get(event_type, ())):
            result = handler(data if data is not None else {})
            if inspect.isawaitable(result):
                await result

    @property
    def disconnected(self) -> bool:
        return self._disconnected
