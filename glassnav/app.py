"""Main glassnav application."""

import asyncio
from typing import Optional

from .config import CONFIG, Settings
from .logger import Logger
from .models import Destination
from .port import SessionPort
from .routing import OpenRouteServiceClient
from .server import AppServer
from .session import NavigationSession
from .trace import PlaybackSession, TraceRecorder


class NavigatorApp:
    """Creates one NavigationSession per connected device session"""

    def __init__(self, settings: Settings, destination: Optional[Destination] = None,
                 logger: Optional[Logger] = None, router=None,
                 record_dir: Optional[str] = None):
        self.settings = settings
        self.destination = destination or Destination.from_dict(CONFIG["destination"])
        self.logger = logger or Logger()
        self.router = router or OpenRouteServiceClient(
            settings.ors_api_key, logger=self.logger.bind(component="routing")
        )
        self.record_dir = record_dir
        self.sessions: dict[str, NavigationSession] = {}

    async def on_session(self, port: SessionPort, session_id: str, user_id: Optional[str] = None):
        logger = self.logger.bind(session_id=session_id)
        logger.log("New session", {"user_id": user_id})
        navigation = NavigationSession(port, self.router, self.destination, logger=logger)
        self.sessions[session_id] = navigation

        def forget(_data=None):
            self.sessions.pop(session_id, None)

        port.on_disconnected(forget)
        await navigation.start()

    def _recorder_factory(self):
        if not self.record_dir:
            return None
        return lambda session_id: TraceRecorder.for_session(self.record_dir, session_id)

    def build_server(self) -> AppServer:
        return AppServer(
            package_name=self.settings.package_name,
            api_key=self.settings.mentraos_api_key,
            on_session=self.on_session,
            host=CONFIG["host"],
            port=self.settings.port,
            logger=self.logger,
            recorder_factory=self._recorder_factory(),
        )

    def run(self):
        self.logger.log("Starting glassnav", {
            "port": self.settings.port,
            "destination": self.destination.name,
        })
        self.build_server().start()

    async def _playback(self, session: PlaybackSession):
        await self.on_session(session, session.session_id)
        await session.run()

    def playback(self, path: str, speed: float = 1.0):
        """Replay a recorded session trace without a device"""
        session = PlaybackSession(path, speed=speed)
        asyncio.run(self._playback(session))
