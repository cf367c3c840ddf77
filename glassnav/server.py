"""Websocket host server delivering device session events."""

import asyncio
import json
from typing import Awaitable, Callable, Optional

import websockets

from .logger import Logger
from .port import SessionPort, DISCONNECTED

SESSION_START = "session_start"
POLICY_VIOLATION = 1008


def make_message(msg_type: str, data: dict) -> str:
    return json.dumps({"type": msg_type, "data": data}, ensure_ascii=False)


def parse_message(raw) -> tuple[Optional[str], dict]:
    """Decode a {"type", "data"} frame, raising ValueError when malformed"""
    message = json.loads(raw)
    if not isinstance(message, dict):
        raise ValueError("message must be a JSON object")
    data = message.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError("message data must be a JSON object")
    return message.get("type"), data


def check_credentials(data: dict, package_name: str, api_key: str) -> Optional[str]:
    """Return an error string when a session_start does not match our registration"""
    if data.get("packageName") != package_name:
        return "Unknown package name"
    if data.get("apiKey") != api_key:
        return "Invalid API key"
    return None


class WebSocketSession(SessionPort):
    """Session port backed by one websocket connection"""

    def __init__(self, websocket, session_id: str, user_id: Optional[str] = None,
                 logger: Optional[Logger] = None, recorder=None):
        super().__init__(session_id, user_id)
        self.websocket = websocket
        self.logger = logger or Logger(context={"session_id": session_id})
        self.recorder = recorder
        self._pending: set[asyncio.Task] = set()

    async def _send(self, msg_type: str, data: dict):
        await self.websocket.send(make_message(msg_type, data))

    async def show_text_wall(self, text: str, view: Optional[str] = None):
        data = {"text": text}
        if view:
            data["view"] = view
        if self.recorder:
            self.recorder.record("display", data)
        await self._send("display", data)

    async def request_stream(self, stream: str, options: dict):
        await self._send("subscribe", {"stream": stream, **options})

    def release_stream(self, stream: str):
        if self.disconnected:
            return
        task = asyncio.get_running_loop().create_task(self._send("unsubscribe", {"stream": stream}))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def run(self):
        """Dispatch inbound events until the connection closes"""
        try:
            async for raw in self.websocket:
                try:
                    event_type, data = parse_message(raw)
                except ValueError as e:
                    self.logger.log("Ignoring malformed message", {"error": str(e)})
                    continue

                if self.recorder:
                    self.recorder.record(event_type, data)
                if event_type == DISCONNECTED:
                    break
                if not self.handles(event_type):
                    self.logger.log("Ignoring unhandled event", {"type": event_type})
                    continue
                await self.dispatch(event_type, data)
        except websockets.ConnectionClosed:
            self.logger.log("Connection closed")
        finally:
            await self.dispatch(DISCONNECTED)


SessionCallback = Callable[[SessionPort, str, Optional[str]], Awaitable[None]]


class AppServer:
    """Accepts host connections and hands each session to on_session"""

    def __init__(self, package_name: str, api_key: str, on_session: SessionCallback,
                 host: str = "0.0.0.0", port: int = 3000,
                 logger: Optional[Logger] = None, recorder_factory=None):
        self.package_name = package_name
        self.api_key = api_key
        self.on_session = on_session
        self.host = host
        self.port = port
        self.logger = logger or Logger()
        self.recorder_factory = recorder_factory
        self._stop: Optional[asyncio.Event] = None

    async def handle_connection(self, websocket):
        try:
            event_type, data = parse_message(await websocket.recv())
        except ValueError as e:
            self.logger.log("Rejected connection", {"error": str(e)})
            await websocket.close(POLICY_VIOLATION, "malformed session_start")
            return

        error = "Expected session_start" if event_type != SESSION_START else \
            check_credentials(data, self.package_name, self.api_key)
        if error:
            self.logger.log("Rejected connection", {"error": error})
            await websocket.send(make_message("error", {"message": error}))
            await websocket.close(POLICY_VIOLATION, error)
            return

        session_id = str(data.get("sessionId") or id(websocket))
        user_id = data.get("userId")
        logger = self.logger.bind(session_id=session_id)
        recorder = self.recorder_factory(session_id) if self.recorder_factory else None
        session = WebSocketSession(websocket, session_id, user_id, logger=logger, recorder=recorder)

        try:
            await self.on_session(session, session_id, user_id)
            await session.run()
        finally:
            if recorder:
                recorder.save()

    async def serve(self):
        self._stop = asyncio.Event()
        async with websockets.serve(self.handle_connection, self.host, self.port):
            self.logger.log("Server listening", {"host": self.host, "port": self.port})
            await self._stop.wait()

    def start(self):
        """Run the server until interrupted"""
        try:
            asyncio.run(self.serve())
        except KeyboardInterrupt:
            self.logger.log("Server stopped")

    def stop(self):
        if self._stop:
            self._stop.set()
