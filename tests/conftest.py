from __future__ import annotations

from typing import Optional

import pytest

from glassnav.logger import Logger
from glassnav.models import Destination, RouteStep
from glassnav.port import SessionPort


class FakePort(SessionPort):
    """Session port that keeps everything shown on the display"""

    def __init__(self, session_id: str = "test-session") -> None:
        super().__init__(session_id, user_id="user-1")
        self.displayed: list[tuple[str, Optional[str]]] = []
        self.streams: list[tuple[str, dict]] = []
        self.released: list[str] = []

    async def show_text_wall(self, text: str, view: Optional[str] = None):
        self.displayed.append((text, view))

    async def request_stream(self, stream: str, options: dict):
        self.streams.append((stream, options))

    def release_stream(self, stream: str):
        self.released.append(stream)

    @property
    def texts(self) -> list[str]:
        return [text for text, _ in self.displayed]


class FakeRouter:
    def __init__(self, *steps: RouteStep) -> None:
        self.steps = list(steps)
        self.calls: list[tuple[float, float, float, float]] = []
        self.on_call = None

    def next_instruction(self, current_lat, current_lng, dest_lat, dest_lng) -> RouteStep:
        self.calls.append((current_lat, current_lng, dest_lat, dest_lng))
        if self.on_call:
            self.on_call()
        if len(self.steps) > 1:
            return self.steps.pop(0)
        return self.steps[0]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def destination() -> Destination:
    return Destination(lat=60.1740, lng=24.9388, name="Oodi Helsinki")


@pytest.fixture()
def port() -> FakePort:
    return FakePort()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def logger() -> Logger:
    return Logger(context={"test": True})
