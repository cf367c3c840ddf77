"""Session event recording and playback."""

import asyncio
import json
import os
import time
from datetime import datetime
from typing import Optional

from .config import CONFIG
from .port import SessionPort, DISCONNECTED


class TraceRecorder:
    """Records a session's events to a JSON file"""

    def __init__(self, record_path: str):
        self.record_path = record_path
        self.trace: list[dict] = []
        self.start_time = time.time()

    @classmethod
    def for_session(cls, directory: str, session_id: str) -> "TraceRecorder":
        os.makedirs(directory, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return cls(os.path.join(directory, f"session_{session_id}_{timestamp}.json"))

    def record(self, event_type: Optional[str], data: dict):
        self.trace.append({
            "elapsed": time.time() - self.start_time,
            "timestamp": time.time(),
            "type": event_type,
            "data": data,
        })

    def save(self):
        """Save trace to file"""
        with open(self.record_path, "w", encoding="utf-8") as f:
            json.dump({
                "recorded_at": datetime.now().isoformat(),
                "trace": self.trace
            }, f, indent=2, ensure_ascii=False)
        print(f"Session trace saved to {self.record_path} ({len(self.trace)} entries)")


def load_trace(path: str) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get("trace"), list):
        raise ValueError(f"{path} is not a session trace")
    return data["trace"]


class PlaybackSession(SessionPort):
    """Replays a recorded trace through the normal dispatch path"""

    def __init__(self, playback_path: str, speed: float = 1.0, sleep=asyncio.sleep,
                 session_id: str = "playback"):
        super().__init__(session_id)
        self.playback_path = playback_path
        self.speed = speed
        self.sleep = sleep
        self.trace = load_trace(playback_path)
        self.displayed: list[str] = []
        print(f"Loaded session trace from {playback_path} ({len(self.trace)} entries)")

    async def show_text_wall(self, text: str, view: Optional[str] = None):
        self.displayed.append(text)
        print(f"[DISPLAY] {text}")

    def playback_delay(self, previous_elapsed: Optional[float], elapsed: float) -> float:
        """Seconds to wait between two recorded events, scaled by speed"""
        if previous_elapsed is None:
            return 0.0
        delta = (elapsed - previous_elapsed) / self.speed
        return max(0.0, min(delta, CONFIG["playback_max_delay"]))

    async def run(self):
        previous_elapsed = None
        for entry in self.trace:
            event_type = entry.get("type")
            # Outbound frames are kept in recordings for reference only
            if event_type == "display":
                continue
            elapsed = entry.get("elapsed", 0)
            delay = self.playback_delay(previous_elapsed, elapsed)
            previous_elapsed = elapsed
            if delay:
                await self.sleep(delay)
            if event_type == DISCONNECTED:
                break
            if self.handles(event_type):
                await self.dispatch(event_type, entry.get("data") or {})
        await self.dispatch(DISCONNECTED)
