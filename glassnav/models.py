"""Data classes for glassnav."""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional


@dataclass
class GeoPoint:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "GeoPoint":
        lng = d["lng"] if "lng" in d else d["lon"]
        return cls(lat=float(d["lat"]), lng=float(lng))


@dataclass(frozen=True)
class Destination:
    """Fixed navigation target, configured once at startup"""
    lat: float
    lng: float
    name: str

    @classmethod
    def from_dict(cls, d: dict) -> "Destination":
        return cls(lat=float(d["lat"]), lng=float(d["lng"]), name=d["name"])


@dataclass
class Instruction:
    """Last rendered navigation instruction"""
    arrow: str
    text: str

    def render(self) -> str:
        return f"{self.arrow} {self.text}"

    @classmethod
    def placeholder(cls, destination: Destination) -> "Instruction":
        return cls(arrow="🎯", text=f"Navigating to {destination.name}")


@dataclass(frozen=True)
class RouteStep:
    """One step returned by the routing client"""
    instruction: str
    distance: str
    maneuver_type: int


class DisplayMode(Enum):
    INSTRUCTION = "instruction"
    COMPASS = "compass"


@dataclass
class SessionState:
    """Mutable navigation state owned by a single device session"""
    last_instruction: Instruction
    last_known_position: Optional[GeoPoint] = None
    display_mode: DisplayMode = DisplayMode.INSTRUCTION
    current_direction: str = "N/A"
    last_bearing: Optional[float] = field(default=None, repr=False)

    @classmethod
    def initial(cls, destination: Destination) -> "SessionState":
        return cls(last_instruction=Instruction.placeholder(destination))
