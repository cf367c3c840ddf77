"""glassnav - Walking directions for smart glasses."""

from .config import CONFIG, ConfigError, Settings, load_settings
from .models import GeoPoint, Destination, Instruction, RouteStep, DisplayMode, SessionState
from .logger import Logger
from .geo import haversine_distance, bearing_between, bearing_to_cardinal
from .maneuver import maneuver_to_arrow
from .routing import OpenRouteServiceClient, format_distance
from .port import SessionPort
from .session import NavigationSession, RoutingThrottle
from .server import AppServer, WebSocketSession
from .trace import TraceRecorder, PlaybackSession
from .app import NavigatorApp

__all__ = [
    "CONFIG",
    "ConfigError",
    "Settings",
    "load_settings",
    "GeoPoint",
    "Destination",
    "Instruction",
    "RouteStep",
    "DisplayMode",
    "SessionState",
    "Logger",
    "haversine_distance",
    "bearing_between",
    "bearing_to_cardinal",
    "maneuver_to_arrow",
    "OpenRouteServiceClient",
    "format_distance",
    "SessionPort",
    "NavigationSession",
    "RoutingThrottle",
    "AppServer",
    "WebSocketSession",
    "TraceRecorder",
    "PlaybackSession",
    "NavigatorApp",
]
