"""Configuration settings for glassnav."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

CONFIG = {
    "routing_min_interval": 10,  # seconds between routing queries per session
    "routing_timeout": 15,  # seconds - HTTP timeout for the directions call
    "location_accuracy": "high",
    "host": "0.0.0.0",
    "default_port": 3000,
    "directions_url": "https://api.openrouteservice.org/v2/directions/foot",
    "destination": {
        "lat": 60.1740,
        "lng": 24.9388,
        "name": "Oodi Helsinki",
    },
    "playback_max_delay": 5.0,  # seconds - clamp between replayed events
}


class ConfigError(RuntimeError):
    """Raised when required process configuration is missing or invalid"""


@dataclass(frozen=True)
class Settings:
    package_name: str
    mentraos_api_key: str
    ors_api_key: str
    port: int = CONFIG["default_port"]


def _require(env, name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigError(f"{name} is not set in .env file")
    return value


def load_settings(env=None, require_host: bool = True) -> Settings:
    """Read settings from the environment, failing fast on missing keys.

    When ``env`` is None the process environment is used, after loading a
    ``.env`` file from the working directory if one exists. Host credentials
    can be skipped for offline playback, which never registers with a host.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    if require_host:
        package_name = _require(env, "PACKAGE_NAME")
        mentraos_api_key = _require(env, "MENTRAOS_API_KEY")
    else:
        package_name = env.get("PACKAGE_NAME", "")
        mentraos_api_key = env.get("MENTRAOS_API_KEY", "")
    ors_api_key = _require(env, "OPEN_ROUTE_SERVICE_API_KEY")

    raw_port = env.get("PORT") or str(CONFIG["default_port"])
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {raw_port!r}") from None

    return Settings(
        package_name=package_name,
        mentraos_api_key=mentraos_api_key,
        ors_api_key=ors_api_key,
        port=port,
    )
