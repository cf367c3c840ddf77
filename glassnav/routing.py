"""Walking directions via the OpenRouteService API."""

import math
from typing import Optional

import requests

from .config import CONFIG
from .logger import Logger
from .models import RouteStep

ARRIVED_STEP = RouteStep("Arrived or no route data.", "0 m", 12)
AUTH_ERROR_STEP = RouteStep("Routing Error (401): Check API Key.", "?", 0)
ROUTING_ERROR_STEP = RouteStep("Routing error.", "?", 0)


def format_distance(meters: float) -> str:
    """Format a step distance: whole meters below 0.2 km, else km to one decimal.

    Halves round up, so 250 m is "0.3 km" and 150.5 m is "151 m".
    """
    km = meters / 1000
    if km < 0.2:
        return f"{math.floor(meters + 0.5)} m"
    tenths = math.floor(meters / 100 + 0.5)
    return f"{tenths / 10:.1f} km"


class OpenRouteServiceClient:
    """Fetch the next walking step toward a destination"""

    def __init__(self, api_key: str, url: Optional[str] = None,
                 timeout: Optional[float] = None, logger: Optional[Logger] = None):
        self.api_key = api_key
        self.url = url or CONFIG["directions_url"]
        self.timeout = timeout if timeout is not None else CONFIG["routing_timeout"]
        self.logger = logger or Logger()

    def next_instruction(self, current_lat: float, current_lng: float,
                         dest_lat: float, dest_lng: float) -> RouteStep:
        """Query directions and return the first step of the route.

        Never raises: a 401 maps to AUTH_ERROR_STEP and every other failure,
        including an unexpected payload shape, maps to ROUTING_ERROR_STEP.
        """
        params = {
            "start": f"{current_lng},{current_lat}",
            "end": f"{dest_lng},{dest_lat}",
            "format": "geojson",
            "instructions_format": "text",
            "preference": "recommended",
        }
        headers = {
            "Accept": "application/json",
            "Authorization": self.api_key,
        }

        try:
            response = requests.get(self.url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            steps = data["features"][0]["properties"]["segments"][0].get("steps")
            if not steps:
                return ARRIVED_STEP

            step = steps[0]
            return RouteStep(
                instruction=step["instruction"],
                distance=format_distance(float(step["distance"])),
                maneuver_type=step["type"],
            )
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            self.logger.log("OpenRouteService API failed", {"status": status, "error": str(e)})
            if status == 401:
                return AUTH_ERROR_STEP
            return ROUTING_ERROR_STEP
        except requests.RequestException as e:
            self.logger.log("OpenRouteService API failed", {"error": str(e)})
            return ROUTING_ERROR_STEP
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            self.logger.log("OpenRouteService returned unexpected data", {"error": repr(e)})
            return ROUTING_ERROR_STEP
