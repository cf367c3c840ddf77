#!/usr/bin/env python3
"""
glassnav - Walking directions for smart glasses

Usage:
    python -m glassnav [options]

Options:
    --port PORT       Listen port (default: $PORT or 3000)
    --log FILE        Log file path (default: glassnav_TIMESTAMP.log)
    --record DIR      Record each session's events to JSON files in DIR
    --playback FILE   Replay a recorded session trace instead of serving
    --speed FACTOR    Playback speed multiplier (default: 1.0)
    --dest-lat LAT    Destination latitude
    --dest-lng LNG    Destination longitude
    --dest-name NAME  Destination name shown on the display
"""

import argparse
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from .app import NavigatorApp
from .config import CONFIG, ConfigError, load_settings
from .logger import Logger
from .models import Destination


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="glassnav - Walking directions for smart glasses"
    )
    parser.add_argument("--port", type=int,
                        help="Listen port (default: $PORT or 3000)")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: glassnav_TIMESTAMP.log)")
    parser.add_argument("--record", metavar="DIR",
                        help="Record each session's events to JSON files in DIR")
    parser.add_argument("--playback", metavar="FILE",
                        help="Replay a recorded session trace instead of serving")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Playback speed multiplier (default: 1.0)")
    parser.add_argument("--dest-lat", type=float, metavar="LAT",
                        help="Destination latitude")
    parser.add_argument("--dest-lng", type=float, metavar="LNG",
                        help="Destination longitude")
    parser.add_argument("--dest-name", metavar="NAME",
                        help="Destination name shown on the display")

    args = parser.parse_args(argv)

    # Validate destination - must provide both or neither
    if (args.dest_lat is None) != (args.dest_lng is None):
        parser.error("--dest-lat and --dest-lng must be used together")

    if args.speed <= 0:
        parser.error("--speed must be positive")

    try:
        settings = load_settings(require_host=not args.playback)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    if args.port is not None:
        settings = replace(settings, port=args.port)

    destination = Destination.from_dict(CONFIG["destination"])
    if args.dest_lat is not None:
        destination = Destination(
            lat=args.dest_lat,
            lng=args.dest_lng,
            name=args.dest_name or f"{args.dest_lat:.4f}, {args.dest_lng:.4f}",
        )
    elif args.dest_name:
        destination = replace(destination, name=args.dest_name)

    # Determine log path
    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"glassnav_{timestamp}.log"

    logger = Logger(log_path)
    app = NavigatorApp(settings, destination=destination, logger=logger, record_dir=args.record)

    try:
        if args.playback:
            if not Path(args.playback).exists():
                print(f"Playback file not found: {args.playback}")
                sys.exit(1)
            try:
                app.playback(args.playback, speed=args.speed)
            except ValueError as e:
                print(f"Invalid playback file: {e}")
                sys.exit(1)
        else:
            app.run()
    finally:
        logger.close()


if __name__ == "__main__":
    main()
