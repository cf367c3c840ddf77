"""Logging module for glassnav."""

import json
from datetime import datetime
from typing import Optional, Callable


class Logger:
    """Logs events to stdout and optionally to a file"""

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 context: Optional[dict] = None):
        self.log_path = log_path
        self.callback = callback
        self.context = dict(context or {})
        self.file = None
        self._owns_file = False
        if log_path:
            self.file = open(log_path, "a", encoding="utf-8")
            self._owns_file = True
            self._write_header()

    def _write_header(self):
        if self.file:
            self.file.write(f"\n{'='*60}\n")
            self.file.write(f"glassnav Log - {datetime.now().isoformat()}\n")
            self.file.write(f"{'='*60}\n\n")
            self.file.flush()

    def bind(self, **context) -> "Logger":
        """Return a logger sharing this one's outputs with extra context fields"""
        child = Logger(callback=self.callback, context={**self.context, **context})
        child.log_path = self.log_path
        child.file = self.file
        return child

    def log(self, message: str, data: Optional[dict] = None):
        """Log a message with optional structured data"""
        payload = {**self.context, **(data or {})}
        timestamp = datetime.now().isoformat()
        line = f"[{timestamp}] {message}"
        if payload:
            line += f" | {json.dumps(payload, ensure_ascii=False, default=str)}"
        print(line)
        if self.file:
            self.file.write(line + "\n")
            self.file.flush()
        if self.callback:
            self.callback(message, payload or None)

    def close(self):
        if self.file and self._owns_file:
            self.file.close()
