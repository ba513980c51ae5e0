# session_logger.py
# Handles all file I/O for the map session.
# Saves the active route and session events as JSON.

import json
import os
import logging
from datetime import datetime
from typing import Optional

from .models import Route
from .map_config import MapConfig

# Standard Python logger — configure at app entry point if needed
logger = logging.getLogger(__name__)


class SessionLogger:
    """
    Persists route data and session events to JSON files.

    Args:
        config: MapConfig instance for file paths and directories.
    """

    def __init__(self, config: Optional[MapConfig] = None) -> None:
        self.config = config or MapConfig()
        os.makedirs(self.config.log_dir, exist_ok=True)

    # ------------------------------------------------------------------
    # Route persistence
    # ------------------------------------------------------------------

    def save_route(self, route: Route, destination_name: Optional[str] = None) -> bool:
        """
        Serialize a route to JSON.

        Returns:
            True on success, False on failure.
        """
        filepath = self.config.route_filepath
        try:
            data = {
                "saved_at": datetime.now().isoformat(),
                "destination": destination_name,
                "step_count": len(route.steps),
                "route": route.to_dict(),
            }
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.info(f"Route saved to {filepath} ({len(route.steps)} steps).")
            return True
        except IOError as e:
            logger.error(f"Failed to save route to {filepath}: {e}")
            return False

    def load_route(self, filepath: Optional[str] = None) -> Optional[Route]:
        """
        Load a previously saved route from JSON.

        Args:
            filepath: Path override; uses config default if omitted.

        Returns:
            Route, or None if loading failed.
        """
        path = filepath or self.config.route_filepath
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            route = Route.from_dict(data["route"])
            logger.info(f"Route loaded from {path} ({len(route.steps)} steps).")
            return route
        except (IOError, KeyError, ValueError) as e:
            logger.error(f"Failed to load route from {path}: {e}")
            return None

    # ------------------------------------------------------------------
    # Session event logging
    # ------------------------------------------------------------------

    def log_event(self, kind: str, **details) -> None:
        """
        Append a single session event to the JSONL log.

        Args:
            kind:    Short event name ("search", "route", "select" ...).
            details: JSON-serialisable extra fields.
        """
        entry = {"timestamp": datetime.now().isoformat(), "event": kind}
        entry.update(details)
        try:
            with open(self.config.events_filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except IOError as e:
            logger.error(f"Failed to write event log: {e}")
