# map_config.py
# All tuneable constants in one place.
# Pass a MapConfig instance to every module that needs settings.

import os
from dataclasses import dataclass

from .models import Coord, Region


# ---------------------------------------------------------------------------
# Road type constants (used by OSM parser)
# ---------------------------------------------------------------------------

WALKABLE_TYPES: frozenset = frozenset({
    'footway', 'pedestrian', 'path', 'steps', 'cycleway',
    'living_street', 'track', 'crossing', 'residential',
    'service', 'unclassified', 'primary', 'primary_link',
    'secondary', 'secondary_link', 'tertiary', 'tertiary_link',
    'trunk', 'trunk_link',
})

FORBIDDEN_TYPES: frozenset = frozenset({'motorway', 'motorway_link', 'construction'})

WALKING_SPEED_KMH: float = 5.0  # km/h

# Jakarta, Menteng
HOME_LAT: float = -6.195125
HOME_LON: float = 106.822832
HOME_REGION_SPAN_M: float = 10_000.0

MARKER_POLICIES = ("reset", "accumulate")


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class MapConfig:
    # Session
    home_lat: float = HOME_LAT
    home_lon: float = HOME_LON
    region_lat_span_m: float = HOME_REGION_SPAN_M
    region_lon_span_m: float = HOME_REGION_SPAN_M
    marker_policy: str = "reset"            # "reset" | "accumulate"
    display_route_on_failure: bool = True  # flip to route mode even when routing failed

    # Offline platform
    max_search_results: int = 25
    walking_speed_kmh: float = WALKING_SPEED_KMH
    steps_time_penalty: float = 2.0        # multiplier for 'steps' road type
    max_snap_distance_m: float = 500.0     # origin/destination must be this close to the graph

    # Logging
    log_dir: str = "."                     # directory for saved JSON files
    route_filename: str = "active_route.json"
    events_filename: str = "map_session.jsonl"

    def __post_init__(self) -> None:
        if self.marker_policy not in MARKER_POLICIES:
            raise ValueError(
                f"marker_policy must be one of {MARKER_POLICIES}, got {self.marker_policy!r}"
            )

    @property
    def home(self) -> Coord:
        return Coord(self.home_lat, self.home_lon)

    @property
    def home_region(self) -> Region:
        return Region.from_meters(self.home, self.region_lat_span_m, self.region_lon_span_m)

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def events_filepath(self) -> str:
        return os.path.join(self.log_dir, self.events_filename)
