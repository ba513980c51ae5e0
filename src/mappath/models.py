# models.py
# Shared value types used across the session, platform and logger modules.

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar, Union

from .geo_utils import lat_degrees_for, lon_degrees_for, polyline_bounds


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate. Equal and hashed by the exact pair."""
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @staticmethod
    def from_dict(d: dict) -> "Coord":
        return Coord(float(d["lat"]), float(d["lon"]))


# ---------------------------------------------------------------------------
# Areas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MapRect:
    """Axis-aligned lat/lon rectangle."""
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def center(self) -> Coord:
        return Coord((self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2)

    def contains(self, coord: Coord) -> bool:
        return (self.min_lat <= coord.lat <= self.max_lat
                and self.min_lon <= coord.lon <= self.max_lon)

    def to_dict(self) -> dict:
        return {
            "min_lat": self.min_lat, "min_lon": self.min_lon,
            "max_lat": self.max_lat, "max_lon": self.max_lon,
        }


@dataclass(frozen=True)
class Region:
    """A centre point plus north-south / east-west spans in metres."""
    center: Coord
    lat_span_m: float
    lon_span_m: float

    @staticmethod
    def from_meters(center: Coord, lat_meters: float, lon_meters: float) -> "Region":
        return Region(center, float(lat_meters), float(lon_meters))

    @property
    def lat_delta(self) -> float:
        return lat_degrees_for(self.lat_span_m)

    @property
    def lon_delta(self) -> float:
        return lon_degrees_for(self.lon_span_m, self.center.lat)

    def to_rect(self) -> MapRect:
        half_lat = self.lat_delta / 2
        half_lon = self.lon_delta / 2
        return MapRect(
            self.center.lat - half_lat, self.center.lon - half_lon,
            self.center.lat + half_lat, self.center.lon + half_lon,
        )

    def contains(self, coord: Coord) -> bool:
        return self.to_rect().contains(coord)


CameraTarget = Union[Region, MapRect]


# ---------------------------------------------------------------------------
# Place
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Place:
    """A search result: a point of interest with a name and coordinate."""
    name: str
    coord: Coord
    # (key, value) pairs so the place stays hashable
    metadata: Tuple[Tuple[str, str], ...] = ()

    @property
    def category(self) -> Optional[str]:
        return self.meta.get("kind")

    @property
    def meta(self) -> Dict[str, str]:
        return dict(self.metadata)

    def to_dict(self) -> dict:
        return {"name": self.name, "coord": self.coord.to_dict(), "metadata": self.meta}

    @staticmethod
    def from_dict(d: dict) -> "Place":
        return Place(
            name=d["name"],
            coord=Coord.from_dict(d["coord"]),
            metadata=tuple(sorted(d.get("metadata", {}).items())),
        )


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RouteStep:
    """One leg of a route with its geometry."""
    step_id: int
    instructions: str
    polyline: Tuple[Coord, ...]
    distance_m: float = 0.0
    action: str = "continue"     # "start" | "turn_right" | "turn_left" | "continue" | "finish"
    road_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.polyline:
            raise ValueError(f"Route step {self.step_id} has no geometry.")

    @property
    def bounding_rect(self) -> MapRect:
        return MapRect(*polyline_bounds([(c.lat, c.lon) for c in self.polyline]))

    @property
    def coordinate(self) -> Coord:
        """Representative coordinate: centre of the polyline's bounding box."""
        return self.bounding_rect.center

    def to_dict(self) -> dict:
        return {
            "step_id": self.step_id,
            "instructions": self.instructions,
            "polyline": [c.to_dict() for c in self.polyline],
            "distance_m": self.distance_m,
            "action": self.action,
            "road_name": self.road_name,
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteStep":
        return RouteStep(
            step_id=d["step_id"],
            instructions=d["instructions"],
            polyline=tuple(Coord.from_dict(c) for c in d["polyline"]),
            distance_m=d.get("distance_m", 0.0),
            action=d.get("action", "continue"),
            road_name=d.get("road_name"),
        )


@dataclass(frozen=True)
class Route:
    """Ordered steps from origin to destination."""
    steps: Tuple[RouteStep, ...]
    expected_travel_time_s: float = 0.0

    @property
    def polyline(self) -> Tuple[Coord, ...]:
        points = []
        for step in self.steps:
            for c in step.polyline:
                if not points or points[-1] != c:
                    points.append(c)
        return tuple(points)

    @property
    def bounding_rect(self) -> Optional[MapRect]:
        line = self.polyline
        if not line:
            return None
        return MapRect(*polyline_bounds([(c.lat, c.lon) for c in line]))

    @property
    def distance_m(self) -> float:
        return sum(s.distance_m for s in self.steps)

    def to_dict(self) -> dict:
        return {
            "expected_travel_time_s": self.expected_travel_time_s,
            "steps": [s.to_dict() for s in self.steps],
        }

    @staticmethod
    def from_dict(d: dict) -> "Route":
        return Route(
            steps=tuple(RouteStep.from_dict(s) for s in d["steps"]),
            expected_travel_time_s=d.get("expected_travel_time_s", 0.0),
        )


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class FailureKind(Enum):
    SEARCH_FAILED = "search_failed"
    ROUTE_FAILED  = "route_failed"


T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: FailureKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[Any], Err]


def place_metadata(**items: Any) -> Tuple[Tuple[str, str], ...]:
    """Build a hashable metadata tuple, dropping empty values."""
    return tuple(sorted((k, str(v)) for k, v in items.items() if v not in (None, "")))

