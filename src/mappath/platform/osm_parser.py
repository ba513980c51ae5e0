# osm_parser.py
# Streams an .osm file into a walking graph keyed by OSM node id.
# Only nodes referenced by walkable ways become graph nodes.

import logging
import xml.sax as sax
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import MapLoadError
from ..geo_utils import haversine_distance
from ..map_config import MapConfig, WALKABLE_TYPES, FORBIDDEN_TYPES
from ..models import Coord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Graph primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Road:
    """The OSM way an edge was cut from. Shared by all of the way's edges."""
    way_id: str
    name: str
    road_type: str


class Node:
    __slots__ = ["id", "coord", "edges"]

    def __init__(self, nid: str, coord: Coord) -> None:
        self.id = nid
        self.coord = coord
        self.edges: List["Edge"] = []


class Edge:
    """One directed hop between consecutive way nodes."""

    __slots__ = ["source", "target", "road", "distance", "time"]

    def __init__(self, source: Node, target: Node, road: Road, distance: float, time: float) -> None:
        self.source = source
        self.target = target
        self.road = road
        self.distance = distance
        self.time = time


def walking_time(distance_m: float, road_type: str, config: MapConfig) -> float:
    """Seconds to walk `distance_m` on a road of `road_type`."""
    speed_ms = config.walking_speed_kmh / 3.6
    penalty = config.steps_time_penalty if road_type == "steps" else 1.0
    return distance_m / speed_ms * penalty


def is_walkable(tags: Dict[str, str]) -> bool:
    road_type = tags.get("highway")
    if road_type is None or road_type in FORBIDDEN_TYPES:
        return False
    return road_type in WALKABLE_TYPES and tags.get("foot") != "no"


# ---------------------------------------------------------------------------
# Routing graph
# ---------------------------------------------------------------------------

class RoutingDB:
    """Walkable nodes and the two-way edges between them."""

    def __init__(self, config: Optional[MapConfig] = None) -> None:
        self.config = config or MapConfig()
        self.nodes: Dict[str, Node] = {}
        self.roads: List[Road] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def add_way(self, road: Road, points: Sequence[Tuple[str, Optional[Coord]]]) -> int:
        """
        Link consecutive way nodes in both directions.

        Args:
            road:   The way being added.
            points: (node id, coordinate) in way order; a None coordinate
                    (node missing from the extract) breaks the way there.

        Returns:
            Number of hops added.
        """
        hops = 0
        for (u_id, u_coord), (v_id, v_coord) in zip(points, points[1:]):
            if u_coord is None or v_coord is None:
                continue
            u = self._node(u_id, u_coord)
            v = self._node(v_id, v_coord)
            d = haversine_distance(u_coord.lat, u_coord.lon, v_coord.lat, v_coord.lon)
            t = walking_time(d, road.road_type, self.config)
            u.edges.append(Edge(u, v, road, d, t))
            v.edges.append(Edge(v, u, road, d, t))
            hops += 1
        if hops:
            self.roads.append(road)
        return hops

    def nearest(self, coord: Coord) -> Tuple[Optional[Node], float]:
        """Closest routable node to coord and its distance in metres."""
        best_node = None
        min_dist = float("inf")
        for node in self.nodes.values():
            d = haversine_distance(coord.lat, coord.lon, node.coord.lat, node.coord.lon)
            if d < min_dist:
                min_dist = d
                best_node = node
        return best_node, min_dist

    def _node(self, nid: str, coord: Coord) -> Node:
        node = self.nodes.get(nid)
        if node is None:
            node = self.nodes[nid] = Node(nid, coord)
        return node


# ---------------------------------------------------------------------------
# SAX content handler
# ---------------------------------------------------------------------------

class OSMHandler(sax.ContentHandler):
    """
    Remembers every node's coordinate, then hands each walkable way to the
    RoutingDB once its closing tag is seen. OSM files list nodes before ways.
    """

    def __init__(self, db: RoutingDB) -> None:
        self.db = db
        self._coords: Dict[str, Coord] = {}
        self._way_id: Optional[str] = None
        self._refs: List[str] = []
        self._tags: Dict[str, str] = {}

    def startElement(self, name: str, attrs) -> None:  # type: ignore[override]
        if name == "node":
            self._coords[attrs["id"]] = Coord(float(attrs["lat"]), float(attrs["lon"]))
        elif name == "way":
            self._way_id = attrs["id"]
            self._refs = []
            self._tags = {}
        elif self._way_id is None:
            return
        elif name == "nd":
            self._refs.append(attrs["ref"])
        elif name == "tag":
            self._tags[attrs["k"]] = attrs["v"]

    def endElement(self, name: str) -> None:  # type: ignore[override]
        if name == "way" and self._way_id is not None:
            if is_walkable(self._tags):
                road = Road(self._way_id, self._tags.get("name", "Unnamed road"), self._tags["highway"])
                self.db.add_way(road, [(ref, self._coords.get(ref)) for ref in self._refs])
            self._way_id = None


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_map(osm_file: str, config: Optional[MapConfig] = None) -> RoutingDB:
    """
    Parse an OSM file and return a populated RoutingDB.

    Raises:
        MapLoadError: If osm_file is missing or not valid XML.
    """
    logger.info(f"Loading map: {osm_file}")
    db = RoutingDB(config)
    parser = sax.make_parser()
    parser.setContentHandler(OSMHandler(db))
    try:
        with open(osm_file, 'r', encoding='utf-8') as f:
            parser.parse(f)
    except (OSError, sax.SAXParseException) as e:
        raise MapLoadError(f"Could not load map {osm_file}: {e}") from e
    logger.info(f"Map ready — {len(db)} routable nodes on {len(db.roads)} ways.")
    return db
