# route_calculator.py
# A* over walking time on a RoutingDB graph.
# Consecutive hops on the same road become one RouteStep carrying their polyline.

import heapq
import itertools
from typing import Dict, List, Optional, Tuple

from ..models import Coord, Route, RouteStep
from ..geo_utils import haversine_distance, calculate_bearing, get_turn_instruction
from ..map_config import MapConfig
from .osm_parser import Edge, Node, RoutingDB


NO_ROUTE_MESSAGE = "No walkable route found between these points."


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _shortest_path(start: Node, goal: Node, speed_ms: float) -> Tuple[Optional[List[Edge]], float]:
    """Edges from start to goal minimising walking time, or (None, inf)."""

    def remaining(node: Node) -> float:
        return haversine_distance(node.coord.lat, node.coord.lon, goal.coord.lat, goal.coord.lon) / speed_ms

    seq = itertools.count()
    frontier = [(remaining(start), next(seq), start)]
    best: Dict[str, float] = {start.id: 0.0}
    arrived_by: Dict[str, Edge] = {}
    settled = set()

    while frontier:
        _, _, node = heapq.heappop(frontier)
        if node is goal:
            break
        if node.id in settled:
            continue
        settled.add(node.id)
        for edge in node.edges:
            cost = best[node.id] + edge.time
            if cost < best.get(edge.target.id, float("inf")):
                best[edge.target.id] = cost
                arrived_by[edge.target.id] = edge
                heapq.heappush(frontier, (cost + remaining(edge.target), next(seq), edge.target))

    if goal.id not in best:
        return None, float("inf")

    edges: List[Edge] = []
    node_id = goal.id
    while node_id != start.id:
        edge = arrived_by[node_id]
        edges.append(edge)
        node_id = edge.source.id
    edges.reverse()
    return edges, best[goal.id]


def _bearing(edge: Edge) -> float:
    a, b = edge.source.coord, edge.target.coord
    return calculate_bearing(a.lat, a.lon, b.lat, b.lon)


def _turn(prev_edge: Edge, next_edge: Edge) -> Tuple[str, str]:
    text = get_turn_instruction(_bearing(next_edge) - _bearing(prev_edge))
    if "right" in text.lower():
        return "turn_right", text
    if "left" in text.lower():
        return "turn_left", text
    return "continue", text


def _build_steps(edges: List[Edge]) -> List[RouteStep]:
    steps: List[RouteStep] = []
    prev_edge: Optional[Edge] = None

    for (name, _), hops in itertools.groupby(edges, key=lambda e: (e.road.name, e.road.road_type)):
        hops = list(hops)
        if prev_edge is None:
            action, text = "start", f"Start on {name}"
        else:
            action, turn_text = _turn(prev_edge, hops[0])
            text = f"{turn_text} onto {name}"
        polyline: Tuple[Coord, ...] = (hops[0].source.coord,) + tuple(e.target.coord for e in hops)
        steps.append(RouteStep(
            step_id=len(steps),
            instructions=text,
            polyline=polyline,
            distance_m=sum(e.distance for e in hops),
            action=action,
            road_name=name,
        ))
        prev_edge = hops[-1]

    # Arrival: zero-length step on the final node
    steps.append(RouteStep(
        step_id=len(steps),
        instructions="You have reached your destination",
        polyline=(edges[-1].target.coord,),
        action="finish",
    ))
    return steps


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class RouteCalculator:
    """
    Calculates a walking route between two coordinates.

    Args:
        db:     Populated RoutingDB from osm_parser.load_map().
        config: MapConfig instance.
    """

    def __init__(self, db: RoutingDB, config: Optional[MapConfig] = None) -> None:
        self.db = db
        self.config = config or MapConfig()

    def calculate(self, origin: Coord, destination: Coord) -> Tuple[Optional[Route], str]:
        """
        Returns:
            (route, message) — route is None on failure.
        """
        start, start_gap = self.db.nearest(origin)
        goal, goal_gap = self.db.nearest(destination)

        if start is None or goal is None:
            return None, "Could not find nearby nodes for given coordinates."

        if max(start_gap, goal_gap) > self.config.max_snap_distance_m:
            return None, "Origin or destination is too far from any walkable road."

        if start is goal:
            return None, "Origin and destination map to the same node."

        edges, seconds = _shortest_path(start, goal, self.config.walking_speed_kmh / 3.6)
        if edges is None:
            return None, NO_ROUTE_MESSAGE

        return Route(steps=tuple(_build_steps(edges)), expected_travel_time_s=seconds), "OK"
