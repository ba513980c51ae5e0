import asyncio
from typing import Dict, List, Optional

import pytest

from mappath.map_config import MapConfig
from mappath.models import Coord, Place, Route, RouteStep, place_metadata
from mappath.platform.base import MappingPlatform


HOME = Coord(-6.195125, 106.822832)


def make_place(name: str, lat: float, lon: float, kind: str = "cafe") -> Place:
    return Place(name=name, coord=Coord(lat, lon), metadata=place_metadata(kind=kind))


def make_route(n_steps: int, start: Coord = HOME) -> Route:
    """Straight eastward route with n_steps two-point steps."""
    steps = []
    for i in range(n_steps):
        a = Coord(start.lat, start.lon + 0.001 * i)
        b = Coord(start.lat, start.lon + 0.001 * (i + 1))
        steps.append(RouteStep(step_id=i, instructions=f"step {i}", polyline=(a, b), distance_m=110.0))
    return Route(steps=tuple(steps), expected_travel_time_s=80.0 * n_steps)


class FakePlatform(MappingPlatform):
    """
    Scriptable platform. Results are looked up by query / destination name.
    Set `hold_search` / `hold_route` to make calls wait until `release()`.
    """

    def __init__(
        self,
        search_results: Optional[Dict[str, List[Place]]] = None,
        routes: Optional[Dict[str, Optional[Route]]] = None,
    ) -> None:
        self.search_results = search_results or {}
        self.routes = routes or {}
        self.search_error: Optional[Exception] = None
        self.route_error: Optional[Exception] = None
        self.search_calls: list = []
        self.route_calls: list = []
        self.hold_search = False
        self.hold_route = False
        self._gates: Dict[str, asyncio.Event] = {}

    def _gate(self, key: str) -> asyncio.Event:
        if key not in self._gates:
            self._gates[key] = asyncio.Event()
        return self._gates[key]

    def release(self, key: str) -> None:
        self._gate(key).set()

    async def search(self, query, region):
        self.search_calls.append((query, region))
        if self.hold_search:
            await self._gate(f"search:{query}").wait()
        if self.search_error:
            raise self.search_error
        return self.search_results.get(query, [])

    async def route(self, origin, destination):
        self.route_calls.append((origin, destination))
        if self.hold_route:
            await self._gate(f"route:{destination.name}").wait()
        if self.route_error:
            raise self.route_error
        return self.routes.get(destination.name)


@pytest.fixture
def config(tmp_path):
    return MapConfig(log_dir=str(tmp_path / "logs"))


@pytest.fixture
def p1():
    return make_place("Kopi Kenangan", -6.1941, 106.8249)


@pytest.fixture
def p2():
    return make_place("Apotek Menteng", -6.1951, 106.8239, kind="pharmacy")


# ---------------------------------------------------------------------------
# Small OSM extract around the home coordinate
#
#   n1 ── Jalan Sunda ── n2 ── n3
#                              │ Gang Kenari
#                              n4  (Kopi Kenangan next to it)
#
#   n5 ── n6   disconnected footway (Warung Pulau next to n6)
# ---------------------------------------------------------------------------

OSM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6">
  <node id="1" lat="-6.1950" lon="106.8228"/>
  <node id="2" lat="-6.1950" lon="106.8238"/>
  <node id="3" lat="-6.1950" lon="106.8248"/>
  <node id="4" lat="-6.1940" lon="106.8248"/>
  <node id="5" lat="-6.1900" lon="106.8300"/>
  <node id="6" lat="-6.1900" lon="106.8305"/>
  <node id="7" lat="-6.2000" lon="106.8200"/>
  <node id="8" lat="-6.2010" lon="106.8200"/>
  <node id="100" lat="-6.1941" lon="106.8249">
    <tag k="amenity" v="cafe"/>
    <tag k="name" v="Kopi Kenangan"/>
  </node>
  <node id="101" lat="-6.1951" lon="106.8239">
    <tag k="amenity" v="pharmacy"/>
    <tag k="name" v="Apotek Menteng"/>
    <tag k="addr:street" v="Jalan Sunda"/>
  </node>
  <node id="102" lat="-6.1952" lon="106.8240">
    <tag k="amenity" v="bench"/>
  </node>
  <node id="103" lat="-6.5000" lon="106.8000">
    <tag k="amenity" v="cafe"/>
    <tag k="name" v="Far Cafe"/>
  </node>
  <node id="104" lat="-6.1899" lon="106.8306">
    <tag k="shop" v="convenience"/>
    <tag k="name" v="Warung Pulau"/>
  </node>
  <way id="10">
    <nd ref="1"/><nd ref="2"/><nd ref="3"/>
    <tag k="highway" v="residential"/>
    <tag k="name" v="Jalan Sunda"/>
  </way>
  <way id="11">
    <nd ref="3"/><nd ref="4"/>
    <tag k="highway" v="footway"/>
    <tag k="name" v="Gang Kenari"/>
  </way>
  <way id="12">
    <nd ref="5"/><nd ref="6"/>
    <tag k="highway" v="footway"/>
    <tag k="name" v="Jalan Terpisah"/>
  </way>
  <way id="13">
    <nd ref="7"/><nd ref="8"/>
    <tag k="highway" v="motorway"/>
  </way>
</osm>
"""


@pytest.fixture
def osm_file(tmp_path):
    path = tmp_path / "map.osm"
    path.write_text(OSM_XML, encoding="utf-8")
    return str(path)
