# offline.py
# MappingPlatform backed by a local OpenStreetMap extract.
# Loads the graph and the place index once; serves requests from a worker thread.

import asyncio
import logging
from typing import List, Optional

from ..errors import RouteFailed, SearchFailed
from ..map_config import MapConfig
from ..models import Coord, Place, Region, Route
from .base import MappingPlatform
from .osm_parser import RoutingDB, load_map
from .place_finder import PlaceFinder
from .route_calculator import NO_ROUTE_MESSAGE, RouteCalculator

logger = logging.getLogger(__name__)


class OfflineMappingPlatform(MappingPlatform):
    """
    Walking directions and place search from a single .osm file.

    Args:
        osm_file:   Path to the .osm map file (roads, and places unless places_csv is given).
        config:     Optional MapConfig; defaults to MapConfig().
        places_csv: Optional CSV from map_build.py to use as the place index.

    Raises:
        MapLoadError: If the map or the places file cannot be read.
    """

    def __init__(
        self,
        osm_file: str,
        config: Optional[MapConfig] = None,
        places_csv: Optional[str] = None,
    ) -> None:
        self.config = config or MapConfig()

        # Load map once at startup
        self._db: RoutingDB = load_map(osm_file, self.config)
        self._calculator = RouteCalculator(self._db, self.config)
        if places_csv:
            self._finder = PlaceFinder.from_csv(places_csv, self.config.max_search_results)
        else:
            self._finder = PlaceFinder.from_osm(osm_file, self.config.max_search_results)

    async def search(self, query: str, region: Region) -> List[Place]:
        try:
            return await asyncio.to_thread(self._finder.search, query, region)
        except (ValueError, KeyError) as e:
            raise SearchFailed(f"Search for '{query}' failed: {e}") from e

    async def route(self, origin: Coord, destination: Place) -> Optional[Route]:
        try:
            route, msg = await asyncio.to_thread(self._calculator.calculate, origin, destination.coord)
        except (RuntimeError, ValueError, KeyError) as e:
            raise RouteFailed(f"Routing to '{destination.name}' failed: {e}") from e
        if route is not None:
            logger.info(f"Route to '{destination.name}' ready — {len(route.steps)} steps.")
            return route
        if msg == NO_ROUTE_MESSAGE:
            return None
        raise RouteFailed(msg)

    def list_categories(self) -> List[str]:
        return self._finder.list_categories()
