# place_finder.py
# Finds named places (shops, amenities, sights) in an .osm file or in the
# CSV written by map_build.py, and answers free-text searches over them.
#
# Usage:
#   finder = PlaceFinder.from_osm("map.osm")
#   places = finder.search("apotek", config.home_region)

import logging
import xml.sax as sax
from typing import Dict, List, Optional

import pandas as pd

from ..errors import MapLoadError
from ..geo_utils import haversine_distance
from ..models import Coord, Place, Region, place_metadata

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Search words → OSM amenity/shop/tourism/leisure tag values
# ---------------------------------------------------------------------------

CATEGORY_MAP: Dict[str, List[str]] = {
    # Health
    "pharmacy":      ["pharmacy"],
    "apotek":        ["pharmacy"],
    "hospital":      ["hospital", "clinic"],
    "rumah sakit":   ["hospital", "clinic"],
    "clinic":        ["clinic"],

    # Shopping
    "market":        ["supermarket", "convenience", "marketplace"],
    "supermarket":   ["supermarket"],
    "mall":          ["mall", "department_store"],

    # Food
    "restaurant":    ["restaurant", "fast_food", "food_court"],
    "rumah makan":   ["restaurant", "fast_food"],
    "cafe":          ["cafe"],
    "coffee":        ["cafe"],

    # Other
    "fuel":          ["fuel"],
    "atm":           ["atm", "bank"],
    "bank":          ["bank"],
    "park":          ["park"],
    "school":        ["school", "kindergarten", "university"],
    "police":        ["police"],
    "parking":       ["parking"],
    "hotel":         ["hotel", "guest_house"],
    "museum":        ["museum"],
    "mosque":        ["place_of_worship"],
}

PLACE_TAG_KEYS = ("amenity", "shop", "tourism", "leisure")
CSV_COLUMNS = ("kind", "name", "lat", "lon")


# ---------------------------------------------------------------------------
# SAX parser — reads only nodes and their tags
# ---------------------------------------------------------------------------

class _PlaceHandler(sax.ContentHandler):
    """Collects every named node that carries a place-like tag."""

    def __init__(self) -> None:
        self.results: List[dict] = []

        self._curr_node: Optional[dict] = None
        self._curr_tags: Dict[str, str] = {}

    def startElement(self, name: str, attrs) -> None:  # type: ignore[override]
        if name == "node":
            self._curr_node = {
                "lat": float(attrs["lat"]),
                "lon": float(attrs["lon"]),
            }
            self._curr_tags = {}
        elif name == "tag" and self._curr_node is not None:
            self._curr_tags[attrs["k"]] = attrs["v"]

    def endElement(self, name: str) -> None:  # type: ignore[override]
        if name == "node" and self._curr_node is not None:
            self._check_and_save()
            self._curr_node = None
            self._curr_tags = {}

    def _check_and_save(self) -> None:
        place_name = self._curr_tags.get("name")
        if not place_name:
            return
        for key in PLACE_TAG_KEYS:
            kind = self._curr_tags.get(key)
            if kind:
                self.results.append({
                    "lat":  self._curr_node["lat"],
                    "lon":  self._curr_node["lon"],
                    "name": place_name,
                    "kind": kind,
                    "address": self._curr_tags.get("addr:street", ""),
                })
                return


# ---------------------------------------------------------------------------
# Main class
# ---------------------------------------------------------------------------

class PlaceFinder:
    """
    In-memory place index answering free-text searches.

    Args:
        places: Places to index.
        max_results: Cap on results per search (None = unlimited).
    """

    def __init__(self, places: List[Place], max_results: Optional[int] = None) -> None:
        self.places = list(places)
        self.max_results = max_results

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_osm(cls, osm_file: str, max_results: Optional[int] = None) -> "PlaceFinder":
        handler = _PlaceHandler()
        parser = sax.make_parser()
        parser.setContentHandler(handler)
        try:
            parser.parse(osm_file)
        except (OSError, sax.SAXParseException) as e:
            raise MapLoadError(f"Could not read places from {osm_file}: {e}") from e
        places = [_to_place(r) for r in handler.results]
        logger.info(f"{len(places)} places indexed from {osm_file}.")
        return cls(places, max_results)

    @classmethod
    def from_csv(cls, csv_file: str, max_results: Optional[int] = None) -> "PlaceFinder":
        """Load the kind,name,lat,lon CSV produced by map_build.py."""
        try:
            df = pd.read_csv(csv_file)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise MapLoadError(f"Could not read places from {csv_file}: {e}") from e

        missing = [c for c in CSV_COLUMNS if c not in df.columns]
        if missing:
            raise MapLoadError(f"{csv_file} is missing columns: {missing}")

        df = df.dropna(subset=["lat", "lon"])
        df["name"] = df["name"].fillna("").astype(str)
        df = df[df["name"].str.strip() != ""]

        places = [_to_place(r) for r in df.to_dict("records")]
        logger.info(f"{len(places)} places indexed from {csv_file}.")
        return cls(places, max_results)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search(self, query: str, region: Region) -> List[Place]:
        """
        Places in `region` whose name contains `query` or whose kind matches
        a category word in `query`, nearest to the region centre first.
        An empty query matches every place in the region.
        """
        needle = query.strip().casefold()
        kinds = set(CATEGORY_MAP.get(needle, []))

        matches = []
        for place in self.places:
            if not region.contains(place.coord):
                continue
            if needle and needle not in place.name.casefold() and place.meta.get("kind") not in kinds:
                continue
            dist = haversine_distance(
                region.center.lat, region.center.lon,
                place.coord.lat, place.coord.lon,
            )
            matches.append((dist, place))

        matches.sort(key=lambda m: m[0])
        results = [p for _, p in matches]
        if self.max_results is not None:
            results = results[:self.max_results]
        logger.info(f"'{query}': {len(results)} places found.")
        return results

    def list_categories(self) -> List[str]:
        return sorted(CATEGORY_MAP.keys())


def _to_place(record: dict) -> Place:
    return Place(
        name=str(record["name"]),
        coord=Coord(float(record["lat"]), float(record["lon"])),
        metadata=place_metadata(kind=record.get("kind"), address=record.get("address")),
    )
