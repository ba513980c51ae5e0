# main.py
# Entry point — runs one scripted map session against a local OSM extract:
# search → select → directions, printing what the screen would render.
#
#   mappath-demo --osm map.osm --query cafe --pick 0

import argparse
import asyncio
import logging
from typing import List, Optional

from .errors import MapLoadError
from .map_config import MapConfig
from .platform import OfflineMappingPlatform
from .session import MapSessionController, SessionState
from .session_logger import SessionLogger

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run a scripted map session against an .osm extract.")
    p.add_argument("--osm", required=True, help="Path to the .osm map file")
    p.add_argument("--places", default=None, help="Places CSV from map_build.py (default: read places from --osm)")
    p.add_argument("--query", default="", help="Search text (default: everything near home)")
    p.add_argument("--pick", type=int, default=0, help="Index of the search result to route to")
    p.add_argument("--log-dir", default="logs", help="Directory for route JSON and session events")
    p.add_argument("--accumulate-markers", action="store_true",
                   help="Keep path markers from earlier routes instead of resetting them")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def _print_state(state: SessionState) -> None:
    print(f"  phase={state.phase.value} results={len(state.results)} "
          f"markers={len(state.path_markers)} details={state.is_details_visible} "
          f"route_displayed={state.is_route_displayed}")


async def run_session(platform: OfflineMappingPlatform, config: MapConfig, query: str, pick: int) -> int:
    session = MapSessionController(platform, config, SessionLogger(config))
    session.subscribe(_print_state)

    try:
        print(f"[Map] Searching '{query}' around {config.home}")
        outcome = await session.submit_search(query)
        if not outcome.ok:
            print(f"[Map] Search failed: {outcome.detail}")
            return 1

        results = session.state.results
        for i, place in enumerate(results):
            print(f"  [{i}] {place.name} ({place.category or '-'})")
        if not results:
            print("[Map] Nothing found.")
            return 1
        if not 0 <= pick < len(results):
            print(f"[Map] --pick {pick} is out of range (0..{len(results) - 1}).")
            return 2

        session.select_place(results[pick])
        outcome = await session.request_directions()

        state = session.state
        if outcome is None or not outcome.ok:
            detail = outcome.detail if outcome is not None else "nothing selected"
            print(f"[Map] No route: {detail}")
            return 1

        route = state.active_route
        print(f"[Map] Route to {state.route_destination.name}: "
              f"{int(route.distance_m)} m, ~{int(route.expected_travel_time_s // 60)} min")
        for step in route.steps:
            print(f"  {step.step_id:>2}. {step.instructions} ({int(step.distance_m)} m)")
        print(f"[Map] Camera → {state.camera_target}")
        print(f"[Map] Visible markers: {[p.name for p in session.visible_places]}")
        return 0
    finally:
        session.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    # Logging setup — configure once here, all modules inherit
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = MapConfig(
        marker_policy="accumulate" if args.accumulate_markers else "reset",
        log_dir=args.log_dir,
    )

    try:
        platform = OfflineMappingPlatform(args.osm, config, places_csv=args.places)
    except MapLoadError as e:
        logger.error(str(e))
        return 1

    return asyncio.run(run_session(platform, config, args.query, args.pick))


if __name__ == "__main__":
    raise SystemExit(main())
