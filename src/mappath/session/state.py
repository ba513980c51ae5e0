# state.py
# Session state, the events that change it and the pure reducer.
# No I/O here — the controller issues platform calls and feeds results back as events.

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple, Union

from ..map_config import MapConfig
from ..models import CameraTarget, Coord, Err, Ok, Outcome, Place, Route

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchTextChanged:
    text: str


@dataclass(frozen=True)
class SearchSubmitted:
    token: int
    query: str


@dataclass(frozen=True)
class SearchCompleted:
    token: int
    outcome: Outcome


@dataclass(frozen=True)
class PlaceSelected:
    place: Optional[Place]


@dataclass(frozen=True)
class DetailsDismissed:
    pass


@dataclass(frozen=True)
class DirectionsRequested:
    token: int
    destination: Place


@dataclass(frozen=True)
class RouteCompleted:
    token: int
    destination: Place
    outcome: Outcome


Event = Union[
    SearchTextChanged, SearchSubmitted, SearchCompleted, PlaceSelected,
    DetailsDismissed, DirectionsRequested, RouteCompleted,
]


# ---------------------------------------------------------------------------
# Session phase (derived, never stored)
# ---------------------------------------------------------------------------

class SessionPhase(Enum):
    IDLE            = "idle"
    SEARCHING       = "searching"
    SELECTED        = "selected"
    ROUTING         = "routing"
    ROUTE_DISPLAYED = "route_displayed"


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionState:
    """Everything the map screen renders. Replaced, never mutated."""
    search_text: str
    results: Tuple[Place, ...]
    selected_place: Optional[Place]
    active_route: Optional[Route]
    path_markers: Tuple[Coord, ...]
    route_destination: Optional[Place]
    is_route_displayed: bool
    is_details_visible: bool
    camera_target: CameraTarget
    camera_animated: bool = False

    last_search_error: Optional[Err] = None
    last_route_error: Optional[Err] = None

    # Latest issued request tokens; completions carrying an older token are stale.
    search_token: int = 0
    route_token: int = 0
    pending_search: bool = False
    pending_route: bool = False

    @staticmethod
    def initial(config: Optional[MapConfig] = None) -> "SessionState":
        config = config or MapConfig()
        return SessionState(
            search_text="",
            results=(),
            selected_place=None,
            active_route=None,
            path_markers=(config.home,),
            route_destination=None,
            is_route_displayed=False,
            is_details_visible=False,
            camera_target=config.home_region,
        )

    @property
    def phase(self) -> SessionPhase:
        if self.pending_route:
            return SessionPhase.ROUTING
        if self.pending_search:
            return SessionPhase.SEARCHING
        if self.selected_place is not None and self.selected_place != self.route_destination:
            return SessionPhase.SELECTED
        if self.is_route_displayed:
            return SessionPhase.ROUTE_DISPLAYED
        if self.selected_place is not None:
            return SessionPhase.SELECTED
        return SessionPhase.IDLE


def visible_places(state: SessionState) -> List[Place]:
    """
    Places to draw as markers.

    While a route is displayed only the route destination is shown;
    otherwise every search result is.
    """
    if state.is_route_displayed:
        return [p for p in state.results if p == state.route_destination]
    return list(state.results)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def reduce(state: SessionState, event: Event, config: Optional[MapConfig] = None) -> SessionState:
    """
    Apply one event to a state and return the next state.

    Args:
        state:  Current state.
        event:  One of the event dataclasses above.
        config: MapConfig for marker policy and failure behaviour.

    Returns:
        The new SessionState (may be `state` itself for ignored events).

    Raises:
        TypeError: For an unknown event type.
    """
    config = config or MapConfig()

    if isinstance(event, SearchTextChanged):
        return replace(state, search_text=event.text)

    if isinstance(event, SearchSubmitted):
        return replace(state, search_token=event.token, pending_search=True)

    if isinstance(event, SearchCompleted):
        if event.token != state.search_token:
            logger.debug(f"Dropping stale search result (token {event.token}, latest {state.search_token}).")
            return state
        if isinstance(event.outcome, Ok):
            return replace(
                state,
                results=tuple(event.outcome.value),
                last_search_error=None,
                pending_search=False,
            )
        return replace(state, results=(), last_search_error=event.outcome, pending_search=False)

    if isinstance(event, PlaceSelected):
        return replace(
            state,
            selected_place=event.place,
            is_details_visible=event.place is not None,
        )

    if isinstance(event, DetailsDismissed):
        return replace(state, is_details_visible=False)

    if isinstance(event, DirectionsRequested):
        return replace(state, route_token=event.token, pending_route=True)

    if isinstance(event, RouteCompleted):
        return _apply_route(state, event, config)

    raise TypeError(f"Unknown session event: {event!r}")


def _apply_route(state: SessionState, event: RouteCompleted, config: MapConfig) -> SessionState:
    if event.token != state.route_token:
        logger.debug(f"Dropping stale route result (token {event.token}, latest {state.route_token}).")
        return state

    if isinstance(event.outcome, Ok):
        route: Route = event.outcome.value
        if config.marker_policy == "accumulate":
            markers = list(state.path_markers)
        else:
            markers = [config.home]
        markers.extend(step.coordinate for step in route.steps)

        rect = route.bounding_rect
        return replace(
            state,
            active_route=route,
            path_markers=tuple(markers),
            route_destination=event.destination,
            is_route_displayed=True,
            is_details_visible=False,
            camera_target=rect if rect is not None else state.camera_target,
            camera_animated=rect is not None or state.camera_animated,
            last_route_error=None,
            pending_route=False,
        )

    failed = replace(state, active_route=None, last_route_error=event.outcome, pending_route=False)
    if not config.display_route_on_failure:
        return failed
    return replace(
        failed,
        route_destination=event.destination,
        is_route_displayed=True,
        is_details_visible=False,
    )
