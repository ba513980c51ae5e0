# controller.py
# Public entry point for a map screen session.
# Owns the SessionState; turns user actions into platform calls and reducer events.

import asyncio
import itertools
import logging
from typing import Callable, List, Optional

from ..errors import PlatformError
from ..map_config import MapConfig
from ..models import Err, FailureKind, Ok, Outcome, Place
from ..platform.base import MappingPlatform
from ..session_logger import SessionLogger
from .state import (
    DetailsDismissed, DirectionsRequested, Event, PlaceSelected, RouteCompleted,
    SearchCompleted, SearchSubmitted, SearchTextChanged, SessionState,
    reduce, visible_places,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]

# Raised by a platform that could not serve the request; reported as Err.
PLATFORM_FAILURES = (PlatformError, OSError, asyncio.TimeoutError)


class MapSessionController:
    """
    Session facade for one map screen activation.

    Typical lifecycle:
        session = MapSessionController(platform)
        session.set_search_text("cafe")
        await session.submit_search()
        session.select_place(session.state.results[0])
        await session.request_directions()

    submit_search() and request_directions() suspend at the platform call.
    Overlapping calls are allowed; only the most recently issued request of
    each kind is applied when it resolves.

    Args:
        platform:       MappingPlatform serving search and routing.
        config:         Optional MapConfig; defaults to MapConfig().
        session_logger: Optional SessionLogger for route/event persistence.
    """

    def __init__(
        self,
        platform: MappingPlatform,
        config: Optional[MapConfig] = None,
        session_logger: Optional[SessionLogger] = None,
    ) -> None:
        self.config = config or MapConfig()
        self._platform = platform
        self._session_logger = session_logger
        self._state = SessionState.initial(self.config)
        self._listeners: List[StateListener] = []
        self._search_tokens = itertools.count(1)
        self._route_tokens = itertools.count(1)
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def visible_places(self) -> List[Place]:
        return visible_places(self._state)

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call `listener` with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Screen teardown: results still in flight are dropped when they arrive."""
        self._closed = True
        self._listeners.clear()
        logger.info("Map session closed.")

    # ------------------------------------------------------------------
    # Synchronous user actions
    # ------------------------------------------------------------------

    def set_search_text(self, text: str) -> None:
        self._dispatch(SearchTextChanged(text))

    def select_place(self, place: Optional[Place]) -> None:
        """Select a place (or None to deselect) and show/hide the details sheet."""
        self._dispatch(PlaceSelected(place))
        if self._session_logger and place is not None:
            self._session_logger.log_event("select", place=place.to_dict())

    def dismiss_details(self) -> None:
        self._dispatch(DetailsDismissed())

    # ------------------------------------------------------------------
    # Asynchronous user actions
    # ------------------------------------------------------------------

    async def submit_search(self, query: Optional[str] = None) -> Optional[Outcome]:
        """
        Search the home region for `query` (defaults to the current search text).

        Returns:
            Ok(list of places) or Err(SEARCH_FAILED); None if the session is closed.
        """
        if self._closed:
            return None
        if query is None:
            query = self._state.search_text
        else:
            self._dispatch(SearchTextChanged(query))

        token = next(self._search_tokens)
        self._dispatch(SearchSubmitted(token, query))
        logger.info(f"Searching for '{query}' (request {token}).")

        try:
            places = await self._platform.search(query, self.config.home_region)
        except PLATFORM_FAILURES as e:
            logger.warning(f"Search for '{query}' failed: {e}")
            outcome: Outcome = Err(FailureKind.SEARCH_FAILED, str(e))
        except Exception as e:
            # Not a platform failure: settle the request, then let it surface
            self._dispatch(SearchCompleted(token, Err(FailureKind.SEARCH_FAILED, repr(e))))
            raise
        else:
            if places is None:
                outcome = Err(FailureKind.SEARCH_FAILED, "Platform returned no result list.")
            else:
                outcome = Ok(list(places))

        self._dispatch(SearchCompleted(token, outcome))
        if self._session_logger and not self._closed:
            self._session_logger.log_event(
                "search", query=query, ok=outcome.ok,
                count=len(outcome.value) if isinstance(outcome, Ok) else 0,
            )
        return outcome

    async def request_directions(self) -> Optional[Outcome]:
        """
        Route from home to the currently selected place.

        Returns:
            Ok(Route) or Err(ROUTE_FAILED); None when nothing is selected
            (no platform call is made) or the session is closed.
        """
        destination = self._state.selected_place
        if destination is None or self._closed:
            return None

        token = next(self._route_tokens)
        self._dispatch(DirectionsRequested(token, destination))
        logger.info(f"Requesting directions to '{destination.name}' (request {token}).")

        try:
            route = await self._platform.route(self.config.home, destination)
        except PLATFORM_FAILURES as e:
            logger.warning(f"Route to '{destination.name}' failed: {e}")
            outcome: Outcome = Err(FailureKind.ROUTE_FAILED, str(e))
        except Exception as e:
            self._dispatch(RouteCompleted(token, destination, Err(FailureKind.ROUTE_FAILED, repr(e))))
            raise
        else:
            if route is None:
                logger.warning(f"No route found to '{destination.name}'.")
                outcome = Err(FailureKind.ROUTE_FAILED, "No route found.")
            else:
                outcome = Ok(route)

        self._dispatch(RouteCompleted(token, destination, outcome))
        if self._session_logger and not self._closed:
            self._session_logger.log_event(
                "route", destination=destination.name, ok=outcome.ok,
                steps=len(outcome.value.steps) if isinstance(outcome, Ok) else 0,
            )
            if isinstance(outcome, Ok) and self._state.active_route is outcome.value:
                self._session_logger.save_route(outcome.value, destination.name)
        return outcome

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, event: Event) -> None:
        if self._closed:
            logger.debug(f"Session closed, ignoring {type(event).__name__}.")
            return
        new_state = reduce(self._state, event, self.config)
        if new_state is self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
