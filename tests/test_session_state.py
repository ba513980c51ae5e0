import pytest

from mappath.map_config import MapConfig
from mappath.models import Err, FailureKind, Ok, Route, RouteStep
from mappath.session.state import (
    DetailsDismissed, DirectionsRequested, PlaceSelected, RouteCompleted,
    SearchCompleted, SearchSubmitted, SearchTextChanged, SessionPhase,
    SessionState, reduce, visible_places,
)

from conftest import HOME, make_place, make_route


@pytest.fixture
def state():
    return SessionState.initial(MapConfig())


def _with_results(state, *places):
    state = reduce(state, SearchSubmitted(1, "q"))
    return reduce(state, SearchCompleted(1, Ok(list(places))))


def _routed(state, destination, route, token=1, config=None):
    state = reduce(state, DirectionsRequested(token, destination), config)
    return reduce(state, RouteCompleted(token, destination, Ok(route)), config)


def test_initial_state_is_seeded_with_home():
    state = SessionState.initial()
    assert state.path_markers == (HOME,)
    assert state.results == ()
    assert state.search_text == ""
    assert state.camera_target == MapConfig().home_region
    assert state.phase is SessionPhase.IDLE


def test_search_completion_replaces_results_in_order(state, p1, p2):
    state = _with_results(state, p1, p2)
    state = reduce(state, SearchSubmitted(2, "other"))
    assert state.phase is SessionPhase.SEARCHING
    state = reduce(state, SearchCompleted(2, Ok([p2, p1])))
    assert state.results == (p2, p1)
    assert state.phase is SessionPhase.IDLE


def test_search_failure_clears_results_and_keeps_the_error(state, p1):
    state = _with_results(state, p1)
    state = reduce(state, SearchSubmitted(2, "x"))
    err = Err(FailureKind.SEARCH_FAILED, "offline")
    state = reduce(state, SearchCompleted(2, err))
    assert state.results == ()
    assert state.last_search_error == err


def test_empty_success_is_not_an_error(state):
    state = reduce(state, SearchSubmitted(1, "nothing"))
    state = reduce(state, SearchCompleted(1, Ok([])))
    assert state.results == ()
    assert state.last_search_error is None


def test_stale_search_result_is_dropped(state, p1, p2):
    state = reduce(state, SearchSubmitted(1, "a"))
    state = reduce(state, SearchSubmitted(2, "b"))
    state = reduce(state, SearchCompleted(2, Ok([p2])))
    after = reduce(state, SearchCompleted(1, Ok([p1])))
    assert after is state
    assert after.results == (p2,)


def test_select_place_shows_details(state, p1, p2):
    state = _with_results(state, p1, p2)
    state = reduce(state, PlaceSelected(p1))
    assert state.selected_place == p1
    assert state.is_details_visible
    assert state.phase is SessionPhase.SELECTED


def test_select_place_is_idempotent(state, p1):
    once = reduce(state, PlaceSelected(p1))
    twice = reduce(once, PlaceSelected(p1))
    assert once == twice


def test_deselect_hides_details(state, p1):
    state = reduce(state, PlaceSelected(p1))
    state = reduce(state, PlaceSelected(None))
    assert state.selected_place is None
    assert not state.is_details_visible


def test_dismiss_details_keeps_selection(state, p1):
    state = reduce(state, PlaceSelected(p1))
    state = reduce(state, DetailsDismissed())
    assert state.selected_place == p1
    assert not state.is_details_visible


def test_successful_route_updates_display_state(state, p1):
    state = reduce(state, PlaceSelected(p1))
    route = make_route(3)
    state = reduce(state, DirectionsRequested(1, p1))
    assert state.phase is SessionPhase.ROUTING
    state = reduce(state, RouteCompleted(1, p1, Ok(route)))

    assert state.active_route == route
    assert state.path_markers[0] == HOME
    assert state.path_markers[1:] == tuple(s.coordinate for s in route.steps)
    assert state.route_destination == p1
    assert state.is_route_displayed
    assert not state.is_details_visible
    assert state.camera_target == route.bounding_rect
    assert state.camera_animated
    assert state.phase is SessionPhase.ROUTE_DISPLAYED


def test_every_step_contributes_one_marker(state, p1):
    arrival = RouteStep(step_id=3, instructions="You have arrived", polyline=(p1.coord,), action="finish")
    route = make_route(3)
    route = Route(steps=route.steps + (arrival,), expected_travel_time_s=route.expected_travel_time_s)
    state = _routed(state, p1, route)
    assert len(state.path_markers) == 1 + 4
    assert state.path_markers[-1] == p1.coord


def test_reset_policy_keeps_only_latest_route_markers(state, p1, p2):
    state = _routed(state, p1, make_route(3), token=1)
    state = _routed(state, p2, make_route(2), token=2)
    assert len(state.path_markers) == 3
    assert state.path_markers[0] == HOME


def test_accumulate_policy_only_grows(p1, p2):
    config = MapConfig(marker_policy="accumulate")
    state = SessionState.initial(config)
    lengths = [len(state.path_markers)]
    for token, n in enumerate([3, 2, 4], start=1):
        state = _routed(state, p1 if token % 2 else p2, make_route(n), token, config)
        lengths.append(len(state.path_markers))
    assert lengths == [1, 4, 6, 10]
    assert state.path_markers[0] == HOME


def test_failed_route_still_flips_to_route_mode(state, p1):
    state = reduce(state, PlaceSelected(p1))
    state = reduce(state, DirectionsRequested(1, p1))
    err = Err(FailureKind.ROUTE_FAILED, "no route")
    state = reduce(state, RouteCompleted(1, p1, err))

    assert state.active_route is None
    assert state.is_route_displayed
    assert not state.is_details_visible
    assert state.route_destination == p1
    assert state.last_route_error == err
    assert state.path_markers == (HOME,)
    assert state.camera_target == MapConfig().home_region


def test_failed_route_can_leave_display_alone():
    config = MapConfig(display_route_on_failure=False)
    state = SessionState.initial(config)
    place = make_place("X", 0.0, 0.0)
    state = reduce(state, PlaceSelected(place), config)
    state = reduce(state, DirectionsRequested(1, place), config)
    state = reduce(state, RouteCompleted(1, place, Err(FailureKind.ROUTE_FAILED)), config)
    assert not state.is_route_displayed
    assert state.is_details_visible
    assert state.last_route_error is not None


def test_stale_route_result_is_dropped(state, p1, p2):
    state = reduce(state, DirectionsRequested(1, p1))
    state = reduce(state, DirectionsRequested(2, p2))
    state = reduce(state, RouteCompleted(2, p2, Ok(make_route(2))))
    after = reduce(state, RouteCompleted(1, p1, Ok(make_route(5))))
    assert after is state
    assert after.route_destination == p2


def test_visible_places_while_route_displayed(state, p1, p2):
    state = _with_results(state, p1, p2)
    assert visible_places(state) == [p1, p2]
    state = _routed(state, p1, make_route(1), token=1)
    assert visible_places(state) == [p1]


def test_selecting_after_route_keeps_route_mode(state, p1, p2):
    state = _with_results(state, p1, p2)
    state = _routed(state, p1, make_route(2), token=1)
    markers = state.path_markers
    state = reduce(state, PlaceSelected(p2))
    assert state.is_route_displayed
    assert state.path_markers == markers
    assert state.phase is SessionPhase.SELECTED


def test_search_text_changed(state):
    assert reduce(state, SearchTextChanged("monas")).search_text == "monas"


def test_unknown_event_raises(state):
    with pytest.raises(TypeError):
        reduce(state, object())


def test_bad_marker_policy_rejected():
    with pytest.raises(ValueError):
        MapConfig(marker_policy="sometimes")
