# Map screen session: state, reducer and the controller that drives them.

from .controller import MapSessionController
from .state import SessionPhase, SessionState, reduce, visible_places

__all__ = [
    "MapSessionController",
    "SessionPhase",
    "SessionState",
    "reduce",
    "visible_places",
]
