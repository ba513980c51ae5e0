# Map screen session coordination: search, selection, directions and path markers.

from .map_config import MapConfig
from .models import Coord, Err, FailureKind, MapRect, Ok, Place, Region, Route, RouteStep
from .session import MapSessionController, SessionState, visible_places

__version__ = "0.1.0"
