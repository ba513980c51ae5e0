# base.py
# Contract between the session controller and whatever serves search and routing.

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Coord, Place, Region, Route


class MappingPlatform(ABC):
    """
    Places search and directions provider.

    Implementations signal failure by raising SearchFailed / RouteFailed.
    `route` may also return None when no route exists.
    """

    @abstractmethod
    async def search(self, query: str, region: Region) -> List[Place]:
        """Places matching `query`, in the platform's own ranking order."""
        ...

    @abstractmethod
    async def route(self, origin: Coord, destination: Place) -> Optional[Route]:
        """Best route from `origin` to `destination`, or None."""
        ...
