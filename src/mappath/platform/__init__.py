# Mapping platform contract and the offline OpenStreetMap implementation.

from .base import MappingPlatform
from .offline import OfflineMappingPlatform

__all__ = ["MappingPlatform", "OfflineMappingPlatform"]
