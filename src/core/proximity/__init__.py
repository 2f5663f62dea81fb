# src/core/proximity/__init__.py
from .registry import ProximityPointRegistry
from .units import DistanceUnitSetting, format_distance, parse_distance

__all__ = [
    "ProximityPointRegistry",
    "DistanceUnitSetting",
    "parse_distance",
    "format_distance",
]
