# src/core/proximity/units.py
"""
Distance unit handling for proximity points.

One `DistanceUnitSetting` is shared by every proximity input of a session.
Points read it at commit time and freeze the unit into their record, so a
later change never rewrites existing points.
"""

from __future__ import annotations

from src.schemas.labels import DEFAULT_DISTANCE_UNIT, DistanceUnit, coerce_label
from src.schemas.models import format_distance, is_non_negative_decimal

# Longest first so "min walk" wins over any shorter suffix
_UNIT_SUFFIXES: tuple[DistanceUnit, ...] = tuple(sorted(DistanceUnit, key=lambda u: len(u.value), reverse=True))


class DistanceUnitSetting:
    """Mutable holder for the session-wide distance unit."""

    def __init__(self, unit: DistanceUnit = DEFAULT_DISTANCE_UNIT) -> None:
        self._unit = unit

    @property
    def current(self) -> DistanceUnit:
        return self._unit

    def set(self, unit: DistanceUnit | str) -> DistanceUnit:
        resolved = coerce_label(DistanceUnit, unit)
        if resolved is None:
            raise ValueError(f"Unknown distance unit: {unit!r}")
        self._unit = resolved
        return resolved

    def reset(self) -> None:
        self._unit = DEFAULT_DISTANCE_UNIT

    def __repr__(self) -> str:
        return f"DistanceUnitSetting({self._unit.value!r})"


def parse_distance(text: str | None) -> tuple[str, DistanceUnit | None] | None:
    """
    Split a persisted distance string into (value, unit).

    "2 km" -> ("2", km); "5 min walk" -> ("5", min walk); "2" -> ("2", None).
    Returns None when no non-negative decimal value can be recovered, or when
    a suffix is present but is not a known unit ("500 ft").
    """
    if text is None:
        return None
    raw = str(text).strip()
    if not raw:
        return None

    lowered = raw.lower()
    for unit in _UNIT_SUFFIXES:
        if lowered.endswith(unit.value):
            value = raw[: -len(unit.value)].strip()
            if is_non_negative_decimal(value):
                return value, unit

    if " " in raw:
        # "500 ft": unknown unit, unreadable
        head, tail = raw.rsplit(" ", 1)
        value = head.strip()
        unit = coerce_label(DistanceUnit, tail)
        if unit is None or not is_non_negative_decimal(value):
            return None
        return value, unit

    if is_non_negative_decimal(raw):
        return raw, None
    return None


__all__ = ["DistanceUnitSetting", "parse_distance", "format_distance"]
