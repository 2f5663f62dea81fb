# src/core/proximity/registry.py
"""
Categorized store of proximity points (POIs).

Three ordered buckets (Transit, Essential, Utility). Flattening always walks
the buckets in that order and keeps insertion order inside each bucket, so
`hydrate(flatten_all())` reproduces the buckets for vocabulary types.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from src.core.diagnostics import get_logger
from src.core.proximity.units import DistanceUnitSetting, parse_distance
from src.core.wizard.errors import ValidationError
from src.schemas.labels import (
    DEFAULT_DISTANCE_UNIT,
    POI_CATEGORY_ORDER,
    POICategory,
    category_for_type,
    coerce_label,
    proximity_input,
)
from src.schemas.models import POIRecord, ProximityPoint, is_non_negative_decimal

log = get_logger()


def _entry_fields(entry: ProximityPoint | Mapping[str, Any]) -> tuple[str, str, str, Any]:
    if isinstance(entry, ProximityPoint):
        return entry.type, entry.name, entry.distance, entry.category
    return (
        str(entry.get("type") or ""),
        str(entry.get("name") or ""),
        str(entry.get("distance") or ""),
        entry.get("category"),
    )


class ProximityPointRegistry:
    def __init__(self, unit: DistanceUnitSetting | None = None) -> None:
        self.unit = unit if unit is not None else DistanceUnitSetting()
        self._buckets: dict[POICategory, list[POIRecord]] = {c: [] for c in POI_CATEGORY_ORDER}

    # ---- commands ----

    def add_point(
        self,
        category: POICategory | str,
        poi_type: str,
        name: str | None,
        distance_value: str | None,
    ) -> str:
        """
        Commit one point using the unit currently in force.

        Raises ValidationError with kind MissingDistance, InvalidDistance,
        MissingName (Utility only) or UnknownType. Returns the new id.
        """
        cat = coerce_label(POICategory, category)
        if cat is None:
            raise ValueError(f"Unknown POI category: {category!r}")

        value = (distance_value or "").strip()
        if not value:
            raise ValidationError("MissingDistance", field="distance_value")
        if not is_non_negative_decimal(value):
            raise ValidationError("InvalidDistance", f"InvalidDistance: {value!r}", field="distance_value")

        cfg = proximity_input(cat, poi_type)
        clean_name = (name or "").strip()
        needs_name = cfg.is_utility if cfg is not None else cat is POICategory.utility
        if needs_name and not clean_name:
            raise ValidationError("MissingName", field="name")
        if cfg is None:
            raise ValidationError("UnknownType", f"UnknownType: {poi_type!r} is not a {cat.value} type", field="type")

        record = POIRecord(
            id=uuid.uuid4().hex[:12],
            category=cat,
            type=cfg.poi_type,
            name=clean_name or cfg.poi_type,
            distance_value=value,
            distance_unit=self.unit.current,
        )
        self._buckets[cat].append(record)
        log.debug("poi added: %s %s %s", cat.value, record.type, record.distance)
        return record.id

    def remove_point(self, point_id: str) -> None:
        for bucket in self._buckets.values():
            for i, rec in enumerate(bucket):
                if rec.id == point_id:
                    del bucket[i]
                    log.debug("poi removed: %s", point_id)
                    return

    def clear(self) -> None:
        for bucket in self._buckets.values():
            bucket.clear()

    # ---- queries ----

    def list_by_category(self, category: POICategory | str) -> list[POIRecord]:
        cat = coerce_label(POICategory, category)
        if cat is None:
            raise ValueError(f"Unknown POI category: {category!r}")
        return list(self._buckets[cat])

    def flatten_all(self) -> list[ProximityPoint]:
        return [rec.to_point() for cat in POI_CATEGORY_ORDER for rec in self._buckets[cat]]

    def flatten_by_category(self) -> dict[POICategory, list[ProximityPoint]]:
        return {cat: [rec.to_point() for rec in self._buckets[cat]] for cat in POI_CATEGORY_ORDER}

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    # ---- hydration ----

    def hydrate(self, entries: Iterable[ProximityPoint | Mapping[str, Any]]) -> int:
        """
        Replace the contents from persisted entries.

        The category comes from the type vocabulary, then from the entry's
        `category` hint, else Utility. The session unit becomes the first
        parseable suffix, else km. Entries without a usable distance are
        skipped; the number skipped is returned.
        """
        self.clear()
        parsed: list[tuple[POICategory, str, str, str, Any]] = []
        skipped = 0
        inferred = None

        for entry in entries:
            poi_type, name, distance, hint = _entry_fields(entry)
            split = parse_distance(distance)
            if split is None:
                skipped += 1
                log.warning("skipping proximity entry %r: unparseable distance %r", poi_type, distance)
                continue
            value, unit = split
            if inferred is None and unit is not None:
                inferred = unit
            cat = category_for_type(poi_type) or coerce_label(POICategory, hint) or POICategory.utility
            parsed.append((cat, poi_type.strip(), name.strip(), value, unit))

        self.unit.set(inferred or DEFAULT_DISTANCE_UNIT)

        for cat, poi_type, name, value, unit in parsed:
            cfg = proximity_input(cat, poi_type)
            rec_type = cfg.poi_type if cfg is not None else poi_type
            if not name:
                name = cfg.title if cfg is not None and cfg.is_utility else rec_type
            self._buckets[cat].append(
                POIRecord(
                    id=uuid.uuid4().hex[:12],
                    category=cat,
                    type=rec_type,
                    name=name,
                    distance_value=value,
                    distance_unit=unit or self.unit.current,
                )
            )

        log.debug("registry hydrated: %d points, %d skipped, unit=%s", len(self), skipped, self.unit.current.value)
        return skipped

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.value}={len(self._buckets[c])}" for c in POI_CATEGORY_ORDER)
        return f"ProximityPointRegistry({counts}, unit={self.unit.current.value!r})"
