# src/core/wizard/state.py
"""
The single mutable aggregate behind one wizard session.

WizardState bundles the scalar form fields, the shared distance unit, the
proximity registry and the image pipeline. Every step reads and writes this
one object; nothing keeps a private copy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.core.diagnostics import get_logger
from src.core.media.probe import ImageProbe
from src.core.media.validation import ImageValidationPipeline
from src.core.proximity.registry import ProximityPointRegistry
from src.core.proximity.units import DistanceUnitSetting
from src.schemas.labels import POICategory
from src.schemas.models import ListingFields, ListingRecord

log = get_logger()

# Payload key -> field name where the two differ
_RECORD_TO_FIELD = {"listing_goal": "goal"}

# Persisted as numbers; 0 or missing means "never entered"
_NUMERIC_RECORD_KEYS = frozenset(
    {"rent", "deposit", "bathrooms", "building_age", "maintenance_charges", "current_occupants", "max_negotiable_price"}
)

# Changing a parent clears the children not given in the same update
_LOCATION_CASCADE = (
    ("state_name", ("district_name", "city")),
    ("district_name", ("city",)),
)


@dataclass(frozen=True)
class HydrationReport:
    """What an edit-mode hydration could not carry over."""

    skipped_points: int = 0
    dropped_images: int = 0

    def __bool__(self) -> bool:
        return bool(self.skipped_points or self.dropped_images)

    def describe(self) -> str:
        parts = []
        if self.skipped_points:
            parts.append(f"{self.skipped_points} proximity point(s) with an unreadable distance were dropped")
        if self.dropped_images:
            parts.append(f"{self.dropped_images} image(s) beyond the limit were dropped")
        return "; ".join(parts)


class WizardState:
    def __init__(self, probe: ImageProbe | None = None) -> None:
        self.fields = ListingFields()
        self.unit = DistanceUnitSetting()
        self.registry = ProximityPointRegistry(self.unit)
        self.images = ImageValidationPipeline(probe)

    def update(self, **values: Any) -> None:
        """
        Assign form fields all at once.

        Every value is validated before any is applied, so a rejected update
        leaves the fields untouched. A new state clears district and city, a
        new district clears city, unless those come in the same update.
        """
        for name in values:
            if name not in ListingFields.model_fields:
                raise AttributeError(f"Unknown listing field: {name!r}")
        merged = {**self.fields.model_dump(), **self._cascade(values)}
        self.fields = ListingFields.model_validate(merged)

    def _cascade(self, values: dict[str, Any]) -> dict[str, Any]:
        out = dict(values)
        for parent, children in _LOCATION_CASCADE:
            if parent not in values:
                continue
            if str(values[parent] or "").strip() == getattr(self.fields, parent).strip():
                continue
            for child in children:
                out.setdefault(child, "")
        return out

    def reset(self) -> None:
        """Back to the defaults of a fresh create session."""
        self.fields = ListingFields()
        self.unit.reset()
        self.registry.clear()
        self.images.reset()
        log.debug("wizard state reset")

    def hydrate(self, record: ListingRecord) -> HydrationReport:
        """
        Populate from a persisted record (edit mode).

        Blank scalar values, and numbers that are 0 or missing, keep the field
        defaults. Returns what could not be carried over.
        """
        self.reset()
        data = record.model_dump(exclude={"transit_points", "essential_points", "utility_points", "images", "listing_id"})
        updates: dict[str, Any] = {}
        for key, value in data.items():
            name = _RECORD_TO_FIELD.get(key, key)
            if name not in ListingFields.model_fields:
                continue
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if key in _NUMERIC_RECORD_KEYS and not value:
                continue
            updates[name] = value
        self.fields = ListingFields.model_validate({**self.fields.model_dump(), **updates})

        tagged = [
            *(p.model_copy(update={"category": POICategory.transit}) for p in record.transit_points),
            *(p.model_copy(update={"category": POICategory.essential}) for p in record.essential_points),
            *(p.model_copy(update={"category": POICategory.utility}) for p in record.utility_points),
        ]
        skipped = self.registry.hydrate(tagged)
        dropped = self.images.hydrate(record.images)
        log.debug("wizard state hydrated from listing %s", record.listing_id)
        return HydrationReport(skipped_points=skipped, dropped_images=dropped)

    def __repr__(self) -> str:
        return (
            f"WizardState(goal={self.fields.goal.value!r}, property_type={self.fields.property_type!r}, "
            f"{self.registry!r}, {self.images!r})"
        )
