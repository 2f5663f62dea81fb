# src/core/wizard/record.py
"""
Normalize a persisted listing into a `ListingRecord`.

Two shapes are accepted:

1) Flat (the submission payload as sent):
   { "listing_goal": "Rent", "property_type": "Flat", "rent": 15000, ...,
     "transitPoints": [...], "images": [...] }

2) Nested (as the listing service returns it for edit):
   { "listingGoal": "Rent",
     "propertyDetails": {...}, "addressDetails": {...}, "financials": {...},
     "availability": {...}, "preferences": {...},
     "price": 15000, "deposit": 30000, "description": "...",
     "imageLinks": [...],
     "proximityPoints": {"transitPoints": [...], "essentialPoints": [...], "utilityPoints": [...]} }
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.wizard.steps import parse_number
from src.schemas.labels import ListingGoal, coerce_label
from src.schemas.models import ListingRecord

_NESTED_MARKERS = ("listingGoal", "propertyDetails", "addressDetails", "proximityPoints")

_INT_KEYS = ("bathrooms", "building_age", "current_occupants")
_FLOAT_KEYS = ("rent", "deposit", "maintenance_charges", "max_negotiable_price")

# Older flat payloads used these spellings
_FLAT_ALIASES = {
    "districtName": "district_name",
    "image_links": "images",
    "imageLinks": "images",
    "transit_points": "transitPoints",
    "essential_points": "essentialPoints",
    "utility_points": "utilityPoints",
}


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def _points(value: Any) -> list[Any]:
    if not isinstance(value, list):
        return []
    return [p for p in value if isinstance(p, Mapping) and p.get("type")]


def _coerce_numbers(data: dict[str, Any]) -> dict[str, Any]:
    for key in _FLOAT_KEYS:
        if key in data:
            data[key] = max(parse_number(data[key]) or 0.0, 0.0)
    for key in _INT_KEYS:
        if key in data:
            data[key] = max(int(parse_number(data[key]) or 0), 0)
    return data


def _drop_none(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _from_nested(raw: Mapping[str, Any]) -> dict[str, Any]:
    prop = _section(raw, "propertyDetails")
    addr = _section(raw, "addressDetails")
    fin = _section(raw, "financials")
    avail = _section(raw, "availability")
    prefs = _section(raw, "preferences")
    prox = _section(raw, "proximityPoints")

    data = {
        "listing_goal": raw.get("listingGoal"),
        "property_type": prop.get("propertyType"),
        "location": raw.get("location"),
        "city": addr.get("city"),
        "area": addr.get("area"),
        "pincode": addr.get("pincode"),
        "flat_number": addr.get("flatNumber"),
        "state_name": addr.get("stateName"),
        "district_name": addr.get("districtName"),
        "rent": raw.get("price", raw.get("rent")),
        "deposit": raw.get("deposit"),
        "description": raw.get("description"),
        "bedrooms": prop.get("bedrooms"),
        "bathrooms": prop.get("bathrooms"),
        "building_age": prop.get("buildingAge"),
        "ownership_type": prop.get("ownershipType"),
        "maintenance_charges": prop.get("maintenanceCharges"),
        "facing": prop.get("facing"),
        "parking": prop.get("parking"),
        "gated_security": prop.get("gatedSecurity"),
        "flooring_type": prop.get("flooringType"),
        "nearby_location": prop.get("nearbyLocation"),
        "furnishing_type": prop.get("furnishingStatus"),
        "amenities": prop.get("selectedAmenities"),
        "available_date": avail.get("finalAvailableDate"),
        "current_occupants": avail.get("currentOccupants"),
        "is_brokerage_free": fin.get("isNoBrokerage"),
        "max_negotiable_price": fin.get("maxNegotiablePrice"),
        "negotiation_margin": fin.get("negotiationMarginPercent"),
        "preferred_gender": prefs.get("preferredGender"),
        "preferred_occupation": prefs.get("preferredOccupation"),
        "preferred_work_location": prefs.get("preferredWorkLocation"),
        "images": raw.get("imageLinks"),
        "transitPoints": _points(prox.get("transitPoints")),
        "essentialPoints": _points(prox.get("essentialPoints")),
        "utilityPoints": _points(prox.get("utilityPoints")),
    }
    return _drop_none(data)


def _from_flat(raw: Mapping[str, Any]) -> dict[str, Any]:
    data = {_FLAT_ALIASES.get(k, k): v for k, v in raw.items()}
    for key in ("transitPoints", "essentialPoints", "utilityPoints"):
        if key in data:
            data[key] = _points(data[key])
    return _drop_none(data)


def is_nested_shape(raw: Mapping[str, Any]) -> bool:
    return any(k in raw for k in _NESTED_MARKERS)


def normalize_record(raw: Mapping[str, Any], listing_id: str | None = None) -> ListingRecord:
    """
    Build a ListingRecord from either persisted shape.

    Raises ValueError when the data cannot be read as a listing.
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"Listing record must be a JSON object, got {type(raw).__name__}")

    data = _from_nested(raw) if is_nested_shape(raw) else _from_flat(raw)
    data = _coerce_numbers(data)

    goal = coerce_label(ListingGoal, data.get("listing_goal"))
    data["listing_goal"] = goal or ListingGoal.rent
    if isinstance(data.get("images"), list):
        data["images"] = [str(u) for u in data["images"] if u]

    rid = listing_id or raw.get("id") or raw.get("listing_id") or raw.get("_id")
    data["listing_id"] = str(rid) if rid is not None else None

    try:
        return ListingRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValueError(f"Listing record failed validation: {e}") from e


__all__ = ["normalize_record", "is_nested_shape"]
