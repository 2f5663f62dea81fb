# src/schemas/labels.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

T = TypeVar("T", bound=Enum)

# =========================
# Canonical label enums
# =========================


class ListingGoal(str, Enum):
    rent = "Rent"
    sale = "Sale"
    flatmate = "Flatmate"


class PropertyType(str, Enum):
    flat = "Flat"
    pg = "PG"
    hostel = "Hostel"
    house = "House"
    plot = "Plot"
    shared_flatmate = "Shared Flatmate"


class DistanceUnit(str, Enum):
    """Session-wide unit shared by every proximity input."""

    km = "km"
    meter = "meter"
    min_walk = "min walk"


class POICategory(str, Enum):
    transit = "Transit"
    essential = "Essential"
    utility = "Utility"


# Order is part of the persisted shape: flattening always walks these in sequence.
POI_CATEGORY_ORDER: tuple[POICategory, ...] = (
    POICategory.transit,
    POICategory.essential,
    POICategory.utility,
)

DEFAULT_DISTANCE_UNIT = DistanceUnit.km

# =========================
# Goal → legal property types
# =========================

PROPERTY_TYPES_BY_GOAL: Mapping[ListingGoal, tuple[PropertyType, ...]] = {
    ListingGoal.rent: (PropertyType.flat, PropertyType.pg, PropertyType.hostel, PropertyType.house),
    ListingGoal.sale: (PropertyType.flat, PropertyType.house, PropertyType.plot),
    ListingGoal.flatmate: (PropertyType.shared_flatmate,),
}


def legal_property_types(goal: ListingGoal) -> tuple[PropertyType, ...]:
    return PROPERTY_TYPES_BY_GOAL[goal]


def is_legal_property_type(goal: ListingGoal, property_type: PropertyType | str | None) -> bool:
    if property_type is None:
        return False
    pt = coerce_label(PropertyType, property_type)
    return pt is not None and pt in PROPERTY_TYPES_BY_GOAL[goal]


# =========================
# Form vocabularies
# =========================

PROPERTY_SIZES: tuple[str, ...] = ("1 RK", "1 BHK", "2 BHK", "3 BHK", "4+ BHK")

FURNISHING_ITEMS: Mapping[str, tuple[str, ...]] = {
    "Fully Furnished": ("Beds", "Sofa/Seating", "TV", "Refrigerator", "Washing Machine", "Microwave", "AC"),
    "Semi-Furnished": ("Wardrobes", "Kitchen Cabinets", "Basic Lights/Fans", "Geyser"),
    "Unfurnished": ("Only basic fixtures (lights, fans)",),
}

AMENITIES: tuple[str, ...] = (
    "Wifi",
    "Parking",
    "Gym",
    "Balcony",
    "AC",
    "Lift",
    "Gas pipeline",
    "Water connection",
    "Security",
    "24x7 Water",
)

PREFERRED_GENDERS: tuple[str, ...] = ("Male", "Female", "Any")
PREFERRED_OCCUPATIONS: tuple[str, ...] = ("IT Professional", "Student", "Working Professional", "Other")
AVAILABLE_DATES: tuple[str, ...] = ("Now", "Next Week", "Next Month", "Custom Date")
NEGOTIATION_MARGINS: tuple[str, ...] = ("0", "5", "10", "15", "20")

OWNERSHIP_TYPES: tuple[str, ...] = ("Freehold", "Leasehold", "Co-operative Society", "Other")
FACING_OPTIONS: tuple[str, ...] = (
    "North",
    "South",
    "East",
    "West",
    "North-East",
    "North-West",
    "South-East",
    "South-West",
)
PARKING_OPTIONS: tuple[str, ...] = ("1 Car", "2 Cars", "Bike Only", "None")
FLOORING_TYPES: tuple[str, ...] = ("Vitrified Tiles", "Marble", "Wooden Flooring", "Ceramic Tiles", "Mosaic", "Concrete")

# =========================
# Proximity input vocabulary
# =========================


@dataclass(frozen=True, slots=True)
class ProximityInputConfig:
    """One proximity input row: display title, persisted type, and whether a name is mandatory."""

    title: str
    poi_type: str
    is_utility: bool = False


PROXIMITY_INPUTS: Mapping[POICategory, tuple[ProximityInputConfig, ...]] = {
    POICategory.transit: (
        ProximityInputConfig("Nearest Railway Station Distance", "Railway Station"),
        ProximityInputConfig("Nearest Airport Distance", "Airport"),
        ProximityInputConfig("Nearest Bus Stop Distance", "Bus Stop"),
        ProximityInputConfig("Nearest Metro Station Distance", "Metro Station"),
        ProximityInputConfig("Nearest Auto Stand Distance", "Auto Stand"),
    ),
    POICategory.essential: (
        ProximityInputConfig("Nearest Hospital", "Hospital"),
        ProximityInputConfig("Nearest School", "School"),
        ProximityInputConfig("Nearest Food Point (Restaurant/Mess/Cafe/Tea tapri)", "Food Point"),
        ProximityInputConfig("Nearest Kirana Stall", "Kirana Stall"),
        ProximityInputConfig("Nearest Milk Dairy", "Milk Dairy"),
        ProximityInputConfig("Nearest Salon/Barber Shop", "Salon/Barber Shop"),
    ),
    POICategory.utility: (
        ProximityInputConfig("Nearest Movie Theatre", "Movie Theatre", is_utility=True),
        ProximityInputConfig("Nearest Club/Bar", "Club/Bar", is_utility=True),
        ProximityInputConfig("Nearest Mall/Mart/Super Market", "Mall/Mart/Super Market", is_utility=True),
        ProximityInputConfig("Nearest Market (Fruit/Vegitable/Cloth/Essential)", "Market", is_utility=True),
        ProximityInputConfig("Nearest ATM", "ATM", is_utility=True),
        ProximityInputConfig("Nearest Park", "Park", is_utility=True),
        ProximityInputConfig("Nearest Police Station", "Police Station", is_utility=True),
        ProximityInputConfig("Nearest Fire Station", "Fire Station", is_utility=True),
    ),
}

# type → category; types are unique across categories
_CATEGORY_BY_TYPE: dict[str, POICategory] = {
    cfg.poi_type.lower(): cat for cat, inputs in PROXIMITY_INPUTS.items() for cfg in inputs
}


def category_for_type(poi_type: str) -> POICategory | None:
    """Resolve a persisted POI type (case-insensitive) to its category, or None if unknown."""
    if not poi_type:
        return None
    return _CATEGORY_BY_TYPE.get(poi_type.strip().lower())


def proximity_input(category: POICategory, poi_type: str) -> ProximityInputConfig | None:
    key = (poi_type or "").strip().lower()
    for cfg in PROXIMITY_INPUTS[category]:
        if cfg.poi_type.lower() == key:
            return cfg
    return None


# =========================
# Helpers
# =========================


def coerce_label(enum_cls: type[T], value: object) -> T | None:
    """
    Map a raw value onto an enum member by value or member name (case-insensitive).
    Returns None when nothing matches.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return None
    key = str(value).strip().lower()
    if not key:
        return None
    for member in enum_cls:
        if str(member.value).lower() == key or member.name.lower() == key:
            return member
    return None