# src/schemas/models.py

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.schemas.labels import (
    AVAILABLE_DATES,
    DistanceUnit,
    ListingGoal,
    NEGOTIATION_MARGINS,
    OWNERSHIP_TYPES,
    FACING_OPTIONS,
    PARKING_OPTIONS,
    POICategory,
    PREFERRED_GENDERS,
    PREFERRED_OCCUPATIONS,
    PROPERTY_SIZES,
    PropertyType,
)

WizardMode = Literal["create", "edit"]

# Non-negative decimal as typed into a distance box ("2", "0.5", "12.")
_DECIMAL_RE = re.compile(r"^\d+(?:\.\d*)?$|^\.\d+$")


def is_non_negative_decimal(text: str) -> bool:
    return bool(_DECIMAL_RE.match(text.strip()))


def format_distance(value: str, unit: DistanceUnit) -> str:
    """Wire form of a distance: value as entered, a space, the unit label."""
    return f"{value.strip()} {unit.value}"


def _as_text(v: Any) -> Any:
    """Render numbers the way a form input holds them: 15000.0 -> '15000', None -> ''."""
    if v is None:
        return ""
    if isinstance(v, Enum):
        return str(v.value)
    if isinstance(v, bool):
        return v
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, int | float):
        return str(v)
    return v


# =========================
# Proximity points
# =========================


class ProximityPoint(BaseModel):
    """
    Persisted POI entry: `{type, name, distance: "<value> <unit>"}`.

    `category` is a hydration hint only (the bucket an entry was read from);
    it never appears on the wire.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = Field(..., description="POI type from the fixed vocabulary (e.g., 'Bus Stop').")
    name: str = Field("", description="Display name; defaults to the type for non-utility points.")
    distance: str = Field(..., description="Distance rendered as '<value> <unit>', e.g. '2 km'.")
    category: POICategory | None = Field(None, exclude=True, description="Source bucket hint used during hydration.")

    @field_validator("distance", mode="before")
    @classmethod
    def _distance_text(cls, v: Any) -> Any:
        return _as_text(v)


class POIRecord(BaseModel):
    """One committed point of interest. The unit is frozen at the moment the point was added."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Opaque identifier, unique within a registry.")
    category: POICategory = Field(..., description="Transit | Essential | Utility.")
    type: str = Field(..., description="POI type from the fixed vocabulary.")
    name: str = Field(..., description="Display name (required for Utility; defaulted to type otherwise).")
    distance_value: str = Field(..., description="Non-negative decimal exactly as entered (e.g., '2', '1.5').")
    distance_unit: DistanceUnit = Field(DistanceUnit.km, description="Unit in force when the point was committed.")

    @field_validator("distance_value")
    @classmethod
    def _non_negative_decimal(cls, v: str) -> str:
        v = v.strip()
        if not is_non_negative_decimal(v):
            raise ValueError(f"distance_value must be a non-negative decimal, got {v!r}")
        return v

    @property
    def distance(self) -> str:
        return format_distance(self.distance_value, self.distance_unit)

    def to_point(self) -> ProximityPoint:
        return ProximityPoint(type=self.type, name=self.name, distance=self.distance)


# =========================
# Images
# =========================


class ImageRef(BaseModel):
    """A committed image reference. Only validated entries count toward the submission minimum."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., description="Public image URL.")
    validated: bool = Field(False, description="True once the URL passed the format check and the load probe.")


# =========================
# Wizard fields (mutable aggregate part)
# =========================

_TEXT_NUMERIC_FIELDS = (
    "rent",
    "deposit",
    "bathrooms",
    "pincode",
    "building_age",
    "maintenance_charges",
    "current_occupants",
    "max_negotiable_price",
    "negotiation_margin",
)


class ListingFields(BaseModel):
    """
    Scalar fields collected across the nine wizard steps.

    Values are held the way a form holds them (text for numeric inputs);
    coercion to numbers happens only when the submission payload is built.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    # Step 1
    goal: ListingGoal = Field(ListingGoal.rent, description="Listing goal: Rent, Sale or Flatmate.")
    property_type: str = Field(PropertyType.flat.value, description="Property type; must be legal for the goal.")

    # Step 2
    flat_number: str = ""
    area: str = ""
    city: str = ""
    district_name: str = ""
    state_name: str = ""
    pincode: str = ""
    rent: str = Field("", description="Monthly rent (or sale price) as entered.")
    deposit: str = ""
    bedrooms: str = Field(PROPERTY_SIZES[1], description="BHK size, e.g. '2 BHK'.")
    bathrooms: str = Field("1", description="Bathroom count as entered; capped at 20 by validation.")

    # Step 3
    building_age: str = ""
    ownership_type: str = OWNERSHIP_TYPES[0]
    maintenance_charges: str = ""
    facing: str = FACING_OPTIONS[0]
    parking: str = PARKING_OPTIONS[0]
    gated_security: bool = True
    flooring_type: list[str] = Field(default_factory=list)
    nearby_location: str = ""

    # Step 4
    furnishing_type: str = "Unfurnished"
    amenities: list[str] = Field(default_factory=list)
    available_date: str = AVAILABLE_DATES[0]
    current_occupants: str = ""

    # Step 5
    description: str = ""
    is_brokerage_free: bool = False
    max_negotiable_price: str = ""
    negotiation_margin: str = NEGOTIATION_MARGINS[1]
    preferred_gender: str = PREFERRED_GENDERS[2]
    preferred_occupation: str = PREFERRED_OCCUPATIONS[0]
    preferred_work_location: str = ""

    @field_validator("property_type", mode="before")
    @classmethod
    def _enum_to_value(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator(*_TEXT_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _numeric_as_text(cls, v: Any) -> Any:
        return _as_text(v)

    def location_string(self) -> str:
        parts = (self.flat_number, self.area, self.city, self.district_name, self.state_name, self.pincode)
        return ", ".join(p.strip() for p in parts if p and p.strip())


# =========================
# Submission payload / persisted record
# =========================


class ListingPayload(BaseModel):
    """
    The single submission payload handed to the listing service.

    Scalar keys are snake_case; the three proximity arrays use the persisted
    camelCase names (`transitPoints`, `essentialPoints`, `utilityPoints`).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    listing_goal: ListingGoal = ListingGoal.rent
    property_type: str = ""
    location: str = ""
    city: str = ""
    area: str = ""
    rent: float = Field(0.0, ge=0)
    deposit: float = Field(0.0, ge=0)
    description: str = ""
    bedrooms: str = ""
    bathrooms: int = Field(0, ge=0)
    is_brokerage_free: bool = False
    pincode: str = ""
    flat_number: str = ""
    state_name: str = ""
    district_name: str = ""
    building_age: int = Field(0, ge=0)
    ownership_type: str = ""
    maintenance_charges: float = Field(0.0, ge=0)
    facing: str = ""
    parking: str = ""
    gated_security: bool = True
    flooring_type: list[str] = Field(default_factory=list)
    nearby_location: str = ""
    available_date: str = ""
    current_occupants: int = Field(0, ge=0)
    furnishing_type: str = ""
    amenities: list[str] = Field(default_factory=list)
    max_negotiable_price: float = Field(0.0, ge=0)
    negotiation_margin: str = ""
    preferred_gender: str = ""
    preferred_occupation: str = ""
    preferred_work_location: str = ""

    transit_points: list[ProximityPoint] = Field(default_factory=list, alias="transitPoints")
    essential_points: list[ProximityPoint] = Field(default_factory=list, alias="essentialPoints")
    utility_points: list[ProximityPoint] = Field(default_factory=list, alias="utilityPoints")
    images: list[str] = Field(default_factory=list, description="Validated image URLs in commit order.")

    @field_validator("pincode", "negotiation_margin", "bedrooms", "flat_number", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return _as_text(v)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ListingRecord(ListingPayload):
    """A persisted listing as returned by the listing service, normalized to the payload shape."""

    listing_id: str | None = Field(None, description="Server-side identifier, when known.")


class SubmissionResult(BaseModel):
    """Outcome of a successful create/update dispatch."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    listing_id: str | None = Field(None, description="Identifier returned by create, or the edited listing's id.")
    mode: WizardMode = Field(..., description="'create' or 'edit'.")
