# src/core/wizard/steps.py
"""
Static table of the nine wizard steps and their validators.

Each validator raises `ValidationError` naming the first unmet field, or
returns None when the step is complete. Validators only read state.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.media.validation import MIN_VALIDATED_IMAGES
from src.core.wizard.errors import ValidationError
from src.schemas.labels import (
    AMENITIES,
    FLOORING_TYPES,
    FURNISHING_ITEMS,
    ListingGoal,
    POICategory,
    is_legal_property_type,
)

if TYPE_CHECKING:
    from src.core.wizard.state import WizardState

MAX_BATHROOMS = 20
MAX_PINCODE_DIGITS = 6

FIRST_PROXIMITY_STEP = 7
IMAGES_STEP = 6

# Proximity step -> the bucket it edits
PROXIMITY_STEP_CATEGORIES = {
    7: POICategory.transit,
    8: POICategory.essential,
    9: POICategory.utility,
}


def parse_number(text: object) -> float | None:
    """Parse a form value as a finite number; None when blank or unparseable."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int | float):
        value = float(text)
    else:
        raw = str(text).strip().replace(",", "")
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def _require(state: WizardState, *names: str) -> None:
    for name in names:
        value = getattr(state.fields, name)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValidationError("MissingField", field=name)


# =========================
# Per-step validators
# =========================


def validate_goal_and_type(state: WizardState) -> None:
    f = state.fields
    if f.goal is None:
        raise ValidationError("MissingField", field="goal")
    _require(state, "property_type")
    if not is_legal_property_type(f.goal, f.property_type):
        raise ValidationError(
            "InvalidPropertyType",
            f"InvalidPropertyType: {f.property_type!r} is not available for goal {f.goal.value}",
            field="property_type",
        )


def _check_optional_number(state: WizardState, name: str, *, integer: bool = False) -> None:
    raw = getattr(state.fields, name).strip()
    if not raw:
        return
    value = parse_number(raw)
    if value is None or value < 0 or (integer and not raw.isdigit()):
        kind = "whole number" if integer else "number"
        raise ValidationError("InvalidField", f"InvalidField: {name} must be a non-negative {kind}", field=name)


def _check_vocabulary(state: WizardState, name: str, allowed: tuple[str, ...]) -> None:
    value = getattr(state.fields, name)
    for item in value if isinstance(value, list) else [value]:
        if item not in allowed:
            raise ValidationError("InvalidField", f"InvalidField: {item!r} is not a valid {name}", field=name)


def validate_location_and_pricing(state: WizardState) -> None:
    f = state.fields
    _require(state, "city", "state_name", "district_name", "pincode")

    pin = f.pincode.strip()
    if not pin.isdigit() or len(pin) > MAX_PINCODE_DIGITS:
        raise ValidationError("InvalidField", "InvalidField: pincode must be up to 6 digits", field="pincode")

    _require(state, "rent")
    rent = parse_number(f.rent)
    if rent is None or rent <= 0:
        raise ValidationError("InvalidField", "InvalidField: rent must be a positive number", field="rent")
    _check_optional_number(state, "deposit")

    _require(state, "bedrooms", "bathrooms")
    baths = f.bathrooms.strip()
    if not baths.isdigit() or not 1 <= int(baths) <= MAX_BATHROOMS:
        raise ValidationError(
            "InvalidField",
            f"InvalidField: bathrooms must be a whole number between 1 and {MAX_BATHROOMS}",
            field="bathrooms",
        )


def validate_property_details(state: WizardState) -> None:
    _require(state, "building_age", "ownership_type", "maintenance_charges", "facing", "parking", "flooring_type")
    _check_optional_number(state, "building_age", integer=True)
    _check_optional_number(state, "maintenance_charges")
    _check_vocabulary(state, "flooring_type", FLOORING_TYPES)


def validate_furnishing(state: WizardState) -> None:
    _require(state, "furnishing_type", "available_date")
    _check_vocabulary(state, "furnishing_type", tuple(FURNISHING_ITEMS))
    _check_vocabulary(state, "amenities", AMENITIES)


def validate_description(state: WizardState) -> None:
    if flatmate_requirements_apply(state):
        _require(state, "preferred_gender", "preferred_occupation")


def validate_images(state: WizardState) -> None:
    if state.images.is_probing:
        raise ValidationError("ProbeInProgress", "ProbeInProgress: wait for the image check to finish", field="images")
    if not state.images.is_submittable():
        raise ValidationError(
            "NotEnoughImages",
            f"NotEnoughImages: at least {MIN_VALIDATED_IMAGES} validated images are required",
            field="images",
        )


def _no_requirements(state: WizardState) -> None:
    return None


def _always(state: WizardState) -> bool:
    return True


# =========================
# Step table
# =========================


@dataclass(frozen=True)
class StepDescriptor:
    id: int
    label: str
    validate: Callable[[WizardState], None]
    applicability: Callable[[WizardState], bool] = _always
    goal_dependent: bool = False

    def is_applicable(self, state: WizardState) -> bool:
        return self.applicability(state)


STEPS: tuple[StepDescriptor, ...] = (
    StepDescriptor(1, "Goal & Property Type", validate_goal_and_type, goal_dependent=True),
    StepDescriptor(2, "Location & Pricing", validate_location_and_pricing),
    StepDescriptor(3, "Property Details", validate_property_details),
    StepDescriptor(4, "Furnishing & Amenities", validate_furnishing),
    StepDescriptor(5, "Description & Requirements", validate_description, goal_dependent=True),
    StepDescriptor(6, "Property Images", validate_images),
    StepDescriptor(7, "Proximity: Transit Points", _no_requirements),
    StepDescriptor(8, "Proximity: Essential Points", _no_requirements),
    StepDescriptor(9, "Proximity: Utility/Leisure", _no_requirements),
)

_BY_ID = {s.id: s for s in STEPS}


def get_step(step_id: int) -> StepDescriptor:
    try:
        return _BY_ID[step_id]
    except KeyError:
        raise ValidationError("UnknownStep", f"UnknownStep: {step_id}") from None


def goal_dependent_step_ids() -> frozenset[int]:
    return frozenset(s.id for s in STEPS if s.goal_dependent)


def flatmate_requirements_apply(state: WizardState) -> bool:
    """The requirements sub-section of step 5 is shown only for the Flatmate goal."""
    return state.fields.goal is ListingGoal.flatmate
