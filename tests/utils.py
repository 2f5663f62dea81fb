# tests/utils.py
"""
Single source of truth for test data, factories, and fake collaborators.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import asyncio
import io
from collections.abc import Mapping
from typing import Any

from PIL import Image

from src.core.wizard.errors import RemoteError
from src.core.wizard.session import WizardSession
from src.core.wizard.state import WizardState
from src.schemas.models import ListingPayload

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_LISTING_ID = "lst_0001"

DEFAULT_IMAGE_URLS: list[str] = [
    "https://cdn.example.com/listing/front.jpg",
    "https://cdn.example.com/listing/hall.jpg",
    "https://cdn.example.com/listing/kitchen.jpg",
    "https://cdn.example.com/listing/bedroom.jpg",
    "https://cdn.example.com/listing/balcony.jpg",
    "https://cdn.example.com/listing/view.jpg",
]

# Minimal step-2 answers that pass validation
DEFAULT_STEP2_FIELDS: dict[str, Any] = {
    "flat_number": "B-402",
    "area": "Baner",
    "city": "Pune",
    "district_name": "Pune",
    "state_name": "Maharashtra",
    "pincode": "411045",
    "rent": "15000",
    "deposit": "30000",
    "bedrooms": "2 BHK",
    "bathrooms": "2",
}

# Step-3 answers that pass validation
DEFAULT_STEP3_FIELDS: dict[str, Any] = {
    "building_age": "4",
    "maintenance_charges": "2500",
    "flooring_type": ["Vitrified Tiles"],
}

DEFAULT_FORM_FIELDS: dict[str, Any] = {**DEFAULT_STEP2_FIELDS, **DEFAULT_STEP3_FIELDS}


def png_bytes(w: int = 8, h: int = 8, color: tuple[int, int, int] = (200, 120, 40)) -> bytes:
    """Small valid PNG for image-probe tests."""
    buf = io.BytesIO()
    Image.new("RGB", (w, h), color).save(buf, format="PNG", compress_level=0)
    return buf.getvalue()


# -----------------------------
# State / session factories
# -----------------------------


def make_state(*, probe: Any = None, **fields: Any) -> WizardState:
    state = WizardState(probe)
    values = {**DEFAULT_FORM_FIELDS, **fields}
    state.update(**values)
    return state


def add_images(state: WizardState, n: int = 3) -> None:
    """Commit n images without probing (format check only)."""
    for url in DEFAULT_IMAGE_URLS[:n]:
        asyncio.run(state.images.submit_candidate(url))


async def walk_to_last_step(session: WizardSession, *, images: int = 3) -> None:
    """Advance a session with its form fields already set, adding images on step 6."""
    while not session.sequencer.is_last_step:
        if session.current_step_id == 6:
            for url in DEFAULT_IMAGE_URLS[:images]:
                await session.add_image(url)
        session.advance()


# -----------------------------
# Fake collaborators
# -----------------------------


class FakeListingService:
    """In-memory ListingService recording every call."""

    def __init__(
        self,
        *,
        listing_id: str = DEFAULT_LISTING_ID,
        record: Mapping[str, Any] | None = None,
        fail_with: Exception | None = None,
    ) -> None:
        self.listing_id = listing_id
        self.record = dict(record) if record is not None else make_nested_record()
        self.fail_with = fail_with
        self.created: list[ListingPayload] = []
        self.updated: list[tuple[str, ListingPayload]] = []
        self.fetched: list[str] = []

    async def create_listing(self, payload: ListingPayload) -> str | None:
        self.created.append(payload)
        if self.fail_with is not None:
            raise self.fail_with
        return self.listing_id

    async def update_listing(self, listing_id: str, payload: ListingPayload) -> None:
        self.updated.append((listing_id, payload))
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch_listing(self, listing_id: str) -> Mapping[str, Any]:
        self.fetched.append(listing_id)
        if self.fail_with is not None:
            raise self.fail_with
        return self.record


class FakeProbe:
    """Probe answering from a url -> bool table (default True)."""

    def __init__(self, results: Mapping[str, bool] | None = None, *, default: bool = True) -> None:
        self.results = dict(results or {})
        self.default = default
        self.calls: list[str] = []

    async def check(self, url: str) -> bool:
        self.calls.append(url)
        return self.results.get(url, self.default)


class GatedProbe:
    """Probe that blocks until `release()` so tests can observe the validating slot."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def check(self, url: str) -> bool:
        self.started.set()
        await self._gate.wait()
        return self.result


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def __call__(self, kind: str, message: str) -> None:
        self.events.append((kind, message))

    @property
    def kinds(self) -> list[str]:
        return [k for k, _ in self.events]


def remote_failure(status: int = 500, message: str = "Internal error") -> RemoteError:
    return RemoteError(f"create_listing failed ({status}): {message}", status_code=status, operation="create_listing")


# -----------------------------
# Persisted record payloads
# -----------------------------


def make_nested_record(**overrides: Any) -> dict[str, Any]:
    """Listing as the service returns it for edit."""
    record: dict[str, Any] = {
        "id": DEFAULT_LISTING_ID,
        "listingGoal": "Flatmate",
        "price": 9000,
        "deposit": 18000,
        "description": "Sunny room in a shared 3 BHK.",
        "propertyDetails": {
            "propertyType": "Shared Flatmate",
            "bedrooms": "3 BHK",
            "bathrooms": 2,
            "buildingAge": 5,
            "ownershipType": "Freehold",
            "maintenanceCharges": 1500,
            "facing": "East",
            "parking": "Bike Only",
            "gatedSecurity": False,
            "flooringType": ["Marble"],
            "nearbyLocation": "Near Balewadi High Street",
            "furnishingStatus": "Semi-Furnished",
            "selectedAmenities": ["Wifi", "Lift"],
        },
        "addressDetails": {
            "city": "Pune",
            "area": "Baner",
            "pincode": "411045",
            "flatNumber": "C-101",
            "stateName": "Maharashtra",
            "districtName": "Pune",
        },
        "financials": {
            "isNoBrokerage": True,
            "maxNegotiablePrice": 8500,
            "negotiationMarginPercent": "10",
        },
        "availability": {"finalAvailableDate": "Next Month", "currentOccupants": 2},
        "preferences": {
            "preferredGender": "Female",
            "preferredOccupation": "Student",
            "preferredWorkLocation": "Hinjewadi",
        },
        "imageLinks": DEFAULT_IMAGE_URLS[:3],
        "proximityPoints": {
            "transitPoints": [{"type": "Bus Stop", "name": "Bus Stop", "distance": "5 min walk"}],
            "essentialPoints": [{"type": "Hospital", "name": "Hospital", "distance": "1.5 km"}],
            "utilityPoints": [{"type": "ATM", "name": "SBI ATM", "distance": "200 meter"}],
        },
    }
    record.update(overrides)
    return record


def make_flat_record(**overrides: Any) -> dict[str, Any]:
    """Listing in the submission payload shape."""
    record: dict[str, Any] = {
        "listing_id": DEFAULT_LISTING_ID,
        "listing_goal": "Rent",
        "property_type": "Flat",
        "city": "Pune",
        "area": "Baner",
        "rent": 15000,
        "deposit": 30000,
        "bedrooms": "2 BHK",
        "bathrooms": 2,
        "pincode": "411045",
        "flat_number": "B-402",
        "state_name": "Maharashtra",
        "district_name": "Pune",
        "images": DEFAULT_IMAGE_URLS[:4],
        "transitPoints": [{"type": "Metro Station", "name": "Metro Station", "distance": "2 km"}],
        "essentialPoints": [],
        "utilityPoints": [],
    }
    record.update(overrides)
    return record
