# src/core/wizard/submission.py
"""
Global validation, payload assembly and dispatch.

`submit()` checks, in order:
  1) no dispatch already outstanding   -> SubmissionInProgress
  2) sequencer is on the last step     -> NotOnLastStep
  3) every applicable step validates   -> the step's ValidationError
then builds one ListingPayload and sends it to create_listing (create mode)
or update_listing (edit mode). On success the sequencer is marked submitted
and the state is reset; on RemoteError nothing local changes.
"""

from __future__ import annotations

from src.core.diagnostics import get_logger
from src.core.wizard.errors import ValidationError, remote_error_guard
from src.core.wizard.sequencer import StepSequencer
from src.core.wizard.state import WizardState
from src.core.wizard.steps import parse_number
from src.schemas.labels import POICategory
from src.schemas.models import ListingPayload, SubmissionResult, WizardMode
from src.services.listing_client import ListingService

log = get_logger()


def _num(text: object) -> float:
    value = parse_number(text)
    return value if value is not None and value >= 0 else 0.0


def _int(text: object) -> int:
    return int(_num(text))


def build_payload(state: WizardState) -> ListingPayload:
    """Assemble the submission payload from the current state. Unparseable numbers become 0."""
    f = state.fields
    points = state.registry.flatten_by_category()
    return ListingPayload(
        listing_goal=f.goal,
        property_type=f.property_type,
        location=f.location_string(),
        city=f.city,
        area=f.area,
        rent=_num(f.rent),
        deposit=_num(f.deposit),
        description=f.description,
        bedrooms=f.bedrooms,
        bathrooms=_int(f.bathrooms),
        is_brokerage_free=f.is_brokerage_free,
        pincode=f.pincode,
        flat_number=f.flat_number,
        state_name=f.state_name,
        district_name=f.district_name,
        building_age=_int(f.building_age),
        ownership_type=f.ownership_type,
        maintenance_charges=_num(f.maintenance_charges),
        facing=f.facing,
        parking=f.parking,
        gated_security=f.gated_security,
        flooring_type=list(f.flooring_type),
        nearby_location=f.nearby_location,
        available_date=f.available_date,
        current_occupants=_int(f.current_occupants),
        furnishing_type=f.furnishing_type,
        amenities=list(f.amenities),
        max_negotiable_price=_num(f.max_negotiable_price),
        negotiation_margin=f.negotiation_margin,
        preferred_gender=f.preferred_gender,
        preferred_occupation=f.preferred_occupation,
        preferred_work_location=f.preferred_work_location,
        transit_points=points[POICategory.transit],
        essential_points=points[POICategory.essential],
        utility_points=points[POICategory.utility],
        images=state.images.validated_urls(),
    )


class SubmissionAssembler:
    def __init__(
        self,
        state: WizardState,
        sequencer: StepSequencer,
        service: ListingService,
        *,
        mode: WizardMode = "create",
        listing_id: str | None = None,
    ) -> None:
        if mode == "edit" and not listing_id:
            raise ValueError("edit mode requires a listing_id")
        self.state = state
        self.sequencer = sequencer
        self.service = service
        self.mode: WizardMode = mode
        self.listing_id = listing_id
        self._dispatching = False

    @property
    def is_dispatching(self) -> bool:
        return self._dispatching

    def validate_all(self) -> None:
        """Run every applicable step's validator in step order."""
        for step in self.sequencer.effective_steps():
            step.validate(self.state)

    def build_payload(self) -> ListingPayload:
        return build_payload(self.state)

    async def submit(self) -> SubmissionResult:
        if self._dispatching:
            raise ValidationError("SubmissionInProgress", "SubmissionInProgress: a submission is already being sent")
        if self.sequencer.status == "submitted":
            raise ValidationError("AlreadySubmitted", "AlreadySubmitted: this listing has already been submitted")
        if not self.sequencer.is_last_step:
            raise ValidationError(
                "NotOnLastStep",
                f"NotOnLastStep: submit from the final step (currently on step {self.sequencer.current_step_id})",
            )
        self.validate_all()

        payload = self.build_payload()
        self._dispatching = True
        try:
            operation = "update_listing" if self.mode == "edit" else "create_listing"
            with remote_error_guard(operation):
                if self.mode == "edit":
                    listing_id = str(self.listing_id)
                    await self.service.update_listing(listing_id, payload)
                else:
                    listing_id = await self.service.create_listing(payload)
        finally:
            self._dispatching = False

        self.sequencer.mark_submitted()
        self.state.reset()
        log.debug("listing %s (%s) submitted", listing_id, self.mode)
        return SubmissionResult(listing_id=listing_id, mode=self.mode)
