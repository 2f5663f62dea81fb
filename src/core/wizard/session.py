# src/core/wizard/session.py
"""
Host-facing facade for one wizard session.

A WizardSession owns the single WizardState plus the sequencer and the
submission assembler built around it. Every ValidationError/RemoteError and
every submission outcome is reported to the notifier exactly once, then the
error is re-raised so the host can branch on it.

Entry points
------------
- WizardSession(service, ...)                          create mode
- await WizardSession.open_for_edit(service, id, ...)  edit mode (hydrated)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.diagnostics import get_logger
from src.core.media.probe import ImageProbe
from src.core.wizard.errors import WIZARD_ERRORS, RemoteError, ValidationError, remote_error_guard
from src.core.wizard.record import normalize_record
from src.core.wizard.sequencer import StepSequencer
from src.core.wizard.state import HydrationReport, WizardState
from src.core.wizard.submission import SubmissionAssembler
from src.schemas.labels import DistanceUnit, ListingGoal, POICategory, coerce_label
from src.schemas.models import ImageRef, ListingPayload, SubmissionResult, WizardMode
from src.services.listing_client import ListingService

Notifier = Callable[[str, str], None]

log = get_logger()


class LoggingNotifier:
    """Default notifier: success kinds at INFO, everything else at WARNING."""

    success_kinds = frozenset({"Submitted"})

    def __call__(self, kind: str, message: str) -> None:
        if kind in self.success_kinds:
            log.info("[%s] %s", kind, message)
        else:
            log.warning("[%s] %s", kind, message)


class WizardSession:
    def __init__(
        self,
        service: ListingService,
        *,
        probe: ImageProbe | None = None,
        notifier: Notifier | None = None,
        mode: WizardMode = "create",
        listing_id: str | None = None,
    ) -> None:
        self.service = service
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.state = WizardState(probe)
        self.sequencer = StepSequencer(self.state)
        self.submission = SubmissionAssembler(self.state, self.sequencer, service, mode=mode, listing_id=listing_id)
        self.hydration = HydrationReport()

    @classmethod
    async def open_for_edit(
        cls,
        service: ListingService,
        listing_id: str,
        *,
        probe: ImageProbe | None = None,
        notifier: Notifier | None = None,
    ) -> WizardSession:
        """Fetch a persisted listing and return a session hydrated from it, positioned on step 1."""
        session = cls(service, probe=probe, notifier=notifier, mode="edit", listing_id=listing_id)
        with session._reporting():
            with remote_error_guard("fetch_listing"):
                raw = await service.fetch_listing(listing_id)
            try:
                record = normalize_record(raw, listing_id=listing_id)
            except ValueError as e:
                raise RemoteError(str(e), operation="fetch_listing") from e
        session.hydration = session.state.hydrate(record)
        if session.hydration:
            message = f"Listing {listing_id} loaded with gaps: {session.hydration.describe()}"
            log.warning("%s", message)
            session.notifier("HydrationWarning", message)
        return session

    # ---- reporting ----

    @contextmanager
    def _reporting(self) -> Iterator[None]:
        try:
            yield
        except WIZARD_ERRORS as e:
            self.notifier(e.kind, str(e))
            raise

    # ---- read-only views ----

    @property
    def mode(self) -> WizardMode:
        return self.submission.mode

    @property
    def listing_id(self) -> str | None:
        return self.submission.listing_id

    @property
    def current_step_id(self) -> int:
        return self.sequencer.current_step_id

    @property
    def completed_step_ids(self) -> frozenset[int]:
        return frozenset(self.sequencer.completed_step_ids)

    @property
    def status(self) -> str:
        return self.sequencer.status

    @property
    def distance_unit(self) -> DistanceUnit:
        return self.state.unit.current

    # ---- form fields ----

    def set_fields(self, **values: Any) -> None:
        """Apply form values all or nothing; a goal in the same call is applied last."""
        with self._reporting():
            if self.sequencer.status == "submitted":
                raise ValidationError("AlreadySubmitted", "AlreadySubmitted: this listing has already been submitted")
            goal = values.pop("goal", None)
            if goal is not None and coerce_label(ListingGoal, goal) is None:
                raise ValidationError("InvalidField", f"InvalidField: unknown goal {goal!r}", field="goal")
            try:
                self.state.update(**values)
            except PydanticValidationError as e:
                bad = e.errors()[0]["loc"][0] if e.errors() else None
                raise ValidationError("InvalidField", f"InvalidField: {bad}", field=str(bad) if bad else None) from e
            except AttributeError as e:
                raise ValidationError("InvalidField", str(e)) from e
            if goal is not None:
                self.sequencer.change_goal(goal)

    def change_goal(self, goal: ListingGoal | str) -> None:
        with self._reporting():
            self.sequencer.change_goal(goal)

    # ---- navigation ----

    def advance(self) -> int:
        with self._reporting():
            return self.sequencer.advance()

    def go_to(self, step_id: int) -> int:
        with self._reporting():
            return self.sequencer.go_to(step_id)

    def set_distance_unit(self, unit: DistanceUnit | str) -> DistanceUnit:
        with self._reporting():
            return self.sequencer.set_distance_unit(unit)

    # ---- proximity ----

    def add_point(self, category: POICategory | str, poi_type: str, distance_value: str, name: str | None = None) -> str:
        with self._reporting():
            return self.state.registry.add_point(category, poi_type, name, distance_value)

    def remove_point(self, point_id: str) -> None:
        self.state.registry.remove_point(point_id)

    # ---- images ----

    async def add_image(self, url: str) -> ImageRef | None:
        with self._reporting():
            return await self.state.images.submit_candidate(url)

    def remove_image(self, url: str) -> None:
        self.state.images.remove_image(url)

    # ---- submission ----

    def build_payload(self) -> ListingPayload:
        return self.submission.build_payload()

    async def submit(self) -> SubmissionResult:
        with self._reporting():
            result = await self.submission.submit()
        verb = "updated" if result.mode == "edit" else "submitted"
        self.notifier("Submitted", f"Listing {verb} successfully! Listing ID: {result.listing_id or 'N/A'}")
        return result

    def close(self) -> None:
        self.state.images.close()

    def __repr__(self) -> str:
        return f"WizardSession(mode={self.mode!r}, {self.sequencer!r})"
