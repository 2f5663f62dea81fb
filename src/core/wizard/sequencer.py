# src/core/wizard/sequencer.py
"""
Step state machine: steps 1..9, then Submitted.

- advance():       validate the current step, mark it completed, move on.
- go_to(step_id):  back-navigation, or forward onto an already completed step.
- change_goal():   set the goal and evict completed goal-dependent steps.
"""

from __future__ import annotations

from typing import Literal

from src.core.diagnostics import get_logger
from src.core.wizard.errors import ValidationError
from src.core.wizard.state import WizardState
from src.core.wizard.steps import FIRST_PROXIMITY_STEP, STEPS, StepDescriptor, get_step, goal_dependent_step_ids
from src.schemas.labels import DistanceUnit, ListingGoal, coerce_label, is_legal_property_type, legal_property_types

SequencerStatus = Literal["in_progress", "submitted"]

log = get_logger()


class StepSequencer:
    def __init__(self, state: WizardState, *, start_step: int = 1) -> None:
        self.state = state
        self.current_step_id = get_step(start_step).id
        self.completed_step_ids: set[int] = set()
        self.status: SequencerStatus = "in_progress"

    # ---- queries ----

    def effective_steps(self) -> list[StepDescriptor]:
        return [s for s in STEPS if s.is_applicable(self.state)]

    @property
    def current_step(self) -> StepDescriptor:
        return get_step(self.current_step_id)

    @property
    def is_last_step(self) -> bool:
        steps = self.effective_steps()
        return bool(steps) and steps[-1].id == self.current_step_id

    def validate_current(self) -> None:
        self.current_step.validate(self.state)

    # ---- transitions ----

    def _ensure_open(self) -> None:
        if self.status == "submitted":
            raise ValidationError("AlreadySubmitted", "AlreadySubmitted: this listing has already been submitted")

    def advance(self) -> int:
        """Validate the current step and move to the next applicable one. Returns the new step id."""
        self._ensure_open()
        self.validate_current()

        following = [s.id for s in self.effective_steps() if s.id > self.current_step_id]
        if not following:
            raise ValidationError("NoNextStep", f"NoNextStep: step {self.current_step_id} is the last step")

        self.completed_step_ids.add(self.current_step_id)
        log.debug("step %d completed -> %d", self.current_step_id, following[0])
        self.current_step_id = following[0]
        return self.current_step_id

    def go_to(self, step_id: int) -> int:
        self._ensure_open()
        target = get_step(step_id)
        if not target.is_applicable(self.state):
            raise ValidationError("StepLocked", f"StepLocked: step {step_id} does not apply")
        if step_id > self.current_step_id and step_id not in self.completed_step_ids:
            raise ValidationError("StepLocked", f"StepLocked: complete step {self.current_step_id} first")
        self.current_step_id = step_id
        return step_id

    def change_goal(self, goal: ListingGoal | str) -> None:
        """
        Set the goal. The property type falls back to the goal's first legal
        type when the current one is not available, and completed steps whose
        requirements depend on the goal must be validated again.
        """
        self._ensure_open()
        new_goal = coerce_label(ListingGoal, goal)
        if new_goal is None:
            raise ValidationError("InvalidField", f"InvalidField: unknown goal {goal!r}", field="goal")

        fields = self.state.fields
        fields.goal = new_goal
        if not is_legal_property_type(new_goal, fields.property_type):
            fields.property_type = legal_property_types(new_goal)[0].value

        evicted = self.completed_step_ids & goal_dependent_step_ids()
        self.completed_step_ids -= evicted
        log.debug("goal -> %s; property_type=%s; evicted steps %s", new_goal.value, fields.property_type, sorted(evicted))

    def set_distance_unit(self, unit: DistanceUnit | str) -> DistanceUnit:
        """Change the session unit; only allowed on the first proximity step."""
        self._ensure_open()
        if self.current_step_id != FIRST_PROXIMITY_STEP:
            raise ValidationError(
                "UnitLocked",
                f"UnitLocked: the distance unit can only be changed on step {FIRST_PROXIMITY_STEP}",
                field="distance_unit",
            )
        try:
            return self.state.unit.set(unit)
        except ValueError as e:
            raise ValidationError("InvalidField", str(e), field="distance_unit") from e

    def mark_submitted(self) -> None:
        self._ensure_open()
        self.completed_step_ids.add(self.current_step_id)
        self.status = "submitted"
        log.debug("wizard submitted")

    def __repr__(self) -> str:
        return (
            f"StepSequencer(current={self.current_step_id}, completed={sorted(self.completed_step_ids)}, "
            f"status={self.status!r})"
        )
