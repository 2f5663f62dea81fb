# tests/unit/test_step_sequencer.py
from __future__ import annotations

import pytest

from src.core.wizard.errors import ValidationError
from src.core.wizard.sequencer import StepSequencer
from src.schemas.labels import DistanceUnit, ListingGoal
from tests.utils import add_images


def _walk_to(seq: StepSequencer, step_id: int) -> None:
    while seq.current_step_id < step_id:
        seq.advance()


def test_advance_marks_completed_and_moves_on(state_factory) -> None:
    seq = StepSequencer(state_factory())
    assert seq.advance() == 2
    assert seq.completed_step_ids == {1}
    assert seq.current_step_id == 2


def test_bathrooms_over_cap_keeps_step_two(state_factory) -> None:
    seq = StepSequencer(state_factory(bathrooms="21"))
    seq.advance()

    with pytest.raises(ValidationError) as ei:
        seq.advance()

    assert ei.value.field == "bathrooms"
    assert seq.current_step_id == 2
    assert 2 not in seq.completed_step_ids


def test_images_gate_step_six(state_factory) -> None:
    state = state_factory()
    seq = StepSequencer(state)
    _walk_to(seq, 6)
    with pytest.raises(ValidationError) as ei:
        seq.advance()
    assert ei.value.kind == "NotEnoughImages"

    add_images(state, 3)
    assert seq.advance() == 7


def test_last_step_cannot_advance(state_factory) -> None:
    state = state_factory()
    add_images(state, 3)
    seq = StepSequencer(state)
    _walk_to(seq, 9)
    assert seq.is_last_step
    with pytest.raises(ValidationError) as ei:
        seq.advance()
    assert ei.value.kind == "NoNextStep"
    assert seq.current_step_id == 9


def test_go_to_backwards_and_to_completed_only(state_factory) -> None:
    seq = StepSequencer(state_factory())
    _walk_to(seq, 4)

    assert seq.go_to(2) == 2
    assert seq.go_to(3) == 3  # completed earlier
    assert seq.go_to(3) == 3
    with pytest.raises(ValidationError) as ei:
        seq.go_to(5)
    assert ei.value.kind == "StepLocked"
    assert seq.current_step_id == 3


def test_change_goal_resets_illegal_property_type_and_evicts(state_factory) -> None:
    state = state_factory(property_type="PG")
    seq = StepSequencer(state)
    _walk_to(seq, 6)
    assert {1, 5} <= seq.completed_step_ids

    seq.change_goal(ListingGoal.sale)

    assert state.fields.goal is ListingGoal.sale
    assert state.fields.property_type == "Flat"
    assert seq.completed_step_ids == {2, 3, 4}


def test_change_goal_keeps_legal_property_type(state_factory) -> None:
    state = state_factory(property_type="House")
    seq = StepSequencer(state)
    seq.change_goal("Sale")
    assert state.fields.property_type == "House"


def test_flatmate_to_rent_revalidates_step_five(state_factory) -> None:
    state = state_factory(
        goal="Flatmate",
        property_type="Shared Flatmate",
        preferred_gender="Female",
        preferred_occupation="Student",
    )
    seq = StepSequencer(state)
    _walk_to(seq, 6)
    assert 5 in seq.completed_step_ids

    seq.change_goal("Rent")
    assert 5 not in seq.completed_step_ids
    assert state.fields.property_type == "Flat"

    # Flatmate-only fields no longer block step 5
    state.fields.preferred_gender = ""
    seq.go_to(5)
    assert seq.advance() == 6
    assert 5 in seq.completed_step_ids


def test_change_goal_rejects_unknown(state_factory) -> None:
    seq = StepSequencer(state_factory())
    with pytest.raises(ValidationError) as ei:
        seq.change_goal("Lease")
    assert ei.value.kind == "InvalidField"


def test_distance_unit_only_on_first_proximity_step(state_factory) -> None:
    state = state_factory()
    add_images(state, 3)
    seq = StepSequencer(state)

    with pytest.raises(ValidationError) as ei:
        seq.set_distance_unit("meter")
    assert ei.value.kind == "UnitLocked"

    _walk_to(seq, 7)
    assert seq.set_distance_unit("meter") is DistanceUnit.meter
    assert state.unit.current is DistanceUnit.meter

    seq.advance()
    with pytest.raises(ValidationError):
        seq.set_distance_unit("km")
    assert state.unit.current is DistanceUnit.meter


def test_submitted_sequencer_rejects_navigation(state_factory) -> None:
    seq = StepSequencer(state_factory())
    seq.mark_submitted()
    assert seq.status == "submitted"
    for call in (seq.advance, lambda: seq.go_to(1), lambda: seq.change_goal("Sale")):
        with pytest.raises(ValidationError) as ei:
            call()
        assert ei.value.kind == "AlreadySubmitted"


def test_effective_steps_lists_all_nine(state_factory) -> None:
    seq = StepSequencer(state_factory())
    assert [s.id for s in seq.effective_steps()] == list(range(1, 10))
