# tests/unit/test_proximity_registry.py
from __future__ import annotations

import random

import pytest

from src.core.proximity.registry import ProximityPointRegistry
from src.core.proximity.units import DistanceUnitSetting
from src.core.wizard.errors import ValidationError
from src.schemas.labels import POI_CATEGORY_ORDER, PROXIMITY_INPUTS, DistanceUnit, POICategory, category_for_type
from src.schemas.models import ProximityPoint


def _bucket_view(reg: ProximityPointRegistry) -> dict[POICategory, list[tuple[str, str, str]]]:
    return {c: [(r.type, r.name, r.distance) for r in reg.list_by_category(c)] for c in POI_CATEGORY_ORDER}


def test_add_point_defaults_name_to_type_and_uses_current_unit() -> None:
    reg = ProximityPointRegistry()
    pid = reg.add_point(POICategory.transit, "Bus Stop", None, "2")

    [rec] = reg.list_by_category(POICategory.transit)
    assert rec.id == pid
    assert rec.name == "Bus Stop"
    assert rec.distance == "2 km"
    assert reg.flatten_all() == [ProximityPoint(type="Bus Stop", name="Bus Stop", distance="2 km")]


def test_unit_is_frozen_per_record() -> None:
    unit = DistanceUnitSetting()
    reg = ProximityPointRegistry(unit)
    reg.add_point("Transit", "Airport", "", "12")
    unit.set(DistanceUnit.min_walk)
    reg.add_point("Transit", "Auto Stand", "", "3")

    assert [p.distance for p in reg.flatten_all()] == ["12 km", "3 min walk"]


@pytest.mark.parametrize(
    "category, poi_type, name, distance, kind",
    [
        (POICategory.transit, "Bus Stop", None, "", "MissingDistance"),
        (POICategory.transit, "Bus Stop", None, "   ", "MissingDistance"),
        (POICategory.essential, "Hospital", None, "-1", "InvalidDistance"),
        (POICategory.essential, "Hospital", None, "near", "InvalidDistance"),
        (POICategory.utility, "ATM", "  ", "0.5", "MissingName"),
        (POICategory.transit, "Hospital", None, "1", "UnknownType"),
        (POICategory.utility, "Spaceport", "Mars", "1", "UnknownType"),
    ],
)
def test_add_point_validation(category, poi_type, name, distance, kind) -> None:
    reg = ProximityPointRegistry()
    with pytest.raises(ValidationError) as ei:
        reg.add_point(category, poi_type, name, distance)
    assert ei.value.kind == kind
    assert len(reg) == 0


def test_missing_distance_is_reported_before_missing_name() -> None:
    reg = ProximityPointRegistry()
    with pytest.raises(ValidationError) as ei:
        reg.add_point(POICategory.utility, "ATM", "", "")
    assert ei.value.kind == "MissingDistance"


def test_utility_keeps_given_name() -> None:
    reg = ProximityPointRegistry()
    reg.add_point(POICategory.utility, "ATM", " SBI ATM ", "0.5")
    assert reg.flatten_all()[0].name == "SBI ATM"


def test_remove_point_is_idempotent() -> None:
    reg = ProximityPointRegistry()
    pid = reg.add_point(POICategory.essential, "School", None, "1")
    reg.remove_point(pid)
    reg.remove_point(pid)
    reg.remove_point("does-not-exist")
    assert reg.flatten_all() == []


def test_flatten_orders_categories_then_insertion() -> None:
    reg = ProximityPointRegistry()
    reg.add_point(POICategory.utility, "Park", "Central Park", "1")
    reg.add_point(POICategory.essential, "Hospital", None, "2")
    reg.add_point(POICategory.transit, "Metro Station", None, "3")
    reg.add_point(POICategory.transit, "Airport", None, "4")

    assert [p.type for p in reg.flatten_all()] == ["Metro Station", "Airport", "Hospital", "Park"]
    split = reg.flatten_by_category()
    assert [p.type for p in split[POICategory.transit]] == ["Metro Station", "Airport"]
    assert [p.type for p in split[POICategory.utility]] == ["Park"]


def test_random_add_remove_sequences_keep_counts_and_order() -> None:
    rng = random.Random(7)
    reg = ProximityPointRegistry()
    live: list[str] = []
    adds = removes = 0
    for _ in range(200):
        if live and rng.random() < 0.35:
            reg.remove_point(live.pop(rng.randrange(len(live))))
            removes += 1
        else:
            cat = rng.choice(POI_CATEGORY_ORDER)
            cfg = rng.choice(PROXIMITY_INPUTS[cat])
            live.append(reg.add_point(cat, cfg.poi_type, "Named", str(rng.randint(0, 50))))
            adds += 1

        flat = reg.flatten_all()
        assert len(flat) == adds - removes
        order = [POI_CATEGORY_ORDER.index(category_for_type(p.type)) for p in flat]
        assert order == sorted(order)


def test_hydrate_round_trip_reproduces_buckets() -> None:
    unit = DistanceUnitSetting()
    reg = ProximityPointRegistry(unit)
    unit.set(DistanceUnit.meter)
    reg.add_point(POICategory.transit, "Railway Station", None, "800")
    reg.add_point(POICategory.transit, "Bus Stop", None, "150")
    reg.add_point(POICategory.essential, "Kirana Stall", None, "50")
    reg.add_point(POICategory.utility, "Movie Theatre", "PVR", "1200")
    before = _bucket_view(reg)

    skipped = reg.hydrate(reg.flatten_all())

    assert skipped == 0
    assert _bucket_view(reg) == before
    assert unit.current is DistanceUnit.meter


def test_hydrate_infers_unit_from_first_parseable_suffix() -> None:
    unit = DistanceUnitSetting()
    reg = ProximityPointRegistry(unit)
    reg.hydrate(
        [
            {"type": "Bus Stop", "name": "Bus Stop", "distance": "3"},
            {"type": "Hospital", "name": "Hospital", "distance": "5 min walk"},
        ]
    )
    assert unit.current is DistanceUnit.min_walk
    # The bare number takes the inferred unit
    assert [p.distance for p in reg.flatten_all()] == ["3 min walk", "5 min walk"]


def test_hydrate_without_units_falls_back_to_km() -> None:
    unit = DistanceUnitSetting(DistanceUnit.meter)
    reg = ProximityPointRegistry(unit)
    reg.hydrate([{"type": "Airport", "distance": "20"}])
    assert unit.current is DistanceUnit.km
    assert reg.flatten_all()[0] == ProximityPoint(type="Airport", name="Airport", distance="20 km")


def test_hydrate_skips_unparseable_entries(caplog) -> None:
    reg = ProximityPointRegistry()
    with caplog.at_level("WARNING"):
        skipped = reg.hydrate(
            [
                {"type": "Bus Stop", "name": "Bus Stop", "distance": "nearby"},
                {"type": "School", "name": "School", "distance": ""},
                {"type": "Hospital", "name": "Hospital", "distance": "1 km"},
            ]
        )
    assert skipped == 2
    assert [p.type for p in reg.flatten_all()] == ["Hospital"]
    assert "unparseable distance" in caplog.text


def test_hydrate_unknown_types_use_hint_then_utility() -> None:
    reg = ProximityPointRegistry()
    reg.hydrate(
        [
            {"type": "Tram Stop", "name": "Tram Stop", "distance": "1 km", "category": "Transit"},
            {"type": "Helipad", "name": "Roof", "distance": "2 km"},
            # vocabulary wins over a contradicting hint
            ProximityPoint(type="Hospital", name="City Hospital", distance="3 km", category=POICategory.utility),
        ]
    )
    assert [r.type for r in reg.list_by_category(POICategory.transit)] == ["Tram Stop"]
    assert [r.type for r in reg.list_by_category(POICategory.essential)] == ["Hospital"]
    assert [r.type for r in reg.list_by_category(POICategory.utility)] == ["Helipad"]


def test_hydrate_replaces_previous_contents() -> None:
    reg = ProximityPointRegistry()
    reg.add_point(POICategory.transit, "Airport", None, "9")
    reg.hydrate([])
    assert reg.flatten_all() == []


def test_hydrate_skips_unknown_unit_suffixes_instead_of_rewriting_them() -> None:
    reg = ProximityPointRegistry()
    skipped = reg.hydrate(
        [
            {"type": "Bus Stop", "name": "Bus Stop", "distance": "500 ft"},
            {"type": "Hospital", "name": "Hospital", "distance": "2 meters"},
            {"type": "School", "name": "School", "distance": "1 km"},
        ]
    )
    assert skipped == 2
    assert [p.distance for p in reg.flatten_all()] == ["1 km"]


def test_hydrate_names_blank_utility_entries_after_their_input_title() -> None:
    reg = ProximityPointRegistry()
    reg.hydrate(
        [
            {"type": "ATM", "name": "", "distance": "200 meter"},
            {"type": "Hospital", "name": "", "distance": "1 km"},
        ]
    )
    assert reg.list_by_category(POICategory.utility)[0].name == "Nearest ATM"
    assert reg.list_by_category(POICategory.essential)[0].name == "Hospital"


def test_name_rule_follows_the_input_vocabulary() -> None:
    reg = ProximityPointRegistry()
    with pytest.raises(ValidationError) as ei:
        reg.add_point("Utility", "Park", "", "1")
    assert ei.value.kind == "MissingName"

    pid = reg.add_point("Essential", "Milk Dairy", "", "0.3")
    assert reg.list_by_category(POICategory.essential)[0].id == pid
    assert reg.list_by_category(POICategory.essential)[0].name == "Milk Dairy"
