"""Tests for min-max normalization and room metric construction."""

from __future__ import annotations

import math

import pytest

from housing.domain.models import Room
from housing.services.scoring_service import (
    ScoringValidationError,
    build_house_meta,
    build_room_metrics,
    normalize_values,
    safety_risk,
)


def make_room(room_id: str = "room", **overrides) -> Room:
    fields = {
        "id": room_id,
        "name": room_id.title(),
        "size_sqm": 15.0,
        "windows": 2.0,
        "attractiveness": 5.0,
        "bed_type": "double",
        "floor": 1,
        "is_front_facing": False,
        "noise": 3.0,
        "storage": 5.0,
        "sunlight": 5.0,
        "near_kitchen": False,
        "ensuite": False,
    }
    fields.update(overrides)
    return Room(**fields)


# --- normalize_values ---

def test_normalize_two_values_spans_unit_interval() -> None:
    assert normalize_values([3, 7]) == [0.0, 1.0]


def test_normalize_uniform_values_map_to_one() -> None:
    assert normalize_values([4, 4, 4]) == [1.0, 1.0, 1.0]


def test_normalize_single_value_maps_to_one() -> None:
    assert normalize_values([12.5]) == [1.0]


def test_normalize_empty_input_returns_empty() -> None:
    assert normalize_values([]) == []


def test_normalize_output_stays_within_bounds() -> None:
    values = [-4.0, 0.0, 2.5, 9.0, 13.75, 1e6]
    normalized = normalize_values(values)
    assert len(normalized) == len(values)
    assert all(0.0 <= value <= 1.0 for value in normalized)
    assert normalized[0] == 0.0
    assert normalized[-1] == 1.0


@pytest.mark.parametrize("bad_value", [math.nan, math.inf, -math.inf])
def test_normalize_rejects_non_finite(bad_value: float) -> None:
    with pytest.raises(ScoringValidationError):
        normalize_values([1.0, bad_value, 3.0])


# --- safety risk ---

def test_safety_risk_levels_are_strictly_ordered() -> None:
    upper_back = safety_risk(make_room(floor=1, is_front_facing=False))
    upper_front = safety_risk(make_room(floor=1, is_front_facing=True))
    ground_back = safety_risk(make_room(floor=0, is_front_facing=False))
    ground_front = safety_risk(make_room(floor=0, is_front_facing=True))

    assert upper_back < upper_front < ground_back < ground_front
    assert upper_back == 0.0
    assert ground_front == 1.0


# --- build_room_metrics ---

def test_room_metrics_normalize_jointly_and_invert_noise() -> None:
    rooms = [
        make_room("small", size_sqm=10, noise=8, floor=0),
        make_room("large", size_sqm=20, noise=2, floor=2),
    ]

    small, large = build_room_metrics(rooms)

    assert small.size == 0.0
    assert large.size == 1.0
    assert small.quiet == 0.0
    assert large.quiet == 1.0
    assert small.floor_level == 0.0
    assert large.floor_level == 1.0


def test_room_metrics_uniform_attributes_do_not_penalize() -> None:
    rooms = [make_room("a"), make_room("b")]

    metrics = build_room_metrics(rooms)

    for item in metrics:
        assert item.size == 1.0
        assert item.windows == 1.0
        assert item.sunlight == 1.0
        # noise is uniform too, so normalized noise is 1 and quiet is 0
        assert item.quiet == 0.0


def test_room_metrics_boolean_and_bed_signals() -> None:
    rooms = [
        make_room("ensuite_double", bed_type="double", ensuite=True, near_kitchen=False),
        make_room("kitchen_single", bed_type="single", ensuite=False, near_kitchen=True),
    ]

    double_room, single_room = build_room_metrics(rooms)

    assert double_room.bed_value == 1.0
    assert single_room.bed_value == 0.0
    assert double_room.ensuite == 1.0
    assert single_room.ensuite == 0.0
    assert double_room.kitchen_proximity == 0.0
    assert single_room.kitchen_proximity == 1.0


def test_room_metrics_carry_safety_risk_per_room() -> None:
    rooms = [
        make_room("street", floor=0, is_front_facing=True),
        make_room("garden", floor=0, is_front_facing=False),
    ]

    street, garden = build_room_metrics(rooms)

    assert street.safety_risk == 1.0
    assert garden.safety_risk == 0.5


def test_room_metrics_name_offending_room_for_non_finite_attribute() -> None:
    rooms = [make_room("fine"), make_room("broken", sunlight=math.nan)]

    with pytest.raises(ScoringValidationError, match="broken"):
        build_room_metrics(rooms)


def test_room_metrics_empty_room_set() -> None:
    assert build_room_metrics([]) == []


def test_house_meta_detects_single_bed() -> None:
    assert build_house_meta([make_room("a"), make_room("b", bed_type="single")]).has_single_bed
    assert not build_house_meta([make_room("a"), make_room("b")]).has_single_bed
