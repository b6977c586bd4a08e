"""Deterministic person-to-room scoring.

Room attributes are normalized jointly across the whole room set, so a
room's metrics only mean something relative to the rooms it was scored
with. People are resolved once into ``PersonMeta`` (defaults overlaid with
personal overrides) and every (person, room) pair is scored from those two
derived views.
"""

from __future__ import annotations

import math
from typing import AbstractSet, Mapping, Optional, Sequence

from housing.domain.models import (
    PREFERENCE_KEYS,
    HouseMeta,
    KitchenPreference,
    Person,
    PersonDefaults,
    PersonMeta,
    PriorityMode,
    Room,
    RoomMetrics,
)
from housing.utils.logger import get_logger


logger = get_logger(__name__)

# (ground floor, front facing) -> risk
SAFETY_RISK_LEVELS: dict[tuple[bool, bool], float] = {
    (True, True): 1.0,
    (True, False): 0.5,
    (False, True): 0.25,
    (False, False): 0.0,
}


class ScoringValidationError(ValueError):
    """Raised when room attributes cannot be normalized."""


def normalize_values(values: Sequence[float], label: str = "value") -> list[float]:
    """Min-max scale ``values`` into [0, 1]; a uniform input maps to all 1s."""
    if not values:
        return []
    for value in values:
        if not math.isfinite(value):
            raise ScoringValidationError(f"Cannot normalize non-finite {label}: {value!r}")

    lowest = min(values)
    highest = max(values)
    if highest == lowest:
        return [1.0 for _ in values]
    span = highest - lowest
    return [(value - lowest) / span for value in values]


def safety_risk(room: Room) -> float:
    return SAFETY_RISK_LEVELS[(room.floor == 0, room.is_front_facing)]


def _normalize_attribute(rooms: Sequence[Room], attribute: str) -> list[float]:
    values = [getattr(room, attribute) for room in rooms]
    try:
        return normalize_values(values, label=attribute)
    except ScoringValidationError:
        offenders = [room.id for room in rooms if not math.isfinite(getattr(room, attribute))]
        raise ScoringValidationError(
            f"Room attribute {attribute} is non-finite for room(s): {', '.join(offenders)}"
        ) from None


def build_room_metrics(rooms: Sequence[Room]) -> list[RoomMetrics]:
    """Build normalized metrics for every room in one pass over the set."""
    size = _normalize_attribute(rooms, "size_sqm")
    windows = _normalize_attribute(rooms, "windows")
    attractiveness = _normalize_attribute(rooms, "attractiveness")
    sunlight = _normalize_attribute(rooms, "sunlight")
    storage = _normalize_attribute(rooms, "storage")
    noise = _normalize_attribute(rooms, "noise")
    floor_level = _normalize_attribute(rooms, "floor")

    return [
        RoomMetrics(
            size=size[index],
            windows=windows[index],
            attractiveness=attractiveness[index],
            sunlight=sunlight[index],
            storage=storage[index],
            quiet=1.0 - noise[index],
            kitchen_proximity=1.0 if room.near_kitchen else 0.0,
            ensuite=1.0 if room.ensuite else 0.0,
            floor_level=floor_level[index],
            bed_value=1.0 if room.bed_type == "double" else 0.0,
            safety_risk=safety_risk(room),
        )
        for index, room in enumerate(rooms)
    ]


def build_house_meta(rooms: Sequence[Room]) -> HouseMeta:
    return HouseMeta(has_single_bed=any(room.bed_type == "single" for room in rooms))


def merge_weights(
    defaults: Mapping[str, float],
    overrides: Optional[Mapping[str, float]] = None,
) -> dict[str, float]:
    merged = dict(defaults)
    merged.update(overrides or {})
    return merged


def calculate_priority_score(person: Person, weights: Mapping[str, float]) -> float:
    score = 0.0
    if person.found_house:
        score += weights["foundHouse"]
    if person.handled_agent:
        score += weights["handledAgent"]
    if person.attended_viewing:
        score += weights["attendedViewing"]
    return score


def resolve_kitchen_preference(person: Person) -> KitchenPreference:
    if person.kitchen_preference is not None:
        return person.kitchen_preference
    return "close" if person.cooks_often else "none"


def _resolve(override: Optional[float], default: float) -> float:
    return default if override is None else override


def build_person_meta(person: Person, defaults: PersonDefaults) -> PersonMeta:
    preference_weights = merge_weights(defaults.preference_weights, person.preference_weights)
    priority_weights = merge_weights(defaults.priority_weights, person.priority_weights)
    priority_score = calculate_priority_score(person, priority_weights)
    return PersonMeta(
        preference_weights=preference_weights,
        priority_weights=priority_weights,
        priority_score=priority_score,
        priority_multiplier=1.0 + priority_score / defaults.priority_scale,
        safety_concern=_resolve(person.safety_concern, defaults.safety_concern),
        has_safety_concern=person.has_safety_concern,
        kitchen_preference=resolve_kitchen_preference(person),
        bed_upgrade_weight=_resolve(person.bed_upgrade_weight, defaults.bed_upgrade_weight),
        bed_downgrade_penalty=_resolve(
            person.bed_downgrade_penalty, defaults.bed_downgrade_penalty
        ),
        double_bed_partner_weight=_resolve(
            person.double_bed_partner_weight, defaults.double_bed_partner_weight
        ),
        single_bed_internal_couple_weight=_resolve(
            person.single_bed_internal_couple_weight,
            defaults.single_bed_internal_couple_weight,
        ),
        double_bed_internal_couple_weight=_resolve(
            person.double_bed_internal_couple_weight,
            defaults.double_bed_internal_couple_weight,
        ),
    )


def build_people_meta(people: Sequence[Person], defaults: PersonDefaults) -> list[PersonMeta]:
    return [build_person_meta(person, defaults) for person in people]


def _preference_score(
    metrics: RoomMetrics,
    meta: PersonMeta,
    ignore_preferences: AbstractSet[str],
) -> float:
    score = 0.0
    for key in PREFERENCE_KEYS:
        if key in ignore_preferences:
            continue
        weight = meta.preference_weights[key]
        if key == "kitchenProximity":
            if meta.kitchen_preference == "close":
                score += metrics.kitchen_proximity * weight
            elif meta.kitchen_preference == "far":
                score += (1.0 - metrics.kitchen_proximity) * weight
            continue
        score += metrics.preference_value(key) * weight
    return score


def internal_couple_gets_double(person: Person) -> bool:
    """The partner whose id sorts first takes the double-bed role."""
    partner_id = person.relationship.partner_id
    return partner_id is not None and person.id < partner_id


def score_room(
    person: Person,
    room: Room,
    metrics: RoomMetrics,
    meta: PersonMeta,
    house_meta: HouseMeta,
    priority_mode: PriorityMode = "amplify",
    ignore_preferences: AbstractSet[str] = frozenset(),
) -> float:
    """Score how well ``room`` fits ``person``.

    The score is built from three running totals:

    - preferences: normalized room metrics times resolved weights, skipping
      any key in ``ignore_preferences``;
    - bonuses: bed upgrade, external partner on a double bed, and the
      internal-couple split when the house has a single-bed room;
    - penalties: bed downgrade and ``safety_risk * safety_concern`` for
      people who reported a safety concern.

    ``"amplify"`` multiplies the net total by the priority multiplier;
    ``"bonus"`` multiplies only preferences and bonuses, leaving penalties
    unscaled.
    """
    preference_score = _preference_score(metrics, meta, ignore_preferences)
    bonus_score = 0.0
    penalty_score = 0.0

    is_double = room.bed_type == "double"
    is_single = room.bed_type == "single"

    if person.current_bed_type == "single" and is_double:
        bonus_score += meta.bed_upgrade_weight
    if person.current_bed_type == "double" and is_single:
        penalty_score += meta.bed_downgrade_penalty

    # Residents with an outside partner host them, so they lean toward doubles.
    if person.relationship.is_partnered_externally and is_double:
        bonus_score += meta.double_bed_partner_weight

    if person.relationship.is_partnered_in_house and house_meta.has_single_bed:
        if internal_couple_gets_double(person):
            if is_double:
                bonus_score += meta.double_bed_internal_couple_weight
        elif is_single:
            bonus_score += meta.single_bed_internal_couple_weight

    if meta.needs_safety_penalty:
        penalty_score += metrics.safety_risk * meta.safety_concern

    if priority_mode == "bonus":
        return (preference_score + bonus_score) * meta.priority_multiplier - penalty_score
    return (preference_score + bonus_score - penalty_score) * meta.priority_multiplier


def build_score_matrix(
    people: Sequence[Person],
    rooms: Sequence[Room],
    room_metrics: Sequence[RoomMetrics],
    people_meta: Sequence[PersonMeta],
    priority_mode: PriorityMode = "amplify",
    ignore_preferences: AbstractSet[str] = frozenset(),
) -> list[list[float]]:
    """Score every (person, room) pair; rows follow people, columns follow rooms."""
    house_meta = build_house_meta(rooms)
    logger.debug(
        "Building score matrix | people=%s | rooms=%s | has_single_bed=%s | priority_mode=%s",
        len(people),
        len(rooms),
        house_meta.has_single_bed,
        priority_mode,
    )
    return [
        [
            score_room(
                person,
                room,
                room_metrics[room_index],
                people_meta[person_index],
                house_meta,
                priority_mode=priority_mode,
                ignore_preferences=ignore_preferences,
            )
            for room_index, room in enumerate(rooms)
        ]
        for person_index, person in enumerate(people)
    ]
