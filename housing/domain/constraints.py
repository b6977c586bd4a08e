"""Domain-level validation rules applied before scoring and solving."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from housing.domain.models import (
    PREFERENCE_KEYS,
    PRIORITY_KEYS,
    PRIORITY_MODES,
    Person,
    PersonDefaults,
    Room,
)


ROOM_NUMERIC_ATTRIBUTES: tuple[str, ...] = (
    "size_sqm",
    "windows",
    "attractiveness",
    "noise",
    "storage",
    "sunlight",
    "floor",
)
PERSON_SCALAR_WEIGHTS: tuple[str, ...] = (
    "safety_concern",
    "bed_upgrade_weight",
    "bed_downgrade_penalty",
    "double_bed_partner_weight",
    "single_bed_internal_couple_weight",
    "double_bed_internal_couple_weight",
)


@dataclass(frozen=True)
class IdValidationResult:
    valid: bool
    duplicates: list[str] = field(default_factory=list)


def canonicalize_id(value: str) -> str:
    return value.strip().lower()


def validate_unique_ids(people: Sequence[Person], rooms: Sequence[Room]) -> IdValidationResult:
    """Report every person/room id whose canonical form was already seen.

    People and rooms live in separate namespaces, so a person and a room may
    share an id without colliding.
    """
    seen: set[str] = set()
    duplicates: list[str] = []

    for kind, ids in (
        ("person", (person.id for person in people)),
        ("room", (room.id for room in rooms)),
    ):
        for raw_id in ids:
            key = f"{kind}:{canonicalize_id(raw_id)}"
            if key in seen:
                duplicates.append(f"{kind}:{raw_id}")
            seen.add(key)

    return IdValidationResult(valid=not duplicates, duplicates=duplicates)


def validate_room_attributes(rooms: Iterable[Room]) -> None:
    for room in rooms:
        for attribute in ROOM_NUMERIC_ATTRIBUTES:
            value = getattr(room, attribute)
            if not math.isfinite(value):
                raise ValueError(f"Room {room.id} has non-finite {attribute}: {value!r}")


def validate_relationships(people: Sequence[Person]) -> list[str]:
    """Return one message per partner link that cannot be resolved.

    A house partner link must be mutual: the partner is also partnered in
    the house and names this person back, so every couple has exactly two
    members.
    """
    people_by_id = {person.id: person for person in people}
    errors: list[str] = []
    for person in people:
        partner_id = person.relationship.partner_id
        if partner_id is None:
            continue
        if not person.relationship.is_partnered_in_house:
            errors.append(
                f"{person.id}: partnerId is only allowed for partners living in the house"
            )
        elif partner_id == person.id:
            errors.append(f"{person.id}: partnerId cannot reference the same person")
        elif partner_id not in people_by_id:
            errors.append(f"{person.id}: partnerId {partner_id!r} does not match any person")
        else:
            partner = people_by_id[partner_id]
            if (
                not partner.relationship.is_partnered_in_house
                or partner.relationship.partner_id != person.id
            ):
                errors.append(
                    f"{person.id}: partner {partner_id!r} does not list {person.id!r} "
                    "as their partner in the house"
                )
    return errors


def validate_person_defaults(defaults: PersonDefaults) -> None:
    missing_preferences = [key for key in PREFERENCE_KEYS if key not in defaults.preference_weights]
    if missing_preferences:
        raise ValueError(f"defaults missing preference weights: {', '.join(missing_preferences)}")
    missing_priorities = [key for key in PRIORITY_KEYS if key not in defaults.priority_weights]
    if missing_priorities:
        raise ValueError(f"defaults missing priority weights: {', '.join(missing_priorities)}")
    if not math.isfinite(defaults.priority_scale) or defaults.priority_scale <= 0:
        raise ValueError("priority_scale must be > 0")


def _non_finite_weights(
    weights: Mapping[str, float],
    scalars: Mapping[str, Optional[float]],
) -> list[str]:
    keys = [key for key, value in weights.items() if not math.isfinite(value)]
    keys.extend(
        key for key, value in scalars.items() if value is not None and not math.isfinite(value)
    )
    return keys


def _scalar_weights(source: PersonDefaults | Person) -> dict[str, Optional[float]]:
    return {name: getattr(source, name) for name in PERSON_SCALAR_WEIGHTS}


def validate_person_weights(people: Sequence[Person], defaults: PersonDefaults) -> None:
    """Reject NaN/infinite weights in the defaults or any personal override."""
    bad_defaults = _non_finite_weights(
        {**defaults.preference_weights, **defaults.priority_weights},
        _scalar_weights(defaults),
    )
    if bad_defaults:
        raise ValueError(f"defaults have non-finite weights: {', '.join(bad_defaults)}")

    for person in people:
        bad_keys = _non_finite_weights(
            {**person.preference_weights, **person.priority_weights},
            _scalar_weights(person),
        )
        if bad_keys:
            raise ValueError(f"{person.id} has non-finite weights: {', '.join(bad_keys)}")


def validate_priority_mode(priority_mode: str) -> None:
    if priority_mode not in PRIORITY_MODES:
        raise ValueError(
            f"Unknown priority mode: {priority_mode}. Expected one of {', '.join(PRIORITY_MODES)}"
        )


def validate_ignore_preferences(keys: Iterable[str]) -> None:
    unknown = sorted(set(keys) - set(PREFERENCE_KEYS))
    if unknown:
        raise ValueError(f"Unknown ignore option(s): {', '.join(unknown)}")


def validate_tie_break_epsilon(epsilon: float) -> None:
    if not math.isfinite(epsilon) or not 0.0 < epsilon < 1e-6:
        raise ValueError("tie_break_epsilon must be in (0, 1e-6)")
