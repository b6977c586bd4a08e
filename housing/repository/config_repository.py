"""Repository layer responsible for reading house and people configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional

from housing.domain.models import (
    BED_TYPES,
    GENDERS,
    KITCHEN_PREFERENCES,
    PARTNER_LOCATIONS,
    RELATIONSHIP_STATUSES,
    HouseConfig,
    PeopleConfig,
    Person,
    PersonDefaults,
    Relationship,
    Room,
)
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)


class ConfigurationLoadError(Exception):
    """Raised when a house or people configuration cannot be read."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(entry: Mapping[str, Any], key: str, default: float, label: str) -> float:
    value = entry.get(key, default)
    if not _is_number(value):
        raise ConfigurationLoadError(f"{label}: {key} must be a number, got {value!r}")
    return float(value)


def _flag(entry: Mapping[str, Any], key: str, label: str) -> bool:
    value = entry.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationLoadError(f"{label}: {key} must be true or false, got {value!r}")
    return value


def _optional_number(entry: Mapping[str, Any], key: str, label: str) -> Optional[float]:
    if entry.get(key) is None:
        return None
    return _number(entry, key, 0.0, label)


def _weights(entry: Mapping[str, Any], key: str, label: str) -> dict[str, float]:
    raw = entry.get(key) or {}
    if not isinstance(raw, Mapping):
        raise ConfigurationLoadError(f"{label}: {key} must be an object")
    return {name: _number(raw, name, 0.0, f"{label}.{key}") for name in raw}


def room_from_dict(entry: Mapping[str, Any]) -> Room:
    if not isinstance(entry, Mapping) or not entry.get("id") or not entry.get("name"):
        raise ConfigurationLoadError(f"Invalid room entry: {json.dumps(entry, default=str)}")
    if not _is_number(entry.get("sizeSqm")):
        raise ConfigurationLoadError(f"Invalid room entry: {json.dumps(entry, default=str)}")
    label = f"Room {entry['name']}"
    if entry.get("bedType") not in BED_TYPES:
        raise ConfigurationLoadError(f"{label} has invalid bedType.")
    floor = entry.get("floor", 0)
    if not isinstance(floor, int) or isinstance(floor, bool):
        raise ConfigurationLoadError(f"{label}: floor must be an integer, got {floor!r}")

    return Room(
        id=str(entry["id"]),
        name=str(entry["name"]),
        size_sqm=float(entry["sizeSqm"]),
        windows=_number(entry, "windows", 0.0, label),
        attractiveness=_number(entry, "attractiveness", 0.0, label),
        bed_type=entry["bedType"],
        floor=floor,
        is_front_facing=_flag(entry, "isFrontFacing", label),
        noise=_number(entry, "noise", 0.0, label),
        storage=_number(entry, "storage", 0.0, label),
        sunlight=_number(entry, "sunlight", 0.0, label),
        near_kitchen=_flag(entry, "nearKitchen", label),
        ensuite=_flag(entry, "ensuite", label),
    )


def house_from_dict(payload: Mapping[str, Any]) -> HouseConfig:
    if (
        not isinstance(payload, Mapping)
        or not isinstance(payload.get("name"), str)
        or not isinstance(payload.get("rooms"), list)
    ):
        raise ConfigurationLoadError("Invalid house config. Expected { name, rooms }.")
    return HouseConfig(
        name=payload["name"],
        rooms=[room_from_dict(entry) for entry in payload["rooms"]],
    )


def defaults_from_dict(payload: Optional[Mapping[str, Any]]) -> PersonDefaults:
    """Overlay a (possibly partial) defaults object onto the built-in defaults."""
    builtin = PersonDefaults.builtin()
    if payload is None:
        return builtin
    if not isinstance(payload, Mapping):
        raise ConfigurationLoadError("defaults must be an object")
    label = "defaults"
    return PersonDefaults(
        preference_weights={
            **builtin.preference_weights,
            **_weights(payload, "preferenceWeights", label),
        },
        priority_weights={
            **builtin.priority_weights,
            **_weights(payload, "priorityWeights", label),
        },
        safety_concern=_number(payload, "safetyConcern", builtin.safety_concern, label),
        bed_upgrade_weight=_number(
            payload, "bedUpgradeWeight", builtin.bed_upgrade_weight, label
        ),
        bed_downgrade_penalty=_number(
            payload, "bedDowngradePenalty", builtin.bed_downgrade_penalty, label
        ),
        double_bed_partner_weight=_number(
            payload, "doubleBedPartnerWeight", builtin.double_bed_partner_weight, label
        ),
        single_bed_internal_couple_weight=_number(
            payload,
            "singleBedInternalCoupleWeight",
            builtin.single_bed_internal_couple_weight,
            label,
        ),
        double_bed_internal_couple_weight=_number(
            payload,
            "doubleBedInternalCoupleWeight",
            builtin.double_bed_internal_couple_weight,
            label,
        ),
        priority_scale=_number(payload, "priorityScale", builtin.priority_scale, label),
    )


def relationship_from_dict(value: Any, label: str) -> Relationship:
    if not isinstance(value, Mapping):
        raise ConfigurationLoadError(f"Invalid relationship for {label}.")
    status = value.get("status")
    partner_location = value.get("partnerLocation")
    partner_id = value.get("partnerId")
    if status not in RELATIONSHIP_STATUSES or partner_location not in PARTNER_LOCATIONS:
        raise ConfigurationLoadError(f"Invalid relationship for {label}.")
    if partner_id is not None and not isinstance(partner_id, str):
        raise ConfigurationLoadError(f"Invalid relationship for {label}.")
    return Relationship(
        status=status,
        partner_location=partner_location,
        partner_id=partner_id or None,
    )


def person_from_dict(entry: Mapping[str, Any]) -> Person:
    if (
        not isinstance(entry, Mapping)
        or not entry.get("id")
        or not entry.get("name")
        or entry.get("currentBedType") not in BED_TYPES
    ):
        raise ConfigurationLoadError(f"Invalid person entry: {json.dumps(entry, default=str)}")
    label = str(entry["name"])
    if entry.get("gender") not in GENDERS:
        raise ConfigurationLoadError(f"Invalid gender for {label}.")
    kitchen_preference = entry.get("kitchenPreference")
    if kitchen_preference is not None and kitchen_preference not in KITCHEN_PREFERENCES:
        raise ConfigurationLoadError(f"Invalid kitchenPreference for {label}.")

    return Person(
        id=str(entry["id"]),
        name=label,
        gender=entry["gender"],
        found_house=_flag(entry, "foundHouse", label),
        handled_agent=_flag(entry, "handledAgent", label),
        attended_viewing=_flag(entry, "attendedViewing", label),
        current_bed_type=entry["currentBedType"],
        relationship=relationship_from_dict(entry.get("relationship"), label),
        cooks_often=_flag(entry, "cooksOften", label),
        kitchen_preference=kitchen_preference,
        has_safety_concern=_flag(entry, "hasSafetyConcern", label),
        preference_weights=_weights(entry, "preferenceWeights", label),
        priority_weights=_weights(entry, "priorityWeights", label),
        safety_concern=_optional_number(entry, "safetyConcern", label),
        bed_upgrade_weight=_optional_number(entry, "bedUpgradeWeight", label),
        bed_downgrade_penalty=_optional_number(entry, "bedDowngradePenalty", label),
        double_bed_partner_weight=_optional_number(entry, "doubleBedPartnerWeight", label),
        single_bed_internal_couple_weight=_optional_number(
            entry, "singleBedInternalCoupleWeight", label
        ),
        double_bed_internal_couple_weight=_optional_number(
            entry, "doubleBedInternalCoupleWeight", label
        ),
    )


def people_from_dict(payload: Mapping[str, Any]) -> PeopleConfig:
    if not isinstance(payload, Mapping) or not isinstance(payload.get("people"), list):
        raise ConfigurationLoadError("Invalid people config. Expected { defaults, people }.")
    return PeopleConfig(
        defaults=defaults_from_dict(payload.get("defaults")),
        people=[person_from_dict(entry) for entry in payload["people"]],
    )


class HouseConfigRepository:
    """Reads JSON configuration files so services stay storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def _read_json(self, path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError as exc:
            raise ConfigurationLoadError(f"Configuration file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationLoadError(f"{path} is not valid JSON: {exc}") from exc

    def load_house(self, path: Optional[Path] = None) -> HouseConfig:
        resolved = Path(path or self._settings.house_config_path)
        payload = self._read_json(resolved)
        try:
            house = house_from_dict(payload)
        except ConfigurationLoadError as exc:
            raise ConfigurationLoadError(f"{resolved}: {exc}") from exc
        logger.info("House config loaded | path=%s | rooms=%s", resolved, len(house.rooms))
        return house

    def load_people(self, path: Optional[Path] = None) -> PeopleConfig:
        resolved = Path(path or self._settings.people_config_path)
        payload = self._read_json(resolved)
        try:
            people_config = people_from_dict(payload)
        except ConfigurationLoadError as exc:
            raise ConfigurationLoadError(f"{resolved}: {exc}") from exc
        logger.info(
            "People config loaded | path=%s | people=%s",
            resolved,
            len(people_config.people),
        )
        return people_config
