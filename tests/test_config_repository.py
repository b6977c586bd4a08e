from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from housing.domain.models import PersonDefaults
from housing.repository.config_repository import (
    ConfigurationLoadError,
    HouseConfigRepository,
    defaults_from_dict,
    house_from_dict,
    people_from_dict,
    person_from_dict,
    room_from_dict,
)
from housing.utils.config import get_settings


def _room_payload(room_id: str = "attic", **overrides) -> dict:
    payload = {
        "id": room_id,
        "name": room_id.title(),
        "sizeSqm": 12,
        "windows": 1,
        "attractiveness": 4,
        "bedType": "single",
        "floor": 2,
        "isFrontFacing": False,
        "noise": 2,
        "storage": 3,
        "sunlight": 5,
        "nearKitchen": False,
        "ensuite": True,
    }
    payload.update(overrides)
    return payload


def _person_payload(person_id: str = "alex", **overrides) -> dict:
    payload = {
        "id": person_id,
        "name": person_id.title(),
        "gender": "nonbinary",
        "foundHouse": True,
        "handledAgent": False,
        "attendedViewing": True,
        "currentBedType": "single",
        "relationship": {"status": "single", "partnerLocation": "none"},
        "cooksOften": True,
    }
    payload.update(overrides)
    return payload


def _build_repository(tmp_path: Path, house: object, people: object) -> HouseConfigRepository:
    house_path = tmp_path / "house.json"
    people_path = tmp_path / "people.json"
    house_path.write_text(json.dumps(house), encoding="utf-8")
    people_path.write_text(json.dumps(people), encoding="utf-8")
    settings = replace(
        get_settings(),
        house_config_path=house_path,
        people_config_path=people_path,
    )
    return HouseConfigRepository(settings=settings)


def test_room_from_dict_maps_camel_case_fields() -> None:
    room = room_from_dict(_room_payload())

    assert room.id == "attic"
    assert room.size_sqm == 12.0
    assert room.bed_type == "single"
    assert room.floor == 2
    assert room.ensuite is True
    assert room.near_kitchen is False


def test_room_from_dict_rejects_unknown_bed_type() -> None:
    with pytest.raises(ConfigurationLoadError, match="invalid bedType"):
        room_from_dict(_room_payload(bedType="king"))


def test_room_from_dict_rejects_non_numeric_size() -> None:
    with pytest.raises(ConfigurationLoadError, match="Invalid room entry"):
        room_from_dict(_room_payload(sizeSqm="big"))


def test_house_from_dict_requires_name_and_rooms() -> None:
    with pytest.raises(ConfigurationLoadError, match="Expected"):
        house_from_dict({"rooms": []})


def test_person_from_dict_keeps_overrides_optional() -> None:
    person = person_from_dict(
        _person_payload(preferenceWeights={"size": 7}, bedUpgradeWeight=1.5)
    )

    assert person.found_house is True
    assert person.cooks_often is True
    assert person.kitchen_preference is None
    assert person.preference_weights == {"size": 7.0}
    assert person.bed_upgrade_weight == 1.5
    assert person.safety_concern is None
    assert person.relationship.partner_id is None


def test_person_from_dict_rejects_unknown_gender() -> None:
    with pytest.raises(ConfigurationLoadError, match="Invalid gender"):
        person_from_dict(_person_payload(gender="robot"))


def test_person_from_dict_rejects_bad_relationship() -> None:
    with pytest.raises(ConfigurationLoadError, match="Invalid relationship"):
        person_from_dict(
            _person_payload(relationship={"status": "married", "partnerLocation": "none"})
        )


def test_person_from_dict_rejects_bad_kitchen_preference() -> None:
    with pytest.raises(ConfigurationLoadError, match="kitchenPreference"):
        person_from_dict(_person_payload(kitchenPreference="adjacent"))


def test_person_from_dict_rejects_non_boolean_flag() -> None:
    with pytest.raises(ConfigurationLoadError, match="foundHouse"):
        person_from_dict(_person_payload(foundHouse="yes"))


def test_partial_defaults_fall_back_to_builtin_values() -> None:
    builtin = PersonDefaults.builtin()

    defaults = defaults_from_dict(
        {"preferenceWeights": {"size": 9}, "priorityScale": 20}
    )

    assert defaults.preference_weights["size"] == 9.0
    assert defaults.preference_weights["quiet"] == builtin.preference_weights["quiet"]
    assert defaults.priority_scale == 20.0
    assert defaults.bed_upgrade_weight == builtin.bed_upgrade_weight


def test_missing_defaults_use_builtin() -> None:
    people_config = people_from_dict({"people": [_person_payload()]})
    assert people_config.defaults == PersonDefaults.builtin()


def test_repository_loads_files_from_settings(tmp_path: Path) -> None:
    repository = _build_repository(
        tmp_path,
        {"name": "Test House", "rooms": [_room_payload("a"), _room_payload("b", bedType="double")]},
        {"people": [_person_payload("alex"), _person_payload("blair")]},
    )

    house = repository.load_house()
    people_config = repository.load_people()

    assert house.name == "Test House"
    assert [room.id for room in house.rooms] == ["a", "b"]
    assert [person.id for person in people_config.people] == ["alex", "blair"]


def test_repository_reports_missing_file(tmp_path: Path) -> None:
    repository = HouseConfigRepository(settings=get_settings())

    with pytest.raises(ConfigurationLoadError, match="not found"):
        repository.load_house(tmp_path / "missing.json")


def test_repository_reports_invalid_json(tmp_path: Path) -> None:
    broken = tmp_path / "house.json"
    broken.write_text("{ not json", encoding="utf-8")
    repository = HouseConfigRepository(settings=get_settings())

    with pytest.raises(ConfigurationLoadError, match="not valid JSON"):
        repository.load_house(broken)


def test_repository_prefixes_shape_errors_with_path(tmp_path: Path) -> None:
    repository = _build_repository(tmp_path, {"name": "House"}, {"people": "nobody"})

    with pytest.raises(ConfigurationLoadError, match="house.json"):
        repository.load_house()
    with pytest.raises(ConfigurationLoadError, match="people.json"):
        repository.load_people()


def test_bundled_sample_configuration_loads() -> None:
    repository = HouseConfigRepository(settings=get_settings())

    house = repository.load_house()
    people_config = repository.load_people()

    assert len(house.rooms) >= len(people_config.people)
    assert {person.id for person in people_config.people} >= {"chidi", "dana"}
