from __future__ import annotations

import json

import pytest

from housing.cli import main, parse_args
from housing.utils.config import PROJECT_ROOT

HOUSE_PATH = PROJECT_ROOT / "data" / "sample_house.json"
PEOPLE_PATH = PROJECT_ROOT / "data" / "sample_people.json"


def test_parse_args_collects_repeated_ignore_flags() -> None:
    args = parse_args(["--ignore", "floor", "--ignore", "quiet", "--priority-mode", "bonus"])

    assert args.ignore == ["floor", "quiet"]
    assert args.priority_mode == "bonus"
    assert args.json is False


def test_parse_args_rejects_unknown_ignore_key() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--ignore", "balcony"])


def test_cli_prints_json_plan(capsys) -> None:
    exit_code = main(["--house", str(HOUSE_PATH), "--people", str(PEOPLE_PATH), "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["house"] == "14 Alder Road"
    assert payload["priorityMode"] == "amplify"
    assert len(payload["assignments"]) == 4
    assert len({item["roomId"] for item in payload["assignments"]}) == 4
    assert "scores" not in payload


def test_cli_json_embeds_rounded_scores(capsys) -> None:
    exit_code = main(
        [
            "--house",
            str(HOUSE_PATH),
            "--people",
            str(PEOPLE_PATH),
            "--json",
            "--show-scores",
        ]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert set(payload["scores"]) == {"amara", "ben", "chidi", "dana"}
    for row in payload["scores"].values():
        assert len(row) == 5
        assert all(value == round(value, 2) for value in row.values())


def test_cli_text_output_lists_assignments(capsys) -> None:
    exit_code = main(
        [
            "--house",
            str(HOUSE_PATH),
            "--people",
            str(PEOPLE_PATH),
            "--ignore",
            "kitchenProximity",
            "--show-scores",
        ]
    )

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Room Assignment Results" in output
    assert "Ignoring:      kitchen proximity" in output
    for name in ("Amara", "Ben", "Chidi", "Dana"):
        assert f"  {name} -> " in output
    assert "person_id" in output


def test_cli_reports_missing_file(tmp_path, capsys) -> None:
    exit_code = main(["--house", str(tmp_path / "missing.json"), "--people", str(PEOPLE_PATH)])

    assert exit_code == 1
    assert "error: Configuration file not found" in capsys.readouterr().err


def test_cli_reports_too_few_rooms(tmp_path, capsys) -> None:
    house = json.loads(HOUSE_PATH.read_text(encoding="utf-8"))
    house["rooms"] = house["rooms"][:2]
    small_house = tmp_path / "small_house.json"
    small_house.write_text(json.dumps(house), encoding="utf-8")

    exit_code = main(["--house", str(small_house), "--people", str(PEOPLE_PATH)])

    assert exit_code == 1
    assert "more people (4) than rooms (2)" in capsys.readouterr().err


def test_parse_args_normalizes_log_level() -> None:
    assert parse_args(["--log-level", "debug"]).log_level == "DEBUG"
    assert parse_args([]).log_level is None
