"""Command-line entry point: assign rooms from house and people JSON files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from housing.domain.models import (
    PREFERENCE_KEYS,
    PRIORITY_MODES,
    AssignmentPlan,
    HouseConfig,
    PeopleConfig,
)
from housing.repository.config_repository import ConfigurationLoadError, HouseConfigRepository
from housing.services.matching_service import (
    AssignmentValidationError,
    RoomAssignmentService,
    score_matrix_frame,
)
from housing.services.scoring_service import ScoringValidationError
from housing.utils.config import Settings, get_settings
from housing.utils.logger import configure_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="housing-assign",
        description="Assign people to rooms so that total satisfaction is maximized",
    )
    ap.add_argument("--house", type=Path, help="House JSON file (defaults to HOUSING_HOUSE_CONFIG)")
    ap.add_argument("--people", type=Path, help="People JSON file (defaults to HOUSING_PEOPLE_CONFIG)")
    ap.add_argument(
        "--priority-mode",
        choices=PRIORITY_MODES,
        help="amplify: priority scales the whole score; bonus: penalties stay unscaled",
    )
    ap.add_argument(
        "--ignore",
        action="append",
        default=[],
        choices=PREFERENCE_KEYS,
        metavar="KEY",
        help="Preference to leave out of scoring (repeatable): " + ", ".join(PREFERENCE_KEYS),
    )
    ap.add_argument("--json", action="store_true", help="Print the result as JSON")
    ap.add_argument("--show-scores", action="store_true", help="Print the full person x room score matrix")
    ap.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
        help="Log verbosity on stderr (defaults to HOUSING_LOG_LEVEL)",
    )
    return ap.parse_args(argv)


def _round(value: float) -> float:
    return round(value, 2)


def _humanize(key: str) -> str:
    return "".join(f" {char.lower()}" if char.isupper() else char for char in key)


def render_json(plan: AssignmentPlan, frame: Optional[pd.DataFrame] = None) -> str:
    payload = {
        "house": plan.house_name,
        "priorityMode": plan.priority_mode,
        "ignorePreferences": plan.ignore_preferences,
        "totalScore": _round(plan.total_score),
        "assignments": [
            {
                "personId": item.person_id,
                "personName": item.person_name,
                "roomId": item.room_id,
                "roomName": item.room_name,
                "score": _round(item.score),
                "priorityScore": _round(item.priority_score),
                "priorityMultiplier": _round(item.priority_multiplier),
            }
            for item in plan.assignments
        ],
    }
    if frame is not None:
        payload["scores"] = frame.round(2).to_dict(orient="index")
    return json.dumps(payload, indent=2)


def render_text(plan: AssignmentPlan, house: HouseConfig, people_config: PeopleConfig) -> str:
    lines = [
        "Room Assignment Results",
        house.name,
        "",
        f"  Priority Mode: {plan.priority_mode}",
        f"  Total Score:   {_round(plan.total_score)}",
        f"  People:        {len(people_config.people)}",
        f"  Rooms:         {len(house.rooms)}",
    ]
    if plan.ignore_preferences:
        lines.append(f"  Ignoring:      {', '.join(_humanize(key) for key in plan.ignore_preferences)}")
    lines.extend(["", "  Assignments:", ""])
    for item in plan.assignments:
        lines.append(
            f"  {item.person_name} -> {item.room_name} "
            f"(score {_round(item.score)}, priority x{_round(item.priority_multiplier)})"
        )
    return "\n".join(lines)


def run(args: argparse.Namespace, settings: Optional[Settings] = None) -> int:
    settings = settings or get_settings()
    if args.log_level:
        configure_logging(args.log_level)
    repository = HouseConfigRepository(settings=settings)
    service = RoomAssignmentService(settings=settings)

    try:
        house = repository.load_house(args.house)
        people_config = repository.load_people(args.people)
        plan = service.assign(
            house,
            people_config,
            priority_mode=args.priority_mode,
            ignore_preferences=args.ignore,
            include_scores=args.show_scores,
        )
    except (ConfigurationLoadError, AssignmentValidationError, ScoringValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    frame = None
    if plan.scores is not None:
        frame = score_matrix_frame(plan.scores, people_config.people, house.rooms)

    if args.json:
        print(render_json(plan, frame))
        return 0

    print(render_text(plan, house, people_config))
    if frame is not None:
        with pd.option_context("display.width", 200, "display.precision", 2):
            print()
            print(frame)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
