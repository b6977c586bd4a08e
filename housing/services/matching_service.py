"""Optimal person-to-room assignment via the Hungarian algorithm."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from housing.domain.constraints import (
    validate_ignore_preferences,
    validate_person_defaults,
    validate_person_weights,
    validate_priority_mode,
    validate_relationships,
    validate_room_attributes,
    validate_tie_break_epsilon,
    validate_unique_ids,
)
from housing.domain.models import (
    AssignmentPlan,
    AssignmentResult,
    HouseConfig,
    PeopleConfig,
    Person,
    PriorityMode,
    Room,
    RoomAssignment,
)
from housing.services.scoring_service import (
    build_people_meta,
    build_room_metrics,
    build_score_matrix,
)
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
UINT32_MASK = 0xFFFFFFFF
DEFAULT_EPSILON = 1e-9


class AssignmentValidationError(Exception):
    """Raised when assignment inputs are invalid."""


def _fnv1a_32(text: str) -> int:
    value = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * FNV_PRIME) & UINT32_MASK
    return value


def compute_tie_breaker(person_id: str, room_id: str) -> float:
    """Stable value in [0, 1) derived from the (person, room) id pair."""
    value = _fnv1a_32(f"{person_id}:{room_id}") / UINT32_MASK
    # a hash of exactly 0xFFFFFFFF would otherwise land on 1.0
    return min(value, float(np.nextafter(1.0, 0.0)))


def build_perturbed_scores(
    scores: Sequence[Sequence[float]],
    people: Sequence[Person],
    rooms: Sequence[Room],
    epsilon: float = DEFAULT_EPSILON,
) -> list[list[float]]:
    """Add ``epsilon * tie_breaker(person, room)`` to every cell."""
    return [
        [
            score + epsilon * compute_tie_breaker(people[person_index].id, rooms[room_index].id)
            for room_index, score in enumerate(row)
        ]
        for person_index, row in enumerate(scores)
    ]


def hungarian(matrix: Sequence[Sequence[float]]) -> list[int]:
    """Return the score-maximizing column for each row.

    Rows are people and columns are rooms; rows must not outnumber columns.
    Scores are negated into costs and padded with zero-cost rows to a
    square matrix, then one row at a time is added through a shortest
    augmenting path over reduced costs. Padding rows absorb the rooms
    nobody gets. Runs in O(size^3) with size = max(rows, columns).
    """
    n = len(matrix)
    m = len(matrix[0]) if n else 0
    if n == 0 or m == 0:
        return []
    if n > m:
        raise AssignmentValidationError(
            f"Hungarian algorithm requires #people <= #rooms. Got {n} people and {m} rooms."
        )

    try:
        scores = np.asarray(matrix, dtype=float)
    except ValueError as exc:
        raise AssignmentValidationError(
            "Score matrix rows must all have the same length"
        ) from exc
    if scores.shape != (n, m):
        raise AssignmentValidationError("Score matrix rows must all have the same length")
    if not np.isfinite(scores).all():
        raise AssignmentValidationError("Score matrix contains non-finite values")

    size = max(n, m)
    cost = np.zeros((size + 1, size + 1), dtype=float)
    cost[1 : n + 1, 1 : m + 1] = -scores

    u = np.zeros(size + 1)  # row potentials
    v = np.zeros(size + 1)  # column potentials
    p = np.zeros(size + 1, dtype=int)  # p[j]: row matched to column j
    way = np.zeros(size + 1, dtype=int)

    for row in range(1, size + 1):
        p[0] = row
        j0 = 0
        minv = np.full(size + 1, np.inf)
        used = np.zeros(size + 1, dtype=bool)

        while True:
            used[j0] = True
            i0 = p[j0]
            free = ~used
            free[0] = False

            reduced = cost[i0] - u[i0] - v
            improved = free & (reduced < minv)
            minv[improved] = reduced[improved]
            way[improved] = j0

            candidates = np.where(free, minv, np.inf)
            j1 = int(np.argmin(candidates))
            delta = candidates[j1]

            u[p[used]] += delta
            v[used] -= delta
            minv[~used] -= delta

            j0 = j1
            if p[j0] == 0:
                break

        while j0:
            j1 = way[j0]
            p[j0] = p[j1]
            j0 = j1

    result = [-1] * n
    for column in range(1, m + 1):
        person_index = p[column] - 1
        if 0 <= person_index < n:
            result[person_index] = column - 1
    return result


def solve_assignment(
    scores: Sequence[Sequence[float]],
    people: Sequence[Person],
    rooms: Sequence[Room],
    deterministic_tie_break: bool = True,
    epsilon: float = DEFAULT_EPSILON,
) -> AssignmentResult:
    """Solve the assignment and return an id-keyed mapping.

    ``total_score`` always sums the unperturbed ``scores``.
    """
    if not people:
        return AssignmentResult(assignment={}, total_score=0.0)
    if len(people) > len(rooms):
        raise AssignmentValidationError(
            f"Cannot assign {len(people)} people to {len(rooms)} rooms. "
            "Need at least as many rooms as people."
        )
    if len(scores) != len(people) or any(len(row) != len(rooms) for row in scores):
        raise AssignmentValidationError(
            f"Score matrix must be {len(people)} x {len(rooms)} (people x rooms)"
        )

    working_scores = (
        build_perturbed_scores(scores, people, rooms, epsilon)
        if deterministic_tie_break
        else scores
    )
    index_assignment = hungarian(working_scores)

    assignment: dict[str, str] = {}
    total_score = 0.0
    for person_index, room_index in enumerate(index_assignment):
        assignment[people[person_index].id] = rooms[room_index].id
        total_score += scores[person_index][room_index]

    return AssignmentResult(assignment=assignment, total_score=total_score)


def assign_rooms(
    scores: Sequence[Sequence[float]],
    people: Sequence[Person],
    rooms: Sequence[Room],
) -> tuple[list[int], float]:
    """Index-based view of ``solve_assignment``: room index per person."""
    result = solve_assignment(scores, people, rooms)
    room_index_by_id = {room.id: index for index, room in enumerate(rooms)}
    indices = []
    for person in people:
        room_id = result.assignment.get(person.id)
        if room_id is None:
            raise AssignmentValidationError(f"No room assigned to person {person.id}")
        indices.append(room_index_by_id[room_id])
    return indices, result.total_score


def score_matrix_frame(
    scores: Sequence[Sequence[float]],
    people: Sequence[Person],
    rooms: Sequence[Room],
) -> pd.DataFrame:
    return pd.DataFrame(
        [list(row) for row in scores],
        index=pd.Index([person.id for person in people], name="person_id"),
        columns=pd.Index([room.id for room in rooms], name="room_id"),
    )


class RoomAssignmentService:
    """Validates inputs, scores every pair, and solves the assignment."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def _validate(
        self,
        house: HouseConfig,
        people_config: PeopleConfig,
        priority_mode: str,
        ignore_preferences: Iterable[str],
    ) -> None:
        people = people_config.people
        rooms = house.rooms

        id_report = validate_unique_ids(people, rooms)
        if not id_report.valid:
            raise AssignmentValidationError(
                f"Duplicate ids: {', '.join(id_report.duplicates)}"
            )

        relationship_errors = validate_relationships(people)
        if relationship_errors:
            raise AssignmentValidationError("; ".join(relationship_errors))

        if len(people) > len(rooms):
            raise AssignmentValidationError(
                f"There are more people ({len(people)}) than rooms ({len(rooms)}). "
                "Add rooms or remove people."
            )
        if len(people) > self._settings.max_people:
            raise AssignmentValidationError(
                f"At most {self._settings.max_people} people are supported per run"
            )

        try:
            validate_room_attributes(rooms)
            validate_person_defaults(people_config.defaults)
            validate_person_weights(people, people_config.defaults)
            validate_priority_mode(priority_mode)
            validate_ignore_preferences(ignore_preferences)
            validate_tie_break_epsilon(self._settings.tie_break_epsilon)
        except ValueError as exc:
            raise AssignmentValidationError(str(exc)) from exc

    def assign(
        self,
        house: HouseConfig,
        people_config: PeopleConfig,
        priority_mode: Optional[PriorityMode] = None,
        ignore_preferences: Optional[Iterable[str]] = None,
        include_scores: bool = False,
    ) -> AssignmentPlan:
        mode = priority_mode or self._settings.default_priority_mode
        ignored = sorted(set(ignore_preferences or ()))
        try:
            self._validate(house, people_config, mode, ignored)
        except AssignmentValidationError as exc:
            logger.warning("Assignment rejected | house=%s | reason=%s", house.name, exc)
            raise

        people = people_config.people
        rooms = house.rooms
        room_metrics = build_room_metrics(rooms)
        people_meta = build_people_meta(people, people_config.defaults)
        scores = build_score_matrix(
            people,
            rooms,
            room_metrics,
            people_meta,
            priority_mode=mode,
            ignore_preferences=frozenset(ignored),
        )
        result = solve_assignment(
            scores,
            people,
            rooms,
            deterministic_tie_break=self._settings.deterministic_tie_break,
            epsilon=self._settings.tie_break_epsilon,
        )

        room_by_id = {room.id: (index, room) for index, room in enumerate(rooms)}
        assignments: list[RoomAssignment] = []
        for person_index, person in enumerate(people):
            room_index, room = room_by_id[result.assignment[person.id]]
            meta = people_meta[person_index]
            assignments.append(
                RoomAssignment(
                    person_id=person.id,
                    person_name=person.name,
                    room_id=room.id,
                    room_name=room.name,
                    score=scores[person_index][room_index],
                    priority_score=meta.priority_score,
                    priority_multiplier=meta.priority_multiplier,
                )
            )
            logger.debug(
                "Assigned | person_id=%s | room_id=%s | score=%.4f",
                person.id,
                room.id,
                scores[person_index][room_index],
            )

        logger.info(
            "Assignment completed | house=%s | priority_mode=%s | people=%s | rooms=%s | "
            "total_score=%.4f | ignored=%s",
            house.name,
            mode,
            len(people),
            len(rooms),
            result.total_score,
            ignored,
        )
        return AssignmentPlan(
            house_name=house.name,
            priority_mode=mode,
            ignore_preferences=ignored,
            total_score=result.total_score,
            assignments=assignments,
            scores=scores if include_scores else None,
        )
