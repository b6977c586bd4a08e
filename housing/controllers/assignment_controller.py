"""HTTP controller layer for room assignment."""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from housing.controllers.dependencies import get_assignment_service, get_config_repository
from housing.domain.models import (
    PREFERENCE_KEYS,
    PRIORITY_KEYS,
    AssignmentPlan,
    BedType,
    Gender,
    HouseConfig,
    KitchenPreference,
    PartnerLocation,
    PeopleConfig,
    Person,
    PersonDefaults,
    Relationship,
    RelationshipStatus,
    Room,
)
from housing.repository.config_repository import ConfigurationLoadError, HouseConfigRepository
from housing.services.matching_service import AssignmentValidationError, RoomAssignmentService
from housing.services.scoring_service import ScoringValidationError
from housing.utils.config import get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["assignment"])


class CamelModel(BaseModel):
    """Accepts the camelCase keys of the config files as well as field names."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)


def _check_weight_keys(value: dict[str, float], allowed: tuple[str, ...]) -> dict[str, float]:
    unknown = sorted(set(value) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown weight key(s): {', '.join(unknown)}")
    return value


class RoomPayload(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    size_sqm: float = Field(alias="sizeSqm")
    windows: float = 0.0
    attractiveness: float = 0.0
    bed_type: BedType = Field(alias="bedType")
    floor: int = 0
    is_front_facing: bool = Field(default=False, alias="isFrontFacing")
    noise: float = 0.0
    storage: float = 0.0
    sunlight: float = 0.0
    near_kitchen: bool = Field(default=False, alias="nearKitchen")
    ensuite: bool = False

    def to_domain(self) -> Room:
        return Room(**self.model_dump())


class HousePayload(CamelModel):
    name: str
    rooms: list[RoomPayload]

    def to_domain(self) -> HouseConfig:
        return HouseConfig(name=self.name, rooms=[room.to_domain() for room in self.rooms])


class RelationshipPayload(CamelModel):
    status: RelationshipStatus
    partner_location: PartnerLocation = Field(alias="partnerLocation")
    partner_id: str | None = Field(default=None, alias="partnerId")

    def to_domain(self) -> Relationship:
        return Relationship(
            status=self.status,
            partner_location=self.partner_location,
            partner_id=self.partner_id or None,
        )


class WeightsPayload(CamelModel):
    """Weights shared by the house defaults and each person's overrides."""

    preference_weights: dict[str, float] = Field(default_factory=dict, alias="preferenceWeights")
    priority_weights: dict[str, float] = Field(default_factory=dict, alias="priorityWeights")
    safety_concern: float | None = Field(default=None, alias="safetyConcern")
    bed_upgrade_weight: float | None = Field(default=None, alias="bedUpgradeWeight")
    bed_downgrade_penalty: float | None = Field(default=None, alias="bedDowngradePenalty")
    double_bed_partner_weight: float | None = Field(default=None, alias="doubleBedPartnerWeight")
    single_bed_internal_couple_weight: float | None = Field(
        default=None, alias="singleBedInternalCoupleWeight"
    )
    double_bed_internal_couple_weight: float | None = Field(
        default=None, alias="doubleBedInternalCoupleWeight"
    )

    @field_validator("preference_weights")
    @classmethod
    def validate_preference_keys(cls, value: dict[str, float]) -> dict[str, float]:
        return _check_weight_keys(value, PREFERENCE_KEYS)

    @field_validator("priority_weights")
    @classmethod
    def validate_priority_keys(cls, value: dict[str, float]) -> dict[str, float]:
        return _check_weight_keys(value, PRIORITY_KEYS)


class PersonDefaultsPayload(WeightsPayload):
    """Partial defaults; anything left out keeps the built-in value."""

    priority_scale: float | None = Field(default=None, gt=0.0, alias="priorityScale")

    def to_domain(self) -> PersonDefaults:
        builtin = PersonDefaults.builtin()
        scalars = self.model_dump(exclude={"preference_weights", "priority_weights"})
        return replace(
            builtin,
            preference_weights={**builtin.preference_weights, **self.preference_weights},
            priority_weights={**builtin.priority_weights, **self.priority_weights},
            **{name: value for name, value in scalars.items() if value is not None},
        )


class PersonPayload(WeightsPayload):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    gender: Gender
    found_house: bool = Field(default=False, alias="foundHouse")
    handled_agent: bool = Field(default=False, alias="handledAgent")
    attended_viewing: bool = Field(default=False, alias="attendedViewing")
    current_bed_type: BedType = Field(alias="currentBedType")
    relationship: RelationshipPayload
    cooks_often: bool = Field(default=False, alias="cooksOften")
    kitchen_preference: KitchenPreference | None = Field(default=None, alias="kitchenPreference")
    has_safety_concern: bool = Field(default=False, alias="hasSafetyConcern")

    def to_domain(self) -> Person:
        return Person(
            relationship=self.relationship.to_domain(),
            **self.model_dump(exclude={"relationship"}),
        )


class PeoplePayload(CamelModel):
    defaults: PersonDefaultsPayload = Field(default_factory=PersonDefaultsPayload)
    people: list[PersonPayload]

    def to_domain(self) -> PeopleConfig:
        return PeopleConfig(
            defaults=self.defaults.to_domain(),
            people=[person.to_domain() for person in self.people],
        )


class AssignmentOptionsRequest(BaseModel):
    priority_mode: Literal["amplify", "bonus"] | None = None
    ignore_preferences: list[str] = Field(default_factory=list)
    include_scores: bool = False

    @field_validator("ignore_preferences")
    @classmethod
    def validate_ignore_preferences(cls, value: list[str]) -> list[str]:
        unknown = [key for key in value if key not in PREFERENCE_KEYS]
        if unknown:
            raise ValueError(f"Unknown ignore option(s): {', '.join(unknown)}")
        return value


class AssignRoomsRequest(AssignmentOptionsRequest):
    """House and people payloads use the same JSON shape as the config files."""

    house: HousePayload
    people: PeoplePayload


class RoomAssignmentResponse(BaseModel):
    person_id: str
    person_name: str
    room_id: str
    room_name: str
    score: float
    priority_score: float
    priority_multiplier: float


class AssignRoomsResponse(BaseModel):
    house: str
    priority_mode: Literal["amplify", "bonus"]
    ignore_preferences: list[str]
    total_score: float
    assignments: list[RoomAssignmentResponse]
    scores: dict[str, dict[str, float]] | None = None


class HealthResponse(BaseModel):
    status: str
    version: str


def _to_response(
    plan: AssignmentPlan,
    house: HouseConfig,
    people_config: PeopleConfig,
) -> AssignRoomsResponse:
    scores = None
    if plan.scores is not None:
        scores = {
            person.id: {
                room.id: plan.scores[person_index][room_index]
                for room_index, room in enumerate(house.rooms)
            }
            for person_index, person in enumerate(people_config.people)
        }
    return AssignRoomsResponse(
        house=plan.house_name,
        priority_mode=plan.priority_mode,
        ignore_preferences=plan.ignore_preferences,
        total_score=plan.total_score,
        assignments=[
            RoomAssignmentResponse(
                person_id=item.person_id,
                person_name=item.person_name,
                room_id=item.room_id,
                room_name=item.room_name,
                score=item.score,
                priority_score=item.priority_score,
                priority_multiplier=item.priority_multiplier,
            )
            for item in plan.assignments
        ],
        scores=scores,
    )


def _run_assignment(
    service: RoomAssignmentService,
    house: HouseConfig,
    people_config: PeopleConfig,
    options: AssignmentOptionsRequest,
) -> AssignRoomsResponse:
    try:
        plan = service.assign(
            house,
            people_config,
            priority_mode=options.priority_mode,
            ignore_preferences=options.ignore_preferences,
            include_scores=options.include_scores,
        )
    except (AssignmentValidationError, ScoringValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected assignment failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign rooms",
        ) from exc
    return _to_response(plan, house, people_config)


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", version=get_settings().app_version)


@router.post(
    "/assign_rooms",
    response_model=AssignRoomsResponse,
    status_code=status.HTTP_200_OK,
)
async def assign_rooms(
    payload: AssignRoomsRequest,
    service: RoomAssignmentService = Depends(get_assignment_service),
) -> AssignRoomsResponse:
    """Score every person/room pair in the payload and solve the assignment."""
    return _run_assignment(
        service,
        payload.house.to_domain(),
        payload.people.to_domain(),
        payload,
    )


@router.post(
    "/assign_configured",
    response_model=AssignRoomsResponse,
    status_code=status.HTTP_200_OK,
)
async def assign_configured(
    payload: AssignmentOptionsRequest,
    service: RoomAssignmentService = Depends(get_assignment_service),
    repository: HouseConfigRepository = Depends(get_config_repository),
) -> AssignRoomsResponse:
    """Solve the assignment for the house and people files named in settings."""
    try:
        house = repository.load_house()
        people_config = repository.load_people()
    except ConfigurationLoadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _run_assignment(service, house, people_config, payload)
