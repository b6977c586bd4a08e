"""Domain models for room scoring and assignment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional


BedType = Literal["single", "double"]
Gender = Literal["female", "male", "nonbinary", "other"]
RelationshipStatus = Literal["single", "partnered"]
PartnerLocation = Literal["none", "external", "house"]
KitchenPreference = Literal["close", "far", "none"]
PriorityMode = Literal["amplify", "bonus"]

BED_TYPES: tuple[str, ...] = ("single", "double")
GENDERS: tuple[str, ...] = ("female", "male", "nonbinary", "other")
RELATIONSHIP_STATUSES: tuple[str, ...] = ("single", "partnered")
PARTNER_LOCATIONS: tuple[str, ...] = ("none", "external", "house")
KITCHEN_PREFERENCES: tuple[str, ...] = ("close", "far", "none")
PRIORITY_MODES: tuple[str, ...] = ("amplify", "bonus")

# Keys shared by preference weights, room metrics and the ignore set.
PREFERENCE_KEYS: tuple[str, ...] = (
    "size",
    "windows",
    "attractiveness",
    "sunlight",
    "storage",
    "quiet",
    "kitchenProximity",
    "ensuite",
    "floor",
    "bedType",
)
PRIORITY_KEYS: tuple[str, ...] = ("foundHouse", "handledAgent", "attendedViewing")


@dataclass(frozen=True)
class Relationship:
    status: RelationshipStatus = "single"
    partner_location: PartnerLocation = "none"
    partner_id: Optional[str] = None

    @property
    def is_partnered_externally(self) -> bool:
        return self.status == "partnered" and self.partner_location == "external"

    @property
    def is_partnered_in_house(self) -> bool:
        return self.status == "partnered" and self.partner_location == "house"


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    size_sqm: float
    windows: float
    attractiveness: float
    bed_type: BedType
    floor: int
    is_front_facing: bool
    noise: float
    storage: float
    sunlight: float
    near_kitchen: bool
    ensuite: bool


@dataclass(frozen=True)
class HouseConfig:
    name: str
    rooms: list[Room]


@dataclass(frozen=True)
class PersonDefaults:
    """House-wide weights every person falls back to."""

    preference_weights: Mapping[str, float]
    priority_weights: Mapping[str, float]
    safety_concern: float
    bed_upgrade_weight: float
    bed_downgrade_penalty: float
    double_bed_partner_weight: float
    single_bed_internal_couple_weight: float
    double_bed_internal_couple_weight: float
    priority_scale: float

    @classmethod
    def builtin(cls) -> "PersonDefaults":
        return cls(
            preference_weights={
                "size": 4.0,
                "windows": 2.0,
                "attractiveness": 3.0,
                "bedType": 5.0,
                "sunlight": 2.0,
                "storage": 2.0,
                "quiet": 3.0,
                "kitchenProximity": 2.0,
                "ensuite": 2.0,
                "floor": 2.0,
            },
            priority_weights={
                "foundHouse": 6.0,
                "handledAgent": 4.0,
                "attendedViewing": 2.0,
            },
            safety_concern=4.0,
            bed_upgrade_weight=2.5,
            bed_downgrade_penalty=3.0,
            double_bed_partner_weight=3.0,
            single_bed_internal_couple_weight=4.0,
            double_bed_internal_couple_weight=5.0,
            priority_scale=10.0,
        )


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    gender: Gender
    found_house: bool
    handled_agent: bool
    attended_viewing: bool
    current_bed_type: BedType
    relationship: Relationship = field(default_factory=Relationship)
    cooks_often: bool = False
    kitchen_preference: Optional[KitchenPreference] = None
    has_safety_concern: bool = False
    preference_weights: Mapping[str, float] = field(default_factory=dict)
    priority_weights: Mapping[str, float] = field(default_factory=dict)
    safety_concern: Optional[float] = None
    bed_upgrade_weight: Optional[float] = None
    bed_downgrade_penalty: Optional[float] = None
    double_bed_partner_weight: Optional[float] = None
    single_bed_internal_couple_weight: Optional[float] = None
    double_bed_internal_couple_weight: Optional[float] = None


@dataclass(frozen=True)
class PeopleConfig:
    defaults: PersonDefaults
    people: list[Person]


@dataclass(frozen=True)
class RoomMetrics:
    size: float
    windows: float
    attractiveness: float
    sunlight: float
    storage: float
    quiet: float
    kitchen_proximity: float
    ensuite: float
    floor_level: float
    bed_value: float
    safety_risk: float

    def preference_value(self, key: str) -> float:
        """Return the normalized metric that preference weight ``key`` applies to."""
        return {
            "size": self.size,
            "windows": self.windows,
            "attractiveness": self.attractiveness,
            "sunlight": self.sunlight,
            "storage": self.storage,
            "quiet": self.quiet,
            "kitchenProximity": self.kitchen_proximity,
            "ensuite": self.ensuite,
            "floor": self.floor_level,
            "bedType": self.bed_value,
        }[key]


@dataclass(frozen=True)
class PersonMeta:
    preference_weights: Mapping[str, float]
    priority_weights: Mapping[str, float]
    priority_score: float
    priority_multiplier: float
    safety_concern: float
    has_safety_concern: bool
    kitchen_preference: KitchenPreference
    bed_upgrade_weight: float
    bed_downgrade_penalty: float
    double_bed_partner_weight: float
    single_bed_internal_couple_weight: float
    double_bed_internal_couple_weight: float

    @property
    def needs_safety_penalty(self) -> bool:
        return self.has_safety_concern and self.safety_concern > 0


@dataclass(frozen=True)
class HouseMeta:
    has_single_bed: bool


@dataclass(frozen=True)
class AssignmentResult:
    assignment: dict[str, str]
    total_score: float


@dataclass(frozen=True)
class RoomAssignment:
    person_id: str
    person_name: str
    room_id: str
    room_name: str
    score: float
    priority_score: float
    priority_multiplier: float


@dataclass(frozen=True)
class AssignmentPlan:
    house_name: str
    priority_mode: PriorityMode
    ignore_preferences: list[str]
    total_score: float
    assignments: list[RoomAssignment]
    scores: Optional[list[list[float]]] = None
