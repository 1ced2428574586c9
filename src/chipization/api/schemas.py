"""Pydantic models for API request/response validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.enums import Gender, LifeStatus, Role


class BaseResponse(BaseModel):
    """Base response model with common fields."""

    model_config = ConfigDict(from_attributes=True)


class ProblemDetails(BaseModel):
    """RFC 9457 Problem Details for HTTP APIs."""

    type: str = Field(description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(
        None, description="A human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="A URI reference that identifies the specific occurrence"
    )


# Accounts
class RegistrationRequest(BaseModel):
    """Schema for self-registration of a USER account."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("first_name", "last_name", "password")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def looks_like_email(cls, value: str) -> str:
        local, _, domain = value.partition("@")
        if not local or "." not in domain or value != value.strip():
            raise ValueError("must be a valid email address")
        return value


class AccountResponse(BaseResponse):
    """Schema for account responses (never includes credentials)."""

    id: int
    first_name: str
    last_name: str
    email: str
    role: Role


# Location points
class LocationPointRequest(BaseModel):
    """Schema for creating or moving a location point."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationPointResponse(BaseResponse):
    id: int
    latitude: float
    longitude: float


# Animal types
class AnimalTypeRequest(BaseModel):
    """Schema for creating or renaming an animal type."""

    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class AnimalTypeResponse(BaseResponse):
    id: int
    name: str


# Animals
class AnimalCreateRequest(BaseModel):
    """Schema for chipping a new animal."""

    animal_types: List[int] = Field(description="IDs of the animal's types")
    weight: float = Field(gt=0)
    length: float = Field(gt=0)
    height: float = Field(gt=0)
    gender: Gender
    chipper_id: int = Field(gt=0)
    chipping_location_id: int = Field(gt=0)

    @field_validator("animal_types")
    @classmethod
    def positive_ids(cls, value: List[int]) -> List[int]:
        if any(type_id <= 0 for type_id in value):
            raise ValueError("type ids must be positive")
        return value


class AnimalUpdateRequest(BaseModel):
    """Schema for updating an animal; ``life_status`` only moves ALIVE -> DEAD."""

    weight: float = Field(gt=0)
    length: float = Field(gt=0)
    height: float = Field(gt=0)
    gender: Gender
    life_status: LifeStatus
    chipper_id: int = Field(gt=0)
    chipping_location_id: int = Field(gt=0)
    animal_types: Optional[List[int]] = Field(
        None, description="Optional full replacement of the type list"
    )
    death_date_time: Optional[datetime] = Field(
        None, description="Explicit death timestamp; defaults to now when marking DEAD"
    )


class AnimalTypeSwapRequest(BaseModel):
    """Schema for replacing one of an animal's types."""

    old_type_id: int = Field(gt=0)
    new_type_id: int = Field(gt=0)


class AnimalResponse(BaseResponse):
    """Schema for animal responses."""

    id: int
    animal_types: List[int]
    weight: float
    length: float
    height: float
    gender: Gender
    life_status: LifeStatus
    chipping_date_time: datetime
    chipper_id: int
    chipping_location_id: int
    visited_locations: List[int] = Field(
        default_factory=list, description="Visit record IDs in chronological order"
    )
    death_date_time: Optional[datetime] = None

    @classmethod
    def from_animal(cls, animal, visit_ids: Optional[List[int]] = None) -> "AnimalResponse":
        return cls(
            id=animal.id,
            animal_types=animal.type_ids,
            weight=animal.weight,
            length=animal.length,
            height=animal.height,
            gender=animal.gender,
            life_status=animal.life_status,
            chipping_date_time=animal.chipping_date_time,
            chipper_id=animal.chipper_id,
            chipping_location_id=animal.chipping_location_id,
            visited_locations=visit_ids or [],
            death_date_time=animal.death_date_time,
        )


# Visited locations
class VisitUpdateRequest(BaseModel):
    """Schema for moving a visit record to another point (and optionally time)."""

    visited_location_point_id: int = Field(gt=0, description="ID of the visit record")
    location_point_id: int = Field(gt=0, description="ID of the new location point")
    visited_at: Optional[datetime] = Field(
        None, description="New visit timestamp; defaults to the current one"
    )


class VisitResponse(BaseResponse):
    id: int
    location_point_id: int
    visited_at: datetime
