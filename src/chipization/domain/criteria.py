"""Filter criteria for animal and visited-location listings.

All fields are optional and combine with logical AND. Range bounds are
inclusive.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.clock import ensure_utc
from ..core.enums import Gender, LifeStatus


def _normalize_bounds(criteria) -> None:
    # Stored timestamps are aware UTC; naive bounds are read as UTC
    for attr in ("start_date_time", "end_date_time"):
        value = getattr(criteria, attr)
        if value is not None:
            object.__setattr__(criteria, attr, ensure_utc(value))


@dataclass(frozen=True)
class AnimalSearchCriteria:
    """Filters honoured by the animal search."""

    animal_type_id: Optional[int] = None
    min_weight: Optional[float] = None
    max_weight: Optional[float] = None
    min_height: Optional[float] = None
    max_height: Optional[float] = None
    min_length: Optional[float] = None
    max_length: Optional[float] = None
    gender: Optional[Gender] = None
    life_status: Optional[LifeStatus] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    chipper_id: Optional[int] = None
    chipping_location_id: Optional[int] = None

    def __post_init__(self):
        _normalize_bounds(self)

    def matches(self, animal) -> bool:
        """Evaluate the criteria against a loaded Animal (in-memory search)."""
        if self.animal_type_id is not None and self.animal_type_id not in animal.type_ids:
            return False
        for attr in ("weight", "height", "length"):
            value = getattr(animal, attr)
            low = getattr(self, f"min_{attr}")
            high = getattr(self, f"max_{attr}")
            if low is not None and value < low:
                return False
            if high is not None and value > high:
                return False
        if self.gender is not None and animal.gender != self.gender:
            return False
        if self.life_status is not None and animal.life_status != self.life_status:
            return False
        if self.start_date_time is not None and animal.chipping_date_time < self.start_date_time:
            return False
        if self.end_date_time is not None and animal.chipping_date_time > self.end_date_time:
            return False
        if self.chipper_id is not None and animal.chipper_id != self.chipper_id:
            return False
        if (
            self.chipping_location_id is not None
            and animal.chipping_location_id != self.chipping_location_id
        ):
            return False
        return True


@dataclass(frozen=True)
class VisitSearchCriteria:
    """Filters honoured by the visited-location listing."""

    location_point_id: Optional[int] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None

    def __post_init__(self):
        _normalize_bounds(self)

    def matches(self, visit) -> bool:
        if self.location_point_id is not None and visit.location_point_id != self.location_point_id:
            return False
        if self.start_date_time is not None and visit.visited_at < self.start_date_time:
            return False
        if self.end_date_time is not None and visit.visited_at > self.end_date_time:
            return False
        return True


@dataclass(frozen=True)
class PageWindow:
    """Page index (from 0) and page size."""

    page: int = 0
    size: int = 10

    def __post_init__(self):
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size <= 0:
            raise ValueError("size must be > 0")

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def limit(self) -> int:
        return self.size
