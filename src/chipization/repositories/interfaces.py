"""Abstract repository interfaces for data access layer."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..db.models import (
    Account,
    Animal,
    AnimalType,
    AnimalVisitedLocation,
    LocationPoint,
)
from ..core.enums import Gender, Role
from ..domain.criteria import AnimalSearchCriteria, PageWindow


class BaseRepository(ABC):
    """Base repository interface with common operations."""

    @abstractmethod
    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        pass

    @abstractmethod
    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the current transaction."""
        pass


class AccountRepository(BaseRepository):
    """Repository interface for Account entities."""

    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[Account]:
        """Get an account by ID."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get an account by email (exact match)."""
        pass

    @abstractmethod
    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_salt: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> Account:
        """Create a new account."""
        pass

    @abstractmethod
    async def search(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        window: PageWindow,
    ) -> List[Account]:
        """Substring search over names and email, ordered by ID."""
        pass


class AnimalTypeRepository(BaseRepository):
    """Repository interface for AnimalType entities."""

    @abstractmethod
    async def get_by_id(self, type_id: int) -> Optional[AnimalType]:
        """Get an animal type by ID."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[AnimalType]:
        """Get an animal type by exact name."""
        pass

    @abstractmethod
    async def get_many(self, type_ids: Sequence[int]) -> List[AnimalType]:
        """Get the existing types among ``type_ids``."""
        pass

    @abstractmethod
    async def create(self, name: str) -> AnimalType:
        """Create a new animal type."""
        pass

    @abstractmethod
    async def is_referenced(self, type_id: int) -> bool:
        """Check whether any animal carries this type."""
        pass


class LocationPointRepository(BaseRepository):
    """Repository interface for LocationPoint entities."""

    @abstractmethod
    async def get_by_id(self, point_id: int) -> Optional[LocationPoint]:
        """Get a location point by ID."""
        pass

    @abstractmethod
    async def get_by_coordinates(
        self, latitude: float, longitude: float
    ) -> Optional[LocationPoint]:
        """Get a location point by exact coordinates."""
        pass

    @abstractmethod
    async def create(self, latitude: float, longitude: float) -> LocationPoint:
        """Create a new location point."""
        pass

    @abstractmethod
    async def is_referenced(self, point_id: int) -> bool:
        """Check whether an animal is chipped here or any visit points here."""
        pass


class AnimalRepository(BaseRepository):
    """Repository interface for Animal entities."""

    @abstractmethod
    async def get_by_id(self, animal_id: int, for_update: bool = False) -> Optional[Animal]:
        """Get an animal by ID, optionally locking its row for the transaction."""
        pass

    @abstractmethod
    async def create(
        self,
        types: List[AnimalType],
        weight: float,
        height: float,
        length: float,
        gender: Gender,
        chipper_id: int,
        chipping_location_id: int,
        chipping_date_time: datetime,
    ) -> Animal:
        """Create a new ALIVE animal."""
        pass

    @abstractmethod
    async def search(
        self, criteria: AnimalSearchCriteria, window: PageWindow
    ) -> List[Animal]:
        """Filter animals, ordered by ID ascending."""
        pass


class VisitedLocationRepository(BaseRepository):
    """Repository interface for AnimalVisitedLocation entities."""

    @abstractmethod
    async def get_by_id(self, visit_id: int) -> Optional[AnimalVisitedLocation]:
        """Get a visit record by ID."""
        pass

    @abstractmethod
    async def list_for_animal(self, animal_id: int) -> List[AnimalVisitedLocation]:
        """Get an animal's visits ordered by (visited_at, id)."""
        pass

    @abstractmethod
    async def has_any_for_animal(self, animal_id: int) -> bool:
        """Check whether the animal has any visit records."""
        pass

    @abstractmethod
    async def ids_by_animal(self, animal_ids: Sequence[int]) -> Dict[int, List[int]]:
        """Map each animal ID to its chronological visit IDs."""
        pass

    @abstractmethod
    async def create(
        self, animal_id: int, location_point_id: int, visited_at: datetime
    ) -> AnimalVisitedLocation:
        """Create a new visit record."""
        pass


class RepositoryContainer:
    """Container for all repository interfaces to support dependency injection."""

    def __init__(
        self,
        account_repo: AccountRepository,
        animal_type_repo: AnimalTypeRepository,
        location_point_repo: LocationPointRepository,
        animal_repo: AnimalRepository,
        visited_location_repo: VisitedLocationRepository,
    ):
        self.account = account_repo
        self.animal_type = animal_type_repo
        self.location_point = location_point_repo
        self.animal = animal_repo
        self.visited_location = visited_location_repo

    async def commit(self) -> None:
        """Commit the unit of work shared by all repositories."""
        await self.animal.commit()

    async def rollback(self) -> None:
        """Roll back the unit of work shared by all repositories."""
        await self.animal.rollback()
