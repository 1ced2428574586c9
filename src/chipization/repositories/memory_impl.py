"""In-memory implementations of repository interfaces for testing."""

from datetime import datetime, timezone
from itertools import count
from typing import Dict, List, Optional, Sequence

from .interfaces import (
    AccountRepository,
    AnimalRepository,
    AnimalTypeRepository,
    LocationPointRepository,
    RepositoryContainer,
    VisitedLocationRepository,
)
from ..core.enums import Gender, LifeStatus, Role
from ..db.models import (
    Account,
    Animal,
    AnimalType,
    AnimalVisitedLocation,
    LocationPoint,
)
from ..domain.criteria import AnimalSearchCriteria, PageWindow


class MemoryStore:
    """Tables shared by the in-memory repositories of one container."""

    def __init__(self):
        self.accounts: Dict[int, Account] = {}
        self.animal_types: Dict[int, AnimalType] = {}
        self.location_points: Dict[int, LocationPoint] = {}
        self.animals: Dict[int, Animal] = {}
        self.visits: Dict[int, AnimalVisitedLocation] = {}
        self._sequences = {}

    def next_id(self, table: str) -> int:
        if table not in self._sequences:
            self._sequences[table] = count(1)
        return next(self._sequences[table])

    def table_for(self, entity) -> Dict[int, object]:
        return {
            Account: self.accounts,
            AnimalType: self.animal_types,
            LocationPoint: self.location_points,
            Animal: self.animals,
            AnimalVisitedLocation: self.visits,
        }[type(entity)]


def _window(items: List, window: PageWindow) -> List:
    return items[window.offset:window.offset + window.limit]


class BaseMemoryRepository:
    """Base in-memory repository implementation."""

    def __init__(self, store: MemoryStore):
        self._store = store

    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        self._store.table_for(entity)[entity.id] = entity

    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        self._store.table_for(entity).pop(entity.id, None)
        if isinstance(entity, Animal):
            for visit_id in [
                v.id for v in self._store.visits.values() if v.animal_id == entity.id
            ]:
                del self._store.visits[visit_id]

    async def commit(self) -> None:
        """Commit the current transaction."""
        # In memory - changes are immediate
        pass

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        # In memory - engines validate before writing, nothing to undo
        pass


class MemoryAccountRepository(BaseMemoryRepository, AccountRepository):
    """In-memory implementation of AccountRepository."""

    async def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._store.accounts.get(account_id)

    async def get_by_email(self, email: str) -> Optional[Account]:
        for account in self._store.accounts.values():
            if account.email == email:
                return account
        return None

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_salt: str,
        password_hash: str,
        role: Role = Role.USER,
    ) -> Account:
        account = Account(
            id=self._store.next_id("accounts"),
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_salt=password_salt,
            password_hash=password_hash,
            role=Role(role).value,
            created_at=datetime.now(timezone.utc),
        )
        await self.save(account)
        return account

    async def search(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        window: PageWindow,
    ) -> List[Account]:
        def matches(account: Account) -> bool:
            for value, needle in (
                (account.first_name, first_name),
                (account.last_name, last_name),
                (account.email, email),
            ):
                if needle and needle.lower() not in value.lower():
                    return False
            return True

        found = [a for a in self._store.accounts.values() if matches(a)]
        found.sort(key=lambda a: a.id)
        return _window(found, window)


class MemoryAnimalTypeRepository(BaseMemoryRepository, AnimalTypeRepository):
    """In-memory implementation of AnimalTypeRepository."""

    async def get_by_id(self, type_id: int) -> Optional[AnimalType]:
        return self._store.animal_types.get(type_id)

    async def get_by_name(self, name: str) -> Optional[AnimalType]:
        for animal_type in self._store.animal_types.values():
            if animal_type.name == name:
                return animal_type
        return None

    async def get_many(self, type_ids: Sequence[int]) -> List[AnimalType]:
        wanted = set(type_ids)
        return sorted(
            (t for t in self._store.animal_types.values() if t.id in wanted),
            key=lambda t: t.id,
        )

    async def create(self, name: str) -> AnimalType:
        animal_type = AnimalType(id=self._store.next_id("animal_types"), name=name)
        await self.save(animal_type)
        return animal_type

    async def is_referenced(self, type_id: int) -> bool:
        return any(type_id in a.type_ids for a in self._store.animals.values())


class MemoryLocationPointRepository(BaseMemoryRepository, LocationPointRepository):
    """In-memory implementation of LocationPointRepository."""

    async def get_by_id(self, point_id: int) -> Optional[LocationPoint]:
        return self._store.location_points.get(point_id)

    async def get_by_coordinates(
        self, latitude: float, longitude: float
    ) -> Optional[LocationPoint]:
        for point in self._store.location_points.values():
            if point.latitude == latitude and point.longitude == longitude:
                return point
        return None

    async def create(self, latitude: float, longitude: float) -> LocationPoint:
        point = LocationPoint(
            id=self._store.next_id("location_points"),
            latitude=latitude,
            longitude=longitude,
        )
        await self.save(point)
        return point

    async def is_referenced(self, point_id: int) -> bool:
        if any(a.chipping_location_id == point_id for a in self._store.animals.values()):
            return True
        return any(v.location_point_id == point_id for v in self._store.visits.values())


class MemoryAnimalRepository(BaseMemoryRepository, AnimalRepository):
    """In-memory implementation of AnimalRepository."""

    async def get_by_id(self, animal_id: int, for_update: bool = False) -> Optional[Animal]:
        return self._store.animals.get(animal_id)

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
        animal = Animal(
            id=self._store.next_id("animals"),
            weight=weight,
            height=height,
            length=length,
            gender=Gender(gender).value,
            life_status=LifeStatus.ALIVE.value,
            chipper_id=chipper_id,
            chipping_location_id=chipping_location_id,
            chipping_date_time=chipping_date_time,
            version=1,
        )
        animal.types = list(types)
        await self.save(animal)
        return animal

    async def search(
        self, criteria: AnimalSearchCriteria, window: PageWindow
    ) -> List[Animal]:
        found = sorted(
            (a for a in self._store.animals.values() if criteria.matches(a)),
            key=lambda a: a.id,
        )
        return _window(found, window)


class MemoryVisitedLocationRepository(BaseMemoryRepository, VisitedLocationRepository):
    """In-memory implementation of VisitedLocationRepository."""

    async def get_by_id(self, visit_id: int) -> Optional[AnimalVisitedLocation]:
        return self._store.visits.get(visit_id)

    async def list_for_animal(self, animal_id: int) -> List[AnimalVisitedLocation]:
        return sorted(
            (v for v in self._store.visits.values() if v.animal_id == animal_id),
            key=lambda v: (v.visited_at, v.id),
        )

    async def has_any_for_animal(self, animal_id: int) -> bool:
        return any(v.animal_id == animal_id for v in self._store.visits.values())

    async def ids_by_animal(self, animal_ids: Sequence[int]) -> Dict[int, List[int]]:
        result = {}
        for animal_id in animal_ids:
            result[animal_id] = [v.id for v in await self.list_for_animal(animal_id)]
        return result

    async def create(
        self, animal_id: int, location_point_id: int, visited_at: datetime
    ) -> AnimalVisitedLocation:
        visit = AnimalVisitedLocation(
            id=self._store.next_id("visits"),
            animal_id=animal_id,
            location_point_id=location_point_id,
            visited_at=visited_at,
        )
        await self.save(visit)
        return visit


def create_memory_container(store: Optional[MemoryStore] = None) -> RepositoryContainer:
    """Build a repository container backed by plain dictionaries."""
    store = store or MemoryStore()
    return RepositoryContainer(
        account_repo=MemoryAccountRepository(store),
        animal_type_repo=MemoryAnimalTypeRepository(store),
        location_point_repo=MemoryLocationPointRepository(store),
        animal_repo=MemoryAnimalRepository(store),
        visited_location_repo=MemoryVisitedLocationRepository(store),
    )
