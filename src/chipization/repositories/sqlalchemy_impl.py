"""SQLAlchemy concrete implementations of repository interfaces."""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .interfaces import (
    AccountRepository,
    AnimalRepository,
    AnimalTypeRepository,
    LocationPointRepository,
    RepositoryContainer,
    VisitedLocationRepository,
)
from ..core.enums import Gender, LifeStatus, Role
from ..core.errors import ConflictError
from ..db.models import (
    Account,
    Animal,
    AnimalType,
    AnimalVisitedLocation,
    LocationPoint,
    animal_type_links,
)
from ..domain.criteria import AnimalSearchCriteria, PageWindow
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class BaseSQLAlchemyRepository:
    """Base SQLAlchemy repository implementation."""

    def __init__(self, session: Session):
        self._session = session

    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        self._session.add(entity)

    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        self._session.delete(entity)

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            ConflictError: If a concurrent writer won (stale version counter
                or a unique constraint tripped at flush time)
        """
        try:
            self._session.commit()
        except StaleDataError as e:
            self._session.rollback()
            logger.warning(f"Concurrent modification detected: {e}")
            raise ConflictError(
                "Record was modified concurrently; retry the operation"
            ) from e
        except IntegrityError as e:
            self._session.rollback()
            logger.warning(f"Integrity violation on commit: {e.orig}")
            raise ConflictError("Write conflicts with existing data") from e

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        self._session.rollback()

    def _flush(self) -> None:
        try:
            self._session.flush()
        except IntegrityError as e:
            self._session.rollback()
            logger.warning(f"Integrity violation on flush: {e.orig}")
            raise ConflictError("Write conflicts with existing data") from e


def _window(query, window: PageWindow):
    return query.offset(window.offset).limit(window.limit)


class SQLAlchemyAccountRepository(BaseSQLAlchemyRepository, AccountRepository):
    """SQLAlchemy implementation of AccountRepository."""

    async def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._session.get(Account, account_id)

    async def get_by_email(self, email: str) -> Optional[Account]:
        return self._session.query(Account).filter(Account.email == email).first()

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
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_salt=password_salt,
            password_hash=password_hash,
            role=Role(role).value,
        )
        await self.save(account)
        self._flush()
        return account

    async def search(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        window: PageWindow,
    ) -> List[Account]:
        query = self._session.query(Account)
        for column, needle in (
            (Account.first_name, first_name),
            (Account.last_name, last_name),
            (Account.email, email),
        ):
            if needle:
                query = query.filter(
                    func.lower(column).contains(needle.lower(), autoescape=True)
                )
        return _window(query.order_by(Account.id), window).all()


class SQLAlchemyAnimalTypeRepository(BaseSQLAlchemyRepository, AnimalTypeRepository):
    """SQLAlchemy implementation of AnimalTypeRepository."""

    async def get_by_id(self, type_id: int) -> Optional[AnimalType]:
        return self._session.get(AnimalType, type_id)

    async def get_by_name(self, name: str) -> Optional[AnimalType]:
        return self._session.query(AnimalType).filter(AnimalType.name == name).first()

    async def get_many(self, type_ids: Sequence[int]) -> List[AnimalType]:
        if not type_ids:
            return []
        return (
            self._session.query(AnimalType)
            .filter(AnimalType.id.in_(list(type_ids)))
            .order_by(AnimalType.id)
            .all()
        )

    async def create(self, name: str) -> AnimalType:
        animal_type = AnimalType(name=name)
        await self.save(animal_type)
        self._flush()
        return animal_type

    async def is_referenced(self, type_id: int) -> bool:
        stmt = select(
            exists().where(animal_type_links.c.animal_type_id == type_id)
        )
        return bool(self._session.execute(stmt).scalar())


class SQLAlchemyLocationPointRepository(BaseSQLAlchemyRepository, LocationPointRepository):
    """SQLAlchemy implementation of LocationPointRepository."""

    async def get_by_id(self, point_id: int) -> Optional[LocationPoint]:
        return self._session.get(LocationPoint, point_id)

    async def get_by_coordinates(
        self, latitude: float, longitude: float
    ) -> Optional[LocationPoint]:
        return (
            self._session.query(LocationPoint)
            .filter(
                LocationPoint.latitude == latitude,
                LocationPoint.longitude == longitude,
            )
            .first()
        )

    async def create(self, latitude: float, longitude: float) -> LocationPoint:
        point = LocationPoint(latitude=latitude, longitude=longitude)
        await self.save(point)
        self._flush()
        return point

    async def is_referenced(self, point_id: int) -> bool:
        chipped_here = exists().where(Animal.chipping_location_id == point_id)
        visited_here = exists().where(AnimalVisitedLocation.location_point_id == point_id)
        stmt = select(chipped_here | visited_here)
        return bool(self._session.execute(stmt).scalar())


class SQLAlchemyAnimalRepository(BaseSQLAlchemyRepository, AnimalRepository):
    """SQLAlchemy implementation of AnimalRepository."""

    async def get_by_id(self, animal_id: int, for_update: bool = False) -> Optional[Animal]:
        query = self._session.query(Animal).filter(Animal.id == animal_id)
        if for_update:
            # Row lock on backends that support it; SQLite serializes writers
            query = query.with_for_update()
        return query.first()

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
            weight=weight,
            height=height,
            length=length,
            gender=Gender(gender).value,
            life_status=LifeStatus.ALIVE.value,
            chipper_id=chipper_id,
            chipping_location_id=chipping_location_id,
            chipping_date_time=chipping_date_time,
        )
        animal.types = list(types)
        await self.save(animal)
        self._flush()
        return animal

    async def search(
        self, criteria: AnimalSearchCriteria, window: PageWindow
    ) -> List[Animal]:
        query = self._session.query(Animal)

        if criteria.animal_type_id is not None:
            query = query.filter(Animal.types.any(AnimalType.id == criteria.animal_type_id))

        for column, low, high in (
            (Animal.weight, criteria.min_weight, criteria.max_weight),
            (Animal.height, criteria.min_height, criteria.max_height),
            (Animal.length, criteria.min_length, criteria.max_length),
            (Animal.chipping_date_time, criteria.start_date_time, criteria.end_date_time),
        ):
            if low is not None:
                query = query.filter(column >= low)
            if high is not None:
                query = query.filter(column <= high)

        if criteria.gender is not None:
            query = query.filter(Animal.gender == Gender(criteria.gender).value)
        if criteria.life_status is not None:
            query = query.filter(Animal.life_status == LifeStatus(criteria.life_status).value)
        if criteria.chipper_id is not None:
            query = query.filter(Animal.chipper_id == criteria.chipper_id)
        if criteria.chipping_location_id is not None:
            query = query.filter(Animal.chipping_location_id == criteria.chipping_location_id)

        return _window(query.order_by(Animal.id), window).all()


class SQLAlchemyVisitedLocationRepository(BaseSQLAlchemyRepository, VisitedLocationRepository):
    """SQLAlchemy implementation of VisitedLocationRepository."""

    async def get_by_id(self, visit_id: int) -> Optional[AnimalVisitedLocation]:
        return self._session.get(AnimalVisitedLocation, visit_id)

    async def list_for_animal(self, animal_id: int) -> List[AnimalVisitedLocation]:
        return (
            self._session.query(AnimalVisitedLocation)
            .filter(AnimalVisitedLocation.animal_id == animal_id)
            .order_by(AnimalVisitedLocation.visited_at, AnimalVisitedLocation.id)
            .all()
        )

    async def has_any_for_animal(self, animal_id: int) -> bool:
        stmt = select(exists().where(AnimalVisitedLocation.animal_id == animal_id))
        return bool(self._session.execute(stmt).scalar())

    async def ids_by_animal(self, animal_ids: Sequence[int]) -> Dict[int, List[int]]:
        result: Dict[int, List[int]] = {animal_id: [] for animal_id in animal_ids}
        if not result:
            return result
        rows = (
            self._session.query(AnimalVisitedLocation.animal_id, AnimalVisitedLocation.id)
            .filter(AnimalVisitedLocation.animal_id.in_(list(result)))
            .order_by(
                AnimalVisitedLocation.animal_id,
                AnimalVisitedLocation.visited_at,
                AnimalVisitedLocation.id,
            )
            .all()
        )
        for animal_id, visit_id in rows:
            result[animal_id].append(visit_id)
        return result

    async def create(
        self, animal_id: int, location_point_id: int, visited_at: datetime
    ) -> AnimalVisitedLocation:
        visit = AnimalVisitedLocation(
            animal_id=animal_id,
            location_point_id=location_point_id,
            visited_at=visited_at,
        )
        await self.save(visit)
        self._flush()
        return visit


def create_sqlalchemy_container(session: Session) -> RepositoryContainer:
    """Build a repository container whose repositories share one session."""
    return RepositoryContainer(
        account_repo=SQLAlchemyAccountRepository(session),
        animal_type_repo=SQLAlchemyAnimalTypeRepository(session),
        location_point_repo=SQLAlchemyLocationPointRepository(session),
        animal_repo=SQLAlchemyAnimalRepository(session),
        visited_location_repo=SQLAlchemyVisitedLocationRepository(session),
    )
