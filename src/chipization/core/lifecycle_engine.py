"""Animal lifecycle engine.

Owns the Animal entity: creation, field updates, type-set mutation, the
one-way ALIVE -> DEAD transition and deletion guards. Every operation
reads the animal row for update, validates, writes and commits in one
transaction; a rejection leaves state untouched.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from ..db.models import Animal, AnimalType
from .clock import ensure_utc
from .enums import Gender, LifeStatus
from .errors import ConflictError, NotFoundError, ValidationFailure
from .service import CoreService


class AnimalLifecycleEngine(CoreService):
    """Check-then-commit operations on animals and their type sets."""

    async def _load_animal(self, operation: str, animal_id: int) -> Animal:
        animal = await self.repos.animal.get_by_id(animal_id, for_update=True)
        if animal is None:
            raise self.reject(
                NotFoundError, operation, f"animal {animal_id} not found", animal_id=animal_id
            )
        return animal

    async def _load_type(self, operation: str, type_id: int, **context) -> AnimalType:
        animal_type = await self.repos.animal_type.get_by_id(type_id)
        if animal_type is None:
            raise self.reject(
                NotFoundError,
                operation,
                f"animal type {type_id} not found",
                type_id=type_id,
                **context,
            )
        return animal_type

    async def _resolve_types(self, operation: str, type_ids: Sequence[int]) -> List[AnimalType]:
        """Resolve a full type list: non-empty, duplicate-free, all known."""
        if not type_ids:
            raise self.reject(
                ValidationFailure, operation, "an animal needs at least one type"
            )
        if len(set(type_ids)) != len(type_ids):
            raise self.reject(
                ConflictError,
                operation,
                "type list contains duplicates",
                type_ids=list(type_ids),
            )
        types = await self.repos.animal_type.get_many(type_ids)
        missing = sorted(set(type_ids) - {t.id for t in types})
        if missing:
            raise self.reject(
                NotFoundError,
                operation,
                f"animal types not found: {missing}",
                type_ids=missing,
            )
        return types

    async def _check_references(
        self, operation: str, chipper_id: int, chipping_location_id: int
    ) -> None:
        if await self.repos.account.get_by_id(chipper_id) is None:
            raise self.reject(
                NotFoundError,
                operation,
                f"chipper account {chipper_id} not found",
                chipper_id=chipper_id,
            )
        if await self.repos.location_point.get_by_id(chipping_location_id) is None:
            raise self.reject(
                NotFoundError,
                operation,
                f"chipping location {chipping_location_id} not found",
                chipping_location_id=chipping_location_id,
            )

    def _check_dimensions(self, operation: str, **dimensions) -> None:
        for name, value in dimensions.items():
            if value is None or value <= 0:
                raise self.reject(
                    ValidationFailure, operation, f"{name} must be positive", **{name: value}
                )

    def _touch(self, animal: Animal) -> None:
        # Any column change bumps the optimistic version counter on flush
        animal.updated_at = self.clock.now()

    async def get(self, animal_id: int) -> Animal:
        animal = await self.repos.animal.get_by_id(animal_id)
        if animal is None:
            raise NotFoundError(f"Animal {animal_id} not found", context={"animal_id": animal_id})
        return animal

    async def create(
        self,
        animal_types: Sequence[int],
        weight: float,
        height: float,
        length: float,
        gender: Gender,
        chipper_id: int,
        chipping_location_id: int,
    ) -> Animal:
        """
        Register a newly chipped animal.

        The animal starts ALIVE with chipping timestamp = now, no death
        timestamp and an empty visit history.

        Raises:
            ValidationFailure: Empty type list or non-positive dimensions
            ConflictError: Duplicate ids in the type list
            NotFoundError: Unknown type, chipper or chipping location
        """
        operation = "animal.create"
        async with self.transaction():
            self._check_dimensions(operation, weight=weight, height=height, length=length)
            types = await self._resolve_types(operation, list(animal_types))
            await self._check_references(operation, chipper_id, chipping_location_id)

            animal = await self.repos.animal.create(
                types=types,
                weight=weight,
                height=height,
                length=length,
                gender=Gender(gender),
                chipper_id=chipper_id,
                chipping_location_id=chipping_location_id,
                chipping_date_time=self.clock.now(),
            )

        self.logger.info(
            f"Chipped animal {animal.id} at point {chipping_location_id} "
            f"by account {chipper_id} with types {animal.type_ids}"
        )
        return animal

    async def update(
        self,
        animal_id: int,
        weight: Optional[float] = None,
        height: Optional[float] = None,
        length: Optional[float] = None,
        gender: Optional[Gender] = None,
        life_status: Optional[LifeStatus] = None,
        chipper_id: Optional[int] = None,
        chipping_location_id: Optional[int] = None,
        animal_types: Optional[Sequence[int]] = None,
        death_date_time: Optional[datetime] = None,
    ) -> Animal:
        """
        Update an animal's fields. ``None`` keeps the current value.

        Rules:
        1. Chipper, chipping location and any replacement types must exist
        2. The chipping location cannot move onto the first visited point
        3. Life status only moves ALIVE -> DEAD; the death timestamp
           (explicit or now) must not precede chipping or any visit
        """
        operation = "animal.update"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)

            self._check_dimensions(
                operation,
                **{
                    name: value
                    for name, value in (("weight", weight), ("height", height), ("length", length))
                    if value is not None
                },
            )

            new_chipper = animal.chipper_id if chipper_id is None else chipper_id
            new_location = (
                animal.chipping_location_id
                if chipping_location_id is None
                else chipping_location_id
            )
            await self._check_references(operation, new_chipper, new_location)

            types = None
            if animal_types is not None:
                types = await self._resolve_types(operation, list(animal_types))

            visits = await self.repos.visited_location.list_for_animal(animal.id)
            if (
                visits
                and new_location != animal.chipping_location_id
                and visits[0].location_point_id == new_location
            ):
                raise self.reject(
                    ConflictError,
                    operation,
                    "chipping location cannot equal the first visited point",
                    animal_id=animal_id,
                    chipping_location_id=new_location,
                )

            new_death = self._resolve_death(
                operation, animal, life_status, death_date_time, visits
            )

            if weight is not None:
                animal.weight = weight
            if height is not None:
                animal.height = height
            if length is not None:
                animal.length = length
            if gender is not None:
                animal.gender = Gender(gender).value
            animal.chipper_id = new_chipper
            animal.chipping_location_id = new_location
            if types is not None:
                animal.types = types
            if new_death is not None and not animal.is_dead:
                animal.life_status = LifeStatus.DEAD.value
                animal.death_date_time = new_death
            self._touch(animal)
            await self.repos.animal.save(animal)

        self.logger.info(f"Updated animal {animal_id} (status={animal.life_status})")
        return animal

    def _resolve_death(
        self,
        operation: str,
        animal: Animal,
        life_status: Optional[LifeStatus],
        death_date_time: Optional[datetime],
        visits,
    ) -> Optional[datetime]:
        """Work out the death timestamp implied by an update, if any."""
        status = LifeStatus(life_status) if life_status is not None else None

        if animal.is_dead:
            if status == LifeStatus.ALIVE:
                raise self.reject(
                    ConflictError,
                    operation,
                    "a dead animal cannot be set back to ALIVE",
                    animal_id=animal.id,
                )
            if death_date_time is not None and ensure_utc(death_date_time) != animal.death_date_time:
                raise self.reject(
                    ConflictError,
                    operation,
                    "death timestamp is fixed once recorded",
                    animal_id=animal.id,
                )
            return None

        if status != LifeStatus.DEAD:
            if death_date_time is not None:
                raise self.reject(
                    ValidationFailure,
                    operation,
                    "death_date_time requires life_status DEAD",
                    animal_id=animal.id,
                )
            return None

        death = ensure_utc(death_date_time) if death_date_time is not None else self.clock.now()
        if death < animal.chipping_date_time:
            raise self.reject(
                ConflictError,
                operation,
                "death timestamp precedes chipping",
                animal_id=animal.id,
                death_date_time=death.isoformat(),
            )
        if visits and death < visits[-1].visited_at:
            raise self.reject(
                ConflictError,
                operation,
                "death timestamp precedes the last recorded visit",
                animal_id=animal.id,
                death_date_time=death.isoformat(),
            )
        return death

    async def add_type(self, animal_id: int, type_id: int) -> Animal:
        operation = "animal.add_type"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            animal_type = await self._load_type(operation, type_id, animal_id=animal_id)
            if type_id in animal.type_ids:
                raise self.reject(
                    ConflictError,
                    operation,
                    "animal already has this type",
                    animal_id=animal_id,
                    type_id=type_id,
                )
            animal.types = sorted(animal.types + [animal_type], key=lambda t: t.id)
            self._touch(animal)
            await self.repos.animal.save(animal)

        self.logger.info(f"Added type {type_id} to animal {animal_id}")
        return animal

    async def update_type(self, animal_id: int, old_type_id: int, new_type_id: int) -> Animal:
        """Swap one of the animal's types for another. ``old == new`` is a no-op."""
        operation = "animal.update_type"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            await self._load_type(operation, old_type_id, animal_id=animal_id)
            new_type = await self._load_type(operation, new_type_id, animal_id=animal_id)

            if old_type_id == new_type_id:
                return animal

            current = animal.type_ids
            if old_type_id not in current:
                raise self.reject(
                    NotFoundError,
                    operation,
                    "animal does not have the type being replaced",
                    animal_id=animal_id,
                    type_id=old_type_id,
                )
            if new_type_id in current:
                raise self.reject(
                    ConflictError,
                    operation,
                    "animal already has the replacement type",
                    animal_id=animal_id,
                    type_id=new_type_id,
                )

            kept = [t for t in animal.types if t.id != old_type_id]
            animal.types = sorted(kept + [new_type], key=lambda t: t.id)
            self._touch(animal)
            await self.repos.animal.save(animal)

        self.logger.info(f"Replaced type {old_type_id} with {new_type_id} on animal {animal_id}")
        return animal

    async def remove_type(self, animal_id: int, type_id: int) -> Animal:
        operation = "animal.remove_type"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            await self._load_type(operation, type_id, animal_id=animal_id)
            if type_id not in animal.type_ids:
                raise self.reject(
                    NotFoundError,
                    operation,
                    "animal does not have this type",
                    animal_id=animal_id,
                    type_id=type_id,
                )
            if len(animal.types) == 1:
                raise self.reject(
                    ConflictError,
                    operation,
                    "cannot remove the animal's only type",
                    animal_id=animal_id,
                    type_id=type_id,
                )
            animal.types = [t for t in animal.types if t.id != type_id]
            self._touch(animal)
            await self.repos.animal.save(animal)

        self.logger.info(f"Removed type {type_id} from animal {animal_id}")
        return animal

    async def remove(self, animal_id: int) -> None:
        operation = "animal.remove"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            if await self.repos.visited_location.has_any_for_animal(animal_id):
                raise self.reject(
                    ConflictError,
                    operation,
                    "animal still has visited locations",
                    animal_id=animal_id,
                )
            await self.repos.animal.delete(animal)

        self.logger.info(f"Removed animal {animal_id}")
