"""Animal type registry: named tags with case-sensitive unique names."""

from ..db.models import AnimalType
from .errors import ConflictError, NotFoundError, ValidationFailure
from .service import CoreService


class TypeRegistry(CoreService):
    """Create, rename and delete animal types."""

    def _clean_name(self, operation: str, name) -> str:
        if name is None or not str(name).strip():
            raise self.reject(
                ValidationFailure, operation, "type name must not be blank", name=name
            )
        return str(name)

    async def get(self, type_id: int) -> AnimalType:
        animal_type = await self.repos.animal_type.get_by_id(type_id)
        if animal_type is None:
            raise NotFoundError(f"Animal type {type_id} not found", context={"type_id": type_id})
        return animal_type

    async def add(self, name: str) -> AnimalType:
        async with self.transaction():
            name = self._clean_name("type.add", name)
            if await self.repos.animal_type.get_by_name(name) is not None:
                raise self.reject(
                    ConflictError, "type.add", f"animal type '{name}' already exists", name=name
                )
            animal_type = await self.repos.animal_type.create(name)

        self.logger.info(f"Created animal type {animal_type.id} '{name}'")
        return animal_type

    async def update(self, type_id: int, name: str) -> AnimalType:
        async with self.transaction():
            animal_type = await self.repos.animal_type.get_by_id(type_id)
            if animal_type is None:
                raise self.reject(
                    NotFoundError, "type.update", f"animal type {type_id} not found", type_id=type_id
                )
            name = self._clean_name("type.update", name)

            existing = await self.repos.animal_type.get_by_name(name)
            if existing is not None and existing.id != animal_type.id:
                raise self.reject(
                    ConflictError,
                    "type.update",
                    f"animal type '{name}' already exists",
                    type_id=type_id,
                    name=name,
                )
            animal_type.name = name
            await self.repos.animal_type.save(animal_type)

        self.logger.info(f"Renamed animal type {type_id} to '{name}'")
        return animal_type

    async def remove(self, type_id: int) -> None:
        async with self.transaction():
            animal_type = await self.repos.animal_type.get_by_id(type_id)
            if animal_type is None:
                raise self.reject(
                    NotFoundError, "type.remove", f"animal type {type_id} not found", type_id=type_id
                )
            if await self.repos.animal_type.is_referenced(type_id):
                raise self.reject(
                    ConflictError,
                    "type.remove",
                    "animal type is still assigned to animals",
                    type_id=type_id,
                )
            await self.repos.animal_type.delete(animal_type)

        self.logger.info(f"Removed animal type {type_id}")
