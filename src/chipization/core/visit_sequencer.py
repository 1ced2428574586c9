"""Visited-location sequencer.

Keeps each animal's visit history chronologically ordered (ties broken by
record id) with no two adjacent entries at the same point, counting the
chipping point as the synthetic head entry. Ordering decisions come from
``domain.visits``; this module loads state and writes the outcome.
"""

from datetime import datetime
from typing import List, Optional

from ..db.models import Animal, AnimalVisitedLocation
from ..domain.visits import (
    VisitHistory,
    VisitStop,
    evaluate_append,
    evaluate_update,
)
from .clock import ensure_utc
from .errors import ConflictError, NotFoundError
from .service import CoreService


def build_history(animal: Animal, visits: List[AnimalVisitedLocation]) -> VisitHistory:
    """Reduce an animal and its visit records to a VisitHistory."""
    return VisitHistory.build(
        chipping_point_id=animal.chipping_location_id,
        chipping_date_time=animal.chipping_date_time,
        stops=(VisitStop(v.id, v.location_point_id, v.visited_at) for v in visits),
        death_date_time=animal.death_date_time,
    )


class VisitSequencer(CoreService):
    """Insert, edit and remove visit records under the ordering rules."""

    async def _load_animal(self, operation: str, animal_id: int) -> Animal:
        animal = await self.repos.animal.get_by_id(animal_id, for_update=True)
        if animal is None:
            raise self.reject(
                NotFoundError, operation, f"animal {animal_id} not found", animal_id=animal_id
            )
        return animal

    async def _check_point(self, operation: str, point_id: int, **context) -> None:
        if await self.repos.location_point.get_by_id(point_id) is None:
            raise self.reject(
                NotFoundError,
                operation,
                f"location point {point_id} not found",
                point_id=point_id,
                **context,
            )

    async def _load_owned_visit(
        self, operation: str, animal_id: int, visit_id: int
    ) -> AnimalVisitedLocation:
        visit = await self.repos.visited_location.get_by_id(visit_id)
        if visit is None or visit.animal_id != animal_id:
            raise self.reject(
                NotFoundError,
                operation,
                f"visited location {visit_id} not found for animal {animal_id}",
                animal_id=animal_id,
                visit_id=visit_id,
            )
        return visit

    async def history(self, animal: Animal) -> VisitHistory:
        visits = await self.repos.visited_location.list_for_animal(animal.id)
        return build_history(animal, visits)

    async def add(self, animal_id: int, point_id: int) -> AnimalVisitedLocation:
        """
        Record that the animal is at ``point_id`` now.

        The record normally lands at the tail. If an earlier update moved a
        record past the current time, the new one is placed at its sorted
        position and checked against the neighbours on both sides.

        Raises:
            NotFoundError: Unknown animal or point
            ConflictError: Posthumous visit, first visit at the chipping
                point, or a repeat of an adjacent point
        """
        operation = "visit.add"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            await self._check_point(operation, point_id, animal_id=animal_id)

            now = self.clock.now()
            decision = evaluate_append(await self.history(animal), point_id, now)
            if not decision.allowed:
                raise self.reject(
                    ConflictError,
                    operation,
                    decision.reason,
                    animal_id=animal_id,
                    point_id=point_id,
                )

            visit = await self.repos.visited_location.create(animal.id, point_id, now)
            animal.updated_at = now
            await self.repos.animal.save(animal)

        self.logger.info(
            f"Animal {animal_id} visited point {point_id} (record {visit.id}, "
            f"position {decision.position})"
        )
        return visit

    async def update(
        self,
        animal_id: int,
        visit_id: int,
        point_id: int,
        visited_at: Optional[datetime] = None,
    ) -> AnimalVisitedLocation:
        """
        Move a visit record to another point and optionally another time.

        The record keeps its place in the sequence; its new timestamp must
        lie strictly between its neighbours and the new point must differ
        from both. Same point and time is a no-op.
        """
        operation = "visit.update"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            visit = await self._load_owned_visit(operation, animal_id, visit_id)
            await self._check_point(operation, point_id, animal_id=animal_id)

            new_time = ensure_utc(visited_at) if visited_at is not None else visit.visited_at
            decision = evaluate_update(await self.history(animal), visit.id, point_id, new_time)
            if not decision.allowed:
                raise self.reject(
                    ConflictError,
                    operation,
                    decision.reason,
                    animal_id=animal_id,
                    visit_id=visit_id,
                    point_id=point_id,
                )
            if not decision.changed:
                return visit

            visit.location_point_id = point_id
            visit.visited_at = new_time
            await self.repos.visited_location.save(visit)
            animal.updated_at = self.clock.now()
            await self.repos.animal.save(animal)

        self.logger.info(
            f"Moved visit {visit_id} of animal {animal_id} to point {point_id} at {new_time.isoformat()}"
        )
        return visit

    async def remove(self, animal_id: int, visit_id: int) -> None:
        """Delete a visit record once it is confirmed to belong to the animal."""
        operation = "visit.remove"
        async with self.transaction():
            animal = await self._load_animal(operation, animal_id)
            visit = await self._load_owned_visit(operation, animal_id, visit_id)
            await self.repos.visited_location.delete(visit)
            animal.updated_at = self.clock.now()
            await self.repos.animal.save(animal)

        self.logger.info(f"Removed visit {visit_id} from animal {animal_id}")
