"""Read-only query facade over animals and visit histories."""

from itertools import islice
from typing import Dict, Iterator, List, Optional, Sequence

from ..db.models import Animal, AnimalVisitedLocation
from ..domain.criteria import AnimalSearchCriteria, PageWindow, VisitSearchCriteria
from .errors import NotFoundError, ValidationFailure
from .service import CoreService


class VisitListing:
    """
    Lazy, restartable view over one animal's visit history.

    The history is captured when the listing is built; each iteration
    filters and windows it afresh, so the view can be consumed repeatedly.
    """

    def __init__(
        self,
        visits: Sequence[AnimalVisitedLocation],
        criteria: VisitSearchCriteria,
        window: PageWindow,
    ):
        self._visits = tuple(visits)
        self.criteria = criteria
        self.window = window

    def __iter__(self) -> Iterator[AnimalVisitedLocation]:
        matching = (v for v in self._visits if self.criteria.matches(v))
        return islice(matching, self.window.offset, self.window.offset + self.window.limit)


def _check_range(label: str, start, end) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationFailure(
            f"{label}: lower bound exceeds upper bound",
            context={"start": start, "end": end},
        )


class SearchFacade(CoreService):
    """Filtered listings; ordering is by id (animals) or chronology (visits)."""

    async def search_animals(
        self, criteria: AnimalSearchCriteria, window: Optional[PageWindow] = None
    ) -> List[Animal]:
        _check_range("weight", criteria.min_weight, criteria.max_weight)
        _check_range("height", criteria.min_height, criteria.max_height)
        _check_range("length", criteria.min_length, criteria.max_length)
        _check_range("chipping date", criteria.start_date_time, criteria.end_date_time)
        return await self.repos.animal.search(criteria, window or PageWindow())

    async def list_visits(
        self,
        animal_id: int,
        criteria: Optional[VisitSearchCriteria] = None,
        window: Optional[PageWindow] = None,
    ) -> VisitListing:
        if await self.repos.animal.get_by_id(animal_id) is None:
            raise NotFoundError(f"Animal {animal_id} not found", context={"animal_id": animal_id})
        criteria = criteria or VisitSearchCriteria()
        _check_range("visit date", criteria.start_date_time, criteria.end_date_time)
        visits = await self.repos.visited_location.list_for_animal(animal_id)
        return VisitListing(visits, criteria, window or PageWindow())

    async def visit_ids(self, animals: Sequence[Animal]) -> Dict[int, List[int]]:
        """Chronological visit record ids for each animal."""
        return await self.repos.visited_location.ids_by_animal([a.id for a in animals])
