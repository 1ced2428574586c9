"""Unit tests for animal search and visit listings."""

from datetime import datetime, timedelta, timezone

import pytest

from chipization.core.enums import Gender, LifeStatus
from chipization.core.errors import NotFoundError, ValidationFailure
from chipization.domain.criteria import (
    AnimalSearchCriteria,
    PageWindow,
    VisitSearchCriteria,
)


@pytest.fixture
def herd(chip, lifecycle, seeded):
    """Three animals with distinct weights, genders and chipping points."""

    async def _herd():
        light = await chip(weight=5.0, gender=Gender.FEMALE)
        medium = await chip(types=[seeded.fox], weight=15.0, location=seeded.b)
        heavy = await chip(types=[seeded.wolf, seeded.fox], weight=25.0, gender=Gender.OTHER)
        await lifecycle.update(heavy.id, life_status=LifeStatus.DEAD)
        return light, medium, heavy

    return _herd


def ids(animals):
    return [a.id for a in animals]


@pytest.mark.unit
class TestAnimalSearch:
    @pytest.mark.asyncio
    async def test_no_filters_returns_all_by_id(self, search, herd):
        light, medium, heavy = await herd()
        assert ids(await search.search_animals(AnimalSearchCriteria())) == [
            light.id,
            medium.id,
            heavy.id,
        ]

    @pytest.mark.asyncio
    async def test_weight_range_is_inclusive(self, search, herd):
        light, medium, _ = await herd()
        found = await search.search_animals(AnimalSearchCriteria(min_weight=5.0, max_weight=15.0))
        assert ids(found) == [light.id, medium.id]

    @pytest.mark.asyncio
    async def test_filter_by_type(self, search, herd, seeded):
        _, medium, heavy = await herd()
        found = await search.search_animals(AnimalSearchCriteria(animal_type_id=seeded.fox))
        assert ids(found) == [medium.id, heavy.id]

    @pytest.mark.asyncio
    async def test_filters_combine(self, search, herd, seeded):
        _, _, heavy = await herd()
        criteria = AnimalSearchCriteria(
            animal_type_id=seeded.fox,
            life_status=LifeStatus.DEAD,
            gender=Gender.OTHER,
            chipping_location_id=seeded.a,
        )
        assert ids(await search.search_animals(criteria)) == [heavy.id]

    @pytest.mark.asyncio
    async def test_filter_by_chipper(self, search, herd, seeded):
        await herd()
        assert len(await search.search_animals(AnimalSearchCriteria(chipper_id=seeded.chipper.id))) == 3
        assert await search.search_animals(AnimalSearchCriteria(chipper_id=999)) == []

    @pytest.mark.asyncio
    async def test_chipping_date_range(self, search, herd):
        light, medium, _ = await herd()
        criteria = AnimalSearchCriteria(
            start_date_time=light.chipping_date_time,
            end_date_time=medium.chipping_date_time,
        )
        assert ids(await search.search_animals(criteria)) == [light.id, medium.id]

    @pytest.mark.asyncio
    async def test_pagination(self, search, herd):
        _, medium, _ = await herd()
        page = await search.search_animals(AnimalSearchCriteria(), PageWindow(page=1, size=1))
        assert ids(page) == [medium.id]
        assert await search.search_animals(AnimalSearchCriteria(), PageWindow(page=5, size=10)) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "criteria",
        [
            AnimalSearchCriteria(min_weight=10, max_weight=1),
            AnimalSearchCriteria(min_height=10, max_height=1),
            AnimalSearchCriteria(min_length=10, max_length=1),
        ],
    )
    async def test_inverted_range_rejected(self, search, criteria):
        with pytest.raises(ValidationFailure):
            await search.search_animals(criteria)


@pytest.mark.unit
class TestVisitListing:
    @pytest.fixture
    def travels(self, chip, sequencer, seeded):
        """Animal chipped at A that went B, C, B."""

        async def _travels():
            animal = await chip()
            visits = [
                await sequencer.add(animal.id, seeded.b),
                await sequencer.add(animal.id, seeded.c),
                await sequencer.add(animal.id, seeded.b),
            ]
            return animal, visits

        return _travels

    @pytest.mark.asyncio
    async def test_listing_is_chronological(self, search, travels):
        animal, visits = await travels()
        listing = await search.list_visits(animal.id)
        assert [v.id for v in listing] == [v.id for v in visits]

    @pytest.mark.asyncio
    async def test_listing_can_be_iterated_twice(self, search, travels):
        animal, _ = await travels()
        listing = await search.list_visits(animal.id)
        assert list(listing) == list(listing)

    @pytest.mark.asyncio
    async def test_filter_by_point(self, search, travels, seeded):
        animal, visits = await travels()
        listing = await search.list_visits(
            animal.id, VisitSearchCriteria(location_point_id=seeded.b)
        )
        assert [v.id for v in listing] == [visits[0].id, visits[2].id]

    @pytest.mark.asyncio
    async def test_filter_by_time_window(self, search, travels):
        animal, visits = await travels()
        criteria = VisitSearchCriteria(
            start_date_time=visits[1].visited_at,
            end_date_time=visits[2].visited_at + timedelta(days=1),
        )
        listing = await search.list_visits(animal.id, criteria)
        assert [v.id for v in listing] == [visits[1].id, visits[2].id]

    @pytest.mark.asyncio
    async def test_naive_time_window_is_read_as_utc(self, search, travels):
        animal, visits = await travels()
        criteria = VisitSearchCriteria(start_date_time=visits[1].visited_at.replace(tzinfo=None))

        assert criteria.start_date_time == visits[1].visited_at
        listing = await search.list_visits(animal.id, criteria)
        assert [v.id for v in listing] == [visits[1].id, visits[2].id]

    @pytest.mark.asyncio
    async def test_window_applies_after_filtering(self, search, travels, seeded):
        animal, visits = await travels()
        listing = await search.list_visits(
            animal.id,
            VisitSearchCriteria(location_point_id=seeded.b),
            PageWindow(page=1, size=1),
        )
        assert [v.id for v in listing] == [visits[2].id]

    @pytest.mark.asyncio
    async def test_inverted_time_window_rejected(self, search, travels):
        animal, visits = await travels()
        with pytest.raises(ValidationFailure):
            await search.list_visits(
                animal.id,
                VisitSearchCriteria(
                    start_date_time=visits[2].visited_at,
                    end_date_time=visits[0].visited_at,
                ),
            )

    @pytest.mark.asyncio
    async def test_unknown_animal(self, search, seeded):
        with pytest.raises(NotFoundError):
            await search.list_visits(404)

    @pytest.mark.asyncio
    async def test_visit_ids(self, search, travels, chip):
        animal, visits = await travels()
        quiet = await chip()
        assert await search.visit_ids([animal, quiet]) == {
            animal.id: [v.id for v in visits],
            quiet.id: [],
        }


@pytest.mark.unit
def test_animal_criteria_read_naive_bounds_as_utc():
    criteria = AnimalSearchCriteria(
        start_date_time=datetime(2026, 1, 1),
        end_date_time=datetime(2026, 1, 2, 3, tzinfo=timezone(timedelta(hours=3))),
    )

    assert criteria.start_date_time == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert criteria.end_date_time.tzinfo == timezone.utc
    assert criteria.end_date_time.hour == 0


@pytest.mark.unit
@pytest.mark.parametrize("page,size", [(-1, 10), (0, 0), (0, -5)])
def test_page_window_rejects_invalid_values(page, size):
    with pytest.raises(ValueError):
        PageWindow(page=page, size=size)
