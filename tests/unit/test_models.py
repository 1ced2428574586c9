"""Unit tests for database models."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from chipization.core.enums import Gender, LifeStatus
from chipization.db.models import (
    Animal,
    AnimalType,
    AnimalVisitedLocation,
    LocationPoint,
)
from tests.helpers.credentials import TEST_PASSWORD


@pytest.fixture
def point(db_session):
    point = LocationPoint(latitude=45.0, longitude=90.0)
    db_session.add(point)
    db_session.commit()
    return point


@pytest.fixture
def wolf(db_session):
    animal_type = AnimalType(name="wolf")
    db_session.add(animal_type)
    db_session.commit()
    return animal_type


@pytest.fixture
def animal(db_session, sample_account, point, wolf):
    animal = Animal(
        weight=30.0,
        height=0.8,
        length=1.4,
        gender=Gender.MALE.value,
        life_status=LifeStatus.ALIVE.value,
        chipper_id=sample_account.id,
        chipping_location_id=point.id,
        chipping_date_time=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    )
    animal.types = [wolf]
    db_session.add(animal)
    db_session.commit()
    return animal


@pytest.mark.unit
class TestAccount:
    def test_verify_password(self, sample_account):
        assert sample_account.verify_password(TEST_PASSWORD)
        assert not sample_account.verify_password("wrong")

    def test_email_is_unique(self, make_account, db_session):
        make_account(email="dup@example.com")
        with pytest.raises(IntegrityError):
            make_account(email="dup@example.com")
        db_session.rollback()


@pytest.mark.unit
class TestUTCDateTime:
    def test_round_trip_keeps_utc(self, db_session, animal):
        db_session.expire_all()
        loaded = db_session.get(Animal, animal.id)
        assert loaded.chipping_date_time == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert loaded.chipping_date_time.tzinfo is not None

    def test_offset_values_are_normalised(self, db_session, animal):
        plus_three = timezone(timedelta(hours=3))
        animal.death_date_time = datetime(2026, 1, 2, 15, 0, tzinfo=plus_three)
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.get(Animal, animal.id)
        assert loaded.death_date_time == datetime(2026, 1, 2, 12, 0, tzinfo=timezone.utc)
        assert loaded.death_date_time.utcoffset() == timedelta(0)

    def test_naive_values_are_taken_as_utc(self, db_session, animal):
        visit = AnimalVisitedLocation(
            animal_id=animal.id,
            location_point_id=animal.chipping_location_id,
            visited_at=datetime(2026, 1, 3, 8, 30),
        )
        db_session.add(visit)
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.get(AnimalVisitedLocation, visit.id)
        assert loaded.visited_at == datetime(2026, 1, 3, 8, 30, tzinfo=timezone.utc)


@pytest.mark.unit
class TestAnimal:
    def test_version_starts_at_one_and_increments(self, db_session, animal):
        assert animal.version == 1
        animal.weight = 31.0
        db_session.commit()
        assert animal.version == 2

    def test_type_ids_and_status_helpers(self, animal, wolf):
        assert animal.type_ids == [wolf.id]
        assert not animal.is_dead
        animal.life_status = LifeStatus.DEAD.value
        assert animal.is_dead

    def test_visits_ordered_chronologically(self, db_session, animal, point):
        other = LocationPoint(latitude=1.0, longitude=1.0)
        db_session.add(other)
        db_session.flush()
        late = AnimalVisitedLocation(
            animal_id=animal.id,
            location_point_id=point.id,
            visited_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
        )
        early = AnimalVisitedLocation(
            animal_id=animal.id,
            location_point_id=other.id,
            visited_at=datetime(2026, 1, 4, tzinfo=timezone.utc),
        )
        db_session.add_all([late, early])
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.get(Animal, animal.id)
        assert [v.id for v in loaded.visited_locations] == [early.id, late.id]


@pytest.mark.unit
class TestUniqueness:
    def test_type_name_unique(self, db_session, wolf):
        db_session.add(AnimalType(name="wolf"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_type_name_case_sensitive(self, db_session, wolf):
        db_session.add(AnimalType(name="Wolf"))
        db_session.commit()

    def test_coordinates_unique(self, db_session, point):
        db_session.add(LocationPoint(latitude=45.0, longitude=90.0))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
