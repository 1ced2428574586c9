"""Pytest configuration and shared fixtures."""

import os
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

# Configure the application before any chipization module is imported: the
# engine and the cached configuration are built at import time.
_TEMP_DIR = tempfile.mkdtemp(prefix="chipization-tests-")
_TEST_DB_URL = f"sqlite:///{Path(_TEMP_DIR) / 'test.db'}"
os.environ.setdefault("CHIPIZATION_DATABASE_URL", _TEST_DB_URL)
os.environ["CHIPIZATION_PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["CHIPIZATION_CONFIG_FILE"] = str(Path(_TEMP_DIR) / "config.json")
os.environ.setdefault("CHIPIZATION_LOG_TO_FILE", "0")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tests.helpers.clock import ManualClock
from tests.helpers.credentials import TEST_PASSWORD


@pytest.fixture(scope="session")
def test_db_url() -> str:
    return os.environ["CHIPIZATION_DATABASE_URL"]


@pytest.fixture(scope="session")
def test_engine(test_db_url):
    """Engine on the temporary database with the schema built from ORM metadata."""
    from chipization.db.database import init_db

    engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(test_engine):
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def db_cleanup(request):
    """Wipe all tables after tests that touched the database."""
    if "test_engine" not in request.fixturenames:
        yield
        return
    engine = request.getfixturevalue("test_engine")
    yield

    from chipization.db.database import Base

    with engine.begin() as conn:
        existing = set(inspect(conn).get_table_names())
        # Children first so foreign keys stay satisfied
        for table in reversed(Base.metadata.sorted_tables):
            if table.name in existing:
                conn.execute(table.delete())


@pytest.fixture
def clock() -> ManualClock:
    """Clock starting at 2026-01-01T12:00Z, one second per reading."""
    return ManualClock()


@pytest.fixture
def client(test_db, clock) -> Generator[TestClient, None, None]:
    """Test client with database and clock dependency overrides."""
    from chipization.main import app
    from chipization.db.database import get_db
    from chipization.core.clock import get_clock

    def override_get_db():
        db = test_db()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Factory inserting an account directly through the ORM."""
    from chipization.auth.security import hash_password
    from chipization.core.enums import Role
    from chipization.db.models import Account

    def _maker(
        email: str = "chipper@example.com",
        password: str = TEST_PASSWORD,
        first_name: str = "Ada",
        last_name: str = "Lovelace",
        role: Role = Role.USER,
    ) -> Account:
        salt_hex, hash_hex = hash_password(password)
        account = Account(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_salt=salt_hex,
            password_hash=hash_hex,
            role=role.value,
        )
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account

    return _maker


@pytest.fixture
def sample_account(make_account):
    return make_account()


@pytest.fixture
def auth_client(client, sample_account) -> TestClient:
    """Test client sending HTTP Basic credentials of ``sample_account``."""
    client.auth = (sample_account.email, TEST_PASSWORD)
    return client


@pytest.fixture
def api(auth_client, sample_account):
    """Small helpers for building fixtures through the HTTP API."""

    class Api:
        account = sample_account

        @staticmethod
        def point(latitude: float, longitude: float) -> int:
            response = auth_client.post(
                "/locations", json={"latitude": latitude, "longitude": longitude}
            )
            assert response.status_code == 201, response.text
            return response.json()["id"]

        @staticmethod
        def animal_type(name: str) -> int:
            response = auth_client.post("/animals/types", json={"name": name})
            assert response.status_code == 201, response.text
            return response.json()["id"]

        @staticmethod
        def animal(type_ids, chipping_location_id: int, **overrides) -> Dict:
            payload = {
                "animal_types": list(type_ids),
                "weight": 10.0,
                "length": 1.0,
                "height": 1.0,
                "gender": "MALE",
                "chipper_id": sample_account.id,
                "chipping_location_id": chipping_location_id,
            }
            payload.update(overrides)
            response = auth_client.post("/animals", json=payload)
            assert response.status_code == 201, response.text
            return response.json()

    return Api


# In-memory fixtures for the async core tests


@pytest.fixture
def repos():
    from chipization.repositories.memory_impl import create_memory_container

    return create_memory_container()


@pytest_asyncio.fixture
async def seeded(repos):
    """Chipper account, points A/B/C and types wolf/fox in the memory repositories."""
    from chipization.auth.security import hash_password

    salt_hex, hash_hex = hash_password(TEST_PASSWORD)
    chipper = await repos.account.create(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password_salt=salt_hex,
        password_hash=hash_hex,
    )
    point_a = await repos.location_point.create(0.0, 0.0)
    point_b = await repos.location_point.create(10.0, 10.0)
    point_c = await repos.location_point.create(20.0, 20.0)
    wolf = await repos.animal_type.create("wolf")
    fox = await repos.animal_type.create("fox")

    class Seed:
        pass

    seed = Seed()
    seed.chipper = chipper
    seed.a, seed.b, seed.c = point_a.id, point_b.id, point_c.id
    seed.wolf, seed.fox = wolf.id, fox.id
    return seed


@pytest.fixture
def lifecycle(repos, clock):
    from chipization.core.lifecycle_engine import AnimalLifecycleEngine

    return AnimalLifecycleEngine(repos, clock)


@pytest.fixture
def sequencer(repos, clock):
    from chipization.core.visit_sequencer import VisitSequencer

    return VisitSequencer(repos, clock)


@pytest.fixture
def registry(repos, clock):
    from chipization.core.type_registry import TypeRegistry

    return TypeRegistry(repos, clock)


@pytest.fixture
def locations(repos, clock):
    from chipization.core.location_points import LocationPointStore

    return LocationPointStore(repos, clock)


@pytest.fixture
def search(repos, clock):
    from chipization.core.search import SearchFacade

    return SearchFacade(repos, clock)


@pytest.fixture
def chip(lifecycle, seeded):
    """Factory chipping an animal at point A with type wolf unless overridden."""

    async def _chip(types=None, location: Optional[int] = None, **fields):
        params = dict(weight=10.0, height=1.0, length=1.0, gender="MALE")
        params.update(fields)
        return await lifecycle.create(
            animal_types=types or [seeded.wolf],
            chipper_id=seeded.chipper.id,
            chipping_location_id=location or seeded.a,
            **params,
        )

    return _chip
