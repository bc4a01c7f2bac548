import datetime as dt
import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from workout_log_service.database import Base, create_async_engine_and_session
from workout_log_service.repositories import WorkoutGateway

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _alembic_upgrade_head(db_url: str) -> None:
    os.environ["WORKOUT_LOG_DATABASE_URL"] = db_url
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(cfg, "head")


class FakeClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self, start: dt.datetime = dt.datetime(2025, 9, 1, 8, 0, 0), step: dt.timedelta = dt.timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> dt.datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
async def session_factory(tmp_path):
    engine, factory = create_async_engine_and_session(
        f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await engine.dispose()


@pytest.fixture()
def gateway(session_factory, clock) -> WorkoutGateway:
    return WorkoutGateway(session_factory, clock=clock)


@pytest.fixture(scope="session")
def test_db_url(tmp_path_factory) -> str:
    tmp_dir = tmp_path_factory.mktemp("workout_log_db")
    db_path = tmp_dir / "test_workout_log.db"
    return f"sqlite:///{db_path}"


@pytest.fixture(scope="session")
def migrated_db(test_db_url: str):
    _alembic_upgrade_head(test_db_url)
    yield test_db_url


@pytest.fixture()
def client(migrated_db: str):
    from workout_log_service.database import get_db
    from workout_log_service.dependencies import get_identity_oracle, get_workout_gateway
    from workout_log_service.identity import HeaderIdentityOracle
    from workout_log_service.main import app

    # NullPool: TestClient runs the app on its own event loop
    engine, factory = create_async_engine_and_session(migrated_db, poolclass=NullPool)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_workout_gateway] = lambda: WorkoutGateway(factory)
    app.dependency_overrides[get_identity_oracle] = lambda: HeaderIdentityOracle("X-User-Id")

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def auto_clean_tables(request):
    """Remove per-user rows after each API test; the seeded exercise library stays."""
    yield
    if "client" not in request.fixturenames:
        return
    engine = create_engine(request.getfixturevalue("migrated_db"))
    with engine.connect() as connection:
        transaction = connection.begin()
        for table in ("sets", "exercises", "workouts"):
            connection.execute(Base.metadata.tables[table].delete())
        transaction.commit()
    engine.dispose()
