import pytest
from fastapi.testclient import TestClient

from workout_log_service.app_factory import parse_cors_origins
from workout_log_service.database import ensure_async_driver_url, ensure_sync_driver_url
from workout_log_service.dependencies import get_current_user_id
from workout_log_service.exceptions import UnauthorizedException
from workout_log_service.logging_config import add_correlation_id


def test_parse_cors_origins():
    assert parse_cors_origins("*") == ["*"]
    assert parse_cors_origins("https://a.example, https://b.example,") == ["https://a.example", "https://b.example"]


def test_database_url_normalisation():
    assert ensure_async_driver_url("postgres://u:p@db/app") == "postgresql+asyncpg://u:p@db/app"
    assert ensure_async_driver_url("sqlite:///./x.db") == "sqlite+aiosqlite:///./x.db"
    assert ensure_sync_driver_url("postgresql+asyncpg://u:p@db/app") == "postgresql+psycopg2://u:p@db/app"
    assert ensure_sync_driver_url("sqlite+aiosqlite:///./x.db") == "sqlite:///./x.db"


def test_add_correlation_id_outside_request():
    assert add_correlation_id(None, "info", {"event": "x"}) == {"event": "x"}


def test_correlation_id_header_is_echoed(client: TestClient):
    r = client.get("/health", headers={"X-Request-ID": "3f2b8c1e-7a4d-4e7b-9c1a-2d5e6f708192"})

    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "3f2b8c1e-7a4d-4e7b-9c1a-2d5e6f708192"


def test_metrics_endpoint(client: TestClient):
    client.post("/api/v1/workouts", json={"name": "Counted", "date": "2025-09-01"}, headers={"X-User-Id": "user-a"})

    r = client.get("/metrics")

    assert r.status_code == 200
    assert "workouts_created_total" in r.text


async def test_current_user_dependency_rejects_anonymous_callers():
    with pytest.raises(UnauthorizedException) as excinfo:
        await get_current_user_id(None)

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Unauthorized"
    assert await get_current_user_id("user-a") == "user-a"
