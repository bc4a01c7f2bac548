"""Read-side entry points used by the pages and the JSON API.

Raw route/query strings are parsed here. A value that cannot be parsed falls
back to a safe default instead of failing the request.
"""

from __future__ import annotations

import datetime as dt

import structlog

from ..repositories.workout_gateway import WorkoutGateway
from ..schemas import WorkoutDetailResponse, WorkoutResponse

logger = structlog.get_logger(__name__)


def parse_calendar_date(raw: str | None, default: dt.date | None = None) -> dt.date:
    fallback = default or dt.date.today()
    if not raw or not raw.strip():
        return fallback
    try:
        return dt.date.fromisoformat(raw.strip())
    except ValueError:
        logger.info("calendar_date_parse_failed", raw=raw)
        return fallback


def parse_workout_id(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(str(raw).strip(), 10)
    except ValueError:
        logger.info("workout_id_parse_failed", raw=raw)
        return None
    return value if value > 0 else None


class WorkoutQueries:
    def __init__(self, gateway: WorkoutGateway):
        self.gateway = gateway

    async def workouts_for_day(self, user_id: str, raw_date: str | None) -> tuple[dt.date, list[WorkoutResponse]]:
        selected = parse_calendar_date(raw_date)
        workouts = await self.gateway.list_by_owner_and_date(user_id, selected)
        return selected, workouts

    async def list_workouts(self, user_id: str, raw_date: str | None = None) -> list[WorkoutResponse]:
        """All of the caller's workouts, or one day's when ``raw_date`` parses."""
        if raw_date:
            return (await self.workouts_for_day(user_id, raw_date))[1]
        return await self.gateway.list_by_owner(user_id)

    async def workout(self, user_id: str, raw_id: str | int | None) -> WorkoutResponse | None:
        workout_id = parse_workout_id(raw_id)
        if workout_id is None:
            return None
        return await self.gateway.get_by_owner_and_id(user_id, workout_id)

    async def workout_detail(self, user_id: str, raw_id: str | int | None) -> WorkoutDetailResponse | None:
        workout_id = parse_workout_id(raw_id)
        if workout_id is None:
            return None
        return await self.gateway.get_with_exercises_and_sets(user_id, workout_id)
