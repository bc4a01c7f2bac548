"""Tenant-scoped access to workouts, exercises and sets.

Every read and write of workout data goes through :class:`WorkoutGateway`.
Each method takes the caller's ``user_id`` explicitly and folds it into the
SQL itself, so a row owned by someone else is never loaded, returned or
modified. "Not found" is reported as ``None`` (or ``False``) and is the same
whether the row is missing or belongs to another user.

Exercises and sets carry no owner column. Reads and writes on them always go
through a join to ``workouts`` filtered by ``user_id`` in the same statement.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from sqlalchemy import DateTime, Integer, String, Text, delete, func, insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .. import models
from ..metrics import (
    WORKOUT_CHILDREN_CREATED_TOTAL,
    WORKOUT_NOT_FOUND_TOTAL,
    WORKOUTS_CREATED_TOTAL,
    WORKOUTS_DELETED_TOTAL,
    WORKOUTS_UPDATED_TOTAL,
)
from ..schemas import (
    ExerciseCreate,
    ExerciseResponse,
    ExerciseWithSetsResponse,
    SetCreate,
    WorkoutDetailResponse,
    WorkoutResponse,
    WorkoutSetResponse,
)
from .persistence import persistence_guard

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "date", "notes"})


def to_workout_timestamp(value: dt.date | dt.datetime) -> dt.datetime:
    """Calendar dates become local midnight; aware datetimes are shifted to naive local time."""
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value
    return dt.datetime.combine(value, dt.time.min)


def day_bounds(day: dt.date) -> tuple[dt.datetime, dt.datetime]:
    return dt.datetime.combine(day, dt.time.min), dt.datetime.combine(day, dt.time.max)


def _require_owner(user_id: str) -> None:
    if not user_id:
        raise ValueError("user_id is required for every workout operation")


class WorkoutGateway:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], dt.datetime] = models.utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock

    @staticmethod
    def _not_found(operation: str, user_id: str, **context: Any) -> None:
        WORKOUT_NOT_FOUND_TOTAL.labels(operation=operation).inc()
        logger.info("workout_gateway_not_found", operation=operation, user_id=user_id, **context)

    @staticmethod
    def _owned_workout(user_id: str, workout_id: int):
        return select(models.Workout).where(
            models.Workout.id == workout_id,
            models.Workout.user_id == user_id,
        )

    async def list_by_owner(self, user_id: str) -> list[WorkoutResponse]:
        _require_owner(user_id)
        stmt = (
            select(models.Workout)
            .where(models.Workout.user_id == user_id)
            .order_by(models.Workout.date.asc(), models.Workout.id.asc())
        )
        with persistence_guard("list_by_owner", user_id=user_id):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [WorkoutResponse.model_validate(w) for w in result.scalars().all()]

    async def list_by_owner_and_date(self, user_id: str, day: dt.date) -> list[WorkoutResponse]:
        _require_owner(user_id)
        start, end = day_bounds(day)
        stmt = (
            select(models.Workout)
            .where(
                models.Workout.user_id == user_id,
                models.Workout.date >= start,
                models.Workout.date <= end,
            )
            .order_by(models.Workout.date.asc(), models.Workout.id.asc())
        )
        with persistence_guard("list_by_owner_and_date", user_id=user_id):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [WorkoutResponse.model_validate(w) for w in result.scalars().all()]

    async def get_by_owner_and_id(self, user_id: str, workout_id: int) -> WorkoutResponse | None:
        _require_owner(user_id)
        with persistence_guard("get_by_owner_and_id", user_id=user_id):
            async with self._session_factory() as session:
                result = await session.execute(self._owned_workout(user_id, workout_id))
                workout = result.scalars().first()
                if workout is None:
                    self._not_found("get_by_owner_and_id", user_id, workout_id=workout_id)
                    return None
                return WorkoutResponse.model_validate(workout)

    async def _fetch_sets(self, user_id: str, exercise_id: int) -> list[WorkoutSetResponse]:
        set_t = models.WorkoutSet
        stmt = (
            select(
                set_t.id,
                set_t.exercise_id,
                models.Exercise.workout_id,
                set_t.set_number,
                set_t.reps,
                set_t.weight,
            )
            .join(models.Exercise, set_t.exercise_id == models.Exercise.id)
            .join(models.Workout, models.Exercise.workout_id == models.Workout.id)
            .where(set_t.exercise_id == exercise_id, models.Workout.user_id == user_id)
            .order_by(set_t.set_number.asc(), set_t.id.asc())
        )
        with persistence_guard("get_with_exercises_and_sets", user_id=user_id):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [WorkoutSetResponse.model_validate(dict(row._mapping)) for row in result.all()]

    async def _fetch_all_sets(self, user_id: str, exercises: list[ExerciseResponse]) -> list[list[WorkoutSetResponse]]:
        tasks = [asyncio.ensure_future(self._fetch_sets(user_id, exercise.id)) for exercise in exercises]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            # One failed fetch fails the aggregate; stop and reap the rest
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def get_with_exercises_and_sets(self, user_id: str, workout_id: int) -> WorkoutDetailResponse | None:
        """Workout plus its exercises (by ``order``) each with its sets (by ``set_number``).

        Set fetches run concurrently, one session each. Any failure aborts the
        whole aggregate with :class:`PersistenceError`.
        """
        _require_owner(user_id)
        exercises_stmt = (
            select(models.Exercise)
            .join(models.Workout, models.Exercise.workout_id == models.Workout.id)
            .where(models.Exercise.workout_id == workout_id, models.Workout.user_id == user_id)
            .order_by(models.Exercise.order.asc(), models.Exercise.id.asc())
        )
        with persistence_guard("get_with_exercises_and_sets", user_id=user_id):
            async with self._session_factory() as session:
                result = await session.execute(self._owned_workout(user_id, workout_id))
                workout = result.scalars().first()
                if workout is None:
                    self._not_found("get_with_exercises_and_sets", user_id, workout_id=workout_id)
                    return None
                header = WorkoutResponse.model_validate(workout)
                result = await session.execute(exercises_stmt)
                exercises = [ExerciseResponse.model_validate(e) for e in result.scalars().all()]

        set_groups = await self._fetch_all_sets(user_id, exercises)

        return WorkoutDetailResponse(
            **header.model_dump(),
            exercises=[
                ExerciseWithSetsResponse(**exercise.model_dump(), sets=sets)
                for exercise, sets in zip(exercises, set_groups)
            ],
        )

    async def create(
        self,
        user_id: str,
        *,
        name: str,
        date: dt.date | dt.datetime,
        notes: str | None = None,
    ) -> WorkoutResponse:
        _require_owner(user_id)
        now = self._clock()
        workout = models.Workout(
            user_id=user_id,
            name=name,
            date=to_workout_timestamp(date),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        with persistence_guard("create", user_id=user_id):
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(workout)
                    await session.flush()
                    created = WorkoutResponse.model_validate(workout)

        WORKOUTS_CREATED_TOTAL.inc()
        logger.info("workout_created", user_id=user_id, workout_id=created.id)
        return created

    async def update(self, user_id: str, workout_id: int, changes: Mapping[str, Any]) -> WorkoutResponse | None:
        """Apply ``changes`` to the workout only if ``workout_id`` and ``user_id`` both match.

        Keys absent from ``changes`` are left untouched. ``updated_at`` is
        always refreshed on a match.
        """
        _require_owner(user_id)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Workout fields cannot be updated: {', '.join(sorted(unknown))}")

        values = dict(changes)
        if "date" in values:
            values["date"] = to_workout_timestamp(values["date"])
        values["updated_at"] = self._clock()

        stmt = (
            update(models.Workout)
            .where(models.Workout.id == workout_id, models.Workout.user_id == user_id)
            .values(**values)
            .returning(models.Workout)
            .execution_options(synchronize_session=False)
        )
        with persistence_guard("update", user_id=user_id):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    workout = result.scalars().first()
                    updated = WorkoutResponse.model_validate(workout) if workout is not None else None

        if updated is None:
            self._not_found("update", user_id, workout_id=workout_id)
            return None
        WORKOUTS_UPDATED_TOTAL.inc()
        logger.info("workout_updated", user_id=user_id, workout_id=workout_id, fields=sorted(changes))
        return updated

    async def delete(self, user_id: str, workout_id: int) -> bool:
        """Delete an owned workout; exercises and sets go with it through ON DELETE CASCADE."""
        _require_owner(user_id)
        stmt = (
            delete(models.Workout)
            .where(models.Workout.id == workout_id, models.Workout.user_id == user_id)
            .returning(models.Workout.id)
            .execution_options(synchronize_session=False)
        )
        with persistence_guard("delete", user_id=user_id):
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    deleted = result.scalar_one_or_none() is not None

        if not deleted:
            self._not_found("delete", user_id, workout_id=workout_id)
            return False
        WORKOUTS_DELETED_TOTAL.inc()
        logger.info("workout_deleted", user_id=user_id, workout_id=workout_id)
        return True

    async def add_exercise(self, user_id: str, workout_id: int, data: ExerciseCreate) -> ExerciseResponse | None:
        """Insert an exercise under an owned workout in one ``INSERT ... SELECT`` statement.

        The SELECT yields a row only when the workout belongs to ``user_id``,
        so the ownership check and the write cannot be separated by a
        concurrent delete.
        """
        _require_owner(user_id)
        workout_t, exercise_t = models.Workout, models.Exercise
        if data.order is not None:
            order_expr = literal(data.order, Integer)
        else:
            last_order = select(func.max(exercise_t.order)).where(exercise_t.workout_id == workout_id).scalar_subquery()
            order_expr = func.coalesce(last_order, 0) + 1

        owned_row = select(
            workout_t.id,
            literal(data.exercise_library_id, Integer),
            literal(data.name, String),
            order_expr,
            literal(data.notes, Text),
            literal(self._clock(), DateTime),
        ).where(workout_t.id == workout_id, workout_t.user_id == user_id)

        table = exercise_t.__table__
        stmt = (
            insert(table)
            .from_select(["workout_id", "exercise_library_id", "name", "order", "notes", "created_at"], owned_row)
            .returning(*table.c)
        )
        with persistence_guard("add_exercise", user_id=user_id):
            async with self._session_factory() as session:
                async with session.begin():
                    row = (await session.execute(stmt)).first()
                    created = ExerciseResponse.model_validate(dict(row._mapping)) if row is not None else None

        if created is None:
            self._not_found("add_exercise", user_id, workout_id=workout_id)
            return None
        WORKOUT_CHILDREN_CREATED_TOTAL.labels(kind="exercise").inc()
        logger.info("exercise_added", user_id=user_id, workout_id=workout_id, exercise_id=created.id)
        return created

    async def add_set(self, user_id: str, exercise_id: int, data: SetCreate) -> WorkoutSetResponse | None:
        """Insert a set under an exercise whose workout belongs to ``user_id``; same single-statement shape."""
        _require_owner(user_id)
        workout_t, exercise_t, set_t = models.Workout, models.Exercise, models.WorkoutSet
        if data.set_number is not None:
            number_expr = literal(data.set_number, Integer)
        else:
            last_number = select(func.max(set_t.set_number)).where(set_t.exercise_id == exercise_id).scalar_subquery()
            number_expr = func.coalesce(last_number, 0) + 1

        owned_row = (
            select(
                exercise_t.id,
                number_expr,
                literal(data.reps, Integer),
                literal(data.weight, Integer),
                literal(self._clock(), DateTime),
            )
            .select_from(exercise_t)
            .join(workout_t, exercise_t.workout_id == workout_t.id)
            .where(exercise_t.id == exercise_id, workout_t.user_id == user_id)
        )

        table = set_t.__table__
        stmt = (
            insert(table)
            .from_select(["exercise_id", "set_number", "reps", "weight", "created_at"], owned_row)
            .returning(*table.c)
        )
        with persistence_guard("add_set", user_id=user_id):
            async with self._session_factory() as session:
                async with session.begin():
                    row = (await session.execute(stmt)).first()
                    created = None
                    if row is not None:
                        # Parent workout id for view invalidation
                        parent = await session.execute(select(exercise_t.workout_id).where(exercise_t.id == exercise_id))
                        created = WorkoutSetResponse.model_validate(
                            {**row._mapping, "workout_id": parent.scalar_one()}
                        )

        if created is None:
            self._not_found("add_set", user_id, exercise_id=exercise_id)
            return None
        WORKOUT_CHILDREN_CREATED_TOTAL.labels(kind="set").inc()
        logger.info("set_added", user_id=user_id, exercise_id=exercise_id, set_id=created.id)
        return created
