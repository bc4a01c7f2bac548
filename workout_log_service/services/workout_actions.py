"""Mutation entry points.

Each action validates the raw payload, checks that an identity was
resolved, calls the gateway, notifies view invalidation and returns an
:class:`ActionResult`. Actions never raise to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from ..exceptions import PersistenceError
from ..repositories.workout_gateway import WorkoutGateway
from ..schemas import (
    ActionResult,
    ExerciseCreate,
    ExerciseResponse,
    SetCreate,
    WorkoutCreate,
    WorkoutReference,
    WorkoutResponse,
    WorkoutSetResponse,
    WorkoutUpdate,
)
from .view_invalidation import ViewInvalidator, workout_view_paths

logger = structlog.get_logger(__name__)

INVALID_INPUT = "Invalid input"
UNAUTHORIZED = "Unauthorized"
WORKOUT_NOT_FOUND = "Workout not found"
EXERCISE_NOT_FOUND = "Exercise not found"

Payload = Mapping[str, Any] | BaseModel


def field_errors_from(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(field, []).append(error["msg"])
    return errors


def _as_dict(payload: Payload) -> Mapping[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=True)
    return payload


class WorkoutActions:
    def __init__(self, gateway: WorkoutGateway, invalidator: ViewInvalidator | None = None):
        self.gateway = gateway
        self.invalidator = invalidator or ViewInvalidator()

    @staticmethod
    def _validate(model: type[BaseModel], payload: Payload, action: str):
        try:
            return model.model_validate(_as_dict(payload)), None
        except ValidationError as exc:
            field_errors = field_errors_from(exc)
            logger.info(f"{action}_invalid", fields=sorted(field_errors))
            return None, ActionResult.failure(INVALID_INPUT, field_errors)

    @staticmethod
    def _unauthorized(action: str) -> ActionResult:
        logger.info(f"{action}_unauthorized")
        return ActionResult.failure(UNAUTHORIZED)

    async def create_workout(self, user_id: str | None, payload: Payload) -> ActionResult[WorkoutResponse]:
        data, failure = self._validate(WorkoutCreate, payload, "workout_create")
        if failure:
            return failure
        if not user_id:
            return self._unauthorized("workout_create")

        logger.info("workout_create_requested", user_id=user_id, name=data.name)
        try:
            workout = await self.gateway.create(user_id, name=data.name, date=data.date, notes=data.notes)
        except PersistenceError:
            logger.exception("workout_create_error", user_id=user_id)
            return ActionResult.failure("Failed to create workout")

        await self.invalidator.invalidate(user_id, workout_view_paths())
        logger.info("workout_create_success", user_id=user_id, workout_id=workout.id)
        return ActionResult.success(workout)

    async def update_workout(self, user_id: str | None, payload: Payload) -> ActionResult[WorkoutResponse]:
        data, failure = self._validate(WorkoutUpdate, payload, "workout_update")
        if failure:
            return failure
        if not user_id:
            return self._unauthorized("workout_update")

        try:
            workout = await self.gateway.update(user_id, data.id, data.changes())
        except PersistenceError:
            logger.exception("workout_update_error", user_id=user_id, workout_id=data.id)
            return ActionResult.failure("Failed to update workout")

        if workout is None:
            return ActionResult.failure(WORKOUT_NOT_FOUND)

        await self.invalidator.invalidate(user_id, workout_view_paths(workout.id))
        logger.info("workout_update_success", user_id=user_id, workout_id=workout.id)
        return ActionResult.success(workout)

    async def delete_workout(self, user_id: str | None, payload: Payload) -> ActionResult[int]:
        data, failure = self._validate(WorkoutReference, payload, "workout_delete")
        if failure:
            return failure
        if not user_id:
            return self._unauthorized("workout_delete")

        try:
            deleted = await self.gateway.delete(user_id, data.id)
        except PersistenceError:
            logger.exception("workout_delete_error", user_id=user_id, workout_id=data.id)
            return ActionResult.failure("Failed to delete workout")

        if not deleted:
            return ActionResult.failure(WORKOUT_NOT_FOUND)

        await self.invalidator.invalidate(user_id, workout_view_paths(data.id))
        return ActionResult.success(data.id)

    async def add_exercise(
        self, user_id: str | None, workout_id: int, payload: Payload
    ) -> ActionResult[ExerciseResponse]:
        data, failure = self._validate(ExerciseCreate, payload, "exercise_add")
        if failure:
            return failure
        if not user_id:
            return self._unauthorized("exercise_add")

        try:
            exercise = await self.gateway.add_exercise(user_id, workout_id, data)
        except PersistenceError:
            logger.exception("exercise_add_error", user_id=user_id, workout_id=workout_id)
            return ActionResult.failure("Failed to add exercise")

        if exercise is None:
            return ActionResult.failure(WORKOUT_NOT_FOUND)

        await self.invalidator.invalidate(user_id, workout_view_paths(workout_id))
        return ActionResult.success(exercise)

    async def add_set(self, user_id: str | None, exercise_id: int, payload: Payload) -> ActionResult[WorkoutSetResponse]:
        data, failure = self._validate(SetCreate, payload, "set_add")
        if failure:
            return failure
        if not user_id:
            return self._unauthorized("set_add")

        try:
            workout_set = await self.gateway.add_set(user_id, exercise_id, data)
        except PersistenceError:
            logger.exception("set_add_error", user_id=user_id, exercise_id=exercise_id)
            return ActionResult.failure("Failed to add set")

        if workout_set is None:
            return ActionResult.failure(EXERCISE_NOT_FOUND)

        await self.invalidator.invalidate(user_id, workout_view_paths(workout_set.workout_id))
        return ActionResult.success(workout_set)
