from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from ..dependencies import get_current_user_id, get_optional_user_id, get_workout_actions, get_workout_queries
from ..exceptions import WorkoutNotFoundException
from ..schemas import ActionResult, WorkoutDetailResponse, WorkoutResponse
from ..services.workout_actions import (
    EXERCISE_NOT_FOUND,
    INVALID_INPUT,
    UNAUTHORIZED,
    WORKOUT_NOT_FOUND,
    WorkoutActions,
)
from ..services.workout_queries import WorkoutQueries

router = APIRouter(prefix="")

_ERROR_STATUS = {
    INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    WORKOUT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    EXERCISE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def action_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    status_code = success_status if result.ok else _ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
    # Drop unset envelope keys only; nulls inside ``value`` are real field values
    content = {key: item for key, item in result.model_dump(mode="json").items() if item is not None}
    return JSONResponse(status_code=status_code, content=content)


@router.get("/workouts", response_model=list[WorkoutResponse])
async def list_workouts(
    date: str | None = Query(None, description="Calendar day, YYYY-MM-DD; omit to list every workout"),
    user_id: str = Depends(get_current_user_id),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    return await queries.list_workouts(user_id, date)


@router.get("/workouts/{workout_id}", response_model=WorkoutDetailResponse)
async def get_workout(
    workout_id: int,
    user_id: str = Depends(get_current_user_id),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    workout = await queries.workout_detail(user_id, workout_id)
    if workout is None:
        raise WorkoutNotFoundException()
    return workout


@router.post("/workouts", status_code=status.HTTP_201_CREATED)
async def create_workout(
    payload: dict[str, Any] = Body(...),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    result = await actions.create_workout(user_id, payload)
    return action_response(result, status.HTTP_201_CREATED)


@router.put("/workouts/{workout_id}")
async def update_workout(
    workout_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    result = await actions.update_workout(user_id, {**payload, "id": workout_id})
    return action_response(result)


@router.delete("/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(
    workout_id: int,
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    result = await actions.delete_workout(user_id, {"id": workout_id})
    if result.ok:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return action_response(result)


@router.post("/workouts/{workout_id}/exercises", status_code=status.HTTP_201_CREATED)
async def add_exercise(
    workout_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    result = await actions.add_exercise(user_id, workout_id, payload)
    return action_response(result, status.HTTP_201_CREATED)


@router.post("/exercises/{exercise_id}/sets", status_code=status.HTTP_201_CREATED)
async def add_set(
    exercise_id: int,
    payload: dict[str, Any] = Body(...),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    result = await actions.add_set(user_id, exercise_id, payload)
    return action_response(result, status.HTTP_201_CREATED)
