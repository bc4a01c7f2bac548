from fastapi import APIRouter, Depends, Query

from ..dependencies import get_exercise_library_repository
from ..exceptions import NotFoundException
from ..repositories import ExerciseLibraryRepository
from ..schemas import ExerciseLibraryResponse

router = APIRouter(prefix="/exercise-library")


@router.get("", response_model=list[ExerciseLibraryResponse])
async def list_exercise_library(
    muscle_group: str | None = Query(None),
    repo: ExerciseLibraryRepository = Depends(get_exercise_library_repository),
):
    return await repo.list_entries(muscle_group=muscle_group)


@router.get("/{entry_id}", response_model=ExerciseLibraryResponse)
async def get_exercise_library_entry(
    entry_id: int,
    repo: ExerciseLibraryRepository = Depends(get_exercise_library_repository),
):
    entry = await repo.get(entry_id)
    if entry is None:
        raise NotFoundException("Exercise library entry not found")
    return entry
