from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..schemas import ExerciseLibraryResponse
from .persistence import persistence_guard


class ExerciseLibraryRepository:
    """Shared exercise catalog; read-only and not scoped to any user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_entries(self, muscle_group: str | None = None) -> list[ExerciseLibraryResponse]:
        stmt = select(models.ExerciseLibrary).order_by(models.ExerciseLibrary.name.asc())
        if muscle_group:
            stmt = stmt.where(models.ExerciseLibrary.muscle_group == muscle_group)
        with persistence_guard("exercise_library_list", muscle_group=muscle_group):
            result = await self.db.execute(stmt)
            return [ExerciseLibraryResponse.model_validate(e) for e in result.scalars().all()]

    async def get(self, entry_id: int) -> ExerciseLibraryResponse | None:
        with persistence_guard("exercise_library_get", entry_id=entry_id):
            result = await self.db.execute(select(models.ExerciseLibrary).where(models.ExerciseLibrary.id == entry_id))
            entry = result.scalars().first()
        return ExerciseLibraryResponse.model_validate(entry) if entry else None
