from .exercise import ExerciseCreate, ExerciseLibraryResponse, SetCreate
from .result import ActionResult
from .workout import (
    ExerciseResponse,
    ExerciseWithSetsResponse,
    WorkoutCreate,
    WorkoutDetailResponse,
    WorkoutReference,
    WorkoutResponse,
    WorkoutSetResponse,
    WorkoutUpdate,
)
