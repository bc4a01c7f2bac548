from .exercise_library_repository import ExerciseLibraryRepository
from .workout_gateway import WorkoutGateway
