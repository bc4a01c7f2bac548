from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator

from .workout import NAME_MAX_LENGTH, NOTES_MAX_LENGTH


class ExerciseCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    # Omitted -> appended after the workout's current last exercise
    order: PositiveInt | None = None
    notes: str | None = Field(None, max_length=NOTES_MAX_LENGTH)
    exercise_library_id: PositiveInt | None = None

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SetCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    set_number: PositiveInt | None = None
    reps: PositiveInt
    weight: NonNegativeInt | None = None


class ExerciseLibraryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    muscle_group: str | None = None
