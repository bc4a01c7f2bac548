import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

NAME_MAX_LENGTH = 255
NOTES_MAX_LENGTH = 1000


class WorkoutCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    date: dt.date
    notes: str | None = Field(None, max_length=NOTES_MAX_LENGTH)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class WorkoutUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: PositiveInt
    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    date: dt.date | None = None
    notes: str | None = Field(None, max_length=NOTES_MAX_LENGTH)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def changes(self) -> dict:
        """Fields the caller actually supplied; ``notes`` may be cleared, name and date may not."""
        data = self.model_dump(exclude_unset=True, exclude={"id"})
        for key in ("name", "date"):
            if key in data and data[key] is None:
                data.pop(key)
        return data


class WorkoutSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int
    workout_id: int
    set_number: int
    reps: int
    weight: int | None = None


class ExerciseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    workout_id: int
    exercise_library_id: int | None = None
    name: str
    order: int
    notes: str | None = None


class ExerciseWithSetsResponse(ExerciseResponse):
    sets: list[WorkoutSetResponse] = Field(default_factory=list)


class WorkoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    date: dt.datetime
    notes: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class WorkoutDetailResponse(WorkoutResponse):
    exercises: list[ExerciseWithSetsResponse] = Field(default_factory=list)


class WorkoutReference(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: PositiveInt
