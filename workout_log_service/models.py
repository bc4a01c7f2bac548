from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the timezone-less DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class ExerciseLibrary(Base):
    __tablename__ = "exercise_library"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    muscle_group = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return "<ExerciseLibrary(id=%s, name='%s')>" % (self.id, self.name)


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True)
    # Opaque identity from the auth provider; never changes after insert
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    # Calendar day of the workout, stored as local midnight
    date = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    exercises = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Exercise.order",
    )

    def __repr__(self):
        return "<Workout(id=%s, name='%s', date=%s)>" % (self.id, self.name, self.date)


class Exercise(Base):
    __tablename__ = "exercises"
    __table_args__ = (UniqueConstraint("workout_id", "order", name="uq_exercises_workout_id_order"),)

    id = Column(Integer, primary_key=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_library_id = Column(Integer, ForeignKey("exercise_library.id"), nullable=True)
    name = Column(String(255), nullable=False)
    order = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    workout = relationship("Workout", back_populates="exercises")
    sets = relationship(
        "WorkoutSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WorkoutSet.set_number",
    )


class WorkoutSet(Base):
    __tablename__ = "sets"
    __table_args__ = (
        UniqueConstraint("exercise_id", "set_number", name="uq_sets_exercise_id_set_number"),
        CheckConstraint("reps > 0", name="ck_sets_reps_positive"),
    )

    id = Column(Integer, primary_key=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    set_number = Column(Integer, nullable=False)
    reps = Column(Integer, nullable=False)
    # Pounds; NULL means bodyweight
    weight = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    exercise = relationship("Exercise", back_populates="sets")
