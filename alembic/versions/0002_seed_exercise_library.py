"""seed the shared exercise library

Revision ID: 0002_seed_exercise_library
Revises: 0001_initial_schema
Create Date: 2025-09-01 10:05:00.000000
"""
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002_seed_exercise_library"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_EXERCISES = [
    ("Back Squat", "Barbell squat with the bar across the upper back", "legs"),
    ("Front Squat", "Barbell squat with the bar racked on the front delts", "legs"),
    ("Romanian Deadlift", "Hip hinge with soft knees, bar close to the legs", "legs"),
    ("Deadlift", "Conventional barbell pull from the floor", "back"),
    ("Pull-up", "Overhand bodyweight pull to the bar", "back"),
    ("Barbell Row", "Bent-over row to the lower chest", "back"),
    ("Bench Press", "Flat barbell press to the chest", "chest"),
    ("Incline Dumbbell Press", "Dumbbell press on a 30-45 degree bench", "chest"),
    ("Push-up", "Bodyweight press from the floor", "chest"),
    ("Overhead Press", "Standing barbell press overhead", "shoulders"),
    ("Lateral Raise", "Dumbbell raise to shoulder height", "shoulders"),
    ("Bicep Curl", "Dumbbell or barbell elbow flexion", "arms"),
    ("Tricep Dip", "Bodyweight dip on parallel bars", "arms"),
    ("Plank", "Isometric hold on forearms and toes", "core"),
]


def upgrade() -> None:
    bind = op.get_bind()
    exercise_library = sa.Table("exercise_library", sa.MetaData(), autoload_with=bind)

    existing_names = set(name for (name,) in bind.execute(sa.select(exercise_library.c.name)).all())
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    rows = [
        {"name": name, "description": description, "muscle_group": muscle_group, "created_at": now}
        for name, description, muscle_group in DEFAULT_EXERCISES
        if name not in existing_names
    ]
    if rows:
        op.bulk_insert(exercise_library, rows)


def downgrade() -> None:
    exercise_library = sa.table("exercise_library", sa.column("name", sa.String))
    op.execute(
        exercise_library.delete().where(exercise_library.c.name.in_([name for name, _, _ in DEFAULT_EXERCISES]))
    )
