import datetime as dt

import pytest

from workout_log_service.date_utils import format_input_date, format_standard_date, ordinal
from workout_log_service.services.workout_queries import WorkoutQueries, parse_calendar_date, parse_workout_id

USER_A = "user-a"
USER_B = "user-b"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-09-01", dt.date(2025, 9, 1)),
        (" 2025-02-28 ", dt.date(2025, 2, 28)),
        ("2025-02-30", dt.date(2024, 1, 1)),
        ("yesterday", dt.date(2024, 1, 1)),
        ("", dt.date(2024, 1, 1)),
        (None, dt.date(2024, 1, 1)),
    ],
)
def test_parse_calendar_date(raw, expected):
    assert parse_calendar_date(raw, default=dt.date(2024, 1, 1)) == expected


def test_parse_calendar_date_defaults_to_today():
    assert parse_calendar_date(None) == dt.date.today()


@pytest.mark.parametrize(
    "raw, expected",
    [("42", 42), (7, 7), (" 3 ", 3), ("0", None), ("-1", None), ("abc", None), ("1.5", None), (None, None)],
)
def test_parse_workout_id(raw, expected):
    assert parse_workout_id(raw) == expected


@pytest.mark.parametrize(
    "day, expected",
    [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd")],
)
def test_ordinal(day, expected):
    assert ordinal(day) == expected


def test_date_formats():
    assert format_standard_date(dt.date(2025, 9, 1)) == "1st Sep 2025"
    assert format_standard_date(dt.datetime(2025, 9, 23, 12, 0)) == "23rd Sep 2025"
    assert format_input_date(dt.datetime(2025, 9, 1, 23, 59, 59)) == "2025-09-01"


async def test_workouts_for_day_falls_back_on_bad_input(gateway):
    today = dt.date.today()
    await gateway.create(USER_A, name="Today", date=today)
    queries = WorkoutQueries(gateway)

    selected, workouts = await queries.workouts_for_day(USER_A, "garbage")

    assert selected == today
    assert [w.name for w in workouts] == ["Today"]


async def test_list_workouts_with_and_without_date(gateway):
    await gateway.create(USER_A, name="Mon", date=dt.date(2025, 9, 1))
    await gateway.create(USER_A, name="Tue", date=dt.date(2025, 9, 2))
    queries = WorkoutQueries(gateway)

    assert [w.name for w in await queries.list_workouts(USER_A)] == ["Mon", "Tue"]
    assert [w.name for w in await queries.list_workouts(USER_A, "2025-09-02")] == ["Tue"]
    assert await queries.list_workouts(USER_B) == []


async def test_workout_lookup_with_unparseable_id_is_none(gateway):
    created = await gateway.create(USER_A, name="Mon", date=dt.date(2025, 9, 1))
    queries = WorkoutQueries(gateway)

    assert (await queries.workout(USER_A, str(created.id))).id == created.id
    assert await queries.workout(USER_A, "abc") is None
    assert await queries.workout_detail(USER_A, "-5") is None
    assert await queries.workout_detail(USER_B, created.id) is None
