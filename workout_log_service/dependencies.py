from functools import lru_cache

from fastapi import Depends, Request
from sentry_sdk import set_tag, set_user
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.contextvars import bind_contextvars

from .config import get_settings
from .database import get_db, get_session_factory
from .exceptions import UnauthorizedException
from .identity import IdentityOracle, build_identity_oracle
from .repositories import ExerciseLibraryRepository, WorkoutGateway
from .services.view_invalidation import ViewInvalidator
from .services.workout_actions import WorkoutActions
from .services.workout_queries import WorkoutQueries


@lru_cache()
def get_identity_oracle() -> IdentityOracle:
    return build_identity_oracle(get_settings())


@lru_cache()
def get_view_invalidator() -> ViewInvalidator:
    return ViewInvalidator()


def get_workout_gateway() -> WorkoutGateway:
    return WorkoutGateway(get_session_factory())


def get_workout_actions(
    gateway: WorkoutGateway = Depends(get_workout_gateway),
    invalidator: ViewInvalidator = Depends(get_view_invalidator),
) -> WorkoutActions:
    return WorkoutActions(gateway, invalidator)


def get_workout_queries(gateway: WorkoutGateway = Depends(get_workout_gateway)) -> WorkoutQueries:
    return WorkoutQueries(gateway)


def get_exercise_library_repository(db: AsyncSession = Depends(get_db)) -> ExerciseLibraryRepository:
    return ExerciseLibraryRepository(db)


async def get_optional_user_id(
    request: Request,
    oracle: IdentityOracle = Depends(get_identity_oracle),
) -> str | None:
    """Caller identity, or ``None`` when the identity provider does not recognise the request."""
    user_id = await oracle.resolve(request)
    if user_id:
        set_user({"id": user_id})
        set_tag("service", get_settings().SERVICE_NAME)
        bind_contextvars(user_id=user_id)
    return user_id


async def get_current_user_id(user_id: str | None = Depends(get_optional_user_id)) -> str:
    if not user_id:
        raise UnauthorizedException()
    return user_id
