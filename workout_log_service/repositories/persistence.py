from contextlib import contextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import PersistenceError
from ..metrics import WORKOUT_PERSISTENCE_FAILURES_TOTAL

logger = structlog.get_logger(__name__)


@contextmanager
def persistence_guard(operation: str, **context):
    """Re-raise store failures inside the block as :class:`PersistenceError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        WORKOUT_PERSISTENCE_FAILURES_TOTAL.labels(operation=operation).inc()
        logger.error(
            "persistence_failure",
            operation=operation,
            error=str(exc),
            exc_info=True,
            **context,
        )
        raise PersistenceError(operation) from exc
