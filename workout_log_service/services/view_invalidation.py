from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

import structlog

from ..metrics import WORKOUT_VIEWS_INVALIDATED_TOTAL

logger = structlog.get_logger(__name__)

InvalidationListener = Callable[[str, tuple[str, ...]], Awaitable[None]]

DASHBOARD_PATH = "/dashboard"


def workout_view_paths(workout_id: int | None = None) -> tuple[str, ...]:
    if workout_id is None:
        return (DASHBOARD_PATH,)
    return (
        DASHBOARD_PATH,
        f"{DASHBOARD_PATH}/workout/{workout_id}",
        f"{DASHBOARD_PATH}/workout/{workout_id}/details",
    )


class ViewInvalidator:
    """Tells downstream renderers/caches which of a user's views are stale after a write.

    The service keeps no cache of its own; listeners are whatever sits in
    front of it (edge cache purge, websocket push, ...).
    """

    def __init__(self, listeners: Iterable[InvalidationListener] = ()):
        self._listeners: list[InvalidationListener] = list(listeners)

    def subscribe(self, listener: InvalidationListener) -> None:
        self._listeners.append(listener)

    async def invalidate(self, user_id: str, paths: Iterable[str]) -> None:
        paths = tuple(paths)
        WORKOUT_VIEWS_INVALIDATED_TOTAL.inc()
        logger.debug("workout_views_invalidated", user_id=user_id, paths=list(paths))
        for listener in self._listeners:
            try:
                await listener(user_id, paths)
            except Exception:
                # Write has committed; listener failures are only logged
                logger.warning("workout_view_listener_failed", user_id=user_id, paths=list(paths), exc_info=True)
