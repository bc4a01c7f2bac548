from prometheus_client import Counter

WORKOUTS_CREATED_TOTAL = Counter(
    "workouts_created_total",
    "Number of workouts created in workout-log-service",
)

WORKOUTS_UPDATED_TOTAL = Counter(
    "workouts_updated_total",
    "Number of workouts updated in workout-log-service",
)

WORKOUTS_DELETED_TOTAL = Counter(
    "workouts_deleted_total",
    "Number of workouts deleted in workout-log-service",
)

WORKOUT_CHILDREN_CREATED_TOTAL = Counter(
    "workout_children_created_total",
    "Number of exercises and sets attached to workouts",
    ["kind"],  # exercise | set
)

WORKOUT_NOT_FOUND_TOTAL = Counter(
    "workout_not_found_total",
    "Owner-scoped lookups or writes that matched no row",
    ["operation"],
)

WORKOUT_PERSISTENCE_FAILURES_TOTAL = Counter(
    "workout_persistence_failures_total",
    "Store-level failures surfaced by the workout gateway",
    ["operation"],
)

WORKOUT_VIEWS_INVALIDATED_TOTAL = Counter(
    "workout_views_invalidated_total",
    "Number of view invalidation notifications sent after mutations",
)
