import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse

from .app_factory import create_service_app, parse_cors_origins
from .config import get_settings
from .database import dispose_engine
from .exceptions import NotFoundException, PersistenceError
from .logging_config import configure_logging
from .routers.dashboard import router as dashboard_router
from .routers.exercise_library import router as exercise_library_router
from .routers.workouts import router as workouts_router

configure_logging()
logger = structlog.get_logger(__name__)

settings = get_settings()

app = create_service_app(
    title="workout-log-service",
    version="0.1.0",
    description="Per-user workout log: workouts, their exercises and sets",
    enable_metrics=settings.ENABLE_METRICS,
    cors_allow_origins=parse_cors_origins(settings.CORS_ORIGINS),
)


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request, exc: NotFoundException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request, exc: PersistenceError):
    logger.error("request_persistence_failure", path=request.url.path, operation=exc.operation)
    return JSONResponse(
        status_code=500,
        content={"detail": "Failed to load workout data"},
    )


api_router = APIRouter()


@api_router.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health")
async def root_health():
    return {"status": "ok"}


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse("/dashboard")


@app.on_event("shutdown")
async def shutdown_event():
    await dispose_engine()


api_router.include_router(workouts_router, tags=["Workouts"])
api_router.include_router(exercise_library_router, tags=["Exercise Library"])
app.include_router(api_router, prefix="/api/v1")
app.include_router(dashboard_router, include_in_schema=False)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
