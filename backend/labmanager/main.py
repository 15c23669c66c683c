import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from labmanager.config import get_settings
from labmanager.database import engine, Base, async_session
from labmanager.exceptions import (
    LabManagerError,
    ValidationError,
    DuplicateKeyError,
    NotFoundError,
    DependencyExistsError,
    RoomConflictError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    StoreError,
)
from labmanager.logging_config import configure_logging
from labmanager.routers import users, lab_rooms, courses, schedule, dashboard, permissions
from labmanager.routers import auth as auth_router
import labmanager.models  # noqa: F401  registers tables on Base.metadata

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 422,
    DuplicateKeyError: 409,
    NotFoundError: 404,
    DependencyExistsError: 409,
    RoomConflictError: 409,
    InvalidStatusTransitionError: 409,
    PermissionDeniedError: 403,
    StoreError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    # Startup: create tables, then optionally seed demo data
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.seed_demo_data:
        from labmanager.seed import seed_demo_data
        async with async_session() as session:
            await seed_demo_data(session)
    logger.info("Lab manager API ready")
    yield
    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Lab Manager",
        description="Users, lab rooms, courses and practicum schedules for a teaching laboratory",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LabManagerError)
    async def labmanager_error_handler(request: Request, exc: LabManagerError):
        status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "error": exc.error_kind, **exc.details},
        )

    app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(lab_rooms.router, prefix="/api/lab-rooms", tags=["Lab Rooms"])
    app.include_router(courses.router, prefix="/api/courses", tags=["Courses"])
    app.include_router(schedule.router, prefix="/api/schedule-entries", tags=["Schedule"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
    app.include_router(permissions.router, prefix="/api/permissions", tags=["Permissions"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "lab-manager"}

    return app


app = create_app()
