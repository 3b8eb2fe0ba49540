from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agenda.api.routes import activity, auth, blackouts, dashboard, health, rooms, schedules, teachers
from agenda.core.config import Settings, get_settings
from agenda.core.exceptions import AppError
from agenda.core.logging import configure_logging
from agenda.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware, SecurityHeadersMiddleware
from agenda.db.bootstrap import ensure_runtime_schema_compatibility

# (router, path below the API prefix, tag)
ROUTERS = (
    (health.router, "", "health"),
    (auth.router, "/auth", "auth"),
    (teachers.router, "/teachers", "teachers"),
    (rooms.router, "/rooms", "rooms"),
    (schedules.router, "/schedules", "schedules"),
    (blackouts.router, "", "blackouts"),
    (dashboard.router, "", "dashboard"),
    (activity.router, "", "activity"),
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def render_app_error(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "details": exc.details})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(title=settings.project_name, lifespan=lifespan)
    application.state.settings = settings
    application.add_exception_handler(AppError, render_app_error)

    application.add_middleware(RequestTimingMiddleware)
    application.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
    application.add_middleware(SecurityHeadersMiddleware, settings=settings)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router, path, tag in ROUTERS:
        application.include_router(router, prefix=f"{settings.api_prefix}{path}", tags=[tag])
    return application


app = create_app()
