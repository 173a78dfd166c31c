"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storyforge import __version__
from storyforge.config import Settings, get_settings
from storyforge.database import Database
from storyforge.exceptions import AdoApiError, AdoNotConfiguredError, NotFoundError, ValidationError
from storyforge.logging_config import configure_logging
from storyforge.routers import ado, feature_visibility, innovation, roadmap, settings, stagegate
from storyforge.schemas import ErrorResponse
from storyforge.services.cache_refresher import CacheRefresher

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Settings = app.state.settings
    configure_logging(config)
    database = Database(config.database_url)
    await database.init()
    app.state.db = database

    refresher = CacheRefresher(database, config)
    if config.cache_refresh_enabled:
        refresher.start()
    logger.info("StoryForge API started (env=%s)", config.app_env)
    yield
    await refresher.stop()
    await database.close()
    logger.info("StoryForge API stopped")


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc), field=exc.field)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else None
        message = first.get("msg", "Invalid request")
        if field:
            message = f"{field}: {message}"
        return _error(400, message, field=field)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(AdoNotConfiguredError)
    async def ado_not_configured_handler(request: Request, exc: AdoNotConfiguredError):
        return _error(400, str(exc))

    @app.exception_handler(AdoApiError)
    async def ado_api_error_handler(request: Request, exc: AdoApiError):
        logger.error("ADO request failed on %s %s: %s", request.method, request.url.path, exc)
        return _error(502, str(exc), status=exc.status)


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or get_settings()
    app = FastAPI(
        title="StoryForge",
        description="Roadmap, stage-gate, backlog and innovation funnel over Azure DevOps",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(settings.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(ado.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(stagegate.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(roadmap.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(feature_visibility.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(innovation.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)

    @app.get(f"{API_PREFIX}/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
