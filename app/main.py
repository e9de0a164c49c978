# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import attachments, directory, health, logs, notifications, projects
from app.core.config import get_settings
from app.core.errors import SiteLogError
from app.core.logging import configure_logging
from app.db.session import init_db_for_startup
from app.services.notification_emitter import get_notification_emitter

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for the SiteLog service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Daily work logs for construction sites: team leaders record what was\n"
            "done on each project every day, managers approve the logs, and any\n"
            "log can be exported as a PDF report."
        ),
        version="0.1.0",
    )

    # Routers
    app.include_router(health.router)
    app.include_router(logs.router)
    app.include_router(attachments.router)
    app.include_router(notifications.router)
    app.include_router(projects.router)
    app.include_router(directory.router)

    @app.exception_handler(SiteLogError)
    async def handle_sitelog_error(request: Request, exc: SiteLogError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db_for_startup()
        logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:  # pragma: no cover
        await get_notification_emitter().drain()

    return app


app = create_app()
