# perftrack/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.errors import register_exception_handlers
from perftrack.middleware.request_context import RequestContextMiddleware
from perftrack.middleware.security_headers import SecurityHeadersMiddleware
from perftrack.routes import (
    admin,
    assessments,
    athlete_stats,
    athletes,
    auth,
    coaches,
    forceplates,
    goals,
    intended,
    reports,
    sessions,
    tags,
    teams,
    uploads,
)
from perftrack.settings import Settings, get_settings
from perftrack.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    docs: Optional[DocumentStore] = None,
    metrics: Optional[MetricsStore] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="perftrack")
    app.state.settings = settings
    app.state.docs = docs or DocumentStore(settings.mongo_uri, settings.mongo_db)
    app.state.metrics = metrics or MetricsStore(settings.database_url, settings.sql_pool_size)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    # Routers
    app.include_router(auth.router)
    app.include_router(athletes.router)
    app.include_router(athlete_stats.router)
    app.include_router(reports.router)
    app.include_router(forceplates.router)
    app.include_router(uploads.router)
    app.include_router(goals.router)
    app.include_router(coaches.router)
    app.include_router(teams.router)
    app.include_router(tags.router)
    app.include_router(assessments.router)
    app.include_router(sessions.router)
    app.include_router(intended.router)
    app.include_router(admin.router)

    @app.on_event("startup")
    def _startup():
        app.state.docs.connect()
        app.state.docs.ensure_indexes()
        app.state.metrics.create_all()
        logger.info("perftrack started mongo_db=%s", settings.mongo_db)

    @app.on_event("shutdown")
    def _shutdown():
        app.state.docs.close()
        app.state.metrics.dispose()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
