"""FastAPI application factory. Run with ``uvicorn azhari_platform.main:app``."""

from fastapi import FastAPI

from azhari_platform.api.routes import (
    ai_chat,
    auth,
    content,
    health,
    jobs,
    notifications,
    subjects,
    subscriptions,
    teachers,
)
from azhari_platform.platform.errors import register_error_handlers


def create_app() -> FastAPI:
    app = FastAPI(title="Azhari Platform API", version="0.1.0")
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(subjects.router)
    app.include_router(content.router)
    app.include_router(teachers.router)
    app.include_router(notifications.router)
    app.include_router(subscriptions.router)
    app.include_router(jobs.router)
    app.include_router(ai_chat.router)
    return app


app = create_app()
