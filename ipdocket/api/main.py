"""FastAPI application entry point for the ipdocket operations API."""

from fastapi import FastAPI

from ipdocket import __version__
from ipdocket.api.middleware.logging_middleware import LoggingMiddleware
from ipdocket.api.routes.health import router as health_router
from ipdocket.api.routes.notification_runs import router as notification_runs_router

app = FastAPI(
    title="ipdocket Operations API",
    description="Urgent deadline and status change notification runs",
    version=__version__,
)

app.add_middleware(LoggingMiddleware)
app.include_router(health_router)
app.include_router(notification_runs_router)
