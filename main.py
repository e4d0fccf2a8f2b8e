"""
Task tracker — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.middleware import register_middleware
from api.tasks import router as tasks_router
from config.settings import config
from utils.errors import register_error_handlers

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Task Tracker",
        version="1.0.0",
        description="Multi-user task tracking backed by a per-user document store.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_error_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        missing = config.missing_store_config() + config.missing_auth_config()
        if missing:
            logger.warning("Missing configuration: %s — affected routes will return 500", ", ".join(missing))
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        client = getattr(app.state, "couch", None)
        if client is not None:
            await client.aclose()
            app.state.couch = None

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
