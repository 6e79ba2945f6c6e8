"""
Standalone FastAPI app wiring for SayAPI.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

import saypi.config as config
from saypi.db import init_db
from saypi.services.builtins import default_catalog
from saypi.services.cowsay import Renderer
from saypi.services.repository import Repository
from app.errors import configure_error_handlers
from app.middleware import configure_middleware
from app.routes.animals import router as animals_router
from app.routes.conversations import router as conversations_router
from app.routes.health import router as health_router
from app.routes.moods import router as moods_router
from app.routes.root import router as root_router
from app.routes.users import router as users_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    database = None
    if app.state.repository is None:
        database = init_db()
        app.state.repository = Repository(
            database,
            default_catalog(),
            max_id_attempts=config.PUBLIC_ID_MAX_ATTEMPTS,
        )
    if app.state.user_secret is None:
        app.state.user_secret = config.USER_SECRET
    try:
        yield
    finally:
        if database is not None:
            database.dispose()


def create_app(
    repository: Optional[Repository] = None,
    renderer: Optional[Renderer] = None,
    user_secret: Optional[bytes] = None,
) -> FastAPI:
    """Build the app. Collaborators left as None are created at startup."""
    app = FastAPI(title="SayAPI", redirect_slashes=False, lifespan=lifespan)
    app.state.repository = repository
    app.state.renderer = renderer if renderer is not None else Renderer()
    app.state.user_secret = user_secret

    configure_middleware(app)
    configure_error_handlers(app)

    app.include_router(users_router)
    app.include_router(animals_router)
    app.include_router(moods_router)
    app.include_router(conversations_router)

    # Health and root endpoints
    app.include_router(health_router)
    app.include_router(root_router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=config.HTTP_HOST, port=config.HTTP_PORT)
