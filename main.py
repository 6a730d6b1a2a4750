import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kost_console.config import get_settings
from kost_console.infrastructure.database import engine, initialize_database
from kost_console.infrastructure.notifications import notification_manager
from kost_console.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare tables on startup; close live streams and the pool on shutdown."""

    initialize_database()
    yield
    await notification_manager.close_all()
    engine.dispose()
    logger.info("Kost console API stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Kost Console API", lifespan=lifespan)

    # The admin dashboard runs on its own dev server origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
