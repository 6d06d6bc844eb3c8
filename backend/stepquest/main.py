"""
FastAPI application entry point.

    uvicorn stepquest.main:app
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stepquest import __version__
from stepquest.core.config import get_settings
from stepquest.core.database import init_db
from stepquest.infrastructure.pedometer.router import router as pedometer_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("stepquest started database=%s", get_settings().database_url)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="StepQuest", version=__version__, lifespan=lifespan)
    app.include_router(pedometer_router, prefix="/pedometer", tags=["pedometer"])

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


app = create_app()
