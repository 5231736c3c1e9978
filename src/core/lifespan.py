import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from model.database import create_db_and_tables


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === 시작 ===
    settings = app.state.settings
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION}")

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    os.makedirs(settings.PROCESSED_DIR, exist_ok=True)
    logger.info(f"Upload dir: {settings.UPLOAD_DIR}, processed dir: {settings.PROCESSED_DIR}")

    create_db_and_tables(app.state.engine)
    logger.info(f"Database ready ({settings.DATABASE_URL})")

    yield

    # === 종료 ===
    app.state.engine.dispose()
    logger.info("Shutting down")
