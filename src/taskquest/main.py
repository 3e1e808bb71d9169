"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from taskquest.auth.router import router as auth_router
from taskquest.config import get_settings
from taskquest.database import close_db, create_all, get_session, init_db
from taskquest.gamification.router import router as gamification_router
from taskquest.gamification.seed import seed_achievements
from taskquest.health.router import router as health_router
from taskquest.middleware import setup_middleware
from taskquest.redis_client import close_redis, init_redis
from taskquest.tags.router import categories_router, labels_router
from taskquest.tasks.router import router as tasks_router
from taskquest.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.database_url.startswith("sqlite"):
        await create_all()
    if settings.redis_url:
        await init_redis(settings.redis_url)

    # Achievement catalog (idempotent upsert by slug)
    try:
        async for db in get_session():
            await seed_achievements(db)
            break
    except SQLAlchemyError:
        logger.warning("Achievement seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TaskQuest API",
        description="Gamified task tracking: complete tasks, earn XP, level up, unlock achievements",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(tasks_router)
    app.include_router(categories_router)
    app.include_router(labels_router)
    app.include_router(gamification_router)

    return app


app = create_app()
