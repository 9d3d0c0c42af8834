"""FastAPI application factory"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.core.config import get_settings
from api.core.database import get_database_manager, init_database_manager
from api.core.logging import setup_logging
from api.routers import birthdays_router, cron_router

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

_start_time: float = 0.0
_db_retry_task: asyncio.Task | None = None


async def _db_retry_loop(db_manager) -> None:
    """Keep retrying the DB connection after a failed startup."""
    delay = 5
    max_delay = 60
    while not db_manager.is_connected:
        await asyncio.sleep(delay)
        try:
            await db_manager.connect()
            logger.info("Database connected (background retry)")
            return
        except asyncio.CancelledError:
            return
        except Exception as e:
            delay = min(delay * 2, max_delay)
            logger.warning(f"DB background retry failed: {type(e).__name__}: {e}, next in {delay}s")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time, _db_retry_task
    _start_time = time.time()

    settings = get_settings()
    logger.info(f"Starting Birthday Buddy API ({settings.environment}, tz={settings.timezone})")

    # Requests get 503 from get_db_pool until the pool is up
    db_manager = init_database_manager(settings.database_url)
    try:
        await asyncio.wait_for(db_manager.connect(), timeout=30)
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"DB connection failed during startup: {type(e).__name__}: {e}")
        _db_retry_task = asyncio.create_task(_db_retry_loop(db_manager))

    yield

    logger.info("Shutting down Birthday Buddy API")
    if _db_retry_task:
        _db_retry_task.cancel()
    await db_manager.disconnect()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Birthday Buddy API",
        description="Birthday reminders, acknowledgment streaks and scheduled digests",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
    )

    app.include_router(birthdays_router.router)
    app.include_router(cron_router.router)

    @app.get("/health")
    async def health():
        """Liveness check (no DB dependency)"""
        return {"status": "healthy", "uptime_seconds": int(time.time() - _start_time)}

    @app.get("/status")
    async def status():
        """Readiness check including DB health"""
        db_ok = await get_database_manager().check_health()
        return {
            "service": "birthday-buddy-api",
            "version": APP_VERSION,
            "database": "connected" if db_ok else "unavailable",
        }

    return app
