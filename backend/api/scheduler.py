"""
Background jobs.

Postgres has no TTL index, so expired refresh tokens are purged by a
periodic sweep. The scheduler is started and stopped by the app lifespan.
"""

import logging
from functools import wraps
from typing import Any, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from shared.config import Settings

from .dependencies import get_container

logger = logging.getLogger(__name__)

TOKEN_CLEANUP_JOB_ID = "cleanup_expired_refresh_tokens"


def with_error_logging(context: str):
    """Decorator to log failures of scheduled jobs before re-raising."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception:
                logger.exception(f"Scheduled job failed ({context})")
                raise

        return wrapper

    return decorator


@with_error_logging("refresh_token_cleanup")
async def cleanup_expired_refresh_tokens() -> int:
    return await get_container().tokens.cleanup_expired_tokens()


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """Build the scheduler with the refresh token sweep registered."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        cleanup_expired_refresh_tokens,
        "interval",
        minutes=settings.token_cleanup_interval_minutes,
        id=TOKEN_CLEANUP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
