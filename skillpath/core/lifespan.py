import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from skillpath.analytics.db import init_db, purge_old_records
from skillpath.core.config.scoring import get_scoring_config
from skillpath.core.profile_store import close_profile_store

logger = logging.getLogger(__name__)

_PURGE_INTERVAL_S = 6 * 3600


async def _retention_loop(stop: asyncio.Event) -> None:
    while True:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=_PURGE_INTERVAL_S)
        if stop.is_set():
            return
        try:
            deleted = purge_old_records()
        except Exception as exc:  # pragma: no cover - retention must not stop the app
            logger.warning("analytics_retention_purge_failed: %s", exc)
            continue
        if any(deleted.values()):
            logger.info("analytics_retention_purge deleted=%s", deleted)


@asynccontextmanager
async def lifespan(app):
    # Fail at startup, not on the first request, if the scoring policy is broken.
    get_scoring_config()
    init_db()
    purge_old_records()

    stop = asyncio.Event()
    task = asyncio.create_task(_retention_loop(stop))
    try:
        yield
    finally:
        stop.set()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        close_profile_store()
