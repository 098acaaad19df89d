"""Periodic background ingestion on the app's event loop."""

import asyncio
import contextlib
import logging

from prism.config import Settings
from prism.services.ingestion.orchestrator import run_ingestion
from prism.services.store import NewsStore

logger = logging.getLogger(__name__)

# Give the server a moment to finish starting before the first fetch
INITIAL_DELAY = 5.0


class IngestionScheduler:
    """Runs ``run_ingestion`` every ``settings.ingest_interval_minutes``.

    Ingestion writes go through the same repository entry points as user
    actions, so no extra coordination is needed.
    """

    def __init__(
        self,
        store: NewsStore,
        settings: Settings,
        initial_delay: float = INITIAL_DELAY,
    ) -> None:
        self._store = store
        self._settings = settings
        self._interval = max(1, settings.ingest_interval_minutes) * 60.0
        self._initial_delay = initial_delay
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info(
            "Starting ingestion scheduler (every %d minutes)",
            self._settings.ingest_interval_minutes,
        )
        self._task = asyncio.create_task(self._run(), name="prism-ingestion")

    async def stop(self) -> None:
        if self._task is None:
            return
        logger.info("Stopping ingestion scheduler")
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        await asyncio.sleep(self._initial_delay)
        while True:
            try:
                await run_ingestion(self._store, self._settings)
            except Exception:
                logger.exception("Scheduled ingestion failed")
            await asyncio.sleep(self._interval)
