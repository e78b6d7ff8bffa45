from __future__ import annotations

import asyncio
import logging

from booking_app.application.use_cases.expire_unpaid import ExpireUnpaidAppointmentsUseCase

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Background loop that runs the unpaid-appointment expiry on a fixed interval."""

    def __init__(self, use_case: ExpireUnpaidAppointmentsUseCase, interval_seconds: float = 3600.0) -> None:
        self._use_case = use_case
        self._interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            logger.info("Expiry sweeper already running")
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="expiry-sweeper")

    async def stop(self) -> None:
        if not self._task:
            return
        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=30)
        except asyncio.TimeoutError:
            logger.warning("Expiry sweeper did not stop within timeout")
            self._task.cancel()
        self._task = None

    async def run_once(self) -> int:
        # store adapters block on file IO and locks
        return await asyncio.to_thread(self._use_case.execute)

    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception as e:  # noqa: BLE001
                logger.exception("Expiry sweep failed", extra={"error": str(e)})

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_seconds)
            except asyncio.TimeoutError:
                continue
