#Description: Asyncio scheduler running the TP/SL monitor on a fixed interval.
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from utils.logging import logger
from utils.config import settings
from services.monitor import MonitorService

class SignalScheduler:
    JOB_ID = "monitor_job"

    def __init__(self, monitor: MonitorService, interval_seconds: int | None = None):
        self.monitor = monitor
        self.interval_seconds = interval_seconds or settings.MONITOR_INTERVAL_SECONDS
        self._scheduler: AsyncIOScheduler | None = None

    async def monitor_job(self):
        try:
            report = await self.monitor.tick()
            if report.closed or report.repaired or report.failed:
                logger.info(f"Monitor tick @ {report.price}: closed={report.closed} "
                            f"repaired={report.repaired} failed={report.failed}")
        except Exception as e:
            logger.exception(f"Monitor job failed: {e}")

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    def start(self) -> AsyncIOScheduler:
        """Must be called from inside a running event loop."""
        if self._scheduler:
            return self._scheduler
        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.monitor_job, "interval", seconds=self.interval_seconds, id=self.JOB_ID,
            max_instances=1, coalesce=True, next_run_time=datetime.now(timezone.utc),
        )
        self._scheduler.start()
        logger.info(f"Scheduler started; monitor every {self.interval_seconds}s.")
        return self._scheduler

    def shutdown(self):
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped.")
