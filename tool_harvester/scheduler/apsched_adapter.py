"""APScheduler wrapper turning source cron expressions into jobs."""

from __future__ import annotations

from typing import Callable

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import ScrapingSource


class APSchedulerAdapter:
    """Manage APScheduler jobs for configured sources."""

    def __init__(self, timezone: str = "UTC") -> None:
        self.timezone = timezone
        self.scheduler = BackgroundScheduler(timezone=timezone)
        self.logger = structlog.get_logger("tool_harvester.scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_source(
        self, source: ScrapingSource, callback: Callable[[ScrapingSource], None]
    ) -> None:
        trigger = self._build_trigger(source)
        job_id = f"source::{source.id}"
        self.scheduler.add_job(
            callback, trigger=trigger, id=job_id, args=[source], replace_existing=True
        )
        self.logger.info("job_scheduled", source=source.id, schedule=source.schedule)

    def remove_source(self, source_id: str) -> None:
        job_id = f"source::{source_id}"
        try:
            self.scheduler.remove_job(job_id)
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", source=source_id)

    def _build_trigger(self, source: ScrapingSource) -> CronTrigger:
        if not source.schedule:
            raise ValueError(f"Source {source.id} has no schedule")
        return CronTrigger.from_crontab(source.schedule, timezone=self.timezone)

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter"]
