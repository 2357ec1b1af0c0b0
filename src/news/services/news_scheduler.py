"""
News Scheduler
Fires NewsCronService.run_cycle every N minutes, first run shortly after startup
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .news_cron_service import NewsCronService
from ...config import Settings

logger = logging.getLogger(__name__)

CYCLE_JOB_ID = "news_cycle"


class NewsScheduler:
    """Owns the APScheduler instance for the news pipeline"""

    def __init__(self, cron_service: NewsCronService, settings: Settings):
        self.cron_service = cron_service
        self.interval_minutes = settings.scrape_interval_minutes
        self.startup_delay_seconds = settings.startup_delay_seconds
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.is_running:
            logger.warning("News scheduler already running")
            return

        self._scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,  # Collapse missed runs into one
                "max_instances": 1,  # A slow cycle delays the next one instead of overlapping it
                "misfire_grace_time": 300,
            },
        )
        first_run = datetime.now(timezone.utc) + timedelta(seconds=self.startup_delay_seconds)
        self._scheduler.add_job(
            self.cron_service.run_cycle,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=CYCLE_JOB_ID,
            name="Scrape and summarize news",
            next_run_time=first_run,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            f"⏰ News scheduler started: every {self.interval_minutes} min, "
            f"first run in {self.startup_delay_seconds}s"
        )

    def shutdown(self) -> None:
        if not self.is_running:
            return
        # An in-flight cycle finishes on its own thread
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("News scheduler shutdown complete")

    def next_run_time(self) -> Optional[datetime]:
        if not self.is_running:
            return None
        job = self._scheduler.get_job(CYCLE_JOB_ID)
        return job.next_run_time if job else None

    def get_status(self) -> Dict[str, Any]:
        next_run = self.next_run_time()
        return {
            "running": self.is_running,
            "interval_minutes": self.interval_minutes,
            "next_run_time": next_run.isoformat() if next_run else None,
        }
